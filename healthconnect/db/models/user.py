from sqlalchemy import Column
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from uuid import UUID, uuid4

from healthconnect.core.utils import utc_now
from healthconnect.db.types import UTCDateTime

class User(SQLModel, table=True):
    __tablename__ = "users"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    role: str = Field(index=True) # Patient, Doctor, Admin
    full_name: str
    email: str = Field(unique=True, index=True)
    phone_number: Optional[str] = None
    password_hash: Optional[str] = None
    notification_preference: str = Field(default="sms") # sms, email, both
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(UTCDateTime(timezone=True), nullable=False)
    )
