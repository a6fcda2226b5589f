from sqlalchemy import Column
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from uuid import UUID, uuid4

from healthconnect.core.utils import utc_now
from healthconnect.db.types import UTCDateTime

class HealthcareProvider(SQLModel, table=True):
    __tablename__ = "healthcare_providers"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    # Login identity of the doctor behind this provider profile
    user_id: Optional[UUID] = Field(default=None, foreign_key="users.id", index=True)
    full_name: str
    specialty: Optional[str] = None
    languages: Optional[str] = None
    is_available: bool = Field(default=True)
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(UTCDateTime(timezone=True), nullable=False)
    )
