from sqlalchemy import Column
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from uuid import UUID, uuid4

from healthconnect.core.utils import utc_now
from healthconnect.db.types import UTCDateTime

class Consultation(SQLModel, table=True):
    __tablename__ = "consultations"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    patient_id: UUID = Field(foreign_key="users.id", index=True)
    provider_id: Optional[UUID] = Field(default=None, foreign_key="healthcare_providers.id", index=True)
    consultation_type: str # video, voice, sms
    consultation_category: Optional[str] = None
    status: str = Field(default="pending_admin_review", index=True)
    preferred_date: Optional[datetime] = Field(default=None, sa_column=Column(UTCDateTime(timezone=True)))
    preferred_time_range: Optional[str] = None
    reason_for_consultation: Optional[str] = None
    scheduled_at: Optional[datetime] = Field(default=None, sa_column=Column(UTCDateTime(timezone=True)))
    cost_leone: Optional[int] = None
    notes: Optional[str] = None
    duration_minutes: Optional[int] = None
    # Bumped on every write; updates only apply against the version they read
    version: int = Field(default=0)
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(UTCDateTime(timezone=True), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(UTCDateTime(timezone=True), nullable=False)
    )
