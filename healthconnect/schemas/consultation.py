from pydantic import BaseModel, Field, PositiveInt, field_validator
from uuid import UUID
from datetime import datetime
from typing import List, Literal, Optional

from healthconnect.core.enums import ConsultationCategory, ConsultationStatus, ConsultationType
from healthconnect.schemas.user import PatientSummary, ProviderSummary

def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value

class ConsultationCreate(BaseModel):
    consultation_type: ConsultationType
    consultation_category: ConsultationCategory = ConsultationCategory.GENERAL_INQUIRY
    preferred_date: datetime
    preferred_time_range: Optional[str] = None
    reason_for_consultation: Optional[str] = None
    # Only honoured when an admin books on behalf of a patient
    patient_id: Optional[UUID] = None

class AssignProviderRequest(BaseModel):
    provider_id: UUID
    scheduled_at: Optional[datetime] = None
    cost_leone: Optional[PositiveInt] = None

    @field_validator("scheduled_at", mode="before")
    @classmethod
    def empty_scheduled_at(cls, value):
        return _blank_to_none(value)

class ConfirmConsultationRequest(BaseModel):
    provider_id: UUID
    confirmed: bool

DoctorStatus = Literal["assigned", "confirmed", "scheduled", "in_progress", "completed", "cancelled"]
UpdateStatus = Literal["scheduled", "in_progress", "completed", "cancelled"]

class ConsultationChanges(BaseModel):
    notes: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    scheduled_at: Optional[datetime] = None

    # Fields may be left out, but null would erase the stored value
    @field_validator("notes", "duration_minutes", "scheduled_at")
    @classmethod
    def reject_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null; omit it to leave it unchanged")
        return value

class DoctorConsultationUpdate(ConsultationChanges):
    status: Optional[DoctorStatus] = None

class ConsultationUpdate(ConsultationChanges):
    status: Optional[UpdateStatus] = None

class ConsultationResponse(BaseModel):
    id: UUID
    patient_id: UUID
    provider_id: Optional[UUID]
    consultation_type: ConsultationType
    consultation_category: Optional[str] = None
    status: ConsultationStatus
    preferred_date: Optional[datetime] = None
    preferred_time_range: Optional[str] = None
    reason_for_consultation: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    cost_leone: Optional[int] = None
    notes: Optional[str] = None
    duration_minutes: Optional[int] = None
    version: int
    created_at: datetime
    updated_at: datetime
    patient: Optional[PatientSummary] = None
    provider: Optional[ProviderSummary] = None

    class Config:
        from_attributes = True

class ConsultationEnvelope(BaseModel):
    consultation: ConsultationResponse

class TransitionOptions(BaseModel):
    consultation_id: UUID
    current_status: ConsultationStatus
    allowed: List[ConsultationStatus]
