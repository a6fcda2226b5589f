from pydantic import BaseModel
from typing import Optional
from uuid import UUID

from healthconnect.core.enums import UserRole

class Identity(BaseModel):
    """Who is calling, resolved once per request and passed to services."""
    user_id: UUID
    role: UserRole

class UserResponse(BaseModel):
    id: UUID
    role: UserRole
    full_name: str
    email: str
    phone_number: Optional[str] = None

    class Config:
        from_attributes = True

class PatientSummary(BaseModel):
    id: UUID
    full_name: str
    email: Optional[str] = None
    phone_number: Optional[str] = None

    class Config:
        from_attributes = True

class ProviderSummary(BaseModel):
    id: UUID
    full_name: str
    specialty: Optional[str] = None
    languages: Optional[str] = None

    class Config:
        from_attributes = True
