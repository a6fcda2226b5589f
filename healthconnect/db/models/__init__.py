from sqlmodel import SQLModel
from .user import User
from .healthcare_provider import HealthcareProvider
from .consultation import Consultation

__all__ = [
    "SQLModel",
    "User",
    "HealthcareProvider",
    "Consultation",
]
