from enum import Enum


class UserRole(str, Enum):
    PATIENT = "Patient"
    DOCTOR = "Doctor"
    ADMIN = "Admin"


class ConsultationStatus(str, Enum):
    PENDING_ADMIN_REVIEW = "pending_admin_review"
    ASSIGNED = "assigned"
    CONFIRMED = "confirmed"
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (ConsultationStatus.COMPLETED, ConsultationStatus.CANCELLED)


class ConsultationAction(str, Enum):
    UPDATE_NOTES = "update_notes"
    UPDATE_DURATION = "update_duration"
    RESCHEDULE = "reschedule"


class ConsultationType(str, Enum):
    VIDEO = "video"
    VOICE = "voice"
    SMS = "sms"


class ConsultationCategory(str, Enum):
    MATERNAL_HEALTH = "maternal_health"
    REPRODUCTIVE_HEALTH = "reproductive_health"
    GENERAL_INQUIRY = "general_inquiry"
    CHILDCARE = "childcare"
    NUTRITION = "nutrition"
    OTHER = "other"


class NotificationPreference(str, Enum):
    SMS = "sms"
    EMAIL = "email"
    BOTH = "both"
