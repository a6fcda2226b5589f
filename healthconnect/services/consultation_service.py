from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from healthconnect.core import consultation_status
from healthconnect.core.config import settings
from healthconnect.core.enums import ConsultationAction, ConsultationStatus, UserRole
from healthconnect.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from healthconnect.core.logger import logger
from healthconnect.core.utils import to_utc, utc_now
from healthconnect.db.models import Consultation, HealthcareProvider, User
from healthconnect.schemas.consultation import (
    AssignProviderRequest,
    ConfirmConsultationRequest,
    ConsultationChanges,
    ConsultationCreate,
)
from healthconnect.schemas.user import Identity
from healthconnect.services.notification_service import NotificationDispatcher

# Request field -> action that must be permitted to change it
FIELD_ACTIONS = (
    ("notes", ConsultationAction.UPDATE_NOTES),
    ("duration_minutes", ConsultationAction.UPDATE_DURATION),
    ("scheduled_at", ConsultationAction.RESCHEDULE),
)


class ConsultationService:
    """
    Runs the consultation lifecycle: booking, provider assignment, patient
    confirmation and the doctor/admin updates that follow.

    Every write is conditional on the ``version`` read at lookup time, so two
    requests racing on the same consultation cannot both succeed. Notifications
    go out after the write commits and never affect the outcome.
    """

    def __init__(self, session: AsyncSession, notifier: NotificationDispatcher):
        self.session = session
        self.notifier = notifier

    # Lookups

    async def get_consultation_or_404(self, consultation_id: UUID) -> Consultation:
        consultation = await self.session.get(Consultation, consultation_id)
        if not consultation:
            raise NotFoundError("Consultation not found")
        return consultation

    async def get_available_provider(self, provider_id: UUID) -> HealthcareProvider:
        provider = await self.session.get(HealthcareProvider, provider_id)
        if not provider:
            raise NotFoundError("Healthcare provider not found")
        if not provider.is_available:
            raise ValidationError("Healthcare provider is not available")
        return provider

    async def get_doctor_provider(self, user_id: UUID) -> HealthcareProvider:
        stmt = select(HealthcareProvider).where(HealthcareProvider.user_id == user_id)
        result = await self.session.execute(stmt)
        # One profile per doctor; a duplicate raises MultipleResultsFound
        provider = result.scalars().one_or_none()
        if not provider:
            raise NotFoundError("Doctor profile not found")
        return provider

    async def get_provider_consultation(self, consultation_id: UUID, provider_id: UUID) -> Consultation:
        # Someone else's consultation looks exactly like a missing one
        stmt = select(Consultation).where(
            Consultation.id == consultation_id,
            Consultation.provider_id == provider_id
        )
        result = await self.session.execute(stmt)
        consultation = result.scalars().first()
        if not consultation:
            raise NotFoundError("Consultation not found or access denied")
        return consultation

    async def get_visible_consultation(self, identity: Identity, consultation_id: UUID) -> Consultation:
        if identity.role == UserRole.DOCTOR:
            provider = await self.get_doctor_provider(identity.user_id)
            return await self.get_provider_consultation(consultation_id, provider.id)

        consultation = await self.get_consultation_or_404(consultation_id)
        if identity.role == UserRole.PATIENT and consultation.patient_id != identity.user_id:
            raise AuthorizationError("Forbidden")
        return consultation

    def price_for(self, consultation_type: str) -> int:
        try:
            return settings.CONSULTATION_PRICES[consultation_type]
        except KeyError:
            raise ValidationError(f"No price configured for consultation type {consultation_type}")

    # Validation helpers

    def check_transition(self, consultation: Consultation, target: ConsultationStatus, role: UserRole) -> bool:
        """
        Raise if ``role`` may not move ``consultation`` to ``target``.

        Returns False for a self transition, which is a no-op and is never
        handed to the validator.
        """
        if consultation.status == target:
            return False

        validation = consultation_status.validate_status_transition(consultation.status, target, role)
        if not validation.is_valid:
            raise ValidationError(
                "Invalid status transition",
                message=validation.error,
                current_status=consultation.status,
                target_status=ConsultationStatus(target).value,
            )
        return True

    def check_permission(self, consultation: Consultation, role: UserRole, action: ConsultationAction):
        permission = consultation_status.validate_role_permission(consultation.status, role, action)
        if not permission.can_perform:
            raise AuthorizationError(permission.error, current_status=consultation.status)

    # Persistence

    async def apply_changes(self, consultation: Consultation, values: Dict[str, Any]) -> Consultation:
        seen_version = consultation.version
        values = {**values, "version": seen_version + 1, "updated_at": utc_now()}
        stmt = (
            update(Consultation)
            .where(Consultation.id == consultation.id, Consultation.version == seen_version)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(stmt)
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error(f"Failed to update consultation {consultation.id}: {exc}")
            raise StorageError("Failed to update consultation")

        if result.rowcount == 0:
            logger.warning(f"Stale write rejected for consultation {consultation.id} at version {seen_version}")
            raise ConflictError(
                message="The consultation changed since it was read. Reload it and try again.",
                current_status=consultation.status,
            )

        await self.session.refresh(consultation)
        return consultation

    async def notify(self, description: str, send, consultation_id: UUID, recipient_id: Optional[UUID]):
        if recipient_id is None:
            return
        try:
            await send(consultation_id, recipient_id)
        except Exception:
            logger.exception(f"Error sending {description} notification for consultation {consultation_id}")

    # Workflow

    async def create_consultation(self, identity: Identity, data: ConsultationCreate) -> Consultation:
        if identity.role == UserRole.DOCTOR:
            raise AuthorizationError("Doctors cannot request consultations")

        if identity.role == UserRole.ADMIN:
            if not data.patient_id:
                raise ValidationError("patient_id is required when booking on behalf of a patient")
            patient = await self.session.get(User, data.patient_id)
            if not patient or patient.role != UserRole.PATIENT:
                raise NotFoundError("Patient not found")
            patient_id = patient.id
        else:
            if data.patient_id and data.patient_id != identity.user_id:
                raise AuthorizationError("Patients can only request consultations for themselves")
            patient_id = identity.user_id

        consultation = Consultation(
            patient_id=patient_id,
            consultation_type=data.consultation_type.value,
            consultation_category=data.consultation_category.value,
            status=ConsultationStatus.PENDING_ADMIN_REVIEW.value,
            preferred_date=to_utc(data.preferred_date),
            preferred_time_range=data.preferred_time_range,
            reason_for_consultation=data.reason_for_consultation,
            cost_leone=self.price_for(data.consultation_type.value),
        )
        try:
            self.session.add(consultation)
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error(f"Failed to create consultation for patient {patient_id}: {exc}")
            raise StorageError("Failed to create consultation")
        await self.session.refresh(consultation)

        logger.info(f"Consultation {consultation.id} requested for patient {patient_id}")
        return consultation

    async def assign_provider(
        self, identity: Identity, consultation_id: UUID, data: AssignProviderRequest
    ) -> Consultation:
        if identity.role != UserRole.ADMIN:
            raise AuthorizationError("Forbidden: Insufficient permissions")

        consultation = await self.get_consultation_or_404(consultation_id)
        self.check_transition(consultation, ConsultationStatus.ASSIGNED, identity.role)

        if consultation.status != ConsultationStatus.PENDING_ADMIN_REVIEW:
            raise ValidationError(
                f"Consultation is in {consultation.status} status and cannot be assigned",
                message="Only consultations in 'pending_admin_review' status can be assigned a provider",
                current_status=consultation.status,
                target_status=ConsultationStatus.ASSIGNED.value,
            )

        provider = await self.get_available_provider(data.provider_id)

        values = {
            "provider_id": provider.id,
            "status": ConsultationStatus.ASSIGNED.value,
            "cost_leone": data.cost_leone or self.price_for(consultation.consultation_type),
        }
        scheduled_at = to_utc(data.scheduled_at) or consultation.preferred_date
        if scheduled_at:
            values["scheduled_at"] = scheduled_at

        consultation = await self.apply_changes(consultation, values)
        logger.info(f"Assigned provider {provider.id} to consultation {consultation.id}")

        await self.notify(
            "assignment", self.notifier.notify_patient_assignment, consultation.id, consultation.patient_id
        )
        return consultation

    async def confirm_consultation(
        self, identity: Identity, consultation_id: UUID, data: ConfirmConsultationRequest
    ) -> Consultation:
        if identity.role != UserRole.PATIENT:
            raise AuthorizationError("Only patients can confirm consultations")

        consultation = await self.get_consultation_or_404(consultation_id)
        if consultation.patient_id != identity.user_id:
            raise AuthorizationError("Forbidden")

        target = ConsultationStatus.CONFIRMED if data.confirmed else ConsultationStatus(consultation.status)
        self.check_transition(consultation, target, identity.role)

        # Switching provider without confirming is only possible before confirmation too
        if consultation.status != ConsultationStatus.ASSIGNED:
            raise ValidationError(
                f"Consultation is in {consultation.status} status and cannot be confirmed",
                message="Only consultations in 'assigned' status can be confirmed or switched to another provider",
                current_status=consultation.status,
                target_status=target.value,
            )

        if data.provider_id != consultation.provider_id:
            await self.get_available_provider(data.provider_id)

        values = {"provider_id": data.provider_id, "status": target.value}
        if data.confirmed and consultation.scheduled_at is None and consultation.preferred_date:
            values["scheduled_at"] = consultation.preferred_date

        consultation = await self.apply_changes(consultation, values)
        logger.info(
            f"Patient {identity.user_id} {'confirmed' if data.confirmed else 'switched'} "
            f"consultation {consultation.id} with provider {consultation.provider_id}"
        )

        if data.confirmed:
            await self.notify(
                "provider booking", self.notifier.notify_provider_booking, consultation.id, consultation.provider_id
            )
            await self.notify(
                "patient acceptance", self.notifier.notify_patient_acceptance, consultation.id, consultation.patient_id
            )
        return consultation

    async def doctor_update(
        self, identity: Identity, consultation_id: UUID, changes: ConsultationChanges
    ) -> Consultation:
        if identity.role != UserRole.DOCTOR:
            raise AuthorizationError("Forbidden: Insufficient permissions")

        provider = await self.get_doctor_provider(identity.user_id)
        consultation = await self.get_provider_consultation(consultation_id, provider.id)
        return await self.update_fields(identity, consultation, changes)

    async def update_consultation(
        self, identity: Identity, consultation_id: UUID, changes: ConsultationChanges
    ) -> Consultation:
        if identity.role == UserRole.PATIENT:
            raise AuthorizationError("Patients cannot update consultations")

        consultation = await self.get_visible_consultation(identity, consultation_id)
        return await self.update_fields(identity, consultation, changes)

    async def update_fields(
        self, identity: Identity, consultation: Consultation, changes: ConsultationChanges
    ) -> Consultation:
        fields = changes.model_dump(exclude_unset=True)
        target = fields.pop("status", None)

        values: Dict[str, Any] = {}
        if target is not None and self.check_transition(consultation, ConsultationStatus(target), identity.role):
            values["status"] = ConsultationStatus(target).value

        for field, action in FIELD_ACTIONS:
            if field in fields:
                self.check_permission(consultation, identity.role, action)
                values[field] = fields[field]

        if "scheduled_at" in values:
            values["scheduled_at"] = to_utc(values["scheduled_at"])

        if not values:
            return consultation

        consultation = await self.apply_changes(consultation, values)
        logger.info(f"{identity.role.value} {identity.user_id} updated consultation {consultation.id}: {sorted(values)}")

        if values.get("status") == ConsultationStatus.SCHEDULED.value:
            await self.notify(
                "acceptance", self.notifier.notify_patient_acceptance, consultation.id, consultation.patient_id
            )
        return consultation

    async def cancel_consultation(self, identity: Identity, consultation_id: UUID) -> Consultation:
        if identity.role != UserRole.ADMIN:
            raise AuthorizationError("Forbidden: Insufficient permissions")

        consultation = await self.get_consultation_or_404(consultation_id)
        if consultation.status == ConsultationStatus.COMPLETED:
            raise ValidationError(
                "Cannot cancel a completed consultation",
                message="Completed consultations cannot be cancelled",
                current_status=consultation.status,
            )
        if consultation.status == ConsultationStatus.CANCELLED:
            raise ValidationError(
                "Consultation is already cancelled",
                message="This consultation is already cancelled",
                current_status=consultation.status,
            )

        self.check_transition(consultation, ConsultationStatus.CANCELLED, identity.role)
        consultation = await self.apply_changes(consultation, {"status": ConsultationStatus.CANCELLED.value})
        logger.info(f"Admin {identity.user_id} cancelled consultation {consultation.id}")
        return consultation

    async def allowed_transitions(
        self, identity: Identity, consultation_id: UUID
    ) -> Tuple[Consultation, List[ConsultationStatus]]:
        consultation = await self.get_visible_consultation(identity, consultation_id)
        return consultation, consultation_status.valid_next_statuses(consultation.status, identity.role)
