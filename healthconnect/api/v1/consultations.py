from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from healthconnect.api.deps import get_current_identity
from healthconnect.db.session import get_session
from healthconnect.db.models import Consultation, HealthcareProvider, User
from healthconnect.schemas.consultation import (
    AssignProviderRequest,
    ConfirmConsultationRequest,
    ConsultationCreate,
    ConsultationEnvelope,
    ConsultationResponse,
    ConsultationUpdate,
    TransitionOptions,
)
from healthconnect.schemas.user import Identity, PatientSummary, ProviderSummary
from healthconnect.services.consultation_service import ConsultationService
from healthconnect.services.notification_service import NotificationDispatcher, get_notifier

router = APIRouter()

async def get_consultation_service(
    session: AsyncSession = Depends(get_session),
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> ConsultationService:
    return ConsultationService(session, notifier)

async def construct_response(consultation: Consultation, service: ConsultationService) -> ConsultationEnvelope:
    response = ConsultationResponse.model_validate(consultation)

    patient = await service.session.get(User, consultation.patient_id)
    if patient:
        response.patient = PatientSummary.model_validate(patient)

    if consultation.provider_id:
        provider = await service.session.get(HealthcareProvider, consultation.provider_id)
        if provider:
            response.provider = ProviderSummary.model_validate(provider)

    return ConsultationEnvelope(consultation=response)

@router.post("", response_model=ConsultationEnvelope, status_code=status.HTTP_201_CREATED)
async def create_consultation(
    request: ConsultationCreate,
    identity: Identity = Depends(get_current_identity),
    service: ConsultationService = Depends(get_consultation_service)
):
    consultation = await service.create_consultation(identity, request)
    return await construct_response(consultation, service)

@router.get("/{consultation_id}", response_model=ConsultationEnvelope)
async def read_consultation(
    consultation_id: UUID,
    identity: Identity = Depends(get_current_identity),
    service: ConsultationService = Depends(get_consultation_service)
):
    consultation = await service.get_visible_consultation(identity, consultation_id)
    return await construct_response(consultation, service)

@router.get("/{consultation_id}/transitions", response_model=TransitionOptions)
async def read_allowed_transitions(
    consultation_id: UUID,
    identity: Identity = Depends(get_current_identity),
    service: ConsultationService = Depends(get_consultation_service)
):
    consultation, allowed = await service.allowed_transitions(identity, consultation_id)
    return TransitionOptions(
        consultation_id=consultation.id,
        current_status=consultation.status,
        allowed=allowed
    )

@router.post("/{consultation_id}/assign", response_model=ConsultationEnvelope)
async def assign_provider(
    consultation_id: UUID,
    request: AssignProviderRequest,
    identity: Identity = Depends(get_current_identity),
    service: ConsultationService = Depends(get_consultation_service)
):
    consultation = await service.assign_provider(identity, consultation_id, request)
    return await construct_response(consultation, service)

@router.patch("/{consultation_id}/confirm", response_model=ConsultationEnvelope)
async def confirm_consultation(
    consultation_id: UUID,
    request: ConfirmConsultationRequest,
    identity: Identity = Depends(get_current_identity),
    service: ConsultationService = Depends(get_consultation_service)
):
    consultation = await service.confirm_consultation(identity, consultation_id, request)
    return await construct_response(consultation, service)

@router.patch("/{consultation_id}", response_model=ConsultationEnvelope)
async def update_consultation(
    consultation_id: UUID,
    request: ConsultationUpdate,
    identity: Identity = Depends(get_current_identity),
    service: ConsultationService = Depends(get_consultation_service)
):
    consultation = await service.update_consultation(identity, consultation_id, request)
    return await construct_response(consultation, service)
