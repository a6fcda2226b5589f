from fastapi import APIRouter, Depends
from uuid import UUID

from healthconnect.api.deps import get_current_identity
from healthconnect.api.v1.consultations import construct_response, get_consultation_service
from healthconnect.schemas.consultation import ConsultationEnvelope, DoctorConsultationUpdate
from healthconnect.schemas.user import Identity
from healthconnect.services.consultation_service import ConsultationService

router = APIRouter()

@router.patch("/consultations/{consultation_id}", response_model=ConsultationEnvelope)
async def update_doctor_consultation(
    consultation_id: UUID,
    request: DoctorConsultationUpdate,
    identity: Identity = Depends(get_current_identity),
    service: ConsultationService = Depends(get_consultation_service)
):
    consultation = await service.doctor_update(identity, consultation_id, request)
    return await construct_response(consultation, service)
