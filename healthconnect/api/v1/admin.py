from fastapi import APIRouter, Depends
from uuid import UUID

from healthconnect.api.deps import get_current_identity
from healthconnect.api.v1.consultations import construct_response, get_consultation_service
from healthconnect.schemas.consultation import ConsultationEnvelope
from healthconnect.schemas.user import Identity
from healthconnect.services.consultation_service import ConsultationService

router = APIRouter()

@router.delete("/consultations/{consultation_id}", response_model=ConsultationEnvelope)
async def cancel_consultation(
    consultation_id: UUID,
    identity: Identity = Depends(get_current_identity),
    service: ConsultationService = Depends(get_consultation_service)
):
    consultation = await service.cancel_consultation(identity, consultation_id)
    return await construct_response(consultation, service)
