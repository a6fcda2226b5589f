from fastapi import APIRouter
from healthconnect.api.v1 import admin, auth, consultations, doctor

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(consultations.router, prefix="/consultations", tags=["consultations"])
api_router.include_router(doctor.router, prefix="/doctor", tags=["doctor"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
