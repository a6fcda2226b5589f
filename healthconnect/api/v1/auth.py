from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from healthconnect.api.deps import get_current_user, oauth2_scheme
from healthconnect.db.models import User
from healthconnect.db.session import get_session
from healthconnect.schemas.auth import LoginRequest, LoginResponse
from healthconnect.services.auth_service import AuthService

router = APIRouter()

@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: LoginRequest,
    session: AsyncSession = Depends(get_session)
):
    service = AuthService(session)
    return await service.login(login_data)

@router.post("/logout")
async def logout(
    token: str = Depends(oauth2_scheme),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    service = AuthService(session)
    return await service.logout(token)
