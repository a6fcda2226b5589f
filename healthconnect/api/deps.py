from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jwt.exceptions import PyJWTError
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from healthconnect.core.config import settings
from healthconnect.core.exceptions import AuthenticationError
from healthconnect.core.redis import redis_client
from healthconnect.core.security import decode_access_token
from healthconnect.db.models import User
from healthconnect.db.session import get_session
from healthconnect.schemas.user import Identity

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login", auto_error=False)

async def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    session: AsyncSession = Depends(get_session)
) -> User:
    credentials_exception = AuthenticationError(
        "Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not token:
        raise credentials_exception
    try:
        payload = decode_access_token(token)
        user_id = UUID(payload.get("sub"))
    except (PyJWTError, TypeError, ValueError):
        raise credentials_exception

    # Logged-out or expired sessions are gone from Redis
    if await redis_client.get_token(token) is None:
        raise credentials_exception

    user = await session.get(User, user_id)
    if user is None:
        raise credentials_exception
    return user

async def get_current_identity(user: User = Depends(get_current_user)) -> Identity:
    return Identity(user_id=user.id, role=user.role)
