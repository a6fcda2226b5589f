import json
from datetime import timedelta
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from healthconnect.core.config import settings
from healthconnect.core.exceptions import AuthenticationError
from healthconnect.core.logger import logger
from healthconnect.core.redis import redis_client
from healthconnect.core.security import verify_password, create_access_token
from healthconnect.db.models import User
from healthconnect.schemas.auth import LoginRequest, LoginResponse
from healthconnect.schemas.user import UserResponse

class AuthService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def login(self, login_data: LoginRequest) -> LoginResponse:
        stmt = select(User).where(User.email == login_data.email)
        result = await self.session.execute(stmt)
        user = result.scalars().first()

        if not user or not verify_password(login_data.password, user.password_hash):
            raise AuthenticationError("Invalid email or password")

        access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        access_token = create_access_token(
            data={"sub": str(user.id), "role": user.role}, expires_delta=access_token_expires
        )

        # A token is only honoured while its session entry exists
        token_data = {
            "user_id": str(user.id),
            "role": user.role,
        }
        await redis_client.set_token(
            access_token,
            json.dumps(token_data),
            settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
        )
        logger.info(f"User {user.id} logged in as {user.role}")

        return LoginResponse(
            access_token=access_token,
            token_type="bearer",
            user=UserResponse.model_validate(user)
        )

    async def logout(self, token: str) -> dict:
        await redis_client.delete_token(token)
        return {"message": "Logged out"}
