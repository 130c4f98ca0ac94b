"""
Auth Service

Student accounts: registration, login and bearer-token resolution.
"""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from studyplan.models import User
from studyplan.models.base import utcnow
from studyplan.repositories.user_repo import UserRepository
from studyplan.schemas.auth import (
    AccessTokenResponse,
    TokenResponse,
    UserLogin,
    UserRegister,
    UserResponse,
)
from studyplan.core.errors import AuthenticationError, ValidationError
from studyplan.core.security import (
    TOKEN_TYPE_ACCESS,
    TOKEN_TYPE_REFRESH,
    create_access_token,
    create_refresh_token,
    decode_token,
    get_password_hash,
    token_expires_in,
    verify_password,
)

logger = logging.getLogger(__name__)

MSG_EMAIL_TAKEN = "A user with this email already exists"
MSG_BAD_CREDENTIALS = "Invalid email or password"


class AuthService:
    """Registers students and turns tokens back into users."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_repo = UserRepository(db)

    # ============================================================
    # Registration / Login
    # ============================================================
    async def register(self, user_data: UserRegister) -> TokenResponse:
        """
        Create an account and sign it in.

        Raises:
            ValidationError: Email already registered
        """
        if await self.user_repo.email_taken(user_data.email):
            raise ValidationError(MSG_EMAIL_TAKEN)

        try:
            user = await self.user_repo.add(
                email=user_data.email,
                password_hash=get_password_hash(user_data.password),
                first_name=user_data.first_name,
                last_name=user_data.last_name,
            )
            await self.db.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent registration
            await self.db.rollback()
            raise ValidationError(MSG_EMAIL_TAKEN) from e

        logger.info(f"User registered: {user.id}")
        return self._token_response(user)

    async def login(self, login_data: UserLogin) -> TokenResponse:
        """
        Raises:
            AuthenticationError: Unknown email, wrong password or inactive account
        """
        user = await self.user_repo.get_by_email(login_data.email)

        if not user or not verify_password(login_data.password, user.password_hash):
            logger.info(f"Failed login for {login_data.email}")
            raise AuthenticationError(MSG_BAD_CREDENTIALS)

        if not user.is_active:
            raise AuthenticationError("This account has been deactivated")

        await self.user_repo.assign(user, last_login=utcnow())
        await self.db.commit()

        return self._token_response(user)

    # ============================================================
    # Tokens
    # ============================================================
    async def refresh_token(self, refresh_token: str) -> AccessTokenResponse:
        claims = decode_token(refresh_token, TOKEN_TYPE_REFRESH)
        user = await self._get_active_user(claims["sub"])

        return AccessTokenResponse(
            access_token=create_access_token(user.id),
            expires_in=token_expires_in(TOKEN_TYPE_ACCESS),
        )

    async def get_current_user(self, token: str) -> User:
        """
        Resolve an access token to its user.

        Raises:
            AuthenticationError: Bad token, or the user is gone / inactive
        """
        claims = decode_token(token, TOKEN_TYPE_ACCESS)
        return await self._get_active_user(claims["sub"])

    async def _get_active_user(self, subject: str) -> User:
        try:
            user_id = UUID(subject)
        except (TypeError, ValueError):
            raise AuthenticationError("Invalid token subject")

        user = await self.user_repo.get_by_id(user_id)

        if not user:
            raise AuthenticationError("User not found")
        if not user.is_active:
            raise AuthenticationError("User account is deactivated")
        return user

    def _token_response(self, user: User) -> TokenResponse:
        return TokenResponse(
            access_token=create_access_token(user.id),
            refresh_token=create_refresh_token(user.id),
            expires_in=token_expires_in(TOKEN_TYPE_ACCESS),
            user=UserResponse.model_validate(user),
        )
