"""
Auth Endpoints

- POST  /auth/register  - Create a student account (returns tokens)
- POST  /auth/login     - Exchange email + password for tokens
- POST  /auth/refresh   - New access token from a refresh token
- GET   /auth/me        - Profile of the bearer
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from studyplan.api.deps import get_current_user, raise_http_error
from studyplan.core.errors import ServiceError
from studyplan.db.database import get_db
from studyplan.models.user import User
from studyplan.schemas.auth import (
    AccessTokenResponse,
    ErrorResponse,
    RefreshTokenRequest,
    TokenResponse,
    UserLogin,
    UserRegister,
    UserResponse,
)
from studyplan.services.auth_service import AuthService

router = APIRouter(tags=["Authentication"])

_UNAUTHORIZED = {401: {"model": ErrorResponse, "description": "Invalid credentials or token"}}


def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": "Email already exists"}},
)
async def register(
    user_data: UserRegister,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Register a new student account and sign it in."""
    try:
        return await auth_service.register(user_data)
    except ServiceError as e:
        raise_http_error(e)


@router.post("/login", response_model=TokenResponse, responses=_UNAUTHORIZED)
async def login(
    login_data: UserLogin,
    auth_service: AuthService = Depends(get_auth_service),
):
    try:
        return await auth_service.login(login_data)
    except ServiceError as e:
        raise_http_error(e)


@router.post("/refresh", response_model=AccessTokenResponse, responses=_UNAUTHORIZED)
async def refresh_token(
    token_data: RefreshTokenRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    try:
        return await auth_service.refresh_token(token_data.refresh_token)
    except ServiceError as e:
        raise_http_error(e)


@router.get("/me", response_model=UserResponse, responses=_UNAUTHORIZED)
async def get_me(current_user: User = Depends(get_current_user)):
    return current_user
