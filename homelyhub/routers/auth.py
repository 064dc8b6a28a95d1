"""
Authentication API endpoints: registration, login, token refresh and profile.
"""

from fastapi import APIRouter, Depends, status
from homelyhub.config import settings
from homelyhub.models.user import User
from homelyhub.services.auth import AuthService
from homelyhub.schemas.auth import (
    AccessTokenResponse,
    AuthResponse,
    LoginRequest,
    RefreshTokenRequest,
)
from homelyhub.schemas.user import UserDetailResponse, UserRegister, UserResponse, UserUpdateDetails
from homelyhub.schemas.error import get_auth_error_responses, get_error_responses
from homelyhub.utils.dependencies import get_auth_service, get_current_user


router = APIRouter(prefix="/auth", tags=["Authentication"])


def _auth_response(user: User, access_token: str, refresh_token: str) -> AuthResponse:
    return AuthResponse(
        user=UserResponse.model_validate(user),
        access_token=access_token,
        refresh_token=refresh_token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create a guest or host account and return JWT tokens",
    responses=get_error_responses(400, 403, 409)
)
async def register(
    user_data: UserRegister,
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    user, access_token, refresh_token = await auth_service.register(user_data)
    return _auth_response(user, access_token, refresh_token)


@router.post(
    "/login",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate user with email and password, returns JWT tokens",
    responses=get_auth_error_responses()
)
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    """
    Authenticate user and return JWT tokens.

    Raises:
        InvalidCredentialsError: If credentials are invalid
        InactiveUserError: If user account is inactive
    """
    user, access_token, refresh_token = await auth_service.login(
        email=login_data.email,
        password=login_data.password
    )
    return _auth_response(user, access_token, refresh_token)


@router.post(
    "/refresh",
    response_model=AccessTokenResponse,
    status_code=status.HTTP_200_OK,
    summary="Refresh access token",
    description="Generate new access token using refresh token",
    responses=get_auth_error_responses()
)
async def refresh_token(
    refresh_data: RefreshTokenRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> AccessTokenResponse:
    access_token = await auth_service.refresh_access_token(refresh_data.refresh_token)

    return AccessTokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60
    )


@router.get(
    "/me",
    response_model=UserDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Get current user",
    responses=get_auth_error_responses()
)
async def get_me(current_user: User = Depends(get_current_user)) -> UserDetailResponse:
    return UserDetailResponse(data=UserResponse.model_validate(current_user))


@router.put(
    "/updatedetails",
    response_model=UserDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Update profile",
    description="Change the caller's name, email, phone or avatar",
    responses=get_error_responses(400, 401, 409)
)
async def update_details(
    details: UserUpdateDetails,
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> UserDetailResponse:
    user = await auth_service.update_details(current_user, details)
    return UserDetailResponse(data=UserResponse.model_validate(user))
