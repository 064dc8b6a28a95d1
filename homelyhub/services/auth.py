"""
Authentication service for registration, login, token management and profile updates.
Resolves bearer tokens into the acting user handed to every other service.
"""

from typing import Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from homelyhub.repositories.user import UserRepository
from homelyhub.models.user import User, UserRole
from homelyhub.schemas.user import UserRegister, UserUpdateDetails
from homelyhub.services.permissions import require_actor
from homelyhub.utils.auth import create_access_token, create_refresh_token, verify_token
from homelyhub.utils.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    InactiveUserError,
    DuplicateResourceError,
    ForbiddenError,
    ValidationError,
)
from homelyhub.utils.validators import ValidationUtils
from jose import JWTError
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service for user accounts and tokens.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)

    async def register(self, user_data: UserRegister) -> Tuple[User, str, str]:
        """
        Register a new account and issue tokens for it.

        Args:
            user_data: Registration payload

        Returns:
            Tuple of (user, access_token, refresh_token)

        Raises:
            ForbiddenError: If the admin role is requested
            DuplicateResourceError: If the email is already registered
        """
        if user_data.role == UserRole.ADMIN:
            raise ForbiddenError("Admin accounts cannot be self-registered")

        try:
            user = await self.user_repo.create_user(user_data.model_dump())
        except ValueError as e:
            if "already exists" in str(e):
                raise DuplicateResourceError("User", user_data.email)
            raise ValidationError(str(e))

        logger.info(f"Registered user {user.email} as {user.role.value}")
        access_token, refresh_token = self.create_tokens(user)
        return user, access_token, refresh_token

    async def authenticate_user(self, email: str, password: str) -> User:
        """
        Authenticate user with email and password.

        Args:
            email: User's email address
            password: Plain text password

        Returns:
            Authenticated User object

        Raises:
            InvalidCredentialsError: If credentials are invalid
            InactiveUserError: If user account is inactive
        """
        if not email or not email.strip():
            raise ValidationError("Email is required")

        if not password:
            raise ValidationError("Password is required")

        user = await self.user_repo.authenticate_user(email, password)

        if not user:
            logger.warning(f"Failed authentication attempt for email: {email}")
            raise InvalidCredentialsError()

        if not user.is_active:
            logger.warning(f"Inactive user attempted login: {email}")
            raise InactiveUserError()

        return user

    def create_tokens(self, user: User) -> Tuple[str, str]:
        """Create (access_token, refresh_token) for a user."""
        access_token = create_access_token(user_id=user.id, email=user.email, role=user.role)
        refresh_token = create_refresh_token(user_id=user.id, email=user.email)
        return access_token, refresh_token

    async def login(self, email: str, password: str) -> Tuple[User, str, str]:
        """
        Authenticate user and create tokens.

        Returns:
            Tuple of (user, access_token, refresh_token)
        """
        user = await self.authenticate_user(email, password)
        access_token, refresh_token = self.create_tokens(user)
        logger.info(f"User logged in: {user.email}")
        return user, access_token, refresh_token

    async def refresh_access_token(self, refresh_token: str) -> str:
        """
        Create new access token from refresh token.

        Raises:
            InvalidTokenError: If refresh token is invalid
            TokenExpiredError: If refresh token is expired
            InactiveUserError: If user account is inactive
        """
        user = await self._resolve_token(refresh_token, "refresh")
        return create_access_token(user_id=user.id, email=user.email, role=user.role)

    async def get_current_user(self, token: str) -> User:
        """
        Resolve an access token into the acting user.

        Args:
            token: JWT access token

        Returns:
            Current User object

        Raises:
            InvalidTokenError: If token is invalid or the user no longer exists
            TokenExpiredError: If token is expired
            InactiveUserError: If user account is inactive
        """
        return await self._resolve_token(token, "access")

    async def update_details(self, actor: User, details: UserUpdateDetails) -> User:
        """
        Update the actor's own profile.

        Args:
            actor: Authenticated user
            details: Fields to change

        Returns:
            Updated user

        Raises:
            DuplicateResourceError: If the new email belongs to another account
        """
        actor = require_actor(actor)
        changes = details.model_dump(exclude_unset=True)

        try:
            user = await self.user_repo.update_details(actor.id, changes)
        except ValueError as e:
            if "already exists" in str(e):
                raise DuplicateResourceError("User", changes.get("email", ""))
            raise ValidationError(str(e))

        logger.info(f"User {actor.id} updated profile fields: {sorted(changes)}")
        return user

    async def _resolve_token(self, token: str, token_type: str) -> User:
        try:
            payload = verify_token(token, token_type=token_type)
        except JWTError as e:
            if "expired" in str(e).lower():
                raise TokenExpiredError()
            raise InvalidTokenError(str(e))

        if not ValidationUtils.is_object_id(payload.user_id):
            raise InvalidTokenError("Invalid token subject")

        user = await self.user_repo.get_by_id(payload.user_id)
        if not user:
            raise InvalidTokenError("User for this token no longer exists")

        if not user.is_active:
            raise InactiveUserError()

        return user
