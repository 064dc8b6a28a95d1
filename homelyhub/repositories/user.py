"""
User repository for registration, authentication and profile updates.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from homelyhub.repositories.base import BaseRepository
from homelyhub.models.user import User, UserRole
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user accounts.
    Emails are stored lower-cased so lookups are case-insensitive.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user with email validation and password hashing.

        Args:
            user_data: Dictionary containing user information
                      Must include: name, email, password
                      Optional: phone, role (defaults to GUEST), avatar

        Returns:
            Created user instance

        Raises:
            ValueError: If validation fails or the email is taken
        """
        user_data = dict(user_data)
        email = User.validate_email_format(user_data["email"])

        if await self.get_by_email(email):
            raise ValueError(f"User with email {email} already exists")

        password = user_data.pop("password")
        create_data = {
            **user_data,
            "email": email,
            "hashed_password": User.hash_password(password),
            "role": user_data.get("role") or UserRole.GUEST,
            "is_active": user_data.get("is_active", True),
        }

        created_user = await self.create(create_data)
        logger.info(f"Created user: {created_user.email} (ID: {created_user.id})")
        return created_user

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address.

        Args:
            email: Email address to search for

        Returns:
            User instance if found, None otherwise
        """
        try:
            normalized_email = email.lower().strip()
            result = await self.db.execute(select(User).where(User.email == normalized_email))
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get user by email {email}: {e}")
            raise

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Authenticate user with email and password.

        Args:
            email: User's email address
            password: Plain text password

        Returns:
            User instance if the password matches, None otherwise
        """
        user = await self.get_by_email(email)

        if not user:
            logger.debug(f"Authentication failed: user {email} not found")
            return None

        if not user.verify_password(password):
            logger.debug(f"Authentication failed: invalid password for {email}")
            return None

        logger.info(f"User authenticated successfully: {email}")
        return user

    async def update_details(self, user_id: str, details: Dict[str, Any]) -> Optional[User]:
        """
        Update profile fields of a user.

        Args:
            user_id: Identifier of the user
            details: Any of name, email, phone, avatar

        Returns:
            Updated user or None if not found

        Raises:
            ValueError: If the new email is invalid or taken by another account
        """
        details = dict(details)
        if details.get("email"):
            email = User.validate_email_format(details["email"])
            existing = await self.get_by_email(email)
            if existing and existing.id != user_id:
                raise ValueError(f"User with email {email} already exists")
            details["email"] = email

        updated_user = await self.update(user_id, details)
        if updated_user:
            logger.info(f"Profile updated for user: {updated_user.email}")
        return updated_user
