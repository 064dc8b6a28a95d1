"""
Validation utilities for the HomelyHub API.
Provides identifier, number and format checks shared by schemas, parsers and services.
"""

import re
from typing import Any, Optional

from homelyhub.utils.exceptions import ValidationError

# Largest value an Integer column holds on every supported backend
MAX_INTEGER = 2_147_483_647


class ValidationUtils:
    """
    Utility class for common validation operations.
    Provides reusable validation methods for various data types.
    """

    OBJECT_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")
    PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$")
    TIME_OF_DAY_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

    @staticmethod
    def is_object_id(value: Any) -> bool:
        return isinstance(value, str) and bool(ValidationUtils.OBJECT_ID_PATTERN.match(value))

    @staticmethod
    def validate_object_id(value: Any, field_name: str = "id") -> str:
        """
        Validate a 24-character hexadecimal identifier.

        Args:
            value: Value to validate
            field_name: Name of the field for error messages

        Returns:
            Identifier in lowercase

        Raises:
            ValidationError: If the identifier is missing or malformed
        """
        if not value:
            raise ValidationError(f"{field_name} is required")

        if not ValidationUtils.is_object_id(value):
            raise ValidationError(f"Invalid {field_name} format: {value}")

        return value.lower()

    @staticmethod
    def validate_integer(
        value: Any,
        field_name: str,
        min_value: Optional[int] = None,
        max_value: Optional[int] = None
    ) -> int:
        """
        Validate integer value.

        Args:
            value: Value to validate
            field_name: Name of the field for error messages
            min_value: Minimum allowed value
            max_value: Maximum allowed value

        Returns:
            Valid integer

        Raises:
            ValidationError: If integer is invalid
        """
        if value is None:
            raise ValidationError(f"{field_name} is required")

        try:
            int_value = int(value)
        except (ValueError, TypeError):
            raise ValidationError(f"{field_name} must be a valid integer")

        if min_value is not None and int_value < min_value:
            raise ValidationError(f"{field_name} must be at least {min_value}")

        if max_value is not None and int_value > max_value:
            raise ValidationError(f"{field_name} cannot exceed {max_value}")

        return int_value

    @staticmethod
    def validate_phone_number(phone: Any, field_name: str = "phone") -> str:
        """
        Validate phone number format.

        Args:
            phone: Phone number to validate
            field_name: Name of the field for error messages

        Returns:
            Phone number with separators removed

        Raises:
            ValidationError: If phone number is invalid
        """
        if not phone:
            raise ValidationError(f"{field_name} is required")

        phone_str = str(phone).strip().replace(' ', '').replace('-', '').replace('(', '').replace(')', '')

        if not ValidationUtils.PHONE_PATTERN.match(phone_str):
            raise ValidationError(f"Invalid phone number format for {field_name}")

        return phone_str

    @staticmethod
    def validate_time_of_day(value: Any, field_name: str) -> str:
        """Validate an ``HH:MM`` 24-hour clock time."""
        if not isinstance(value, str) or not ValidationUtils.TIME_OF_DAY_PATTERN.match(value):
            raise ValidationError(f"{field_name} must be a time in HH:MM format")
        return value
