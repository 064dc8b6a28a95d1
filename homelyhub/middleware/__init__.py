"""
Middleware package for the HomelyHub API.
"""

from .validation import ValidationMiddleware

__all__ = ["ValidationMiddleware"]
