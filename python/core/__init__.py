"""
Core package - foundation for the application.

Modules:
- config.py - Application settings via Pydantic Settings
- exceptions.py - Custom exception hierarchy
- responses.py - Unified API response format
- logging.py - Centralized logging configuration
- geo.py - Distance ranking for gym discovery
- slug.py - Slugs and storage object names
"""

from core.config import settings
from core.exceptions import (
    AppException,
    NotFoundError,
    ValidationError,
    BadRequestError,
    DatabaseError,
    AuthenticationError,
    PaymentError,
    BookingError,
)
from core.responses import ApiResponse

__all__ = [
    'settings',
    'AppException',
    'NotFoundError',
    'ValidationError',
    'BadRequestError',
    'DatabaseError',
    'AuthenticationError',
    'PaymentError',
    'BookingError',
    'ApiResponse',
]
