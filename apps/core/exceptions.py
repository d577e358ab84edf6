"""
Custom Exception Handling for the Ignews Backend

Provides the base error taxonomy and a consistent error response format
across all API endpoints.
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    Custom exception handler that provides consistent error format.

    Error Response Format:
    {
        "error": "ErrorType",
        "message": "Human-readable error message",
        "status_code": 400,
        "details": {...}  // Optional, additional context
    }
    """
    if isinstance(exc, APIException):
        error_data = {
            'error': exc.__class__.__name__,
            'message': exc.message,
            'status_code': exc.status_code,
        }
        if exc.details:
            error_data['details'] = exc.details
        return Response(error_data, status=exc.status_code)

    # Call REST framework's default exception handler
    response = exception_handler(exc, context)

    if response is not None:
        error_data = {
            'error': exc.__class__.__name__,
            'message': str(exc.detail) if hasattr(exc, 'detail') else str(exc),
            'status_code': response.status_code,
        }

        if isinstance(getattr(exc, 'detail', None), dict):
            error_data['details'] = exc.detail

        response.data = error_data

    else:
        # Handle unexpected exceptions
        logger.exception(f'Unhandled exception: {exc}')

        error_data = {
            'error': 'InternalServerError',
            'message': 'An unexpected error occurred',
        }

        response = Response(
            error_data,
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    return response


class APIException(Exception):
    """
    Base exception class for API errors.

    Usage:
        raise APIException('Something went wrong', status_code=400)
    """
    def __init__(self, message: str, status_code: int = 400, details: dict | None = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class AuthenticationError(APIException):
    """Raised when the caller cannot be authenticated."""
    def __init__(self, message: str = 'Authentication required', status_code: int = 401):
        super().__init__(message, status_code=status_code)


class InternalError(APIException):
    """Raised when the server cannot complete a request it accepted."""
    def __init__(self, message: str = 'Internal error', details: dict | None = None):
        super().__init__(message, status_code=500, details=details)
