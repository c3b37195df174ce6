"""
Global exception handler for consistent API error responses.
Follows DRF convention and returns uniform structure.
"""
import logging

from django.conf import settings
from django.core.exceptions import PermissionDenied, ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    Custom exception handler that returns:
    { "detail": str, "code": str, "errors": dict (field errors only) }
    """
    response = exception_handler(exc, context)
    if response is not None:
        data = {'detail': _get_detail(exc), 'code': _get_code(exc)}
        if isinstance(exc, ValidationError) and isinstance(exc.detail, dict):
            data['errors'] = exc.detail
        response.data = data
        return response

    if isinstance(exc, PermissionDenied):
        return Response(
            {'detail': str(exc) or 'Permission denied', 'code': 'permission_denied'},
            status=status.HTTP_403_FORBIDDEN
        )
    if isinstance(exc, DjangoValidationError):
        return Response(
            {'detail': exc.messages[0] if exc.messages else str(exc), 'code': 'validation_error'},
            status=status.HTTP_400_BAD_REQUEST
        )

    view = context.get('view') if context else None
    logger.exception('Unhandled exception in %s: %s', type(view).__name__ if view else 'unknown view', exc)
    error_detail = 'An internal error occurred.'
    if settings.DEBUG:
        error_detail = f'An internal error occurred: {str(exc)}'
    # Never expose stack traces to frontend; use standard API error format
    return Response(
        {'detail': error_detail, 'code': 'internal_error'},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def _first(value):
    """First leaf of a nested DRF detail/codes structure."""
    while isinstance(value, (list, dict)):
        if not value:
            return None
        value = next(iter(value.values())) if isinstance(value, dict) else value[0]
    return value


def _get_detail(exc):
    if hasattr(exc, 'detail'):
        d = exc.detail
        if isinstance(d, dict) and 'detail' in d:
            return str(d['detail'])
        leaf = _first(d)
        return str(leaf) if leaf is not None else 'Error'
    return str(exc)


def _get_code(exc):
    if isinstance(exc, ValidationError):
        code = _first(exc.get_codes())
        return 'validation_error' if code in (None, 'invalid') else code
    if hasattr(exc, 'get_codes'):
        codes = exc.get_codes()
        if isinstance(codes, dict) and 'code' in codes:
            return str(codes['code'])
        code = _first(codes)
        if code:
            return code
    return getattr(exc, 'default_code', 'error')
