"""
Domain error kinds shared by the identity and assignment services.

Each kind is a DRF APIException so services can raise it directly and
config.exceptions.custom_exception_handler renders a uniform
{detail, code} response.
"""
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    AuthenticationFailed,
    NotFound as DRFNotFound,
    PermissionDenied,
    ValidationError,
)

__all__ = [
    'CannotDeleteSelf',
    'ConflictAlreadyExists',
    'DuplicateAssignment',
    'DuplicateIdentity',
    'Forbidden',
    'ForbiddenCrossTenant',
    'InvalidCredentials',
    'MissingTenantContext',
    'NotFound',
    'SoleAdministratorProtected',
    'StaleToken',
    'TokenExpired',
    'TokenInvalid',
    'ValidationError',
]


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Conflict.'
    default_code = 'conflict'


class DuplicateIdentity(Conflict):
    default_detail = 'Email or unique ID already exists.'
    default_code = 'duplicate_identity'


class DuplicateAssignment(Conflict):
    default_detail = 'This task is already assigned to this person.'
    default_code = 'duplicate_assignment'


class ConflictAlreadyExists(Conflict):
    default_detail = 'An active user with this email or unique ID already exists.'
    default_code = 'conflict_already_exists'


class SoleAdministratorProtected(Conflict):
    default_detail = 'The last administrator of an organization cannot be demoted or deleted.'
    default_code = 'sole_administrator_protected'


class NotFound(DRFNotFound):
    default_code = 'not_found'


class Forbidden(PermissionDenied):
    default_code = 'forbidden'


class ForbiddenCrossTenant(PermissionDenied):
    default_detail = 'This record belongs to another organization.'
    default_code = 'forbidden_cross_tenant'


class CannotDeleteSelf(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Administrators cannot delete their own account.'
    default_code = 'cannot_delete_self'


class MissingTenantContext(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'No organization could be resolved for this request.'
    default_code = 'missing_tenant_context'


class InvalidCredentials(AuthenticationFailed):
    default_detail = 'Invalid email or password.'
    default_code = 'invalid_credentials'


class StaleToken(AuthenticationFailed):
    default_detail = 'Token no longer matches the account; please log in again.'
    default_code = 'stale_token'


class TokenExpired(AuthenticationFailed):
    default_detail = 'Token has expired.'
    default_code = 'token_expired'


class TokenInvalid(AuthenticationFailed):
    default_detail = 'Token is invalid.'
    default_code = 'token_invalid'
