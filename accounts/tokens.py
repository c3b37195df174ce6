"""
Token service: signed, time-limited access tokens carrying tenant and role claims.

Built on djangorestframework-simplejwt. Claims are a snapshot; before they
are trusted they must be matched against the live User (resolve_token_user).
"""
import logging
from datetime import timedelta

import jwt
from django.conf import settings
from django.utils import timezone
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

from core.exceptions import StaleToken, TokenExpired, TokenInvalid

logger = logging.getLogger(__name__)

ROLE_CLAIM = 'role'
ORGANIZATION_CLAIM = 'organization_id'


class TenantAccessToken(AccessToken):
    """Access token that always carries role and organization claims."""

    @classmethod
    def for_user(cls, user):
        token = super().for_user(user)
        token[ROLE_CLAIM] = user.role
        token[ORGANIZATION_CLAIM] = str(user.organization_id)
        token['email'] = user.email
        token['display_name'] = user.display_name
        token['unique_id'] = user.unique_id
        return token


def issue_token(user, lifetime: timedelta = None) -> str:
    token = TenantAccessToken.for_user(user)
    if lifetime is not None:
        token.set_exp(lifetime=lifetime)
    return str(token)


def _signature_is_valid(raw: str) -> bool:
    try:
        jwt.decode(
            raw,
            api_settings.SIGNING_KEY,
            algorithms=[api_settings.ALGORITHM],
            options={'verify_exp': False, 'verify_aud': False},
        )
    except jwt.InvalidTokenError:
        return False
    return True


def verify_token(raw: str) -> dict:
    """
    Verify signature, expiry and token type. Returns the claims.
    Raises TokenExpired for a well-signed but expired token, TokenInvalid otherwise.
    """
    if not raw or not isinstance(raw, str):
        raise TokenInvalid()
    try:
        token = TenantAccessToken(raw)
    except TokenError:
        if not _signature_is_valid(raw):
            raise TokenInvalid()
        unverified = jwt.decode(raw, options={'verify_signature': False})
        exp = unverified.get('exp')
        if exp is not None and exp <= timezone.now().timestamp():
            raise TokenExpired()
        raise TokenInvalid()
    claims = dict(token.payload)
    if ROLE_CLAIM not in claims or ORGANIZATION_CLAIM not in claims:
        raise TokenInvalid('Token is missing role or organization claims.')
    return claims


def resolve_token_user(claims: dict):
    """
    Load the User a verified token refers to and make sure the token's role
    and organization still describe that user.
    """
    from .models import User

    user_id = claims.get(api_settings.USER_ID_CLAIM)
    if user_id is None:
        raise TokenInvalid()
    user = User.objects.select_related('organization').filter(
        **{api_settings.USER_ID_FIELD: user_id}
    ).first()
    if user is None or not user.is_active:
        raise StaleToken()
    if claims.get(ROLE_CLAIM) != user.role or claims.get(ORGANIZATION_CLAIM) != str(user.organization_id):
        logger.info('Rejected stale token for user %s', user.pk)
        raise StaleToken()
    return user


def access_token_lifetime() -> timedelta:
    return settings.SIMPLE_JWT['ACCESS_TOKEN_LIFETIME']
