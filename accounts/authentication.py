"""
DRF authentication that rejects tokens whose role/organization claims no
longer match the live account.
"""
from rest_framework_simplejwt.authentication import JWTAuthentication

from .tokens import ORGANIZATION_CLAIM, ROLE_CLAIM, TenantAccessToken, resolve_token_user, verify_token
from core.exceptions import TokenInvalid


class TenantJWTAuthentication(JWTAuthentication):

    def get_validated_token(self, raw_token):
        # Expired and malformed tokens get distinct error codes.
        raw = raw_token.decode() if isinstance(raw_token, bytes) else raw_token
        verify_token(raw)
        return TenantAccessToken(raw)

    def get_user(self, validated_token):
        if ROLE_CLAIM not in validated_token or ORGANIZATION_CLAIM not in validated_token:
            raise TokenInvalid('Token is missing role or organization claims.')
        return resolve_token_user(validated_token.payload)
