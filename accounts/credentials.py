"""
Credential store: hash and verify passwords.

A stored password is always a Credential (scheme + encoded hash). Code that
receives a Credential never hashes it again; only plaintext crosses the
hashing boundary, and it does so exactly once. Encoding is delegated to
Django's configured PASSWORD_HASHERS.
"""
import logging
from dataclasses import dataclass

from django.contrib.auth.hashers import (
    check_password,
    identify_hasher,
    make_password,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credential:
    """Hashed password tagged with the hasher that produced it."""
    scheme: str
    hash: str

    def __repr__(self):
        return f'Credential(scheme={self.scheme!r})'

    __str__ = __repr__

    @property
    def encoded(self) -> str:
        return self.hash

    @classmethod
    def from_encoded(cls, encoded: str) -> 'Credential':
        """
        Wrap a stored hash. Raises ValueError if the value is not produced by
        one of the configured hashers (e.g. a plaintext password).
        """
        if not encoded or not isinstance(encoded, str):
            raise ValueError('Empty credential')
        hasher = identify_hasher(encoded)
        return cls(scheme=hasher.algorithm, hash=encoded)


def is_hashed(value) -> bool:
    """True for a Credential or a string one of the configured hashers recognizes."""
    if isinstance(value, Credential):
        return True
    try:
        Credential.from_encoded(value)
    except ValueError:
        return False
    return True


def hash_password(plaintext: str) -> Credential:
    if isinstance(plaintext, Credential):
        raise TypeError('Credential is already hashed')
    if not isinstance(plaintext, str) or not plaintext:
        raise ValueError('Password must be a non-empty string')
    return Credential.from_encoded(make_password(plaintext))


def ensure_credential(value) -> Credential:
    """Pass a Credential through unchanged; hash anything else."""
    if isinstance(value, Credential):
        return value
    return hash_password(value)


def verify_password(plaintext, credential) -> bool:
    if not isinstance(plaintext, str):
        return False
    if credential is None:
        burn_hash_cycle(plaintext)
        return False
    if isinstance(credential, str):
        try:
            credential = Credential.from_encoded(credential)
        except ValueError:
            # Unusable or unknown format: no hasher runs, so spend one anyway.
            logger.warning('Refusing to verify against an unrecognized credential format')
            burn_hash_cycle(plaintext)
            return False
    return check_password(plaintext, credential.encoded)


def burn_hash_cycle(plaintext) -> None:
    """Spend the cost of one hash so unknown-account logins take as long as known ones."""
    make_password(plaintext if isinstance(plaintext, str) else '')
