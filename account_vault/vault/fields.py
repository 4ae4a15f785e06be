"""
Protected field helpers for the account CRUD layer.

Optional contact values are stored as a pair: the sealed envelope and its
search token. Blank input is stored as absent on both columns.
"""
from typing import Callable, NamedTuple

from .crypto import SecretCipher
from .search import normalize_email, normalize_phone


class ProtectedValue(NamedTuple):
    envelope: str | None
    search: str | None


def _protect(
    cipher: SecretCipher,
    value: str | None,
    normalize: Callable[[str], str],
) -> ProtectedValue:
    if value is None:
        return ProtectedValue(None, None)
    trimmed = value.strip()
    if not trimmed:
        return ProtectedValue(None, None)
    return ProtectedValue(cipher.seal(trimmed), normalize(trimmed))


def protect_email(cipher: SecretCipher, value: str | None) -> ProtectedValue:
    """Seal a recovery email and derive its search token."""
    return _protect(cipher, value, normalize_email)


def protect_phone(cipher: SecretCipher, value: str | None) -> ProtectedValue:
    """Seal a phone number and derive its digits-only search token."""
    return _protect(cipher, value, normalize_phone)


def reveal(cipher: SecretCipher, envelope: str | None) -> str | None:
    """Open an optional envelope; absent stays absent.

    Raises:
        DecryptError: If a present envelope cannot be opened.
    """
    if not envelope:
        return None
    return cipher.open(envelope)
