"""Vault core — credential protection for the account vault.

Security Note (Threat Model):
    Decrypted field values exist in process memory while a request is
    handled. Search tokens are stored in the clear next to their sealed
    values and reveal which records share a normalized contact fragment.
    Session tokens cannot be revoked server-side before they age out.
    These are accepted limitations.
"""

from .crypto import SecretCipher
from .search import normalize_email, normalize_phone, query_fragments
from .passwords import PasswordHasher
from .tokens import SessionTokenCodec, SessionClaims, encode_token, decode_token
from .store import (
    CredentialStore,
    MasterCredential,
    MemoryCredentialStore,
    PoolCredentialStore,
)
from .gate import VaultAuthGate, AuthState
from .config import VaultConfig, generate_encryption_key

__all__ = [
    "SecretCipher",
    "normalize_email",
    "normalize_phone",
    "query_fragments",
    "PasswordHasher",
    "SessionTokenCodec",
    "SessionClaims",
    "encode_token",
    "decode_token",
    "CredentialStore",
    "MasterCredential",
    "MemoryCredentialStore",
    "PoolCredentialStore",
    "VaultAuthGate",
    "AuthState",
    "VaultConfig",
    "generate_encryption_key",
]
