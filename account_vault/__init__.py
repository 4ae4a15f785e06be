"""Account Vault.

Password-gated storage of third-party account credentials.
"""
from .version import __version__
from .exceptions import (
    VaultError,
    DecryptError,
    InvalidTokenError,
    UnauthorizedError,
    MissingKeyMaterialError,
    AlreadyInitializedError,
    WeakPasswordError,
)

__all__ = [
    "__version__",
    "VaultError",
    "DecryptError",
    "InvalidTokenError",
    "UnauthorizedError",
    "MissingKeyMaterialError",
    "AlreadyInitializedError",
    "WeakPasswordError",
]
