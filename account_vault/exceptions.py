"""
Vault error kinds.

Cryptographic and token failures collapse into one kind each and carry a
fixed message, so nothing about *why* a check failed leaves the core.
``fatal`` separates configuration faults (stop the process) from
per-request outcomes.
"""


class VaultError(Exception):
    """Base class for every error raised by the vault core."""

    fatal: bool = False
    message: str = "Vault operation failed."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class DecryptError(VaultError):
    """Envelope is malformed, tampered with, or sealed under another key."""

    message = "Unable to decrypt value."


class InvalidTokenError(VaultError):
    """Session token is malformed or its signature does not match."""

    message = "Invalid session token."


class UnauthorizedError(VaultError):
    """Request is not authorized."""

    message = "Unauthorized."


class MissingKeyMaterialError(VaultError, RuntimeError):
    """Encryption key or signing secret is absent or unusable."""

    fatal = True
    message = "Vault key material is missing or invalid."


class AlreadyInitializedError(VaultError):
    """The vault already has its credential holder."""

    message = "Vault is already initialized."


class WeakPasswordError(VaultError, ValueError):
    """Master password does not satisfy the setup policy."""

    message = "Password must be at least 8 characters."
