"""
Vault Configuration — Key material loading and validated settings.

Reads key material from environment variables:
    VAULT_ENCRYPTION_KEY = <base64-encoded 32-byte key>
    VAULT_SIGNING_SECRET = <arbitrary string, distinct from the key>

Optional settings:
    VAULT_SESSION_MAX_AGE = <seconds, default 604800>
    VAULT_BCRYPT_ROUNDS = <int, default 12>
    VAULT_COOKIE_NAME = <str, default gav_session>
    VAULT_ENV = production  (marks the session cookie Secure)

Security Note:
    Never log key material. Only log which setting is missing.
"""
import os
import base64
import binascii
import secrets
import logging

from pydantic import BaseModel, Field, field_validator, model_validator

from .crypto import KEY_LENGTH, SecretCipher
from .passwords import DEFAULT_ROUNDS, PasswordHasher
from .tokens import SessionTokenCodec
from ..exceptions import MissingKeyMaterialError

logger = logging.getLogger("vault")

SESSION_MAX_AGE = 60 * 60 * 24 * 7
BCRYPT_ROUNDS = DEFAULT_ROUNDS
SESSION_COOKIE_NAME = "gav_session"


def decode_encryption_key(raw: str | None) -> bytes:
    """Decode a base64 encryption key and check its length.

    Args:
        raw: Base64 text as found in configuration.

    Returns:
        Raw 32-byte key.

    Raises:
        MissingKeyMaterialError: If the value is absent, not base64,
            or does not decode to exactly 32 bytes.
    """
    raw = (raw or "").strip()
    if not raw:
        raise MissingKeyMaterialError(
            "VAULT_ENCRYPTION_KEY is required for sensitive field encryption"
        )
    try:
        key = base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError):
        raise MissingKeyMaterialError(
            "VAULT_ENCRYPTION_KEY must be a valid base64 string"
        ) from None
    if len(key) != KEY_LENGTH:
        raise MissingKeyMaterialError(
            f"VAULT_ENCRYPTION_KEY must decode to exactly {KEY_LENGTH} bytes, "
            f"got {len(key)}"
        )
    return key


def load_signing_secret() -> str:
    """Read the session signing secret from VAULT_SIGNING_SECRET.

    Raises:
        MissingKeyMaterialError: If the variable is unset or empty.
    """
    secret = os.environ.get("VAULT_SIGNING_SECRET")
    if not secret:
        raise MissingKeyMaterialError(
            "VAULT_SIGNING_SECRET is required for session signing"
        )
    return secret


def generate_encryption_key() -> str:
    """Generate a random 32-byte encryption key and return as base64 string.

    This is a utility for operators to generate new keys.
    """
    return base64.b64encode(secrets.token_bytes(KEY_LENGTH)).decode("ascii")


class VaultConfig(BaseModel):
    """Validated vault configuration.

    Built once at process start and handed to each component; no
    component reads the environment by itself.
    """

    encryption_key: bytes
    signing_secret: str
    session_max_age: int = Field(default=SESSION_MAX_AGE, ge=60)
    bcrypt_rounds: int = Field(default=BCRYPT_ROUNDS, ge=4, le=31)
    cookie_name: str = Field(default=SESSION_COOKIE_NAME, min_length=1)
    cookie_secure: bool = False

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    @field_validator("encryption_key")
    @classmethod
    def validate_key_length(cls, v: bytes) -> bytes:
        """Encryption key must be exactly 32 bytes."""
        if len(v) != KEY_LENGTH:
            raise MissingKeyMaterialError(
                f"encryption_key must be exactly {KEY_LENGTH} bytes, got {len(v)}"
            )
        return v

    @field_validator("signing_secret")
    @classmethod
    def validate_signing_secret(cls, v: str) -> str:
        if not v:
            raise MissingKeyMaterialError("signing_secret cannot be empty")
        return v

    @model_validator(mode="after")
    def validate_key_separation(self) -> "VaultConfig":
        """Signing secret and encryption key must be different secrets."""
        encoded_key = base64.b64encode(self.encryption_key).decode("ascii")
        if self.signing_secret.encode("utf-8") == self.encryption_key or (
            self.signing_secret.strip() == encoded_key
        ):
            raise MissingKeyMaterialError(
                "signing_secret must differ from the encryption key"
            )
        return self

    @classmethod
    def from_env(cls) -> "VaultConfig":
        """Create VaultConfig by loading values from environment.

        Raises:
            MissingKeyMaterialError: On absent or invalid key material.
        """
        encryption_key = decode_encryption_key(
            os.environ.get("VAULT_ENCRYPTION_KEY")
        )
        signing_secret = load_signing_secret()
        config = cls(
            encryption_key=encryption_key,
            signing_secret=signing_secret,
            session_max_age=int(
                os.environ.get("VAULT_SESSION_MAX_AGE", SESSION_MAX_AGE)
            ),
            bcrypt_rounds=int(os.environ.get("VAULT_BCRYPT_ROUNDS", BCRYPT_ROUNDS)),
            cookie_name=os.environ.get("VAULT_COOKIE_NAME", SESSION_COOKIE_NAME),
            cookie_secure=os.environ.get("VAULT_ENV", "").lower() == "production",
        )
        logger.debug(
            "Vault configuration loaded (session_max_age=%d, bcrypt_rounds=%d)",
            config.session_max_age, config.bcrypt_rounds,
        )
        return config

    # ------------------------------------------------------------------
    # Component factories
    # ------------------------------------------------------------------

    def cipher(self) -> SecretCipher:
        return SecretCipher(self.encryption_key)

    def codec(self) -> SessionTokenCodec:
        return SessionTokenCodec(self.signing_secret)

    def hasher(self) -> PasswordHasher:
        return PasswordHasher(rounds=self.bcrypt_rounds)
