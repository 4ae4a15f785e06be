"""
Session Tokens — Signed, time-stamped bearer tokens.

Format:
    <base64url(payload)>.<base64url(HMAC-SHA256(key, base64url(payload)))>
    payload = "<subject_id>.<issued_at_ms>.<nonce>"

Tokens are stateless: validity depends only on the signature and,
when the caller asks for it, on the token age. There is no server-side
revocation.

Security Note:
    Never log token values. Every decode failure yields the same
    ``None`` outcome, the cause is only visible at debug level.
"""
import hmac
import time
import hashlib
import secrets
import logging
from dataclasses import dataclass

from .crypto import b64url_decode, b64url_encode
from ..exceptions import InvalidTokenError, MissingKeyMaterialError

logger = logging.getLogger("vault")

NONCE_BYTES = 16
# tolerated clock skew for tokens stamped slightly in the future
MAX_FUTURE_SKEW_MS = 60 * 1000


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class SessionClaims:
    """Decoded content of a valid session token."""

    subject_id: int
    issued_at: int  # milliseconds since epoch

    def age_ms(self, now: int | None = None) -> int:
        return (now_ms() if now is None else now) - self.issued_at


def _key_bytes(signing_key: str | bytes) -> bytes:
    if isinstance(signing_key, str):
        signing_key = signing_key.encode("utf-8")
    if not signing_key:
        raise MissingKeyMaterialError("Session signing key cannot be empty")
    return bytes(signing_key)


def _sign(encoded: str, key: bytes) -> str:
    mac = hmac.new(key, encoded.encode("ascii"), hashlib.sha256)
    return b64url_encode(mac.digest())


def _parse_int(value: str) -> int:
    # str.isdigit accepts non-ASCII digits
    if not value or not value.isascii() or not value.isdigit():
        raise ValueError("not a decimal integer")
    return int(value)


def encode_token(
    subject_id: int,
    issued_at_ms: int,
    signing_key: str | bytes,
) -> str:
    """Build a signed session token for subject_id."""
    if isinstance(subject_id, bool) or int(subject_id) < 0:
        raise ValueError("subject_id must be a non-negative integer")
    if isinstance(issued_at_ms, bool) or int(issued_at_ms) < 0:
        raise ValueError("issued_at_ms must be a non-negative integer")
    nonce = b64url_encode(secrets.token_bytes(NONCE_BYTES))
    payload = f"{int(subject_id)}.{int(issued_at_ms)}.{nonce}"
    encoded = b64url_encode(payload.encode("ascii"))
    return f"{encoded}.{_sign(encoded, _key_bytes(signing_key))}"


def decode_token(
    token: str | None,
    signing_key: str | bytes,
) -> SessionClaims | None:
    """Verify a token and return its claims, or None if it is invalid."""
    key = _key_bytes(signing_key)
    if not isinstance(token, str) or not token.isascii():
        return None
    encoded, sep, signature = token.partition(".")
    if not sep or not encoded or not signature:
        return None
    received = signature.encode("ascii")
    expected = _sign(encoded, key).encode("ascii")
    if len(received) != len(expected):
        return None
    if not hmac.compare_digest(received, expected):
        logger.debug("Session token signature mismatch")
        return None
    try:
        parts = b64url_decode(encoded).decode("ascii").split(".")
        if len(parts) != 3 or not parts[2]:
            return None
        return SessionClaims(
            subject_id=_parse_int(parts[0]),
            issued_at=_parse_int(parts[1]),
        )
    except ValueError:
        logger.debug("Session token payload is malformed")
        return None


class SessionTokenCodec:
    """Issue and verify session tokens under one signing key.

    The codec enforces no expiry on its own; pass ``max_age`` (seconds)
    to :meth:`decode` to reject tokens older than that.
    """

    def __init__(self, signing_key: str | bytes):
        self._key = _key_bytes(signing_key)

    def __repr__(self) -> str:
        return "<SessionTokenCodec HMAC-SHA256>"

    def encode(self, subject_id: int, issued_at_ms: int | None = None) -> str:
        if issued_at_ms is None:
            issued_at_ms = now_ms()
        return encode_token(subject_id, issued_at_ms, self._key)

    def decode(
        self,
        token: str | None,
        max_age: int | None = None,
        now: int | None = None,
    ) -> SessionClaims | None:
        """Return the claims of a valid token, or None.

        Args:
            token: Bearer value presented by the client.
            max_age: Optional ceiling on token age, in seconds.
            now: Current time in milliseconds (defaults to the clock).
        """
        claims = decode_token(token, self._key)
        if claims is None or max_age is None:
            return claims
        age = claims.age_ms(now)
        if age > max_age * 1000 or age < -MAX_FUTURE_SKEW_MS:
            logger.debug("Session token for subject %s is outside its age window", claims.subject_id)
            return None
        return claims

    def decode_or_raise(
        self,
        token: str | None,
        max_age: int | None = None,
        now: int | None = None,
    ) -> SessionClaims:
        claims = self.decode(token, max_age=max_age, now=now)
        if claims is None:
            raise InvalidTokenError()
        return claims
