"""
Vault Crypto Core — Field-level authenticated encryption.

Every sensitive field is sealed on its own with AES-256-GCM into a
self-describing text envelope:

    v1:<nonce>:<tag>:<ciphertext>

nonce, tag and ciphertext are base64url without padding, so the envelope
can be stored or transported as-is.

Security Note:
    Never log plaintext or envelope values.
    Nonces are random 96-bit from os.urandom, drawn fresh on every call;
    collision probability is negligible under normal usage.
    Every open() failure raises the same DecryptError, a wrong key is
    indistinguishable from corrupted data.
"""
import os
import base64
import binascii
import logging

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..exceptions import DecryptError, MissingKeyMaterialError

logger = logging.getLogger("vault")

ENVELOPE_VERSION = "v1"
NONCE_SIZE = 12  # 96-bit nonce
TAG_SIZE = 16  # GCM tag
KEY_LENGTH = 32  # AES-256
_SEPARATOR = ":"


# ---------------------------------------------------------------------------
# base64url helpers
# ---------------------------------------------------------------------------

def b64url_encode(data: bytes) -> str:
    """Encode bytes as unpadded base64url text."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(text: str) -> bytes:
    """Decode canonical unpadded base64url text.

    Only the exact output of :func:`b64url_encode` is accepted, so two
    different strings never decode to the same bytes.

    Raises:
        ValueError: If text contains characters outside the URL-safe
            alphabet, carries padding, or is not canonically encoded.
    """
    if not isinstance(text, str):
        raise ValueError("base64url input must be text")
    raw = text.encode("ascii", errors="strict")
    if b"+" in raw or b"/" in raw or b"=" in raw:
        raise ValueError("not an unpadded base64url string")
    padding = -len(raw) % 4
    if padding == 3:
        raise ValueError("invalid base64url length")
    try:
        data = base64.b64decode(
            raw + b"=" * padding, altchars=b"-_", validate=True
        )
    except binascii.Error as err:
        raise ValueError(str(err)) from None
    if b64url_encode(data) != text:
        raise ValueError("non-canonical base64url encoding")
    return data


def _check_key(key: bytes) -> bytes:
    if not isinstance(key, (bytes, bytearray)) or len(key) != KEY_LENGTH:
        raise MissingKeyMaterialError(
            f"Encryption key must be exactly {KEY_LENGTH} bytes"
        )
    return bytes(key)


# ---------------------------------------------------------------------------
# Envelope sealing
# ---------------------------------------------------------------------------

def seal(plaintext: str, key: bytes) -> str:
    """Encrypt one field value into a v1 envelope.

    Args:
        plaintext: Text to protect (any length, including empty).
        key: Raw 32-byte encryption key.

    Returns:
        Envelope string ``v1:<nonce>:<tag>:<ciphertext>``.

    Raises:
        MissingKeyMaterialError: If key is not 32 bytes.
    """
    cipher = AESGCM(_check_key(key))
    nonce = os.urandom(NONCE_SIZE)
    sealed = cipher.encrypt(nonce, plaintext.encode("utf-8"), None)
    # cryptography appends the tag to the ciphertext
    ciphertext, tag = sealed[:-TAG_SIZE], sealed[-TAG_SIZE:]
    return _SEPARATOR.join((
        ENVELOPE_VERSION,
        b64url_encode(nonce),
        b64url_encode(tag),
        b64url_encode(ciphertext),
    ))


def open(envelope: str, key: bytes) -> str:  # noqa: A001
    """Decrypt a v1 envelope back to its plaintext.

    Args:
        envelope: Value produced by :func:`seal`.
        key: Raw 32-byte encryption key.

    Returns:
        Original plaintext.

    Raises:
        DecryptError: Unknown version, missing fields, bad encoding,
            wrong key or tampered data. The cause is never reported.
        MissingKeyMaterialError: If key is not 32 bytes.
    """
    cipher = AESGCM(_check_key(key))
    if not isinstance(envelope, str):
        raise DecryptError()
    parts = envelope.split(_SEPARATOR)
    if len(parts) != 4:
        raise DecryptError()
    version, nonce_raw, tag_raw, ciphertext_raw = parts
    # empty ciphertext is legitimate for an empty plaintext
    if version != ENVELOPE_VERSION or not nonce_raw or not tag_raw:
        raise DecryptError()
    try:
        nonce = b64url_decode(nonce_raw)
        tag = b64url_decode(tag_raw)
        ciphertext = b64url_decode(ciphertext_raw)
    except ValueError:
        raise DecryptError() from None
    if len(nonce) != NONCE_SIZE or len(tag) != TAG_SIZE:
        raise DecryptError()
    try:
        plaintext = cipher.decrypt(nonce, ciphertext + tag, None)
        return plaintext.decode("utf-8")
    except (InvalidTag, UnicodeDecodeError):
        logger.debug("Envelope failed authentication")
        raise DecryptError() from None


class SecretCipher:
    """Seal and open field values under one injected key.

    The key is validated once at construction; the instance holds no
    other state and is safe to share across concurrent requests.
    """

    def __init__(self, key: bytes):
        self._key = _check_key(key)

    def __repr__(self) -> str:
        return f"<SecretCipher version={ENVELOPE_VERSION}>"

    def seal(self, plaintext: str) -> str:
        return seal(plaintext, self._key)

    def open(self, envelope: str) -> str:
        return open(envelope, self._key)
