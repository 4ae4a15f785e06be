"""
Master password hashing.

bcrypt with a fixed cost factor. The salt travels inside the ``$2b$``
digest, so verification needs nothing but the stored string.

bcrypt only reads the first 72 bytes of its input; passwords are first
reduced to base64(SHA-256(password)) so long passphrases are not
silently truncated.

Security Note:
    Never log, echo or truncate the raw password.
"""
import asyncio
import base64
import hashlib
import logging

import bcrypt

logger = logging.getLogger("vault")

DEFAULT_ROUNDS = 12


def _prehash(password: str) -> bytes:
    digest = hashlib.sha256(password.encode("utf-8")).digest()
    return base64.b64encode(digest)


class PasswordHasher:
    """Salted, adaptive one-way hashing for the vault login password.

    ``hash`` and ``verify`` are coroutines running bcrypt in the default
    executor, keeping the event loop free during the CPU-bound work.
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        if not 4 <= rounds <= 31:
            raise ValueError(f"bcrypt rounds must be between 4 and 31, got {rounds}")
        self.rounds = rounds

    def hash_sync(self, password: str) -> str:
        digest = bcrypt.hashpw(_prehash(password), bcrypt.gensalt(rounds=self.rounds))
        return digest.decode("ascii")

    def verify_sync(self, password: str, digest: str) -> bool:
        """Check password against digest; any mismatch or bad digest is False."""
        if not isinstance(password, str) or not isinstance(digest, str):
            return False
        try:
            return bcrypt.checkpw(_prehash(password), digest.encode("ascii"))
        except (ValueError, UnicodeEncodeError):
            # malformed digest or a different algorithm
            logger.debug("Password digest is not a bcrypt hash")
            return False

    async def hash(self, password: str) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.hash_sync, password)

    async def verify(self, password: str, digest: str) -> bool:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.verify_sync, password, digest)
