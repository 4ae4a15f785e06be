"""
VaultAuthGate — the single "is this request authorized" decision.

States:
    Uninitialized        no credential holder exists
    Initialized          a holder exists; a caller is logged in when it
                         presents a token the gate accepts

Every failed check produces the same outcome (None, or
UnauthorizedError from :meth:`VaultAuthGate.require`); which sub-check
failed is only visible in debug logs.
"""
import logging
from dataclasses import dataclass

from .config import VaultConfig
from .passwords import PasswordHasher
from .store import CredentialStore, MasterCredential
from .tokens import SessionTokenCodec
from ..exceptions import (
    AlreadyInitializedError,
    UnauthorizedError,
    WeakPasswordError,
)

logger = logging.getLogger("vault")

MIN_PASSWORD_LENGTH = 8


@dataclass(frozen=True)
class AuthState:
    initialized: bool
    logged_in: bool


class VaultAuthGate:
    """Compose hashing, tokens and the credential store.

    Args:
        store: Credential repository; arbiter of initialization.
        hasher: Password hasher for the master password.
        codec: Session token codec.
        max_age: Optional token age ceiling in seconds, None for no limit.
    """

    def __init__(
        self,
        store: CredentialStore,
        hasher: PasswordHasher,
        codec: SessionTokenCodec,
        max_age: int | None = None,
    ):
        self.store = store
        self.hasher = hasher
        self.codec = codec
        self.max_age = max_age

    @classmethod
    def from_config(cls, config: VaultConfig, store: CredentialStore) -> "VaultAuthGate":
        return cls(
            store=store,
            hasher=config.hasher(),
            codec=config.codec(),
            max_age=config.session_max_age,
        )

    async def is_initialized(self) -> bool:
        return await self.store.exists()

    async def initialize(self, password: str) -> str:
        """Create the credential holder and log it in.

        Args:
            password: Master password; surrounding whitespace is ignored.

        Returns:
            A session token for the new credential holder.

        Raises:
            AlreadyInitializedError: If a credential holder already exists,
                whatever the password.
            WeakPasswordError: If the password is shorter than 8 characters.
        """
        if await self.store.exists():
            raise AlreadyInitializedError()
        password = (password or "").strip()
        if len(password) < MIN_PASSWORD_LENGTH:
            raise WeakPasswordError()
        digest = await self.hasher.hash(password)
        credential = await self.store.create_if_absent(digest)
        if credential is None:
            raise AlreadyInitializedError()
        logger.info("Vault initialized: credential id=%s", credential.id)
        return self.codec.encode(credential.id)

    async def login(self, password: str) -> str | None:
        """Verify the master password and issue a session token.

        Returns:
            A fresh token, or None when the vault is uninitialized or the
            password is wrong.
        """
        credential = await self.store.first()
        if credential is None:
            logger.debug("Login attempted on an uninitialized vault")
            return None
        if not await self.hasher.verify(password or "", credential.password_hash):
            logger.info("Login failed for credential id=%s", credential.id)
            return None
        logger.info("Login succeeded for credential id=%s", credential.id)
        return self.codec.encode(credential.id)

    async def authorize(self, token: str | None) -> MasterCredential | None:
        """Return the credential holder a token belongs to, or None.

        The subject lookup is the only store access; before setup it finds
        nobody, which also covers the uninitialized state.
        """
        if not token:
            logger.debug("Authorization refused: no session token")
            return None
        claims = self.codec.decode(token, max_age=self.max_age)
        if claims is None:
            logger.debug("Authorization refused: token rejected")
            return None
        credential = await self.store.find_by_id(claims.subject_id)
        if credential is None:
            logger.debug(
                "Authorization refused: subject %s no longer exists",
                claims.subject_id,
            )
            return None
        return credential

    async def require(self, token: str | None) -> MasterCredential:
        credential = await self.authorize(token)
        if credential is None:
            raise UnauthorizedError()
        return credential

    async def state(self, token: str | None) -> AuthState:
        credential = await self.authorize(token)
        if credential is not None:
            return AuthState(initialized=True, logged_in=True)
        return AuthState(initialized=await self.store.exists(), logged_in=False)

    def logout(self) -> None:
        """Tokens are stateless: logout is the client discarding its copy.

        Already-issued tokens stay valid until they age out.
        """
        logger.debug("Logout requested; client token will be cleared")
