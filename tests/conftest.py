"""
Shared fixtures for the vault core tests.
"""
import os
import logging

import pytest

from account_vault.vault.config import VaultConfig
from account_vault.vault.crypto import SecretCipher
from account_vault.vault.gate import VaultAuthGate
from account_vault.vault.store import MemoryCredentialStore
from account_vault.vault.tokens import SessionTokenCodec

logging.basicConfig(level=logging.DEBUG)


@pytest.fixture
def key() -> bytes:
    """A fresh 32-byte encryption key."""
    return os.urandom(32)


@pytest.fixture
def signing_secret() -> str:
    return "test-signing-secret-not-the-encryption-key"


@pytest.fixture
def config(key, signing_secret) -> VaultConfig:
    """Config with the cheapest bcrypt cost to keep tests fast."""
    return VaultConfig(
        encryption_key=key,
        signing_secret=signing_secret,
        bcrypt_rounds=4,
    )


@pytest.fixture
def cipher(key) -> SecretCipher:
    return SecretCipher(key)


@pytest.fixture
def codec(signing_secret) -> SessionTokenCodec:
    return SessionTokenCodec(signing_secret)


@pytest.fixture
def store() -> MemoryCredentialStore:
    return MemoryCredentialStore()


@pytest.fixture
def gate(config, store) -> VaultAuthGate:
    return VaultAuthGate.from_config(config, store)
