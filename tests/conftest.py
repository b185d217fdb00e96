"""
Shared pytest fixtures for DSWT tests.
"""

import pytest

from dswt import Algorithm, Token, TokenManager, generate_secret, SecretKey


@pytest.fixture
def key() -> bytes:
    """A fixed signing key."""
    return b"k"


@pytest.fixture
def manager(key: bytes) -> TokenManager:
    """TokenManager using the fixed key."""
    return TokenManager(key, Algorithm.HS256)


@pytest.fixture
def secret() -> SecretKey:
    """A freshly generated random key."""
    return generate_secret()


@pytest.fixture
def sample_payload() -> dict:
    """Sample payload for signing tests."""
    return {"sub": "alice", "role": "admin"}


@pytest.fixture
def token(manager: TokenManager, sample_payload: dict) -> Token:
    """A token issued from the sample payload."""
    return manager.issue(sample_payload)
