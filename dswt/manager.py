"""
DSWT Token Manager - Issues and verifies tokens for a single key.

A manager owns exactly one (algorithm, key) pair for its whole lifetime.
It has no mutable state, so one instance can be shared freely between
threads. Rotating the key means building a new manager (see
``dswt.rotation.KeyRotator``).
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Tuple

from dswt.algorithms import Algorithm
from dswt.codec import FORMAT_VERSION, parse
from dswt.errors import VerificationFailed
from dswt.keys import generate_secret, key_id
from dswt.payload import PayloadItem
from dswt.token import KeyLike, Token, coerce_key

logger = logging.getLogger(__name__)


class TokenManager:
    """
    Creates and validates tokens with one key and algorithm.

    Example:
        >>> manager = TokenManager(b"your_key")
        >>> token = manager.issue({"sub": "alice", "role": "admin"})
        >>> manager.verify(token)
        True
        >>> manager.decode(token.to_wire()).payload
        {'role': 'admin', 'sub': 'alice'}
    """

    __slots__ = ("_version", "_algorithm", "_key", "_key_id")

    def __init__(self, key: KeyLike, algorithm: Algorithm = Algorithm.HS256):
        """
        Initialize the manager.

        Args:
            key: Secret key, bytes or str (UTF-8 encoded).
            algorithm: Algorithm used for every token this manager issues.

        Raises:
            ValueError: If the key is empty.
            TypeError: If the key is neither bytes nor str.
        """
        if not isinstance(algorithm, Algorithm):
            raise TypeError(f"algorithm must be an Algorithm, got {type(algorithm).__name__}")
        self._version = FORMAT_VERSION
        self._algorithm = algorithm
        self._key = coerce_key(key)
        self._key_id = key_id(self._key)

    @classmethod
    def generate(cls, algorithm: Algorithm = Algorithm.HS256) -> Tuple["TokenManager", bytes]:
        """
        Build a manager around a freshly generated 256-bit key.

        Returns:
            The manager and its key. The key is not stored anywhere else;
            keep it if tokens must outlive this manager.
        """
        secret = generate_secret()
        logger.info(f"Generated new signing key {secret.key_id}")
        return cls(secret.key, algorithm), secret.key

    @property
    def version(self) -> int:
        return self._version

    @property
    def algorithm(self) -> Algorithm:
        return self._algorithm

    @property
    def key_id(self) -> str:
        """Thumbprint of the signing key, safe for logs and headers."""
        return self._key_id

    def issue(self, payload: Mapping[str, Any] | Iterable[PayloadItem]) -> Token:
        """
        Sign a payload and return the token.

        Raises:
            InvalidPayloadField: If a key or value contains a reserved
                delimiter, or a key is empty.
        """
        token = Token.new(self._algorithm, payload, self._key)
        logger.debug(
            f"Issued {self._algorithm} token with {len(token.items)} entries (kid={self._key_id})"
        )
        return token

    def verify(self, token: Token) -> bool:
        """
        Check that ``token`` was signed with this manager's key.

        A token naming a different algorithm than this manager's is rejected
        rather than checked under the algorithm it names.
        """
        if token.algorithm is not self._algorithm:
            logger.warning(
                f"Rejected token signed with {token.algorithm}, expected {self._algorithm}"
            )
            return False

        valid = token.verify(self._key)
        if not valid:
            logger.debug(f"Token tag mismatch (kid={self._key_id})")
        return valid

    def verify_or_raise(self, token: Token) -> Token:
        """
        Like ``verify`` but raise on failure.

        Raises:
            VerificationFailed: If the token is not authentic.
        """
        if not self.verify(token):
            raise VerificationFailed()
        return token

    def decode(self, wire: str) -> Token:
        """
        Parse a wire string and verify it in one step.

        Raises:
            MalformedToken: If the string is not a valid token.
            UnknownAlgorithm: If the header names an unregistered algorithm.
            VerificationFailed: If the tag does not match.
        """
        return self.verify_or_raise(parse(wire))

    def __repr__(self) -> str:
        return f"TokenManager(algorithm={self._algorithm}, kid={self._key_id!r})"
