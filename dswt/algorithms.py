"""
DSWT Algorithm Registry - Keyed hash algorithms usable for token tags.

Each algorithm has a canonical short name that appears in the token header.
Signing and verification go through the ``cryptography`` HMAC primitive, whose
``verify`` compares tags in constant time.
"""

from enum import Enum
from typing import Dict, Type

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac

from dswt.errors import UnknownAlgorithm


class Algorithm(Enum):
    """
    Signing algorithms supported in DSWT headers.

    Example:
        >>> alg = Algorithm.from_name("HS256")
        >>> tag = alg.sign(b"data", b"secret")
        >>> alg.verify(b"data", b"secret", tag)
        True
    """

    HS256 = "HS256"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def default(cls) -> "Algorithm":
        """Return the algorithm used when none is requested."""
        return cls.HS256

    @classmethod
    def from_name(cls, name: str) -> "Algorithm":
        """
        Look up an algorithm by its header name.

        Raises:
            UnknownAlgorithm: If the name is not registered.
        """
        try:
            return cls(name)
        except ValueError:
            raise UnknownAlgorithm(name) from None

    def _mac(self, key: bytes) -> hmac.HMAC:
        return hmac.HMAC(key, _HASHES[self]())

    def sign(self, data: bytes, key: bytes) -> bytes:
        """Compute the raw tag bytes for ``data`` under ``key``."""
        mac = self._mac(key)
        mac.update(data)
        return mac.finalize()

    def verify(self, data: bytes, key: bytes, tag: bytes) -> bool:
        """Check ``tag`` against ``data`` under ``key`` in constant time."""
        mac = self._mac(key)
        mac.update(data)
        try:
            mac.verify(tag)
        except InvalidSignature:
            return False
        return True


_HASHES: Dict[Algorithm, Type[hashes.HashAlgorithm]] = {
    Algorithm.HS256: hashes.SHA256,
}
