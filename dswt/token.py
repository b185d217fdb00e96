"""
DSWT Token - The signed, immutable token entity.

A Token holds its header, its payload items in canonical order, and the
base64 tag computed over them. It never holds the key that produced the tag.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from dswt import codec
from dswt.algorithms import Algorithm
from dswt.codec import Header
from dswt.payload import PayloadItem

logger = logging.getLogger(__name__)

KeyLike = Union[bytes, str]


def coerce_key(key: KeyLike) -> bytes:
    """Normalize a caller-supplied key to bytes (str keys are UTF-8)."""
    if isinstance(key, str):
        key = key.encode("utf-8")
    if not isinstance(key, (bytes, bytearray)):
        raise TypeError(f"Key must be bytes or str, got {type(key).__name__}")
    if not key:
        raise ValueError("Signing key must not be empty")
    return bytes(key)


@dataclass(frozen=True)
class Token:
    """
    A DSWT token.

    Create tokens with ``Token.new`` (or ``TokenManager.issue``) and read them
    back with ``Token.parse``. Parsed tokens are unverified until checked with
    a key.

    Example:
        >>> token = Token.new(Algorithm.HS256, {"sub": "alice"}, b"secret")
        >>> wire = token.to_wire()
        >>> Token.parse(wire) == token
        True
        >>> Token.parse(wire).verify(b"secret")
        True
    """

    header: Header
    items: Tuple[PayloadItem, ...]
    tag: str

    @classmethod
    def new(
        cls,
        algorithm: Algorithm,
        payload: Mapping[str, Any] | Iterable[PayloadItem],
        key: KeyLike,
    ) -> "Token":
        """
        Build and sign a token with the current format version.

        Args:
            algorithm: Algorithm used to compute the tag.
            payload: Mapping of key to value, or an iterable of PayloadItem.
            key: Secret key (bytes, or str encoded as UTF-8).

        Raises:
            InvalidPayloadField: If any payload entry is invalid.
        """
        header = Header(version=codec.FORMAT_VERSION, algorithm=algorithm)
        items = codec.canonical_items(payload)
        tag_bytes = algorithm.sign(codec.signing_input(header, items), coerce_key(key))
        return cls(header=header, items=items, tag=codec.b64encode(tag_bytes))

    @classmethod
    def parse(cls, wire: str) -> "Token":
        """Parse a wire string into an unverified token."""
        return codec.parse(wire)

    @property
    def version(self) -> int:
        return self.header.version

    @property
    def algorithm(self) -> Algorithm:
        return self.header.algorithm

    @property
    def payload(self) -> Dict[str, str]:
        """Payload as a plain key to string mapping, in canonical order."""
        return {item.key: item.value for item in self.items}

    def claims(self) -> Dict[str, Any]:
        """Payload with values converted according to their type hints."""
        return {item.key: item.to_python() for item in self.items}

    def get(self, key: str) -> Optional[PayloadItem]:
        """Return the payload item named ``key``, or None."""
        for item in self.items:
            if item.key == key:
                return item
        return None

    def signing_input(self) -> bytes:
        """Canonical bytes covered by the tag."""
        return codec.signing_input(self.header, self.items)

    def compute_tag(self, key: KeyLike) -> str:
        """Recompute the base64 tag for this token's fields under ``key``."""
        tag_bytes = self.algorithm.sign(self.signing_input(), coerce_key(key))
        return codec.b64encode(tag_bytes)

    def verify(self, key: KeyLike) -> bool:
        """
        Check the stored tag against ``key`` in constant time.

        Returns False for a wrong key or a tampered token; never raises for a
        well-formed token.
        """
        try:
            presented = base64.b64decode(self.tag.encode("ascii"), validate=True)
        except (binascii.Error, UnicodeEncodeError):
            logger.debug("Token tag is not valid base64")
            return False
        return self.algorithm.verify(self.signing_input(), coerce_key(key), presented)

    def to_wire(self) -> str:
        """Serialize to ``header;payload;tag``."""
        return codec.serialize(self.header, self.items, self.tag)

    def __str__(self) -> str:
        return self.to_wire()
