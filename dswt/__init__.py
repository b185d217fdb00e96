"""
DSWT - Delimiter-Separated Web Tokens.

A compact signed token format: a versioned header, a key/value payload and a
keyed-hash tag, each base64 encoded and joined by semicolons::

    B64("DSWT-1/HS256");B64("role=admin,sub=alice");B64(tag)

Example:
    >>> from dswt import TokenManager, parse
    >>> manager = TokenManager(b"your_key")
    >>> wire = manager.issue({"sub": "alice", "role": "admin"}).to_wire()
    >>> manager.verify(parse(wire))
    True
"""

__version__ = "1.0.0"

from .errors import (
    DSWTError,
    InvalidPayloadField,
    MalformedToken,
    UnknownAlgorithm,
    VerificationFailed,
)
from .algorithms import Algorithm
from .payload import PayloadItem, PayloadType
from .codec import FORMAT_VERSION, Header, parse
from .token import Token
from .manager import TokenManager
from .keys import SecretKey, generate_secret, load_secret
from .rotation import KeyRotator

# Current wire-format version
VERSION = FORMAT_VERSION

__all__ = [
    "__version__",
    "VERSION",
    # Core
    "Algorithm",
    "Header",
    "PayloadItem",
    "PayloadType",
    "Token",
    "TokenManager",
    "parse",
    # Key management
    "SecretKey",
    "generate_secret",
    "load_secret",
    "KeyRotator",
    # Errors
    "DSWTError",
    "InvalidPayloadField",
    "MalformedToken",
    "UnknownAlgorithm",
    "VerificationFailed",
]
