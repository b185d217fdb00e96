"""
DSWT Payload Items - Validated key/value entries of a token payload.

An entry is written as ``key=value`` or, when it carries a type hint,
``key:type=value``. The type is metadata only: it never changes how the
entry is hashed, it only tells the reader how to interpret the value.
"""

import re
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from dswt.errors import InvalidPayloadField

# Characters that split the wire format into parts, entries and key/value.
RESERVED_CHARS = frozenset(";,=")

# ':' separates the key from its type hint, so keys may not contain it.
RESERVED_KEY_CHARS = RESERVED_CHARS | {":"}

_INT_RE = re.compile(r"-?[0-9]+")

# Renderings produced by repr(float)
_FLOAT_RE = re.compile(r"-?(?:[0-9]+\.[0-9]+|[0-9]+)(?:e[+-][0-9]+)?|-?inf|nan")


class PayloadType(Enum):
    """Type hints an entry may carry."""

    UUID = "uuid"
    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"

    def __str__(self) -> str:
        return self.value


def _check_rendering(value: str, value_type: PayloadType) -> bool:
    if value_type is PayloadType.STRING:
        return True
    if value_type is PayloadType.BOOL:
        return value in ("true", "false")
    if value_type is PayloadType.INT:
        return _INT_RE.fullmatch(value) is not None
    if value_type is PayloadType.FLOAT:
        return _FLOAT_RE.fullmatch(value) is not None
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


@dataclass(frozen=True)
class PayloadItem:
    """
    A single payload entry.

    Attributes:
        key: Non-empty entry name, free of ``; , = :``.
        value: Entry value rendered as text, free of ``; , =``.
        type: Optional type hint describing how ``value`` should be read.

    Raises:
        InvalidPayloadField: If the key or value would make the encoding
            ambiguous, or the value does not match its type hint.
    """

    key: str
    value: str
    type: Optional[PayloadType] = None

    def __post_init__(self):
        if not isinstance(self.key, str) or not self.key:
            raise InvalidPayloadField("Payload keys must be non-empty strings")
        if not isinstance(self.value, str):
            raise InvalidPayloadField(f"Value for {self.key!r} must be a string")

        for field_name, text in (("Key", self.key), ("Value", self.value)):
            try:
                text.encode("utf-8")
            except UnicodeEncodeError:
                raise InvalidPayloadField(f"{field_name} {text!r} is not valid UTF-8 text") from None

        bad = RESERVED_KEY_CHARS.intersection(self.key)
        if bad:
            raise InvalidPayloadField(
                f"Key {self.key!r} contains reserved characters: {''.join(sorted(bad))}"
            )

        bad = RESERVED_CHARS.intersection(self.value)
        if bad:
            raise InvalidPayloadField(
                f"Value for {self.key!r} contains reserved characters: {''.join(sorted(bad))}"
            )

        if self.type is not None and not _check_rendering(self.value, self.type):
            raise InvalidPayloadField(
                f"Value {self.value!r} for {self.key!r} is not a valid {self.type}"
            )

    @classmethod
    def from_value(cls, key: str, value: Any) -> "PayloadItem":
        """
        Build an item from a Python value, inferring its type hint.

        Plain strings produce untyped entries. ``bool``, ``int``, ``float``
        and ``uuid.UUID`` values are rendered and tagged with their type.
        """
        if isinstance(value, PayloadItem):
            if value.key != key:
                raise InvalidPayloadField(
                    f"Item key {value.key!r} does not match mapping key {key!r}"
                )
            return value
        if isinstance(value, str):
            return cls(key, value)
        # bool is a subclass of int, check it first
        if isinstance(value, bool):
            return cls(key, "true" if value else "false", PayloadType.BOOL)
        if isinstance(value, int):
            return cls(key, str(value), PayloadType.INT)
        if isinstance(value, float):
            return cls(key, repr(value), PayloadType.FLOAT)
        if isinstance(value, uuid.UUID):
            return cls(key, str(value), PayloadType.UUID)
        raise InvalidPayloadField(
            f"Unsupported value type for {key!r}: {type(value).__name__}"
        )

    @classmethod
    def decode(cls, entry: str) -> "PayloadItem":
        """
        Parse a single ``key=value`` or ``key:type=value`` entry.

        The entry is split on the first ``=``; a ``:`` before it separates
        the key from the type hint.

        Raises:
            InvalidPayloadField: If the entry has no ``=``, names an unknown
                type, or fails the usual field checks.
        """
        name, sep, value = entry.partition("=")
        if not sep:
            raise InvalidPayloadField(f"Entry has no '=': {entry!r}")

        value_type = None
        if ":" in name:
            name, _, type_name = name.partition(":")
            try:
                value_type = PayloadType(type_name)
            except ValueError:
                raise InvalidPayloadField(
                    f"Unknown type {type_name!r} for {name!r}"
                ) from None

        return cls(name, value, value_type)

    def to_python(self) -> Any:
        """Convert the value back according to its type hint."""
        if self.type is None or self.type is PayloadType.STRING:
            return self.value
        if self.type is PayloadType.BOOL:
            return self.value == "true"
        if self.type is PayloadType.INT:
            return int(self.value)
        if self.type is PayloadType.FLOAT:
            return float(self.value)
        return uuid.UUID(self.value)

    def encode(self) -> str:
        """Render the entry as it appears in the payload plaintext."""
        if self.type is None:
            return f"{self.key}={self.value}"
        return f"{self.key}:{self.type}={self.value}"

    def __str__(self) -> str:
        return self.encode()
