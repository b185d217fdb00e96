"""
DSWT Canonical Codec - Wire grammar and signing input.

A token on the wire is three base64 parts joined by ``;``::

    B64("DSWT-<version>/<alg>") ; B64("k1=v1,k2:int=2,...") ; B64(tag)

Payload entries are always written in ascending key order. That ordering is
what makes two serializations of the same payload byte-identical, and
therefore makes the tag deterministic.

The codec never verifies a tag; it only builds and splits the bytes.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from dataclasses import dataclass
from collections.abc import Mapping
from typing import Any, Iterable, List, Tuple, TYPE_CHECKING

from dswt.algorithms import Algorithm
from dswt.errors import InvalidPayloadField, MalformedToken
from dswt.payload import PayloadItem

if TYPE_CHECKING:
    from dswt.token import Token

logger = logging.getLogger(__name__)

# Current wire-format revision
FORMAT_VERSION = 1
MAX_VERSION = 255

HEADER_PREFIX = "DSWT-"
PART_SEPARATOR = ";"
ENTRY_SEPARATOR = ","

# Decimal without leading zeros, so every accepted header re-encodes to itself
_VERSION_RE = re.compile(r"0|[1-9][0-9]*")


@dataclass(frozen=True)
class Header:
    """Token header: wire-format version and signing algorithm."""

    version: int = FORMAT_VERSION
    algorithm: Algorithm = Algorithm.HS256

    def __post_init__(self):
        if not 0 <= self.version <= MAX_VERSION:
            raise ValueError(f"Header version must be in 0..{MAX_VERSION}, got {self.version}")

    def encode(self) -> str:
        return f"{HEADER_PREFIX}{self.version}/{self.algorithm}"


# =============================================================================
# Base64 framing
# =============================================================================


def b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def b64decode(part: str, what: str) -> bytes:
    """
    Strictly decode a standard, padded base64 part.

    Only the canonical encoding is accepted, so every accepted part
    re-encodes to itself.
    """
    try:
        raw = base64.b64decode(part.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise MalformedToken(f"Invalid base64 in {what}: {e}") from None
    if b64encode(raw) != part:
        raise MalformedToken(f"Non-canonical base64 in {what}")
    return raw


def _decode_text(part: str, what: str) -> str:
    raw = b64decode(part, what)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        raise MalformedToken(f"{what.capitalize()} is not valid UTF-8") from None


# =============================================================================
# Payload
# =============================================================================


def canonical_items(payload: Mapping[str, Any] | Iterable[PayloadItem]) -> Tuple[PayloadItem, ...]:
    """
    Validate a payload and return its items in canonical (sorted) order.

    Accepts either a mapping of keys to values (strings, typed Python values
    or PayloadItem instances) or an iterable of PayloadItem.

    Raises:
        InvalidPayloadField: If any entry is invalid or a key repeats.
    """
    if isinstance(payload, Mapping):
        items = [PayloadItem.from_value(key, value) for key, value in payload.items()]
    else:
        items = list(payload)
        for item in items:
            if not isinstance(item, PayloadItem):
                raise InvalidPayloadField(f"Expected PayloadItem, got {type(item).__name__}")

    items.sort(key=lambda item: item.key)
    for previous, current in zip(items, items[1:]):
        if previous.key == current.key:
            raise InvalidPayloadField(f"Duplicate payload key: {current.key!r}")
    return tuple(items)


def encode_payload(items: Iterable[PayloadItem]) -> str:
    """Join already-canonical items into the payload plaintext."""
    return ENTRY_SEPARATOR.join(item.encode() for item in items)


def _decode_entry(entry: str) -> PayloadItem:
    try:
        return PayloadItem.decode(entry)
    except InvalidPayloadField as e:
        raise MalformedToken(f"Invalid payload entry: {e}") from None


def decode_payload(text: str) -> Tuple[PayloadItem, ...]:
    """
    Split payload plaintext into items.

    Raises:
        MalformedToken: If an entry is unparseable, or the entries are not in
            strictly ascending key order.
    """
    if not text:
        return ()

    items = tuple(_decode_entry(entry) for entry in text.split(ENTRY_SEPARATOR))
    for previous, current in zip(items, items[1:]):
        if previous.key >= current.key:
            raise MalformedToken(
                f"Payload entries not in canonical order at {current.key!r}"
            )
    return items


# =============================================================================
# Header
# =============================================================================


def decode_header(text: str) -> Header:
    """
    Parse header plaintext of the form ``DSWT-<version>/<alg>``.

    Raises:
        MalformedToken: If the prefix or version is wrong.
        UnknownAlgorithm: If the algorithm is not registered.
    """
    segments = text.split("/")
    if len(segments) != 2:
        raise MalformedToken(f"Header must have exactly one '/': {text!r}")

    marker, alg_name = segments
    if not marker.startswith(HEADER_PREFIX):
        raise MalformedToken(f"Header must start with {HEADER_PREFIX!r}: {text!r}")

    version_text = marker[len(HEADER_PREFIX):]
    if not _VERSION_RE.fullmatch(version_text):
        raise MalformedToken(
            f"Header version is not a canonical decimal number: {version_text!r}"
        )
    version = int(version_text)
    if version > MAX_VERSION:
        raise MalformedToken(f"Header version out of range: {version}")

    return Header(version=version, algorithm=Algorithm.from_name(alg_name))


# =============================================================================
# Whole token
# =============================================================================


def signing_input(header: Header, items: Iterable[PayloadItem]) -> bytes:
    """Return the canonical bytes the tag is computed over."""
    header_b64 = b64encode(header.encode().encode("utf-8"))
    payload_b64 = b64encode(encode_payload(items).encode("utf-8"))
    return f"{header_b64}{PART_SEPARATOR}{payload_b64}".encode("ascii")


def serialize(header: Header, items: Iterable[PayloadItem], tag: str) -> str:
    """Render the full wire string."""
    return f"{signing_input(header, items).decode('ascii')}{PART_SEPARATOR}{tag}"


def split(wire: str) -> Tuple[Header, Tuple[PayloadItem, ...], str]:
    """
    Split a wire string into header, items and the tag string.

    Raises:
        MalformedToken: If the string does not follow the grammar.
        UnknownAlgorithm: If the header names an unregistered algorithm.
    """
    if not isinstance(wire, str):
        raise MalformedToken(f"Token must be a string, got {type(wire).__name__}")

    parts: List[str] = wire.split(PART_SEPARATOR)
    if len(parts) != 3:
        raise MalformedToken(f"Token must have 3 parts, found {len(parts)}")

    header_b64, payload_b64, tag = parts
    header = decode_header(_decode_text(header_b64, "header"))
    items = decode_payload(_decode_text(payload_b64, "payload"))
    if not tag:
        raise MalformedToken("Token tag is empty")
    b64decode(tag, "tag")

    return header, items, tag


def parse(wire: str) -> "Token":
    """
    Parse a wire string into an unverified Token.

    The result still has to be checked with a key, see
    ``TokenManager.verify``.
    """
    from dswt.token import Token

    header, items, tag = split(wire)
    logger.debug(f"Parsed token header {header.encode()} with {len(items)} entries")
    return Token(header=header, items=items, tag=tag)
