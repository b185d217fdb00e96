"""
Unit tests for the canonical codec.
"""

import base64

import pytest

from dswt import (
    Algorithm,
    Header,
    InvalidPayloadField,
    MalformedToken,
    PayloadItem,
    PayloadType,
    UnknownAlgorithm,
    parse,
)
from dswt import codec


def b64(text) -> str:
    if isinstance(text, str):
        text = text.encode("utf-8")
    return base64.b64encode(text).decode("ascii")


TAG = b64(b"\x00" * 32)
NON_UTF8_PAYLOAD = b64(b"a=\xff")


def wire(header: str, payload: str, tag: str = TAG) -> str:
    return f"{b64(header)};{b64(payload)};{tag}"


class TestHeader:
    """Tests for header encoding and decoding."""

    def test_default_header(self):
        header = Header()
        assert header.version == codec.FORMAT_VERSION == 1
        assert header.algorithm is Algorithm.HS256

    def test_encode(self):
        assert Header(1, Algorithm.HS256).encode() == "DSWT-1/HS256"

    def test_decode(self):
        assert codec.decode_header("DSWT-1/HS256") == Header(1, Algorithm.HS256)

    def test_decode_other_version(self):
        """Any version in range is accepted by the parser."""
        assert codec.decode_header("DSWT-7/HS256").version == 7

    def test_decode_version_zero(self):
        assert codec.decode_header("DSWT-0/HS256").version == 0

    @pytest.mark.parametrize("text", ["DSWT-0/HS256", "DSWT-1/HS256", "DSWT-255/HS256"])
    def test_decoded_header_encodes_to_same_text(self, text):
        assert codec.decode_header(text).encode() == text

    def test_version_out_of_range(self):
        with pytest.raises(ValueError):
            Header(256, Algorithm.HS256)
        with pytest.raises(MalformedToken, match="out of range"):
            codec.decode_header("DSWT-300/HS256")

    @pytest.mark.parametrize(
        "text",
        [
            "DSWT/HS256",
            "DSWT-/HS256",
            "DSWT-x/HS256",
            "DSWT--1/HS256",
            "DSWT-01/HS256",
            "DSWT-001/HS256",
            "DSWT-+1/HS256",
            "DSWT- 1/HS256",
            "DSWT-1",
            "DSWT-1/HS256/extra",
            "CWT-1/HS256",
            "",
        ],
    )
    def test_decode_malformed(self, text):
        with pytest.raises(MalformedToken):
            codec.decode_header(text)

    def test_decode_unknown_algorithm(self):
        """An unregistered algorithm never falls back to the default."""
        with pytest.raises(UnknownAlgorithm):
            codec.decode_header("DSWT-1/none")


class TestCanonicalItems:
    """Tests for payload canonicalization."""

    def test_sorted_by_key(self):
        items = codec.canonical_items({"sub": "alice", "role": "admin", "aud": "api"})
        assert [item.key for item in items] == ["aud", "role", "sub"]

    def test_insertion_order_irrelevant(self):
        first = codec.canonical_items({"b": "2", "a": "1", "c": "3"})
        second = codec.canonical_items({"c": "3", "a": "1", "b": "2"})
        assert first == second

    def test_items_iterable(self):
        items = codec.canonical_items([PayloadItem("b", "2"), PayloadItem("a", "1")])
        assert [item.key for item in items] == ["a", "b"]

    def test_duplicate_items_rejected(self):
        with pytest.raises(InvalidPayloadField, match="Duplicate"):
            codec.canonical_items([PayloadItem("a", "1"), PayloadItem("a", "2")])

    def test_non_item_rejected(self):
        with pytest.raises(InvalidPayloadField):
            codec.canonical_items([("a", "1")])

    def test_encode_payload(self):
        items = codec.canonical_items({"sub": "alice", "role": "admin", "age": 30})
        assert codec.encode_payload(items) == "age:int=30,role=admin,sub=alice"

    def test_empty_payload(self):
        assert codec.encode_payload(codec.canonical_items({})) == ""


class TestDecodePayload:
    """Tests for payload plaintext decoding."""

    def test_empty(self):
        assert codec.decode_payload("") == ()

    def test_entries(self):
        items = codec.decode_payload("age:int=30,role=admin")
        assert items == (
            PayloadItem("age", "30", PayloadType.INT),
            PayloadItem("role", "admin"),
        )

    def test_unsorted_rejected(self):
        with pytest.raises(MalformedToken, match="canonical order"):
            codec.decode_payload("sub=alice,role=admin")

    def test_duplicate_rejected(self):
        with pytest.raises(MalformedToken, match="canonical order"):
            codec.decode_payload("a=1,a=2")

    @pytest.mark.parametrize(
        "text", ["novalue", "a=1,", ",a=1", "a:weird=1", "a:int=x", "=1"]
    )
    def test_malformed_entries(self, text):
        with pytest.raises(MalformedToken):
            codec.decode_payload(text)


class TestSigningInput:
    """Tests for the bytes covered by the tag."""

    def test_layout(self):
        header = Header(1, Algorithm.HS256)
        items = codec.canonical_items({"sub": "alice", "role": "admin"})
        expected = f"{b64('DSWT-1/HS256')};{b64('role=admin,sub=alice')}".encode("ascii")
        assert codec.signing_input(header, items) == expected

    def test_header_b64_literal(self):
        assert b64("DSWT-1/HS256") == "RFNXVC0xL0hTMjU2"

    def test_serialize_appends_tag(self):
        header = Header()
        items = codec.canonical_items({"a": "1"})
        assert codec.serialize(header, items, TAG) == wire("DSWT-1/HS256", "a=1")


class TestParse:
    """Tests for parse()."""

    def test_parse_fields(self):
        token = parse(wire("DSWT-1/HS256", "role=admin,sub=alice"))
        assert token.header == Header(1, Algorithm.HS256)
        assert token.payload == {"role": "admin", "sub": "alice"}
        assert token.tag == TAG

    def test_parse_keeps_tag_as_is(self):
        tag = b64(b"anything-at-all")
        assert parse(wire("DSWT-1/HS256", "a=1", tag)).tag == tag

    def test_parse_empty_payload(self):
        assert parse(wire("DSWT-1/HS256", "")).items == ()

    def test_two_parts(self):
        """A wire string with only two parts is malformed."""
        with pytest.raises(MalformedToken, match="3 parts"):
            parse(f"{b64('DSWT-1/HS256')};{b64('a=1')}")

    def test_four_parts(self):
        with pytest.raises(MalformedToken, match="3 parts"):
            parse(wire("DSWT-1/HS256", "a=1") + ";extra")

    def test_empty_string(self):
        with pytest.raises(MalformedToken):
            parse("")

    def test_not_a_string(self):
        with pytest.raises(MalformedToken):
            parse(None)

    def test_invalid_base64(self):
        with pytest.raises(MalformedToken, match="base64"):
            parse(f"!!!!;{b64('a=1')};{TAG}")

    def test_unpadded_base64(self):
        header = b64("DSWT-1/HS256x").rstrip("=")
        with pytest.raises(MalformedToken):
            parse(f"{header};{b64('a=1')};{TAG}")

    def test_non_canonical_base64(self):
        """Base64 with non-zero trailing bits decodes but is rejected."""
        # "QQ==" is canonical for b"A"; "QR==" decodes to the same byte
        with pytest.raises(MalformedToken, match="Non-canonical"):
            parse(f"{b64('DSWT-1/HS256')};QR==;{TAG}")

    def test_non_utf8(self):
        with pytest.raises(MalformedToken, match="UTF-8"):
            parse(f"{b64('DSWT-1/HS256')};{NON_UTF8_PAYLOAD};{TAG}")

    def test_invalid_tag(self):
        with pytest.raises(MalformedToken, match="tag"):
            parse(f"{b64('DSWT-1/HS256')};{b64('a=1')};not base64")

    def test_empty_tag(self):
        with pytest.raises(MalformedToken, match="empty"):
            parse(f"{b64('DSWT-1/HS256')};{b64('a=1')};")

    def test_unknown_algorithm(self):
        """A header naming an unregistered algorithm fails with UnknownAlgorithm."""
        with pytest.raises(UnknownAlgorithm):
            parse(wire("DSWT-1/HS999", "a=1"))

    def test_malformed_entry(self):
        with pytest.raises(MalformedToken):
            parse(wire("DSWT-1/HS256", "missing-separator"))
