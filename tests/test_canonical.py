"""
Tests for byte canonicalization of keys and values.
"""

import pytest

from trie_inspector.errors import UnsupportedValueType
from trie_inspector.storage.canonical import (
    ByteBuffer,
    InputShape,
    TaggedInput,
    canonicalize,
    tag_input,
    to_byte_buffer,
)


def test_bytes_returned_unchanged():
    value = b"\x01\x02"
    assert to_byte_buffer(value) is value


def test_bytearray_and_memoryview_copied():
    assert to_byte_buffer(bytearray(b"ab")) == b"ab"
    assert type(to_byte_buffer(bytearray(b"ab"))) is bytes
    assert to_byte_buffer(memoryview(b"xyz")) == b"xyz"


def test_hex_string():
    assert to_byte_buffer("0x1234") == b"\x12\x34"
    assert to_byte_buffer("0x") == b""


def test_plain_string_is_ascii():
    assert to_byte_buffer(":code") == b":code"
    assert to_byte_buffer("System") == b"System"


def test_integer_becomes_single_byte():
    assert to_byte_buffer(0) == b"\x00"
    assert to_byte_buffer(255) == b"\xff"


def test_malformed_hex_raises_decoder_error():
    with pytest.raises(ValueError):
        to_byte_buffer("0x123")
    with pytest.raises(ValueError):
        to_byte_buffer("0xzz")


def test_non_ascii_string_rejected():
    with pytest.raises(UnicodeEncodeError):
        to_byte_buffer("héllo")


@pytest.mark.parametrize("value", [256, -1, True, 1.5, None, [1, 2], {"a": 1}])
def test_unsupported_values(value):
    with pytest.raises(UnsupportedValueType):
        to_byte_buffer(value)


def test_unsupported_is_a_type_error():
    with pytest.raises(TypeError):
        to_byte_buffer(object())


def test_tagging():
    assert tag_input("0xab") == TaggedInput(InputShape.HEX_STRING, "ab")
    assert tag_input("ab").shape is InputShape.ASCII_STRING
    assert tag_input(7).shape is InputShape.INTEGER
    assert tag_input(b"").shape is InputShape.BYTES
    assert canonicalize(TaggedInput(InputShape.INTEGER, 9)) == b"\x09"


def test_buffer_helpers():
    assert ByteBuffer("0xff") == b"\xff"
    assert ByteBuffer.concat(["0x01", 2, b"\x03", "a"]) == b"\x01\x02\x03a"
    assert ByteBuffer.hex(b"\xab") == "ab"
    assert ByteBuffer.hex(b"\xab", prefix=True) == "0xab"
    assert ByteBuffer.compare("0x01", "0x02") == -1
    assert ByteBuffer.compare(b"\x02", 2) == 0
