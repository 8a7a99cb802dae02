"""
Conversion of user supplied keys and values into canonical byte buffers.
Inputs are first tagged with their shape, then converted by a total match on that tag.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Any, Iterable, Union

from trie_inspector.errors import UnsupportedValueType

HEX_PREFIX = "0x"

BufferLike = Union[bytes, bytearray, memoryview, str, int]


class InputShape(Enum):
    """Accepted shapes of raw input."""
    BYTES = "bytes"
    HEX_STRING = "hex_string"
    ASCII_STRING = "ascii_string"
    INTEGER = "integer"


@dataclass(frozen=True)
class TaggedInput:
    """A raw value paired with the shape it was classified as."""
    shape: InputShape
    payload: Any


def tag_input(value: Any) -> TaggedInput:
    """
    Classify a raw value into one of the accepted input shapes.
    Raises UnsupportedValueType for anything else, including bool and
    integers that do not fit in a single byte.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return TaggedInput(InputShape.BYTES, value)
    if isinstance(value, str):
        if value.startswith(HEX_PREFIX):
            return TaggedInput(InputShape.HEX_STRING, value[len(HEX_PREFIX):])
        return TaggedInput(InputShape.ASCII_STRING, value)
    if isinstance(value, int) and not isinstance(value, bool):
        if not 0 <= value <= 0xFF:
            raise UnsupportedValueType(value)
        return TaggedInput(InputShape.INTEGER, value)
    raise UnsupportedValueType(value)


def canonicalize(tagged: TaggedInput) -> bytes:
    """Convert a tagged input into its canonical byte sequence."""
    shape = tagged.shape
    if shape is InputShape.BYTES:
        if type(tagged.payload) is bytes:
            return tagged.payload
        return bytes(tagged.payload)
    if shape is InputShape.HEX_STRING:
        return bytes.fromhex(tagged.payload)
    if shape is InputShape.ASCII_STRING:
        return tagged.payload.encode("ascii")
    if shape is InputShape.INTEGER:
        return bytes([tagged.payload])
    raise UnsupportedValueType(tagged.payload)


def to_byte_buffer(value: BufferLike) -> bytes:
    """Canonicalize any accepted key or value representation."""
    return canonicalize(tag_input(value))


class ByteBuffer:
    """
    Byte buffer helpers exposed to scripts as ``Buffer``.
    Calling the class coerces a value, it does not construct an instance.
    """

    def __new__(cls, value: BufferLike) -> bytes:
        return to_byte_buffer(value)

    @staticmethod
    def concat(parts: Iterable[BufferLike]) -> bytes:
        """Join several values after canonicalizing each of them."""
        return b"".join(to_byte_buffer(part) for part in parts)

    @staticmethod
    def hex(value: BufferLike, prefix: bool = False) -> str:
        encoded = to_byte_buffer(value).hex()
        return HEX_PREFIX + encoded if prefix else encoded

    @staticmethod
    def compare(left: BufferLike, right: BufferLike) -> int:
        """Byte-wise ordering, -1/0/1 like a comparator."""
        a, b = to_byte_buffer(left), to_byte_buffer(right)
        return (a > b) - (a < b)
