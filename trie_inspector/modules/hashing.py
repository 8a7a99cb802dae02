"""
Hash functions available to scripts and to the trie engine.
Every function canonicalizes its argument first, so scripts can pass
hex strings, ASCII strings, single byte integers or raw bytes.
"""

import hashlib
from typing import Callable, Dict, List

import xxhash

from trie_inspector.storage.canonical import BufferLike, to_byte_buffer


def _blake2(value: BufferLike, digest_size: int) -> bytes:
    return hashlib.blake2b(to_byte_buffer(value), digest_size=digest_size).digest()


def blake2_128(value: BufferLike) -> bytes:
    return _blake2(value, 16)


def blake2_256(value: BufferLike) -> bytes:
    return _blake2(value, 32)


def blake2_512(value: BufferLike) -> bytes:
    return _blake2(value, 64)


def _twox(value: BufferLike, rounds: int) -> bytes:
    """
    Concatenate little-endian xxHash64 digests with seeds 0..rounds-1.
    twox_64 is one round, twox_128 two.
    """
    data = to_byte_buffer(value)
    return b"".join(
        xxhash.xxh64_intdigest(data, seed=seed).to_bytes(8, "little")
        for seed in range(rounds)
    )


def twox_64(value: BufferLike) -> bytes:
    return _twox(value, 1)


def twox_128(value: BufferLike) -> bytes:
    return _twox(value, 2)


class HashingModule:
    """Named pure hash functions bound into the script scope as ``hashing``."""

    FUNCTIONS: Dict[str, Callable[[BufferLike], bytes]] = {
        "blake2_128": blake2_128,
        "blake2_256": blake2_256,
        "blake2_512": blake2_512,
        "twox_64": twox_64,
        "twox_128": twox_128,
    }

    blake2_128 = staticmethod(blake2_128)
    blake2_256 = staticmethod(blake2_256)
    blake2_512 = staticmethod(blake2_512)
    twox_64 = staticmethod(twox_64)
    twox_128 = staticmethod(twox_128)

    @classmethod
    def names(cls) -> List[str]:
        return list(cls.FUNCTIONS)

    def __repr__(self) -> str:
        return f"HashingModule({', '.join(self.names())})"
