"""
Trie engine contract and an in-memory reference engine.
The inspector only talks to engines through TrieEngine; MemoryTrieEngine is a
base-16 radix trie whose committed nodes are content-addressed by blake2_256.
"""

import struct
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from trie_inspector.errors import EngineOperationFailure
from trie_inspector.modules.hashing import blake2_256

logger = logging.getLogger(__name__)

Nibbles = Tuple[int, ...]

EMPTY_NODE = 0x00
LEAF_NODE = 0x01
BRANCH_NODE = 0x02
NIBBLED_BRANCH_NODE = 0x03

BRANCH_WIDTH = 16


class TrieEngine(ABC):
    """Operations the inspector consumes from a trie engine."""

    @abstractmethod
    def insert(self, key: bytes, value: bytes) -> bool:
        ...

    @abstractmethod
    def remove(self, key: bytes) -> bool:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...

    @abstractmethod
    def commit(self) -> bytes:
        """Persist pending changes and return the root hash."""

    @abstractmethod
    def get(self, key: bytes) -> bytes:
        ...

    @abstractmethod
    def root(self) -> bytes:
        ...

    @abstractmethod
    def values(self) -> Dict[bytes, bytes]:
        """Stored node database: node hash -> encoded node."""

    @abstractmethod
    def db_values(self) -> Optional[Dict[str, Any]]:
        """Nested descriptor of the committed node graph, starting at the root."""

    @abstractmethod
    def items(self) -> Dict[bytes, bytes]:
        """Logical content: every stored key and its value."""


@dataclass
class LeafNode:
    partial: Nibbles
    value: bytes


@dataclass
class BranchNode:
    partial: Nibbles
    value: Optional[bytes] = None
    children: List[Optional[Any]] = field(default_factory=lambda: [None] * BRANCH_WIDTH)

    def child_count(self) -> int:
        return sum(1 for child in self.children if child is not None)


def key_to_nibbles(key: bytes) -> Nibbles:
    """Split every byte into its high and low half."""
    nibbles = []
    for byte in key:
        nibbles.append(byte >> 4)
        nibbles.append(byte & 0x0F)
    return tuple(nibbles)


def nibbles_to_hex(nibbles: Nibbles) -> str:
    return "".join(format(n, "x") for n in nibbles)


def nibbles_to_key(nibbles: Nibbles) -> bytes:
    return bytes((nibbles[i] << 4) | nibbles[i + 1] for i in range(0, len(nibbles) - 1, 2))


def _common_prefix(a: Nibbles, b: Nibbles) -> int:
    size = min(len(a), len(b))
    i = 0
    while i < size and a[i] == b[i]:
        i += 1
    return i


def _insert(node, path: Nibbles, value: bytes):
    if node is None:
        return LeafNode(path, value)

    if isinstance(node, LeafNode):
        c = _common_prefix(node.partial, path)
        if c == len(node.partial) == len(path):
            node.value = value
            return node
        branch = BranchNode(partial=path[:c])
        for rest, item in ((node.partial[c:], node.value), (path[c:], value)):
            if rest:
                branch.children[rest[0]] = LeafNode(rest[1:], item)
            else:
                branch.value = item
        return branch

    c = _common_prefix(node.partial, path)
    if c == len(node.partial):
        rest = path[c:]
        if not rest:
            node.value = value
        else:
            node.children[rest[0]] = _insert(node.children[rest[0]], rest[1:], value)
        return node

    # Split the branch at the first diverging nibble
    parent = BranchNode(partial=path[:c])
    parent.children[node.partial[c]] = node
    node.partial = node.partial[c + 1:]
    rest = path[c:]
    if rest:
        parent.children[rest[0]] = LeafNode(rest[1:], value)
    else:
        parent.value = value
    return parent


def _normalize(branch: BranchNode):
    """Collapse a branch that no longer needs to branch."""
    count = branch.child_count()
    if count == 0:
        if branch.value is None:
            return None
        return LeafNode(branch.partial, branch.value)
    if count == 1 and branch.value is None:
        index = next(i for i, child in enumerate(branch.children) if child is not None)
        child = branch.children[index]
        child.partial = branch.partial + (index,) + child.partial
        return child
    return branch


def _remove(node, path: Nibbles):
    if node is None:
        return None, False

    if isinstance(node, LeafNode):
        if node.partial == path:
            return None, True
        return node, False

    size = len(node.partial)
    if path[:size] != node.partial:
        return node, False
    rest = path[size:]
    if not rest:
        if node.value is None:
            return node, False
        node.value = None
    else:
        child, removed = _remove(node.children[rest[0]], rest[1:])
        if not removed:
            return node, False
        node.children[rest[0]] = child
    return _normalize(node), True


def _encode_nibbles(nibbles: Nibbles) -> bytes:
    padded = ((0,) + nibbles) if len(nibbles) % 2 else nibbles
    packed = bytes((padded[i] << 4) | padded[i + 1] for i in range(0, len(padded), 2))
    return struct.pack(">I", len(nibbles)) + packed


def _decode_nibbles(data: bytes, offset: int) -> Tuple[Nibbles, int]:
    (count,) = struct.unpack_from(">I", data, offset)
    offset += 4
    size = (count + 1) // 2
    unpacked = key_to_nibbles(data[offset:offset + size])
    return unpacked[len(unpacked) - count:], offset + size


def _encode_value(value: bytes) -> bytes:
    return struct.pack(">I", len(value)) + value


def _decode_value(data: bytes, offset: int) -> Tuple[bytes, int]:
    (size,) = struct.unpack_from(">I", data, offset)
    offset += 4
    return data[offset:offset + size], offset + size


def encode_node(node, db: Dict[bytes, bytes]) -> bytes:
    """Encode a working node (and its subtree) into db, returning its hash."""
    if node is None:
        encoded = bytes([EMPTY_NODE])
    elif isinstance(node, LeafNode):
        encoded = bytes([LEAF_NODE]) + _encode_nibbles(node.partial) + _encode_value(node.value)
    else:
        kind = NIBBLED_BRANCH_NODE if node.partial else BRANCH_NODE
        parts = [bytes([kind])]
        if node.partial:
            parts.append(_encode_nibbles(node.partial))
        if node.value is None:
            parts.append(b"\x00")
        else:
            parts.append(b"\x01" + _encode_value(node.value))
        bitmap = 0
        hashes = []
        for index, child in enumerate(node.children):
            if child is not None:
                bitmap |= 1 << index
                hashes.append(encode_node(child, db))
        parts.append(struct.pack(">H", bitmap))
        parts.extend(hashes)
        encoded = b"".join(parts)

    node_hash = blake2_256(encoded)
    db[node_hash] = encoded
    return node_hash


def decode_node(node_hash: bytes, db: Dict[bytes, bytes]) -> Dict[str, Any]:
    """Decode a stored node and its descendants into a nested descriptor."""
    data = db.get(node_hash)
    if data is None:
        raise EngineOperationFailure(f"missing trie node {node_hash.hex()}")

    kind = data[0]
    descriptor: Dict[str, Any] = {"id": node_hash.hex()}
    offset = 1

    if kind == EMPTY_NODE:
        descriptor["type"] = "Empty"
        return descriptor

    if kind == LEAF_NODE:
        nibbles, offset = _decode_nibbles(data, offset)
        value, offset = _decode_value(data, offset)
        descriptor.update(type="Leaf", nibbles=nibbles_to_hex(nibbles), value=value)
        return descriptor

    if kind not in (BRANCH_NODE, NIBBLED_BRANCH_NODE):
        raise EngineOperationFailure(f"unknown node kind {kind} in {node_hash.hex()}")

    descriptor["type"] = "Branch"
    if kind == NIBBLED_BRANCH_NODE:
        nibbles, offset = _decode_nibbles(data, offset)
        descriptor["nibbles"] = nibbles_to_hex(nibbles)
    has_value = data[offset]
    offset += 1
    if has_value:
        descriptor["value"], offset = _decode_value(data, offset)
    (bitmap,) = struct.unpack_from(">H", data, offset)
    offset += 2

    children = []
    for index in range(BRANCH_WIDTH):
        if bitmap & (1 << index):
            child_hash = data[offset:offset + 32]
            offset += 32
            child = decode_node(child_hash, db)
            child["parent_nibble"] = format(index, "x")
            children.append(child)
    descriptor["children"] = children
    return descriptor


class MemoryTrieEngine(TrieEngine):
    """
    Radix-16 trie held in memory.
    Mutations change the working tree; commit() writes the content-addressed
    node database that root(), values() and db_values() read from.
    """

    def __init__(self):
        self._working = None
        self._db: Dict[bytes, bytes] = {}
        self._root = encode_node(None, self._db)

    @staticmethod
    def _check(name: str, item) -> None:
        if not isinstance(item, bytes):
            raise EngineOperationFailure(
                f"{name} must be bytes, got {type(item).__name__}"
            )

    def insert(self, key: bytes, value: bytes) -> bool:
        self._check("key", key)
        self._check("value", value)
        self._working = _insert(self._working, key_to_nibbles(key), value)
        return True

    def remove(self, key: bytes) -> bool:
        self._check("key", key)
        self._working, removed = _remove(self._working, key_to_nibbles(key))
        if not removed:
            logger.debug(f"Remove ignored, key not present: {key.hex()}")
        return removed

    def clear(self) -> None:
        self._working = None
        self._db = {}
        self._root = encode_node(None, self._db)

    def commit(self) -> bytes:
        db: Dict[bytes, bytes] = {}
        self._root = encode_node(self._working, db)
        self._db = db
        logger.debug(f"Committed trie root 0x{self._root.hex()} ({len(db)} nodes)")
        return self._root

    def get(self, key: bytes) -> bytes:
        self._check("key", key)
        node = self._working
        path = key_to_nibbles(key)
        while node is not None:
            size = len(node.partial)
            if path[:size] != node.partial:
                return b""
            path = path[size:]
            if isinstance(node, LeafNode):
                return node.value if not path else b""
            if not path:
                return node.value if node.value is not None else b""
            node, path = node.children[path[0]], path[1:]
        return b""

    def root(self) -> bytes:
        return self._root

    def values(self) -> Dict[bytes, bytes]:
        return dict(self._db)

    def db_values(self) -> Optional[Dict[str, Any]]:
        if self._root not in self._db:
            return None
        return decode_node(self._root, self._db)

    def items(self) -> Dict[bytes, bytes]:
        result: Dict[bytes, bytes] = {}
        stack = [(self._working, ())]
        while stack:
            node, prefix = stack.pop()
            if node is None:
                continue
            path = prefix + node.partial
            if isinstance(node, LeafNode):
                result[nibbles_to_key(path)] = node.value
                continue
            if node.value is not None:
                result[nibbles_to_key(path)] = node.value
            for index, child in enumerate(node.children):
                if child is not None:
                    stack.append((child, path + (index,)))
        return result

    def __repr__(self) -> str:
        return f"MemoryTrieEngine(root=0x{self._root.hex()[:16]}..., nodes={len(self._db)})"
