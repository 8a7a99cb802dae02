"""
Ordered in-memory mirror of the trie content.
Wraps every mutating engine call so the entry list and the engine never diverge,
and provides the rows the key/value table is rendered from.
"""

import logging
from collections.abc import MutableSequence
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from trie_inspector.errors import EngineOperationFailure
from trie_inspector.storage.canonical import BufferLike, to_byte_buffer
from trie_inspector.storage.trie_engine import TrieEngine

logger = logging.getLogger(__name__)


@dataclass
class Entry:
    """One key/value pair as shown in the table."""
    key: bytes
    value: bytes

    def to_dict(self) -> Dict[str, str]:
        return {"key": "0x" + self.key.hex(), "value": "0x" + self.value.hex()}

    def __repr__(self) -> str:
        return f"Entry(key=0x{self.key.hex()}, value=0x{self.value.hex()})"


class UnsafeEntries(MutableSequence):
    """
    Direct, unchecked access to the mirror's entry list.
    Changes made here are not forwarded to the engine and can leave the
    table out of sync with the trie. Only handed to user scripts.
    """

    def __init__(self, entries: List[Entry]):
        self._entries = entries

    def __getitem__(self, index):
        return self._entries[index]

    def __setitem__(self, index, entry):
        self._entries[index] = entry

    def __delitem__(self, index):
        del self._entries[index]

    def __len__(self) -> int:
        return len(self._entries)

    def insert(self, index: int, entry: Entry) -> None:
        self._entries.insert(index, entry)

    def sort(self, key=None, reverse: bool = False) -> None:
        self._entries.sort(key=key or (lambda entry: entry.key), reverse=reverse)

    def __repr__(self) -> str:
        return f"UnsafeEntries({len(self._entries)} entries)"


class MirrorStore:
    """
    Facade over a trie engine that keeps an ordered list of entries.
    Keys and values are canonicalized before anything changes, so a bad
    input never touches either the mirror or the engine.
    """

    def __init__(self, engine: TrieEngine, entries: Optional[List[Entry]] = None):
        self.engine = engine
        self._entries: List[Entry] = entries if entries is not None else []

    @property
    def entries(self) -> Tuple[Entry, ...]:
        return tuple(self._entries)

    def unsafe_entries(self) -> UnsafeEntries:
        return UnsafeEntries(self._entries)

    def find(self, key: BufferLike) -> Optional[int]:
        """Position of the entry holding key, or None."""
        key = to_byte_buffer(key)
        for index, entry in enumerate(self._entries):
            if entry.key == key:
                return index
        return None

    def clear(self) -> None:
        self.engine.clear()
        self._entries.clear()
        logger.debug("Mirror cleared")

    def insert(self, key: BufferLike, value: BufferLike) -> Any:
        key = to_byte_buffer(key)
        value = to_byte_buffer(value)

        result = self.engine.insert(key, value)

        index = self.find(key)
        if index is None:
            self._entries.append(Entry(key, value))
        else:
            self._entries[index].value = value
        logger.debug(f"Inserted 0x{key.hex()} ({len(value)} bytes)")
        return result

    def remove(self, key: BufferLike) -> Any:
        key = to_byte_buffer(key)
        index = self.find(key)

        try:
            result = self.engine.remove(key)
        except EngineOperationFailure:
            if index is not None:
                raise
            logger.warning(f"Engine rejected removal of absent key 0x{key.hex()}")
            return False

        if index is not None:
            del self._entries[index]
            logger.debug(f"Removed 0x{key.hex()}")
        return result

    def commit(self) -> bytes:
        return self.engine.commit()

    def get(self, key: BufferLike) -> bytes:
        return bytes(self.engine.get(to_byte_buffer(key)))

    def root(self) -> bytes:
        return bytes(self.engine.root())

    def values(self) -> Dict[bytes, bytes]:
        return self.engine.values()

    def db_values(self) -> Any:
        return self.engine.db_values()

    def bulk_load(self, pairs: Iterable[Tuple[BufferLike, BufferLike]]) -> bytes:
        """
        Replace the whole state with pairs, in input order, then sort the
        mirror by key bytes and commit.
        """
        canonical = [(to_byte_buffer(k), to_byte_buffer(v)) for k, v in pairs]

        self.clear()
        for key, value in canonical:
            self.insert(key, value)
        self._entries.sort(key=lambda entry: entry.key)
        root = self.commit()

        logger.info(f"Bulk loaded {len(self._entries)} entries, root 0x{root.hex()}")
        return root

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"MirrorStore(entries={len(self._entries)}, engine={self.engine!r})"
