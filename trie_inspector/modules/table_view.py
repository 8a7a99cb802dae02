"""
Row projection for the key/value table and the storage node table.
"""

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from trie_inspector.storage.mirror_store import Entry

DEFAULT_ROW_LIMIT = 301


@dataclass(frozen=True)
class TableRow:
    index: int
    key_hex: str
    value_hex: str


@dataclass(frozen=True)
class StorageRow:
    index: int
    key_hex: str
    size_text: str


def truncate_value(value: bytes, limit: Optional[int]) -> str:
    """
    Hex of value, shortened to roughly ``limit`` bytes around an ellipsis
    when it is longer than that.
    """
    if not limit or len(value) <= limit:
        return value.hex()
    head = math.ceil(limit / 2)
    tail = limit // 2
    return value[:head].hex() + "..." + value[head:head + tail].hex()


def value_rows(
    entries: Iterable[Entry],
    truncate_big_values: Optional[int] = None,
    limit: int = DEFAULT_ROW_LIMIT,
) -> List[TableRow]:
    rows = []
    for position, entry in enumerate(entries):
        if position >= limit:
            break
        rows.append(TableRow(
            index=position + 1,
            key_hex=entry.key.hex(),
            value_hex=truncate_value(entry.value, truncate_big_values),
        ))
    return rows


def storage_rows(values: Dict[bytes, bytes]) -> Tuple[List[StorageRow], int]:
    """Rows for every stored node plus the total number of bytes stored."""
    rows = []
    total = 0
    for position, (key, value) in enumerate(values.items(), start=1):
        total += len(value)
        rows.append(StorageRow(
            index=position,
            key_hex=bytes(key).hex(),
            size_text=f" ({len(value) / 1000:.4f}KB)",
        ))
    return rows, total
