"""
Tests for key/value and storage node table rows.
"""

from trie_inspector.modules.table_view import storage_rows, truncate_value, value_rows
from trie_inspector.storage.mirror_store import Entry


def test_truncate_disabled():
    assert truncate_value(bytes(40), None) == "00" * 40
    assert truncate_value(bytes(40), 0) == "00" * 40


def test_truncate_short_value():
    assert truncate_value(b"\x01\x02", 32) == "0102"


def test_truncate_long_value():
    value = bytes(range(10))
    assert truncate_value(value, 4) == "0001...0203"
    assert truncate_value(value, 5) == "000102...0304"


def test_value_rows():
    entries = [Entry(b"\x01", b"\xaa"), Entry(b"\x02", bytes(40))]
    rows = value_rows(entries, truncate_big_values=32)
    assert [row.index for row in rows] == [1, 2]
    assert rows[0].key_hex == "01"
    assert rows[0].value_hex == "aa"
    assert rows[1].value_hex == "00" * 16 + "..." + "00" * 16


def test_value_rows_limit():
    entries = [Entry(bytes([i]), b"\x00") for i in range(10)]
    assert len(value_rows(entries, limit=3)) == 3


def test_storage_rows():
    rows, total = storage_rows({b"\xab": bytes(1500), b"\xcd": bytes(10)})
    assert total == 1510
    assert rows[0].index == 1
    assert rows[0].key_hex == "ab"
    assert rows[0].size_text == " (1.5000KB)"
    assert rows[1].size_text == " (0.0100KB)"
