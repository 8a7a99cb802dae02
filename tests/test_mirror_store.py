"""
Tests for the entry mirror and its consistency with the engine.
"""

import random

import pytest

from trie_inspector.errors import EngineOperationFailure, UnsupportedValueType
from trie_inspector.storage.mirror_store import Entry, MirrorStore, UnsafeEntries
from trie_inspector.storage.trie_engine import MemoryTrieEngine


def mirror_as_dict(store):
    return {entry.key: entry.value for entry in store}


def test_reinsert_overwrites_in_place(store):
    store.insert("0x1234", "0xabcdef")
    store.insert("0x1234", "0x99")
    store.commit()

    assert store.entries == (Entry(b"\x12\x34", b"\x99"),)
    assert store.get("0x1234") == b"\x99"


def test_reinsert_keeps_position(store):
    store.insert("0x01", "0xaa")
    store.insert("0x02", "0xbb")
    store.insert("0x03", "0xcc")
    store.insert("0x01", "0xdd")

    assert [entry.key for entry in store] == [b"\x01", b"\x02", b"\x03"]
    assert store.entries[0].value == b"\xdd"
    assert len(store) == 3


def test_hex_round_trip(store):
    store.insert("0xdeadbeef", "0x0102030405")
    store.commit()
    assert store.get("0xdeadbeef") == bytes.fromhex("0102030405")
    assert store.get(b"\xde\xad\xbe\xef") == bytes.fromhex("0102030405")


def test_remove(store):
    store.insert("0x01", "0xaa")
    store.insert("0x02", "0xbb")
    store.remove("0x01")
    store.commit()

    assert [entry.key for entry in store] == [b"\x02"]
    assert store.get("0x01") == b""


def test_remove_absent_key(store):
    store.insert("0x01", "0xaa")
    assert store.remove("0x05") is False
    assert len(store) == 1


class RejectingEngine(MemoryTrieEngine):
    """Engine that treats removing an absent key as an error."""

    def remove(self, key):
        if not super().remove(key):
            raise EngineOperationFailure("key not found")
        return True


def test_remove_absent_key_with_strict_engine():
    store = MirrorStore(RejectingEngine())
    store.insert("0x01", "0xaa")
    assert store.remove("0x02") is False
    assert store.remove("0x01") is True
    assert len(store) == 0


class FailingEngine(MemoryTrieEngine):
    def insert(self, key, value):
        raise EngineOperationFailure("read only")


def test_engine_failure_propagates_without_touching_mirror():
    store = MirrorStore(FailingEngine())
    with pytest.raises(EngineOperationFailure):
        store.insert("0x01", "0x02")
    assert len(store) == 0


def test_unsupported_value_does_not_corrupt(store):
    store.insert("0x01", "0xaa")
    with pytest.raises(UnsupportedValueType):
        store.insert("0x02", 3.5)
    with pytest.raises(UnsupportedValueType):
        store.insert(None, "0x01")
    store.commit()
    assert mirror_as_dict(store) == {b"\x01": b"\xaa"}
    assert store.engine.items() == {b"\x01": b"\xaa"}


def test_clear(store):
    store.insert("0x01", "0xaa")
    store.commit()
    store.clear()
    store.commit()
    assert len(store) == 0
    assert store.engine.items() == {}


def test_bulk_load_sorts_and_commits(store):
    root = store.bulk_load([("0x03", "0x01"), ("0x01", "0x02"), ("0x02", "0x03")])
    assert [entry.key for entry in store] == [b"\x01", b"\x02", b"\x03"]
    assert root == store.root()
    assert store.db_values()["type"] == "Branch"


def test_bulk_load_replaces_previous_state(store):
    store.insert("0xff", "0x00")
    store.bulk_load([("0x01", "0x02")])
    assert mirror_as_dict(store) == {b"\x01": b"\x02"}
    assert store.engine.items() == {b"\x01": b"\x02"}


def test_bulk_load_validates_before_clearing(store):
    store.insert("0xff", "0x00")
    store.commit()
    with pytest.raises(UnsupportedValueType):
        store.bulk_load([("0x01", "0x02"), ("0x03", None)])
    assert mirror_as_dict(store) == {b"\xff": b"\x00"}


def test_bulk_load_is_deterministic(store):
    pairs = [("0x%02x" % (i * 7 % 256), "0x%02x" % i) for i in range(30)]
    first_root = store.bulk_load(pairs)
    first_entries = store.entries
    store.clear()
    store.commit()
    second_root = store.bulk_load(pairs)
    assert first_root == second_root
    assert first_entries == store.entries


def test_unsafe_entries_bypass_engine(store):
    store.insert("0x01", "0xaa")
    data = store.unsafe_entries()
    assert isinstance(data, UnsafeEntries)

    data.append(Entry(b"\x09", b"\x09"))
    assert len(store) == 2
    assert store.engine.items() == {b"\x01": b"\xaa"}

    data.sort(reverse=True)
    assert [entry.key for entry in store] == [b"\x09", b"\x01"]
    del data[0]
    assert len(store) == 1


def test_find(store):
    store.insert("0x01", "0xaa")
    store.insert("0x02", "0xbb")
    assert store.find("0x02") == 1
    assert store.find("0x03") is None


def test_mirror_matches_engine_after_random_operations(store):
    rng = random.Random(11)
    for _ in range(200):
        key = bytes(rng.randrange(3) for _ in range(rng.randrange(1, 3)))
        action = rng.random()
        if action < 0.05:
            store.clear()
        elif action < 0.35:
            store.remove(key)
        else:
            store.insert(key, bytes([rng.randrange(256)]))
    store.commit()

    assert mirror_as_dict(store) == store.engine.items()
    keys = [entry.key for entry in store]
    assert len(keys) == len(set(keys))
