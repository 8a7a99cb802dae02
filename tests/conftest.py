"""
Shared fixtures for the inspector tests.
"""

import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest

from trie_inspector.config import Config
from trie_inspector.inspector import Inspector
from trie_inspector.storage.mirror_store import MirrorStore
from trie_inspector.storage.trie_engine import MemoryTrieEngine


@pytest.fixture
def engine():
    return MemoryTrieEngine()


@pytest.fixture
def store(engine):
    return MirrorStore(engine)


@pytest.fixture
def config(tmp_path, monkeypatch):
    monkeypatch.setenv("EXPORT_DIR", str(tmp_path / "exports"))
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    return Config()


@pytest.fixture
def inspector(config):
    return Inspector(config, seed=False)


@pytest.fixture
def genesis_file(tmp_path):
    def write(top, name="genesis.json"):
        import json
        path = tmp_path / name
        path.write_text(json.dumps({"genesis": {"raw": {"top": top}}}), encoding="utf-8")
        return path
    return write
