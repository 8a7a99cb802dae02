"""
Tests for environment driven configuration.
"""

import pytest

from trie_inspector.config import Config
from trie_inspector.storage.render_options import LayoutMode, RenderOptions


def test_defaults(config):
    options = config.render_options()
    assert options == RenderOptions(
        layout_mode=LayoutMode.TREE,
        x_scale=5.0,
        y_scale=1.0,
        show_storage_nodes=False,
        truncate_big_values=32,
    )
    assert config.TABLE_ROW_LIMIT == 301
    assert config.SEED_WELL_KNOWN_KEYS is True


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("LAYOUT_MODE", "Cluster")
    monkeypatch.setenv("X_SCALE", "2.5")
    monkeypatch.setenv("SHOW_STORAGE_NODES", "yes")
    monkeypatch.setenv("TRUNCATE_BIG_VALUES", "0")
    options = Config().render_options()
    assert options.layout_mode is LayoutMode.CLUSTER
    assert options.x_scale == 2.5
    assert options.show_storage_nodes is True
    assert options.truncate_big_values is None


def test_invalid_layout_mode(monkeypatch):
    monkeypatch.setenv("LAYOUT_MODE", "radial")
    with pytest.raises(ValueError, match="LAYOUT_MODE"):
        Config()


def test_invalid_scale(monkeypatch):
    monkeypatch.setenv("Y_SCALE", "tall")
    with pytest.raises(ValueError):
        Config()


def test_render_options_are_immutable():
    options = RenderOptions()
    changed = options.with_changes(x_scale=1.0)
    assert options.x_scale == 5.0
    assert changed.x_scale == 1.0
    with pytest.raises(AttributeError):
        options.x_scale = 3.0
    with pytest.raises(ValueError):
        RenderOptions(truncate_big_values=-1)
