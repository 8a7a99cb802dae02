"""
Tests for tree and cluster node placement.
"""

import numpy as np

from trie_inspector.modules.hierarchy import HierarchyNode
from trie_inspector.modules.layout import MIN_CHART_WIDTH, compute_layout
from trie_inspector.storage.render_options import LayoutMode, RenderOptions


def leaf(label):
    return HierarchyNode(label, f"Leaf [{label}]")


def uneven_tree():
    # root -> [a, b -> [c]]
    return HierarchyNode("root", "Branch []", (leaf("a"), HierarchyNode("b", "Branch [b]", (leaf("c"),))))


def test_empty_layout():
    layout = compute_layout(None, RenderOptions())
    assert len(layout) == 0
    assert layout.positions.shape == (0, 2)
    assert layout.to_dict()["nodes"] == []
    assert layout.width == MIN_CHART_WIDTH


def test_single_node():
    layout = compute_layout(leaf("x"), RenderOptions())
    np.testing.assert_allclose(layout.positions, [[0.0, 0.0]])
    assert layout.links.shape == (0, 2)


def test_tree_mode_positions():
    root = HierarchyNode("r", "", (leaf("a"), leaf("b")))
    options = RenderOptions(layout_mode=LayoutMode.TREE, x_scale=5, y_scale=1)
    layout = compute_layout(root, options)

    assert layout.labels == ["r", "a", "b"]
    dx = 10 * 5
    dy = MIN_CHART_WIDTH / 2
    np.testing.assert_allclose(layout.positions, [[0.5 * dx, 0], [0, dy], [dx, dy]])
    assert layout.links.tolist() == [[0, 1], [0, 2]]


def test_cluster_mode_aligns_leaves():
    tree = compute_layout(uneven_tree(), RenderOptions(layout_mode=LayoutMode.TREE))
    cluster = compute_layout(uneven_tree(), RenderOptions(layout_mode=LayoutMode.CLUSTER))

    assert tree.labels == cluster.labels == ["root", "a", "b", "c"]
    tree_rows = tree.positions[:, 1]
    cluster_rows = cluster.positions[:, 1]
    assert tree_rows[1] < tree_rows[3]
    assert cluster_rows[1] == cluster_rows[3]
    assert cluster_rows[0] == 0


def test_scales_apply():
    root = HierarchyNode("r", "", (leaf("a"), leaf("b")))
    small = compute_layout(root, RenderOptions(x_scale=1, y_scale=1))
    large = compute_layout(root, RenderOptions(x_scale=2, y_scale=3))
    np.testing.assert_allclose(large.positions[:, 0], small.positions[:, 0] * 2)
    np.testing.assert_allclose(large.positions[:, 1], small.positions[:, 1] * 3)


def test_width_has_minimum():
    layout = compute_layout(leaf("x"), RenderOptions(), width=100)
    assert layout.width == MIN_CHART_WIDTH
    layout = compute_layout(leaf("x"), RenderOptions(), width=2000)
    assert layout.width == 2000


def test_export_dict():
    data = compute_layout(uneven_tree(), RenderOptions(layout_mode="cluster")).to_dict()
    assert data["mode"] == "cluster"
    assert [node["label"] for node in data["nodes"]] == ["root", "a", "b", "c"]
    assert data["links"] == [[0, 1], [0, 2], [2, 3]]
