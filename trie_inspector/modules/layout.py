"""
Node placement for the hierarchy chart.
Tree mode puts each node on the row of its depth; cluster mode aligns every
leaf on the deepest row. In both, leaves take consecutive columns and each
parent is centered over its children.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from trie_inspector.modules.hierarchy import HierarchyNode
from trie_inspector.storage.render_options import LayoutMode, RenderOptions

MIN_CHART_WIDTH = 1152
NODE_SPACING = 10
DEFAULT_RADIUS = 5


@dataclass
class ChartLayout:
    """Geometry of one render pass; ``positions`` is an (n, 2) array of x, y."""
    labels: List[str] = field(default_factory=list)
    tooltips: List[str] = field(default_factory=list)
    positions: np.ndarray = field(default_factory=lambda: np.zeros((0, 2)))
    links: np.ndarray = field(default_factory=lambda: np.zeros((0, 2), dtype=int))
    width: float = 0.0
    radius: float = DEFAULT_RADIUS
    mode: LayoutMode = LayoutMode.TREE

    def __len__(self) -> int:
        return len(self.labels)

    @property
    def extent(self) -> np.ndarray:
        """Bounding box as [[min_x, min_y], [max_x, max_y]]."""
        if not len(self):
            return np.zeros((2, 2))
        return np.stack([self.positions.min(axis=0), self.positions.max(axis=0)])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "width": self.width,
            "radius": self.radius,
            "nodes": [
                {"label": label, "title": tooltip, "x": float(x), "y": float(y)}
                for label, tooltip, (x, y) in zip(self.labels, self.tooltips, self.positions)
            ],
            "links": [[int(a), int(b)] for a, b in self.links],
        }


def compute_layout(
    root: Optional[HierarchyNode],
    options: RenderOptions,
    width: float = MIN_CHART_WIDTH,
    radius: float = DEFAULT_RADIUS,
) -> ChartLayout:
    """Place every node of the hierarchy according to the render options."""
    width = max(width, MIN_CHART_WIDTH)
    if root is None:
        return ChartLayout(width=width, radius=radius, mode=options.layout_mode)

    nodes: List[HierarchyNode] = []
    parents: List[int] = []
    depths: List[int] = []
    stack = [(root, -1, 0)]
    while stack:
        node, parent, depth = stack.pop()
        nodes.append(node)
        parents.append(parent)
        depths.append(depth)
        index = len(nodes) - 1
        for child in reversed(node.children):
            stack.append((child, index, depth + 1))

    count = len(nodes)
    parent_of = np.array(parents)
    depth_of = np.array(depths)
    heights = np.zeros(count, dtype=int)
    columns = np.zeros(count, dtype=float)
    is_leaf = np.array([not node.children for node in nodes])

    columns[is_leaf] = np.arange(is_leaf.sum())

    # Pre-order puts every parent before its children, so walking backwards
    # sees every child before its parent.
    child_sum = np.zeros(count)
    child_count = np.zeros(count)
    for index in range(count - 1, -1, -1):
        if not is_leaf[index]:
            columns[index] = child_sum[index] / child_count[index]
        parent = parent_of[index]
        if parent >= 0:
            child_sum[parent] += columns[index]
            child_count[parent] += 1
            heights[parent] = max(heights[parent], heights[index] + 1)

    tree_height = int(heights[0])
    if options.layout_mode is LayoutMode.CLUSTER:
        levels = tree_height - heights
    else:
        levels = depth_of

    dx = NODE_SPACING * options.x_scale
    dy = width / (tree_height + 1) * options.y_scale
    positions = np.column_stack([columns * dx, levels * dy])

    child_index = np.flatnonzero(parent_of >= 0)
    links = np.column_stack([parent_of[child_index], child_index]).astype(int)

    return ChartLayout(
        labels=[node.label for node in nodes],
        tooltips=[node.tooltip for node in nodes],
        positions=positions,
        links=links.reshape(-1, 2),
        width=width,
        radius=radius,
        mode=options.layout_mode,
    )
