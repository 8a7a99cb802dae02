"""
Plain-text drawing of a render pass for terminal sessions.
"""

from typing import List, Optional

from trie_inspector.modules.hierarchy import HierarchyNode
from trie_inspector.storage.render_options import LayoutMode

BRANCH = "├── "
LAST = "└── "
PIPE = "│   "
SPACE = "    "


def render_tree(
    root: Optional[HierarchyNode],
    mode: LayoutMode = LayoutMode.TREE,
    verbose: bool = False,
) -> List[str]:
    """
    Indented tree of node labels. In cluster mode leaf labels are pushed to
    the column of the deepest leaf.
    """
    if root is None:
        return ["(empty trie)"]

    depth_limit = root.height()
    lines: List[str] = []

    def text_for(node: HierarchyNode, depth: int) -> str:
        label = node.label or "·"
        if mode is LayoutMode.CLUSTER and not node.children:
            label = "─" * (len(SPACE) * (depth_limit - depth)) + label
        if verbose:
            label = f"{label}    # {node.tooltip}"
        return label

    def visit(node: HierarchyNode, prefix: str, depth: int) -> None:
        count = len(node.children)
        for position, child in enumerate(node.children):
            last = position == count - 1
            lines.append(prefix + (LAST if last else BRANCH) + text_for(child, depth + 1))
            visit(child, prefix + (SPACE if last else PIPE), depth + 1)

    lines.append(text_for(root, 0))
    visit(root, "", 0)
    return lines


def render_table(result) -> List[str]:
    lines = [f"Entries: {result.entry_count}    Root: 0x{result.root.hex()}"]
    if not result.table:
        lines.append("  (no entries)")
    width = max((len(str(row.index)) for row in result.table), default=1)
    for row in result.table:
        lines.append(f"  {row.index:>{width}}  {row.key_hex}  {row.value_hex}")
    if result.entry_count > len(result.table):
        lines.append(f"  ... {result.entry_count - len(result.table)} more rows not shown")
    return lines


def render_storage(result) -> List[str]:
    if not result.options.show_storage_nodes:
        return []
    lines = [f"Storage nodes ({result.storage_total / 1000} KB)"]
    for row in result.storage:
        lines.append(f"  {row.index:>4}  {row.key_hex}{row.size_text}")
    return lines


def render_result(result, verbose: bool = False) -> str:
    """Full text view: table, optional storage nodes, then the chart."""
    sections = [render_table(result)]
    storage = render_storage(result)
    if storage:
        sections.append(storage)
    sections.append(render_tree(result.hierarchy, result.options.layout_mode, verbose))
    return "\n\n".join("\n".join(section) for section in sections)
