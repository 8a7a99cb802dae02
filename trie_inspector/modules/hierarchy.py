"""
Builds the displayable hierarchy from the trie engine's node dump.

The engine reports its committed nodes either as one nested mapping (each node
holding its ``children`` list, every child tagged with ``parent_nibble``) or as
a flat list linked through ``id``/``parent_id``. Both are loaded into a
NetworkX DiGraph, checked to be a single rooted tree, and projected into
immutable HierarchyNode objects carrying the label and tooltip text.

Children are always emitted in the order the engine reported them, so two
renders of unchanged data produce the same picture.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

import networkx as nx

from trie_inspector.errors import MalformedNodeDump
from trie_inspector.storage.canonical import to_byte_buffer

logger = logging.getLogger(__name__)

ELLIPSIS = "..."
MAX_PATH_LENGTH = 15
PATH_EDGE_LENGTH = 6
LABEL_VALUE_BYTES = 6
TOOLTIP_VALUE_BYTES = 32


@dataclass
class NodeDescriptor:
    """One internal trie node as reported by the engine."""
    type: str
    id: Optional[str] = None
    nibbles: Optional[str] = None
    parent_nibble: Optional[str] = None
    value: Optional[bytes] = None
    children: List["NodeDescriptor"] = field(default_factory=list)

    @property
    def path(self) -> str:
        """Nibble path including the nibble selecting this node in its parent."""
        if self.parent_nibble is not None:
            return f"{self.parent_nibble}{self.nibbles or ''}"
        return self.nibbles or ""

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "NodeDescriptor":
        """Read the node's own fields; children are linked by the builder."""
        if not isinstance(data, dict):
            raise MalformedNodeDump(f"node descriptor must be a mapping, got {type(data).__name__}")

        value = data.get("value")
        if value is not None:
            if isinstance(value, (list, tuple)):
                value = bytes(value)
            else:
                value = to_byte_buffer(value)

        parent_nibble = data.get("parent_nibble")
        return NodeDescriptor(
            type=str(data.get("type", "")),
            id=data.get("id"),
            nibbles=data.get("nibbles"),
            parent_nibble=None if parent_nibble is None else str(parent_nibble),
            value=value,
        )


@dataclass(frozen=True)
class HierarchyNode:
    """Render-ready projection of a descriptor subtree."""
    label: str
    tooltip: str
    children: Tuple["HierarchyNode", ...] = ()

    def walk(self) -> Iterator["HierarchyNode"]:
        """Pre-order traversal."""
        yield self
        for child in self.children:
            yield from child.walk()

    def size(self) -> int:
        return sum(1 for _ in self.walk())

    def height(self) -> int:
        if not self.children:
            return 0
        return 1 + max(child.height() for child in self.children)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.label,
            "title": self.tooltip,
            "children": [child.to_dict() for child in self.children],
        }


def collapse_path(path: str) -> str:
    if len(path) > MAX_PATH_LENGTH:
        return path[:PATH_EDGE_LENGTH] + ELLIPSIS + path[-PATH_EDGE_LENGTH:]
    return path


def node_label(descriptor: NodeDescriptor) -> str:
    """Short text drawn next to the node."""
    path = collapse_path(descriptor.path)
    value = descriptor.value
    if value is None:
        return path
    if len(value) > LABEL_VALUE_BYTES:
        shown = value[:LABEL_VALUE_BYTES].hex() + ELLIPSIS
    else:
        shown = value.hex()
    return f"{path} ({shown})"


def node_tooltip(descriptor: NodeDescriptor) -> str:
    """Hover text: type, full nibble path and the value."""
    parts = [descriptor.type + " ", f"[{descriptor.path}]"]
    value = descriptor.value
    if value is not None:
        if len(value) > TOOLTIP_VALUE_BYTES:
            parts.append(" = 0x" + value[:TOOLTIP_VALUE_BYTES].hex() + ELLIPSIS)
        else:
            parts.append(" = 0x" + value.hex())
    return "".join(parts)


class HierarchyBuilder:
    """Turns an engine dump into a HierarchyNode tree."""

    def load_graph(self, dump: Any) -> nx.DiGraph:
        """
        Load a dump into a DiGraph whose nodes carry a ``descriptor`` and
        whose edges carry the engine's child ``order``.
        """
        graph = nx.DiGraph()
        if not dump:
            return graph
        if isinstance(dump, dict):
            self._load_nested(graph, dump)
        elif isinstance(dump, (list, tuple)):
            self._load_flat(graph, dump)
        else:
            raise MalformedNodeDump(f"unsupported dump type: {type(dump).__name__}")

        if not nx.is_arborescence(graph):
            raise MalformedNodeDump("node dump is not a single rooted tree")
        return graph

    def _load_nested(self, graph: nx.DiGraph, root: Dict[str, Any]) -> None:
        on_stack = set()

        def visit(data: Dict[str, Any]) -> int:
            if id(data) in on_stack:
                raise MalformedNodeDump("node dump contains a cycle")
            on_stack.add(id(data))

            node_key = graph.number_of_nodes()
            graph.add_node(node_key, descriptor=NodeDescriptor.from_dict(data))
            for order, child in enumerate(data.get("children") or []):
                graph.add_edge(node_key, visit(child), order=order)

            on_stack.discard(id(data))
            return node_key

        visit(root)

    def _load_flat(self, graph: nx.DiGraph, items) -> None:
        links = []
        for data in items:
            descriptor = NodeDescriptor.from_dict(data)
            if descriptor.id is None:
                raise MalformedNodeDump("flat node dump entries need an id")
            if graph.has_node(descriptor.id):
                raise MalformedNodeDump(f"duplicate node id {descriptor.id}")
            graph.add_node(descriptor.id, descriptor=descriptor)
            if data.get("parent_id") is not None:
                links.append((data["parent_id"], descriptor.id))

        for order, (parent, child) in enumerate(links):
            if not graph.has_node(parent):
                raise MalformedNodeDump(f"unknown parent id {parent}")
            graph.add_edge(parent, child, order=order)

    @staticmethod
    def find_root(graph: nx.DiGraph):
        roots = [node for node, degree in graph.in_degree() if degree == 0]
        if len(roots) != 1:
            raise MalformedNodeDump(f"expected one root, found {len(roots)}")
        return roots[0]

    def parse_dump(self, dump: Any) -> Optional[NodeDescriptor]:
        """Linked NodeDescriptor tree for a dump, None when the dump is empty."""
        graph = self.load_graph(dump)
        if graph.number_of_nodes() == 0:
            return None

        def link(node_key) -> NodeDescriptor:
            descriptor = graph.nodes[node_key]["descriptor"]
            descriptor.children = [link(child) for child in self._ordered_children(graph, node_key)]
            return descriptor

        return link(self.find_root(graph))

    @staticmethod
    def _ordered_children(graph: nx.DiGraph, node_key) -> List[Any]:
        edges = graph.out_edges(node_key, data="order")
        return [child for _, child, _ in sorted(edges, key=lambda edge: edge[2])]

    def build(self, dump: Any) -> Optional[HierarchyNode]:
        root = self.parse_dump(dump)
        if root is None:
            logger.debug("Empty node dump, nothing to draw")
            return None
        return self.project(root)

    def project(self, descriptor: NodeDescriptor) -> HierarchyNode:
        return HierarchyNode(
            label=node_label(descriptor),
            tooltip=node_tooltip(descriptor),
            children=tuple(self.project(child) for child in descriptor.children),
        )
