"""
Render options shared by every render pass.
The session holds one RenderOptions value and swaps it for a new one whenever
a UI control changes, so a render always sees a consistent set.
"""

from enum import Enum
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional


class LayoutMode(Enum):
    TREE = "tree"
    CLUSTER = "cluster"


@dataclass(frozen=True)
class RenderOptions:
    layout_mode: LayoutMode = LayoutMode.TREE
    x_scale: float = 5.0
    y_scale: float = 1.0
    show_storage_nodes: bool = False
    truncate_big_values: Optional[int] = 32

    def __post_init__(self):
        if not isinstance(self.layout_mode, LayoutMode):
            object.__setattr__(self, "layout_mode", LayoutMode(self.layout_mode))
        if self.truncate_big_values is not None and self.truncate_big_values < 0:
            raise ValueError("truncate_big_values must not be negative")

    def with_changes(self, **changes) -> "RenderOptions":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "layout_mode": self.layout_mode.value,
            "x_scale": self.x_scale,
            "y_scale": self.y_scale,
            "show_storage_nodes": self.show_storage_nodes,
            "truncate_big_values": self.truncate_big_values,
        }
