"""
Session controller that ties the trie engine, the mirror, the script sandbox
and the views together. Every user action ends with a render pass so the
table and the chart always show the current committed state.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from trie_inspector.config import Config
from trie_inspector.modules.hashing import HashingModule
from trie_inspector.modules.hierarchy import HierarchyBuilder, HierarchyNode
from trie_inspector.modules.importer import read_import_file
from trie_inspector.modules.layout import ChartLayout, compute_layout
from trie_inspector.modules.script_sandbox import ScriptSandbox
from trie_inspector.modules.table_view import StorageRow, TableRow, storage_rows, value_rows
from trie_inspector.storage.canonical import BufferLike
from trie_inspector.storage.mirror_store import Entry, MirrorStore
from trie_inspector.storage.render_options import LayoutMode, RenderOptions
from trie_inspector.storage.trie_engine import MemoryTrieEngine, TrieEngine
from trie_inspector.utils.serialization import save_to_json

logger = logging.getLogger(__name__)

WELL_KNOWN_KEYS = [
    # substrate well known keys
    ":code",
    ":heappages",
    ":extrinsic_index",
    ":changes_trie",
    ":child_storage",

    # polkadot well known keys
    "0x06de3d8a54d27e44a9d5ce189618f22db4b49d95320d9021994c850f25b8e385",
    "0xf5207f03cfdce586301014700e2c2593fad157e461d71fd4c1f936839a5f1f3e",
    "0x6a0da05ca59913bc38a8630590f2627cb6604cff828a6e3f579ca6c59ace013d",
    "0x6a0da05ca59913bc38a8630590f2627c1d3719f5b0b12c7105c073c507445948",
    "0x6a0da05ca59913bc38a8630590f2627cf12b746dcf32e843354583c9702cc020",
    "0x63f78c98723ddc9073523ef3beefda0c4d7fefc408aac59dbfe80a72ac8e3ce5",
]

Y_SCALE_SLIDER_DIVISOR = 50


def well_known_entries() -> List[Tuple[str, int]]:
    """Seed pairs: hex keys sorted as text, each valued with its position."""
    keys = sorted(
        key if key.startswith("0x") else "0x" + key.encode("ascii").hex()
        for key in WELL_KNOWN_KEYS
    )
    return [(key, index) for index, key in enumerate(keys)]


@dataclass
class RenderResult:
    """Everything one render pass produced."""
    options: RenderOptions
    table: List[TableRow] = field(default_factory=list)
    storage: List[StorageRow] = field(default_factory=list)
    storage_total: int = 0
    hierarchy: Optional[HierarchyNode] = None
    layout: ChartLayout = field(default_factory=ChartLayout)
    root: bytes = b""
    entry_count: int = 0


class Inspector:
    """
    One interactive inspection session.
    Owns the engine and the mirror and holds the current RenderOptions value,
    which option handlers replace rather than mutate.
    """

    def __init__(self, config: Config = None, engine: Optional[TrieEngine] = None, seed: Optional[bool] = None):
        self.config = config or Config()
        self.engine = engine or MemoryTrieEngine()
        self.store = MirrorStore(self.engine)
        self.hashing = HashingModule()
        self.builder = HierarchyBuilder()
        self.sandbox = ScriptSandbox(self.store, self.hashing, on_complete=self.render)
        self.options = self.config.render_options()
        self.last_render: Optional[RenderResult] = None

        if seed is None:
            seed = self.config.SEED_WELL_KNOWN_KEYS
        if seed:
            self._seed()

        logger.info(f"Inspector ready with {len(self.store)} entries")

    def _seed(self) -> None:
        for key, value in well_known_entries():
            self.store.insert(key, value)
        self.store.commit()

    @property
    def entries(self) -> Tuple[Entry, ...]:
        return self.store.entries

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, options: Optional[RenderOptions] = None) -> RenderResult:
        """Build table rows, storage rows and the chart from current state."""
        options = options or self.options

        rows = value_rows(self.store, options.truncate_big_values, self.config.TABLE_ROW_LIMIT)

        storage: List[StorageRow] = []
        total = 0
        if options.show_storage_nodes:
            storage, total = storage_rows(self.store.values())

        hierarchy = self.builder.build(self.store.db_values())
        layout = compute_layout(hierarchy, options, self.config.CHART_WIDTH, self.config.NODE_RADIUS)

        result = RenderResult(
            options=options,
            table=rows,
            storage=storage,
            storage_total=total,
            hierarchy=hierarchy,
            layout=layout,
            root=self.store.root(),
            entry_count=len(self.store),
        )
        self.last_render = result
        return result

    def export_chart(self, filepath: Union[str, Path]) -> Path:
        """Write the current hierarchy and its layout to a JSON file."""
        result = self.render()
        filepath = Path(filepath)
        if not filepath.is_absolute() and filepath.parent == Path("."):
            filepath = self.config.EXPORT_DIR / filepath
        save_to_json({
            "root": "0x" + result.root.hex(),
            "options": result.options.to_dict(),
            "hierarchy": result.hierarchy.to_dict() if result.hierarchy else None,
            "layout": result.layout.to_dict(),
            "entries": [entry.to_dict() for entry in self.store],
        }, filepath)
        logger.info(f"Chart exported to: {filepath}")
        return filepath

    # ------------------------------------------------------------------
    # Data actions
    # ------------------------------------------------------------------

    def insert_from_text(self, key_text: str, value_text: str) -> RenderResult:
        """Manual insert: whitespace is ignored and both fields are read as hex."""
        key = "".join(key_text.split())
        value = "".join(value_text.split())
        if not key:
            raise ValueError("Please provide a valid key")
        if not value:
            raise ValueError("Please provide a valid value")
        return self.insert("0x" + key, "0x" + value)

    def insert(self, key: BufferLike, value: BufferLike) -> RenderResult:
        self.store.insert(key, value)
        self.store.commit()
        return self.render()

    def remove_entry(self, key: BufferLike) -> RenderResult:
        self.store.remove(key)
        self.store.commit()
        return self.render()

    def remove_row(self, row: int) -> RenderResult:
        """Remove by 1-based table row number."""
        entries = self.store.entries
        if not 1 <= row <= len(entries):
            raise IndexError(f"No row {row}, table has {len(entries)} rows")
        return self.remove_entry(entries[row - 1].key)

    def get(self, key: BufferLike) -> bytes:
        return self.store.get(key)

    def clear(self) -> RenderResult:
        self.store.clear()
        self.store.commit()
        return self.render()

    def import_file(self, filepath: Union[str, Path]) -> RenderResult:
        """Replace the whole state with a genesis file; state is kept if it is invalid."""
        pairs = read_import_file(filepath)
        self.store.bulk_load(pairs)
        return self.render()

    def run_script(self, source: str) -> RenderResult:
        self.sandbox.run(source)
        return self.last_render

    def run_script_file(self, filepath: Union[str, Path]) -> RenderResult:
        self.sandbox.run_file(filepath)
        return self.last_render

    # ------------------------------------------------------------------
    # Option handlers
    # ------------------------------------------------------------------

    def _update_options(self, **changes: Any) -> RenderResult:
        self.options = self.options.with_changes(**changes)
        logger.debug(f"Render options changed: {changes}")
        return self.render()

    def set_layout_mode(self, mode: Union[str, LayoutMode]) -> RenderResult:
        return self._update_options(layout_mode=LayoutMode(mode))

    def set_x_scale(self, value: float) -> RenderResult:
        return self._update_options(x_scale=float(value))

    def set_y_scale(self, value: float) -> RenderResult:
        return self._update_options(y_scale=float(value))

    def set_y_scale_slider(self, position: int) -> RenderResult:
        return self.set_y_scale(int(position) / Y_SCALE_SLIDER_DIVISOR)

    def set_show_storage_nodes(self, show: bool) -> Optional[RenderResult]:
        if show == self.options.show_storage_nodes:
            return None
        return self._update_options(show_storage_nodes=show)

    def set_truncate_big_values(self, limit: Optional[int]) -> RenderResult:
        return self._update_options(truncate_big_values=limit or None)

    def statistics(self) -> Dict[str, Any]:
        return {
            "entries": len(self.store),
            "stored_nodes": len(self.store.values()),
            "root": "0x" + self.store.root().hex(),
            "layout_mode": self.options.layout_mode.value,
        }

    def __repr__(self) -> str:
        return f"Inspector(entries={len(self.store)}, options={self.options})"
