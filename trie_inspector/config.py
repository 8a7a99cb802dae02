"""
Centralized configuration that loads settings from environment variables
(and a local .env file) and provides the initial render options for a session.
"""

import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

from trie_inspector.storage.render_options import LayoutMode, RenderOptions

load_dotenv()

TRUE_VALUES = ("1", "true", "yes", "on")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in TRUE_VALUES


class Config:
    """
    Configuration container for one inspector session.
    Every value can be overridden through the environment.
    """

    def __init__(self):
        """
        Load all configuration values from environment variables with sensible defaults.
        Raises ValueError for values that cannot be parsed.
        """

        self.PROJECT_ROOT = Path(__file__).parent.parent

        layout_mode = os.getenv("LAYOUT_MODE", "tree").lower()
        try:
            self.LAYOUT_MODE = LayoutMode(layout_mode)
        except ValueError:
            raise ValueError(
                f"Unsupported LAYOUT_MODE: {layout_mode}. "
                f"Use: tree or cluster"
            )

        self.X_SCALE = float(os.getenv("X_SCALE", "5"))
        self.Y_SCALE = float(os.getenv("Y_SCALE", "1"))
        self.SHOW_STORAGE_NODES = _env_flag("SHOW_STORAGE_NODES", "false")

        truncate = int(os.getenv("TRUNCATE_BIG_VALUES", "32"))
        self.TRUNCATE_BIG_VALUES: Optional[int] = truncate if truncate > 0 else None

        self.TABLE_ROW_LIMIT = int(os.getenv("TABLE_ROW_LIMIT", "301"))
        self.CHART_WIDTH = int(os.getenv("CHART_WIDTH", "1152"))
        self.NODE_RADIUS = float(os.getenv("NODE_RADIUS", "5"))

        self.SEED_WELL_KNOWN_KEYS = _env_flag("SEED_WELL_KNOWN_KEYS", "true")

        self.EXPORT_DIR = self.PROJECT_ROOT / os.getenv("EXPORT_DIR", "data/exports")
        self.LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))

        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    def render_options(self) -> RenderOptions:
        """Initial render options for a new session."""
        return RenderOptions(
            layout_mode=self.LAYOUT_MODE,
            x_scale=self.X_SCALE,
            y_scale=self.Y_SCALE,
            show_storage_nodes=self.SHOW_STORAGE_NODES,
            truncate_big_values=self.TRUNCATE_BIG_VALUES,
        )

    def __repr__(self) -> str:
        """Generate a human-readable summary of key configuration values."""
        return (
            f"Config(\n"
            f"  Layout: {self.LAYOUT_MODE.value} (x={self.X_SCALE}, y={self.Y_SCALE})\n"
            f"  Storage Nodes: {self.SHOW_STORAGE_NODES}\n"
            f"  Truncate Values: {self.TRUNCATE_BIG_VALUES}\n"
            f"  Export Dir: {self.EXPORT_DIR}\n"
            f")"
        )
