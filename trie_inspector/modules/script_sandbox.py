"""
Runs user scripts against the live session.

A script sees exactly four names: ``trie`` (the MirrorStore), ``data`` (the
unchecked entry list), ``hashing`` (the hash functions) and ``Buffer`` (byte
coercion helpers). The code is trusted completely; there is no isolation
beyond its own globals dict. Whatever the script does, the trie is committed
and the views re-rendered afterwards, and only then is a failure reported.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from trie_inspector.errors import ScriptExecutionError
from trie_inspector.modules.hashing import HashingModule
from trie_inspector.storage.canonical import ByteBuffer
from trie_inspector.storage.mirror_store import MirrorStore

logger = logging.getLogger(__name__)

SCRIPT_FILENAME = "<script>"


class ScriptSandbox:
    """Executes scripts with a fixed set of bound capabilities."""

    def __init__(
        self,
        store: MirrorStore,
        hashing: Optional[HashingModule] = None,
        on_complete: Optional[Callable[[], Any]] = None,
    ):
        self.store = store
        self.hashing = hashing or HashingModule()
        self.on_complete = on_complete

    def capabilities(self) -> Dict[str, Any]:
        return {
            "trie": self.store,
            "data": self.store.unsafe_entries(),
            "hashing": self.hashing,
            "Buffer": ByteBuffer,
        }

    def run(self, source: str) -> None:
        """
        Execute source, then commit and re-render. A failure inside the
        script is raised as ScriptExecutionError once both have run.
        """
        scope: Dict[str, Any] = {"__name__": "__script__"}
        scope.update(self.capabilities())

        error: Optional[ScriptExecutionError] = None
        try:
            code = compile(source, SCRIPT_FILENAME, "exec")
            exec(code, scope)
            logger.info("Script finished")
        except Exception as e:
            logger.error(f"Script failed: {type(e).__name__}: {e}")
            error = ScriptExecutionError(f"{type(e).__name__}: {e}")
            error.__cause__ = e
        finally:
            root = self.store.commit()
            logger.info(f"Committed after script, root 0x{root.hex()}")
            if self.on_complete is not None:
                self.on_complete()

        if error is not None:
            raise error

    def run_file(self, filepath: Union[str, Path]) -> None:
        source = Path(filepath).read_text(encoding="utf-8")
        logger.info(f"Running script file: {filepath}")
        self.run(source)
