"""
Exception types raised across the inspector.
Every error derives from InspectorError so the CLI can report and continue.
"""


class InspectorError(Exception):
    """Base class for all inspector failures."""


class UnsupportedValueType(InspectorError, TypeError):
    """Raised when a key or value cannot be converted into a byte buffer."""

    def __init__(self, value):
        self.value = value
        super().__init__(
            f"can't convert value to bytes: {type(value).__name__} {value!r}"
        )


class MalformedImportFile(InspectorError, ValueError):
    """Raised when an import document cannot be read, parsed or validated."""


class ScriptExecutionError(InspectorError, RuntimeError):
    """Raised after a user script failed; the original error is the __cause__."""


class EngineOperationFailure(InspectorError):
    """Raised when the trie engine rejects an operation."""


class MalformedNodeDump(EngineOperationFailure):
    """Raised when an engine dump does not describe a single rooted tree."""
