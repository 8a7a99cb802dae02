"""
Import of chain-spec style JSON documents.

Only the raw top-level storage is read: ``genesis.raw.top`` maps ``0x`` hex
keys to ``0x`` hex values. The whole document is validated before anything is
returned, so a bad file never clears the current session.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from trie_inspector.errors import MalformedImportFile
from trie_inspector.utils.serialization import hex_to_bytes, load_from_json

logger = logging.getLogger(__name__)

TOP_PATH = ("genesis", "raw", "top")


def extract_top(document: Any) -> Dict[str, str]:
    """Walk down to genesis.raw.top, failing with the missing field name."""
    node = document
    for name in TOP_PATH:
        if not isinstance(node, dict) or name not in node:
            raise MalformedImportFile(f"Missing field: {'.'.join(TOP_PATH[:TOP_PATH.index(name) + 1])}")
        node = node[name]
    if not isinstance(node, dict):
        raise MalformedImportFile("genesis.raw.top must be a mapping of hex keys to hex values")
    return node


def parse_pairs(top: Dict[str, Any]) -> List[Tuple[bytes, bytes]]:
    """Decode every key and value; any malformed entry rejects the document."""
    pairs = []
    for key, value in top.items():
        if not isinstance(value, str):
            raise MalformedImportFile(f"Value for {key} is not a hex string")
        try:
            pairs.append((hex_to_bytes(key), hex_to_bytes(value)))
        except ValueError as e:
            raise MalformedImportFile(f"Invalid hex in entry {key[:20]}: {e}") from e
    return pairs


def parse_document(text: str) -> List[Tuple[bytes, bytes]]:
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedImportFile(f"Invalid JSON file: {e}") from e
    return parse_pairs(extract_top(document))


def read_import_file(filepath: Union[str, Path]) -> List[Tuple[bytes, bytes]]:
    """Read and validate an import file, returning its pairs in file order."""
    try:
        document = load_from_json(filepath)
    except FileNotFoundError as e:
        raise MalformedImportFile(str(e)) from e
    except json.JSONDecodeError as e:
        raise MalformedImportFile(f"Invalid JSON file: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise MalformedImportFile(f"error reading file: {e}") from e

    pairs = parse_pairs(extract_top(document))
    logger.info(f"Read {len(pairs)} entries from {filepath}")
    return pairs
