"""
Serialization Module

Provides utilities for saving and loading JSON documents and for
converting byte buffers to and from their ``0x`` hex text form.
"""

import json
from typing import Any, Dict
from pathlib import Path


def bytes_to_hex(value: bytes) -> str:
    """
    Convert a byte buffer to prefixed hex text.

    Args:
        value: Byte buffer

    Returns:
        str: ``0x`` followed by lowercase hex digits
    """
    return "0x" + bytes(value).hex()


def hex_to_bytes(text: str) -> bytes:
    """
    Convert prefixed hex text back to bytes.

    Args:
        text: Hex string starting with ``0x``

    Returns:
        bytes: Decoded buffer

    Raises:
        ValueError: If the prefix is missing or the digits are malformed
    """
    if not text.startswith("0x"):
        raise ValueError(f"missing 0x prefix: {text[:16]!r}")
    return bytes.fromhex(text[2:])


def save_to_json(data: Dict[str, Any], filepath: str) -> None:
    """
    Save data to JSON file.

    Args:
        data: Dictionary to save
        filepath: Path to save the JSON file
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def load_from_json(filepath: str) -> Dict[str, Any]:
    """
    Load data from JSON file.

    Args:
        filepath: Path to the JSON file

    Returns:
        dict: Loaded data

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If the content is not valid JSON
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"File not found: {filepath}")

    with open(filepath, 'r', encoding='utf-8') as f:
        return json.load(f)
