"""
Trie Inspector - Utilities Module

This module contains utility functions for:
- JSON serialization
- Hex text conversion
"""

from .serialization import save_to_json, load_from_json, bytes_to_hex, hex_to_bytes

__all__ = [
    'save_to_json',
    'load_from_json',
    'bytes_to_hex',
    'hex_to_bytes',
]
