"""
Trie Inspector

Interactive inspector for a content-addressed key/value trie:
- storage: canonical byte buffers, the trie engine and the entry mirror
- modules: hierarchy building, layout, tables, hashing, imports, scripts
- inspector: the session controller tying them together
"""

__version__ = "0.1.0"
