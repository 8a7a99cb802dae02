"""Byte canonicalization, render options, the trie engine and the entry mirror."""
