"""Hashing, hierarchy building, layout, table rows, imports, scripts and text rendering."""
