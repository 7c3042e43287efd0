"""
Group directory package.

Groups are loaded once from static configuration and served from an
immutable snapshot; a reload builds a new snapshot and swaps it in.
"""
