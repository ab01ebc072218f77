"""Configuration constants.

Values here are not user-configurable or serve as defaults for models.py.
"""

# =============================================================================
# Defaults
# =============================================================================

DEFAULT_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx")
"""File extensions that participate in an index unless configured otherwise."""

DEFAULT_DEBOUNCE_MS = 2000
"""Quiet period before a directory's index is regenerated."""

DEFAULT_INDEX_EXTENSION = ".ts"
"""Extension of the generated index file."""

DEFAULT_MAX_SCAN_DEPTH = 64
"""Directory depth bound for the one-shot scanner."""

DEFAULT_INCLUDE_PATTERNS = ("**/*",)
"""Include patterns used when a directory entry has no ``match``."""

# =============================================================================
# Project layout
# =============================================================================

CONFIG_FILENAMES = ("barrelwatch.yaml", ".barrelwatch.yaml")
"""Config files looked up in the project root, first match wins."""

INDEX_BASENAME = "index"
"""Stem of the generated index file."""

# =============================================================================
# Generated output
# =============================================================================

HEADER = """\
// This file is auto-generated by barrelwatch. Do not edit it manually.
// Changes are overwritten whenever a file in this directory changes.

"""
"""Fixed prefix of every generated index file."""
