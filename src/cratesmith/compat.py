"""Compatibility layer for Python version differences."""

from __future__ import annotations

import sys

# Cargo.toml files are read with tomllib (3.11+) or its backport
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found]

__all__ = ["tomllib"]
