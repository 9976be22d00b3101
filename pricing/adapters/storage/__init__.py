"""
Storage adapters for delivery pricing hexagonal architecture.

This module contains storage adapters for the read-only catalog,
including the SQLite-based catalog store.
"""

from .sqlite_catalog import SQLiteCatalog

__all__ = ["SQLiteCatalog"]
