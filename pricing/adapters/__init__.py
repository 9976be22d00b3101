"""
Adapters for delivery pricing hexagonal architecture.

This module contains adapters that implement the port interfaces
over in-memory collections, SQLite, and in-process geometry.
"""

from .geometry import RayCastingGeometryOracle
from .memory import InMemoryCatalog

__all__ = ["RayCastingGeometryOracle", "InMemoryCatalog"]
