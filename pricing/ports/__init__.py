"""
Port interfaces for delivery pricing hexagonal architecture.

This module defines the port interfaces (Protocols) that define
the contracts between the pricing engines and external adapters.
"""

from .geometry import GeometryOracle, PolygonStore
from .stores import (
    BusinessStore, CityStore, RateStore, AreaStore, PromotionStore, AddressStore,
)

__all__ = [
    "GeometryOracle", "PolygonStore", "BusinessStore", "CityStore",
    "RateStore", "AreaStore", "PromotionStore", "AddressStore",
]
