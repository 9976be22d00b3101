"""
Pricing engines for delivery pricing.

This module contains the zone resolver with its strategies
and the promotion engine.
"""

from .zone_resolver import ZoneResolver
from .promotion_engine import PromotionEngine

__all__ = ["ZoneResolver", "PromotionEngine"]
