"""
Core domain models and pure functions for delivery pricing.

This module contains the domain models and pure business logic
that are independent of external I/O and infrastructure concerns.
"""

from .models import (
    Coordinate, Business, City, DeliveryRate, PickupArea, DeliveryArea,
    DeliveryResult, Address, DeliveryZones, Promotion, PromotionDetail,
    OrderLineItem, PromotionOutcome, OptionLine, OrderTotals,
)
from .errors import (
    PricingError, InvalidCoordinate, BusinessNotFound, AddressNotFound,
    ZoneUnresolved, PromotionLookupFailure, StoreUnavailable,
)
from .costs import aggregate

__all__ = [
    "Coordinate", "Business", "City", "DeliveryRate", "PickupArea", "DeliveryArea",
    "DeliveryResult", "Address", "DeliveryZones", "Promotion", "PromotionDetail",
    "OrderLineItem", "PromotionOutcome", "OptionLine", "OrderTotals",
    "PricingError", "InvalidCoordinate", "BusinessNotFound", "AddressNotFound",
    "ZoneUnresolved", "PromotionLookupFailure", "StoreUnavailable",
    "aggregate",
]
