"""
Models package: vendor payload shapes and the canonical card/set model.
"""

from poketerminal.models.canonical import (
    CanonicalCard,
    CanonicalSet,
    CardsResponse,
    PriceData,
    PricePoint,
    SetsResponse,
)
from poketerminal.models.vendor import (
    VendorCard,
    VendorCardsResponse,
    VendorSet,
    VendorSetsResponse,
)

__all__ = [
    "CanonicalCard",
    "CanonicalSet",
    "CardsResponse",
    "PriceData",
    "PricePoint",
    "SetsResponse",
    "VendorCard",
    "VendorCardsResponse",
    "VendorSet",
    "VendorSetsResponse",
]
