"""
Poke Terminal: Price History Extraction & Price Change

Pulls a Near Mint price series out of the vendor's nested price-history
object and derives the card's percentage price change.

Search order:
    1. The first variant (vendor key order) whose "Near Mint" history is
       non-empty.
    2. The top-level "Near Mint" condition history.

With real history:
    priceChange = (last - first) / first * 100
computed over the chronologically first and last points. A zero or missing
first value gives 0.

Without history, priceChange falls back to a deterministic pseudo-random
value keyed by card id, so the UI shows the same trend on every reload.
"""

from __future__ import annotations

from typing import NamedTuple

import structlog

from poketerminal.models.canonical import PricePoint
from poketerminal.models.vendor import VendorCard, VendorHistoryEntry

logger = structlog.get_logger(__name__)

NEAR_MINT = "Near Mint"

# Fallback range: (n - 0.3) * 30 with n in [0, 0.999] -> [-9.0, 20.97]
_FALLBACK_OFFSET = 0.3
_FALLBACK_SCALE = 30.0


class PriceHistoryResult(NamedTuple):
    """Extracted series and the price change derived from it."""
    points: list[PricePoint]
    price_change: float
    is_fallback: bool


def _to_int32(value: int) -> int:
    """Fold an int to signed 32-bit two's complement."""
    return (value + 2**31) % 2**32 - 2**31


def fallback_price_change(card_id: str | None) -> float:
    """
    Deterministic pseudo-random price change for a card without history.

    Rolling hash h = (h << 5) - h + code_unit over the UTF-16 code units of
    the id, kept in signed 32-bit range, then scaled into [-9.0, 20.97]
    (biased positive). Uses only integer arithmetic, so cached and freshly
    computed values agree across processes.

    Examples:
        >>> round(fallback_price_change("a"), 2)
        -6.09
    """
    encoded = (card_id or "").encode("utf-16-le")
    h = 0
    for i in range(0, len(encoded), 2):
        code_unit = int.from_bytes(encoded[i:i + 2], "little")
        h = _to_int32((h << 5) - h + code_unit)

    normalized = (abs(h) % 1000) / 1000
    return (normalized - _FALLBACK_OFFSET) * _FALLBACK_SCALE


def calculate_price_change(points: list[PricePoint]) -> float:
    """
    Percent change between the first and last point.

    Returns 0.0 for an empty series or a zero first value.
    """
    if not points:
        return 0.0

    first = points[0].value
    last = points[-1].value
    if not first:
        return 0.0
    return (last - first) / first * 100


def _select_history(card: VendorCard) -> list[VendorHistoryEntry]:
    """Raw Near Mint history following the variant-then-condition order."""
    history = card.priceHistory
    if history is None:
        return []

    for variant_name, conditions in (history.variants or {}).items():
        near_mint = (conditions or {}).get(NEAR_MINT)
        if near_mint is not None and near_mint.history:
            logger.debug(
                "price_history_variant_selected",
                card_id=card.tcgPlayerId,
                variant=variant_name,
                points=len(near_mint.history),
            )
            return near_mint.history

    near_mint = (history.conditions or {}).get(NEAR_MINT)
    if near_mint is not None and near_mint.history:
        return near_mint.history

    return []


def _to_points(entries: list[VendorHistoryEntry]) -> list[PricePoint]:
    """Convert entries to PricePoints in chronological order."""
    points = [
        PricePoint(time=entry.date.split("T")[0], value=entry.market)
        for entry in entries
        if entry.date and entry.market is not None
    ]
    # ISO dates sort lexicographically; sort() is stable for same-day points
    points.sort(key=lambda p: p.time)
    return points


def extract_price_history(card: VendorCard, card_id: str | None = None) -> PriceHistoryResult:
    """
    Extract the Near Mint price series and price change for a vendor card.

    Args:
        card: Vendor card, possibly without any priceHistory.
        card_id: Canonical card identifier keying the fallback. Defaults to
            tcgPlayerId, then id.

    Returns:
        PriceHistoryResult. points is empty and is_fallback True when the
        vendor had no usable history.
    """
    points = _to_points(_select_history(card))

    if not points:
        return PriceHistoryResult(
            points=[],
            price_change=fallback_price_change(card_id or card.tcgPlayerId or card.id),
            is_fallback=True,
        )

    return PriceHistoryResult(
        points=points,
        price_change=calculate_price_change(points),
        is_fallback=False,
    )
