"""
Poke Terminal: Set/Card Adapter

Transforms PokemonPriceTracker payloads into the canonical model.

Every function here is pure and total: vendor fields are read one by one
with a defined fallback, so an incomplete payload produces a sparser
canonical object instead of an exception.
"""

from __future__ import annotations

from typing import Any

import structlog

from poketerminal.engine.price_history import NEAR_MINT, extract_price_history
from poketerminal.models.canonical import (
    Attack,
    CanonicalCard,
    CanonicalSet,
    CardImages,
    CardsResponse,
    PriceData,
    SetsResponse,
    Supertype,
    TCGPlayerData,
    TCGPlayerPrices,
    TypeValue,
)
from poketerminal.models.vendor import (
    VendorAttack,
    VendorCard,
    VendorCardsMetadata,
    VendorConditionPrice,
    VendorPrices,
    VendorSet,
    VendorTypeValue,
)
from poketerminal.utils.set_identity import (
    canonical_image_urls,
    derive_set_slug,
    series_for,
    should_include,
)

logger = structlog.get_logger(__name__)

NAME_DECORATION_SEPARATOR = " - "
ABSENT_TYPE_SENTINEL = "None"
DEFAULT_WEAKNESS_VALUE = "x2"
DEFAULT_RESISTANCE_VALUE = "-30"
RETREAT_ENERGY = "Colorless"

# cardType values that describe the supertype, not an energy type
_NON_ENERGY_CARD_TYPES = frozenset({"Trainer", "Energy", "Pokemon"})

HOLOFOIL = "Holofoil"
REVERSE_HOLOFOIL = "Reverse Holofoil"

# ---------------------------------------------------------------------------
# Grading condition -> price slot
# "market" is not a condition: it comes from the vendor's market price.
# Heavily Played has no slot.
# ---------------------------------------------------------------------------
CONDITION_SLOTS: dict[str, str] = {
    "low": "Damaged",
    "mid": "Moderately Played",
    "high": NEAR_MINT,
    "directLow": "Lightly Played",
}


def _present(**fields: Any) -> dict[str, Any]:
    """Keyword arguments minus the ones that are None."""
    return {k: v for k, v in fields.items() if v is not None}


def normalize_release_date(raw: str | None) -> str:
    """
    "2023-11-03T00:00:00.000Z" -> "2023/11/03". Empty string when missing.
    """
    if not raw:
        return ""
    return raw.split("T")[0].replace("-", "/")


# ---------------------------------------------------------------------------
# Sets
# ---------------------------------------------------------------------------


def transform_set(vendor_set: VendorSet) -> CanonicalSet:
    """Vendor set -> CanonicalSet with derived series and canonical images."""
    slug = vendor_set.tcgPlayerId or derive_set_slug(vendor_set.name)
    card_count = vendor_set.cardCount or 0

    return CanonicalSet(
        id=slug,
        name=vendor_set.name or "",
        series=series_for(vendor_set.name),
        printedTotal=card_count,
        total=card_count,
        releaseDate=normalize_release_date(vendor_set.releaseDate),
        updatedAt=vendor_set.updatedAt or "",
        images=canonical_image_urls(slug),
    )


def transform_sets_response(vendor_sets: list[VendorSet]) -> SetsResponse:
    """
    Filter by the allow-list, then map.

    Counts describe the filtered list, never the raw vendor count.
    """
    included = [s for s in vendor_sets if should_include(s.name)]

    logger.debug(
        "sets_filtered",
        vendor_count=len(vendor_sets),
        included_count=len(included),
        dropped_count=len(vendor_sets) - len(included),
    )

    return SetsResponse(
        data=[transform_set(s) for s in included],
        page=1,
        pageSize=len(included),
        count=len(included),
        totalCount=len(included),
    )


# ---------------------------------------------------------------------------
# Cards
# ---------------------------------------------------------------------------


def clean_card_name(name: str | None) -> str:
    """'Pikachu VMAX - SWSH Promo' -> 'Pikachu VMAX'."""
    return (name or "").split(NAME_DECORATION_SEPARATOR)[0]


def determine_supertype(card_type: str | None, name: str | None) -> Supertype:
    """
    Classify a card as Pokémon, Trainer or Energy.

    An exact (case-insensitive) cardType match wins; otherwise the name is
    searched for the keyword; otherwise the card is a Pokémon.
    """
    lower_type = (card_type or "").lower()
    lower_name = (name or "").lower()

    if lower_type == "trainer":
        return "Trainer"
    if lower_type == "energy":
        return "Energy"
    if "trainer" in lower_name:
        return "Trainer"
    if "energy" in lower_name:
        return "Energy"
    return "Pokémon"


def _transform_attack(attack: VendorAttack) -> Attack:
    cost = attack.cost or []
    return Attack(
        name=attack.name or "",
        cost=cost,
        convertedEnergyCost=len(cost),
        damage=attack.damage or "",
        text=attack.text or "",
    )


def _type_values(raw: VendorTypeValue | None, default_value: str) -> list[TypeValue] | None:
    """Single-entry weakness/resistance list, or None for the "None" sentinel."""
    if raw is None or not raw.type or raw.type == ABSENT_TYPE_SENTINEL:
        return None
    return [TypeValue(type=raw.type, value=raw.value or default_value)]


def _condition_price(
    conditions: dict[str, VendorConditionPrice | None] | None,
    label: str,
) -> float | None:
    entry = (conditions or {}).get(label)
    return entry.price if entry is not None else None


def _price_data(
    conditions: dict[str, VendorConditionPrice | None] | None,
    market: float | None,
) -> PriceData:
    slots = {slot: _condition_price(conditions, label) for slot, label in CONDITION_SLOTS.items()}
    return PriceData(market=market, **slots)


def build_prices(prices: VendorPrices | None) -> TCGPlayerPrices:
    """
    Map vendor prices onto normal / holofoil / reverseHolofoil.

    normal is always present. Variants appear only when the vendor payload
    carried them.
    """
    prices = prices or VendorPrices()
    variants = prices.variants or {}

    holofoil = None
    if variants.get(HOLOFOIL) is not None:
        holo = variants[HOLOFOIL]
        holo_market = _condition_price(holo, NEAR_MINT)
        holofoil = _price_data(
            holo,
            market=holo_market if holo_market is not None else prices.market,
        )

    reverse_holofoil = None
    if variants.get(REVERSE_HOLOFOIL) is not None:
        reverse = variants[REVERSE_HOLOFOIL]
        reverse_holofoil = _price_data(reverse, market=_condition_price(reverse, NEAR_MINT))

    return TCGPlayerPrices(
        normal=_price_data(prices.conditions, market=prices.market),
        **_present(holofoil=holofoil, reverseHolofoil=reverse_holofoil),
    )


def build_card_set(card: VendorCard) -> CanonicalSet:
    """
    Rebuild set info from the fields embedded in a card payload.

    Falls back to a slug derived from the set name when the vendor left
    setTcgPlayerId out.
    """
    slug = card.setTcgPlayerId or derive_set_slug(card.setName)
    card_count = card.setCardCount or 0

    return CanonicalSet(
        id=slug,
        name=card.setName or "",
        series=series_for(card.setName),
        printedTotal=card_count,
        total=card_count,
        releaseDate=normalize_release_date(card.setReleaseDate),
        updatedAt=card.updatedAt or "",
        images=canonical_image_urls(slug),
    )


def transform_card(card: VendorCard) -> CanonicalCard:
    """Vendor card -> CanonicalCard."""
    card_id = card.tcgPlayerId or card.id or ""
    history = extract_price_history(card, card_id=card_id)
    prices = card.prices or VendorPrices()

    types = None
    if card.cardType and card.cardType not in _NON_ENERGY_CARD_TYPES:
        types = [card.cardType]

    attacks = None
    if card.attacks is not None:
        attacks = [_transform_attack(a) for a in card.attacks]

    retreat_cost = None
    if card.retreatCost:
        retreat_cost = [RETREAT_ENERGY] * card.retreatCost

    return CanonicalCard(
        id=card_id,
        name=clean_card_name(card.name),
        supertype=determine_supertype(card.cardType, card.name),
        set=build_card_set(card),
        number=card.cardNumber or "",
        rarity=card.rarity or "",
        images=CardImages(
            small=card.imageCdnUrl200 or card.imageUrl or "",
            large=card.imageCdnUrl800 or card.imageCdnUrl400 or card.imageUrl or "",
        ),
        tcgplayer=TCGPlayerData(
            url=card.tcgPlayerUrl or "",
            updatedAt=prices.lastUpdated or card.updatedAt or "",
            prices=build_prices(prices),
        ),
        priceChange=history.price_change,
        **_present(
            hp=str(card.hp) if card.hp is not None else None,
            types=types,
            attacks=attacks,
            weaknesses=_type_values(card.weakness, DEFAULT_WEAKNESS_VALUE),
            resistances=_type_values(card.resistance, DEFAULT_RESISTANCE_VALUE),
            retreatCost=retreat_cost,
            convertedRetreatCost=card.retreatCost,
            artist=card.artist or None,
            priceHistory=history.points or None,
        ),
    )


def transform_cards_response(
    vendor_cards: list[VendorCard],
    metadata: VendorCardsMetadata | None,
) -> CardsResponse:
    """
    Map a vendor card page.

    page = offset // limit + 1. Counts come from the vendor metadata; when
    it is missing, the page is treated as the whole result.
    """
    metadata = metadata or VendorCardsMetadata()
    limit = metadata.limit if metadata.limit is not None else len(vendor_cards)
    offset = metadata.offset or 0
    page = offset // limit + 1 if limit > 0 else 1

    return CardsResponse(
        data=[transform_card(c) for c in vendor_cards],
        page=page,
        pageSize=limit,
        count=metadata.count if metadata.count is not None else len(vendor_cards),
        totalCount=metadata.total if metadata.total is not None else len(vendor_cards),
    )
