"""
Poke Terminal: PokemonPriceTracker Response Models

Read-only shapes of the vendor payload. The vendor API is loosely typed and
fields come and go between plans and card kinds, so every field is optional
and unknown keys are ignored. The adapter (engine/adapter.py) owns all
fallbacks; these models only give the payload a name.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class VendorModel(BaseModel):
    """Base for vendor shapes: tolerant of extra and missing keys."""
    model_config = ConfigDict(extra="ignore")


def _identifier_as_string(v: Any) -> str | None:
    """Identifiers arrive as numbers for some older cards and sets."""
    if v is None or v == "":
        return None
    return str(v)


# ---------------------------------------------------------------------------
# Sets
# ---------------------------------------------------------------------------


class VendorSet(VendorModel):
    """A set as listed by GET /sets."""
    id: str | None = None
    tcgPlayerId: str | None = Field(default=None, description="Vendor slug, e.g. 'sv04-paradox-rift'")
    name: str | None = None
    series: str | None = None
    releaseDate: str | None = Field(default=None, description="ISO timestamp, e.g. '2023-11-03T00:00:00.000Z'")
    cardCount: int | None = None
    imageUrl: str | None = None
    imageCdnUrl: str | None = None
    imageCdnUrl200: str | None = None
    imageCdnUrl400: str | None = None
    imageCdnUrl800: str | None = None
    createdAt: str | None = None
    updatedAt: str | None = None

    @field_validator("id", "tcgPlayerId", mode="before")
    @classmethod
    def identifier_as_string(cls, v: Any) -> str | None:
        return _identifier_as_string(v)


class VendorSetsMetadata(VendorModel):
    total: int | None = None
    count: int | None = None


class VendorSetsResponse(VendorModel):
    data: list[VendorSet] = Field(default_factory=list)
    metadata: VendorSetsMetadata | None = None


# ---------------------------------------------------------------------------
# Prices
# ---------------------------------------------------------------------------


class VendorConditionPrice(VendorModel):
    """Price for one grading condition ("Near Mint", "Damaged", ...)."""
    price: float | None = None
    listings: int | None = None
    priceString: str | None = None


class VendorPrices(VendorModel):
    market: float | None = None
    listings: int | None = None
    primaryCondition: str | None = None
    conditions: dict[str, VendorConditionPrice | None] | None = None
    variants: dict[str, dict[str, VendorConditionPrice | None] | None] | None = Field(
        default=None,
        description="Variant name ('Holofoil', 'Reverse Holofoil') -> condition -> price",
    )
    lastUpdated: str | None = None


# ---------------------------------------------------------------------------
# Price history
# ---------------------------------------------------------------------------


class VendorHistoryEntry(VendorModel):
    date: str | None = None
    market: float | None = None
    volume: int | None = None


class VendorConditionHistory(VendorModel):
    history: list[VendorHistoryEntry] = Field(default_factory=list)
    dataPoints: int | None = None
    latestPrice: float | None = None
    latestDate: str | None = None

    @field_validator("history", mode="before")
    @classmethod
    def null_history_is_empty(cls, v: Any) -> Any:
        """The vendor sends history: null for conditions with no sales."""
        return [] if v is None else v


class VendorPriceHistory(VendorModel):
    conditions: dict[str, VendorConditionHistory | None] | None = None
    variants: dict[str, dict[str, VendorConditionHistory | None] | None] | None = None
    conditions_tracked: list[str] | None = None
    variants_tracked: list[str] | None = None
    totalDataPoints: int | None = None
    earliestDate: str | None = None
    latestDate: str | None = None


# ---------------------------------------------------------------------------
# Cards
# ---------------------------------------------------------------------------


class VendorAttack(VendorModel):
    name: str | None = None
    cost: list[str] | None = None
    damage: str | None = None
    text: str | None = None

    @field_validator("damage", mode="before")
    @classmethod
    def damage_as_string(cls, v: Any) -> str | None:
        """Damage is usually "30+" but plain integers show up too."""
        if v is None:
            return None
        return str(v)


class VendorTypeValue(VendorModel):
    """Weakness or resistance. type "None" means the card has none."""
    type: str | None = None
    value: str | None = None


class VendorCard(VendorModel):
    """A card as returned by GET /cards."""
    id: str | None = None
    tcgPlayerId: str | None = None
    setId: str | None = None
    setTcgPlayerId: str | None = None
    setName: str | None = None
    setCardCount: int | None = None
    setReleaseDate: str | None = None
    name: str | None = None
    cardNumber: str | None = None
    totalSetNumber: str | None = None
    rarity: str | None = None
    cardType: str | None = None
    hp: int | str | None = None
    stage: str | None = None
    attacks: list[VendorAttack] | None = None
    weakness: VendorTypeValue | None = None
    resistance: VendorTypeValue | None = None
    retreatCost: int | None = None
    artist: str | None = None
    tcgPlayerUrl: str | None = None
    prices: VendorPrices | None = None
    priceHistory: VendorPriceHistory | None = None
    imageUrl: str | None = None
    imageCdnUrl: str | None = None
    imageCdnUrl200: str | None = None
    imageCdnUrl400: str | None = None
    imageCdnUrl800: str | None = None
    createdAt: str | None = None
    updatedAt: str | None = None

    @field_validator("tcgPlayerId", "id", "setTcgPlayerId", "cardNumber", mode="before")
    @classmethod
    def identifier_as_string(cls, v: Any) -> str | None:
        return _identifier_as_string(v)


class VendorCardsMetadata(VendorModel):
    total: int | None = None
    count: int | None = None
    limit: int | None = None
    offset: int | None = None
    hasMore: bool | None = None


class VendorCardsResponse(VendorModel):
    data: list[VendorCard] = Field(default_factory=list)
    metadata: VendorCardsMetadata | None = None
