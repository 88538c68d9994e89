"""
Poke Terminal: Canonical Card & Set Models

The application's stable representation of cards and sets, decoupled from
the vendor shape. Field names are the JSON names the UI consumes.

Models are frozen value objects. Optional fields are left unset rather than
set to None when the vendor had no data, and responses are serialized with
exclude_unset, so an absent variant or weakness never reaches the UI as a
null placeholder. Price slots are the exception: they are always set and
serialize as null when unknown.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Supertype = Literal["Pokémon", "Trainer", "Energy"]


class CanonicalModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    def to_json(self) -> dict[str, Any]:
        """JSON-ready dict, omitting optional fields that were never set."""
        return self.model_dump(mode="json", exclude_unset=True)


# ---------------------------------------------------------------------------
# Sets
# ---------------------------------------------------------------------------


class SetImages(CanonicalModel):
    """Empty strings (never null) when the set has no canonical image id."""
    symbol: str = ""
    logo: str = ""


class CanonicalSet(CanonicalModel):
    id: str
    name: str
    series: str
    printedTotal: int = 0
    total: int = 0
    releaseDate: str = Field(default="", description="YYYY/MM/DD")
    updatedAt: str = ""
    images: SetImages = Field(default_factory=SetImages)


# ---------------------------------------------------------------------------
# Cards
# ---------------------------------------------------------------------------


class Attack(CanonicalModel):
    name: str
    cost: list[str] = Field(default_factory=list)
    convertedEnergyCost: int = 0
    damage: str = ""
    text: str = ""


class TypeValue(CanonicalModel):
    type: str
    value: str


class CardImages(CanonicalModel):
    small: str = ""
    large: str = ""


class PriceData(CanonicalModel):
    """Five fixed slots. None means the condition had no price upstream."""
    low: float | None
    mid: float | None
    high: float | None
    market: float | None
    directLow: float | None


class TCGPlayerPrices(CanonicalModel):
    normal: PriceData
    holofoil: PriceData | None = None
    reverseHolofoil: PriceData | None = None


class TCGPlayerData(CanonicalModel):
    url: str = ""
    updatedAt: str = ""
    prices: TCGPlayerPrices


class PricePoint(CanonicalModel):
    time: str = Field(..., description="YYYY-MM-DD")
    value: float


class CanonicalCard(CanonicalModel):
    id: str
    name: str
    supertype: Supertype
    hp: str | None = None
    types: list[str] | None = None
    attacks: list[Attack] | None = None
    weaknesses: list[TypeValue] | None = None
    resistances: list[TypeValue] | None = None
    retreatCost: list[str] | None = None
    convertedRetreatCost: int | None = None
    set: CanonicalSet
    number: str = ""
    artist: str | None = None
    rarity: str = ""
    images: CardImages = Field(default_factory=CardImages)
    tcgplayer: TCGPlayerData
    priceChange: float = 0.0
    priceHistory: list[PricePoint] | None = None


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


class CardsResponse(CanonicalModel):
    data: list[CanonicalCard] = Field(default_factory=list)
    page: int = 1
    pageSize: int = 0
    count: int = 0
    totalCount: int = 0


class SetsResponse(CanonicalModel):
    data: list[CanonicalSet] = Field(default_factory=list)
    page: int = 1
    pageSize: int = 0
    count: int = 0
    totalCount: int = 0
