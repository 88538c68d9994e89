"""
Poke Terminal: Set Identity Resolver

Three curation tables for vendor sets:

- _VENDOR_TO_CANONICAL: vendor slug -> pokemontcg.io set id. The canonical id
  feeds a fixed image URL template, so set logos and symbols stay stable
  even when the vendor renames a slug.
- SERIES_RULES: ORDERED (pattern, series) rules evaluated first-match-wins.
  Specific names must precede generic era prefixes; reordering the list
  changes classification output.
- ALLOWED_SET_PATTERNS: unordered allow-list. A vendor set whose display name
  matches none of these is dropped from every listing. The vendor catalog
  carries regional and promo noise the product does not surface.
"""

from __future__ import annotations

import re
from typing import NamedTuple

import structlog

from poketerminal.models.canonical import SetImages

logger = structlog.get_logger(__name__)

IMAGE_BASE_URL = "https://images.pokemontcg.io"
OTHER_SERIES = "Other"


class PatternRule(NamedTuple):
    """One classification rule: the first rule whose pattern matches wins."""
    pattern: re.Pattern[str]
    result: str

    def matches(self, name: str) -> bool:
        return self.pattern.search(name) is not None


def _rule(pattern: str, result: str) -> PatternRule:
    return PatternRule(re.compile(pattern, re.IGNORECASE), result)


# ---------------------------------------------------------------------------
# Vendor slug -> pokemontcg.io id
# ---------------------------------------------------------------------------

_VENDOR_TO_CANONICAL: dict[str, str] = {
    # Scarlet & Violet era
    "sv10-destined-rivals": "sv10",
    "sv09-journey-together": "sv9",
    "sv-prismatic-evolutions": "sv8",
    "sv-black-bolt": "sv8a",
    "sv-white-flare": "sv8a",
    # Mega Evolution era (2025 sets, no pokemontcg.io images yet)
    "me01-mega-evolution": "sv8a",
    "me02-phantasmal-flames": "sv8a",
    "sv08-surging-sparks": "sv7",
    "sv07-stellar-crown": "sv6pt5",
    "sv-shrouded-fable": "sv6pt5",
    "sv06-twilight-masquerade": "sv6",
    "sv05-temporal-forces": "sv5",
    "sv-paldean-fates": "sv4pt5",
    "sv04-paradox-rift": "sv4",
    "sv-scarlet-and-violet-151": "sv3pt5",
    "sv03-obsidian-flames": "sv3",
    "sv02-paldea-evolved": "sv2",
    "sv01-scarlet-and-violet-base-set": "sv1",
    # Sword & Shield era
    "crown-zenith": "swsh12pt5",
    "crown-zenith-galarian-gallery": "swsh12pt5gg",
    "swsh12-silver-tempest": "swsh12",
    "swsh12-silver-tempest-trainer-gallery": "swsh12tg",
    "swsh11-lost-origin": "swsh11",
    "swsh11-lost-origin-trainer-gallery": "swsh11tg",
    "swsh10-astral-radiance": "swsh10",
    "swsh10-astral-radiance-trainer-gallery": "swsh10tg",
    "swsh09-brilliant-stars": "swsh9",
    "swsh09-brilliant-stars-trainer-gallery": "swsh9tg",
    "swsh08-fusion-strike": "swsh8",
    "swsh07-evolving-skies": "swsh7",
    "swsh06-chilling-reign": "swsh6",
    "swsh05-battle-styles": "swsh5",
    "shining-fates": "swsh45",
    "shining-fates-shiny-vault": "swsh45sv",
    "swsh04-vivid-voltage": "swsh4",
    "champions-path": "swsh35",
    "swsh03-darkness-ablaze": "swsh3",
    "swsh02-rebel-clash": "swsh2",
    "swsh01-sword-and-shield-base-set": "swsh1",
    "hidden-fates": "sm115",
    "hidden-fates-shiny-vault": "sma",
    # Sun & Moon era
    "sm-cosmic-eclipse": "sm12",
    "sm-unified-minds": "sm11",
    "sm-unbroken-bonds": "sm10",
    "sm-team-up": "sm9",
    "sm-lost-thunder": "sm8",
    "dragon-majesty": "sm75",
    "sm-celestial-storm": "sm7",
    "sm-forbidden-light": "sm6",
    "sm-ultra-prism": "sm5",
    "sm-crimson-invasion": "sm4",
    "shining-legends": "sm35",
    "sm-burning-shadows": "sm3",
    "sm-guardians-rising": "sm2",
    "sm-base-set": "sm1",
    "detective-pikachu": "det1",
    "sm-trainer-kit-lycanroc-and-alolan-raichu": "smp",
    # XY era
    "xy-evolutions": "xy12",
    "xy-steam-siege": "xy11",
    "xy-fates-collide": "xy10",
    "generations": "g1",
    "generations-radiant-collection": "g1",
    "xy-breakpoint": "xy9",
    "xy-breakthrough": "xy8",
    "xy-ancient-origins": "xy7",
    "xy-roaring-skies": "xy6",
    "xy-primal-clash": "xy5",
    "xy-phantom-forces": "xy4",
    "xy-furious-fists": "xy3",
    "xy-flashfire": "xy2",
    "xy-base-set": "xy1",
    # Black & White era
    "legendary-treasures": "bw11",
    "legendary-treasures-radiant-collection": "rc1",
    "noble-victories": "bw3",
    "dragons-exalted": "bw6",
    # HeartGold SoulSilver
    "triumphant": "hgss4",
    "undaunted": "hgss3",
    "unleashed": "hgss2",
    "hgss-promos": "hsp",
    "hgss-trainer-kit-gyarados-and-raichu": "hsp",
    # Platinum
    "arceus": "pl4",
    "platinum": "pl1",
    # Classic sets
    "base-set": "base1",
    "base-set-shadowless": "base1",
    "jungle": "base2",
    "fossil": "base3",
    "base-set-2": "base4",
    "team-rocket": "base5",
    "gym-heroes": "gym1",
    "gym-challenge": "gym2",
    "neo-genesis": "neo1",
    "neo-discovery": "neo2",
    "neo-revelation": "neo3",
    "neo-destiny": "neo4",
    "expedition": "ecard1",
    "aquapolis": "ecard2",
    "skyridge": "ecard3",
    # Special sets
    "celebrations": "cel25",
    "celebrations-classic-collection": "cel25c",
    # Promos
    "sm-promos": "smp",
    # Battle Academy
    "battle-academy": "bat",
    "battle-academy-2022": "bat",
    "battle-academy-2024": "bat",
}


# ---------------------------------------------------------------------------
# Series classification (ORDER MATTERS)
# ---------------------------------------------------------------------------

SERIES_RULES: tuple[PatternRule, ...] = (
    # Mega Evolution sets are grouped with Scarlet & Violet
    _rule(r"^ME\d{2}:", "Scarlet & Violet"),
    _rule(r"^SV\d{2}:", "Scarlet & Violet"),
    _rule(r"^SV:", "Scarlet & Violet"),
    _rule(r"^SV10:", "Scarlet & Violet"),
    _rule(r"^SWSH\d{2}:", "Sword & Shield"),
    _rule(r"Crown Zenith", "Sword & Shield"),
    _rule(r"Shining Fates", "Sword & Shield"),
    _rule(r"Champion's Path", "Sword & Shield"),
    _rule(r"Hidden Fates", "Sword & Shield"),
    _rule(r"^SM\s", "Sun & Moon"),
    _rule(r"Dragon Majesty", "Sun & Moon"),
    _rule(r"Shining Legends", "Sun & Moon"),
    _rule(r"Detective Pikachu", "Sun & Moon"),
    _rule(r"^XY\s*-", "XY"),
    _rule(r"^XY Base Set", "XY"),
    _rule(r"^Generations", "XY"),
    _rule(r"^BW\d{2}:", "Black & White"),
    _rule(r"Noble Victories", "Black & White"),
    _rule(r"Dragons Exalted", "Black & White"),
    _rule(r"Legendary Treasures", "Black & White"),
    _rule(r"^HGSS", "HeartGold & SoulSilver"),
    _rule(r"Undaunted", "HeartGold & SoulSilver"),
    _rule(r"Unleashed", "HeartGold & SoulSilver"),
    _rule(r"Triumphant", "HeartGold & SoulSilver"),
    _rule(r"Platinum", "Platinum"),
    _rule(r"Arceus", "Platinum"),
    _rule(r"^Neo ", "Neo"),
    _rule(r"Expedition", "E-Card"),
    _rule(r"Aquapolis", "E-Card"),
    _rule(r"Skyridge", "E-Card"),
    _rule(r"^Gym ", "Gym"),
    _rule(r"^Base Set", "Base Set"),
    _rule(r"^Jungle$", "Base Set"),
    _rule(r"^Fossil$", "Base Set"),
    _rule(r"^Team Rocket$", "Base Set"),
    _rule(r"Celebrations", "Special"),
    _rule(r"Battle Academy", "Special"),
    _rule(r"Trainer Gallery", "Special"),
    _rule(r"Galarian Gallery", "Special"),
    _rule(r"Shiny Vault", "Special"),
    _rule(r"Radiant Collection", "Special"),
)


# ---------------------------------------------------------------------------
# Allow-list (any match includes the set)
# ---------------------------------------------------------------------------

ALLOWED_SET_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        # Scarlet & Violet era
        r"^SV\d{2}:",
        r"^SV10:",
        r"^ME\d{2}:",
        r"^SV: Prismatic",
        r"^SV: Shrouded",
        r"^SV: Paldean",
        r"^SV: Scarlet & Violet 151",
        r"^SV: Black Bolt",
        r"^SV: White Flare",
        # Sword & Shield era
        r"^SWSH\d{2}:",
        r"Crown Zenith",
        r"Shining Fates",
        r"Champion's Path",
        r"Hidden Fates",
        # Sun & Moon era
        r"^SM\s",
        r"Dragon Majesty",
        r"Shining Legends",
        r"Detective Pikachu",
        # XY era
        r"^XY\s*-",
        r"Generations$",
        # Black & White era
        r"^BW\d{2}:",
        r"Noble Victories",
        r"Dragons Exalted",
        r"Legendary Treasures$",
        # HeartGold SoulSilver
        r"^HGSS",
        r"Undaunted",
        r"Unleashed",
        r"Triumphant",
        # Diamond & Pearl / Platinum
        r"^DP\d",
        r"Platinum",
        r"Arceus",
        # Classics
        r"^Base Set$",
        r"^Base Set \(Shadowless\)",
        r"^Base Set 2$",
        r"^Jungle$",
        r"^Fossil$",
        r"^Team Rocket$",
        r"^XY Base Set$",
        r"^SM Base Set$",
        r"^Gym Heroes$",
        r"^Gym Challenge$",
        r"^Neo Genesis$",
        r"^Neo Discovery$",
        r"^Neo Revelation$",
        r"^Neo Destiny$",
        r"^Expedition$",
        r"^Aquapolis$",
        r"^Skyridge$",
        # Special sets
        r"Celebrations",
        r"Battle Academy",
        r"Radiant Collection",
        r"Trainer Gallery",
        r"Galarian Gallery",
        r"Shiny Vault",
    )
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def canonical_set_id(vendor_slug: str | None) -> str | None:
    """pokemontcg.io id for a vendor slug, or None when unmapped."""
    if not vendor_slug:
        return None
    return _VENDOR_TO_CANONICAL.get(vendor_slug)


def canonical_image_urls(vendor_slug: str | None) -> SetImages:
    """
    Resolve logo and symbol URLs for a vendor set slug.

    Unmapped slugs resolve to empty strings so the UI shows a placeholder.
    A missing mapping is cosmetic, never an error.
    """
    canonical_id = canonical_set_id(vendor_slug)
    if canonical_id is None:
        logger.debug("set_image_unmapped", vendor_slug=vendor_slug)
        return SetImages(symbol="", logo="")

    return SetImages(
        symbol=f"{IMAGE_BASE_URL}/{canonical_id}/symbol.png",
        logo=f"{IMAGE_BASE_URL}/{canonical_id}/logo.png",
    )


def classify(name: str, rules: tuple[PatternRule, ...], default: str) -> str:
    """Result of the first rule matching name, else default."""
    for rule in rules:
        if rule.matches(name):
            return rule.result
    return default


def series_for(display_name: str | None) -> str:
    """
    Era/series bucket for a set display name.

    Examples:
        >>> series_for("SV04: Paradox Rift")
        'Scarlet & Violet'
        >>> series_for("Some Unlisted Regional Promo")
        'Other'
    """
    return classify(display_name or "", SERIES_RULES, OTHER_SERIES)


def should_include(display_name: str | None) -> bool:
    """True when the set name matches any allow-list pattern."""
    if not display_name:
        return False
    return any(p.search(display_name) for p in ALLOWED_SET_PATTERNS)


_STRIP_CHARS = re.compile(r"[:']")
_WHITESPACE = re.compile(r"\s+")
_HYPHEN_RUN = re.compile(r"-+")


def derive_set_slug(display_name: str | None) -> str:
    """
    Derive a vendor-style slug from a set display name.

    Used when a card payload carries a set name but no set slug.

    Examples:
        >>> derive_set_slug("ME02: Phantasmal Flames")
        'me02-phantasmal-flames'
        >>> derive_set_slug("SV: Scarlet & Violet 151")
        'sv-scarlet-and-violet-151'
    """
    slug = (display_name or "").lower()
    slug = _STRIP_CHARS.sub("", slug)
    slug = slug.replace("&", "and")
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHEN_RUN.sub("-", slug)
    return slug.strip("-")
