from poketerminal.engine.adapter import (
    build_prices,
    determine_supertype,
    transform_card,
    transform_cards_response,
    transform_set,
    transform_sets_response,
)
from poketerminal.engine.price_history import (
    calculate_price_change,
    extract_price_history,
    fallback_price_change,
)

__all__ = [
    "build_prices",
    "calculate_price_change",
    "determine_supertype",
    "extract_price_history",
    "fallback_price_change",
    "transform_card",
    "transform_cards_response",
    "transform_set",
    "transform_sets_response",
]
