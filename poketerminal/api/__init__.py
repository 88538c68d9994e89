from poketerminal.api.cards import router as cards_router
from poketerminal.api.health import router as health_router
from poketerminal.api.sets import router as sets_router
from poketerminal.api.energy_types import router as types_router

__all__ = [
    "cards_router",
    "health_router",
    "sets_router",
    "types_router",
]
