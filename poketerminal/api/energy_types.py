"""
Energy type endpoint. Static: no vendor call and no server-side caching.
Browsers and CDNs may keep the list for CacheTTL.TYPES.
"""

from fastapi import APIRouter, Response
from pydantic import BaseModel

from poketerminal.cache.keys import CacheTTL

router = APIRouter(prefix="/api/types", tags=["types"])

POKEMON_TYPES: tuple[str, ...] = (
    "Colorless",
    "Darkness",
    "Dragon",
    "Fairy",
    "Fighting",
    "Fire",
    "Grass",
    "Lightning",
    "Metal",
    "Psychic",
    "Water",
)


class TypesResponse(BaseModel):
    data: list[str]


@router.get("", response_model=TypesResponse)
async def list_types(response: Response) -> TypesResponse:
    response.headers["Cache-Control"] = f"public, max-age={CacheTTL.TYPES}"
    return TypesResponse(data=list(POKEMON_TYPES))
