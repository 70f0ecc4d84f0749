"""
Arenas router - lista aren i ich layoutów.
"""

from fastapi import APIRouter, HTTPException
from typing import List, Dict, Any
from pathlib import Path

from hexarena.core.config_loader import ConfigLoader


router = APIRouter()

# Initialize config loader
DATA_PATH = Path(__file__).parent.parent.parent / "data"
_loader = ConfigLoader(str(DATA_PATH))


def _layout_info(name: str) -> Dict[str, Any]:
    layout = _loader.load_layout(name)
    return {
        "name": layout.name,
        "hexes": [{"id": h.id, "q": h.q, "r": h.r, "s": h.s} for h in layout.hexes()],
        "diagonal_rows": [list(row) for row in layout.diagonal_rows],
        "center_row_index": layout.center_row_index,
        "max_radius": layout.max_radius,
    }


@router.get("/arenas")
async def get_arenas() -> List[Dict[str, Any]]:
    """
    Zwraca listę wszystkich aren.

    Returns:
        Lista presetów (pola dostępne / zablokowane per arena).
    """
    return [arena.to_dict() for arena in _loader.load_all_arenas().values()]


@router.get("/arenas/{arena_key}")
async def get_arena(arena_key: str) -> Dict[str, Any]:
    """
    Zwraca preset areny razem z geometrią layoutu.

    Args:
        arena_key: Klucz areny z arenas.yaml
    """
    try:
        arena = _loader.load_arena(arena_key)
        return {**arena.to_dict(), "layout_info": _layout_info(arena.layout)}
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Arena '{arena_key}' not found")
