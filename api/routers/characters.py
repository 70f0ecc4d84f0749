"""
Characters router - lista postaci i ich umiejętności.
"""

from fastapi import APIRouter, HTTPException
from typing import List, Dict, Any
from pathlib import Path

from hexarena.core.config_loader import ConfigLoader
from hexarena.skills.registry import build_skill_registry


router = APIRouter()

DATA_PATH = Path(__file__).parent.parent.parent / "data"
_loader = ConfigLoader(str(DATA_PATH))
_registry = build_skill_registry(_loader.load_all_characters())


def _character_info(key: str, data: Dict[str, Any]) -> Dict[str, Any]:
    character_id = int(data["character_id"])
    return {
        "key": key,
        "character_id": character_id,
        "name": data.get("name", key),
        "teams": data.get("teams", []),
        "skill": _registry.describe(character_id),
    }


@router.get("/characters")
async def get_characters() -> List[Dict[str, Any]]:
    """
    Zwraca listę wszystkich postaci.

    Returns:
        Lista postaci z dozwolonymi drużynami i opisem umiejętności.
    """
    return [
        _character_info(key, data)
        for key, data in _loader.load_all_characters().items()
    ]


@router.get("/characters/{key}")
async def get_character(key: str) -> Dict[str, Any]:
    """
    Zwraca szczegóły postaci.

    Args:
        key: Klucz z characters.yaml
    """
    try:
        return _character_info(key, _loader.load_character(key))
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Character '{key}' not found")
