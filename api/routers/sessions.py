"""
Sessions router - sesje ustawiania drużyn na arenie.

Każda sesja to SetupSimulator w trybie strict trzymany w pamięci procesu.
Odrzucone operacje (GridError) zwracają 400 z kontekstem błędu.
"""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from typing import List, Dict, Any, Optional, Union
from pathlib import Path
import random
import uuid

from hexarena.core.config_loader import ConfigLoader
from hexarena.core.errors import GridError
from hexarena.simulation.setup import SetupSimulator


router = APIRouter()

DATA_PATH = Path(__file__).parent.parent.parent / "data"
_loader = ConfigLoader(str(DATA_PATH))

SESSIONS: Dict[str, SetupSimulator] = {}


# ═══════════════════════════════════════════════════════════════════════════
# REQUEST/RESPONSE MODELS
# ═══════════════════════════════════════════════════════════════════════════

class SessionRequest(BaseModel):
    """Request utworzenia sesji."""
    arena: Optional[str] = None
    seed: Optional[int] = None


class PlaceRequest(BaseModel):
    """Postawienie postaci (klucz z YAML albo character_id)."""
    character: Union[int, str]
    hex_id: int
    team: str


class RemoveRequest(BaseModel):
    hex_id: int


class MoveRequest(BaseModel):
    from_hex_id: int
    to_hex_id: int


class SwapRequest(BaseModel):
    hex_id_a: int
    hex_id_b: int


class AutoPlaceRequest(BaseModel):
    character: Union[int, str]
    team: str


class StateRequest(BaseModel):
    """Stan w formacie export_state."""
    tiles: List[List[Any]]  # [hex_id, state]
    characters: List[List[Any]]  # [hex_id, character_id, team]


# ═══════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════

def _get_session(session_id: str) -> SetupSimulator:
    sim = SESSIONS.get(session_id)
    if sim is None:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return sim


def _state(session_id: str, sim: SetupSimulator) -> Dict[str, Any]:
    return {
        "session_id": session_id,
        "arena": sim.arena.key,
        "seed": sim.config.seed,
        "tiles": sim.grid.snapshot(),
        "targets": sim.targets(),
        "target_version": sim.grid.skill_manager.version,
    }


def _run(session_id: str, operation, *args) -> Dict[str, Any]:
    """Wykonuje operację sesji; GridError -> 400, nieznana postać -> 404."""
    sim = _get_session(session_id)
    try:
        operation(sim, *args)
    except GridError as e:
        raise HTTPException(status_code=400, detail=e.to_dict())
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _state(session_id, sim)


# ═══════════════════════════════════════════════════════════════════════════
# ENDPOINTS
# ═══════════════════════════════════════════════════════════════════════════

@router.post("/sessions")
async def create_session(request: SessionRequest) -> Dict[str, Any]:
    """
    Tworzy nową sesję ustawiania.

    Args:
        request.arena: Klucz areny (domyślnie z defaults.yaml)
        request.seed: Ziarno (domyślnie losowe)
    """
    seed = request.seed if request.seed is not None else random.randint(1, 999999)
    try:
        sim = SetupSimulator(arena=request.arena, seed=seed, loader=_loader, strict=True)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Arena '{request.arena}' not found")

    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = sim
    return _state(session_id, sim)


@router.get("/sessions/{session_id}")
async def get_session(session_id: str) -> Dict[str, Any]:
    return _state(session_id, _get_session(session_id))


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str) -> Dict[str, Any]:
    _get_session(session_id)
    del SESSIONS[session_id]
    return {"deleted": session_id}


@router.post("/sessions/{session_id}/place")
async def place(session_id: str, request: PlaceRequest) -> Dict[str, Any]:
    return _run(
        session_id, SetupSimulator.place_character,
        request.character, request.hex_id, request.team,
    )


@router.post("/sessions/{session_id}/remove")
async def remove(session_id: str, request: RemoveRequest) -> Dict[str, Any]:
    return _run(session_id, SetupSimulator.remove, request.hex_id)


@router.post("/sessions/{session_id}/move")
async def move(session_id: str, request: MoveRequest) -> Dict[str, Any]:
    return _run(session_id, SetupSimulator.move, request.from_hex_id, request.to_hex_id)


@router.post("/sessions/{session_id}/swap")
async def swap(session_id: str, request: SwapRequest) -> Dict[str, Any]:
    return _run(session_id, SetupSimulator.swap, request.hex_id_a, request.hex_id_b)


@router.post("/sessions/{session_id}/auto-place")
async def auto_place(session_id: str, request: AutoPlaceRequest) -> Dict[str, Any]:
    return _run(
        session_id, SetupSimulator.auto_place_character, request.character, request.team,
    )


@router.post("/sessions/{session_id}/clear")
async def clear(session_id: str) -> Dict[str, Any]:
    return _run(session_id, SetupSimulator.clear)


@router.get("/sessions/{session_id}/targets")
async def get_targets(session_id: str) -> Dict[str, Any]:
    """
    Zwraca cele wszystkich aktywnych umiejętności.

    Returns:
        Dict z listą celów i wersją cache (do wykrywania nieaktualnych danych)
    """
    sim = _get_session(session_id)
    return {
        "targets": sim.targets(),
        "version": sim.grid.skill_manager.version,
    }


@router.get("/sessions/{session_id}/pathfinding")
async def get_closest_targets(session_id: str) -> Dict[str, Any]:
    """
    Najbliższy przeciwnik każdej postaci (dystans ruchu z zasięgiem).

    Returns:
        Dict: {"ally": [...], "enemy": [...]} z polem źródłowym, celem,
            dystansem i ścieżką A*
    """
    return _get_session(session_id).closest_targets()


@router.get("/sessions/{session_id}/export")
async def export_state(session_id: str) -> Dict[str, Any]:
    """Eksport stanu planszy (stany bazowe pól + postacie z companionami)."""
    state = _get_session(session_id).grid.export_state()
    return {
        "tiles": [[hex_id, s.name] for hex_id, s in state["tiles"]],
        "characters": [
            [hex_id, character_id, team.value]
            for hex_id, character_id, team in state["characters"]
        ],
    }


@router.post("/sessions/{session_id}/import")
async def import_state(session_id: str, request: StateRequest) -> Dict[str, Any]:
    """Wczytuje stan; przy błędzie plansza wraca do poprzedniego stanu."""
    return _run(
        session_id,
        lambda sim, tiles, characters: sim.grid.load_state(tiles, characters),
        [tuple(t) for t in request.tiles],
        [tuple(c) for c in request.characters],
    )


@router.get("/sessions/{session_id}/events")
async def get_events(session_id: str, character_id: Optional[int] = None) -> Dict[str, Any]:
    """
    Log zdarzeń sesji.

    Args:
        character_id: Tylko zdarzenia dotyczące tej postaci
    """
    logger = _get_session(session_id).logger
    if character_id is not None:
        events = logger.get_events_for_character(character_id)
    else:
        events = logger.events
    return {"events": [e.to_dict() for e in events]}
