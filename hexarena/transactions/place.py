"""
Transakcja postawienia postaci.

Kroki:
    1. place     - postać na pole          (rollback: zdjęcie)
    2. activate  - aktywacja umiejętności  (rollback: undo_activate)
                   tylko gdy postać ma umiejętność

Nieudana aktywacja (np. companion bez wolnego pola) wycofuje
postawienie - postać nie zostaje na planszy bez działającej umiejętności.
"""

from __future__ import annotations
from functools import partial
from typing import Any, TYPE_CHECKING

from ..core.errors import ValidationError
from ..core.tile import Team, TileState
from ..core.transaction import Transaction

if TYPE_CHECKING:
    from ..core.hex_grid import HexGrid


def validate_placement(
    grid: "HexGrid",
    hex_id: int,
    character_id: int,
    team: Team,
) -> None:
    """
    Sprawdza reguły postawienia przed jakąkolwiek zmianą.

    Raises:
        ValidationError: Zły id postaci, id companiona, złe lub zajęte pole,
            duplikat w drużynie, pełna drużyna
    """
    if isinstance(character_id, bool) or not isinstance(character_id, int) or character_id <= 0:
        raise ValidationError(f"Invalid character ID: {character_id!r}", hex_id=hex_id)
    if grid.companions.is_companion_id(character_id):
        raise ValidationError(
            "Companion IDs cannot be placed directly",
            hex_id=hex_id, character_id=character_id, team=team,
        )

    tile = grid.require_tile(hex_id)
    if tile.is_occupied:
        raise ValidationError(
            f"Tile {hex_id} is already occupied by {tile.character_id}",
            hex_id=hex_id, character_id=character_id, team=team,
        )
    if tile.state is not TileState.available_for(team):
        raise ValidationError(
            f"Tile {hex_id} ({tile.state.name}) is not available for {team.value}",
            hex_id=hex_id, character_id=character_id, team=team,
        )
    if grid.is_on_team(character_id, team):
        raise ValidationError(
            f"Character {character_id} is already on team {team.value}",
            hex_id=hex_id, character_id=character_id, team=team,
        )
    if grid.available_slots(team) <= 0:
        raise ValidationError(
            f"Team {team.value} is full ({grid.get_max_team_size(team)})",
            hex_id=hex_id, character_id=character_id, team=team,
        )


def add_place_steps(
    txn: Transaction,
    grid: "HexGrid",
    hex_id: int,
    character_id: int,
    team: Team,
) -> Transaction:
    """Dokłada kroki place (+ activate) do transakcji."""
    txn.step(
        "place",
        partial(grid.perform_place, hex_id, character_id, team),
        partial(grid.perform_remove, hex_id),
    )
    manager = grid.skill_manager
    if manager.has_skill(character_id):
        txn.step(
            "activate",
            partial(manager.activate, character_id, hex_id, team),
            partial(manager.undo_activate, character_id, team),
        )
    return txn


def build_place_transaction(
    grid: "HexGrid",
    hex_id: int,
    character_id: int,
    team: Any,
    name: str = "place",
) -> Transaction:
    """
    Waliduje i buduje transakcję postawienia.

    Raises:
        ValidationError: Patrz validate_placement
    """
    try:
        team = Team.parse(team)
    except ValueError as exc:
        raise ValidationError(str(exc), hex_id=hex_id, character_id=character_id) from None
    validate_placement(grid, hex_id, character_id, team)
    return add_place_steps(Transaction(name, grid.logger), grid, hex_id, character_id, team)
