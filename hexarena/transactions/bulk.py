"""
Operacje zbiorcze: auto_place i clear_all.
"""

from __future__ import annotations
from typing import Any, Dict, List, Tuple, TYPE_CHECKING

from ..characters.companion import CompanionLink
from ..core.errors import ValidationError
from ..core.tile import Team
from ..core.transaction import Transaction
from ..skills.skill import ActiveSkillEntry
from .place import build_place_transaction
from .remove import reactivate

if TYPE_CHECKING:
    from ..core.hex_grid import HexGrid


def build_auto_place_transaction(grid: "HexGrid", character_id: int, team: Any) -> Transaction:
    """
    Stawia postać na polu wybranym przez GameRNG.

    Kandydaci to wolne pola strefy drużyny; wybór jest deterministyczny
    dla danego seeda.

    Raises:
        ValidationError: Id companiona, duplikat lub brak wolnego pola
    """
    try:
        team = Team.parse(team)
    except ValueError as exc:
        raise ValidationError(str(exc), character_id=character_id) from None

    if grid.companions.is_companion_id(character_id):
        raise ValidationError(
            "Companion IDs cannot be placed directly", character_id=character_id, team=team
        )
    if grid.is_on_team(character_id, team):
        raise ValidationError(
            f"Character {character_id} is already on team {team.value}",
            character_id=character_id, team=team,
        )

    hex_id = grid.rng.pick_hex_id(tile.id for tile in grid.available_tiles(team))
    if hex_id is None:
        raise ValidationError(
            f"No available tile for team {team.value}", character_id=character_id, team=team
        )
    return build_place_transaction(grid, hex_id, character_id, team, name="auto_place")


def build_clear_transaction(grid: "HexGrid") -> Transaction:
    """
    Czyści planszę.

    Kroki:
        1. deactivate_all - rollback: ponowna aktywacja + companiony
        2. clear          - rollback: postacie wracają na pola
    """
    manager = grid.skill_manager
    registry = grid.companions

    entries: List[ActiveSkillEntry] = []
    positions: Dict[Tuple[int, Team], Dict[int, int]] = {}
    occupants: List[Tuple[int, int, Team]] = []
    links: List[CompanionLink] = []

    def deactivate_all() -> bool:
        for entry in manager.active_entries():
            positions[(entry.character_id, entry.team)] = registry.snapshot(
                grid, entry.character_id, entry.team
            )
        entries[:] = manager.deactivate_all()
        return True

    def reactivate_all() -> None:
        for entry in entries:
            reactivate(
                grid, entry.character_id, entry.hex_id, entry.team,
                positions.get((entry.character_id, entry.team), {}),
            )

    def clear() -> bool:
        occupants[:] = [(t.id, t.character_id, t.team) for t in grid.occupied_tiles()]
        links[:] = registry.links()
        for hex_id, _, _ in occupants:
            grid.perform_remove(hex_id)
        for link in links:
            registry.unlink(link.owner_id, link.companion_id, link.team)
        return True

    def restore() -> None:
        for hex_id, character_id, team in occupants:
            grid.perform_place(hex_id, character_id, team)
        for link in links:
            registry.link(link.owner_id, link.companion_id, link.team)

    txn = Transaction("clear_all", grid.logger)
    txn.step("deactivate_all", deactivate_all, reactivate_all)
    txn.step("clear", clear, restore)
    return txn
