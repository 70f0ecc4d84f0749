"""
Transakcja przeniesienia postaci.

Ta sama drużyna:
    remove -> place  (umiejętność zostaje aktywna, update_all odświeża pole)

Zmiana drużyny (add_team_change_steps, wspólne ze swap):
    deactivate:<id>  (stara drużyna)   rollback: aktywacja + companiony
    remove:<id>                        rollback: postawienie w starej drużynie
    place:<id>       (nowa drużyna)    rollback: zdjęcie
    activate:<id>    (nowa drużyna)    rollback: undo_activate

Aktywacja może zdjąć z planszy inną postać tej samej transakcji (strefa
blokująca) - jej aktywacja jest wtedy pomijana.

Jeżeli aktywacja w nowej drużynie się nie powiedzie, cała transakcja
jest cofana - umiejętność wraca do starej drużyny razem z pozycjami
companionów.
"""

from __future__ import annotations
from dataclasses import dataclass
from functools import partial
from typing import List, TYPE_CHECKING

from ..core.errors import ValidationError
from ..core.tile import Team
from ..core.transaction import Transaction
from .remove import _remove_tile, reactivate

if TYPE_CHECKING:
    from ..core.hex_grid import HexGrid


@dataclass
class TeamChange:
    """Postać przechodząca z pola w starej drużynie na pole w nowej."""
    from_hex_id: int
    to_hex_id: int
    character_id: int
    old_team: Team
    new_team: Team


def _activate_on_tile(grid: "HexGrid", character_id: int, hex_id: int, team: Team) -> bool:
    if grid.find_character_hex(character_id, team) != hex_id:
        return True
    return grid.skill_manager.activate(character_id, hex_id, team)


def add_team_change_steps(
    txn: Transaction,
    grid: "HexGrid",
    changes: List[TeamChange],
) -> Transaction:
    """
    Dokłada kroki zmiany drużyny dla jednej lub dwóch postaci.

    Wszystkie dezaktywacje idą przed zdjęciami, wszystkie postawienia
    przed aktywacjami - przy swapie obie postacie zwalniają pola, zanim
    którakolwiek stanie na nowym.
    """
    manager = grid.skill_manager

    for change in changes:
        cid = change.character_id
        if manager.is_active(cid, change.old_team):
            positions = grid.companions.snapshot(grid, cid, change.old_team)
            txn.step(
                f"deactivate:{cid}",
                partial(manager.deactivate, cid, change.old_team),
                partial(reactivate, grid, cid, change.from_hex_id, change.old_team, positions),
            )

    for change in changes:
        txn.step(
            f"remove:{change.character_id}",
            partial(_remove_tile, grid, change.from_hex_id),
            partial(grid.perform_place, change.from_hex_id, change.character_id, change.old_team),
        )

    for change in changes:
        txn.step(
            f"place:{change.character_id}",
            partial(grid.perform_place, change.to_hex_id, change.character_id, change.new_team),
            partial(grid.perform_remove, change.to_hex_id),
        )

    for change in changes:
        cid = change.character_id
        if manager.has_skill(cid):
            txn.step(
                f"activate:{cid}",
                partial(_activate_on_tile, grid, cid, change.to_hex_id, change.new_team),
                partial(manager.undo_activate, cid, change.new_team),
            )

    return txn


def build_move_transaction(
    grid: "HexGrid",
    from_hex_id: int,
    to_hex_id: int,
    character_id: int,
) -> Transaction:
    """
    Waliduje i buduje transakcję przeniesienia.

    Raises:
        ValidationError: Złe pola, postać nie stoi na polu źródłowym,
            pole docelowe zajęte lub poza strefą drużyny, companion
            zmieniający drużynę, duplikat lub pełna drużyna docelowa
    """
    if from_hex_id == to_hex_id:
        raise ValidationError("Source and destination are the same tile", hex_id=from_hex_id)

    source = grid.require_tile(from_hex_id)
    destination = grid.require_tile(to_hex_id)

    if source.character_id is None or source.character_id != character_id:
        raise ValidationError(
            f"Character {character_id} is not on tile {from_hex_id}",
            hex_id=from_hex_id, character_id=character_id,
        )
    if destination.is_occupied:
        raise ValidationError(
            f"Tile {to_hex_id} is occupied, use swap",
            hex_id=to_hex_id, character_id=character_id,
        )

    new_team = destination.state.team
    if new_team is None:
        raise ValidationError(
            f"Tile {to_hex_id} ({destination.state.name}) is not available",
            hex_id=to_hex_id, character_id=character_id,
        )

    old_team = source.team
    txn = Transaction("move", grid.logger)

    if new_team is old_team:
        txn.step(
            "remove",
            partial(_remove_tile, grid, from_hex_id),
            partial(grid.perform_place, from_hex_id, character_id, old_team),
        )
        txn.step(
            "place",
            partial(grid.perform_place, to_hex_id, character_id, new_team),
            partial(grid.perform_remove, to_hex_id),
        )
        return txn

    if grid.companions.is_companion(character_id, old_team):
        raise ValidationError(
            "Companions cannot change teams",
            hex_id=from_hex_id, character_id=character_id, team=old_team,
        )
    if grid.is_on_team(character_id, new_team):
        raise ValidationError(
            f"Character {character_id} is already on team {new_team.value}",
            hex_id=to_hex_id, character_id=character_id, team=new_team,
        )
    if grid.available_slots(new_team) <= 0:
        raise ValidationError(
            f"Team {new_team.value} is full ({grid.get_max_team_size(new_team)})",
            hex_id=to_hex_id, character_id=character_id, team=new_team,
        )

    change = TeamChange(from_hex_id, to_hex_id, character_id, old_team, new_team)
    return add_team_change_steps(txn, grid, [change])
