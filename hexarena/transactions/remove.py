"""
Transakcja zdjęcia postaci.

Kroki dla właściciela umiejętności:
    1. deactivate  - dezaktywacja (companiony schodzą z planszy)
                     rollback: aktywacja + companiony na zapisane pola
    2. cascade     - companiony, które przetrwały dezaktywację
                     rollback: powrót na pola i ponowne powiązanie
    3. remove      - zdjęcie postaci
                     rollback: postawienie z powrotem

Zdjęcie companiona jest przekierowane na jego właściciela - companion
dzieli los właściciela.
"""

from __future__ import annotations
from functools import partial
from typing import Dict, List, Tuple, TYPE_CHECKING

from ..core.errors import TransactionFailure, ValidationError
from ..core.tile import Team
from ..core.transaction import Transaction

if TYPE_CHECKING:
    from ..core.hex_grid import HexGrid


def reactivate(
    grid: "HexGrid",
    character_id: int,
    hex_id: int,
    team: Team,
    positions: Dict[int, int],
) -> None:
    """
    Ponownie aktywuje umiejętność i odtwarza pozycje companionów.

    Używane w rollbackach dezaktywacji. Na koniec przelicza cele wszystkich
    aktywnych umiejętności - cel liczony przed powrotem companionów innej
    postaci byłby nieaktualny.

    Raises:
        TransactionFailure: Aktywacja się nie powiodła
        NoAvailableTileError: Companiona nie da się postawić
    """
    if not grid.skill_manager.activate(character_id, hex_id, team):
        raise TransactionFailure(
            f"Failed to restore skill of character {character_id}",
            step="reactivate",
            hex_id=hex_id,
            character_id=character_id,
            team=team,
        )
    grid.companions.restore(grid, character_id, team, positions)
    grid.skill_manager.update_all()


def _remove_tile(grid: "HexGrid", hex_id: int) -> bool:
    return grid.perform_remove(hex_id) is not None


def add_removal_steps(
    txn: Transaction,
    grid: "HexGrid",
    hex_id: int,
    character_id: int,
    team: Team,
) -> Transaction:
    """Dokłada kroki deactivate / cascade / remove do transakcji."""
    manager = grid.skill_manager
    registry = grid.companions

    if manager.is_active(character_id, team):
        positions = registry.snapshot(grid, character_id, team)
        txn.step(
            "deactivate",
            partial(manager.deactivate, character_id, team),
            partial(reactivate, grid, character_id, hex_id, team, positions),
        )

    cascaded: List[Tuple[int, int]] = []

    def cascade() -> bool:
        cascaded[:] = registry.cascade_remove(grid, character_id, team)
        return True

    def undo_cascade() -> None:
        for companion_id, companion_hex in cascaded:
            grid.perform_place(companion_hex, companion_id, team)
            registry.link(character_id, companion_id, team)

    txn.step("cascade", cascade, undo_cascade)
    txn.step(
        "remove",
        partial(_remove_tile, grid, hex_id),
        partial(grid.perform_place, hex_id, character_id, team),
    )
    return txn


def build_remove_transaction(grid: "HexGrid", hex_id: int) -> Transaction:
    """
    Waliduje i buduje transakcję zdjęcia.

    Raises:
        ValidationError: Złe id pola lub puste pole
    """
    tile = grid.require_tile(hex_id)
    if not tile.is_occupied:
        raise ValidationError(f"Tile {hex_id} is empty", hex_id=hex_id)

    character_id, team = tile.character_id, tile.team
    registry = grid.companions

    if registry.is_companion(character_id, team):
        owner_id = registry.owner_of(character_id, team)
        owner_hex = grid.find_character_hex(owner_id, team)
        if owner_hex is not None:
            return build_remove_transaction(grid, owner_hex)

        # companion bez właściciela na planszy
        txn = Transaction("remove", grid.logger)
        txn.step(
            "remove",
            partial(_remove_tile, grid, hex_id),
            partial(grid.perform_place, hex_id, character_id, team),
        )

        def unlink() -> bool:
            registry.unlink(owner_id, character_id, team)
            return True

        txn.step("unlink", unlink, partial(registry.link, owner_id, character_id, team))
        return txn

    return add_removal_steps(Transaction("remove", grid.logger), grid, hex_id, character_id, team)
