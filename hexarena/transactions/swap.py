"""
Transakcja zamiany miejscami dwóch postaci.

Ta sama drużyna:
    remove_a -> remove_b -> place_a -> place_b

Różne drużyny: obie postacie zmieniają drużynę (add_team_change_steps),
więc obie umiejętności są dezaktywowane w starych drużynach i aktywowane
w nowych. Porażka dowolnej aktywacji cofa całą zamianę.
"""

from __future__ import annotations
from functools import partial
from typing import TYPE_CHECKING

from ..core.errors import ValidationError
from ..core.transaction import Transaction
from .move import TeamChange, add_team_change_steps
from .remove import _remove_tile

if TYPE_CHECKING:
    from ..core.hex_grid import HexGrid


def build_swap_transaction(grid: "HexGrid", hex_id_a: int, hex_id_b: int) -> Transaction:
    """
    Waliduje i buduje transakcję zamiany.

    Raises:
        ValidationError: To samo pole, złe lub puste pole, companion
            zmieniający drużynę, postać już obecna w drużynie docelowej
    """
    if hex_id_a == hex_id_b:
        raise ValidationError("Cannot swap a tile with itself", hex_id=hex_id_a)

    tile_a = grid.require_tile(hex_id_a)
    tile_b = grid.require_tile(hex_id_b)
    for tile in (tile_a, tile_b):
        if not tile.is_occupied:
            raise ValidationError(f"Tile {tile.id} is empty, use move", hex_id=tile.id)

    cid_a, team_a = tile_a.character_id, tile_a.team
    cid_b, team_b = tile_b.character_id, tile_b.team
    txn = Transaction("swap", grid.logger)

    if team_a is team_b:
        txn.step(
            "remove_a",
            partial(_remove_tile, grid, hex_id_a),
            partial(grid.perform_place, hex_id_a, cid_a, team_a),
        )
        txn.step(
            "remove_b",
            partial(_remove_tile, grid, hex_id_b),
            partial(grid.perform_place, hex_id_b, cid_b, team_b),
        )
        txn.step(
            "place_a",
            partial(grid.perform_place, hex_id_b, cid_a, team_a),
            partial(grid.perform_remove, hex_id_b),
        )
        txn.step(
            "place_b",
            partial(grid.perform_place, hex_id_a, cid_b, team_b),
            partial(grid.perform_remove, hex_id_a),
        )
        return txn

    for cid, team, hex_id in ((cid_a, team_a, hex_id_a), (cid_b, team_b, hex_id_b)):
        if grid.companions.is_companion(cid, team):
            raise ValidationError(
                "Companions cannot change teams",
                hex_id=hex_id, character_id=cid, team=team,
            )

    # Ta sama postać po obu stronach po prostu zamienia drużyny
    if cid_a != cid_b:
        if grid.is_on_team(cid_a, team_b):
            raise ValidationError(
                f"Character {cid_a} is already on team {team_b.value}",
                hex_id=hex_id_b, character_id=cid_a, team=team_b,
            )
        if grid.is_on_team(cid_b, team_a):
            raise ValidationError(
                f"Character {cid_b} is already on team {team_a.value}",
                hex_id=hex_id_a, character_id=cid_b, team=team_a,
            )

    changes = [
        TeamChange(hex_id_a, hex_id_b, cid_a, team_a, team_b),
        TeamChange(hex_id_b, hex_id_a, cid_b, team_b, team_a),
    ]
    return add_team_change_steps(txn, grid, changes)
