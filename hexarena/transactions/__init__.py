"""
Transactions module - budowniczowie transakcji siatki.

Każdy budowniczy waliduje żądanie (ValidationError przed jakąkolwiek
zmianą) i zwraca Transaction złożoną z kroków (forward, rollback)
na prymitywach HexGrid.
"""

from .place import validate_placement, add_place_steps, build_place_transaction
from .remove import reactivate, add_removal_steps, build_remove_transaction
from .move import TeamChange, add_team_change_steps, build_move_transaction
from .swap import build_swap_transaction
from .bulk import build_auto_place_transaction, build_clear_transaction

__all__ = [
    "validate_placement", "add_place_steps", "build_place_transaction",
    "reactivate", "add_removal_steps", "build_remove_transaction",
    "TeamChange", "add_team_change_steps", "build_move_transaction",
    "build_swap_transaction",
    "build_auto_place_transaction", "build_clear_transaction",
]
