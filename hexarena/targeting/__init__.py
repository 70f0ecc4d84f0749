"""
Targeting module - czyste funkcje wyboru celu.

Zawiera:
- candidates: kandydaci danej drużyny z odległościami
- symmetry: mapa symetrii areny
- spiral: spiralne przeszukiwanie pierścieni
- row_scan: skan rzędów diagonalnych i pierścieni
- distance: nearest / farthest / frontmost / rearmost
- multi_target: wybór top-N celów
"""

from .candidates import TargetCandidate, team_candidates, with_distances
from .symmetry import SymmetryMap, get_symmetry_map, symmetric_hex_id
from .spiral import walk_order, ring_hex_ids, spiral_search, find_symmetrical_target
from .distance import TargetingMethod, rank_candidates, find_target
from .row_scan import (
    RowScanDirection, RowTieBreak, search_by_row, ring_scan, row_scan,
)
from .multi_target import select_top_n

__all__ = [
    "TargetCandidate", "team_candidates", "with_distances",
    "SymmetryMap", "get_symmetry_map", "symmetric_hex_id",
    "walk_order", "ring_hex_ids", "spiral_search", "find_symmetrical_target",
    "TargetingMethod", "rank_candidates", "find_target",
    "RowScanDirection", "RowTieBreak", "search_by_row", "ring_scan", "row_scan",
    "select_top_n",
]
