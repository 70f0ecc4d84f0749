"""
Skan rzędów - szukanie celu najpierw we własnym rzędzie diagonalnym,
potem w pierścieniach.

FAZA 1 - własny rząd (search_by_row):
    Najbliższa postać drużyny docelowej w tym samym rzędzie diagonalnym.
    Remis odległości rozstrzyga strona (RowTieBreak):
        LEFT:   caster ALLY -> wyższe id,  caster ENEMY -> niższe id
        RIGHT:  caster ALLY -> niższe id,  caster ENEMY -> wyższe id

FAZA 2 - pierścienie (ring_scan):
    Pierścienie 1, 2, ... wokół castera z pominięciem własnego rzędu.
    Pola pierścienia sortowane po id:
        rosnąco  <=>  (caster ALLY) == (kierunek REARMOST)
    Pierwsze zajęte pole wygrywa.
"""

from __future__ import annotations
from enum import Enum
from typing import Any, List, Optional, TYPE_CHECKING

from ..core.tile import Team
from ..skills.skill import SkillTargetInfo
from .candidates import max_distance, team_candidates, with_distances

if TYPE_CHECKING:
    from ..core.hex_grid import HexGrid


class RowScanDirection(Enum):
    """Priorytet skanu pierścieni."""
    FRONTMOST = "frontmost"  # ALLY: id malejąco, ENEMY: rosnąco
    REARMOST = "rearmost"    # ALLY: id rosnąco, ENEMY: malejąco

    @classmethod
    def parse(cls, value: Any) -> RowScanDirection:
        if isinstance(value, RowScanDirection):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown row scan direction: {value!r}") from None


class RowTieBreak(Enum):
    """Strona preferowana przy remisie we własnym rzędzie."""
    LEFT = "left"
    RIGHT = "right"

    @classmethod
    def parse(cls, value: Any) -> RowTieBreak:
        if isinstance(value, RowTieBreak):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown row tie-break: {value!r}") from None


def search_by_row(
    grid: "HexGrid",
    source_hex_id: int,
    caster_team: Team,
    target_team: Team,
    exclude_character_id: Optional[int] = None,
    tie_break: RowTieBreak = RowTieBreak.LEFT,
    exclude_companions: bool = False,
) -> Optional[SkillTargetInfo]:
    """
    Najbliższa postać drużyny docelowej we własnym rzędzie diagonalnym.
    """
    candidates = [
        c for c in team_candidates(grid, target_team, exclude_character_id, exclude_companions)
        if c.hex_id != source_hex_id and grid.layout.same_diagonal_row(source_hex_id, c.hex_id)
    ]
    if not candidates:
        return None

    candidates = with_distances(grid, candidates, source_hex_id)
    prefer_higher = (tie_break is RowTieBreak.LEFT) == (caster_team is Team.ALLY)
    id_sign = -1 if prefer_higher else 1
    candidates.sort(key=lambda c: (c.distance, id_sign * c.hex_id))

    winner = candidates[0]
    return SkillTargetInfo(
        target_hex_id=winner.hex_id,
        target_character_id=winner.character_id,
        metadata={
            "source_hex_id": source_hex_id,
            "distance": winner.distance,
            "is_row_target": True,
            "examined_tiles": [c.hex_id for c in candidates],
        },
    )


def ring_scan(
    grid: "HexGrid",
    source_hex_id: int,
    caster_team: Team,
    target_team: Team,
    direction: RowScanDirection = RowScanDirection.FRONTMOST,
    exclude_character_id: Optional[int] = None,
    exclude_companions: bool = False,
    max_radius: Optional[int] = None,
    exclude_own_row: bool = False,
) -> Optional[SkillTargetInfo]:
    """
    Skan pierścieni wokół castera w kolejności id pól.

    Args:
        direction: FRONTMOST / REARMOST (patrz moduł)
        exclude_companions: Pomijaj companiony
        max_radius: Maksymalny promień skanu (None = do najdalszego kandydata)
        exclude_own_row: Pomijaj pola z rzędu diagonalnego castera
    """
    source = grid.hex_of(source_hex_id)
    if source is None:
        return None

    candidates = with_distances(
        grid,
        team_candidates(grid, target_team, exclude_character_id, exclude_companions),
        source_hex_id,
    )
    if exclude_own_row:
        candidates = [
            c for c in candidates
            if not grid.layout.same_diagonal_row(source_hex_id, c.hex_id)
        ]
    if not candidates:
        return None

    occupants = {c.hex_id: c.character_id for c in candidates}
    limit = max_distance(candidates)
    if max_radius is not None:
        limit = min(limit, max_radius)

    ascending = (caster_team is Team.ALLY) == (direction is RowScanDirection.REARMOST)
    examined: List[int] = []

    for radius in range(1, limit + 1):
        ring = sorted(
            (h for h in (grid.layout.id_of(x) for x in source.ring(radius)) if h is not None),
            reverse=not ascending,
        )
        for hex_id in ring:
            if exclude_own_row and grid.layout.same_diagonal_row(source_hex_id, hex_id):
                continue
            examined.append(hex_id)
            if hex_id in occupants:
                return SkillTargetInfo(
                    target_hex_id=hex_id,
                    target_character_id=occupants[hex_id],
                    metadata={
                        "source_hex_id": source_hex_id,
                        "distance": radius,
                        "is_row_scan_target": True,
                        "examined_tiles": list(examined),
                    },
                )

    return None


def row_scan(
    grid: "HexGrid",
    source_hex_id: int,
    caster_team: Team,
    target_team: Team,
    direction: RowScanDirection = RowScanDirection.FRONTMOST,
    tie_break: RowTieBreak = RowTieBreak.LEFT,
    exclude_character_id: Optional[int] = None,
    exclude_companions: bool = False,
    max_radius: Optional[int] = None,
) -> Optional[SkillTargetInfo]:
    """
    Pełny skan: najpierw własny rząd, potem pierścienie bez własnego rzędu.
    """
    in_row = search_by_row(
        grid, source_hex_id, caster_team, target_team,
        exclude_character_id, tie_break, exclude_companions,
    )
    if in_row is not None:
        return in_row
    return ring_scan(
        grid, source_hex_id, caster_team, target_team, direction,
        exclude_character_id, exclude_companions, max_radius,
        exclude_own_row=True,
    )
