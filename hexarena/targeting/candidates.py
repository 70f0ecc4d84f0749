"""
Kandydaci do targetingu - postacie danej drużyny na planszy.

Wszystkie funkcje targetingu są czyste: czytają tylko zajętość siatki
i parametry, nie modyfikują niczego i nie losują.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, TYPE_CHECKING

from ..core.tile import Team

if TYPE_CHECKING:
    from ..core.hex_grid import HexGrid


@dataclass(frozen=True)
class TargetCandidate:
    """Postać-kandydat: pole, id i odległość od punktu odniesienia."""
    hex_id: int
    character_id: int
    distance: int = 0


def team_candidates(
    grid: "HexGrid",
    team: Team,
    exclude_character_id: Optional[int] = None,
    exclude_companions: bool = False,
) -> List[TargetCandidate]:
    """
    Zwraca postacie drużyny posortowane rosnąco po id pola.

    Args:
        grid: Siatka
        team: Drużyna kandydatów
        exclude_character_id: Pomijana postać (zwykle sam caster)
        exclude_companions: Pomijaj companiony

    Returns:
        List[TargetCandidate]: Kandydaci (distance = 0)
    """
    result: List[TargetCandidate] = []
    for tile in grid.occupied_tiles(team):
        if tile.character_id == exclude_character_id:
            continue
        if exclude_companions and grid.companions.is_companion(tile.character_id, team):
            continue
        result.append(TargetCandidate(tile.id, tile.character_id))
    return result


def with_distances(
    grid: "HexGrid",
    candidates: List[TargetCandidate],
    reference_hex_id: int,
) -> List[TargetCandidate]:
    """Uzupełnia odległość każdego kandydata od pola odniesienia."""
    reference = grid.hex_of(reference_hex_id)
    if reference is None:
        return []
    return [
        TargetCandidate(c.hex_id, c.character_id, reference.distance(grid.hex_of(c.hex_id)))
        for c in candidates
    ]


def max_distance(candidates: List[TargetCandidate]) -> int:
    return max((c.distance for c in candidates), default=0)
