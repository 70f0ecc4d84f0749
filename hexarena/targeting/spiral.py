"""
Spiralne przeszukiwanie pierścieni.

Od pola centralnego sprawdzamy pierścienie o promieniu 1, 2, 3, ...
W każdym pierścieniu pola są odwiedzane w kolejności zależnej od
drużyny castera:

    ALLY:   tuż za narożnikiem prawa-góra, zgodnie z zegarem
    ENEMY:  tuż za narożnikiem lewy-dół, przeciwnie do zegara

    Narożnik startowy jest odwiedzany jako ostatni.

    Pierścień 1 wokół (0, 0):
        ALLY:   (1,0) (0,1) (-1,1) (-1,0) (0,-1) (1,-1)
        ENEMY:  (0,1) (1,0) (1,-1) (0,-1) (-1,0) (-1,1)

Obchód ENEMY jest odbiciem obchodu ALLY względem osi symetrii areny,
więc lustrzane plansze dają lustrzane cele. Pierwsze pole zajęte przez
drużynę docelową wygrywa; brak takiego pola to brak celu (None).
"""

from __future__ import annotations
from typing import List, Optional, Tuple, TYPE_CHECKING

from ..core.hex_coord import BOTTOM_LEFT, TOP_RIGHT
from ..core.tile import Team
from ..skills.skill import SkillTargetInfo
from .candidates import max_distance, team_candidates, with_distances
from .symmetry import symmetric_hex_id

if TYPE_CHECKING:
    from ..core.hex_grid import HexGrid


def walk_order(team: Team) -> Tuple[int, bool]:
    """(narożnik startowy, clockwise) obchodu dla drużyny castera."""
    if team is Team.ALLY:
        return TOP_RIGHT, True
    return BOTTOM_LEFT, False


def ring_hex_ids(
    grid: "HexGrid",
    center_hex_id: int,
    radius: int,
    caster_team: Team,
) -> List[int]:
    """
    Id pól pierścienia w kolejności obchodu drużyny (tylko pola areny).

    Obchód zaczyna się od pola za narożnikiem startowym, narożnik
    zamyka pierścień.
    """
    center = grid.hex_of(center_hex_id)
    if center is None:
        return []
    start, clockwise = walk_order(caster_team)
    walk = center.ring(radius, start=start, clockwise=clockwise)
    # Narożnik na końcu; obchód ENEMY == odbicie obchodu ALLY (q <-> r)
    result: List[int] = []
    for hex_ in walk[1:] + walk[:1]:
        hex_id = grid.layout.id_of(hex_)
        if hex_id is not None:
            result.append(hex_id)
    return result


def spiral_search(
    grid: "HexGrid",
    center_hex_id: int,
    target_team: Team,
    caster_team: Team,
) -> Optional[SkillTargetInfo]:
    """
    Pierwsza postać drużyny docelowej w spiralnym obchodzie od centrum.

    Przeszukiwanie kończy się na pierścieniu najdalszego kandydata -
    dalej nie może już być trafienia.

    Args:
        grid: Siatka
        center_hex_id: Pole startowe (zwykle pole castera lub lustrzane)
        target_team: Drużyna szukanych postaci
        caster_team: Drużyna castera (wyznacza kolejność obchodu)

    Returns:
        Optional[SkillTargetInfo]: Cel z metadanymi:
            symmetrical_hex_id - pole centralne
            is_symmetrical_target - zawsze False
            examined_tiles - odwiedzone pola do trafienia włącznie
    """
    candidates = with_distances(grid, team_candidates(grid, target_team), center_hex_id)
    if not candidates:
        return None

    occupants = {c.hex_id: c.character_id for c in candidates}
    examined: List[int] = []

    for radius in range(1, max_distance(candidates) + 1):
        for hex_id in ring_hex_ids(grid, center_hex_id, radius, caster_team):
            examined.append(hex_id)
            if hex_id in occupants:
                return SkillTargetInfo(
                    target_hex_id=hex_id,
                    target_character_id=occupants[hex_id],
                    metadata={
                        "symmetrical_hex_id": center_hex_id,
                        "is_symmetrical_target": False,
                        "examined_tiles": list(examined),
                    },
                )

    return None


def find_symmetrical_target(
    grid: "HexGrid",
    source_hex_id: int,
    caster_team: Team,
) -> Optional[SkillTargetInfo]:
    """
    Cel na polu lustrzanym castera, a gdy puste - spirala od pola lustrzanego.

    Returns:
        Optional[SkillTargetInfo]: Przy trafieniu wprost
            metadata["is_symmetrical_target"] == True
    """
    mirror = symmetric_hex_id(grid, source_hex_id)
    if mirror is None:
        return None

    opposing = caster_team.opposing()
    tile = grid.get_tile(mirror)
    if tile is not None and tile.character_id is not None and tile.team is opposing:
        return SkillTargetInfo(
            target_hex_id=mirror,
            target_character_id=tile.character_id,
            metadata={
                "symmetrical_hex_id": mirror,
                "is_symmetrical_target": True,
                "examined_tiles": [mirror],
            },
        )

    return spiral_search(grid, mirror, opposing, caster_team)
