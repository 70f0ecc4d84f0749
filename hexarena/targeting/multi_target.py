"""
Wybór wielu celów naraz.

Top-N kandydatów wg tej samej kolejności co find_target. Każdy cel
trafia do cache managera pod osobnym indeksem TargetKey, więc N celów
współistnieje bez nadpisywania się.
"""

from __future__ import annotations
from typing import List, Optional, TYPE_CHECKING

from ..core.tile import Team
from ..skills.skill import SkillTargetInfo
from .distance import TargetingMethod, rank_candidates

if TYPE_CHECKING:
    from ..core.hex_grid import HexGrid


def select_top_n(
    grid: "HexGrid",
    source_hex_id: int,
    caster_team: Team,
    target_team: Team,
    count: int,
    method: TargetingMethod = TargetingMethod.REARMOST,
    exclude_character_id: Optional[int] = None,
) -> List[SkillTargetInfo]:
    """
    Zwraca do `count` celów, najlepszy pierwszy.

    Każdy cel ma w metadanych `target_index` oraz strzałkę od castera.

    Raises:
        ValueError: Jeśli count < 1
    """
    if count < 1:
        raise ValueError(f"Target count must be >= 1, got {count}")

    ranked = rank_candidates(
        grid, source_hex_id, caster_team, target_team, method, exclude_character_id
    )
    examined = sorted(c.hex_id for c in ranked)
    arrow_type = "ally" if target_team is caster_team else "enemy"

    return [
        SkillTargetInfo(
            target_hex_id=candidate.hex_id,
            target_character_id=candidate.character_id,
            metadata={
                "source_hex_id": source_hex_id,
                "target_index": index,
                "distance": candidate.distance,
                "examined_tiles": examined,
                "arrows": [
                    {
                        "from_hex_id": source_hex_id,
                        "to_hex_id": candidate.hex_id,
                        "type": arrow_type,
                    }
                ],
            },
        )
        for index, candidate in enumerate(ranked[:count])
    ]
