"""
Targeting po odległości i po pozycji (nearest / farthest / frontmost / rearmost).

REGUŁY:
═══════════════════════════════════════════════════════════════════

    CLOSEST / FURTHEST
        min / max odległości hex od pola odniesienia.
        Remis: caster ALLY -> niższe id pola, caster ENEMY -> wyższe id.

    REARMOST
        Najdalej z tyłu drużyny docelowej:
        cel ENEMY -> największe id pola, cel ALLY -> najmniejsze id.

    FRONTMOST
        Odwrotnie niż REARMOST. Na własnej drużynie zawsze pomija castera.

Odwrócenie kierunku dla drużyny ENEMY to ta sama symetria, co obchód
spirali - plansza lustrzana daje lustrzany wynik.
"""

from __future__ import annotations
from enum import Enum
from typing import Any, List, Optional, TYPE_CHECKING

from ..core.tile import Team
from ..skills.skill import SkillTargetInfo
from .candidates import TargetCandidate, team_candidates, with_distances

if TYPE_CHECKING:
    from ..core.hex_grid import HexGrid


class TargetingMethod(Enum):
    """Metoda wyboru celu."""
    CLOSEST = "closest"
    FURTHEST = "furthest"
    FRONTMOST = "frontmost"
    REARMOST = "rearmost"

    @classmethod
    def parse(cls, value: Any) -> TargetingMethod:
        if isinstance(value, TargetingMethod):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"Unknown targeting method: {value!r}. "
                f"Available: {[m.value for m in cls]}"
            ) from None


def rank_candidates(
    grid: "HexGrid",
    source_hex_id: int,
    caster_team: Team,
    target_team: Team,
    method: TargetingMethod,
    exclude_character_id: Optional[int] = None,
    reference_hex_id: Optional[int] = None,
) -> List[TargetCandidate]:
    """
    Porządkuje kandydatów od najlepszego do najgorszego.

    Args:
        grid: Siatka
        source_hex_id: Pole castera
        caster_team: Drużyna castera
        target_team: Drużyna kandydatów
        method: Metoda wyboru
        exclude_character_id: Pomijana postać
        reference_hex_id: Punkt odniesienia odległości (domyślnie source)

    Returns:
        List[TargetCandidate]: Kandydaci z odległościami, najlepszy pierwszy
    """
    reference = reference_hex_id if reference_hex_id is not None else source_hex_id
    candidates = with_distances(
        grid, team_candidates(grid, target_team, exclude_character_id), reference
    )

    if method is TargetingMethod.FRONTMOST and target_team is caster_team:
        candidates = [c for c in candidates if c.hex_id != source_hex_id]

    if method in (TargetingMethod.CLOSEST, TargetingMethod.FURTHEST):
        sign = 1 if method is TargetingMethod.CLOSEST else -1
        id_sign = 1 if caster_team is Team.ALLY else -1
        return sorted(candidates, key=lambda c: (sign * c.distance, id_sign * c.hex_id))

    # REARMOST na wrogach = największe id; FRONTMOST odwrotnie
    descending = (method is TargetingMethod.REARMOST) == (target_team is Team.ENEMY)
    return sorted(candidates, key=lambda c: c.hex_id, reverse=descending)


def _to_info(
    winner: TargetCandidate,
    source_hex_id: int,
    method: TargetingMethod,
    examined: List[int],
) -> SkillTargetInfo:
    metadata = {
        "source_hex_id": source_hex_id,
        "distance": winner.distance,
        "examined_tiles": examined,
    }
    if method is TargetingMethod.REARMOST:
        metadata["is_rearmost_target"] = True
    elif method is TargetingMethod.FRONTMOST:
        metadata["is_frontmost_target"] = True
    return SkillTargetInfo(winner.hex_id, winner.character_id, metadata)


def find_target(
    grid: "HexGrid",
    source_hex_id: int,
    caster_team: Team,
    target_team: Team,
    method: TargetingMethod,
    exclude_character_id: Optional[int] = None,
    reference_hex_id: Optional[int] = None,
) -> Optional[SkillTargetInfo]:
    """
    Najlepszy cel wg metody (None gdy brak kandydatów).

    Example:
        >>> find_target(grid, 12, Team.ALLY, Team.ENEMY, TargetingMethod.CLOSEST)
        SkillTargetInfo(target_hex_id=30, ...)
    """
    ranked = rank_candidates(
        grid, source_hex_id, caster_team, target_team, method,
        exclude_character_id, reference_hex_id,
    )
    if not ranked:
        return None
    examined = sorted(c.hex_id for c in ranked)
    return _to_info(ranked[0], source_hex_id, method, examined)
