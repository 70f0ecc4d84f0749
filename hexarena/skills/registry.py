"""
Rejestr umiejętności.

SKILL_REGISTRY mapuje `skill.type` z YAML na klasę umiejętności.
SkillRegistry to niemutowalna tablica character_id -> Skill, budowana
raz przy starcie i przekazywana do HexGrid (nie jest stanem globalnym).
"""

from __future__ import annotations
from types import MappingProxyType
from collections.abc import Mapping
from typing import Any, Dict, Iterable, Iterator, Optional

from .library import (
    AdjacentMirrorSkill,
    ArrowChainSkill,
    BehindAdjacentSkill,
    CompanionSkill,
    DistanceTargetSkill,
    MultiTargetSkill,
    RowTargetSkill,
    SpiralTargetSkill,
    SymmetryStrikeSkill,
    ZoneBlockSkill,
)
from .skill import Skill


SKILL_REGISTRY: Dict[str, type] = {
    # Targeting
    "symmetry_strike": SymmetryStrikeSkill,
    "spiral_target": SpiralTargetSkill,
    "distance_target": DistanceTargetSkill,
    "row_target": RowTargetSkill,
    "multi_target": MultiTargetSkill,
    "arrow_chain": ArrowChainSkill,
    "adjacent_mirror": AdjacentMirrorSkill,
    "behind_adjacent": BehindAdjacentSkill,

    # Companiony
    "companion": CompanionSkill,

    # Strefy
    "zone_block": ZoneBlockSkill,
}


def create_skill(skill_type: str, character_id: int, data: Dict[str, Any]) -> Skill:
    """
    Factory do tworzenia umiejętności z YAML.

    Args:
        skill_type: Typ umiejętności
        character_id: Postać
        data: Blok `skill` z characters.yaml

    Returns:
        Skill: Instancja umiejętności

    Raises:
        ValueError: Nieznany typ
    """
    skill_class = SKILL_REGISTRY.get(skill_type)

    if skill_class is None:
        raise ValueError(f"Unknown skill type: {skill_type}. "
                         f"Available: {list(SKILL_REGISTRY.keys())}")

    return skill_class.from_dict(character_id, data)


class SkillRegistry(Mapping):
    """
    Niemutowalna tablica character_id -> Skill.

    Example:
        >>> registry = SkillRegistry([SymmetryStrikeSkill(character_id=58)])
        >>> 58 in registry
        True
    """

    def __init__(self, skills: Iterable[Skill] = ()):
        table: Dict[int, Skill] = {}
        for skill in skills:
            if skill.character_id in table:
                raise ValueError(f"Duplicate skill for character {skill.character_id}")
            table[skill.character_id] = skill
        self._skills: Mapping[int, Skill] = MappingProxyType(table)

    def __getitem__(self, character_id: int) -> Skill:
        return self._skills[character_id]

    def __iter__(self) -> Iterator[int]:
        return iter(self._skills)

    def __len__(self) -> int:
        return len(self._skills)

    def describe(self, character_id: int) -> Optional[Dict[str, Any]]:
        skill = self._skills.get(character_id)
        return skill.describe() if skill else None

    def __repr__(self) -> str:
        return f"SkillRegistry({sorted(self._skills)})"


def build_skill_registry(characters: Dict[str, Dict[str, Any]]) -> SkillRegistry:
    """
    Buduje rejestr z definicji postaci (ConfigLoader.load_all_characters()).

    Postacie bez bloku `skill` są pomijane.

    Raises:
        ValueError: Nieznany typ umiejętności, brak typu lub duplikat postaci
    """
    skills = []
    for key, data in characters.items():
        skill_data = data.get("skill")
        if not skill_data:
            continue
        skill_type = skill_data.get("type")
        if not skill_type:
            raise ValueError(f"Character '{key}' has a skill without a type")
        skills.append(create_skill(skill_type, int(data["character_id"]), skill_data))
    return SkillRegistry(skills)
