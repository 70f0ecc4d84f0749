"""
Skills module - umiejętności postaci i ich runtime.

Zawiera:
- Skill, TargetingSkill: bazowe deskryptory z hookami
- SkillManager: aktywacja, dezaktywacja, cache celów
- SkillRegistry: niemutowalna tablica character_id -> Skill
- library: typy umiejętności ładowane z characters.yaml
"""

from .skill import (
    Skill, TargetingSkill, SkillContext, SkillTargetInfo, TargetKey, ActiveSkillEntry,
)
from .manager import SkillManager
from .registry import SKILL_REGISTRY, SkillRegistry, create_skill, build_skill_registry
from .library import (
    SymmetryStrikeSkill, SpiralTargetSkill, DistanceTargetSkill, RowTargetSkill,
    MultiTargetSkill, ArrowChainSkill, AdjacentMirrorSkill, BehindAdjacentSkill,
    CompanionSkill, ZoneBlockSkill,
)

__all__ = [
    "Skill", "TargetingSkill", "SkillContext", "SkillTargetInfo", "TargetKey",
    "ActiveSkillEntry", "SkillManager",
    "SKILL_REGISTRY", "SkillRegistry", "create_skill", "build_skill_registry",
    "SymmetryStrikeSkill", "SpiralTargetSkill", "DistanceTargetSkill", "RowTargetSkill",
    "MultiTargetSkill", "ArrowChainSkill", "AdjacentMirrorSkill", "BehindAdjacentSkill",
    "CompanionSkill", "ZoneBlockSkill",
]
