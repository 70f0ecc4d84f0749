"""
Wspólne fixtures testów.

make_grid buduje siatkę full_grid z własnym presetem areny, żeby testy
targetingu mogły stawiać postacie na dowolnych polach.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from hexarena.core.config_loader import ConfigLoader
from hexarena.core.hex_grid import HexGrid
from hexarena.core.layout import ArenaPreset
from hexarena.core.rng import GameRNG
from hexarena.skills.registry import SkillRegistry


DATA_PATH = Path(__file__).parent.parent / "data"


@pytest.fixture
def loader():
    """ConfigLoader na katalogu data/ projektu."""
    return ConfigLoader(str(DATA_PATH))


@pytest.fixture
def layout(loader):
    """Layout full_grid (45 hexów)."""
    return loader.load_layout("full_grid")


@pytest.fixture
def make_grid(layout):
    """
    Fabryka siatek z własną strefą drużyn.

    Example:
        grid = make_grid(ally=[12, 23], enemy=[30], skills=[...])
    """
    def factory(ally=(), enemy=(), skills=(), blocked=(), seed=12345, **kwargs):
        arena = ArenaPreset(
            key="test",
            name="Test",
            layout=layout.name,
            available_ally=tuple(ally),
            available_enemy=tuple(enemy),
            blocked=tuple(blocked),
        )
        return HexGrid(
            layout,
            arena,
            SkillRegistry(skills),
            rng=GameRNG(seed),
            **kwargs,
        )

    return factory


@pytest.fixture
def arena_grid(loader, layout):
    """Siatka arena_1 z umiejętnościami z characters.yaml."""
    from hexarena.skills.registry import build_skill_registry

    registry = build_skill_registry(loader.load_all_characters())
    return HexGrid(layout, loader.load_arena("arena_1"), registry, rng=GameRNG(12345))
