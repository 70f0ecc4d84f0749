"""
Testy skanu rzędów diagonalnych i pierścieni.
"""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from hexarena.core.tile import Team
from hexarena.skills.library import CompanionSkill
from hexarena.targeting.row_scan import (
    RowScanDirection, RowTieBreak, ring_scan, row_scan, search_by_row,
)


# ═══════════════════════════════════════════════════════════════════════════
# TEST: WŁASNY RZĄD
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def row_grid(make_grid):
    """Sojusznicy na 22 i 24 - po obu stronach 23 w środkowym rzędzie."""
    grid = make_grid(ally=[22, 24, 16])
    grid.place(22, 1, Team.ALLY)
    grid.place(24, 2, Team.ALLY)
    return grid


@pytest.mark.parametrize("tie_break, expected", [
    (RowTieBreak.LEFT, 24),
    (RowTieBreak.RIGHT, 22),
])
def test_row_tie_break_ally_caster(row_grid, tie_break, expected):
    info = search_by_row(row_grid, 23, Team.ALLY, Team.ALLY, tie_break=tie_break)
    assert info.target_hex_id == expected
    assert info.metadata["is_row_target"] is True


@pytest.mark.parametrize("tie_break, expected", [
    (RowTieBreak.LEFT, 22),
    (RowTieBreak.RIGHT, 24),
])
def test_row_tie_break_enemy_caster(make_grid, tie_break, expected):
    grid = make_grid(enemy=[22, 24])
    grid.place(22, 1, Team.ENEMY)
    grid.place(24, 2, Team.ENEMY)

    info = search_by_row(grid, 23, Team.ENEMY, Team.ENEMY, tie_break=tie_break)
    assert info.target_hex_id == expected


def test_row_prefers_closer_over_tie_break(make_grid):
    """Rząd 18-19-20-21: bliższe 18 wygrywa mimo preferencji LEFT dla wyższego id."""
    grid = make_grid(ally=[18, 21])
    grid.place(18, 1, Team.ALLY)
    grid.place(21, 2, Team.ALLY)

    info = search_by_row(grid, 19, Team.ALLY, Team.ALLY)
    assert info.target_hex_id == 18
    assert info.metadata["examined_tiles"] == [18, 21]


def test_row_ignores_other_rows(make_grid):
    grid = make_grid(ally=[16, 19])
    grid.place(16, 1, Team.ALLY)
    assert search_by_row(grid, 23, Team.ALLY, Team.ALLY) is None


def test_row_excludes_caster(row_grid):
    info = search_by_row(row_grid, 22, Team.ALLY, Team.ALLY, exclude_character_id=1)
    assert info.target_hex_id == 24
    assert info.metadata["distance"] == 4


# ═══════════════════════════════════════════════════════════════════════════
# TEST: PIERŚCIENIE
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def ring_grid(make_grid):
    """Sojusznicy na 16 i 30 - oba w pierścieniu 1 wokół 23."""
    grid = make_grid(ally=[9, 16, 30])
    grid.place(16, 1, Team.ALLY)
    grid.place(30, 2, Team.ALLY)
    return grid


def test_ring_scan_rearmost_takes_lowest_id(ring_grid):
    info = ring_scan(ring_grid, 23, Team.ALLY, Team.ALLY, RowScanDirection.REARMOST)
    assert info.target_hex_id == 16
    assert info.metadata["distance"] == 1


def test_ring_scan_frontmost_takes_highest_id(ring_grid):
    info = ring_scan(ring_grid, 23, Team.ALLY, Team.ALLY, RowScanDirection.FRONTMOST)
    assert info.target_hex_id == 30


def test_ring_scan_enemy_caster_is_reversed(make_grid):
    grid = make_grid(enemy=[16, 30])
    grid.place(16, 1, Team.ENEMY)
    grid.place(30, 2, Team.ENEMY)

    info = ring_scan(grid, 23, Team.ENEMY, Team.ENEMY, RowScanDirection.REARMOST)
    assert info.target_hex_id == 30


def test_ring_scan_max_radius(make_grid):
    grid = make_grid(ally=[9])
    grid.place(9, 1, Team.ALLY)

    assert ring_scan(grid, 23, Team.ALLY, Team.ALLY, max_radius=1) is None
    info = ring_scan(grid, 23, Team.ALLY, Team.ALLY)
    assert info.target_hex_id == 9
    assert info.metadata["distance"] == 2


def test_ring_scan_exclude_companions(make_grid):
    grid = make_grid(
        ally=[9, 16, 30],
        skills=[CompanionSkill(character_id=50)],
    )
    assert grid.place(9, 50, Team.ALLY)
    companion_id = grid.companions.companions_of(50, Team.ALLY)[0]
    companion_hex = grid.find_character_hex(companion_id, Team.ALLY)

    info = ring_scan(grid, 23, Team.ALLY, Team.ALLY)
    assert info.target_hex_id == companion_hex
    assert info.target_character_id == companion_id

    info = ring_scan(grid, 23, Team.ALLY, Team.ALLY, exclude_companions=True)
    assert info.target_hex_id == 9
    assert info.target_character_id == 50


def test_ring_scan_exclude_own_row(row_grid):
    assert ring_scan(row_grid, 23, Team.ALLY, Team.ALLY, exclude_own_row=True) is None


# ═══════════════════════════════════════════════════════════════════════════
# TEST: PEŁNY SKAN
# ═══════════════════════════════════════════════════════════════════════════

def test_row_scan_prefers_own_row(make_grid):
    grid = make_grid(ally=[16, 22])
    grid.place(16, 1, Team.ALLY)
    grid.place(22, 2, Team.ALLY)

    info = row_scan(grid, 23, Team.ALLY, Team.ALLY)
    assert info.target_hex_id == 22
    assert info.metadata["is_row_target"] is True


def test_row_scan_falls_back_to_rings(make_grid):
    grid = make_grid(ally=[16, 22])
    grid.place(16, 1, Team.ALLY)

    info = row_scan(grid, 23, Team.ALLY, Team.ALLY)
    assert info.target_hex_id == 16
    assert info.metadata["is_row_scan_target"] is True


@pytest.mark.parametrize("value", ["up", 3])
def test_parse_unknown_direction(value):
    with pytest.raises(ValueError):
        RowScanDirection.parse(value)


def test_parse_tie_break():
    assert RowTieBreak.parse("RIGHT") is RowTieBreak.RIGHT
    with pytest.raises(ValueError):
        RowTieBreak.parse("middle")
