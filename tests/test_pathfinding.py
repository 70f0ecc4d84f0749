"""
Testy pathfindingu: A*, dystans ruchu z zasięgiem i reguły remisu.

Współrzędne (q, r) użyte w testach:
    23 = (0, 0)   26 = (1, 0)   20 = (-1, 0)   27 = (0, -1)   19 = (0, 1)
    29 = (2, 0)   17 = (-2, 0)  32 = (3, 0)    33 = (2, -1)
    12 = (-1, 2)  40 = (2, -3)  45 = (3, -4)
"""

import math
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from hexarena.core.pathfinding import (
    ClosestTarget,
    can_traverse,
    closest_target_map,
    effective_distance,
    find_closest_target,
    find_path,
    path_distance,
    pick_closest,
    ranged_movement_distance,
)
from hexarena.core.tile import Team, TileState


# Sąsiedzi pola 45 - zablokowani odcinają je od reszty areny
ENCLOSE_45 = [40, 42, 43]


# ═══════════════════════════════════════════════════════════════════════════
# TEST: A*
# ═══════════════════════════════════════════════════════════════════════════

def test_path_to_self(make_grid):
    assert find_path(make_grid(), 23, 23) == [23]


def test_path_to_neighbor(make_grid):
    assert find_path(make_grid(), 23, 26) == [23, 26]


def test_path_length_matches_hex_distance(make_grid):
    grid = make_grid()
    path = find_path(grid, 12, 40)

    assert path[0] == 12 and path[-1] == 40
    assert len(path) == 6
    for a, b in zip(path, path[1:]):
        assert grid.hex_of(a).distance(grid.hex_of(b)) == 1


def test_path_goes_around_blocked_tile(make_grid):
    """Jedyna ścieżka długości 2 między 20 a 26 prowadzi przez 23."""
    assert find_path(make_grid(), 20, 26) == [20, 23, 26]

    grid = make_grid(blocked=[23])
    path = find_path(grid, 20, 26)
    assert 23 not in path
    assert path_distance(grid, 20, 26) == 3


def test_breakable_tile_is_not_traversable(make_grid):
    grid = make_grid()
    assert grid.set_state(23, TileState.BLOCKED_BREAKABLE)

    assert path_distance(grid, 20, 26) == 3


def test_occupied_tile_is_traversable(make_grid):
    grid = make_grid(ally=[23])
    assert grid.place(23, 3, Team.ALLY)

    assert find_path(grid, 20, 26) == [20, 23, 26]


def test_no_path_to_enclosed_tile(make_grid):
    grid = make_grid(blocked=ENCLOSE_45)

    assert find_path(grid, 1, 45) == []
    assert path_distance(grid, 1, 45) is None


def test_blocked_goal_has_no_path(make_grid):
    assert find_path(make_grid(blocked=[26]), 23, 26) == []


def test_unknown_hex_has_no_path(make_grid):
    assert find_path(make_grid(), 23, 999) == []


def test_custom_traversable(make_grid):
    grid = make_grid(ally=[23])
    grid.place(23, 3, Team.ALLY)

    def empty_only(tile):
        return can_traverse(tile) and not tile.is_occupied

    assert path_distance(grid, 20, 26, traversable=empty_only) == 3


def test_node_limit(make_grid):
    assert find_path(make_grid(), 12, 40, max_nodes=2) == []


# ═══════════════════════════════════════════════════════════════════════════
# TEST: DYSTANS Z ZASIĘGIEM
# ═══════════════════════════════════════════════════════════════════════════

def test_effective_distance_in_range(make_grid):
    result = effective_distance(make_grid(), 23, 29, attack_range=2)

    assert result.movement_distance == 0
    assert result.can_reach
    assert result.direct_distance == 2


def test_effective_distance_out_of_range(make_grid):
    result = effective_distance(make_grid(), 12, 40, attack_range=1)

    assert result.movement_distance == 4
    assert result.can_reach
    assert result.direct_distance == 5


def test_effective_distance_unreachable(make_grid):
    result = effective_distance(make_grid(blocked=ENCLOSE_45), 1, 45, attack_range=1)

    assert math.isinf(result.movement_distance)
    assert not result.can_reach


def test_effective_distance_unknown_hex(make_grid):
    with pytest.raises(ValueError):
        effective_distance(make_grid(), 23, 999, attack_range=1)


def test_ranged_distance_target_already_in_range(make_grid):
    result = ranged_movement_distance(make_grid(), 23, [26, 40], attack_range=1)

    assert result.movement_distance == 0
    assert result.reachable_hex_ids == (26,)


def test_ranged_distance_counts_moves(make_grid):
    result = ranged_movement_distance(make_grid(), 12, [40], attack_range=1)

    assert result.movement_distance == 4
    assert result.reachable_hex_ids == (40,)


def test_ranged_distance_collects_all_targets_on_level(make_grid):
    """29 i 17 są w zasięgu 1 po jednym kroku (przez 26 i 20), 32 dopiero po dwóch."""
    result = ranged_movement_distance(make_grid(), 23, [29, 17, 32], attack_range=1)

    assert result.movement_distance == 1
    assert set(result.reachable_hex_ids) == {17, 29}


def test_ranged_distance_larger_range(make_grid):
    result = ranged_movement_distance(make_grid(), 12, [40], attack_range=4)

    assert result.movement_distance == 1


def test_ranged_distance_without_targets(make_grid):
    result = ranged_movement_distance(make_grid(), 23, [], attack_range=1)

    assert not result.can_reach
    assert math.isinf(result.movement_distance)


def test_ranged_distance_unreachable(make_grid):
    result = ranged_movement_distance(make_grid(blocked=ENCLOSE_45), 1, [45], attack_range=1)

    assert not result.can_reach


# ═══════════════════════════════════════════════════════════════════════════
# TEST: REGUŁY REMISU
# ═══════════════════════════════════════════════════════════════════════════

@pytest.mark.parametrize("candidates", [[26, 27], [27, 26]])
def test_vertical_target_wins(make_grid, candidates):
    """27 leży w kolumnie 23 (q = 0), 26 nie."""
    assert pick_closest(make_grid(), candidates, 23, Team.ALLY) == 27


@pytest.mark.parametrize("team, expected", [(Team.ALLY, 24), (Team.ENEMY, 22)])
def test_same_diagonal_row_prefers_id_by_team(make_grid, team, expected):
    """22 i 24 to jeden rząd diagonalny; żadne nie leży w kolumnie 17."""
    assert pick_closest(make_grid(), [22, 24], 17, team) == expected
    assert pick_closest(make_grid(), [24, 22], 17, team) == expected


def test_smaller_direct_distance_wins(make_grid):
    for team in Team:
        assert pick_closest(make_grid(), [32, 26], 23, team) == 26


@pytest.mark.parametrize("team, expected", [(Team.ALLY, 33), (Team.ENEMY, 29)])
def test_equal_direct_distance_prefers_id_by_team(make_grid, team, expected):
    assert pick_closest(make_grid(), [29, 33], 23, team) == expected


@pytest.mark.parametrize("candidates", [[19, 27], [27, 19]])
def test_two_vertical_targets_keep_first(make_grid, candidates):
    assert pick_closest(make_grid(), candidates, 23, Team.ALLY) == candidates[0]


def test_pick_closest_requires_candidates(make_grid):
    with pytest.raises(ValueError):
        pick_closest(make_grid(), [], 23, Team.ALLY)


# ═══════════════════════════════════════════════════════════════════════════
# TEST: NAJBLIŻSZY CEL
# ═══════════════════════════════════════════════════════════════════════════

def test_closest_target_uses_source_team(make_grid):
    grid = make_grid(ally=[23], enemy=[17, 29])
    grid.place(23, 3, Team.ALLY)

    assert find_closest_target(grid, 23, [17, 29]) == ClosestTarget(23, 29, 1)

    grid = make_grid(enemy=[23], ally=[17, 29])
    grid.place(23, 3, Team.ENEMY)

    assert find_closest_target(grid, 23, [17, 29]) == ClosestTarget(23, 17, 1)


def test_closest_target_none_when_unreachable(make_grid):
    assert find_closest_target(make_grid(blocked=ENCLOSE_45), 1, [45]) is None
    assert find_closest_target(make_grid(), 1, []) is None


def test_closest_target_map(make_grid):
    grid = make_grid(ally=[12], enemy=[40])
    grid.place(12, 3, Team.ALLY)
    grid.place(40, 7, Team.ENEMY)

    assert closest_target_map(grid, Team.ALLY, Team.ENEMY) == {12: ClosestTarget(12, 40, 4)}
    assert closest_target_map(grid, Team.ENEMY, Team.ALLY) == {40: ClosestTarget(40, 12, 4)}


def test_closest_target_map_respects_ranges(make_grid):
    grid = make_grid(ally=[12], enemy=[40])
    grid.place(12, 3, Team.ALLY)
    grid.place(40, 7, Team.ENEMY)

    assert closest_target_map(grid, Team.ALLY, Team.ENEMY, {3: 4})[12].distance == 1
    assert closest_target_map(grid, Team.ALLY, Team.ENEMY, {3: 5})[12].distance == 0


def test_closest_target_map_without_targets(make_grid):
    grid = make_grid(ally=[12])
    grid.place(12, 3, Team.ALLY)

    assert closest_target_map(grid, Team.ALLY, Team.ENEMY) == {}


def test_closest_target_to_dict():
    assert ClosestTarget(12, 40, 4).to_dict() == {
        "source_hex_id": 12, "target_hex_id": 40, "distance": 4,
    }
