"""
Testy strefy blokującej (ZoneBlockSkill): blokada pól, zdejmowanie postaci,
przeniesienie castera, przywracanie stanów i rollback aktywacji.

Strefa ALLY:  BLOCKED [18, 19, 20, 21, 22, 24], BLOCKED_BREAKABLE [23]
Strefa ENEMY: BLOCKED [25, 26, 27, 28, 22, 24], BLOCKED_BREAKABLE [23]
"""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from hexarena.core.tile import Team, TileState
from hexarena.events.event_logger import EventType
from hexarena.skills.library import BehindAdjacentSkill, CompanionSkill, ZoneBlockSkill
from hexarena.transactions import build_move_transaction, build_place_transaction, build_swap_transaction


ALLY_ZONE = [18, 19, 20, 21, 22, 24]
ENEMY_ZONE = [25, 26, 27, 28, 22, 24]


def kulu():
    return ZoneBlockSkill(character_id=80, blocked=list(ALLY_ZONE), breakable=[23])


def state(grid, hex_id):
    return grid.get_tile(hex_id).state


def board_state(grid):
    manager = grid.skill_manager
    return {
        "export": grid.export_state(),
        "states": [(tile.id, tile.state) for tile in grid.tiles()],
        "entries": [e.to_dict() for e in manager.active_entries()],
        "links": [link.to_dict() for link in grid.companions.links()],
        "sizes": {team: grid.get_max_team_size(team) for team in Team},
        "targets": {k: v.to_dict() for k, v in manager.all_targets().items()},
        "modifiers": dict(manager.modifiers()),
    }


# ═══════════════════════════════════════════════════════════════════════════
# TEST: AKTYWACJA
# ═══════════════════════════════════════════════════════════════════════════

def test_zone_for_enemy_is_mirrored(make_grid):
    grid = make_grid()
    zone = kulu().zone(grid, Team.ENEMY)

    assert sorted(h for h, s in zone.items() if s is TileState.BLOCKED) == sorted(ENEMY_ZONE)
    assert zone[23] is TileState.BLOCKED_BREAKABLE


def test_activation_blocks_zone_and_removes_occupants(make_grid):
    grid = make_grid(ally=[1, 19], enemy=[22], skills=[kulu()])
    grid.place(19, 3, Team.ALLY)
    grid.place(22, 7, Team.ENEMY)

    assert grid.place(1, 80, Team.ALLY)

    assert grid.character_at(19) is None
    assert grid.character_at(22) is None
    assert not grid.is_on_team(3, Team.ALLY)
    for hex_id in ALLY_ZONE:
        assert state(grid, hex_id) is TileState.BLOCKED
    assert state(grid, 23) is TileState.BLOCKED_BREAKABLE
    assert grid.logger.get_events_by_type(EventType.ZONE_BLOCKED)
    assert grid.invariant_violations() == []


def test_deactivation_restores_states(make_grid):
    grid = make_grid(ally=[1, 19], enemy=[22], skills=[kulu()])
    grid.place(19, 3, Team.ALLY)
    grid.place(1, 80, Team.ALLY)

    assert grid.remove(1)

    assert state(grid, 19) is TileState.AVAILABLE_ALLY
    assert state(grid, 22) is TileState.AVAILABLE_ENEMY
    assert state(grid, 18) is TileState.DEFAULT
    assert state(grid, 23) is TileState.DEFAULT
    # zdjęte postacie nie wracają
    assert grid.character_at(19) is None
    assert grid.logger.get_events_by_type(EventType.ZONE_RESTORED)


def test_enemy_zone(make_grid):
    grid = make_grid(enemy=[40], skills=[kulu()])
    assert grid.place(40, 80, Team.ENEMY)

    for hex_id in ENEMY_ZONE:
        assert state(grid, hex_id) is TileState.BLOCKED
    assert state(grid, 18) is TileState.DEFAULT


def test_caster_on_zone_is_relocated(make_grid):
    grid = make_grid(ally=[1, 2, 23], skills=[kulu()])

    assert grid.place(23, 80, Team.ALLY)

    new_hex = grid.find_character_hex(80, Team.ALLY)
    assert new_hex in (1, 2)
    assert state(grid, 23) is TileState.BLOCKED_BREAKABLE
    assert grid.skill_manager.get_entry(80, Team.ALLY).hex_id == new_hex
    [moved] = grid.logger.get_events_by_type(EventType.CHARACTER_MOVED)
    assert moved.data["from"] == 23 and moved.data["to"] == new_hex
    assert grid.invariant_violations() == []


def test_caster_on_zone_without_free_tile_fails(make_grid):
    grid = make_grid(ally=[19, 23], skills=[kulu()])
    grid.place(19, 3, Team.ALLY)

    assert grid.place(23, 80, Team.ALLY) is False

    assert grid.character_at(23) is None
    assert grid.character_at(19) == 3
    assert state(grid, 23) is TileState.AVAILABLE_ALLY
    assert state(grid, 18) is TileState.DEFAULT
    assert grid.logger.get_events_by_type(EventType.SKILL_ERROR)


def test_removing_companion_in_zone_removes_owner(make_grid):
    grid = make_grid(ally=[1, 2, 20], skills=[kulu(), CompanionSkill(character_id=50)])
    grid.place(2, 50, Team.ALLY)
    if grid.find_character_hex(10050, Team.ALLY) == 1:
        assert grid.move(1, 20, 10050)

    assert grid.place(1, 80, Team.ALLY)

    assert not grid.is_on_team(50, Team.ALLY)
    assert not grid.is_on_team(10050, Team.ALLY)
    assert grid.companions.links() == []
    assert grid.invariant_violations() == []


# ═══════════════════════════════════════════════════════════════════════════
# TEST: NAKŁADAJĄCE SIĘ STREFY
# ═══════════════════════════════════════════════════════════════════════════

def test_shared_tiles_stay_blocked_until_last_zone_leaves(make_grid):
    grid = make_grid(ally=[1], enemy=[40], skills=[kulu()])
    grid.place(1, 80, Team.ALLY)
    grid.place(40, 80, Team.ENEMY)

    # eksport pokazuje stany sprzed obu blokad
    exported = dict(grid.export_state()["tiles"])
    assert exported[22] is TileState.DEFAULT
    assert exported[19] is TileState.DEFAULT

    grid.remove(1)
    assert state(grid, 19) is TileState.DEFAULT
    assert state(grid, 22) is TileState.BLOCKED
    assert state(grid, 23) is TileState.BLOCKED_BREAKABLE

    grid.remove(40)
    for hex_id in set(ALLY_ZONE + ENEMY_ZONE + [23]):
        assert state(grid, hex_id) is TileState.DEFAULT


# ═══════════════════════════════════════════════════════════════════════════
# TEST: ROLLBACK
# ═══════════════════════════════════════════════════════════════════════════

def test_failed_place_restores_removed_characters(make_grid):
    grid = make_grid(
        ally=[1, 2, 4, 19, 20],
        enemy=[22],
        skills=[kulu(), CompanionSkill(character_id=50, companion_color_modifier="#c83232")],
    )
    grid.place(19, 3, Team.ALLY)
    grid.place(22, 7, Team.ENEMY)
    grid.place(2, 50, Team.ALLY)
    kulu_hex = next(h for h in (1, 4) if grid.character_at(h) is None)
    before = board_state(grid)

    txn = build_place_transaction(grid, kulu_hex, 80, Team.ALLY)
    txn.step("fail", lambda: False)

    assert txn.run() is False
    assert board_state(grid) == before
    assert grid.invariant_violations() == []


def test_failed_team_change_restores_both_zones(make_grid):
    grid = make_grid(ally=[1, 19], enemy=[25, 40], skills=[kulu()])
    grid.place(1, 80, Team.ALLY)
    grid.place(25, 7, Team.ENEMY)
    before = board_state(grid)

    txn = build_move_transaction(grid, 1, 40, 80)
    txn.step("fail", lambda: False)

    assert txn.run() is False
    assert board_state(grid) == before
    assert state(grid, 19) is TileState.BLOCKED
    assert grid.character_at(25) == 7


@pytest.mark.parametrize("first, second", [(25, 40), (40, 25)])
def test_swap_into_zone_removes_partner(make_grid, first, second):
    """Caster przechodzi do ENEMY, partner ląduje na polu jego nowej strefy."""
    grid = make_grid(ally=[25], enemy=[40], skills=[kulu(), BehindAdjacentSkill(character_id=81)])
    grid.place(25, 80, Team.ALLY)
    grid.place(40, 81, Team.ENEMY)

    assert grid.swap(first, second)

    assert grid.find_character_hex(80, Team.ENEMY) == 40
    assert not grid.is_on_team(81, Team.ALLY)
    assert not grid.skill_manager.is_active(81, Team.ALLY)
    assert state(grid, 25) is TileState.BLOCKED
    assert state(grid, 19) is TileState.DEFAULT
    assert grid.invariant_violations() == []


def test_failed_swap_into_zone_restores_partner(make_grid):
    grid = make_grid(ally=[25], enemy=[40], skills=[kulu(), BehindAdjacentSkill(character_id=81)])
    grid.place(25, 80, Team.ALLY)
    grid.place(40, 81, Team.ENEMY)
    before = board_state(grid)

    txn = build_swap_transaction(grid, 25, 40)
    txn.step("fail", lambda: False)

    assert txn.run() is False
    assert board_state(grid) == before
    assert grid.invariant_violations() == []


# ═══════════════════════════════════════════════════════════════════════════
# TEST: EKSPORT / IMPORT
# ═══════════════════════════════════════════════════════════════════════════

def test_export_load_round_trip_with_zone(make_grid):
    grid = make_grid(ally=[1, 2, 19], enemy=[40], skills=[kulu()])
    grid.place(1, 80, Team.ALLY)
    grid.place(2, 3, Team.ALLY)
    grid.place(40, 7, Team.ENEMY)
    exported = grid.export_state()
    snapshot = grid.snapshot()

    assert dict(exported["tiles"])[19] is TileState.AVAILABLE_ALLY

    other = make_grid(ally=[1, 2, 19], enemy=[40], skills=[kulu()])
    assert other.load_state(exported["tiles"], exported["characters"])
    assert other.snapshot() == snapshot
    assert other.export_state() == exported

    assert grid.load_state(exported["tiles"], exported["characters"])
    assert grid.snapshot() == snapshot


def test_load_activates_zone_before_companions(make_grid):
    """Companion nie może wylosować pola strefy - zdjęłoby to właściciela."""
    skills = [kulu(), CompanionSkill(character_id=50)]
    grid = make_grid(ally=[1, 2, 4, 18, 19, 20, 21], skills=skills)
    grid.place(2, 80, Team.ALLY)
    grid.place(1, 50, Team.ALLY)
    assert grid.find_character_hex(10050, Team.ALLY) == 4
    exported = grid.export_state()

    for seed in range(5):
        other = make_grid(ally=[1, 2, 4, 18, 19, 20, 21], skills=skills, seed=seed)
        assert other.load_state(exported["tiles"], exported["characters"])
        assert other.is_on_team(50, Team.ALLY)
        assert other.export_state() == exported
