"""
Testy transakcji siatki.

Sprawdza place / remove / move / swap, walidację przed zmianą oraz
pełny rollback przy porażce dowolnego kroku.
"""

import pytest
import sys
from dataclasses import dataclass
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from hexarena.core.errors import GridError, TransactionFailure, ValidationError
from hexarena.core.tile import Team, TileState
from hexarena.core.transaction import Transaction
from hexarena.events.event_logger import EventType
from hexarena.skills.library import CompanionSkill, SymmetryStrikeSkill
from hexarena.skills.skill import SkillTargetInfo, TargetingSkill
from hexarena.transactions import (
    build_auto_place_transaction,
    build_clear_transaction,
    build_move_transaction,
    build_place_transaction,
    build_remove_transaction,
    build_swap_transaction,
)


ALLY_ZONE = [1, 2, 3, 4, 5, 9, 12, 16, 23]
ENEMY_ZONE = [30, 33, 36, 40, 45]


@dataclass
class AllyOnlySkill(TargetingSkill):
    """Umiejętność, która nie działa w drużynie ENEMY."""
    skill_type = "ally_only"

    def compute_targets(self, context):
        return [SkillTargetInfo(context.hex_id, context.character_id)]

    def on_activate(self, context):
        if context.team is Team.ENEMY:
            raise RuntimeError("cannot activate for enemy")
        super().on_activate(context)


@pytest.fixture
def grid(make_grid):
    return make_grid(ally=ALLY_ZONE, enemy=ENEMY_ZONE)


# ═══════════════════════════════════════════════════════════════════════════
# TEST: TRANSACTION RUNNER
# ═══════════════════════════════════════════════════════════════════════════

def test_transaction_commits_all_steps():
    calls = []
    txn = Transaction("test")
    txn.step("a", lambda: calls.append("a") or True, lambda: calls.append("undo a"))
    txn.step("b", lambda: calls.append("b") or True, lambda: calls.append("undo b"))

    assert txn.run() is True
    assert calls == ["a", "b"]
    assert txn.failed_step is None


def test_transaction_rolls_back_completed_steps_in_reverse():
    """Porażka kroku cofa tylko zakończone kroki, od końca."""
    calls = []
    txn = Transaction("test")
    txn.step("a", lambda: calls.append("a") or True, lambda: calls.append("undo a"))
    txn.step("b", lambda: calls.append("b") or True, lambda: calls.append("undo b"))
    txn.step("c", lambda: False, lambda: calls.append("undo c"))

    assert txn.run() is False
    assert calls == ["a", "b", "undo b", "undo a"]
    assert txn.failed_step == "c"


def test_transaction_grid_error_is_failure():
    def boom():
        raise ValidationError("nope", hex_id=3)

    txn = Transaction("test")
    txn.step("boom", boom)

    assert txn.run() is False
    assert txn.failed_step == "boom"
    assert txn.failure_reason == "nope"


def test_transaction_other_exceptions_propagate_after_rollback():
    calls = []

    def boom():
        raise RuntimeError("bug")

    txn = Transaction("test")
    txn.step("a", lambda: True, lambda: calls.append("undo a"))
    txn.step("boom", boom)

    with pytest.raises(RuntimeError):
        txn.run()
    assert calls == ["undo a"]


def test_revert_undoes_committed_transaction(grid):
    """revert() cofa wszystkie kroki zatwierdzonej transakcji."""
    txn = build_place_transaction(grid, 1, 3, Team.ALLY)
    assert txn.run() is True
    assert grid.character_at(1) == 3

    txn.revert()

    assert grid.character_at(1) is None
    assert not grid.is_on_team(3, Team.ALLY)
    [rollback] = grid.logger.get_events_by_type(EventType.TRANSACTION_ROLLBACK)
    assert rollback.data["failed_step"] == "revert"
    assert grid.invariant_violations() == []


# ═══════════════════════════════════════════════════════════════════════════
# TEST: PLACE
# ═══════════════════════════════════════════════════════════════════════════

def test_place_occupies_tile(grid):
    assert grid.place(12, 7, Team.ALLY)

    tile = grid.get_tile(12)
    assert tile.state is TileState.OCCUPIED_ALLY
    assert tile.character_id == 7
    assert tile.team is Team.ALLY
    assert grid.find_character_hex(7, Team.ALLY) == 12
    assert grid.invariant_violations() == []


def test_place_accepts_team_string(grid):
    assert grid.place(30, 7, "enemy")
    assert grid.team_at(30) is Team.ENEMY


@pytest.mark.parametrize("hex_id, character_id, team", [
    (999, 7, Team.ALLY),     # pole spoza areny
    (30, 7, Team.ALLY),      # strefa wroga
    (12, 0, Team.ALLY),      # złe id postaci
    (12, -3, Team.ALLY),
    (12, 10007, Team.ALLY),  # id companiona
    (12, 7, "purple"),       # nieznana drużyna
])
def test_place_rejects_invalid_requests(grid, hex_id, character_id, team):
    before = grid.snapshot()
    assert grid.place(hex_id, character_id, team) is False
    assert grid.snapshot() == before
    assert len(grid.logger.get_events_by_type(EventType.VALIDATION_FAILED)) == 1


def test_place_on_occupied_tile_fails(grid):
    grid.place(12, 7, Team.ALLY)
    assert grid.place(12, 8, Team.ALLY) is False
    assert grid.character_at(12) == 7


def test_place_duplicate_on_same_team_fails(grid):
    grid.place(12, 7, Team.ALLY)
    assert grid.place(9, 7, Team.ALLY) is False


def test_same_character_allowed_on_both_teams(grid):
    assert grid.place(12, 7, Team.ALLY)
    assert grid.place(33, 7, Team.ENEMY)


def test_place_respects_team_size(grid):
    for character_id, hex_id in enumerate([1, 2, 3, 4, 5], start=1):
        assert grid.place(hex_id, character_id, Team.ALLY)
    assert grid.available_slots(Team.ALLY) == 0
    assert grid.place(9, 6, Team.ALLY) is False


def test_strict_mode_raises(make_grid):
    grid = make_grid(ally=ALLY_ZONE, enemy=ENEMY_ZONE, strict=True)
    with pytest.raises(ValidationError) as exc_info:
        grid.place(999, 7, Team.ALLY)
    assert exc_info.value.hex_id == 999
    assert exc_info.value.to_dict()["error"] == "ValidationError"


# ═══════════════════════════════════════════════════════════════════════════
# TEST: REMOVE
# ═══════════════════════════════════════════════════════════════════════════

def test_remove_frees_tile(grid):
    grid.place(12, 7, Team.ALLY)
    assert grid.remove(12)

    tile = grid.get_tile(12)
    assert tile.state is TileState.AVAILABLE_ALLY
    assert tile.character_id is None
    assert not grid.is_on_team(7, Team.ALLY)


def test_remove_empty_tile_fails(grid):
    assert grid.remove(12) is False
    assert grid.remove(999) is False


def test_remove_deactivates_skill(make_grid):
    grid = make_grid(ally=ALLY_ZONE, enemy=ENEMY_ZONE,
                     skills=[SymmetryStrikeSkill(character_id=58)])
    grid.place(12, 58, Team.ALLY)
    assert grid.skill_manager.is_active(58, Team.ALLY)

    grid.remove(12)
    assert not grid.skill_manager.is_active(58, Team.ALLY)
    assert grid.skill_manager.targets_for(58, Team.ALLY) == []


# ═══════════════════════════════════════════════════════════════════════════
# TEST: MOVE
# ═══════════════════════════════════════════════════════════════════════════

def test_move_within_team(make_grid):
    grid = make_grid(ally=ALLY_ZONE, enemy=ENEMY_ZONE,
                     skills=[SymmetryStrikeSkill(character_id=58)])
    grid.place(12, 58, Team.ALLY)

    assert grid.move(12, 9, 58)
    assert grid.character_at(9) == 58
    assert grid.get_tile(12).state is TileState.AVAILABLE_ALLY
    assert grid.skill_manager.get_entry(58, Team.ALLY).hex_id == 9
    assert len(grid.logger.get_events_by_type(EventType.CHARACTER_MOVED)) == 1


@pytest.mark.parametrize("from_hex, to_hex, character_id", [
    (12, 12, 7),    # to samo pole
    (12, 9, 8),     # inna postać na polu
    (12, 1, 7),     # pole zajęte
    (12, 27, 7),    # pole DEFAULT
])
def test_move_rejects_invalid_requests(grid, from_hex, to_hex, character_id):
    grid.place(12, 7, Team.ALLY)
    grid.place(1, 2, Team.ALLY)
    before = grid.snapshot()

    assert grid.move(from_hex, to_hex, character_id) is False
    assert grid.snapshot() == before


def test_move_across_teams_switches_skill_team(make_grid):
    grid = make_grid(ally=ALLY_ZONE, enemy=ENEMY_ZONE,
                     skills=[SymmetryStrikeSkill(character_id=58)])
    grid.place(12, 58, Team.ALLY)

    assert grid.move(12, 33, 58)
    assert grid.is_on_team(58, Team.ENEMY)
    assert not grid.is_on_team(58, Team.ALLY)
    assert grid.skill_manager.is_active(58, Team.ENEMY)
    assert not grid.skill_manager.is_active(58, Team.ALLY)


def test_move_across_teams_rejects_duplicate(grid):
    grid.place(12, 7, Team.ALLY)
    grid.place(30, 7, Team.ENEMY)
    assert grid.move(12, 33, 7) is False


def test_move_across_teams_rolls_back_when_activation_fails(make_grid):
    """Nieudana aktywacja w nowej drużynie przywraca wszystko."""
    grid = make_grid(ally=ALLY_ZONE, enemy=ENEMY_ZONE, skills=[AllyOnlySkill(character_id=5)])
    grid.place(12, 5, Team.ALLY)
    before = grid.snapshot()

    assert grid.move(12, 33, 5) is False

    assert grid.snapshot() == before
    assert grid.skill_manager.is_active(5, Team.ALLY)
    assert grid.skill_manager.get_entry(5, Team.ALLY).hex_id == 12
    assert grid.skill_manager.get_target(5, Team.ALLY).target_hex_id == 12
    assert not grid.skill_manager.is_active(5, Team.ENEMY)
    assert grid.invariant_violations() == []

    rollback = grid.logger.get_events_by_type(EventType.TRANSACTION_ROLLBACK)
    assert rollback[-1].data["failed_step"] == "activate:5"


def test_move_rollback_restores_companion_positions(make_grid):
    """Companion wraca na swoje pole po cofniętej zmianie drużyny."""
    grid = make_grid(ally=[1, 2, 3, 4, 5], enemy=[40],
                     skills=[CompanionSkill(character_id=50)])
    grid.place(1, 50, Team.ALLY)
    companion_hex = grid.find_character_hex(10050, Team.ALLY)
    assert companion_hex is not None
    before = grid.snapshot()

    # Na 40 staje właściciel - dla companiona nie ma już miejsca
    assert grid.move(1, 40, 50) is False

    assert grid.snapshot() == before
    assert grid.find_character_hex(10050, Team.ALLY) == companion_hex
    assert grid.companions.owner_of(10050, Team.ALLY) == 50
    assert grid.get_max_team_size(Team.ALLY) == 6
    assert grid.get_max_team_size(Team.ENEMY) == 5


def test_strict_move_failure_raises_transaction_failure(make_grid):
    grid = make_grid(ally=ALLY_ZONE, enemy=ENEMY_ZONE,
                     skills=[AllyOnlySkill(character_id=5)], strict=True)
    grid.place(12, 5, Team.ALLY)

    with pytest.raises(TransactionFailure) as exc_info:
        grid.move(12, 33, 5)
    assert exc_info.value.step == "activate:5"
    assert isinstance(exc_info.value, GridError)


# ═══════════════════════════════════════════════════════════════════════════
# TEST: SWAP
# ═══════════════════════════════════════════════════════════════════════════

def test_swap_within_team(grid):
    grid.place(12, 7, Team.ALLY)
    grid.place(9, 8, Team.ALLY)

    assert grid.swap(12, 9)
    assert grid.character_at(12) == 8
    assert grid.character_at(9) == 7
    assert len(grid.logger.get_events_by_type(EventType.CHARACTERS_SWAPPED)) == 1


def test_swap_across_teams(make_grid):
    grid = make_grid(ally=ALLY_ZONE, enemy=ENEMY_ZONE,
                     skills=[SymmetryStrikeSkill(character_id=58)])
    grid.place(12, 58, Team.ALLY)
    grid.place(33, 7, Team.ENEMY)

    assert grid.swap(12, 33)
    assert grid.character_at(33) == 58
    assert grid.team_at(33) is Team.ENEMY
    assert grid.character_at(12) == 7
    assert grid.team_at(12) is Team.ALLY
    assert grid.skill_manager.is_active(58, Team.ENEMY)
    assert not grid.skill_manager.is_active(58, Team.ALLY)


def test_swap_same_character_between_teams(grid):
    grid.place(12, 7, Team.ALLY)
    grid.place(33, 7, Team.ENEMY)
    assert grid.swap(12, 33)
    assert grid.find_character_hex(7, Team.ALLY) == 12
    assert grid.find_character_hex(7, Team.ENEMY) == 33


def test_swap_rejects_duplicates_across_teams(grid):
    grid.place(12, 7, Team.ALLY)
    grid.place(9, 8, Team.ALLY)
    grid.place(33, 8, Team.ENEMY)
    assert grid.swap(12, 33) is False


@pytest.mark.parametrize("a, b", [(12, 12), (12, 9), (12, 999)])
def test_swap_rejects_invalid_requests(grid, a, b):
    grid.place(12, 7, Team.ALLY)
    assert grid.swap(a, b) is False


def test_swap_rolls_back_when_activation_fails(make_grid):
    grid = make_grid(ally=ALLY_ZONE, enemy=ENEMY_ZONE, skills=[AllyOnlySkill(character_id=5)])
    grid.place(12, 5, Team.ALLY)
    grid.place(33, 7, Team.ENEMY)
    before = grid.snapshot()

    assert grid.swap(12, 33) is False
    assert grid.snapshot() == before
    assert grid.skill_manager.is_active(5, Team.ALLY)


# ═══════════════════════════════════════════════════════════════════════════
# TEST: AUTO_PLACE / CLEAR_ALL
# ═══════════════════════════════════════════════════════════════════════════

def test_auto_place_is_deterministic(make_grid):
    first = make_grid(ally=ALLY_ZONE, enemy=ENEMY_ZONE, seed=7)
    second = make_grid(ally=ALLY_ZONE, enemy=ENEMY_ZONE, seed=7)

    assert first.auto_place(7, Team.ALLY)
    assert second.auto_place(7, Team.ALLY)
    hex_id = first.find_character_hex(7, Team.ALLY)
    assert hex_id in ALLY_ZONE
    assert second.find_character_hex(7, Team.ALLY) == hex_id


def test_auto_place_without_space_fails(make_grid):
    grid = make_grid(ally=[1], enemy=ENEMY_ZONE)
    assert grid.auto_place(7, Team.ALLY)
    assert grid.auto_place(8, Team.ALLY) is False


def test_clear_all(make_grid):
    grid = make_grid(ally=ALLY_ZONE, enemy=ENEMY_ZONE,
                     skills=[SymmetryStrikeSkill(character_id=58)])
    grid.place(12, 58, Team.ALLY)
    grid.place(33, 7, Team.ENEMY)

    assert grid.clear_all()
    assert grid.occupied_tiles() == []
    assert grid.skill_manager.active_entries() == []
    assert len(grid.skill_manager.all_targets()) == 0
    assert grid.get_tile(12).state is TileState.AVAILABLE_ALLY


# ═══════════════════════════════════════════════════════════════════════════
# TEST: ROLLBACK KAŻDEGO KROKU
# ═══════════════════════════════════════════════════════════════════════════

def _full_board(make_grid):
    """
    Plansza z dwoma właścicielami companionów i dwiema umiejętnościami celującymi.

    ALLY:  50 (1 companion), 89 (2 companiony), 60 na 12, 9 na 2
    ENEMY: 58 na 33, 7 na 40
    """
    grid = make_grid(
        ally=ALLY_ZONE,
        enemy=ENEMY_ZONE,
        skills=[
            CompanionSkill(character_id=50, companion_color_modifier="#c83232"),
            CompanionSkill(character_id=89, companions=2, color_modifier="#ffffff"),
            SymmetryStrikeSkill(character_id=58),
            SymmetryStrikeSkill(character_id=60, color_modifier="#00ff00"),
        ],
    )
    assert grid.place(1, 50, Team.ALLY)
    assert grid.place(12, 60, Team.ALLY)
    assert grid.place(2, 9, Team.ALLY)
    assert grid.place(3, 89, Team.ALLY)
    assert grid.place(33, 58, Team.ENEMY)
    assert grid.place(40, 7, Team.ENEMY)
    return grid


def _board_state(grid):
    manager = grid.skill_manager
    return {
        "export": grid.export_state(),
        "entries": [entry.to_dict() for entry in manager.active_entries()],
        "links": [link.to_dict() for link in grid.companions.links()],
        "sizes": {team: grid.get_max_team_size(team) for team in Team},
        "targets": {key: info.to_dict() for key, info in manager.all_targets().items()},
        "modifiers": dict(manager.modifiers()),
    }


def _free_ally(grid):
    return grid.available_tiles(Team.ALLY)[0].id


ROLLBACK_SCENARIOS = {
    "place_plain": lambda g: build_place_transaction(g, _free_ally(g), 51, Team.ALLY),
    "place_companion_owner": lambda g: build_place_transaction(g, 45, 89, Team.ENEMY),
    "auto_place": lambda g: build_auto_place_transaction(g, 50, Team.ENEMY),
    "remove_owner": lambda g: build_remove_transaction(g, 3),
    "remove_companion": lambda g: build_remove_transaction(
        g, g.find_character_hex(10050, Team.ALLY)
    ),
    "remove_targeting": lambda g: build_remove_transaction(g, 12),
    "move_same_team": lambda g: build_move_transaction(g, 12, _free_ally(g), 60),
    "move_companion": lambda g: build_move_transaction(
        g, g.find_character_hex(20089, Team.ALLY), _free_ally(g), 20089
    ),
    "move_owner_across_teams": lambda g: build_move_transaction(g, 1, 30, 50),
    "move_targeting_across_teams": lambda g: build_move_transaction(g, 12, 36, 60),
    "swap_same_team": lambda g: build_swap_transaction(g, 12, 2),
    "swap_across_teams": lambda g: build_swap_transaction(g, 1, 33),
    "clear": build_clear_transaction,
}


@pytest.mark.parametrize("scenario", sorted(ROLLBACK_SCENARIOS))
def test_failure_at_any_step_restores_full_state(make_grid, scenario):
    """Porażka k-tego kroku przywraca planszę, skille, powiązania, limity i cele."""
    builder = ROLLBACK_SCENARIOS[scenario]
    step_count = len(builder(_full_board(make_grid)).steps)
    assert step_count >= 2

    for k in range(step_count):
        grid = _full_board(make_grid)
        before = _board_state(grid)

        txn = builder(grid)
        txn.steps[k].forward = lambda: False

        assert txn.run() is False, f"{scenario}: step {k}"
        assert txn.failed_step == txn.steps[k].name
        assert _board_state(grid) == before, f"{scenario}: step {k} ({txn.steps[k].name})"
        assert grid.invariant_violations() == []
