"""
Biblioteka typów umiejętności.

Każdy typ odpowiada wartości `skill.type` w characters.yaml:

    symmetry_strike   - wróg na polu lustrzanym, inaczej spirala od lustra
    spiral_target     - spirala od własnego pola
    distance_target   - closest / furthest / frontmost / rearmost
    row_target        - skan pierścieni i/lub własnego rzędu diagonalnego
    multi_target      - N celów naraz pod osobnymi indeksami
    arrow_chain       - sojusznik z rzędu + najdalszy wróg, dwie strzałki
    adjacent_mirror   - sąsiedni sojusznik i wróg na jego polu lustrzanym
    behind_adjacent   - sąsiedni sojusznik "za" casterem
    companion         - przywołuje companiony powiązane z właścicielem
    zone_block        - zamienia strefę pól w przeszkody

Przykład (characters.yaml):
    nara:
      character_id: 58
      skill:
        type: symmetry_strike
        name: "Phantom Chains"
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..core.errors import GridError, NoAvailableTileError
from ..core.tile import Team, TileState
from ..targeting.candidates import team_candidates
from ..targeting.distance import TargetingMethod, find_target
from ..targeting.multi_target import select_top_n
from ..targeting.row_scan import (
    RowScanDirection, RowTieBreak, ring_scan, row_scan, search_by_row,
)
from ..targeting.spiral import find_symmetrical_target, spiral_search
from ..targeting.symmetry import symmetric_hex_id
from ..transactions.remove import build_remove_transaction
from .skill import Skill, SkillContext, SkillTargetInfo, TargetingSkill


def _target_team(context: SkillContext, target: str) -> Team:
    """'enemy' / 'ally' względem drużyny castera."""
    return context.team if target == "ally" else context.team.opposing()


def _arrow(from_hex_id: int, to_hex_id: int, arrow_type: str) -> dict:
    return {"from_hex_id": from_hex_id, "to_hex_id": to_hex_id, "type": arrow_type}


# ═══════════════════════════════════════════════════════════════════════════
# TARGETING
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class SymmetryStrikeSkill(TargetingSkill):
    """Cel na polu lustrzanym castera; gdy puste - spirala od lustra."""
    skill_type = "symmetry_strike"

    def compute_targets(self, context: SkillContext) -> List[Optional[SkillTargetInfo]]:
        return [find_symmetrical_target(context.grid, context.hex_id, context.team)]


@dataclass
class SpiralTargetSkill(TargetingSkill):
    """Pierwszy wróg w spiralnym obchodzie od własnego pola."""
    skill_type = "spiral_target"

    def compute_targets(self, context: SkillContext) -> List[Optional[SkillTargetInfo]]:
        return [
            spiral_search(context.grid, context.hex_id, context.team.opposing(), context.team)
        ]


@dataclass
class DistanceTargetSkill(TargetingSkill):
    """
    Cel wybrany metodą odległości / pozycji.

    Attributes:
        method: closest / furthest / frontmost / rearmost
        target: "enemy" lub "ally"
        exclude_self: Pomijaj castera przy celowaniu w sojuszników
        arrow: Dodaj strzałkę od castera do celu
    """
    method: str = "closest"
    target: str = "enemy"
    exclude_self: bool = True
    arrow: bool = False

    skill_type = "distance_target"

    def __post_init__(self):
        TargetingMethod.parse(self.method)
        if self.target not in ("enemy", "ally"):
            raise ValueError(f"Unknown target side: {self.target!r}")

    def compute_targets(self, context: SkillContext) -> List[Optional[SkillTargetInfo]]:
        target_team = _target_team(context, self.target)
        exclude = context.character_id if self.exclude_self and target_team is context.team else None
        info = find_target(
            context.grid, context.hex_id, context.team, target_team,
            TargetingMethod.parse(self.method), exclude_character_id=exclude,
        )
        if info is not None and self.arrow:
            info.metadata["arrows"] = [_arrow(context.hex_id, info.target_hex_id, self.target)]
        return [info]


@dataclass
class RowTargetSkill(TargetingSkill):
    """
    Cel ze skanu rzędów i pierścieni.

    Attributes:
        mode: "ring" - tylko pierścienie od sąsiadów castera
              "row" - tylko własny rząd diagonalny
              "row_then_ring" - własny rząd, potem pierścienie bez niego
        direction: frontmost / rearmost (priorytet w pierścieniu)
        tie_break: left / right (remis we własnym rzędzie)
        target: "enemy" lub "ally"
        exclude_companions: Pomijaj companiony
        max_radius: Limit promienia (None = bez limitu)
    """
    mode: str = "ring"
    direction: str = "frontmost"
    tie_break: str = "left"
    target: str = "ally"
    exclude_companions: bool = False
    max_radius: Optional[int] = None

    skill_type = "row_target"

    def __post_init__(self):
        if self.mode not in ("ring", "row", "row_then_ring"):
            raise ValueError(f"Unknown row target mode: {self.mode!r}")
        RowScanDirection.parse(self.direction)
        RowTieBreak.parse(self.tie_break)

    def compute_targets(self, context: SkillContext) -> List[Optional[SkillTargetInfo]]:
        target_team = _target_team(context, self.target)
        direction = RowScanDirection.parse(self.direction)
        tie_break = RowTieBreak.parse(self.tie_break)

        if self.mode == "row":
            info = search_by_row(
                context.grid, context.hex_id, context.team, target_team,
                context.character_id, tie_break, self.exclude_companions,
            )
        elif self.mode == "ring":
            info = ring_scan(
                context.grid, context.hex_id, context.team, target_team, direction,
                context.character_id, self.exclude_companions, self.max_radius,
            )
        else:
            info = row_scan(
                context.grid, context.hex_id, context.team, target_team,
                direction=direction,
                tie_break=tie_break,
                exclude_character_id=context.character_id,
                exclude_companions=self.exclude_companions,
                max_radius=self.max_radius,
            )
        return [info]


@dataclass
class MultiTargetSkill(TargetingSkill):
    """N celów naraz (np. dwóch najdalej z tyłu sojuszników)."""
    count: int = 2
    method: str = "rearmost"
    target: str = "ally"

    skill_type = "multi_target"

    def __post_init__(self):
        TargetingMethod.parse(self.method)
        if self.count < 1:
            raise ValueError(f"count must be >= 1, got {self.count}")

    def compute_targets(self, context: SkillContext) -> List[Optional[SkillTargetInfo]]:
        return select_top_n(
            context.grid, context.hex_id, context.team,
            _target_team(context, self.target), self.count,
            TargetingMethod.parse(self.method),
            exclude_character_id=context.character_id,
        )


@dataclass
class ArrowChainSkill(TargetingSkill):
    """
    Sojusznik ze skanu rzędów oraz najdalszy wróg.

    Cel = sojusznik; obie strzałki wychodzą od castera. Bez sojusznika
    nie ma celu.
    """
    skill_type = "arrow_chain"

    def compute_targets(self, context: SkillContext) -> List[Optional[SkillTargetInfo]]:
        ally = row_scan(
            context.grid, context.hex_id, context.team, context.team,
            exclude_character_id=context.character_id,
        )
        if ally is None:
            return []

        arrows = [_arrow(context.hex_id, ally.target_hex_id, "ally")]
        enemy = find_target(
            context.grid, context.hex_id, context.team, context.team.opposing(),
            TargetingMethod.FURTHEST,
        )
        if enemy is not None:
            arrows.append(_arrow(context.hex_id, enemy.target_hex_id, "enemy"))

        ally.metadata["arrows"] = arrows
        ally.metadata["enemy_hex_id"] = enemy.target_hex_id if enemy else None
        return [ally]


# Kolejność sprawdzania sąsiadów (indeksy kierunków Hex)
_ALLY_NEIGHBOR_PRIORITY = (3, 4, 2, 1, 5, 0)
_ENEMY_NEIGHBOR_PRIORITY = (0, 5, 1, 2, 4, 3)


@dataclass
class AdjacentMirrorSkill(TargetingSkill):
    """
    Sąsiedni sojusznik (priorytet kierunków zależny od drużyny), a potem
    wróg stojący na polu lustrzanym tego sojusznika.
    """
    skill_type = "adjacent_mirror"

    def compute_targets(self, context: SkillContext) -> List[Optional[SkillTargetInfo]]:
        grid = context.grid
        source = grid.hex_of(context.hex_id)
        if source is None:
            return []

        priority = _ALLY_NEIGHBOR_PRIORITY if context.team is Team.ALLY else _ENEMY_NEIGHBOR_PRIORITY
        ally_hex_id = None
        ally_id = None
        for direction in priority:
            hex_id = grid.layout.id_of(source.neighbor(direction))
            if hex_id is None:
                continue
            tile = grid.get_tile(hex_id)
            if tile.team is context.team and tile.character_id is not None:
                ally_hex_id, ally_id = hex_id, tile.character_id
                break
        if ally_hex_id is None:
            return []

        mirror = symmetric_hex_id(grid, ally_hex_id)
        mirror_tile = grid.get_tile(mirror) if mirror is not None else None
        if mirror_tile is None or mirror_tile.team is not context.team.opposing():
            return []

        return [
            SkillTargetInfo(
                target_hex_id=ally_hex_id,
                target_character_id=ally_id,
                metadata={
                    "ally_hex_id": ally_hex_id,
                    "enemy_hex_id": mirror,
                    "arrows": [
                        _arrow(context.hex_id, ally_hex_id, "ally"),
                        _arrow(ally_hex_id, mirror, "enemy"),
                    ],
                },
            )
        ]


@dataclass
class BehindAdjacentSkill(TargetingSkill):
    """
    Sąsiedni sojusznik stojący "za" casterem.

    Za casterem są sąsiednie pola o mniejszym id (ALLY) lub większym
    id (ENEMY). Kolejność sprawdzania: najbliższe tyłu pole, potem
    pozostałe od drugiego końca:

        ALLY na 23:   sąsiedzi za = [16, 19, 20] -> priorytet [16, 20, 19]
        ENEMY na 23:  sąsiedzi za = [30, 27, 26] -> priorytet [30, 26, 27]
    """
    skill_type = "behind_adjacent"

    @staticmethod
    def behind_priority(grid, hex_id: int, team: Team) -> List[int]:
        source = grid.hex_of(hex_id)
        if source is None:
            return []
        neighbors = [grid.layout.id_of(hex_) for hex_ in source.neighbors()]
        if team is Team.ALLY:
            behind = sorted(n for n in neighbors if n is not None and n < hex_id)
        else:
            behind = sorted((n for n in neighbors if n is not None and n > hex_id), reverse=True)
        return behind[:1] + behind[1:][::-1]

    def compute_targets(self, context: SkillContext) -> List[Optional[SkillTargetInfo]]:
        allies = {
            c.hex_id: c.character_id
            for c in team_candidates(
                context.grid, context.team, exclude_character_id=context.character_id
            )
        }
        for hex_id in self.behind_priority(context.grid, context.hex_id, context.team):
            if hex_id in allies:
                return [
                    SkillTargetInfo(
                        target_hex_id=hex_id,
                        target_character_id=allies[hex_id],
                        metadata={"distance": 1},
                    )
                ]
        return []


# ═══════════════════════════════════════════════════════════════════════════
# COMPANIONY
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class CompanionSkill(Skill):
    """
    Przywołuje `companions` companionów na losowych wolnych polach drużyny.

    Każdy companion zwiększa limit drużyny o 1. Brak miejsca dla
    wszystkich companionów -> NoAvailableTileError (postawienie
    właściciela zostaje wycofane).

    Attributes:
        companions: Liczba przywoływanych companionów
        companion_range: Zasięg ataku companionów (None = zasięg właściciela)
    """
    companions: int = 1
    companion_range: Optional[int] = None

    skill_type = "companion"

    def __post_init__(self):
        if self.companions < 1:
            raise ValueError(f"companions must be >= 1, got {self.companions}")
        if self.companion_range is not None and self.companion_range < 1:
            raise ValueError(f"companion_range must be >= 1, got {self.companion_range}")

    def on_activate(self, context: SkillContext) -> None:
        grid = context.grid
        registry = grid.companions

        if len(grid.available_tiles(context.team)) < self.companions:
            raise NoAvailableTileError(
                f"Not enough space for {self.companions} companion(s)",
                character_id=context.character_id,
                team=context.team,
            )

        try:
            for index in range(1, self.companions + 1):
                registry.spawn(grid, context.character_id, context.team, index)
        except GridError:
            registry.despawn_all(grid, context.character_id, context.team)
            raise

        self.apply_presentation(context)

    def on_deactivate(self, context: SkillContext) -> None:
        registry = context.grid.companions
        for companion_id in registry.companions_of(context.character_id, context.team):
            context.manager.remove_modifier(companion_id, context.team)
        registry.despawn_all(context.grid, context.character_id, context.team)
        super().on_deactivate(context)

    def apply_presentation(self, context: SkillContext) -> None:
        super().apply_presentation(context)
        if self.companion_color_modifier:
            for companion_id in context.grid.companions.companions_of(
                context.character_id, context.team
            ):
                context.manager.set_modifier(
                    companion_id, context.team, self.companion_color_modifier
                )


# ═══════════════════════════════════════════════════════════════════════════
# STREFY
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class ZoneBlockSkill(Skill):
    """
    Zamienia strefę pól w przeszkody na czas aktywności umiejętności.

    Strefa jest opisana z perspektywy ALLY; dla ENEMY pola są odbijane
    przez mapę symetrii.

    Aktywacja:
        1. postacie na polach strefy schodzą z planszy (transakcje remove,
           companion pociąga za sobą właściciela)
        2. zapis pierwotnych stanów pól (entry.data["saved_states"])
        3. blocked -> BLOCKED, breakable -> BLOCKED_BREAKABLE
        4. caster stojący w strefie przechodzi na losowe wolne pole drużyny

    Dezaktywacja przywraca stany pól. Rollback aktywacji (undo_activate)
    cofa dodatkowo przeniesienie castera i zdjęcia postaci.

    Pole trzymane także przez inną aktywną strefę nie jest przywracane -
    wraca dopiero z dezaktywacją ostatniej z nich.

    Attributes:
        blocked: Pola zamieniane w BLOCKED
        breakable: Pola zamieniane w BLOCKED_BREAKABLE
    """
    blocked: List[int] = field(default_factory=list)
    breakable: List[int] = field(default_factory=list)

    skill_type = "zone_block"
    activation_order = -1

    def __post_init__(self):
        overlap = set(self.blocked) & set(self.breakable)
        if overlap:
            raise ValueError(f"Hexes both blocked and breakable: {sorted(overlap)}")

    def zone(self, grid, team: Team) -> Dict[int, TileState]:
        """Pola strefy drużyny -> stan przeszkody."""
        states: Dict[int, TileState] = {}
        groups = ((self.blocked, TileState.BLOCKED), (self.breakable, TileState.BLOCKED_BREAKABLE))
        for hex_ids, state in groups:
            for hex_id in hex_ids:
                if team is Team.ENEMY:
                    hex_id = symmetric_hex_id(grid, hex_id)
                if hex_id is not None and grid.get_tile(hex_id) is not None:
                    states[hex_id] = state
        return states

    def on_activate(self, context: SkillContext) -> None:
        grid = context.grid
        zone = self.zone(grid, context.team)

        if context.hex_id in zone and not self._free_tiles(grid, context.team, zone):
            raise NoAvailableTileError(
                "No tile outside the zone to relocate the caster",
                hex_id=context.hex_id,
                character_id=context.character_id,
                team=context.team,
            )

        data = context.data
        data["removals"] = []
        data["saved_states"] = {}
        data["relocated"] = None

        try:
            self._clear_zone(context, zone)

            held = context.manager.saved_tile_states()
            for hex_id in zone:
                data["saved_states"][hex_id] = held.get(hex_id, grid.get_tile(hex_id).state.base)

            for hex_id, state in zone.items():
                if hex_id == context.hex_id:
                    continue
                if not grid.set_state(hex_id, state):
                    raise GridError(f"Cannot block tile {hex_id}", hex_id=hex_id)

            if context.hex_id in zone:
                self._relocate_caster(context, zone)
        except GridError:
            self._revert(context)
            raise

        grid.logger.log_zone(True, context.character_id, context.team.value, sorted(zone))
        self.apply_presentation(context)

    def on_deactivate(self, context: SkillContext) -> None:
        self._restore_states(context)
        super().on_deactivate(context)

    def undo_activate(self, context: SkillContext) -> None:
        self._revert(context)
        super().on_deactivate(context)

    def describe(self) -> Dict:
        result = super().describe()
        result["blocked"] = list(self.blocked)
        result["breakable"] = list(self.breakable)
        return result

    # ─────────────────────────────────────────────────────────────────────────

    @staticmethod
    def _free_tiles(grid, team: Team, zone: Dict[int, TileState]) -> List[int]:
        return [tile.id for tile in grid.available_tiles(team) if tile.id not in zone]

    def _clear_zone(self, context: SkillContext, zone: Dict[int, TileState]) -> None:
        grid = context.grid
        for hex_id in sorted(zone):
            tile = grid.get_tile(hex_id)
            if not tile.is_occupied:
                continue
            if tile.character_id == context.character_id and tile.team is context.team:
                continue
            txn = build_remove_transaction(grid, hex_id)
            if not txn.run():
                raise GridError(
                    f"Cannot clear tile {hex_id}: {txn.failure_reason or txn.failed_step}",
                    hex_id=hex_id,
                )
            context.data["removals"].append(txn)

    def _relocate_caster(self, context: SkillContext, zone: Dict[int, TileState]) -> None:
        grid = context.grid
        old_hex = context.hex_id
        new_hex = grid.rng.pick_hex_id(self._free_tiles(grid, context.team, zone))
        if new_hex is None:
            raise NoAvailableTileError(
                "No tile outside the zone to relocate the caster",
                hex_id=old_hex, character_id=context.character_id, team=context.team,
            )

        grid.perform_remove(old_hex)
        if not grid.perform_place(new_hex, context.character_id, context.team):
            grid.perform_place(old_hex, context.character_id, context.team)
            raise NoAvailableTileError(
                f"Failed to relocate caster to tile {new_hex}",
                hex_id=new_hex, character_id=context.character_id, team=context.team,
            )
        context.data["relocated"] = (old_hex, new_hex)
        grid.set_state(old_hex, zone[old_hex])
        grid.logger.log_moved(
            context.character_id, old_hex, new_hex, context.team.value, context.team.value
        )

    def _restore_states(self, context: SkillContext) -> None:
        saved = context.data.pop("saved_states", {})
        held = context.manager.saved_tile_states()
        restored = [
            hex_id for hex_id, state in saved.items()
            if hex_id not in held and context.grid.set_state(hex_id, state)
        ]
        if restored:
            context.grid.logger.log_zone(
                False, context.character_id, context.team.value, sorted(restored)
            )

    def _revert(self, context: SkillContext) -> None:
        """Cofa wszystkie zmiany planszy z aktywacji (od końca)."""
        grid = context.grid
        self._restore_states(context)

        relocated = context.data.pop("relocated", None)
        if relocated is not None:
            old_hex, new_hex = relocated
            grid.perform_remove(new_hex)
            grid.perform_place(old_hex, context.character_id, context.team)

        for txn in reversed(context.data.pop("removals", [])):
            txn.revert()
