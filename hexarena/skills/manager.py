"""
SkillManager - runtime umiejętności na siatce.

Odpowiada za:
- aktywację / dezaktywację umiejętności (wpisy ActiveSkillEntry)
- przeliczanie celów po każdej zatwierdzonej transakcji (update_all)
- cache celów z licznikiem wersji
- modyfikatory prezentacji (kolory postaci)

CYKL ŻYCIA:
═══════════════════════════════════════════════════════════════════

    activate(58, hex=12, ALLY)
        ├── już aktywna? -> deactivate najpierw (idempotencja)
        ├── zapisz ActiveSkillEntry
        └── skill.on_activate(ctx)
              └── wyjątek -> usuń wpis, wyczyść cele, return False

    undo_activate(58, ALLY)   (rollback kroku activate)
        ├── usuń wpis
        └── skill.undo_activate(ctx) - cofa też zmiany planszy z aktywacji

    update_all()   (po każdym commicie)
        dla wpisów w kolejności (team, character_id):
        ├── postaci nie ma na planszy -> usuń wpis i cele
        ├── odśwież hex_id wpisu
        └── skill.on_update(ctx)
              └── wyjątek -> SKILL_ERROR, cele wyczyszczone

Wersja:
    Każdy zapis i każde czyszczenie celu zwiększa `version`, więc warstwa
    renderowania może wykryć zmianę bez porównywania całego cache.
"""

from __future__ import annotations
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple, TYPE_CHECKING

from ..core.tile import Team, TileState
from .skill import ActiveSkillEntry, Skill, SkillContext, SkillTargetInfo, TargetKey

if TYPE_CHECKING:
    from ..core.hex_grid import HexGrid
    from ..events.event_logger import EventLogger
    from .registry import SkillRegistry


def _entry_order(key: Tuple[int, Team]) -> Tuple[str, int]:
    character_id, team = key
    return (team.value, character_id)


class SkillManager:
    """
    Runtime umiejętności jednej siatki.

    Attributes:
        registry (SkillRegistry): Niemutowalna tablica character_id -> Skill
        grid (HexGrid): Siatka, na której działają umiejętności
        logger (EventLogger): Logger zdarzeń
    """

    def __init__(
        self,
        registry: "SkillRegistry",
        grid: "HexGrid",
        logger: Optional["EventLogger"] = None,
    ):
        self.registry = registry
        self.grid = grid
        self.logger = logger
        self._active: Dict[Tuple[int, Team], ActiveSkillEntry] = {}
        self._targets: Dict[TargetKey, SkillTargetInfo] = {}
        self._modifiers: Dict[Tuple[int, Team], str] = {}
        self._version = 0

    # ─────────────────────────────────────────────────────────────────────────
    # ZAPYTANIA
    # ─────────────────────────────────────────────────────────────────────────

    def has_skill(self, character_id: int) -> bool:
        return character_id in self.registry

    def get_skill(self, character_id: int) -> Optional[Skill]:
        return self.registry.get(character_id)

    def is_active(self, character_id: int, team: Team) -> bool:
        return (character_id, team) in self._active

    def get_entry(self, character_id: int, team: Team) -> Optional[ActiveSkillEntry]:
        return self._active.get((character_id, team))

    def active_entries(self) -> List[ActiveSkillEntry]:
        """Kopie aktywnych wpisów w stabilnej kolejności."""
        return [
            ActiveSkillEntry(entry.character_id, entry.team, entry.hex_id)
            for key, entry in sorted(self._active.items(), key=lambda item: _entry_order(item[0]))
        ]

    def _context(self, entry: ActiveSkillEntry) -> SkillContext:
        return SkillContext(
            grid=self.grid,
            hex_id=entry.hex_id,
            team=entry.team,
            character_id=entry.character_id,
            manager=self,
            data=entry.data,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # AKTYWACJA / DEAKTYWACJA
    # ─────────────────────────────────────────────────────────────────────────

    def activate(self, character_id: int, hex_id: int, team: Team) -> bool:
        """
        Aktywuje umiejętność postaci (idempotentnie).

        Args:
            character_id: Postać
            hex_id: Pole postaci
            team: Drużyna postaci

        Returns:
            bool: False gdy postać nie ma umiejętności lub on_activate rzucił
        """
        skill = self.registry.get(character_id)
        if skill is None:
            return False

        if self.is_active(character_id, team):
            self.deactivate(character_id, team)

        entry = ActiveSkillEntry(character_id, team, hex_id)
        self._active[(character_id, team)] = entry

        try:
            skill.on_activate(self._context(entry))
        except Exception as exc:
            del self._active[(character_id, team)]
            self.clear_targets(character_id, team)
            self.remove_modifier(character_id, team)
            self._log_error(character_id, team, "activate", exc)
            return False

        if self.logger:
            self.logger.log_skill_activated(character_id, hex_id, team.value)
        return True

    def deactivate(self, character_id: int, team: Team) -> bool:
        """
        Dezaktywuje umiejętność postaci.

        Returns:
            bool: False gdy umiejętność nie była aktywna
        """
        entry = self._active.pop((character_id, team), None)
        if entry is None:
            return False

        skill = self.registry.get(character_id)
        if skill is not None:
            try:
                skill.on_deactivate(self._context(entry))
            except Exception as exc:
                self._log_error(character_id, team, "deactivate", exc)

        # Cele i modyfikatory nie przeżywają dezaktywacji
        self.clear_targets(character_id, team)
        self.remove_modifier(character_id, team)

        if self.logger:
            self.logger.log_skill_deactivated(character_id, team.value)
        return True

    def undo_activate(self, character_id: int, team: Team) -> bool:
        """
        Cofa aktywację w rollbacku transakcji (skill.undo_activate).

        Returns:
            bool: False gdy umiejętność nie była aktywna
        """
        entry = self._active.pop((character_id, team), None)
        if entry is None:
            return False

        skill = self.registry.get(character_id)
        if skill is not None:
            skill.undo_activate(self._context(entry))

        self.clear_targets(character_id, team)
        self.remove_modifier(character_id, team)

        if self.logger:
            self.logger.log_skill_deactivated(character_id, team.value)
        return True

    def deactivate_all(self) -> List[ActiveSkillEntry]:
        """Dezaktywuje wszystko; zwraca wpisy sprzed dezaktywacji."""
        entries = self.active_entries()
        for entry in entries:
            self.deactivate(entry.character_id, entry.team)
        return entries

    def update_all(self) -> None:
        """
        Przelicza wszystkie aktywne umiejętności po zmianie planszy.

        Kolejność jest stabilna: (team, character_id).
        """
        for key in sorted(self._active, key=_entry_order):
            entry = self._active.get(key)
            if entry is None:
                continue

            hex_id = self.grid.find_character_hex(entry.character_id, entry.team)
            if hex_id is None:
                del self._active[key]
                self.clear_targets(entry.character_id, entry.team)
                self.remove_modifier(entry.character_id, entry.team)
                continue
            entry.hex_id = hex_id

            skill = self.registry.get(entry.character_id)
            if skill is None:
                continue
            try:
                skill.on_update(self._context(entry))
            except Exception as exc:
                self.clear_targets(entry.character_id, entry.team)
                self._log_error(entry.character_id, entry.team, "update", exc)

    def saved_tile_states(self) -> Dict[int, TileState]:
        """
        Pierwotne stany pól nadpisanych przez aktywne umiejętności.

        Wpisy trzymają je pod kluczem `saved_states` w entry.data.
        """
        saved: Dict[int, TileState] = {}
        for key in sorted(self._active, key=_entry_order):
            saved.update(self._active[key].data.get("saved_states", {}))
        return saved

    def apply_presentation(self, character_id: int, team: Team) -> None:
        """Ponownie nakłada modyfikatory prezentacji aktywnej umiejętności."""
        entry = self._active.get((character_id, team))
        skill = self.registry.get(character_id)
        if entry is not None and skill is not None:
            skill.apply_presentation(self._context(entry))

    def _log_error(self, character_id: int, team: Team, phase: str, exc: Exception) -> None:
        if self.logger:
            self.logger.log_skill_error(
                character_id, team.value, phase, f"{type(exc).__name__}: {exc}"
            )

    # ─────────────────────────────────────────────────────────────────────────
    # CACHE CELÓW
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def version(self) -> int:
        return self._version

    def set_target(
        self,
        character_id: int,
        team: Team,
        info: SkillTargetInfo,
        index: int = 0,
    ) -> None:
        self._targets[TargetKey(character_id, team, index)] = info
        self._version += 1

    def replace_targets(
        self,
        character_id: int,
        team: Team,
        infos: List[SkillTargetInfo],
    ) -> None:
        """
        Zastępuje wszystkie cele postaci listą (indeksy 0..n-1).

        Pusta lista = brak celu (wskaźnik znika).
        """
        self._drop_targets(character_id, team)
        for index, info in enumerate(infos):
            self._targets[TargetKey(character_id, team, index)] = info
        self._version += 1
        if self.logger:
            self.logger.log_target_updated(
                character_id, team.value, [info.to_dict() for info in infos]
            )

    def clear_targets(self, character_id: int, team: Team) -> None:
        self._drop_targets(character_id, team)
        self._version += 1

    def _drop_targets(self, character_id: int, team: Team) -> None:
        for key in [k for k in self._targets if k.character_id == character_id and k.team is team]:
            del self._targets[key]

    def get_target(
        self,
        character_id: int,
        team: Team,
        index: int = 0,
    ) -> Optional[SkillTargetInfo]:
        return self._targets.get(TargetKey(character_id, team, index))

    def targets_for(self, character_id: int, team: Team) -> List[SkillTargetInfo]:
        """Cele postaci w kolejności indeksów."""
        keys = sorted(
            (k for k in self._targets if k.character_id == character_id and k.team is team),
            key=lambda k: k.index,
        )
        return [self._targets[k] for k in keys]

    def all_targets(self) -> Mapping[TargetKey, SkillTargetInfo]:
        """Widok tylko do odczytu na cały cache celów."""
        return MappingProxyType(self._targets)

    # ─────────────────────────────────────────────────────────────────────────
    # MODYFIKATORY PREZENTACJI
    # ─────────────────────────────────────────────────────────────────────────

    def set_modifier(self, character_id: int, team: Team, color: str) -> None:
        self._modifiers[(character_id, team)] = color

    def remove_modifier(self, character_id: int, team: Team) -> None:
        self._modifiers.pop((character_id, team), None)

    def get_modifier(self, character_id: int, team: Team) -> Optional[str]:
        return self._modifiers.get((character_id, team))

    def modifiers(self) -> Mapping[Tuple[int, Team], str]:
        return MappingProxyType(self._modifiers)
