"""
System logowania zdarzeń sesji ustawiania do formatu JSON.

Każda zmiana planszy (postawienie, usunięcie, ruch, zamiana), każdy
commit/rollback transakcji i każda zmiana umiejętności jest zapisywana
z pełnym kontekstem. Log pozwala odtworzyć sesję krok po kroku.

Zamiast ticków walki zdarzenia niosą numer operacji (`tick`) - licznik
publicznych wywołań na siatce. Wszystkie zdarzenia jednej operacji
(np. ruch + dezaktywacja + aktywacja) mają ten sam numer.

TYPY ZDARZEŃ:
═══════════════════════════════════════════════════════════════════

    SESSION_START         - siatka utworzona. Data: arena, layout, seed
    CHARACTER_PLACED      - postać stanęła na polu. Data: hex_id, team
    CHARACTER_REMOVED     - postać zeszła z pola. Data: hex_id, team
    CHARACTER_MOVED       - ruch. Data: from, to, from_team, to_team
    CHARACTERS_SWAPPED    - zamiana. Data: hex_a, hex_b
    TRANSACTION_COMMIT    - transakcja udana. Data: name, steps
    TRANSACTION_ROLLBACK  - transakcja wycofana. Data: name, failed_step, reason
    VALIDATION_FAILED     - żądanie odrzucone. Data: operation, error
    SKILL_ACTIVATED       - aktywacja. Data: hex_id, team
    SKILL_DEACTIVATED     - dezaktywacja. Data: team
    SKILL_ERROR           - wyjątek w umiejętności. Data: phase, error
    TARGET_UPDATED        - zmiana celu. Data: team, targets
    COMPANION_SPAWNED     - companion postawiony. Data: owner_id, hex_id
    COMPANION_REMOVED     - companion zdjęty. Data: owner_id, hex_id
    STATE_LOADED          - stan wczytany z eksportu. Data: characters

FORMAT LOGU:
═══════════════════════════════════════════════════════════════════

{
    "metadata": {
        "version": "1.0",
        "seed": 12345,
        "arena": "arena_1",
        "layout": "full_grid",
        "timestamp": "2026-01-01T12:00:00"
    },
    "initial_state": {"tiles": [...]},
    "events": [
        {"tick": 1, "type": "CHARACTER_PLACED", "character_id": "58",
         "data": {"hex_id": 12, "team": "ally"}},
        ...
    ],
    "final_state": {"tiles": [...]}
}
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional
from datetime import datetime
import json
from pathlib import Path


class EventType(Enum):
    """Typ zdarzenia sesji."""

    SESSION_START = auto()

    # Postacie
    CHARACTER_PLACED = auto()
    CHARACTER_REMOVED = auto()
    CHARACTER_MOVED = auto()
    CHARACTERS_SWAPPED = auto()

    # Transakcje
    TRANSACTION_COMMIT = auto()
    TRANSACTION_ROLLBACK = auto()
    VALIDATION_FAILED = auto()

    # Umiejętności
    SKILL_ACTIVATED = auto()
    SKILL_DEACTIVATED = auto()
    SKILL_ERROR = auto()
    TARGET_UPDATED = auto()

    # Companiony
    COMPANION_SPAWNED = auto()
    COMPANION_REMOVED = auto()
    COMPANION_RELOCATED = auto()

    # Strefy blokujące
    ZONE_BLOCKED = auto()
    ZONE_RESTORED = auto()

    STATE_LOADED = auto()


@dataclass
class GameEvent:
    """
    Pojedyncze zdarzenie sesji.

    Attributes:
        tick (int): Numer operacji na siatce
        event_type (EventType): Typ zdarzenia
        character_id (Optional[str]): Postać, której dotyczy zdarzenie
        target_id (Optional[str]): Postać docelowa (jeśli dotyczy)
        data (Dict): Dane specyficzne dla typu zdarzenia
    """
    tick: int
    event_type: EventType
    character_id: Optional[str] = None
    target_id: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Serializuje zdarzenie do słownika."""
        result = {
            "tick": self.tick,
            "type": self.event_type.name,
        }

        if self.character_id:
            result["character_id"] = self.character_id
        if self.target_id:
            result["target_id"] = self.target_id
        if self.data:
            result["data"] = self.data

        return result


class EventLogger:
    """
    Logger zdarzeń sesji.

    Zbiera zdarzenia i zapisuje je do pliku JSON.

    Attributes:
        events (List[GameEvent]): Lista wszystkich zdarzeń
        metadata (Dict): Metadane sesji
        initial_state (Dict): Stan początkowy planszy
        final_state (Dict): Stan końcowy planszy
        tick (int): Numer bieżącej operacji

    Example:
        >>> logger = EventLogger(seed=12345, arena="arena_1")
        >>> logger.next_tick()
        1
        >>> logger.log_placed(character_id=58, hex_id=12, team="ally")
        >>> logger.save("output/setup_12345.json")
    """

    def __init__(
        self,
        seed: int = 0,
        arena: Optional[str] = None,
        layout: Optional[str] = None,
    ):
        self.events: List[GameEvent] = []
        self.metadata: Dict[str, Any] = {
            "version": "1.0",
            "seed": seed,
            "arena": arena,
            "layout": layout,
            "timestamp": datetime.now().isoformat(),
        }
        self.initial_state: Dict[str, Any] = {}
        self.final_state: Dict[str, Any] = {}
        self.tick = 0

    # ─────────────────────────────────────────────────────────────────────────
    # LOGOWANIE OGÓLNE
    # ─────────────────────────────────────────────────────────────────────────

    def next_tick(self) -> int:
        """Rozpoczyna nową operację i zwraca jej numer."""
        self.tick += 1
        return self.tick

    def log(self, event: GameEvent) -> None:
        self.events.append(event)

    def log_event(
        self,
        event_type: EventType,
        character_id: Optional[Any] = None,
        target_id: Optional[Any] = None,
        **data: Any,
    ) -> GameEvent:
        """
        Tworzy i loguje zdarzenie w bieżącej operacji.

        Args:
            event_type: Typ zdarzenia
            character_id: Id postaci (zamieniane na str)
            target_id: Id celu (zamieniane na str)
            **data: Dodatkowe dane

        Returns:
            GameEvent: Utworzone zdarzenie
        """
        event = GameEvent(
            tick=self.tick,
            event_type=event_type,
            character_id=str(character_id) if character_id is not None else None,
            target_id=str(target_id) if target_id is not None else None,
            data=dict(data),
        )
        self.log(event)
        return event

    # ─────────────────────────────────────────────────────────────────────────
    # POMOCNICZE METODY LOGOWANIA
    # ─────────────────────────────────────────────────────────────────────────

    def log_session_start(self, tiles: List[Dict]) -> None:
        """Loguje utworzenie siatki."""
        self.initial_state = {"tiles": tiles}
        self.log_event(
            EventType.SESSION_START,
            arena=self.metadata["arena"],
            layout=self.metadata["layout"],
            seed=self.metadata["seed"],
        )

    def log_placed(self, character_id: int, hex_id: int, team: str) -> None:
        self.log_event(EventType.CHARACTER_PLACED, character_id, hex_id=hex_id, team=team)

    def log_removed(self, character_id: int, hex_id: int, team: str) -> None:
        self.log_event(EventType.CHARACTER_REMOVED, character_id, hex_id=hex_id, team=team)

    def log_moved(
        self,
        character_id: int,
        from_hex: int,
        to_hex: int,
        from_team: str,
        to_team: str,
    ) -> None:
        self.log_event(
            EventType.CHARACTER_MOVED,
            character_id,
            **{"from": from_hex, "to": to_hex, "from_team": from_team, "to_team": to_team},
        )

    def log_swapped(self, character_a: int, character_b: int, hex_a: int, hex_b: int) -> None:
        self.log_event(
            EventType.CHARACTERS_SWAPPED, character_a, character_b, hex_a=hex_a, hex_b=hex_b
        )

    def log_commit(self, name: str, steps: List[str]) -> None:
        self.log_event(EventType.TRANSACTION_COMMIT, name=name, steps=steps)

    def log_rollback(
        self,
        name: str,
        failed_step: Optional[str],
        reason: Optional[str] = None,
    ) -> None:
        self.log_event(
            EventType.TRANSACTION_ROLLBACK, name=name, failed_step=failed_step, reason=reason
        )

    def log_validation_failed(self, operation: str, error: Dict[str, Any]) -> None:
        self.log_event(EventType.VALIDATION_FAILED, operation=operation, error=error)

    def log_skill_activated(self, character_id: int, hex_id: int, team: str) -> None:
        self.log_event(EventType.SKILL_ACTIVATED, character_id, hex_id=hex_id, team=team)

    def log_skill_deactivated(self, character_id: int, team: str) -> None:
        self.log_event(EventType.SKILL_DEACTIVATED, character_id, team=team)

    def log_skill_error(self, character_id: int, team: str, phase: str, error: str) -> None:
        self.log_event(EventType.SKILL_ERROR, character_id, team=team, phase=phase, error=error)

    def log_target_updated(self, character_id: int, team: str, targets: List[Dict]) -> None:
        self.log_event(EventType.TARGET_UPDATED, character_id, team=team, targets=targets)

    def log_companion(
        self,
        spawned: bool,
        companion_id: int,
        owner_id: int,
        hex_id: int,
        team: str,
    ) -> None:
        event_type = EventType.COMPANION_SPAWNED if spawned else EventType.COMPANION_REMOVED
        self.log_event(event_type, companion_id, owner_id, hex_id=hex_id, team=team)

    def log_companion_relocated(
        self,
        companion_id: int,
        owner_id: Optional[int],
        requested_hex_id: int,
        hex_id: int,
        team: str,
    ) -> None:
        """Companion nie zmieścił się na zapisanym polu i trafił na inne."""
        self.log_event(
            EventType.COMPANION_RELOCATED, companion_id, owner_id,
            requested_hex_id=requested_hex_id, hex_id=hex_id, team=team,
        )

    def log_zone(
        self,
        blocked: bool,
        character_id: int,
        team: str,
        hex_ids: List[int],
    ) -> None:
        event_type = EventType.ZONE_BLOCKED if blocked else EventType.ZONE_RESTORED
        self.log_event(event_type, character_id, team=team, hex_ids=hex_ids)

    def log_state_loaded(self, characters: int, final_tiles: List[Dict]) -> None:
        self.final_state = {"tiles": final_tiles}
        self.log_event(EventType.STATE_LOADED, characters=characters)

    # ─────────────────────────────────────────────────────────────────────────
    # SERIALIZACJA
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        """Serializuje cały log do słownika."""
        return {
            "metadata": self.metadata,
            "initial_state": self.initial_state,
            "events": [e.to_dict() for e in self.events],
            "final_state": self.final_state,
        }

    def save(self, filepath: str) -> None:
        """
        Zapisuje log do pliku JSON (tworzy brakujące katalogi).

        Args:
            filepath: Ścieżka do pliku
        """
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Zwraca log jako string JSON (indent=None = compact)."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    # ─────────────────────────────────────────────────────────────────────────
    # STATYSTYKI
    # ─────────────────────────────────────────────────────────────────────────

    def get_event_count(self) -> int:
        return len(self.events)

    def get_events_by_type(self, event_type: EventType) -> List[GameEvent]:
        """Filtruje zdarzenia po typie."""
        return [e for e in self.events if e.event_type == event_type]

    def get_events_for_character(self, character_id: Any) -> List[GameEvent]:
        """Filtruje zdarzenia dla postaci."""
        return [e for e in self.events if e.character_id == str(character_id)]

    def get_events_in_tick(self, tick: int) -> List[GameEvent]:
        """Zdarzenia jednej operacji."""
        return [e for e in self.events if e.tick == tick]
