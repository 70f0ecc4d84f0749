"""
Pole siatki (Tile) - hex z dołożonym stanem gry.

Stany pól:
═══════════════════════════════════════════════════════════════════

    DEFAULT             - zwykłe pole, nikt nie może na nim stanąć
    AVAILABLE_ALLY      - wolne pole strefy sojuszniczej
    AVAILABLE_ENEMY     - wolne pole strefy wroga
    OCCUPIED_ALLY       - pole zajęte przez postać sojuszniczą
    OCCUPIED_ENEMY      - pole zajęte przez postać wroga
    BLOCKED             - przeszkoda
    BLOCKED_BREAKABLE   - przeszkoda do zniszczenia

Niezmiennik pola:
    character_id != None  <=>  team != None  <=>  state jest OCCUPIED_*
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .hex_coord import Hex


class Team(Enum):
    """Drużyna postaci."""
    ALLY = "ally"
    ENEMY = "enemy"

    def opposing(self) -> Team:
        """Zwraca drużynę przeciwną."""
        return Team.ENEMY if self is Team.ALLY else Team.ALLY

    @classmethod
    def parse(cls, value: Any) -> Team:
        """
        Parsuje drużynę z YAML / JSON ("ally", "ENEMY", Team.ALLY).

        Raises:
            ValueError: Jeśli wartość nie jest drużyną
        """
        if isinstance(value, Team):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown team: {value!r}") from None


class TileState(Enum):
    """Stan pola siatki."""
    DEFAULT = 0
    AVAILABLE_ALLY = 1
    AVAILABLE_ENEMY = 2
    OCCUPIED_ALLY = 3
    OCCUPIED_ENEMY = 4
    BLOCKED = 5
    BLOCKED_BREAKABLE = 6

    @staticmethod
    def available_for(team: Team) -> TileState:
        return TileState.AVAILABLE_ALLY if team is Team.ALLY else TileState.AVAILABLE_ENEMY

    @staticmethod
    def occupied_for(team: Team) -> TileState:
        return TileState.OCCUPIED_ALLY if team is Team.ALLY else TileState.OCCUPIED_ENEMY

    @property
    def team(self) -> Optional[Team]:
        """Drużyna, do której należy strefa (None dla pól neutralnych)."""
        if self in (TileState.AVAILABLE_ALLY, TileState.OCCUPIED_ALLY):
            return Team.ALLY
        if self in (TileState.AVAILABLE_ENEMY, TileState.OCCUPIED_ENEMY):
            return Team.ENEMY
        return None

    @property
    def is_occupied(self) -> bool:
        return self in (TileState.OCCUPIED_ALLY, TileState.OCCUPIED_ENEMY)

    @property
    def base(self) -> TileState:
        """Stan pola po zdjęciu postaci (OCCUPIED_x -> AVAILABLE_x)."""
        if self.is_occupied:
            return TileState.available_for(self.team)
        return self

    @classmethod
    def parse(cls, value: Any) -> TileState:
        """Parsuje stan z nazwy ("available_ally") lub wartości liczbowej."""
        if isinstance(value, TileState):
            return value
        if isinstance(value, int):
            return cls(value)
        try:
            return cls[str(value).upper()]
        except KeyError:
            raise ValueError(f"Unknown tile state: {value!r}") from None


@dataclass
class Tile:
    """
    Pole siatki.

    Attributes:
        hex (Hex): Geometria pola (z id)
        state (TileState): Aktualny stan
        character_id (Optional[int]): Postać stojąca na polu
        team (Optional[Team]): Drużyna postaci
    """
    hex: Hex
    state: TileState = TileState.DEFAULT
    character_id: Optional[int] = None
    team: Optional[Team] = None

    @property
    def id(self) -> int:
        return self.hex.id

    @property
    def is_occupied(self) -> bool:
        return self.character_id is not None

    def is_consistent(self) -> bool:
        """Sprawdza niezmiennik character_id <=> team <=> OCCUPIED_*."""
        has_character = self.character_id is not None
        has_team = self.team is not None
        if has_character != has_team or has_character != self.state.is_occupied:
            return False
        return not has_team or self.state.team is self.team

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hex_id": self.id,
            "q": self.hex.q,
            "r": self.hex.r,
            "state": self.state.name,
            "character_id": self.character_id,
            "team": self.team.value if self.team else None,
        }
