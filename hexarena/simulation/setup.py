"""
Symulator ustawienia drużyn (fasada silnika).

SetupSimulator składa wszystkie elementy dla jednej areny:

    ConfigLoader ─┬─> HexLayout + ArenaPreset
                  ├─> characters.yaml -> SkillRegistry
                  └─> defaults.yaml   -> limity, offset companionów, seed
                            │
                            ▼
            HexGrid(layout, arena, registry, rng, logger)

i wystawia operacje na postaciach po kluczu z YAML ("nara") albo po
numerze postaci, pilnując listy drużyn, w których postać może stanąć.

Przykład użycia:
    >>> sim = SetupSimulator(arena="arena_1", seed=12345)
    >>> sim.place_character("nara", 12, Team.ALLY)
    True
    >>> sim.place_character("bonnie", 40, Team.ENEMY)
    True
    >>> sim.targets()[0]["target_hex_id"]
    40
    >>> sim.save_log("output/setup_12345.json")
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..core.config_loader import ConfigLoader
from ..core.errors import ValidationError
from ..core.hex_grid import HexGrid
from ..core.pathfinding import DEFAULT_RANGE, closest_target_map, find_path
from ..core.rng import GameRNG
from ..core.tile import Team
from ..events.event_logger import EventLogger
from ..skills.library import CompanionSkill
from ..skills.registry import build_skill_registry


@dataclass
class SetupConfig:
    """
    Konfiguracja symulatora (z defaults.yaml).

    Attributes:
        arena (str): Klucz areny
        seed (int): Ziarno GameRNG
        max_team_size (int): Bazowy limit drużyny
        companion_id_offset (int): Offset przestrzeni id companionów
        strict (bool): Operacje rzucają wyjątki zamiast zwracać False
        log_dir (str): Katalog logów
    """
    arena: str = "arena_1"
    seed: int = 0
    max_team_size: int = 5
    companion_id_offset: int = 10000
    strict: bool = False
    log_dir: str = "output"

    @classmethod
    def from_loader(cls, loader: ConfigLoader, **overrides: Any) -> "SetupConfig":
        grid_config = loader.get_grid_config()
        sim_config = loader.get_simulation_config()
        values = {
            "arena": grid_config.get("default_arena", cls.arena),
            "seed": sim_config.get("seed", cls.seed),
            "max_team_size": grid_config.get("default_max_team_size", cls.max_team_size),
            "companion_id_offset": grid_config.get("companion_id_offset", cls.companion_id_offset),
            "strict": grid_config.get("strict", cls.strict),
            "log_dir": sim_config.get("log_dir", cls.log_dir),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


class SetupSimulator:
    """
    Fasada: jedna arena, jedna siatka, jeden log.

    Attributes:
        loader (ConfigLoader): Źródło konfiguracji
        config (SetupConfig): Ustawienia
        grid (HexGrid): Siatka areny
        logger (EventLogger): Log zdarzeń
    """

    def __init__(
        self,
        arena: Optional[str] = None,
        seed: Optional[int] = None,
        loader: Optional[ConfigLoader] = None,
        strict: Optional[bool] = None,
        data_path: str = "data/",
    ):
        """
        Inicjalizuje symulator.

        Args:
            arena: Klucz areny (domyślnie grid.default_arena)
            seed: Ziarno (domyślnie simulation.seed)
            loader: Gotowy ConfigLoader (inaczej tworzony z data_path)
            strict: Nadpisuje grid.strict

        Raises:
            KeyError: Nieznana arena lub layout
            ValueError: Błędna definicja umiejętności
        """
        self.loader = loader or ConfigLoader(data_path)
        self.config = SetupConfig.from_loader(self.loader, arena=arena, seed=seed, strict=strict)

        self.arena = self.loader.load_arena(self.config.arena)
        self.layout = self.loader.load_layout(self.arena.layout)

        self._characters = self.loader.load_all_characters()
        self._by_id: Dict[int, Dict[str, Any]] = {
            int(data["character_id"]): data for data in self._characters.values()
        }
        self.registry = build_skill_registry(self._characters)

        self.rng = GameRNG(self.config.seed)
        self.logger = EventLogger(
            seed=self.config.seed, arena=self.arena.key, layout=self.layout.name
        )
        self.grid = HexGrid(
            self.layout,
            self.arena,
            self.registry,
            max_team_size=self.config.max_team_size,
            companion_offset=self.config.companion_id_offset,
            rng=self.rng,
            logger=self.logger,
            strict=self.config.strict,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # POSTACIE
    # ─────────────────────────────────────────────────────────────────────────

    def resolve_character(self, character: Any) -> int:
        """
        Zamienia klucz YAML albo numer na character_id.

        Raises:
            KeyError: Nieznana postać
        """
        if isinstance(character, str) and not character.isdigit():
            if character not in self._characters:
                raise KeyError(f"Character '{character}' not found in characters.yaml")
            return int(self._characters[character]["character_id"])
        return int(character)

    def character_info(self, character_id: int) -> Optional[Dict[str, Any]]:
        return self._by_id.get(character_id)

    def character_name(self, character_id: int) -> str:
        owner = self.grid.companions.owner_of(character_id, Team.ALLY)
        if owner is None:
            owner = self.grid.companions.owner_of(character_id, Team.ENEMY)
        if owner is not None:
            return f"{self.character_name(owner)} (companion)"
        data = self._by_id.get(character_id)
        return data.get("name", data["key"]) if data else str(character_id)

    def _check_team(self, operation: str, character_id: int, team: Team) -> bool:
        """Czy postać może stanąć w drużynie (teams z characters.yaml)."""
        data = self._by_id.get(character_id)
        if data is None:
            return True
        allowed = [Team.parse(t) for t in data.get("teams") or [t.value for t in Team]]
        if team in allowed:
            return True
        error = ValidationError(
            f"Character {character_id} cannot join team {team.value}",
            character_id=character_id,
            team=team,
        )
        self.logger.log_validation_failed(operation, error.to_dict())
        if self.grid.strict:
            raise error
        return False

    # ─────────────────────────────────────────────────────────────────────────
    # OPERACJE
    # ─────────────────────────────────────────────────────────────────────────

    def place_character(self, character: Any, hex_id: int, team: Any) -> bool:
        team = Team.parse(team)
        character_id = self.resolve_character(character)
        if not self._check_team("place", character_id, team):
            return False
        return self.grid.place(hex_id, character_id, team)

    def auto_place_character(self, character: Any, team: Any) -> Optional[int]:
        """
        Stawia postać na losowym polu.

        Returns:
            Optional[int]: Pole postaci lub None przy niepowodzeniu
        """
        team = Team.parse(team)
        character_id = self.resolve_character(character)
        if not self._check_team("auto_place", character_id, team):
            return None
        if not self.grid.auto_place(character_id, team):
            return None
        return self.grid.find_character_hex(character_id, team)

    def remove(self, hex_id: int) -> bool:
        return self.grid.remove(hex_id)

    def move(self, from_hex_id: int, to_hex_id: int) -> bool:
        """Przenosi postać stojącą na from_hex_id."""
        character_id = self.grid.character_at(from_hex_id)
        tile = self.grid.get_tile(to_hex_id)
        if character_id is not None and tile is not None and tile.state.team is not None:
            if not self._check_team("move", character_id, tile.state.team):
                return False
        return self.grid.move(from_hex_id, to_hex_id, character_id)

    def swap(self, hex_id_a: int, hex_id_b: int) -> bool:
        team_a = self.grid.team_at(hex_id_a)
        team_b = self.grid.team_at(hex_id_b)
        if team_a is not None and team_b is not None and team_a is not team_b:
            if not self._check_team("swap", self.grid.character_at(hex_id_a), team_b):
                return False
            if not self._check_team("swap", self.grid.character_at(hex_id_b), team_a):
                return False
        return self.grid.swap(hex_id_a, hex_id_b)

    def clear(self) -> bool:
        return self.grid.clear_all()

    # ─────────────────────────────────────────────────────────────────────────
    # WYNIKI
    # ─────────────────────────────────────────────────────────────────────────

    def targets(self) -> List[Dict[str, Any]]:
        """Cele wszystkich aktywnych umiejętności (dla renderowania)."""
        manager = self.grid.skill_manager
        result = []
        for key, info in sorted(
            manager.all_targets().items(),
            key=lambda item: (item[0].team.value, item[0].character_id, item[0].index),
        ):
            entry = info.to_dict()
            entry.update({
                "character_id": key.character_id,
                "team": key.team.value,
                "index": key.index,
            })
            result.append(entry)
        return result

    def character_range(self, character_id: int, team: Team) -> int:
        """
        Zasięg ataku postaci (pole `range`, domyślnie 1).

        Companion bierze companion_range z umiejętności właściciela,
        a gdy go brak - zasięg właściciela.
        """
        owner_id = self.grid.companions.owner_of(character_id, team)
        if owner_id is not None:
            skill = self.registry.get(owner_id)
            if isinstance(skill, CompanionSkill) and skill.companion_range is not None:
                return skill.companion_range
            character_id = owner_id
        data = self._by_id.get(character_id) or {}
        return int(data.get("range", DEFAULT_RANGE))

    def closest_targets(self) -> Dict[str, List[Dict[str, Any]]]:
        """
        Najbliższy przeciwnik każdej postaci razem ze ścieżką A*.

        Returns:
            Dict: {"ally": [...], "enemy": [...]} - klucz to drużyna
                szukającego; wpisy posortowane po polu źródłowym
        """
        result: Dict[str, List[Dict[str, Any]]] = {}
        for team in Team:
            ranges = {
                cid: self.character_range(cid, team) for cid in self.grid.team_characters(team)
            }
            closest = closest_target_map(self.grid, team, team.opposing(), ranges)
            entries = []
            for source_hex_id in sorted(closest):
                target = closest[source_hex_id]
                entry = target.to_dict()
                entry["character_id"] = self.grid.character_at(source_hex_id)
                entry["path"] = find_path(self.grid, source_hex_id, target.target_hex_id)
                entries.append(entry)
            result[team.value] = entries
        return result

    def get_result(self) -> Dict[str, Any]:
        """
        Podsumowanie stanu.

        Returns:
            Dict z:
                - arena, seed
                - teams: {team: [character_id, ...]}
                - targets: List[Dict]
                - closest_targets: {team: [Dict, ...]}
                - target_version: int
                - events: int
        """
        return {
            "arena": self.arena.key,
            "seed": self.config.seed,
            "teams": {team.value: self.grid.team_characters(team) for team in Team},
            "active_skills": [e.to_dict() for e in self.grid.skill_manager.active_entries()],
            "targets": self.targets(),
            "closest_targets": self.closest_targets(),
            "target_version": self.grid.skill_manager.version,
            "events": self.logger.get_event_count(),
        }

    def save_log(self, filepath: str) -> None:
        """Zapisuje log do pliku JSON."""
        self.logger.final_state = {"tiles": self.grid.snapshot(), "result": self.get_result()}
        self.logger.save(filepath)

    def get_log(self) -> Dict[str, Any]:
        """Zwraca log jako słownik."""
        return self.logger.to_dict()
