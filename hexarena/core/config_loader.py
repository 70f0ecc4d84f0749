"""
Loader konfiguracji z automatycznym uzupełnianiem wartości domyślnych.

Silnik jest data-driven - layouty, areny i postacie są w plikach YAML:
- defaults.yaml: ustawienia siatki, symulatora i domyślne pola postaci
- arenas.yaml: layouty hexów (sekcja `layouts`) i presety aren (`arenas`)
- characters.yaml: postacie i definicje ich umiejętności

Logika merge (uzupełniania defaults):
    1. Wczytaj defaults.yaml
    2. Wczytaj definicję postaci (np. "nara")
    3. Klucze nieobecne w definicji biorą wartość z `character_defaults`
    4. Zagnieżdżone słowniki (np. `skill`) są łączone rekurencyjnie

Przykład:
    defaults.yaml:
        character_defaults:
            teams: [ally, enemy]
            skill: null

    characters.yaml:
        nara:
            character_id: 58
            skill: {type: symmetry_strike}
            # teams nie podane -> [ally, enemy] z defaults

Użycie:
    >>> loader = ConfigLoader("data/")
    >>> nara = loader.load_character("nara")
    >>> nara["teams"]
    ['ally', 'enemy']
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, List, Optional
import copy

import yaml

from .layout import ArenaPreset, HexLayout


class ConfigLoader:
    """
    Ładuje konfigurację z plików YAML z automatycznym merge defaults.

    Attributes:
        data_path (Path): Ścieżka do folderu data/
        _defaults (Dict): Cache defaults.yaml
        _arenas_file (Dict): Cache arenas.yaml
        _characters (Dict): Cache surowych definicji postaci
        _layouts (Dict): Cache zbudowanych layoutów
    """

    def __init__(self, data_path: str = "data/"):
        self.data_path = Path(data_path)
        self._defaults: Optional[Dict] = None
        self._arenas_file: Optional[Dict] = None
        self._characters: Optional[Dict] = None
        self._layouts: Dict[str, HexLayout] = {}

    # ─────────────────────────────────────────────────────────────────────────
    # WCZYTYWANIE PLIKÓW
    # ─────────────────────────────────────────────────────────────────────────

    def _load_yaml(self, filename: str) -> Dict:
        """
        Wczytuje plik YAML.

        Raises:
            FileNotFoundError: Jeśli plik nie istnieje
        """
        filepath = self.data_path / filename
        with open(filepath, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}

    def get_defaults(self) -> Dict:
        """Zawartość defaults.yaml (cache'owana)."""
        if self._defaults is None:
            self._defaults = self._load_yaml("defaults.yaml")
        return self._defaults

    def get_grid_config(self) -> Dict:
        """
        Ustawienia siatki.

        Returns:
            Dict: default_max_team_size, companion_id_offset,
                  default_layout, default_arena, strict
        """
        return self.get_defaults().get("grid", {})

    def get_simulation_config(self) -> Dict:
        """Ustawienia symulatora (seed, log_dir)."""
        return self.get_defaults().get("simulation", {})

    def get_character_defaults(self) -> Dict:
        return self.get_defaults().get("character_defaults", {})

    # ─────────────────────────────────────────────────────────────────────────
    # LAYOUTY I ARENY
    # ─────────────────────────────────────────────────────────────────────────

    def _get_arenas_file(self) -> Dict:
        if self._arenas_file is None:
            self._arenas_file = self._load_yaml("arenas.yaml")
        return self._arenas_file

    def load_layout(self, name: str) -> HexLayout:
        """
        Buduje (raz) layout o podanej nazwie.

        Raises:
            KeyError: Jeśli layout nie istnieje
        """
        if name not in self._layouts:
            layouts = self._get_arenas_file().get("layouts", {})
            if name not in layouts:
                raise KeyError(f"Layout '{name}' not found in arenas.yaml")
            self._layouts[name] = HexLayout.from_dict(name, layouts[name])
        return self._layouts[name]

    def load_arena(self, key: str) -> ArenaPreset:
        """
        Wczytuje preset areny.

        Raises:
            KeyError: Jeśli arena nie istnieje
        """
        arenas = self._get_arenas_file().get("arenas", {})
        if key not in arenas:
            raise KeyError(f"Arena '{key}' not found in arenas.yaml")
        return ArenaPreset.from_dict(key, arenas[key])

    def get_arena_keys(self) -> List[str]:
        return list(self._get_arenas_file().get("arenas", {}).keys())

    def load_all_arenas(self) -> Dict[str, ArenaPreset]:
        return {key: self.load_arena(key) for key in self.get_arena_keys()}

    # ─────────────────────────────────────────────────────────────────────────
    # POSTACIE
    # ─────────────────────────────────────────────────────────────────────────

    def _get_all_characters_raw(self) -> Dict:
        """Zwraca wszystkie surowe definicje postaci."""
        if self._characters is None:
            data = self._load_yaml("characters.yaml")
            self._characters = data.get("characters", {})
        return self._characters

    def load_character(self, key: str) -> Dict:
        """
        Wczytuje definicję postaci z uzupełnionymi defaults.

        Args:
            key: Klucz postaci w characters.yaml

        Returns:
            Dict: Pełna definicja (z kluczem "key")

        Raises:
            KeyError: Jeśli postać nie istnieje
        """
        characters = self._get_all_characters_raw()

        if key not in characters:
            raise KeyError(f"Character '{key}' not found in characters.yaml")

        result = self._deep_merge(self.get_character_defaults(), characters[key] or {})
        result["key"] = key
        return result

    def load_all_characters(self) -> Dict[str, Dict]:
        characters = self._get_all_characters_raw()
        return {key: self.load_character(key) for key in characters.keys()}

    def get_character_keys(self) -> List[str]:
        return list(self._get_all_characters_raw().keys())

    def find_character(self, character_id: int) -> Dict:
        """
        Szuka postaci po numerycznym character_id.

        Raises:
            KeyError: Jeśli żadna postać nie ma takiego id
        """
        for key, data in self._get_all_characters_raw().items():
            if data and data.get("character_id") == character_id:
                return self.load_character(key)
        raise KeyError(f"Character id {character_id} not found in characters.yaml")

    # ─────────────────────────────────────────────────────────────────────────
    # HELPERY
    # ─────────────────────────────────────────────────────────────────────────

    @staticmethod
    def _deep_merge(base: Dict, override: Dict) -> Dict:
        """
        Głęboko łączy dwa słowniki.

        Override nadpisuje wartości w base.
        Nested dicts są merge'owane rekurencyjnie.
        """
        result = copy.deepcopy(base)

        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = ConfigLoader._deep_merge(result[key], value)
            else:
                result[key] = copy.deepcopy(value)

        return result

    def reload(self) -> None:
        """Czyści cache i wymusza ponowne wczytanie plików."""
        self._defaults = None
        self._arenas_file = None
        self._characters = None
        self._layouts = {}
