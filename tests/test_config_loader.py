"""
Testy ConfigLoader - wczytywanie YAML i merge defaults.
"""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from hexarena.core.config_loader import ConfigLoader
from hexarena.core.tile import TileState


def test_grid_config(loader):
    config = loader.get_grid_config()
    assert config["default_max_team_size"] == 5
    assert config["companion_id_offset"] == 10000
    assert config["default_arena"] == "arena_1"
    assert loader.get_simulation_config()["seed"] == 12345


def test_character_defaults_are_merged(loader):
    nara = loader.load_character("nara")
    assert nara["key"] == "nara"
    assert nara["character_id"] == 58
    assert nara["teams"] == ["ally", "enemy"]
    assert nara["skill"]["type"] == "symmetry_strike"


def test_character_overrides_defaults(loader):
    assert loader.load_character("oswin")["teams"] == ["ally"]
    assert loader.load_character("korin")["skill"] is None


def test_unknown_character(loader):
    with pytest.raises(KeyError):
        loader.load_character("nobody")


def test_find_character_by_id(loader):
    assert loader.find_character(91)["key"] == "aliceth"
    with pytest.raises(KeyError):
        loader.find_character(999)


def test_all_characters(loader):
    characters = loader.load_all_characters()
    assert len(characters) == 20
    assert set(loader.get_character_keys()) == set(characters)
    ids = [data["character_id"] for data in characters.values()]
    assert len(ids) == len(set(ids))


def test_arenas(loader):
    assert loader.get_arena_keys() == ["arena_1", "arena_2", "arena_3", "arena_4"]
    arena = loader.load_arena("arena_2")
    assert arena.layout == "full_grid"
    assert arena.initial_state(9) is TileState.BLOCKED
    assert len(loader.load_all_arenas()) == 4


@pytest.mark.parametrize("method, key", [
    ("load_arena", "arena_99"),
    ("load_layout", "tiny_grid"),
])
def test_unknown_arena_or_layout(loader, method, key):
    with pytest.raises(KeyError):
        getattr(loader, method)(key)


def test_layout_is_cached_until_reload(loader):
    layout = loader.load_layout("full_grid")
    assert loader.load_layout("full_grid") is layout

    loader.reload()
    assert loader.load_layout("full_grid") is not layout


def test_deep_merge_nested():
    base = {"skill": {"type": "x", "name": "A"}, "teams": ["ally"]}
    override = {"skill": {"name": "B"}, "teams": ["enemy"]}

    result = ConfigLoader._deep_merge(base, override)
    assert result == {"skill": {"type": "x", "name": "B"}, "teams": ["enemy"]}
    assert base["skill"]["name"] == "A"


def test_missing_data_directory(tmp_path):
    loader = ConfigLoader(str(tmp_path))
    with pytest.raises(FileNotFoundError):
        loader.get_defaults()


def test_empty_files_give_empty_sections(tmp_path):
    for name in ("defaults.yaml", "arenas.yaml", "characters.yaml"):
        (tmp_path / name).write_text("", encoding="utf-8")

    loader = ConfigLoader(str(tmp_path))
    assert loader.get_grid_config() == {}
    assert loader.get_arena_keys() == []
    assert loader.load_all_characters() == {}
