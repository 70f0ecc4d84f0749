"""
Core module - podstawowe komponenty silnika.

Zawiera:
- Hex: Współrzędne sześcienne i kierunki
- HexLayout, ArenaPreset: Układ pól i preset areny
- Tile, TileState, Team: Stan pojedynczego pola
- Transaction: Kroki forward/rollback
- GameRNG: Deterministyczny generator losowości
- ConfigLoader: Wczytywanie konfiguracji z defaults

HexGrid importuj z hexarena.core.hex_grid (albo z pakietu hexarena).
"""

from .hex_coord import Hex
from .layout import HexLayout, ArenaPreset
from .tile import Tile, TileState, Team
from .errors import GridError, ValidationError, TransactionFailure, NoAvailableTileError
from .transaction import Transaction
from .rng import GameRNG
from .config_loader import ConfigLoader

__all__ = [
    "Hex", "HexLayout", "ArenaPreset", "Tile", "TileState", "Team",
    "GridError", "ValidationError", "TransactionFailure", "NoAvailableTileError",
    "Transaction", "GameRNG", "ConfigLoader",
]
