"""
HexArena - silnik reguł ustawiania postaci na heksagonalnej arenie.

Zawiera:
- core: geometria, pola, siatka z transakcjami, konfiguracja
- characters: companiony powiązane z właścicielami
- skills: umiejętności postaci i ich runtime
- targeting: czyste funkcje wyboru celów
- transactions: budowniczowie transakcji siatki
- events: log zdarzeń JSON
- simulation: fasada SetupSimulator
"""

from .core.hex_grid import HexGrid
from .core.tile import Team, TileState, Tile
from .core.errors import GridError, ValidationError, TransactionFailure, NoAvailableTileError
from .simulation.setup import SetupSimulator, SetupConfig

__version__ = "0.1.0"

__all__ = [
    "HexGrid", "Team", "TileState", "Tile",
    "GridError", "ValidationError", "TransactionFailure", "NoAvailableTileError",
    "SetupSimulator", "SetupConfig",
]
