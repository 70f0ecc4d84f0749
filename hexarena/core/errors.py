"""
Wyjątki silnika siatki.

Hierarchia:
═══════════════════════════════════════════════════════════════════

    GridError
    ├── ValidationError       - żądanie odrzucone przed jakąkolwiek zmianą
    ├── TransactionFailure    - krok transakcji zawiódł, wszystko cofnięte
    └── NoAvailableTileError  - brak wolnego pola dla companiona

Brak celu umiejętności NIE jest błędem - funkcje targetingu zwracają None.
"""

from __future__ import annotations
from typing import Any, Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .tile import Team


class GridError(Exception):
    """
    Bazowy wyjątek operacji na siatce.

    Attributes:
        hex_id: Pole, którego dotyczy błąd
        character_id: Postać, której dotyczy błąd
        team: Drużyna postaci
    """

    def __init__(
        self,
        message: str,
        hex_id: Optional[int] = None,
        character_id: Optional[int] = None,
        team: Optional["Team"] = None,
    ):
        super().__init__(message)
        self.message = message
        self.hex_id = hex_id
        self.character_id = character_id
        self.team = team

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "error": type(self).__name__,
            "message": self.message,
        }
        if self.hex_id is not None:
            result["hex_id"] = self.hex_id
        if self.character_id is not None:
            result["character_id"] = self.character_id
        if self.team is not None:
            result["team"] = self.team.value
        return result


class ValidationError(GridError):
    """Nieprawidłowe żądanie (zły hex, zajęte pole, duplikat postaci...)."""


class TransactionFailure(GridError):
    """
    Krok transakcji zawiódł i transakcja została wycofana.

    Attributes:
        step: Nazwa kroku, który zawiódł
    """

    def __init__(self, message: str, step: Optional[str] = None, **context: Any):
        super().__init__(message, **context)
        self.step = step


class NoAvailableTileError(GridError):
    """Brak wolnego pola do (ponownego) postawienia companiona."""
