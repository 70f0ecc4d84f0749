"""
Deterministyczny generator liczb losowych (RNG) dla sesji ustawiania.

Silnik losuje tylko w dwóch miejscach:
- auto-place postaci na wolne pole drużyny
- wybór pola dla companiona przy aktywacji umiejętności

Każda siatka ma WŁASNĄ instancję GameRNG z seedem - ta sama sekwencja
operacji z tym samym seedem daje zawsze ten sam układ planszy. Funkcje
targetingu nie losują nigdy.

Przykład użycia:
    >>> a, b = GameRNG(seed=12345), GameRNG(seed=12345)
    >>> a.pick_hex_id([4, 9, 2]) == b.pick_hex_id([2, 9, 4])
    True

Ważne:
    NIGDY nie używaj random.random() bezpośrednio w silniku!
    Zawsze używaj instancji GameRNG przekazanej do siatki.
"""

from __future__ import annotations
import random
from typing import Iterable, Optional, Sequence, TypeVar

T = TypeVar('T')


class GameRNG:
    """
    Deterministyczny generator losowości dla siatki.

    Attributes:
        seed (int): Ziarno użyte do inicjalizacji
        _rng (random.Random): Wewnętrzny generator
    """

    def __init__(self, seed: int):
        self.seed = seed
        self._rng = random.Random(seed)

    def choice(self, seq: Sequence[T]) -> T:
        """
        Wybiera losowy element z sekwencji.

        Raises:
            IndexError: Jeśli sekwencja jest pusta
        """
        return self._rng.choice(seq)

    def pick_hex_id(self, hex_ids: Iterable[int]) -> Optional[int]:
        """
        Wybiera losowe pole spośród kandydatów.

        Kandydaci są najpierw sortowani malejąco po id, więc wynik
        zależy tylko od seeda i zbioru pól (nie od kolejności wejścia).

        Args:
            hex_ids: Id wolnych pól

        Returns:
            Optional[int]: Wybrane id albo None gdy brak kandydatów
        """
        candidates = sorted(set(hex_ids), reverse=True)
        if not candidates:
            return None
        return self.choice(candidates)

    def __repr__(self) -> str:
        return f"GameRNG(seed={self.seed})"
