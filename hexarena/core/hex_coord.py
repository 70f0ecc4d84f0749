"""
Geometria hexagonalna (Cube Coordinates) dla areny.

Używamy współrzędnych (q, r) z wyliczaną trzecią osią:
    s = -q - r
    Cube: (q, r, s) gdzie q + r + s = 0

Każdy hex areny ma dodatkowo stabilny identyfikator `id` (1..N),
nadawany przez layout. Identyfikator NIE bierze udziału w porównaniach
ani w hashowaniu - dwa hexy są równe gdy mają te same współrzędne.

Kierunki sąsiadów (zgodnie z ruchem wskazówek zegara, od prawej-góry):
    Indeks  Kierunek          (dq, dr)
    ─────────────────────────────────────
    0       prawa-góra  (↗)   (+1, -1)
    1       prawo       (→)   (+1,  0)
    2       prawy-dół   (↘)   ( 0, +1)
    3       lewy-dół    (↙)   (-1, +1)
    4       lewo        (←)   (-1,  0)
    5       lewa-góra   (↖)   ( 0, -1)

Pierścienie (ring):
    Hexy w odległości dokładnie `radius` od centrum. Kolejność obchodu
    jest deterministyczna: zaczynamy w narożniku `start` i idziemy
    zgodnie (clockwise=True) lub przeciwnie do ruchu wskazówek zegara.

    Obchód "sojuszniczy":  narożnik 0 (prawa-góra), zgodnie z zegarem
    Obchód "wrogi":        narożnik 3 (lewy-dół), przeciwnie do zegara

    Targeting (targeting/spiral.py) zaczyna obchód od pola za narożnikiem.

    Obchód wrogi to lustrzane odbicie obchodu sojuszniczego względem
    osi q = r (zamiana q <-> r), czyli tej samej osi, którą wyznacza
    mapa symetrii areny.

Przykład użycia:
    >>> a = Hex(0, 0)
    >>> b = Hex(2, -1)
    >>> a.distance(b)
    2
    >>> [h.axial for h in a.ring(1)]
    [(1, -1), (1, 0), (0, 1), (-1, 1), (-1, 0), (0, -1)]
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterator, List, Tuple


# Kierunki sąsiadów w układzie axial
# Kolejność: prawa-góra, prawo, prawy-dół, lewy-dół, lewo, lewa-góra
HEX_DIRECTIONS: List[Tuple[int, int]] = [
    (+1, -1),  # 0 prawa-góra
    (+1, 0),   # 1 prawo
    (0, +1),   # 2 prawy-dół
    (-1, +1),  # 3 lewy-dół
    (-1, 0),   # 4 lewo
    (0, -1),   # 5 lewa-góra
]

TOP_RIGHT = 0
BOTTOM_LEFT = 3


@dataclass(frozen=True)
class Hex:
    """
    Niemutowalna współrzędna hexagonalna z identyfikatorem areny.

    Attributes:
        q (int): Współrzędna kolumny
        r (int): Współrzędna wiersza
        id (int): Identyfikator hexa na arenie (0 = hex spoza layoutu)

    Note:
        `id` jest pomijane w __eq__ i __hash__ - hex wyliczony z geometrii
        (np. sąsiad) jest równy hexowi z layoutu o tych samych (q, r).
    """
    q: int
    r: int
    id: int = field(default=0, compare=False)

    # ─────────────────────────────────────────────────────────────────────────
    # WŁAŚCIWOŚCI
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def s(self) -> int:
        """Trzecia współrzędna cube (q + r + s = 0)."""
        return -self.q - self.r

    @property
    def cube(self) -> Tuple[int, int, int]:
        return (self.q, self.r, self.s)

    @property
    def axial(self) -> Tuple[int, int]:
        return (self.q, self.r)

    def reflected(self) -> Hex:
        """
        Odbicie względem osi q = r (zamiana q <-> r).

        Oś przechodzi przez środkowy rząd diagonalny areny, więc to
        odbicie jest geometryczną postacią mapy symetrii.
        """
        return Hex(self.r, self.q)

    # ─────────────────────────────────────────────────────────────────────────
    # ODLEGŁOŚĆ
    # ─────────────────────────────────────────────────────────────────────────

    def distance(self, other: Hex) -> int:
        """
        Odległość w krokach między dwoma hexami.

        Wzór (cube distance):
            distance = max(|dq|, |dr|, |ds|)

        Args:
            other: Drugi hex

        Returns:
            int: Liczba kroków

        Example:
            >>> Hex(0, 0).distance(Hex(2, -1))
            2
        """
        return max(
            abs(self.q - other.q),
            abs(self.r - other.r),
            abs(self.s - other.s),
        )

    # ─────────────────────────────────────────────────────────────────────────
    # SĄSIEDZI
    # ─────────────────────────────────────────────────────────────────────────

    def neighbor(self, direction: int) -> Hex:
        """
        Zwraca sąsiada w podanym kierunku.

        Args:
            direction: Indeks kierunku 0-5 (patrz HEX_DIRECTIONS)

        Raises:
            IndexError: Jeśli direction nie jest w zakresie 0-5
        """
        dq, dr = HEX_DIRECTIONS[direction]
        return Hex(self.q + dq, self.r + dr)

    def neighbors(self) -> List[Hex]:
        """Zwraca 6 sąsiadów w kanonicznej kolejności kierunków."""
        return [self.neighbor(direction) for direction in range(6)]

    # ─────────────────────────────────────────────────────────────────────────
    # RING I SPIRAL
    # ─────────────────────────────────────────────────────────────────────────

    def ring(
        self,
        radius: int,
        start: int = TOP_RIGHT,
        clockwise: bool = True,
    ) -> List[Hex]:
        """
        Zwraca hexy pierścienia w ustalonej kolejności obchodu.

        Pierwszym hexem jest narożnik `self + DIR[start] * radius`.
        Następnie idziemy 6 bokami po `radius` kroków; kierunek i-tego
        boku to (start + 2 + i) % 6 dla obchodu zgodnego z zegarem
        lub (start - 2 - i) % 6 dla przeciwnego.

        Args:
            radius: Promień pierścienia (>= 0)
            start: Indeks narożnika startowego (0-5)
            clockwise: Kierunek obchodu

        Returns:
            List[Hex]: 6 * radius hexów (lub [self] dla radius=0)

        Raises:
            ValueError: Jeśli radius < 0
        """
        if radius < 0:
            raise ValueError(f"Ring radius must be >= 0, got {radius}")
        if radius == 0:
            return [self]

        dq, dr = HEX_DIRECTIONS[start]
        current = Hex(self.q + dq * radius, self.r + dr * radius)
        step = 1 if clockwise else -1

        results: List[Hex] = []
        for side in range(6):
            direction = (start + step * (2 + side)) % 6
            for _ in range(radius):
                results.append(current)
                current = current.neighbor(direction)

        return results

    def spiral(
        self,
        radius: int,
        start: int = TOP_RIGHT,
        clockwise: bool = True,
    ) -> Iterator[Hex]:
        """
        Generator hexów warstwami: centrum, ring(1), ring(2), ... ring(radius).
        """
        for r in range(radius + 1):
            yield from self.ring(r, start=start, clockwise=clockwise)

    # ─────────────────────────────────────────────────────────────────────────
    # OPERATORY ARYTMETYCZNE
    # ─────────────────────────────────────────────────────────────────────────

    def __add__(self, other: Hex) -> Hex:
        return Hex(self.q + other.q, self.r + other.r)

    def __sub__(self, other: Hex) -> Hex:
        return Hex(self.q - other.q, self.r - other.r)

    def __mul__(self, scalar: int) -> Hex:
        return Hex(self.q * scalar, self.r * scalar)

    # ─────────────────────────────────────────────────────────────────────────
    # REPREZENTACJA
    # ─────────────────────────────────────────────────────────────────────────

    def __repr__(self) -> str:
        return f"Hex(q={self.q}, r={self.r}, id={self.id})"

    def __str__(self) -> str:
        return f"#{self.id}({self.q}, {self.r})"

