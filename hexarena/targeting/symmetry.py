"""
Mapa symetrii areny.

Rzędy diagonalne mają indeksy 0..N-1 i jeden środkowy rząd C.
Lustrem rzędu r jest rząd 2C - r; pozycja p w rzędzie przechodzi na
pozycję p w rzędzie lustrzanym (bez odwracania). Środkowy rząd
mapuje się sam na siebie.

    full_grid:
        [1, 2]  <->  [44, 45]        1 <-> 44,  2 <-> 45
        [22, 23, 24]                 22, 23, 24 (stałe)
        [18, 19, 20, 21] <-> [25, 26, 27, 28]

Mapa jest budowana raz na layout i cache'owana.
"""

from __future__ import annotations
from functools import lru_cache
from typing import Dict, Optional, Tuple, TYPE_CHECKING

from ..core.layout import HexLayout

if TYPE_CHECKING:
    from ..core.hex_grid import HexGrid


class SymmetryMap:
    """
    Dwukierunkowa tablica hex_id -> hex_id lustrzany.

    Attributes:
        center_row (Tuple[int, ...]): Id hexów środkowego rzędu
    """

    def __init__(self, layout: HexLayout):
        center = layout.center_row_index
        if center is None:
            raise ValueError(
                f"Layout '{layout.name}' has an even number of diagonal rows; "
                "symmetry requires a unique center row"
            )
        rows = layout.diagonal_rows
        self.center_row: Tuple[int, ...] = rows[center]
        self._mirror: Dict[int, int] = {}

        for index, row in enumerate(rows):
            mirror_index = 2 * center - index
            if not 0 <= mirror_index < len(rows):
                continue
            mirror_row = rows[mirror_index]
            for position, hex_id in enumerate(row):
                if position < len(mirror_row):
                    self._mirror[hex_id] = mirror_row[position]

    def mirror(self, hex_id: int) -> Optional[int]:
        """Id pola lustrzanego (None gdy brak odpowiednika)."""
        return self._mirror.get(hex_id)

    def is_self_mapped(self, hex_id: int) -> bool:
        return self._mirror.get(hex_id) == hex_id

    def __contains__(self, hex_id: object) -> bool:
        return hex_id in self._mirror

    def __len__(self) -> int:
        return len(self._mirror)


@lru_cache(maxsize=None)
def get_symmetry_map(layout: HexLayout) -> SymmetryMap:
    """Mapa symetrii layoutu (budowana raz)."""
    return SymmetryMap(layout)


def symmetric_hex_id(grid: "HexGrid", hex_id: int) -> Optional[int]:
    """Pole lustrzane na siatce."""
    return get_symmetry_map(grid.layout).mirror(hex_id)
