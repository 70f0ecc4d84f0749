"""
Layout areny - tablice id <-> hex oraz rzędy diagonalne.

Layout opisuje arenę rzędami (r rośnie w dół ekranu). Każdy rząd ma
przesunięcie q pierwszego hexa oraz listę identyfikatorów od lewej:

    full_grid (45 hexów):
        r=-4  q_offset= 2   [43, 45]
        r=-3  q_offset= 0   [35, 38, 40, 42, 44]
        r=-2  q_offset=-1   [28, 31, 34, 37, 39, 41]
        ...
        r= 4  q_offset=-3   [1, 3]

    Hex i-ty w rzędzie:  q = q_offset + i,  r = first_row_r + indeks_rzędu

Rzędy diagonalne:
    Grupy hexów o stałej wartości (q - r), uporządkowane rosnąco po
    (q - r); wewnątrz grupy malejąco po r. Dla full_grid powstaje
    15 rzędów ze środkowym rzędem [22, 23, 24] leżącym na osi q = r.
    Na nich opiera się mapa symetrii i skan rzędów.

Tablice budowane są raz przy tworzeniu layoutu - lookup jest O(1).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .hex_coord import Hex
from .tile import TileState


@dataclass(frozen=True)
class LayoutRow:
    """Jeden poziomy rząd layoutu."""
    r: int
    q_offset: int
    hex_ids: Tuple[int, ...]


class HexLayout:
    """
    Statyczny layout areny z tablicami lookup.

    Attributes:
        name (str): Nazwa layoutu (klucz w arenas.yaml)
        rows (List[LayoutRow]): Rzędy poziome
        diagonal_rows (List[Tuple[int, ...]]): Rzędy diagonalne (id hexów)

    Example:
        >>> layout = HexLayout.from_dict("full_grid", data)
        >>> layout.hex_of(23)
        Hex(q=0, r=0, id=23)
        >>> layout.id_of(Hex(1, -1))
        30
    """

    def __init__(self, name: str, rows: List[LayoutRow]):
        self.name = name
        self.rows = list(rows)
        self._by_id: Dict[int, Hex] = {}
        self._by_coord: Dict[Tuple[int, int], Hex] = {}

        for row in self.rows:
            for index, hex_id in enumerate(row.hex_ids):
                if hex_id in self._by_id:
                    raise ValueError(f"Duplicate hex id {hex_id} in layout '{name}'")
                hex_ = Hex(row.q_offset + index, row.r, hex_id)
                self._by_id[hex_id] = hex_
                self._by_coord[hex_.axial] = hex_

        self.diagonal_rows: List[Tuple[int, ...]] = self._build_diagonal_rows()
        self._row_of: Dict[int, int] = {
            hex_id: index
            for index, row in enumerate(self.diagonal_rows)
            for hex_id in row
        }
        self.max_radius = self._compute_max_radius()

    # ─────────────────────────────────────────────────────────────────────────
    # LOOKUP
    # ─────────────────────────────────────────────────────────────────────────

    def hex_of(self, hex_id: int) -> Optional[Hex]:
        """Hex o podanym id albo None (id spoza areny)."""
        return self._by_id.get(hex_id)

    def id_of(self, hex_: Hex) -> Optional[int]:
        """Id hexa o współrzędnych `hex_` albo None (hex poza areną)."""
        found = self._by_coord.get(hex_.axial)
        return found.id if found is not None else None

    def ids(self) -> List[int]:
        """Wszystkie id, rosnąco."""
        return sorted(self._by_id)

    def hexes(self) -> List[Hex]:
        return [self._by_id[hex_id] for hex_id in self.ids()]

    def __contains__(self, hex_id: object) -> bool:
        return hex_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[Hex]:
        return iter(self.hexes())

    # ─────────────────────────────────────────────────────────────────────────
    # RZĘDY DIAGONALNE
    # ─────────────────────────────────────────────────────────────────────────

    def _build_diagonal_rows(self) -> List[Tuple[int, ...]]:
        groups: Dict[int, List[Hex]] = {}
        for hex_ in self._by_id.values():
            groups.setdefault(hex_.q - hex_.r, []).append(hex_)

        return [
            tuple(h.id for h in sorted(groups[key], key=lambda h: -h.r))
            for key in sorted(groups)
        ]

    def diagonal_row_index(self, hex_id: int) -> Optional[int]:
        """Indeks rzędu diagonalnego hexa (None dla id spoza areny)."""
        return self._row_of.get(hex_id)

    def diagonal_row_of(self, hex_id: int) -> Tuple[int, ...]:
        index = self._row_of.get(hex_id)
        return self.diagonal_rows[index] if index is not None else ()

    def same_diagonal_row(self, a: int, b: int) -> bool:
        row_a = self._row_of.get(a)
        return row_a is not None and row_a == self._row_of.get(b)

    @property
    def center_row_index(self) -> Optional[int]:
        """Indeks środkowego rzędu diagonalnego (None dla parzystej liczby)."""
        count = len(self.diagonal_rows)
        return count // 2 if count % 2 == 1 else None

    def _compute_max_radius(self) -> int:
        hexes = list(self._by_id.values())
        return max(
            (a.distance(b) for a in hexes for b in hexes),
            default=0,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # KONSTRUKCJA Z YAML
    # ─────────────────────────────────────────────────────────────────────────

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> HexLayout:
        """
        Tworzy layout z sekcji `layouts.<name>` pliku arenas.yaml.

        Format:
            first_row_r: -4
            rows:
              - {q_offset: 2, hex_ids: [43, 45]}
              - ...
        """
        first_r = int(data.get("first_row_r", 0))
        rows = [
            LayoutRow(
                r=first_r + index,
                q_offset=int(row["q_offset"]),
                hex_ids=tuple(int(h) for h in row["hex_ids"]),
            )
            for index, row in enumerate(data.get("rows", []))
        ]
        return cls(name, rows)

    def __repr__(self) -> str:
        return f"HexLayout(name={self.name!r}, hexes={len(self)})"


@dataclass(frozen=True)
class ArenaPreset:
    """
    Preset areny - początkowe stany pól na danym layoucie.

    Pola niewymienione na żadnej liście mają stan DEFAULT.
    """
    key: str
    name: str
    layout: str
    available_ally: Tuple[int, ...] = ()
    available_enemy: Tuple[int, ...] = ()
    blocked: Tuple[int, ...] = ()
    blocked_breakable: Tuple[int, ...] = ()
    _states: Dict[int, TileState] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self):
        groups = (
            (TileState.AVAILABLE_ALLY, self.available_ally),
            (TileState.AVAILABLE_ENEMY, self.available_enemy),
            (TileState.BLOCKED, self.blocked),
            (TileState.BLOCKED_BREAKABLE, self.blocked_breakable),
        )
        for state, hex_ids in groups:
            for hex_id in hex_ids:
                previous = self._states.get(hex_id)
                if previous is not None and previous is not state:
                    raise ValueError(
                        f"Arena '{self.key}': hex {hex_id} is both "
                        f"{previous.name} and {state.name}"
                    )
                self._states[hex_id] = state

    def initial_state(self, hex_id: int) -> TileState:
        return self._states.get(hex_id, TileState.DEFAULT)

    @classmethod
    def from_dict(cls, key: str, data: Dict[str, Any]) -> ArenaPreset:
        def ids(name: str) -> Tuple[int, ...]:
            # dict.fromkeys - usuwa duplikaty z zachowaniem kolejności
            return tuple(dict.fromkeys(int(h) for h in data.get(name) or []))

        return cls(
            key=key,
            name=data.get("name", key),
            layout=data.get("layout", "full_grid"),
            available_ally=ids("available_ally"),
            available_enemy=ids("available_enemy"),
            blocked=ids("blocked"),
            blocked_breakable=ids("blocked_breakable"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "layout": self.layout,
            "available_ally": list(self.available_ally),
            "available_enemy": list(self.available_enemy),
            "blocked": list(self.blocked),
            "blocked_breakable": list(self.blocked_breakable),
        }
