"""
Pathfinding na arenie: A*, dystans ruchu z zasięgiem i najbliższe cele.

A* znajduje najkrótszą ścieżkę między dwoma polami areny, omijając
pola zablokowane. Zajęte pola są przechodnie - podczas ustawiania
liczy się geometria areny, nie kolizje postaci.

Jak działa A*:
    1. Utrzymuj open set (do sprawdzenia) i closed set (sprawdzone)
    2. Dla każdego węzła:
       - g_cost: koszt od startu
       - h_cost: heurystyka (Hex.distance do celu)
       - f_cost: g_cost + h_cost
    3. Zawsze rozwijaj węzeł z najniższym f_cost
    4. Po dojściu do celu odtwórz ścieżkę po rodzicach

Koszt ruchu:
    Każdy krok na sąsiednie pole kosztuje 1. Sąsiedzi są rozwijani w
    kanonicznej kolejności kierunków 0-5.

Dystans ruchu z zasięgiem (ranged_movement_distance):
    Ile kroków postać o zasięgu `attack_range` musi zrobić, żeby mieć
    w zasięgu którykolwiek cel. BFS po poziomach - na pierwszym poziomie,
    z którego jakiś cel jest w zasięgu, zbieramy WSZYSTKIE takie cele
    i rozstrzygamy remis regułami:

    1. Cel w tej samej kolumnie (to samo q) wygrywa z celem spoza kolumny
    2. Cele w tym samym rzędzie diagonalnym: ENEMY woli niższe id,
       ALLY wyższe
    3. Żaden w kolumnie: mniejsza odległość w linii prostej, przy
       równej - preferencja id jak w regule 2

Przykład użycia:
    >>> find_path(grid, 1, 2)
    [1, 2]
    >>> grid.place(12, 58, Team.ALLY); grid.place(40, 7, Team.ENEMY)
    >>> target = closest_target_map(grid, Team.ALLY, Team.ENEMY)[12]
    >>> target.target_hex_id, target.distance
    (40, 4)

Edge cases:
    - start == goal: zwraca [start]
    - Brak ścieżki lub pole spoza areny: zwraca []
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Set, Tuple, TYPE_CHECKING
import heapq
import itertools

from .hex_coord import Hex
from .tile import Team, Tile, TileState

if TYPE_CHECKING:
    from .hex_grid import HexGrid


MAX_NODES = 1000
MAX_MOVEMENT_DISTANCE = 20
DEFAULT_RANGE = 1

Traversable = Callable[[Tile], bool]


def can_traverse(tile: Tile) -> bool:
    """Domyślna przechodniość: wszystko poza polami zablokowanymi."""
    return tile.state not in (TileState.BLOCKED, TileState.BLOCKED_BREAKABLE)


# ═══════════════════════════════════════════════════════════════════════════
# A*
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(order=True)
class _PathNode:
    """
    Węzeł w algorytmie A*.

    Sortowanie po (f_cost, order) - przy równym f_cost wcześniej dodany
    węzeł wychodzi pierwszy, więc wynik nie zależy od wnętrza heapq.
    """
    f_cost: int
    order: int
    g_cost: int = field(compare=False)
    position: Hex = field(compare=False)


def _traversable_hex_id(
    grid: "HexGrid",
    hex_: Hex,
    traversable: Traversable,
) -> Optional[int]:
    hex_id = grid.layout.id_of(hex_)
    if hex_id is None:
        return None
    tile = grid.get_tile(hex_id)
    if tile is None or not traversable(tile):
        return None
    return hex_id


def find_path(
    grid: "HexGrid",
    start_hex_id: int,
    goal_hex_id: int,
    traversable: Optional[Traversable] = None,
    max_nodes: int = MAX_NODES,
) -> List[int]:
    """
    Najkrótsza ścieżka między dwoma polami (id pól, start i cel włącznie).

    Args:
        grid: Siatka
        start_hex_id: Pole startowe (jego stan nie jest sprawdzany)
        goal_hex_id: Pole docelowe (musi być przechodnie)
        traversable: Predykat przechodniości pola (domyślnie can_traverse)
        max_nodes: Limit odwiedzonych węzłów

    Returns:
        List[int]: Ścieżka albo [] gdy nie istnieje
    """
    traversable = traversable or can_traverse
    start = grid.hex_of(start_hex_id)
    goal = grid.hex_of(goal_hex_id)
    if start is None or goal is None:
        return []
    if start == goal:
        return [start_hex_id]

    counter = itertools.count()
    open_set: List[_PathNode] = []
    g_costs: Dict[Hex, int] = {start: 0}
    parents: Dict[Hex, Hex] = {}
    closed_set: Set[Hex] = set()
    heapq.heappush(open_set, _PathNode(start.distance(goal), next(counter), 0, start))

    while open_set:
        current = heapq.heappop(open_set)
        if current.position in closed_set:
            continue
        if len(g_costs) > max_nodes:
            return []

        if current.position == goal:
            return _reconstruct_path(grid, parents, start, goal)
        closed_set.add(current.position)

        for neighbor in current.position.neighbors():
            if neighbor in closed_set:
                continue
            if _traversable_hex_id(grid, neighbor, traversable) is None:
                continue

            tentative_g = current.g_cost + 1
            if neighbor not in g_costs or tentative_g < g_costs[neighbor]:
                g_costs[neighbor] = tentative_g
                parents[neighbor] = current.position
                heapq.heappush(
                    open_set,
                    _PathNode(
                        tentative_g + neighbor.distance(goal),
                        next(counter),
                        tentative_g,
                        neighbor,
                    ),
                )

    return []


def _reconstruct_path(
    grid: "HexGrid",
    parents: Dict[Hex, Hex],
    start: Hex,
    goal: Hex,
) -> List[int]:
    """Odtwarza ścieżkę od goal do start po mapie rodziców."""
    path = [goal]
    current = goal
    while current != start:
        current = parents[current]
        path.append(current)
    path.reverse()
    return [grid.layout.id_of(hex_) for hex_ in path]


def path_distance(
    grid: "HexGrid",
    start_hex_id: int,
    goal_hex_id: int,
    traversable: Optional[Traversable] = None,
) -> Optional[int]:
    """Liczba kroków ścieżki A* (None gdy brak ścieżki)."""
    path = find_path(grid, start_hex_id, goal_hex_id, traversable)
    return len(path) - 1 if path else None


# ═══════════════════════════════════════════════════════════════════════════
# DYSTANS Z ZASIĘGIEM
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DistanceResult:
    """
    Dystans ruchu do jednego celu.

    Attributes:
        movement_distance: Kroki potrzebne, żeby cel był w zasięgu
            (inf gdy cel nieosiągalny)
        can_reach: Czy istnieje ścieżka
        direct_distance: Odległość w linii prostej
    """
    movement_distance: float
    can_reach: bool
    direct_distance: int


@dataclass(frozen=True)
class RangedDistanceResult:
    """Minimalny dystans ruchu do dowolnego celu i cele osiągalne na nim."""
    movement_distance: float
    can_reach: bool
    reachable_hex_ids: Tuple[int, ...] = ()


def effective_distance(
    grid: "HexGrid",
    start_hex_id: int,
    goal_hex_id: int,
    attack_range: int,
    traversable: Optional[Traversable] = None,
) -> DistanceResult:
    """
    Kroki potrzebne, żeby cel znalazł się w zasięgu.

    Cel w zasięgu w linii prostej -> 0 bez szukania ścieżki. Inaczej
    max(0, długość ścieżki A* - zasięg).

    Raises:
        ValueError: Pole spoza areny
    """
    start = grid.hex_of(start_hex_id)
    goal = grid.hex_of(goal_hex_id)
    if start is None or goal is None:
        raise ValueError(f"Unknown hex: {start_hex_id if start is None else goal_hex_id}")

    direct = start.distance(goal)
    if direct <= attack_range:
        return DistanceResult(0, True, direct)

    path = find_path(grid, start_hex_id, goal_hex_id, traversable)
    if not path:
        return DistanceResult(float("inf"), False, direct)
    return DistanceResult(max(0, len(path) - 1 - attack_range), True, direct)


def ranged_movement_distance(
    grid: "HexGrid",
    start_hex_id: int,
    target_hex_ids: Iterable[int],
    attack_range: int,
    traversable: Optional[Traversable] = None,
    max_movement: int = MAX_MOVEMENT_DISTANCE,
) -> RangedDistanceResult:
    """
    Minimalna liczba kroków do zasięgu któregokolwiek celu (BFS po poziomach).

    Args:
        grid: Siatka
        start_hex_id: Pole postaci
        target_hex_ids: Pola celów (kolejność zachowana w wyniku)
        attack_range: Zasięg postaci
        traversable: Predykat przechodniości
        max_movement: Limit głębokości BFS

    Returns:
        RangedDistanceResult: reachable_hex_ids - wszystkie cele w zasięgu
            z pierwszego poziomu, na którym jakikolwiek jest w zasięgu
    """
    traversable = traversable or can_traverse
    start = grid.hex_of(start_hex_id)
    targets = [(hex_id, grid.hex_of(hex_id)) for hex_id in target_hex_ids]
    targets = [(hex_id, hex_) for hex_id, hex_ in targets if hex_ is not None]
    if start is None or not targets:
        return RangedDistanceResult(float("inf"), False)

    immediate = tuple(hex_id for hex_id, hex_ in targets if start.distance(hex_) <= attack_range)
    if immediate:
        return RangedDistanceResult(0, True, immediate)

    visited: Set[Hex] = {start}
    frontier: List[Hex] = [start]
    moves = 0

    while frontier and moves < max_movement:
        next_frontier: List[Hex] = []
        reachable: List[int] = []

        for position in frontier:
            for neighbor in position.neighbors():
                if neighbor in visited:
                    continue
                if _traversable_hex_id(grid, neighbor, traversable) is None:
                    continue
                visited.add(neighbor)
                next_frontier.append(neighbor)
                reachable.extend(
                    hex_id for hex_id, hex_ in targets
                    if neighbor.distance(hex_) <= attack_range
                )

        if reachable:
            return RangedDistanceResult(moves + 1, True, tuple(dict.fromkeys(reachable)))

        frontier = next_frontier
        moves += 1

    return RangedDistanceResult(float("inf"), False)


# ═══════════════════════════════════════════════════════════════════════════
# NAJBLIŻSZY CEL
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ClosestTarget:
    """Najbliższy cel postaci z pola source_hex_id."""
    source_hex_id: int
    target_hex_id: int
    distance: float

    def to_dict(self) -> Dict:
        return {
            "source_hex_id": self.source_hex_id,
            "target_hex_id": self.target_hex_id,
            "distance": self.distance,
        }


def is_vertically_aligned(a: Hex, b: Hex) -> bool:
    """To samo q - ruch w linii prostej góra/dół."""
    return a.q == b.q


def _prefers_by_id(candidate: int, best: int, source_team: Optional[Team]) -> bool:
    if source_team is Team.ENEMY:
        return candidate < best
    return candidate > best


def pick_closest(
    grid: "HexGrid",
    candidate_hex_ids: List[int],
    source_hex_id: int,
    source_team: Optional[Team],
) -> int:
    """
    Rozstrzyga remis między celami o tym samym dystansie ruchu.

    Raises:
        ValueError: Pusta lista kandydatów
    """
    if not candidate_hex_ids:
        raise ValueError("No candidates to pick from")

    source = grid.hex_of(source_hex_id)
    best = candidate_hex_ids[0]

    for candidate in candidate_hex_ids[1:]:
        candidate_hex = grid.hex_of(candidate)
        best_hex = grid.hex_of(best)
        candidate_vertical = is_vertically_aligned(source, candidate_hex)
        best_vertical = is_vertically_aligned(source, best_hex)

        if candidate_vertical and not best_vertical:
            best = candidate
        elif best_vertical and not candidate_vertical:
            continue
        elif grid.layout.same_diagonal_row(candidate, best):
            if _prefers_by_id(candidate, best, source_team):
                best = candidate
        elif not candidate_vertical and not best_vertical:
            candidate_distance = source.distance(candidate_hex)
            best_distance = source.distance(best_hex)
            if candidate_distance < best_distance:
                best = candidate
            elif candidate_distance == best_distance and _prefers_by_id(candidate, best, source_team):
                best = candidate

    return best


def find_closest_target(
    grid: "HexGrid",
    source_hex_id: int,
    target_hex_ids: List[int],
    attack_range: int = DEFAULT_RANGE,
    traversable: Optional[Traversable] = None,
) -> Optional[ClosestTarget]:
    """
    Cel, do którego postać ma najmniej kroków ruchu (z regułami remisu).

    Returns:
        Optional[ClosestTarget]: None gdy brak celów lub żaden nieosiągalny
    """
    result = ranged_movement_distance(grid, source_hex_id, target_hex_ids, attack_range, traversable)
    if not result.can_reach:
        return None

    reachable = set(result.reachable_hex_ids)
    candidates = [hex_id for hex_id in target_hex_ids if hex_id in reachable]
    best = pick_closest(grid, candidates, source_hex_id, grid.team_at(source_hex_id))
    return ClosestTarget(source_hex_id, best, result.movement_distance)


def closest_target_map(
    grid: "HexGrid",
    source_team: Team,
    target_team: Team,
    ranges: Optional[Mapping[int, int]] = None,
    traversable: Optional[Traversable] = None,
) -> Dict[int, ClosestTarget]:
    """
    Najbliższy cel dla każdej postaci drużyny źródłowej.

    Args:
        grid: Siatka
        source_team: Drużyna szukających
        target_team: Drużyna celów
        ranges: character_id -> zasięg (brak wpisu = DEFAULT_RANGE)
        traversable: Predykat przechodniości

    Returns:
        Dict[int, ClosestTarget]: source_hex_id -> cel (tylko osiągalne)
    """
    ranges = ranges or {}
    targets = [tile.id for tile in grid.occupied_tiles(target_team)]
    result: Dict[int, ClosestTarget] = {}

    for tile in grid.occupied_tiles(source_team):
        attack_range = ranges.get(tile.character_id, DEFAULT_RANGE)
        closest = find_closest_target(grid, tile.id, targets, attack_range, traversable)
        if closest is not None:
            result[tile.id] = closest
    return result
