"""
Companiony - postacie tworzone przez umiejętność właściciela.

Companion żyje tak długo jak umiejętność właściciela:
- powstaje przy aktywacji (pole losowane z GameRNG)
- znika przy dezaktywacji
- usunięcie companiona usuwa właściciela (a przez jego skill - companiony)
- usunięcie właściciela usuwa jego companiony

Własność jest jawną relacją (companion_id, team) -> owner_id. Id companiona
jest przydzielane jako `owner_id + k * offset` (domyślnie offset = 10000),
ale nigdy nie jest z niego odczytywane - źródłem prawdy jest mapa.

Pojemność drużyny:
    Każdy companion zwiększa max rozmiar drużyny o 1 przy spawnie;
    despawn przywraca max(domyślny rozmiar, rozmiar - 1).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple, TYPE_CHECKING

from ..core.errors import GridError, NoAvailableTileError, ValidationError
from ..core.tile import Team

if TYPE_CHECKING:
    from ..core.hex_grid import HexGrid


@dataclass(frozen=True)
class CompanionLink:
    """Powiązanie companion -> właściciel."""
    companion_id: int
    owner_id: int
    team: Team

    def to_dict(self) -> Dict:
        return {
            "companion_id": self.companion_id,
            "owner_id": self.owner_id,
            "team": self.team.value,
        }


class CompanionRegistry:
    """
    Rejestr powiązań companionów z właścicielami.

    Attributes:
        offset (int): Przesunięcie przestrzeni id companionów
        _links (Dict): (owner_id, team) -> zbiór companion_id
        _owners (Dict): (companion_id, team) -> owner_id
    """

    def __init__(self, offset: int = 10000):
        self.offset = offset
        self._links: Dict[Tuple[int, Team], Set[int]] = {}
        self._owners: Dict[Tuple[int, Team], int] = {}

    # ─────────────────────────────────────────────────────────────────────────
    # RELACJA WŁASNOŚCI
    # ─────────────────────────────────────────────────────────────────────────

    def is_companion_id(self, character_id: int) -> bool:
        """Czy id należy do zarezerwowanej przestrzeni companionów."""
        return isinstance(character_id, int) and character_id >= self.offset

    def allocate_id(self, owner_id: int, index: int = 1) -> int:
        """Id k-tego companiona właściciela."""
        return owner_id + index * self.offset

    def link(self, owner_id: int, companion_id: int, team: Team) -> None:
        self._links.setdefault((owner_id, team), set()).add(companion_id)
        self._owners[(companion_id, team)] = owner_id

    def unlink(self, owner_id: int, companion_id: int, team: Team) -> None:
        companions = self._links.get((owner_id, team))
        if companions is not None:
            companions.discard(companion_id)
            if not companions:
                del self._links[(owner_id, team)]
        self._owners.pop((companion_id, team), None)

    def clear_links(self, owner_id: int, team: Team) -> List[int]:
        """Usuwa wszystkie powiązania właściciela; zwraca odłączone id."""
        removed = self.companions_of(owner_id, team)
        for companion_id in removed:
            self.unlink(owner_id, companion_id, team)
        return removed

    def companions_of(self, owner_id: int, team: Team) -> List[int]:
        return sorted(self._links.get((owner_id, team), ()))

    def owner_of(self, companion_id: int, team: Team) -> Optional[int]:
        return self._owners.get((companion_id, team))

    def is_companion(self, character_id: int, team: Optional[Team] = None) -> bool:
        """Czy postać jest powiązanym companionem (w danej lub dowolnej drużynie)."""
        if team is not None:
            return (character_id, team) in self._owners
        return any((character_id, t) in self._owners for t in Team)

    def links(self) -> List[CompanionLink]:
        return [
            CompanionLink(companion_id, owner_id, team)
            for (companion_id, team), owner_id in sorted(
                self._owners.items(), key=lambda item: (item[0][1].value, item[0][0])
            )
        ]

    # ─────────────────────────────────────────────────────────────────────────
    # CYKL ŻYCIA NA SIATCE
    # ─────────────────────────────────────────────────────────────────────────

    def spawn(self, grid: "HexGrid", owner_id: int, team: Team, index: int = 1) -> int:
        """
        Stawia companiona na losowym wolnym polu drużyny.

        Args:
            grid: Siatka
            owner_id: Właściciel
            team: Drużyna właściciela
            index: Numer companiona (1, 2, ...)

        Returns:
            int: Id postawionego companiona

        Raises:
            NoAvailableTileError: Brak wolnego pola albo nieudane postawienie
        """
        companion_id = self.allocate_id(owner_id, index)
        hex_id = grid.rng.pick_hex_id(tile.id for tile in grid.available_tiles(team))
        if hex_id is None:
            raise NoAvailableTileError(
                "No space available for companion", character_id=owner_id, team=team
            )

        current_size = grid.get_max_team_size(team)
        if not grid.set_max_team_size(team, current_size + 1):
            raise GridError(
                f"Cannot increase team size to {current_size + 1}",
                character_id=owner_id,
                team=team,
            )

        if not grid.perform_place(hex_id, companion_id, team):
            grid.set_max_team_size(team, current_size)
            raise NoAvailableTileError(
                f"Failed to place companion {companion_id}",
                hex_id=hex_id,
                character_id=companion_id,
                team=team,
            )

        self.link(owner_id, companion_id, team)
        grid.logger.log_companion(True, companion_id, owner_id, hex_id, team.value)
        return companion_id

    def despawn_all(self, grid: "HexGrid", owner_id: int, team: Team) -> List[Tuple[int, int]]:
        """
        Zdejmuje wszystkie companiony właściciela i przywraca rozmiar drużyny.

        Returns:
            List[Tuple[int, int]]: Zdjęte pary (companion_id, hex_id)
        """
        spawned = len(self.companions_of(owner_id, team))
        removed = self._take_off_grid(grid, owner_id, team)
        for _ in range(spawned):
            size = grid.get_max_team_size(team)
            grid.set_max_team_size(team, max(grid.default_max_team_size, size - 1))
        return removed

    def cascade_remove(self, grid: "HexGrid", owner_id: int, team: Team) -> List[Tuple[int, int]]:
        """
        Zdejmuje companiony, które przetrwały dezaktywację właściciela.

        Nie zmienia rozmiaru drużyny - dotyczy powiązań, których nie
        obsłużył skill właściciela.
        """
        return self._take_off_grid(grid, owner_id, team)

    def _take_off_grid(self, grid: "HexGrid", owner_id: int, team: Team) -> List[Tuple[int, int]]:
        removed: List[Tuple[int, int]] = []
        for companion_id in self.companions_of(owner_id, team):
            hex_id = grid.find_character_hex(companion_id, team)
            if hex_id is not None and grid.perform_remove(hex_id) is not None:
                removed.append((companion_id, hex_id))
                grid.logger.log_companion(False, companion_id, owner_id, hex_id, team.value)
            self.unlink(owner_id, companion_id, team)
        return removed

    # ─────────────────────────────────────────────────────────────────────────
    # SNAPSHOT / RESTORE
    # ─────────────────────────────────────────────────────────────────────────

    def snapshot(self, grid: "HexGrid", owner_id: int, team: Team) -> Dict[int, int]:
        """Pozycje companionów właściciela: companion_id -> hex_id."""
        positions: Dict[int, int] = {}
        for companion_id in self.companions_of(owner_id, team):
            hex_id = grid.find_character_hex(companion_id, team)
            if hex_id is not None:
                positions[companion_id] = hex_id
        return positions

    def restore(
        self,
        grid: "HexGrid",
        owner_id: int,
        team: Team,
        positions: Dict[int, int],
    ) -> None:
        """
        Odtwarza pozycje companionów po ponownej aktywacji właściciela.

        Companiony postawione przez skill na losowych polach są
        przenoszone na zapisane pola; potem skill ponownie nakłada
        swoje modyfikatory prezentacji.

        Raises:
            ValidationError: Companion z positions nie jest powiązany z właścicielem
            NoAvailableTileError: Nie da się postawić companiona na żadnym polu
        """
        if not positions:
            return
        for companion_id in positions:
            if self.owner_of(companion_id, team) != owner_id:
                raise ValidationError(
                    f"Companion {companion_id} is not linked to owner {owner_id}",
                    character_id=companion_id,
                    team=team,
                )
        self.relocate(grid, team, positions)
        grid.skill_manager.apply_presentation(owner_id, team)

    def relocate(
        self,
        grid: "HexGrid",
        team: Team,
        positions: Dict[int, int],
        fallback: bool = True,
    ) -> None:
        """
        Przenosi powiązane companiony na wskazane pola.

        Najpierw zdejmuje wszystkie przenoszone companiony, potem stawia
        je na docelowych polach (dzięki temu companiony mogą zamienić
        się miejscami). Gdy pole docelowe jest niedostępne:
            fallback=True  - companion trafia na losowe wolne pole drużyny
                             (zdarzenie COMPANION_RELOCATED)
            fallback=False - ValidationError (load_state)

        Raises:
            ValidationError: Id nie jest powiązanym companionem albo pole
                docelowe niedostępne przy fallback=False
            NoAvailableTileError: Brak jakiegokolwiek wolnego pola
        """
        for companion_id in positions:
            if not self.is_companion(companion_id, team):
                raise ValidationError(
                    f"Companion ID {companion_id} was not created by a skill",
                    character_id=companion_id,
                    team=team,
                )

        for companion_id in positions:
            current = grid.find_character_hex(companion_id, team)
            if current is not None:
                grid.perform_remove(current)

        for companion_id, hex_id in positions.items():
            if grid.perform_place(hex_id, companion_id, team):
                continue
            if not fallback:
                raise ValidationError(
                    f"Tile {hex_id} is not available for companion {companion_id}",
                    hex_id=hex_id,
                    character_id=companion_id,
                    team=team,
                )
            other = grid.rng.pick_hex_id(tile.id for tile in grid.available_tiles(team))
            if other is None or not grid.perform_place(other, companion_id, team):
                raise NoAvailableTileError(
                    f"No tile available to restore companion {companion_id}",
                    hex_id=hex_id,
                    character_id=companion_id,
                    team=team,
                )
            grid.logger.log_companion_relocated(
                companion_id, self.owner_of(companion_id, team), hex_id, other, team.value
            )
