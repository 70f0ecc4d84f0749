"""
Siatka areny (HexGrid) z transakcyjnymi mutacjami.

HexGrid jest jedynym współdzielonym, mutowalnym zasobem:
- trzyma pola (stan + postać) zbudowane z layoutu i presetu areny
- wystawia operacje place / remove / move / swap / auto_place / clear_all
- po każdej zatwierdzonej transakcji wywołuje SkillManager.update_all()

Warstwy:

    API publiczne       place(), move(), ...        -> bool
        │  walidacja (ValidationError) + Transaction.run()
        ▼
    Budowniczowie       hexarena.transactions.*     -> Transaction
        │  kroki (forward, rollback)
        ▼
    Prymitywy           perform_place(), perform_remove(), set_state()
                        (bez walidacji reguł gry, bez aktualizacji skilli)

Niezmiennik (przed i po każdym wywołaniu publicznym):
    character_id na polu  <=>  team na polu  <=>  stan OCCUPIED_*
    postać występuje najwyżej raz w drużynie

Przykład użycia:
    >>> grid = HexGrid(layout, arena, registry)
    >>> grid.place(12, 58, Team.ALLY)
    True
    >>> grid.character_at(12)
    58
    >>> grid.remove(12)
    True
"""

from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional, Tuple, TYPE_CHECKING

from ..characters.companion import CompanionRegistry
from ..events.event_logger import EventLogger
from ..skills.manager import SkillManager
from ..skills.registry import SkillRegistry
from ..transactions import (
    build_auto_place_transaction,
    build_clear_transaction,
    build_move_transaction,
    build_place_transaction,
    build_remove_transaction,
    build_swap_transaction,
    reactivate,
    validate_placement,
)
from .errors import GridError, TransactionFailure, ValidationError
from .hex_coord import Hex
from .layout import ArenaPreset, HexLayout
from .rng import GameRNG
from .tile import Team, Tile, TileState

if TYPE_CHECKING:
    from .transaction import Transaction


# Symbole debug_print()
_STATE_SYMBOLS = {
    TileState.DEFAULT: ".",
    TileState.AVAILABLE_ALLY: "a",
    TileState.AVAILABLE_ENEMY: "e",
    TileState.OCCUPIED_ALLY: "A",
    TileState.OCCUPIED_ENEMY: "E",
    TileState.BLOCKED: "#",
    TileState.BLOCKED_BREAKABLE: "%",
}


class HexGrid:
    """
    Siatka jednej areny.

    Attributes:
        layout (HexLayout): Geometria areny
        arena (ArenaPreset): Preset początkowych stanów (może być None)
        rng (GameRNG): RNG wyboru pól (auto_place, companiony)
        logger (EventLogger): Logger zdarzeń
        companions (CompanionRegistry): Powiązania właściciel -> companiony
        skill_manager (SkillManager): Runtime umiejętności
        default_max_team_size (int): Bazowy limit drużyny
        strict (bool): True = publiczne operacje rzucają zamiast zwracać False
    """

    def __init__(
        self,
        layout: HexLayout,
        arena: Optional[ArenaPreset] = None,
        skill_registry: Optional[SkillRegistry] = None,
        *,
        max_team_size: int = 5,
        companion_offset: int = 10000,
        rng: Optional[GameRNG] = None,
        logger: Optional[EventLogger] = None,
        strict: bool = False,
    ):
        if arena is not None:
            if arena.layout != layout.name:
                raise ValueError(
                    f"Arena '{arena.key}' uses layout '{arena.layout}', got '{layout.name}'"
                )
            referenced = (
                arena.available_ally + arena.available_enemy
                + arena.blocked + arena.blocked_breakable
            )
            unknown = sorted(h for h in set(referenced) if h not in layout)
            if unknown:
                raise ValueError(f"Arena '{arena.key}' references unknown hexes: {unknown}")
        if max_team_size <= 0:
            raise ValueError(f"max_team_size must be positive, got {max_team_size}")

        self.layout = layout
        self.arena = arena
        self.rng = rng or GameRNG(0)
        self.logger = logger or EventLogger(
            arena=arena.key if arena else None, layout=layout.name
        )
        self.strict = strict
        self.default_max_team_size = max_team_size

        self._tiles: Dict[int, Tile] = {}
        for hex_ in sorted(layout.hexes(), key=lambda h: h.id):
            state = arena.initial_state(hex_.id) if arena else TileState.DEFAULT
            self._tiles[hex_.id] = Tile(hex_, state)

        self._character_hex: Dict[Tuple[int, Team], int] = {}
        self._max_team_sizes: Dict[Team, int] = {team: max_team_size for team in Team}

        self.companions = CompanionRegistry(companion_offset)
        self.skill_manager = SkillManager(skill_registry or SkillRegistry(), self, self.logger)

        self.logger.log_session_start(self.snapshot())

    # ─────────────────────────────────────────────────────────────────────────
    # ZAPYTANIA
    # ─────────────────────────────────────────────────────────────────────────

    def get_tile(self, hex_id: int) -> Optional[Tile]:
        return self._tiles.get(hex_id)

    def require_tile(self, hex_id: int) -> Tile:
        """
        Zwraca pole lub rzuca ValidationError.

        Raises:
            ValidationError: Id spoza areny
        """
        tile = self._tiles.get(hex_id)
        if tile is None:
            raise ValidationError(f"Invalid hex ID: {hex_id}", hex_id=hex_id)
        return tile

    def tiles(self) -> List[Tile]:
        """Wszystkie pola rosnąco po id."""
        return list(self._tiles.values())

    def hex_of(self, hex_id: int) -> Optional[Hex]:
        return self.layout.hex_of(hex_id)

    def character_at(self, hex_id: int) -> Optional[int]:
        tile = self._tiles.get(hex_id)
        return tile.character_id if tile else None

    def team_at(self, hex_id: int) -> Optional[Team]:
        tile = self._tiles.get(hex_id)
        return tile.team if tile else None

    def occupied_tiles(self, team: Optional[Team] = None) -> List[Tile]:
        """Zajęte pola (opcjonalnie jednej drużyny) rosnąco po id."""
        return [
            tile for tile in self._tiles.values()
            if tile.is_occupied and (team is None or tile.team is team)
        ]

    def available_tiles(self, team: Team) -> List[Tile]:
        """Wolne pola strefy drużyny."""
        wanted = TileState.available_for(team)
        return [tile for tile in self._tiles.values() if tile.state is wanted]

    def find_character_hex(self, character_id: int, team: Team) -> Optional[int]:
        return self._character_hex.get((character_id, team))

    def team_characters(self, team: Team) -> List[int]:
        return sorted(cid for cid, t in self._character_hex if t is team)

    def is_on_team(self, character_id: int, team: Team) -> bool:
        return (character_id, team) in self._character_hex

    def character_count(self, team: Team) -> int:
        return sum(1 for _, t in self._character_hex if t is team)

    def get_max_team_size(self, team: Team) -> int:
        return self._max_team_sizes[team]

    def set_max_team_size(self, team: Team, size: int) -> bool:
        """
        Ustawia limit drużyny (companiony liczą się do limitu).

        Returns:
            bool: False gdy size <= 0 lub size > liczba pól
        """
        if size <= 0 or size > len(self._tiles):
            return False
        self._max_team_sizes[team] = size
        return True

    def available_slots(self, team: Team) -> int:
        return self._max_team_sizes[team] - self.character_count(team)

    # ─────────────────────────────────────────────────────────────────────────
    # PRYMITYWY (używane przez kroki transakcji)
    # ─────────────────────────────────────────────────────────────────────────

    def perform_place(self, hex_id: int, character_id: int, team: Team) -> bool:
        """
        Stawia postać bez walidacji reguł wyższego poziomu.

        Returns:
            bool: False (bez efektów ubocznych) gdy pole nie jest wolną
                strefą drużyny, postać już jest w drużynie lub drużyna
                jest pełna
        """
        tile = self._tiles.get(hex_id)
        if tile is None or tile.state is not TileState.available_for(team):
            return False
        if (character_id, team) in self._character_hex:
            return False
        if self.available_slots(team) <= 0:
            return False

        tile.state = TileState.occupied_for(team)
        tile.character_id = character_id
        tile.team = team
        self._character_hex[(character_id, team)] = hex_id
        self.logger.log_placed(character_id, hex_id, team.value)
        return True

    def perform_remove(self, hex_id: int) -> Optional[Tuple[int, Team]]:
        """
        Zdejmuje postać z pola (pole wraca do stanu AVAILABLE_x).

        Returns:
            Optional[Tuple[int, Team]]: (character_id, team) lub None gdy pole puste
        """
        tile = self._tiles.get(hex_id)
        if tile is None or not tile.is_occupied:
            return None

        character_id, team = tile.character_id, tile.team
        tile.state = tile.state.base
        tile.character_id = None
        tile.team = None
        del self._character_hex[(character_id, team)]
        self.logger.log_removed(character_id, hex_id, team.value)
        return character_id, team

    def set_state(self, hex_id: int, state: TileState) -> bool:
        """
        Zmienia stan wolnego pola (edytor mapy, load_state).

        Returns:
            bool: False dla zajętego pola lub stanu OCCUPIED_*
        """
        tile = self._tiles.get(hex_id)
        if tile is None or tile.is_occupied or state.is_occupied:
            return False
        tile.state = state
        return True

    # ─────────────────────────────────────────────────────────────────────────
    # OPERACJE PUBLICZNE
    # ─────────────────────────────────────────────────────────────────────────

    def _execute(self, operation: str, builder, *args: Any) -> bool:
        """
        Buduje i wykonuje transakcję; po commicie przelicza umiejętności.

        Raises:
            ValidationError: Tylko w trybie strict
            TransactionFailure: Tylko w trybie strict
        """
        self.logger.next_tick()
        try:
            txn: "Transaction" = builder(self, *args)
        except ValidationError as exc:
            self.logger.log_validation_failed(operation, exc.to_dict())
            if self.strict:
                raise
            return False

        if not txn.run():
            if self.strict:
                reason = f": {txn.failure_reason}" if txn.failure_reason else ""
                raise TransactionFailure(
                    f"{operation} failed at step '{txn.failed_step}'{reason}",
                    step=txn.failed_step,
                )
            return False

        self.skill_manager.update_all()
        return True

    def place(self, hex_id: int, character_id: int, team: Team) -> bool:
        """
        Stawia postać na polu i aktywuje jej umiejętność.

        Args:
            hex_id: Pole docelowe (musi być AVAILABLE_x drużyny)
            character_id: Postać (nie może być id companiona)
            team: Drużyna

        Returns:
            bool: True gdy postać stoi na polu
        """
        return self._execute("place", build_place_transaction, hex_id, character_id, team)

    def remove(self, hex_id: int) -> bool:
        """
        Zdejmuje postać z pola.

        Zdjęcie companiona zdejmuje jego właściciela; zdjęcie właściciela
        zdejmuje wszystkie jego companiony.
        """
        return self._execute("remove", build_remove_transaction, hex_id)

    def move(self, from_hex_id: int, to_hex_id: int, character_id: int) -> bool:
        """
        Przenosi postać na wolne pole.

        Drużyna docelowa wynika ze stanu pola docelowego. Zmiana drużyny
        dezaktywuje umiejętność w starej drużynie i aktywuje w nowej w
        ramach tej samej transakcji.
        """
        from_team = self.team_at(from_hex_id)
        if not self._execute("move", build_move_transaction, from_hex_id, to_hex_id, character_id):
            return False
        self.logger.log_moved(
            character_id, from_hex_id, to_hex_id,
            from_team.value, self.team_at(to_hex_id).value,
        )
        return True

    def swap(self, hex_id_a: int, hex_id_b: int) -> bool:
        """Zamienia miejscami postacie z dwóch zajętych pól."""
        character_a = self.character_at(hex_id_a)
        character_b = self.character_at(hex_id_b)
        if not self._execute("swap", build_swap_transaction, hex_id_a, hex_id_b):
            return False
        self.logger.log_swapped(character_a, character_b, hex_id_a, hex_id_b)
        return True

    def auto_place(self, character_id: int, team: Team) -> bool:
        """Stawia postać na losowym (deterministycznym dla seeda) wolnym polu."""
        return self._execute("auto_place", build_auto_place_transaction, character_id, team)

    def clear_all(self) -> bool:
        """Dezaktywuje wszystkie umiejętności i czyści planszę."""
        return self._execute("clear_all", build_clear_transaction)

    # ─────────────────────────────────────────────────────────────────────────
    # EKSPORT / IMPORT STANU
    # ─────────────────────────────────────────────────────────────────────────

    def export_state(self) -> Dict[str, List[Tuple]]:
        """
        Stan planszy jako listy krotek.

        Returns:
            Dict: {
                "tiles": [(hex_id, TileState)]  - stany bazowe (bez OCCUPIED_*);
                    pola zablokowane przez aktywne umiejętności mają stan
                    sprzed blokady (load_state odtworzy blokadę aktywacją)
                "characters": [(hex_id, character_id, Team)]  - z companionami
            }
        """
        saved = self.skill_manager.saved_tile_states()
        return {
            "tiles": [
                (tile.id, saved.get(tile.id, tile.state.base)) for tile in self._tiles.values()
            ],
            "characters": [
                (tile.id, tile.character_id, tile.team) for tile in self.occupied_tiles()
            ],
        }

    def load_state(
        self,
        tiles: Iterable[Tuple[int, Any]],
        characters: Iterable[Tuple[int, int, Any]],
    ) -> bool:
        """
        Odtwarza planszę z list krotek (odwrotność export_state).

        Postacie bez companionów są stawiane z aktywacją umiejętności,
        companiony utworzone przez umiejętności trafiają potem na
        zapisane pola. Przy błędzie przywracany jest poprzedni stan.

        Returns:
            bool: True gdy stan został wczytany
        """
        self.logger.next_tick()
        tiles = list(tiles)
        characters = list(characters)
        previous = self.export_state()
        try:
            self._apply_state(tiles, characters)
        except GridError as exc:
            self.logger.log_validation_failed("load_state", exc.to_dict())
            self._apply_state(previous["tiles"], previous["characters"])
            if self.strict:
                raise
            return False

        self.logger.log_state_loaded(len(characters), self.snapshot())
        return True

    def _apply_state(
        self,
        tiles: List[Tuple[int, Any]],
        characters: List[Tuple[int, int, Any]],
    ) -> None:
        try:
            tiles = [(hex_id, TileState.parse(state)) for hex_id, state in tiles]
            characters = [(hex_id, cid, Team.parse(team)) for hex_id, cid, team in characters]
        except ValueError as exc:
            raise ValidationError(str(exc)) from None

        self._reset_board()

        for hex_id, state in tiles:
            self.require_tile(hex_id)
            if not self.set_state(hex_id, state.base):
                raise ValidationError(f"Cannot set state {state.name}", hex_id=hex_id)

        companion_positions: Dict[Team, Dict[int, int]] = {}
        placed: List[Tuple[int, int, Team]] = []
        for hex_id, character_id, team in characters:
            if self.companions.is_companion_id(character_id):
                companion_positions.setdefault(team, {})[character_id] = hex_id
                continue
            validate_placement(self, hex_id, character_id, team)
            self.perform_place(hex_id, character_id, team)
            placed.append((hex_id, character_id, team))

        # Aktywacja dopiero po postawieniu wszystkich - companiony nie
        # mogą zająć pól zapisanych dla zwykłych postaci. Strefy blokujące
        # najpierw, żeby companiony nie wylosowały pól strefy. Postać
        # zdjęta przez strefę nie jest aktywowana.
        for hex_id, character_id, team in sorted(placed, key=self._activation_key):
            if self.find_character_hex(character_id, team) != hex_id:
                continue
            if self.skill_manager.has_skill(character_id):
                reactivate(self, character_id, hex_id, team, {})

        for team, positions in companion_positions.items():
            self.companions.relocate(self, team, positions, fallback=False)
            for owner_id in {self.companions.owner_of(cid, team) for cid in positions}:
                self.skill_manager.apply_presentation(owner_id, team)

        self.skill_manager.update_all()

    def _activation_key(self, placed: Tuple[int, int, Team]) -> int:
        skill = self.skill_manager.get_skill(placed[1])
        return skill.activation_order if skill is not None else 0

    def _reset_board(self) -> None:
        """Zdejmuje wszystko z planszy bez transakcji (tylko load_state)."""
        self.skill_manager.deactivate_all()
        for tile in self.occupied_tiles():
            self.perform_remove(tile.id)
        for link in self.companions.links():
            self.companions.unlink(link.owner_id, link.companion_id, link.team)

    # ─────────────────────────────────────────────────────────────────────────
    # DIAGNOSTYKA
    # ─────────────────────────────────────────────────────────────────────────

    def snapshot(self) -> List[Dict[str, Any]]:
        """Lista pól dla warstwy renderowania."""
        return [tile.to_dict() for tile in self._tiles.values()]

    def invariant_violations(self) -> List[str]:
        """
        Sprawdza niezmienniki siatki.

        Returns:
            List[str]: Opisy naruszeń (pusta lista = siatka spójna)
        """
        violations: List[str] = []
        seen: Dict[Tuple[int, Team], int] = {}

        for tile in self._tiles.values():
            if not tile.is_consistent():
                violations.append(
                    f"hex {tile.id}: state {tile.state.name} inconsistent with "
                    f"character {tile.character_id} / team {tile.team}"
                )
            if tile.is_occupied and tile.team is not None:
                key = (tile.character_id, tile.team)
                if key in seen:
                    violations.append(
                        f"character {tile.character_id} ({tile.team.value}) on hexes "
                        f"{seen[key]} and {tile.id}"
                    )
                seen[key] = tile.id

        if seen != self._character_hex:
            violations.append("character index out of sync with tiles")

        for team in Team:
            if self.character_count(team) > self._max_team_sizes[team]:
                violations.append(
                    f"{team.value}: {self.character_count(team)} characters exceed "
                    f"max size {self._max_team_sizes[team]}"
                )

        for link in self.companions.links():
            if not self.is_on_team(link.owner_id, link.team):
                violations.append(
                    f"companion {link.companion_id} linked to absent owner {link.owner_id}"
                )

        return violations

    def debug_print(self) -> str:
        """
        Tekstowy podgląd planszy (rzędy layoutu).

        Legenda: . puste, a/e strefa ally/enemy, A/E zajęte, # blokada,
        % blokada zniszczalna.
        """
        lines = []
        min_offset = min(row.q_offset + (row.r - self.layout.rows[0].r) / 2
                         for row in self.layout.rows)
        for row in self.layout.rows:
            indent = row.q_offset + (row.r - self.layout.rows[0].r) / 2 - min_offset
            cells = [_STATE_SYMBOLS[self._tiles[h].state] for h in row.hex_ids]
            lines.append(" " * int(indent * 4) + "   ".join(cells))
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"HexGrid(layout={self.layout.name!r}, "
            f"ally={self.character_count(Team.ALLY)}, "
            f"enemy={self.character_count(Team.ENEMY)})"
        )
