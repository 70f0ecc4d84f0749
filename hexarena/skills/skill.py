"""
Bazowe typy systemu umiejętności.

Umiejętność (Skill) to deskryptor z trzema hookami:

    on_activate(ctx)    - postać stanęła na planszy (lub zmieniła drużynę)
    on_deactivate(ctx)  - postać zeszła z planszy (lub zmieniła drużynę)
    on_update(ctx)      - plansza się zmieniła, przelicz cel

SkillContext niesie siatkę, pole i drużynę postaci oraz manager.
Cele umiejętności trafiają do cache managera jako SkillTargetInfo
pod kluczem TargetKey(character_id, team, index) - index > 0 pozwala
trzymać kilka celów jednej umiejętności naraz.

Umiejętności celujące dziedziczą po TargetingSkill i implementują
tylko compute_targets(ctx) -> lista celów.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Dict, List, Optional, TYPE_CHECKING

from ..core.tile import Team

if TYPE_CHECKING:
    from ..core.hex_grid import HexGrid
    from .manager import SkillManager


# ═══════════════════════════════════════════════════════════════════════════
# CELE
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class SkillTargetInfo:
    """
    Wynik targetingu.

    Attributes:
        target_hex_id: Pole celu (None gdy cele są tylko w strzałkach)
        target_character_id: Postać na polu celu
        metadata: Dane specyficzne dla umiejętności, np.
            examined_tiles - ślad odwiedzonych pól (debug)
            is_symmetrical_target - cel trafiony wprost na polu lustrzanym
            arrows - lista {from_hex_id, to_hex_id, type}
    """
    target_hex_id: Optional[int]
    target_character_id: Optional[int]
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target_hex_id": self.target_hex_id,
            "target_character_id": self.target_character_id,
            "metadata": self.metadata,
        }


@dataclass(frozen=True)
class TargetKey:
    """Klucz cache celów: (postać, drużyna, numer celu)."""
    character_id: int
    team: Team
    index: int = 0


@dataclass
class ActiveSkillEntry:
    """
    Aktywna umiejętność postaci na danym polu.

    Attributes:
        data: Stan umiejętności żyjący tak długo jak aktywacja (np.
            zapisane stany pól, zagnieżdżone transakcje do cofnięcia)
    """
    character_id: int
    team: Team
    hex_id: int
    data: Dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "character_id": self.character_id,
            "team": self.team.value,
            "hex_id": self.hex_id,
        }


@dataclass
class SkillContext:
    """Kontekst wywołania hooka umiejętności."""
    grid: "HexGrid"
    hex_id: int
    team: Team
    character_id: int
    manager: "SkillManager"
    data: Dict[str, Any] = field(default_factory=dict)


# ═══════════════════════════════════════════════════════════════════════════
# BAZOWA UMIEJĘTNOŚĆ
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class Skill(ABC):
    """
    Bazowa klasa umiejętności.

    Attributes:
        character_id: Postać, do której należy umiejętność
        name: Nazwa wyświetlana
        description: Opis
        color_modifier: Kolor postaci (dla warstwy renderowania)
        companion_color_modifier: Kolor companionów
        targeting_color: Kolor wskaźnika celu
    """
    character_id: int
    name: str = ""
    description: str = ""
    color_modifier: Optional[str] = None
    companion_color_modifier: Optional[str] = None
    targeting_color: Optional[str] = None

    skill_type: ClassVar[str] = "base"
    # Kolejność aktywacji przy load_state (mniejsza = wcześniej)
    activation_order: ClassVar[int] = 0

    @abstractmethod
    def on_activate(self, context: SkillContext) -> None:
        """Wywoływane po postawieniu postaci."""
        pass

    def on_deactivate(self, context: SkillContext) -> None:
        """Domyślnie czyści cele i modyfikatory postaci."""
        context.manager.clear_targets(context.character_id, context.team)
        context.manager.remove_modifier(context.character_id, context.team)

    def on_update(self, context: SkillContext) -> None:
        """Domyślnie nic - umiejętności pasywne nie przeliczają celów."""
        pass

    def undo_activate(self, context: SkillContext) -> None:
        """
        Cofa aktywację w rollbacku transakcji.

        Domyślnie to samo co on_deactivate. Umiejętności, które przy
        aktywacji zmieniają planszę poza companionami, cofają tu te zmiany.
        """
        self.on_deactivate(context)

    def apply_presentation(self, context: SkillContext) -> None:
        """Rejestruje modyfikatory prezentacji w managerze."""
        if self.color_modifier:
            context.manager.set_modifier(context.character_id, context.team, self.color_modifier)

    @classmethod
    def from_dict(cls, character_id: int, data: Dict[str, Any]) -> "Skill":
        """
        Tworzy umiejętność z bloku `skill` w characters.yaml.

        Nieznane klucze (np. `type`) są pomijane.
        """
        names = {f.name for f in fields(cls)} - {"character_id"}
        params = {k: v for k, v in data.items() if k in names}
        return cls(character_id=character_id, **params)

    def describe(self) -> Dict[str, Any]:
        """Opis umiejętności dla API."""
        return {
            "type": self.skill_type,
            "character_id": self.character_id,
            "name": self.name,
            "description": self.description,
            "color_modifier": self.color_modifier,
            "companion_color_modifier": self.companion_color_modifier,
            "targeting_color": self.targeting_color,
        }


@dataclass
class TargetingSkill(Skill):
    """
    Umiejętność, która wskazuje cel(e) i przelicza je po każdej zmianie.
    """

    @abstractmethod
    def compute_targets(self, context: SkillContext) -> List[Optional[SkillTargetInfo]]:
        """Zwraca cele w kolejności indeksów (None = brak celu)."""
        pass

    def on_activate(self, context: SkillContext) -> None:
        self.apply_presentation(context)
        self.refresh(context)

    def on_update(self, context: SkillContext) -> None:
        self.refresh(context)

    def refresh(self, context: SkillContext) -> None:
        """Przelicza cele i zapisuje je w cache managera."""
        targets = [t for t in self.compute_targets(context) if t is not None]
        for target in targets:
            target.metadata.setdefault("source_hex_id", context.hex_id)
        context.manager.replace_targets(context.character_id, context.team, targets)
