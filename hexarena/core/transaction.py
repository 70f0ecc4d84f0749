"""
Transakcje - atomowe, wieloetapowe zmiany siatki z rollbackiem.

Transakcja to uporządkowana lista kroków (forward, rollback):

    txn = Transaction("place", logger)
    txn.step("place", lambda: grid.perform_place(12, 58, Team.ALLY),
                      lambda: grid.perform_remove(12))
    txn.step("activate", lambda: manager.activate(58, 12, Team.ALLY),
                         lambda: manager.deactivate(58, Team.ALLY))
    ok = txn.run()

Przebieg run():
═══════════════════════════════════════════════════════════════════

    1. Wykonuj kroki forward po kolei
    2. Krok zwraca False (lub rzuca GridError) -> wykonaj rollbacki
       kroków JUŻ ZAKOŃCZONYCH w odwrotnej kolejności, zwróć False
    3. Inny wyjątek -> rollback jak wyżej, wyjątek leci dalej
    4. Wszystkie kroki OK -> commit, zwróć True

    revert() cofa zatwierdzoną transakcję w całości.

Kontrakt kroku:
    Krok forward, który zwraca False, nie może zostawić po sobie zmian.
    Dzięki temu rollback dotyczy wyłącznie zakończonych kroków.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Optional, TYPE_CHECKING

from .errors import GridError

if TYPE_CHECKING:
    from ..events.event_logger import EventLogger


@dataclass
class TransactionStep:
    """
    Pojedynczy krok transakcji.

    Attributes:
        name: Nazwa kroku (do logów)
        forward: Operacja; True = sukces
        rollback: Cofnięcie operacji (None = nic do cofania)
    """
    name: str
    forward: Callable[[], bool]
    rollback: Optional[Callable[[], None]] = None


@dataclass
class Transaction:
    """
    Atomowa sekwencja kroków z automatycznym rollbackiem.

    Attributes:
        name: Nazwa transakcji (place, remove, move, swap...)
        logger: Logger zdarzeń (opcjonalny)
        steps: Kroki w kolejności wykonania
        failed_step: Nazwa kroku, który zawiódł (po nieudanym run())
        failure_reason: Komunikat GridError z kroku (jeśli był)
    """
    name: str
    logger: Optional["EventLogger"] = None
    steps: List[TransactionStep] = field(default_factory=list)
    failed_step: Optional[str] = None
    failure_reason: Optional[str] = None

    def step(
        self,
        name: str,
        forward: Callable[[], bool],
        rollback: Optional[Callable[[], None]] = None,
    ) -> Transaction:
        """Dodaje krok; zwraca self dla łańcuchowania."""
        self.steps.append(TransactionStep(name, forward, rollback))
        return self

    def run(self) -> bool:
        """
        Wykonuje transakcję.

        Returns:
            bool: True = commit, False = wszystko wycofane

        Raises:
            Exception: Wyjątki spoza GridError są propagowane po rollbacku
        """
        completed: List[TransactionStep] = []
        self.failed_step = None
        self.failure_reason = None

        for current in self.steps:
            try:
                ok = current.forward()
            except GridError as exc:
                ok = False
                self.failure_reason = str(exc)
            except Exception:
                self.failed_step = current.name
                self._rollback(completed)
                raise

            if not ok:
                self.failed_step = current.name
                self._rollback(completed)
                if self.logger:
                    self.logger.log_rollback(self.name, self.failed_step, self.failure_reason)
                return False

            completed.append(current)

        if self.logger:
            self.logger.log_commit(self.name, [s.name for s in self.steps])
        return True

    def revert(self) -> None:
        """
        Cofa zatwierdzoną transakcję (wszystkie kroki, od końca).

        Dla transakcji zagnieżdżonych w aktywacji umiejętności - rollback
        aktywacji musi cofnąć także ich skutki.
        """
        self._rollback(self.steps)
        if self.logger:
            self.logger.log_rollback(self.name, "revert", None)

    @staticmethod
    def _rollback(completed: List[TransactionStep]) -> None:
        """
        Cofa zakończone kroki w odwrotnej kolejności.

        Wszystkie rollbacki są wykonywane; pierwszy wyjątek jest
        rzucany dopiero po przejściu całej listy.
        """
        first_error: Optional[BaseException] = None
        for done in reversed(completed):
            if done.rollback is None:
                continue
            try:
                done.rollback()
            except Exception as exc:
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error
