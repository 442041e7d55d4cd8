"""Abstract repository for the stock ledger.

The ledger is two things kept in lockstep: an append-only log of
StockMovement records and one StockBalance row per material.  The only
way to add movements is ``commit()``, which writes them together with the
balances they changed, so a reader can never see one without the other.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from stockledger.domain.model.balance import StockBalance
from stockledger.domain.model.movement import StockMovement


class LedgerRepository(ABC):

    # --- Balances -------------------------------------------------------------

    @abstractmethod
    def get_balance(self, material_id: str) -> StockBalance | None:
        """Return a detached copy of the material's balance, or None."""

    @abstractmethod
    def list_balances(self) -> list[StockBalance]:
        """Return detached copies of every balance."""

    @abstractmethod
    def save_balance(self, balance: StockBalance) -> None:
        """Persist a balance without adding movements.

        Used to open a zeroed balance (version 0), for reservations and
        for rebuilds.  An existing balance must arrive with its version
        bumped by exactly one, otherwise ConcurrencyConflictError.
        """

    # --- Movements ------------------------------------------------------------

    @abstractmethod
    def commit(
        self,
        movements: Sequence[StockMovement],
        balances: Sequence[StockBalance],
    ) -> list[StockMovement]:
        """Atomically append *movements* and store *balances*.

        Assigns monotonically increasing IDs to the movements (in the
        given order) and returns the stored records.  Each balance must
        carry its stored version plus one, otherwise nothing is written
        and ConcurrencyConflictError is raised.
        """

    @abstractmethod
    def movements_for(self, material_id: str) -> list[StockMovement]:
        """Every movement of a material, oldest first (recorded_at, id)."""

    @abstractmethod
    def history(
        self, material_id: str, limit: int, offset: int = 0
    ) -> list[StockMovement]:
        """One page of a material's movements, most recent first.

        Ordered by ``recorded_at`` descending, ties by ``id`` descending.
        """

    @abstractmethod
    def movements_by_reference(self, source_reference: str) -> list[StockMovement]:
        """Every movement recorded for a business document, oldest first."""
