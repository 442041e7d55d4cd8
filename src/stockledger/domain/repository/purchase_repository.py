"""Abstract repository for the Purchase aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.purchase import Purchase


class PurchaseRepository(ABC):

    @abstractmethod
    def get_by_id(self, purchase_id: int) -> Purchase | None:
        """Return a purchase by its ID, or None if not found."""

    @abstractmethod
    def get_by_number(self, number: str) -> Purchase | None:
        """Return a purchase by its number (case-insensitive), or None."""

    @abstractmethod
    def save(self, purchase: Purchase) -> None:
        """Persist a new or updated purchase (assigns an ID if missing)."""
