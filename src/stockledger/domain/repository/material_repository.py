"""Abstract repository for the Material aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, in-memory) live in the
infrastructure layer and in the test fakes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.material import Material


class MaterialRepository(ABC):

    @abstractmethod
    def get_by_id(self, material_id: str) -> Material | None:
        """Return a material by its ID, or None if not found."""

    @abstractmethod
    def get_by_code(self, code: str) -> Material | None:
        """Return a material by its code (case-insensitive), or None."""

    @abstractmethod
    def list_all(self) -> list[Material]:
        """Return every material in the catalog."""

    @abstractmethod
    def save(self, material: Material) -> None:
        """Persist a new or updated material."""
