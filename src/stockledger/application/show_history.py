"""Application service: Show Movement History use case (query)."""

from __future__ import annotations

from stockledger.application.dto import MovementDTO
from stockledger.application.lookup import material_by_code
from stockledger.domain.repository.material_repository import MaterialRepository
from stockledger.domain.service.stock_ledger import StockLedger


class ShowHistoryHandler:

    def __init__(self, material_repo: MaterialRepository, ledger: StockLedger) -> None:
        self._material_repo = material_repo
        self._ledger = ledger

    def handle(self, material_code: str, limit: int = 20, offset: int = 0) -> list[MovementDTO]:
        """Most recent movements first."""
        material = material_by_code(self._material_repo, material_code)
        return [
            MovementDTO.from_domain(m)
            for m in self._ledger.history(material.id, limit=limit, offset=offset)
        ]
