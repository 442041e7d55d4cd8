"""Application service: Show Stock use case (query).

Reads balances only, never the movement log.
"""

from __future__ import annotations

from stockledger.application.dto import BalanceDTO
from stockledger.application.lookup import material_by_code
from stockledger.domain.repository.material_repository import MaterialRepository
from stockledger.domain.service.stock_ledger import StockLedger


class ShowStockHandler:

    def __init__(self, material_repo: MaterialRepository, ledger: StockLedger) -> None:
        self._material_repo = material_repo
        self._ledger = ledger

    def handle(self, material_code: str | None = None) -> list[BalanceDTO]:
        if material_code is not None:
            materials = [material_by_code(self._material_repo, material_code)]
        else:
            materials = sorted(self._material_repo.list_all(), key=lambda m: m.code)
        return [
            BalanceDTO.from_domain(material, self._ledger.balance(material.id))
            for material in materials
        ]
