"""Application service: Reserve / Release Stock use cases.

Entry points for order reservations.  The ledger never decides
reservations itself; it only keeps ``available`` consistent with them.
"""

from __future__ import annotations

from stockledger.application.dto import BalanceDTO
from stockledger.application.lookup import material_by_code
from stockledger.domain.repository.material_repository import MaterialRepository
from stockledger.domain.service.stock_ledger import StockLedger


class ReserveStockHandler:

    def __init__(self, material_repo: MaterialRepository, ledger: StockLedger) -> None:
        self._material_repo = material_repo
        self._ledger = ledger

    def handle(self, material_code: str, quantity: str) -> BalanceDTO:
        material = material_by_code(self._material_repo, material_code)
        balance = self._ledger.reserve(material.id, quantity)
        return BalanceDTO.from_domain(material, balance)


class ReleaseStockHandler:

    def __init__(self, material_repo: MaterialRepository, ledger: StockLedger) -> None:
        self._material_repo = material_repo
        self._ledger = ledger

    def handle(self, material_code: str, quantity: str) -> BalanceDTO:
        material = material_by_code(self._material_repo, material_code)
        balance = self._ledger.release(material.id, quantity)
        return BalanceDTO.from_domain(material, balance)
