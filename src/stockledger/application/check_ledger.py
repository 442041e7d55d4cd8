"""Application service: Check Ledger use case.

Replays every material's movement log and compares the result with the
stored balance.  With ``repair=True`` drifting balances are rebuilt.
"""

from __future__ import annotations

from dataclasses import dataclass

from stockledger.domain.repository.material_repository import MaterialRepository
from stockledger.domain.service.stock_ledger import StockLedger


@dataclass(frozen=True)
class ConsistencyLineDTO:
    code: str
    movement_count: int
    consistent: bool
    differences: dict[str, tuple[str, str]]
    repaired: bool


class CheckLedgerHandler:

    def __init__(self, material_repo: MaterialRepository, ledger: StockLedger) -> None:
        self._material_repo = material_repo
        self._ledger = ledger

    def handle(self, repair: bool = False) -> list[ConsistencyLineDTO]:
        lines: list[ConsistencyLineDTO] = []
        for report in self._ledger.check_all():
            material = self._material_repo.get_by_id(report.material_id)
            repaired = False
            if repair and not report.is_consistent:
                self._ledger.rebuild(report.material_id)
                repaired = True
            lines.append(
                ConsistencyLineDTO(
                    code=material.code if material else report.material_id,
                    movement_count=report.movement_count,
                    consistent=report.is_consistent,
                    differences={
                        name: (str(stored), str(rebuilt))
                        for name, (stored, rebuilt) in report.differences.items()
                    },
                    repaired=repaired,
                )
            )
        return lines
