"""Application service: Show Stock Alerts use case (query).

A material is OUT_OF_STOCK when nothing is available, LOW when what is
available has dropped to its alert threshold.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from stockledger.domain.model.value_objects import ZERO
from stockledger.domain.repository.material_repository import MaterialRepository
from stockledger.domain.service.stock_ledger import StockLedger


class AlertLevel(Enum):
    OUT_OF_STOCK = "OUT_OF_STOCK"
    LOW = "LOW"


@dataclass(frozen=True)
class StockAlertDTO:
    code: str
    designation: str
    available: Decimal
    threshold: Decimal | None
    level: AlertLevel


class ShowStockAlertsHandler:

    def __init__(self, material_repo: MaterialRepository, ledger: StockLedger) -> None:
        self._material_repo = material_repo
        self._ledger = ledger

    def handle(self) -> list[StockAlertDTO]:
        alerts: list[StockAlertDTO] = []
        for material in sorted(self._material_repo.list_all(), key=lambda m: m.code):
            available = self._ledger.available(material.id)
            if available <= ZERO:
                level = AlertLevel.OUT_OF_STOCK
            elif material.alert_threshold is not None and available <= material.alert_threshold:
                level = AlertLevel.LOW
            else:
                continue
            alerts.append(
                StockAlertDTO(
                    code=material.code,
                    designation=material.designation,
                    available=available,
                    threshold=material.alert_threshold,
                    level=level,
                )
            )
        return alerts
