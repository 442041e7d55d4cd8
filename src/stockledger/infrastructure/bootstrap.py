"""Composition root - wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.

Configuration comes from the environment:

- ``STOCKLEDGER_DATA_DIR``: where the JSON files live (default: ``data/``
  at the repository root).
- ``STOCKLEDGER_LOG_LEVEL``: logging level name (default: ``WARNING``).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from stockledger.domain.service.stock_ledger import StockLedger
from stockledger.infrastructure.persistence.json_ledger_repository import (
    JsonLedgerRepository,
)
from stockledger.infrastructure.persistence.json_material_repository import (
    JsonMaterialRepository,
)
from stockledger.infrastructure.persistence.json_purchase_repository import (
    JsonPurchaseRepository,
)
from stockledger.infrastructure.persistence.json_work_order_repository import (
    JsonWorkOrderRepository,
)
from stockledger.logging_config import configure_logging

# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


def data_dir() -> Path:
    configured = os.environ.get("STOCKLEDGER_DATA_DIR")
    return Path(configured) if configured else _DEFAULT_DATA_DIR


def log_level(verbose: bool = False) -> int:
    if verbose:
        return logging.DEBUG
    name = os.environ.get("STOCKLEDGER_LOG_LEVEL", "WARNING").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING


def setup_logging(verbose: bool = False) -> None:
    configure_logging(level=log_level(verbose))


def material_repository() -> JsonMaterialRepository:
    return JsonMaterialRepository(data_dir() / "materials.json")


def ledger_repository() -> JsonLedgerRepository:
    return JsonLedgerRepository(data_dir() / "ledger.json")


def work_order_repository() -> JsonWorkOrderRepository:
    return JsonWorkOrderRepository(data_dir() / "work_orders.json")


def purchase_repository() -> JsonPurchaseRepository:
    return JsonPurchaseRepository(data_dir() / "purchases.json")


def stock_ledger() -> StockLedger:
    return StockLedger(
        ledger_repo=ledger_repository(),
        material_repo=material_repository(),
    )
