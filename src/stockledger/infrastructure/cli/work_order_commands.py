"""CLI commands for production work orders."""

from __future__ import annotations

import click

from stockledger.application.cancel_work_order import CancelWorkOrderHandler
from stockledger.application.complete_work_order import CompleteWorkOrderHandler
from stockledger.application.create_work_order import CreateWorkOrderHandler
from stockledger.application.start_work_order import StartWorkOrderHandler
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import (
    material_repository,
    stock_ledger,
    work_order_repository,
)
from stockledger.infrastructure.cli.output import money, qty, to_click_error


@click.command("create")
@click.option("--number", required=True, help="Work order number.")
@click.option("--material", "material_code", default=None, help="Material consumed.")
@click.option("--planned", default=None, help="Planned quantity.")
@click.option("--notes", default="", help="Free-text notes.")
def work_order_create(
    number: str, material_code: str | None, planned: str | None, notes: str
) -> None:
    """Create a planned work order."""
    handler = CreateWorkOrderHandler(
        work_order_repo=work_order_repository(),
        material_repo=material_repository(),
    )

    try:
        work_order = handler.handle(
            number=number, material_code=material_code, planned_quantity=planned, notes=notes
        )
    except DomainException as exc:
        raise to_click_error(exc)

    click.echo(f"Work order #{work_order.id} {work_order.number} created  (status={work_order.status.value})")


@click.command("start")
@click.option("--id", "work_order_id", required=True, type=int, help="Work order ID.")
def work_order_start(work_order_id: int) -> None:
    """Start a planned work order."""
    handler = StartWorkOrderHandler(work_order_repo=work_order_repository())

    try:
        handler.handle(work_order_id)
    except DomainException as exc:
        raise to_click_error(exc)

    click.echo(f"Work order #{work_order_id} started.")


@click.command("cancel")
@click.option("--id", "work_order_id", required=True, type=int, help="Work order ID.")
def work_order_cancel(work_order_id: int) -> None:
    """Cancel a work order that has not been completed."""
    handler = CancelWorkOrderHandler(work_order_repo=work_order_repository())

    try:
        handler.handle(work_order_id)
    except DomainException as exc:
        raise to_click_error(exc)

    click.echo(f"Work order #{work_order_id} cancelled.")


@click.command("complete")
@click.option("--id", "work_order_id", required=True, type=int, help="Work order ID.")
@click.option("--produced", required=True, help="Quantity of material consumed.")
@click.option("--byproduct", default="0", show_default=True, help="Recovered offcuts returned to stock.")
def work_order_complete(work_order_id: int, produced: str, byproduct: str) -> None:
    """Complete an in-progress work order (consumes stock, returns offcuts)."""
    handler = CompleteWorkOrderHandler(
        work_order_repo=work_order_repository(),
        ledger=stock_ledger(),
    )

    try:
        result = handler.handle(
            work_order_id, produced_quantity=produced, byproduct_quantity=byproduct
        )
    except DomainException as exc:
        raise to_click_error(exc)

    click.echo(f"Work order {result.work_order_number} completed.")
    for m in result.movements:
        click.echo(
            f"  #{m.id} {m.kind:<17} {qty(m.quantity):>12} @ {money(m.unit_cost)}"
        )
