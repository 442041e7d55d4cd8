"""CLI commands for stock: balances, movements, reservations, checks."""

from __future__ import annotations

import click

from stockledger.application.check_ledger import CheckLedgerHandler
from stockledger.application.record_movement import RecordMovementHandler
from stockledger.application.reserve_stock import ReleaseStockHandler, ReserveStockHandler
from stockledger.application.show_history import ShowHistoryHandler
from stockledger.application.show_stock import ShowStockHandler
from stockledger.application.show_stock_alerts import ShowStockAlertsHandler
from stockledger.domain.exceptions import DomainException
from stockledger.domain.model.movement import MovementKind
from stockledger.infrastructure.bootstrap import material_repository, stock_ledger
from stockledger.infrastructure.cli.output import money, qty, to_click_error

_KINDS = [kind.value.lower() for kind in MovementKind]


@click.command("show")
@click.option("--material", "material_code", default=None, help="Material code (all if omitted).")
def stock_show(material_code: str | None) -> None:
    """Show on-hand, reserved and available stock with its valuation."""
    handler = ShowStockHandler(material_repo=material_repository(), ledger=stock_ledger())

    try:
        lines = handler.handle(material_code)
    except DomainException as exc:
        raise to_click_error(exc)

    if not lines:
        click.echo("No materials found.")
        return

    click.echo(
        f"{'Code':<12} {'Unit':<6} {'On hand':>12} {'Reserved':>12} "
        f"{'Available':>12} {'Avg cost':>10} {'Value':>12}"
    )
    click.echo("-" * 82)
    for line in lines:
        click.echo(
            f"{line.code:<12} {line.unit:<6} {qty(line.on_hand):>12} "
            f"{qty(line.reserved):>12} {qty(line.available):>12} "
            f"{money(line.weighted_average_cost):>10} {money(line.stock_value):>12}"
        )


@click.command("history")
@click.option("--material", "material_code", required=True, help="Material code.")
@click.option("--limit", default=20, show_default=True, type=int, help="Page size.")
@click.option("--offset", default=0, show_default=True, type=int, help="Movements to skip.")
def stock_history(material_code: str, limit: int, offset: int) -> None:
    """List a material's movements, most recent first."""
    handler = ShowHistoryHandler(material_repo=material_repository(), ledger=stock_ledger())

    try:
        movements = handler.handle(material_code, limit=limit, offset=offset)
    except DomainException as exc:
        raise to_click_error(exc)

    if not movements:
        click.echo("No movements found.")
        return

    click.echo(
        f"{'ID':>6} {'Recorded':<24} {'Kind':<17} {'Qty':>12} "
        f"{'Unit cost':>10} {'Value':>12}  Reference"
    )
    click.echo("-" * 100)
    for m in movements:
        click.echo(
            f"{m.id:>6} {m.recorded_at:<24} {m.kind:<17} {qty(m.quantity):>12} "
            f"{money(m.unit_cost):>10} {money(m.movement_value):>12}  {m.source_reference}"
        )


@click.command("move")
@click.option("--material", "material_code", required=True, help="Material code.")
@click.option("--kind", required=True, type=click.Choice(_KINDS, case_sensitive=False))
@click.option(
    "--quantity",
    required=True,
    help="Magnitude for entry/exit/byproduct_return; signed delta for adjustment.",
)
@click.option("--cost", default=None, help="Unit cost (required for entry/byproduct_return).")
@click.option("--reference", default="", help="Originating document reference.")
@click.option("--comment", default="", help="Free-text comment.")
def stock_move(
    material_code: str,
    kind: str,
    quantity: str,
    cost: str | None,
    reference: str,
    comment: str,
) -> None:
    """Record a manual stock movement."""
    handler = RecordMovementHandler(material_repo=material_repository(), ledger=stock_ledger())

    try:
        movement = handler.handle(
            material_code=material_code,
            kind=kind,
            quantity=quantity,
            unit_cost=cost,
            source_reference=reference,
            comment=comment,
        )
    except DomainException as exc:
        raise to_click_error(exc)

    click.echo(
        f"Movement #{movement.id} recorded: {movement.kind} {qty(movement.quantity)} "
        f"@ {money(movement.unit_cost)} (value {money(movement.movement_value)})"
    )


@click.command("reserve")
@click.option("--material", "material_code", required=True, help="Material code.")
@click.option("--quantity", required=True, help="Quantity to reserve.")
def stock_reserve(material_code: str, quantity: str) -> None:
    """Reserve available stock for an open order."""
    handler = ReserveStockHandler(material_repo=material_repository(), ledger=stock_ledger())

    try:
        line = handler.handle(material_code, quantity)
    except DomainException as exc:
        raise to_click_error(exc)

    click.echo(f"{line.code}: reserved {qty(line.reserved)}, available {qty(line.available)}")


@click.command("release")
@click.option("--material", "material_code", required=True, help="Material code.")
@click.option("--quantity", required=True, help="Quantity to release.")
def stock_release(material_code: str, quantity: str) -> None:
    """Release previously reserved stock."""
    handler = ReleaseStockHandler(material_repo=material_repository(), ledger=stock_ledger())

    try:
        line = handler.handle(material_code, quantity)
    except DomainException as exc:
        raise to_click_error(exc)

    click.echo(f"{line.code}: reserved {qty(line.reserved)}, available {qty(line.available)}")


@click.command("check")
@click.option("--repair", is_flag=True, default=False, help="Rebuild drifting balances.")
def stock_check(repair: bool) -> None:
    """Verify every balance against a replay of its movements."""
    handler = CheckLedgerHandler(material_repo=material_repository(), ledger=stock_ledger())
    try:
        lines = handler.handle(repair=repair)
    except DomainException as exc:
        raise to_click_error(exc) from exc

    drifting = 0
    for line in lines:
        if line.consistent:
            click.echo(f"{line.code:<12} OK ({line.movement_count} movements)")
            continue
        drifting += 1
        status = "REPAIRED" if line.repaired else "DRIFT"
        click.echo(f"{line.code:<12} {status}")
        for name, (stored, rebuilt) in line.differences.items():
            click.echo(f"    {name}: stored {stored}, replay {rebuilt}")

    if drifting and not repair:
        raise click.ClickException(
            f"{drifting} balance(s) differ from their movement log; rerun with --repair"
        )


@click.command("alerts")
def stock_alerts() -> None:
    """List materials that are out of stock or below their alert threshold."""
    handler = ShowStockAlertsHandler(material_repo=material_repository(), ledger=stock_ledger())
    try:
        alerts = handler.handle()
    except DomainException as exc:
        raise to_click_error(exc) from exc

    if not alerts:
        click.echo("No stock alerts.")
        return

    for alert in alerts:
        threshold = f" (threshold {qty(alert.threshold)})" if alert.threshold is not None else ""
        click.echo(
            f"{alert.level.value:<13} {alert.code:<12} {alert.designation:<30} "
            f"available {qty(alert.available)}{threshold}"
        )
