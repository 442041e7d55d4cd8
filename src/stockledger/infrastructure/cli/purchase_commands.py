"""CLI commands for supplier purchases."""

from __future__ import annotations

import click

from stockledger.application.create_purchase import CreatePurchaseHandler
from stockledger.application.dto import PurchaseLineSpec
from stockledger.application.receive_purchase import ReceivePurchaseHandler
from stockledger.application.show_purchase import ShowPurchaseHandler
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import (
    material_repository,
    purchase_repository,
    stock_ledger,
)
from stockledger.infrastructure.cli.output import money, qty, to_click_error


def _parse_line(raw: str, stock: bool) -> PurchaseLineSpec:
    """Parse 'CODE:QTY:PRICE' (stock) or 'Designation:QTY:PRICE' (service)."""
    parts = raw.rsplit(":", 2)
    if len(parts) != 3 or not parts[0].strip():
        expected = "Code:Qty:Price" if stock else "Designation:Qty:Price"
        raise click.BadParameter(f"Invalid line '{raw}'. Expected '{expected}'.")
    name, quantity, price = (p.strip() for p in parts)
    if stock:
        return PurchaseLineSpec(
            designation="", quantity=quantity, unit_price=price, material_code=name
        )
    return PurchaseLineSpec(designation=name, quantity=quantity, unit_price=price)


@click.command("create")
@click.option("--number", required=True, help="Purchase number.")
@click.option("--supplier", required=True, help="Supplier name.")
@click.option("--line", "stock_lines", multiple=True, help="Stock line 'Code:Qty:Price' (repeatable).")
@click.option("--service", "service_lines", multiple=True, help="Non-stock line 'Designation:Qty:Price' (repeatable).")
def purchase_create(
    number: str,
    supplier: str,
    stock_lines: tuple[str, ...],
    service_lines: tuple[str, ...],
) -> None:
    """Create a purchase in ORDERED status."""
    specs = [_parse_line(raw, stock=True) for raw in stock_lines]
    specs += [_parse_line(raw, stock=False) for raw in service_lines]

    handler = CreatePurchaseHandler(
        purchase_repo=purchase_repository(),
        material_repo=material_repository(),
    )

    try:
        purchase = handler.handle(number=number, supplier=supplier, line_specs=specs)
    except DomainException as exc:
        raise to_click_error(exc)

    click.echo(
        f"Purchase #{purchase.id} {purchase.number} created  "
        f"(status={purchase.status.value}, total {money(purchase.total)})"
    )


@click.command("receive")
@click.option("--id", "purchase_id", required=True, type=int, help="Purchase ID.")
def purchase_receive(purchase_id: int) -> None:
    """Receive an ordered purchase into stock."""
    handler = ReceivePurchaseHandler(
        purchase_repo=purchase_repository(),
        ledger=stock_ledger(),
    )

    try:
        result = handler.handle(purchase_id)
    except DomainException as exc:
        raise to_click_error(exc)

    click.echo(f"Purchase {result.purchase_number} received  (status={result.status})")
    for line, movement_id in sorted(result.received_lines.items()):
        click.echo(f"  line {line}: movement #{movement_id}")
    if result.skipped_lines:
        skipped = ", ".join(str(n) for n in result.skipped_lines)
        click.echo(f"  non-stock lines skipped: {skipped}")


@click.command("show")
@click.option("--id", "purchase_id", required=True, type=int, help="Purchase ID.")
def purchase_show(purchase_id: int) -> None:
    """Show a purchase and its lines."""
    handler = ShowPurchaseHandler(
        purchase_repo=purchase_repository(),
        material_repo=material_repository(),
    )

    try:
        dto = handler.handle(purchase_id)
    except DomainException as exc:
        raise to_click_error(exc)

    click.echo(f"Purchase #{dto.id} {dto.number}  (status={dto.status})")
    click.echo(f"Supplier:  {dto.supplier}")
    click.echo(f"Ordered:   {dto.ordered_at}")
    if dto.delivered_at:
        click.echo(f"Delivered: {dto.delivered_at}")
    click.echo()
    click.echo(f"  {'#':>3} {'Material':<12} {'Designation':<28} {'Qty':>10} {'Price':>10} {'Amount':>12}")
    click.echo(f"  {'-'*80}")
    for line in dto.lines:
        click.echo(
            f"  {line.line_number:>3} {line.material_code or '-':<12} {line.designation:<28} "
            f"{qty(line.quantity):>10} {money(line.unit_price):>10} {money(line.line_amount):>12}"
        )
    click.echo(f"  {'-'*80}")
    click.echo(f"  {'Total':<56} {money(dto.total):>22}")
