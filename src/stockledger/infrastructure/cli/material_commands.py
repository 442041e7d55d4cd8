"""CLI commands for the material catalog."""

from __future__ import annotations

import click

from stockledger.application.add_material import AddMaterialHandler
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import material_repository, stock_ledger
from stockledger.infrastructure.cli.output import qty, to_click_error


@click.command("add")
@click.option("--code", required=True, help="Material code (unique).")
@click.option("--designation", required=True, help="Material description.")
@click.option("--unit", required=True, help="Unit of measure (e.g. m2, ml, kg, pcs).")
@click.option("--threshold", default=None, help="Low-stock alert threshold.")
def material_add(code: str, designation: str, unit: str, threshold: str | None) -> None:
    """Add a material to the catalog (opens an empty stock balance)."""
    handler = AddMaterialHandler(
        material_repo=material_repository(),
        ledger=stock_ledger(),
    )

    try:
        material = handler.handle(
            code=code, designation=designation, unit=unit, alert_threshold=threshold
        )
    except DomainException as exc:
        raise to_click_error(exc)

    click.echo(f"Material #{material.id} {material.code} '{material.designation}' added")


@click.command("list")
def material_list() -> None:
    """List all materials in the catalog."""
    materials = material_repository().list_all()

    if not materials:
        click.echo("No materials found.")
        return

    click.echo(f"{'ID':<6} {'Code':<12} {'Designation':<30} {'Unit':<6} {'Alert at':>10}")
    click.echo("-" * 68)
    for m in sorted(materials, key=lambda m: m.code):
        threshold = qty(m.alert_threshold) if m.alert_threshold is not None else ""
        click.echo(f"{m.id:<6} {m.code:<12} {m.designation:<30} {m.unit:<6} {threshold:>10}")
