import click

from stockledger.infrastructure.bootstrap import setup_logging
from stockledger.infrastructure.cli.material_commands import material_add, material_list
from stockledger.infrastructure.cli.purchase_commands import (
    purchase_create,
    purchase_receive,
    purchase_show,
)
from stockledger.infrastructure.cli.stock_commands import (
    stock_alerts,
    stock_check,
    stock_history,
    stock_move,
    stock_release,
    stock_reserve,
    stock_show,
)
from stockledger.infrastructure.cli.work_order_commands import (
    work_order_cancel,
    work_order_complete,
    work_order_create,
    work_order_start,
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug logging to stderr.")
def cli(verbose: bool) -> None:
    """Stock ledger - materials, movements and weighted-average valuation"""
    setup_logging(verbose)


@cli.group()
def material() -> None:
    """Manage the material catalog."""


@cli.group()
def stock() -> None:
    """Inspect and move stock."""


@cli.group("workorder")
def work_order() -> None:
    """Manage production work orders."""


@cli.group()
def purchase() -> None:
    """Manage supplier purchases."""


# Register subcommands
material.add_command(material_add)
material.add_command(material_list)
stock.add_command(stock_alerts)
stock.add_command(stock_check)
stock.add_command(stock_history)
stock.add_command(stock_move)
stock.add_command(stock_release)
stock.add_command(stock_reserve)
stock.add_command(stock_show)
work_order.add_command(work_order_cancel)
work_order.add_command(work_order_complete)
work_order.add_command(work_order_create)
work_order.add_command(work_order_start)
purchase.add_command(purchase_create)
purchase.add_command(purchase_receive)
purchase.add_command(purchase_show)
