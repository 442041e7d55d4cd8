"""Shared CLI helpers: number formatting and domain error mapping."""

from __future__ import annotations

from decimal import Decimal

import click

from stockledger.domain.exceptions import DomainException, PartialReceiptFailure


def qty(value: Decimal | None) -> str:
    return "-" if value is None else f"{value:.3f}"


def money(value: Decimal | None) -> str:
    return "-" if value is None else f"{value:.2f}"


def to_click_error(exc: DomainException) -> click.ClickException:
    """Map a domain error to a CLI error with the right call to action."""
    message = str(exc)
    if isinstance(exc, PartialReceiptFailure):
        received = ", ".join(
            f"line {line} -> movement #{movement_id}"
            for line, movement_id in sorted(exc.recorded_lines.items())
        )
        message += (
            f"\nRecorded so far: {received}."
            "\nThe purchase is still ORDERED. Fix the failed line and receive it again;"
            " lines already recorded are skipped."
        )
    elif exc.retryable:
        message += "\nAnother update got there first; run the command again."
    return click.ClickException(message)
