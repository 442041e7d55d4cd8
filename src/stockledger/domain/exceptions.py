"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.

Three families matter to callers:

- ``ValidationError`` subclasses: the input was wrong, fix it and resubmit.
  Nothing was written.
- ``ConcurrencyConflictError``: another writer got there first.  Retry the
  whole logical operation (re-read, recompute, re-apply).
- ``PartialReceiptFailure``: some stock was already recorded.  Needs manual
  remediation; the core never compensates automatically.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""

    code = "domain_error"
    retryable = False


class ValidationError(DomainException):
    """A business rule or invariant was violated."""

    code = "validation_error"


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    code = "not_found"


class InvalidQuantityError(ValidationError):
    """A quantity is zero, negative, or not a number where a magnitude is required."""

    code = "invalid_quantity"


class InvalidCostError(ValidationError):
    """A unit cost is negative, missing, or not a number."""

    code = "invalid_cost"


class InvalidStateError(ValidationError):
    """A document is not in the workflow state the operation expects."""

    code = "invalid_state"


class UnknownMaterialError(EntityNotFoundError):
    """A material has no stock balance (or does not exist at all)."""

    code = "unknown_material"

    def __init__(self, material_id: str) -> None:
        super().__init__(f"Unknown material '{material_id}'")
        self.material_id = material_id


class ConcurrencyConflictError(DomainException):
    """The stored balance changed between read and write."""

    code = "concurrency_conflict"
    retryable = True

    def __init__(self, material_id: str, expected: int, actual: int) -> None:
        super().__init__(
            f"Stock balance for material '{material_id}' was modified concurrently "
            f"(expected version {expected}, found {actual})"
        )
        self.material_id = material_id
        self.expected = expected
        self.actual = actual


class PartialReceiptFailure(DomainException):
    """A purchase receipt recorded some lines, then a later line failed.

    The purchase stays in its previous state.  ``recorded_lines`` maps each
    successfully received line number to the id of its stock movement.
    """

    code = "partial_receipt"

    def __init__(
        self,
        purchase_number: str,
        recorded_lines: dict[int, int],
        failed_line: int,
        cause: DomainException,
    ) -> None:
        recorded = ", ".join(str(n) for n in recorded_lines) or "none"
        super().__init__(
            f"Purchase {purchase_number}: line {failed_line} failed ({cause}); "
            f"lines already received: {recorded}"
        )
        self.purchase_number = purchase_number
        self.recorded_lines = dict(recorded_lines)
        self.failed_line = failed_line
        self.cause = cause
