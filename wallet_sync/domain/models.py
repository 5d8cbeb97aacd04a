"""Typed domain models shared across runtime layers."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any


@dataclass(frozen=True)
class HealthStatus:
    """Health response contract used by health-check surfaces.

    Attributes:
        status: Overall status text for service health.
        detail: Additional message suitable for operational diagnostics.
    """

    status: str
    detail: str


@dataclass(frozen=True)
class TransactionRecord:
    """One batch file row built from an Edenred account movement.

    Attributes:
        date: Movement timestamp exactly as returned by Edenred.
        note: Movement description.
        amount: Income column value, zero for expenses.
        expense: Expense column value (negative), zero for income.
    """

    date: str
    note: str
    amount: Decimal
    expense: Decimal

    @property
    def is_expense(self) -> bool:
        return self.expense != 0

    def record_to_row(self) -> tuple[str, str, str, str]:
        """Render the record in batch file column order.

        Returns:
            tuple[str, str, str, str]: `date`, `note`, `amount`, `expense` cells.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return (
            self.date,
            self.note,
            domain_format_amount(self.amount),
            domain_format_amount(self.expense),
        )


def domain_format_amount(value: Decimal) -> str:
    """Format an amount without trailing zeros or exponent notation.

    Args:
        value: Amount value.

    Returns:
        str: Plain decimal text, `50` for `50.00` and `-20.5` for `-20.50`.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if value == 0:
        return "0"
    return format(value.normalize(), "f")


def domain_parse_amount(raw_amount: Any) -> Decimal:
    """Parse a JSON amount into a Decimal.

    Args:
        raw_amount: Amount as decoded from JSON (int, float or numeric string).

    Returns:
        Decimal: Parsed amount.

    Raises:
        ValueError: Raised when the amount is missing or not numeric.
    """

    if raw_amount is None or isinstance(raw_amount, bool):
        raise ValueError(f"movement amount is not numeric: {raw_amount!r}")
    try:
        parsed_amount = Decimal(str(raw_amount).strip())
    except InvalidOperation as error:
        raise ValueError(f"movement amount is not numeric: {raw_amount!r}") from error
    if not parsed_amount.is_finite():
        raise ValueError(f"movement amount is not finite: {raw_amount!r}")
    return parsed_amount


def domain_map_movement_to_record(movement: Mapping[str, Any]) -> TransactionRecord:
    """Map one Edenred account movement to a batch file record.

    Non-negative amounts fill the `amount` column and leave `expense` at zero.
    Negative amounts fill the `expense` column with the signed value and leave
    `amount` at zero.

    Args:
        movement: Raw movement object from the Edenred movement list.

    Returns:
        TransactionRecord: Mapped record.

    Raises:
        ValueError: Raised when the movement lacks a date or a numeric amount.
    """

    transaction_date = movement.get("transactionDate")
    if not isinstance(transaction_date, str) or not transaction_date.strip():
        raise ValueError("movement transactionDate must be a non-empty string")

    amount = domain_parse_amount(movement.get("amount"))
    note = movement.get("transactionName")
    return TransactionRecord(
        date=transaction_date,
        note="" if note is None else str(note),
        amount=amount if amount >= 0 else Decimal(0),
        expense=amount if amount < 0 else Decimal(0),
    )
