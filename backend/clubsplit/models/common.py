"""Common enums, shared types, and utilities for ClubSplit models."""

import math
from decimal import Decimal, InvalidOperation
from enum import StrEnum
from typing import Annotated, Any

from pydantic import BeforeValidator, PlainSerializer


def _validate_money(value: Any) -> Decimal:
    """Convert JSON numbers and strings to Decimal without float artefacts."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid money value: {value!r}")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"Invalid money value: {value!r}")
        # repr() gives the shortest string that round-trips, so 0.1 -> "0.1"
        amount = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(f"Invalid money value: {value!r}") from None
    else:
        raise ValueError(f"Invalid money value: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"Invalid money value: {value!r}")
    return amount


# Annotated type for monetary amounts.
# Accepts int, float, str or Decimal on input, always serializes as a JSON number.
Money = Annotated[
    Decimal,
    BeforeValidator(_validate_money),
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]


class ExpenseStatus(StrEnum):
    """Expense lifecycle states."""
    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    SETTLED = "settled"


class ExpenseCategory(StrEnum):
    """What an expense was spent on."""
    ACCOMMODATION = "accommodation"
    FOOD = "food"
    TRANSPORT = "transport"
    ACTIVITIES = "activities"
    EQUIPMENT = "equipment"
    OTHER = "other"
