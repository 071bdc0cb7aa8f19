"""Pydantic models for ClubSplit."""

from clubsplit.models.common import (
    ExpenseCategory,
    ExpenseStatus,
    Money,
)
from clubsplit.models.debt import (
    Debt,
    OptimizationSavings,
    OptimizedTransfer,
    UserBalance,
    UserTransferGroup,
)
from clubsplit.models.expense import (
    Expense,
    ExpenseBalance,
    ExpenseParticipant,
    ExpenseValidation,
)

__all__ = [
    # Enums and types
    "ExpenseCategory",
    "ExpenseStatus",
    "Money",
    # Settlement models
    "Debt",
    "OptimizationSavings",
    "OptimizedTransfer",
    "UserBalance",
    "UserTransferGroup",
    # Expense models
    "Expense",
    "ExpenseBalance",
    "ExpenseParticipant",
    "ExpenseValidation",
]
