"""Expense domain models for ClubSplit.

Mirrors the shape supplied by the expense data source:
``{id, amount, paid_by, participants: [{user_id, share_amount, is_paid}]}``.
Amounts are not range-checked here; integrity problems are reported by
``validate_expense_integrity`` instead.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from clubsplit.models.common import ExpenseCategory, ExpenseStatus, Money


class ExpenseParticipant(BaseModel):
    """A user's share of a single expense."""

    user_id: str
    share_amount: Money
    is_paid: bool = False


class Expense(BaseModel):
    """A shared expense paid by one user and split between participants."""

    id: str
    amount: Money
    paid_by: str
    participants: list[ExpenseParticipant] = Field(default_factory=list)
    title: str = ""
    status: ExpenseStatus = ExpenseStatus.PENDING
    category: ExpenseCategory = ExpenseCategory.OTHER
    event_id: Optional[str] = None


class ExpenseBalance(BaseModel):
    """A user's totals across a set of expenses."""

    user_id: str
    total_owed: Money = Decimal("0")
    total_owed_to: Money = Decimal("0")
    net_balance: Money = Decimal("0")


class ExpenseValidation(BaseModel):
    """Result of an expense integrity check."""

    expense_id: str
    is_valid: bool
    errors: list[str] = Field(default_factory=list)
