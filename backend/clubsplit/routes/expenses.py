"""Expense route handlers.

Endpoints:
    POST /api/expenses/plan         -- Full settlement plan for a set of expenses.
    POST /api/expenses/suggestions  -- Settle-up suggestions for one user.
    POST /api/expenses/validate     -- Integrity checks for a set of expenses.
    POST /api/expenses/settle       -- Record a payment against expenses.
"""

import logging
from typing import Optional

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from clubsplit.config import settings
from clubsplit.models.common import Money
from clubsplit.models.debt import (
    Debt,
    OptimizationSavings,
    OptimizedTransfer,
    UserBalance,
    UserTransferGroup,
)
from clubsplit.models.expense import Expense, ExpenseBalance, ExpenseValidation
from clubsplit.services.settlement_service import SettlementService

logger = logging.getLogger("clubsplit.routes.expenses")

router = APIRouter(prefix="/expenses", tags=["Expenses"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _get_service() -> SettlementService:
    """Build a SettlementService from the current settings."""
    return SettlementService(
        currency_symbol=settings.CURRENCY_SYMBOL,
        epsilon=settings.SETTLEMENT_EPSILON,
        unknown_user_name=settings.UNKNOWN_USER_NAME,
    )


# ---------------------------------------------------------------------------
# Pydantic request / response schemas
# ---------------------------------------------------------------------------

class ExpensesRequest(BaseModel):
    """Request body carrying a list of expenses."""
    expenses: list[Expense] = Field(default_factory=list)
    event_id: Optional[str] = Field(
        None, description="Only consider expenses linked to this event."
    )


class SettlementPlanResponse(BaseModel):
    """Response for POST /api/expenses/plan."""
    debts: list[Debt]
    balances: list[UserBalance]
    transfers: list[OptimizedTransfer]
    savings: OptimizationSavings
    groups: dict[str, UserTransferGroup]


class ExpenseSuggestionsRequest(BaseModel):
    """Request body for POST /api/expenses/suggestions."""
    user_id: str = Field(..., min_length=1)
    expenses: list[Expense] = Field(default_factory=list)
    user_names: dict[str, str] = Field(default_factory=dict)
    event_id: Optional[str] = None


class ExpenseSuggestion(BaseModel):
    """A suggested transfer with the expenses that explain it."""
    from_user_id: str
    to_user_id: str
    amount: Money
    description: str
    expense_ids: list[str]
    affected_expenses: list[str]


class ExpenseSuggestionsResponse(BaseModel):
    """Response for POST /api/expenses/suggestions."""
    user_id: str
    balance: ExpenseBalance
    suggestions: list[ExpenseSuggestion]


class ValidateExpensesResponse(BaseModel):
    """Response for POST /api/expenses/validate."""
    results: list[ExpenseValidation]
    all_valid: bool


class SettleExpensesRequest(BaseModel):
    """Request body for POST /api/expenses/settle."""
    from_user_id: str = Field(..., min_length=1)
    expense_ids: list[str] = Field(default_factory=list)
    expenses: list[Expense] = Field(default_factory=list)


class SettleExpensesResponse(BaseModel):
    """Response for POST /api/expenses/settle."""
    expenses: list[Expense]
    settled_expense_ids: list[str]


# ---------------------------------------------------------------------------
# POST /api/expenses/plan
# ---------------------------------------------------------------------------

@router.post(
    "/plan",
    response_model=SettlementPlanResponse,
    status_code=status.HTTP_200_OK,
    summary="Compute the settlement plan for a set of expenses",
)
async def settlement_plan(body: ExpensesRequest) -> SettlementPlanResponse:
    """Flatten open expenses into debts and settle them.

    Settled expenses are ignored. Returns 400 if a participant share
    cannot form a valid debt.
    """
    result = _get_service().build_settlement_plan(body.expenses, body.event_id)
    return SettlementPlanResponse(**result)


# ---------------------------------------------------------------------------
# POST /api/expenses/suggestions
# ---------------------------------------------------------------------------

@router.post(
    "/suggestions",
    response_model=ExpenseSuggestionsResponse,
    status_code=status.HTTP_200_OK,
    summary="Settle-up suggestions for one user",
)
async def expense_suggestions(
    body: ExpenseSuggestionsRequest,
) -> ExpenseSuggestionsResponse:
    result = _get_service().get_expense_suggestions(
        body.user_id, body.expenses, body.user_names, body.event_id
    )
    return ExpenseSuggestionsResponse(
        user_id=result["user_id"],
        balance=result["balance"],
        suggestions=[ExpenseSuggestion(**s) for s in result["suggestions"]],
    )


# ---------------------------------------------------------------------------
# POST /api/expenses/validate
# ---------------------------------------------------------------------------

@router.post(
    "/validate",
    response_model=ValidateExpensesResponse,
    status_code=status.HTTP_200_OK,
    summary="Check expenses for data problems",
)
async def validate_expenses(body: ExpensesRequest) -> ValidateExpensesResponse:
    result = _get_service().validate_expenses(body.expenses, body.event_id)
    return ValidateExpensesResponse(**result)


# ---------------------------------------------------------------------------
# POST /api/expenses/settle
# ---------------------------------------------------------------------------

@router.post(
    "/settle",
    response_model=SettleExpensesResponse,
    status_code=status.HTTP_200_OK,
    summary="Record a payment against expenses",
)
async def settle_expenses(body: SettleExpensesRequest) -> SettleExpensesResponse:
    """Mark the payer's share paid in each listed expense.

    Expenses whose participants have all paid become settled. Returns 400
    when no expense ids are given and 404 when one is unknown.
    """
    result = _get_service().apply_settlement(
        body.expenses, body.from_user_id, body.expense_ids
    )
    return SettleExpensesResponse(**result)
