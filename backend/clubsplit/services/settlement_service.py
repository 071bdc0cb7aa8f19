"""Settlement business logic service.

Builds debts from expenses, computes net balances and optimized transfer
plans, produces per-user settle-up suggestions and records payments
against expenses. Stateless: every call works only on the data passed in.
Coordinates the pure functions in cash_flow and expense_math and applies
the configured currency and epsilon.
"""

import logging
from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any, Optional

from fastapi import HTTPException, status
from pydantic import ValidationError

from clubsplit.models.common import ExpenseStatus
from clubsplit.models.debt import (
    Debt,
    OptimizationSavings,
    OptimizedTransfer,
    UserBalance,
    UserTransferGroup,
)
from clubsplit.models.expense import Expense
from clubsplit.services import cash_flow
from clubsplit.services.expense_math import (
    apply_settlement,
    calculate_user_balance,
    expenses_for_event,
    relevant_expense_ids,
    validate_expense_integrity,
)

logger = logging.getLogger("clubsplit.services.settlement")


class SettlementService:
    """Service layer for settlement planning operations."""

    def __init__(
        self,
        currency_symbol: str = cash_flow.DEFAULT_CURRENCY_SYMBOL,
        epsilon: Decimal = cash_flow.SETTLEMENT_EPSILON,
        unknown_user_name: str = cash_flow.UNKNOWN_USER_NAME,
    ) -> None:
        self._currency_symbol = currency_symbol
        self._epsilon = epsilon
        self._unknown_user_name = unknown_user_name

    # ------------------------------------------------------------------
    # Debts
    # ------------------------------------------------------------------

    def build_debts(
        self,
        expenses: Sequence[Expense],
        event_id: Optional[str] = None,
    ) -> list[Debt]:
        """Flatten all non-settled expenses into debts.

        Args:
            expenses: Expenses to flatten.
            event_id: Only flatten expenses linked to this event when given.

        Returns:
            One debt per unpaid, non-payer participant.

        Raises:
            HTTPException 400: A participant share cannot form a valid debt
                (for example a negative share amount).
        """
        scoped = expenses_for_event(expenses, event_id)
        open_expenses = [e for e in scoped if e.status != ExpenseStatus.SETTLED]
        try:
            debts = cash_flow.expenses_to_debts(open_expenses)
        except ValidationError as exc:
            logger.warning("Rejected expense shares: %s", exc.errors()[0]["msg"])
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid participant share: {exc.errors()[0]['msg']}",
            ) from exc

        logger.info(
            "Built %d debts from %d open expenses (%d settled skipped, event=%s)",
            len(debts),
            len(open_expenses),
            len(scoped) - len(open_expenses),
            event_id,
        )
        return debts

    # ------------------------------------------------------------------
    # Balances and transfers
    # ------------------------------------------------------------------

    def compute_balances(self, debts: Sequence[Debt]) -> list[UserBalance]:
        """Net balance per user for the given debts."""
        return cash_flow.calculate_net_balances(debts)

    def optimize(self, debts: Sequence[Debt]) -> list[OptimizedTransfer]:
        """Optimized transfer plan for the given debts."""
        transfers = cash_flow.optimize_settlement(
            debts,
            epsilon=self._epsilon,
            currency_symbol=self._currency_symbol,
        )
        logger.info(
            "Optimized %d debts into %d transfers", len(debts), len(transfers)
        )
        return transfers

    def savings(
        self,
        debts: Sequence[Debt],
        transfers: Sequence[OptimizedTransfer],
    ) -> OptimizationSavings:
        return cash_flow.calculate_optimization_savings(debts, transfers)

    def user_suggestions(
        self,
        user_id: str,
        debts: Sequence[Debt],
        user_names: Mapping[str, str],
    ) -> list[OptimizedTransfer]:
        """Optimized transfers involving user_id, described from their side."""
        return cash_flow.get_settlement_suggestions(
            user_id,
            debts,
            user_names,
            epsilon=self._epsilon,
            currency_symbol=self._currency_symbol,
            unknown_user_name=self._unknown_user_name,
        )

    def group_transfers(
        self, transfers: Sequence[OptimizedTransfer]
    ) -> dict[str, UserTransferGroup]:
        return cash_flow.group_transfers_by_user(transfers)

    # ------------------------------------------------------------------
    # Expense level
    # ------------------------------------------------------------------

    def build_settlement_plan(
        self,
        expenses: Sequence[Expense],
        event_id: Optional[str] = None,
    ) -> dict[str, Any]:
        """Compute the full settlement plan for a set of expenses.

        Args:
            expenses: All expenses of a group.
            event_id: Only settle expenses linked to this event when given.

        Returns:
            A dict with:
            - debts: the flattened debts
            - balances: net balance per user
            - transfers: the optimized transfer list
            - savings: OptimizationSavings for debts vs. transfers
            - groups: transfers grouped per user

        Raises:
            HTTPException 400: A participant share cannot form a valid debt.
        """
        debts = self.build_debts(expenses, event_id)
        transfers = self.optimize(debts)

        return {
            "debts": debts,
            "balances": self.compute_balances(debts),
            "transfers": transfers,
            "savings": self.savings(debts, transfers),
            "groups": self.group_transfers(transfers),
        }

    def get_expense_suggestions(
        self,
        user_id: str,
        expenses: Sequence[Expense],
        user_names: Mapping[str, str],
        event_id: Optional[str] = None,
    ) -> dict[str, Any]:
        """Settle-up suggestions for one user, explained by expense.

        Each suggestion carries the ids and titles of the open expenses
        in which the payer still owes the payee. With event_id, only
        expenses linked to that event are considered.

        Returns:
            A dict with user_id, balance (ExpenseBalance) and suggestions.

        Raises:
            HTTPException 400: A participant share cannot form a valid debt.
        """
        scoped = expenses_for_event(expenses, event_id)
        debts = self.build_debts(scoped)
        titles = {e.id: e.title for e in scoped}

        suggestions: list[dict[str, Any]] = []
        for transfer in self.user_suggestions(user_id, debts, user_names):
            expense_ids = relevant_expense_ids(
                scoped, transfer.from_user_id, transfer.to_user_id
            )
            suggestions.append(
                {
                    **transfer.model_dump(),
                    "expense_ids": expense_ids,
                    "affected_expenses": [
                        titles[eid] or "Unknown expense" for eid in expense_ids
                    ],
                }
            )

        logger.info(
            "Generated %d settlement suggestions for user %s",
            len(suggestions),
            user_id,
        )

        return {
            "user_id": user_id,
            "balance": calculate_user_balance(scoped, user_id),
            "suggestions": suggestions,
        }

    def apply_settlement(
        self,
        expenses: Sequence[Expense],
        from_user_id: str,
        expense_ids: Sequence[str],
    ) -> dict[str, Any]:
        """Record a payment by from_user_id against the listed expenses.

        Args:
            expenses: Current expenses.
            from_user_id: The user who paid.
            expense_ids: Ids of the expenses the payment covers.

        Returns:
            A dict with the updated expenses and settled_expense_ids, the
            listed expenses that became settled with this payment.

        Raises:
            HTTPException 400: No expense ids given.
            HTTPException 404: A listed expense is not among the expenses.
        """
        if not expense_ids:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="expense_ids are required to record a settlement",
            )

        known_ids = {e.id for e in expenses}
        missing = sorted(set(expense_ids) - known_ids)
        if missing:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Expenses not found: {missing}",
            )

        was_settled = {e.id for e in expenses if e.status == ExpenseStatus.SETTLED}
        updated = apply_settlement(expenses, from_user_id, set(expense_ids))
        settled_expense_ids = [
            e.id
            for e in updated
            if e.status == ExpenseStatus.SETTLED and e.id not in was_settled
        ]

        logger.info(
            "Recorded settlement by %s against %d expenses (%d now settled)",
            from_user_id,
            len(set(expense_ids)),
            len(settled_expense_ids),
        )

        return {
            "expenses": updated,
            "settled_expense_ids": settled_expense_ids,
        }

    def validate_expenses(
        self,
        expenses: Sequence[Expense],
        event_id: Optional[str] = None,
    ) -> dict[str, Any]:
        """Run integrity checks on every expense, optionally for one event.

        Returns:
            A dict with results (one ExpenseValidation per expense) and
            all_valid.
        """
        results = [
            validate_expense_integrity(e)
            for e in expenses_for_event(expenses, event_id)
        ]
        invalid = [r for r in results if not r.is_valid]
        if invalid:
            logger.warning(
                "%d of %d expenses failed integrity checks: %s",
                len(invalid),
                len(results),
                ", ".join(r.expense_id for r in invalid),
            )

        return {
            "results": results,
            "all_valid": not invalid,
        }
