"""Pure helper functions over expense lists.

No database access, no async. The balance helpers ignore settled
expenses.
"""

from collections.abc import Collection, Iterable
from decimal import Decimal
from typing import Optional

from clubsplit.models.common import ExpenseStatus
from clubsplit.models.expense import Expense, ExpenseBalance, ExpenseValidation

SHARE_TOLERANCE = Decimal("0.01")


def _owing_participants(expense: Expense):
    """Yield participants of an expense who still owe the payer."""
    for participant in expense.participants:
        if not participant.is_paid and participant.user_id != expense.paid_by:
            yield participant


def expenses_for_event(
    expenses: Iterable[Expense], event_id: Optional[str] = None
) -> list[Expense]:
    """Return the expenses linked to event_id, or all of them when it is None."""
    if event_id is None:
        return list(expenses)
    return [e for e in expenses if e.event_id == event_id]


def calculate_user_balance(
    expenses: Iterable[Expense],
    user_id: str,
    event_id: Optional[str] = None,
) -> ExpenseBalance:
    """Compute what a user owes and is owed across non-settled expenses.

    Args:
        expenses: Expenses to consider.
        user_id: The user whose totals are computed.
        event_id: Only count expenses linked to this event when given.

    Returns:
        ExpenseBalance with total_owed (the user's unpaid shares of other
        people's expenses), total_owed_to (other participants' unpaid shares
        of expenses the user paid) and net_balance = owed_to - owed.
    """
    total_owed = Decimal("0")
    total_owed_to = Decimal("0")

    for expense in expenses_for_event(expenses, event_id):
        if expense.status == ExpenseStatus.SETTLED:
            continue
        for participant in _owing_participants(expense):
            if expense.paid_by == user_id:
                total_owed_to += participant.share_amount
            elif participant.user_id == user_id:
                total_owed += participant.share_amount

    return ExpenseBalance(
        user_id=user_id,
        total_owed=total_owed,
        total_owed_to=total_owed_to,
        net_balance=total_owed_to - total_owed,
    )


def relevant_expense_ids(
    expenses: Iterable[Expense], debtor_id: str, creditor_id: str
) -> list[str]:
    """Return ids of open expenses in which debtor_id still owes creditor_id."""
    return [
        expense.id
        for expense in expenses
        if expense.status != ExpenseStatus.SETTLED
        and expense.paid_by == creditor_id
        and any(p.user_id == debtor_id for p in _owing_participants(expense))
    ]


def apply_settlement(
    expenses: Iterable[Expense],
    from_user_id: str,
    expense_ids: Collection[str],
) -> list[Expense]:
    """Record a payment by from_user_id against the listed expenses.

    Args:
        expenses: Current expenses.
        from_user_id: The user who paid.
        expense_ids: Expenses the payment covers.

    Returns:
        Updated copies of all expenses. In each listed expense the payer's
        participant row is marked paid, and an expense whose non-payer
        participants have all paid becomes settled. Unlisted expenses are
        returned unchanged.
    """
    updated: list[Expense] = []

    for expense in expenses:
        if expense.id not in expense_ids:
            updated.append(expense.model_copy())
            continue

        participants = [
            p.model_copy(update={"is_paid": True})
            if p.user_id == from_user_id
            else p.model_copy()
            for p in expense.participants
        ]
        all_paid = all(
            p.is_paid or p.user_id == expense.paid_by for p in participants
        )
        new_status = ExpenseStatus.SETTLED if all_paid else expense.status

        updated.append(
            expense.model_copy(
                update={"participants": participants, "status": new_status}
            )
        )

    return updated


def validate_expense_integrity(expense: Expense) -> ExpenseValidation:
    """Check an expense for data problems before it is settled.

    Returns:
        ExpenseValidation listing every problem found; is_valid is True only
        when the list is empty.
    """
    errors: list[str] = []

    if not expense.title.strip():
        errors.append("Title is required")
    if expense.amount <= 0:
        errors.append("Amount must be greater than 0")
    if not expense.paid_by:
        errors.append("Paid by user is required")
    if not expense.participants:
        errors.append("At least one participant is required")

    if any(p.share_amount < 0 for p in expense.participants):
        errors.append("Share amounts must not be negative")

    total_shares = sum((p.share_amount for p in expense.participants), Decimal("0"))
    if abs(total_shares - expense.amount) > SHARE_TOLERANCE:
        errors.append(
            f"Participant shares ({total_shares:.2f}) don't equal "
            f"total amount ({expense.amount:.2f})"
        )

    payer = next(
        (p for p in expense.participants if p.user_id == expense.paid_by), None
    )
    if payer is not None and not payer.is_paid:
        errors.append("The person who paid should be marked as paid")

    participant_ids = [p.user_id for p in expense.participants]
    if len(participant_ids) != len(set(participant_ids)):
        errors.append("Duplicate participants found")

    return ExpenseValidation(
        expense_id=expense.id,
        is_valid=not errors,
        errors=errors,
    )
