"""Tests for Expense Pydantic models."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from clubsplit.models.common import ExpenseCategory, ExpenseStatus
from clubsplit.models.expense import Expense, ExpenseParticipant


class TestExpense:
    """Tests for the Expense domain model."""

    def test_expense_creation_minimal(self):
        expense = Expense(id="e1", amount=45, paid_by="alice")
        assert expense.amount == Decimal("45")
        assert expense.participants == []
        assert expense.title == ""
        assert expense.status == ExpenseStatus.PENDING
        assert expense.category == ExpenseCategory.OTHER
        assert expense.event_id is None

    def test_expense_from_data_source_shape(self):
        expense = Expense.model_validate(
            {
                "id": "e1",
                "amount": 20.5,
                "paid_by": "alice",
                "participants": [
                    {"user_id": "alice", "share_amount": 10.25, "is_paid": True},
                    {"user_id": "bob", "share_amount": "10.25"},
                ],
                "status": "approved",
                "category": "food",
            }
        )
        assert expense.status == ExpenseStatus.APPROVED
        assert expense.category == ExpenseCategory.FOOD
        assert expense.participants[1].is_paid is False
        assert expense.participants[0].share_amount == Decimal("10.25")

    def test_negative_share_is_representable(self):
        """Integrity checks report negative shares; the model does not reject them."""
        participant = ExpenseParticipant(user_id="bob", share_amount=-5)
        assert participant.share_amount == Decimal("-5")

    def test_invalid_status(self):
        with pytest.raises(ValidationError):
            Expense(id="e1", amount=1, paid_by="alice", status="archived")
