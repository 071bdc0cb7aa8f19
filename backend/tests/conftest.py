"""
Pytest configuration and fixtures for ClubSplit tests.

This module provides shared fixtures for testing async FastAPI endpoints
and helpers for building debts and expenses in unit tests.
"""

import os

# Keep tests independent of a developer's .env overrides
os.environ.setdefault("ENVIRONMENT", "development")

from decimal import Decimal

import pytest
import pytest_asyncio

from clubsplit.models.debt import Debt
from clubsplit.models.expense import Expense, ExpenseParticipant


@pytest.fixture
def anyio_backend():
    """Specify anyio backend for async tests."""
    return "asyncio"


@pytest_asyncio.fixture
async def client():
    """Async HTTP client for testing FastAPI endpoints.

    Yields:
        AsyncClient: HTTPX async client with the FastAPI app.
    """
    from httpx import ASGITransport, AsyncClient
    from clubsplit.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def _make_debt(from_user: str, to_user: str, amount: str) -> Debt:
    """Build a Debt from a decimal string amount."""
    return Debt(from_user_id=from_user, to_user_id=to_user, amount=Decimal(amount))


def _make_expense(
    expense_id: str,
    paid_by: str,
    shares: dict[str, str],
    paid: tuple[str, ...] = (),
    **kwargs,
) -> Expense:
    """Build an Expense whose amount defaults to the sum of its shares.

    Args:
        expense_id: Expense id.
        paid_by: The paying user.
        shares: Share amount (decimal string) per participant user_id.
        paid: Participants already marked as paid.
        **kwargs: Extra Expense fields (title, status, ...).
    """
    participants = [
        ExpenseParticipant(
            user_id=user_id,
            share_amount=Decimal(share),
            is_paid=user_id in paid,
        )
        for user_id, share in shares.items()
    ]
    amount = kwargs.pop(
        "amount", sum((p.share_amount for p in participants), Decimal("0"))
    )
    kwargs.setdefault("title", f"Expense {expense_id}")
    return Expense(
        id=expense_id,
        amount=amount,
        paid_by=paid_by,
        participants=participants,
        **kwargs,
    )


@pytest.fixture
def make_debt():
    """Factory fixture: make_debt("alice", "bob", "12.50")."""
    return _make_debt


@pytest.fixture
def make_expense():
    """Factory fixture: make_expense("e1", "alice", {"alice": "30", "bob": "30"})."""
    return _make_expense
