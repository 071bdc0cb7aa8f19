"""Integration tests for the /api/expenses endpoints.

Expense payloads use the shape supplied by the expense data source:
{id, amount, paid_by, participants: [{user_id, share_amount, is_paid}]}.
"""

import pytest


def _expense(expense_id: str, paid_by: str, shares: dict, paid=(), **extra) -> dict:
    return {
        "id": expense_id,
        "amount": sum(shares.values()),
        "paid_by": paid_by,
        "participants": [
            {"user_id": uid, "share_amount": share, "is_paid": uid in paid}
            for uid, share in shares.items()
        ],
        **extra,
    }


@pytest.fixture
def trip_expenses():
    """Alice pays 90 for a meal split three ways; Bob pays 30 for Carol's taxi."""
    return [
        _expense(
            "meal", "alice", {"alice": 30, "bob": 30, "carol": 30},
            paid=("alice",), title="Meal", category="food",
        ),
        _expense("taxi", "bob", {"carol": 30}, title="Taxi", category="transport"),
    ]


@pytest.mark.asyncio
class TestPlanEndpoint:
    """POST /api/expenses/plan"""

    async def test_plan(self, client, trip_expenses):
        resp = await client.post("/api/expenses/plan", json={"expenses": trip_expenses})
        assert resp.status_code == 200
        data = resp.json()

        assert len(data["debts"]) == 3
        balances = {b["user_id"]: b["net_amount"] for b in data["balances"]}
        assert balances == {"bob": 0.0, "alice": 60.0, "carol": -60.0}
        assert [(t["from_user_id"], t["to_user_id"], t["amount"]) for t in data["transfers"]] == [
            ("carol", "alice", 60.0),
        ]
        assert data["savings"]["transaction_reduction"] == 2
        assert set(data["groups"]) == {"alice", "carol"}

    async def test_settled_expense_ignored(self, client, trip_expenses):
        trip_expenses[1]["status"] = "settled"
        resp = await client.post("/api/expenses/plan", json={"expenses": trip_expenses})
        assert resp.status_code == 200
        assert len(resp.json()["debts"]) == 2

    async def test_negative_share_returns_400(self, client):
        expense = _expense("bad", "alice", {"bob": -10})
        resp = await client.post("/api/expenses/plan", json={"expenses": [expense]})
        assert resp.status_code == 400
        assert "Invalid participant share" in resp.json()["detail"]

    async def test_unknown_status_rejected(self, client, trip_expenses):
        trip_expenses[0]["status"] = "lost"
        resp = await client.post("/api/expenses/plan", json={"expenses": trip_expenses})
        assert resp.status_code == 422


@pytest.mark.asyncio
class TestExpenseSuggestionsEndpoint:
    """POST /api/expenses/suggestions"""

    async def test_suggestions(self, client, trip_expenses):
        resp = await client.post(
            "/api/expenses/suggestions",
            json={
                "user_id": "carol",
                "expenses": trip_expenses,
                "user_names": {"alice": "Alice", "bob": "Bob"},
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["balance"] == {
            "user_id": "carol",
            "total_owed": 60.0,
            "total_owed_to": 0.0,
            "net_balance": -60.0,
        }
        assert data["suggestions"] == [
            {
                "from_user_id": "carol",
                "to_user_id": "alice",
                "amount": 60.0,
                "description": "Pay £60.00 to Alice",
                "expense_ids": ["meal"],
                "affected_expenses": ["Meal"],
            }
        ]

    async def test_user_with_nothing_to_settle(self, client, trip_expenses):
        resp = await client.post(
            "/api/expenses/suggestions",
            json={"user_id": "bob", "expenses": trip_expenses},
        )
        assert resp.status_code == 200
        assert resp.json()["suggestions"] == []
        assert resp.json()["balance"]["net_balance"] == 0.0


@pytest.mark.asyncio
class TestValidateEndpoint:
    """POST /api/expenses/validate"""

    async def test_validate(self, client, trip_expenses):
        trip_expenses.append(_expense("empty", "alice", {}))
        resp = await client.post("/api/expenses/validate", json={"expenses": trip_expenses})
        assert resp.status_code == 200
        data = resp.json()
        assert data["all_valid"] is False
        results = {r["expense_id"]: r for r in data["results"]}
        assert results["meal"]["is_valid"] is True
        assert results["taxi"]["is_valid"] is True
        assert "Title is required" in results["empty"]["errors"]
        assert "At least one participant is required" in results["empty"]["errors"]


@pytest.mark.asyncio
class TestEventScopedEndpoints:
    """event_id on /plan and /suggestions"""

    @pytest.fixture
    def club_expenses(self):
        return [
            _expense("golf", "alice", {"bob": 100}, event_id="portugal", title="Golf"),
            _expense("dinner", "alice", {"bob": 40}, event_id="club-night", title="Dinner"),
        ]

    async def test_plan_for_event(self, client, club_expenses):
        resp = await client.post(
            "/api/expenses/plan",
            json={"expenses": club_expenses, "event_id": "portugal"},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert [(t["from_user_id"], t["amount"]) for t in data["transfers"]] == [
            ("bob", 100.0),
        ]

    async def test_plan_without_event_covers_all(self, client, club_expenses):
        resp = await client.post("/api/expenses/plan", json={"expenses": club_expenses})
        assert resp.json()["transfers"][0]["amount"] == 140.0

    async def test_suggestions_for_event(self, client, club_expenses):
        resp = await client.post(
            "/api/expenses/suggestions",
            json={
                "user_id": "alice",
                "expenses": club_expenses,
                "user_names": {"bob": "Bob"},
                "event_id": "club-night",
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["balance"]["total_owed_to"] == 40.0
        assert data["suggestions"][0]["description"] == "Receive £40.00 from Bob"
        assert data["suggestions"][0]["affected_expenses"] == ["Dinner"]


@pytest.mark.asyncio
class TestSettleEndpoint:
    """POST /api/expenses/settle"""

    async def test_settle_then_plan(self, client, trip_expenses):
        resp = await client.post(
            "/api/expenses/settle",
            json={
                "from_user_id": "carol",
                "expense_ids": ["taxi"],
                "expenses": trip_expenses,
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["settled_expense_ids"] == ["taxi"]
        statuses = {e["id"]: e["status"] for e in data["expenses"]}
        assert statuses == {"meal": "pending", "taxi": "settled"}

        plan = await client.post("/api/expenses/plan", json={"expenses": data["expenses"]})
        assert len(plan.json()["debts"]) == 2

    async def test_missing_expense_ids_returns_400(self, client, trip_expenses):
        resp = await client.post(
            "/api/expenses/settle",
            json={"from_user_id": "carol", "expenses": trip_expenses},
        )
        assert resp.status_code == 400

    async def test_unknown_expense_returns_404(self, client, trip_expenses):
        resp = await client.post(
            "/api/expenses/settle",
            json={
                "from_user_id": "carol",
                "expense_ids": ["boat"],
                "expenses": trip_expenses,
            },
        )
        assert resp.status_code == 404
