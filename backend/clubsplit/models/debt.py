"""Settlement value objects for ClubSplit.

Debts, balances and transfers are transient: built from expense data for a
single settlement run and never persisted.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from clubsplit.models.common import Money


class Debt(BaseModel):
    """One participant's unpaid obligation towards another.

    Negative amounts and self-debts are rejected at construction so the
    settlement functions can treat every Debt as a genuine obligation.
    """

    model_config = ConfigDict(frozen=True)

    from_user_id: str = Field(..., min_length=1, description="The user who owes.")
    to_user_id: str = Field(..., min_length=1, description="The user who is owed.")
    amount: Money = Field(..., ge=0)

    @model_validator(mode="after")
    def check_not_self_debt(self) -> "Debt":
        if self.from_user_id == self.to_user_id:
            raise ValueError(
                f"A debt cannot be owed to oneself ({self.from_user_id})"
            )
        return self


class UserBalance(BaseModel):
    """Net position of a user: positive means owed money, negative means owes."""

    user_id: str
    net_amount: Money = Decimal("0")


class OptimizedTransfer(BaseModel):
    """A single payment instruction produced by the settlement optimizer."""

    model_config = ConfigDict(frozen=True)

    from_user_id: str
    to_user_id: str
    amount: Money = Field(..., gt=0)
    description: str


class UserTransferGroup(BaseModel):
    """Transfers touching one user, split by direction."""

    outgoing: list[OptimizedTransfer] = Field(default_factory=list)
    incoming: list[OptimizedTransfer] = Field(default_factory=list)
    net_amount: Money = Decimal("0")


class OptimizationSavings(BaseModel):
    """How many payments the optimizer saved compared to paying each debt."""

    original_transactions: int
    optimized_transactions: int
    transaction_reduction: int
    percentage_saved: float
