"""Settlement route handlers.

Endpoints:
    POST /api/settlement/balances     -- Net balance per user for a list of debts.
    POST /api/settlement/optimize     -- Optimized transfer plan for a list of debts.
    POST /api/settlement/suggestions  -- Transfers involving one user.
    POST /api/settlement/groups       -- Transfers grouped per user.
"""

import logging
from decimal import Decimal

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
from clubsplit.services.settlement_service import SettlementService

logger = logging.getLogger("clubsplit.routes.settlement")

router = APIRouter(prefix="/settlement", tags=["Settlement"])


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

class DebtsRequest(BaseModel):
    """Request body carrying a list of debts."""
    debts: list[Debt] = Field(default_factory=list)


class BalancesResponse(BaseModel):
    """Response for POST /api/settlement/balances."""
    balances: list[UserBalance]
    total: Money


class OptimizeResponse(BaseModel):
    """Response for POST /api/settlement/optimize."""
    transfers: list[OptimizedTransfer]
    savings: OptimizationSavings


class SuggestionsRequest(BaseModel):
    """Request body for POST /api/settlement/suggestions."""
    user_id: str = Field(..., min_length=1)
    debts: list[Debt] = Field(default_factory=list)
    user_names: dict[str, str] = Field(
        default_factory=dict,
        description="Display name per user_id.",
    )


class SuggestionsResponse(BaseModel):
    """Response for POST /api/settlement/suggestions."""
    user_id: str
    suggestions: list[OptimizedTransfer]


class GroupsRequest(BaseModel):
    """Request body for POST /api/settlement/groups."""
    transfers: list[OptimizedTransfer] = Field(default_factory=list)


class GroupsResponse(BaseModel):
    """Response for POST /api/settlement/groups."""
    groups: dict[str, UserTransferGroup]


# ---------------------------------------------------------------------------
# POST /api/settlement/balances
# ---------------------------------------------------------------------------

@router.post(
    "/balances",
    response_model=BalancesResponse,
    status_code=status.HTTP_200_OK,
    summary="Compute net balances for a list of debts",
)
async def calculate_balances(body: DebtsRequest) -> BalancesResponse:
    """Net balance per user. The total is always zero for well-formed debts."""
    balances = _get_service().compute_balances(body.debts)
    total = sum((b.net_amount for b in balances), Decimal("0"))
    return BalancesResponse(balances=balances, total=total)


# ---------------------------------------------------------------------------
# POST /api/settlement/optimize
# ---------------------------------------------------------------------------

@router.post(
    "/optimize",
    response_model=OptimizeResponse,
    status_code=status.HTTP_200_OK,
    summary="Compute an optimized transfer plan",
)
async def optimize_settlement(body: DebtsRequest) -> OptimizeResponse:
    """Greedy settlement plan plus how many payments it saves."""
    service = _get_service()
    transfers = service.optimize(body.debts)
    savings = service.savings(body.debts, transfers)
    return OptimizeResponse(transfers=transfers, savings=savings)


# ---------------------------------------------------------------------------
# POST /api/settlement/suggestions
# ---------------------------------------------------------------------------

@router.post(
    "/suggestions",
    response_model=SuggestionsResponse,
    status_code=status.HTTP_200_OK,
    summary="Settle-up suggestions for one user",
)
async def settlement_suggestions(body: SuggestionsRequest) -> SuggestionsResponse:
    suggestions = _get_service().user_suggestions(
        body.user_id, body.debts, body.user_names
    )
    return SuggestionsResponse(user_id=body.user_id, suggestions=suggestions)


# ---------------------------------------------------------------------------
# POST /api/settlement/groups
# ---------------------------------------------------------------------------

@router.post(
    "/groups",
    response_model=GroupsResponse,
    status_code=status.HTTP_200_OK,
    summary="Group transfers by user",
)
async def group_transfers(body: GroupsRequest) -> GroupsResponse:
    return GroupsResponse(groups=_get_service().group_transfers(body.transfers))
