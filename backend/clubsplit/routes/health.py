"""Health check endpoint."""

from fastapi import APIRouter
from clubsplit.config import settings

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check():
    """
    Health check endpoint.

    The service is stateless, so it is healthy whenever it can answer.
    The configured currency and epsilon are reported for monitoring.

    Returns:
        dict: Health status, version, and settlement configuration.
    """
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "settlement": {
            "currency_symbol": settings.CURRENCY_SYMBOL,
            "epsilon": str(settings.SETTLEMENT_EPSILON),
        },
    }
