"""
ClubSplit FastAPI Application Entry Point.

Configures FastAPI, sets up CORS middleware and registers the settlement,
expense and health routes. The service is stateless: there is no database
connection to manage.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clubsplit.config import settings
from clubsplit.routes.expenses import router as expenses_router
from clubsplit.routes.health import router as health_router
from clubsplit.routes.settlement import router as settlement_router

logger = logging.getLogger("clubsplit.app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager. Logs startup and shutdown."""
    logger.info(
        "ClubSplit v%s started (environment=%s, currency=%s, epsilon=%s)",
        settings.APP_VERSION,
        settings.ENVIRONMENT,
        settings.CURRENCY_SYMBOL,
        settings.SETTLEMENT_EPSILON,
    )

    yield

    logger.info("ClubSplit shutdown complete")


# Initialize FastAPI application
app = FastAPI(
    title="ClubSplit API",
    description="Expense splitting and debt settlement for clubs - REST API",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
    max_age=600,  # Cache preflight requests for 10 minutes
)

# Register routers
app.include_router(health_router)  # Health endpoint at root level
app.include_router(health_router, prefix="/api")
app.include_router(settlement_router, prefix="/api")
app.include_router(expenses_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint - API information."""
    return {
        "name": "ClubSplit API",
        "version": settings.APP_VERSION,
        "status": "operational",
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "clubsplit.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
