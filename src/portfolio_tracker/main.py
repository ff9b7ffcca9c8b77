"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from portfolio_tracker import __version__
from portfolio_tracker.app_context import AppContext
from portfolio_tracker.config.settings import get_settings
from portfolio_tracker.config.logging_config import setup_logging
from portfolio_tracker.api.routers import (
    cash_sync_router,
    dashboard_router,
    holdings_router,
    market_router,
    portfolios_router,
    transactions_router,
)
from portfolio_tracker.core.exceptions import AppError


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """Build the API. Tests pass a pre-wired context; otherwise one is built at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "context", None) is None:
            app.state.context = AppContext()
        setup_logging(app.state.context.settings)
        yield

    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        description="Multi-portfolio investment tracking with live quotes and FX",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.context = context

    app.include_router(portfolios_router)
    app.include_router(cash_sync_router)
    app.include_router(transactions_router)
    app.include_router(holdings_router)
    app.include_router(dashboard_router)
    app.include_router(market_router)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        """Global handler for application errors."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.code, "message": exc.message},
        )

    @app.get("/health")
    def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    @app.get("/")
    def root() -> dict[str, str]:
        """Root endpoint with API info."""
        return {
            "app": settings.app_name,
            "version": __version__,
            "docs": "/docs",
        }

    return app


app = create_app()
