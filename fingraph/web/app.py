"""FastAPI application factory with lifespan for FinGraph."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from fingraph import __version__
from fingraph.charts import ChartRenderer, get_renderer
from fingraph.client import BacktestClient
from fingraph.settings import get_settings


def create_app(
    client: BacktestClient | None = None,
    renderer: ChartRenderer | None = None,
) -> FastAPI:
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Startup: build the service client. Shutdown: close the browser."""
        app.state.client = client or BacktestClient.from_settings(settings)
        app.state.renderer = renderer or get_renderer()
        yield
        await app.state.renderer.close()

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        lifespan=lifespan,
    )

    # ── mount routers ──
    from fingraph.web.routes import backtest, health, strategies

    app.include_router(health.router)
    app.include_router(strategies.router, tags=["pages"])
    app.include_router(backtest.router, prefix="/api", tags=["backtest"])

    return app
