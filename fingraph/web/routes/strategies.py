"""HTML pages: strategy list and strategy detail."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from loguru import logger

from fingraph.charts import mount_panels, parse_trade, strategy_panels
from fingraph.view.formatting import metric_rows
from fingraph.view.listing import list_strategies
from fingraph.view.models import NOT_FOUND
from fingraph.view.normalizer import normalize

router = APIRouter()


@router.get("/", include_in_schema=False)
async def index() -> RedirectResponse:
    return RedirectResponse("/strategies")


@router.get("/strategies", response_class=HTMLResponse)
async def strategies_page(request: Request) -> HTMLResponse:
    views = await list_strategies(request.app.state.client)
    html = request.app.state.renderer.render_html("strategy_list", strategies=views)
    return HTMLResponse(html)


@router.get("/strategy/{strategy_id}", response_class=HTMLResponse)
async def strategy_page(strategy_id: str, request: Request) -> HTMLResponse:
    renderer = request.app.state.renderer
    raw = await request.app.state.client.fetch_raw(strategy_id)
    if raw is NOT_FOUND:
        logger.info(f"Strategy page: '{strategy_id}' not found")
        html = renderer.render_html("not_found", strategy_id=strategy_id)
        return HTMLResponse(html, status_code=404)

    view = normalize(strategy_id, raw)
    panels = strategy_panels(view)
    await mount_panels(*panels)

    trades = [t for t in (parse_trade(r) for r in view.trades) if t is not None]
    html = renderer.render_html(
        "strategy_detail",
        view=view,
        panels=[p.context() for p in panels],
        chart_count=len(panels),
        metrics=metric_rows(view.metrics),
        trades=trades,
    )
    return HTMLResponse(html)
