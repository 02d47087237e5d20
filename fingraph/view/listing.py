"""Strategy and backtest lists built from the service's list endpoints."""

from __future__ import annotations

from loguru import logger

from fingraph.client.remote import BacktestClient
from fingraph.view.models import StrategyView
from fingraph.view.normalizer import normalize, summarize


async def list_strategies(client: BacktestClient) -> list[StrategyView]:
    """Fetch the strategy list and map each entry through :func:`summarize`.

    Entries without an id are skipped. Series, trades and metrics stay
    empty; detail is fetched when a single strategy is opened.
    """
    entries = await client.fetch_strategy_list()
    views: list[StrategyView] = []
    for entry in entries:
        view = summarize(entry)
        if view is None:
            logger.warning(f"Skipping strategy list entry without id: {entry!r}")
            continue
        views.append(view)
    return views


async def list_backtests(client: BacktestClient) -> list[StrategyView]:
    """Fetch previously run backtests as full views, in service order.

    Entries are normalized like a detail payload, so metrics and the
    ``strategy`` name are picked up when present. Entries without an id
    are skipped.
    """
    entries = await client.fetch_backtest_list()
    views: list[StrategyView] = []
    for entry in entries:
        summary = summarize(entry)
        if summary is None:
            logger.warning(f"Skipping backtest list entry without id: {entry!r}")
            continue
        views.append(normalize(summary.id, entry))
    return views
