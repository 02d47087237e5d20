"""Map loosely-shaped backtest payloads onto :class:`StrategyView`.

This module is the only place where defaults are decided. Everything here
is pure: no I/O, no logging, no shared state.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from fingraph.errors import MalformedSeries
from fingraph.view.models import (
    NOT_FOUND,
    MetricsSnapshot,
    NotFound,
    RawPayload,
    StrategyView,
    TimeSeries,
)

DEFAULT_DESCRIPTION = "Trading strategy backtest results"

# canonical field -> accepted source keys, first match wins
_METRIC_KEYS: dict[str, tuple[str, ...]] = {
    "total_return_pct": ("totalReturn", "totalReturnPct"),
    "sharpe_ratio": ("sharpeRatio",),
    "max_drawdown_pct": ("maxDrawdown", "maxDrawdownPct"),
    "win_rate_pct": ("winRate", "winRatePct"),
    "total_trades": ("totalTrades",),
}


def default_name(strategy_id: str) -> str:
    return f"Strategy {strategy_id}"


def normalize(strategy_id: str, raw: RawPayload | NotFound) -> StrategyView | NotFound:
    """Build a :class:`StrategyView` from a detail payload.

    ``NOT_FOUND`` passes straight through so the caller can render its
    not-found state.
    """
    if raw is NOT_FOUND or not isinstance(raw, Mapping):
        return NOT_FOUND

    return StrategyView(
        id=strategy_id,
        name=_resolve_name(raw, strategy_id),
        description=_resolve_description(raw),
        price_series=_resolve_series(raw.get("priceData"), "prices"),
        equity_series=_resolve_series(raw.get("equityData"), "equity"),
        trades=_resolve_trades(raw.get("trades")),
        metrics=_resolve_metrics(raw.get("metrics")),
    )


def summarize(raw: Any) -> StrategyView | None:
    """Lightweight normalization for list entries.

    Only ``id``, ``name`` and ``description`` are read; series, trades and
    metrics are left empty/zero. Returns ``None`` when the entry carries no
    usable id.
    """
    if not isinstance(raw, Mapping):
        return None
    strategy_id = _resolve_id(raw.get("id"))
    if strategy_id is None:
        return None
    return StrategyView(
        id=strategy_id,
        name=_resolve_name(raw, strategy_id),
        description=_resolve_description(raw),
    )


# ── field resolvers ─────────────────────────────────────


def _resolve_id(value: Any) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _resolve_name(raw: Mapping[str, Any], strategy_id: str) -> str:
    # Detail payloads carry the name under "strategy"
    for key in ("name", "strategy"):
        value = raw.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return default_name(strategy_id)


def _resolve_description(raw: Mapping[str, Any]) -> str:
    value = raw.get("description")
    return value if isinstance(value, str) else DEFAULT_DESCRIPTION


def _resolve_series(block: Any, values_key: str) -> TimeSeries:
    try:
        dates, values = _series_halves(block, values_key)
    except MalformedSeries:
        return TimeSeries()
    return TimeSeries(dates=dates, values=values)


def _series_halves(block: Any, values_key: str) -> tuple[tuple[str, ...], tuple[float, ...]]:
    if not isinstance(block, Mapping):
        raise MalformedSeries("series block missing")

    dates = block.get("dates")
    values = block.get(values_key)
    if not isinstance(dates, list) or not isinstance(values, list):
        raise MalformedSeries(f"series half missing: dates/{values_key}")
    if len(dates) != len(values):
        raise MalformedSeries(f"length mismatch: {len(dates)} dates vs {len(values)} {values_key}")
    if not all(isinstance(d, str) for d in dates):
        raise MalformedSeries("non-string date")
    if not all(_is_number(v) for v in values):
        raise MalformedSeries(f"non-numeric {values_key} value")

    return tuple(dates), tuple(float(v) for v in values)


def _resolve_trades(value: Any) -> tuple[Mapping[str, Any], ...]:
    if not isinstance(value, list):
        return ()
    # Read-only views keep the view model immutable without reshaping records
    return tuple(MappingProxyType(dict(item)) for item in value if isinstance(item, Mapping))


def _resolve_metrics(block: Any) -> MetricsSnapshot:
    if not isinstance(block, Mapping):
        return MetricsSnapshot()

    resolved: dict[str, Any] = {}
    for field_name, keys in _METRIC_KEYS.items():
        number = next((block[k] for k in keys if k in block and _is_number(block[k])), 0)
        resolved[field_name] = int(number) if field_name == "total_trades" else float(number)
    return MetricsSnapshot(**resolved)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
