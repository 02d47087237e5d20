"""ECharts option builders for the price and equity charts.

Both charts use a time x-axis keyed by ISO date so they line up when
stacked, and share the grid/axis conventions in :func:`_base_option`.
Builders are pure: the same view always yields the same option dict.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any

from fingraph.view.models import StrategyView, TimeSeries, TradeEvent

PRICE_COLOR = "#2563eb"
BUY_COLOR = "#16a34a"
SELL_COLOR = "#dc2626"
EQUITY_COLOR = "#16a34a"
EQUITY_FILL = "rgba(22, 163, 74, 0.1)"

MARKER_SIZE = 10
CHART_HEIGHT = 400

_SIDES = ("buy", "sell")


# ═══════════════════════════════════════════════════════
# Trades
# ═══════════════════════════════════════════════════════

def parse_trade(record: Mapping[str, Any]) -> TradeEvent | None:
    """Turn a raw trade record into a :class:`TradeEvent`.

    The side is read from ``type`` (service field) or ``side`` and must be
    exactly ``"buy"`` or ``"sell"``. Returns ``None`` for anything else.
    """
    side = record.get("type", record.get("side"))
    if side not in _SIDES:
        return None

    trade_date = record.get("date")
    price = _as_float(record.get("price"))
    quantity = _as_float(record.get("quantity"))
    if not isinstance(trade_date, str) or price is None:
        return None
    return TradeEvent(date=trade_date, side=side, price=price, quantity=quantity or 0.0)


def partition_trades(
    trades: Iterable[Mapping[str, Any]],
) -> tuple[list[TradeEvent], list[TradeEvent]]:
    """Split trades into ``(buys, sells)``, keeping source order.

    Records that do not parse land in neither list.
    """
    buys: list[TradeEvent] = []
    sells: list[TradeEvent] = []
    for record in trades:
        event = parse_trade(record) if isinstance(record, Mapping) else None
        if event is None:
            continue
        (buys if event.side == "buy" else sells).append(event)
    return buys, sells


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


# ═══════════════════════════════════════════════════════
# Options
# ═══════════════════════════════════════════════════════

def _base_option(y_label: str, *, show_legend: bool) -> dict[str, Any]:
    """Shared layout: time x-axis labelled "Date", fixed margins, tooltip."""
    return {
        "animation": False,
        "grid": {"top": 40 if show_legend else 10, "right": 10, "bottom": 40, "left": 60},
        "tooltip": {"trigger": "axis"},
        "legend": {"show": show_legend, "top": 0},
        "xAxis": {
            "type": "time",
            "name": "Date",
            "nameLocation": "middle",
            "nameGap": 25,
        },
        "yAxis": {
            "type": "value",
            "name": y_label,
            "nameLocation": "middle",
            "nameGap": 45,
        },
        "series": [],
    }


def _line(name: str, series: TimeSeries, color: str) -> dict[str, Any]:
    return {
        "name": name,
        "type": "line",
        "showSymbol": False,
        "lineStyle": {"color": color, "width": 2},
        "itemStyle": {"color": color},
        "data": series.points(),
    }


def _markers(name: str, events: list[TradeEvent], color: str, rotate: int) -> dict[str, Any]:
    return {
        "name": name,
        "type": "scatter",
        "symbol": "triangle",
        "symbolSize": MARKER_SIZE,
        "symbolRotate": rotate,
        "itemStyle": {"color": color},
        # recorded execution price, not the line's value at that date
        "data": [[e.date, e.price] for e in events],
    }


def price_chart_option(view: StrategyView) -> dict[str, Any]:
    """Price line plus buy (up) / sell (down) markers, legend shown."""
    buys, sells = partition_trades(view.trades)
    option = _base_option("Price ($)", show_legend=True)
    option["yAxis"]["scale"] = True
    option["legend"]["data"] = ["Price", "Buy", "Sell"]
    option["series"] = [
        _line("Price", view.price_series, PRICE_COLOR),
        _markers("Buy", buys, BUY_COLOR, rotate=0),
        _markers("Sell", sells, SELL_COLOR, rotate=180),
    ]
    return option


def equity_chart_option(view: StrategyView) -> dict[str, Any]:
    """Single equity line, area filled down to zero, no legend."""
    option = _base_option("Equity ($)", show_legend=False)
    line = _line("Equity", view.equity_series, EQUITY_COLOR)
    line["areaStyle"] = {"color": EQUITY_FILL, "origin": 0}
    option["series"] = [line]
    return option
