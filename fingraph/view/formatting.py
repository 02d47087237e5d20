"""Display formatting for metric values."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext

from fingraph.view.models import MetricsSnapshot

_CENT = Decimal("0.01")


def _two_places(value: float) -> str:
    if not math.isfinite(value):
        return str(value)
    # repr() gives the shortest decimal that round-trips, so 1.005 stays 1.005
    exact = Decimal(repr(float(value)))
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus two decimals
        ctx.prec = max(ctx.prec, exact.adjusted() + 3)
        rounded = exact.quantize(_CENT, rounding=ROUND_HALF_UP)
    if rounded == 0:
        rounded = abs(rounded)
    return f"{rounded:.2f}"


def format_percent(value: float) -> str:
    return f"{_two_places(value)}%"


def format_number(value: float) -> str:
    return _two_places(value)


def sign_class(value: float) -> str:
    """``"positive"`` for values >= 0, ``"negative"`` otherwise."""
    return "positive" if value >= 0 else "negative"


def metric_rows(metrics: MetricsSnapshot) -> list[tuple[str, str, str]]:
    """Return ``(label, display value, css class)`` rows for a metrics table."""
    return [
        ("Total Return", format_percent(metrics.total_return_pct), sign_class(metrics.total_return_pct)),
        ("Sharpe Ratio", format_number(metrics.sharpe_ratio), "neutral"),
        ("Max Drawdown", format_percent(metrics.max_drawdown_pct), "negative"),
        ("Win Rate", format_percent(metrics.win_rate_pct), "positive"),
        ("Total Trades", str(metrics.total_trades), "neutral"),
    ]
