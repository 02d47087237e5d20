"""Canonical view model consumed by the metrics table and the chart renderers."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal


# Raw JSON object as decoded from the backtest service
RawPayload = dict[str, Any]

TradeSide = Literal["buy", "sell"]


class NotFound(Enum):
    """Read miss: resource absent, or the request/parse failed."""

    NOT_FOUND = "not_found"

    def __bool__(self) -> bool:
        return False


NOT_FOUND = NotFound.NOT_FOUND


@dataclass(frozen=True)
class TimeSeries:
    """Parallel ``dates`` / ``values`` tuples of equal length."""

    dates: tuple[str, ...] = ()
    values: tuple[float, ...] = ()

    def __len__(self) -> int:
        return len(self.dates)

    @property
    def is_empty(self) -> bool:
        return not self.dates

    def points(self) -> list[list[Any]]:
        """Return ``[[date, value], ...]`` pairs for a time axis."""
        return [[d, v] for d, v in zip(self.dates, self.values)]


@dataclass(frozen=True)
class TradeEvent:
    date: str
    side: TradeSide
    price: float
    quantity: float


@dataclass(frozen=True)
class MetricsSnapshot:
    total_return_pct: float = 0.0
    sharpe_ratio: float = 0.0
    max_drawdown_pct: float = 0.0
    win_rate_pct: float = 0.0
    total_trades: int = 0


@dataclass(frozen=True)
class StrategyView:
    """Fully-defaulted backtest result for one strategy.

    ``trades`` holds the source trade records untouched; typed
    :class:`TradeEvent` values are produced by the chart layer, which drops
    records with an unrecognised side.
    """

    id: str
    name: str
    description: str
    price_series: TimeSeries = field(default_factory=TimeSeries)
    equity_series: TimeSeries = field(default_factory=TimeSeries)
    trades: tuple[Mapping[str, Any], ...] = ()
    metrics: MetricsSnapshot = field(default_factory=MetricsSnapshot)
