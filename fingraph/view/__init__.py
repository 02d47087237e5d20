# View layer: canonical model, normalization, formatting, listing

from fingraph.view.formatting import format_number, format_percent, metric_rows, sign_class
from fingraph.view.models import (
    NOT_FOUND,
    MetricsSnapshot,
    NotFound,
    StrategyView,
    TimeSeries,
    TradeEvent,
)
from fingraph.view.normalizer import normalize, summarize

__all__ = [
    "NOT_FOUND",
    "MetricsSnapshot",
    "NotFound",
    "StrategyView",
    "TimeSeries",
    "TradeEvent",
    "format_number",
    "format_percent",
    "metric_rows",
    "normalize",
    "sign_class",
    "summarize",
]
