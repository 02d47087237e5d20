from dataclasses import FrozenInstanceError, replace

import pytest

from fingraph.client.samples import sample_backtest_payload
from fingraph.view.models import NOT_FOUND, MetricsSnapshot, StrategyView, TimeSeries
from fingraph.view.normalizer import DEFAULT_DESCRIPTION, normalize, summarize


def test_not_found_passes_through() -> None:
    assert normalize("abc", NOT_FOUND) is NOT_FOUND


def test_empty_payload_yields_fully_defaulted_view() -> None:
    view = normalize("42", {})

    assert isinstance(view, StrategyView)
    assert view.id == "42"
    assert view.name == "Strategy 42"
    assert view.description == DEFAULT_DESCRIPTION
    assert view.price_series == TimeSeries()
    assert view.equity_series == TimeSeries()
    assert view.trades == ()
    assert view.metrics == MetricsSnapshot()


def test_name_prefers_name_then_strategy_field() -> None:
    assert normalize("1", {"strategy": "RSIStrategy"}).name == "RSIStrategy"
    assert normalize("1", {"name": "Mine", "strategy": "RSIStrategy"}).name == "Mine"
    assert normalize("1", {"name": "   ", "strategy": ""}).name == "Strategy 1"
    assert normalize("1", {"name": 7}).name == "Strategy 1"


def test_description_kept_when_present_even_if_empty() -> None:
    assert normalize("1", {"description": ""}).description == ""
    assert normalize("1", {"description": None}).description == DEFAULT_DESCRIPTION


def test_single_point_scenario() -> None:
    raw = {
        "priceData": {"dates": ["2024-01-01"], "prices": [100]},
        "trades": [{"date": "2024-01-01", "type": "buy", "price": 100, "quantity": 10}],
    }

    view = normalize("s1", raw)

    assert view.metrics.total_return_pct == 0
    assert view.price_series.dates == ("2024-01-01",)
    assert view.price_series.values == (100.0,)
    assert len(view.trades) == 1
    assert view.trades[0]["type"] == "buy"


def test_mismatched_lengths_collapse_to_empty() -> None:
    raw = {
        "priceData": {"dates": ["2024-01-01", "2024-01-02"], "prices": [100]},
        "equityData": {"dates": ["2024-01-01"], "equity": [1, 2, 3]},
    }

    view = normalize("x", raw)

    assert view.price_series.is_empty
    assert view.equity_series.is_empty


def test_partial_series_is_rejected() -> None:
    view = normalize("x", {"priceData": {"prices": [1.0, 2.0]}, "equityData": {"dates": ["2024-01-01"]}})

    assert view.price_series.is_empty
    assert view.equity_series.is_empty


def test_series_with_non_numeric_values_is_rejected() -> None:
    view = normalize("x", {"priceData": {"dates": ["2024-01-01"], "prices": ["100"]}})
    assert view.price_series.is_empty

    view = normalize("x", {"priceData": {"dates": ["2024-01-01"], "prices": [float("nan")]}})
    assert view.price_series.is_empty


def test_duplicate_dates_are_allowed() -> None:
    raw = {"equityData": {"dates": ["2024-01-01", "2024-01-01"], "equity": [1.0, -2.5]}}

    view = normalize("x", raw)

    assert view.equity_series.values == (1.0, -2.5)


def test_trades_passed_through_without_side_validation() -> None:
    trades = [
        {"date": "2024-01-01", "type": "buy", "price": 1, "quantity": 1},
        {"date": "2024-01-02", "type": "HOLD", "price": 1, "quantity": 1},
        "garbage",
    ]

    view = normalize("x", {"trades": trades})

    assert [t["type"] for t in view.trades] == ["buy", "HOLD"]


def test_trades_not_a_list_become_empty() -> None:
    assert normalize("x", {"trades": {"date": "2024-01-01"}}).trades == ()


def test_metrics_use_source_values_and_default_the_rest() -> None:
    raw = {"metrics": {"totalReturn": 12.5, "sharpeRatio": "high", "winRate": True, "totalTrades": 156}}

    metrics = normalize("x", raw).metrics

    assert metrics.total_return_pct == 12.5
    assert metrics.sharpe_ratio == 0
    assert metrics.max_drawdown_pct == 0
    assert metrics.win_rate_pct == 0
    assert metrics.total_trades == 156
    assert isinstance(metrics.total_trades, int)


def test_metric_aliases_are_accepted() -> None:
    metrics = normalize("x", {"metrics": {"maxDrawdownPct": -8.2, "winRatePct": 55}}).metrics

    assert metrics.max_drawdown_pct == -8.2
    assert metrics.win_rate_pct == 55.0


def test_normalize_is_deterministic_and_does_not_mutate_input() -> None:
    raw = sample_backtest_payload()
    snapshot = sample_backtest_payload()

    first = normalize("ma", raw)
    second = normalize("ma", raw)

    assert first == second
    assert raw == snapshot


def test_view_is_detached_from_source_trades() -> None:
    raw = {"trades": [{"date": "2024-01-01", "type": "buy", "price": 1, "quantity": 1}]}
    view = normalize("x", raw)

    raw["trades"][0]["type"] = "sell"

    assert view.trades[0]["type"] == "buy"


def test_view_is_immutable() -> None:
    view = normalize("x", {})
    with pytest.raises(FrozenInstanceError):
        view.name = "changed"  # type: ignore[misc]
    assert replace(view, name="copy").name == "copy"


def test_summarize_fills_only_identity_fields() -> None:
    view = summarize({"id": "RSIStrategy", "name": "RSI", "description": "mean reversion", "metrics": {"totalReturn": 9}})

    assert view == StrategyView(id="RSIStrategy", name="RSI", description="mean reversion")
    assert view.metrics.total_return_pct == 0


def test_summarize_requires_an_id() -> None:
    assert summarize({"name": "anonymous"}) is None
    assert summarize({"id": ""}) is None
    assert summarize({"id": True}) is None
    assert summarize("not a dict") is None
    assert summarize({"id": 7}).name == "Strategy 7"
