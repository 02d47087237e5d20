"""Deterministic backtest-service payloads for tests.

Shapes mirror what ``GET /api/v1/backtest/{id}`` and
``GET /api/v1/strategies`` return. Not used at runtime.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any


def sample_backtest_payload(
    strategy: str = "MovingAverageStrategy",
    days: int = 30,
    start: date = date(2024, 1, 1),
    initial_cash: float = 10_000.0,
) -> dict[str, Any]:
    """Return a full detail payload with price, equity, trades and metrics."""
    dates = [(start + timedelta(days=i)).isoformat() for i in range(days)]
    # sawtooth around 100 so trades land on both sides
    prices = [round(100 + (i % 7) * 1.5 - (i % 3) * 0.75, 2) for i in range(days)]
    equity = [round(initial_cash * (1 + 0.002 * i - 0.001 * (i % 5)), 2) for i in range(days)]

    trades = []
    for i in range(1, days, 6):
        trades.append({"date": dates[i], "type": "buy", "price": prices[i], "quantity": 10})
        if i + 3 < days:
            trades.append({"date": dates[i + 3], "type": "sell", "price": prices[i + 3], "quantity": 10})

    total_return = (equity[-1] / initial_cash - 1) * 100 if equity else 0.0
    return {
        "strategy": strategy,
        "priceData": {"dates": dates, "prices": prices},
        "equityData": {"dates": list(dates), "equity": equity},
        "trades": trades,
        "metrics": {
            "totalReturn": round(total_return, 4),
            "sharpeRatio": 1.25,
            "maxDrawdown": -8.2,
            "winRate": 55.0,
            "totalTrades": len(trades),
        },
    }


def sample_strategy_list() -> list[dict[str, Any]]:
    return [
        {
            "id": "MovingAverageStrategy",
            "name": "MovingAverageStrategy",
            "description": (
                "Moving Average Crossover strategy that generates buy signals when short-term MA "
                "crosses above long-term MA and sell signals for the opposite."
            ),
        },
        {
            "id": "RSIStrategy",
            "name": "RSIStrategy",
            "description": (
                "RSI Mean Reversion strategy that buys when RSI is oversold and sells when RSI "
                "is overbought."
            ),
        },
    ]
