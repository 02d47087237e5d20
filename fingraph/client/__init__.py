# Remote backtest service client

from fingraph.client.remote import BacktestClient
from fingraph.client.schemas import BacktestRequest

__all__ = ["BacktestClient", "BacktestRequest"]
