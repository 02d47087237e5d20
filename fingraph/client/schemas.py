"""Request bodies sent to the backtest service."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, Field

ParameterValue = bool | int | float | str


class BacktestRequest(BaseModel):
    strategy_id: str = Field(min_length=1)
    parameters: dict[str, ParameterValue] = Field(default_factory=dict)
    initial_cash: float = 10_000.0
    data_id: str = "default_data"
    start_date: date | None = None
    end_date: date | None = None

    def to_payload(self) -> dict[str, Any]:
        """Serialise to the camelCase body ``POST /api/v1/backtest`` expects."""
        payload: dict[str, Any] = {
            "dataId": self.data_id,
            "strategy": self.strategy_id,
            "initialCash": self.initial_cash,
            "parameters": dict(self.parameters),
        }
        if self.start_date is not None:
            payload["startDate"] = self.start_date.isoformat()
        if self.end_date is not None:
            payload["endDate"] = self.end_date.isoformat()
        return payload
