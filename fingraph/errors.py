"""Error types shared across FinGraph."""

from __future__ import annotations


class FinGraphError(Exception):
    """Base class for FinGraph errors."""


class SubmissionFailed(FinGraphError):
    """A backtest submission was not accepted by the service."""

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        self.detail = detail
        self.status_code = status_code
        suffix = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"Failed to run backtest: {detail}{suffix}")


class MalformedSeries(FinGraphError):
    """A time series whose halves are missing or differ in length."""
