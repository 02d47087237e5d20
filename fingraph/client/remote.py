"""Backtest service HTTP client.

Base: ``FINGRAPH_API_URL`` (fallback http://localhost:8080).
All methods are async and use httpx. Reads never raise: failures are logged
and turned into ``NOT_FOUND`` / ``[]``. Submission is the one write and
raises :class:`SubmissionFailed`.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx
from loguru import logger

from fingraph.client.schemas import BacktestRequest
from fingraph.errors import SubmissionFailed
from fingraph.settings import FinGraphSettings, get_settings
from fingraph.view.models import NOT_FOUND, NotFound, RawPayload

_API_PREFIX = "api/v1"


class BacktestClient:
    """
    Client for the remote backtest computation service.

    Single attempt per call, no retries; the caller decides when to re-fetch.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Service base URL (trailing slash optional).
            timeout: Per-request timeout in seconds; defaults to
                ``FINGRAPH_REQUEST_TIMEOUT``.
            transport: Optional httpx transport, mainly for tests.
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = get_settings().request_timeout if timeout is None else timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: FinGraphSettings | None = None) -> "BacktestClient":
        settings = settings or get_settings()
        return cls(settings.api_url, timeout=settings.request_timeout)

    @property
    def base_url(self) -> str:
        return self._base_url

    # ──────────────────────── low-level ────────────────────────

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
            headers={"accept": "application/json"},
        )

    async def _get_json(self, endpoint: str) -> Any | NotFound:
        """
        GET ``endpoint`` and decode the JSON body.

        Returns:
            Decoded JSON, or ``NOT_FOUND`` on transport error, non-2xx
            status or an unparseable body.
        """
        path = f"/{_API_PREFIX}/{endpoint.lstrip('/')}"
        try:
            async with self._client() as client:
                resp = await client.get(path)
        except httpx.RequestError as e:
            logger.error(f"Backtest service request failed [{path}]: {e}")
            return NOT_FOUND

        if not resp.is_success:
            logger.warning(f"Backtest service HTTP {resp.status_code}: {path}")
            return NOT_FOUND

        try:
            return resp.json()
        except ValueError as e:
            logger.error(f"Backtest service returned malformed JSON [{path}]: {e}")
            return NOT_FOUND

    async def _get_object(self, endpoint: str) -> RawPayload | NotFound:
        data = await self._get_json(endpoint)
        if data is NOT_FOUND:
            return NOT_FOUND
        if not isinstance(data, dict):
            logger.error(f"Backtest service returned {type(data).__name__}, expected object: {endpoint}")
            return NOT_FOUND
        return data

    async def _get_list(self, endpoint: str) -> list[RawPayload]:
        data = await self._get_json(endpoint)
        if data is NOT_FOUND:
            return []
        if not isinstance(data, list):
            logger.error(f"Backtest service returned {type(data).__name__}, expected list: {endpoint}")
            return []
        entries = [item for item in data if isinstance(item, dict)]
        if len(entries) != len(data):
            logger.warning(f"Dropped {len(data) - len(entries)} non-object entries from {endpoint}")
        return entries

    # ──────────────────────── reads ────────────────────────

    async def fetch_raw(self, strategy_id: str) -> RawPayload | NotFound:
        """Fetch the raw backtest result for ``strategy_id``."""
        return await self._get_object(f"backtest/{quote(strategy_id, safe='')}")

    async def fetch_strategy_list(self) -> list[RawPayload]:
        """Fetch ``[{id, name, description}, ...]``; empty on any failure."""
        return await self._get_list("strategies")

    async def fetch_strategy_info(self, strategy_id: str) -> RawPayload | NotFound:
        """Fetch a strategy definition including its parameter specs."""
        return await self._get_object(f"strategies/{quote(strategy_id, safe='')}")

    async def fetch_backtest_list(self) -> list[RawPayload]:
        """Fetch previously run backtests; empty on any failure."""
        return await self._get_list("backtest")

    # ──────────────────────── writes ────────────────────────

    async def submit_backtest(self, request: BacktestRequest) -> str:
        """
        Queue a backtest run.

        Returns:
            The job/strategy id reported by the service.

        Raises:
            SubmissionFailed: transport error, non-2xx status, or a body
                without an id.
        """
        path = f"/{_API_PREFIX}/backtest"
        try:
            async with self._client() as client:
                resp = await client.post(path, json=request.to_payload())
        except httpx.RequestError as e:
            logger.error(f"Backtest submission failed [{request.strategy_id}]: {e}")
            raise SubmissionFailed(str(e)) from e

        if not resp.is_success:
            detail = _error_detail(resp)
            logger.error(f"Backtest submission HTTP {resp.status_code} [{request.strategy_id}]: {detail}")
            raise SubmissionFailed(detail, status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            logger.error(f"Backtest submission returned malformed JSON: {e}")
            raise SubmissionFailed("malformed response body", status_code=resp.status_code) from e

        job_id = None
        if isinstance(data, dict):
            job_id = data.get("strategyId") or data.get("id")
        if job_id is None or isinstance(job_id, bool) or not str(job_id).strip():
            logger.error(f"Backtest submission response carried no id: {data!r}")
            raise SubmissionFailed("response carried no job id", status_code=resp.status_code)

        logger.info(f"Backtest queued: strategy={request.strategy_id} job={job_id}")
        return str(job_id)


def _error_detail(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        msg = data.get("error") or data.get("message") or data.get("msg")
        if msg:
            return str(msg)
    return resp.text.strip() or f"HTTP {resp.status_code}"
