"""Backtest submission endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from fingraph.client.schemas import BacktestRequest
from fingraph.errors import SubmissionFailed

router = APIRouter()


class SubmissionOut(BaseModel):
    job_id: str


@router.post("/backtest", response_model=SubmissionOut)
async def submit_backtest(body: BacktestRequest, request: Request):
    try:
        job_id = await request.app.state.client.submit_backtest(body)
    except SubmissionFailed as e:
        return JSONResponse(
            status_code=502,
            content={"error": str(e), "upstream_status": e.status_code},
        )
    return SubmissionOut(job_id=job_id)
