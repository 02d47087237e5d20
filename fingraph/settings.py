"""Centralised settings for FinGraph, loaded from env / .env."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FinGraphSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FINGRAPH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- general ---
    app_name: str = "FinGraph"

    # --- HTTP (this app) ---
    host: str = "0.0.0.0"
    port: int = 3000

    # --- backtest service ---
    api_url: str = "http://localhost:8080"
    request_timeout: float = 15.0

    # --- submission defaults ---
    default_data_id: str = "default_data"
    default_initial_cash: float = 10_000.0

    # --- chart output ---
    chart_dir: Path = Field(default_factory=lambda: Path.home() / ".fingraph" / "charts")


@lru_cache
def get_settings() -> FinGraphSettings:
    return FinGraphSettings()
