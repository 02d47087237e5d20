"""HTML / PNG chart renderer using Jinja2 + ECharts (+ Playwright).

Usage::

    from fingraph.charts import get_renderer

    html = get_renderer().render_html("strategy_detail", view=view, ...)
    paths = await get_renderer().render_strategy_png(view, save_dir=some_dir)

PNG export screenshots the ECharts page in headless Chromium. When
Playwright is not installed it falls back to a matplotlib drawing of the
same two charts.
"""

from __future__ import annotations

import re
import uuid
from pathlib import Path
from typing import Any

import jinja2
import pandas as pd
from loguru import logger

from fingraph.charts.panel import ChartPanel, mount_panels, strategy_panels
from fingraph.charts.series import (
    BUY_COLOR,
    EQUITY_COLOR,
    PRICE_COLOR,
    SELL_COLOR,
    partition_trades,
)
from fingraph.view.formatting import format_number, format_percent, sign_class
from fingraph.view.models import StrategyView, TimeSeries

_TEMPLATES_DIR = Path(__file__).parent / "templates"
_STATIC_DIR = Path(__file__).parent / "static"

ECHARTS_CDN = "https://cdn.jsdelivr.net/npm/echarts@5/dist/echarts.min.js"

# Sentinel checked by callers to decide matplotlib fallback
PLAYWRIGHT_AVAILABLE: bool = False

try:
    from playwright.async_api import Browser  # noqa: F401

    PLAYWRIGHT_AVAILABLE = True
except ImportError:
    pass


class ChartRenderer:
    """Shared renderer for pages and chart images.

    * Jinja2 environment is built once and reused.
    * Lazy-inits a Playwright Chromium browser on the first PNG export and
      reuses it; each export gets a fresh browser *context*.
    """

    def __init__(self, templates_dir: Path = _TEMPLATES_DIR) -> None:
        self._templates_dir = templates_dir
        self._jinja_env: jinja2.Environment | None = None
        self._pw: Any | None = None
        self._browser: Any | None = None
        self._echarts_js_cache: str | None = None

    # ── Templates ────────────────────────────────────────

    def _get_jinja_env(self) -> jinja2.Environment:
        """Return (cached) Jinja2 environment with template loader."""
        if self._jinja_env is not None:
            return self._jinja_env

        self._jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(self._templates_dir)),
            autoescape=jinja2.select_autoescape(["html"]),
        )
        self._jinja_env.globals.update(
            format_percent=format_percent,
            format_number=format_number,
            sign_class=sign_class,
        )
        return self._jinja_env

    def _load_echarts_js(self) -> str:
        """Read and cache a bundled ``static/echarts.min.js`` if one is shipped.

        Returns an empty string when there is none; pages then load ECharts
        from :data:`ECHARTS_CDN`.
        """
        if self._echarts_js_cache is not None:
            return self._echarts_js_cache

        echarts_path = _STATIC_DIR / "echarts.min.js"
        if not echarts_path.exists():
            self._echarts_js_cache = ""
            return ""

        self._echarts_js_cache = echarts_path.read_text(encoding="utf-8")
        logger.debug(f"Loaded echarts.min.js ({len(self._echarts_js_cache)} bytes)")
        return self._echarts_js_cache

    def render_html(self, template: str, **context: Any) -> str:
        """Render ``templates/{template}.html`` with *context*."""
        tpl = self._get_jinja_env().get_template(f"{template}.html")
        return tpl.render(
            echarts_inline_js=self._load_echarts_js(),
            echarts_cdn=ECHARTS_CDN,
            **context,
        )

    def render_panel(self, panel: ChartPanel) -> str:
        """Render a single panel fragment (placeholder while pending)."""
        return self.render_html("chart_panel", panel=panel.context())

    # ── Lifecycle ────────────────────────────────────────

    async def _ensure_browser(self) -> Any:
        """Launch Chromium on first call, reuse afterwards."""
        if self._browser is not None and self._browser.is_connected():
            return self._browser

        from playwright.async_api import async_playwright

        self._pw = await async_playwright().start()
        self._browser = await self._pw.chromium.launch(
            headless=True,
            args=[
                "--no-sandbox",
                "--disable-setuid-sandbox",
                "--disable-dev-shm-usage",
                "--disable-gpu",
            ],
        )
        logger.info("ChartRenderer: Chromium browser launched")
        return self._browser

    async def close(self) -> None:
        """Shut down browser gracefully."""
        if self._browser is not None:
            try:
                await self._browser.close()
            except Exception as e:
                logger.debug(f"ChartRenderer: browser close failed: {e}")
            self._browser = None
        if self._pw is not None:
            try:
                await self._pw.stop()
            except Exception as e:
                logger.debug(f"ChartRenderer: playwright stop failed: {e}")
            self._pw = None

    # ── PNG export ───────────────────────────────────────

    async def render_strategy_png(
        self,
        view: StrategyView,
        *,
        save_dir: Path,
        width: int = 1200,
        scale: float = 2.0,
        timeout_ms: int = 15_000,
    ) -> Path:
        """Export the price + equity charts for *view* to one PNG."""
        save_dir.mkdir(parents=True, exist_ok=True)
        name_token = re.sub(r"[^A-Za-z0-9._-]+", "_", view.id) or "strategy"
        out_path = save_dir / f"{name_token}_{uuid.uuid4().hex[:8]}.png"

        if not PLAYWRIGHT_AVAILABLE:
            logger.info("ChartRenderer: Playwright not installed, using matplotlib")
            return render_matplotlib_png(view, out_path)

        panels = strategy_panels(view)
        await mount_panels(*panels)
        html = self.render_html(
            "strategy_charts",
            view=view,
            panels=[p.context() for p in panels],
            chart_count=len(panels),
        )
        await self._screenshot(html, out_path, width=width, scale=scale, timeout_ms=timeout_ms)
        return out_path

    async def _screenshot(
        self,
        html: str,
        out_path: Path,
        *,
        width: int,
        scale: float,
        timeout_ms: int,
    ) -> None:
        browser = await self._ensure_browser()
        context = await browser.new_context(
            viewport={"width": width, "height": 900},
            device_scale_factor=scale,
        )
        page = await context.new_page()

        try:
            js_errors: list[str] = []
            page.on(
                "pageerror",
                lambda exc: (
                    js_errors.append(str(exc)),
                    logger.warning(f"ChartRenderer JS error: {exc}"),
                )[0],
            )

            await page.set_content(html, wait_until="networkidle")

            # Wait for the page JS to signal both charts are drawn
            try:
                await page.wait_for_function(
                    "() => window.__chartReady === true",
                    timeout=timeout_ms,
                )
            except Exception:
                err_detail = f" | JS errors: {js_errors}" if js_errors else ""
                logger.warning(
                    f"ChartRenderer: __chartReady not set within {timeout_ms}ms, "
                    f"proceeding with screenshot anyway{err_detail}"
                )

            await page.screenshot(path=str(out_path), full_page=True)
            logger.info(f"ChartRenderer: saved {out_path} ({width}px @{scale}x)")
        finally:
            await context.close()


# ═══════════════════════════════════════════════════════
# matplotlib fallback
# ═══════════════════════════════════════════════════════

def _timestamps(series: TimeSeries) -> tuple[pd.DatetimeIndex, list[float]]:
    stamps = pd.to_datetime(pd.Series(series.dates, dtype="object"), errors="coerce")
    mask = stamps.notna().to_list()
    kept = [v for v, ok in zip(series.values, mask) if ok]
    return pd.DatetimeIndex(stamps[stamps.notna()]), kept


def render_matplotlib_png(view: StrategyView, out_path: Path) -> Path:
    """Draw the two charts with matplotlib (shared x-axis) and save a PNG."""
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    fig, (ax_price, ax_eq) = plt.subplots(
        2, 1, figsize=(12, 8), sharex=True, gridspec_kw={"height_ratios": [1, 1], "hspace": 0.15}
    )

    # ── Price + trade markers ──
    stamps, prices = _timestamps(view.price_series)
    ax_price.plot(stamps, prices, color=PRICE_COLOR, linewidth=1.8, label="Price")
    buys, sells = partition_trades(view.trades)
    for events, color, marker, label in (
        (buys, BUY_COLOR, "^", "Buy"),
        (sells, SELL_COLOR, "v", "Sell"),
    ):
        marks = TimeSeries(tuple(e.date for e in events), tuple(e.price for e in events))
        mark_ts, mark_px = _timestamps(marks)
        ax_price.scatter(mark_ts, mark_px, color=color, marker=marker, s=60, zorder=5, label=label)
    ax_price.set_ylabel("Price ($)")
    ax_price.legend(loc="upper left", fontsize=9)
    ax_price.set_title(view.name, fontsize=12, fontweight="bold")

    # ── Equity, filled from zero ──
    stamps, equity = _timestamps(view.equity_series)
    ax_eq.plot(stamps, equity, color=EQUITY_COLOR, linewidth=1.8)
    if len(stamps):
        ax_eq.fill_between(stamps, equity, 0, color=EQUITY_COLOR, alpha=0.1)
    ax_eq.set_ylabel("Equity ($)")
    ax_eq.set_xlabel("Date")

    plt.savefig(str(out_path), dpi=120, bbox_inches="tight", facecolor="white")
    plt.close(fig)
    logger.info(f"Strategy chart saved: {out_path}")
    return out_path


# ── Module-level singleton ──────────────────────────────

_renderer: ChartRenderer | None = None


def get_renderer() -> ChartRenderer:
    """Return the module-level singleton, creating it lazily."""
    global _renderer
    if _renderer is None:
        _renderer = ChartRenderer()
    return _renderer

