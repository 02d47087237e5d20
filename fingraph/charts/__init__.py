"""Chart rendering: ECharts options, deferred panels, HTML/PNG export.

Public API
----------
- ``price_chart_option`` / ``equity_chart_option`` – pure option builders.
- ``partition_trades`` – split raw trades into typed buys / sells.
- ``ChartPanel`` / ``strategy_panels`` / ``mount_panels`` – deferred-draw panels.
- ``get_renderer`` – shared :class:`ChartRenderer` for pages and PNGs.
- ``PLAYWRIGHT_AVAILABLE`` – whether the Playwright PNG backend is usable.

Example::

    from fingraph.charts import get_renderer

    path = await get_renderer().render_strategy_png(view, save_dir=some_dir)
"""

from fingraph.charts.panel import ChartPanel, PanelState, mount_panels, strategy_panels
from fingraph.charts.renderer import PLAYWRIGHT_AVAILABLE, ChartRenderer, get_renderer
from fingraph.charts.series import (
    equity_chart_option,
    parse_trade,
    partition_trades,
    price_chart_option,
)

__all__ = [
    "PLAYWRIGHT_AVAILABLE",
    "ChartPanel",
    "ChartRenderer",
    "PanelState",
    "equity_chart_option",
    "get_renderer",
    "mount_panels",
    "parse_trade",
    "partition_trades",
    "price_chart_option",
    "strategy_panels",
]
