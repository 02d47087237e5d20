"""Chart panels with a deferred first draw.

ECharts needs a laid-out DOM node, which is not there on the first
synchronous pass. A panel therefore starts ``PENDING`` (placeholder only)
and becomes ``READY`` once :meth:`ChartPanel.mount` has yielded one
scheduling tick. The HTML side repeats the same idea: ``echarts.init`` runs
after window ``load`` plus one animation frame.
"""

from __future__ import annotations

import asyncio
import json
from enum import Enum
from typing import Any

from loguru import logger

from fingraph.charts.series import CHART_HEIGHT, equity_chart_option, price_chart_option
from fingraph.view.models import StrategyView


class PanelState(str, Enum):
    PENDING = "pending"
    READY = "ready"


class ChartPanel:
    """One chart slot on a page: an ECharts option plus its lifecycle state."""

    def __init__(self, kind: str, option: dict[str, Any], *, height: int = CHART_HEIGHT) -> None:
        self.kind = kind
        self.option = option
        self.height = height
        self.state = PanelState.PENDING

    @property
    def element_id(self) -> str:
        return f"chart-{self.kind}"

    @property
    def ready(self) -> bool:
        return self.state is PanelState.READY

    async def mount(self) -> None:
        """Move to ``READY`` after one tick. Later calls are no-ops."""
        if self.ready:
            return
        await asyncio.sleep(0)
        self.state = PanelState.READY
        logger.debug(f"Chart panel '{self.kind}' mounted")

    def context(self) -> dict[str, Any]:
        """Template context for ``chart_panel.html``."""
        return {
            "element_id": self.element_id,
            "kind": self.kind,
            "height": self.height,
            "ready": self.ready,
            # "</" escaped so the JSON can sit inside a <script> block
            "option_json": json.dumps(self.option, default=str).replace("</", "<\\/"),
        }


def strategy_panels(view: StrategyView) -> tuple[ChartPanel, ChartPanel]:
    """Return the ``(price, equity)`` panel pair for a strategy view."""
    return (
        ChartPanel("price", price_chart_option(view)),
        ChartPanel("equity", equity_chart_option(view)),
    )


async def mount_panels(*panels: ChartPanel) -> None:
    await asyncio.gather(*(panel.mount() for panel in panels))
