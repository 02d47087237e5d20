"""CLI commands for FinGraph."""

import asyncio
from datetime import date
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from fingraph import __logo__, __version__

app = typer.Typer(
    name="fingraph",
    help=f"{__logo__} FinGraph - backtest result viewer",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} FinGraph v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """FinGraph - backtest result viewer."""
    pass


def _client():
    from fingraph.client import BacktestClient

    return BacktestClient.from_settings()


def parse_param(raw: str) -> tuple[str, bool | int | float | str]:
    """Parse ``key=value`` into a typed parameter (bool, int, float, else str)."""
    key, sep, value = raw.partition("=")
    key = key.strip()
    if not sep or not key:
        raise typer.BadParameter(f"expected key=value, got '{raw}'")
    value = value.strip()

    lowered = value.lower()
    if lowered in ("true", "false"):
        return key, lowered == "true"
    for cast in (int, float):
        try:
            return key, cast(value)
        except ValueError:
            continue
    return key, value


# ============================================================================
# Read commands
# ============================================================================


@app.command("list")
def list_cmd():
    """List available strategies."""
    from fingraph.view.listing import list_strategies

    views = asyncio.run(list_strategies(_client()))

    if not views:
        console.print("No strategies found.")
        console.print("[dim]Run your first backtest to get started.[/dim]")
        return

    table = Table(title="Trading Strategies")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Description")

    for view in views:
        table.add_row(escape(view.id), escape(view.name), escape(view.description))

    console.print(table)


_STYLE = {"positive": "green", "negative": "red", "neutral": "white"}


@app.command()
def show(
    strategy_id: str = typer.Argument(..., help="Strategy / backtest id"),
    png: bool = typer.Option(False, "--png", help="Also export the charts as PNG"),
    out_dir: Path = typer.Option(None, "--out", "-o", help="PNG directory (default: FINGRAPH_CHART_DIR)"),
):
    """Show metrics and trades for one backtest."""
    from fingraph.charts import get_renderer, parse_trade
    from fingraph.settings import get_settings
    from fingraph.view.formatting import format_number, metric_rows
    from fingraph.view.models import NOT_FOUND
    from fingraph.view.normalizer import normalize

    async def run():
        raw = await _client().fetch_raw(strategy_id)
        view = normalize(strategy_id, raw)
        path = None
        if view is not NOT_FOUND and png:
            renderer = get_renderer()
            save_dir = out_dir or get_settings().chart_dir
            try:
                path = await renderer.render_strategy_png(view, save_dir=save_dir)
            finally:
                await renderer.close()
        return view, path

    view, chart_path = asyncio.run(run())
    if view is NOT_FOUND:
        console.print(f"[red]Strategy {escape(strategy_id)} not found[/red]")
        raise typer.Exit(1)

    console.print(f"{__logo__} [bold]{escape(view.name)}[/bold]")
    console.print(f"[dim]{escape(view.description)}[/dim]\n")

    metrics = Table(title="Performance Metrics")
    metrics.add_column("Metric")
    metrics.add_column("Value", justify="right")
    for label, value, css in metric_rows(view.metrics):
        metrics.add_row(label, f"[{_STYLE[css]}]{value}[/{_STYLE[css]}]")
    console.print(metrics)

    trades = Table(title="Recent Trades")
    trades.add_column("Side")
    trades.add_column("Date")
    trades.add_column("Price", justify="right")
    trades.add_column("Quantity", justify="right")
    for record in view.trades:
        trade = parse_trade(record)
        if trade is None:
            continue
        color = "green" if trade.side == "buy" else "red"
        trades.add_row(
            f"[{color}]{trade.side.upper()}[/{color}]",
            escape(trade.date),
            f"${format_number(trade.price)}",
            f"{trade.quantity:g}",
        )
    console.print(trades)

    if chart_path is not None:
        console.print(f"[green]✓[/green] Charts saved to {chart_path}")


@app.command()
def runs():
    """List backtests the service has already run."""
    from fingraph.view.formatting import format_percent
    from fingraph.view.listing import list_backtests

    views = asyncio.run(list_backtests(_client()))

    if not views:
        console.print("No backtests found.")
        return

    table = Table(title="Backtest Runs")
    table.add_column("ID", style="cyan")
    table.add_column("Strategy")
    table.add_column("Total Return", justify="right")
    table.add_column("Trades", justify="right")

    for view in views:
        ret = view.metrics.total_return_pct
        color = "green" if ret >= 0 else "red"
        table.add_row(
            escape(view.id),
            escape(view.name),
            f"[{color}]{format_percent(ret)}[/{color}]",
            str(view.metrics.total_trades),
        )

    console.print(table)


@app.command()
def info(strategy_id: str = typer.Argument(..., help="Strategy id, e.g. RSIStrategy")):
    """Show a strategy definition and its tunable parameters."""
    from fingraph.view.models import NOT_FOUND
    from fingraph.view.normalizer import summarize

    raw = asyncio.run(_client().fetch_strategy_info(strategy_id))
    view = None if raw is NOT_FOUND else summarize({**raw, "id": strategy_id})
    if view is None:
        console.print(f"[red]Strategy {escape(strategy_id)} not found[/red]")
        raise typer.Exit(1)

    console.print(f"{__logo__} [bold]{escape(view.name)}[/bold]")
    console.print(f"[dim]{escape(view.description)}[/dim]\n")

    specs = raw.get("parameters")
    specs = [s for s in specs if isinstance(s, dict) and s.get("name")] if isinstance(specs, list) else []
    if not specs:
        console.print("No tunable parameters.")
        return

    table = Table(title="Parameters")
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Default", justify="right")
    table.add_column("Range", justify="right")
    table.add_column("Description")
    for spec in specs:
        low, high = spec.get("min"), spec.get("max")
        table.add_row(
            escape(str(spec["name"])),
            escape(str(spec.get("type", ""))),
            escape(str(spec.get("defaultValue", ""))),
            escape(f"{low}..{high}") if low is not None and high is not None else "",
            escape(str(spec.get("description", ""))),
        )
    console.print(table)


# ============================================================================
# Submit
# ============================================================================


@app.command()
def submit(
    strategy: str = typer.Argument(..., help="Strategy to run, e.g. MovingAverageStrategy"),
    param: list[str] = typer.Option(None, "--param", "-p", help="Strategy parameter as key=value"),
    cash: float = typer.Option(None, "--cash", help="Initial cash"),
    data_id: str = typer.Option(None, "--data-id", help="Market data file id"),
    start: str = typer.Option(None, "--start", help="Start date (YYYY-MM-DD)"),
    end: str = typer.Option(None, "--end", help="End date (YYYY-MM-DD)"),
):
    """Submit a backtest run to the service."""
    from fingraph.client import BacktestRequest
    from fingraph.errors import SubmissionFailed
    from fingraph.settings import get_settings

    settings = get_settings()
    try:
        request = BacktestRequest(
            strategy_id=strategy,
            parameters=dict(parse_param(p) for p in param or []),
            initial_cash=settings.default_initial_cash if cash is None else cash,
            data_id=data_id or settings.default_data_id,
            start_date=date.fromisoformat(start) if start else None,
            end_date=date.fromisoformat(end) if end else None,
        )
    except ValueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    try:
        job_id = asyncio.run(_client().submit_backtest(request))
    except SubmissionFailed as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Backtest queued: {job_id}")


# ============================================================================
# Serve (FastAPI HTTP)
# ============================================================================


@app.command()
def serve(
    host: str = typer.Option(None, "--host", help="Bind host"),
    port: int = typer.Option(None, "--port", "-p", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
):
    """Start the FinGraph web UI (FastAPI + Uvicorn)."""
    import uvicorn

    from fingraph.settings import get_settings

    settings = get_settings()
    host = host or settings.host
    port = port or settings.port

    console.print(f"{__logo__} Starting FinGraph on {host}:{port} ...")
    uvicorn.run(
        "fingraph.web.app:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


if __name__ == "__main__":
    app()
