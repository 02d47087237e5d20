import json
from pathlib import Path

import httpx
import pytest
from typer.testing import CliRunner

from fingraph.cli import commands
from fingraph.client.remote import BacktestClient
from fingraph.client.samples import sample_backtest_payload, sample_strategy_list

runner = CliRunner()


@pytest.fixture
def backend(monkeypatch: pytest.MonkeyPatch):
    state = {"strategies": [], "detail": None, "runs": [], "info": {}, "submit_status": 200, "bodies": []}

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/api/v1/strategies":
            return httpx.Response(200, json=state["strategies"])
        if path == "/api/v1/backtest" and request.method == "POST":
            state["bodies"].append(json.loads(request.content))
            if state["submit_status"] >= 400:
                return httpx.Response(state["submit_status"], json={"error": "rejected"})
            return httpx.Response(200, json={"id": "job-3"})
        if path == "/api/v1/backtest":
            return httpx.Response(200, json=state["runs"])
        if path.startswith("/api/v1/strategies/"):
            info = state["info"].get(path.rsplit("/", 1)[-1])
            return httpx.Response(200, json=info) if info else httpx.Response(404)
        if state["detail"] is not None:
            return httpx.Response(200, json=state["detail"])
        return httpx.Response(404)

    client = BacktestClient("http://backtest.test", transport=httpx.MockTransport(handler))
    monkeypatch.setattr(commands, "_client", lambda: client)
    return state


def test_parse_param() -> None:
    assert commands.parse_param("shortWindow=10") == ("shortWindow", 10)
    assert commands.parse_param("threshold=30.5") == ("threshold", 30.5)
    assert commands.parse_param("enabled=true") == ("enabled", True)
    assert commands.parse_param("mode = fast") == ("mode", "fast")


def test_parse_param_rejects_missing_equals() -> None:
    import typer

    with pytest.raises(typer.BadParameter):
        commands.parse_param("oops")


def test_list_empty(backend) -> None:
    result = runner.invoke(commands.app, ["list"])

    assert result.exit_code == 0
    assert "No strategies found." in result.output


def test_list_strategies(backend) -> None:
    backend["strategies"] = sample_strategy_list()

    result = runner.invoke(commands.app, ["list"])

    assert result.exit_code == 0
    assert "RSIStrategy" in result.output


def test_show_not_found_exits_1(backend) -> None:
    result = runner.invoke(commands.app, ["show", "missing"])

    assert result.exit_code == 1
    assert "not found" in result.output


def test_show_prints_metrics(backend) -> None:
    backend["detail"] = sample_backtest_payload(days=8)

    result = runner.invoke(commands.app, ["show", "ma"])

    assert result.exit_code == 0
    assert "Performance Metrics" in result.output
    assert "-8.20%" in result.output
    assert "BUY" in result.output


def test_submit_success(backend) -> None:
    result = runner.invoke(
        commands.app,
        ["submit", "MovingAverageStrategy", "-p", "shortWindow=5", "--cash", "5000", "--start", "2024-01-01"],
    )

    assert result.exit_code == 0
    assert "job-3" in result.output
    (body,) = backend["bodies"]
    assert body["parameters"] == {"shortWindow": 5}
    assert body["initialCash"] == 5000
    assert body["startDate"] == "2024-01-01"


def test_submit_failure_exits_1(backend) -> None:
    backend["submit_status"] = 500

    result = runner.invoke(commands.app, ["submit", "RSIStrategy"])

    assert result.exit_code == 1
    assert "rejected" in result.output


def test_submit_bad_date_exits_1(backend) -> None:
    result = runner.invoke(commands.app, ["submit", "RSIStrategy", "--start", "yesterday"])

    assert result.exit_code == 1
    assert backend["bodies"] == []


def test_show_png_defaults_to_configured_chart_dir(
    backend, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    from fingraph.charts import renderer as renderer_mod
    from fingraph.settings import get_settings

    monkeypatch.setattr(renderer_mod, "PLAYWRIGHT_AVAILABLE", False)
    monkeypatch.setenv("FINGRAPH_CHART_DIR", str(tmp_path / "charts"))
    get_settings.cache_clear()
    backend["detail"] = sample_backtest_payload(days=8)

    try:
        result = runner.invoke(commands.app, ["show", "ma", "--png"])
    finally:
        get_settings.cache_clear()

    assert result.exit_code == 0
    (png,) = (tmp_path / "charts").glob("ma_*.png")
    assert "Charts saved" in result.output


def test_show_png_out_overrides_chart_dir(
    backend, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    from fingraph.charts import renderer as renderer_mod

    monkeypatch.setattr(renderer_mod, "PLAYWRIGHT_AVAILABLE", False)
    backend["detail"] = sample_backtest_payload(days=8)

    result = runner.invoke(commands.app, ["show", "ma", "--png", "--out", str(tmp_path)])

    assert result.exit_code == 0
    assert len(list(tmp_path.glob("ma_*.png"))) == 1


def test_runs_lists_previous_backtests(backend) -> None:
    backend["runs"] = [
        {"id": "bt-1", "strategy": "RSIStrategy", "metrics": {"totalReturn": 4.25, "totalTrades": 6}},
        {"strategy": "no id"},
    ]

    result = runner.invoke(commands.app, ["runs"])

    assert result.exit_code == 0
    assert "bt-1" in result.output
    assert "RSIStrategy" in result.output
    assert "4.25%" in result.output
    assert "no id" not in result.output


def test_runs_empty(backend) -> None:
    result = runner.invoke(commands.app, ["runs"])

    assert result.exit_code == 0
    assert "No backtests found." in result.output


def test_info_prints_parameter_specs(backend) -> None:
    backend["info"]["RSIStrategy"] = {
        "id": "RSIStrategy",
        "name": "RSIStrategy",
        "description": "RSI mean reversion",
        "parameters": [
            {"name": "period", "type": "integer", "defaultValue": 14, "min": 2, "max": 50,
             "description": "RSI calculation period"},
            "junk",
        ],
    }

    result = runner.invoke(commands.app, ["info", "RSIStrategy"])

    assert result.exit_code == 0
    assert "RSI mean reversion" in result.output
    assert "period" in result.output
    assert "2..50" in result.output


def test_info_not_found_exits_1(backend) -> None:
    result = runner.invoke(commands.app, ["info", "Nope"])

    assert result.exit_code == 1
    assert "not found" in result.output
