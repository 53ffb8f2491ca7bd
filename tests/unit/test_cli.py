from __future__ import annotations

import json

from typer.testing import CliRunner

from balance_monitor.main import app
from balance_monitor.reporter import format_amount

runner = CliRunner()


def test_strategies_lists_builtin_ids() -> None:
    result = runner.invoke(app, ["strategies"])
    assert result.exit_code == 0
    for strategy_id in ("deepseek", "moonshot", "aihubmix", "openrouter", "volcengine", "ppio"):
        assert strategy_id in result.output


def test_parse_prints_balance(tmp_path, deepseek_response) -> None:
    response_file = tmp_path / "response.json"
    response_file.write_text(json.dumps(deepseek_response), encoding="utf-8")

    result = runner.invoke(app, ["parse", str(response_file), "--strategy", "deepseek"])

    assert result.exit_code == 0
    assert "44.35" in result.output
    assert "CNY" in result.output


def test_parse_unknown_strategy_exits_nonzero(tmp_path) -> None:
    response_file = tmp_path / "response.json"
    response_file.write_text("{}", encoding="utf-8")

    result = runner.invoke(app, ["parse", str(response_file), "--strategy", "nope"])

    assert result.exit_code == 1


def test_query_without_targets_file_exits_2(tmp_path) -> None:
    result = runner.invoke(app, ["query", "ds", "--file", str(tmp_path / "missing.json")])
    assert result.exit_code == 2


def test_format_amount() -> None:
    assert format_amount(None) == "-"
    assert format_amount(float("inf")) == "unlimited"
    assert format_amount(1234.5) == "1,234.50"
