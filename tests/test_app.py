import json
from typer.testing import CliRunner
from signal_fusion.app import cli

runner = CliRunner()

def test_gate_passes_default_costs():
    result = runner.invoke(cli, ["gate", "--timeframe", "1h", "--fees", "0.0005", "--slippage", "0.0002"])
    assert result.exit_code == 0
    assert "PASS" in result.stdout

def test_gate_fails_high_costs():
    result = runner.invoke(cli, ["gate", "--timeframe", "5m", "--fees", "0.01", "--slippage", "0"])
    assert result.exit_code == 0
    assert "FAIL" in result.stdout

def test_strategies_lists_table():
    result = runner.invoke(cli, ["strategies"])
    assert result.exit_code == 0
    assert "Strategies" in result.stdout

def test_calibrate_temperature():
    result = runner.invoke(cli, ["calibrate", "0.5", "--method", "temperature"])
    assert result.exit_code == 0
    assert "0.5000 -> 0.7000" in result.stdout

def test_features_command():
    result = runner.invoke(cli, ["features", "--timeframe", "4h"])
    assert result.exit_code == 0
    assert "rsi_14" in result.stdout

def test_advise_json():
    result = runner.invoke(cli, ["--log-level", "WARNING", "advise", "--json", "--seed", "3"])
    assert result.exit_code == 0
    out = json.loads(result.stdout)
    assert out["direction"] in ("buy", "sell", "hold")
    assert [f["timeframe"] for f in out["frames"]] == ["5m", "1h", "4h"]

def test_advise_rejects_unknown_mode():
    result = runner.invoke(cli, ["advise", "--mode", "fast"])
    assert result.exit_code != 0
