import threading
import pytest
from pydantic import ValidationError
from signal_fusion.config import PipelineConfig
from signal_fusion.ensemble.aggregator import NO_ACTIVE
from signal_fusion.pipeline import Pipeline
from signal_fusion.types import StrategyId

def test_run_is_idempotent(mock_candles):
    p = Pipeline(PipelineConfig())
    first = p.run(mock_candles)
    second = p.run(mock_candles)
    assert first == second
    assert list(first.reports) == ["5m", "1h", "4h"]
    assert first.decision.direction in ("buy", "sell", "hold")
    assert 0.5 <= first.decision.confidence <= 0.9

def test_parallel_matches_sequential(mock_candles):
    seq = Pipeline(PipelineConfig()).run(mock_candles)
    par = Pipeline(PipelineConfig(parallel=True)).run(mock_candles)
    assert seq == par

def test_frames_respect_bounds(mock_candles):
    result = Pipeline(PipelineConfig()).run(mock_candles, mode="precision")
    for f in result.frames:
        assert 0.5 <= f.probability <= 0.9
        assert 0.0 <= f.uncertainty <= 1.0
        assert f.gate_pass

def test_parameter_updates():
    p = Pipeline(PipelineConfig())
    assert p.update_parameter("rsi", "period", 21)
    assert not p.update_parameter(StrategyId.EMA_CROSS, "fast", 30)
    copy = p.strategy("rsi")
    copy.period = 5
    assert p.strategy("rsi").period == 21

def test_configured_parameters_are_applied():
    p = Pipeline(PipelineConfig(parameters={"adx": {"period": 10}}))
    assert p.strategy(StrategyId.ADX).period == 10

def test_all_disabled_holds(mock_candles):
    p = Pipeline(PipelineConfig(enabled=[]))
    result = p.run(mock_candles)
    assert result.decision.direction == "hold"
    assert result.decision.notes == ("no eligible frames",)
    assert all(r.ensemble.reason == NO_ACTIVE for r in result.reports.values())

def test_enable_disable():
    p = Pipeline(PipelineConfig(enabled=[StrategyId.RSI]))
    p.enable("macd")
    p.disable(StrategyId.RSI)
    assert p.enabled == (StrategyId.MACD,)

def test_weights_are_clamped():
    p = Pipeline(PipelineConfig(weights={"rsi": 10.0}))
    assert p.weights[StrategyId.RSI] == 2.0
    assert p.set_weight("macd", 0.0) == 0.1
    assert p.weights[StrategyId.MACD] == 0.1
    assert p.weights[StrategyId.ADX] == 1.0

def test_set_temperature_rebuilds_calibrator(mock_candles):
    p = Pipeline(PipelineConfig(calibration="temperature"))
    p.set_temperature("1h", 0.5)
    assert p.config.temperatures["1h"] == 0.5
    report = p.evaluate_timeframe("1h", mock_candles["1h"])
    assert 0.5 <= report.frame.probability <= 0.9

def test_invalid_config_rejected():
    with pytest.raises(ValidationError):
        PipelineConfig(band=(0.9, 0.5))
    with pytest.raises(ValidationError):
        PipelineConfig(fees=-0.1)
    with pytest.raises(ValidationError):
        PipelineConfig(calibration="platt")

def test_regime_weighting_reports_regime(mock_candles):
    result = Pipeline(PipelineConfig(regime_weighting=True)).run(mock_candles)
    assert all(r.regime is not None for r in result.reports.values())

def test_missing_timeframe_is_skipped(mock_candles):
    result = Pipeline(PipelineConfig()).run({"1h": mock_candles["1h"]})
    assert list(result.reports) == ["1h"]

def test_updates_during_runs(mock_candles):
    p = Pipeline(PipelineConfig(parallel=True))
    errors = []

    def tweak():
        try:
            for period in range(5, 40):
                p.update_parameter("rsi", "period", period)
                p.set_weight("adx", period / 20)
        except Exception as e:  # pragma: no cover
            errors.append(e)

    t = threading.Thread(target=tweak)
    t.start()
    for _ in range(3):
        p.run(mock_candles)
    t.join()
    assert not errors
    assert p.strategy("rsi").period == 39

def test_config_lookups():
    cfg = PipelineConfig(weights={"macd": 1.5})
    assert cfg.weight(StrategyId.MACD) == 1.5
    assert cfg.weight(StrategyId.RSI) == 1.0
    assert cfg.thresholds("precision").min_probability == 0.70
    assert cfg.thresholds("normal").max_uncertainty == 0.60

def test_from_settings_overrides():
    cfg = PipelineConfig.from_settings(mode="precision", fees=0.001)
    assert cfg.mode == "precision"
    assert cfg.fees == 0.001
    assert set(cfg.temperatures) == {"5m", "1h", "4h"}

def test_integer_overrides_survive_config():
    cfg = PipelineConfig(parameters={"rsi": {"period": 21, "oversold": 25.5}, "ema_cross": {"fast": 5}})
    assert cfg.parameters[StrategyId.RSI]["period"] == 21
    assert isinstance(cfg.parameters[StrategyId.RSI]["period"], int)
    p = Pipeline(cfg)
    assert p.strategy("rsi").period == 21
    assert p.strategy("rsi").oversold == 25.5
    assert p.strategy("ema_cross").fast == 5

def test_cycle_uses_config_from_its_snapshot(mock_candles):
    p = Pipeline(PipelineConfig())
    snap = p._snapshot()
    p.config = p.config.model_copy(update={"fees": 0.05, "regime_weighting": True})
    report = p.evaluate_timeframe("1h", mock_candles["1h"], snap)
    assert report.gate.passed
    assert report.regime is None
    fresh = p.evaluate_timeframe("1h", mock_candles["1h"])
    assert not fresh.gate.passed
    assert fresh.regime is not None
