import math
import pytest
from signal_fusion.errors import ConfigError
from signal_fusion.strategies import (
    AdxStrategy, EmaCrossStrategy, ParabolicSar, RsiStrategy, VolumeBreakout, create_strategy, default_strategies,
)
from signal_fusion.types import StrategyId, StrategySignal


@pytest.mark.parametrize("strategy", default_strategies(), ids=lambda s: s.id.value)
def test_insufficient_data_is_hold_with_zero_confidence(strategy, make_candles):
    candles = make_candles([100.0 + (i % 3) for i in range(strategy.required_candles - 1)])
    sig = strategy.evaluate(candles)
    assert sig.direction == "hold"
    assert sig.confidence == 0.0
    assert sig.strategy_id == strategy.id


@pytest.mark.parametrize("strategy", default_strategies(), ids=lambda s: s.id.value)
def test_signals_are_bounded_on_market_like_data(strategy, mock_candles):
    for candles in mock_candles.values():
        sig = strategy.evaluate(candles)
        assert sig.direction in ("buy", "sell", "hold")
        assert 0.0 <= sig.confidence <= 1.0
        assert sig.reason


def test_empty_window_does_not_raise():
    for s in default_strategies():
        assert s.evaluate([]).confidence == 0.0


def test_adx_strategy_follows_uptrend(uptrend):
    sig = AdxStrategy().evaluate(uptrend)
    assert sig.direction == "buy"
    assert sig.confidence == pytest.approx(0.6)


def test_rsi_oversold_on_selloff(make_candles):
    candles = make_candles([100.0 - 0.5 * i for i in range(50)])
    sig = RsiStrategy().evaluate(candles)
    assert sig.direction == "buy"
    assert sig.confidence == pytest.approx(1.0)


def test_volume_spike_breakout(make_candles):
    closes = [100.0] * 29 + [103.0]
    volumes = [1000.0] * 29 + [5000.0]
    sig = VolumeBreakout().evaluate(make_candles(closes, volumes=volumes))
    assert sig.direction == "buy"
    assert sig.confidence == pytest.approx(0.9)


def test_parameter_update_is_clamped():
    s = RsiStrategy()
    assert s.update_parameter("period", 500)
    assert s.period == 50
    assert s.update_parameter("overbought", 10.0)
    assert s.overbought == 50.0
    assert s.required_candles == 150


def test_wrong_type_or_unknown_key_is_ignored():
    s = RsiStrategy()
    assert not s.update_parameter("period", "21")
    assert not s.update_parameter("period", 21.5)
    assert not s.update_parameter("period", True)
    assert not s.update_parameter("oversold", math.nan)
    assert not s.update_parameter("nope", 3)
    assert s.parameters() == {"period": 14, "overbought": 70.0, "oversold": 30.0}


def test_int_accepted_for_float_parameter():
    s = RsiStrategy()
    assert s.update_parameter("oversold", 25)
    assert s.oversold == 25.0 and isinstance(s.oversold, float)


def test_cross_parameter_constraint_rejected():
    s = EmaCrossStrategy()
    assert not s.update_parameter("fast", 30)
    assert s.fast == 9
    with pytest.raises(ConfigError):
        s.validate_parameter("fast", 30)


def test_validate_parameter_raises_typed_error():
    with pytest.raises(ConfigError):
        AdxStrategy().validate_parameter("speed", 1)
    assert AdxStrategy().validate_parameter("period", 2) == 5


def test_create_strategy_applies_overrides():
    s = create_strategy("adx", {"period": 10, "bogus": 1})
    assert s.id is StrategyId.ADX
    assert s.period == 10
    assert s.required_candles == 40


def test_ignored_update_is_logged(caplog):
    with caplog.at_level("WARNING"):
        RsiStrategy().update_parameter("period", "x")
    assert "ignored parameter update" in caplog.text


def test_non_finite_confidence_becomes_zero():
    assert StrategySignal(StrategyId.RSI, "buy", math.nan).confidence == 0.0
    assert StrategySignal(StrategyId.RSI, "buy", math.inf).confidence == 0.0
    assert StrategySignal(StrategyId.RSI, "buy", 1.7).confidence == 1.0


def test_sar_step_cannot_exceed_maximum():
    s = ParabolicSar(af=0.02, max_af=0.1)
    assert not s.update_parameter("af", 0.15)
    assert s.af == 0.02
    assert s.update_parameter("af", 0.08)
    assert not s.update_parameter("max_af", 0.06)
