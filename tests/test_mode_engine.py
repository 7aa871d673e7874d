import pytest
from signal_fusion.mode_engine import ModeEngine, decide, meta_confidence
from signal_fusion.types import PerTimeframeSignal

def frame(tf, d, p=0.8, u=0.2, gate=True):
    return PerTimeframeSignal(tf, d, p, u, gate)

def test_precision_veto_by_4h():
    frames = [frame("5m", "buy"), frame("1h", "buy"), frame("4h", "sell")]
    d = decide(frames, "precision")
    assert d.direction == "hold"
    assert d.notes == ("no consensus",)

def test_precision_buy_with_neutral_4h():
    frames = [frame("5m", "buy"), frame("1h", "buy"), frame("4h", "hold")]
    assert decide(frames, "precision").direction == "buy"

def test_precision_ignores_ineligible_frames():
    # 1h fails the precision thresholds, so it counts as hold
    frames = [frame("5m", "buy"), frame("1h", "buy", p=0.65), frame("4h", "buy")]
    assert decide(frames, "precision").direction == "hold"
    assert decide(frames, "normal").direction == "buy"

def test_normal_majority_vote():
    frames = [frame("5m", "sell"), frame("1h", "sell"), frame("4h", "buy")]
    d = decide(frames, "normal")
    assert d.direction == "sell"
    assert 0.5 <= d.confidence <= 0.9

def test_normal_tie():
    d = decide([frame("5m", "buy"), frame("1h", "sell")], "normal")
    assert d.direction == "hold"
    assert d.notes == ("tie",)

def test_no_eligible_frames():
    frames = [frame("5m", "buy", gate=False), frame("1h", "buy", p=0.4), frame("4h", "buy", u=0.9)]
    d = decide(frames)
    assert d.direction == "hold"
    assert d.confidence == 0.5
    assert d.notes == ("no eligible frames",)

def test_meta_confidence():
    frames = [frame(tf, "buy") for tf in ("5m", "1h", "4h")]
    assert meta_confidence(frames, "buy") == pytest.approx(0.6656, abs=1e-4)
    assert meta_confidence(frames, "hold") == 0.5

def test_meta_confidence_is_bounded():
    frames = [frame("5m", "buy", p=1.0, u=0.0), frame("1h", "sell", p=1.0, u=1.0)]
    assert 0.5 <= meta_confidence(frames, "buy") <= 0.9

def test_custom_thresholds():
    from signal_fusion.config import ModeThresholds
    engine = ModeEngine(normal=ModeThresholds(min_probability=0.9, max_uncertainty=0.1))
    assert engine.decide([frame("1h", "buy")]).notes == ("no eligible frames",)

def test_precision_split_short_frames_hold():
    frames = [frame("5m", "buy", p=0.75), frame("1h", "sell", p=0.75), frame("4h", "hold", p=0.75)]
    d = decide(frames, "precision")
    assert d.direction == "hold"
    assert d.notes == ("no consensus",)
