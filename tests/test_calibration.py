import math
import numpy as np
import pytest
from signal_fusion.calibration import (
    FusionCalibrator, IsotonicCalibrator, TemperatureCalibrator, build_calibrator, fit_isotonic,
)
from signal_fusion.config import PipelineConfig
from signal_fusion.errors import CalibrationError

def test_temperature_stays_inside_band():
    cal = TemperatureCalibrator({"1h": 2.0})
    assert cal.calibrate(0.99, "1h") == pytest.approx(0.8635, abs=1e-4)
    assert cal.calibrate(0.0, "1h") == pytest.approx(0.5365, abs=1e-4)
    assert cal.calibrate(0.5, "1h") == pytest.approx(0.7)

def test_temperature_floor():
    low = TemperatureCalibrator({"5m": 0.1}, band=None)
    floor = TemperatureCalibrator({"5m": 0.5}, band=None)
    assert low.temperature("5m") == 0.5
    assert low.calibrate(0.8, "5m") == pytest.approx(floor.calibrate(0.8, "5m"))

def test_missing_timeframe_uses_default():
    assert TemperatureCalibrator({}).temperature("4h") == 2.0

def test_pav_pools_violators():
    knots, fitted = fit_isotonic([0.1, 0.2, 0.3, 0.4], [0.2, 0.6, 0.4, 0.8])
    assert list(knots) == [0.1, 0.2, 0.3, 0.4]
    assert list(fitted) == pytest.approx([0.2, 0.5, 0.5, 0.8])

def test_pav_pools_duplicates():
    knots, fitted = fit_isotonic([0.5, 0.5, 0.7], [0.4, 0.6, 0.9])
    assert list(knots) == [0.5, 0.7]
    assert list(fitted) == pytest.approx([0.5, 0.9])

def test_isotonic_clamps_to_endpoints():
    cal = IsotonicCalibrator([0.2, 0.8], [0.55, 0.85])
    assert cal.calibrate(0.0) == pytest.approx(0.55)
    assert cal.calibrate(1.0) == pytest.approx(0.85)
    assert cal.calibrate(0.5) == pytest.approx(0.70)

def test_isotonic_without_history_falls_back_to_band():
    cal = IsotonicCalibrator([0.3], [0.6])
    assert cal.calibrate(0.2) == 0.5
    assert cal.calibrate(0.95) == 0.9

@pytest.mark.parametrize("method", ["temperature", "isotonic", "fusion"])
def test_monotone(method):
    cal = build_calibrator(PipelineConfig(calibration=method))
    xs = [i / 20 for i in range(21)]
    ys = [cal.calibrate(x, "1h") for x in xs]
    assert all(a <= b + 1e-12 for a, b in zip(ys, ys[1:]))
    assert all(0.5 <= y <= 0.9 for y in ys)

def test_fusion_blend():
    cal = FusionCalibrator(TemperatureCalibrator({"1h": 2.0}), IsotonicCalibrator.default(), weight=0.6)
    assert cal.calibrate(0.99, "1h") == pytest.approx(0.6 * 0.8635 + 0.4 * 0.90, abs=1e-4)

def test_non_finite_raw_raises():
    with pytest.raises(CalibrationError):
        TemperatureCalibrator().calibrate(math.nan, "1h")
    with pytest.raises(CalibrationError):
        IsotonicCalibrator.default().calibrate(math.inf)

@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_isotonic_monotone_on_arbitrary_pairs(seed):
    rng = np.random.default_rng(seed)
    raw = np.concatenate([rng.uniform(0, 1, 40), [0.5, 0.5, 0.5, 0.2, 0.2]])
    target = np.concatenate([rng.uniform(0, 1, 40), [0.9, 0.1, 0.4, 0.8, 0.0]])
    knots, fitted = fit_isotonic(raw, target)
    assert (np.diff(knots) > 0).all()
    assert (np.diff(fitted) >= -1e-12).all()
    cal = IsotonicCalibrator(raw, target)
    ys = [cal.calibrate(x) for x in np.linspace(-0.1, 1.1, 500)]
    assert all(a <= b + 1e-12 for a, b in zip(ys, ys[1:]))

def test_isotonic_on_decreasing_targets_is_flat():
    knots, fitted = fit_isotonic([0.1, 0.2, 0.3, 0.4], [0.9, 0.7, 0.5, 0.3])
    assert list(fitted) == pytest.approx([0.6] * 4)
