# signal_fusion/calibration.py
"""Maps raw ensemble confidence to a calibrated probability.

Two calibrators (temperature scaling and isotonic regression) share the
``calibrate(raw, timeframe)`` interface; ``FusionCalibrator`` blends them with
a fixed convex weight.
"""
from __future__ import annotations
import math
from abc import ABC, abstractmethod
from typing import Mapping, Sequence
import numpy as np
from .config import PipelineConfig
from .errors import CalibrationError
from .types import Timeframe

Band = tuple[float, float]

DEFAULT_BAND: Band = (0.5, 0.9)
DEFAULT_TEMPERATURE = 2.0
MIN_TEMPERATURE = 0.5

# reference reliability curve used when no history is supplied
SAMPLE_RAW = (0.1, 0.3, 0.5, 0.7, 0.9, 0.95, 0.99)
SAMPLE_TARGET = (0.52, 0.58, 0.65, 0.75, 0.85, 0.88, 0.90)


def _checked(p: float) -> float:
    p = float(p)
    if not math.isfinite(p) or not 0.0 <= p <= 1.0:
        raise CalibrationError(f"calibrated probability out of range: {p}")
    return p


def _raw(raw: float) -> float:
    raw = float(raw)
    if not math.isfinite(raw):
        raise CalibrationError(f"raw confidence is not finite: {raw}")
    return raw


def _clamp(x: float, band: Band) -> float:
    return min(band[1], max(band[0], x))


def logit(p: float) -> float:
    return math.log(p / (1.0 - p))


def sigmoid(z: float) -> float:
    return 1.0 / (1.0 + math.exp(-z))


class Calibrator(ABC):
    @abstractmethod
    def calibrate(self, raw: float, timeframe: Timeframe) -> float: ...


class TemperatureCalibrator(Calibrator):
    def __init__(
        self,
        temperatures: Mapping[Timeframe, float] | None = None,
        band: Band | None = DEFAULT_BAND,
        default: float = DEFAULT_TEMPERATURE,
    ):
        self.temperatures = dict(temperatures or {})
        self.band = band
        self.default = default

    def temperature(self, timeframe: Timeframe) -> float:
        return max(MIN_TEMPERATURE, self.temperatures.get(timeframe, self.default))

    def calibrate(self, raw: float, timeframe: Timeframe) -> float:
        p = min(0.99, max(0.01, _raw(raw)))
        q = sigmoid(logit(p) / self.temperature(timeframe))
        if self.band is not None:
            lo, hi = self.band
            q = _clamp(lo + q * (hi - lo), self.band)
        return _checked(q)


def fit_isotonic(raw: Sequence[float], target: Sequence[float]) -> tuple[np.ndarray, np.ndarray]:
    """Pool-adjacent-violators fit.

    Returns strictly increasing knots and a non-decreasing fitted value per
    knot. Duplicate raw values are pooled first, weighted by their count.
    """
    x = np.asarray(raw, dtype=float)
    y = np.clip(np.asarray(target, dtype=float), 0.0, 1.0)
    if x.shape != y.shape:
        raise ValueError("raw and target must have the same length")
    if len(x) == 0:
        return x, y
    knots, inv = np.unique(x, return_inverse=True)
    counts = np.bincount(inv).astype(float)
    means = np.bincount(inv, weights=y) / counts

    blocks: list[list[float]] = []  # [value, weight, knots]
    for v, w in zip(means, counts):
        blocks.append([v, w, 1])
        while len(blocks) > 1 and blocks[-2][0] > blocks[-1][0]:
            v2, w2, n2 = blocks.pop()
            v1, w1, n1 = blocks.pop()
            blocks.append([(v1 * w1 + v2 * w2) / (w1 + w2), w1 + w2, n1 + n2])
    fitted = np.repeat([b[0] for b in blocks], [int(b[2]) for b in blocks])
    return knots, fitted


class IsotonicCalibrator(Calibrator):
    """Isotonic fit shared by every timeframe."""

    def __init__(self, raw: Sequence[float] = (), target: Sequence[float] = (), band: Band | None = None):
        self.knots, self.fitted = fit_isotonic(raw, target)
        self.band = band

    @classmethod
    def default(cls, band: Band | None = None) -> "IsotonicCalibrator":
        return cls(SAMPLE_RAW, SAMPLE_TARGET, band=band)

    def calibrate(self, raw: float, timeframe: Timeframe | None = None) -> float:
        x = _raw(raw)
        if len(self.knots) < 2:
            return _checked(_clamp(x, self.band or DEFAULT_BAND))
        # np.interp holds the endpoint values outside the fitted range
        y = float(np.interp(x, self.knots, self.fitted))
        if self.band is not None:
            y = _clamp(y, self.band)
        return _checked(y)


class FusionCalibrator(Calibrator):
    def __init__(self, temperature: TemperatureCalibrator, isotonic: IsotonicCalibrator, weight: float = 0.6):
        self.temperature = temperature
        self.isotonic = isotonic
        self.weight = weight

    def calibrate(self, raw: float, timeframe: Timeframe) -> float:
        t = self.temperature.calibrate(raw, timeframe)
        i = self.isotonic.calibrate(raw, timeframe)
        return _checked(self.weight * t + (1.0 - self.weight) * i)


def build_calibrator(cfg: PipelineConfig) -> Calibrator:
    temp = TemperatureCalibrator(cfg.temperatures, band=cfg.band)
    iso = IsotonicCalibrator.default(band=cfg.band)
    if cfg.calibration == "temperature":
        return temp
    if cfg.calibration == "isotonic":
        return iso
    return FusionCalibrator(temp, iso, weight=cfg.fusion_weight)
