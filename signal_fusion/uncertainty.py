# signal_fusion/uncertainty.py
from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Literal, Sequence
import numpy as np
from .config import UncertaintyMethod
from .types import Mode

Level = Literal["high", "moderate", "low"]

RELIABILITY_THRESHOLDS: dict[Mode, float] = {"normal": 0.3, "precision": 0.2}


@dataclass(slots=True, frozen=True)
class UncertaintyResult:
    epistemic: float
    aleatoric: float
    total: float
    lower: float
    upper: float

    @property
    def interval(self) -> tuple[float, float]:
        return self.lower, self.upper


# one prediction cannot disagree with itself; never report that as certainty
SINGLE_PREDICTION = UncertaintyResult(0.5, 0.3, 0.8, 0.3, 0.7)
NO_PREDICTION = UncertaintyResult(0.4, 0.3, 0.5, 0.2, 0.8)


def _c01(x: float) -> float:
    return max(0.0, min(1.0, float(x)))


def _total(epistemic: float, aleatoric: float) -> float:
    return min(1.0, math.hypot(epistemic, aleatoric))


def ensemble_uncertainty(predictions: Sequence[float]) -> UncertaintyResult:
    """Disagreement between several model confidences."""
    p = np.clip(np.asarray(predictions, dtype=float), 0.0, 1.0)
    if len(p) < 2:
        return SINGLE_PREDICTION
    e = float(p.std())
    a = 1.0 - float(p.max())
    total = _total(e, a)
    mean = float(p.mean())
    return UncertaintyResult(e, a, total, _c01(mean - total / 2), _c01(mean + total / 2))


def dropout_uncertainty(
    prediction: float | None, rate: float = 0.2, samples: int = 10, seed: int = 0
) -> UncertaintyResult:
    """Perturbs one confidence with uniform noise and measures the spread.

    A fresh generator is seeded on every call, so the same input always gives
    the same result.
    """
    if prediction is None:
        return NO_PREDICTION
    rng = np.random.default_rng(seed)
    draws = np.clip(_c01(prediction) + rng.uniform(-rate, rate, samples), 0.0, 1.0)
    e = float(draws.std())
    a = rate * 0.5
    total = _total(e, a)
    mean = float(draws.mean())
    return UncertaintyResult(e, a, total, _c01(mean - total), _c01(mean + total))


def combine(ens: UncertaintyResult, drop: UncertaintyResult) -> UncertaintyResult:
    e = 0.7 * ens.epistemic + 0.3 * drop.epistemic
    a = 0.6 * ens.aleatoric + 0.4 * drop.aleatoric
    # interval is the union of both, not an average
    return UncertaintyResult(e, a, _total(e, a), min(ens.lower, drop.lower), max(ens.upper, drop.upper))


def reliability_level(total: float) -> Level:
    if total <= 0.15:
        return "high"
    if total <= 0.3:
        return "moderate"
    return "low"


@dataclass(slots=True, frozen=True)
class Reliability:
    is_reliable: bool
    confidence: float
    level: Level
    uncertainty: UncertaintyResult


class UncertaintyEngine:
    def __init__(
        self,
        method: UncertaintyMethod = "combined",
        dropout_rate: float = 0.2,
        dropout_samples: int = 10,
        seed: int = 0,
    ):
        self.method = method
        self.dropout_rate = dropout_rate
        self.dropout_samples = dropout_samples
        self.seed = seed

    def _dropout(self, primary: float | None) -> UncertaintyResult:
        return dropout_uncertainty(primary, self.dropout_rate, self.dropout_samples, self.seed)

    def quantify(self, predictions: Sequence[float], primary: float | None = None) -> UncertaintyResult:
        """``primary`` is the prediction perturbed by the dropout method; defaults to the first one."""
        preds = [float(p) for p in predictions]
        if primary is None and preds:
            primary = preds[0]
        if self.method == "ensemble":
            return ensemble_uncertainty(preds)
        if self.method == "dropout":
            return self._dropout(primary)
        if primary is None:
            return NO_PREDICTION
        return combine(ensemble_uncertainty(preds), self._dropout(primary))

    def assess(self, predictions: Sequence[float], mode: Mode = "normal", primary: float | None = None) -> Reliability:
        u = self.quantify(predictions, primary)
        return Reliability(
            is_reliable=u.total <= RELIABILITY_THRESHOLDS[mode],
            confidence=1.0 - u.total,
            level=reliability_level(u.total),
            uncertainty=u,
        )
