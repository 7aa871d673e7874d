# signal_fusion/features.py
from __future__ import annotations
import logging
from typing import Sequence
import numpy as np
from .errors import FeatureValidationError
from .strategies.helpers import to_arrays
from .types import Candle
from .utils.ta import atr, ema, rsi

logger = logging.getLogger(__name__)

MIN_CANDLES = 50

FEATURE_NAMES: tuple[str, ...] = (
    "pct_change_1",
    "pct_change_5",
    "pct_change_10",
    "rsi_14",
    "rsi_28",
    "ema_9_slope",
    "ema_21_slope",
    "atr_14_norm",
    "volume_zscore_20",
    "body_to_atr",
)


def _pct(closes: np.ndarray, n: int) -> float:
    prev = closes[-1 - n]
    return (closes[-1] - prev) / prev if prev else 0.0


def _slope(values: np.ndarray, window: int, scale: float) -> float:
    return (values[-1] - values[-1 - window]) / scale if scale else 0.0


def build_features(candles: Sequence[Candle]) -> np.ndarray | None:
    """Fixed-length feature vector for external models, in ``FEATURE_NAMES`` order.

    Returns None when fewer than ``MIN_CANDLES`` candles are given. Raises
    FeatureValidationError when any entry comes out NaN or infinite.
    """
    if len(candles) < MIN_CANDLES:
        logger.debug("features: %d/%d candles", len(candles), MIN_CANDLES)
        return None
    s = to_arrays(candles)
    c = s.close
    last = c[-1]

    a = float(atr(s.high, s.low, c, 14)[-1])
    vols = s.volume[-20:]
    v_std = float(vols.std())
    v_z = (vols[-1] - vols.mean()) / v_std if v_std > 0 else 0.0
    body = abs(c[-1] - s.open[-1])

    out = np.array([
        _pct(c, 1),
        _pct(c, 5),
        _pct(c, 10),
        rsi(c, 14)[-1] / 100.0,
        rsi(c, 28)[-1] / 100.0,
        _slope(ema(c, 9), 3, last),
        _slope(ema(c, 21), 3, last),
        a / last if last else 0.0,
        v_z,
        body / a if a > 0 else 0.0,
    ], dtype=float)
    validate_features(out)
    return out


def validate_features(vec: np.ndarray) -> None:
    bad = ~np.isfinite(vec)
    if bad.any():
        names = [FEATURE_NAMES[i] if i < len(FEATURE_NAMES) else str(i) for i in np.flatnonzero(bad)]
        raise FeatureValidationError(f"non-finite features: {', '.join(names)}")
