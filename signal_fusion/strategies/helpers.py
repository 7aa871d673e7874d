# signal_fusion/strategies/helpers.py
from __future__ import annotations
import math
from typing import NamedTuple, Sequence
import numpy as np
from ..types import Candle


class Series(NamedTuple):
    open: np.ndarray
    high: np.ndarray
    low: np.ndarray
    close: np.ndarray
    volume: np.ndarray


def to_arrays(candles: Sequence[Candle]) -> Series:
    return Series(
        np.array([c.open for c in candles], dtype=float),
        np.array([c.high for c in candles], dtype=float),
        np.array([c.low for c in candles], dtype=float),
        np.array([c.close for c in candles], dtype=float),
        np.array([c.volume for c in candles], dtype=float),
    )


def clamp01(x: float) -> float:
    x = float(x)
    return max(0.0, min(1.0, x)) if math.isfinite(x) else 0.0


def crossed_above(prev_a: float, prev_b: float, a: float, b: float) -> bool:
    return prev_a <= prev_b and a > b


def crossed_below(prev_a: float, prev_b: float, a: float, b: float) -> bool:
    return prev_a >= prev_b and a < b
