# signal_fusion/utils/ta.py
"""Technical indicators over numpy arrays.

Every series function returns an array aligned to the *end* of its input:
``out[-1]`` belongs to the last candle. When the history is shorter than the
window the result is an empty array, never an exception. Only a non-positive
period raises, since that is a caller bug.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import NamedTuple
import numpy as np
from numpy.lib.stride_tricks import sliding_window_view
from ..types import Candle


def _arr(values) -> np.ndarray:
    return np.asarray(values, dtype=float)


def _empty() -> np.ndarray:
    return np.empty(0, dtype=float)


def _check(period: int) -> None:
    if period <= 0: raise ValueError("period must be > 0")


# ---------------------------------------------------------------- averages

def sma(values, period: int) -> np.ndarray:
    _check(period)
    x = _arr(values)
    if len(x) < period: return _empty()
    c = np.cumsum(np.concatenate(([0.0], x)))
    return (c[period:] - c[:-period]) / period


def ema(values, period: int) -> np.ndarray:
    """EMA seeded with the SMA of the first ``period`` values."""
    _check(period)
    x = _arr(values)
    if len(x) < period: return _empty()
    m = 2.0 / (period + 1.0)
    out = np.empty(len(x) - period + 1)
    out[0] = x[:period].mean()
    for i, v in enumerate(x[period:], start=1):
        out[i] = v * m + out[i-1] * (1 - m)
    return out


def wma(values, period: int) -> np.ndarray:
    _check(period)
    x = _arr(values)
    if len(x) < period: return _empty()
    w = np.arange(1, period + 1, dtype=float)
    return np.convolve(x, w[::-1], mode="valid") / w.sum()


def rolling_std(values, period: int) -> np.ndarray:
    """Population standard deviation over a trailing window."""
    _check(period)
    x = _arr(values)
    if len(x) < period: return _empty()
    return sliding_window_view(x, period).std(axis=1)


def highest(values, period: int) -> np.ndarray:
    _check(period)
    x = _arr(values)
    if len(x) < period: return _empty()
    return sliding_window_view(x, period).max(axis=1)


def lowest(values, period: int) -> np.ndarray:
    _check(period)
    x = _arr(values)
    if len(x) < period: return _empty()
    return sliding_window_view(x, period).min(axis=1)


# ---------------------------------------------------------------- oscillators

def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0: return 100.0
    return 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)


def rsi(values, period: int = 14) -> np.ndarray:
    """Wilder RSI; 100 whenever the average loss is zero."""
    _check(period)
    x = _arr(values)
    if len(x) <= period: return _empty()
    d = np.diff(x)
    gains = np.where(d > 0, d, 0.0)
    losses = np.where(d < 0, -d, 0.0)
    avg_g = gains[:period].mean()
    avg_l = losses[:period].mean()
    out = np.empty(len(d) - period + 1)
    out[0] = _rsi_value(avg_g, avg_l)
    for i in range(period, len(d)):
        avg_g = (avg_g * (period - 1) + gains[i]) / period
        avg_l = (avg_l * (period - 1) + losses[i]) / period
        out[i - period + 1] = _rsi_value(avg_g, avg_l)
    return out


class Macd(NamedTuple):
    macd: np.ndarray
    signal: np.ndarray
    hist: np.ndarray


def macd(values, fast: int = 12, slow: int = 26, signal_p: int = 9) -> Macd:
    x = _arr(values)
    fast_e, slow_e = ema(x, fast), ema(x, slow)
    if len(fast_e) == 0 or len(slow_e) == 0:
        return Macd(_empty(), _empty(), _empty())
    n = min(len(fast_e), len(slow_e))
    line = fast_e[-n:] - slow_e[-n:]
    sig = ema(line, signal_p)
    if len(sig) == 0:
        return Macd(line, _empty(), _empty())
    return Macd(line, sig, line[-len(sig):] - sig)


class Stochastic(NamedTuple):
    k: np.ndarray
    d: np.ndarray


def stochastic(high, low, close, k_period: int = 14, d_period: int = 3) -> Stochastic:
    _check(d_period)
    h, l, c = _arr(high), _arr(low), _arr(close)
    hh, ll = highest(h, k_period), lowest(l, k_period)
    if len(hh) == 0:
        return Stochastic(_empty(), _empty())
    cc = c[k_period-1:]
    rng = hh - ll
    k = np.divide(100.0 * (cc - ll), rng, out=np.full_like(cc, 50.0), where=rng > 0)
    return Stochastic(k, sma(k, d_period))


def williams_r(high, low, close, period: int = 14) -> np.ndarray:
    h, l, c = _arr(high), _arr(low), _arr(close)
    hh, ll = highest(h, period), lowest(l, period)
    if len(hh) == 0: return _empty()
    cc = c[period-1:]
    rng = hh - ll
    return np.divide(-100.0 * (hh - cc), rng, out=np.full_like(cc, -50.0), where=rng > 0)


# ---------------------------------------------------------------- volatility

class Bands(NamedTuple):
    middle: np.ndarray
    upper: np.ndarray
    lower: np.ndarray


def bollinger(values, period: int = 20, mult: float = 2.0) -> Bands:
    x = _arr(values)
    mid = sma(x, period)
    if len(mid) == 0:
        return Bands(_empty(), _empty(), _empty())
    sd = rolling_std(x, period)
    return Bands(mid, mid + mult * sd, mid - mult * sd)


def bollinger_width(values, period: int = 20, mult: float = 2.0) -> np.ndarray:
    b = bollinger(values, period, mult)
    return np.divide(b.upper - b.lower, b.middle, out=np.zeros_like(b.middle), where=b.middle != 0)


def true_range(high, low, close) -> np.ndarray:
    """True range from the second candle on (length n-1)."""
    h, l, c = _arr(high), _arr(low), _arr(close)
    if len(c) < 2: return _empty()
    prev = c[:-1]
    return np.maximum(h[1:] - l[1:], np.maximum(np.abs(h[1:] - prev), np.abs(l[1:] - prev)))


def atr(high, low, close, period: int = 14) -> np.ndarray:
    """Wilder ATR seeded with the mean of the first ``period`` true ranges."""
    _check(period)
    tr = true_range(high, low, close)
    if len(tr) < period: return _empty()
    out = np.empty(len(tr) - period + 1)
    out[0] = tr[:period].mean()
    for i in range(period, len(tr)):
        out[i - period + 1] = (out[i - period] * (period - 1) + tr[i]) / period
    return out


# ---------------------------------------------------------------- trend

def _wilder_sum(x: np.ndarray, period: int) -> np.ndarray:
    out = np.empty(len(x) - period + 1)
    out[0] = x[:period].sum()
    for i in range(period, len(x)):
        prev = out[i - period]
        out[i - period + 1] = prev - prev / period + x[i]
    return out


class Adx(NamedTuple):
    adx: np.ndarray
    plus_di: np.ndarray
    minus_di: np.ndarray


def adx(high, low, close, period: int = 14) -> Adx:
    """Wilder ADX with its directional indicators.

    DI arrays have length n-period, ADX has length n-2*period+1.
    """
    _check(period)
    h, l, c = _arr(high), _arr(low), _arr(close)
    if len(c) < 2 * period:
        return Adx(_empty(), _empty(), _empty())
    up = h[1:] - h[:-1]
    down = l[:-1] - l[1:]
    plus_dm = np.where((up > down) & (up > 0), up, 0.0)
    minus_dm = np.where((down > up) & (down > 0), down, 0.0)

    s_tr = _wilder_sum(true_range(h, l, c), period)
    s_plus = _wilder_sum(plus_dm, period)
    s_minus = _wilder_sum(minus_dm, period)
    plus_di = np.divide(100.0 * s_plus, s_tr, out=np.zeros_like(s_tr), where=s_tr > 0)
    minus_di = np.divide(100.0 * s_minus, s_tr, out=np.zeros_like(s_tr), where=s_tr > 0)

    di_sum = plus_di + minus_di
    dx = np.divide(100.0 * np.abs(plus_di - minus_di), di_sum, out=np.zeros_like(di_sum), where=di_sum > 0)
    out = np.empty(len(dx) - period + 1)
    out[0] = dx[:period].mean()
    for i in range(period, len(dx)):
        out[i - period + 1] = (out[i - period] * (period - 1) + dx[i]) / period
    return Adx(out, plus_di, minus_di)


def parabolic_sar(high, low, close, af_step: float = 0.02, af_max: float = 0.20) -> np.ndarray:
    """Stop-and-reverse points, one per candle."""
    h, l, c = _arr(high), _arr(low), _arr(close)
    n = len(c)
    if n < 2: return _empty()
    up = c[1] > c[0]
    ep = h[1] if up else l[1]
    af = af_step
    sar = c[0]
    out = np.empty(n)
    out[0] = sar
    for i in range(1, n):
        sar = sar + af * (ep - sar)
        if (up and l[i] <= sar) or (not up and h[i] >= sar):
            up = not up
            sar = ep
            ep = h[i] if up else l[i]
            af = af_step
        elif up:
            if h[i] > ep:
                ep = h[i]
                af = min(af + af_step, af_max)
            sar = min(sar, l[i-1], l[i-2] if i >= 2 else l[i-1])
        else:
            if l[i] < ep:
                ep = l[i]
                af = min(af + af_step, af_max)
            sar = max(sar, h[i-1], h[i-2] if i >= 2 else h[i-1])
        out[i] = sar
    return out


class Ichimoku(NamedTuple):
    tenkan: np.ndarray
    kijun: np.ndarray
    senkou_a: np.ndarray
    senkou_b: np.ndarray


def ichimoku(high, low, tenkan: int = 9, kijun: int = 26, senkou_b: int = 52) -> Ichimoku:
    """Undisplaced Ichimoku lines, each trimmed to the senkou-B length."""
    h, l = _arr(high), _arr(low)
    if len(h) < max(tenkan, kijun, senkou_b):
        return Ichimoku(_empty(), _empty(), _empty(), _empty())
    mid = lambda p: (highest(h, p) + lowest(l, p)) / 2.0
    t, k, b = mid(tenkan), mid(kijun), mid(senkou_b)
    n = min(len(t), len(k), len(b))
    t, k, b = t[-n:], k[-n:], b[-n:]
    return Ichimoku(t, k, (t + k) / 2.0, b)


def linear_regression(values) -> tuple[float, float]:
    """(slope, r_squared) of values against their index."""
    y = _arr(values)
    if len(y) < 2: return 0.0, 0.0
    x = np.arange(len(y), dtype=float)
    slope, intercept = np.polyfit(x, y, 1)
    ss_tot = float(np.sum((y - y.mean()) ** 2))
    if ss_tot == 0: return float(slope), 0.0
    ss_res = float(np.sum((y - (slope * x + intercept)) ** 2))
    return float(slope), max(0.0, 1.0 - ss_res / ss_tot)


# ---------------------------------------------------------------- volume

def obv(close, volume) -> np.ndarray:
    c, v = _arr(close), _arr(volume)
    out = np.zeros(len(c))
    if len(c) > 1:
        out[1:] = np.cumsum(np.sign(np.diff(c)) * v[1:])
    return out


def vwap(high, low, close, volume) -> np.ndarray:
    h, l, c, v = _arr(high), _arr(low), _arr(close), _arr(volume)
    tp = (h + l + c) / 3.0
    cum_v = np.cumsum(v)
    return np.divide(np.cumsum(tp * v), cum_v, out=tp.copy(), where=cum_v > 0)


# ---------------------------------------------------------------- single candle

@dataclass(slots=True, frozen=True)
class PivotPoints:
    pivot: float
    r1: float
    r2: float
    r3: float
    s1: float
    s2: float
    s3: float


def pivot_points(candle: Candle) -> PivotPoints:
    h, l, c = candle.high, candle.low, candle.close
    p = (h + l + c) / 3.0
    return PivotPoints(
        pivot=p,
        r1=2 * p - l, r2=p + (h - l), r3=h + 2 * (p - l),
        s1=2 * p - h, s2=p - (h - l), s3=l - 2 * (h - p),
    )


def _shadows(candle: Candle) -> tuple[float, float]:
    upper = candle.high - max(candle.open, candle.close)
    lower = min(candle.open, candle.close) - candle.low
    return upper, lower


def is_doji(candle: Candle, threshold: float = 0.1) -> bool:
    return candle.range > 0 and candle.body / candle.range <= threshold


def is_hammer(candle: Candle) -> bool:
    if candle.range <= 0: return False
    upper, lower = _shadows(candle)
    return lower >= 2 * candle.body and upper <= 0.5 * candle.body


def is_shooting_star(candle: Candle) -> bool:
    if candle.range <= 0: return False
    upper, lower = _shadows(candle)
    return upper >= 2 * candle.body and lower <= 0.5 * candle.body
