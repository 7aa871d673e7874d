# signal_fusion/ensemble/regime.py
from __future__ import annotations
import logging
from enum import Enum
from typing import Iterable, Mapping, Sequence
from ..config import clamp_weight
from ..types import Candle, StrategyId
from ..utils.ta import atr, linear_regression

logger = logging.getLogger(__name__)


class Regime(str, Enum):
    TRENDING_BULLISH = "trending_bullish"
    TRENDING_BEARISH = "trending_bearish"
    RANGING = "ranging"
    VOLATILE = "volatile"


_SUITED: dict[Regime, frozenset[StrategyId]] = {
    Regime.TRENDING_BULLISH: frozenset({
        StrategyId.EMA_CROSS, StrategyId.MACD, StrategyId.ATR_BREAKOUT, StrategyId.ADX,
        StrategyId.ICHIMOKU, StrategyId.PARABOLIC_SAR,
    }),
    Regime.TRENDING_BEARISH: frozenset({
        StrategyId.EMA_CROSS, StrategyId.MACD, StrategyId.RSI, StrategyId.ADX,
        StrategyId.ICHIMOKU, StrategyId.PARABOLIC_SAR,
    }),
    Regime.RANGING: frozenset({
        StrategyId.MEAN_REVERSION, StrategyId.RSI, StrategyId.BOLLINGER,
        StrategyId.STOCHASTIC, StrategyId.WILLIAMS_R,
    }),
    Regime.VOLATILE: frozenset({StrategyId.ATR_BREAKOUT, StrategyId.MEAN_REVERSION, StrategyId.VOLUME}),
}


def detect_regime(
    candles: Sequence[Candle],
    atr_period: int = 14,
    lookback: int = 20,
    volatility: float = 0.02,
    min_r2: float = 0.5,
) -> Regime:
    if len(candles) < 30:
        return Regime.RANGING
    closes = [c.close for c in candles]
    a = atr([c.high for c in candles], [c.low for c in candles], closes, atr_period)
    if len(a) and closes[-1] and a[-1] / closes[-1] > volatility:
        return Regime.VOLATILE
    slope, r2 = linear_regression(closes[-lookback:])
    if r2 > min_r2:
        return Regime.TRENDING_BULLISH if slope > 0 else Regime.TRENDING_BEARISH
    return Regime.RANGING


def recommended(regime: Regime) -> frozenset[StrategyId]:
    return _SUITED[regime]


def regime_weights(
    weights: Mapping[StrategyId, float],
    regime: Regime,
    strategies: Iterable[StrategyId],
    boost: float = 1.25,
    damp: float = 0.9,
) -> dict[StrategyId, float]:
    """Scales base weights toward the strategies suited to ``regime``."""
    suited = _SUITED[regime]
    out = {}
    for sid in strategies:
        base = weights.get(sid, 1.0)
        out[sid] = clamp_weight(base * (boost if sid in suited else damp))
    logger.debug("regime %s: boosted %s", regime.value, sorted(s.value for s in suited))
    return out
