# signal_fusion/strategies/atr_breakout.py
from __future__ import annotations
from ..types import StrategyId, StrategySignal
from ..utils.ta import atr
from .base import Param, Strategy
from .helpers import Series


class AtrBreakout(Strategy):
    id = StrategyId.ATR_BREAKOUT
    name = "ATR Breakout"
    description = "Close beyond the prior range extended by a multiple of ATR"
    params = {"atr_period": Param(int, 5, 50), "multiplier": Param(float, 0.5, 5.0)}

    def __init__(self, atr_period: int = 14, multiplier: float = 1.5):
        self.atr_period, self.multiplier = atr_period, multiplier

    @property
    def required_candles(self) -> int:
        return self.atr_period * 2

    def generate(self, s: Series) -> StrategySignal:
        a = float(atr(s.high, s.low, s.close, self.atr_period)[-1])
        close = float(s.close[-1])
        # range of the candles before the current one
        hi = float(s.high[-self.atr_period-1:-1].max())
        lo = float(s.low[-self.atr_period-1:-1].min())
        upper, lower = hi + a * self.multiplier, lo - a * self.multiplier
        if a > 0 and close > upper:
            return self.signal("buy", min(1.0, 0.5 + (close - upper) / a * 0.3), f"Upward breakout above {upper:.5f}")
        if a > 0 and close < lower:
            return self.signal("sell", min(1.0, 0.5 + (lower - close) / a * 0.3), f"Downward breakout below {lower:.5f}")
        if close and a / close > 0.02:
            return self.signal("hold", 0.4, f"High volatility (ATR: {a:.5f}), waiting for breakout")
        return self.signal("hold", 0.2, f"Consolidating (ATR: {a:.5f})")
