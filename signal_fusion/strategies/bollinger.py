# signal_fusion/strategies/bollinger.py
from __future__ import annotations
from ..types import StrategyId, StrategySignal
from ..utils.ta import bollinger
from .base import Param, Strategy
from .helpers import Series


class BollingerBands(Strategy):
    id = StrategyId.BOLLINGER
    name = "Bollinger Bands"
    description = "Band touches and band position"
    params = {"period": Param(int, 5, 100), "std": Param(float, 0.5, 4.0)}

    def __init__(self, period: int = 20, std: float = 2.0):
        self.period, self.std = period, std

    @property
    def required_candles(self) -> int:
        return self.period + 5

    def generate(self, s: Series) -> StrategySignal:
        b = bollinger(s.close, self.period, self.std)
        price, prev = float(s.close[-1]), float(s.close[-2])
        upper, lower = float(b.upper[-1]), float(b.lower[-1])
        width = upper - lower
        pos = (price - lower) / width if width > 0 else 0.5

        if width > 0 and price <= lower < prev:
            return self.signal("buy", min(0.9, 0.5 + 0.5 * (1.0 - pos)), "Price touched lower Bollinger Band (oversold)")
        if width > 0 and price >= upper > prev:
            return self.signal("sell", min(0.9, 0.5 + 0.5 * pos), "Price touched upper Bollinger Band (overbought)")
        if pos < 0.2:
            return self.signal("buy", 0.3, "Price near lower Bollinger Band")
        if pos > 0.8:
            return self.signal("sell", 0.3, "Price near upper Bollinger Band")
        return self.signal("hold", 0.1, "Price within normal Bollinger Band range")
