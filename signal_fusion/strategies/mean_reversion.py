# signal_fusion/strategies/mean_reversion.py
from __future__ import annotations
from ..types import StrategyId, StrategySignal
from ..utils.ta import bollinger, rolling_std
from .base import Param, Strategy
from .helpers import Series


class MeanReversion(Strategy):
    id = StrategyId.MEAN_REVERSION
    name = "Mean Reversion"
    description = "Fades closes beyond the standard-deviation envelope"
    params = {"period": Param(int, 5, 100), "std": Param(float, 0.5, 4.0)}

    def __init__(self, period: int = 20, std: float = 2.0):
        self.period, self.std = period, std

    @property
    def required_candles(self) -> int:
        return self.period + 10

    def generate(self, s: Series) -> StrategySignal:
        b = bollinger(s.close, self.period, self.std)
        sd = float(rolling_std(s.close, self.period)[-1])
        price, upper, lower = float(s.close[-1]), float(b.upper[-1]), float(b.lower[-1])
        if sd == 0:
            return self.signal("hold", 0.3, "Flat window, no envelope")
        if price <= lower:
            return self.signal("buy", min(1.0, (lower - price) / sd + 0.5), f"Price at lower band ({price:.5f})")
        if price >= upper:
            return self.signal("sell", min(1.0, (price - upper) / sd + 0.5), f"Price at upper band ({price:.5f})")
        pos = (price - lower) / (upper - lower)
        return self.signal("hold", 0.3, f"Price within bands ({pos * 100:.1f}% position)")
