# signal_fusion/strategies/williams_r.py
from __future__ import annotations
from ..errors import ConfigError
from ..types import StrategyId, StrategySignal
from ..utils.ta import williams_r
from .base import Param, Strategy
from .helpers import Series


class WilliamsR(Strategy):
    id = StrategyId.WILLIAMS_R
    name = "Williams %R"
    description = "Entries into and exits from the %R extreme zones"
    params = {
        "period": Param(int, 5, 50),
        "overbought": Param(float, -50, -10),
        "oversold": Param(float, -95, -50),
    }

    def __init__(self, period: int = 14, overbought: float = -20.0, oversold: float = -80.0):
        self.period, self.overbought, self.oversold = period, overbought, oversold

    @property
    def required_candles(self) -> int:
        return self.period + 5

    def check_parameters(self, p):
        if p["oversold"] >= p["overbought"]:
            raise ConfigError("oversold must stay below overbought")

    def generate(self, s: Series) -> StrategySignal:
        wr = williams_r(s.high, s.low, s.close, self.period)
        prev, cur = float(wr[-2]), float(wr[-1])
        ob, os_ = self.overbought, self.oversold

        if cur < os_ <= prev:
            conf = 0.6 + 0.3 * (os_ - cur) / (os_ + 100)
            return self.signal("buy", min(0.9, conf), "Williams %R entering oversold territory")
        if cur > ob >= prev:
            conf = 0.6 + 0.3 * (cur - ob) / -ob
            return self.signal("sell", min(0.9, conf), "Williams %R entering overbought territory")
        if cur > os_ >= prev:
            return self.signal("buy", 0.7, "Williams %R exiting oversold territory")
        if cur < ob <= prev:
            return self.signal("sell", 0.7, "Williams %R exiting overbought territory")
        if cur < os_:
            return self.signal("buy", 0.3, "Williams %R in oversold territory")
        if cur > ob:
            return self.signal("sell", 0.3, "Williams %R in overbought territory")
        return self.signal("hold", 0.3, "Williams %R in neutral range")
