# signal_fusion/strategies/adx.py
from __future__ import annotations
from ..errors import ConfigError
from ..types import StrategyId, StrategySignal
from ..utils.ta import adx
from .base import Param, Strategy
from .helpers import Series, crossed_above, crossed_below


class AdxStrategy(Strategy):
    id = StrategyId.ADX
    name = "ADX Trend"
    description = "DI crossovers confirmed by ADX trend strength"
    params = {
        "period": Param(int, 5, 50),
        "trend_threshold": Param(float, 15, 35),
        "strong_threshold": Param(float, 30, 60),
    }

    def __init__(self, period: int = 14, trend_threshold: float = 25.0, strong_threshold: float = 40.0):
        self.period = period
        self.trend_threshold, self.strong_threshold = trend_threshold, strong_threshold

    @property
    def required_candles(self) -> int:
        return self.period * 3 + 10

    def check_parameters(self, p):
        if p["trend_threshold"] >= p["strong_threshold"]:
            raise ConfigError("trend threshold must stay below strong threshold")

    def generate(self, s: Series) -> StrategySignal:
        r = adx(s.high, s.low, s.close, self.period)
        a = float(r.adx[-1])
        p0, p1 = float(r.plus_di[-2]), float(r.plus_di[-1])
        m0, m1 = float(r.minus_di[-2]), float(r.minus_di[-1])
        trend, strong = self.trend_threshold, self.strong_threshold

        if a < trend:
            return self.signal("hold", 0.2, f"ADX {a:.1f} below trend threshold, no trend")
        conf = min(0.9, 0.5 + 0.4 * (a - trend) / (strong - trend))
        if crossed_above(p0, m0, p1, m1):
            return self.signal("buy", conf, f"DI+ crossed above DI- with ADX {a:.1f}")
        if crossed_below(p0, m0, p1, m1):
            return self.signal("sell", conf, f"DI- crossed above DI+ with ADX {a:.1f}")
        if a > strong:
            if p1 > m1:
                return self.signal("buy", 0.6, f"Strong uptrend continuation (ADX {a:.1f})")
            if m1 > p1:
                return self.signal("sell", 0.6, f"Strong downtrend continuation (ADX {a:.1f})")
        return self.signal("hold", 0.3, f"Trend present (ADX {a:.1f}) without fresh signal")
