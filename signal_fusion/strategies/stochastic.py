# signal_fusion/strategies/stochastic.py
from __future__ import annotations
from ..errors import ConfigError
from ..types import StrategyId, StrategySignal
from ..utils.ta import stochastic
from .base import Param, Strategy
from .helpers import Series, crossed_above, crossed_below


class StochasticStrategy(Strategy):
    id = StrategyId.STOCHASTIC
    name = "Stochastic"
    description = "%K/%D crossovers inside the extreme zones"
    params = {
        "k_period": Param(int, 5, 50),
        "d_period": Param(int, 1, 20),
        "overbought": Param(float, 70, 95),
        "oversold": Param(float, 5, 30),
    }

    def __init__(self, k_period: int = 14, d_period: int = 3, overbought: float = 80.0, oversold: float = 20.0):
        self.k_period, self.d_period = k_period, d_period
        self.overbought, self.oversold = overbought, oversold

    @property
    def required_candles(self) -> int:
        return self.k_period + self.d_period + 5

    def check_parameters(self, p):
        if p["oversold"] >= p["overbought"]:
            raise ConfigError("oversold must stay below overbought")

    def generate(self, s: Series) -> StrategySignal:
        st = stochastic(s.high, s.low, s.close, self.k_period, self.d_period)
        k0, k1, d0, d1 = st.k[-2], st.k[-1], st.d[-2], st.d[-1]
        lo, hi = self.oversold, self.overbought

        if k1 < lo and d1 < lo and crossed_above(k0, d0, k1, d1):
            conf = 0.7 + 0.2 * (lo - min(k1, d1)) / lo
            return self.signal("buy", min(0.9, conf), "Stochastic bullish crossover in oversold territory")
        if k1 > hi and d1 > hi and crossed_below(k0, d0, k1, d1):
            conf = 0.7 + 0.2 * (min(k1, d1) - hi) / (100 - hi)
            return self.signal("sell", min(0.9, conf), "Stochastic bearish crossover in overbought territory")
        if k1 < lo and d1 < lo:
            return self.signal("buy", 0.4, "Stochastic in oversold territory")
        if k1 > hi and d1 > hi:
            return self.signal("sell", 0.4, "Stochastic in overbought territory")
        return self.signal("hold", 0.3, "Stochastic in neutral territory")
