# signal_fusion/strategies/macd_cross.py
from __future__ import annotations
from ..errors import ConfigError
from ..types import StrategyId, StrategySignal
from ..utils.ta import macd
from .base import Param, Strategy
from .helpers import Series, crossed_above, crossed_below


class MacdCross(Strategy):
    id = StrategyId.MACD
    name = "MACD Crossover"
    description = "MACD line crossing its signal line"
    params = {"fast": Param(int, 1, 50), "slow": Param(int, 2, 100), "signal_p": Param(int, 1, 50)}

    def __init__(self, fast: int = 12, slow: int = 26, signal_p: int = 9):
        self.fast, self.slow, self.signal_p = fast, slow, signal_p

    @property
    def required_candles(self) -> int:
        return self.slow + self.signal_p + 10

    def check_parameters(self, p):
        if p["fast"] >= p["slow"]:
            raise ConfigError("fast period must be shorter than slow period")

    def generate(self, s: Series) -> StrategySignal:
        m = macd(s.close, self.fast, self.slow, self.signal_p)
        line, sig = m.macd[-len(m.signal):], m.signal
        hist = float(m.hist[-1])
        # histogram relative to price so the scale does not depend on the instrument
        conf = min(1.0, abs(hist) / s.close[-1] * 1000) if s.close[-1] else 0.0
        if crossed_above(line[-2], sig[-2], line[-1], sig[-1]):
            return self.signal("buy", conf, f"MACD bullish crossover (hist={hist:.5f})")
        if crossed_below(line[-2], sig[-2], line[-1], sig[-1]):
            return self.signal("sell", conf, f"MACD bearish crossover (hist={hist:.5f})")
        return self.signal("hold", 0.3, f"No MACD crossover (hist={hist:.5f})")
