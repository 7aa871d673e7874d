# signal_fusion/strategies/ema_cross.py
from __future__ import annotations
from ..errors import ConfigError
from ..types import StrategyId, StrategySignal
from ..utils.ta import ema
from .base import Param, Strategy
from .helpers import Series, crossed_above, crossed_below


class EmaCrossStrategy(Strategy):
    id = StrategyId.EMA_CROSS
    name = "EMA Crossover"
    description = "Fast/slow exponential moving average crossover"
    params = {"fast": Param(int, 1, 50), "slow": Param(int, 2, 100)}

    def __init__(self, fast: int = 9, slow: int = 21):
        self.fast, self.slow = fast, slow

    @property
    def required_candles(self) -> int:
        return max(self.fast, self.slow) * 2

    def check_parameters(self, p):
        if p["fast"] >= p["slow"]:
            raise ConfigError("fast period must be shorter than slow period")

    def generate(self, s: Series) -> StrategySignal:
        f, sl = ema(s.close, self.fast), ema(s.close, self.slow)
        f0, f1, s0, s1 = f[-2], f[-1], sl[-2], sl[-1]
        spread = abs(f1 - s1) / s1 if s1 else 0.0
        if crossed_above(f0, s0, f1, s1):
            return self.signal("buy", min(1.0, spread * 10), f"EMA{self.fast} crossed above EMA{self.slow}")
        if crossed_below(f0, s0, f1, s1):
            return self.signal("sell", min(1.0, spread * 10), f"EMA{self.fast} crossed below EMA{self.slow}")
        side = "above" if f1 > s1 else "below"
        return self.signal("hold", 0.3, f"No crossover (fast {side} slow)")
