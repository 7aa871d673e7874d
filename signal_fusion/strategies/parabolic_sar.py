# signal_fusion/strategies/parabolic_sar.py
from __future__ import annotations
from ..errors import ConfigError
from ..types import StrategyId, StrategySignal
from ..utils.ta import parabolic_sar
from .base import Param, Strategy
from .helpers import Series


class ParabolicSar(Strategy):
    id = StrategyId.PARABOLIC_SAR
    name = "Parabolic SAR"
    description = "Stop-and-reverse flips and trend continuation"
    params = {"af": Param(float, 0.01, 0.2), "max_af": Param(float, 0.05, 0.5)}

    def __init__(self, af: float = 0.02, max_af: float = 0.20):
        self.af, self.max_af = af, max_af

    @property
    def required_candles(self) -> int:
        return 20

    def check_parameters(self, p):
        if p["af"] > p["max_af"]:
            raise ConfigError("acceleration step cannot exceed its maximum")

    def generate(self, s: Series) -> StrategySignal:
        sar = parabolic_sar(s.high, s.low, s.close, self.af, self.max_af)
        close, prev_close = float(s.close[-1]), float(s.close[-2])
        cur_up, prev_up = close > sar[-1], prev_close > sar[-2]
        dist = abs(close - sar[-1]) / close if close else 0.0

        if cur_up and not prev_up:
            return self.signal("buy", min(0.9, 0.7 + min(0.2, dist * 10)), "Parabolic SAR bullish reversal")
        if prev_up and not cur_up:
            return self.signal("sell", min(0.9, 0.7 + min(0.2, dist * 10)), "Parabolic SAR bearish reversal")
        strong = dist > 0.02
        if cur_up:
            return self.signal("buy", 0.6 if strong else 0.3,
                               "Parabolic SAR strong uptrend continuation" if strong else "Parabolic SAR uptrend continuation")
        return self.signal("sell", 0.6 if strong else 0.3,
                           "Parabolic SAR strong downtrend continuation" if strong else "Parabolic SAR downtrend continuation")
