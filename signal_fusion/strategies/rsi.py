# signal_fusion/strategies/rsi.py
from __future__ import annotations
import numpy as np
from ..errors import ConfigError
from ..types import StrategyId, StrategySignal
from ..utils.ta import rsi
from .base import Param, Strategy
from .helpers import Series


def _swings(values: np.ndarray, high: bool) -> list[int]:
    idx = []
    for i in range(1, len(values) - 1):
        if high and values[i] > values[i-1] and values[i] > values[i+1]:
            idx.append(i)
        elif not high and values[i] < values[i-1] and values[i] < values[i+1]:
            idx.append(i)
    return idx[-2:]


class RsiStrategy(Strategy):
    id = StrategyId.RSI
    name = "RSI"
    description = "Overbought/oversold momentum with swing divergence"
    params = {
        "period": Param(int, 2, 50),
        "overbought": Param(float, 50, 95),
        "oversold": Param(float, 5, 50),
    }

    def __init__(self, period: int = 14, overbought: float = 70.0, oversold: float = 30.0):
        self.period, self.overbought, self.oversold = period, overbought, oversold

    @property
    def required_candles(self) -> int:
        return self.period * 3

    def check_parameters(self, p):
        if p["oversold"] >= p["overbought"]:
            raise ConfigError("oversold must stay below overbought")

    def _divergence(self, closes: np.ndarray, values: np.ndarray) -> StrategySignal | None:
        p_lows, r_lows = _swings(closes, high=False), _swings(values, high=False)
        if len(p_lows) == 2 and len(r_lows) == 2:
            if closes[p_lows[1]] < closes[p_lows[0]] and values[r_lows[1]] > values[r_lows[0]]:
                return self.signal("buy", 0.8, "Bullish RSI divergence detected")
        p_highs, r_highs = _swings(closes, high=True), _swings(values, high=True)
        if len(p_highs) == 2 and len(r_highs) == 2:
            if closes[p_highs[1]] > closes[p_highs[0]] and values[r_highs[1]] < values[r_highs[0]]:
                return self.signal("sell", 0.8, "Bearish RSI divergence detected")
        return None

    def generate(self, s: Series) -> StrategySignal:
        values = rsi(s.close, self.period)
        if len(values) >= 10:
            div = self._divergence(s.close[-10:], values[-10:])
            if div is not None:
                return div

        cur = float(values[-1])
        if cur <= self.oversold:
            strength = (self.oversold - cur) / self.oversold
            return self.signal("buy", min(1.0, 0.6 + strength * 0.4),
                               f"RSI oversold at {cur:.1f} (threshold: {self.oversold:.1f})")
        if cur >= self.overbought:
            strength = (cur - self.overbought) / (100 - self.overbought)
            return self.signal("sell", min(1.0, 0.6 + strength * 0.4),
                               f"RSI overbought at {cur:.1f} (threshold: {self.overbought:.1f})")
        dist = abs(cur - 50) / 50
        bias = "bullish" if cur > 50 else "bearish"
        return self.signal("hold", max(0.2, 0.5 - dist * 0.3), f"RSI neutral at {cur:.1f} ({bias} bias)")
