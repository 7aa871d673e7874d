# signal_fusion/strategies/volume.py
from __future__ import annotations
from ..types import StrategyId, StrategySignal
from .base import Param, Strategy
from .helpers import Series


class VolumeBreakout(Strategy):
    id = StrategyId.VOLUME
    name = "Volume Breakout"
    description = "Volume spikes behind price breakouts, volume/price divergence"
    params = {
        "period": Param(int, 5, 50),
        "threshold": Param(float, 1.2, 3.0),
        "price_change": Param(float, 0.005, 0.05),
    }

    def __init__(self, period: int = 20, threshold: float = 1.5, price_change: float = 0.02):
        self.period, self.threshold, self.price_change = period, threshold, price_change

    @property
    def required_candles(self) -> int:
        return self.period + 10

    def _confidence(self, ratio: float, change: float) -> float:
        conf = 0.5 + min(0.3, (ratio - self.threshold) * 0.1) + min(0.2, change * 5) + 0.1
        return min(0.9, conf)

    def _divergence(self, s: Series) -> StrategySignal | None:
        closes, vols = s.close[-5:], s.volume[-5:]
        if closes[0] == 0:
            return None
        price_move = (closes[-1] - closes[0]) / closes[0]
        vol_slope = (vols[-1] - vols[0]) / (len(vols) - 1)
        if price_move < -0.01 and vol_slope > 0:
            return self.signal("buy", 0.4, "Bullish volume divergence detected")
        if price_move > 0.01 and vol_slope < 0:
            return self.signal("sell", 0.4, "Bearish volume divergence detected")
        return None

    def generate(self, s: Series) -> StrategySignal:
        avg = float(s.volume[-self.period:].mean())
        ratio = float(s.volume[-1]) / avg if avg > 0 else 0.0
        spike = ratio >= self.threshold
        prev_close = float(s.close[-2])
        change = (float(s.close[-1]) - prev_close) / prev_close if prev_close else 0.0
        significant = abs(change) >= self.price_change

        breaking_up = s.close[-1] > s.open[-1] and s.close[-1] > s.high[-2]
        breaking_down = s.close[-1] < s.open[-1] and s.close[-1] < s.low[-2]
        if spike and significant:
            if change > 0 and breaking_up:
                return self.signal("buy", self._confidence(ratio, abs(change)),
                                   f"Volume spike with bullish breakout ({ratio:.1f}x volume)")
            if change < 0 and breaking_down:
                return self.signal("sell", self._confidence(ratio, abs(change)),
                                   f"Volume spike with bearish breakdown ({ratio:.1f}x volume)")
        if spike:
            if change > self.price_change / 2:
                return self.signal("buy", 0.5, "High volume supporting upward price movement")
            if change < -self.price_change / 2:
                return self.signal("sell", 0.5, "High volume supporting downward price movement")

        div = self._divergence(s)
        if div is not None:
            return div
        if ratio < 0.5 and significant:
            return self.signal("hold", 0.3, "Significant price move on low volume, potential false signal")
        return self.signal("hold", 0.1, "No significant volume patterns detected")
