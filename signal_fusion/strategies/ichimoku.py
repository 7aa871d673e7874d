# signal_fusion/strategies/ichimoku.py
from __future__ import annotations
from ..errors import ConfigError
from ..types import Direction, StrategyId, StrategySignal
from ..utils.ta import ichimoku
from .base import Param, Strategy
from .helpers import Series, crossed_above, crossed_below


class IchimokuCloud(Strategy):
    id = StrategyId.ICHIMOKU
    name = "Ichimoku Cloud"
    description = "Tenkan/kijun crosses, price against the cloud, cloud twists"
    params = {
        "tenkan": Param(int, 3, 20),
        "kijun": Param(int, 10, 50),
        "senkou_b": Param(int, 20, 100),
        "displacement": Param(int, 10, 50),
    }

    def __init__(self, tenkan: int = 9, kijun: int = 26, senkou_b: int = 52, displacement: int = 26):
        self.tenkan, self.kijun, self.senkou_b, self.displacement = tenkan, kijun, senkou_b, displacement

    @property
    def required_candles(self) -> int:
        return self.senkou_b + self.displacement + 10

    def check_parameters(self, p):
        if not p["tenkan"] < p["kijun"] <= p["senkou_b"]:
            raise ConfigError("periods must satisfy tenkan < kijun <= senkou_b")

    def generate(self, s: Series) -> StrategySignal:
        ich = ichimoku(s.high, s.low, self.tenkan, self.kijun, self.senkou_b)
        price = float(s.close[-1])
        t, k = float(ich.tenkan[-1]), float(ich.kijun[-1])
        # the cloud under the current candle was projected `displacement` bars ago
        span_a = float(ich.senkou_a[-1 - self.displacement])
        span_b = float(ich.senkou_b[-1 - self.displacement])
        top, bottom = max(span_a, span_b), min(span_a, span_b)
        bullish_cloud = span_a > span_b

        notes: list[str] = []
        conf = 0.0
        direction: Direction = "hold"

        if crossed_above(ich.tenkan[-2], ich.kijun[-2], t, k):
            notes.append("Tenkan-Kijun bullish cross"); conf += 0.3; direction = "buy"
        elif crossed_below(ich.tenkan[-2], ich.kijun[-2], t, k):
            notes.append("Tenkan-Kijun bearish cross"); conf += 0.3; direction = "sell"

        if price > top:
            if direction in ("buy", "hold"):
                notes.append("Price above cloud"); conf += 0.4 if bullish_cloud else 0.2; direction = "buy"
        elif price < bottom:
            if direction in ("sell", "hold"):
                notes.append("Price below cloud"); conf += 0.2 if bullish_cloud else 0.4; direction = "sell"
        else:
            notes.append("Price in cloud (neutral)")
            conf *= 0.5

        if price > t and price > k:
            if direction in ("buy", "hold"):
                notes.append("Price above Tenkan and Kijun"); conf += 0.2; direction = "buy"
        elif price < t and price < k:
            if direction in ("sell", "hold"):
                notes.append("Price below Tenkan and Kijun"); conf += 0.2; direction = "sell"

        a0, a1, b0, b1 = ich.senkou_a[-2], ich.senkou_a[-1], ich.senkou_b[-2], ich.senkou_b[-1]
        if crossed_above(a0, b0, a1, b1):
            notes.append("Cloud twist bullish"); conf += 0.2
            if direction == "hold": direction = "buy"
        elif crossed_below(a0, b0, a1, b1):
            notes.append("Cloud twist bearish"); conf += 0.2
            if direction == "hold": direction = "sell"

        return self.signal(direction, min(0.95, conf), ", ".join(notes) or "Ichimoku neutral")
