from __future__ import annotations
from datetime import datetime, timedelta, timezone
import math
import random
from ..types import Candle, Timeframe
from .base import CandleProvider

_TF_MINUTES: dict[Timeframe, int] = {"5m": 5, "1h": 60, "4h": 240}


class MockProvider(CandleProvider):
    """Seeded random walk; same (seed, symbol, timeframe) gives the same prices."""

    def __init__(self, seed: int = 42, end: datetime | None = None):
        self.seed = seed
        self.end = end

    async def get_recent_candles(self, symbol: str, timeframe: Timeframe, limit: int = 300) -> list[Candle]:
        rnd = random.Random(f"{self.seed}:{symbol.upper()}:{timeframe}")
        minutes = _TF_MINUTES[timeframe]
        scale = math.sqrt(minutes / 5)
        end = self.end or datetime.now(timezone.utc).replace(second=0, microsecond=0)
        price = 1.1000 if symbol.upper().startswith("EURUSD") else 1.2500

        candles: list[Candle] = []
        for i in range(limit):
            t = end - timedelta(minutes=minutes * (limit - i))
            open_ = price
            drift = 0.00001 * scale * (i / 50.0)
            noise = (rnd.random() - 0.5) * 0.0008 * scale
            price = max(0.1, price + drift + noise + 0.0002 * scale * math.sin(i / 12))
            wick = abs(noise) * 0.5 + 0.0001 * scale * rnd.random()
            volume = 1000.0 * scale * (1.0 + rnd.random())
            if rnd.random() < 0.05:
                volume *= 2.5
            candles.append(Candle(
                time=t, open=open_, high=max(open_, price) + wick, low=min(open_, price) - wick,
                close=price, volume=volume,
            ))
        return candles
