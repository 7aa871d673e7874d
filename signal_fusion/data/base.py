from __future__ import annotations
from abc import ABC, abstractmethod
from ..types import Candle, Timeframe


class CandleProvider(ABC):
    """Supplies candle history, oldest first. The core never fetches on its own."""

    @abstractmethod
    async def get_recent_candles(
        self, symbol: str, timeframe: Timeframe, limit: int = 300
    ) -> list[Candle]:
        """Returns the last `limit` candles."""

    async def close(self) -> None:
        """Override when holding sessions or file handles."""
        return None
