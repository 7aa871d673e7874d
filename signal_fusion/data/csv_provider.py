from __future__ import annotations
from pathlib import Path
import pandas as pd
from ..types import Candle, Timeframe
from .base import CandleProvider
from .frames import candles_from_frame


class CsvProvider(CandleProvider):
    """Reads ``<root>/<SYMBOL>_<timeframe>.csv`` with time/open/high/low/close/volume columns."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def path_for(self, symbol: str, timeframe: Timeframe) -> Path:
        return self.root / f"{symbol.upper()}_{timeframe}.csv"

    async def get_recent_candles(self, symbol: str, timeframe: Timeframe, limit: int = 300) -> list[Candle]:
        path = self.path_for(symbol, timeframe)
        if not path.exists():
            raise FileNotFoundError(f"no candle file for {symbol} / {timeframe}: {path}")
        return candles_from_frame(pd.read_csv(path))[-limit:]
