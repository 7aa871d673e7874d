from __future__ import annotations
from typing import Sequence
import pandas as pd
from ..types import Candle

COLUMNS = ["time", "open", "high", "low", "close", "volume"]


def candles_to_frame(candles: Sequence[Candle]) -> pd.DataFrame:
    return pd.DataFrame(
        [(c.time, c.open, c.high, c.low, c.close, c.volume) for c in candles],
        columns=COLUMNS,
    )


def candles_from_frame(df: pd.DataFrame) -> list[Candle]:
    """Accepts a `time` or `datetime` column; rows with missing prices are dropped."""
    df = df.copy()
    if "time" not in df.columns and "datetime" in df.columns:
        df = df.rename(columns={"datetime": "time"})
    df["time"] = pd.to_datetime(df["time"], utc=True)
    for col in ("open", "high", "low", "close", "volume"):
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")
    if "volume" not in df.columns:
        df["volume"] = 0.0
    df["volume"] = df["volume"].fillna(0.0)
    df = df.dropna(subset=["open", "high", "low", "close"]).sort_values("time")
    return [
        Candle(time=row.time.to_pydatetime(), open=float(row.open), high=float(row.high),
               low=float(row.low), close=float(row.close), volume=float(row.volume))
        for row in df.itertuples(index=False)
    ]
