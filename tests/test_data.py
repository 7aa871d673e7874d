import asyncio
from datetime import datetime, timezone
import pandas as pd
import pytest
from signal_fusion.data.csv_provider import CsvProvider
from signal_fusion.data.frames import candles_from_frame, candles_to_frame
from signal_fusion.data.mock_provider import MockProvider

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)

def test_mock_is_deterministic():
    a = asyncio.run(MockProvider(seed=1, end=T0).get_recent_candles("EURUSD", "5m", limit=100))
    b = asyncio.run(MockProvider(seed=1, end=T0).get_recent_candles("eurusd", "5m", limit=100))
    c = asyncio.run(MockProvider(seed=2, end=T0).get_recent_candles("EURUSD", "5m", limit=100))
    assert a == b
    assert a != c
    assert len(a) == 100
    assert all(x.time < y.time for x, y in zip(a, a[1:]))
    assert a[-1].time < T0

def test_csv_provider_reads_latest(tmp_path, mock_candles):
    candles = mock_candles["4h"]
    candles_to_frame(candles).to_csv(tmp_path / "EURUSD_4h.csv", index=False)
    loaded = asyncio.run(CsvProvider(tmp_path).get_recent_candles("eurusd", "4h", limit=5))
    assert len(loaded) == 5
    assert [c.close for c in loaded] == pytest.approx([c.close for c in candles[-5:]])
    assert loaded[-1].time == candles[-1].time

def test_csv_provider_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        asyncio.run(CsvProvider(tmp_path).get_recent_candles("GBPUSD", "1h"))

def test_frame_accepts_datetime_column_and_bad_rows():
    df = pd.DataFrame({
        "datetime": ["2024-01-01 01:00", "2024-01-01 00:00", "2024-01-01 02:00"],
        "open": [1.0, 1.0, 1.0],
        "high": [1.2, 1.1, "x"],
        "low": [0.9, 0.9, 0.9],
        "close": [1.1, 1.05, 1.0],
    })
    candles = candles_from_frame(df)
    assert [c.close for c in candles] == [1.05, 1.1]
    assert all(c.volume == 0.0 for c in candles)
    assert candles[0].time.tzinfo is not None
