from datetime import datetime, timedelta, timezone
import asyncio
import pytest
from signal_fusion.data.mock_provider import MockProvider
from signal_fusion.types import TIMEFRAMES, Candle

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def build(closes, spread=0.5, volumes=None):
    """Each candle opens at the previous close; wicks extend `spread` past the body."""
    out = []
    prev = closes[0]
    for i, c in enumerate(closes):
        o = prev
        out.append(Candle(
            time=T0 + timedelta(minutes=5 * i), open=o, high=max(o, c) + spread, low=min(o, c) - spread,
            close=c, volume=volumes[i] if volumes is not None else 1000.0,
        ))
        prev = c
    return out


@pytest.fixture
def make_candles():
    return build


@pytest.fixture
def uptrend():
    return build([100.0 + i for i in range(60)])


@pytest.fixture
def mock_candles():
    """300 mock candles per timeframe, fixed clock."""
    mdp = MockProvider(seed=7, end=T0)

    async def load():
        return {tf: await mdp.get_recent_candles("EURUSD", tf, limit=300) for tf in TIMEFRAMES}

    return asyncio.run(load())
