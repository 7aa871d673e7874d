from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
import math
from enum import Enum
from typing import Literal

Direction = Literal["buy", "sell", "hold"]
Timeframe = Literal["5m", "1h", "4h"]
Mode = Literal["normal", "precision"]

TIMEFRAMES: tuple[Timeframe, ...] = ("5m", "1h", "4h")


class StrategyId(str, Enum):
    RSI = "rsi"
    EMA_CROSS = "ema_cross"
    MACD = "macd"
    MEAN_REVERSION = "mean_reversion"
    ATR_BREAKOUT = "atr_breakout"
    BOLLINGER = "bollinger"
    STOCHASTIC = "stochastic"
    WILLIAMS_R = "williams_r"
    ADX = "adx"
    ICHIMOKU = "ichimoku"
    PARABOLIC_SAR = "parabolic_sar"
    VOLUME = "volume"


@dataclass(slots=True, frozen=True)
class Candle:
    time: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    def __post_init__(self):
        if not (self.low <= min(self.open, self.close) <= max(self.open, self.close) <= self.high):
            raise ValueError(
                f"inconsistent candle at {self.time}: o={self.open} h={self.high} l={self.low} c={self.close}"
            )

    @property
    def body(self) -> float:
        return abs(self.close - self.open)

    @property
    def range(self) -> float:
        return self.high - self.low


@dataclass(slots=True, frozen=True)
class StrategySignal:
    strategy_id: StrategyId
    direction: Direction
    confidence: float  # 0..1, 0 = insufficient data
    reason: str = ""

    def __post_init__(self):
        c = float(self.confidence)
        object.__setattr__(self, "confidence", max(0.0, min(1.0, c)) if math.isfinite(c) else 0.0)


@dataclass(slots=True, frozen=True)
class EnsembleSignal:
    direction: Direction
    confidence: float
    reason: str
    contributing: tuple[StrategyId, ...] = ()


@dataclass(slots=True, frozen=True)
class PerTimeframeSignal:
    timeframe: Timeframe
    direction: Direction
    probability: float  # calibrated
    uncertainty: float  # total
    gate_pass: bool


@dataclass(slots=True, frozen=True)
class Decision:
    direction: Direction
    confidence: float = 0.5
    notes: tuple[str, ...] = field(default_factory=tuple)
