# signal_fusion/strategies/base.py
from __future__ import annotations
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from numbers import Integral, Real
from typing import ClassVar, Sequence
from ..errors import ConfigError
from ..types import Candle, Direction, StrategyId, StrategySignal
from .helpers import Series, clamp01, to_arrays

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Param:
    """Type and safe range of one tunable."""
    kind: type
    lo: float
    hi: float

    def coerce(self, key: str, value) -> float:
        if isinstance(value, bool):
            raise ConfigError(f"{key}: expected {self.kind.__name__}, got bool")
        if self.kind is int:
            if not isinstance(value, Integral):
                raise ConfigError(f"{key}: expected int, got {type(value).__name__}")
            return int(max(self.lo, min(self.hi, int(value))))
        if not isinstance(value, Real) or not math.isfinite(value):
            raise ConfigError(f"{key}: expected a finite number, got {value!r}")
        return float(max(self.lo, min(self.hi, float(value))))


class Strategy(ABC):
    id: ClassVar[StrategyId]
    name: ClassVar[str]
    description: ClassVar[str] = ""
    params: ClassVar[dict[str, Param]] = {}

    @property
    @abstractmethod
    def required_candles(self) -> int: ...

    @abstractmethod
    def generate(self, s: Series) -> StrategySignal:
        """
        Turns a window of at least ``required_candles`` candles (newest last)
        into a signal. Must be pure: no writes to ``self``.
        """

    def evaluate(self, candles: Sequence[Candle]) -> StrategySignal:
        need = self.required_candles
        if len(candles) < need:
            logger.debug("%s: %d/%d candles, holding", self.id.value, len(candles), need)
            return self.signal("hold", 0.0, f"Insufficient data for {self.name} ({len(candles)}/{need} candles)")
        return self.generate(to_arrays(candles))

    def signal(self, direction: Direction, confidence: float, reason: str) -> StrategySignal:
        return StrategySignal(self.id, direction, clamp01(confidence), reason)

    # ------------------------------------------------------------ tunables

    def parameters(self) -> dict[str, float]:
        return {k: getattr(self, k) for k in self.params}

    def check_parameters(self, p: dict[str, float]) -> None:
        """Cross-parameter constraints; raise ConfigError when violated."""

    def validate_parameter(self, key: str, value) -> float:
        param = self.params.get(key)
        if param is None:
            raise ConfigError(f"{self.id.value}: unknown parameter {key!r}")
        v = param.coerce(key, value)
        candidate = self.parameters()
        candidate[key] = v
        self.check_parameters(candidate)
        return v

    def update_parameter(self, key: str, value) -> bool:
        try:
            v = self.validate_parameter(key, value)
        except ConfigError as e:
            logger.warning("%s: ignored parameter update: %s", self.id.value, e)
            return False
        setattr(self, key, v)
        return True

    def __repr__(self) -> str:
        args = ", ".join(f"{k}={v}" for k, v in self.parameters().items())
        return f"{type(self).__name__}({args})"
