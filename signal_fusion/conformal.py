# signal_fusion/conformal.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Mapping
from .types import Timeframe

DEFAULT_WIDTHS: dict[Timeframe, float] = {"5m": 0.002, "1h": 0.004, "4h": 0.006}
DEFAULT_FLOOR = 0.0005


@dataclass(slots=True, frozen=True)
class ConformalResult:
    lower: float  # q05 of the predicted move
    upper: float  # q95
    passed: bool


class ConformalGate:
    """Does the predicted move clear round-trip cost on at least one side?

    The interval is symmetric with a fixed width per timeframe; nothing here
    is learned from data.
    """

    def __init__(self, widths: Mapping[Timeframe, float] | None = None, floor: float = DEFAULT_FLOOR):
        self.widths = dict(DEFAULT_WIDTHS if widths is None else widths)
        self.floor = floor

    def check(self, timeframe: Timeframe, fees: float, slippage: float) -> ConformalResult:
        cost = max(self.floor, fees + slippage)
        half = self.widths[timeframe] / 2.0
        q05, q95 = -half, half
        return ConformalResult(q05, q95, q95 > cost or q05 < -cost)


def check_gate(timeframe: Timeframe, fees: float, slippage: float) -> ConformalResult:
    return ConformalGate().check(timeframe, fees, slippage)
