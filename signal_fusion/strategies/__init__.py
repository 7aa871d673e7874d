# signal_fusion/strategies/__init__.py
from __future__ import annotations
from typing import Mapping
from ..types import StrategyId
from .base import Param, Strategy
from .rsi import RsiStrategy
from .ema_cross import EmaCrossStrategy
from .macd_cross import MacdCross
from .mean_reversion import MeanReversion
from .atr_breakout import AtrBreakout
from .bollinger import BollingerBands
from .stochastic import StochasticStrategy
from .williams_r import WilliamsR
from .adx import AdxStrategy
from .ichimoku import IchimokuCloud
from .parabolic_sar import ParabolicSar
from .volume import VolumeBreakout

_REGISTRY: dict[StrategyId, type[Strategy]] = {
    cls.id: cls
    for cls in (
        RsiStrategy, EmaCrossStrategy, MacdCross, MeanReversion, AtrBreakout, BollingerBands,
        StochasticStrategy, WilliamsR, AdxStrategy, IchimokuCloud, ParabolicSar, VolumeBreakout,
    )
}


def create_strategy(sid: StrategyId | str, params: Mapping[str, float] | None = None) -> Strategy:
    """Builds a strategy with its defaults, then applies ``params`` one by one."""
    strategy = _REGISTRY[StrategyId(sid)]()
    for key, value in (params or {}).items():
        strategy.update_parameter(key, value)
    return strategy


def list_strategies() -> list[StrategyId]:
    return list(_REGISTRY)


def default_strategies() -> list[Strategy]:
    return [cls() for cls in _REGISTRY.values()]


__all__ = [
    "Param", "Strategy", "create_strategy", "default_strategies", "list_strategies",
    "RsiStrategy", "EmaCrossStrategy", "MacdCross", "MeanReversion", "AtrBreakout", "BollingerBands",
    "StochasticStrategy", "WilliamsR", "AdxStrategy", "IchimokuCloud", "ParabolicSar", "VolumeBreakout",
]
