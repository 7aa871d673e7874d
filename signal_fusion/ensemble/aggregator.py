# signal_fusion/ensemble/aggregator.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Mapping
from ..config import clamp_weight
from ..types import Direction, EnsembleSignal, StrategyId, StrategySignal

NO_ACTIVE = "no active strategies"


@dataclass(slots=True, frozen=True)
class EnsembleScores:
    buy: float
    sell: float
    hold: float
    total_weight: float


def _weight(weights: Mapping[StrategyId, float] | None, sid: StrategyId) -> float:
    if not weights or sid not in weights:
        return 1.0
    return clamp_weight(weights[sid])


def score_signals(
    signals: Iterable[StrategySignal], weights: Mapping[StrategyId, float] | None = None
) -> EnsembleScores:
    """Confidence-weighted buy/sell/hold buckets, normalized to sum to 1."""
    buckets: dict[Direction, float] = {"buy": 0.0, "sell": 0.0, "hold": 0.0}
    total = 0.0
    for s in signals:
        w = _weight(weights, s.strategy_id) * s.confidence
        buckets[s.direction] += w
        total += w
    if total > 0:
        buckets = {k: v / total for k, v in buckets.items()}
    return EnsembleScores(buckets["buy"], buckets["sell"], buckets["hold"], total)


def aggregate_signals(
    signals: Iterable[StrategySignal], weights: Mapping[StrategyId, float] | None = None
) -> EnsembleSignal:
    sigs = list(signals)
    sc = score_signals(sigs, weights)
    if not sigs or sc.total_weight <= 0:
        return EnsembleSignal("hold", 0.0, NO_ACTIVE)

    # strict comparisons: any tie falls through to hold
    if sc.buy > sc.sell and sc.buy > sc.hold:
        direction, confidence = "buy", sc.buy
    elif sc.sell > sc.buy and sc.sell > sc.hold:
        direction, confidence = "sell", sc.sell
    else:
        direction, confidence = "hold", sc.hold

    contributing = tuple(
        s.strategy_id for s in sigs
        if s.direction == direction and s.confidence > 0
    )
    names = ", ".join(sid.value for sid in contributing)
    if direction == "buy":
        reason = f"Buy consensus from: {names}"
    elif direction == "sell":
        reason = f"Sell consensus from: {names}"
    else:
        reason = f"No clear consensus ({len(sigs)} strategies)"
    return EnsembleSignal(direction, confidence, reason, contributing)
