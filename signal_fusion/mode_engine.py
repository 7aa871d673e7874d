# signal_fusion/mode_engine.py
from __future__ import annotations
import logging
import math
from typing import Iterable, Sequence
from .config import ModeThresholds
from .types import Decision, Direction, Mode, PerTimeframeSignal, Timeframe

logger = logging.getLogger(__name__)

NORMAL = ModeThresholds(min_probability=0.60, max_uncertainty=0.60)
PRECISION = ModeThresholds(min_probability=0.70, max_uncertainty=0.40)

_TF_WEIGHTS: dict[Timeframe, float] = {"5m": 0.30, "1h": 0.40, "4h": 0.30}
_VOTE: dict[Direction, int] = {"buy": 1, "sell": -1, "hold": 0}


def is_eligible(f: PerTimeframeSignal, th: ModeThresholds) -> bool:
    return f.gate_pass and f.probability >= th.min_probability and f.uncertainty <= th.max_uncertainty


def meta_confidence(frames: Sequence[PerTimeframeSignal], final: Direction) -> float:
    """Agreement of all frames with the final side, discounted by their uncertainty. In [0.5, 0.9]."""
    if final == "hold":
        return 0.5
    agg = u_sum = w_sum = 0.0
    for f in frames:
        sign = 1.0 if f.direction == final else (0.0 if f.direction == "hold" else -1.0)
        w = _TF_WEIGHTS.get(f.timeframe, 0.30)
        agg += w * sign * f.probability
        u_sum += f.uncertainty
        w_sum += w
    agreement = math.tanh(abs(agg / max(w_sum, 1e-9)))
    u_avg = u_sum / len(frames) if frames else 0.0
    penalty = min(0.30, 0.5 * u_avg)
    return min(0.90, max(0.50, 0.50 + 0.40 * agreement - penalty))


class ModeEngine:
    def __init__(self, normal: ModeThresholds = NORMAL, precision: ModeThresholds = PRECISION):
        self.normal = normal
        self.precision = precision

    def decide(self, frames: Iterable[PerTimeframeSignal], mode: Mode = "normal") -> Decision:
        frames = list(frames)
        th = self.precision if mode == "precision" else self.normal
        eligible = [f for f in frames if is_eligible(f, th)]
        if not eligible:
            return Decision("hold", 0.5, ("no eligible frames",))

        if mode == "precision":
            by_tf = {f.timeframe: f.direction for f in eligible}
            m5, h1, h4 = by_tf.get("5m", "hold"), by_tf.get("1h", "hold"), by_tf.get("4h", "hold")
            if m5 == h1 == "buy" and h4 != "sell":
                direction: Direction = "buy"
            elif m5 == h1 == "sell" and h4 != "buy":
                direction = "sell"
            else:
                return Decision("hold", 0.5, ("no consensus",))
            note = f"precision: 5m={m5} 1h={h1} 4h={h4}"
        else:
            votes = sum(_VOTE[f.direction] for f in eligible)
            if votes == 0:
                return Decision("hold", 0.5, ("tie",))
            direction = "buy" if votes > 0 else "sell"
            note = f"normal: vote {votes:+d} over {len(eligible)} eligible frames"

        return Decision(direction, meta_confidence(frames, direction), (note,))


def decide(frames: Iterable[PerTimeframeSignal], mode: Mode = "normal") -> Decision:
    return ModeEngine().decide(frames, mode)
