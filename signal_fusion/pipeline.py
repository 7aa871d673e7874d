# signal_fusion/pipeline.py
"""One evaluation cycle: candles per timeframe in, one Decision out.

Strategy tunables, weights, the enabled set, the calibrator and the config are
the long-lived mutable state. They are guarded by a lock and copied at the start
of every cycle, so a concurrent update lands in the next cycle and never
halfway through the current one.
"""
from __future__ import annotations
import copy
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Mapping, Sequence
from .calibration import Calibrator, build_calibrator
from .config import PipelineConfig, clamp_weight
from .conformal import ConformalGate, ConformalResult
from .ensemble.aggregator import aggregate_signals
from .ensemble.regime import Regime, detect_regime, regime_weights
from .mode_engine import ModeEngine
from .strategies import Strategy, create_strategy
from .types import (
    TIMEFRAMES, Candle, Decision, EnsembleSignal, Mode, PerTimeframeSignal,
    StrategyId, StrategySignal, Timeframe,
)
from .uncertainty import UncertaintyEngine, UncertaintyResult

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class TimeframeReport:
    frame: PerTimeframeSignal
    ensemble: EnsembleSignal
    signals: tuple[StrategySignal, ...]
    uncertainty: UncertaintyResult
    gate: ConformalResult
    regime: Regime | None = None


@dataclass(slots=True, frozen=True)
class CycleResult:
    decision: Decision
    reports: dict[Timeframe, TimeframeReport]

    @property
    def frames(self) -> list[PerTimeframeSignal]:
        return [r.frame for r in self.reports.values()]


@dataclass(slots=True, frozen=True)
class _Snapshot:
    strategies: tuple[Strategy, ...]
    weights: dict[StrategyId, float]
    calibrator: Calibrator
    config: PipelineConfig


class Pipeline:
    def __init__(self, config: PipelineConfig | None = None):
        self.config = config or PipelineConfig.from_settings()
        self._lock = threading.Lock()
        self._strategies: dict[StrategyId, Strategy] = {
            sid: create_strategy(sid, self.config.parameters.get(sid)) for sid in StrategyId
        }
        self._enabled: set[StrategyId] = set(self.config.enabled)
        self._weights: dict[StrategyId, float] = dict(self.config.weights)
        self._calibrator = build_calibrator(self.config)
        self.uncertainty = UncertaintyEngine(
            self.config.uncertainty,
            dropout_rate=self.config.dropout_rate,
            dropout_samples=self.config.dropout_samples,
            seed=self.config.dropout_seed,
        )
        self.gate = ConformalGate(self.config.gate_widths, self.config.gate_floor)
        self.modes = ModeEngine(self.config.normal, self.config.precision)

    # ------------------------------------------------------------ tunables

    def update_parameter(self, sid: StrategyId | str, key: str, value) -> bool:
        with self._lock:
            return self._strategies[StrategyId(sid)].update_parameter(key, value)

    def set_weight(self, sid: StrategyId | str, weight: float) -> float:
        w = clamp_weight(weight)
        with self._lock:
            self._weights[StrategyId(sid)] = w
        return w

    def set_temperature(self, timeframe: Timeframe, temperature: float) -> None:
        with self._lock:
            temps = {**self.config.temperatures, timeframe: float(temperature)}
            self.config = self.config.model_copy(update={"temperatures": temps})
            self._calibrator = build_calibrator(self.config)

    def enable(self, sid: StrategyId | str) -> None:
        with self._lock:
            self._enabled.add(StrategyId(sid))

    def disable(self, sid: StrategyId | str) -> None:
        with self._lock:
            self._enabled.discard(StrategyId(sid))

    @property
    def enabled(self) -> tuple[StrategyId, ...]:
        with self._lock:
            return tuple(sid for sid in StrategyId if sid in self._enabled)

    @property
    def weights(self) -> dict[StrategyId, float]:
        with self._lock:
            return {sid: self._weights.get(sid, 1.0) for sid in StrategyId}

    def strategy(self, sid: StrategyId | str) -> Strategy:
        """A copy; change tunables through ``update_parameter``."""
        with self._lock:
            return copy.deepcopy(self._strategies[StrategyId(sid)])

    def _snapshot(self) -> _Snapshot:
        with self._lock:
            return _Snapshot(
                strategies=tuple(copy.deepcopy(self._strategies[sid]) for sid in StrategyId if sid in self._enabled),
                weights=dict(self._weights),
                calibrator=self._calibrator,
                config=self.config,
            )

    # ------------------------------------------------------------ evaluation

    def evaluate_timeframe(
        self, timeframe: Timeframe, candles: Sequence[Candle], snapshot: _Snapshot | None = None
    ) -> TimeframeReport:
        snap = snapshot or self._snapshot()
        signals = tuple(s.evaluate(candles) for s in snap.strategies)

        weights = snap.weights
        regime = None
        if snap.config.regime_weighting:
            regime = detect_regime(candles)
            weights = regime_weights(weights, regime, [s.id for s in snap.strategies])

        ens = aggregate_signals(signals, weights)
        prob = snap.calibrator.calibrate(ens.confidence, timeframe)
        u = self.uncertainty.quantify([s.confidence for s in signals if s.confidence > 0], primary=ens.confidence)
        gate = self.gate.check(timeframe, snap.config.fees, snap.config.slippage)
        frame = PerTimeframeSignal(timeframe, ens.direction, prob, u.total, gate.passed)
        logger.debug("%s: %s p=%.3f u=%.3f gate=%s", timeframe, ens.direction, prob, u.total, gate.passed)
        return TimeframeReport(frame, ens, signals, u, gate, regime)

    def run(self, candles_by_tf: Mapping[Timeframe, Sequence[Candle]], mode: Mode | None = None) -> CycleResult:
        snap = self._snapshot()
        mode = mode or snap.config.mode
        tfs = [tf for tf in TIMEFRAMES if tf in candles_by_tf]

        if snap.config.parallel and len(tfs) > 1:
            with ThreadPoolExecutor(max_workers=len(tfs)) as pool:
                reports = list(pool.map(lambda tf: self.evaluate_timeframe(tf, candles_by_tf[tf], snap), tfs))
        else:
            reports = [self.evaluate_timeframe(tf, candles_by_tf[tf], snap) for tf in tfs]

        decision = self.modes.decide([r.frame for r in reports], mode)
        logger.info("decision (%s): %s conf=%.2f %s", mode, decision.direction, decision.confidence, "; ".join(decision.notes))
        return CycleResult(decision, {r.frame.timeframe: r for r in reports})
