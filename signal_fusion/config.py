from __future__ import annotations
import os
from typing import Literal
from pydantic import BaseModel, Field, field_validator, model_validator
from dotenv import load_dotenv
from .types import Mode, StrategyId, Timeframe

load_dotenv()

CalibrationMethod = Literal["temperature", "isotonic", "fusion"]
UncertaintyMethod = Literal["ensemble", "dropout", "combined"]

MIN_WEIGHT = 0.1
MAX_WEIGHT = 2.0


class Settings(BaseModel):
    default_symbol: str = os.getenv("DEFAULT_SYMBOL", "EURUSD")
    mode: Mode = os.getenv("FUSION_MODE", "normal")
    fees: float = float(os.getenv("FUSION_FEES", "0.0005"))
    slippage: float = float(os.getenv("FUSION_SLIPPAGE", "0.0002"))
    calibration: CalibrationMethod = os.getenv("FUSION_CALIBRATION", "fusion")
    temperature_5m: float = float(os.getenv("FUSION_TEMPERATURE_5M", "2.0"))
    temperature_1h: float = float(os.getenv("FUSION_TEMPERATURE_1H", "2.0"))
    temperature_4h: float = float(os.getenv("FUSION_TEMPERATURE_4H", "2.0"))
    uncertainty: UncertaintyMethod = os.getenv("FUSION_UNCERTAINTY", "combined")
    log_level: str = os.getenv("FUSION_LOG_LEVEL", "INFO")


settings = Settings()


def clamp_weight(w: float) -> float:
    return max(MIN_WEIGHT, min(MAX_WEIGHT, float(w)))


class ModeThresholds(BaseModel):
    min_probability: float
    max_uncertainty: float


class PipelineConfig(BaseModel):
    """Everything one evaluation cycle reads. Built once, copied per cycle."""

    enabled: list[StrategyId] = Field(default_factory=lambda: list(StrategyId))
    weights: dict[StrategyId, float] = Field(default_factory=dict)
    # int | float keeps integer periods as int
    parameters: dict[StrategyId, dict[str, int | float]] = Field(default_factory=dict)

    calibration: CalibrationMethod = "fusion"
    temperatures: dict[Timeframe, float] = Field(
        default_factory=lambda: {"5m": 2.0, "1h": 2.0, "4h": 2.0}
    )
    band: tuple[float, float] | None = (0.5, 0.9)
    fusion_weight: float = 0.6

    uncertainty: UncertaintyMethod = "combined"
    dropout_rate: float = 0.2
    dropout_samples: int = 10
    dropout_seed: int = 0

    fees: float = 0.0005
    slippage: float = 0.0002
    gate_floor: float = 0.0005
    gate_widths: dict[Timeframe, float] = Field(
        default_factory=lambda: {"5m": 0.002, "1h": 0.004, "4h": 0.006}
    )

    mode: Mode = "normal"
    normal: ModeThresholds = ModeThresholds(min_probability=0.60, max_uncertainty=0.60)
    precision: ModeThresholds = ModeThresholds(min_probability=0.70, max_uncertainty=0.40)

    regime_weighting: bool = False
    parallel: bool = False

    @field_validator("weights")
    @classmethod
    def _clamp_weights(cls, v: dict[StrategyId, float]) -> dict[StrategyId, float]:
        return {k: clamp_weight(w) for k, w in v.items()}

    @model_validator(mode="after")
    def _validate(self):
        if self.band is not None and not (0.0 <= self.band[0] < self.band[1] <= 1.0):
            raise ValueError(f"band must satisfy 0 <= low < high <= 1, got {self.band}")
        if self.fees < 0 or self.slippage < 0 or self.gate_floor < 0:
            raise ValueError("fees, slippage and gate_floor must be >= 0")
        if not 0.0 <= self.fusion_weight <= 1.0:
            raise ValueError("fusion_weight must be within [0, 1]")
        if not 0.0 < self.dropout_rate < 1.0 or self.dropout_samples < 2:
            raise ValueError("dropout_rate must be in (0, 1) and dropout_samples >= 2")
        return self

    def weight(self, sid: StrategyId) -> float:
        return self.weights.get(sid, 1.0)

    def thresholds(self, mode: Mode) -> ModeThresholds:
        return self.precision if mode == "precision" else self.normal

    @classmethod
    def from_settings(cls, s: Settings | None = None, **overrides) -> "PipelineConfig":
        s = s or settings
        base = dict(
            mode=s.mode,
            fees=s.fees,
            slippage=s.slippage,
            calibration=s.calibration,
            uncertainty=s.uncertainty,
            temperatures={"5m": s.temperature_5m, "1h": s.temperature_1h, "4h": s.temperature_4h},
        )
        base.update(overrides)
        return cls(**base)
