from __future__ import annotations


class FusionError(Exception):
    """Base class for errors raised by the fusion core."""


class ConfigError(FusionError, ValueError):
    """A tunable or configuration value was rejected."""


class FeatureValidationError(FusionError, ArithmeticError):
    """A computed feature vector holds NaN or infinite values."""


class CalibrationError(FusionError, ValueError):
    """A calibrator produced a value outside [0, 1]."""
