"""Core module for quaternion orientation fusion."""

from .types import (
    ImuSample,
    Quaternion,
    EulerAngles,
    FusionCycle,
    ValidationResult,
)
from .errors import QuatFusionError, ConfigurationError, SampleLogError
from .validation import SensorValidator, QuaternionValidator
from .quaternion import QuaternionOps
from .modes import FusionMode, FUSION_MODES
from .config import Config, FusionConfig, load_config

__all__ = [
    "ImuSample",
    "Quaternion",
    "EulerAngles",
    "FusionCycle",
    "ValidationResult",
    "QuatFusionError",
    "ConfigurationError",
    "SampleLogError",
    "SensorValidator",
    "QuaternionValidator",
    "QuaternionOps",
    "FusionMode",
    "FUSION_MODES",
    "Config",
    "FusionConfig",
    "load_config",
]
