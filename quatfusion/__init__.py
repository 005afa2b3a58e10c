"""Quaternion orientation fusion for gyro, accelerometer and compass samples."""

from .core import ImuSample, Quaternion, EulerAngles, Config, load_config
from .fusion import RtqfEstimator, FusionMode

__version__ = "0.1.0"

__all__ = [
    "ImuSample",
    "Quaternion",
    "EulerAngles",
    "Config",
    "load_config",
    "RtqfEstimator",
    "FusionMode",
]
