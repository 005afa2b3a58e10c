"""Quaternion fusion estimator and its building blocks."""

from .pose import MeasuredPose, accel_to_euler, compass_heading, calculate_pose
from .strategies import (
    FusionMode,
    CorrectionResult,
    CorrectionStrategy,
    SlerpCorrection,
    LinearGainCorrection,
    create_strategy,
    fusion_type_name,
)
from .rtqf import RtqfEstimator, transition_matrix, predict_state

__all__ = [
    "MeasuredPose",
    "accel_to_euler",
    "compass_heading",
    "calculate_pose",
    "FusionMode",
    "CorrectionResult",
    "CorrectionStrategy",
    "SlerpCorrection",
    "LinearGainCorrection",
    "create_strategy",
    "fusion_type_name",
    "RtqfEstimator",
    "transition_matrix",
    "predict_state",
]
