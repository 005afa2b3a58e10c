"""Observers receiving per-cycle diagnostics from the estimator."""

import logging
from typing import Optional

from ..core.types import FusionCycle, EulerAngles, Quaternion, CYCLE_FUSED

logger = logging.getLogger(__name__)


def format_pose(label: str, pose: EulerAngles) -> str:
    """Euler pose in degrees, one line."""
    return (f"{label}: roll={pose.roll_deg:.2f} pitch={pose.pitch_deg:.2f} "
            f"yaw={pose.yaw_deg:.2f} deg")


def format_quaternion(label: str, q: Quaternion) -> str:
    """Quaternion components, one line."""
    return f"{label}: w={q.w:.6f} x={q.x:.6f} y={q.y:.6f} z={q.z:.6f}"


class FusionObserver:
    """Base observer; subclasses override ``on_cycle``."""

    def on_cycle(self, cycle: FusionCycle) -> None:
        """Called once per estimator intake call."""
        pass


class LoggingObserver(FusionObserver):
    """Writes estimator diagnostics through the logging module."""

    def __init__(self, log: Optional[logging.Logger] = None, level: int = logging.DEBUG):
        """Initialize observer.

        Args:
            log: Logger to write to; defaults to this module's logger.
            level: Level for the per-cycle lines.
        """
        self._logger = log or logger
        self._level = level

    def on_cycle(self, cycle: FusionCycle) -> None:
        if not self._logger.isEnabledFor(self._level):
            return

        self._logger.log(
            self._level,
            "IMU update delta time: %f, sample %d (%s)",
            cycle.dt, cycle.sample_number, cycle.outcome,
        )
        if cycle.outcome != CYCLE_FUSED:
            return

        self._logger.log(self._level, format_pose("Measured pose", cycle.measured_pose))
        self._logger.log(self._level, format_pose("RTQF pose", cycle.fusion_pose))
        self._logger.log(self._level, format_quaternion("Measured quat", cycle.measured_qpose))
        self._logger.log(self._level, format_quaternion("RTQF quat", cycle.fusion_qpose))
        self._logger.log(self._level, format_quaternion("Error quat", cycle.error))


class CallbackObserver(FusionObserver):
    """Adapts a plain callable to the observer interface."""

    def __init__(self, callback):
        self._callback = callback

    def on_cycle(self, cycle: FusionCycle) -> None:
        self._callback(cycle)
