"""Cycle statistics for the fusion estimator."""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque
import numpy as np

from ..core.config import Config
from ..core.quaternion import QuaternionOps
from ..core.types import FusionCycle, CYCLE_FUSED, CYCLE_SKIPPED
from .observer import FusionObserver

logger = logging.getLogger(__name__)


@dataclass
class FusionStats:
    """Aggregated estimator statistics."""
    mean_dt_ms: float
    std_dt_ms: float
    max_dt_ms: float
    min_dt_ms: float
    effective_rate_hz: float
    fused_cycles: int
    skipped_cycles: int
    total_cycles: int
    max_norm_error: float
    mean_correction_deg: float

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "rate_hz": self.effective_rate_hz,
            "dt_mean_ms": self.mean_dt_ms,
            "dt_std_ms": self.std_dt_ms,
            "dt_min_ms": self.min_dt_ms,
            "dt_max_ms": self.max_dt_ms,
            "fused": self.fused_cycles,
            "skipped": self.skipped_cycles,
            "total": self.total_cycles,
            "max_norm_error": self.max_norm_error,
            "mean_correction_deg": self.mean_correction_deg,
        }


class CycleStatsObserver(FusionObserver):
    """Tracks time steps, skipped samples and quaternion health.

    Keeps a rolling window of dt values and of the angle between the
    measured and fused poses, and logs a summary every
    ``log_interval`` cycles.
    """

    def __init__(self, window_size: int = 1000, log_interval: int = 0):
        """Initialize statistics observer.

        Args:
            window_size: Number of recent fused cycles kept.
            log_interval: Log a summary every N cycles; 0 disables.
        """
        self._dt_history: Deque[float] = deque(maxlen=window_size)
        self._correction_history: Deque[float] = deque(maxlen=window_size)
        self._log_interval = log_interval

        self._total = 0
        self._fused = 0
        self._skipped = 0
        self._max_norm_error = 0.0

    @classmethod
    def from_config(cls, config: Config) -> "CycleStatsObserver":
        return cls(
            window_size=config.monitoring.window_size,
            log_interval=config.monitoring.log_interval_samples,
        )

    def on_cycle(self, cycle: FusionCycle) -> None:
        self._total += 1

        if cycle.outcome == CYCLE_SKIPPED:
            self._skipped += 1
            logger.debug(
                "Sample %d skipped: dt=%.6f s", cycle.sample_number, cycle.dt
            )
        elif cycle.outcome == CYCLE_FUSED:
            self._fused += 1
            self._dt_history.append(cycle.dt * 1000.0)
            self._correction_history.append(
                np.rad2deg(QuaternionOps.angle_between(cycle.measured_qpose, cycle.fusion_qpose))
            )
            self._max_norm_error = max(
                self._max_norm_error, abs(cycle.quaternion_norm - 1.0)
            )

        self._maybe_log_stats()

    def _maybe_log_stats(self) -> None:
        """Log statistics periodically."""
        if not self._log_interval or self._total % self._log_interval:
            return

        stats = self.get_stats()
        logger.info(
            "Fusion: rate=%.1f Hz, dt=%.2f+/-%.2f ms, fused=%d, skipped=%d, "
            "correction=%.2f deg",
            stats.effective_rate_hz,
            stats.mean_dt_ms,
            stats.std_dt_ms,
            stats.fused_cycles,
            stats.skipped_cycles,
            stats.mean_correction_deg,
        )

    def get_stats(self) -> FusionStats:
        """Get aggregated statistics.

        Returns:
            FusionStats with current metrics.
        """
        if not self._dt_history:
            return FusionStats(
                mean_dt_ms=0.0,
                std_dt_ms=0.0,
                max_dt_ms=0.0,
                min_dt_ms=0.0,
                effective_rate_hz=0.0,
                fused_cycles=self._fused,
                skipped_cycles=self._skipped,
                total_cycles=self._total,
                max_norm_error=self._max_norm_error,
                mean_correction_deg=0.0,
            )

        dt_array = np.array(self._dt_history)
        mean_dt = float(np.mean(dt_array))
        effective_rate = 1000.0 / mean_dt if mean_dt > 0 else 0.0

        return FusionStats(
            mean_dt_ms=mean_dt,
            std_dt_ms=float(np.std(dt_array)),
            max_dt_ms=float(np.max(dt_array)),
            min_dt_ms=float(np.min(dt_array)),
            effective_rate_hz=effective_rate,
            fused_cycles=self._fused,
            skipped_cycles=self._skipped,
            total_cycles=self._total,
            max_norm_error=self._max_norm_error,
            mean_correction_deg=float(np.mean(self._correction_history)),
        )

    def reset(self) -> None:
        """Reset all metrics."""
        self._dt_history.clear()
        self._correction_history.clear()
        self._total = 0
        self._fused = 0
        self._skipped = 0
        self._max_norm_error = 0.0
