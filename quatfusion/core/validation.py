"""Input validation for sensor samples and fused output."""

from typing import Optional
import numpy as np

from .types import ImuSample, ValidationResult, Quaternion
from .config import Config


class SensorValidator:
    """Validates raw IMU samples before they reach the estimator.

    The estimator itself accepts any sample; this is a reporting aid
    for replay and acquisition tools.
    """

    def __init__(self, config: Config):
        """Initialize validator with configuration.

        Args:
            config: System configuration with validation thresholds.
        """
        self._config = config
        self._last_timestamp: Optional[int] = None

    def validate_sample(self, sample: ImuSample) -> ValidationResult:
        """Validate a raw IMU sample.

        Args:
            sample: IMU sample to validate.

        Returns:
            ValidationResult with validation status and any errors/warnings.
        """
        result = ValidationResult(is_valid=True)

        self._check_finite(sample, result)
        self._check_accelerometer(sample, result)
        self._check_timestamp(sample, result)

        self._last_timestamp = sample.timestamp

        return result

    def _check_finite(self, sample: ImuSample, result: ValidationResult) -> None:
        """Check all vector components are finite (not NaN or Inf)."""
        for name, vec in (("gyro", sample.gyro), ("accel", sample.accel),
                          ("compass", sample.compass)):
            for i, val in enumerate(vec):
                if not np.isfinite(val):
                    result.add_error(f"Non-finite {name}[{i}]: {val}")

    def _check_accelerometer(self, sample: ImuSample, result: ValidationResult) -> None:
        """A zero accel vector carries no gravity direction."""
        if np.all(np.isfinite(sample.accel)) and np.linalg.norm(sample.accel) < 1e-9:
            result.add_warning("Accelerometer vector is zero, tilt undefined")

    def _check_timestamp(self, sample: ImuSample, result: ValidationResult) -> None:
        """Validate timestamp monotonicity and dt."""
        if self._last_timestamp is None:
            return

        dt = (sample.timestamp - self._last_timestamp) / 1e6

        if dt <= 0:
            result.add_warning(f"Non-monotonic timestamp: dt={dt:.6f}s, sample skipped")
        elif dt > self._config.validation.timestamp.max_dt_s:
            result.add_warning(f"dt too large: {dt*1000:.2f}ms")

    def reset(self) -> None:
        """Reset validator state."""
        self._last_timestamp = None


class QuaternionValidator:
    """Validates fused quaternion output."""

    def __init__(self, config: Config):
        """Initialize validator with configuration.

        Args:
            config: System configuration with quaternion thresholds.
        """
        self._config = config

    def validate(self, q: Quaternion) -> ValidationResult:
        """Validate quaternion state.

        Args:
            q: Quaternion to validate.

        Returns:
            ValidationResult with status and any issues.
        """
        result = ValidationResult(is_valid=True)
        tolerance = self._config.validation.quaternion.norm_tolerance

        if not q.is_finite():
            result.add_error("Quaternion contains non-finite values")
            return result

        if abs(q.norm - 1.0) > tolerance:
            result.add_error(f"Quaternion not unit-norm: norm={q.norm:.9f}")

        return result
