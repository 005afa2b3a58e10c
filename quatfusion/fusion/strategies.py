"""Correction strategies pulling the predicted state toward the measured pose.

Both strategies return an unnormalized quaternion; the estimator
normalizes once per cycle after correction.
"""

from dataclasses import dataclass
import numpy as np

from ..core.types import Quaternion
from ..core.quaternion import QuaternionOps
from ..core.modes import (
    FusionMode,
    DEFAULT_SLERP_POWER,
    DEFAULT_Q_VALUE,
    DEFAULT_R_VALUE,
    check_slerp_power,
    check_noise_gains,
)


@dataclass(frozen=True)
class CorrectionResult:
    """Outcome of one correction step.

    ``error`` is the rotation delta (slerp) or the component-wise
    error quaternion (linear); it is reported for diagnostics only.
    """
    state: Quaternion
    error: Quaternion


class CorrectionStrategy:
    """Base class for correction strategies."""

    mode: FusionMode

    def correct(
        self,
        state: Quaternion,
        measured: Quaternion,
        dt: float,
        measurement_enabled: bool,
    ) -> CorrectionResult:
        """Correct the predicted state.

        Args:
            state: Predicted quaternion.
            measured: Measured pose quaternion.
            dt: Time step in seconds.
            measurement_enabled: Accel or compass contribution enabled.

        Returns:
            Corrected (unnormalized) state and the error used.
        """
        raise NotImplementedError


class SlerpCorrection(CorrectionStrategy):
    """Rotate the prediction by a fraction of its offset from the measurement.

    The offset rotation is raised to ``slerp_power``: 0 keeps the
    gyro-only prediction, 1 adopts the measured pose.
    """

    mode = FusionMode.SLERP

    def __init__(self, slerp_power: float = DEFAULT_SLERP_POWER):
        self.slerp_power = check_slerp_power(slerp_power)

    def correct(self, state, measured, dt, measurement_enabled):
        if not measurement_enabled:
            return CorrectionResult(state=state, error=Quaternion.identity())

        delta = QuaternionOps.normalize(
            QuaternionOps.multiply(QuaternionOps.conjugate(state), measured)
        )

        theta = float(np.arccos(np.clip(delta.w, -1.0, 1.0)))
        sin_power = np.sin(theta * self.slerp_power)
        cos_power = np.cos(theta * self.slerp_power)

        axis = np.array([delta.x, delta.y, delta.z])
        axis_norm = np.linalg.norm(axis)
        if axis_norm > 0:
            axis = axis / axis_norm

        power = Quaternion(
            w=float(cos_power),
            x=float(sin_power * axis[0]),
            y=float(sin_power * axis[1]),
            z=float(sin_power * axis[2]),
        ).normalized()

        return CorrectionResult(state=QuaternionOps.multiply(state, power), error=delta)

    def __repr__(self) -> str:
        return f"SlerpCorrection(slerp_power={self.slerp_power})"


class LinearGainCorrection(CorrectionStrategy):
    """Add a fraction of the component-wise error to the prediction.

    The fraction is qt / (qt + R) with qt = Q * dt. The error is
    ``measured - state`` per component, a small-angle linearization that
    Q and R are tuned against.
    """

    mode = FusionMode.LINEAR

    def __init__(self, q_value: float = DEFAULT_Q_VALUE, r_value: float = DEFAULT_R_VALUE):
        self.q_value, self.r_value = check_noise_gains(q_value, r_value)

    def gain(self, dt: float) -> float:
        """Blend fraction for a time step of ``dt`` seconds."""
        qt = self.q_value * dt
        denominator = qt + self.r_value
        if denominator <= 0.0:
            return 0.0
        return qt / denominator

    def correct(self, state, measured, dt, measurement_enabled):
        if measurement_enabled:
            error = QuaternionOps.subtract(measured, state)
        else:
            error = Quaternion.zero()

        corrected = QuaternionOps.add(state, QuaternionOps.scale(error, self.gain(dt)))
        return CorrectionResult(state=corrected, error=error)

    def __repr__(self) -> str:
        return f"LinearGainCorrection(q_value={self.q_value}, r_value={self.r_value})"


def create_strategy(
    mode,
    slerp_power: float = DEFAULT_SLERP_POWER,
    q_value: float = DEFAULT_Q_VALUE,
    r_value: float = DEFAULT_R_VALUE,
) -> CorrectionStrategy:
    """Build the correction strategy for a fusion mode.

    Raises:
        ConfigurationError: If the mode or its parameters are invalid.
    """
    mode = FusionMode.parse(mode)
    if mode is FusionMode.SLERP:
        return SlerpCorrection(slerp_power)
    return LinearGainCorrection(q_value, r_value)


def fusion_type_name(mode) -> str:
    """Display name of a fusion mode."""
    names = {
        FusionMode.SLERP: "RTQF (SLERP)",
        FusionMode.LINEAR: "RTQF (linear gain)",
    }
    return names[FusionMode.parse(mode)]
