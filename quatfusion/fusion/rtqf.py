"""Quaternion fusion estimator (RTQF).

Each sample runs one predict/update cycle:

- predict: integrate the gyro rate into the quaternion state with a
  first-order step of dq/dt = 1/2 * Omega(w) * q
- update: pull the prediction toward the accel/compass measured pose
  with the configured correction strategy, then normalize once

The estimator never raises for sample data and never logs; diagnostics
go to the observers passed at construction.
"""

from typing import Iterable, List, Optional, Tuple
import numpy as np
from numpy.typing import NDArray

from ..core.types import (
    ImuSample,
    Quaternion,
    EulerAngles,
    FusionCycle,
    CYCLE_BOOTSTRAP,
    CYCLE_SKIPPED,
    CYCLE_FUSED,
)
from ..core.config import Config, FusionConfig
from ..core.quaternion import QuaternionOps
from ..monitoring.observer import LoggingObserver
from .pose import calculate_pose
from .strategies import (
    CorrectionStrategy,
    FusionMode,
    create_strategy,
    fusion_type_name,
    DEFAULT_SLERP_POWER,
    DEFAULT_Q_VALUE,
    DEFAULT_R_VALUE,
)

MICROSECONDS_PER_SECOND = 1_000_000


def transition_matrix(gyro: NDArray[np.float64]) -> NDArray[np.float64]:
    """State-transition operator for the quaternion derivative.

    Args:
        gyro: Angular rate [x, y, z] in rad/s.

    Returns:
        4x4 matrix F such that dq/dt = F @ q for q = [w, x, y, z].
    """
    x2, y2, z2 = (float(v) / 2.0 for v in gyro)
    return np.array([
        [0.0, -x2, -y2, -z2],
        [x2, 0.0, z2, -y2],
        [y2, -z2, 0.0, x2],
        [z2, y2, -x2, 0.0],
    ], dtype=np.float64)


def predict_state(
    state: Quaternion,
    gyro: NDArray[np.float64],
    dt: float,
) -> Tuple[Quaternion, NDArray[np.float64]]:
    """Advance the state by one gyro integration step.

    The result is not normalized.

    Args:
        state: Current quaternion state.
        gyro: Angular rate in rad/s.
        dt: Time step in seconds.

    Returns:
        Tuple of (predicted state, transition operator used).
    """
    fk = transition_matrix(gyro)
    q = state.to_array()
    return Quaternion.from_array(q + (fk @ q) * dt), fk


class RtqfEstimator:
    """Stateful quaternion fusion estimator, advanced one sample at a time.

    Usage:
        estimator = RtqfEstimator(mode=FusionMode.SLERP, slerp_power=0.02)

        for sample in samples:
            estimator.new_imu_data(sample, declination)
            print(sample.fusion_pose)

    One instance per sensor stream; instances share no state.
    """

    def __init__(
        self,
        mode=FusionMode.LINEAR,
        slerp_power: float = DEFAULT_SLERP_POWER,
        q_value: float = DEFAULT_Q_VALUE,
        r_value: float = DEFAULT_R_VALUE,
        enable_gyro: bool = True,
        enable_accel: bool = True,
        enable_compass: bool = True,
        observers: Optional[Iterable] = None,
    ):
        """Initialize estimator.

        Args:
            mode: FusionMode or its string value ("slerp" or "linear").
            slerp_power: Correction power in [0, 1], slerp mode.
            q_value: Gyro trust Q, linear mode.
            r_value: Measurement noise R, linear mode.
            enable_gyro: Integrate gyro rates.
            enable_accel: Use the accelerometer in the measured pose.
            enable_compass: Use the compass in the measured pose.
            observers: Objects with an ``on_cycle(cycle)`` method.

        Raises:
            ConfigurationError: If the mode or gains are invalid.
        """
        self._strategy: CorrectionStrategy = create_strategy(
            mode, slerp_power=slerp_power, q_value=q_value, r_value=r_value
        )
        self._enable_gyro = bool(enable_gyro)
        self._enable_accel = bool(enable_accel)
        self._enable_compass = bool(enable_compass)
        self._observers: List = list(observers or [])
        self.reset()

    @classmethod
    def from_config(cls, config, observers: Optional[Iterable] = None) -> "RtqfEstimator":
        """Build an estimator from a Config or FusionConfig.

        A LoggingObserver is attached when ``debug`` is set.
        """
        cfg: FusionConfig = config.fusion if isinstance(config, Config) else config
        observers = list(observers or [])
        if cfg.debug:
            observers.append(LoggingObserver())

        return cls(
            mode=cfg.mode,
            slerp_power=cfg.slerp_power,
            q_value=cfg.q_value,
            r_value=cfg.r_value,
            enable_gyro=cfg.enable_gyro,
            enable_accel=cfg.enable_accel,
            enable_compass=cfg.enable_compass,
            observers=observers,
        )

    def reset(self) -> None:
        """Return to the uninitialized state; the next sample bootstraps."""
        self._first_time = True
        self._fusion_pose = EulerAngles.zero()
        self._fusion_qpose = QuaternionOps.from_euler(self._fusion_pose)
        self._measured_pose = EulerAngles.zero()
        self._measured_qpose = QuaternionOps.from_euler(self._measured_pose)
        self._state = Quaternion.identity()
        self._error = Quaternion.zero()
        self._fk = np.zeros((4, 4), dtype=np.float64)
        self._gyro = np.zeros(3)
        self._accel = np.zeros(3)
        self._compass = np.zeros(3)
        self._compass_valid = False
        self._last_fusion_time = 0
        self._time_delta = 0.0
        self._sample_number = 0

    def add_observer(self, observer) -> None:
        """Register an object with an ``on_cycle(cycle)`` method."""
        self._observers.append(observer)

    def new_imu_data(self, sample: ImuSample, declination: float = 0.0) -> ImuSample:
        """Process one raw sample and write the fused pose into it.

        Args:
            sample: Raw sample; its ``fusion_*`` fields are overwritten.
            declination: Magnetic declination in radians.

        Returns:
            The same sample record.
        """
        self._sample_number += 1

        if self._enable_gyro:
            self._gyro = np.array(sample.gyro, dtype=np.float64)
        else:
            self._gyro = np.zeros(3)
        self._accel = np.array(sample.accel, dtype=np.float64)
        self._compass = np.array(sample.compass, dtype=np.float64)
        self._compass_valid = bool(sample.compass_valid)

        if self._first_time:
            self._last_fusion_time = sample.timestamp
            self._calculate_pose(declination)
            self._fk = np.zeros((4, 4), dtype=np.float64)

            self._state = self._measured_qpose
            self._fusion_qpose = self._state
            self._fusion_pose = self._measured_pose
            self._first_time = False
            outcome = CYCLE_BOOTSTRAP
        else:
            self._time_delta = (
                (sample.timestamp - self._last_fusion_time) / MICROSECONDS_PER_SECOND
            )
            self._last_fusion_time = sample.timestamp

            if self._time_delta <= 0:
                outcome = CYCLE_SKIPPED
            else:
                self._calculate_pose(declination)
                self._predict()
                self._update()
                self._fusion_pose = QuaternionOps.to_euler(self._state)
                self._fusion_qpose = self._state
                outcome = CYCLE_FUSED

        sample.fusion_pose_valid = True
        sample.fusion_qpose_valid = True
        sample.fusion_pose = self._fusion_pose
        sample.fusion_qpose = self._fusion_qpose

        self._notify(sample.timestamp, outcome)
        return sample

    def _calculate_pose(self, declination: float) -> None:
        measured = calculate_pose(
            self._accel,
            self._compass,
            self._compass_valid,
            declination,
            previous_pose=self._fusion_pose,
            previous_qpose=self._fusion_qpose,
            enable_accel=self._enable_accel,
            enable_compass=self._enable_compass,
        )
        self._measured_pose = measured.pose
        self._measured_qpose = measured.qpose

    def _predict(self) -> None:
        self._state, self._fk = predict_state(self._state, self._gyro, self._time_delta)

    def _update(self) -> None:
        result = self._strategy.correct(
            self._state,
            self._measured_qpose,
            self._time_delta,
            measurement_enabled=self._enable_accel or self._enable_compass,
        )
        self._error = result.error
        self._state = QuaternionOps.normalize(result.state)

    def _notify(self, timestamp: int, outcome: str) -> None:
        if not self._observers:
            return

        cycle = FusionCycle(
            sample_number=self._sample_number,
            timestamp=timestamp,
            dt=self._time_delta if outcome != CYCLE_BOOTSTRAP else 0.0,
            outcome=outcome,
            measured_pose=self._measured_pose,
            measured_qpose=self._measured_qpose,
            fusion_pose=self._fusion_pose,
            fusion_qpose=self._fusion_qpose,
            error=self._error if outcome == CYCLE_FUSED else Quaternion.zero(),
        )
        for observer in self._observers:
            observer.on_cycle(cycle)

    @property
    def fusion_pose(self) -> EulerAngles:
        """Current fused Euler pose."""
        return self._fusion_pose

    @property
    def fusion_qpose(self) -> Quaternion:
        """Current fused quaternion."""
        return self._fusion_qpose

    @property
    def measured_pose(self) -> EulerAngles:
        """Last measured pose from accel and compass."""
        return self._measured_pose

    @property
    def measured_qpose(self) -> Quaternion:
        """Last measured pose as a quaternion."""
        return self._measured_qpose

    @property
    def state(self) -> Quaternion:
        """Running quaternion state."""
        return self._state

    @property
    def transition_matrix(self) -> NDArray[np.float64]:
        """Transition operator of the last predict step."""
        return self._fk.copy()

    @property
    def time_delta(self) -> float:
        """Last computed time step in seconds."""
        return self._time_delta

    @property
    def sample_count(self) -> int:
        """Samples received since construction or reset."""
        return self._sample_number

    @property
    def is_initialized(self) -> bool:
        """Whether the first sample has been received."""
        return not self._first_time

    @property
    def strategy(self) -> CorrectionStrategy:
        return self._strategy

    @property
    def mode(self) -> FusionMode:
        return self._strategy.mode

    @property
    def fusion_type_name(self) -> str:
        return fusion_type_name(self._strategy.mode)

    @property
    def gyro_enabled(self) -> bool:
        return self._enable_gyro

    @property
    def accel_enabled(self) -> bool:
        return self._enable_accel

    @property
    def compass_enabled(self) -> bool:
        return self._enable_compass
