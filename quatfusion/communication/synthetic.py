"""Synthetic IMU sample source.

Generates samples for a body turning at a constant rate, with the
accelerometer and compass readings consistent with the true
orientation. Used by tests and the replay tool's demo mode.
"""

from typing import Iterator, Optional, Sequence
import numpy as np

from ..core.types import ImuSample, Quaternion, EulerAngles
from ..core.quaternion import QuaternionOps

GRAVITY_WORLD = np.array([0.0, 0.0, 1.0])
DEFAULT_FIELD = (0.4, 0.0, 0.3)


class SyntheticImu:
    """Deterministic generator of IMU samples.

    The true orientation starts at ``initial_pose`` and is propagated
    exactly with the body rate ``gyro``. Gaussian noise is added to the
    reported readings only.
    """

    def __init__(
        self,
        rate_hz: float = 100.0,
        gyro: Sequence[float] = (0.0, 0.0, 0.0),
        initial_pose: Optional[EulerAngles] = None,
        field: Sequence[float] = DEFAULT_FIELD,
        declination: float = 0.0,
        gyro_noise: float = 0.0,
        accel_noise: float = 0.0,
        compass_noise: float = 0.0,
        gyro_bias: Sequence[float] = (0.0, 0.0, 0.0),
        compass_valid: bool = True,
        start_timestamp: int = 0,
        seed: Optional[int] = None,
    ):
        """Initialize generator.

        Args:
            rate_hz: Sample rate.
            gyro: True body rate [x, y, z] in rad/s.
            initial_pose: True starting orientation, level and north by default.
            field: Magnetic field toward magnetic north, in the world frame.
            declination: Angle in radians by which magnetic north is offset.
            gyro_noise: Gyro noise standard deviation in rad/s.
            accel_noise: Accel noise standard deviation in g.
            compass_noise: Compass noise standard deviation.
            gyro_bias: Constant offset added to the reported gyro.
            compass_valid: Value reported in every sample.
            start_timestamp: Timestamp of the first sample, microseconds.
            seed: Random seed for the noise.
        """
        self._period_us = int(round(1e6 / rate_hz))
        self._gyro = np.asarray(gyro, dtype=np.float64)
        self._gyro_bias = np.asarray(gyro_bias, dtype=np.float64)
        self._truth = QuaternionOps.from_euler(initial_pose or EulerAngles.zero())

        rotation = QuaternionOps.from_euler(EulerAngles(0.0, 0.0, -declination))
        self._field = QuaternionOps.rotate_vector(rotation, np.asarray(field, dtype=np.float64))

        self._noise = (gyro_noise, accel_noise, compass_noise)
        self._compass_valid = compass_valid
        self._timestamp = int(start_timestamp)
        self._rng = np.random.default_rng(seed)
        self._last_truth = self._truth
        self._count = 0

    def _step_rotation(self) -> Quaternion:
        """Body-frame rotation over one sample period."""
        rate = float(np.linalg.norm(self._gyro))
        if rate == 0.0:
            return Quaternion.identity()
        half_angle = rate * self.period_s / 2.0
        axis = self._gyro / rate
        s = np.sin(half_angle)
        return Quaternion(w=float(np.cos(half_angle)), x=float(s * axis[0]),
                          y=float(s * axis[1]), z=float(s * axis[2]))

    def read_measurement(self) -> ImuSample:
        """Generate the next sample and advance the true orientation."""
        gyro_noise, accel_noise, compass_noise = self._noise
        to_body = QuaternionOps.conjugate(self._truth)

        accel = QuaternionOps.rotate_vector(to_body, GRAVITY_WORLD)
        compass = QuaternionOps.rotate_vector(to_body, self._field)
        gyro = self._gyro + self._gyro_bias

        if gyro_noise:
            gyro = gyro + self._rng.normal(0, gyro_noise, 3)
        if accel_noise:
            accel = accel + self._rng.normal(0, accel_noise, 3)
        if compass_noise:
            compass = compass + self._rng.normal(0, compass_noise, 3)

        sample = ImuSample.create(
            timestamp=self._timestamp,
            gyro=gyro,
            accel=accel,
            compass=compass,
            compass_valid=self._compass_valid,
        )

        self._last_truth = self._truth
        self._truth = QuaternionOps.multiply(self._truth, self._step_rotation()).normalized()
        self._timestamp += self._period_us
        self._count += 1
        return sample

    def samples(self, count: int) -> Iterator[ImuSample]:
        """Generate ``count`` consecutive samples."""
        for _ in range(count):
            yield self.read_measurement()

    @property
    def period_s(self) -> float:
        """Sample period in seconds."""
        return self._period_us / 1e6

    @property
    def truth(self) -> Quaternion:
        """True orientation of the most recently generated sample."""
        return self._last_truth

    @property
    def truth_pose(self) -> EulerAngles:
        """True orientation of the most recent sample as Euler angles."""
        return QuaternionOps.to_euler(self.truth)

    @property
    def sample_count(self) -> int:
        return self._count
