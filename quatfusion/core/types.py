"""Data types for quaternion orientation fusion."""

from dataclasses import dataclass, field
from typing import Sequence
import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class Quaternion:
    """Immutable quaternion, not necessarily unit-norm.

    Convention: [w, x, y, z] where w is the scalar component.
    """
    w: float
    x: float
    y: float
    z: float

    @classmethod
    def identity(cls) -> "Quaternion":
        """Return identity quaternion (no rotation)."""
        return cls(w=1.0, x=0.0, y=0.0, z=0.0)

    @classmethod
    def zero(cls) -> "Quaternion":
        """Return the all-zero quaternion."""
        return cls(w=0.0, x=0.0, y=0.0, z=0.0)

    @classmethod
    def from_array(cls, arr: NDArray[np.float64]) -> "Quaternion":
        """Create from numpy array [w, x, y, z]."""
        return cls(w=float(arr[0]), x=float(arr[1]),
                   y=float(arr[2]), z=float(arr[3]))

    def to_array(self) -> NDArray[np.float64]:
        """Convert to numpy array [w, x, y, z]."""
        return np.array([self.w, self.x, self.y, self.z], dtype=np.float64)

    @property
    def norm(self) -> float:
        """Euclidean norm of quaternion."""
        return float(np.sqrt(self.w**2 + self.x**2 + self.y**2 + self.z**2))

    def is_valid(self, tolerance: float = 0.01) -> bool:
        """Check if quaternion is unit quaternion within tolerance."""
        return self.is_finite() and abs(self.norm - 1.0) <= tolerance

    def is_finite(self) -> bool:
        """Check all components are finite."""
        return bool(np.all(np.isfinite([self.w, self.x, self.y, self.z])))

    def normalized(self) -> "Quaternion":
        """Return normalized copy."""
        n = self.norm
        if n < 1e-10:
            return Quaternion.identity()
        return Quaternion(w=self.w/n, x=self.x/n, y=self.y/n, z=self.z/n)


@dataclass(frozen=True)
class EulerAngles:
    """Euler angles in radians.

    Convention: ZYX (yaw-pitch-roll) intrinsic rotations.
    """
    roll: float   # Rotation about X axis
    pitch: float  # Rotation about Y axis
    yaw: float    # Rotation about Z axis

    @classmethod
    def zero(cls) -> "EulerAngles":
        return cls(roll=0.0, pitch=0.0, yaw=0.0)

    @classmethod
    def from_array(cls, arr: Sequence[float]) -> "EulerAngles":
        """Create from [roll, pitch, yaw]."""
        return cls(roll=float(arr[0]), pitch=float(arr[1]), yaw=float(arr[2]))

    def to_array(self) -> NDArray[np.float64]:
        """Convert to numpy array [roll, pitch, yaw]."""
        return np.array([self.roll, self.pitch, self.yaw], dtype=np.float64)

    def with_yaw(self, yaw: float) -> "EulerAngles":
        """Copy with the yaw angle replaced."""
        return EulerAngles(roll=self.roll, pitch=self.pitch, yaw=float(yaw))

    @property
    def roll_deg(self) -> float:
        """Roll angle in degrees."""
        return float(np.rad2deg(self.roll))

    @property
    def pitch_deg(self) -> float:
        """Pitch angle in degrees."""
        return float(np.rad2deg(self.pitch))

    @property
    def yaw_deg(self) -> float:
        """Yaw angle in degrees."""
        return float(np.rad2deg(self.yaw))


def _vector(values: Sequence[float]) -> NDArray[np.float64]:
    arr = np.asarray(values, dtype=np.float64).reshape(3)
    return arr.copy()


@dataclass
class ImuSample:
    """Raw sample record from the sensor acquisition layer.

    Input fields:
    - timestamp: monotonic time in microseconds
    - gyro: angular rate in rad/s
    - accel: specific force in g
    - compass: magnetic field, any consistent unit

    The estimator writes the fused orientation back into the
    ``fusion_*`` fields of the same record.
    """
    timestamp: int
    gyro: NDArray[np.float64]
    accel: NDArray[np.float64]
    compass: NDArray[np.float64]
    compass_valid: bool = True
    fusion_pose: EulerAngles = field(default_factory=EulerAngles.zero)
    fusion_qpose: Quaternion = field(default_factory=Quaternion.identity)
    fusion_pose_valid: bool = False
    fusion_qpose_valid: bool = False

    @classmethod
    def create(
        cls,
        timestamp: int,
        gyro: Sequence[float] = (0.0, 0.0, 0.0),
        accel: Sequence[float] = (0.0, 0.0, 1.0),
        compass: Sequence[float] = (0.0, 0.0, 0.0),
        compass_valid: bool = True,
    ) -> "ImuSample":
        """Create a sample from plain sequences."""
        return cls(
            timestamp=int(timestamp),
            gyro=_vector(gyro),
            accel=_vector(accel),
            compass=_vector(compass),
            compass_valid=bool(compass_valid),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "timestamp_us": self.timestamp,
            "qw": self.fusion_qpose.w,
            "qx": self.fusion_qpose.x,
            "qy": self.fusion_qpose.y,
            "qz": self.fusion_qpose.z,
            "roll": self.fusion_pose.roll_deg,
            "pitch": self.fusion_pose.pitch_deg,
            "yaw": self.fusion_pose.yaw_deg,
            "pose_valid": self.fusion_pose_valid,
            "qpose_valid": self.fusion_qpose_valid,
        }


CYCLE_BOOTSTRAP = "bootstrap"
CYCLE_SKIPPED = "skipped"
CYCLE_FUSED = "fused"


@dataclass(frozen=True)
class FusionCycle:
    """Diagnostics for one estimator intake call.

    ``outcome`` is one of ``bootstrap`` (first sample), ``skipped``
    (non-positive time step) or ``fused``.
    """
    sample_number: int
    timestamp: int
    dt: float
    outcome: str
    measured_pose: EulerAngles
    measured_qpose: Quaternion
    fusion_pose: EulerAngles
    fusion_qpose: Quaternion
    error: Quaternion

    @property
    def quaternion_norm(self) -> float:
        """Norm of the fused quaternion."""
        return self.fusion_qpose.norm


@dataclass
class ValidationResult:
    """Result of sensor data validation."""
    is_valid: bool
    errors: list = field(default_factory=list)
    warnings: list = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Add validation error."""
        self.is_valid = False
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        """Add validation warning."""
        self.warnings.append(message)
