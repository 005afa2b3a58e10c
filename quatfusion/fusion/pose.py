"""Measured pose from accelerometer tilt and compass heading.

The measured pose is an orientation observation that does not depend on
integration history: roll and pitch come from the gravity direction,
yaw from the tilt-compensated magnetic heading corrected by the local
declination.
"""

from dataclasses import dataclass
import numpy as np
from numpy.typing import NDArray

from ..core.types import Quaternion, EulerAngles
from ..core.quaternion import QuaternionOps


@dataclass(frozen=True)
class MeasuredPose:
    """Orientation observation derived from accel and compass."""
    pose: EulerAngles
    qpose: Quaternion


def accel_to_euler(accel: NDArray[np.float64]) -> EulerAngles:
    """Roll and pitch from the gravity direction, yaw zero.

    Args:
        accel: Accelerometer reading [ax, ay, az], any scale.

    Returns:
        Tilt angles in radians.
    """
    norm = np.linalg.norm(accel)
    a = accel / norm if norm > 0 else np.zeros(3)

    roll = np.arctan2(a[1], a[2])
    pitch = -np.arctan2(a[0], np.sqrt(a[1] * a[1] + a[2] * a[2]))
    return EulerAngles(roll=float(roll), pitch=float(pitch), yaw=0.0)


def compass_heading(
    tilt: EulerAngles,
    compass: NDArray[np.float64],
    declination: float,
) -> float:
    """Tilt-compensated yaw from a compass reading.

    Args:
        tilt: Current roll and pitch; yaw is ignored.
        compass: Magnetometer reading [mx, my, mz].
        declination: Magnetic declination in radians.

    Returns:
        Yaw in radians relative to true north.
    """
    q = QuaternionOps.from_euler(tilt.with_yaw(0.0))
    m = QuaternionOps.rotate_vector(q, compass)
    return float(-np.arctan2(m[1], m[0]) - declination)


def calculate_pose(
    accel: NDArray[np.float64],
    compass: NDArray[np.float64],
    compass_valid: bool,
    declination: float,
    previous_pose: EulerAngles,
    previous_qpose: Quaternion,
    enable_accel: bool = True,
    enable_compass: bool = True,
) -> MeasuredPose:
    """Derive the measured pose for one sample.

    Without the accelerometer, tilt is taken from the previous fused pose.
    Without a valid compass, yaw holds the previous fused yaw.

    Args:
        accel: Accelerometer reading.
        compass: Magnetometer reading.
        compass_valid: Whether the compass reading can be trusted.
        declination: Magnetic declination in radians.
        previous_pose: Last fused Euler pose.
        previous_qpose: Last fused quaternion, used for sign alignment.
        enable_accel: Accelerometer contribution enabled.
        enable_compass: Compass contribution enabled.

    Returns:
        Measured pose in Euler and quaternion form.
    """
    if enable_accel:
        pose = accel_to_euler(accel)
    else:
        pose = previous_pose.with_yaw(0.0)

    if enable_compass and compass_valid:
        pose = pose.with_yaw(compass_heading(pose, compass, declination))
    else:
        pose = pose.with_yaw(previous_pose.yaw)

    qpose = QuaternionOps.from_euler(pose)

    # q and -q are the same rotation; the correction step needs both
    # quaternions on the same side.
    aligned = QuaternionOps.align_sign(qpose, previous_qpose)
    if aligned is not qpose:
        qpose = aligned
        pose = QuaternionOps.to_euler(qpose)

    return MeasuredPose(pose=pose, qpose=qpose)
