"""Tests for quaternion operations."""

import pytest
import numpy as np

from quatfusion.core.types import Quaternion, EulerAngles
from quatfusion.core.quaternion import QuaternionOps


class TestQuaternion:
    """Tests for Quaternion dataclass."""

    def test_identity(self):
        """Identity quaternion should have correct values."""
        q = Quaternion.identity()
        assert q.w == 1.0
        assert q.x == 0.0
        assert q.y == 0.0
        assert q.z == 0.0

    def test_from_array(self):
        """Quaternion should be created from numpy array."""
        arr = np.array([0.7071, 0.0, 0.7071, 0.0])
        q = Quaternion.from_array(arr)

        assert abs(q.w - 0.7071) < 1e-4
        assert abs(q.x - 0.0) < 1e-4
        assert abs(q.y - 0.7071) < 1e-4
        assert abs(q.z - 0.0) < 1e-4

    def test_to_array(self):
        """Quaternion should convert to numpy array."""
        q = Quaternion(w=0.7071, x=0.0, y=0.7071, z=0.0)
        arr = q.to_array()

        assert isinstance(arr, np.ndarray)
        assert len(arr) == 4
        assert abs(arr[0] - 0.7071) < 1e-4
        assert abs(arr[2] - 0.7071) < 1e-4

    def test_norm_non_unit(self):
        """Non-unit quaternion should have correct norm."""
        q = Quaternion(w=2.0, x=0.0, y=0.0, z=0.0)
        assert abs(q.norm - 2.0) < 1e-10

    def test_is_valid_with_tolerance(self):
        """Near-unit quaternion should be valid within tolerance."""
        q = Quaternion(w=0.995, x=0.0, y=0.0, z=0.0)
        assert q.is_valid(tolerance=0.01)
        assert not q.is_valid(tolerance=0.001)

    def test_is_valid_rejects_nan(self):
        """NaN components should never be valid."""
        q = Quaternion(w=float("nan"), x=0.0, y=0.0, z=0.0)
        assert not q.is_finite()
        assert not q.is_valid(tolerance=10.0)

    def test_normalized(self):
        """Normalized quaternion should have unit norm."""
        q = Quaternion(w=2.0, x=2.0, y=2.0, z=2.0)
        q_norm = q.normalized()

        assert abs(q_norm.norm - 1.0) < 1e-10

    def test_normalized_zero_quaternion(self):
        """Zero quaternion should normalize to identity."""
        q_norm = Quaternion.zero().normalized()

        assert q_norm.w == 1.0

    def test_normalize_is_idempotent(self, sample_quaternion):
        """Normalizing a unit quaternion should not change it."""
        once = QuaternionOps.normalize(sample_quaternion)
        twice = QuaternionOps.normalize(once)

        np.testing.assert_allclose(twice.to_array(), once.to_array(), atol=1e-12)


class TestQuaternionOps:
    """Tests for QuaternionOps static methods."""

    def test_add_subtract_scale(self):
        """Component-wise arithmetic should act per component."""
        q1 = Quaternion(w=1.0, x=2.0, y=3.0, z=4.0)
        q2 = Quaternion(w=0.5, x=0.5, y=0.5, z=0.5)

        assert QuaternionOps.add(q1, q2) == Quaternion(w=1.5, x=2.5, y=3.5, z=4.5)
        assert QuaternionOps.subtract(q1, q2) == Quaternion(w=0.5, x=1.5, y=2.5, z=3.5)
        assert QuaternionOps.scale(q1, 2.0) == Quaternion(w=2.0, x=4.0, y=6.0, z=8.0)

    def test_to_euler_identity(self):
        """Identity quaternion should give zero Euler angles."""
        euler = QuaternionOps.to_euler(Quaternion.identity())

        assert abs(euler.roll) < 1e-10
        assert abs(euler.pitch) < 1e-10
        assert abs(euler.yaw) < 1e-10

    def test_to_euler_roll_90(self):
        """90 degree roll should give correct Euler angles."""
        angle = np.deg2rad(90)
        q = Quaternion(
            w=np.cos(angle / 2),
            x=np.sin(angle / 2),
            y=0.0,
            z=0.0,
        )
        euler = QuaternionOps.to_euler(q)

        assert abs(euler.roll_deg - 90) < 1.0
        assert abs(euler.pitch) < 0.1
        assert abs(euler.yaw) < 0.1

    def test_to_euler_yaw_45(self):
        """45 degree yaw should give correct Euler angles."""
        angle = np.deg2rad(45)
        q = Quaternion(
            w=np.cos(angle / 2),
            x=0.0,
            y=0.0,
            z=np.sin(angle / 2),
        )
        euler = QuaternionOps.to_euler(q)

        assert abs(euler.roll) < 0.1
        assert abs(euler.pitch) < 0.1
        assert abs(euler.yaw_deg - 45) < 1.0

    def test_to_euler_gimbal_lock_is_finite(self):
        """Pitch at +90 deg with rounding past 1 should not produce NaN."""
        q = Quaternion(w=0.70710679, x=0.0, y=0.70710679, z=0.0)
        euler = QuaternionOps.to_euler(q)

        assert np.isfinite(euler.pitch)
        assert abs(euler.pitch_deg - 90) < 1e-3

    def test_from_euler_matches_axis_rotation(self, sample_quaternion):
        """30 degree yaw should build the 30 degree Z-axis quaternion."""
        q = QuaternionOps.from_euler(EulerAngles(0.0, 0.0, np.deg2rad(30)))

        np.testing.assert_allclose(q.to_array(), sample_quaternion.to_array(), atol=1e-12)

    def test_from_euler_to_euler(self):
        """Euler angles away from gimbal lock should survive a conversion."""
        euler = EulerAngles(roll=0.3, pitch=-0.2, yaw=1.1)
        result = QuaternionOps.to_euler(QuaternionOps.from_euler(euler))

        np.testing.assert_allclose(result.to_array(), euler.to_array(), atol=1e-9)

    def test_multiply_identity(self):
        """Multiplying by identity should not change quaternion."""
        q = Quaternion(w=0.7071, x=0.0, y=0.7071, z=0.0)
        result = QuaternionOps.multiply(q, Quaternion.identity())

        assert abs(result.w - q.w) < 1e-6
        assert abs(result.x - q.x) < 1e-6
        assert abs(result.y - q.y) < 1e-6
        assert abs(result.z - q.z) < 1e-6

    def test_multiply_inverse(self):
        """Multiplying quaternion by conjugate should give identity."""
        q = Quaternion(w=0.7071067811865476, x=0.0, y=0.7071067811865476, z=0.0)
        q_conj = QuaternionOps.conjugate(q)
        result = QuaternionOps.multiply(q, q_conj)

        assert abs(result.w - 1.0) < 1e-6
        assert abs(result.x) < 1e-6
        assert abs(result.y) < 1e-6
        assert abs(result.z) < 1e-6

    def test_conjugate(self):
        """Conjugate should negate imaginary parts."""
        q = Quaternion(w=1.0, x=2.0, y=3.0, z=4.0)
        q_conj = QuaternionOps.conjugate(q)

        assert q_conj.w == q.w
        assert q_conj.x == -q.x
        assert q_conj.y == -q.y
        assert q_conj.z == -q.z

    def test_rotate_vector_yaw_90(self):
        """90 degree yaw should turn +X into +Y."""
        q = QuaternionOps.from_euler(EulerAngles(0.0, 0.0, np.pi / 2))
        v = QuaternionOps.rotate_vector(q, np.array([1.0, 0.0, 0.0]))

        np.testing.assert_allclose(v, [0.0, 1.0, 0.0], atol=1e-12)

    def test_align_sign_flips_opposite_hemisphere(self, sample_quaternion):
        """A negated quaternion should be flipped back onto the reference side."""
        negated = QuaternionOps.scale(sample_quaternion, -1.0)
        aligned = QuaternionOps.align_sign(negated, sample_quaternion)

        np.testing.assert_allclose(aligned.to_array(), sample_quaternion.to_array())

    def test_align_sign_keeps_same_hemisphere(self, sample_quaternion):
        """A quaternion already on the reference side should be returned as is."""
        aligned = QuaternionOps.align_sign(sample_quaternion, Quaternion.identity())

        assert aligned is sample_quaternion

    def test_angle_between_same(self):
        """Angle between identical quaternions should be zero."""
        q = Quaternion.identity()
        assert abs(QuaternionOps.angle_between(q, q)) < 1e-6

    def test_angle_between_90_deg(self):
        """Angle between quaternions should be computed correctly."""
        angle_rad = np.deg2rad(90)
        q2 = Quaternion(
            w=np.cos(angle_rad / 2),
            x=0.0,
            y=0.0,
            z=np.sin(angle_rad / 2),
        )

        angle = QuaternionOps.angle_between(Quaternion.identity(), q2)
        assert abs(np.rad2deg(angle) - 90) < 1.0


class TestEulerAngles:
    """Tests for EulerAngles dataclass."""

    def test_deg_conversion(self):
        """Degree properties should convert correctly."""
        euler = EulerAngles(
            roll=np.deg2rad(30),
            pitch=np.deg2rad(45),
            yaw=np.deg2rad(60),
        )

        assert abs(euler.roll_deg - 30) < 1e-6
        assert abs(euler.pitch_deg - 45) < 1e-6
        assert abs(euler.yaw_deg - 60) < 1e-6

    def test_with_yaw(self):
        """with_yaw should replace only the yaw angle."""
        euler = EulerAngles(roll=0.1, pitch=0.2, yaw=0.3).with_yaw(1.0)

        assert euler == EulerAngles(roll=0.1, pitch=0.2, yaw=1.0)
