"""
Tests for quaternion and Euler-angle rotation helpers.
"""

import math

import pytest
import torch

from implicit_csg.geometry.rotation import (
    euler_to_matrix,
    euler_to_quaternion,
    normalize_quaternion,
    quaternion_from_axis_angle,
    quaternion_multiply,
    quaternion_to_matrix,
)


def _vec(*values):
    return torch.tensor(values, dtype=torch.float64)


class TestQuaternion:
    """Tests for the quaternion building blocks."""

    def test_normalize(self):
        """Quaternions are scaled to unit length."""
        q = normalize_quaternion(_vec(2.0, 0.0, 0.0, 0.0))
        assert torch.allclose(q, _vec(1.0, 0.0, 0.0, 0.0))

    def test_identity_matrix(self):
        """The identity quaternion gives the identity matrix."""
        R = quaternion_to_matrix(_vec(1.0, 0.0, 0.0, 0.0))
        assert torch.allclose(R, torch.eye(3, dtype=torch.float64))

    def test_axis_angle_z(self):
        """A quarter turn about Z has w = cos(45 deg), z = sin(45 deg)."""
        q = quaternion_from_axis_angle(_vec(0.0, 0.0, 1.0), torch.tensor(math.pi / 2, dtype=torch.float64))
        c = math.cos(math.pi / 4)
        assert torch.allclose(q, _vec(c, 0.0, 0.0, c))

    def test_multiply_identity(self):
        """Multiplying by the identity leaves a quaternion unchanged."""
        q = normalize_quaternion(_vec(0.3, -0.2, 0.9, 0.1))
        identity = _vec(1.0, 0.0, 0.0, 0.0)
        assert torch.allclose(quaternion_multiply(identity, q), q)
        assert torch.allclose(quaternion_multiply(q, identity), q)

    def test_multiply_composes_rotations(self):
        """Two quarter turns about Z make a half turn."""
        quarter = quaternion_from_axis_angle(_vec(0.0, 0.0, 1.0), torch.tensor(math.pi / 2, dtype=torch.float64))
        R = quaternion_to_matrix(quaternion_multiply(quarter, quarter))
        assert torch.allclose(R @ _vec(1.0, 0.0, 0.0), _vec(-1.0, 0.0, 0.0), atol=1e-12)


# =============================================================================
# Euler Angles
# =============================================================================

class TestEulerToMatrix:
    """Tests for Euler angle conversion."""

    def test_zero_angles(self):
        """Zero angles give the identity."""
        R = euler_to_matrix(_vec(0.0, 0.0, 0.0))
        assert torch.allclose(R, torch.eye(3, dtype=torch.float64))

    def test_quarter_turn_about_z(self):
        """A quarter turn about Z maps X onto Y."""
        R = euler_to_matrix(_vec(0.0, 0.0, math.pi / 2))
        assert torch.allclose(R @ _vec(1.0, 0.0, 0.0), _vec(0.0, 1.0, 0.0), atol=1e-12)

    def test_x_applied_before_z(self):
        """Rotation about X happens first, then about Z."""
        R = euler_to_matrix(_vec(math.pi / 2, 0.0, math.pi / 2))
        # X turns Y into Z, and Z leaves Z in place
        assert torch.allclose(R @ _vec(0.0, 1.0, 0.0), _vec(0.0, 0.0, 1.0), atol=1e-12)

    @pytest.mark.parametrize("angles", [
        (0.1, 0.2, 0.3),
        (-1.0, 2.5, 0.7),
        (math.pi, -math.pi / 3, 1e-3),
    ])
    def test_orthonormal(self, angles):
        """Euler rotations are proper orthonormal matrices."""
        R = euler_to_matrix(_vec(*angles))
        assert torch.allclose(R @ R.T, torch.eye(3, dtype=torch.float64), atol=1e-12)
        assert torch.linalg.det(R).item() == pytest.approx(1.0)

    def test_batched(self):
        """Batched angles give batched matrices."""
        angles = torch.rand(5, 3, dtype=torch.float64)
        assert euler_to_quaternion(angles).shape == (5, 4)
        R = euler_to_matrix(angles)
        assert R.shape == (5, 3, 3)
        assert torch.allclose(R[2], euler_to_matrix(angles[2]))
