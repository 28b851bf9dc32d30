"""
Quaternion and Euler-angle rotation helpers.

Quaternions are represented as (w, x, y, z) where w is the scalar part
and (x, y, z) is the vector part. This follows the convention:
    q = w + xi + yj + zk

Euler angles (rx, ry, rz) are in radians and rotate about the fixed X axis
first, then Y, then Z, so the rotation matrix is Rz @ Ry @ Rx.

All operations support batched inputs with shape (..., 4) or (..., 3).
"""

import torch
import torch.nn.functional as F


def normalize_quaternion(q: torch.Tensor, eps: float = 1e-12) -> torch.Tensor:
    """
    Normalize quaternion to unit length.

    Args:
        q: Quaternion tensor of shape (..., 4) as [w, x, y, z]
        eps: Small constant for numerical stability

    Returns:
        Normalized quaternion of shape (..., 4)
    """
    return F.normalize(q, p=2, dim=-1, eps=eps)


def quaternion_multiply(q1: torch.Tensor, q2: torch.Tensor) -> torch.Tensor:
    """
    Compute quaternion product: q1 * q2

    The product rotates by q2 first, then by q1.

    Args:
        q1: First quaternion of shape (..., 4) as [w, x, y, z]
        q2: Second quaternion of shape (..., 4) as [w, x, y, z]

    Returns:
        Product quaternion of shape (..., 4)
    """
    w1, x1, y1, z1 = q1.unbind(dim=-1)
    w2, x2, y2, z2 = q2.unbind(dim=-1)

    w = w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2
    x = w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2
    y = w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2
    z = w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2

    return torch.stack([w, x, y, z], dim=-1)


def quaternion_to_matrix(q: torch.Tensor) -> torch.Tensor:
    """
    Convert unit quaternion to 3x3 rotation matrix.

    Args:
        q: Unit quaternion of shape (..., 4) as [w, x, y, z]

    Returns:
        Rotation matrix of shape (..., 3, 3)
    """
    q = normalize_quaternion(q)
    w, x, y, z = q.unbind(dim=-1)

    r00 = 1 - 2 * (y * y + z * z)
    r01 = 2 * (x * y - z * w)
    r02 = 2 * (x * z + y * w)

    r10 = 2 * (x * y + z * w)
    r11 = 1 - 2 * (x * x + z * z)
    r12 = 2 * (y * z - x * w)

    r20 = 2 * (x * z - y * w)
    r21 = 2 * (y * z + x * w)
    r22 = 1 - 2 * (x * x + y * y)

    return torch.stack([
        torch.stack([r00, r01, r02], dim=-1),
        torch.stack([r10, r11, r12], dim=-1),
        torch.stack([r20, r21, r22], dim=-1),
    ], dim=-2)


def quaternion_from_axis_angle(
    axis: torch.Tensor,
    angle: torch.Tensor
) -> torch.Tensor:
    """
    Create quaternion from axis-angle representation.

    q = cos(θ/2) + sin(θ/2) * (ax*i + ay*j + az*k)

    Args:
        axis: Rotation axis of shape (..., 3), will be normalized
        angle: Rotation angle in radians of shape (...)

    Returns:
        Unit quaternion of shape (..., 4) as [w, x, y, z]
    """
    axis = F.normalize(axis, p=2, dim=-1)

    half_angle = angle / 2
    w = torch.cos(half_angle).unsqueeze(-1)
    xyz = axis * torch.sin(half_angle).unsqueeze(-1)

    return torch.cat([w, xyz], dim=-1)


def euler_to_quaternion(angles: torch.Tensor) -> torch.Tensor:
    """
    Convert Euler angles to a unit quaternion.

    Args:
        angles: Rotation angles (rx, ry, rz) in radians of shape (..., 3)

    Returns:
        Unit quaternion of shape (..., 4) as [w, x, y, z]
    """
    rx, ry, rz = angles.unbind(dim=-1)
    eye = torch.eye(3, dtype=angles.dtype, device=angles.device)
    batch_shape = angles.shape[:-1]

    qx = quaternion_from_axis_angle(eye[0].expand(*batch_shape, 3), rx)
    qy = quaternion_from_axis_angle(eye[1].expand(*batch_shape, 3), ry)
    qz = quaternion_from_axis_angle(eye[2].expand(*batch_shape, 3), rz)

    # X is applied first, so it sits rightmost
    return normalize_quaternion(quaternion_multiply(qz, quaternion_multiply(qy, qx)))


def euler_to_matrix(angles: torch.Tensor) -> torch.Tensor:
    """
    Convert Euler angles to a rotation matrix Rz @ Ry @ Rx.

    Args:
        angles: Rotation angles (rx, ry, rz) in radians of shape (..., 3)

    Returns:
        Rotation matrix of shape (..., 3, 3)
    """
    return quaternion_to_matrix(euler_to_quaternion(angles))
