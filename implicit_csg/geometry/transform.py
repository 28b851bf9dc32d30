"""
Affine transforms for placing implicit shapes in the world.

A Transform stores the 4x4 homogeneous matrix that maps WORLD coordinates
into an object's LOCAL frame, which is the direction needed to evaluate a
field:

    value_world(p) = value_local(T.t_point(p))

Normals go the other way. With A the linear part of the stored matrix, the
gradient of the world field is A^T times the local gradient, which is the
inverse transpose of the object-to-world map. `i_vector` applies it.

Named constructors describe how the OBJECT moves:
    - translate(v): object moves by +v   (t_point(p) = p - v)
    - rotate(r):    object rotates by Euler angles r (X, then Y, then Z)
    - scale(s):     object grows by s    (t_point(p) = p / s)

Composition:
    a.concat(b).t_point(p) == a.t_point(b.t_point(p))

i.e. `b` is the motion applied after `a`, so repeated `concat` calls
accumulate in application order.
"""

import math
from typing import Optional, Tuple

import torch

from ..core.constants import DEFAULT_DTYPE, SINGULAR_DETERMINANT_EPS
from ..core.types import Point, PointLike, Vector, as_vector
from .rotation import euler_to_matrix


class Transform:
    """
    Immutable affine transform stored as a world-to-local matrix.

    The matrix is kept in float64 and cast to the dtype and device of the
    points it is applied to.
    """

    def __init__(self, matrix: Optional[torch.Tensor] = None):
        """
        Initialize a Transform.

        Args:
            matrix: World-to-local homogeneous matrix of shape (4, 4).
                    Identity if None.

        Raises:
            ValueError: If the matrix is not 4x4, not affine or singular
        """
        if matrix is None:
            matrix = torch.eye(4, dtype=DEFAULT_DTYPE)
        else:
            matrix = torch.as_tensor(matrix, dtype=DEFAULT_DTYPE).clone()

        if matrix.shape != (4, 4):
            raise ValueError(f"transform matrix must be 4x4, got shape {tuple(matrix.shape)}")

        bottom = torch.tensor([0.0, 0.0, 0.0, 1.0], dtype=DEFAULT_DTYPE)
        if not torch.allclose(matrix[3], bottom):
            raise ValueError(f"transform matrix must be affine, got bottom row {matrix[3].tolist()}")

        linear = matrix[:3, :3]
        det = torch.linalg.det(linear)
        limit = SINGULAR_DETERMINANT_EPS * torch.linalg.matrix_norm(linear) ** 3
        if not torch.isfinite(matrix).all() or det.abs() <= limit:
            raise ValueError(f"transform matrix is singular (det={det.item()})")

        self._matrix = matrix
        self._det = float(det)

    @classmethod
    def _from_valid(cls, matrix: torch.Tensor) -> 'Transform':
        # Products and inverses of valid transforms are valid; skip the checks
        transform = cls.__new__(cls)
        transform._matrix = matrix
        transform._det = float(torch.linalg.det(matrix[:3, :3]))
        return transform

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def identity(cls) -> 'Transform':
        """Create identity transform (no motion)."""
        return cls()

    @classmethod
    def translate(cls, t: PointLike) -> 'Transform':
        """
        Create a translation.

        Args:
            t: Displacement of the object, shape (3,)
        """
        t = as_vector(t, dtype=DEFAULT_DTYPE)
        M = torch.eye(4, dtype=DEFAULT_DTYPE)
        M[:3, 3] = -t
        return cls(M)

    @classmethod
    def rotate(cls, r: PointLike) -> 'Transform':
        """
        Create a rotation.

        Args:
            r: Euler angles (rx, ry, rz) in radians, applied X then Y then Z
        """
        R = euler_to_matrix(as_vector(r, dtype=DEFAULT_DTYPE))
        M = torch.eye(4, dtype=DEFAULT_DTYPE)
        # Inverse of a rotation is its transpose
        M[:3, :3] = R.T
        return cls(M)

    @classmethod
    def scale(cls, s: float) -> 'Transform':
        """
        Create a uniform scale.

        Args:
            s: Non-zero scale factor of the object

        Raises:
            ValueError: If s is zero or not finite
        """
        s = float(s)
        if s == 0.0 or not math.isfinite(s):
            raise ValueError(f"scale factor must be finite and non-zero, got {s}")
        M = torch.eye(4, dtype=DEFAULT_DTYPE)
        M[:3, :3] /= s
        return cls(M)

    @classmethod
    def from_object_matrix(cls, matrix: torch.Tensor) -> 'Transform':
        """
        Create from an object-to-world matrix (the usual modelling matrix).

        Args:
            matrix: Homogeneous matrix of shape (4, 4)
        """
        matrix = torch.as_tensor(matrix, dtype=DEFAULT_DTYPE)
        if matrix.shape != (4, 4):
            raise ValueError(f"transform matrix must be 4x4, got shape {tuple(matrix.shape)}")
        return cls(matrix).inverse()

    # -------------------------------------------------------------------------
    # Algebra
    # -------------------------------------------------------------------------

    @property
    def matrix(self) -> torch.Tensor:
        """World-to-local matrix of shape (4, 4) (a copy)."""
        return self._matrix.clone()

    def object_matrix(self) -> torch.Tensor:
        """Object-to-world matrix of shape (4, 4)."""
        return torch.linalg.inv(self._matrix)

    def concat(self, other: 'Transform') -> 'Transform':
        """
        Compose two transforms.

        The result applies `other`'s motion after this one's.
        """
        return Transform._from_valid(self._matrix @ other._matrix)

    def inverse(self) -> 'Transform':
        """Transform undoing this one's motion."""
        return Transform._from_valid(torch.linalg.inv(self._matrix))

    def distance_scale(self) -> float:
        """
        Factor converting local distances to world distances.

        Exact for rigid motions and uniform scales; for non-uniform scales
        this is the geometric mean of the axis scales.
        """
        return abs(self._det) ** (-1.0 / 3.0)

    def t_point(self, p: Point) -> Point:
        """
        Map world points into the local frame.

        Args:
            p: Points of shape (..., 3)

        Returns:
            Local points of shape (..., 3)
        """
        M = self._matrix.to(dtype=p.dtype, device=p.device)
        return p @ M[:3, :3].T + M[:3, 3]

    def i_vector(self, v: Vector) -> Vector:
        """
        Map local normals (gradients) into the world frame.

        Lengths are not preserved under scaling; callers renormalize.

        Args:
            v: Vectors of shape (..., 3)

        Returns:
            World vectors of shape (..., 3)
        """
        A = self._matrix[:3, :3].to(dtype=v.dtype, device=v.device)
        return v @ A

    # -------------------------------------------------------------------------
    # Comparison
    # -------------------------------------------------------------------------

    def key(self) -> Tuple[float, ...]:
        """Matrix entries in row-major order."""
        return tuple(self._matrix.flatten().tolist())

    def is_identity(self) -> bool:
        return torch.equal(self._matrix, torch.eye(4, dtype=DEFAULT_DTYPE))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Transform):
            return NotImplemented
        return torch.equal(self._matrix, other._matrix)

    def __hash__(self) -> int:
        return hash(self.key())

    def __repr__(self) -> str:
        return f"Transform({self._matrix.tolist()})"
