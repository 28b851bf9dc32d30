"""
Abstract base classes for implicit_csg shapes.

This module defines the standard interface that every shape implements and
the generic finite-difference normal estimator shared by shapes without a
closed-form gradient.

Class Hierarchy:
    ImplicitFunction (abstract)
    ├── Primitive (abstract)
    │   ├── SpherePrimitive
    │   ├── BoxPrimitive
    │   └── CylinderPrimitive
    └── Object (abstract)
        ├── PrimitiveWrapper
        │   ├── Sphere
        │   ├── Box
        │   └── Cylinder
        └── Bool
            ├── Union
            ├── Intersection
            └── Subtraction
"""

import copy
import functools
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence, Tuple

import torch

from .constants import (
    DEFAULT_EPS_NORM,
    DEFAULT_FALLBACK_NORMAL,
    EPSILON_X,
    EPSILON_Y,
    EPSILON_Z,
)
from .types import Point, PointLike, Scalar, Vector, as_points
from ..geometry.transform import Transform


# Nested tuple describing an object tree: (class name, ((label, value), ...))
StructuralKey = Tuple[str, Tuple[Tuple[str, Any], ...]]


def safe_normalize(
    v: Vector,
    fallback: Optional[Sequence[float]] = None,
    eps: float = DEFAULT_EPS_NORM,
) -> Vector:
    """
    Normalize vectors to unit length.

    Vectors whose length is below `eps` (or not finite) are replaced by the
    fallback axis instead of producing NaN.

    Args:
        v: Vectors of shape (..., 3)
        fallback: Unit vector returned for degenerate inputs
        eps: Length threshold

    Returns:
        Unit vectors of shape (..., 3)
    """
    if fallback is None:
        fallback = DEFAULT_FALLBACK_NORMAL
    fallback = torch.as_tensor(fallback, dtype=v.dtype, device=v.device)

    length = v.norm(dim=-1, keepdim=True)
    valid = torch.isfinite(length) & (length > eps)
    return torch.where(valid, v / length.clamp(min=eps), fallback.expand_as(v))


def default_offsets(
    dtype: torch.dtype = torch.float64,
    device: Optional[torch.device] = None,
) -> torch.Tensor:
    """The three axis offsets used for forward differences, shape (3, 3)."""
    return torch.tensor([EPSILON_X, EPSILON_Y, EPSILON_Z], dtype=dtype, device=device)


def normal_from_implicit(
    f: 'ImplicitFunction',
    p: Point,
    offsets: Optional[torch.Tensor] = None,
    fallback: Optional[Sequence[float]] = None,
) -> Vector:
    """
    Estimate the surface normal of a field by forward differences.

        n = normalize(f(p + ex) - f(p), f(p + ey) - f(p), f(p + ez) - f(p))

    Accurate where the field is smooth on the scale of the offsets; used by
    shapes without a closed-form gradient and by composites inside their
    blend band.

    Args:
        f: Field to differentiate
        p: Query points (..., 3)
        offsets: Offset vectors of shape (3, 3), one row per axis
        fallback: Normal returned where the estimated gradient vanishes

    Returns:
        Unit normals of shape (..., 3)
    """
    if offsets is None:
        offsets = default_offsets(dtype=p.dtype, device=p.device)
    else:
        offsets = offsets.to(dtype=p.dtype, device=p.device)

    center = f.value(p)
    gradient = torch.stack(
        [f.value(p + offsets[i]) - center for i in range(3)],
        dim=-1,
    )
    return safe_normalize(gradient, fallback)


class ImplicitFunction(ABC):
    """
    Scalar field interface shared by every shape.

    A field maps points to signed distances (negative inside, zero on the
    surface, positive outside) and to unit normals. Both methods are pure,
    so a tree may be evaluated from several threads as long as nobody
    transforms it at the same time.

    Subclasses must implement:
        - value(): Signed distance of shape (...)
        - normal(): Unit normal of shape (..., 3)
    """

    @abstractmethod
    def value(self, p: Point) -> Scalar:
        """
        Evaluate the signed distance.

        Args:
            p: Query points of shape (..., 3)

        Returns:
            Signed distances of shape (...)
        """
        pass

    @abstractmethod
    def normal(self, p: Point) -> Vector:
        """
        Evaluate the unit surface normal.

        Args:
            p: Query points of shape (..., 3)

        Returns:
            Unit normals of shape (..., 3)
        """
        pass

    def __call__(self, p: PointLike) -> Scalar:
        """Evaluate the signed distance, accepting any point-like input."""
        return self.value(as_points(p))


@functools.total_ordering
class Object(ImplicitFunction):
    """
    Polymorphic handle for shapes stored in composite trees.

    Objects have value semantics: `clone()` returns an independent deep copy
    and `apply_transform()` mutates in place. Equality and ordering are
    structural, computed from `structural_key()`, so two objects built from
    the same primitives, parameters, transforms and blend radii compare
    equal. Objects are mutable and therefore unhashable.

    Subclasses must implement:
        - apply_transform(): Incorporate a transform in place
        - structural_key(): Nested tuple describing the subtree
    """

    @abstractmethod
    def apply_transform(self, other: Transform) -> None:
        """
        Apply a transform in place.

        Applying `t1` then `t2` is equivalent to applying `t1.concat(t2)`.

        Args:
            other: Transform to move the object by
        """
        pass

    @abstractmethod
    def structural_key(self) -> StructuralKey:
        """Return a nested tuple uniquely describing this subtree."""
        pass

    def translate(self, t: PointLike) -> 'Object':
        """Move the object by `t`. Returns self for chaining."""
        self.apply_transform(Transform.translate(t))
        return self

    def rotate(self, r: PointLike) -> 'Object':
        """Rotate the object by Euler angles `r` (radians, X then Y then Z)."""
        self.apply_transform(Transform.rotate(r))
        return self

    def scale(self, s: float) -> 'Object':
        """Scale the object uniformly by `s`. Returns self for chaining."""
        self.apply_transform(Transform.scale(s))
        return self

    def clone(self) -> 'Object':
        """Return a fully independent deep copy."""
        return copy.deepcopy(self)

    def to_string(self) -> str:
        """Canonical textual form of the subtree."""
        return format_key(self.structural_key())

    def __repr__(self) -> str:
        return self.to_string()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Object):
            return NotImplemented
        return self.structural_key() == other.structural_key()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Object):
            return NotImplemented
        return self.structural_key() < other.structural_key()

    __hash__ = None


def format_key(key: Any) -> str:
    """Render a structural key as `Name(label=value, ...)`."""
    if (
        isinstance(key, tuple)
        and len(key) == 2
        and isinstance(key[0], str)
        and isinstance(key[1], tuple)
    ):
        name, fields = key
        parts = []
        for label, value in fields:
            rendered = format_key(value)
            parts.append(f"{label}={rendered}" if label else rendered)
        return f"{name}({', '.join(parts)})"
    if isinstance(key, tuple):
        return "[" + ", ".join(format_key(v) for v in key) + "]"
    return repr(key)
