"""
Closed-form primitive fields and the transform wrapper that places them.

Primitives are defined in their own local frame (centered at the origin) and
never move. A PrimitiveWrapper owns one primitive plus a Transform and is
the leaf node of every composite tree:

    >>> s = Sphere(1.0).translate([1.5, 0.0, 0.0])
    >>> s.value([1.5, 0.0, 0.0])
    tensor(-1., dtype=torch.float64)
"""

import copy
import math
from abc import abstractmethod
from typing import Any, Optional, Sequence, Tuple

import torch

from ..core.base import (
    ImplicitFunction,
    Object,
    StructuralKey,
    normal_from_implicit,
    safe_normalize,
)
from ..core.types import Point, PointLike, Scalar, Vector, as_points
from ..geometry.transform import Transform


def _check_positive(name: str, value: float) -> float:
    value = float(value)
    if not math.isfinite(value) or value <= 0.0:
        raise ValueError(f"{name} must be a positive finite number, got {value}")
    return value


# =============================================================================
# Primitive Kernels
# =============================================================================

class Primitive(ImplicitFunction):
    """
    Untransformed closed-form field centered at the local origin.

    Primitives are immutable once constructed. Subclasses implement value(),
    normal() and parameters(); primitives without an analytic gradient
    return normal_from_implicit(self, p).
    """

    @abstractmethod
    def parameters(self) -> Tuple[Tuple[str, Any], ...]:
        """Defining parameters as (label, value) pairs."""
        pass

    def structural_key(self) -> StructuralKey:
        return (type(self).__name__, self.parameters())

    def clone(self) -> 'Primitive':
        return copy.deepcopy(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Primitive):
            return NotImplemented
        return self.structural_key() == other.structural_key()

    def __hash__(self) -> int:
        return hash(self.structural_key())

    def __repr__(self) -> str:
        params = ", ".join(f"{label}={value!r}" for label, value in self.parameters())
        return f"{type(self).__name__}({params})"


class SpherePrimitive(Primitive):
    """Sphere of the given radius: value = |p| - r, normal = p / |p|."""

    def __init__(self, radius: float):
        self._radius = _check_positive("radius", radius)

    @property
    def radius(self) -> float:
        return self._radius

    def parameters(self) -> Tuple[Tuple[str, Any], ...]:
        return (("radius", self._radius),)

    def value(self, p: Point) -> Scalar:
        return p.norm(dim=-1) - self._radius

    def normal(self, p: Point) -> Vector:
        # The center has no defined direction; safe_normalize picks the fallback axis
        return safe_normalize(p)


class BoxPrimitive(Primitive):
    """
    Axis-aligned box with the given half extents.

    Exact Euclidean distance outside, distance to the nearest face inside.
    The gradient is discontinuous across the box's medial planes, so normals
    are estimated numerically.
    """

    def __init__(self, half_extents: Sequence[float]):
        half_extents = tuple(float(v) for v in half_extents)
        if len(half_extents) != 3:
            raise ValueError(f"half_extents must have 3 components, got {len(half_extents)}")
        self._half_extents = tuple(
            _check_positive(f"half_extents[{i}]", v) for i, v in enumerate(half_extents)
        )

    @property
    def half_extents(self) -> Tuple[float, float, float]:
        return self._half_extents

    def parameters(self) -> Tuple[Tuple[str, Any], ...]:
        return (("half_extents", self._half_extents),)

    def value(self, p: Point) -> Scalar:
        b = torch.tensor(self._half_extents, dtype=p.dtype, device=p.device)
        q = p.abs() - b
        outside = q.clamp(min=0.0).norm(dim=-1)
        inside = q.max(dim=-1).values.clamp(max=0.0)
        return outside + inside

    def normal(self, p: Point) -> Vector:
        return normal_from_implicit(self, p)


class CylinderPrimitive(Primitive):
    """Capped cylinder along the local Z axis, spanning z in [-h, h]."""

    def __init__(self, radius: float, half_height: float):
        self._radius = _check_positive("radius", radius)
        self._half_height = _check_positive("half_height", half_height)

    @property
    def radius(self) -> float:
        return self._radius

    @property
    def half_height(self) -> float:
        return self._half_height

    def parameters(self) -> Tuple[Tuple[str, Any], ...]:
        return (("radius", self._radius), ("half_height", self._half_height))

    def value(self, p: Point) -> Scalar:
        d = torch.stack([
            p[..., :2].norm(dim=-1) - self._radius,
            p[..., 2].abs() - self._half_height,
        ], dim=-1)
        inside = d.max(dim=-1).values.clamp(max=0.0)
        outside = d.clamp(min=0.0).norm(dim=-1)
        return inside + outside

    def normal(self, p: Point) -> Vector:
        return normal_from_implicit(self, p)


# =============================================================================
# Transform Wrapper
# =============================================================================

class PrimitiveWrapper(Object):
    """
    A primitive placed in the world by a Transform.

    Points are mapped into the primitive's local frame before evaluation;
    local normals are mapped back with the inverse-transpose of the
    placement and renormalized. Transforms only ever accumulate on the
    stored Transform; the wrapped primitive is never modified.
    """

    def __init__(self, primitive: Primitive, transform: Optional[Transform] = None):
        """
        Initialize the wrapper.

        Args:
            primitive: Field to wrap (owned by the wrapper)
            transform: Initial placement. Identity if None.
        """
        self._primitive = primitive
        self._transform = transform if transform is not None else Transform.identity()

    @property
    def primitive(self) -> Primitive:
        return self._primitive

    @property
    def transform(self) -> Transform:
        return self._transform

    @transform.setter
    def transform(self, transform: Transform) -> None:
        if not isinstance(transform, Transform):
            raise TypeError(f"expected a Transform, got {type(transform).__name__}")
        self._transform = transform

    def value(self, p: PointLike) -> Scalar:
        p = as_points(p)
        local = self._transform.t_point(p)
        return self._primitive.value(local) * self._transform.distance_scale()

    def normal(self, p: PointLike) -> Vector:
        p = as_points(p)
        local_normal = self._primitive.normal(self._transform.t_point(p))
        return safe_normalize(self._transform.i_vector(local_normal))

    def apply_transform(self, other: Transform) -> None:
        self._transform = self._transform.concat(other)

    def structural_key(self) -> StructuralKey:
        return (
            type(self).__name__,
            (
                ("primitive", self._primitive.structural_key()),
                ("transform", self._transform.key()),
            ),
        )


class Sphere(PrimitiveWrapper):
    """Sphere of the given radius, initially centered at the origin."""

    def __init__(self, radius: float):
        super().__init__(SpherePrimitive(radius))


class Box(PrimitiveWrapper):
    """Box with the given half extents, initially centered at the origin."""

    def __init__(self, half_extents: Sequence[float]):
        super().__init__(BoxPrimitive(half_extents))


class Cylinder(PrimitiveWrapper):
    """Z-aligned capped cylinder, initially centered at the origin."""

    def __init__(self, radius: float, half_height: float):
        super().__init__(CylinderPrimitive(radius, half_height))
