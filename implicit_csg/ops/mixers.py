"""
Blend kernels ("mixers") for smooth boolean operations.

A mixer combines the values of two fields at the same point into one value,
and picks the normal of whichever field dominates. Blending uses a circular
fillet of radius r: where the two fields are within r of each other the
result is rounded, elsewhere it is exactly min / max.

    Union:        rmin(a, b, r)
    Intersection: rmax(a, b, r)
    Subtraction:  rmax(a, -b, r)

Normal selection is only valid outside the blend band |a - b| < r; the
composite switches to finite differences inside it.
"""

from abc import ABC, abstractmethod
import math
from typing import Any, Tuple, Union

import torch

from ..core.constants import DEFAULT_DTYPE, PI, SQRT_2
from ..core.types import NormalSupplier, Scalar, Vector


Number = Union[float, torch.Tensor]


def _as_tensor(x: Number) -> torch.Tensor:
    if isinstance(x, torch.Tensor):
        return x
    return torch.as_tensor(x, dtype=DEFAULT_DTYPE)


# =============================================================================
# Smooth Min/Max Functions
# =============================================================================

def rmin(a: Number, b: Number, r: float) -> Scalar:
    """
    Rounded minimum (smooth union for SDFs).

    Inside the band |a - b| < r:
        b + r * sin(pi/4 + asin((a - b) / (r * sqrt(2)))) - r
    Outside it, min(a, b). The two pieces meet continuously at |a - b| = r.

    Args:
        a: First value(s)
        b: Second value(s)
        r: Blend radius (>= 0)

    Returns:
        Blended values

    Note:
        rmin is symmetric in a and b; with r == 0 it is torch.minimum.
    """
    a, b = _as_tensor(a), _as_tensor(b)
    sharp = torch.minimum(a, b)
    if r == 0:
        return sharp

    diff = a - b
    ratio = (diff / (r * SQRT_2)).clamp(-1.0, 1.0)
    blended = b + r * torch.sin(PI / 4 + torch.asin(ratio)) - r
    return torch.where(diff.abs() < r, blended, sharp)


def rmax(a: Number, b: Number, r: float) -> Scalar:
    """
    Rounded maximum (smooth intersection for SDFs).

    Inside the band |a - b| < r:
        b - r * sin(pi/4 - asin((a - b) / (r * sqrt(2)))) + r
    Outside it, max(a, b).

    Args:
        a: First value(s)
        b: Second value(s)
        r: Blend radius (>= 0)

    Returns:
        Blended values
    """
    a, b = _as_tensor(a), _as_tensor(b)
    sharp = torch.maximum(a, b)
    if r == 0:
        return sharp

    diff = a - b
    ratio = (diff / (r * SQRT_2)).clamp(-1.0, 1.0)
    blended = b - r * torch.sin(PI / 4 - torch.asin(ratio)) + r
    return torch.where(diff.abs() < r, blended, sharp)


def select_normal(
    take_first: torch.Tensor,
    get_first: NormalSupplier,
    get_second: NormalSupplier,
) -> Vector:
    """
    Choose between two lazily computed normals per point.

    A supplier is only called when at least one point selects it.

    Args:
        take_first: Boolean mask of shape (...)
        get_first: Supplier of normals (..., 3) used where the mask is True
        get_second: Supplier of normals (..., 3) used elsewhere

    Returns:
        Normals of shape (..., 3)
    """
    if bool(take_first.all()):
        return get_first()
    if not bool(take_first.any()):
        return get_second()
    return torch.where(take_first.unsqueeze(-1), get_first(), get_second())


# =============================================================================
# Base Class
# =============================================================================

class Mixer(ABC):
    """
    Abstract blend strategy with a single blend radius.

    Subclasses must implement:
        - mixval(): Blend two field values
        - mixnormal(): Pick the normal of the dominant field
    """

    def __init__(self, r: float):
        """
        Initialize the mixer.

        Args:
            r: Blend radius, the width of the rounded region

        Raises:
            ValueError: If r is negative or not finite
        """
        r = float(r)
        if not math.isfinite(r) or r < 0.0:
            raise ValueError(f"blend radius must be finite and >= 0, got {r}")
        self._r = r

    @property
    def r(self) -> float:
        """Blend radius."""
        return self._r

    @abstractmethod
    def mixval(self, a: Number, b: Number) -> Scalar:
        """
        Blend the two children's values at the same point(s).

        Args:
            a: Values of the first field
            b: Values of the second field

        Returns:
            Blended values
        """
        pass

    @abstractmethod
    def mixnormal(
        self,
        a: Scalar,
        b: Scalar,
        get_an: NormalSupplier,
        get_bn: NormalSupplier,
    ) -> Vector:
        """
        Choose the normal of the field that dominates at each point.

        Args:
            a: Values of the first field
            b: Values of the second field
            get_an: Zero-argument supplier of the first field's normals
            get_bn: Zero-argument supplier of the second field's normals

        Returns:
            Unit normals of shape (..., 3)
        """
        pass

    def key(self) -> Tuple[str, Tuple[Tuple[str, Any], ...]]:
        return (type(self).__name__, (("r", self._r),))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mixer):
            return NotImplemented
        return self.key() == other.key()

    def __hash__(self) -> int:
        return hash(self.key())

    def __repr__(self) -> str:
        return f"{type(self).__name__}(r={self._r!r})"


# =============================================================================
# Concrete Mixers
# =============================================================================

class UnionMixer(Mixer):
    """Smooth union: rounded minimum, normal of the nearer surface."""

    def mixval(self, a: Number, b: Number) -> Scalar:
        return rmin(a, b, self._r)

    def mixnormal(self, a, b, get_an, get_bn):
        return select_normal(_as_tensor(a) < _as_tensor(b), get_an, get_bn)


class IntersectionMixer(Mixer):
    """Smooth intersection: rounded maximum, normal of the farther surface."""

    def mixval(self, a: Number, b: Number) -> Scalar:
        return rmax(a, b, self._r)

    def mixnormal(self, a, b, get_an, get_bn):
        return select_normal(_as_tensor(a) > _as_tensor(b), get_an, get_bn)


class SubtractionMixer(Mixer):
    """
    Smooth subtraction A - B: intersection of A with the complement of B.

    B's field is negated, so where B dominates its normal is flipped.
    """

    def mixval(self, a: Number, b: Number) -> Scalar:
        return rmax(a, -_as_tensor(b), self._r)

    def mixnormal(self, a, b, get_an, get_bn):
        return select_normal(
            _as_tensor(a) > -_as_tensor(b),
            get_an,
            lambda: -get_bn(),
        )
