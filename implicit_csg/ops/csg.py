"""
Smooth CSG (Constructive Solid Geometry) composites.

This module provides the binary composite node and the builders that fold
lists of objects into balanced trees:
- Bool: Two child objects combined under a Mixer
- Union / Intersection / Subtraction: Bool bound to each mixer
- from_vec: Balanced fold of N objects under one operation
- subtraction_from_vec: First object minus the union of the rest

Composites carry no transform state; transforms are pushed down to the
primitive leaves, so restructuring a tree never changes its placement.
"""

import logging
from typing import Iterator, List, Optional, Sequence, Type

import torch

from ..core.base import Object, StructuralKey, normal_from_implicit
from ..core.types import Point, PointLike, Scalar, Vector, as_points
from ..geometry.transform import Transform
from ..primitives.shapes import PrimitiveWrapper
from ..utils.config import DEFAULT_CONFIG, KernelConfig
from .mixers import IntersectionMixer, Mixer, SubtractionMixer, UnionMixer

logger = logging.getLogger(__name__)


def _iter_nodes(obj: Object) -> Iterator[Object]:
    """Yield every object node of a tree, depth first."""
    stack = [obj]
    while stack:
        node = stack.pop()
        yield node
        if isinstance(node, Bool):
            stack.extend((node.a, node.b))


# =============================================================================
# Base Class
# =============================================================================

class Bool(Object):
    """
    Binary composite combining two objects under a Mixer.

    Subclasses bind `mixer_cls`; the composite builds its mixer from the
    blend radius at construction. Normals inside the blend band, where the
    surface is a fillet belonging to neither child, are estimated by finite
    differences of the composite's own field. Elsewhere the mixer picks the
    dominant child's normal, and only that child's normal is computed.

    Example:
        >>> a = Sphere(1.0)
        >>> b = Sphere(1.0).translate([1.5, 0.0, 0.0])
        >>> blob = Union(a, b, 0.3)
        >>> blob.value([0.75, 0.0, 0.0])  # below both spheres' -0.25
    """

    mixer_cls: Optional[Type[Mixer]] = None

    def __init__(
        self,
        a: Object,
        b: Object,
        r: float,
        config: Optional[KernelConfig] = None,
    ):
        """
        Initialize the composite.

        Args:
            a: First child (owned by the composite)
            b: Second child (owned by the composite)
            r: Blend radius
            config: Kernel configuration for normal estimation

        Raises:
            TypeError: If instantiated without a bound mixer class, or if a
                leaf is not a PrimitiveWrapper
            ValueError: If the blend radius is invalid
        """
        if self.mixer_cls is None:
            raise TypeError(
                f"{type(self).__name__} has no mixer; use Union, Intersection or Subtraction"
            )
        for node in (*_iter_nodes(a), *_iter_nodes(b)):
            if not isinstance(node, (Bool, PrimitiveWrapper)):
                raise TypeError(
                    f"composite leaves must be transformed primitives, got {type(node).__name__}"
                )

        shared = {id(node) for node in _iter_nodes(a)} & {id(node) for node in _iter_nodes(b)}
        if shared:
            logger.warning(
                f"{type(self).__name__} operands share {len(shared)} node(s); "
                f"cloning the second operand"
            )
            b = b.clone()

        self._a = a
        self._b = b
        self._mixer = self.mixer_cls(r)
        self._config = config if config is not None else DEFAULT_CONFIG

    @property
    def a(self) -> Object:
        return self._a

    @property
    def b(self) -> Object:
        return self._b

    @property
    def mixer(self) -> Mixer:
        return self._mixer

    @property
    def config(self) -> KernelConfig:
        return self._config

    def value(self, p: PointLike) -> Scalar:
        p = as_points(p)
        return self._mixer.mixval(self._a.value(p), self._b.value(p))

    def normal(self, p: PointLike) -> Vector:
        """
        Evaluate unit normals of the blended surface.

        Args:
            p: Query points of shape (..., 3)

        Returns:
            Unit normals of shape (..., 3)
        """
        p = as_points(p)
        va = self._a.value(p)
        vb = self._b.value(p)
        in_band = (va - vb).abs() < self._mixer.r

        if bool(in_band.all()):
            return self._estimate_normal(p)
        if not bool(in_band.any()):
            return self._select_normal(p, va, vb)

        # Mixed batch: split by band membership
        result = torch.empty_like(p)
        result[in_band] = self._estimate_normal(p[in_band])
        outside = ~in_band
        result[outside] = self._select_normal(p[outside], va[outside], vb[outside])
        return result

    def _estimate_normal(self, p: Point) -> Vector:
        offsets = self._config.finite_difference_offsets(
            self._mixer.r, dtype=p.dtype, device=p.device
        )
        return normal_from_implicit(self, p, offsets, self._config.fallback_normal)

    def _select_normal(self, p: Point, va: Scalar, vb: Scalar) -> Vector:
        return self._mixer.mixnormal(
            va,
            vb,
            lambda: self._a.normal(p),
            lambda: self._b.normal(p),
        )

    def apply_transform(self, other: Transform) -> None:
        """
        Apply a transform to every leaf of the subtree.

        All new leaf transforms are computed before any is stored, so a
        failure leaves the whole tree unchanged.
        """
        leaves = [node for node in _iter_nodes(self) if isinstance(node, PrimitiveWrapper)]
        staged = [leaf.transform.concat(other) for leaf in leaves]
        for leaf, transform in zip(leaves, staged):
            leaf.transform = transform

    def structural_key(self) -> StructuralKey:
        return (
            type(self).__name__,
            (
                ("r", self._mixer.r),
                ("a", self._a.structural_key()),
                ("b", self._b.structural_key()),
            ),
        )

    # -------------------------------------------------------------------------
    # Tree Builders
    # -------------------------------------------------------------------------

    @classmethod
    def from_vec(
        cls,
        objects: Sequence[Object],
        r: float,
        config: Optional[KernelConfig] = None,
    ) -> Optional[Object]:
        """
        Fold objects into a balanced tree of this operation.

        The list is split at its midpoint and each half is folded
        recursively, so evaluation depth grows with log2(len(objects)).

        Args:
            objects: Objects to combine, in order (owned by the result)
            r: Blend radius of every composite in the tree
            config: Kernel configuration for the composites

        Returns:
            None for an empty list, the sole object for a single-element
            list (no composite is added), otherwise the root composite
        """
        objects = list(objects)
        logger.debug(f"Folding {len(objects)} object(s) into a {cls.__name__} tree (r={r})")
        return cls._fold(objects, r, config)

    @classmethod
    def _fold(
        cls,
        objects: List[Object],
        r: float,
        config: Optional[KernelConfig],
    ) -> Optional[Object]:
        if not objects:
            return None
        if len(objects) == 1:
            return objects[0]
        mid = len(objects) // 2
        return cls(
            cls._fold(objects[:mid], r, config),
            cls._fold(objects[mid:], r, config),
            r,
            config=config,
        )


# =============================================================================
# Concrete Operations
# =============================================================================

class Union(Bool):
    """Smooth union of two objects."""

    mixer_cls = UnionMixer


class Intersection(Bool):
    """Smooth intersection of two objects."""

    mixer_cls = IntersectionMixer


class Subtraction(Bool):
    """Smooth subtraction: the first object minus the second."""

    mixer_cls = SubtractionMixer

    @classmethod
    def subtraction_from_vec(
        cls,
        objects: Sequence[Object],
        r: float,
        config: Optional[KernelConfig] = None,
    ) -> Optional[Object]:
        """
        Subtract every object after the first from the first.

        Computes A - (B ∪ C ∪ ...) with the rest folded by Union.from_vec,
        since a plain balanced fold of Subtraction would alternate signs.

        Args:
            objects: Minuend followed by the objects to remove
            r: Blend radius for the union and the subtraction
            config: Kernel configuration for the composites

        Returns:
            None for an empty list, the sole object for a single-element
            list, otherwise the subtraction composite
        """
        objects = list(objects)
        if not objects:
            return None
        if len(objects) == 1:
            return objects[0]

        head, rest = objects[0], objects[1:]
        logger.debug(f"Subtracting union of {len(rest)} object(s) from {type(head).__name__}")
        return cls(head, Union.from_vec(rest, r, config=config), r, config=config)
