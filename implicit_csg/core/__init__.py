"""
Core module for implicit_csg.

Contains:
- Constants: Centralized default values and numeric constants
- Types: Type aliases and point coercion
- Base: Scalar-field interface, object abstraction, normal estimation
"""

from .constants import (
    # Numeric constants
    DEFAULT_DTYPE,
    DEFAULT_EPS_NORM,
    # Finite differences
    FD_EPSILON_X,
    FD_EPSILON_Y,
    FD_EPSILON_Z,
    EPSILON_X,
    EPSILON_Y,
    EPSILON_Z,
    DEFAULT_FD_RADIUS_FRACTION,
    # Surface defaults
    DEFAULT_FALLBACK_NORMAL,
)

from .types import (
    Point,
    Vector,
    Scalar,
    PointLike,
    NormalSupplier,
    as_points,
    as_vector,
)

from .base import (
    ImplicitFunction,
    Object,
    StructuralKey,
    safe_normalize,
    default_offsets,
    normal_from_implicit,
    format_key,
)

__all__ = [
    # Constants
    "DEFAULT_DTYPE",
    "DEFAULT_EPS_NORM",
    "FD_EPSILON_X",
    "FD_EPSILON_Y",
    "FD_EPSILON_Z",
    "EPSILON_X",
    "EPSILON_Y",
    "EPSILON_Z",
    "DEFAULT_FD_RADIUS_FRACTION",
    "DEFAULT_FALLBACK_NORMAL",
    # Types
    "Point",
    "Vector",
    "Scalar",
    "PointLike",
    "NormalSupplier",
    "as_points",
    "as_vector",
    # Base classes
    "ImplicitFunction",
    "Object",
    "StructuralKey",
    "safe_normalize",
    "default_offsets",
    "normal_from_implicit",
    "format_key",
]
