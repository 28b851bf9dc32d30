"""
implicit_csg: Smooth Constructive Solid Geometry on Signed-Distance Fields

A PyTorch library for building solids as scalar fields rather than meshes.
Every shape maps points to a signed distance (negative inside, zero on the
surface, positive outside) and to a unit surface normal.

Key Features:
- Closed-form primitives (sphere, box, cylinder)
- Affine placement of any primitive without touching its math
- Smoothly blended union / intersection / subtraction
- Balanced tree builders for combining many shapes
- Finite-difference normals inside blend fillets

API Design:
- Points are tensors of shape (..., 3); values are (...), normals (..., 3)
- Shapes are Objects: clone(), apply_transform(), translate/rotate/scale
- Composites own their children exclusively (strict binary tree)

Example:
    >>> import implicit_csg as ic
    >>> a = ic.Sphere(1.0)
    >>> b = ic.Sphere(1.0).translate([1.5, 0.0, 0.0])
    >>> blob = ic.Union(a, b, 0.3)
    >>> blob.value([0.0, 0.0, 0.0])
    tensor(-1., dtype=torch.float64)
"""

__version__ = "0.1.0"
__author__ = "implicit_csg Contributors"

from . import core
from . import geometry
from . import primitives
from . import ops
from . import utils

from .core import ImplicitFunction, Object, normal_from_implicit
from .geometry import Transform
from .primitives import (
    Primitive,
    PrimitiveWrapper,
    SpherePrimitive,
    BoxPrimitive,
    CylinderPrimitive,
    Sphere,
    Box,
    Cylinder,
)
from .ops import (
    Mixer,
    UnionMixer,
    IntersectionMixer,
    SubtractionMixer,
    Bool,
    Union,
    Intersection,
    Subtraction,
)
from .utils import KernelConfig, load_config, save_config

__all__ = [
    "core",
    "geometry",
    "primitives",
    "ops",
    "utils",
    "ImplicitFunction",
    "Object",
    "normal_from_implicit",
    "Transform",
    "Primitive",
    "PrimitiveWrapper",
    "SpherePrimitive",
    "BoxPrimitive",
    "CylinderPrimitive",
    "Sphere",
    "Box",
    "Cylinder",
    "Mixer",
    "UnionMixer",
    "IntersectionMixer",
    "SubtractionMixer",
    "Bool",
    "Union",
    "Intersection",
    "Subtraction",
    "KernelConfig",
    "load_config",
    "save_config",
]
