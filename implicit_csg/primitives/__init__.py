"""
Primitive shapes.

Closed-form fields in their local frame (SpherePrimitive, BoxPrimitive,
CylinderPrimitive) and the transformable leaf objects wrapping them
(Sphere, Box, Cylinder).
"""

from .shapes import (
    Primitive,
    SpherePrimitive,
    BoxPrimitive,
    CylinderPrimitive,
    PrimitiveWrapper,
    Sphere,
    Box,
    Cylinder,
)

__all__ = [
    "Primitive",
    "SpherePrimitive",
    "BoxPrimitive",
    "CylinderPrimitive",
    "PrimitiveWrapper",
    "Sphere",
    "Box",
    "Cylinder",
]
