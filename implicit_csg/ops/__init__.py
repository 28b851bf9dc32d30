"""
Operators for combining implicit shapes.

This module provides the blend kernels and the smooth CSG composites.

Key classes:
    - UnionMixer / IntersectionMixer / SubtractionMixer: Blend strategies
    - Union / Intersection / Subtraction: Binary composites
"""

from .mixers import (
    Mixer,
    UnionMixer,
    IntersectionMixer,
    SubtractionMixer,
    rmin,
    rmax,
    select_normal,
)

from .csg import (
    Bool,
    Union,
    Intersection,
    Subtraction,
)

__all__ = [
    "Mixer",
    "UnionMixer",
    "IntersectionMixer",
    "SubtractionMixer",
    "rmin",
    "rmax",
    "select_normal",
    "Bool",
    "Union",
    "Intersection",
    "Subtraction",
]
