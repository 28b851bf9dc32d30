"""
Geometry module.

Affine transforms (stored world-to-local) and the Euler-angle conversion
used to build rotations.
"""

from .rotation import euler_to_matrix
from .transform import Transform

__all__ = [
    "euler_to_matrix",
    "Transform",
]
