"""
Centralized constants for implicit_csg.

This module defines all default values and numeric constants used throughout
the library. Using these constants ensures consistency and makes it easy to
adjust defaults globally.

Usage:
    from implicit_csg.core.constants import DEFAULT_EPS_NORM, EPSILON_X

    # Use in function definitions
    def my_function(eps: float = DEFAULT_EPS_NORM):
        ...
"""

import math
from typing import Tuple

import torch


# =============================================================================
# Numeric Constants
# =============================================================================

# Default floating point type for points, vectors and transform matrices
DEFAULT_DTYPE: torch.dtype = torch.float64

# Vectors shorter than this are treated as degenerate when normalizing
DEFAULT_EPS_NORM: float = 1e-12

# Pi and sqrt(2) (used by the blend kernels)
PI: float = math.pi
SQRT_2: float = math.sqrt(2.0)

# A linear part with |det A| <= eps * |A|_F^3 is treated as singular
SINGULAR_DETERMINANT_EPS: float = 1e-12


# =============================================================================
# Finite-Difference Normal Estimation
# =============================================================================

# Forward-difference step along each axis. The magnitudes differ per axis so
# that symmetric fields do not produce aliased samples.
FD_EPSILON_X: float = 1e-5
FD_EPSILON_Y: float = 1.1e-5
FD_EPSILON_Z: float = 1.2e-5

# Axis-aligned offset vectors
EPSILON_X: Tuple[float, float, float] = (FD_EPSILON_X, 0.0, 0.0)
EPSILON_Y: Tuple[float, float, float] = (0.0, FD_EPSILON_Y, 0.0)
EPSILON_Z: Tuple[float, float, float] = (0.0, 0.0, FD_EPSILON_Z)

# Fraction of the blend radius used when offsets are scaled to the radius
DEFAULT_FD_RADIUS_FRACTION: float = 1e-3


# =============================================================================
# Surface Defaults
# =============================================================================

# Normal returned where the gradient vanishes (e.g. at a sphere center)
DEFAULT_FALLBACK_NORMAL: Tuple[float, float, float] = (0.0, 0.0, 1.0)
