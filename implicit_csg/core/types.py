"""
Type aliases and point conventions for implicit_csg.

Shape Conventions:
==================

Points and vectors are tensors whose last dimension has size 3:
    - A single point:       (3,)
    - A batch of points:    (..., 3)

Every field evaluation is elementwise over the leading dimensions:
    value(points)  -> (...)
    normal(points) -> (..., 3)

Inputs given as Python sequences or numpy arrays are converted with
`as_points`, which also enforces the trailing dimension.
"""

from typing import Callable, Optional, Sequence, Union

import numpy as np
import torch

from .constants import DEFAULT_DTYPE


# =============================================================================
# Basic Type Aliases
# =============================================================================

# Position(s) in space, shape (..., 3)
Point = torch.Tensor

# Displacement(s) or normal(s), shape (..., 3)
Vector = torch.Tensor

# Field values, shape (...)
Scalar = torch.Tensor

# Anything `as_points` accepts
PointLike = Union[torch.Tensor, np.ndarray, Sequence[float], Sequence[Sequence[float]]]

# Zero-argument normal supplier handed to mixers
NormalSupplier = Callable[[], Vector]


def as_points(
    points: PointLike,
    dtype: Optional[torch.dtype] = None,
) -> Point:
    """
    Convert input to a floating point tensor of shape (..., 3).

    Tensors that are already floating point keep their dtype and device
    unless `dtype` is given.

    Args:
        points: Tensor, numpy array or nested sequence of coordinates
        dtype: Target dtype (defaults to DEFAULT_DTYPE for non-float inputs)

    Returns:
        Tensor of shape (..., 3)

    Raises:
        ValueError: If the last dimension is not 3
    """
    if isinstance(points, np.ndarray):
        points = torch.from_numpy(points)

    if isinstance(points, torch.Tensor):
        if dtype is not None:
            points = points.to(dtype)
        elif not points.is_floating_point():
            points = points.to(DEFAULT_DTYPE)
    else:
        points = torch.as_tensor(points, dtype=dtype or DEFAULT_DTYPE)

    if points.dim() == 0 or points.shape[-1] != 3:
        raise ValueError(
            f"points should have a trailing dimension of size 3, got shape {tuple(points.shape)}"
        )
    return points


def as_vector(
    vector: PointLike,
    dtype: Optional[torch.dtype] = None,
) -> Vector:
    """Convert input to a single 3-vector tensor."""
    vector = as_points(vector, dtype=dtype)
    if vector.dim() != 1:
        raise ValueError(f"expected a single 3-vector, got shape {tuple(vector.shape)}")
    return vector
