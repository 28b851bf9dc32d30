"""
Configuration management for implicit_csg.

Provides the kernel configuration (finite-difference offsets, degenerate
normal fallback) and JSON load / save helpers.
"""

import json
import logging
import math
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

import torch

from ..core.constants import (
    DEFAULT_DTYPE,
    DEFAULT_FALLBACK_NORMAL,
    DEFAULT_FD_RADIUS_FRACTION,
    FD_EPSILON_X,
    FD_EPSILON_Y,
    FD_EPSILON_Z,
)

logger = logging.getLogger(__name__)


@dataclass
class KernelConfig:
    """
    Configuration for field evaluation.

    Attributes:
        # Finite differences
        fd_epsilon_x: Forward-difference step along X
        fd_epsilon_y: Forward-difference step along Y
        fd_epsilon_z: Forward-difference step along Z
        fd_relative_to_radius: Clamp each step to fd_radius_fraction * r
            when a composite estimates normals inside its blend band
        fd_radius_fraction: Fraction of the blend radius used as the clamp

        # Normals
        fallback_normal: Unit vector returned where the gradient vanishes
    """

    # Finite differences
    fd_epsilon_x: float = FD_EPSILON_X
    fd_epsilon_y: float = FD_EPSILON_Y
    fd_epsilon_z: float = FD_EPSILON_Z
    fd_relative_to_radius: bool = False
    fd_radius_fraction: float = DEFAULT_FD_RADIUS_FRACTION

    # Normals
    fallback_normal: List[float] = field(default_factory=lambda: list(DEFAULT_FALLBACK_NORMAL))

    # Additional fields
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Check that all values are usable.

        Raises:
            ValueError: On non-positive steps, bad fraction or bad fallback
        """
        for name in ("fd_epsilon_x", "fd_epsilon_y", "fd_epsilon_z", "fd_radius_fraction"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be a positive finite number, got {value!r}")

        if len(self.fallback_normal) != 3:
            raise ValueError(
                f"fallback_normal must have 3 components, got {len(self.fallback_normal)}"
            )
        length = math.sqrt(sum(float(c) ** 2 for c in self.fallback_normal))
        if not math.isclose(length, 1.0, rel_tol=1e-6):
            raise ValueError(f"fallback_normal must be unit length, got length {length}")

    def finite_difference_offsets(
        self,
        r: Optional[float] = None,
        dtype: torch.dtype = DEFAULT_DTYPE,
        device: Optional[torch.device] = None,
    ) -> torch.Tensor:
        """
        Build the three axis offset vectors.

        Args:
            r: Blend radius of the composite asking, used when
               fd_relative_to_radius is set
            dtype: Output dtype
            device: Output device

        Returns:
            Diagonal offsets of shape (3, 3), one row per axis
        """
        steps = [self.fd_epsilon_x, self.fd_epsilon_y, self.fd_epsilon_z]
        if self.fd_relative_to_radius and r is not None and r > 0:
            limit = self.fd_radius_fraction * r
            steps = [min(step, limit) for step in steps]
        return torch.diag(torch.tensor(steps, dtype=dtype, device=device))

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'KernelConfig':
        """Create config from dictionary."""
        # Extract known fields
        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        known_kwargs = {k: v for k, v in config_dict.items() if k in known_fields}
        extra_kwargs = {k: v for k, v in config_dict.items() if k not in known_fields}

        if extra_kwargs:
            logger.warning(f"Unknown kernel config keys kept in 'extra': {sorted(extra_kwargs)}")

        config = cls(**known_kwargs)
        config.extra.update(extra_kwargs)
        return config

    def update(self, **kwargs) -> 'KernelConfig':
        """Return a new config with updated values."""
        config_dict = self.to_dict()
        config_dict.update(kwargs)
        return KernelConfig.from_dict(config_dict)


DEFAULT_CONFIG = KernelConfig()


def load_config(filepath: str) -> KernelConfig:
    """
    Load configuration from JSON file.

    Args:
        filepath: Path to JSON config file

    Returns:
        KernelConfig object
    """
    filepath = Path(filepath)
    with open(filepath, 'r') as f:
        config_dict = json.load(f)
    logger.info(f"Loaded kernel config from {filepath}")
    return KernelConfig.from_dict(config_dict)


def save_config(config: KernelConfig, filepath: str) -> None:
    """
    Save configuration to JSON file.

    Args:
        config: KernelConfig object to save
        filepath: Output file path
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, 'w') as f:
        json.dump(config.to_dict(), f, indent=2)
    logger.info(f"Saved kernel config to {filepath}")
