"""
Utility functions for implicit_csg.

Includes configuration management.
"""

from .config import KernelConfig, DEFAULT_CONFIG, load_config, save_config

__all__ = [
    "KernelConfig",
    "DEFAULT_CONFIG",
    "load_config",
    "save_config",
]
