"""
Pytest configuration and fixtures for implicit_csg tests.
"""

import pytest
import torch

from implicit_csg import Sphere, Union


@pytest.fixture
def num_points():
    """Default number of points for tests."""
    return 200


@pytest.fixture
def random_points(num_points):
    """Seeded random float64 points in [-2, 2]^3."""
    generator = torch.Generator().manual_seed(0)
    return torch.rand(num_points, 3, generator=generator, dtype=torch.float64) * 4 - 2


@pytest.fixture
def unit_sphere():
    """Sphere of radius 1 at the origin."""
    return Sphere(1.0)


@pytest.fixture
def shifted_sphere():
    """Sphere of radius 1 centered at (1.5, 0, 0)."""
    return Sphere(1.0).translate([1.5, 0.0, 0.0])


@pytest.fixture
def blend_radius():
    """Blend radius of the two-sphere scenario."""
    return 0.3


@pytest.fixture
def two_sphere_union(unit_sphere, shifted_sphere, blend_radius):
    """Overlapping unit spheres at x=0 and x=1.5 joined by a fillet."""
    return Union(unit_sphere, shifted_sphere, blend_radius)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
