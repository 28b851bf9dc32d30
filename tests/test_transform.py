"""
Tests for affine transforms.

Tests verify:
- Named constructors move the object the documented way
- Composition order of concat
- Normal mapping with i_vector
- Validation of degenerate matrices
"""

import math

import pytest
import torch

from implicit_csg.geometry import Transform


def _vec(*values):
    return torch.tensor(values, dtype=torch.float64)


# =============================================================================
# Construction
# =============================================================================

class TestTransformCreation:
    """Tests for Transform constructors."""

    def test_identity(self, random_points):
        """Identity leaves points unchanged."""
        T = Transform.identity()
        assert T.is_identity()
        assert torch.allclose(T.t_point(random_points), random_points)

    def test_default_is_identity(self):
        """A Transform built without a matrix is the identity."""
        assert Transform() == Transform.identity()

    def test_translate(self, random_points):
        """Translating the object by v maps world p to local p - v."""
        v = _vec(1.0, -2.0, 0.5)
        T = Transform.translate(v)
        assert torch.allclose(T.t_point(random_points), random_points - v)

    def test_translate_accepts_list(self):
        """Displacements may be plain sequences."""
        T = Transform.translate([1.0, 0.0, 0.0])
        assert torch.allclose(T.t_point(_vec(1.0, 0.0, 0.0)), _vec(0.0, 0.0, 0.0))

    def test_scale(self, random_points):
        """Scaling the object by s maps world p to local p / s."""
        T = Transform.scale(2.0)
        assert torch.allclose(T.t_point(random_points), random_points / 2.0)

    def test_rotate_quarter_turn(self):
        """A world point on +Y is on local +X after a quarter turn about Z."""
        T = Transform.rotate([0.0, 0.0, math.pi / 2])
        assert torch.allclose(T.t_point(_vec(0.0, 1.0, 0.0)), _vec(1.0, 0.0, 0.0), atol=1e-12)

    def test_from_object_matrix(self):
        """The modelling matrix is inverted into a world-to-local matrix."""
        M = torch.eye(4, dtype=torch.float64)
        M[:3, 3] = _vec(1.0, 2.0, 3.0)
        T = Transform.from_object_matrix(M)
        assert torch.allclose(T.t_point(_vec(1.0, 2.0, 3.0)), _vec(0.0, 0.0, 0.0))
        assert torch.allclose(T.object_matrix(), M)

    def test_matrix_is_a_copy(self):
        """Mutating the returned matrix does not change the transform."""
        T = Transform.identity()
        M = T.matrix
        M[0, 3] = 5.0
        assert T.is_identity()


class TestTransformValidation:
    """Tests for rejecting unusable matrices."""

    @pytest.mark.parametrize("s", [0.0, float('nan'), float('inf')])
    def test_bad_scale(self, s):
        """Zero and non-finite scale factors are rejected."""
        with pytest.raises(ValueError, match="scale factor"):
            Transform.scale(s)

    def test_wrong_shape(self):
        """Matrices must be 4x4."""
        with pytest.raises(ValueError, match="4x4"):
            Transform(torch.eye(3, dtype=torch.float64))

    def test_not_affine(self):
        """The bottom row must be (0, 0, 0, 1)."""
        M = torch.eye(4, dtype=torch.float64)
        M[3, 0] = 1.0
        with pytest.raises(ValueError, match="affine"):
            Transform(M)

    def test_singular(self):
        """A singular linear part is rejected."""
        M = torch.eye(4, dtype=torch.float64)
        M[2, 2] = 0.0
        with pytest.raises(ValueError, match="singular"):
            Transform(M)

    def test_translate_wrong_length(self):
        """Displacements need 3 components."""
        with pytest.raises(ValueError):
            Transform.translate([1.0, 2.0])


# =============================================================================
# Composition
# =============================================================================

class TestTransformComposition:
    """Tests for concat, inverse and distance scale."""

    def test_concat_applies_in_order(self, random_points):
        """a.concat(b) maps points through b then a."""
        a = Transform.translate([1.0, 0.0, 0.0])
        b = Transform.rotate([0.3, -0.2, 1.1])
        combined = a.concat(b)
        expected = a.t_point(b.t_point(random_points))
        assert torch.allclose(combined.t_point(random_points), expected)

    def test_translate_then_scale(self):
        """Moving by +X then doubling puts the local origin at (2, 0, 0)."""
        T = Transform.translate([1.0, 0.0, 0.0]).concat(Transform.scale(2.0))
        assert torch.allclose(T.t_point(_vec(2.0, 0.0, 0.0)), _vec(0.0, 0.0, 0.0))

    def test_concat_associative(self):
        """Composition is associative."""
        a = Transform.translate([0.5, 1.0, -1.0])
        b = Transform.rotate([0.1, 0.2, 0.3])
        c = Transform.scale(1.7)
        left = a.concat(b).concat(c)
        right = a.concat(b.concat(c))
        assert torch.allclose(left.matrix, right.matrix)

    def test_inverse(self):
        """A transform composed with its inverse is the identity."""
        T = Transform.translate([1.0, 2.0, 3.0]).concat(Transform.rotate([0.4, 0.5, 0.6]))
        result = T.inverse().concat(T)
        assert torch.allclose(result.matrix, torch.eye(4, dtype=torch.float64), atol=1e-12)

    def test_translate_round_trip(self, random_points):
        """Translating by v then -v restores the original mapping."""
        v = [0.7, -1.3, 2.0]
        T = Transform.translate(v).concat(Transform.translate([-c for c in v]))
        assert torch.allclose(T.t_point(random_points), random_points)

    def test_distance_scale(self):
        """Rigid motions keep distances; uniform scales multiply them."""
        assert Transform.rotate([0.3, 0.4, 0.5]).distance_scale() == pytest.approx(1.0)
        assert Transform.translate([1.0, 1.0, 1.0]).distance_scale() == pytest.approx(1.0)
        assert Transform.scale(2.5).distance_scale() == pytest.approx(2.5)


class TestTransformScaleRange:
    """Tests for very large, very small and accumulated scales."""

    @pytest.mark.parametrize("s", [1e-4, 1e4, 1e6])
    def test_extreme_uniform_scale(self, s):
        """Uniform scales of any magnitude are valid transforms."""
        T = Transform.scale(s)
        assert T.distance_scale() == pytest.approx(s)
        assert torch.allclose(T.t_point(_vec(s, 0.0, 0.0)), _vec(1.0, 0.0, 0.0))

    def test_concat_of_large_scales(self):
        """Composing large scales never trips the singularity check."""
        T = Transform.scale(1000.0).concat(Transform.scale(1000.0))
        assert T.distance_scale() == pytest.approx(1e6)
        assert torch.allclose(T.t_point(_vec(1e6, 0.0, 0.0)), _vec(1.0, 0.0, 0.0))

    def test_long_chain(self):
        """Twenty tenfold scales compose into a 1e20 scale."""
        T = Transform.identity()
        for _ in range(20):
            T = T.concat(Transform.scale(10.0))
        assert T.distance_scale() == pytest.approx(1e20, rel=1e-9)

    def test_inverse_of_large_scale(self):
        """Large scales can be inverted."""
        T = Transform.scale(1e6)
        assert T.inverse().distance_scale() == pytest.approx(1e-6)

    def test_tiny_uniform_matrix_accepted(self):
        """The singularity check is relative to the matrix magnitude."""
        T = Transform(torch.diag(_vec(1e-6, 1e-6, 1e-6, 1.0)))
        assert T.distance_scale() == pytest.approx(1e6)

    def test_nearly_singular_rejected(self):
        """A collapsed axis is still rejected."""
        with pytest.raises(ValueError, match="singular"):
            Transform(torch.diag(_vec(1.0, 1.0, 1e-20, 1.0)))

    def test_singular_object_matrix_rejected(self):
        """Singular modelling matrices raise ValueError."""
        M = torch.eye(4, dtype=torch.float64)
        M[0, 0] = 0.0
        with pytest.raises(ValueError, match="singular"):
            Transform.from_object_matrix(M)


# =============================================================================
# Vector Mapping
# =============================================================================

class TestIVector:
    """Tests for mapping local normals into the world frame."""

    def test_translation_leaves_vectors(self):
        """Translations do not affect directions."""
        T = Transform.translate([3.0, -1.0, 2.0])
        v = _vec(0.0, 0.6, 0.8)
        assert torch.allclose(T.i_vector(v), v)

    def test_rotation(self):
        """A local +X normal points along world +Y after a quarter turn about Z."""
        T = Transform.rotate([0.0, 0.0, math.pi / 2])
        assert torch.allclose(T.i_vector(_vec(1.0, 0.0, 0.0)), _vec(0.0, 1.0, 0.0), atol=1e-12)

    def test_non_uniform_scale(self):
        """Stretching along X shrinks the X component of normals."""
        T = Transform(torch.diag(_vec(0.5, 1.0, 1.0, 1.0)))
        n = T.i_vector(_vec(1.0, 1.0, 0.0))
        assert torch.allclose(n, _vec(0.5, 1.0, 0.0))

    def test_float32_points(self):
        """Float32 inputs produce float32 outputs."""
        T = Transform.rotate([0.1, 0.2, 0.3])
        p = torch.ones(4, 3, dtype=torch.float32)
        assert T.t_point(p).dtype == torch.float32
        assert T.i_vector(p).dtype == torch.float32


class TestTransformComparison:
    """Tests for equality and keys."""

    def test_equal(self):
        """Transforms with the same matrix are equal and hash alike."""
        a = Transform.translate([1.0, 2.0, 3.0])
        b = Transform.translate([1.0, 2.0, 3.0])
        assert a == b
        assert hash(a) == hash(b)

    def test_not_equal(self):
        """Different motions compare unequal."""
        assert Transform.translate([1.0, 0.0, 0.0]) != Transform.translate([0.0, 1.0, 0.0])

    def test_key(self):
        """The key lists all 16 entries in row-major order."""
        key = Transform.translate([1.0, 2.0, 3.0]).key()
        assert len(key) == 16
        assert key[3] == -1.0
        assert key[7] == -2.0
        assert key[11] == -3.0
