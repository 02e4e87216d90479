from unittest.mock import patch

import numpy as np
import pytest

from mobiusmol.transform import (
    Point3,
    Variant,
    inverse_zoom,
    invert,
    mobius_scaling_transform,
    nudge,
    scale,
    scale_factor,
    transform_points,
)

ALL_VARIANTS = [Variant.LINEAR, Variant.EXPONENTIAL, Variant.DISTANCE_WEIGHTED]


def test_invert() -> None:
    """Test inversion in the unit sphere around a center."""
    assert invert((3, 0, 0), (1, 0, 0)) == pytest.approx((1.5, 0, 0))
    assert invert((1, 1, 0), (0, 0, 0)) == pytest.approx((0.5, 0.5, 0))


def test_invert_is_an_involution() -> None:
    """Test that inverting twice returns the input."""
    rng = np.random.default_rng(0)
    p = rng.normal(size=3)
    for z in rng.normal(size=(20, 3)):
        np.testing.assert_allclose(invert(invert(z, p), p), z, atol=1e-9)


def test_invert_at_center_returns_center() -> None:
    """Test the coincident-point fallback of the inversion."""
    with patch("mobiusmol.transform.logger") as mock_logger:
        assert invert((1, 2, 3), (1, 2, 3)) == (1, 2, 3)
        mock_logger.warning.assert_called_once()


def test_scale_is_about_the_origin() -> None:
    """Test that scaling is componentwise and ignores the center."""
    assert scale((1, -2, 3), 2.0) == (2, -4, 6)


def test_scale_factor_policies() -> None:
    """Test the three scaling factor policies."""
    w = np.array([[2.0, 0.0, 0.0]])
    p = (1.0, 0.0, 0.0)
    assert scale_factor(1.5, w, p, Variant.LINEAR)[0] == 1.5
    assert scale_factor(3, w, p, Variant.EXPONENTIAL)[0] == 8.0
    expected = 1 + (1.5 - 1) * np.exp(-1.0)
    assert scale_factor(1.5, w, p, Variant.DISTANCE_WEIGHTED)[0] == pytest.approx(expected)


def test_scale_factor_distance_weighted_at_center() -> None:
    """Test the direct factor used when the inverted point sits on the center."""
    w = np.array([[1.0, 0.0, 0.0]])
    assert scale_factor(2.0, w, (1.0, 0.0, 0.0), "distance_weighted")[0] == pytest.approx(1.6)


def test_unknown_variant() -> None:
    """Test that an unknown variant name is rejected."""
    with pytest.raises(ValueError):
        mobius_scaling_transform((1, 0, 0), (0, 0, 0), 1.0, "quadratic")


def test_identity_at_zero_zoom() -> None:
    """Test that a unit scale between the inversions gives back the input."""
    rng = np.random.default_rng(1)
    points = rng.normal(size=(50, 3))
    p = rng.normal(size=3)
    np.testing.assert_allclose(transform_points(points, p, 0.0), points, atol=1e-9)
    np.testing.assert_allclose(transform_points(points, p, 1.0, Variant.LINEAR), points, atol=1e-9)
    np.testing.assert_allclose(
        transform_points(points, p, 1.0, Variant.DISTANCE_WEIGHTED),
        points,
        atol=1e-9,
    )


def test_exponential_scenario() -> None:
    """Test the worked example with the exponential variant at zero zoom."""
    result = mobius_scaling_transform((2, 0, 0), (1, 0, 0), 0)
    assert result == Point3(2.0, 0.0, 0.0)


@pytest.mark.parametrize("variant", ALL_VARIANTS)
@pytest.mark.parametrize("zoom", [-3.0, 0.0, 0.5, 2.0])
def test_center_is_a_fixed_point(variant: Variant, zoom: float) -> None:
    """Test that the center maps to itself for every variant."""
    p = (0.3, -1.2, 2.0)
    assert mobius_scaling_transform(p, p, zoom, variant) == p


def test_origin_center_scenario() -> None:
    """Test the coincident fallback at the origin."""
    result = mobius_scaling_transform((0, 0, 0), (0, 0, 0), 1.7)
    assert result == (0.0, 0.0, 0.0)
    assert np.all(np.isfinite(result))


def test_intermediate_coincidence_returns_center() -> None:
    """Test a scaled point that lands on the center before the second inversion."""
    with patch("mobiusmol.transform.logger") as mock_logger:
        result = mobius_scaling_transform((1, 2, 3), (0, 0, 0), 0.0, Variant.LINEAR)
        assert mock_logger.warning.call_count == 1
    assert result == (0.0, 0.0, 0.0)


def test_transform_points_mixes_regular_and_coincident_rows() -> None:
    """Test that only the coincident row falls back to the center."""
    p = np.array([1.0, 1.0, 1.0])
    points = np.array([[1.0, 1.0, 1.0], [3.0, 1.0, 1.0]])
    result = transform_points(points, p, 1.0)
    np.testing.assert_array_equal(result[0], p)
    assert np.all(np.isfinite(result))
    assert not np.allclose(result[1], p)


def test_single_point_matches_vectorized() -> None:
    """Test that the single point and array entry points agree."""
    rng = np.random.default_rng(2)
    points = rng.normal(size=(10, 3))
    p = rng.normal(size=3)
    batch = transform_points(points, p, 1.3, Variant.DISTANCE_WEIGHTED)
    for z, expected in zip(points, batch):
        np.testing.assert_allclose(mobius_scaling_transform(z, p, 1.3, Variant.DISTANCE_WEIGHTED), expected)


def test_transform_is_deterministic() -> None:
    """Test that identical inputs give bit-identical output."""
    args = ((0.4, -2.0, 1.0), (1.0, 0.5, -0.5), 1.7)
    for variant in ALL_VARIANTS:
        assert mobius_scaling_transform(*args, variant) == mobius_scaling_transform(*args, variant)


@pytest.mark.parametrize(("variant", "zoom"), [(Variant.EXPONENTIAL, 1.3), (Variant.LINEAR, 0.4)])
def test_inverse_zoom_round_trip(variant: Variant, zoom: float) -> None:
    """Test that the inverse parameter undoes the transform."""
    rng = np.random.default_rng(3)
    points = rng.normal(size=(30, 3))
    p = rng.normal(size=3)
    forward = transform_points(points, p, zoom, variant)
    back = transform_points(forward, p, inverse_zoom(zoom, variant), variant)
    np.testing.assert_allclose(back, points, atol=1e-8)


def test_inverse_zoom_undefined() -> None:
    """Test the cases without an inverse parameter."""
    assert inverse_zoom(2.0) == -2.0
    with pytest.raises(ValueError):
        inverse_zoom(0.0, Variant.LINEAR)
    with pytest.raises(ValueError):
        inverse_zoom(1.0, Variant.DISTANCE_WEIGHTED)


def test_nudge() -> None:
    """Test the epsilon offset applied to picked points."""
    assert nudge((1, 2, 3)) == pytest.approx((1.000001, 2.000001, 3.000001))
    assert nudge((0, 0, 0), epsilon=0.5) == (0.5, 0.5, 0.5)


def test_nudged_center_keeps_picked_point_finite() -> None:
    """Test that a picked point transforms finitely once the center is nudged."""
    picked = (1.0, 2.0, 3.0)
    result = mobius_scaling_transform(picked, nudge(picked), 2.0)
    assert np.all(np.isfinite(result))


def test_bad_point_shape() -> None:
    """Test that a point with the wrong number of coordinates is rejected."""
    with pytest.raises(ValueError):
        invert((1, 2), (0, 0, 0))
