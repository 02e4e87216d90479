"""Möbius scaling transform built from sphere inversion and scaling."""

from __future__ import annotations

import enum
import logging
from typing import NamedTuple, Sequence, Union

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_EPSILON = 1e-6


class Point3(NamedTuple):
  """A point in 3D Euclidean space."""

  x: float
  y: float
  z: float


PointLike = Union[Point3, Sequence[float], np.ndarray]


class Variant(str, enum.Enum):
  """Policy used to compute the scaling factor between the two inversions."""

  LINEAR = "linear"
  EXPONENTIAL = "exponential"
  DISTANCE_WEIGHTED = "distance_weighted"


DEFAULT_VARIANT = Variant.EXPONENTIAL


def _as_points(points: PointLike | Sequence[PointLike]) -> np.ndarray:
  arr = np.asarray(points, dtype=float)
  return arr.reshape(-1, 3)


def _as_point(point: PointLike) -> np.ndarray:
  arr = np.asarray(point, dtype=float)
  if arr.shape != (3,):
    msg = f"Expected a 3D point, got shape {arr.shape}."
    raise ValueError(msg)
  return arr


def _invert_array(points: np.ndarray, center: np.ndarray) -> np.ndarray:
  """Invert each row of `points` in the unit sphere around `center`.

  Rows that coincide with the center map to the center itself.
  """
  d = points - center
  r2 = np.einsum("ij,ij->i", d, d)
  coincident = r2 == 0
  if coincident.any():
    logger.warning(
      "Inversion: %d point(s) coincide with the center %s, returning the center.",
      int(coincident.sum()),
      center.tolist(),
    )
  safe_r2 = np.where(coincident, 1.0, r2)
  inverted = d / safe_r2[:, None] + center
  inverted[coincident] = center
  return inverted


def invert(point: PointLike, center: PointLike) -> Point3:
  """Invert a point in the unit sphere centered at `center`.

  Args:
      point: The point to invert.
      center: The inversion center P.

  Returns:
      ``(z - P) / |z - P|^2 + P``, or P itself when the point equals P.

  """
  result = _invert_array(_as_point(point)[None, :], _as_point(center))
  return Point3(*result[0].tolist())


def scale(point: PointLike, factor: float) -> Point3:
  """Scale a point componentwise about the origin (not about P)."""
  return Point3(*(factor * _as_point(point)).tolist())


def scale_factor(
  zoom: float,
  inverted: np.ndarray,
  center: PointLike,
  variant: Variant | str = DEFAULT_VARIANT,
) -> np.ndarray:
  """Compute the scaling factor for each inverted point.

  Args:
      zoom: The zoom parameter L.
      inverted: Nx3 array of points after the first inversion.
      center: The transform center P.
      variant: Which factor policy to apply.

  Returns:
      An N-length array of factors.

  Raises:
      ValueError: If `variant` is not a known policy name.

  """
  variant = Variant(variant)
  inverted = _as_points(inverted)
  n = inverted.shape[0]

  if variant is Variant.LINEAR:
    return np.full(n, float(zoom))
  if variant is Variant.EXPONENTIAL:
    return np.full(n, 2.0 ** zoom)

  dist = np.linalg.norm(inverted - _as_point(center), axis=1)
  # At P the decay term saturates, so the factor is set directly.
  return np.where(dist == 0, zoom * 0.8, 1.0 + (zoom - 1.0) * np.exp(-dist))


def transform_points(
  points: PointLike | Sequence[PointLike],
  center: PointLike,
  zoom: float,
  variant: Variant | str = DEFAULT_VARIANT,
) -> np.ndarray:
  """Apply the Möbius scaling transform to a set of points.

  Each point is inverted around `center`, scaled about the origin by the
  factor chosen by `variant`, and inverted around `center` again. Points
  equal to the center are returned as the center.

  Args:
      points: A 3-vector or an Nx3 array of points.
      center: The transform center P.
      zoom: The zoom parameter L.
      variant: Which factor policy to apply. Defaults to exponential (2**L).

  Returns:
      Nx3 array of transformed points.

  """
  pts = _as_points(points)
  p = _as_point(center)

  at_center = np.all(pts == p, axis=1)
  inverted = _invert_array(pts, p)
  scaled = inverted * scale_factor(zoom, inverted, p, variant)[:, None]
  result = _invert_array(scaled, p)
  result[at_center] = p
  return result


def mobius_scaling_transform(
  point: PointLike,
  center: PointLike,
  zoom: float,
  variant: Variant | str = DEFAULT_VARIANT,
) -> Point3:
  """Apply the Möbius scaling transform to a single point.

  Args:
      point: The point to transform.
      center: The transform center P.
      zoom: The zoom parameter L.
      variant: Which factor policy to apply. Defaults to exponential (2**L).

  Returns:
      The transformed point. Returns P when `point` equals P.

  """
  result = transform_points(_as_point(point)[None, :], center, zoom, variant)
  return Point3(*result[0].tolist())


def inverse_zoom(zoom: float, variant: Variant | str = DEFAULT_VARIANT) -> float:
  """Return the zoom parameter that undoes a transform with `zoom`.

  Args:
      zoom: The zoom parameter L.
      variant: The factor policy the transform used.

  Returns:
      The inverse zoom parameter.

  Raises:
      ValueError: If the variant has no inverse parameter for `zoom`.

  """
  variant = Variant(variant)
  if variant is Variant.EXPONENTIAL:
    return -zoom
  if variant is Variant.LINEAR:
    if zoom == 0:
      msg = "Linear transform with zoom 0 collapses every point and has no inverse."
      raise ValueError(msg)
    return 1.0 / zoom
  msg = "The distance-weighted transform has no closed-form inverse parameter."
  raise ValueError(msg)


def nudge(point: PointLike, epsilon: float = DEFAULT_EPSILON) -> Point3:
  """Offset every component of a point by `epsilon`.

  Used when a picked point becomes the transform center, so that the point
  itself does not land exactly on the singularity.
  """
  return Point3(*(_as_point(point) + epsilon).tolist())
