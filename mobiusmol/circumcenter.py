"""Recover the circle that a transformed circle maps to."""

from __future__ import annotations

import logging
import math
from typing import NamedTuple, Sequence

import numpy as np

from mobiusmol.geometry import generate_circle
from mobiusmol.transform import DEFAULT_VARIANT, PointLike, Variant

logger = logging.getLogger(__name__)

COLLINEAR_TOLERANCE = 1e-10


class Point2(NamedTuple):
  """A point in the plane."""

  x: float
  y: float


class CircleFit(NamedTuple):
  """Center and radius of a recovered circle."""

  center: Point2
  radius: float
  degenerate: bool = False


ORIGIN = Point2(0.0, 0.0)


def _solve_circumcenter(
  p1: Sequence[float],
  p2: Sequence[float],
  p3: Sequence[float],
) -> Point2 | None:
  a = p2[0] - p1[0]
  b = p2[1] - p1[1]
  c = p3[0] - p1[0]
  d = p3[1] - p1[1]
  e = a * (p1[0] + p2[0]) + b * (p1[1] + p2[1])
  f = c * (p1[0] + p3[0]) + d * (p1[1] + p3[1])
  g = 2 * (a * (p3[1] - p2[1]) - b * (p3[0] - p2[0]))

  if abs(g) < COLLINEAR_TOLERANCE:
    logger.error("Points are collinear or too close together: %s, %s, %s", p1, p2, p3)
    return None

  return Point2(float((d * e - b * f) / g), float((a * f - c * e) / g))


def recover_circumcenter(
  p1: Sequence[float],
  p2: Sequence[float],
  p3: Sequence[float],
) -> Point2:
  """Compute the circumcenter of three points from their xy coordinates.

  Args:
      p1: First point.
      p2: Second point.
      p3: Third point.

  Returns:
      The circumcenter, or the origin if the points are (nearly) collinear.

  """
  center = _solve_circumcenter(p1, p2, p3)
  return ORIGIN if center is None else center


def recover_radius(circumcenter: Sequence[float], p1: Sequence[float]) -> float:
  """Distance in the xy plane from the circumcenter to `p1`."""
  return math.hypot(p1[0] - circumcenter[0], p1[1] - circumcenter[1])


def sample_indices(n: int) -> tuple[int, int, int]:
  """Indices of the three samples used to fit a closed loop of `n` points.

  The last sample is skipped because it duplicates the first one.
  """
  return 0, n // 2, n - 2


def fit_circle(points: np.ndarray) -> CircleFit:
  """Fit a circle through three samples of a transformed closed loop.

  Args:
      points: Nx2 or Nx3 array of samples, N >= 3, first and last coinciding.

  Returns:
      The recovered circle. A degenerate fit has the origin as center and a
      zero radius.

  """
  i1, i2, i3 = sample_indices(len(points))
  p1, p2, p3 = points[i1], points[i2], points[i3]
  center = _solve_circumcenter(p1, p2, p3)
  if center is None:
    return CircleFit(ORIGIN, 0.0, degenerate=True)
  return CircleFit(center, recover_radius(center, p1))


class ZoomableCircle:
  """A circle in the z=0 plane that can be recentered on its own image.

  Zooming replaces the circle with the circle recovered from its
  transformed samples; resetting restores the circle it was created with.
  """

  def __init__(
    self,
    radius: float,
    center2d: Sequence[float] = (0.0, 0.0),
    segments: int = 64,
  ) -> None:
    self.segments: int = segments
    self._initial: tuple[float, float, float] = (float(center2d[0]), float(center2d[1]), float(radius))
    self.center2d: Point2 = Point2(float(center2d[0]), float(center2d[1]))
    self.radius: float = float(radius)

  def points(
    self,
    center: PointLike,
    zoom: float,
    variant: Variant | str = DEFAULT_VARIANT,
  ) -> np.ndarray:
    return generate_circle(self.radius, self.segments, self.center2d, center, zoom, variant)

  def fit(
    self,
    center: PointLike,
    zoom: float,
    variant: Variant | str = DEFAULT_VARIANT,
  ) -> CircleFit:
    return fit_circle(self.points(center, zoom, variant))

  def apply_zoom(
    self,
    center: PointLike,
    zoom: float,
    variant: Variant | str = DEFAULT_VARIANT,
  ) -> bool:
    """Adopt the recovered image circle as the new circle.

    Returns:
        False, leaving the circle unchanged, if the fit was degenerate.

    """
    fit = self.fit(center, zoom, variant)
    if fit.degenerate:
      logger.warning("Skipping zoom: transformed circle could not be recovered.")
      return False
    self.center2d = fit.center
    self.radius = fit.radius
    return True

  def reset(self) -> None:
    x, y, radius = self._initial
    self.center2d = Point2(x, y)
    self.radius = radius
