"""Parametric shape samplers that feed every sample through the Möbius transform."""

from __future__ import annotations

import logging
from typing import Sequence, TypedDict

import numpy as np

from mobiusmol.transform import (
  DEFAULT_VARIANT,
  Point3,
  PointLike,
  Variant,
  transform_points,
)

logger = logging.getLogger(__name__)


class SphereMesh(TypedDict):
  """Flat buffers of a UV sphere mesh."""

  vertices: np.ndarray
  uvs: np.ndarray
  indices: np.ndarray


def _circle_samples(
  radius: float,
  segments: int,
  center2d: Sequence[float],
  count: int,
) -> np.ndarray:
  angles = np.arange(count) / segments * 2.0 * np.pi
  samples = np.zeros((count, 3))
  samples[:, 0] = center2d[0] + radius * np.cos(angles)
  samples[:, 1] = center2d[1] + radius * np.sin(angles)
  return samples


def generate_circle(
  radius: float,
  segments: int,
  center2d: Sequence[float],
  center: PointLike,
  zoom: float,
  variant: Variant | str = DEFAULT_VARIANT,
) -> np.ndarray:
  """Sample a circle in the z=0 plane and transform every sample.

  Args:
      radius: Circle radius.
      segments: Number of segments. The loop is closed, so the first and
          last samples coincide.
      center2d: (x, y) center of the circle.
      center: The transform center P.
      zoom: The zoom parameter L.
      variant: Which factor policy to apply.

  Returns:
      (segments + 1)x3 array of transformed points.

  """
  samples = _circle_samples(radius, segments, center2d, segments + 1)
  return transform_points(samples, center, zoom, variant)


def generate_circle_3d(
  radius: float,
  segments: int,
  center3d: Sequence[float],
  center: PointLike,
  zoom: float,
  variant: Variant | str = DEFAULT_VARIANT,
) -> np.ndarray:
  """Sample a curve winding once around a sphere from pole to pole.

  The polar angle runs over [0, pi] while the azimuth runs over [0, 2pi]
  with the same step index.

  Returns:
      (segments + 1)x3 array of transformed points.

  """
  i = np.arange(segments + 1)
  theta = i / segments * np.pi
  phi = i / segments * 2.0 * np.pi
  samples = np.column_stack(
    [
      center3d[0] + radius * np.sin(theta) * np.cos(phi),
      center3d[1] + radius * np.sin(theta) * np.sin(phi),
      center3d[2] + radius * np.cos(theta),
    ],
  )
  return transform_points(samples, center, zoom, variant)


def generate_disk(
  radius: float,
  segments: int,
  center2d: Sequence[float],
  center: PointLike,
  zoom: float,
  variant: Variant | str = DEFAULT_VARIANT,
) -> tuple[np.ndarray, Point3]:
  """Sample the outline of a filled disk and its center.

  Unlike `generate_circle`, the outline is open: it has `segments` samples
  and no closing duplicate.

  Returns:
      The transformed outline (segments x 3) and the transformed disk center.

  """
  samples = _circle_samples(radius, segments, center2d, segments)
  outline = transform_points(samples, center, zoom, variant)
  disk_center = transform_points([center2d[0], center2d[1], 0.0], center, zoom, variant)
  return outline, Point3(*disk_center[0].tolist())


def sphere_indices(segments: int) -> np.ndarray:
  """Build the triangle index buffer of a UV sphere.

  Each quad cell (i, j) is split into the triangles (a, b, a+1) and
  (a+1, b, b+1) with a = i*(segments+1) + j and b = a + segments + 1.
  """
  indices: list[int] = []
  for i in range(segments):
    for j in range(segments):
      a = i * (segments + 1) + j
      b = a + segments + 1
      indices.extend((a, b, a + 1))
      indices.extend((a + 1, b, b + 1))
  return np.array(indices, dtype=np.int64)


def generate_sphere(
  radius: float,
  segments: int,
  center3d: Sequence[float],
  center: PointLike,
  zoom: float,
  variant: Variant | str = DEFAULT_VARIANT,
) -> SphereMesh:
  """Tessellate a UV sphere and transform every vertex.

  Args:
      radius: Sphere radius.
      segments: Number of polar and azimuthal segments.
      center3d: Center of the sphere.
      center: The transform center P.
      zoom: The zoom parameter L.
      variant: Which factor policy to apply.

  Returns:
      A SphereMesh with (segments+1)^2 vertices and 2*segments^2 triangles.

  """
  i, j = np.meshgrid(np.arange(segments + 1), np.arange(segments + 1), indexing="ij")
  i = i.ravel()
  j = j.ravel()
  theta = i / segments * np.pi
  phi = j / segments * 2.0 * np.pi

  samples = np.column_stack(
    [
      center3d[0] + radius * np.sin(theta) * np.cos(phi),
      center3d[1] + radius * np.sin(theta) * np.sin(phi),
      center3d[2] + radius * np.cos(theta),
    ],
  )
  transformed = transform_points(samples, center, zoom, variant)

  return {
    "vertices": transformed.ravel(),
    "uvs": np.column_stack([j / segments, i / segments]).ravel(),
    "indices": sphere_indices(segments),
  }


class PlaneGrid:
  """A square grid of vertices deformed by the transform.

  The untransformed vertex positions are captured once and every call to
  `apply` starts again from them, so repeated parameter changes never
  compound.
  """

  def __init__(self, size: float = 10.0, resolution: int = 50) -> None:
    """Create a plane grid.

    Args:
        size: Edge length of the square plane.
        resolution: Number of cells along each edge.

    """
    self.size: float = size
    self.resolution: int = resolution
    self._baseline: np.ndarray = self._build_baseline()
    self.positions: np.ndarray = self._baseline.copy()

  def _build_baseline(self) -> np.ndarray:
    # Row by row from the top-left corner, like a plane mesh in the xy plane.
    steps = np.arange(self.resolution + 1) / self.resolution * self.size
    xs = -self.size / 2 + steps
    ys = self.size / 2 - steps
    gx, gy = np.meshgrid(xs, ys)
    baseline = np.column_stack([gx.ravel(), gy.ravel(), np.zeros(gx.size)])
    baseline.setflags(write=False)
    return baseline

  @property
  def baseline(self) -> np.ndarray:
    """Read-only untransformed vertex positions."""
    return self._baseline

  @property
  def vertex_count(self) -> int:
    return self._baseline.shape[0]

  def apply(
    self,
    center: PointLike,
    zoom: float,
    variant: Variant | str = DEFAULT_VARIANT,
  ) -> np.ndarray:
    """Transform the grid from its baseline and store the result.

    Args:
        center: The transform center P.
        zoom: The zoom parameter L.
        variant: Which factor policy to apply.

    Returns:
        The transformed positions.

    """
    self.positions = transform_points(self._baseline, center, zoom, variant)
    return self.positions

  def reshape(self, size: float, resolution: int) -> None:
    """Change the shape parameters and recapture the baseline."""
    logger.debug("Rebuilding plane grid baseline: size=%s resolution=%s", size, resolution)
    self.size = size
    self.resolution = resolution
    self._baseline = self._build_baseline()
    self.positions = self._baseline.copy()

  def reset(self) -> None:
    """Restore the untransformed positions."""
    self.positions = self._baseline.copy()
