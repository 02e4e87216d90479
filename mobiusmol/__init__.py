"""Möbius scaling transform for points, meshes and molecules."""

from mobiusmol.circumcenter import (
  CircleFit,
  Point2,
  ZoomableCircle,
  fit_circle,
  recover_circumcenter,
  recover_radius,
)
from mobiusmol.geometry import (
  PlaneGrid,
  SphereMesh,
  generate_circle,
  generate_circle_3d,
  generate_disk,
  generate_sphere,
)
from mobiusmol.transform import (
  Point3,
  Variant,
  inverse_zoom,
  invert,
  mobius_scaling_transform,
  nudge,
  scale,
  transform_points,
)

__version__ = "0.1.0"

__all__ = [
  "CircleFit",
  "PlaneGrid",
  "Point2",
  "Point3",
  "SphereMesh",
  "Variant",
  "ZoomableCircle",
  "fit_circle",
  "generate_circle",
  "generate_circle_3d",
  "generate_disk",
  "generate_sphere",
  "inverse_zoom",
  "invert",
  "mobius_scaling_transform",
  "nudge",
  "recover_circumcenter",
  "recover_radius",
  "scale",
  "transform_points",
]


def view(*args, **kwargs):
  """Create a notebook viewer. See `mobiusmol.viewer.View`."""
  from mobiusmol.viewer import View

  return View(*args, **kwargs)
