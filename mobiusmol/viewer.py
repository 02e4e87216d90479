"""Interactive notebook viewer for molecules under the Möbius scaling transform."""

from __future__ import annotations

import html
import importlib.resources
import json
import logging
import uuid
from typing import Sequence

import numpy as np
from IPython.display import HTML, Javascript, display

from mobiusmol import resources as mobiusmol_resources
from mobiusmol.molecule import (
  Bond,
  center_coords,
  load_structure,
  place_atoms,
  place_bonds,
)
from mobiusmol.transform import DEFAULT_VARIANT, Point3, PointLike, Variant, nudge

try:
  from google.colab import output as colab_output  # type: ignore[import-not-found]

  _is_colab = True
except Exception:  # pragma: no cover - optional runtime  # noqa: BLE001
  colab_output = None
  _is_colab = False

IS_COLAB = _is_colab

logger = logging.getLogger(__name__)

TEMPLATE_NAME = "mobius_viewer.html"
INJECTION_POINT = "<!-- DATA_INJECTION_POINT -->"


def _read_template() -> str:
  return importlib.resources.files(mobiusmol_resources).joinpath(TEMPLATE_NAME).read_text(encoding="utf-8")


class View:
  """A notebook viewer that shows a molecule deformed by the Möbius transform.

  Every frame is computed from a read-only baseline of the loaded
  coordinates. ``apply_zoom`` folds the current frame into that baseline;
  ``reset`` goes back to what was loaded and to the initial parameters.
  """

  def __init__(
    self,
    size: tuple[int, int] = (500, 500),
    zoom: float = 0.0,
    center: PointLike = (0.0, 0.0, 0.0),
    variant: Variant | str = DEFAULT_VARIANT,
    *,
    show_bonds: bool = True,
  ) -> None:
    """Initialize a molecule viewer.

    Args:
        size: Width and height of the viewer in pixels. Defaults to (500, 500).
        zoom: Initial zoom parameter L. Defaults to 0 (identity).
        center: Initial transform center P. Defaults to the origin.
        variant: Scaling factor policy. Defaults to exponential.
        show_bonds: Whether to draw bonds. Defaults to True.

    """
    self.size: tuple[int, int] = size
    self.zoom: float = float(zoom)
    self.center: Point3 = Point3(*(float(c) for c in center))
    self.variant: Variant = Variant(variant)
    self._show_bonds: bool = show_bonds
    self._initial_params: tuple[float, Point3, Variant] = (self.zoom, self.center, self.variant)

    self._displayed: bool = False
    self._baseline: np.ndarray | None = None
    self._loaded: np.ndarray | None = None
    self._symbols: list[str] | None = None
    self._bonds: list[Bond] | None = None
    self._viewer_id: str = uuid.uuid4().hex

  @property
  def baseline(self) -> np.ndarray | None:
    """Untransformed atom coordinates, or None if nothing is loaded."""
    return self._baseline

  def _get_data_dict(self) -> dict[str, object]:
    """Transform the stored baseline and serialize the result to a dict.

    Returns:
        A dictionary containing the transformed atoms and bonds.

    """
    if self._baseline is None or self._symbols is None:
      return {"positions": [], "sizes": [], "colors": [], "bonds": []}

    atoms = place_atoms(self._baseline, self._symbols, self.center, self.zoom, self.variant)
    bonds = place_bonds(self._bonds, atoms["positions"]) if self._show_bonds and self._bonds else []
    return {
      "positions": atoms["positions"].tolist(),
      "sizes": atoms["sizes"].tolist(),
      "colors": atoms["colors"],
      "bonds": bonds,
      "center": list(self.center),
      "zoom": self.zoom,
    }

  def _update(
    self,
    coords: np.ndarray,
    symbols: Sequence[str] | None = None,
    bonds: Sequence[Bond] | None = None,
  ) -> None:
    """Replace the stored molecule and capture its baseline.

    Args:
        coords: The untransformed coordinates.
        symbols: The element symbols.
        bonds: The bonds between atoms.

    """
    baseline = np.array(coords, dtype=float).reshape(-1, 3)
    baseline.setflags(write=False)
    self._baseline = baseline
    self._loaded = baseline

    self._symbols = list(symbols) if symbols is not None else ["C"] * baseline.shape[0]
    if len(self._symbols) != baseline.shape[0]:
      logger.warning("Symbols length mismatch. Resetting to default.")
      self._symbols = ["C"] * baseline.shape[0]
    self._bonds = list(bonds) if bonds is not None else []

  def _post(self, message: dict[str, object]) -> None:
    """Deliver a frame message to the page.

    In Jupyter the message is kept as the latest frame for this viewer and
    posted to the iframe once the page has announced itself ready.

    Args:
        message: A ``mobiusmolUpdate`` or ``mobiusmolClearAll`` message.

    """
    message_json = json.dumps(message)
    if IS_COLAB:
      if colab_output is None:
        return
      try:
        colab_output.eval_js(f"window.mobiusmolReceive({message_json});", ignore_result=True)
      except Exception:
        logger.exception("Could not deliver frame to the Colab output")
      return

    viewer_id = json.dumps(self._viewer_id)
    display(
      Javascript(
        f"(window.mobiusmolFrames = window.mobiusmolFrames || {{}})[{viewer_id}] = {message_json};\n"
        f"window.mobiusmolFlush && window.mobiusmolFlush({viewer_id});",
      ),
    )

  def _display_viewer(self) -> None:
    """Show the viewer page, with its config injected, in the output cell."""
    config = json.dumps({"size": list(self.size), "viewer_id": self._viewer_id})
    page = _read_template().replace(INJECTION_POINT, f"<script>window.viewerConfig = {config};</script>")
    if IS_COLAB:
      display(HTML(page))
      return

    width, height = self.size[0] + 20, self.size[1] + 20
    display(
      HTML(
        f'<iframe data-viewer-id="{self._viewer_id}" srcdoc="{html.escape(page)}" '
        f'style="width: {width}px; height: {height}px; border: none;" '
        f'sandbox="allow-scripts allow-same-origin"></iframe>\n'
        "<script>\n"
        "window.mobiusmolFlush = window.mobiusmolFlush || function(id) {\n"
        "  const frame = document.querySelector(`iframe[data-viewer-id=\"${id}\"]`);\n"
        "  const latest = (window.mobiusmolFrames || {})[id];\n"
        "  if (frame && frame.dataset.ready && latest) frame.contentWindow.postMessage(latest, '*');\n"
        "};\n"
        "if (!window.mobiusmolListening) {\n"
        "  window.mobiusmolListening = true;\n"
        "  window.addEventListener('message', (event) => {\n"
        "    if (!event.data || event.data.type !== 'mobiusmol_ready') return;\n"
        "    const frame = document.querySelector(`iframe[data-viewer-id=\"${event.data.viewer_id}\"]`);\n"
        "    if (!frame) return;\n"
        "    frame.dataset.ready = '1';\n"
        "    window.mobiusmolFlush(event.data.viewer_id);\n"
        "  });\n"
        "}\n"
        "</script>",
      ),
    )

  def _send_update(self) -> None:
    self._post({"type": "mobiusmolUpdate", "payload": self._get_data_dict()})

  def clear(self) -> None:
    """Remove the molecule from the viewer."""
    if self._displayed:
      self._post({"type": "mobiusmolClearAll"})

    self._displayed = False  # next add() shows a fresh viewer
    self._viewer_id = uuid.uuid4().hex
    self._baseline = None
    self._loaded = None
    self._symbols = None
    self._bonds = None

  def add(
    self,
    coords: np.ndarray,
    symbols: Sequence[str] | None = None,
    bonds: Sequence[Bond] | None = None,
    *,
    recenter: bool = False,
  ) -> None:
    """Show a molecule in the viewer.

    If this is the first time 'add' is called, it will display the viewer.
    The coordinates become the baseline every later transform starts from.

    Args:
        coords: Nx3 array of coordinates.
        symbols: N-length list of element symbols. Defaults to carbon.
        bonds: Bonds between atoms, by 0-based index.
        recenter: If True, translate the molecule onto its centroid first.

    """
    if not self._displayed:
      self._display_viewer()
      self._displayed = True

    if recenter:
      coords = center_coords(coords)
    self._update(coords, symbols, bonds)
    self._send_update()

  def add_structure(self, filepath: str, *, recenter: bool = True) -> None:
    """Load a molecule from a PDB or CIF file and show it.

    Args:
        filepath: Path to the PDB or CIF file.
        recenter: If True, translate the molecule onto its centroid first.

    """
    atoms, bonds = load_structure(filepath)
    if not atoms:
      return
    coords = np.array([a["coord"] for a in atoms], dtype=float)
    self.add(coords, [a["symbol"] for a in atoms], bonds, recenter=recenter)

  def set_transform(
    self,
    center: PointLike | None = None,
    zoom: float | None = None,
    variant: Variant | str | None = None,
  ) -> None:
    """Change the transform parameters and redraw from the baseline.

    Args:
        center: New transform center P. Unchanged if None.
        zoom: New zoom parameter L. Unchanged if None.
        variant: New factor policy. Unchanged if None.

    """
    if center is not None:
      self.center = Point3(*(float(c) for c in center))
    if zoom is not None:
      self.zoom = float(zoom)
    if variant is not None:
      self.variant = Variant(variant)

    if self._displayed:
      self._send_update()

  def apply_zoom(self) -> None:
    """Adopt the current frame as the new baseline and set the zoom back to 0.

    Zooms compose this way: the next ``set_transform`` deforms what is on
    screen now instead of the loaded coordinates.

    Raises:
        ValueError: If no molecule is loaded.

    """
    if self._baseline is None or self._symbols is None:
      msg = "No molecule loaded."
      raise ValueError(msg)
    placement = place_atoms(self._baseline, self._symbols, self.center, self.zoom, self.variant)
    positions = np.array(placement["positions"], dtype=float)
    positions.setflags(write=False)
    self._baseline = positions
    self.zoom = 0.0
    self._send_update()

  def reset(self) -> None:
    """Restore the loaded coordinates and the initial zoom, center and variant."""
    self.zoom, self.center, self.variant = self._initial_params
    if self._loaded is None:
      return
    self._baseline = self._loaded
    self._send_update()

  def select_center(self, atom_index: int) -> Point3:
    """Move the transform center onto an atom.

    The atom position is nudged so that the atom does not sit exactly on
    the singularity of the transform.

    Args:
        atom_index: Index of the atom in the current baseline.

    Returns:
        The new transform center.

    Raises:
        ValueError: If no molecule is loaded or the index is out of range.

    """
    if self._baseline is None:
      msg = "No molecule loaded."
      raise ValueError(msg)
    n_atoms = self._baseline.shape[0]
    if not 0 <= atom_index < n_atoms:
      msg = f"Atom index {atom_index} out of range for {n_atoms} atoms."
      raise ValueError(msg)
    self.set_transform(center=nudge(self._baseline[atom_index]))
    return self.center
