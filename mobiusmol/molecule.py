"""Placement of atoms and bonds of a molecule under the Möbius transform."""

from __future__ import annotations

import logging
from typing import Sequence, TypedDict

import gemmi
import numpy as np

from mobiusmol.transform import DEFAULT_VARIANT, PointLike, Variant, transform_points

logger = logging.getLogger(__name__)

DEFAULT_ATOMIC_RADIUS = 0.8
DEFAULT_ATOM_COLOR = "gray"
ATOM_SIZE_SCALE = 0.3
BOND_SPACING = 0.145
BOND_TOLERANCE = 0.45
MIN_BOND_LENGTH = 0.4

# Display radii in angstroms.
ATOMIC_RADII: dict[str, float] = {
  "H": 0.25, "He": 0.31, "Li": 1.52, "Be": 1.12, "B": 0.87, "C": 0.77, "N": 0.75, "O": 0.73,
  "F": 0.64, "Ne": 0.38, "Na": 1.54, "Mg": 1.36, "Al": 1.18, "Si": 1.11, "P": 1.07, "S": 1.02,
  "Cl": 0.99, "Ar": 0.71, "K": 2.03, "Ca": 1.97, "Sc": 1.60, "Ti": 1.40, "V": 1.35, "Cr": 1.29,
  "Mn": 1.39, "Fe": 1.25, "Co": 1.26, "Ni": 1.21, "Cu": 1.38, "Zn": 1.31, "Ga": 1.26, "Ge": 1.22,
  "As": 1.21, "Se": 1.16, "Br": 1.14, "Kr": 0.88, "Rb": 2.16, "Sr": 1.91, "Y": 1.62, "Zr": 1.48,
  "Nb": 1.37, "Mo": 1.45, "Tc": 1.56, "Ru": 1.25, "Rh": 1.25, "Pd": 1.28, "Ag": 1.44, "Cd": 1.49,
  "In": 1.63, "Sn": 1.46, "Sb": 1.46, "Te": 1.47, "I": 1.40, "Xe": 1.08, "Cs": 2.35, "Ba": 1.98,
  "La": 1.69, "Ce": 1.65, "Pr": 1.65, "Nd": 1.64, "Pm": 1.63, "Sm": 1.62, "Eu": 1.85, "Gd": 1.61,
  "Tb": 1.59, "Dy": 1.59, "Ho": 1.58, "Er": 1.57, "Tm": 1.56, "Yb": 1.94, "Lu": 1.56, "Hf": 1.44,
  "Ta": 1.34, "W": 1.30, "Re": 1.28, "Os": 1.26, "Ir": 1.27, "Pt": 1.30, "Au": 1.34, "Hg": 1.49,
  "Tl": 1.48, "Pb": 1.47, "Bi": 1.46, "Po": 1.40, "At": 1.50, "Rn": 1.50, "Fr": 2.60, "Ra": 2.21,
  "Ac": 2.15, "Th": 1.65, "Pa": 1.61, "U": 1.42, "Np": 1.40, "Pu": 1.39, "Am": 1.38, "Cm": 1.37,
  "Bk": 1.37, "Cf": 1.36, "Es": 1.35, "Fm": 1.35, "Md": 1.34, "No": 1.34, "Lr": 1.33, "Rf": 1.30,
  "Db": 1.29, "Sg": 1.28, "Bh": 1.27, "Hs": 1.26, "Mt": 1.25, "Ds": 1.24, "Rg": 1.23, "Cn": 1.22,
  "Nh": 1.21, "Fl": 1.20, "Mc": 1.19, "Lv": 1.18, "Ts": 1.17, "Og": 1.16,
}

ATOM_COLORS: dict[str, str] = {
  "H": "#FFFFFF", "He": "#D9D9D9", "Li": "#FFC0CB", "Be": "#32CD32", "B": "#A52A2A",
  "C": "#808080", "N": "#0000FF", "O": "#FF0000", "F": "#00FF00", "Ne": "#ADD8E6",
  "Na": "#800080", "Mg": "#228B22", "Al": "#C0C0C0", "Si": "#D2B48C", "P": "#FFA500",
  "S": "#FFFF00", "Cl": "#00FF7F", "Ar": "#87CEEB", "K": "#9370DB", "Ca": "#FFD700",
  "Sc": "#708090", "Ti": "#4682B4", "V": "#00008B", "Cr": "#8B0000", "Mn": "#CD853F",
  "Fe": "#B22222", "Co": "#4B0082", "Ni": "#008080", "Cu": "#B87333", "Zn": "#ADFF2F",
  "Ga": "#DDA0DD", "Ge": "#F0E68C", "As": "#BDB76B", "Se": "#D2691E", "Br": "#8B4513",
  "Kr": "#5F9EA0", "Rb": "#FF69B4", "Sr": "#9400D3", "Y": "#1E90FF", "Zr": "#B0C4DE",
  "Nb": "#FA8072", "Mo": "#778899", "Tc": "#FF4500", "Ru": "#9932CC", "Rh": "#DAA520",
  "Pd": "#696969", "Ag": "#DCDCDC", "Cd": "#7B68EE", "In": "#F08080", "Sn": "#BC8F8F",
  "Sb": "#8B4513", "Te": "#2E8B57", "I": "#4B0082", "Xe": "#00BFFF", "Cs": "#FFDAB9",
  "Ba": "#9ACD32", "La": "#FFFACD", "Ce": "#FFE4B5", "Pr": "#FFD700", "Nd": "#FF4500",
  "Sm": "#ADFF2F", "Eu": "#CD853F", "Gd": "#8B4513", "Tb": "#6B8E23", "Dy": "#FF6347",
  "Ho": "#FF00FF", "Er": "#FFDAB9", "Tm": "#DA70D6", "Yb": "#FFE4E1", "Lu": "#BC8F8F",
  "Hf": "#A9A9A9", "Ta": "#778899", "W": "#2F4F4F", "Re": "#696969", "Os": "#708090",
  "Ir": "#483D8B", "Pt": "#7CFC00", "Au": "#FFD700", "Hg": "#00CED1", "Tl": "#9400D3",
  "Pb": "#4B0082", "Bi": "#FF4500", "Po": "#FFFF54", "At": "#FF6347", "Rn": "#00FF7F",
  "Fr": "#FF1493", "Ra": "#9ACD32", "Ac": "#1E90FF", "Th": "#FFA500", "Pa": "#FF4500",
  "U": "#FFD700", "Np": "#FF4500", "Pu": "#8B0000", "Am": "#FF6347", "Cm": "#00FFFF",
  "Bk": "#8A2BE2", "Cf": "#7FFF00", "Es": "#FF4500", "Fm": "#6A5ACD", "Md": "#CD853F",
  "No": "#FF00FF", "Lr": "#FFE4B5", "Rf": "#8B4513", "Db": "#FF8C00", "Sg": "#1E90FF",
  "Bh": "#ADFF2F", "Hs": "#CD5C5C", "Mt": "#FFDAB9", "Ds": "#7B68EE", "Rg": "#DAA520",
  "Cn": "#8B008B", "Nh": "#D2691E", "Fl": "#C71585", "Mc": "#FF4500", "Lv": "#FF7F50",
  "Ts": "#98FB98", "Og": "#ADD8E6",
}


class Atom(TypedDict):
  """Type for atom data dictionary."""

  symbol: str
  coord: list[float]


class Bond(TypedDict):
  """Type for bond data dictionary. Atom indices are 0-based."""

  start: int
  end: int
  order: int


class AtomPlacement(TypedDict):
  """Transformed atom positions with their display sizes and colors."""

  positions: np.ndarray
  sizes: np.ndarray
  colors: list[str]


class BondPlacement(TypedDict):
  """Geometry of a bond drawn between two transformed atoms."""

  start: int
  end: int
  midpoint: list[float]
  direction: list[float]
  length: float
  offsets: list[float]


def atom_display_size(symbol: str, distance: float, zoom: float) -> float:
  """Display radius of an atom at `distance` from the transform center.

  Atoms near the center grow with the zoom parameter; an atom exactly at
  the center keeps its base size.
  """
  radius = ATOMIC_RADII.get(symbol, DEFAULT_ATOMIC_RADIUS)
  factor = 1.0
  if distance != 0:
    factor = 1 + (zoom - 1) * np.exp(-distance * 0.5) * 4
  return float(radius * ATOM_SIZE_SCALE * factor)


def bond_offsets(order: int) -> list[float]:
  """Offsets of the parallel strands drawn for a bond of the given order."""
  if order == 2:
    return [-BOND_SPACING, BOND_SPACING]
  if order == 3:
    return [-BOND_SPACING, 0.0, BOND_SPACING]
  return [0.0]


def place_atoms(
  coords: np.ndarray,
  symbols: Sequence[str],
  center: PointLike,
  zoom: float,
  variant: Variant | str = DEFAULT_VARIANT,
) -> AtomPlacement:
  """Transform atom positions and size each atom by its distance to the center.

  Args:
      coords: Nx3 array of untransformed atom coordinates.
      symbols: N element symbols.
      center: The transform center P.
      zoom: The zoom parameter L.
      variant: Which factor policy to apply.

  Returns:
      The transformed positions, display sizes and colors.

  """
  coords = np.asarray(coords, dtype=float).reshape(-1, 3)
  if len(symbols) != len(coords):
    msg = f"Got {len(symbols)} symbols for {len(coords)} atoms."
    raise ValueError(msg)

  distances = np.linalg.norm(coords - np.asarray(center, dtype=float), axis=1)
  return {
    "positions": transform_points(coords, center, zoom, variant),
    "sizes": np.array(
      [atom_display_size(s, d, zoom) for s, d in zip(symbols, distances)],
      dtype=float,
    ),
    "colors": [ATOM_COLORS.get(s, DEFAULT_ATOM_COLOR) for s in symbols],
  }


def _process_bonds(bonds: Sequence[Bond], n_atoms: int) -> list[Bond]:
  validated: list[Bond] = []
  for bond in bonds:
    start, end = bond["start"], bond["end"]
    if start == end or not (0 <= start < n_atoms and 0 <= end < n_atoms):
      logger.warning("Skipping invalid bond %s for %d atoms.", bond, n_atoms)
      continue
    validated.append(bond)
  return validated


def place_bonds(bonds: Sequence[Bond], transformed: np.ndarray) -> list[BondPlacement]:
  """Lay out bonds between already transformed atom positions.

  Args:
      bonds: Bonds referring to rows of `transformed`.
      transformed: Nx3 array of transformed atom positions.

  Returns:
      One placement per valid bond.

  """
  result: list[BondPlacement] = []
  for bond in _process_bonds(bonds, len(transformed)):
    start = transformed[bond["start"]]
    end = transformed[bond["end"]]
    direction = end - start
    length = float(np.linalg.norm(direction))
    if length > 0:
      direction = direction / length
    result.append(
      {
        "start": bond["start"],
        "end": bond["end"],
        "midpoint": ((start + end) / 2).tolist(),
        "direction": direction.tolist(),
        "length": length,
        "offsets": bond_offsets(bond.get("order", 1)),
      },
    )
  return result


def centroid(coords: np.ndarray) -> np.ndarray:
  """Mean position of a set of coordinates."""
  return np.asarray(coords, dtype=float).reshape(-1, 3).mean(axis=0)


def center_coords(coords: np.ndarray) -> np.ndarray:
  """Translate coordinates so that their centroid lies at the origin."""
  coords = np.asarray(coords, dtype=float).reshape(-1, 3)
  return coords - centroid(coords)


def _molecule_model(coords: np.ndarray, symbols: Sequence[str]) -> gemmi.Model:
  """Pack coordinates into a one-residue gemmi model for neighbor search."""
  residue = gemmi.Residue()
  residue.name = "MOL"
  for index, (symbol, xyz) in enumerate(zip(symbols, coords)):
    atom = gemmi.Atom()
    atom.name = f"{symbol}{index}"
    atom.element = gemmi.Element(symbol)
    atom.pos = gemmi.Position(*xyz)
    residue.add_atom(atom)
  chain = gemmi.Chain("A")
  chain.add_residue(residue)
  model = gemmi.Model(1)
  model.add_chain(chain)
  return model


def detect_bonds(
  coords: np.ndarray,
  symbols: Sequence[str],
  tolerance: float = BOND_TOLERANCE,
) -> list[Bond]:
  """Find single bonds between atoms closer than their covalent radii allow.

  Candidate pairs come from a gemmi cell-list neighbor search, so memory
  grows with the number of atoms rather than the number of pairs.

  Args:
      coords: Nx3 array of atom coordinates.
      symbols: N element symbols.
      tolerance: Slack added to the sum of covalent radii.

  Returns:
      Bonds with start < end, in index order.

  Raises:
      ValueError: If the number of symbols does not match the number of atoms.

  """
  coords = np.asarray(coords, dtype=float).reshape(-1, 3)
  if len(symbols) != coords.shape[0]:
    msg = f"Got {len(symbols)} symbols for {coords.shape[0]} atoms."
    raise ValueError(msg)
  if coords.shape[0] < 2:
    return []

  radii = np.array([gemmi.Element(s).covalent_r for s in symbols], dtype=float)
  max_radius = float(radii.max())
  model = _molecule_model(coords, symbols)
  ns = gemmi.NeighborSearch(model, gemmi.UnitCell(), 2 * max_radius + tolerance).populate()

  bonds: list[Bond] = []
  for i, atom in enumerate(model[0][0]):
    marks = ns.find_neighbors(atom, min_dist=MIN_BOND_LENGTH, max_dist=radii[i] + max_radius + tolerance)
    partners = sorted({m.atom_idx for m in marks if m.image_idx == 0 and m.atom_idx > i})
    for j in partners:
      dist = float(np.linalg.norm(coords[i] - coords[j]))
      if MIN_BOND_LENGTH < dist < radii[i] + radii[j] + tolerance:
        bonds.append({"start": i, "end": j, "order": 1})
  return bonds


def load_structure(filepath: str) -> tuple[list[Atom], list[Bond]]:
  """Load the atoms of the first model of a PDB or CIF file.

  Waters are skipped. Bonds are detected from interatomic distances.

  Args:
      filepath: Path to the structure file.

  Returns:
      The atoms and the detected bonds.

  """
  structure = gemmi.read_structure(filepath)

  atoms: list[Atom] = []
  for model in structure:
    for chain in model:
      for residue in chain:
        if residue.name == "HOH":
          continue
        for atom in residue:
          atoms.append({"symbol": atom.element.name, "coord": atom.pos.tolist()})
    # Only the first model is used.
    break

  if not atoms:
    logger.warning("No atoms found in %s.", filepath)
    return atoms, []

  coords = np.array([a["coord"] for a in atoms], dtype=float)
  bonds = detect_bonds(coords, [a["symbol"] for a in atoms])
  return atoms, bonds
