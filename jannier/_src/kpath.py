# Copyright 2025 Garena Online Private Limited
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Brillouin-zone paths for band structure interpolation.

A :class:`KPath` holds labeled high-symmetry points and the lines connecting
them; a :class:`KPathInterpolant` holds the dense k-points sampled along
those lines. :func:`generate_w90_kpoint_path` samples the path exactly as
wannier90 does, given the number of points of the first segment.

A default high-symmetry path can be obtained from ASE, see
:func:`default_kpoint_path` and https://wiki.fysik.dtu.dk/ase/ase/dft/kpoints.html
"""
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import chex
import numpy as np
from absl import logging
from ase.cell import Cell
from ase.dft.kpoints import parse_path_string
from jaxtyping import Array, Float

from . import const
from ..errors import KPathLabelError, KPathSegmentError
from .utils import check_lattice, reciprocal_lattice


def _check_setting(setting: str) -> str:
  if setting not in (const.LATTICE, const.CARTESIAN):
    raise ValueError(
      f"setting must be {const.LATTICE} or {const.CARTESIAN}, got {setting}."
    )
  return setting


@chex.dataclass(frozen=True, eq=False, mappable_dataclass=False)
class KPath:
  """Labeled high-symmetry points and the paths connecting them.

  Args:
    points (Dict[str, Float[Array, '3']]): label to coordinates.
    paths (List[List[str]]): each path is a connected line through at least
      two labels.
    basis (Float[Array, '3 3']): reciprocal lattice, each column a vector.
    setting (str): ``"lattice"`` for fractional coordinates or
      ``"cartesian"``.
  """
  points: Dict[str, Float[Array, '3']]
  paths: List[List[str]]
  basis: Float[Array, '3 3']
  setting: str

  def cartesianize(self) -> "KPath":
    if _check_setting(self.setting) == const.CARTESIAN:
      return self
    points = {k: self.basis @ v for k, v in self.points.items()}
    return KPath(
      points=points, paths=self.paths, basis=self.basis,
      setting=const.CARTESIAN
    )

  def latticize(self) -> "KPath":
    if _check_setting(self.setting) == const.LATTICE:
      return self
    inv = np.linalg.inv(self.basis)
    points = {k: inv @ v for k, v in self.points.items()}
    return KPath(
      points=points, paths=self.paths, basis=self.basis, setting=const.LATTICE
    )


@chex.dataclass(frozen=True, eq=False, mappable_dataclass=False)
class KPathInterpolant:
  """K-points sampled along a :class:`KPath`.

  Args:
    kpaths (List[Float[Array, 'nk 3']]): k-points of each connected line.
    labels (List[Dict[int, str]]): for each line, the 0-based position of the
      labeled high-symmetry points.
    basis (Float[Array, '3 3']): reciprocal lattice, each column a vector.
    setting (str): ``"lattice"`` or ``"cartesian"``.
  """
  kpaths: List[Float[Array, 'nk 3']]
  labels: List[Dict[int, str]]
  basis: Float[Array, '3 3']
  setting: str

  @property
  def n_kpoints(self) -> int:
    return sum(k.shape[0] for k in self.kpaths)

  def cartesianize(self) -> "KPathInterpolant":
    if _check_setting(self.setting) == const.CARTESIAN:
      return self
    kpaths = [k @ self.basis.T for k in self.kpaths]
    return KPathInterpolant(
      kpaths=kpaths, labels=self.labels, basis=self.basis,
      setting=const.CARTESIAN
    )

  def latticize(self) -> "KPathInterpolant":
    if _check_setting(self.setting) == const.LATTICE:
      return self
    inv = np.linalg.inv(self.basis)
    kpaths = [k @ inv.T for k in self.kpaths]
    return KPathInterpolant(
      kpaths=kpaths, labels=self.labels, basis=self.basis,
      setting=const.LATTICE
    )


def _new_kpath_label(
  label: str,
  coords: np.ndarray,
  points: Mapping[str, np.ndarray],
  atol: float,
  max_tries: int = const.KPATH_MAX_LABEL_TRIES,
) -> str:
  # reuse a relabelled point at the same coordinates, so that the segments
  # ending and starting there are still connected
  for i in range(1, max_tries):
    new_label = f"{label}_{i}"
    if new_label not in points:
      return new_label
    if np.allclose(points[new_label], coords, atol=atol):
      return new_label
  raise KPathLabelError(label, max_tries)


def _parse_kpoint(kpoint) -> Tuple[str, np.ndarray]:
  if isinstance(kpoint, Mapping):
    if len(kpoint) != 1:
      raise KPathSegmentError(
        f"each kpoint should be a single label-coordinates pair, got {kpoint}."
      )
    kpoint = next(iter(kpoint.items()))
  try:
    label, coords = kpoint
  except (TypeError, ValueError) as e:
    raise KPathSegmentError(
      f"each kpoint should be a (label, coordinates) pair, got {kpoint}."
    ) from e
  try:
    coords = np.asarray(coords, dtype=float)
  except (TypeError, ValueError) as e:
    raise KPathSegmentError(
      f"coordinates of kpoint {label} should be 3 numbers, got {coords}."
    ) from e
  if coords.shape != (3,):
    raise KPathSegmentError(
      f"coordinates of kpoint {label} should have 3 elements, got {coords}."
    )
  return str(label), coords


def generate_kpath(
  lattice: Float[Array, '3 3'],
  kpoint_path: Sequence[Sequence],
  atol: float = const.KPATH_COORDINATE_TOL,
) -> KPath:
  """Construct a :class:`KPath` from a list of segments.

  Example:

  .. code-block:: python

    kpoint_path = [
      [("G", [0.0, 0.0, 0.0]), ("M", [0.5, 0.5, 0.0])],
      [("M", [0.5, 0.5, 0.0]), ("R", [0.5, 0.5, 0.5])],
    ]
    kpath = generate_kpath(lattice, kpoint_path)
    kpath.paths  # [["G", "M", "R"]]

  If two kpoints share a label but have different coordinates, the later one
  is renamed by appending ``_1``, ``_2``, ... to its label.

  Args:
      lattice (Float[Array, '3 3']): each column is a lattice vector.
      kpoint_path (Sequence[Sequence]): segments, each a pair of
        ``(label, fractional coordinates)``; single-item dicts
        ``{label: coordinates}`` are accepted as well.
      atol (float): tolerance for two kpoints to have the same coordinates.

  Returns:
      KPath: in fractional (lattice) coordinates.

  Raises:
      KPathSegmentError: if a segment is malformed or the path is empty.
  """
  points = {}
  paths = []

  for segment in kpoint_path:
    if len(segment) != 2:
      raise KPathSegmentError(
        f"Each segment should have 2 kpoints, got {len(segment)}."
      )
    labels = []
    for kpoint in segment:
      label, coords = _parse_kpoint(kpoint)
      if label in points and not np.allclose(points[label], coords, atol=atol):
        new_label = _new_kpath_label(label, coords, points, atol)
        logging.warning(
          f"Two kpoints in kpoint_path have the same label {label} but "
          f"different coordinates {tuple(points[label])} and "
          f"{tuple(coords)}, the second one is relabelled as {new_label}."
        )
        label = new_label
      points.setdefault(label, coords)
      labels.append(label)

    label1, label2 = labels
    if len(paths) > 0 and label1 == paths[-1][-1]:
      paths[-1].append(label2)
    else:
      paths.append([label1, label2])

  if len(paths) == 0:
    raise KPathSegmentError("kpoint_path is empty.")

  return KPath(
    points=points,
    paths=paths,
    basis=reciprocal_lattice(lattice),
    setting=const.LATTICE,
  )


def generate_w90_kpoint_path(
  kpath: KPath, n_points_first_segment: int = const.W90_BANDS_NUM_POINTS
) -> KPathInterpolant:
  """Sample a :class:`KPath` exactly as wannier90 does.

  - the first segment is divided into ``n_points_first_segment`` intervals,
    the remaining segments keep the same spacing;
  - the kpoint at the corner of two segments is not duplicated; if the
    segments are disconnected (different labels) a new line is started.

  Args:
      kpath (KPath): the path.
      n_points_first_segment (int): number of intervals of the first segment,
        the wannier90 input parameter ``bands_num_points``.

  Returns:
      KPathInterpolant: in fractional (lattice) coordinates.
  """
  if n_points_first_segment < 1:
    raise ValueError(
      f"n_points_first_segment should be positive, got "
      f"{n_points_first_segment}."
    )
  kpath_cart = kpath.cartesianize()
  points = kpath_cart.points

  # spacing from the first segment
  k1, k2 = kpath_cart.paths[0][:2]
  dk = np.linalg.norm(points[k2] - points[k1]) / n_points_first_segment
  if dk == 0:
    raise KPathSegmentError(f"the first segment {k1}-{k2} has zero length.")

  kpaths = []
  labels = []
  for path in kpath_cart.paths:
    kpaths_line = []
    labels_line = {}
    n_x_line = 0

    for j in range(len(path) - 1):
      k1, k2 = path[j], path[j + 1]
      seg = points[k2] - points[k1]
      seg_norm = np.linalg.norm(seg)

      n_x_seg = int(round(seg_norm / dk))
      x_seg = np.linspace(0, seg_norm, n_x_seg + 1)
      dvec = seg / seg_norm if seg_norm > 0 else np.zeros(3)
      kpt_seg = points[k1][None, :] + x_seg[:, None] * dvec[None, :]

      if j == 0:
        labels_line[0] = k1
      else:
        # remove the repeated corner
        kpt_seg = kpt_seg[1:]
      n_x_line += kpt_seg.shape[0]
      labels_line[n_x_line - 1] = k2
      kpaths_line.append(kpt_seg)

    kpaths.append(np.concatenate(kpaths_line, axis=0))
    labels.append(labels_line)

  kpi = KPathInterpolant(
    kpaths=kpaths, labels=labels, basis=kpath.basis, setting=const.CARTESIAN
  )
  return kpi.latticize()


def interpolate_w90(
  lattice: Float[Array, '3 3'],
  kpoint_path: Sequence[Sequence],
  n_points_first_segment: int = const.W90_BANDS_NUM_POINTS,
) -> KPathInterpolant:
  """Shortcut of :func:`generate_kpath` then
  :func:`generate_w90_kpoint_path`."""
  kpath = generate_kpath(lattice, kpoint_path)
  return generate_w90_kpoint_path(kpath, n_points_first_segment)


def get_linear_path(kpi: KPathInterpolant) -> np.ndarray:
  """Distance of each kpoint from the first one along the path.

  Disconnected lines are joined without a gap. Can be used as the x-axis for
  plotting band structures, in Cartesian length (1/Å).
  """
  kpi_cart = kpi.cartesianize()
  x = []
  for line in kpi_cart.kpaths:
    x.append(np.zeros(1))
    x.append(np.linalg.norm(np.diff(line, axis=0), axis=1))
  return np.cumsum(np.concatenate(x))


def get_kpoints(kpi: KPathInterpolant) -> np.ndarray:
  """All kpoints of the interpolant, fractional coordinates, (nk, 3)."""
  return np.concatenate(kpi.latticize().kpaths, axis=0)


def get_symm_labels(kpi: KPathInterpolant) -> Tuple[List[int], List[str]]:
  """Global positions and labels of the high-symmetry kpoints, e.g. for the
  x-ticks of a band structure plot."""
  idxs, symbols = [], []
  offset = 0
  for line, labels_line in zip(kpi.kpaths, kpi.labels):
    for i in sorted(labels_line):
      idxs.append(offset + i)
      symbols.append(labels_line[i])
    offset += line.shape[0]
  return idxs, symbols


def default_kpoint_path(
  lattice: Float[Array, '3 3'], path: Optional[str] = None
) -> List[List[Tuple[str, np.ndarray]]]:
  """High-symmetry segments from ASE's special points.

  Args:
      lattice (Float[Array, '3 3']): each column is a lattice vector.
      path (str, optional): a string of special points, e.g. ``"GXWKGLUWLK,UX"``.
        Defaults to the path ASE proposes for the Bravais lattice.

  Returns:
      the ``kpoint_path`` input of :func:`generate_kpath`.
  """
  lattice = check_lattice(lattice)
  bandpath = Cell(lattice.T).bandpath(path)
  special_points = bandpath.special_points
  kpoint_path = []
  for line in parse_path_string(bandpath.path):
    for k1, k2 in zip(line[:-1], line[1:]):
      kpoint_path.append(
        [
          (k1, np.asarray(special_points[k1], dtype=float)),
          (k2, np.asarray(special_points[k2], dtype=float)),
        ]
      )
  return kpoint_path
