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
r"""R-space domains for Wannier interpolation.

The Fourier-space frequencies of Wannier interpolation are the lattice
translations :math:`\mathbf{R}`, called R-vectors. This module defines the
R-space domains holding them, and the Wigner-Seitz construction that
reproduces the R-vectors (and their order) of wannier90.

Three domains share the read interface of :class:`RspaceDomain`:

- :class:`WSRspaceDomain`, R-vectors of the Wigner-Seitz supercell, with
  degeneracies;
- :class:`MDRSRspaceDomain`, additionally the translation T-vectors of the
  minimal-distance replica selection, see :mod:`jannier._src.mdrs`;
- :class:`BareRspaceDomain`, only R-vectors plus an index map. It carries no
  degeneracy, so the R-space operators defined on it are plain tight-binding
  models.

.. note::

  To reproduce wannier90, ``atol`` should be equal to its input parameter
  ``ws_distance_tol`` and ``max_cell`` to ``ws_search_size``.
"""
import dataclasses
from typing import Iterator, Sequence, Tuple, Union

import chex
import numpy as np
from absl import logging
from jaxtyping import Array, Float, Int

from . import const
from ..errors import DegeneracyOverflowError, SearchWindowError
from .neighbors import NearestNeighborIndex
from .supercell import make_supercell, sort_points, unique_points
from .utils import check_lattice, fractional_to_cartesian


def check_grid_size(grid_size: Union[Sequence[int], Int[Array, '3']]) -> Tuple:
  grid_size = tuple(int(i) for i in np.asarray(grid_size).reshape(-1))
  if len(grid_size) != 3:
    raise ValueError(f"grid size should have 3 elements, got {grid_size}.")
  if any(i < 1 for i in grid_size):
    raise ValueError(f"grid size should be positive, got {grid_size}.")
  return grid_size


class RspaceDomain:
  """Read interface shared by all R-space domains.

  Every domain has a ``lattice`` (3x3, each column a lattice vector in
  angstrom) and ``Rvectors`` (``(n_Rvectors, 3)`` integers, fractional
  coordinates w.r.t. the lattice).
  """

  @property
  def n_Rvectors(self) -> int:
    return self.Rvectors.shape[0]

  def __len__(self) -> int:
    return self.n_Rvectors

  def __getitem__(self, i) -> np.ndarray:
    return self.Rvectors[i]

  def __iter__(self) -> Iterator[np.ndarray]:
    return iter(self.Rvectors)

  @property
  def Rvectors_cartesian(self) -> np.ndarray:
    return fractional_to_cartesian(self.lattice, self.Rvectors)

  def allclose(self, other: "RspaceDomain", **kwargs) -> bool:
    """Field-wise ``np.allclose`` between two domains of the same type."""
    if type(self) is not type(other):
      return False
    for f in dataclasses.fields(self):
      va = getattr(self, f.name)
      vb = getattr(other, f.name)
      if isinstance(va, RvectorIndexMap):
        if not va.allclose(vb):
          return False
        continue
      va, vb = np.asarray(va), np.asarray(vb)
      if va.shape != vb.shape or not np.allclose(va, vb, **kwargs):
        return False
    return True

  def __str__(self) -> str:
    lines = [f"R-space domain type :  {type(self).__name__}", ""]
    lines.append("lattice: Å")
    for name, v in zip("abc", self.lattice.T):
      lines.append(f"  {name}: {v[0]:11.7f} {v[1]:11.7f} {v[2]:11.7f}")
    lines.append("")
    lines.append(f"n_Rvectors  =  {self.n_Rvectors}")
    return "\n".join(lines)


@chex.dataclass(frozen=True, eq=False, mappable_dataclass=False)
class WSRspaceDomain(RspaceDomain):
  """R-vectors generated using the Wigner-Seitz cell.

  The R-vectors are sorted in the same order as wannier90.

  Args:
    lattice (Float[Array, '3 3']): each column is a lattice vector in Å.
    Rvectors (Int[Array, 'nR 3']): fractional (integer) coordinates.
    n_Rdegens (Int[Array, 'nR']): degeneracy of each R-vector, the weight of
      the R-vector is ``1 / n_Rdegens``.
  """
  lattice: Float[Array, '3 3']
  Rvectors: Int[Array, 'nR 3']
  n_Rdegens: Int[Array, 'nR']


@chex.dataclass(frozen=True, eq=False, mappable_dataclass=False)
class MDRSRspaceDomain(RspaceDomain):
  """R-vectors and T-vectors for the minimal-distance replica selection.

  Args:
    lattice (Float[Array, '3 3']): each column is a lattice vector in Å.
    Rvectors (Int[Array, 'nR 3']): the R-vectors of the Wigner-Seitz domain.
    n_Rdegens (Int[Array, 'nR']): the degeneracies of the Wigner-Seitz domain.
    Tvectors (Int[Array, 'nR nw nw nT 3']): translation vectors (fractional)
      minimizing the distance between WF ``m`` at home and WF ``n`` at ``R``.
      Only the first ``n_Tdegens[iR, m, n]`` entries along ``nT`` are valid,
      the rest is zero padding.
    n_Tdegens (Int[Array, 'nR nw nw']): degeneracy of the T-vectors.
  """
  lattice: Float[Array, '3 3']
  Rvectors: Int[Array, 'nR 3']
  n_Rdegens: Int[Array, 'nR']
  Tvectors: Int[Array, 'nR nw nw nT 3']
  n_Tdegens: Int[Array, 'nR nw nw']

  @property
  def n_wann(self) -> int:
    return self.n_Tdegens.shape[1]

  def tvectors(self, iR: int, m: int, n: int) -> np.ndarray:
    """The valid T-vectors of R-vector ``iR`` and WF pair ``(m, n)``."""
    return self.Tvectors[iR, m, n, :self.n_Tdegens[iR, m, n]]


@chex.dataclass(frozen=True, eq=False, mappable_dataclass=False)
class RvectorIndexMap:
  """Read-only mapping from the ``x, y, z`` components of an R-vector to its
  1-based index ``iR``. Missing R-vectors map to ``0``.

  The table is a flat array addressed through the affine transform
  ``sum((R - offset) * strides)``.

  Args:
    table (Int[Array, 'num']): the flat lookup table.
    offset (Int[Array, '3']): per-axis minimum of the R-vectors.
    shape (Int[Array, '3']): per-axis extent of the R-vectors.
  """
  table: Int[Array, 'num']
  offset: Int[Array, '3']
  shape: Int[Array, '3']

  @property
  def strides(self) -> np.ndarray:
    return np.array([self.shape[1] * self.shape[2], self.shape[2], 1])

  def lookup(self, Rvectors: Int[Array, 'n 3']) -> np.ndarray:
    """1-based indices of ``Rvectors``, 0 for R-vectors not in the map."""
    Rvectors = np.asarray(Rvectors, dtype=int).reshape(-1, 3)
    shifted = Rvectors - self.offset
    valid = np.all((shifted >= 0) & (shifted < self.shape), axis=1)
    flat = np.where(valid, shifted @ self.strides, 0)
    return np.where(valid, self.table[flat], 0)

  def __getitem__(self, xyz: Tuple[int, int, int]) -> int:
    return int(self.lookup(np.asarray(xyz))[0])

  def allclose(self, other: "RvectorIndexMap") -> bool:
    return (
      np.array_equal(self.offset, other.offset) and
      np.array_equal(self.shape, other.shape) and
      np.array_equal(self.table, other.table)
    )


def build_mapping_xyz_iR(Rvectors: Int[Array, 'nR 3']) -> RvectorIndexMap:
  """Build the mapping such that ``mapping[Rvectors[iR]] == iR + 1``.

  Args:
      Rvectors (Int[Array, 'nR 3']): distinct integer R-vectors.

  Returns:
      RvectorIndexMap: the read-only index map.
  """
  Rvectors = np.asarray(Rvectors, dtype=int).reshape(-1, 3)
  if Rvectors.shape[0] == 0:
    raise ValueError("Rvectors is empty.")
  offset = Rvectors.min(axis=0)
  shape = Rvectors.max(axis=0) - offset + 1
  strides = np.array([shape[1] * shape[2], shape[2], 1])
  # 0 marks an invalid index
  table = np.zeros(int(np.prod(shape)), dtype=int)
  table[(Rvectors - offset) @ strides] = np.arange(1, Rvectors.shape[0] + 1)
  table.flags.writeable = False
  offset.flags.writeable = False
  shape.flags.writeable = False
  return RvectorIndexMap(table=table, offset=offset, shape=shape)


@chex.dataclass(frozen=True, eq=False, mappable_dataclass=False)
class BareRspaceDomain(RspaceDomain):
  """A minimalistic R-space domain, with only R-vectors themselves.

  Contrary to :class:`WSRspaceDomain` and :class:`MDRSRspaceDomain`, this
  domain has no degeneracies or T-vectors, so it cannot be used for the
  forward Fourier transform. Those are absorbed into the R-space operators
  during the forward transform instead, and the backward transform becomes a
  plain sum over :math:`\\exp(i \\mathbf{k} \\cdot \\mathbf{R})`.

  Args:
    lattice (Float[Array, '3 3']): each column is a lattice vector in Å.
    Rvectors (Int[Array, 'nR 3']): fractional (integer) coordinates.
    xyz_iR (RvectorIndexMap): see :func:`build_mapping_xyz_iR`.
  """
  lattice: Float[Array, '3 3']
  Rvectors: Int[Array, 'nR 3']
  xyz_iR: RvectorIndexMap

  @staticmethod
  def create(
    lattice: Float[Array, '3 3'], Rvectors: Int[Array, 'nR 3']
  ) -> "BareRspaceDomain":
    lattice = check_lattice(lattice)
    Rvectors = np.asarray(Rvectors, dtype=int).reshape(-1, 3)
    xyz_iR = build_mapping_xyz_iR(Rvectors)
    if np.count_nonzero(xyz_iR.table) != Rvectors.shape[0]:
      raise ValueError("Rvectors of a bare domain must be distinct.")
    return BareRspaceDomain(lattice=lattice, Rvectors=Rvectors, xyz_iR=xyz_iR)


def generate_ws_rspace_domain(
  lattice: Float[Array, '3 3'],
  rgrid_size: Union[Sequence[int], Int[Array, '3']],
  atol: float = const.W90_WS_DISTANCE_TOL,
  max_cell: int = const.W90_WS_SEARCH_SIZE,
  max_neighbors: int = const.W90_WS_MAX_NEIGHBORS,
) -> WSRspaceDomain:
  """Generate the Wigner-Seitz R-space domain.

  The supercell spanned by the k-grid (``rgrid_size``) is where the Wannier
  functions live. An R-vector belongs to the domain if it lies inside, or on
  the boundary of, the Wigner-Seitz cell of that supercell centered at the
  origin. Boundary R-vectors are shared by ``n_Rdegens`` equally-distant
  supercell images.

  Args:
      lattice (Float[Array, '3 3']): each column is a lattice vector.
      rgrid_size (Sequence[int]): number of FFT grid points in each direction,
        equal to the k-grid size.
      atol (float): tolerance for checking degeneracy. Defaults to the
        wannier90 ``ws_distance_tol``.
      max_cell (int): number of neighboring supercells to be searched.
        Defaults to the wannier90 ``ws_search_size``.
      max_neighbors (int): maximal number of nearest neighbors inspected when
        counting degeneracies. Defaults to 8.

  Returns:
      WSRspaceDomain: the R-vectors sorted as in wannier90, and their
      degeneracies.

  Raises:
      DegeneracyOverflowError: if some degeneracy exceeds ``max_neighbors``.
      SearchWindowError: if ``max_cell`` is too small for the lattice.
  """
  lattice = check_lattice(lattice)
  rgrid_size = check_grid_size(rgrid_size)
  if max_cell < 1:
    raise ValueError(f"max_cell should be positive, got {max_cell}.")

  # 1. the supercell where WFs live in
  supercell_wf, _ = make_supercell(
    np.zeros([1, 3], dtype=int), [range(r) for r in rgrid_size]
  )
  # another supercell of supercell_wf, to find the Wigner-Seitz cell of
  # supercell_wf
  supercell, translations = make_supercell(
    supercell_wf,
    [range(-max_cell * r, max_cell * r + 1, r) for r in rgrid_size]
  )
  # z increases fastest, so that the R-vector order is the same as wannier90
  supercell, _ = sort_points(supercell)
  supercell_cart = fractional_to_cartesian(lattice, supercell)
  translations = unique_points(translations)
  translations_cart = fractional_to_cartesian(lattice, translations)

  # 2. distances of supercell points to the translations of supercell_wf. In
  # principle all the translations are needed to count degeneracies, in
  # practice the degeneracy rarely exceeds 8. One more neighbor is searched to
  # detect when it does.
  index = NearestNeighborIndex(translations_cart)
  max_neighbors = min(max_neighbors, len(index))
  dists, idxs = index.query(supercell_cart, max_neighbors + 1)
  idx_origin = int(np.flatnonzero(np.all(translations == 0, axis=1))[0])

  # 3. a point closest to the supercell_wf at the origin is inside the WS cell
  d = dists[:, 0]
  on_boundary = np.abs(d - np.linalg.norm(supercell_cart, axis=1)) < atol
  inside = (idxs[:, 0] == idx_origin) | on_boundary
  degens = np.sum(np.abs(dists - d[:, None]) < atol, axis=1)

  overflow = inside & (degens > max_neighbors)
  if np.any(overflow):
    i = int(np.flatnonzero(overflow)[0])
    raise DegeneracyOverflowError(
      f"R-vector {supercell[i]}", degens[i], max_neighbors
    )

  Rvectors = supercell[inside]
  n_Rdegens = degens[inside]

  n_cells = int(np.prod(rgrid_size))
  if not np.isclose(np.sum(1.0 / n_Rdegens), n_cells):
    raise SearchWindowError(
      f"sum of R-vector weights {np.sum(1.0 / n_Rdegens)} differs from the "
      f"number of grid points {n_cells}, max_cell={max_cell} is too small."
    )
  logging.info(f"{Rvectors.shape[0]} R-vectors in the Wigner-Seitz domain.")

  return WSRspaceDomain(lattice=lattice, Rvectors=Rvectors, n_Rdegens=n_Rdegens)
