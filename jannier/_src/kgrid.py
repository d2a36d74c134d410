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
"""Uniform k-point grids."""
import itertools
from typing import Sequence, Tuple, Union

import chex
import numpy as np
from jaxtyping import Array, Float, Int

from ..errors import KGridError
from .rdomain import check_grid_size


@chex.dataclass(frozen=True, eq=False, mappable_dataclass=False)
class KPointGrid:
  """A uniform k-point grid.

  Args:
    size (Tuple[int, int, int]): number of k-points along each reciprocal
      lattice vector.
    kpoints (Float[Array, 'nk 3']): the explicit k-points in fractional
      coordinates, the first one is the origin.
  """
  size: Tuple[int, int, int]
  kpoints: Float[Array, 'nk 3']

  @property
  def n_kpoints(self) -> int:
    return self.kpoints.shape[0]

  def validate(self, atol: float = 1e-8) -> "KPointGrid":
    """Check the grid invariants, return the grid itself.

    Raises:
        KGridError: if the number of k-points is not ``nx * ny * nz`` or the
          first k-point is not the origin.
    """
    kpoints = np.asarray(self.kpoints, dtype=float).reshape(-1, 3)
    size = tuple(int(i) for i in np.asarray(self.size).reshape(-1))
    if kpoints.shape[0] != np.prod(size):
      raise KGridError(
        f"number of k-points {kpoints.shape[0]} != nx * ny * nz of grid "
        f"{size}."
      )
    if not np.allclose(kpoints[0], 0, atol=atol):
      raise KGridError(
        f"The first k-point must be the origin, got {kpoints[0]}."
      )
    return self

  @staticmethod
  def create(
    size: Union[Sequence[int], Int[Array, '3']],
    kpoints: Float[Array, 'nk 3'],
    atol: float = 1e-8,
  ) -> "KPointGrid":
    """Validate and create a k-point grid.

    Raises:
        KGridError: if the number of k-points is not ``nx * ny * nz`` or the
          first k-point is not the origin.
    """
    size = check_grid_size(size)
    kpoints = np.asarray(kpoints, dtype=float).reshape(-1, 3)
    kgrid = KPointGrid(size=size, kpoints=kpoints).validate(atol)
    kpoints.flags.writeable = False
    return kgrid


def uniform_kgrid(size: Union[Sequence[int], Int[Array, '3']]) -> KPointGrid:
  """Generate the uniform k-grid with the ordering of wannier90 ``kmesh.pl``.

  The k-points are ``(i / nx, j / ny, k / nz)`` in ``[0, 1)``, the last index
  increases fastest.

  Example:

  .. code-block:: python

    kgrid = uniform_kgrid((2, 2, 2))
    kgrid.kpoints[1]  # [0., 0., 0.5]
  """
  size = check_grid_size(size)
  idx = np.array(list(itertools.product(*[range(n) for n in size])))
  return KPointGrid.create(size, idx / np.array(size))


def get_kpoint_mappings(
  kpoints: Float[Array, 'nk 3'],
  kgrid_size: Union[Sequence[int], Int[Array, '3']],
  atol: float = 1e-6,
) -> Tuple[np.ndarray, np.ndarray]:
  """Map between the k-point list and the ``x, y, z`` grid indices.

  Args:
      kpoints (Float[Array, 'nk 3']): fractional coordinates of a uniform grid,
        in any order, possibly shifted by reciprocal lattice vectors.
      kgrid_size (Sequence[int]): the grid size.
      atol (float): tolerance for a k-point to sit on the grid.

  Returns:
      Tuple[np.ndarray, np.ndarray]: ``k_xyz`` of shape (nk, 3), the grid
      indices of each k-point, and ``xyz_k`` of shape (nx, ny, nz), the
      k-point index of each grid point.

  Raises:
      KGridError: if the k-points do not cover the grid exactly once.
  """
  size = np.array(check_grid_size(kgrid_size))
  kpoints = np.asarray(kpoints, dtype=float).reshape(-1, 3)
  if kpoints.shape[0] != np.prod(size):
    raise KGridError(
      f"number of k-points {kpoints.shape[0]} != nx * ny * nz of grid "
      f"{tuple(size)}."
    )
  scaled = kpoints * size
  k_xyz = np.rint(scaled).astype(int)
  if not np.allclose(scaled, k_xyz, atol=atol):
    raise KGridError(f"k-points are not on the {tuple(size)} grid.")
  k_xyz = np.mod(k_xyz, size)

  xyz_k = -np.ones(tuple(size), dtype=int)
  xyz_k[k_xyz[:, 0], k_xyz[:, 1], k_xyz[:, 2]] = np.arange(kpoints.shape[0])
  if np.any(xyz_k < 0):
    raise KGridError("k-points do not cover the uniform grid.")
  return k_xyz, xyz_k
