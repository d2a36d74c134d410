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
r"""Minimal-distance replica selection (MDRS).

For the Wannier function (WF) :math:`m` in the home cell and the WF
:math:`n` in cell :math:`\mathbf{R}`, MDRS selects the supercell translations
:math:`\mathbf{T}` that minimize

.. math::

  \Vert \boldsymbol{\tau}_n + \mathbf{R} + \mathbf{T} - \boldsymbol{\tau}_m
  \Vert,

where :math:`\boldsymbol{\tau}` are the WF centers. All the equally-minimal
translations are kept, so that the interpolation averages over true ties.

See: G. Pizzi et al., J. Phys.: Condens. Matter 32, 165902 (2020).
"""
from typing import Optional, Sequence, Union

import numpy as np
from absl import logging
from jaxtyping import Array, Float, Int
from tqdm import tqdm

from . import const
from ..errors import DegeneracyOverflowError, SearchWindowError
from .neighbors import NearestNeighborIndex
from .rdomain import (
  MDRSRspaceDomain,
  WSRspaceDomain,
  check_grid_size,
  generate_ws_rspace_domain,
)
from .supercell import make_supercell, sort_points
from .utils import cartesian_to_fractional, fractional_to_cartesian


def generate_mdrs_rspace_domain(
  ws_domain: WSRspaceDomain,
  rgrid_size: Union[Sequence[int], Int[Array, '3']],
  centers: Float[Array, 'nw 3'],
  atol: float = const.W90_WS_DISTANCE_TOL,
  max_cell: int = const.W90_WS_SEARCH_SIZE,
  max_neighbors: int = const.W90_WS_MAX_NEIGHBORS,
  verbose: bool = False,
) -> MDRSRspaceDomain:
  """Refine a Wigner-Seitz domain with the MDRS T-vectors.

  Args:
      ws_domain (WSRspaceDomain): the Wigner-Seitz domain.
      rgrid_size (Sequence[int]): the k-grid size.
      centers (Float[Array, 'nw 3']): WF centers in fractional coordinates.
      atol (float): tolerance for checking degeneracy.
      max_cell (int): number of neighboring supercells to be searched. One
        more cell is searched in case the WF centers drift away from the
        home cell.
      max_neighbors (int): maximal number of degenerate T-vectors.
      verbose (bool): show a progress bar over the R-vectors.

  Returns:
      MDRSRspaceDomain: the R-vectors and degeneracies of ``ws_domain``,
      augmented with T-vectors and their degeneracies.

  Raises:
      DegeneracyOverflowError: if the number of degenerate T-vectors of some
        ``(R, m, n)`` exceeds ``max_neighbors``.
  """
  rgrid_size = check_grid_size(rgrid_size)
  centers = np.asarray(centers, dtype=float)
  if centers.size == 0:
    raise ValueError("centers is empty.")
  centers = centers.reshape(-1, 3)
  n_wann = centers.shape[0]
  n_Rvecs = ws_domain.n_Rvectors
  lattice = ws_domain.lattice

  # 1. the WS cell around the origin, to check whether WF |nR> is inside |m0>
  max_cell_1 = max_cell + 1
  supercell, _ = make_supercell(
    np.zeros([1, 3], dtype=int),
    [range(-max_cell_1 * r, max_cell_1 * r + 1, r) for r in rgrid_size]
  )
  # the base point is the origin, supercell points are the translations
  supercell, _ = sort_points(supercell)
  supercell_cart = fractional_to_cartesian(lattice, supercell)
  n_trans = supercell.shape[0]

  # 2. distances of the translated WF centers to the supercell lattice
  index = NearestNeighborIndex(supercell_cart)
  # one more neighbor than the cap, to detect overflowing degeneracies
  n_neighbors = min(max_neighbors + 1, len(index))

  Tvectors = np.zeros((n_Rvecs, n_wann, n_wann, max_neighbors, 3), dtype=int)
  n_Tdegens = np.zeros((n_Rvecs, n_wann, n_wann), dtype=int)

  for iR in tqdm(range(n_Rvecs), disable=not verbose):
    R = ws_domain.Rvectors[iR]
    # translation vector of |nR> WF center relative to |m0> WF center
    t_frac = centers[None, :, :] + R[None, None, :] - centers[:, None, :]
    t_cart = fractional_to_cartesian(lattice, t_frac.reshape(-1, 3))
    # (nw * nw, ntrans, 3)
    points = t_cart[:, None, :] + supercell_cart[None, :, :]
    dists, _ = index.query(points.reshape(-1, 3), n_neighbors)
    dists = dists.reshape(n_wann * n_wann, n_trans, n_neighbors)

    # a point as close to the origin as to its nearest lattice point is
    # inside the WS cell
    d = dists[..., 0]
    keep = np.abs(d - np.linalg.norm(points, axis=-1)) < atol
    degens = keep.sum(axis=-1)
    # equidistant lattice points of a kept point, capped at n_neighbors
    ties = np.sum(np.abs(dists - d[..., None]) < atol, axis=-1)
    degens_max = np.maximum(degens, np.where(keep, ties, 0).max(axis=-1))

    if np.any(degens_max > max_neighbors):
      p = int(np.argmax(degens_max))
      raise DegeneracyOverflowError(
        f"T-vectors of R-vector {R} and WF pair {divmod(p, n_wann)}",
        degens_max[p],
        max_neighbors,
      )
    if np.any(degens == 0):
      p = int(np.argmin(degens))
      raise SearchWindowError(
        f"no T-vector found for R-vector {R} and WF pair "
        f"{divmod(p, n_wann)}, max_cell={max_cell} is too small."
      )

    for p in range(n_wann * n_wann):
      m, n = divmod(p, n_wann)
      Tvectors[iR, m, n, :degens[p]] = supercell[keep[p]]
      n_Tdegens[iR, m, n] = degens[p]

  logging.info(
    f"MDRS: {n_Rvecs} R-vectors, {n_wann} WFs, "
    f"max T-vector degeneracy {n_Tdegens.max()}."
  )
  return MDRSRspaceDomain(
    lattice=ws_domain.lattice,
    Rvectors=ws_domain.Rvectors,
    n_Rdegens=ws_domain.n_Rdegens,
    Tvectors=Tvectors,
    n_Tdegens=n_Tdegens,
  )


def generate_rspace_domain(
  lattice: Float[Array, '3 3'],
  rgrid_size: Union[Sequence[int], Int[Array, '3']],
  centers: Optional[Float[Array, 'nw 3']] = None,
  mdrs: bool = True,
  centers_cartesian: bool = False,
  atol: float = const.W90_WS_DISTANCE_TOL,
  max_cell: int = const.W90_WS_SEARCH_SIZE,
  max_neighbors: int = const.W90_WS_MAX_NEIGHBORS,
  verbose: bool = False,
) -> Union[WSRspaceDomain, MDRSRspaceDomain]:
  """Generate the R-space domain for Wannier interpolation.

  Args:
      lattice (Float[Array, '3 3']): each column is a lattice vector.
      rgrid_size (Sequence[int]): the k-grid size.
      centers (Float[Array, 'nw 3'], optional): WF centers in fractional
        coordinates, required for MDRS.
      mdrs (bool): whether to refine with MDRS. Defaults to True.
      centers_cartesian (bool): ``centers`` are Cartesian coordinates in Å
        instead of fractional ones. Defaults to False.
      atol (float): tolerance for checking degeneracy.
      max_cell (int): number of neighboring supercells to be searched.
      max_neighbors (int): maximal degeneracy that can be counted.
      verbose (bool): show a progress bar for MDRS.

  Returns:
      A :class:`WSRspaceDomain` or :class:`MDRSRspaceDomain`.
  """
  ws_domain = generate_ws_rspace_domain(
    lattice, rgrid_size, atol=atol, max_cell=max_cell,
    max_neighbors=max_neighbors
  )
  if not mdrs:
    return ws_domain
  if centers is None:
    raise ValueError("centers are required for the MDRS R-space domain.")
  if centers_cartesian:
    centers = cartesian_to_fractional(
      ws_domain.lattice, np.asarray(centers, dtype=float).reshape(-1, 3)
    )
  return generate_mdrs_rspace_domain(
    ws_domain, rgrid_size, centers, atol=atol, max_cell=max_cell,
    max_neighbors=max_neighbors, verbose=verbose
  )
