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
"""Band Structure Interpolation Calculator. """
import time
from dataclasses import dataclass
from typing import List, Optional, Union

import jax
import numpy as np
from absl import logging
from jaxtyping import Array, Complex, Float

from .._src.band import interpolate_bands
from .._src.kgrid import KPointGrid
from .._src.kpath import KPathInterpolant, get_kpoints, get_linear_path
from .._src.mdrs import generate_rspace_domain
from .._src.rdomain import MDRSRspaceDomain, WSRspaceDomain
from ..config import JannierConfigDict
from .utils import create_kpath, set_env_params


@dataclass
class BandInterpolationOutput:
  """Output of the band structure interpolation.

  Args:
    config (JannierConfigDict): The configuration for the calculation.
    rdomain (Union[WSRspaceDomain, MDRSRspaceDomain]): The R-space domain.
    kpath (KPathInterpolant): The interpolated k-path.
    kpoints (np.ndarray): The k-points of the path, fractional coordinates.
    x (np.ndarray): The linear distance along the path, for plotting.
    band_structure (jax.Array): The eigenvalues at each k-point.
  """
  config: JannierConfigDict
  rdomain: Union[WSRspaceDomain, MDRSRspaceDomain]
  kpath: KPathInterpolant
  kpoints: np.ndarray
  x: np.ndarray
  band_structure: jax.Array


def calc(
  config: JannierConfigDict,
  lattice: Float[Array, '3 3'],
  kgrid: KPointGrid,
  E: Float[Array, 'nk nb'],
  A: Complex[Array, 'nk nb nw'],
  centers: Optional[Float[Array, 'nw 3']] = None,
  kpoint_path: Optional[List] = None,
) -> BandInterpolationOutput:
  """Interpolate the band structure of Wannier functions along a k-path.

  Args:
      config (JannierConfigDict): The configuration for the calculation.
      lattice (Float[Array, '3 3']): each column is a lattice vector in Å.
      kgrid (KPointGrid): the uniform grid of ``E`` and ``A``.
      E (Float[Array, 'nk nb']): band energies on the grid.
      A (Complex[Array, 'nk nb nw']): gauge matrices on the grid.
      centers (Float[Array, 'nw 3'], optional): Wannier centers, required if
        ``config.use_mdrs``. Fractional coordinates, or Cartesian in Å if
        ``config.centers_cartesian``.
      kpoint_path (List, optional): the k-path segments, see
        :func:`jannier.kpath.generate_kpath`. Defaults to ``config.kpath``.

  Returns:
      BandInterpolationOutput: the interpolated band structure.
  """
  set_env_params(config)

  logging.info("===> Generating R-space domain...")
  start = time.time()
  rdomain = generate_rspace_domain(
    lattice,
    kgrid.size,
    centers=centers,
    mdrs=config.use_mdrs,
    centers_cartesian=config.centers_cartesian,
    atol=config.ws_distance_tol,
    max_cell=config.ws_search_size,
    max_neighbors=config.ws_max_neighbors,
    verbose=config.verbose,
  )
  logging.info(
    f"{type(rdomain).__name__}: {rdomain.n_Rvectors} R-vectors "
    f"({time.time() - start:.3f}s)."
  )

  logging.info("===> Generating K-path...")
  kpi = create_kpath(config, lattice, kpoint_path)
  kpoints = get_kpoints(kpi)
  logging.info(f"{kpoints.shape[0]} k-points generated.")

  logging.info("===> Interpolating band structure...")
  start = time.time()
  band_structure = interpolate_bands(
    rdomain, kgrid, E, A, kpoints, batch_size=config.fourier_batch_size
  )
  logging.info(f" Interpolation Time: {(time.time() - start):.3f}s.")

  return BandInterpolationOutput(
    config=config,
    rdomain=rdomain,
    kpath=kpi,
    kpoints=kpoints,
    x=get_linear_path(kpi),
    band_structure=band_structure,
  )
