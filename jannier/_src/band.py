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
"""Band structure interpolation with Wannier functions."""
from typing import Optional, Union

import einops
import jax
import jax.numpy as jnp
from absl import logging
from jaxtyping import Array, Complex, Float

from ..errors import ShapeMismatchError
from .fourier import fourier_k_to_r, fourier_r_to_k
from .kgrid import KPointGrid
from .rdomain import MDRSRspaceDomain, WSRspaceDomain


def get_Hk(
  E: Float[Array, 'nk nb'], A: Complex[Array, 'nk nb nw']
) -> Complex[Array, 'nk nw nw']:
  r"""The Hamiltonian in the Wannier gauge,
  :math:`H(\mathbf{k}) = A^\dagger(\mathbf{k}) \, \mathrm{diag}(E(\mathbf{k}))
  \, A(\mathbf{k})`.

  Args:
      E (Float[Array, 'nk nb']): band energies at each k-point.
      A (Complex[Array, 'nk nb nw']): gauge matrices, from Bloch states to
        Wannier functions.

  Returns:
      Complex[Array, 'nk nw nw']: the Hamiltonian at each k-point.
  """
  E = jnp.asarray(E)
  A = jnp.asarray(A)
  if A.ndim != 3 or E.shape != A.shape[:2]:
    raise ShapeMismatchError("E", E.shape, "A", A.shape)
  return einops.einsum(jnp.conj(A), E, A, "k b m, k b, k b n -> k m n")


def hermitize(H: Complex[Array, '... n n']) -> Complex[Array, '... n n']:
  """Symmetrize a (stack of) matrix, ``(H + H^dagger) / 2``."""
  return (H + jnp.conj(jnp.swapaxes(H, -1, -2))) / 2


@jax.jit
def diagonalize(H: Complex[Array, 'nk n n']) -> Float[Array, 'nk n']:
  """Sorted eigenvalues of the hermitized matrices."""
  return jax.vmap(jnp.linalg.eigvalsh)(hermitize(H))


def interpolate_operator(
  rdomain: Union[WSRspaceDomain, MDRSRspaceDomain],
  operator_k: Complex[Array, 'nkg m n'],
  kgrid: KPointGrid,
  kpoints: Float[Array, 'nk 3'],
  batch_size: Optional[int] = None,
) -> Complex[Array, 'nk m n']:
  """Fourier-interpolate an operator from the k-grid to arbitrary k-points."""
  operator_R = fourier_k_to_r(rdomain, operator_k, kgrid)
  return fourier_r_to_k(operator_R, kpoints, batch_size=batch_size)


def interpolate_bands(
  rdomain: Union[WSRspaceDomain, MDRSRspaceDomain],
  kgrid: KPointGrid,
  E: Float[Array, 'nkg nb'],
  A: Complex[Array, 'nkg nb nw'],
  kpoints: Float[Array, 'nk 3'],
  batch_size: Optional[int] = None,
) -> Float[Array, 'nk nw']:
  """Interpolate the band structure at arbitrary k-points.

  Example:

  .. code-block:: python

    rdomain = generate_rspace_domain(lattice, kgrid.size, centers)
    kpi = interpolate_w90(lattice, kpoint_path, 100)
    bands = interpolate_bands(rdomain, kgrid, E, A, get_kpoints(kpi))

  Args:
      rdomain: the Wigner-Seitz or MDRS R-space domain of the k-grid.
      kgrid (KPointGrid): the uniform grid ``E`` and ``A`` are defined on.
      E (Float[Array, 'nkg nb']): band energies on the grid.
      A (Complex[Array, 'nkg nb nw']): gauge matrices on the grid.
      kpoints (Float[Array, 'nk 3']): target k-points, fractional.
      batch_size (int, optional): k-points per batch of the backward
        transform.

  Returns:
      Float[Array, 'nk nw']: eigenvalues at each target k-point, ascending.
  """
  H_k = get_Hk(E, A)
  if H_k.shape[0] != kgrid.n_kpoints:
    raise ShapeMismatchError(
      "E and A", H_k.shape, "kgrid.kpoints", kgrid.kpoints.shape
    )
  H_kpath = interpolate_operator(
    rdomain, H_k, kgrid, kpoints, batch_size=batch_size
  )
  logging.info(f"Diagonalizing at {H_kpath.shape[0]} k-points...")
  return diagonalize(H_kpath)
