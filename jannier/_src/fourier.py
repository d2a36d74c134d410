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
r"""Fourier transforms between k-space and R-space operators.

The forward transform brings an operator sampled on the uniform k-grid to
R-space,

.. math::

  O(\mathbf{R}) = \sum_{\mathbf{k}} e^{-i 2\pi \mathbf{k} \cdot \mathbf{R}}
  O(\mathbf{k}),

and the backward transform evaluates it at arbitrary k-points,

.. math::

  O(\mathbf{k}) = \frac{1}{N_k} \sum_{\mathbf{R}}
  e^{i 2\pi \mathbf{k} \cdot \mathbf{R}} O(\mathbf{R}),

with k-points in fractional coordinates and integer R-vectors. The
degeneracies of the Wigner-Seitz (and MDRS) domain are absorbed into the
R-space operator by :func:`fourier_k_to_r`, so that the backward transform is
a plain sum on a :class:`BareRspaceDomain`.
"""
from typing import Optional, Union

import chex
import einops
import jax.numpy as jnp
import numpy as np
from absl import logging
from jaxtyping import Array, Complex, Float, Int

from ..errors import ShapeMismatchError
from .kgrid import KPointGrid
from .rdomain import BareRspaceDomain, MDRSRspaceDomain, WSRspaceDomain


@chex.dataclass(frozen=True, eq=False, mappable_dataclass=False)
class RspaceOperator:
  """An operator in R-space, i.e. a tight-binding model.

  Args:
    rdomain (BareRspaceDomain): the R-vectors.
    operator (Complex[Array, 'nR m n']): the operator at each R-vector, with
      the degeneracies already absorbed.
    n_kpoints (int): number of k-points of the grid it was transformed from,
      the normalization of the backward transform.
  """
  rdomain: BareRspaceDomain
  operator: Complex[Array, 'nR m n']
  n_kpoints: int

  def __getitem__(self, Rvector) -> Complex[Array, 'm n']:
    """The operator at an R-vector given by its ``x, y, z`` components."""
    iR = self.rdomain.xyz_iR[tuple(Rvector)]
    if iR == 0:
      raise KeyError(f"R-vector {tuple(Rvector)} is not in the domain.")
    return self.operator[iR - 1]


def _check_operator(operator, name: str):
  if operator.ndim != 3:
    raise ShapeMismatchError(
      name, operator.shape, "a stack of matrices", ("num", "m", "n")
    )


def fourier_forward(
  operator_k: Complex[Array, 'nk m n'],
  kpoints: Float[Array, 'nk 3'],
  Rvectors: Int[Array, 'nR 3'],
) -> Complex[Array, 'nR m n']:
  """Forward Fourier transform, from k-space to R-space.

  Args:
      operator_k (Complex[Array, 'nk m n']): operator at each k-point.
      kpoints (Float[Array, 'nk 3']): fractional coordinates.
      Rvectors (Int[Array, 'nR 3']): integer R-vectors.

  Returns:
      Complex[Array, 'nR m n']: the plain (unweighted, unnormalized) sum.
  """
  operator_k = jnp.asarray(operator_k)
  kpoints = jnp.asarray(kpoints).reshape(-1, 3)
  _check_operator(operator_k, "operator_k")
  if operator_k.shape[0] != kpoints.shape[0]:
    raise ShapeMismatchError(
      "operator_k", operator_k.shape, "kpoints", kpoints.shape
    )
  Rvectors = jnp.asarray(Rvectors).reshape(-1, 3)
  phase = jnp.exp(-2j * jnp.pi * (kpoints @ Rvectors.T))
  return einops.einsum(phase, operator_k, "k r, k m n -> r m n")


def fourier_backward(
  operator_R: Complex[Array, 'nR m n'],
  Rvectors: Int[Array, 'nR 3'],
  kpoints: Float[Array, 'nk 3'],
  n_kpoints: int,
  batch_size: Optional[int] = None,
) -> Complex[Array, 'nk m n']:
  """Backward (non-uniform) Fourier transform, from R-space to k-space.

  The k-points are arbitrary, the sum is evaluated directly in batches of
  ``batch_size`` k-points to bound the memory of the phase matrix. This is a
  dense non-uniform DFT costing ``O(nk * nR)`` per matrix element, in place of
  a NUFFT (e.g. the type-2 transform of ``finufft``); it runs on any JAX
  backend and is exact to machine precision.

  Args:
      operator_R (Complex[Array, 'nR m n']): operator at each R-vector.
      Rvectors (Int[Array, 'nR 3']): integer R-vectors.
      kpoints (Float[Array, 'nk 3']): fractional coordinates.
      n_kpoints (int): the normalization, number of k-points of the uniform
        grid the operator was transformed from.
      batch_size (int, optional): number of k-points per batch. Defaults to
        None, all at once.

  Returns:
      Complex[Array, 'nk m n']: the operator at the k-points.
  """
  operator_R = jnp.asarray(operator_R)
  Rvectors = jnp.asarray(Rvectors).reshape(-1, 3)
  kpoints = jnp.asarray(kpoints).reshape(-1, 3)
  if batch_size is not None and batch_size < 1:
    raise ValueError(f"batch_size should be positive, got {batch_size}.")
  _check_operator(operator_R, "operator_R")
  if operator_R.shape[0] != Rvectors.shape[0]:
    raise ShapeMismatchError(
      "operator_R", operator_R.shape, "Rvectors", Rvectors.shape
    )

  def _backward(kpts):
    phase = jnp.exp(2j * jnp.pi * (kpts @ Rvectors.T))
    return einops.einsum(phase, operator_R, "k r, r m n -> k m n")

  num_k = kpoints.shape[0]
  if batch_size is None or num_k <= batch_size:
    operator_k = _backward(kpoints)
  else:
    operator_k = jnp.concatenate(
      [
        _backward(kpoints[i:i + batch_size])
        for i in range(0, num_k, batch_size)
      ],
      axis=0,
    )
  return operator_k / n_kpoints


def _absorb_mdrs(
  rdomain: MDRSRspaceDomain, operator_R: Complex[Array, 'nR m n']
):
  n_wann = rdomain.n_wann
  if operator_R.shape[1:] != (n_wann, n_wann):
    raise ShapeMismatchError(
      "operator", operator_R.shape, "T-vector degeneracies",
      rdomain.n_Tdegens.shape
    )
  n_T = rdomain.Tvectors.shape[3]
  valid = np.arange(n_T) < rdomain.n_Tdegens[..., None]
  # R + T of every valid (iR, m, n, iT)
  RT = rdomain.Rvectors[:, None, None, None, :] + rdomain.Tvectors
  iR, m, n, _ = np.nonzero(valid)
  Rvectors, inverse = np.unique(RT[valid], axis=0, return_inverse=True)
  inverse = inverse.reshape(-1)

  weights = 1.0 / (rdomain.n_Rdegens[iR] * rdomain.n_Tdegens[iR, m, n])
  values = operator_R[iR, m, n] * weights
  operator = jnp.zeros(
    (Rvectors.shape[0], n_wann, n_wann), dtype=operator_R.dtype
  ).at[inverse, m, n].add(values)
  return Rvectors, operator


def fourier_k_to_r(
  rdomain: Union[WSRspaceDomain, MDRSRspaceDomain],
  operator_k: Complex[Array, 'nk m n'],
  kgrid: KPointGrid,
) -> RspaceOperator:
  """Transform an operator on the uniform k-grid to a tight-binding model.

  The degeneracies of ``rdomain`` are absorbed into the operator: for the
  Wigner-Seitz domain ``O(R) / n_Rdegens``; for MDRS, ``O_mn(R)`` is
  distributed to every ``R + T`` with weight
  ``1 / (n_Rdegens * n_Tdegens)``.

  Args:
      rdomain: a :class:`WSRspaceDomain` or :class:`MDRSRspaceDomain`.
      operator_k (Complex[Array, 'nk m n']): operator on the grid k-points.
      kgrid (KPointGrid): the uniform grid, first k-point at the origin.

  Returns:
      RspaceOperator: the operator on a :class:`BareRspaceDomain`.

  Raises:
      KGridError: if ``kgrid`` has the wrong number of k-points or does not
        start at the origin.
  """
  if isinstance(rdomain, BareRspaceDomain):
    raise TypeError(
      "BareRspaceDomain has no degeneracies, it cannot be used for the "
      "forward Fourier transform."
    )
  if not isinstance(kgrid, KPointGrid):
    raise TypeError(f"kgrid should be a KPointGrid, got {type(kgrid)}.")
  kgrid.validate()

  operator_R = fourier_forward(operator_k, kgrid.kpoints, rdomain.Rvectors)

  if isinstance(rdomain, MDRSRspaceDomain):
    Rvectors, operator_R = _absorb_mdrs(rdomain, operator_R)
  else:
    Rvectors = rdomain.Rvectors
    operator_R = operator_R / jnp.asarray(rdomain.n_Rdegens)[:, None, None]

  logging.info(f"R-space operator on {Rvectors.shape[0]} R-vectors.")
  bare_domain = BareRspaceDomain.create(rdomain.lattice, Rvectors)
  return RspaceOperator(
    rdomain=bare_domain, operator=operator_R, n_kpoints=kgrid.n_kpoints
  )


def fourier_r_to_k(
  operator: RspaceOperator,
  kpoints: Float[Array, 'nk 3'],
  batch_size: Optional[int] = None,
) -> Complex[Array, 'nk m n']:
  """Evaluate a tight-binding model at arbitrary k-points."""
  return fourier_backward(
    operator.operator,
    operator.rdomain.Rvectors,
    kpoints,
    operator.n_kpoints,
    batch_size=batch_size,
  )
