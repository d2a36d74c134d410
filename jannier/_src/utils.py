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
"""Utility functions for lattice geometry."""
import numpy as np
from jaxtyping import Array, Float

from ..errors import LatticeSingularError


def check_lattice(lattice: Float[Array, '3 3'], tol: float = 1e-12) -> np.ndarray:
  """Validate a lattice matrix and return it as a float numpy array.

  Args:
      lattice (Float[Array, '3 3']): each COLUMN is a lattice vector.
      tol (float): determinants whose absolute value is below this threshold
        are considered singular. Defaults to 1e-12.

  Returns:
      np.ndarray: the lattice as a (3, 3) float array.

  Raises:
      LatticeSingularError: if the lattice is not invertible.
  """
  lattice = np.asarray(lattice, dtype=float)
  if lattice.shape != (3, 3):
    raise ValueError(f"lattice should be a 3x3 matrix, got {lattice.shape}.")
  det = np.linalg.det(lattice)
  if abs(det) < tol:
    raise LatticeSingularError(det)
  return lattice


def reciprocal_lattice(lattice: Float[Array, '3 3']) -> np.ndarray:
  r"""The reciprocal lattice :math:`2\pi (A^{-1})^T`, columns are vectors.

  Args:
      lattice (Float[Array, '3 3']): each column is a lattice vector.

  Returns:
      np.ndarray: each column is a reciprocal lattice vector.
  """
  lattice = check_lattice(lattice)
  return 2 * np.pi * np.linalg.inv(lattice).T


def fractional_to_cartesian(
  basis: Float[Array, '3 3'], points: Float[Array, 'n 3']
) -> np.ndarray:
  """Convert row-stacked fractional coordinates to Cartesian, ``basis @ x``."""
  return np.asarray(points, dtype=float) @ np.asarray(basis, dtype=float).T


def cartesian_to_fractional(
  basis: Float[Array, '3 3'], points: Float[Array, 'n 3']
) -> np.ndarray:
  """Convert row-stacked Cartesian coordinates to fractional w.r.t. ``basis``.
  """
  inv = np.linalg.inv(np.asarray(basis, dtype=float))
  return np.asarray(points, dtype=float) @ inv.T
