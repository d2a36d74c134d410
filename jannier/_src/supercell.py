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
"""Periodic images of point sets under integer lattice translations."""
import itertools
from typing import Sequence, Tuple

import numpy as np
from jaxtyping import Array, Int


def make_supercell(
  points: Int[Array, 'n 3'],
  ranges: Sequence[Sequence[int]],
) -> Tuple[np.ndarray, np.ndarray]:
  """Replicate ``points`` under every translation in the product of ``ranges``.

  The translations are enumerated with the first axis varying slowest and
  the last axis fastest; for each translation all base points are emitted in
  their input order.

  Example:

  .. code-block:: python

    supercell, translations = make_supercell(
      [[0, 0, 0]], [range(-2, 3, 2), range(-2, 3, 2), range(-2, 3, 2)]
    )
    # supercell.shape == (27, 3)

  Args:
      points (Int[Array, 'n 3']): base points, fractional coordinates.
      ranges (Sequence[Sequence[int]]): integer translations along each
        lattice direction, e.g. ``range(-c * n, c * n + 1, n)``.

  Returns:
      Tuple[np.ndarray, np.ndarray]: the supercell points and the translation
      that generated each of them, both of shape (num, 3).
  """
  points = np.asarray(points).reshape(-1, 3)
  ranges = [np.asarray(list(r), dtype=int) for r in ranges]
  if len(ranges) != 3:
    raise ValueError(f"ranges should have 3 elements, got {len(ranges)}.")
  for i, r in enumerate(ranges):
    if r.size == 0:
      raise ValueError(f"the translation range along axis {i} is empty.")

  translations = np.array(list(itertools.product(*ranges)), dtype=int)
  # (ntrans, npoints, 3)
  supercell = translations[:, None, :] + points[None, :, :]
  translations = np.broadcast_to(translations[:, None, :], supercell.shape)
  return supercell.reshape(-1, 3), np.array(translations).reshape(-1, 3)


def sort_points(points: Int[Array, 'n 3']) -> Tuple[np.ndarray, np.ndarray]:
  """Sort points lexicographically so that the last axis varies fastest.

  This is the R-vector order of wannier90.

  Returns:
      Tuple[np.ndarray, np.ndarray]: the sorted points and the permutation
      applied, i.e. ``sorted == points[perm]``.
  """
  points = np.asarray(points)
  perm = np.lexsort((points[:, 2], points[:, 1], points[:, 0]))
  return points[perm], perm


def unique_points(points: Int[Array, 'n 3']) -> np.ndarray:
  """Unique rows of ``points``, keeping the order of first appearance."""
  points = np.asarray(points)
  _, idx = np.unique(points, axis=0, return_index=True)
  return points[np.sort(idx)]
