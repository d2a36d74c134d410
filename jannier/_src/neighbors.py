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
"""Nearest-neighbor queries on a fixed set of Cartesian points."""
from typing import Tuple

import numpy as np
from jaxtyping import Array, Float
from scipy.spatial import cKDTree


class NearestNeighborIndex:
  """A build-once k-d tree over a fixed point set.

  Args:
      points (Float[Array, 'n d']): Cartesian coordinates of the indexed
        points.
  """

  def __init__(self, points: Float[Array, 'n d']):
    self._points = np.array(points, dtype=float)
    self._points.flags.writeable = False
    self._tree = cKDTree(self._points)

  def __len__(self) -> int:
    return self._points.shape[0]

  @property
  def points(self) -> np.ndarray:
    return self._points

  def query(self, points: Float[Array, 'm d'],
            k: int) -> Tuple[np.ndarray, np.ndarray]:
    """The ``k`` nearest indexed points of every query point.

    ``k`` is clipped to the number of indexed points.

    Returns:
        Tuple[np.ndarray, np.ndarray]: distances and indices, both of shape
        (m, k), sorted by ascending distance.
    """
    points = np.asarray(points, dtype=float).reshape(-1, self._points.shape[1])
    k = max(1, min(int(k), len(self)))
    dists, idxs = self._tree.query(points, k=k)
    return dists.reshape(-1, k), idxs.reshape(-1, k)
