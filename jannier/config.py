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

from typing import List, Optional

import yaml
from ml_collections import ConfigDict

from ._src import const


class JannierConfigDict(ConfigDict):
  ws_distance_tol: float
  ws_search_size: int
  ws_max_neighbors: int
  use_mdrs: bool
  centers_cartesian: bool
  kpath_num_points: int
  kpath_special_points: Optional[str]
  kpath: Optional[List]
  fourier_batch_size: int
  jax_enable_x64: bool
  verbose: bool


default_config = {
  "ws_distance_tol": const.W90_WS_DISTANCE_TOL,
  "ws_search_size": const.W90_WS_SEARCH_SIZE,
  "ws_max_neighbors": const.W90_WS_MAX_NEIGHBORS,
  "use_mdrs": True,
  "centers_cartesian": False,
  "kpath_num_points": const.W90_BANDS_NUM_POINTS,
  "kpath_special_points": None,
  "kpath": None,
  "fourier_batch_size": 1024,
  "jax_enable_x64": True,
  "verbose": True,
}


def get_config(config_file: Optional[str] = None) -> JannierConfigDict:
  if config_file is not None:
    with open(config_file, 'r') as file:
      config = yaml.safe_load(file)
    config = JannierConfigDict({**default_config, **config})

  else:
    config = JannierConfigDict(default_config)

  if config.ws_search_size < 1:
    raise ValueError(
      f"ws_search_size must be positive, got {config.ws_search_size}."
    )
  if config.fourier_batch_size < 1:
    raise ValueError(
      f"fourier_batch_size must be positive, got {config.fourier_batch_size}."
    )

  return config
