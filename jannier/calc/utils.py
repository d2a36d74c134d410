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
"""Utility functions for the calculations."""
from typing import List, Optional

import jax
from absl import logging
from jaxtyping import Array, Float

from .._src.kpath import KPathInterpolant, default_kpoint_path, interpolate_w90
from ..config import JannierConfigDict


def set_env_params(config: JannierConfigDict):
  if config.verbose:
    logging.set_verbosity(logging.INFO)
    logging.info('Verbose mode is on.')
    if config.jax_enable_x64:
      logging.info("Precision: Double (64 bit).")
    else:
      logging.info("Precision: Single (32 bit).")
  else:
    logging.set_verbosity(logging.WARNING)

  jax.config.update("jax_enable_x64", config.jax_enable_x64)


def create_kpath(
  config: JannierConfigDict,
  lattice: Float[Array, '3 3'],
  kpoint_path: Optional[List] = None,
) -> KPathInterpolant:
  """The interpolated k-path, from (in order of precedence) ``kpoint_path``,
  ``config.kpath`` or the ASE special points ``config.kpath_special_points``.
  """
  if kpoint_path is None:
    kpoint_path = config.kpath
  if kpoint_path is None:
    logging.info(
      f"Using the ASE high-symmetry path {config.kpath_special_points}."
    )
    kpoint_path = default_kpoint_path(lattice, config.kpath_special_points)
  return interpolate_w90(lattice, kpoint_path, config.kpath_num_points)
