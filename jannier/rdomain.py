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
"""R-space domains for Wannier interpolation.

This module provides the Wigner-Seitz and minimal-distance replica selection
(MDRS) R-vectors, and the bare R-space domain of tight-binding models.
"""

from ._src.rdomain import (
  RspaceDomain,
  WSRspaceDomain,
  MDRSRspaceDomain,
  BareRspaceDomain,
  RvectorIndexMap,
  build_mapping_xyz_iR,
  generate_ws_rspace_domain,
)
from ._src.mdrs import (
  generate_mdrs_rspace_domain,
  generate_rspace_domain,
)
from ._src.supercell import make_supercell, sort_points

__all__ = [
  "RspaceDomain",
  "WSRspaceDomain",
  "MDRSRspaceDomain",
  "BareRspaceDomain",
  "RvectorIndexMap",
  "build_mapping_xyz_iR",
  "generate_ws_rspace_domain",
  "generate_mdrs_rspace_domain",
  "generate_rspace_domain",
  "make_supercell",
  "sort_points",
]
