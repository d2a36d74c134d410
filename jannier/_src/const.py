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
"""Constants and wannier90-compatible defaults."""

# wannier90 input parameter `ws_distance_tol`.
W90_WS_DISTANCE_TOL = 1e-5
# wannier90 input parameter `ws_search_size`.
W90_WS_SEARCH_SIZE = 2
# number of nearest neighbors inspected when counting degeneracies.
W90_WS_MAX_NEIGHBORS = 8
# wannier90 input parameter `bands_num_points`.
W90_BANDS_NUM_POINTS = 100

KPATH_COORDINATE_TOL = 1e-8
KPATH_MAX_LABEL_TRIES = 10

LATTICE = "lattice"
CARTESIAN = "cartesian"
