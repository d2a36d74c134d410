"""Test for mdrs.py"""
import itertools

import numpy as np
from absl.testing import absltest, parameterized

from jannier.errors import DegeneracyOverflowError
from jannier._src.mdrs import (
  generate_mdrs_rspace_domain,
  generate_rspace_domain,
)
from jannier._src.rdomain import (
  MDRSRspaceDomain,
  WSRspaceDomain,
  generate_ws_rspace_domain,
)

_FCC = 5.43 / 2 * np.array([[0., 1., 1.], [1., 0., 1.], [1., 1., 0.]])


class _TestMDRS(parameterized.TestCase):

  def test_single_center_at_origin(self):
    # the WF at the origin is its own minimal image, the T-vectors are the
    # Wigner-Seitz images of R
    ws = generate_ws_rspace_domain(np.eye(3), (2, 2, 2))
    mdrs = generate_mdrs_rspace_domain(ws, (2, 2, 2), [[0., 0., 0.]])
    np.testing.assert_array_equal(mdrs.Rvectors, ws.Rvectors)
    np.testing.assert_array_equal(mdrs.n_Rdegens, ws.n_Rdegens)
    np.testing.assert_array_equal(mdrs.n_Tdegens[:, 0, 0], ws.n_Rdegens)
    i_origin = 13
    np.testing.assert_array_equal(mdrs.Rvectors[i_origin], [0, 0, 0])
    np.testing.assert_array_equal(mdrs.tvectors(i_origin, 0, 0), [[0, 0, 0]])

  @parameterized.parameters(
    (np.eye(3), (2, 2, 2), [[0., 0., 0.], [0.5, 0.5, 0.5]]),
    (_FCC, (3, 3, 3), [[0.1, 0.2, 0.3], [-0.25, 0.4, 0.9]]),
  )
  def test_minimal_distance(self, lattice, grid, centers):
    ws = generate_ws_rspace_domain(lattice, grid)
    mdrs = generate_mdrs_rspace_domain(ws, grid, centers)
    centers = np.asarray(centers)
    n_wann = len(centers)
    self.assertEqual(mdrs.Tvectors.shape[:3], (ws.n_Rvectors, n_wann, n_wann))

    # brute-force search of the minimal distance over supercell translations
    trans = np.array(list(itertools.product(range(-4, 5), repeat=3)))
    trans = trans * np.array(grid)
    for iR, R in enumerate(mdrs.Rvectors):
      for m, n in itertools.product(range(n_wann), repeat=2):
        t = centers[n] + R - centers[m]
        dists = np.linalg.norm((t + trans) @ lattice.T, axis=1)
        d_min = dists.min()
        expected = trans[np.abs(dists - d_min) < 1e-5]
        found = mdrs.tvectors(iR, m, n)
        self.assertEqual(mdrs.n_Tdegens[iR, m, n], len(expected))
        self.assertEqual(
          set(map(tuple, found)), set(map(tuple, expected))
        )

  def test_degeneracy_overflow(self):
    ws = generate_ws_rspace_domain(np.eye(3), (2, 2, 2))
    # R = (1, 1, 1) has 8 equally-distant images
    with self.assertRaises(DegeneracyOverflowError) as cm:
      generate_mdrs_rspace_domain(
        ws, (2, 2, 2), [[0., 0., 0.]], max_neighbors=4
      )
    self.assertGreater(cm.exception.degen, 4)

  def test_cartesian_centers(self):
    centers = np.array([[0.1, 0.2, 0.3], [-0.25, 0.4, 0.9]])
    fractional = generate_rspace_domain(_FCC, (2, 3, 2), centers)
    cartesian = generate_rspace_domain(
      _FCC, (2, 3, 2), centers @ _FCC.T, centers_cartesian=True
    )
    np.testing.assert_array_equal(cartesian.n_Tdegens, fractional.n_Tdegens)
    np.testing.assert_array_equal(cartesian.Tvectors, fractional.Tvectors)

  def test_empty_centers(self):
    ws = generate_ws_rspace_domain(np.eye(3), (2, 2, 2))
    with self.assertRaises(ValueError):
      generate_mdrs_rspace_domain(ws, (2, 2, 2), np.zeros([0, 3]))

  def test_generate_rspace_domain(self):
    ws = generate_rspace_domain(np.eye(3), (2, 2, 2), mdrs=False)
    self.assertIsInstance(ws, WSRspaceDomain)
    mdrs = generate_rspace_domain(np.eye(3), (2, 2, 2), [[0., 0., 0.]])
    self.assertIsInstance(mdrs, MDRSRspaceDomain)
    self.assertTrue(
      ws.allclose(
        WSRspaceDomain(
          lattice=mdrs.lattice,
          Rvectors=mdrs.Rvectors,
          n_Rdegens=mdrs.n_Rdegens,
        )
      )
    )
    with self.assertRaises(ValueError):
      generate_rspace_domain(np.eye(3), (2, 2, 2), mdrs=True)


if __name__ == '__main__':
  absltest.main()
