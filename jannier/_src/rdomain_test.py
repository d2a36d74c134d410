"""Test for rdomain.py"""
import itertools

import numpy as np
from absl.testing import absltest, parameterized

from jannier.errors import DegeneracyOverflowError, LatticeSingularError
from jannier._src.rdomain import (
  BareRspaceDomain,
  build_mapping_xyz_iR,
  generate_ws_rspace_domain,
)

_FCC = 5.43 / 2 * np.array([[0., 1., 1.], [1., 0., 1.], [1., 1., 0.]])
_HEX = np.array(
  [[2.46, -1.23, 0.], [0., 2.13042249, 0.], [0., 0., 6.7]]
)
_TRICLINIC = np.array(
  [[3.1, 0.4, 0.3], [0.0, 3.7, 0.5], [0.0, 0.0, 4.2]]
)


class _TestWignerSeitz(parameterized.TestCase):

  def test_cubic_even_grid(self):
    domain = generate_ws_rspace_domain(np.eye(3), (2, 2, 2))
    # all of {-1, 0, 1}^3, points on the faces, edges and corners of the
    # Wigner-Seitz cell are shared by 2, 4 and 8 images
    self.assertEqual(domain.n_Rvectors, 27)
    np.testing.assert_array_equal(
      domain.Rvectors, list(itertools.product([-1, 0, 1], repeat=3))
    )
    expected = 2**np.sum(np.abs(domain.Rvectors), axis=1)
    np.testing.assert_array_equal(domain.n_Rdegens, expected)
    np.testing.assert_allclose(np.sum(1 / domain.n_Rdegens), 8)

  def test_cubic_odd_grid(self):
    domain = generate_ws_rspace_domain(np.eye(3), (3, 3, 3))
    self.assertEqual(domain.n_Rvectors, 27)
    np.testing.assert_array_equal(domain.n_Rdegens, np.ones(27))

  @parameterized.parameters(
    (_FCC, (4, 4, 4)),
    (_FCC, (3, 3, 3)),
    (_HEX, (3, 3, 2)),
    (_TRICLINIC, (2, 3, 4)),
    (np.diag([3., 4., 5.]), (1, 1, 1)),
  )
  def test_weights_sum_to_grid_size(self, lattice, grid):
    domain = generate_ws_rspace_domain(lattice, grid)
    np.testing.assert_allclose(np.sum(1 / domain.n_Rdegens), np.prod(grid))
    self.assertTrue(np.all(domain.n_Rdegens >= 1))
    self.assertTrue(np.all(domain.n_Rdegens <= 8))
    # distinct R-vectors
    self.assertEqual(
      np.unique(domain.Rvectors, axis=0).shape[0], domain.n_Rvectors
    )

  @parameterized.parameters((_FCC, (4, 4, 4)), (_HEX, (3, 3, 2)))
  def test_larger_search_is_stable(self, lattice, grid):
    domain_2 = generate_ws_rspace_domain(lattice, grid, max_cell=2)
    domain_3 = generate_ws_rspace_domain(lattice, grid, max_cell=3)
    self.assertTrue(domain_2.allclose(domain_3))
    domain_16 = generate_ws_rspace_domain(lattice, grid, max_neighbors=16)
    self.assertTrue(domain_2.allclose(domain_16))

  def test_wannier90_order(self):
    domain = generate_ws_rspace_domain(_FCC, (4, 4, 4))
    R = domain.Rvectors
    keys = R[:, 0] * 10000 + R[:, 1] * 100 + R[:, 2]
    self.assertTrue(np.all(np.diff(keys) > 0))

  def test_degeneracy_overflow(self):
    with self.assertRaises(DegeneracyOverflowError) as cm:
      generate_ws_rspace_domain(np.eye(3), (2, 2, 2), max_neighbors=2)
    self.assertGreater(cm.exception.degen, 2)

  def test_singular_lattice(self):
    with self.assertRaises(LatticeSingularError):
      generate_ws_rspace_domain(np.zeros([3, 3]), (2, 2, 2))

  def test_interface(self):
    domain = generate_ws_rspace_domain(np.eye(3), (3, 3, 3))
    self.assertLen(domain, 27)
    np.testing.assert_array_equal(domain[0], [-1, -1, -1])
    self.assertLen(list(domain), 27)
    self.assertIn("n_Rvectors  =  27", str(domain))
    np.testing.assert_allclose(domain.Rvectors_cartesian, domain.Rvectors)


class _TestBareDomain(parameterized.TestCase):

  def setUp(self):
    self.Rvectors = generate_ws_rspace_domain(_HEX, (3, 3, 2)).Rvectors

  def test_mapping(self):
    mapping = build_mapping_xyz_iR(self.Rvectors)
    for iR, R in enumerate(self.Rvectors):
      self.assertEqual(mapping[tuple(R)], iR + 1)
    np.testing.assert_array_equal(
      mapping.lookup(self.Rvectors), np.arange(1, len(self.Rvectors) + 1)
    )
    self.assertEqual(mapping[(100, 0, 0)], 0)
    self.assertEqual(mapping[(-100, -100, -100)], 0)

  def test_mapping_missing_entries(self):
    mapping = build_mapping_xyz_iR([[0, 0, 0], [2, 0, 0]])
    np.testing.assert_array_equal(mapping.shape, [3, 1, 1])
    self.assertEqual(mapping[(1, 0, 0)], 0)
    self.assertEqual(mapping[(2, 0, 0)], 2)

  def test_mapping_read_only(self):
    mapping = build_mapping_xyz_iR(self.Rvectors)
    with self.assertRaises(ValueError):
      mapping.table[0] = 1

  def test_create(self):
    domain = BareRspaceDomain.create(_HEX, self.Rvectors)
    self.assertEqual(domain.n_Rvectors, len(self.Rvectors))
    self.assertTrue(domain.allclose(BareRspaceDomain.create(_HEX, self.Rvectors)))
    with self.assertRaises(ValueError):
      BareRspaceDomain.create(_HEX, [[0, 0, 0], [0, 0, 0]])


if __name__ == '__main__':
  absltest.main()
