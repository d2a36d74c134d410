"""Test for calc_band_interpolation.py"""
import jax
import numpy as np
from absl.testing import absltest, parameterized

from jannier.calc import BandInterpolationOutput, band_interpolation
from jannier.calc.utils import create_kpath
from jannier.config import get_config
from jannier._src.kgrid import uniform_kgrid
from jannier._src.rdomain import MDRSRspaceDomain, WSRspaceDomain

jax.config.update("jax_enable_x64", True)

_KPOINT_PATH = [
  [("G", [0., 0., 0.]), ("X", [0.5, 0., 0.])],
  [("X", [0.5, 0., 0.]), ("M", [0.5, 0.5, 0.])],
]


class _TestBandInterpolation(parameterized.TestCase):

  def setUp(self):
    self.lattice = 2.5 * np.eye(3)
    self.kgrid = uniform_kgrid((4, 4, 4))
    kpoints = np.asarray(self.kgrid.kpoints)
    # two decoupled cosine bands
    band = -2 * np.cos(2 * np.pi * kpoints).sum(axis=-1)
    self.E = np.stack([band, band + 10], axis=1)
    self.A = np.broadcast_to(
      np.eye(2, dtype=complex), (self.kgrid.n_kpoints, 2, 2)
    )
    self.centers = np.zeros([2, 3])

  @parameterized.parameters(True, False)
  def test_calc(self, use_mdrs):
    config = get_config()
    config.use_mdrs = use_mdrs
    config.kpath_num_points = 20
    config.verbose = False
    output = band_interpolation(
      config, self.lattice, self.kgrid, self.E, self.A,
      centers=self.centers, kpoint_path=_KPOINT_PATH
    )
    self.assertIsInstance(output, BandInterpolationOutput)
    if use_mdrs:
      self.assertIsInstance(output.rdomain, MDRSRspaceDomain)
    else:
      self.assertIsInstance(output.rdomain, WSRspaceDomain)
    self.assertEqual(output.kpoints.shape, (41, 3))
    self.assertEqual(output.band_structure.shape, (41, 2))
    self.assertLen(output.x, 41)
    expected = -2 * np.cos(2 * np.pi * output.kpoints).sum(axis=-1)
    np.testing.assert_allclose(
      output.band_structure[:, 0], expected, atol=1e-10
    )
    np.testing.assert_allclose(
      output.band_structure[:, 1], expected + 10, atol=1e-10
    )

  def test_cartesian_centers(self):
    config = get_config()
    config.centers_cartesian = True
    config.kpath_num_points = 20
    config.verbose = False
    centers = np.array([[0.1, 0.2, 0.3], [0.3, 0.1, 0.2]])
    output = band_interpolation(
      config, self.lattice, self.kgrid, self.E, self.A,
      centers=centers @ self.lattice.T, kpoint_path=_KPOINT_PATH
    )
    config.centers_cartesian = False
    expected = band_interpolation(
      config, self.lattice, self.kgrid, self.E, self.A,
      centers=centers, kpoint_path=_KPOINT_PATH
    )
    np.testing.assert_array_equal(
      output.rdomain.n_Tdegens, expected.rdomain.n_Tdegens
    )
    np.testing.assert_allclose(
      output.band_structure, expected.band_structure, atol=1e-10
    )

  def test_mdrs_requires_centers(self):
    config = get_config()
    config.verbose = False
    with self.assertRaises(ValueError):
      band_interpolation(
        config, self.lattice, self.kgrid, self.E, self.A,
        kpoint_path=_KPOINT_PATH
      )

  def test_create_kpath(self):
    config = get_config()
    config.kpath_num_points = 10
    kpi = create_kpath(config, self.lattice, _KPOINT_PATH)
    self.assertEqual(kpi.n_kpoints, 21)

    config.kpath = _KPOINT_PATH
    self.assertEqual(create_kpath(config, self.lattice).n_kpoints, 21)

    config.kpath = None
    config.kpath_special_points = "GX"
    kpi = create_kpath(config, self.lattice)
    self.assertEqual(kpi.n_kpoints, 11)
    self.assertEqual(kpi.labels[0], {0: "G", 10: "X"})


if __name__ == '__main__':
  absltest.main()
