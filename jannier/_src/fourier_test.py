"""Test for fourier.py"""
import jax
import numpy as np
from absl.testing import absltest, parameterized

from jannier.errors import KGridError, ShapeMismatchError
from jannier._src.fourier import (
  RspaceOperator,
  fourier_backward,
  fourier_forward,
  fourier_k_to_r,
  fourier_r_to_k,
)
from jannier._src.kgrid import KPointGrid, uniform_kgrid
from jannier._src.mdrs import generate_rspace_domain
from jannier._src.rdomain import BareRspaceDomain

jax.config.update("jax_enable_x64", True)

_FCC = 5.43 / 2 * np.array([[0., 1., 1.], [1., 0., 1.], [1., 1., 0.]])
_CENTERS = np.array([[0.1, 0.2, 0.3], [0.6, 0.4, 0.1], [0.25, 0.25, 0.25]])


def _random_operator(rng, nk, nw):
  return rng.normal(size=(nk, nw, nw)) + 1j * rng.normal(size=(nk, nw, nw))


class _TestFourier(parameterized.TestCase):

  def setUp(self):
    self.rng = np.random.default_rng(123)

  @parameterized.parameters(
    ((3, 3, 2), False),
    ((3, 3, 2), True),
    ((2, 2, 2), False),
    ((2, 2, 2), True),
  )
  def test_grid_roundtrip(self, size, mdrs):
    kgrid = uniform_kgrid(size)
    rdomain = generate_rspace_domain(_FCC, size, centers=_CENTERS, mdrs=mdrs)
    operator_k = _random_operator(self.rng, kgrid.n_kpoints, 3)
    operator_R = fourier_k_to_r(rdomain, operator_k, kgrid)
    self.assertIsInstance(operator_R, RspaceOperator)
    self.assertIsInstance(operator_R.rdomain, BareRspaceDomain)
    self.assertEqual(operator_R.n_kpoints, kgrid.n_kpoints)
    recovered = fourier_r_to_k(operator_R, kgrid.kpoints)
    np.testing.assert_allclose(recovered, operator_k, atol=1e-10)

  def test_origin_is_grid_sum(self):
    size = (3, 3, 3)
    kgrid = uniform_kgrid(size)
    rdomain = generate_rspace_domain(_FCC, size, mdrs=False)
    operator_k = _random_operator(self.rng, kgrid.n_kpoints, 2)
    operator_R = fourier_k_to_r(rdomain, operator_k, kgrid)
    np.testing.assert_allclose(
      operator_R[(0, 0, 0)], operator_k.sum(axis=0), atol=1e-10
    )
    with self.assertRaises(KeyError):
      operator_R[(10, 0, 0)]

  def test_constant_operator(self):
    size = (2, 3, 2)
    kgrid = uniform_kgrid(size)
    rdomain = generate_rspace_domain(_FCC, size, centers=_CENTERS)
    matrix = _random_operator(self.rng, 1, 3)[0]
    operator_k = np.broadcast_to(matrix, (kgrid.n_kpoints, 3, 3))
    operator_R = fourier_k_to_r(rdomain, operator_k, kgrid)
    kpoints = self.rng.uniform(size=(7, 3))
    np.testing.assert_allclose(
      fourier_r_to_k(operator_R, kpoints),
      np.broadcast_to(matrix, (7, 3, 3)),
      atol=1e-10,
    )

  def test_batching(self):
    Rvectors = np.array([[0, 0, 0], [1, 0, 0], [0, -1, 2]])
    operator_R = _random_operator(self.rng, 3, 2)
    kpoints = self.rng.uniform(size=(11, 3))
    full = fourier_backward(operator_R, Rvectors, kpoints, 5)
    batched = fourier_backward(operator_R, Rvectors, kpoints, 5, batch_size=4)
    np.testing.assert_allclose(full, batched, atol=1e-12)
    expected = np.einsum(
      "kr,rmn->kmn",
      np.exp(2j * np.pi * kpoints @ Rvectors.T),
      operator_R,
    ) / 5
    np.testing.assert_allclose(full, expected, atol=1e-12)

  def test_forward(self):
    kpoints = np.array([[0., 0., 0.], [0.5, 0., 0.]])
    operator_k = np.array([[[1.]], [[3.]]], dtype=complex)
    Rvectors = np.array([[0, 0, 0], [1, 0, 0]])
    np.testing.assert_allclose(
      fourier_forward(operator_k, kpoints, Rvectors)[:, 0, 0], [4., -2.]
    )

  def test_shape_mismatch(self):
    kpoints = np.zeros([2, 3])
    Rvectors = np.zeros([1, 3], dtype=int)
    with self.assertRaises(ShapeMismatchError):
      fourier_forward(np.zeros([3, 2, 2]), kpoints, Rvectors)
    with self.assertRaises(ShapeMismatchError):
      fourier_forward(np.zeros([2, 2]), kpoints, Rvectors)
    with self.assertRaises(ShapeMismatchError):
      fourier_backward(np.zeros([2, 2, 2]), Rvectors, kpoints, 1)

  def test_mdrs_operator_size(self):
    size = (2, 2, 2)
    kgrid = uniform_kgrid(size)
    rdomain = generate_rspace_domain(_FCC, size, centers=_CENTERS)
    with self.assertRaises(ShapeMismatchError):
      fourier_k_to_r(rdomain, _random_operator(self.rng, 8, 2), kgrid)

  def test_invalid_domain(self):
    kgrid = uniform_kgrid((2, 2, 2))
    rdomain = generate_rspace_domain(_FCC, (2, 2, 2), mdrs=False)
    bare = BareRspaceDomain.create(rdomain.lattice, rdomain.Rvectors)
    operator_k = _random_operator(self.rng, 8, 1)
    with self.assertRaises(TypeError):
      fourier_k_to_r(bare, operator_k, kgrid)
    with self.assertRaises(TypeError):
      fourier_k_to_r(rdomain, operator_k, kgrid.kpoints)

  def test_unvalidated_kgrid(self):
    rdomain = generate_rspace_domain(_FCC, (2, 2, 2), mdrs=False)
    operator_k = np.ones([8, 1, 1], dtype=complex)
    kpoints = uniform_kgrid((2, 2, 2)).kpoints
    # the dataclass constructor does not check the grid invariants
    reversed_grid = KPointGrid(size=(2, 2, 2), kpoints=kpoints[::-1])
    with self.assertRaises(KGridError):
      fourier_k_to_r(rdomain, operator_k, reversed_grid)
    short_grid = KPointGrid(size=(2, 2, 2), kpoints=kpoints[:4])
    with self.assertRaises(KGridError):
      fourier_k_to_r(rdomain, operator_k[:4], short_grid)

  @parameterized.parameters(0, -3)
  def test_invalid_batch_size(self, batch_size):
    with self.assertRaises(ValueError):
      fourier_backward(
        np.ones([1, 1, 1]), np.zeros([1, 3], dtype=int), np.zeros([2, 3]), 1,
        batch_size=batch_size
      )


if __name__ == '__main__':
  absltest.main()
