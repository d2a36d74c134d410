"""Error modules.

(follows Flax: https://github.com/google/flax/blob/main/flax/errors.py)

=== When to create an error class?

If an error message requires more explanation than a one-liner, it is useful to
add it as a separate error class. The docstring of the class then tells the
user what went wrong and how to recover.

=== How to name the error class?

* If the error occurs when doing something, name the error
  <Verb><Object><TypeOfError>Error, the verb being optional when there is a
  single action involved.

* If there is no concrete action involved the only a description of the error
  is sufficient. For instance: KGridError, ShapeMismatchError, etc.
"""


class JannierError(Exception):

  def __init__(self, message):
    super().__init__(message)


class LatticeSingularError(JannierError):
  """The lattice matrix must be invertible. This error is raised when the
  determinant of the 3x3 lattice is (numerically) zero.

  Example:

    >>> from jannier._src.utils import reciprocal_lattice
    >>> reciprocal_lattice(np.zeros([3, 3]))

    >>> jannier.errors.LatticeSingularError: The lattice is singular,
    determinant 0.0.

  """

  def __init__(self, det):
    super().__init__(f"The lattice is singular, determinant {det}.")


class KGridError(JannierError):
  """The uniform k-point grid is inconsistent.

  A k-point grid of size (nx, ny, nz) must hold exactly nx * ny * nz k-points
  and its first k-point must be the origin, since the Fourier transforms assume
  this normalization and periodicity convention.

  Example:

    >>> KPointGrid.create((2, 2, 2), np.ones([8, 3]))

    >>> jannier.errors.KGridError: The first k-point must be the origin,
    got [1. 1. 1.].

  """

  def __init__(self, message):
    super().__init__(message)


class ShapeMismatchError(JannierError):
  """Two arrays that must describe the same k-points, bands, or Wannier
  functions have incompatible shapes. This is a programming-contract violation
  and is never recovered from.
  """

  def __init__(self, name_a, shape_a, name_b, shape_b):
    super().__init__(
      f"{name_a} has shape {tuple(shape_a)}, which is incompatible with "
      f"{name_b} of shape {tuple(shape_b)}."
    )


class DegeneracyOverflowError(JannierError):
  """The number of equidistant lattice images exceeds the neighbor search cap.

  The Wigner-Seitz and MDRS searches only look at a limited number of nearest
  neighbors (``max_neighbors``, 8 by default as in wannier90). If a point has
  more equally-distant images than that, the degeneracy cannot be counted. Try
  again with a larger ``max_neighbors`` (``ws_max_neighbors`` in the config).

  Example:

    >>> generate_ws_rspace_domain(lattice, (4, 4, 4), max_neighbors=2)

    >>> jannier.errors.DegeneracyOverflowError: Degeneracy 3 of R-vector
    [2 0 0] exceeds the neighbor search cap 2.

  """

  def __init__(self, what, degen, max_neighbors):
    super().__init__(
      f"Degeneracy {degen} of {what} exceeds the neighbor search cap "
      f"{max_neighbors}."
    )
    self.degen = degen


class SearchWindowError(JannierError):
  """The lattice translations searched are not enough to enclose the
  Wigner-Seitz cell. This happens for strongly skewed lattices or Wannier
  centers far away from the home cell. Increase ``max_cell``
  (``ws_search_size`` in the config).
  """

  def __init__(self, message):
    super().__init__(message)


class KPathSegmentError(JannierError):
  """Each k-path segment must be a pair of ``(label, coordinates)`` entries,
  and a path must contain at least one segment.

  Example:

    >>> generate_kpath(lattice, [[("G", [0, 0, 0])]])

    >>> jannier.errors.KPathSegmentError: Each segment should have 2 kpoints,
    got 1.

  """

  def __init__(self, message):
    super().__init__(message)


class KPathLabelError(JannierError):
  """No free suffix is left to disambiguate a repeated k-point label."""

  def __init__(self, label, max_tries):
    super().__init__(
      f"Cannot find a new label for {label} within {max_tries} tries."
    )
