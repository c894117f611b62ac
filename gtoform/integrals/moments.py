"""One dimensional derivative and moment matrices.

Every function here takes a 1D overlap matrix S whose ket degree has been
boosted, i.e. S has more columns than the ket's max_degree + 1, and returns
a matrix with ncols = number of columns of the result.

The ket function is (x-B)^j e^(-b(x-B)^2), possibly times e^(-ikx). The
bra may carry its own phase: it is already part of S.
"""

import jax
import jax.numpy as jnp

from gtoform.integrals import gaussian
from gtoform.integrals import overlap


def boosted_overlap_1d_xyz(
    g1: gaussian.GaussianBasis3d, g2: gaussian.GaussianBasis3d, boost: int
) -> tuple[jax.Array, jax.Array, jax.Array]:
    """The 1D overlap matrices along x, y, z with the ket degree raised.

    Returns:
      Three arrays of shape (g1.max_degree + 1, g2.max_degree + boost + 1).
    """
    return overlap.overlap_1d_xyz(
        g1, g2.with_max_degree(g2.max_degree + boost)
    )


def derivative_1d(S: jax.Array, b: jax.Array, ncols: int) -> jax.Array:
    """The matrix elements of d/dx acting on the real part of the ket.

    Formula:
      D[i, j] = j S[i, j-1] - 2b S[i, j+1]

    Requires S.shape[1] >= ncols + 1.
    """
    j_vec = jnp.arange(ncols)[None, :]

    lowered = jnp.pad(S[:, : ncols - 1], ((0, 0), (1, 0)))
    return j_vec * lowered - 2 * b * S[:, 1 : ncols + 1]


def phase_derivative_1d(
    S: jax.Array, b: jax.Array, k: jax.Array | None, ncols: int
) -> jax.Array:
    """The matrix elements of d/dx acting on the full ket, phase included.

    Formula:
      Dk[i, j] = D[i, j] - i k S[i, j]
    """
    D = derivative_1d(S, b, ncols)
    if k is None:
        return D
    return D - 1j * k * S[:, :ncols]


def first_moment_1d(
    S: jax.Array, B: jax.Array, origin: jax.Array, ncols: int
) -> jax.Array:
    """The matrix elements of (x - origin).

    Formula:
      M1[i, j] = S[i, j+1] + (B - origin) S[i, j]

    Requires S.shape[1] >= ncols + 1.
    """
    return S[:, 1 : ncols + 1] + (B - origin) * S[:, :ncols]


def second_moment_1d(
    S: jax.Array, B: jax.Array, origin: jax.Array, ncols: int
) -> jax.Array:
    """The matrix elements of (x - origin)^2.

    Formula:
      M2[i, j] = S[i, j+2] + 2(B - origin) S[i, j+1] + (B - origin)^2 S[i, j]

    Requires S.shape[1] >= ncols + 2.
    """
    BO = B - origin
    return (
        S[:, 2 : ncols + 2]
        + 2 * BO * S[:, 1 : ncols + 1]
        + BO**2 * S[:, :ncols]
    )


def laplacian_1d(S: jax.Array, b: jax.Array) -> jax.Array:
    """Computes the 1D matrix of d^2/dx^2 acting on the real part of the ket.

    Formula:
    T[i, j] = j(j-1)S[i, j-2] - 2b(2j+1)S[i, j] + 4b^2 S[i, j+2]

    Args:
        S: The 1D overlap matrix. Shape: (nrows, ncols) with ncols >= 3.
        b: The exponent of the ket.

    Returns:
        The matrix T with shape (nrows, ncols-2).
    """
    nrows_t, ncols_t = S.shape[0], S.shape[1] - 2

    j_vec = jnp.arange(ncols_t)[None, :]

    # j(j-1) S[i, j-2] only contributes for j >= 2.
    if ncols_t > 2:
        term1_vals = (j_vec[:, 2:] * (j_vec[:, 2:] - 1)) * S[:, :-4]
        term1 = jnp.pad(term1_vals, ((0, 0), (2, 0)))
    else:
        term1 = jnp.zeros((nrows_t, ncols_t), dtype=S.dtype)

    term2 = -2 * b * (2 * j_vec + 1) * S[:, :-2]
    term3 = 4 * b**2 * S[:, 2:]

    return term1 + term2 + term3


def phase_laplacian_1d(
    S: jax.Array, b: jax.Array, k: jax.Array | None
) -> jax.Array:
    """The matrix elements of d^2/dx^2 acting on the full ket.

    Formula:
      Tk[i, j] = T[i, j] - 2ik D[i, j] - k^2 S[i, j]
    """
    T = laplacian_1d(S, b)
    if k is None:
        return T

    ncols = S.shape[1] - 2
    D = derivative_1d(S, b, ncols)
    return T - 2j * k * D - k**2 * S[:, :ncols]
