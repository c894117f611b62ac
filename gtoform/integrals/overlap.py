from typing import NamedTuple
import functools

import jax
from jax import jit
import jax.numpy as jnp
import numpy as np

from gtoform.integrals import gaussian


class _VerticalTransferParams(NamedTuple):
    PA: jax.Array  # P - A
    inv_2p: jax.Array  # 1/(2p)


def _vertical_transfer_step(
    params: _VerticalTransferParams,
    carry: tuple[jax.Array, jax.Array],
    i: jax.Array,
) -> tuple[tuple[jax.Array, jax.Array], jax.Array]:
    """Computes the next recurrence step for the vertical transfer.

    Formula: S[i] = (P - A) * S[i-1] + ((i-1)/2p) * S[i-2]

    Args:
      params: The static coefficients (P-A, 1/2p).
      carry: A tuple of scalars (S[i-1], S[i-2]) representing the previous
        two vertical steps.
      i: The current vertical index (recurrence depth).

    Returns:
      A tuple (new_carry, output):
        new_carry: (S[i], S[i-1]) for the next step.
        output: S[i] to be stacked into the result array.
    """
    PA, inv_2p = params
    s_im1, s_im2 = carry

    s_i = PA * s_im1 + (i - 1) * inv_2p * s_im2

    return (s_i, s_im1), s_i


def _vertical_transfer(
    s_base: jax.Array,
    size: int,
    A: jax.Array,
    product: gaussian.GaussianProduct,
) -> jax.Array:
    """Computes the vertical recurrence column S[:, 0].

    Returns:
      An array S[:,0] of shape (size,).
    """
    params = _VerticalTransferParams(PA=product.P - A, inv_2p=1 / (2 * product.p))
    step_fn = functools.partial(_vertical_transfer_step, params)

    init_carry = (s_base, jnp.zeros_like(s_base))
    indices = jnp.arange(1, size)

    _, s_rest = jax.lax.scan(step_fn, init_carry, indices)
    return jnp.concatenate([s_base[None], s_rest])


def _horizontal_transfer_step(
    AB: jax.Array, s_jm1: jax.Array, j: jax.Array
) -> tuple[jax.Array, jax.Array]:
    """Computes the next column (j) from the previous column (j-1).

    Formula: S[i, j] = (A - B) * S[i, j-1] + S[i+1, j-1]

    S[i,j-1] is assumed valid for 0 <= i < N - (j-1), so S[i,j] is valid for
    0 <= i < N - j.
    """
    s_jm1_up = jnp.roll(s_jm1, shift=-1, axis=0)
    s_j = AB * s_jm1 + s_jm1_up
    return s_j, s_j


def _horizontal_transfer(
    s_j0: jax.Array, max_degree: int, AB: jax.Array
) -> jax.Array:
    """Applies horizontal transfer to generate columns 1 through max_degree.

    Returns:
      The overlap matrix S of shape (N, max_degree + 1).
    """
    step_fn = functools.partial(_horizontal_transfer_step, AB)
    indices = jnp.arange(1, max_degree + 1)

    _, s_rest = jax.lax.scan(step_fn, s_j0, indices)
    return jnp.hstack([s_j0[:, None], s_rest.T])


@jit
def overlap_1d(
    g1: gaussian.GaussianBasis1d, g2: gaussian.GaussianBasis1d
) -> jax.Array:
    """Computes the 1D overlap matrix between two Gaussians.

    S[i, j] = integral conj(G1_i(x)) G2_j(x) dx

    The bra is conjugated, so with London phases the matrix is complex.

    Returns:
      An array S of shape (g1.max_degree + 1, g2.max_degree + 1).
    """
    product = gaussian.gaussian_product_1d(g1, g2)

    # S[0,0]
    s_00 = jnp.sqrt(np.pi / product.p) * product.K

    # S[:, 0] with shape (g1.max_degree + g2.max_degree + 1,)
    s_col0 = _vertical_transfer(
        s_00, g1.max_degree + g2.max_degree + 1, jnp.asarray(g1.center), product
    )

    S = _horizontal_transfer(
        s_col0, g2.max_degree, jnp.asarray(g1.center - g2.center)
    )

    return S[: g1.max_degree + 1, :]


def overlap_1d_xyz(
    g1: gaussian.GaussianBasis3d, g2: gaussian.GaussianBasis3d
) -> tuple[jax.Array, jax.Array, jax.Array]:
    """The 1D overlap matrices of two 3D Gaussians along x, y and z."""
    return tuple(
        overlap_1d(
            gaussian.gaussian_3d_to_1d(g1, dim),
            gaussian.gaussian_3d_to_1d(g2, dim),
        )
        for dim in range(3)
    )


def tensor_3d_from_1d(
    S_x: jax.Array, S_y: jax.Array, S_z: jax.Array
) -> jax.Array:
    """Compute a 3d matrix from 1d factors.

    Formula:
      S[ix, iy, iz, jx, jy, jz] = S_x[ix, jx] * S_y[iy, jy] * S_z[iz, jz]

    Returns:
      An array S of shape
      (S_x.shape[0], S_y.shape[0], S_z.shape[0],
       S_x.shape[1], S_y.shape[1], S_z.shape[1])
    """
    return jnp.einsum("ad,be,cf->abcdef", S_x, S_y, S_z)


def overlap_3d(
    g1: gaussian.GaussianBasis3d, g2: gaussian.GaussianBasis3d
) -> jax.Array:
    """Computes the overlap integrals between two 3D Gaussian shells.

    Formula:
        G1(x,y,z) = e^(-i k1.r) (x-Ax)^ix (y-Ay)^iy (z-Az)^iz e^(-a|r-A|^2)
        G2(x,y,z) = e^(-i k2.r) (x-Bx)^jx (y-By)^jy (z-Bz)^jz e^(-b|r-B|^2)

        S[ix,iy,iz,jx,jy,jz] = integral conj(G1(x,y,z)) G2(x,y,z) dx dy dz

    Returns:
        A 6-dimensional array S with shape:
        (L1+1, L1+1, L1+1, L2+1, L2+1, L2+1)
    """
    return tensor_3d_from_1d(*overlap_1d_xyz(g1, g2))
