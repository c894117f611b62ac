import jax
import jax.numpy as jnp

from gtoform.integrals import gaussian
from gtoform.integrals import moments


def _laplacian_3d_from_overlap_1d(
    S_x: jax.Array,
    S_y: jax.Array,
    S_z: jax.Array,
    b: jax.Array,
    k: tuple,
) -> jax.Array:
    """Computes a 3d Laplacian matrix from the 1d overlap matrices.

    Formula:
      T[ix, iy, iz, jx, jy, jz] =
          T_x[ix, jx] * S_y[iy, jy] * S_z[iz, jz] +
          S_x[ix, jx] * T_y[iy, jy] * S_z[iz, jz] +
          S_x[ix, jx] * S_y[iy, jy] * T_z[iz, jz]
    Args:
      S_x, S_y, S_z: The 1d overlap matrices.
        They all have the same shape (nrows, ncols) with ncols >= 3.
      b: The exponent of the ket.
      k: The components of the ket's London wave vector, or Nones.

    Returns:
      A 6-dimensional array T with shape
      (nrows, nrows, nrows, ncols-2, ncols-2, ncols-2)
    """
    T_x = moments.phase_laplacian_1d(S_x, b, k[0])
    T_y = moments.phase_laplacian_1d(S_y, b, k[1])
    T_z = moments.phase_laplacian_1d(S_z, b, k[2])

    term_x = jnp.einsum("ad,be,cf->abcdef", T_x, S_y[:, :-2], S_z[:, :-2])
    term_y = jnp.einsum("ad,be,cf->abcdef", S_x[:, :-2], T_y, S_z[:, :-2])
    term_z = jnp.einsum("ad,be,cf->abcdef", S_x[:, :-2], S_y[:, :-2], T_z)

    return term_x + term_y + term_z


def laplacian_3d(
    g1: gaussian.GaussianBasis3d, g2: gaussian.GaussianBasis3d
) -> jax.Array:
    """Calculates the matrix elements of the Laplacian operator.

    Formula:
        G1(x,y,z) = e^(-i k1.r) (x-Ax)^ix (y-Ay)^iy (z-Az)^iz e^(-a|r-A|^2)
        G2(x,y,z) = e^(-i k2.r) (x-Bx)^jx (y-By)^jy (z-Bz)^jz e^(-b|r-B|^2)

        T[ix,iy,iz,jx,jy,jz] = integral
            conj(G1(x,y,z)) * (d^2/dx^2 + d^2/dy^2 + d^2/dz^2)G2(x,y,z)
            dx dy dz

    The derivatives act on the phase factor of G2 as well.

    Returns:
        A 6-dimensional array T with shape: (L1+1, L1+1, L1+1, L2+1, L2+1, L2+1)
    """
    # Second derivatives need overlaps with the ket degree raised by 2.
    S_x, S_y, S_z = moments.boosted_overlap_1d_xyz(g1, g2, 2)

    return _laplacian_3d_from_overlap_1d(
        S_x, S_y, S_z, jnp.asarray(g2.exponent), gaussian.phase_components(g2)
    )


def kinetic_3d(
    g1: gaussian.GaussianBasis3d, g2: gaussian.GaussianBasis3d
) -> jax.Array:
    """The kinetic energy matrix elements, -1/2 times laplacian_3d."""
    return -0.5 * laplacian_3d(g1, g2)
