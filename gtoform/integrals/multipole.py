import jax
import jax.numpy as jnp

from gtoform.integrals import gaussian
from gtoform.integrals import moments
from gtoform.integrals import overlap

# The Cartesian components of the quadrupole, in output order.
QUADRUPOLE_COMPONENTS: tuple[tuple[int, int], ...] = (
    (0, 0),
    (0, 1),
    (0, 2),
    (1, 1),
    (1, 2),
    (2, 2),
)


def _moment_factors(
    g1: gaussian.GaussianBasis3d,
    g2: gaussian.GaussianBasis3d,
    origin: jax.Array,
    order: int,
) -> list[list[jax.Array]]:
    """The 1D moment matrices of order 0..order along x, y and z.

    Returns:
      A list factors with factors[dim][n] the matrix of (x_dim - o_dim)^n,
      each of shape (g1.max_degree + 1, g2.max_degree + 1).
    """
    ncols = g2.max_degree + 1
    B = jnp.asarray(g2.center)
    origin = jnp.asarray(origin)

    factors = []
    for dim, S in enumerate(moments.boosted_overlap_1d_xyz(g1, g2, order)):
        dim_factors = [S[:, :ncols]]
        if order >= 1:
            dim_factors.append(
                moments.first_moment_1d(S, B[dim], origin[dim], ncols)
            )
        if order >= 2:
            dim_factors.append(
                moments.second_moment_1d(S, B[dim], origin[dim], ncols)
            )
        factors.append(dim_factors)

    return factors


def dipole_3d(
    g1: gaussian.GaussianBasis3d,
    g2: gaussian.GaussianBasis3d,
    origin: jax.Array,
) -> jax.Array:
    """Computes the electronic dipole matrix elements -(r - origin).

    Formula:
        D[c,ix,iy,iz,jx,jy,jz] =
            -integral conj(G1(r)) (r_c - origin_c) G2(r) dr

    Returns:
        A 7-dimensional array with shape
        (3, L1+1, L1+1, L1+1, L2+1, L2+1, L2+1)
    """
    factors = _moment_factors(g1, g2, origin, order=1)

    components = []
    for c in range(3):
        powers = [1 if dim == c else 0 for dim in range(3)]
        components.append(
            overlap.tensor_3d_from_1d(
                *(factors[dim][powers[dim]] for dim in range(3))
            )
        )

    return -jnp.stack(components)


def quadrupole_3d(
    g1: gaussian.GaussianBasis3d,
    g2: gaussian.GaussianBasis3d,
    origin: jax.Array,
) -> jax.Array:
    """Computes the electronic quadrupole matrix elements
    -(r - origin)_a (r - origin)_b.

    The components (a, b) are ordered as in QUADRUPOLE_COMPONENTS:
    xx, xy, xz, yy, yz, zz.

    Returns:
        A 7-dimensional array with shape
        (6, L1+1, L1+1, L1+1, L2+1, L2+1, L2+1)
    """
    factors = _moment_factors(g1, g2, origin, order=2)

    components = []
    for a, b in QUADRUPOLE_COMPONENTS:
        powers = [0, 0, 0]
        powers[a] += 1
        powers[b] += 1
        components.append(
            overlap.tensor_3d_from_1d(
                *(factors[dim][powers[dim]] for dim in range(3))
            )
        )

    return -jnp.stack(components)
