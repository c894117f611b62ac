import jax
import jax.numpy as jnp

from gtoform.integrals import gaussian
from gtoform.integrals import moments
from gtoform.integrals import overlap


def _phase_derivatives(
    Ss: tuple[jax.Array, ...], g2: gaussian.GaussianBasis3d, ncols: int
) -> list[jax.Array]:
    b = jnp.asarray(g2.exponent)
    return [
        moments.phase_derivative_1d(S, b, k, ncols)
        for S, k in zip(Ss, gaussian.phase_components(g2))
    ]


def linear_momentum_3d(
    g1: gaussian.GaussianBasis3d, g2: gaussian.GaussianBasis3d
) -> jax.Array:
    """Computes the linear momentum matrix elements -i nabla.

    Formula:
        P[c,ix,iy,iz,jx,jy,jz] =
            -i integral conj(G1(r)) d/dr_c G2(r) dr

    The derivative acts on the phase factor of G2 as well.

    Returns:
        A complex 7-dimensional array with shape
        (3, L1+1, L1+1, L1+1, L2+1, L2+1, L2+1)
    """
    ncols = g2.max_degree + 1
    Ss = moments.boosted_overlap_1d_xyz(g1, g2, 1)
    Ds = _phase_derivatives(Ss, g2, ncols)
    S0s = [S[:, :ncols] for S in Ss]

    components = []
    for c in range(3):
        factors = [Ds[dim] if dim == c else S0s[dim] for dim in range(3)]
        components.append(overlap.tensor_3d_from_1d(*factors))

    return -1j * jnp.stack(components)


def angular_momentum_3d(
    g1: gaussian.GaussianBasis3d,
    g2: gaussian.GaussianBasis3d,
    origin: jax.Array,
) -> jax.Array:
    """Computes the angular momentum matrix elements -i (r - origin) x nabla.

    Formula:
        L_x = -i [(y - o_y) d/dz - (z - o_z) d/dy]
        L_y = -i [(z - o_z) d/dx - (x - o_x) d/dz]
        L_z = -i [(x - o_x) d/dy - (y - o_y) d/dx]

    Returns:
        A complex 7-dimensional array with shape
        (3, L1+1, L1+1, L1+1, L2+1, L2+1, L2+1)
    """
    ncols = g2.max_degree + 1
    B = jnp.asarray(g2.center)
    origin = jnp.asarray(origin)

    Ss = moments.boosted_overlap_1d_xyz(g1, g2, 1)
    Ds = _phase_derivatives(Ss, g2, ncols)
    S0s = [S[:, :ncols] for S in Ss]
    M1s = [
        moments.first_moment_1d(S, B[dim], origin[dim], ncols)
        for dim, S in enumerate(Ss)
    ]

    def factor(dim: int, moment: int, derivative: int) -> jax.Array:
        if moment:
            return M1s[dim]
        if derivative:
            return Ds[dim]
        return S0s[dim]

    components = []
    for c in range(3):
        # (r_a - o_a) d/dr_b - (r_b - o_b) d/dr_a for cyclic (c, a, b).
        a, b = (c + 1) % 3, (c + 2) % 3
        first = [
            factor(dim, moment=dim == a, derivative=dim == b) for dim in range(3)
        ]
        second = [
            factor(dim, moment=dim == b, derivative=dim == a) for dim in range(3)
        ]
        components.append(
            overlap.tensor_3d_from_1d(*first)
            - overlap.tensor_3d_from_1d(*second)
        )

    return -1j * jnp.stack(components)
