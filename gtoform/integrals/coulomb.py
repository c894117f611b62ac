from typing import NamedTuple
import functools

import jax
import jax.numpy as jnp
from jax.scipy.special import gammainc, gamma
import numpy as np

from gtoform import config
from gtoform.integrals import gaussian


def _real_boys(n, x: jax.Array) -> jax.Array:
    # Avoid division by zero
    safe_x = jnp.maximum(x, config.BOYS_SMALL_X_THRESHOLD)

    numerator = gamma(n + 0.5) * gammainc(n + 0.5, safe_x)
    denominator = 2 * (safe_x ** (n + 0.5))
    val_exact = numerator / denominator

    # Small-x Taylor expansion
    val_limit = (1.0 / (2 * n + 1)) - (x / (2 * n + 3))

    return jnp.where(x < config.BOYS_SMALL_X_THRESHOLD, val_limit, val_exact)


@functools.lru_cache(maxsize=None)
def _half_legendre_rule(order: int) -> tuple[np.ndarray, np.ndarray]:
    """The squared positive Gauss-Legendre nodes and their weights."""
    nodes, weights = np.polynomial.legendre.leggauss(order)
    positive = nodes > 0
    return np.square(nodes[positive]), weights[positive]


def _recursive_boys(n: np.ndarray, z: jax.Array) -> jax.Array:
    """Evaluates F_n(z) for Re z large by upward recursion.

    F_0(z) = 1/2 sqrt(pi/z) erf(sqrt(z)) with erf(sqrt(z)) = 1, then
    F_{k+1}(z) = ((2k+1) F_k(z) - e^(-z)) / (2z).
    """
    exp_z = jnp.exp(-z)
    values = [0.5 * jnp.sqrt(jnp.pi / z)]
    for k in range(int(np.max(n, initial=0))):
        values.append(((2 * k + 1) * values[-1] - exp_z) / (2 * z))

    # shape z.shape + (max(n) + 1,)
    table = jnp.stack(values, axis=-1)
    return jnp.take_along_axis(table, n[..., None], axis=-1)[..., 0]


def _complex_boys(n, z: jax.Array) -> jax.Array:
    n = np.asarray(n)
    z = jnp.asarray(z)
    shape = np.broadcast_shapes(n.shape, z.shape)
    n = np.broadcast_to(n, shape)
    z = jnp.broadcast_to(z, shape)

    is_large = z.real > config.BOYS_ASYMPTOTIC_THRESHOLD

    # F_n(z) = integral_0^1 t^(2n) e^(-z t^2) dt. The integrand is even, so
    # the positive half of a Gauss-Legendre rule on [-1, 1] integrates it.
    t2, weights = _half_legendre_rule(config.BOYS_QUADRATURE_ORDER)
    z_quad = jnp.where(is_large, 0.0, z)
    val_quad = jnp.sum(
        weights
        * np.power(t2, n[..., None])
        * jnp.exp(-z_quad[..., None] * t2),
        axis=-1,
    )

    z_large = jnp.where(is_large, z, config.BOYS_ASYMPTOTIC_THRESHOLD + 1.0)
    val_large = _recursive_boys(n, z_large)

    return jnp.where(is_large, val_large, val_quad)


def boys(n, x: jax.Array) -> jax.Array:
    r"""Computes the Boys function F_n(x).

    For real x >= 0 the formula used is:

    $$
    F_n(x) = \frac{\Gamma(n + 1/2) \cdot P(n + 1/2, x)}{2 x^{n + 1/2}}
    $$

    Where P is the regularized lower incomplete gamma function.

    For small x (x < BOYS_SMALL_X_THRESHOLD), we use the Taylor expansion

    $$
    F_n(x) \approx \frac{1}{2n + 1} - \frac{x}{2n + 3}
    $$

    Complex arguments arise from London orbitals. They are evaluated by
    Gauss-Legendre quadrature of the defining integral

    $$
    F_n(z) = \int_0^1 t^{2n} e^{-z t^2} dt
    $$

    and, when Re z > BOYS_ASYMPTOTIC_THRESHOLD, by upward recursion from
    $F_0(z) = \frac{1}{2}\sqrt{\pi / z}$ where erf(sqrt(z)) = 1 to double
    precision. For complex arguments n must be concrete (an int or a numpy
    array).

    Args:
        n: The order of the Boys function (usually non-negative integer).
        x: The argument. Either real and non-negative or complex.

    Returns:
        The evaluated function, with the broadcast shape of n and x.
    """
    if jnp.iscomplexobj(x):
        return _complex_boys(n, x)
    return _real_boys(n, x)


def _V_base_case(
    size_n: int,
    product: gaussian.GaussianProduct,
    s: jax.Array,
    C: jax.Array,
) -> jax.Array:
    """Computes the degree zero case of the n-th order coulomb integral.

    Formula:
    V[i,0,0,0] = K * boys(i, s * (P-C).(P-C))

    With London Gaussians P is complex and (P-C).(P-C) is the plain square,
    not the modulus.

    Returns:
      An array V_base of shape (size_n,) that satisfies:
      V_base[i] = V[i,0,0,0]
    """
    dist_sq = jnp.sum(jnp.square(product.P - C))
    indices = np.arange(size_n)

    return product.K * boys(indices, s * dist_sq)


class _VerticalTransferParams(NamedTuple):
    s: jax.Array
    p: jax.Array
    PA: jax.Array  # P - A
    PC: jax.Array  # P - C


def _V_vertical_transfer_step(
    params: _VerticalTransferParams,
    carry: tuple[jax.Array, jax.Array],
    i: jax.Array,
) -> tuple[tuple[jax.Array, jax.Array], jax.Array]:
    """Computes the next recurrence step for the vertical transfer.

    Formula:
    V[n,...,i] =    (P - A)V_new[n, ...,i-1]
                -(s/p)(P-C)V_new[n+1...,i-1]
               +((i-1)/(2p)V_new[n, ...,i-2]
         -(((i-1)s)/(2p^2))V_new[n+1...,i-2]

    Args:
      params: The static parameters.
      carry: A tuple (V[...,i-1], V[...,i-2])
        representing the previous two vertical steps. Both arrays
        have the same number of dimensions and shape (size_n,...).
        For j=i-1,i-2, the values V[n,...,j] are assumed to be valid for
        0 <= n < size_n - j

      i: The current vertical index (recurrence depth).

    Returns:
      A tuple (new_carry, output):
        new_carry: (V[n,...,i], V[n,...,i-1]) for the next step.
        output: V[n,...,i] to be stacked into the result array.
    """
    s, p, PA, PC = params

    v_im1, v_im2 = carry

    # V[n+1,...,i-1]
    v_im1_up = jnp.roll(v_im1, shift=-1, axis=0)

    # V[n+1,...,i-2]
    v_im2_up = jnp.roll(v_im2, shift=-1, axis=0)

    term1 = PA * v_im1
    term2 = -(s / p) * PC * v_im1_up
    term3 = ((i - 1) / (2 * p)) * v_im2
    term4 = -(((i - 1) * s) / (2 * p * p)) * v_im2_up

    v_i = term1 + term2 + term3 + term4

    return ((v_i, v_im1), v_i)


def _V_vertical_transfer(
    V: jax.Array,
    size_new: int,
    s: jax.Array,
    p: jax.Array,
    PA: jax.Array,
    PC: jax.Array,
) -> jax.Array:
    """Applies vertical transfer to compute another dimension of V with size
    size_new.

    Args:
      V: An array with shape (size_n,...)
      size_new: The size of the new dimension. We assume size_new <= size_n.
      s, p: scaling factors
      PA, PC: displacements of the product center.
    Returns:
      An array V_new with shape V.shape + (,size_new) that satisfies
      V_new[n,...,0] = V[n,...] and the recursive formula defined in
      _V_vertical_transfer_step.
      The values V[n,...,i] are only valid when 0 <= n < size_n - i.
    """
    params = _VerticalTransferParams(s=s, p=p, PA=PA, PC=PC)
    step_fn = functools.partial(_V_vertical_transfer_step, params)

    v_i0 = V
    init_carry = (v_i0, jnp.zeros_like(v_i0))
    indices = jnp.arange(1, size_new)
    _, v_rest = jax.lax.scan(step_fn, init_carry, indices)

    return jnp.concatenate(
        (v_i0[..., None], jnp.moveaxis(v_rest, 0, -1)), axis=-1
    )


def _V(
    max_degree: int,
    A: jax.Array,
    product: gaussian.GaussianProduct,
    s: jax.Array,
    C: jax.Array,
) -> jax.Array:
    """The n-th order Coulomb integral of a Gaussian product with the bra
    degree raised on center A.

    The output has shape:
    (max_degree + 1, max_degree + 1, max_degree + 1)
    """
    if max_degree == 0:
        V = _V_base_case(1, product, s, C)
        return V[0, None, None, None]

    size_d = max_degree + 1

    # The first dimension of V needs room for 3 vertical transfers.
    # V has shape (3*size_d,)
    V = _V_base_case(3 * size_d, product, s, C)

    P = product.P
    for i in range(3):
        # Before the vertical transfer, V has shape: ((3-i)*size_d,) + i * (size_d)
        # After the vertical transfer V has shape: ((3-i)*size_d,) + (i + 1) * (size_d)
        V = _V_vertical_transfer(
            V, size_d, s, product.p, P[i] - A[i], P[i] - C[i]
        )

        if i < 2:
            V = V[:-size_d, ...]

    return V[0, ...]


def _horizontal_transfer_step(
    AB: jax.Array, carry: jax.Array, j: jax.Array
) -> tuple[jax.Array, jax.Array]:
    """Computes the next recurrence step for the horizontal transfer.

    Formula:
    I[...,i,j] = (A - B)I[...,i,j-1] + I[...,i+1,j-1]

    The values I[...,i,j-1] of the carry are valid for 0 <= i < N - (j-1),
    so the values I[...,i,j] are valid for 0 <= i < N - j.
    """
    I_jm1 = carry
    I_jm1_up = jnp.roll(I_jm1, shift=-1, axis=-1)

    I_j = AB * I_jm1 + I_jm1_up

    return (I_j, I_j)


def _horizontal_transfer(
    I: jax.Array, src_dim: int, size_new: int, A: jax.Array, B: jax.Array
) -> jax.Array:
    """Applies a horizontal transfer from src_dim to add a dimension to I of size
    size_new.

    Args:
      I: An input array with shape (...,size_src,...)
      src_dim: The source dimension. 0 <= src_dim < len(I.shape).
      size_new: The size of the new dimension.
        We assume that size_new <= I.shape[src_dim].
      A, B: positions.
    Returns:
      An array I_new with shape (,...,size_src,...,size_new).
      The src_dim is preserved in place, and the new dimension is at axis -1.

      The values I[...,i,...,j] are only valid when 0 <= i < size_new - j
      where i is an index at src_dim.
    """
    if size_new <= 1:
        return I[..., None]

    I_j0 = jnp.moveaxis(I, src_dim, -1)
    indices = jnp.arange(1, size_new)
    step_fn = functools.partial(_horizontal_transfer_step, A - B)

    # I_rest will have shape (size_new-1, ..., src_size)
    _, I_rest = jax.lax.scan(step_fn, I_j0, indices)

    I_new = jnp.concatenate(
        (I_j0[..., None], jnp.moveaxis(I_rest, 0, -1)), axis=-1
    )

    return jnp.moveaxis(I_new, -2, src_dim)


class _ElectronTransferParams(NamedTuple):
    p: jax.Array  # a + b
    q: jax.Array  # c + d
    alpha: jax.Array  # (Q - C) + (p/q)(P - A)


def _electron_transfer_step(
    params: _ElectronTransferParams,
    carry: tuple[jax.Array, jax.Array],
    j: jax.Array,
) -> tuple[tuple[jax.Array, jax.Array], jax.Array]:
    """Computes the next recurrence step for the electron transfer.

    Formula:
    I[..., i, j] =
      ((Q - C) + (p/q)(P - A))I[...,i, j-1]
      +(i/(2q))I[...,i-1,j-1]
      +((j-1)/(2q)I[...,i,j-2]
      -(p/q)I[...,i+1,j-1]

    For real Gaussians the first coefficient reduces to
    -(1/q)(b(A - B) + d(C - D)).

    Args:
      params: The static parameters.
      carry: A tuple (I[...,:,j-1], I[...,:,j-2]). Both arrays have the same
        shape (...,N).
      For k=j-1,j-2, the values I[...,i,k] are assumed to be valid for 0 <= i < N - k.
      j: The current electron index (recurrence depth).

    Returns:
      (new_carry, new_output)
        new_carry: A tuple (I[...,:,j], I[...,:,j-1]).
        new_output: I[...,:,j]
    """
    p, q, alpha = params

    I_jm1, I_jm2 = carry

    # I[...,i+1,j-1]
    I_jm1_up = jnp.roll(I_jm1, shift=-1, axis=-1)

    # I[...,i-1,j-1]
    I_jm1_down = jnp.pad(
        I_jm1[..., :-1], ((0, 0),) * (I_jm1.ndim - 1) + ((1, 0),)
    )

    # i_indices[0,...,0,i] = i
    i_indices = jnp.arange(I_jm1.shape[-1]).reshape(
        (1,) * (I_jm1.ndim - 1) + (-1,)
    )

    term1 = alpha * I_jm1
    term2 = i_indices / (2 * q) * I_jm1_down
    term3 = ((j - 1) / (2 * q)) * I_jm2
    term4 = -(p / q) * I_jm1_up

    I_j = term1 + term2 + term3 + term4

    return (I_j, I_jm1), I_j


def _electron_transfer(
    I: jax.Array,
    src_dim: int,
    size_new: int,
    params: _ElectronTransferParams,
) -> jax.Array:
    """Apply an electron transfer from the first electron at src_dim to add a
    new dimension to I of size size_new representing the third Gaussian.

    Args:
      I: An input array with shape (...,size_src,...)
      src_dim: The source dimension. 0 <= src < len(I.shape).
      size_new: The size of the new dimension.
        We assume that size_new <= I.shape[src_dim].
      params: The transfer coefficients along the dimension of src_dim.

    Returns:
      An array I_new with shape (...,size_src,...,size_new).
      The src_dim is preserved in place, and the new dimension is at axis -1.
      The values I[...,i,...,j] are only valid when 0 <= i < size_new - j
      where i is an index at src_dim.
    """
    if size_new <= 1:
        return I[..., None]

    I_j0 = jnp.moveaxis(I, src_dim, -1)

    indices = jnp.arange(1, size_new)
    init_carry = (I_j0, jnp.zeros_like(I_j0))
    step_fn = functools.partial(_electron_transfer_step, params)

    # I_rest will have shape (size_new-1, ..., src_size)
    _, I_rest = jax.lax.scan(step_fn, init_carry, indices)

    I_new = jnp.concatenate(
        (I_j0[..., None], jnp.moveaxis(I_rest, 0, -1)), axis=-1
    )

    return jnp.moveaxis(I_new, -2, src_dim)


def one_electron(
    g1: gaussian.GaussianBasis3d,
    g2: gaussian.GaussianBasis3d,
    C: jax.Array,
) -> jax.Array:
    """Computes the one electron Coulomb integral with center C.

    Formula:

    G1(x,y,z) = e^(-i k1.r) (x-Ax)^ix (y-Ay)^iy (z-Az)^iz e^(-a|r-A|^2)
    G2(x,y,z) = e^(-i k2.r) (x-Bx)^jx (y-By)^jy (z-Bz)^jz e^(-b|r-B|^2)

    I[ix,iy,iz,jx,jy,jz] =
        integral
            conj(G1(x,y,z)) * G2(x,y,z) / sqrt((x-Cx)^2+(y-Cy)^2+(z-Cz)^2))
        dx dy dz

    Args:
      g1: The first Gaussian basis shell (center A, exponent a, degree d1).
      g2: The second Gaussian basis shell (center B, exponent b, degree d2).
      C: The position of the nuclear center. Shape: (3,)

    Returns:
      An array I of shape (d1+1, d1+1, d1+1, d2+1, d2+1, d2+1).
      The first 3 dimensions correspond to the angular momentum of g1 (x,y,z).
      The last 3 dimensions correspond to the angular momentum of g2 (x,y,z).
    """
    A, d1 = jnp.asarray(g1.center), g1.max_degree
    B, d2 = jnp.asarray(g2.center), g2.max_degree
    C = jnp.asarray(C)

    product = gaussian.gaussian_product_3d(g1, g2)

    # Raise the degree of g1 so that we have enough space to do horizontal
    # transfers.
    I = (2 * jnp.pi / product.p) * _V(d1 + d2, A, product, product.p, C)

    # For x,y,z on the second Gaussian.
    for i in range(3):
        I = _horizontal_transfer(I, src_dim=i, size_new=d2 + 1, A=A[i], B=B[i])

        # Remove the padding that is no longer needed.
        I = I[(slice(0, d1 + 1),) * (i + 1) + (Ellipsis,)]

    return I


def two_electron(
    g1: gaussian.GaussianBasis3d,
    g2: gaussian.GaussianBasis3d,
    g3: gaussian.GaussianBasis3d,
    g4: gaussian.GaussianBasis3d,
) -> jax.Array:
    """Computes the two electron Coulomb repulsion integral in chemists'
    notation (12|34).

    Formula:

    Gn(x,y,z) = e^(-i kn.r) (x-Xx)^nx (y-Xy)^ny (z-Xz)^nz e^(-x|r-X|^2)

    I[ix,iy,iz,jx,jy,jz,kx,ky,kz,lx,ly,lz] =
        integral
            conj(G1(r1)) * G2(r1) *
            conj(G3(r2)) * G4(r2) /
            |r1 - r2|
        dr1 dr2

    Args:
      g1: The first Gaussian basis shell (center A, exponent a, degree d1).
      g2: The second Gaussian basis shell (center B, exponent b, degree d2).
      g3: The third Gaussian basis shell (center C, exponent c, degree d3).
      g4: The fourth Gaussian basis shell (center D, exponent d, degree d4).

    Returns:
        An array I of shape:
        (d1+1, d1+1, d1+1, d2+1, d2+1, d2+1,
         d3+1, d3+1, d3+1, d4+1, d4+1, d4+1)
    """
    d1, d2, d3, d4 = g1.max_degree, g2.max_degree, g3.max_degree, g4.max_degree
    A = jnp.asarray(g1.center)
    B = jnp.asarray(g2.center)
    C = jnp.asarray(g3.center)
    D = jnp.asarray(g4.center)

    bra = gaussian.gaussian_product_3d(g1, g2)
    ket = gaussian.gaussian_product_3d(g3, g4)
    p, q = bra.p, ket.p
    s = (p * q) / (p + q)

    # Raise the degree on the first electron so that there is room for
    # horizontal transfers to g2 and electron transfers to g3 padded by d4.
    size_3 = d3 + d4 + 1
    alpha = 2 * jnp.power(jnp.pi, 5 / 2) / (p * q * jnp.sqrt(p + q))

    # I has shape (d1+d2+d3+d4+1,) * 3
    I = alpha * ket.K * _V(d1 + d2 + d3 + d4, A, bra, s, ket.P)

    # Apply an electron transfer from g1 to g3 in x,y,z
    for i in range(3):
        params = _ElectronTransferParams(
            p=p,
            q=q,
            alpha=(ket.P[i] - C[i]) + (p / q) * (bra.P[i] - A[i]),
        )
        I = _electron_transfer(I, src_dim=i, size_new=size_3, params=params)

        # Remove the padding that is no longer needed.
        I = I[(slice(0, d1 + d2 + 1),) * (i + 1) + (Ellipsis,)]

    # Apply a horizontal transfer from g1 to g2 in x,y,z
    for i in range(3):
        I = _horizontal_transfer(
            I, src_dim=i, size_new=d2 + 1, A=A[i], B=B[i]
        )

        I = I[(slice(0, d1 + 1),) * (i + 1) + (Ellipsis,)]

    # Apply a horizontal transfer from g3 to g4 in x,y,z
    for i in range(3):
        I = _horizontal_transfer(
            I, src_dim=i + 3, size_new=d4 + 1, A=C[i], B=D[i]
        )

        I = I[
            (slice(0, d1 + 1),) * 3
            + (slice(0, d3 + 1),) * (i + 1)
            + (Ellipsis,)
        ]

    # Reorder the axes from g1, g3, g2, g4 to g1, g2, g3, g4
    I = jnp.moveaxis(I, [3, 4, 5], [6, 7, 8])

    return I
