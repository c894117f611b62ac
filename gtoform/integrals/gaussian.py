import dataclasses
from typing import NamedTuple

import jax
import jax.numpy as jnp
from jax.tree_util import register_pytree_node_class

from gtoform import types


@register_pytree_node_class
@dataclasses.dataclass(frozen=True)
class GaussianBasis1d:
    max_degree: int
    exponent: types.Scalar
    center: types.Scalar

    # The London wave vector component, or None for a real Gaussian.
    phase: types.Scalar | None = None

    def tree_flatten(self):
        children = (self.exponent, self.center, self.phase)
        aux_data = self.max_degree
        return (children, aux_data)

    @classmethod
    def tree_unflatten(cls, aux_data: int, children: tuple) -> "GaussianBasis1d":
        return cls(
            max_degree=aux_data,
            exponent=children[0],
            center=children[1],
            phase=children[2],
        )


@register_pytree_node_class
@dataclasses.dataclass
class GaussianBasis3d:
    """The Cartesian primitives of degree <= max_degree on a center.

    G(x,y,z) = e^(-i k.r) (x-Ax)^i (y-Ay)^j (z-Az)^k e^(-a|r-A|^2)

    where k is the phase, or zero if the phase is None.
    """

    max_degree: int
    exponent: types.Scalar
    center: types.Position3D  # shape (3,)
    phase: types.Position3D | None = None  # shape (3,)

    def tree_flatten(self):
        children = (self.exponent, self.center, self.phase)
        aux_data = self.max_degree
        return (children, aux_data)

    @classmethod
    def tree_unflatten(cls, aux_data: int, children: tuple) -> "GaussianBasis3d":
        return cls(
            max_degree=aux_data,
            exponent=children[0],
            center=children[1],
            phase=children[2],
        )

    def with_max_degree(self, max_degree: int) -> "GaussianBasis3d":
        return GaussianBasis3d(
            max_degree=max_degree,
            exponent=self.exponent,
            center=self.center,
            phase=self.phase,
        )


def phase_components(g: GaussianBasis3d) -> tuple:
    """The x, y, z components of the phase, or three Nones."""
    if g.phase is None:
        return (None, None, None)
    phase = jnp.asarray(g.phase)
    return (phase[0], phase[1], phase[2])


def gaussian_3d_to_1d(g: GaussianBasis3d, dim: int) -> GaussianBasis1d:
    center = jnp.asarray(g.center)
    phase = None if g.phase is None else jnp.asarray(g.phase)[dim]
    return GaussianBasis1d(
        max_degree=g.max_degree,
        exponent=g.exponent,
        center=center[dim],
        phase=phase,
    )


class GaussianProduct(NamedTuple):
    """The single Gaussian K e^(-p|r-P|^2) equal to the product of a bra and
    a ket Gaussian."""

    p: jax.Array  # a + b
    P: jax.Array  # product center, complex for London Gaussians
    K: jax.Array  # prefactor, complex for London Gaussians


def phase_difference(g1, g2) -> jax.Array | None:
    """The wave vector kappa = k1 - k2 of the plane wave e^(i kappa.r) in the
    product of the conjugated bra g1 and the ket g2."""
    if g1.phase is None and g2.phase is None:
        return None

    k1 = 0.0 if g1.phase is None else jnp.asarray(g1.phase)
    k2 = 0.0 if g2.phase is None else jnp.asarray(g2.phase)
    return k1 - k2


def _gaussian_product(g1, g2, dot) -> GaussianProduct:
    a, A = jnp.asarray(g1.exponent), jnp.asarray(g1.center)
    b, B = jnp.asarray(g2.exponent), jnp.asarray(g2.center)

    p = a + b
    mu = (a * b) / p
    P = (a * A + b * B) / p
    diff = A - B
    K = jnp.exp(-mu * dot(diff, diff))

    kappa = phase_difference(g1, g2)
    if kappa is None:
        return GaussianProduct(p=p, P=P, K=K)

    # -p(r-P)^2 + i kappa.r = -p(r-P')^2 + i kappa.P - kappa^2/(4p)
    # with P' = P + i kappa/(2p).
    K = K * jnp.exp(1j * dot(kappa, P) - dot(kappa, kappa) / (4 * p))
    P = P + 1j * kappa / (2 * p)
    return GaussianProduct(p=p, P=P, K=K)


def gaussian_product_1d(
    g1: GaussianBasis1d, g2: GaussianBasis1d
) -> GaussianProduct:
    return _gaussian_product(g1, g2, jnp.multiply)


def gaussian_product_3d(
    g1: GaussianBasis3d, g2: GaussianBasis3d
) -> GaussianProduct:
    return _gaussian_product(g1, g2, jnp.dot)
