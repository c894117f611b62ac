import dataclasses

import jax.numpy as jnp
from jax.tree_util import register_pytree_node_class
import numpy as np

from gtoform import types
from gtoform.basis import cartesian
from gtoform.basis import shell as shell_lib
from gtoform.basis import spherical


@register_pytree_node_class
@dataclasses.dataclass
class BasisBlock:
    """A block representation of a shell, ready for integration.

    This flattens the shell into its individual Cartesian components, each
    with its own copy of the contraction coefficients. It also provides a
    basis transformation matrix from the Cartesian representation to the
    basis functions of the shell (Cartesian or spherical).
    """

    # shape (3,)
    center: types.Array

    # The exponents of the Gaussian primitives in this block.
    # shape (K,)
    exponents: types.Array

    # The powers (i,j,k) for each Cartesian function in this block.
    # shape (N_cart, 3)
    cartesian_powers: types.StaticArray

    # A map from the Gaussian primitives to the contraction coefficients of
    # each Cartesian function in this block.
    # shape (N_cart, K)
    contraction_matrix: types.Array

    # A map from the Cartesian functions to the basis functions of the
    # block.
    # shape (N_basis, N_cart)
    basis_transform: types.Array

    # The London wave vector k of the phase factor exp(-i k.r), or None for
    # an ordinary shell.
    # shape (3,)
    phase: types.Array | None = None

    @property
    def n_exponents(self) -> int:
        """The number of Gaussian primitives in this block."""
        return self.exponents.shape[0]

    @property
    def n_cart(self) -> int:
        """The number of Cartesian functions in this block."""
        return self.cartesian_powers.shape[0]

    @property
    def n_basis(self) -> int:
        """The number of basis functions in this block."""
        return self.basis_transform.shape[0]

    @property
    def max_degree(self) -> int:
        """The angular momentum of this block."""
        return int(np.max(self.cartesian_powers))

    def __post_init__(self):
        types.promote_dataclass_fields(self)

        # Skip jax sentinels.
        if self.phase is not None and type(self.phase) is not object:
            self.phase = jnp.asarray(self.phase)

    def tree_flatten(self):
        children = (
            self.center,
            self.exponents,
            self.contraction_matrix,
            self.basis_transform,
            self.phase,
        )
        aux_data = tuple(map(tuple, self.cartesian_powers.tolist()))
        return (children, aux_data)

    @classmethod
    def tree_unflatten(
        cls, aux_data: tuple[tuple[int, ...], ...], children: tuple
    ) -> "BasisBlock":
        return cls(
            center=children[0],
            exponents=children[1],
            cartesian_powers=np.array(aux_data, dtype=np.int32),
            contraction_matrix=children[2],
            basis_transform=children[3],
            phase=children[4],
        )


def build_basis_block(shell: shell_lib.Shell) -> BasisBlock:
    """Builds the BasisBlock of a shell.

    The coefficients are used as they are: normalization factors must
    already be embedded in the shell if they are wanted.
    """
    l = shell.angular_momentum
    cartesian_powers = np.array(cartesian.generate_cartesian_powers(l))

    contraction_matrix = np.repeat(
        shell.coefficients[None, :], cartesian_powers.shape[0], axis=0
    )

    if shell.pure:
        basis_transform = np.array(spherical.spherical_transformation(l))
    else:
        basis_transform = np.eye(cartesian_powers.shape[0], dtype=np.float64)

    return BasisBlock(
        center=shell.center,
        exponents=shell.exponents,
        cartesian_powers=cartesian_powers,
        contraction_matrix=contraction_matrix,
        basis_transform=basis_transform,
        phase=shell.london_wavevector,
    )
