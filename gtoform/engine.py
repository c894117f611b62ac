import dataclasses
import functools
import math
from collections.abc import Sequence
from typing import NamedTuple

import jax
from jax import jit
import jax.numpy as jnp
import numpy as np

from gtoform import batching
from gtoform import config
from gtoform import operators
from gtoform import types
from gtoform.basis import basis_block
from gtoform.basis import shell as shell_lib
from gtoform.integrals import gaussian

BlockLike = basis_block.BasisBlock | shell_lib.Shell


def _broadcast_powers(*powers: types.StaticArray) -> tuple[jax.Array, ...]:
    """Reshapes the columns of Cartesian power blocks to broadcast against
    each other.

    Given blocks I of shape (n1, 3) and J of shape (n2, 3) this returns
    (I_x, I_y, I_z, J_x, J_y, J_z) with I_* of shape (n1, 1) and J_* of shape
    (1, n2), so that for a 6D tensor T the matrix M[i,j] = T[I[i], J[j]] is
    T[I_x, I_y, I_z, J_x, J_y, J_z].
    """
    indices = []
    n_blocks = len(powers)

    for i, block in enumerate(powers):
        for col in jnp.asarray(block.T):
            shape = [1] * n_blocks
            shape[i] = -1
            indices.append(col.reshape(shape))

    return tuple(indices)


def _flat_product(*arrays: jax.Array) -> tuple[jax.Array, ...]:
    """The flattened Cartesian product of 1D arrays.

    Equivalent to zip(*itertools.product(*arrays)), e.g.
    _flat_product([1, 2], [3, 4]) -> ([1, 1, 2, 2], [3, 4, 3, 4])
    """
    ix = []
    for i, arr in enumerate(arrays):
        shape = [1] * len(arrays)
        shape[i] = -1
        ix.append(jnp.asarray(arr).reshape(shape))

    grids = jnp.broadcast_arrays(*ix)
    return tuple(g.ravel() for g in grids)


def _primitive_basis(
    block: basis_block.BasisBlock, exponent: jax.Array
) -> gaussian.GaussianBasis3d:
    return gaussian.GaussianBasis3d(
        max_degree=block.max_degree,
        exponent=exponent,
        center=block.center,
        phase=block.phase,
    )


class _PairParams(NamedTuple):
    block1: basis_block.BasisBlock
    block2: basis_block.BasisBlock
    cartesian_indices: tuple[jax.Array, ...]
    operator: operators.Operator


def _compute_pair_integral(
    params: _PairParams, exponent1: jax.Array, exponent2: jax.Array
) -> jax.Array:
    """Computes the one-electron integrals between two primitive Cartesian
    shells.

    Returns:
        A jax array of shape (n_components, n_cart1, n_cart2)
    """
    g1 = _primitive_basis(params.block1, exponent1)
    g2 = _primitive_basis(params.block2, exponent2)

    raw_tensor = params.operator.primitive(g1, g2)
    return raw_tensor[(slice(None),) + params.cartesian_indices]


@jit
def one_electron_block_jax(
    block1: basis_block.BasisBlock,
    block2: basis_block.BasisBlock,
    operator: operators.Operator,
) -> jax.Array:
    """Computes the matrix of a one-electron operator between two blocks.

    Returns:
        A jax array of shape (n_components, N_basis1, N_basis2).
    """
    cartesian_indices = _broadcast_powers(
        block1.cartesian_powers, block2.cartesian_powers
    )

    # flat_exps1 and flat_exps2 have shape (n_exps1*n_exps2,)
    flat_exps1, flat_exps2 = _flat_product(block1.exponents, block2.exponents)

    params = _PairParams(block1, block2, cartesian_indices, operator)
    integral_fn = functools.partial(_compute_pair_integral, params)

    # Shape: (n_exps1*n_exps2, n_components, n_cart1, n_cart2)
    primitive_integrals = jax.vmap(integral_fn)(flat_exps1, flat_exps2)
    primitive_integrals = primitive_integrals.reshape(
        (block1.n_exponents, block2.n_exponents)
        + primitive_integrals.shape[1:]
    )

    # Contract over the exponents.
    # Dimensions:
    #   d: n_cart1. Cartesian functions on block 1.
    #   e: n_cart2. Cartesian functions on block 2.
    #   a: n_exp1. Exponents on block 1
    #   b: n_exp2. Exponents on block 2
    #   c: n_components.
    cartesian_matrix = jnp.einsum(
        "da,eb,abcde->cde",
        block1.contraction_matrix,
        block2.contraction_matrix,
        primitive_integrals,
        optimize=True,
    )

    # Transform to the basis functions of the blocks.
    return jnp.einsum(
        "pd,cde,qe->cpq",
        block1.basis_transform,
        cartesian_matrix,
        block2.basis_transform,
        optimize=True,
    )


class _QuartetParams(NamedTuple):
    blocks: tuple[basis_block.BasisBlock, ...]
    cartesian_indices: tuple[jax.Array, ...]
    operator: operators.Operator


def _compute_quartet_integral(
    params: _QuartetParams, *exponents: jax.Array
) -> jax.Array:
    """Computes the two-electron integrals between four primitive Cartesian
    shells.

    Returns:
        A jax array of shape (n_cart1, n_cart2, n_cart3, n_cart4)
    """
    gs = [
        _primitive_basis(block, exponent)
        for block, exponent in zip(params.blocks, exponents)
    ]
    raw_tensor = params.operator.primitive(*gs)
    return raw_tensor[params.cartesian_indices]


def _two_electron_block(
    block1: basis_block.BasisBlock,
    block2: basis_block.BasisBlock,
    block3: basis_block.BasisBlock,
    block4: basis_block.BasisBlock,
    operator: operators.Operator,
) -> jax.Array:
    """Computes the integrals of a two-electron operator between four blocks.

    Returns:
      A jax array of shape (N_basis1, N_basis2, N_basis3, N_basis4)
    """
    blocks = (block1, block2, block3, block4)
    cartesian_indices = _broadcast_powers(
        *(block.cartesian_powers for block in blocks)
    )

    flat_exps = _flat_product(*(block.exponents for block in blocks))
    params = _QuartetParams(blocks, cartesian_indices, operator)
    integral_fn = functools.partial(_compute_quartet_integral, params)

    # Shape: (n_exps1*...*n_exps4, n_cart1, n_cart2, n_cart3, n_cart4)
    primitive_integrals = jax.vmap(integral_fn)(*flat_exps)
    primitive_integrals = primitive_integrals.reshape(
        tuple(block.n_exponents for block in blocks)
        + primitive_integrals.shape[1:]
    )

    # Contract over the exponents a, b, c, d.
    cartesian_tensor = jnp.einsum(
        "ia,jb,kc,ld,abcdijkl->ijkl",
        block1.contraction_matrix,
        block2.contraction_matrix,
        block3.contraction_matrix,
        block4.contraction_matrix,
        primitive_integrals,
        optimize=True,
    )

    # Transform from Cartesian to the basis coordinates.
    return jnp.einsum(
        "pi,qj,rk,sl,ijkl->pqrs",
        block1.basis_transform,
        block2.basis_transform,
        block3.basis_transform,
        block4.basis_transform,
        cartesian_tensor,
        optimize=True,
    )


two_electron_block_jax = jit(_two_electron_block)


@jit
def two_electron_batch_jax(
    block1: basis_block.BasisBlock,
    block2: basis_block.BasisBlock,
    block3: basis_block.BasisBlock,
    block4: basis_block.BasisBlock,
    operator: operators.Operator,
) -> jax.Array:
    """Computes the two-electron blocks of stacked quartets.

    The leaves of every block carry a leading batch axis of size n.

    Returns:
      A jax array of shape (n, N_basis1, N_basis2, N_basis3, N_basis4)
    """
    return jax.vmap(_two_electron_block, in_axes=(0, 0, 0, 0, None))(
        block1, block2, block3, block4, operator
    )


def _max_exponent(block: basis_block.BasisBlock) -> float:
    return float(np.max(np.asarray(block.exponents)))


def _swap_pair(
    block_a: basis_block.BasisBlock, block_b: basis_block.BasisBlock
) -> tuple[basis_block.BasisBlock, basis_block.BasisBlock]:
    """Returns the pair (b, a) with the same charge distribution as (a, b).

    The distribution conj(G_a) G_b only depends on the difference of the
    London wave vectors, which the new bra carries in full.
    """
    kappa = gaussian.phase_difference(block_a, block_b)
    if kappa is None:
        return block_b, block_a

    return (
        dataclasses.replace(block_b, phase=kappa),
        dataclasses.replace(block_a, phase=jnp.zeros(3)),
    )


def orient_quartet(
    blocks: tuple[basis_block.BasisBlock, ...],
) -> tuple[tuple[basis_block.BasisBlock, ...], tuple[int, ...]]:
    """Reorders a quartet so that the Coulomb recursions stay stable.

    Within each pair the block with the tightest primitive comes first, so
    that its center lies close to the product center. The pair with the
    tighter primitives becomes the ket, so that the electron transfer factor
    p/q stays small.

    Returns:
      The reordered blocks, and the axes that transpose their integral block
      back to the order of the input blocks.
    """
    a, b, c, d = blocks
    order = [0, 1, 2, 3]

    if _max_exponent(b) > _max_exponent(a):
        a, b = _swap_pair(a, b)
        order[0:2] = [1, 0]
    if _max_exponent(d) > _max_exponent(c):
        c, d = _swap_pair(c, d)
        order[2:4] = [order[3], order[2]]

    if _max_exponent(a) + _max_exponent(b) > _max_exponent(c) + _max_exponent(d):
        a, b, c, d = c, d, a, b
        order = order[2:] + order[:2]

    return (a, b, c, d), tuple(int(axis) for axis in np.argsort(order))


def _as_block(block: BlockLike) -> basis_block.BasisBlock:
    if isinstance(block, basis_block.BasisBlock):
        return block
    return basis_block.build_basis_block(block)


class IntegralEngine:
    """Evaluates the blocks of an operator between shells.

    The shells may be passed as Shells or as prebuilt BasisBlocks. The
    coefficients are used as they are, so normalization factors must already
    be embedded in them.
    """

    def __init__(self, operator: operators.Operator):
        self.operator = operator

    @property
    def number_of_components(self) -> int:
        return self.operator.number_of_components

    @property
    def is_two_electron(self) -> bool:
        return self.operator.is_two_electron

    @property
    def symmetry(self) -> operators.Symmetry:
        return self.operator.symmetry

    def one_electron_block(self, shell_a: BlockLike, shell_b: BlockLike) -> np.ndarray:
        """Returns:
        An array of shape (n_components, nbf_a, nbf_b).
        """
        if self.is_two_electron:
            raise ValueError(
                f"{type(self.operator).__name__} is a two-electron operator."
            )
        return np.asarray(
            one_electron_block_jax(
                _as_block(shell_a), _as_block(shell_b), self.operator
            )
        )

    def _check_two_electron(self) -> None:
        if not self.is_two_electron:
            raise ValueError(
                f"{type(self.operator).__name__} is a one-electron operator."
            )

    def two_electron_block(
        self,
        shell_a: BlockLike,
        shell_b: BlockLike,
        shell_c: BlockLike,
        shell_d: BlockLike,
    ) -> np.ndarray:
        """The result does not depend on the order in which the shells are
        passed, up to the corresponding transposition of the block.

        Returns:
          An array of shape (nbf_a, nbf_b, nbf_c, nbf_d).
        """
        self._check_two_electron()

        blocks, axes = orient_quartet(
            tuple(_as_block(s) for s in (shell_a, shell_b, shell_c, shell_d))
        )
        block = two_electron_block_jax(*blocks, self.operator)
        return np.transpose(np.asarray(block), axes)

    def two_electron_blocks(
        self, quartets: Sequence[tuple[BlockLike, BlockLike, BlockLike, BlockLike]]
    ) -> list[np.ndarray]:
        """Evaluates many quartets. Quartets whose blocks have equal shapes are
        stacked and evaluated by a single compiled call.

        Returns:
          One array of shape (nbf_a, nbf_b, nbf_c, nbf_d) per quartet.
        """
        self._check_two_electron()

        oriented = [
            orient_quartet(tuple(_as_block(s) for s in quartet))
            for quartet in quartets
        ]
        groups = batching.group_by_signature([blocks for blocks, _ in oriented])

        results: list[np.ndarray | None] = [None] * len(oriented)
        for indices in groups.values():
            n_primitives = math.prod(
                block.n_exponents for block in oriented[indices[0]][0]
            )
            max_batch_size = (
                config.MAX_PRIMITIVE_QUARTETS_PER_BATCH // n_primitives
            )

            for batch, n_valid in batching.split_batches(indices, max_batch_size):
                stacks = [
                    batching.stack_blocks([oriented[i][0][n] for i in batch])
                    for n in range(4)
                ]
                values = np.asarray(two_electron_batch_jax(*stacks, self.operator))

                for i, value in zip(batch[:n_valid], values[:n_valid]):
                    results[i] = np.transpose(value, oriented[i][1])

        return results
