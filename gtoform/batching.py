import dataclasses
from collections.abc import Hashable, Sequence

import jax
import jax.numpy as jnp
import numpy as np

from gtoform.basis import basis_block


@dataclasses.dataclass(frozen=True)
class BlockSignature:
    """The static structure of a BasisBlock.

    Blocks with equal signatures can be stacked and evaluated by the same
    compiled function.
    """

    treedef: Hashable
    leaf_shapes: tuple[tuple[int, ...], ...]


def compute_block_signature(
    block: basis_block.BasisBlock,
) -> BlockSignature:
    """Computes a hashable static signature for a BasisBlock."""
    leaves, treedef = jax.tree_util.tree_flatten(block)
    leaf_shapes = tuple(tuple(np.shape(leaf)) for leaf in leaves)
    return BlockSignature(treedef=treedef, leaf_shapes=leaf_shapes)


def group_by_signature(
    block_tuples: Sequence[tuple[basis_block.BasisBlock, ...]],
) -> dict[tuple[BlockSignature, ...], list[int]]:
    """Groups the positions of block tuples by their static signatures.

    The positions in each group keep the order of block_tuples.
    """
    groups: dict[tuple[BlockSignature, ...], list[int]] = {}

    for index, blocks in enumerate(block_tuples):
        key = tuple(compute_block_signature(block) for block in blocks)
        groups.setdefault(key, []).append(index)

    return groups


def stack_blocks(
    blocks: Sequence[basis_block.BasisBlock],
) -> basis_block.BasisBlock:
    """Stacks blocks of equal signature along a new leading axis."""
    return jax.tree.map(lambda *xs: jnp.stack(xs), *blocks)


def split_batches(
    indices: Sequence[int], max_batch_size: int
) -> list[tuple[np.ndarray, int]]:
    """Splits indices into batches of equal size.

    The last batch is padded by repeating its first index so that every
    batch of a group has the same shape.

    Returns:
      A list of (batch, n_valid) pairs. batch has shape (batch_size,) and
      only its first n_valid entries are not padding.
    """
    indices = np.asarray(indices, dtype=np.int64)
    batch_size = max(1, min(len(indices), max_batch_size))

    batches = []
    for start in range(0, len(indices), batch_size):
        batch = indices[start : start + batch_size]
        n_valid = len(batch)
        pad_size = batch_size - n_valid
        batch = np.concatenate([batch, np.full(pad_size, batch[0])])
        batches.append((batch, n_valid))

    return batches
