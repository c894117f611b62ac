"""Assembly of full integral matrices and tensors over shell sets."""

import logging

import numpy as np

from gtoform import engine as engine_lib
from gtoform import operators
from gtoform.basis import basis_block
from gtoform.basis import shell_set as shell_set_lib
from gtoform.symmetry import quartet as quartet_lib

logger = logging.getLogger(__name__)


def _check_not_empty(shells: shell_set_lib.ShellSet) -> None:
    if len(shells) == 0:
        raise ValueError("Cannot calculate integrals over an empty ShellSet.")


def _one_electron(
    engine: engine_lib.IntegralEngine,
    bra: shell_set_lib.ShellSet,
    ket: shell_set_lib.ShellSet,
) -> list[np.ndarray]:
    same = ket is bra
    is_complex = (
        bra.is_complex or ket.is_complex or engine.operator.complex_valued
    )
    dtype = np.complex128 if is_complex else np.float64

    # Over a single basis every operator except NONE satisfies
    # O[j, i] = conj(O[i, j]).
    mirror = same and engine.symmetry != operators.Symmetry.NONE

    bra_blocks = [basis_block.build_basis_block(shell) for shell in bra]
    ket_blocks = (
        bra_blocks
        if same
        else [basis_block.build_basis_block(shell) for shell in ket]
    )
    bra_slices = bra.basis_function_slices()
    ket_slices = ket.basis_function_slices()

    # shape (n_components, nbf_bra, nbf_ket)
    result = np.zeros(
        (
            engine.number_of_components,
            bra.number_of_basis_functions(),
            ket.number_of_basis_functions(),
        ),
        dtype=dtype,
    )

    n_blocks = 0
    for i, (block_i, slice_i) in enumerate(zip(bra_blocks, bra_slices)):
        for j, (block_j, slice_j) in enumerate(zip(ket_blocks, ket_slices)):
            if mirror and j < i:
                continue

            block = engine.one_electron_block(block_i, block_j)
            result[:, slice_i, slice_j] = block
            n_blocks += 1

            if mirror and j > i:
                mirrored = np.swapaxes(block, -1, -2)
                result[:, slice_j, slice_i] = (
                    mirrored.conj() if is_complex else mirrored
                )

    logger.debug("Evaluated %d shell pair blocks.", n_blocks)
    return list(result)


def _two_electron(
    engine: engine_lib.IntegralEngine, shells: shell_set_lib.ShellSet
) -> np.ndarray:
    if shells.is_complex:
        symmetries = quartet_lib.complex_symmetries()
        dtype = np.complex128
    else:
        symmetries = quartet_lib.real_symmetries()
        dtype = np.float64

    blocks = [basis_block.build_basis_block(shell) for shell in shells]
    slices = shells.basis_function_slices()

    nbf = shells.number_of_basis_functions()
    result = np.zeros((nbf,) * 4, dtype=dtype)

    quartets = list(
        quartet_lib.iter_canonical_quartets(len(shells), symmetries)
    )
    quartet_blocks = engine.two_electron_blocks(
        [tuple(blocks[q] for q in quartet) for quartet in quartets]
    )

    for quartet, block in zip(quartets, quartet_blocks):
        for sigma, conjugate in symmetries:
            image = quartet_lib.apply_permutation(sigma, quartet)
            image_block = np.transpose(block, sigma)
            if conjugate:
                image_block = image_block.conj()

            result[tuple(slices[q] for q in image)] = image_block

    logger.debug("Evaluated %d shell quartet blocks.", len(quartets))
    return result


def calculate(
    engine: engine_lib.IntegralEngine,
    bra: shell_set_lib.ShellSet,
    ket: shell_set_lib.ShellSet | None = None,
) -> list[np.ndarray]:
    """Calculates the integrals of the engine's operator over shell sets.

    Args:
      engine: The engine of the operator.
      bra: The shells of the bra.
      ket: The shells of the ket. Defaults to the bra, in which case the
        symmetry of the operator is used to skip half of the shell pairs.

    Returns:
      One array per component of the operator. One-electron operators give
      matrices of shape (nbf_bra, nbf_ket). The Coulomb repulsion gives a
      single tensor of shape (nbf,) * 4 in chemists' notation (ij|kl).
    """
    if ket is None:
        ket = bra

    _check_not_empty(bra)
    _check_not_empty(ket)

    operator_name = type(engine.operator).__name__
    logger.debug("%s: Start building integrals.", operator_name)

    if engine.is_two_electron:
        if ket is not bra:
            raise ValueError(
                "Two-electron integrals are calculated over a single ShellSet."
            )
        results = [_two_electron(engine, bra)]
    else:
        results = _one_electron(engine, bra, ket)

    logger.debug("%s: All integrals built.", operator_name)
    return results


def calculate_integrals(
    operator: operators.Operator, basis: shell_set_lib.ShellSet
) -> list[np.ndarray]:
    """Calculates the integrals of an operator over a single basis."""
    return calculate(engine_lib.IntegralEngine(operator), basis)
