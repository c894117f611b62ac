import pytest

from jax import jit
import numpy as np

import gtoform as gf
from gtoform.basis import spherical
from tests import utils

_NUCLEUS = gf.Atom(symbol="C", number=6, position=np.array([1.0, 2.0, 3.0]))


def _make_shell(l: int, pure: bool) -> gf.Shell:
    return gf.Shell(
        angular_momentum=l,
        nucleus=_NUCLEUS,
        exponents=[0.1, 0.2, 0.3],
        coefficients=[0.5, 0.4, 0.3],
        pure=pure,
    )


def test_build_basis_block_cartesian():
    block = gf.basis.build_basis_block(_make_shell(l=1, pure=False))

    assert block.n_exponents == 3
    assert block.n_cart == 3
    assert block.n_basis == 3
    assert block.max_degree == 1
    assert block.phase is None

    np.testing.assert_allclose(block.center, [1.0, 2.0, 3.0])
    np.testing.assert_allclose(block.exponents, [0.1, 0.2, 0.3])
    np.testing.assert_array_equal(
        block.cartesian_powers, [[1, 0, 0], [0, 1, 0], [0, 0, 1]]
    )
    np.testing.assert_allclose(
        block.contraction_matrix, np.tile([0.5, 0.4, 0.3], (3, 1))
    )
    np.testing.assert_allclose(block.basis_transform, np.eye(3))


@pytest.mark.parametrize("l, pure, n_basis", [(2, True, 5), (2, False, 6)])
def test_build_basis_block_d(l, pure, n_basis):
    block = gf.basis.build_basis_block(_make_shell(l=l, pure=pure))

    assert block.n_cart == 6
    assert block.n_basis == n_basis
    assert block.max_degree == 2
    if pure:
        np.testing.assert_allclose(
            block.basis_transform, spherical.spherical_transformation(2)
        )


def test_build_basis_block_london():
    field = gf.HomogeneousMagneticField(strength=np.array([0.0, 0.0, 1.0]))
    shell = gf.LondonShell.from_shell(_make_shell(l=0, pure=True), field)
    block = gf.basis.build_basis_block(shell)

    np.testing.assert_allclose(block.phase, [-1.0, 0.5, 0.0])


@pytest.mark.parametrize("london", [False, True])
def test_basis_block_pytree(london):
    shell = _make_shell(l=2, pure=True)
    if london:
        field = gf.HomogeneousMagneticField(strength=np.array([0.3, 0.0, 0.1]))
        shell = gf.LondonShell.from_shell(shell, field)

    block = gf.basis.build_basis_block(shell)
    utils.assert_valid_pytree(block)

    jitted = jit(lambda b: b)(block)
    assert jitted.max_degree == 2
    np.testing.assert_array_equal(jitted.cartesian_powers, block.cartesian_powers)
