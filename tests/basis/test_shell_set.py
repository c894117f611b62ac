import numpy as np
import pytest

import gtoform as gf
from gtoform.adapters import bse
from gtoform.basis import cartesian
from gtoform.basis import shell_set as shell_set_lib

_MOLECULE = gf.Molecule(
    atoms=[
        gf.Atom(symbol="O", number=8, position=np.array([0.0, 0.0, 0.0])),
        gf.Atom(symbol="H", number=1, position=np.array([0.0, 1.4, 1.1])),
    ]
)

_SPECS = {
    1: [
        bse.ShellSpec(
            angular_momentum=0,
            exponents=np.array([1.3, 0.2]),
            coefficients=np.array([0.4, 0.7]),
            pure=True,
        ),
    ],
    8: [
        bse.ShellSpec(
            angular_momentum=0,
            exponents=np.array([20.0, 3.0]),
            coefficients=np.array([0.3, 0.8]),
            pure=True,
        ),
        bse.ShellSpec(
            angular_momentum=1,
            exponents=np.array([2.0]),
            coefficients=np.array([1.0]),
            pure=True,
        ),
        bse.ShellSpec(
            angular_momentum=2,
            exponents=np.array([0.9]),
            coefficients=np.array([1.0]),
            pure=True,
        ),
    ],
}


def _fake_fetcher(element: int) -> list[bse.ShellSpec]:
    return _SPECS[element]


def test_build():
    shells = shell_set_lib.build(_MOLECULE, _fake_fetcher)

    assert len(shells) == 4
    assert shells.number_of_shells == 4
    assert [s.angular_momentum for s in shells] == [0, 1, 2, 0]
    assert shells[3].nucleus.symbol == "H"
    assert shells.number_of_basis_functions() == 1 + 3 + 5 + 1
    assert not shells.is_complex

    np.testing.assert_array_equal(shells.basis_function_offsets(), [0, 1, 4, 9])
    assert shells.basis_function_slices() == [
        slice(0, 1),
        slice(1, 4),
        slice(4, 9),
        slice(9, 10),
    ]

    for shell in shells:
        assert shell.primitives_normalized
        assert shell.is_normalized
        np.testing.assert_allclose(
            cartesian.axis_aligned_self_overlap(
                shell.exponents, shell.coefficients, shell.angular_momentum
            ),
            1.0,
            rtol=1e-12,
        )


@pytest.mark.parametrize("pure, n_functions", [(None, 10), (True, 10), (False, 11)])
def test_build_pure_override(pure, n_functions):
    shells = shell_set_lib.build(_MOLECULE, _fake_fetcher, pure=pure)

    assert shells.number_of_basis_functions() == n_functions


def test_build_with_field():
    field = gf.HomogeneousMagneticField(strength=np.array([0.0, 0.0, 0.2]))
    shells = shell_set_lib.build(_MOLECULE, _fake_fetcher, field=field)

    assert shells.is_complex
    assert all(isinstance(s, gf.LondonShell) for s in shells)

    # The wave vector of a shell at the gauge origin vanishes.
    np.testing.assert_allclose(shells[0].london_wavevector, 0.0)
    np.testing.assert_allclose(
        shells[3].london_wavevector, 0.5 * np.cross([0.0, 0.0, 0.2], [0.0, 1.4, 1.1])
    )


def test_with_field():
    shells = shell_set_lib.build(_MOLECULE, _fake_fetcher)
    field = gf.HomogeneousMagneticField(strength=np.array([0.1, 0.0, 0.0]))
    london = shells.with_field(field)

    assert london.is_complex
    assert not shells.is_complex
    for shell, london_shell in zip(shells, london):
        np.testing.assert_array_equal(shell.coefficients, london_shell.coefficients)


def test_empty():
    shells = gf.ShellSet(shells=[])

    assert len(shells) == 0
    assert shells.number_of_basis_functions() == 0
    assert shells.basis_function_offsets().shape == (0,)
