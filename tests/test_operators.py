import pytest

import numpy as np

import gtoform as gf
from gtoform import operators
from tests import utils

_WATER = gf.Molecule(
    atoms=[
        gf.Atom(symbol="O", number=8, position=np.array([0.0, 0.0, 0.2])),
        gf.Atom(symbol="H", number=1, position=np.array([0.0, 1.4, -0.9])),
        gf.Atom(symbol="H", number=1, position=np.array([0.0, -1.4, -0.9])),
    ]
)


@pytest.mark.parametrize(
    "operator, n_components, symmetry, two_electron, complex_valued",
    [
        (gf.OverlapOperator(), 1, gf.Symmetry.SYMMETRIC, False, False),
        (gf.KineticOperator(), 1, gf.Symmetry.SYMMETRIC, False, False),
        (
            gf.NuclearAttractionOperator.from_molecule(_WATER),
            1,
            gf.Symmetry.SYMMETRIC,
            False,
            False,
        ),
        (gf.ElectronicDipoleOperator(), 3, gf.Symmetry.SYMMETRIC, False, False),
        (gf.ElectronicQuadrupoleOperator(), 6, gf.Symmetry.SYMMETRIC, False, False),
        (gf.LinearMomentumOperator(), 3, gf.Symmetry.HERMITIAN, False, True),
        (gf.AngularMomentumOperator(), 3, gf.Symmetry.HERMITIAN, False, True),
        (gf.CoulombRepulsionOperator(), 1, gf.Symmetry.SYMMETRIC, True, False),
    ],
)
def test_capabilities(
    operator, n_components, symmetry, two_electron, complex_valued
):
    assert operator.number_of_components == n_components
    assert len(operator.component_labels) == n_components
    assert operator.symmetry == symmetry
    assert operator.is_two_electron == two_electron
    assert operator.complex_valued == complex_valued

    utils.assert_valid_pytree(operator)


def test_nuclear_attraction_from_molecule():
    operator = gf.NuclearAttractionOperator.from_molecule(_WATER)

    np.testing.assert_array_equal(operator.charges, [8.0, 1.0, 1.0])
    np.testing.assert_array_equal(operator.positions, _WATER.positions)


@pytest.mark.parametrize(
    "charges, positions",
    [
        (np.array([1.0]), np.zeros(3)),
        (np.array([1.0, 2.0]), np.zeros((1, 3))),
        (np.array([1.0]), np.zeros((1, 2))),
    ],
)
def test_nuclear_attraction_invalid(charges, positions):
    with pytest.raises(ValueError):
        gf.NuclearAttractionOperator(charges=charges, positions=positions)


@pytest.mark.parametrize(
    "operator_cls",
    [
        gf.ElectronicDipoleOperator,
        gf.ElectronicQuadrupoleOperator,
        gf.AngularMomentumOperator,
    ],
)
def test_invalid_origin(operator_cls):
    with pytest.raises(ValueError):
        operator_cls(origin=np.zeros(2))


def test_primitive_shapes():
    g1 = gf.GaussianBasis3d(max_degree=1, exponent=0.5, center=np.zeros(3))
    g2 = gf.GaussianBasis3d(
        max_degree=2, exponent=0.3, center=np.array([0.0, 0.0, 1.0])
    )

    one_electron = [
        gf.OverlapOperator(),
        gf.KineticOperator(),
        gf.NuclearAttractionOperator.from_molecule(_WATER),
        gf.ElectronicDipoleOperator(),
        gf.ElectronicQuadrupoleOperator(),
        gf.LinearMomentumOperator(),
        gf.AngularMomentumOperator(),
    ]
    for operator in one_electron:
        result = operator.primitive(g1, g2)
        assert result.shape == (operator.number_of_components,) + (2,) * 3 + (3,) * 3
        utils.assert_no_nan(result)

    eri = gf.CoulombRepulsionOperator().primitive(g1, g2, g1, g2)
    assert eri.shape == (2,) * 3 + (3,) * 3 + (2,) * 3 + (3,) * 3


def test_nuclear_attraction_is_sum_over_nuclei():
    g1 = gf.GaussianBasis3d(max_degree=1, exponent=0.5, center=np.zeros(3))
    g2 = gf.GaussianBasis3d(
        max_degree=1, exponent=0.3, center=np.array([0.0, 0.0, 1.0])
    )
    operator = gf.NuclearAttractionOperator.from_molecule(_WATER)

    expected = -sum(
        atom.number * gf.integrals.coulomb.one_electron(g1, g2, atom.position)
        for atom in _WATER.atoms
    )
    np.testing.assert_allclose(
        operator.primitive(g1, g2)[0], expected, rtol=1e-12
    )
