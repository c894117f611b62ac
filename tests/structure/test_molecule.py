import numpy as np
import pytest

import gtoform as gf
from gtoform import config
from tests import utils

_WATER_XYZ = """3
water
O   0.000000   0.000000   0.117300
H   0.000000   0.757200  -0.469200
h   0.000000  -0.757200  -0.469200
"""


def test_molecule_pytree():
    molecule = gf.Molecule(
        atoms=[
            gf.Atom(symbol="H", number=1, position=np.array([0.0, 0.0, 0.0])),
            gf.Atom(symbol="O", number=8, position=np.array([1.0, 0.0, 0.0])),
        ]
    )

    utils.assert_valid_pytree(molecule)


def test_atom_pytree():
    atom = gf.Atom(symbol="H", number=1, position=np.array([0.0, 0.0, 0.0]))
    utils.assert_valid_pytree(atom)


def test_properties():
    molecule = gf.Molecule(
        atoms=[
            gf.Atom(symbol="O", number=8, position=np.array([0.0, 0.0, 0.0])),
            gf.Atom(symbol="H", number=1, position=np.array([0.0, 1.0, 1.0])),
            gf.Atom(symbol="H", number=1, position=np.array([0.0, -1.0, 1.0])),
        ]
    )

    np.testing.assert_array_equal(molecule.charges, [8.0, 1.0, 1.0])
    assert molecule.positions.shape == (3, 3)
    np.testing.assert_array_equal(molecule.positions[2], [0.0, -1.0, 1.0])
    assert molecule.n_electrons == 10


def test_from_xyz_string():
    molecule = gf.Molecule.from_xyz(_WATER_XYZ)

    assert [atom.symbol for atom in molecule.atoms] == ["O", "H", "H"]
    assert [atom.number for atom in molecule.atoms] == [8, 1, 1]
    np.testing.assert_allclose(
        molecule.atoms[1].position,
        np.array([0.0, 0.7572, -0.4692]) * config.ANGSTROM_TO_BOHR,
    )


def test_from_xyz_file(tmp_path):
    path = tmp_path / "water.xyz"
    path.write_text(_WATER_XYZ)

    from_file = gf.Molecule.from_xyz(path)
    from_str = gf.Molecule.from_xyz(str(path))

    np.testing.assert_allclose(
        from_file.positions, gf.Molecule.from_xyz(_WATER_XYZ).positions
    )
    np.testing.assert_allclose(from_str.positions, from_file.positions)


@pytest.mark.parametrize(
    "text",
    [
        "not a number\ncomment\nH 0 0 0\n",
        "2\ncomment\nH 0 0 0\n",
        "1\ncomment\nXx 0 0 0\n",
    ],
)
def test_from_xyz_invalid(text):
    with pytest.raises(ValueError):
        gf.Molecule.from_xyz(text)


def test_atom_equality():
    a = gf.Atom(symbol="H", number=1, position=np.array([0.0, 0.0, 1.0]))
    b = gf.Atom(symbol="H", number=1, position=np.array([0.0, 0.0, 1.0]))
    c = gf.Atom(symbol="H", number=1, position=np.array([0.0, 0.0, 2.0]))

    assert a == b
    assert a != c
