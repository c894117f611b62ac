from collections.abc import Sequence
import dataclasses
import os

from jax.tree_util import register_pytree_node_class
import numpy as np

from gtoform import config
from gtoform.structure import atom as atom_lib

# Atomic numbers of the elements up to krypton.
_ATOMIC_NUMBERS = {
    symbol: number
    for number, symbol in enumerate(
        [
            "H", "He",
            "Li", "Be", "B", "C", "N", "O", "F", "Ne",
            "Na", "Mg", "Al", "Si", "P", "S", "Cl", "Ar",
            "K", "Ca", "Sc", "Ti", "V", "Cr", "Mn", "Fe", "Co", "Ni",
            "Cu", "Zn", "Ga", "Ge", "As", "Se", "Br", "Kr",
        ],
        start=1,
    )
}


def atomic_number(symbol: str) -> int:
    try:
        return _ATOMIC_NUMBERS[symbol.capitalize()]
    except KeyError:
        raise ValueError(f"Unknown element symbol: {symbol}") from None


@register_pytree_node_class
@dataclasses.dataclass
class Molecule:
    atoms: Sequence[atom_lib.Atom]

    @property
    def charges(self) -> np.ndarray:
        """The nuclear charges. Shape (n_atoms,)"""
        return np.array([atom.number for atom in self.atoms], dtype=np.float64)

    @property
    def positions(self) -> np.ndarray:
        """The nuclear positions in Bohr. Shape (n_atoms, 3)"""
        return np.array(
            [np.asarray(atom.position) for atom in self.atoms], dtype=np.float64
        ).reshape(-1, 3)

    @property
    def n_electrons(self) -> int:
        """The number of electrons of the neutral molecule."""
        return sum(atom.number for atom in self.atoms)

    def tree_flatten(self):
        children = (self.atoms,)
        aux_data = None
        return (children, aux_data)

    @classmethod
    def tree_unflatten(
        cls, aux_data: None, children: tuple[Sequence[atom_lib.Atom],]
    ) -> "Molecule":
        return cls(atoms=children[0])

    @classmethod
    def from_xyz(cls, source: str | os.PathLike) -> "Molecule":
        """Builds a Molecule from an XYZ file or the contents of one.

        The XYZ format stores the number of atoms on the first line, a
        comment on the second line and one "symbol x y z" line per atom with
        coordinates in Angstrom. The positions are converted to Bohr.
        """
        if isinstance(source, os.PathLike) or os.path.isfile(source):
            with open(source) as f:
                text = f.read()
        else:
            text = source

        lines = text.strip().splitlines()
        try:
            n_atoms = int(lines[0].split()[0])
        except (IndexError, ValueError):
            raise ValueError(
                "The first line of an XYZ file must hold the number of atoms."
            ) from None

        atom_lines = lines[2 : 2 + n_atoms]
        if len(atom_lines) != n_atoms:
            raise ValueError(
                f"Expected {n_atoms} atoms but found {len(atom_lines)}."
            )

        atoms = []
        for line in atom_lines:
            symbol, x, y, z = line.split()[:4]
            position = np.array([float(x), float(y), float(z)])
            atoms.append(
                atom_lib.Atom(
                    symbol=symbol.capitalize(),
                    number=atomic_number(symbol),
                    position=position * config.ANGSTROM_TO_BOHR,
                )
            )

        return cls(atoms=atoms)
