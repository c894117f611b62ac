import dataclasses
import functools
from collections.abc import Iterator, Sequence
from typing import Callable

import numpy as np

from gtoform.adapters import bse
from gtoform.basis import shell as shell_lib
from gtoform.structure import field as field_lib
from gtoform.structure import molecule as molecule_lib

# Fetches the shells of an element given its atomic number.
BasisFetcher = Callable[[int], Sequence[bse.ShellSpec]]


@dataclasses.dataclass
class ShellSet:
    """An ordered collection of shells that spans a basis.

    The basis functions are numbered shell by shell in the order of the
    shells, and within a shell in the order of its Cartesian or spherical
    components.
    """

    shells: Sequence[shell_lib.Shell]

    def __post_init__(self):
        self.shells = list(self.shells)

    def __len__(self) -> int:
        return len(self.shells)

    def __iter__(self) -> Iterator[shell_lib.Shell]:
        return iter(self.shells)

    def __getitem__(self, index: int) -> shell_lib.Shell:
        return self.shells[index]

    @property
    def number_of_shells(self) -> int:
        return len(self.shells)

    @property
    def is_complex(self) -> bool:
        """True if any of the shells carries a London phase factor."""
        return any(
            shell.london_wavevector is not None for shell in self.shells
        )

    def number_of_basis_functions(self) -> int:
        return sum(shell.number_of_basis_functions() for shell in self.shells)

    def basis_function_offsets(self) -> np.ndarray:
        """The index of the first basis function of every shell.

        Returns:
          An integer array of shape (n_shells,)
        """
        sizes = [shell.number_of_basis_functions() for shell in self.shells]
        return np.cumsum([0] + sizes[:-1], dtype=np.int64)[: len(sizes)]

    def basis_function_slices(self) -> list[slice]:
        offsets = self.basis_function_offsets()
        return [
            slice(start, start + shell.number_of_basis_functions())
            for start, shell in zip(offsets.tolist(), self.shells)
        ]

    def embed_normalization_factors_of_primitives(self) -> None:
        for shell in self.shells:
            shell.embed_normalization_factors_of_primitives()

    def unembed_normalization_factors_of_primitives(self) -> None:
        for shell in self.shells:
            shell.unembed_normalization_factors_of_primitives()

    def embed_normalization_factor(self) -> None:
        for shell in self.shells:
            shell.embed_normalization_factor()

    def with_field(self, field: field_lib.HomogeneousMagneticField) -> "ShellSet":
        """Returns a copy of this set with every shell turned into a London
        shell in the given magnetic field."""
        return ShellSet(
            shells=[
                shell_lib.LondonShell.from_shell(shell, field)
                for shell in self.shells
            ]
        )

    @classmethod
    def from_molecule(
        cls,
        molecule: molecule_lib.Molecule,
        basis_name: str,
        field: field_lib.HomogeneousMagneticField | None = None,
        pure: bool | None = None,
    ) -> "ShellSet":
        """Builds the normalized shells of a named basis set on a molecule.

        If pure is given it overrides the angular type declared by the basis
        set for every shell.
        """
        fetcher = functools.partial(bse.load, basis_name)
        return build(molecule, fetcher, field=field, pure=pure)


def build(
    molecule: molecule_lib.Molecule,
    basis_fetcher: BasisFetcher,
    field: field_lib.HomogeneousMagneticField | None = None,
    pure: bool | None = None,
) -> ShellSet:
    """Builds a ShellSet from a molecule and a basis set lookup.

    The shells follow the order of the atoms. The normalization factors of
    the primitives and of the contracted functions are embedded in the
    coefficients. If a field is given, London shells are built instead.
    """
    shells = []
    for atom in molecule.atoms:
        for spec in basis_fetcher(atom.number):
            shell = shell_lib.Shell(
                angular_momentum=spec.angular_momentum,
                nucleus=atom,
                exponents=spec.exponents,
                coefficients=spec.coefficients,
                pure=spec.pure if pure is None else pure,
            )
            shell.embed_normalization_factors_of_primitives()
            shell.embed_normalization_factor()

            if field is not None:
                shell = shell_lib.LondonShell.from_shell(shell, field)

            shells.append(shell)

    return ShellSet(shells=shells)
