from typing import NamedTuple

import numpy as np
import basis_set_exchange as bse


class ShellSpec(NamedTuple):
    """One contracted shell as stored in a basis set library."""

    angular_momentum: int
    exponents: np.ndarray  # shape (K,)
    coefficients: np.ndarray  # shape (K,)
    pure: bool


_STR_TO_PURE = {
    "gto": False,
    "gto_cartesian": False,
    "gto_spherical": True,
}


def load(basis_name: str, element: int) -> list[ShellSpec]:
    """Loads the shells of an element from the Basis Set Exchange.

    General contractions such as the "sp" shells of the Pople basis sets
    are split into one ShellSpec per angular momentum.
    """
    bse_data = bse.get_basis(basis_name, elements=[element])
    electron_shells = bse_data["elements"][str(element)]["electron_shells"]

    specs = []
    for shell in electron_shells:
        angular_momentum = shell["angular_momentum"]
        if len(angular_momentum) == 1:
            angular_momentum = angular_momentum * len(shell["coefficients"])

        exponents = np.array(shell["exponents"], dtype=np.float64)
        pure = _STR_TO_PURE[shell["function_type"]]
        for l, coefficients in zip(angular_momentum, shell["coefficients"]):
            specs.append(
                ShellSpec(
                    angular_momentum=l,
                    exponents=exponents,
                    coefficients=np.array(coefficients, dtype=np.float64),
                    pure=pure,
                )
            )

    return specs
