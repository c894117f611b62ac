import dataclasses
import numbers

import numpy as np

from gtoform import exceptions
from gtoform.basis import cartesian
from gtoform.structure import atom as atom_lib
from gtoform.structure import field as field_lib

_Kind = exceptions.ShellConstructionErrorKind


@dataclasses.dataclass(eq=False)
class Shell:
    """A shell of contracted Gaussian-type orbitals.

    A shell groups the basis functions on a nucleus that share an angular
    momentum l and a contraction:

    psi_m(r) = sum_{d=1}^K c_d Y_m(r - A) e^(-alpha_d |r - A|^2)

    where:
    1. A is the position of the nucleus.
    2. alpha_d = exponents[d] and c_d = coefficients[d] for 0 <= d < K.
    3. Y_m is a Cartesian monomial of degree l, or a real solid harmonic
       of degree l when the shell is pure.

    Normalization factors are not implied: they are only present once they
    have been embedded into the coefficients.
    """

    # The angular momentum of the shell.
    angular_momentum: int

    # The nucleus on which the shell is centered.
    nucleus: atom_lib.Atom

    # The Gaussian exponents, shared by every function of the shell.
    # shape (K,)
    exponents: np.ndarray

    # The contraction coefficients.
    # shape (K,)
    coefficients: np.ndarray

    # Spherical (True) or Cartesian (False) angular functions.
    pure: bool = True

    # If the normalization factors of the primitives are embedded in the
    # contraction coefficients.
    primitives_normalized: bool = False

    # If the normalization factor of the contracted function is embedded in
    # the contraction coefficients.
    shell_normalized: bool = False

    def __post_init__(self):
        l = self.angular_momentum
        if (
            isinstance(l, bool)
            or not isinstance(l, numbers.Integral)
            or l < 0
        ):
            raise exceptions.ShellConstructionError(
                _Kind.INVALID_ANGULAR_MOMENTUM,
                f"angular momentum must be a non-negative integer, got {l!r}.",
            )
        self.angular_momentum = int(l)

        self.exponents = np.array(self.exponents, dtype=np.float64).ravel()
        self.coefficients = np.array(
            self.coefficients, dtype=np.float64
        ).ravel()

        if self.exponents.shape[0] == 0:
            raise exceptions.ShellConstructionError(
                _Kind.EMPTY_CONTRACTION, "a shell needs at least one primitive."
            )

        if self.exponents.shape != self.coefficients.shape:
            raise exceptions.ShellConstructionError(
                _Kind.LENGTH_MISMATCH,
                f"got {self.exponents.shape[0]} exponents and "
                f"{self.coefficients.shape[0]} coefficients.",
            )

        if not np.all(self.exponents > 0):
            raise exceptions.ShellConstructionError(
                _Kind.NON_POSITIVE_EXPONENT,
                f"exponents must be positive, got {self.exponents}.",
            )

    @property
    def center(self) -> np.ndarray:
        """The position of the nucleus. Shape (3,)"""
        return np.asarray(self.nucleus.position, dtype=np.float64)

    @property
    def contraction_size(self) -> int:
        """The number of primitives in the contraction."""
        return self.coefficients.shape[0]

    @property
    def is_normalized(self) -> bool:
        return self.shell_normalized

    @property
    def london_wavevector(self) -> np.ndarray | None:
        """The wave vector k of the phase factor exp(-i k.r), if any."""
        return None

    def number_of_basis_functions(self) -> int:
        if self.pure:
            return cartesian.number_of_spherical_functions(self.angular_momentum)
        return cartesian.number_of_cartesian_functions(self.angular_momentum)

    def generate_cartesian_exponents(self) -> list[tuple[int, int, int]]:
        """The Cartesian powers of degree l, ordered as in
        cartesian.generate_cartesian_powers."""
        powers = cartesian.generate_cartesian_powers(self.angular_momentum)
        return [tuple(p) for p in powers.tolist()]

    def embed_normalization_factors_of_primitives(self) -> None:
        """Multiplies every coefficient by the normalization constant of its
        axis-aligned primitive. Does nothing if this was already done."""
        if self.primitives_normalized:
            return

        self.coefficients = self.coefficients * (
            cartesian.primitive_normalization_constant(
                self.exponents, self.angular_momentum
            )
        )
        self.primitives_normalized = True

    def unembed_normalization_factors_of_primitives(self) -> None:
        """Inverse of embed_normalization_factors_of_primitives. Does nothing
        if the factors are not embedded."""
        if not self.primitives_normalized:
            return

        self.coefficients = self.coefficients / (
            cartesian.primitive_normalization_constant(
                self.exponents, self.angular_momentum
            )
        )
        self.primitives_normalized = False

    def embed_normalization_factor(self) -> None:
        """Scales the coefficients so that the contracted axis-aligned (or
        spherical) function has unit norm.

        The factor depends on the current coefficients, so this only makes
        sense once. It does nothing if the shell is already normalized.
        """
        if self.shell_normalized:
            return

        norm_sq = cartesian.axis_aligned_self_overlap(
            self.exponents, self.coefficients, self.angular_momentum
        )
        self.coefficients = self.coefficients / np.sqrt(norm_sq)
        self.shell_normalized = True

    def __eq__(self, other) -> bool:
        if not isinstance(other, Shell) or type(self) is not type(other):
            return NotImplemented

        return (
            self.angular_momentum == other.angular_momentum
            and self.nucleus == other.nucleus
            and self.pure == other.pure
            and self.primitives_normalized == other.primitives_normalized
            and self.shell_normalized == other.shell_normalized
            and np.array_equal(self.exponents, other.exponents)
            and np.array_equal(self.coefficients, other.coefficients)
        )


@dataclasses.dataclass(eq=False)
class LondonShell(Shell):
    """A shell of London orbitals.

    Every function of the shell carries the field dependent phase factor

    omega(r) = exp(-i k.r) psi(r),  k = 1/2 B x (A - G)

    where psi is the corresponding function of the underlying Shell, B the
    magnetic field, G its gauge origin and A the center of the shell.
    """

    field: field_lib.HomogeneousMagneticField = dataclasses.field(kw_only=True)

    @classmethod
    def from_shell(
        cls, shell: Shell, field: field_lib.HomogeneousMagneticField
    ) -> "LondonShell":
        return cls(
            angular_momentum=shell.angular_momentum,
            nucleus=shell.nucleus,
            exponents=shell.exponents.copy(),
            coefficients=shell.coefficients.copy(),
            pure=shell.pure,
            primitives_normalized=shell.primitives_normalized,
            shell_normalized=shell.shell_normalized,
            field=field,
        )

    @property
    def london_wavevector(self) -> np.ndarray:
        return np.asarray(self.field.vector_potential_at(self.center))

    def __eq__(self, other) -> bool:
        result = super().__eq__(other)
        if result is NotImplemented or not result:
            return result

        return self.field == other.field
