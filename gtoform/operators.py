"""Descriptors of the operators that can be integrated.

Every operator is an immutable pytree so that it can be passed as a regular
argument to jitted code. Its primitive method evaluates the operator between
primitive Cartesian Gaussians. One electron operators return an array of
shape (n_components, d1+1, d1+1, d1+1, d2+1, d2+1, d2+1).
"""

import dataclasses
import enum
from typing import ClassVar

import jax
import jax.numpy as jnp
from jax.tree_util import register_pytree_node_class
import numpy as np

from gtoform import types
from gtoform.integrals import coulomb
from gtoform.integrals import gaussian
from gtoform.integrals import kinetic
from gtoform.integrals import momentum
from gtoform.integrals import multipole
from gtoform.integrals import overlap
from gtoform.structure import molecule as molecule_lib


class Symmetry(enum.Enum):
    """How the (j, i) matrix element relates to the (i, j) element over a
    single basis."""

    # O[j, i] = O[i, j] for real basis functions. Every symmetric operator is
    # also Hermitian, so O[j, i] = conj(O[i, j]) over London orbitals.
    SYMMETRIC = 1

    # O[j, i] = conj(O[i, j]).
    HERMITIAN = 2

    # No relation. Every matrix element is computed.
    NONE = 3


def _origin_field():
    return dataclasses.field(default_factory=lambda: np.zeros(3))


def _is_concrete(*values) -> bool:
    return all(isinstance(v, (np.ndarray, jax.Array)) for v in values)


def _check_origin(origin) -> None:
    if _is_concrete(origin) and origin.shape != (3,):
        raise ValueError(f"origin must have shape (3,), got {origin.shape}.")


class _Operator:
    """The capabilities shared by all operators."""

    number_of_components: ClassVar[int] = 1
    component_labels: ClassVar[tuple[str, ...]] = ("",)
    symmetry: ClassVar[Symmetry] = Symmetry.SYMMETRIC
    is_two_electron: ClassVar[bool] = False

    # True if the integrals are complex even over real basis functions.
    complex_valued: ClassVar[bool] = False

    def tree_flatten(self):
        return ((), None)

    @classmethod
    def tree_unflatten(cls, aux_data: None, children: tuple):
        return cls()


@register_pytree_node_class
@dataclasses.dataclass(frozen=True, eq=False)
class OverlapOperator(_Operator):
    def primitive(
        self, g1: gaussian.GaussianBasis3d, g2: gaussian.GaussianBasis3d
    ) -> jax.Array:
        return overlap.overlap_3d(g1, g2)[None]


@register_pytree_node_class
@dataclasses.dataclass(frozen=True, eq=False)
class KineticOperator(_Operator):
    """The kinetic energy -1/2 nabla^2."""

    def primitive(
        self, g1: gaussian.GaussianBasis3d, g2: gaussian.GaussianBasis3d
    ) -> jax.Array:
        return kinetic.kinetic_3d(g1, g2)[None]


@register_pytree_node_class
@dataclasses.dataclass(frozen=True, eq=False)
class NuclearAttractionOperator(_Operator):
    """The attraction -sum_C Z_C / |r - C| of the electrons to the nuclei."""

    # shape (n_nuclei,)
    charges: types.Array

    # shape (n_nuclei, 3)
    positions: types.Array

    def __post_init__(self):
        types.promote_dataclass_fields(self)

        if _is_concrete(self.charges, self.positions):
            if self.positions.ndim != 2 or self.positions.shape[1] != 3:
                raise ValueError(
                    "positions must have shape (n_nuclei, 3), "
                    f"got {self.positions.shape}."
                )
            if self.charges.shape != self.positions.shape[:1]:
                raise ValueError(
                    f"Got {self.charges.shape[0]} charges for "
                    f"{self.positions.shape[0]} positions."
                )

    @classmethod
    def from_molecule(
        cls, molecule: molecule_lib.Molecule
    ) -> "NuclearAttractionOperator":
        return cls(charges=molecule.charges, positions=molecule.positions)

    def tree_flatten(self):
        return ((self.charges, self.positions), None)

    @classmethod
    def tree_unflatten(cls, aux_data: None, children: tuple):
        return cls(charges=children[0], positions=children[1])

    def primitive(
        self, g1: gaussian.GaussianBasis3d, g2: gaussian.GaussianBasis3d
    ) -> jax.Array:
        # shape (n_nuclei, d1+1, d1+1, d1+1, d2+1, d2+1, d2+1)
        per_nucleus = jax.vmap(
            lambda C: coulomb.one_electron(g1, g2, C)
        )(self.positions)

        return -jnp.tensordot(self.charges, per_nucleus, axes=1)[None]


@register_pytree_node_class
@dataclasses.dataclass(frozen=True, eq=False)
class ElectronicDipoleOperator(_Operator):
    """The electronic dipole -(r - origin)."""

    number_of_components: ClassVar[int] = 3
    component_labels: ClassVar[tuple[str, ...]] = ("x", "y", "z")

    # shape (3,)
    origin: types.Array = _origin_field()

    def __post_init__(self):
        types.promote_dataclass_fields(self)
        _check_origin(self.origin)

    def tree_flatten(self):
        return ((self.origin,), None)

    @classmethod
    def tree_unflatten(cls, aux_data: None, children: tuple):
        return cls(origin=children[0])

    def primitive(
        self, g1: gaussian.GaussianBasis3d, g2: gaussian.GaussianBasis3d
    ) -> jax.Array:
        return multipole.dipole_3d(g1, g2, self.origin)


@register_pytree_node_class
@dataclasses.dataclass(frozen=True, eq=False)
class ElectronicQuadrupoleOperator(_Operator):
    """The electronic quadrupole -(r - origin)_a (r - origin)_b."""

    number_of_components: ClassVar[int] = 6
    component_labels: ClassVar[tuple[str, ...]] = (
        "xx",
        "xy",
        "xz",
        "yy",
        "yz",
        "zz",
    )

    # shape (3,)
    origin: types.Array = _origin_field()

    def __post_init__(self):
        types.promote_dataclass_fields(self)
        _check_origin(self.origin)

    def tree_flatten(self):
        return ((self.origin,), None)

    @classmethod
    def tree_unflatten(cls, aux_data: None, children: tuple):
        return cls(origin=children[0])

    def primitive(
        self, g1: gaussian.GaussianBasis3d, g2: gaussian.GaussianBasis3d
    ) -> jax.Array:
        return multipole.quadrupole_3d(g1, g2, self.origin)


@register_pytree_node_class
@dataclasses.dataclass(frozen=True, eq=False)
class LinearMomentumOperator(_Operator):
    """The linear momentum -i nabla."""

    number_of_components: ClassVar[int] = 3
    component_labels: ClassVar[tuple[str, ...]] = ("x", "y", "z")
    symmetry: ClassVar[Symmetry] = Symmetry.HERMITIAN
    complex_valued: ClassVar[bool] = True

    def primitive(
        self, g1: gaussian.GaussianBasis3d, g2: gaussian.GaussianBasis3d
    ) -> jax.Array:
        return momentum.linear_momentum_3d(g1, g2)


@register_pytree_node_class
@dataclasses.dataclass(frozen=True, eq=False)
class AngularMomentumOperator(_Operator):
    """The angular momentum -i (r - origin) x nabla."""

    number_of_components: ClassVar[int] = 3
    component_labels: ClassVar[tuple[str, ...]] = ("x", "y", "z")
    symmetry: ClassVar[Symmetry] = Symmetry.HERMITIAN
    complex_valued: ClassVar[bool] = True

    # shape (3,)
    origin: types.Array = _origin_field()

    def __post_init__(self):
        types.promote_dataclass_fields(self)
        _check_origin(self.origin)

    def tree_flatten(self):
        return ((self.origin,), None)

    @classmethod
    def tree_unflatten(cls, aux_data: None, children: tuple):
        return cls(origin=children[0])

    def primitive(
        self, g1: gaussian.GaussianBasis3d, g2: gaussian.GaussianBasis3d
    ) -> jax.Array:
        return momentum.angular_momentum_3d(g1, g2, self.origin)


@register_pytree_node_class
@dataclasses.dataclass(frozen=True, eq=False)
class CoulombRepulsionOperator(_Operator):
    """The electron repulsion 1/|r1 - r2|, integrated in chemists' notation
    (12|34)."""

    is_two_electron: ClassVar[bool] = True

    def primitive(
        self,
        g1: gaussian.GaussianBasis3d,
        g2: gaussian.GaussianBasis3d,
        g3: gaussian.GaussianBasis3d,
        g4: gaussian.GaussianBasis3d,
    ) -> jax.Array:
        return coulomb.two_electron(g1, g2, g3, g4)


Operator = (
    OverlapOperator
    | KineticOperator
    | NuclearAttractionOperator
    | ElectronicDipoleOperator
    | ElectronicQuadrupoleOperator
    | LinearMomentumOperator
    | AngularMomentumOperator
    | CoulombRepulsionOperator
)
