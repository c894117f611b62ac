from . import config

from .types import Array
from .exceptions import ShellConstructionError, ShellConstructionErrorKind

from . import structure
from .structure.atom import Atom
from .structure.field import HomogeneousMagneticField
from .structure.molecule import Molecule

from . import adapters

from . import basis
from .basis.basis_block import BasisBlock
from .basis.shell import LondonShell, Shell
from .basis.shell_set import ShellSet

from . import integrals
from .integrals.gaussian import GaussianBasis1d, GaussianBasis3d

from . import operators
from .operators import (
    AngularMomentumOperator,
    CoulombRepulsionOperator,
    ElectronicDipoleOperator,
    ElectronicQuadrupoleOperator,
    KineticOperator,
    LinearMomentumOperator,
    NuclearAttractionOperator,
    OverlapOperator,
    Symmetry,
)

from . import symmetry

from .engine import IntegralEngine
from .calculator import calculate, calculate_integrals

from . import io
