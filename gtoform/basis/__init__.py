from .basis_block import BasisBlock, build_basis_block
from .cartesian import generate_cartesian_powers
from .shell import LondonShell, Shell
from .shell_set import ShellSet
from .spherical import spherical_transformation
