from .atom import Atom
from .field import HomogeneousMagneticField
from .molecule import Molecule
