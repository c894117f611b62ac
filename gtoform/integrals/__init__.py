from . import coulomb, gaussian, kinetic, moments, momentum, multipole, overlap
from .gaussian import GaussianBasis1d, GaussianBasis3d
