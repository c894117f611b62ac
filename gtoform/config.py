"""Package wide numeric configuration."""

import jax

# Integrals are only meaningful in double precision.
jax.config.update("jax_enable_x64", True)

# Conversion factor from Angstrom to Bohr (CODATA 2018).
ANGSTROM_TO_BOHR = 1.0 / 0.529177210903

# Below this argument the real Boys function is evaluated with its first
# order Taylor expansion.
BOYS_SMALL_X_THRESHOLD = 1e-12

# Complex Boys function arguments with a real part above this value use the
# asymptotic form. exp(-45) is below double precision relative accuracy.
BOYS_ASYMPTOTIC_THRESHOLD = 45.0

# The number of Gauss-Legendre nodes used for the complex Boys function.
BOYS_QUADRATURE_ORDER = 128

# Shell quartets of equal shape are evaluated together in batches of at most
# this many primitive quartets.
MAX_PRIMITIVE_QUARTETS_PER_BATCH = 8192
