from .quartet import (
    QuartetSymmetry,
    apply_permutation,
    complex_symmetries,
    iter_canonical_quartets,
    real_symmetries,
)
