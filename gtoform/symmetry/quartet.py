from typing import Iterable, Literal, NamedTuple, Sequence
import itertools

# A quartet is a tuple of four indices which we will typically
# denote as (i, j, k, l).
Quartet = tuple[int, int, int, int]

# A permutation sigma is a tuple of unique indices in {0, 1, 2, 3}.
#
# The permutation sigma acts on a quartet q by "pulling":
# sigma(q) = (q[sigma[0]], q[sigma[1]], q[sigma[2]], q[sigma[3]])
#
# An integral block of the quartet q maps to the block of sigma(q) by
# jnp.transpose(block, sigma).
_Index = Literal[0, 1, 2, 3]
Permutation = tuple[_Index, _Index, _Index, _Index]


class QuartetSymmetry(NamedTuple):
    """A symmetry (sigma(q)) = (q) of the two-electron integrals, possibly up
    to complex conjugation."""

    permutation: Permutation
    conjugate: bool = False


# Symmetries of the two-electron integrals over real orbitals.
_REAL_SYMMETRIES: tuple[QuartetSymmetry, ...] = (
    QuartetSymmetry((0, 1, 2, 3)),  # Identity
    QuartetSymmetry((1, 0, 2, 3)),  # Swap i-j
    QuartetSymmetry((0, 1, 3, 2)),  # Swap k-l
    QuartetSymmetry((1, 0, 3, 2)),  # Swap i-j, k-l
    QuartetSymmetry((2, 3, 0, 1)),  # Swap pairs (ij)-(kl)
    QuartetSymmetry((3, 2, 0, 1)),  # Swap pairs + Swap i-j (on new pos)
    QuartetSymmetry((2, 3, 1, 0)),  # Swap pairs + Swap k-l (on new pos)
    QuartetSymmetry((3, 2, 1, 0)),  # All swaps
)

# Symmetries of the two-electron integrals over complex orbitals, where
# (ij|kl) = integral conj(i(1)) j(1) conj(k(2)) l(2) / r12.
# Exchanging the electrons gives (kl|ij) = (ij|kl), and conjugation gives
# (ji|lk) = conj((ij|kl)). The swap i-j alone is not a symmetry.
_COMPLEX_SYMMETRIES: tuple[QuartetSymmetry, ...] = (
    QuartetSymmetry((0, 1, 2, 3)),  # Identity
    QuartetSymmetry((2, 3, 0, 1)),  # Swap pairs (ij)-(kl)
    QuartetSymmetry((1, 0, 3, 2), conjugate=True),  # Swap i-j, k-l
    QuartetSymmetry((3, 2, 1, 0), conjugate=True),  # All swaps
)


def real_symmetries() -> tuple[QuartetSymmetry, ...]:
    return _REAL_SYMMETRIES


def complex_symmetries() -> tuple[QuartetSymmetry, ...]:
    return _COMPLEX_SYMMETRIES


def apply_permutation(
    sigma: Permutation, quartet: Quartet
) -> Quartet:
    return (
        quartet[sigma[0]],
        quartet[sigma[1]],
        quartet[sigma[2]],
        quartet[sigma[3]],
    )


def _iter_real_canonical_quartets(n: int) -> Iterable[Quartet]:
    """
    Yields unique tuples (i, j, k, l) satisfying:
    1. i >= j
    2. k >= l
    3. (i, j) >= (k, l)
    """
    # Create the list of all pairs (i, j) with i >= j
    pairs = [(i, j) for i in range(n) for j in range(i + 1)]

    # Iterate over pairs-of-pairs where (k, l) <= (i, j)
    for (k, l), (i, j) in itertools.combinations_with_replacement(pairs, 2):
        yield (i, j, k, l)


def iter_canonical_quartets(
    n: int, symmetries: Sequence[QuartetSymmetry] | None = None
) -> Iterable[Quartet]:
    """Yields one quartet of indices in range(n) per orbit of the symmetries.

    The representative of an orbit is its lexicographically largest quartet.
    The symmetries default to the real 8-fold symmetries.
    """
    if symmetries is None or tuple(symmetries) == _REAL_SYMMETRIES:
        yield from _iter_real_canonical_quartets(n)
        return

    for quartet in itertools.product(range(n), repeat=4):
        if all(
            apply_permutation(s.permutation, quartet) <= quartet
            for s in symmetries
        ):
            yield quartet
