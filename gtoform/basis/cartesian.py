import functools
import math

import numpy as np


def _generate_cartesian_powers(l: int) -> np.ndarray:
    """Generates the Cartesian powers for the given angular momentum.

    Returns:
        A numpy array of shape (M, 3) where M is the total number of
        triples (i, j, k) of non-negative integers satisfying:
        i + j + k = l.
    """
    powers = [
        (i, j, l - i - j)
        for i in range(l, -1, -1)
        for j in range(l - i, -1, -1)
    ]
    return np.array(powers, dtype=np.int32).reshape(-1, 3)


@functools.lru_cache(maxsize=None)
def _cached_cartesian_powers(l: int) -> np.ndarray:
    powers = _generate_cartesian_powers(l)
    powers.setflags(write=False)
    return powers


def generate_cartesian_powers(l: int) -> np.ndarray:
    """Generates the Cartesian powers for the given angular momentum.

    The powers are ordered by descending x power, then by descending y
    power. For l=2 this is xx, xy, xz, yy, yz, zz.

    Returns:
        A read-only numpy array of shape (M, 3) where M = (l+1)(l+2)/2
    """
    if l < 0:
        raise ValueError(f"Angular momentum must be non-negative, got {l}.")

    return _cached_cartesian_powers(l)


def number_of_cartesian_functions(l: int) -> int:
    return (l + 1) * (l + 2) // 2


def number_of_spherical_functions(l: int) -> int:
    return 2 * l + 1


def double_factorial(n: int) -> int:
    """n!! with the convention (-1)!! = 0!! = 1."""
    if n <= 0:
        return 1
    return math.prod(range(n, 0, -2))


def primitive_normalization_constant(exponent, l: int):
    """The normalization constant of an axis-aligned Cartesian Gaussian.

    Formula:
      N(a, l) = (2a/pi)^(3/4) (4a)^(l/2) / sqrt((2l-1)!!)

    N(a, l) normalizes x^l e^(-a r^2). Because real solid harmonics are
    normalized to the axis-aligned component, it also normalizes the
    spherical primitives.

    Args:
      exponent: The Gaussian exponent. A scalar or an array.
      l: The angular momentum.
    """
    a = np.asarray(exponent, dtype=np.float64)
    return (
        np.power(2 * a / np.pi, 0.75)
        * np.power(4 * a, l / 2)
        / np.sqrt(double_factorial(2 * l - 1))
    )


def axis_aligned_self_overlap(exponents, coefficients, l: int) -> float:
    """The squared norm of a contracted axis-aligned Gaussian.

    Formula:
      S = sum_{p,q} c_p c_q (2l-1)!! / (2(a_p + a_q))^l (pi/(a_p + a_q))^(3/2)

    which is the integral of (sum_p c_p x^l e^(-a_p r^2))^2.
    """
    a = np.asarray(exponents, dtype=np.float64)
    c = np.asarray(coefficients, dtype=np.float64)

    # shape (K, K)
    p = a[:, None] + a[None, :]
    overlaps = (
        double_factorial(2 * l - 1)
        / np.power(2 * p, l)
        * np.power(np.pi / p, 1.5)
    )
    return float(c @ overlaps @ c)
