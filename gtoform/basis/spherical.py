"""Transformation from Cartesian to real spherical Gaussians."""

import functools
import math

import numpy as np

from gtoform.basis import cartesian


def _solid_harmonic_coefficients(l: int, m: int) -> dict[tuple[int, int, int], float]:
    """Expands the real regular solid harmonic S_lm in Cartesian monomials.

    Formula (Helgaker, Jorgensen, Olsen, eq. 6.4.47):
      S_lm = N_lm sum_{t,u,v} C_tuv x^(2t+|m|-2(u+v)) y^(2(u+v)) z^(l-2t-|m|)

      C_tuv = (-1)^(t+v-v_m) (1/4)^t binom(l,t) binom(l-t,|m|+t)
              binom(t,u) binom(|m|,2v)
      N_lm = sqrt(2 (l+|m|)! (l-|m|)! / 2^delta_m0) / (2^|m| l!)

    where v_m = 0 for m >= 0 and 1/2 for m < 0. The normalization is such
    that S_lm has the same norm as z^l on the unit sphere.

    Returns:
      A map from Cartesian powers (i, j, k) to their coefficient.
    """
    abs_m = abs(m)
    norm = math.sqrt(
        2
        * math.factorial(l + abs_m)
        * math.factorial(l - abs_m)
        / (2 if m == 0 else 1)
    ) / (2**abs_m * math.factorial(l))

    # v is a half integer for negative m, so we iterate over 2v instead.
    two_v_m = 1 if m < 0 else 0

    coefficients: dict[tuple[int, int, int], float] = {}
    for t in range((l - abs_m) // 2 + 1):
        for u in range(t + 1):
            for two_v in range(two_v_m, abs_m + 1, 2):
                sign = (-1) ** (t + (two_v - two_v_m) // 2)
                c = (
                    sign
                    * 0.25**t
                    * math.comb(l, t)
                    * math.comb(l - t, abs_m + t)
                    * math.comb(t, u)
                    * math.comb(abs_m, two_v)
                )
                powers = (
                    2 * t + abs_m - 2 * u - two_v,
                    2 * u + two_v,
                    l - 2 * t - abs_m,
                )
                coefficients[powers] = coefficients.get(powers, 0.0) + norm * c

    return coefficients


@functools.lru_cache(maxsize=None)
def _cached_transformation(l: int) -> np.ndarray:
    cartesian_powers = cartesian.generate_cartesian_powers(l)
    n_cart = cartesian_powers.shape[0]

    if l <= 1:
        matrix = np.eye(n_cart, dtype=np.float64)
    else:
        index = {tuple(p): c for c, p in enumerate(cartesian_powers.tolist())}
        matrix = np.zeros((2 * l + 1, n_cart), dtype=np.float64)
        for row, m in enumerate(range(-l, l + 1)):
            for powers, c in _solid_harmonic_coefficients(l, m).items():
                matrix[row, index[powers]] = c

    matrix.setflags(write=False)
    return matrix


def spherical_transformation(l: int) -> np.ndarray:
    """The map from the Cartesian components of a shell to its spherical ones.

    The rows are ordered m = -l, ..., l. For l <= 1 the spherical and
    Cartesian functions coincide and the Cartesian order (s; x, y, z) is
    kept. The columns follow cartesian.generate_cartesian_powers(l).

    Returns:
      A read-only array of shape (2l+1, (l+1)(l+2)/2).
    """
    if l < 0:
        raise ValueError(f"Angular momentum must be non-negative, got {l}.")

    return _cached_transformation(l)
