import jax
import numpy as np


def assert_no_nan(array: np.ndarray | jax.Array):
    assert not np.any(np.isnan(array)), "Array contains NaN values."


def gaussian_quadrature_1d(f, a: float, A: float, b: float, B: float) -> complex:
    """Integrates f(x) e^(-a(x-A)^2) e^(-b(x-B)^2) over the real line.

    The two Gaussians are combined into K e^(-p(x-P)^2) and the integral is
    evaluated with Gauss-Hermite quadrature, which is exact for polynomials
    and very accurate for slowly oscillating plane waves.
    """
    p = a + b
    P = (a * A + b * B) / p
    K = np.exp(-a * b / p * (A - B) ** 2)

    t, w = np.polynomial.hermite.hermgauss(80)
    x = P + t / np.sqrt(p)
    return K / np.sqrt(p) * np.sum(w * f(x))


def assert_pytrees_equal(obj1, obj2):
    """
    Asserts that two JAX Pytree objects are structurally identical and have equal leaf values.
    """
    treedef1 = jax.tree_util.tree_structure(obj1)
    treedef2 = jax.tree_util.tree_structure(obj2)

    assert treedef1 == treedef2, "Pytree structures do not match!"

    leaves1 = jax.tree_util.tree_leaves(obj1)
    leaves2 = jax.tree_util.tree_leaves(obj2)

    for l1, l2 in zip(leaves1, leaves2):
        np.testing.assert_array_equal(
            l1, l2, err_msg="Pytree leaf values do not match!"
        )


def assert_valid_pytree(obj):
    """
    Verifies that a JAX Pytree object can be flattened, unflattened,
    and passed through a JIT boundary correctly.
    """
    leaves, treedef = jax.tree_util.tree_flatten(obj)
    obj_reconstructed = jax.tree_util.tree_unflatten(treedef, leaves)
    assert_pytrees_equal(obj, obj_reconstructed)

    obj_jitted = jax.jit(lambda x: x)(obj)
    assert_pytrees_equal(obj, obj_jitted)
