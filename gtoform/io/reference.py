"""Dense reference arrays stored as text, used to validate integrals.

A file holds either one value per line in row-major order, or one entry per
line as "i j ... value" with the zero-based index of every dimension
followed by the value. Complex entries carry the real and imaginary parts
as two trailing columns. Entries that are not listed are zero.
"""

import os

import numpy as np


def load_dense(path: str | os.PathLike, *shape: int) -> np.ndarray:
    """Loads a dense array of the given shape.

    Raises:
      ValueError: If the number of columns matches none of the layouts or a
        flat file holds the wrong number of values.
    """
    table = np.loadtxt(path, ndmin=2)
    n_dims = len(shape)
    n_cols = table.shape[1]

    if n_cols == 1:
        values = table[:, 0]
        expected = int(np.prod(shape))
        if values.shape[0] != expected:
            raise ValueError(
                f"Expected {expected} values for shape {shape}, "
                f"got {values.shape[0]}."
            )
        return values.reshape(shape)

    if n_cols == n_dims + 1:
        values = table[:, -1]
        dtype = np.float64
    elif n_cols == n_dims + 2:
        values = table[:, -2] + 1j * table[:, -1]
        dtype = np.complex128
    else:
        raise ValueError(
            f"A file with {n_cols} columns does not describe an array of "
            f"shape {shape}."
        )

    indices = tuple(table[:, :n_dims].astype(np.int64).T)
    result = np.zeros(shape, dtype=dtype)
    result[indices] = values
    return result


def save_dense(path: str | os.PathLike, array: np.ndarray) -> None:
    """Saves an array with one "i j ... value" line per entry."""
    array = np.asarray(array)
    indices = np.indices(array.shape).reshape(array.ndim, -1).T
    flat = array.reshape(-1)

    if np.iscomplexobj(array):
        columns = [flat.real, flat.imag]
    else:
        columns = [flat]

    table = np.column_stack([indices] + columns)
    index_fmt = ["%d"] * array.ndim
    value_fmt = ["%.17g"] * len(columns)
    np.savetxt(path, table, fmt=index_fmt + value_fmt)
