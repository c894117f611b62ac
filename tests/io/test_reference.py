import numpy as np
import pytest

import gtoform as gf


def test_round_trip_real(tmp_path):
    path = tmp_path / "overlap.txt"
    array = np.arange(12, dtype=np.float64).reshape(3, 4) / 7.0

    gf.io.save_dense(path, array)
    np.testing.assert_array_equal(gf.io.load_dense(path, 3, 4), array)


def test_round_trip_complex(tmp_path):
    path = tmp_path / "eri.txt"
    rng = np.random.default_rng(0)
    array = rng.normal(size=(2, 2, 2, 2)) + 1j * rng.normal(size=(2, 2, 2, 2))

    gf.io.save_dense(path, array)
    loaded = gf.io.load_dense(path, 2, 2, 2, 2)

    assert loaded.dtype == np.complex128
    np.testing.assert_array_equal(loaded, array)


def test_load_flat(tmp_path):
    path = tmp_path / "flat.txt"
    path.write_text("1.0\n2.0\n3.0\n4.0\n5.0\n6.0\n")

    np.testing.assert_array_equal(
        gf.io.load_dense(path, 2, 3), [[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]]
    )


def test_load_sparse_indexed(tmp_path):
    path = tmp_path / "sparse.txt"
    path.write_text("0 1 0.5\n1 0 -0.5\n")

    np.testing.assert_array_equal(
        gf.io.load_dense(path, 2, 2), [[0.0, 0.5], [-0.5, 0.0]]
    )


@pytest.mark.parametrize(
    "text, shape",
    [
        ("1.0\n2.0\n3.0\n", (2, 2)),
        ("0 1 2 3 4 5\n", (2, 2)),
    ],
)
def test_load_invalid(tmp_path, text, shape):
    path = tmp_path / "invalid.txt"
    path.write_text(text)

    with pytest.raises(ValueError):
        gf.io.load_dense(path, *shape)
