import numpy as np
import pytest
import scipy as sp

from bandfem.solvers.band_matrix import BandMatrix, BandWidthError


def random_band_matrix(size=7, band_width=3, seed=0):
    rng = np.random.default_rng(seed)
    matrix = BandMatrix(size, band_width)
    for row in range(size):
        for col in range(row, min(size, row + band_width)):
            matrix.set(row, col, rng.uniform(-1.0, 1.0))
        # Diagonally dominant, so positive definite
        matrix.set(row, row, 10.0)
    return matrix


def test_new_matrix_is_zero():
    matrix = BandMatrix(4, 2)
    assert matrix.shape == (4, 4)
    assert matrix.band_width == 2
    assert np.all(matrix.to_dense() == 0.0)


def test_lower_triangle_mirrors_upper():
    matrix = BandMatrix(4, 2)
    matrix.set(1, 2, 3.5)
    assert matrix.get(2, 1) == 3.5
    matrix.accumulate(2, 1, 1.5)
    assert matrix.get(1, 2) == 5.0


def test_accumulate_adds():
    matrix = BandMatrix(3, 1)
    matrix.accumulate(1, 1, 2.0)
    matrix.accumulate(1, 1, 0.5)
    assert matrix.get(1, 1) == 2.5


def test_access_outside_of_band():
    matrix = BandMatrix(5, 2)
    with pytest.raises(BandWidthError):
        matrix.get(0, 2)
    with pytest.raises(BandWidthError):
        matrix.set(4, 1, 1.0)
    assert issubclass(BandWidthError, IndexError)
    assert not matrix.in_band(0, 2)
    assert matrix.in_band(3, 2)


def test_access_outside_of_matrix():
    matrix = BandMatrix(3, 2)
    with pytest.raises(IndexError) as excinfo:
        matrix.get(3, 3)
    assert not isinstance(excinfo.value, BandWidthError)


def test_band_width_is_required():
    with pytest.raises(TypeError):
        BandMatrix(3)


def test_invalid_band_width():
    with pytest.raises(ValueError):
        BandMatrix(3, 0)


def test_multiply_matches_dense():
    matrix = random_band_matrix()
    x = np.linspace(-1.0, 2.0, matrix.size)
    np.testing.assert_allclose(matrix.multiply(x), matrix.to_dense() @ x, rtol=1e-12)


def test_multiply_checks_length():
    with pytest.raises(ValueError):
        BandMatrix(3, 2).multiply(np.ones(4))


def test_band_wider_than_matrix():
    matrix = BandMatrix(2, 5)
    matrix.set(0, 1, 2.0)
    matrix.set(0, 0, 1.0)
    np.testing.assert_allclose(matrix.to_dense(), [[1.0, 2.0], [2.0, 0.0]])
    np.testing.assert_allclose(matrix.multiply([1.0, 1.0]), [3.0, 2.0])


def test_copy_is_independent():
    matrix = random_band_matrix()
    copy = matrix.copy()
    copy.set(0, 0, -1.0)
    assert matrix.get(0, 0) == 10.0
    assert BandMatrix(matrix).band is not matrix.band


def test_dense_is_symmetric():
    dense = random_band_matrix().to_dense()
    np.testing.assert_array_equal(dense, dense.T)
    assert dense[0, 3] == 0.0


def test_scipy_banded_form():
    matrix = random_band_matrix()
    b = np.arange(1.0, matrix.size + 1.0)
    x = sp.linalg.solveh_banded(matrix.to_scipy_banded(), b, lower=False)
    np.testing.assert_allclose(x, np.linalg.solve(matrix.to_dense(), b), rtol=1e-10)


def test_max_coupling_distance():
    matrix = BandMatrix(5, 4)
    assert matrix.max_coupling_distance() == 0
    matrix.set(3, 1, 1.0)
    assert matrix.max_coupling_distance() == 2
