"""
Band Storage
============
Symmetric matrices that keep only the diagonals ``|row - col| < band_width``.

Row ``i`` of the ``(n, band_width)`` storage holds ``A[i, i:i + band_width]``.
The matrix-vector product runs as a numba kernel over this layout.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numba as nb

if TYPE_CHECKING:
    import numpy.typing as npt


class BandWidthError(IndexError):
    """Raised on access to an entry outside of the stored band."""


@nb.jit(cache=True)
def _band_matvec(
    band: npt.NDArray[np.float64],
    x: npt.NDArray[np.float64]
) -> npt.NDArray[np.float64]:
    """
    Multiply a symmetric matrix in upper band storage with a vector.

    Args:
        band: (n, w) array with ``band[i, k] = A[i, i + k]``.
        x: (n, ) vector.

    Returns:
        (n, ) product ``A @ x``.
    """
    n, w = band.shape
    y = np.zeros(n, dtype=np.float64)
    for i in range(n):
        acc = band[i, 0] * x[i]
        for k in range(1, min(w, n - i)):
            a = band[i, k]
            acc += a * x[i + k]
            # Mirrored lower triangle entry A[i + k, i]
            y[i + k] += a * x[i]
        y[i] += acc
    return y


class BandMatrix:
    """
    Square symmetric matrix that stores only the band ``|row - col| < band_width``.

    Entries are kept in upper band layout ``band[row, col - row]``, a lower triangle
    access addresses the mirrored upper entry. Entries outside of the band are zero
    and can be neither read nor written.
    """
    def __init__(self, size: int | BandMatrix, band_width: int | None = None) -> None:
        """
        Initialize a zero matrix, or deep-copy another band matrix.

        Args:
            size: Number of rows and columns, or a `BandMatrix` to copy.
            band_width: Number of stored diagonals including the main diagonal.
        """
        if isinstance(size, BandMatrix):
            self.band: npt.NDArray[np.float64] = size.band.copy()
            return

        if band_width is None:
            raise TypeError("band_width is required when creating a new matrix.")
        if size < 0 or band_width < 1:
            raise ValueError(f"Invalid band matrix of size {size} with band width {band_width}.")
        self.band = np.zeros((size, band_width), dtype=np.float64)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(size={self.size}, band_width={self.band_width})"

    @property
    def size(self) -> int:
        return self.band.shape[0]

    @property
    def band_width(self) -> int:
        return self.band.shape[1]

    @property
    def shape(self) -> tuple[int, int]:
        return self.size, self.size

    def copy(self) -> BandMatrix:
        """Deep copy of the band storage."""
        return BandMatrix(self)

    def _locate(self, row: int, col: int) -> tuple[int, int]:
        if not (0 <= row < self.size and 0 <= col < self.size):
            raise IndexError(f"Entry ({row}, {col}) is outside of a {self.size}x{self.size} matrix.")
        if col < row:
            row, col = col, row
        offset = col - row
        if offset >= self.band_width:
            raise BandWidthError(
                f"Entry ({row}, {col}) is {offset} off the diagonal, "
                f"the band width is {self.band_width}."
            )
        return row, offset

    def in_band(self, row: int, col: int) -> bool:
        return abs(row - col) < self.band_width

    def get(self, row: int, col: int) -> float:
        """Return entry ``A[row, col]``."""
        return float(self.band[self._locate(row, col)])

    def set(self, row: int, col: int, value: float) -> None:
        """Overwrite entry ``A[row, col]`` and its mirror."""
        self.band[self._locate(row, col)] = value

    def accumulate(self, row: int, col: int, delta: float) -> None:
        """Add `delta` to entry ``A[row, col]`` and its mirror."""
        self.band[self._locate(row, col)] += delta

    def diagonal(self) -> npt.NDArray[np.float64]:
        return self.band[:, 0].copy()

    def multiply(self, vector: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """
        Matrix-vector product, entries outside of the band contribute zero.

        Args:
            vector: Vector of length `size`.

        Returns:
            The product as a new vector.
        """
        x = np.ascontiguousarray(vector, dtype=np.float64)
        if x.shape != (self.size,):
            raise ValueError(f"Expected a vector of length {self.size}, got shape {x.shape}.")
        return _band_matvec(self.band, x)

    def to_dense(self) -> npt.NDArray[np.float64]:
        """Full symmetric matrix as a dense array."""
        dense = np.zeros(self.shape, dtype=np.float64)
        for k in range(min(self.band_width, self.size)):
            values = self.band[:self.size - k, k]
            rows = np.arange(self.size - k)
            dense[rows, rows + k] = values
            dense[rows + k, rows] = values
        return dense

    def to_scipy_banded(self) -> npt.NDArray[np.float64]:
        """
        Upper form band array for `scipy.linalg.solveh_banded`.

        Returns:
            (w, n) array ``ab`` with ``ab[w - 1 + i - j, j] = A[i, j]`` for ``i <= j``.
        """
        w, n = self.band_width, self.size
        ab = np.zeros((w, n), dtype=np.float64)
        for k in range(min(w, n)):
            ab[w - 1 - k, k:] = self.band[:n - k, k]
        return ab

    def max_coupling_distance(self) -> int:
        """Largest ``|row - col|`` of a non-zero entry."""
        nonzero = np.flatnonzero(np.any(self.band != 0.0, axis=0))
        return int(nonzero[-1]) if nonzero.size else 0
