"""
Dense similarity matrices.

Provides an owning square matrix and a read-only borrowing view over its
storage. Storage is a flat column-major buffer: element ``(i, j)`` lives at
offset ``n_items * j + i``.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np


class SquareMatrix:
    """An ``n_items`` x ``n_items`` matrix that owns its storage."""

    def __init__(self, data: np.ndarray, n_items: int):
        data = np.array(data, dtype=np.float64).reshape(-1)
        if n_items < 0:
            raise ValueError(f"n_items must be >= 0, got {n_items}")
        if data.shape[0] != n_items * n_items:
            raise ValueError(
                f"data has {data.shape[0]} values, expected {n_items * n_items} "
                f"for n_items={n_items}"
            )
        self._data = data
        self._n_items = int(n_items)

    @classmethod
    def zeros(cls, n_items: int) -> "SquareMatrix":
        return cls(np.zeros(n_items * n_items), n_items)

    @classmethod
    def ones(cls, n_items: int) -> "SquareMatrix":
        return cls(np.ones(n_items * n_items), n_items)

    @classmethod
    def identity(cls, n_items: int) -> "SquareMatrix":
        data = np.zeros(n_items * n_items)
        # Diagonal offsets are 0, n+1, 2(n+1), ...
        data[:: n_items + 1] = 1.0
        return cls(data, n_items)

    @classmethod
    def from_array(cls, a: np.ndarray) -> "SquareMatrix":
        """
        Copy a 2-D array into a new matrix.

        ``a[i, j]`` becomes element ``(i, j)`` regardless of the memory
        order of *a*.

        Raises:
            ValueError: If *a* is not square
        """
        a = np.asarray(a, dtype=np.float64)
        if a.ndim != 2 or a.shape[0] != a.shape[1]:
            raise ValueError(f"Expected a square 2-D array, got shape {a.shape}")
        return cls(a.ravel(order="F").copy(), a.shape[0])

    def n_items(self) -> int:
        return self._n_items

    def data(self) -> np.ndarray:
        """Read-only view of the column-major storage."""
        out = self._data.view()
        out.flags.writeable = False
        return out

    def data_mut(self) -> np.ndarray:
        """Writable column-major storage. Do not mutate while views are in use."""
        return self._data

    def view(self) -> "SquareMatrixView":
        return SquareMatrixView.from_slice(self._data, self._n_items)

    def to_array(self) -> np.ndarray:
        """Copy into a regular 2-D array indexed ``[i, j]``."""
        return self._data.reshape((self._n_items, self._n_items), order="F").copy()

    def __getitem__(self, index: tuple[int, int]) -> float:
        return self.view()[index]

    def __repr__(self) -> str:
        return f"SquareMatrix(n_items={self._n_items})"


class SquareMatrixView:
    """
    Read-only, non-owning view over square matrix storage.

    The view shares memory with whatever it was built from. It stays valid
    only while that owner is alive and unmodified.
    """

    __slots__ = ("_data", "_n_items")

    def __init__(self, data: np.ndarray, n_items: int):
        self._data = data
        self._n_items = n_items

    @classmethod
    def from_slice(cls, data: np.ndarray, n_items: int) -> "SquareMatrixView":
        """
        Borrow a 1-D float64 buffer of exactly ``n_items**2`` values.

        Raises:
            ValueError: If the buffer length does not match
        """
        arr = np.asarray(data, dtype=np.float64)
        if arr.ndim != 1 or arr.shape[0] != n_items * n_items:
            raise ValueError(
                f"Expected a flat buffer of {n_items * n_items} values, got shape {arr.shape}"
            )
        view = arr.view()
        view.flags.writeable = False
        return cls(view, int(n_items))

    @classmethod
    def from_buffer(cls, buffer, n_items: int) -> "SquareMatrixView":
        """
        Borrow raw float64 memory without copying.

        Only ``n_items**2`` values are read from the start of *buffer*. The
        caller guarantees the memory outlives the view and is not written
        while the view is in use.
        """
        arr = np.frombuffer(buffer, dtype=np.float64, count=n_items * n_items)
        arr.flags.writeable = False
        return cls(arr, int(n_items))

    def n_items(self) -> int:
        return self._n_items

    def data(self) -> np.ndarray:
        return self._data

    def __getitem__(self, index: tuple[int, int]) -> float:
        i, j = index
        n = self._n_items
        if not (0 <= i < n and 0 <= j < n):
            raise IndexError(f"Index ({i}, {j}) out of bounds for n_items={n}")
        return float(self._data[n * j + i])

    def get_unchecked(self, index: tuple[int, int]) -> float:
        """Element access without bounds checks; indices must be in range."""
        i, j = index
        return float(self._data[self._n_items * j + i])

    def sum_of_triangle(self) -> float:
        """Sum of the strictly lower triangle (``i > j``)."""
        n = self._n_items
        square = self._data.reshape((n, n), order="F")
        return float(square[np.tril_indices(n, k=-1)].sum())

    def sum_of_row_subset(self, row: int, columns: Sequence[int]) -> float:
        """Sum of ``self[(row, c)]`` over *columns*. Indices are not checked."""
        if len(columns) == 0:
            return 0.0
        offsets = self._n_items * np.asarray(columns, dtype=np.intp) + row
        return float(self._data[offsets].sum())

    def __repr__(self) -> str:
        return f"SquareMatrixView(n_items={self._n_items})"


def similarity_from_distances(dist: np.ndarray, temperature: float = 1.0) -> SquareMatrix:
    """
    Turn a pairwise distance matrix into similarities ``exp(-temperature * d)``.

    Args:
        dist: Square distance matrix of shape (n_items, n_items)
        temperature: Non-negative scale; 0 gives all-ones similarity

    Returns:
        SquareMatrix with strictly positive entries

    Raises:
        ValueError: If temperature is negative or dist has negative entries
    """
    if temperature < 0:
        raise ValueError(f"temperature must be >= 0, got {temperature}")
    dist = np.asarray(dist, dtype=np.float64)
    if np.any(dist < 0):
        raise ValueError("dist must be non-negative")
    return SquareMatrix.from_array(np.exp(-temperature * dist))
