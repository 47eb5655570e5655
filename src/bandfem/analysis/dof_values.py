from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from bandfem.utils import Axis, dof_index, number_of_dofs

if TYPE_CHECKING:
    import numpy.typing as npt


class DofValues:
    """
    Per-DOF values with an explicit set/unset state.

    Prescribed displacements use the mask for "fixed", input forces use it for
    "explicitly loaded". Unset entries hold 0.0 in ``values``.
    """
    def __init__(self, number_of_nodes: int) -> None:
        """
        Initialize an all-unset vector.

        Args:
            number_of_nodes: Number of nodes of the model, storage holds two DOFs per node.
        """
        size = number_of_dofs(number_of_nodes)
        self.values: npt.NDArray[np.float64] = np.zeros(size, dtype=np.float64)
        self.mask: npt.NDArray[np.bool_] = np.zeros(size, dtype=np.bool_)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(size={self.size}, set={int(self.mask.sum())})"

    def __len__(self) -> int:
        return self.size

    @property
    def size(self) -> int:
        """Number of DOFs."""
        return len(self.values)

    @property
    def number_of_nodes(self) -> int:
        return self.size // 2

    @classmethod
    def from_array(cls, array: npt.ArrayLike) -> DofValues:
        """
        Build from a dense vector in which ``NaN`` marks an unset DOF.

        Args:
            array: Vector of length ``2 * number_of_nodes``.

        Raises:
            ValueError: If the vector is not one-dimensional or has an odd length.
        """
        data = np.asarray(array, dtype=np.float64)
        if data.ndim != 1 or data.size % 2:
            raise ValueError(f"Expected a vector with two entries per node, got shape {data.shape}.")
        result = cls(data.size // 2)
        result.mask = ~np.isnan(data)
        result.values = np.where(result.mask, data, 0.0)
        return result

    def set(self, node_id: int, axis: Axis | str, value: float) -> None:
        """Set the value of one DOF and mark it as set."""
        index = self._checked_index(node_id, axis)
        self.values[index] = value
        self.mask[index] = True

    def get(self, node_id: int, axis: Axis | str) -> float | None:
        """Return the value of one DOF, or ``None`` when it is unset."""
        index = self._checked_index(node_id, axis)
        if not self.mask[index]:
            return None
        return float(self.values[index])

    def is_set(self, node_id: int, axis: Axis | str) -> bool:
        return bool(self.mask[self._checked_index(node_id, axis)])

    def indices(self) -> npt.NDArray[np.int64]:
        """Sorted indices of all set DOFs."""
        return np.flatnonzero(self.mask)

    def filled(self, fill_value: float = 0.0) -> npt.NDArray[np.float64]:
        """Dense copy with unset DOFs replaced by `fill_value`."""
        return np.where(self.mask, self.values, fill_value)

    def _checked_index(self, node_id: int, axis: Axis | str) -> int:
        index = dof_index(node_id, axis)
        if index >= self.size:
            raise IndexError(f"Node {node_id} is outside of a model with {self.number_of_nodes} nodes.")
        return index
