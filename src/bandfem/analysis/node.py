from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from bandfem.utils import node_dofs

if TYPE_CHECKING:
    import numpy.typing as npt


class Node:
    """
    Represents a node of a plane elasticity model.
    """
    def __init__(
        self,
        index: int,
        coords: list[float] | tuple[float, float] | npt.NDArray[np.float64],
    ) -> None:
        """
        Initialize the node with coordinates.

        Args:
            index: 1-based node ID.
            coords: Coordinates of the node in the global system [X, Y].
        """
        if index < 1:
            raise ValueError(f"Node IDs are 1-based, got {index}.")
        self.coords = np.array(coords, dtype=np.float64)
        self.coords.setflags(write=False)
        self.uid = index
        self.global_dofs: tuple[int, int] = node_dofs(index)

    def __repr__(self) -> str:
        """String representation of the node."""
        return f"{self.__class__.__name__}(id={self.uid}, coords={self.coords})"

    @property
    def x(self) -> float:
        """X-coordinate of the node."""
        return float(self.coords[0])

    @property
    def y(self) -> float:
        """Y-coordinate of the node."""
        return float(self.coords[1])
