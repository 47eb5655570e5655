from __future__ import annotations

from abc import ABC, abstractmethod

from typing import TYPE_CHECKING

import numpy as np

from bandfem.utils import node_dofs

if TYPE_CHECKING:
    import numpy.typing as npt
    from bandfem.analysis.node import Node
    from bandfem.pre.material import Material


class FiniteElement(ABC):
    """
    Abstract base class for finite elements of a plane elasticity model.
    """

    def __init__(
        self,
        index: int,
        nodes: list[Node],
        material: Material,
    ) -> None:
        """
        Initialize the finite element.

        The element copies the corner coordinates and node IDs, it never changes the nodes.

        Args:
            index: Element ID.
            nodes: Corner nodes.
            material: The material associated with the element.
        """
        self.id = index
        self.material = material
        self.node_ids: tuple[int, ...] = tuple(node.uid for node in nodes)
        self.global_dofs: npt.NDArray[np.int64] = np.array(
            [dof for node_id in self.node_ids for dof in node_dofs(node_id)],
            dtype=np.int64
        )

        self.x = np.array([node.coords[0] for node in nodes], dtype=np.float64)
        self.y = np.array([node.coords[1] for node in nodes], dtype=np.float64)
        self.x.setflags(write=False)
        self.y.setflags(write=False)

    def __repr__(self) -> str:
        """String representation of the finite element."""
        return f"{self.__class__.__name__}(id={self.id}, nodes={self.node_ids}, material={self.material.name})"

    @property
    def number_of_nodes(self) -> int:
        """Number of nodes in the finite element."""
        return len(self.node_ids)

    def corner_displacements(self, displacements: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """
        Gather the corner displacements of the element from a global vector.

        Args:
            displacements: Global displacement vector.

        Returns:
            (number_of_nodes, 2) array of ``(dx, dy)`` per corner.
        """
        return np.asarray(displacements, dtype=np.float64)[self.global_dofs].reshape(-1, 2)

    def mean_displacement(self, displacements: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Mean ``(dx, dy)`` over the corners of the element."""
        return self.corner_displacements(displacements).mean(axis=0)

    @property
    @abstractmethod
    def area(self) -> float:
        """Area of the finite element."""
        pass

    @property
    @abstractmethod
    def b_matrix(self) -> npt.NDArray[np.float64]:
        """Strain-displacement matrix [B] of the finite element."""
        pass

    @abstractmethod
    def get_stiffness_matrix(self) -> npt.NDArray[np.float64]:
        """Calculate the stiffness matrix [K] of the finite element."""
        pass

    @abstractmethod
    def delta_area(self, displacements: npt.NDArray[np.float64]) -> float:
        """Relative area change of the displaced finite element."""
        pass
