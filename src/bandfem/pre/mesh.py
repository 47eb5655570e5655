from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import matplotlib.pyplot as plt

from bandfem.utils import element_band_width, number_of_dofs

if TYPE_CHECKING:
    import numpy.typing as npt
    from matplotlib.axes import Axes

    from bandfem.analysis.node import Node
    from bandfem.analysis.finite_elements.finite_element import FiniteElement


class Mesh:
    def __init__(
        self,
        nodes: list[Node],
        elements: list[FiniteElement],
    ) -> None:
        """
        Initialize the Mesh class.

        Node IDs need not be contiguous, storage is sized by the largest node ID.

        Args:
            nodes: Nodes of the mesh.
            elements: Elements of the mesh, referencing nodes by ID.

        Raises:
            ValueError: On duplicate IDs or an element referencing an unknown node.
        """
        self.nodes: dict[int, Node] = {}
        for node in sorted(nodes, key=lambda n: n.uid):
            if node.uid in self.nodes:
                raise ValueError(f"Duplicate node ID {node.uid}.")
            self.nodes[node.uid] = node

        self.elements = sorted(elements, key=lambda e: e.id)
        self._elements_lookup: dict[int, FiniteElement] = {}
        for element in self.elements:
            if element.id in self._elements_lookup:
                raise ValueError(f"Duplicate element ID {element.id}.")
            missing = [uid for uid in element.node_ids if uid not in self.nodes]
            if missing:
                raise ValueError(f"Element {element.id} references undefined nodes {missing}.")
            self._elements_lookup[element.id] = element

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(nodes={len(self.nodes)}, elements={len(self.elements)})"

    @property
    def number_of_nodes(self) -> int:
        """Size of the node storage, the largest node ID."""
        return max(self.nodes, default=0)

    @property
    def number_of_elements(self) -> int:
        return len(self.elements)

    @property
    def number_of_dofs(self) -> int:
        return number_of_dofs(self.number_of_nodes)

    @property
    def band_width(self) -> int:
        """
        Band width of the global stiffness matrix.

        Twice the largest node ID span within a single element plus one node.
        """
        return max((element_band_width(element.node_ids) for element in self.elements), default=0)

    def get_node(self, node_id: int) -> Node:
        try:
            return self.nodes[node_id]
        except KeyError:
            raise KeyError(f"No node with ID {node_id}.") from None

    def get_element(self, element_id: int) -> FiniteElement:
        try:
            return self._elements_lookup[element_id]
        except KeyError:
            raise KeyError(f"No element with ID {element_id}.") from None

    def plot(
        self,
        ax: Axes | None = None,
        displacements: npt.NDArray[np.float64] | None = None,
        scale: float = 1.0,
        color: str = "black",
        label: str | None = None,
        annotate: bool = False,
    ) -> Axes:
        """
        Plot the element outlines of the mesh.

        Args:
            ax: Axes to draw into, a new figure is created when omitted.
            displacements: Optional global displacement vector to draw the displaced shape.
            scale: Magnification of the displacements.
            color: Line color.
            label: Legend label of the outlines.
            annotate: Write node IDs next to the corners.

        Returns:
            The axes drawn into.
        """
        if ax is None:
            _, ax = plt.subplots()
        ax.set_aspect("equal")

        for i, element in enumerate(self.elements):
            x = np.array(element.x)
            y = np.array(element.y)
            if displacements is not None:
                delta = element.corner_displacements(displacements)
                x = x + scale * delta[:, 0]
                y = y + scale * delta[:, 1]

            # Close the polygon
            x = np.append(x, x[0])
            y = np.append(y, y[0])
            ax.plot(x, y, color=color, lw=1, label=label if i == 0 else "_nolegend_")

            if annotate:
                for node_id, xi, yi in zip(element.node_ids, x[:-1], y[:-1]):
                    ax.text(xi, yi, str(node_id), fontsize=8, color=color, ha="left", va="bottom")

        ax.set_xlabel("X Coordinate")
        ax.set_ylabel("Y Coordinate")
        return ax
