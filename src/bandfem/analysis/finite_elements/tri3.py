from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numba as nb

from bandfem.analysis.finite_elements.finite_element import FiniteElement

if TYPE_CHECKING:
    import numpy.typing as npt
    from bandfem.analysis.node import Node
    from bandfem.pre.material import Material

# Relative to the squared longest edge
DEGENERATE_AREA_TOLERANCE = 1e-12

# Scale of the area change reported by `Tri3.delta_area`
DELTA_AREA_SCALE = 1000.0


class DegenerateElementError(ValueError):
    """Raised when the corners of a triangle are collinear or coincident."""


def triangle_area(x: npt.ArrayLike, y: npt.ArrayLike) -> float:
    """
    Unsigned area of a triangle from its corner coordinates.

    Area = |(Cx - Bx)(Ay - By) - (Bx - Ax)(By - Cy)| / 2

    Args:
        x: x-coordinates of the corners A, B, C.
        y: y-coordinates of the corners A, B, C.

    Returns:
        Area of the triangle.
    """
    ax, bx, cx = x
    ay, by, cy = y
    return abs((cx - bx) * (ay - by) - (bx - ax) * (by - cy)) / 2.0


@nb.jit(cache=True)
def _cst_b_matrix(
    x: npt.NDArray[np.float64],
    y: npt.NDArray[np.float64],
    area: float
) -> npt.NDArray[np.float64]:
    """
    Build the constant strain-displacement matrix of a CST element.

    Rows are the strains (εx, εy, γxy), columns the DOFs (u1, v1, u2, v2, u3, v3).

    Args:
        x: (3, ) array of x-coordinates of the element's nodes.
        y: (3, ) array of y-coordinates of the element's nodes.
        area: Unsigned area of the element, must be non-zero.

    Returns:
        (3, 6) B matrix.
    """
    b = np.empty(3, dtype=np.float64)
    c = np.empty(3, dtype=np.float64)
    b[0] = y[1] - y[2]
    b[1] = y[2] - y[0]
    b[2] = y[0] - y[1]
    c[0] = x[2] - x[1]
    c[1] = x[0] - x[2]
    c[2] = x[1] - x[0]

    two_area = 2.0 * area
    B = np.zeros((3, 6), dtype=np.float64)
    for i in range(3):
        B[0, 2 * i] = b[i] / two_area
        B[1, 2 * i + 1] = c[i] / two_area
        B[2, 2 * i] = c[i] / two_area
        B[2, 2 * i + 1] = b[i] / two_area
    return B


class Tri3(FiniteElement):
    """
    Represents a three-node constant strain triangle (CST) under plane elasticity.
    """
    def __init__(
        self,
        index: int,
        nodes: list[Node],
        material: Material
    ) -> None:
        """
        Initialize the Tri3 element.

        Args:
            index: Element ID.
            nodes: List of the three corner nodes.
            material: The material associated with the element.

        Raises:
            ValueError: If the element does not have three nodes.
            DegenerateElementError: If the element has zero area.
        """
        if len(nodes) != 3:
            raise ValueError(f"Tri3 element {index} needs 3 nodes, got {len(nodes)}.")
        super().__init__(index=index, nodes=nodes, material=material)

        self._area = triangle_area(self.x, self.y)
        edges_squared = (np.diff(np.append(self.x, self.x[0])) ** 2
                         + np.diff(np.append(self.y, self.y[0])) ** 2)
        if self._area <= DEGENERATE_AREA_TOLERANCE * float(edges_squared.max()):
            raise DegenerateElementError(
                f"Element {index} with nodes {self.node_ids} has zero area."
            )

        self._B = _cst_b_matrix(self.x, self.y, self._area)
        self._B.setflags(write=False)

    @property
    def area(self) -> float:
        """
        Area of the Tri3 element, computed once at construction.

        Returns:
            Area of the triangular element.
        """
        return self._area

    @property
    def b_matrix(self) -> npt.NDArray[np.float64]:
        """
        Strain-displacement matrix [B] of the Tri3 element.

        Returns:
            (3, 6) B matrix, constant over the element.
        """
        return self._B

    def get_stiffness_matrix(self, d_matrix: npt.NDArray[np.float64] | None = None) -> npt.NDArray[np.float64]:
        """
        Calculate element stiffness matrix [Ke] = A * t * Bᵀ D B.

        Args:
            d_matrix: Material matrix, defaults to the one of the element's material.

        Returns:
            (6, 6) symmetric stiffness matrix for DOFs (u1, v1, u2, v2, u3, v3).
        """
        D = self.material.elasticity_matrix if d_matrix is None else d_matrix
        volume = self._area * self.material.thickness
        return volume * (self._B.T @ D @ self._B)

    def delta_area(self, displacements: npt.NDArray[np.float64]) -> float:
        """
        Relative area change of the displaced element.

        The value is not cached, it depends on the current displacements.

        Args:
            displacements: Global displacement vector.

        Returns:
            ``(deformed_area / area - 1) * 1000``.
        """
        delta = self.corner_displacements(displacements)
        deformed_area = triangle_area(self.x + delta[:, 0], self.y + delta[:, 1])
        return (deformed_area / self._area - 1.0) * DELTA_AREA_SCALE
