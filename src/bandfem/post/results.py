"""
Result Records
==============
Per-element, per-corner result records for rendering clients, and their JSON form.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from bandfem.utils import Axis

if TYPE_CHECKING:
    from bandfem.solvers.solver import Solver


@dataclass(frozen=True)
class CornerResult:
    node_id: int
    x_force: float
    y_force: float
    x_displacement: float
    y_displacement: float
    x_fixed: bool
    y_fixed: bool
    x: float
    y: float
    delta_x: float  # mean displacement of the element
    delta_y: float
    delta_area: float

    def to_dict(self) -> dict[str, Any]:
        """Record with the keys the rendering client reads."""
        return {
            "id": self.node_id,
            "x_force": self.x_force,
            "y_force": self.y_force,
            "x_d": self.x_displacement,
            "y_d": self.y_displacement,
            "x_fixed": self.x_fixed,
            "y_fixed": self.y_fixed,
            "x": self.x,
            "y": self.y,
            "deltaX": self.delta_x,
            "deltaY": self.delta_y,
            "deltaArea": self.delta_area,
        }


def collect_results(solver: Solver) -> list[list[CornerResult]]:
    """
    Gather the results of a solved model.

    Args:
        solver: A solver in the ``SOLVED`` state.

    Returns:
        One list of corner records per element, in element order.
    """
    means = solver.mean_element_displacements()
    results: list[list[CornerResult]] = []
    for element, (delta_x, delta_y) in zip(solver.model.mesh.elements, means):
        delta_area = solver.delta_area(element.id)
        corners = []
        for node_id, x, y in zip(element.node_ids, element.x, element.y):
            fx, fy = solver.node_force(node_id)
            dx, dy = solver.node_displacement(node_id)
            corners.append(CornerResult(
                node_id=node_id,
                x_force=fx,
                y_force=fy,
                x_displacement=dx,
                y_displacement=dy,
                x_fixed=solver.is_node_fixed(node_id, Axis.X),
                y_fixed=solver.is_node_fixed(node_id, Axis.Y),
                x=float(x),
                y=float(y),
                delta_x=float(delta_x),
                delta_y=float(delta_y),
                delta_area=delta_area,
            ))
        results.append(corners)
    return results


def results_to_json(solver: Solver, indent: int | None = None) -> str:
    """Serialize the results of a solved model as nested JSON lists."""
    records = [[corner.to_dict() for corner in corners] for corners in collect_results(solver)]
    return json.dumps(records, indent=indent)
