from __future__ import annotations

from typing import TYPE_CHECKING

import matplotlib.pyplot as plt

if TYPE_CHECKING:
    from matplotlib.axes import Axes

    from bandfem.solvers.solver import Solver


def plot_deformed(
    solver: Solver,
    scale: float = 1.0,
    ax: Axes | None = None,
    annotate: bool = False,
) -> Axes:
    """
    Plot the original and the displaced mesh of a solved model.

    Args:
        solver: A solver in the ``SOLVED`` state.
        scale: Magnification of the displacements.
        ax: Axes to draw into, a new figure is created when omitted.
        annotate: Write node IDs next to the original corners.

    Returns:
        The axes drawn into.
    """
    if ax is None:
        plt.rcParams["figure.constrained_layout.use"] = True
        _, ax = plt.subplots()

    mesh = solver.model.mesh
    mesh.plot(ax=ax, color="gray", label="Original", annotate=annotate)
    mesh.plot(
        ax=ax,
        displacements=solver.solution_displacements,
        scale=scale,
        color="tab:red",
        label=f"Displaced (x{scale:g})",
    )

    fixed_ids = [uid for uid in mesh.nodes if solver.is_node_fixed(uid, "x") or solver.is_node_fixed(uid, "y")]
    if fixed_ids:
        ax.plot(
            [mesh.nodes[uid].x for uid in fixed_ids],
            [mesh.nodes[uid].y for uid in fixed_ids],
            "ks",
            markersize=4,
            label="Fixed",
        )

    ax.grid(visible=True, which="major", axis="both", linestyle="-", color="gray", lw=0.5)
    ax.legend(loc="best")
    ax.set_title(f"Displacements of {mesh.number_of_elements} elements")
    return ax
