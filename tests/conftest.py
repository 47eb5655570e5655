import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from bandfem.pre.material import Material

TOL = 1e-9

SQUARE = """\
N 1 0 0
N 2 1 0
N 3 1 1
N 4 0 1
E 1 1 2 3
E 2 1 3 4
"""


def strip_text(columns=4, fixed=(1, 2), loads=None):
    """
    Two-row strip of `columns` bays, node 2k+1 at (k, 0) and node 2k+2 at (k, 1).

    `fixed` nodes are clamped in x and y. `loads` maps node IDs to (fx, fy).
    """
    lines = []
    for k in range(columns + 1):
        lines.append(f"N {2 * k + 1} {k} 0")
        lines.append(f"N {2 * k + 2} {k} 1")
    for k in range(columns):
        a, b, c, d = 2 * k + 1, 2 * k + 3, 2 * k + 4, 2 * k + 2
        lines.append(f"E {2 * k + 1} {a} {b} {c}")
        lines.append(f"E {2 * k + 2} {a} {c} {d}")
    for node_id in fixed:
        lines.append(f"D {node_id} x 0")
        lines.append(f"D {node_id} y 0")
    if loads is None:
        loads = {2 * columns + 2: (0.0, -100.0)}
    for node_id, (fx, fy) in loads.items():
        if fx:
            lines.append(f"F {node_id} x {fx}")
        if fy:
            lines.append(f"F {node_id} y {fy}")
    return "\n".join(lines) + "\n"


def dense_stiffness(model):
    """Global stiffness matrix assembled densely, independent of the band storage."""
    n = model.number_of_equations
    k = np.zeros((n, n))
    for element in model.mesh.elements:
        dofs = element.global_dofs
        k[np.ix_(dofs, dofs)] += element.get_stiffness_matrix()
    return k


def reference_solution(model, forces=None):
    """Reduced dense solve for the free DOFs."""
    k = dense_stiffness(model)
    fixed = model.displacements.mask
    free = ~fixed
    f = (model.forces if forces is None else forces).filled(0.0)
    u = model.displacements.filled(0.0)
    rhs = f[free] - k[np.ix_(free, fixed)] @ u[fixed]
    u[free] = np.linalg.solve(k[np.ix_(free, free)], rhs)
    return u


@pytest.fixture
def material():
    return Material(youngs_modulus=1.6e5, poisson_ratio=0.2, thickness=10.0)


@pytest.fixture
def square_text():
    return SQUARE


@pytest.fixture
def cantilever_text():
    return strip_text()
