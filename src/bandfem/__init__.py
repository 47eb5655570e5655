"""
bandfem
=======
Linear elastic plane analysis with constant strain triangles on a banded
stiffness matrix.

Usage:
    >>> import bandfem
    >>> solver = bandfem.build(model_text)
    >>> displacements, forces = solver.solve()
"""
from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from bandfem import config
from bandfem.analysis.dof_values import DofValues
from bandfem.analysis.finite_elements.tri3 import DegenerateElementError, Tri3
from bandfem.analysis.model import Model
from bandfem.analysis.node import Node
from bandfem.config import SolverMethod, SolverSettings
from bandfem.pre.material import Material
from bandfem.pre.mesh import Mesh
from bandfem.pre.model_text import ModelParseError, parse_model
from bandfem.solvers.band_matrix import BandMatrix, BandWidthError
from bandfem.solvers.iterative import SolverConvergenceError
from bandfem.solvers.solver import Solver, SolverState
from bandfem.utils import Axis, dof_index

try:
    __version__ = version("bandfem")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

__all__ = [
    "Axis",
    "BandMatrix",
    "BandWidthError",
    "DegenerateElementError",
    "DofValues",
    "Material",
    "Mesh",
    "Model",
    "ModelParseError",
    "Node",
    "Solver",
    "SolverConvergenceError",
    "SolverMethod",
    "SolverSettings",
    "SolverState",
    "Tri3",
    "build",
    "dof_index",
    "parse_model",
]


def build(
    text: str,
    settings: SolverSettings | None = None,
    material: Material | None = None,
    zoom_x: float = config.ZOOM_X,
    zoom_y: float = config.ZOOM_Y,
) -> Solver:
    """
    Parse a model description and return a solver ready to `solve`.

    Args:
        text: Model description, see `bandfem.pre.model_text`.
        settings: Settings of the linear solve.
        material: Material of all elements.
        zoom_x: Scale factor of x-coordinates.
        zoom_y: Scale factor of y-coordinates.

    Returns:
        Solver in the ``REARRANGED`` state.
    """
    solver = Solver(settings=settings)
    solver.create_model(text, material=material, zoom_x=zoom_x, zoom_y=zoom_y)
    return solver
