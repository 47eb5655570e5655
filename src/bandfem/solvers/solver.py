from __future__ import annotations

import logging
from enum import StrEnum
from typing import TYPE_CHECKING

import numpy as np

from bandfem import config
from bandfem.analysis.dof_values import DofValues
from bandfem.analysis.model import Model
from bandfem.solvers import iterative
from bandfem.solvers.band_matrix import BandMatrix
from bandfem.solvers.boundary_conditions import eliminate, rearrange_forces
from bandfem.utils import Axis, dof_index

if TYPE_CHECKING:
    import numpy.typing as npt
    from scipy.sparse.linalg import LinearOperator

    from bandfem.analysis.finite_elements.finite_element import FiniteElement
    from bandfem.pre.material import Material

logger = logging.getLogger(__name__)


class SolverState(StrEnum):
    UNBUILT = "unbuilt"
    MODEL_LOADED = "model loaded"
    ASSEMBLED = "assembled"
    REARRANGED = "rearranged"
    SOLVED = "solved"


def assemble_element(stiffness: BandMatrix, element: FiniteElement, k_e: npt.NDArray[np.float64]) -> None:
    """
    Add the stiffness matrix of one element to the global band matrix.

    Only the upper triangle is stored. For every ordered corner pair the 2x2 block at
    row node ``j`` and column node ``i`` is added when it lies on or above the diagonal.
    On the diagonal the lower-left entry mirrors the upper-right one and is skipped.

    Args:
        stiffness: Global stiffness matrix, modified in place.
        element: Element the matrix belongs to.
        k_e: (6, 6) element stiffness matrix.
    """
    node_ids = element.node_ids
    for i in range(element.number_of_nodes):
        for j in range(element.number_of_nodes):
            col = dof_index(node_ids[i], Axis.X)
            row = dof_index(node_ids[j], Axis.X)

            if col - row >= 0:
                stiffness.accumulate(row, col, k_e[2 * j, 2 * i])
                stiffness.accumulate(row, col + 1, k_e[2 * j, 2 * i + 1])
                stiffness.accumulate(row + 1, col + 1, k_e[2 * j + 1, 2 * i + 1])

            if col - row > 0:
                stiffness.accumulate(row + 1, col, k_e[2 * j + 1, 2 * i])


class Solver:
    """
    Class for the FEM solver of a plane elasticity model.

    States: ``UNBUILT -> MODEL_LOADED -> ASSEMBLED -> REARRANGED -> SOLVED``. Solving does not
    modify the stiffness matrices, so `solve` may be called for any number of load cases.
    """

    def __init__(
        self,
        model: Model | None = None,
        settings: config.SolverSettings | None = None,
    ) -> None:
        """
        Initialize the solver, optionally with a model.

        Args:
            model: The model to be solved.
            settings: Settings of the linear solve.
        """
        self.settings = settings if settings is not None else config.SolverSettings()
        self.state = SolverState.UNBUILT

        self.model: Model | None = None
        self.stiffness: BandMatrix | None = None
        self.stiffness_rearranged: BandMatrix | None = None
        self.preconditioner: LinearOperator | None = None

        self.input_forces: npt.NDArray[np.float64] = np.empty(0, dtype=np.float64)
        self.solution_displacements: npt.NDArray[np.float64] = np.empty(0, dtype=np.float64)
        self.solution_forces: npt.NDArray[np.float64] = np.empty(0, dtype=np.float64)

        if model is not None:
            self.load_model(model)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(state='{self.state}', model={self.model})"

    def _require(self, *states: SolverState) -> None:
        if self.state not in states:
            allowed = ", ".join(f"'{state}'" for state in states)
            raise RuntimeError(f"Solver is '{self.state}', the operation needs {allowed}.")

    def create_model(
        self,
        text: str,
        material: Material | None = None,
        zoom_x: float = config.ZOOM_X,
        zoom_y: float = config.ZOOM_Y,
    ) -> None:
        """
        Parse a model description, assemble and rearrange the global stiffness matrix.

        Args:
            text: Model description.
            material: Material of all elements.
            zoom_x: Scale factor of x-coordinates.
            zoom_y: Scale factor of y-coordinates.
        """
        self.load_model(Model.from_text(text, material=material, zoom_x=zoom_x, zoom_y=zoom_y))
        self.assemble_global_stiffness_matrix()
        self.rearrange_stiffness_matrix()

    def load_model(self, model: Model) -> None:
        """Attach a model and drop all matrices and results of a previous one."""
        self.model = model
        self.stiffness = None
        self.stiffness_rearranged = None
        self.preconditioner = None
        self.input_forces = np.empty(0, dtype=np.float64)
        self.solution_displacements = np.empty(0, dtype=np.float64)
        self.solution_forces = np.empty(0, dtype=np.float64)
        self.state = SolverState.MODEL_LOADED

    def assemble_global_stiffness_matrix(self) -> BandMatrix:
        """
        Assemble the global stiffness matrix [K] of the model in band storage.

        Returns:
            The assembled matrix.
        """
        self._require(SolverState.MODEL_LOADED)
        model = self.model

        k_global = BandMatrix(model.number_of_equations, model.band_width)
        d_matrix = model.material.elasticity_matrix
        for element in model.mesh.elements:
            assemble_element(k_global, element, element.get_stiffness_matrix(d_matrix))

        self.stiffness = k_global
        self.state = SolverState.ASSEMBLED
        logger.info(
            f"Assembled stiffness matrix with {k_global.size} DOFs and band width {k_global.band_width} "
            f"from {model.number_of_elements} elements."
        )
        return k_global

    def rearrange_stiffness_matrix(self) -> BandMatrix:
        """
        Pin the prescribed displacements in a copy of the stiffness matrix.

        The original matrix is kept for the force recovery. The model forces are
        rearranged as well and become the default load case of `solve`.

        Returns:
            The rearranged matrix.
        """
        self._require(SolverState.ASSEMBLED)
        model = self.model

        self.stiffness_rearranged = self.stiffness.copy()
        self.preconditioner = None
        self.input_forces = eliminate(self.stiffness_rearranged, model.forces, model.displacements)

        self.state = SolverState.REARRANGED
        logger.info(f"Rearranged stiffness matrix for {len(model.fixed_dofs)} prescribed displacements.")
        return self.stiffness_rearranged

    def solve(
        self,
        forces: DofValues | npt.ArrayLike | None = None,
    ) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """
        Calculate displacements with the rearranged stiffness matrix and the resulting
        forces, reactions included, with the original stiffness matrix.

        Args:
            forces: Applied forces of the load case. A dense vector may use ``NaN`` for
                "no force". The forces of the model are used when omitted.

        Raises:
            RuntimeError: If the model is not rearranged yet.
            SolverConvergenceError: If the linear solve fails.

        Returns:
            Tuple of the displacement and the force vector.
        """
        self._require(SolverState.REARRANGED, SolverState.SOLVED)
        model = self.model

        if forces is None:
            rhs = self.input_forces
        else:
            load = forces if isinstance(forces, DofValues) else DofValues.from_array(forces)
            rhs = rearrange_forces(self.stiffness, load, model.displacements)

        # Starting at the prescribed values keeps the pinned DOFs exact
        initial_guess = model.displacements.filled(0.0)

        # Factorized once per rearrangement, shared by all load cases
        if self.settings.method is config.SolverMethod.CG and self.preconditioner is None:
            self.preconditioner = iterative.band_cholesky_preconditioner(self.stiffness_rearranged)

        displacements = iterative.solve(
            self.stiffness_rearranged,
            rhs,
            max_iterations=self.settings.max_iterations,
            tolerance=self.settings.tolerance,
            method=self.settings.method,
            initial_guess=initial_guess,
            preconditioner=self.preconditioner,
        )

        self.solution_displacements = displacements
        self.solution_forces = self.stiffness.multiply(displacements)
        self.state = SolverState.SOLVED
        return self.solution_displacements, self.solution_forces

    def _require_solution(self) -> None:
        self._require(SolverState.SOLVED)

    def node_position(self, node_id: int) -> tuple[float, float]:
        node = self.model.mesh.get_node(node_id)
        return node.x, node.y

    def node_displacement(self, node_id: int) -> tuple[float, float]:
        """Solved ``(dx, dy)`` of a node."""
        self._require_solution()
        return (float(self.solution_displacements[dof_index(node_id, Axis.X)]),
                float(self.solution_displacements[dof_index(node_id, Axis.Y)]))

    def node_force(self, node_id: int) -> tuple[float, float]:
        """Recovered ``(fx, fy)`` of a node, reactions at fixed DOFs."""
        self._require_solution()
        return (float(self.solution_forces[dof_index(node_id, Axis.X)]),
                float(self.solution_forces[dof_index(node_id, Axis.Y)]))

    def is_node_fixed(self, node_id: int, axis: Axis | str) -> bool:
        return self.model.is_node_fixed(node_id, axis)

    def element_corner_ids(self, element_id: int) -> tuple[int, ...]:
        return self.model.mesh.get_element(element_id).node_ids

    def mean_element_displacements(self) -> npt.NDArray[np.float64]:
        """
        Mean nodal displacement of every element.

        Returns:
            (number_of_elements, 2) array of ``(dx, dy)`` in element order.
        """
        self._require_solution()
        elements = self.model.mesh.elements
        result = np.empty((len(elements), 2), dtype=np.float64)
        for i, element in enumerate(elements):
            result[i] = element.mean_displacement(self.solution_displacements)
        return result

    def delta_area(self, element_id: int) -> float:
        """Area change of an element under the solved displacements."""
        self._require_solution()
        return self.model.mesh.get_element(element_id).delta_area(self.solution_displacements)
