"""
Boundary Condition Elimination
==============================
Pins prescribed displacements in the banded system ("rearrangement").

For each fixed DOF ``f`` with value ``u_f`` every coupled DOF ``i`` gets
``F[i] -= u_f * K[i, f]``, the coupling ``K[i, f]`` is zeroed, and the fixed row
becomes ``K[f, f] = 1`` with ``F[f] = u_f``. Solving the rearranged system then
reproduces ``u_f`` exactly and leaves the free DOFs unchanged.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt

    from bandfem.analysis.dof_values import DofValues
    from bandfem.solvers.band_matrix import BandMatrix

logger = logging.getLogger(__name__)


def _coupled_dofs(matrix: BandMatrix, dof: int) -> range:
    first = max(0, dof - matrix.band_width + 1)
    last = min(matrix.size, dof + matrix.band_width)
    return range(first, last)


def _check_size(matrix: BandMatrix, values: DofValues) -> None:
    if values.size != matrix.size:
        raise ValueError(f"Expected {matrix.size} DOFs, got {values.size}.")


def rearrange_stiffness(matrix: BandMatrix, displacements: DofValues) -> BandMatrix:
    """
    Pin all prescribed DOFs of a stiffness matrix in place.

    Row and column of every fixed DOF are zeroed within the band and its diagonal is set to 1.0.

    Args:
        matrix: Copy of the assembled stiffness matrix, modified in place.
        displacements: Prescribed displacements.

    Returns:
        The modified `matrix`.
    """
    _check_size(matrix, displacements)
    fixed = displacements.indices()
    for dof in fixed:
        for i in _coupled_dofs(matrix, dof):
            if i != dof:
                matrix.set(i, dof, 0.0)
        matrix.set(dof, dof, 1.0)

    logger.debug(f"Pinned {len(fixed)} of {matrix.size} DOFs in the stiffness matrix.")
    return matrix


def rearrange_forces(
    stiffness: BandMatrix,
    forces: DofValues,
    displacements: DofValues,
) -> npt.NDArray[np.float64]:
    """
    Right-hand side of the rearranged system for a load case.

    Reads the couplings from the original, not rearranged, stiffness matrix so any
    number of load cases can share one rearranged matrix. DOFs without an applied
    force carry zero external force.

    Args:
        stiffness: Assembled stiffness matrix before elimination.
        forces: Applied forces.
        displacements: Prescribed displacements.

    Returns:
        Force vector with the prescribed displacements moved to the right-hand side.
    """
    _check_size(stiffness, forces)
    _check_size(stiffness, displacements)

    rhs = forces.filled(0.0)
    fixed = displacements.mask
    for dof in displacements.indices():
        value = displacements.values[dof]
        for i in _coupled_dofs(stiffness, dof):
            if not fixed[i]:
                rhs[i] -= value * stiffness.get(i, dof)

    rhs[fixed] = displacements.values[fixed]
    return rhs


def eliminate(
    matrix: BandMatrix,
    forces: DofValues,
    displacements: DofValues,
) -> npt.NDArray[np.float64]:
    """
    Rearrange matrix and force vector together, node by node and x before y.

    Args:
        matrix: Copy of the assembled stiffness matrix, modified in place.
        forces: Applied forces.
        displacements: Prescribed displacements.

    Returns:
        Force vector of the rearranged system.
    """
    rhs = rearrange_forces(matrix, forces, displacements)
    rearrange_stiffness(matrix, displacements)
    return rhs
