from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
import scipy as sp

from bandfem import config
from bandfem.config import SolverMethod

if TYPE_CHECKING:
    import numpy.typing as npt

    from bandfem.solvers.band_matrix import BandMatrix

logger = logging.getLogger(__name__)


class SolverConvergenceError(RuntimeError):
    """Raised when the linear system cannot be solved to the requested tolerance."""


def _jacobi_preconditioner(matrix: BandMatrix) -> sp.sparse.linalg.LinearOperator:
    diagonal = matrix.diagonal()
    # Rows of unreferenced nodes are empty
    inverse = np.where(diagonal > 0.0, 1.0 / np.where(diagonal > 0.0, diagonal, 1.0), 1.0)
    return sp.sparse.linalg.LinearOperator(
        shape=matrix.shape,
        matvec=lambda v: inverse * np.ravel(v),
        dtype=np.float64,
    )


def band_cholesky_preconditioner(matrix: BandMatrix) -> sp.sparse.linalg.LinearOperator:
    """
    Preconditioner that applies the banded Cholesky factor of `matrix`.

    The factor is computed once, every application is a banded forward and back
    substitution. Rows without any entry get a unit diagonal. A matrix that is not
    positive definite falls back to the Jacobi preconditioner.

    Args:
        matrix: Rearranged stiffness matrix.

    Returns:
        Operator approximating the inverse of `matrix`.
    """
    ab = matrix.to_scipy_banded()
    diagonal = ab[matrix.band_width - 1]
    # Rows of unreferenced nodes are empty
    diagonal[diagonal == 0.0] = 1.0
    try:
        factor = sp.linalg.cholesky_banded(ab, lower=False)
    except np.linalg.LinAlgError as e:
        logger.warning(f"Band Cholesky preconditioner is not available ({e}), using Jacobi instead.")
        return _jacobi_preconditioner(matrix)

    logger.debug(f"Factorized band preconditioner of size {matrix.size}.")
    return sp.sparse.linalg.LinearOperator(
        shape=matrix.shape,
        matvec=lambda v: sp.linalg.cho_solve_banded((factor, False), np.ravel(v)),
        dtype=np.float64,
    )


def conjugate_gradient(
    matrix: BandMatrix,
    forces: npt.NDArray[np.float64],
    max_iterations: int = config.MAX_ITERATIONS,
    tolerance: float = config.TOLERANCE,
    initial_guess: npt.NDArray[np.float64] | None = None,
    preconditioner: sp.sparse.linalg.LinearOperator | None = None,
) -> npt.NDArray[np.float64]:
    """
    Solve ``matrix @ u = forces`` with the preconditioned conjugate gradient method.

    Args:
        matrix: Symmetric positive definite band matrix.
        forces: Right-hand side.
        max_iterations: Iteration ceiling.
        tolerance: Relative residual norm ``|r| / |forces|`` to reach.
        initial_guess: Start vector, zero when omitted.
        preconditioner: Approximate inverse of `matrix`, the band Cholesky factor
            when omitted.

    Raises:
        SolverConvergenceError: If the tolerance is not reached within `max_iterations`.

    Returns:
        Solution vector.
    """
    if preconditioner is None:
        preconditioner = band_cholesky_preconditioner(matrix)

    operator = sp.sparse.linalg.LinearOperator(
        shape=matrix.shape,
        matvec=lambda v: matrix.multiply(np.ravel(v)),
        dtype=np.float64,
    )

    iterations = 0

    def count(_: npt.NDArray[np.float64]) -> None:
        nonlocal iterations
        iterations += 1

    with np.errstate(divide="ignore", invalid="ignore"):
        displacements, info = sp.sparse.linalg.cg(
            operator,
            forces,
            x0=initial_guess,
            rtol=tolerance,
            atol=0.0,
            maxiter=max_iterations,
            M=preconditioner,
            callback=count,
        )

    if info != 0 or not np.all(np.isfinite(displacements)):
        residual = np.linalg.norm(forces - matrix.multiply(np.nan_to_num(displacements)))
        raise SolverConvergenceError(
            f"Conjugate gradient did not converge after {iterations} iterations "
            f"(residual norm {residual:.3e}). The model may be unconstrained or contain degenerate elements."
        )

    logger.info(f"Conjugate gradient converged after {iterations} iterations.")
    return displacements


def cholesky(matrix: BandMatrix, forces: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """
    Solve ``matrix @ u = forces`` directly with a banded Cholesky factorization.

    Raises:
        SolverConvergenceError: If the matrix is not positive definite.
    """
    try:
        displacements = sp.linalg.solveh_banded(matrix.to_scipy_banded(), forces, lower=False)
    except np.linalg.LinAlgError as e:
        raise SolverConvergenceError(f"Stiffness matrix is not positive definite: {e}") from e

    if not np.all(np.isfinite(displacements)):
        raise SolverConvergenceError("Banded Cholesky solve produced non-finite displacements.")
    logger.info("Banded Cholesky solve finished.")
    return displacements


def solve(
    matrix: BandMatrix,
    forces: npt.ArrayLike,
    max_iterations: int = config.MAX_ITERATIONS,
    tolerance: float = config.TOLERANCE,
    method: SolverMethod | str = SolverMethod.CG,
    initial_guess: npt.ArrayLike | None = None,
    preconditioner: sp.sparse.linalg.LinearOperator | None = None,
) -> npt.NDArray[np.float64]:
    """
    Solve the rearranged banded system for the displacements.

    Args:
        matrix: Rearranged stiffness matrix.
        forces: Rearranged force vector.
        max_iterations: Iteration ceiling of the conjugate gradient method.
        tolerance: Relative residual tolerance of the conjugate gradient method.
        method: ``"cg"`` or ``"cholesky"``.
        initial_guess: Start vector of the conjugate gradient method.
        preconditioner: Preconditioner of the conjugate gradient method.

    Raises:
        SolverConvergenceError: If no solution is found, a partial result is never returned.

    Returns:
        Displacement vector.
    """
    rhs = np.asarray(forces, dtype=np.float64)
    if rhs.shape != (matrix.size,):
        raise ValueError(f"Expected a force vector of length {matrix.size}, got shape {rhs.shape}.")

    if SolverMethod(method) is SolverMethod.CHOLESKY:
        return cholesky(matrix, rhs)
    x0 = None if initial_guess is None else np.asarray(initial_guess, dtype=np.float64)
    return conjugate_gradient(
        matrix,
        rhs,
        max_iterations=max_iterations,
        tolerance=tolerance,
        initial_guess=x0,
        preconditioner=preconditioner,
    )
