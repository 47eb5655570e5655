"""
Configuration & Global Constants
================================
This module serves as the central registry for material defaults, model
scaling and solver settings.

Why is this file needed?
------------------------
1. Abstraction: material constants and the solver iteration ceiling are not
   hardcoded inside the numerical routines.
2. Reuse: the CLI, the text parser and the solver all read the same defaults.

Exports:
    THICKNESS (float): Thickness of the 2D structure in mm.
    POISSON_RATIO (float): Poisson's ratio of the material.
    YOUNGS_MODULUS (float): Young's modulus of the material in N/mm².
    ZOOM_X, ZOOM_Y (float): Scale factors applied to parsed coordinates.
    MAX_ITERATIONS (int): Default iteration ceiling of the iterative solver.
    TOLERANCE (float): Default relative residual tolerance of the solver.
    ASSETS_PATH (str): Absolute path to the assets directory.
    EXAMPLE_MODEL_PATH (str): Absolute path to the bundled example model.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to a resource relative to the project root.
    """
    # config.py is in src/bandfem/
    current_file_path: Path = Path(__file__)
    project_root: Path = current_file_path.parent.parent.parent
    return os.path.join(str(project_root), relative_path)


# Material
THICKNESS: float = 10.0
POISSON_RATIO: float = 0.2
YOUNGS_MODULUS: float = 1.6e5

# Model scaling
ZOOM_X: float = 2.3
ZOOM_Y: float = -2.3

# Solver
MAX_ITERATIONS: int = 500
TOLERANCE: float = 1e-10

# Paths
ASSETS_PATH: str = get_resource_path("assets")
EXAMPLE_MODEL_PATH: str = os.path.join(ASSETS_PATH, "plate.txt")


class SolverMethod(StrEnum):
    CG = "cg"
    CHOLESKY = "cholesky"


@dataclass(frozen=True)
class SolverSettings:
    """
    Settings of the linear solve.

    Attributes:
        max_iterations: Iteration ceiling of the conjugate gradient method.
        tolerance: Relative residual norm at which the solve is converged.
        method: Linear solver used for the rearranged system.
    """
    max_iterations: int = MAX_ITERATIONS
    tolerance: float = TOLERANCE
    method: SolverMethod = SolverMethod.CG

    def __post_init__(self) -> None:
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be positive, got {self.max_iterations}.")
        if not self.tolerance > 0.0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}.")
        # Accept plain strings such as "cg" from the CLI
        object.__setattr__(self, "method", SolverMethod(self.method))
