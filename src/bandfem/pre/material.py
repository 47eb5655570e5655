from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING

import numpy as np

from bandfem import config

if TYPE_CHECKING:
    import numpy.typing as npt


@dataclass(frozen=True)
class Material:
    """
    Isotropic linear elastic material of a 2D structure.

    Attributes:
        youngs_modulus: Young's modulus in N/mm².
        poisson_ratio: Poisson's ratio, in the open range (-1.0, 0.5).
        thickness: Thickness of the structure in mm.
        name: Name of the material, used in logs.
    """
    youngs_modulus: float = config.YOUNGS_MODULUS
    poisson_ratio: float = config.POISSON_RATIO
    thickness: float = config.THICKNESS
    name: str = "Default"

    def __post_init__(self) -> None:
        if not self.youngs_modulus > 0.0:
            raise ValueError(f"Young's modulus must be positive, got {self.youngs_modulus}.")
        if not -1.0 < self.poisson_ratio < 0.5:
            raise ValueError(f"Poisson's ratio must lie in (-1.0, 0.5), got {self.poisson_ratio}.")
        if not self.thickness > 0.0:
            raise ValueError(f"Thickness must be positive, got {self.thickness}.")

    @cached_property
    def elasticity_matrix(self) -> npt.NDArray[np.float64]:
        """
        Material matrix [D] relating strains (εx, εy, γxy) to stresses.

        [D] = E / (1 + ν) / (1 - 2ν) * [[1 - ν, ν, 0], [ν, 1 - ν, 0], [0, 0, (1 - 2ν) / 2]]

        Returns:
            (3, 3) material matrix.
        """
        nu = self.poisson_ratio
        factor = self.youngs_modulus / (1.0 + nu) / (1.0 - 2.0 * nu)
        d = factor * np.array([
            [1.0 - nu, nu, 0.0],
            [nu, 1.0 - nu, 0.0],
            [0.0, 0.0, (1.0 - 2.0 * nu) / 2.0],
        ], dtype=np.float64)
        d.setflags(write=False)
        return d
