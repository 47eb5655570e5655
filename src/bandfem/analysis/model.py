from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from bandfem import config
from bandfem.analysis.dof_values import DofValues
from bandfem.pre.material import Material
from bandfem.pre.mesh import Mesh
from bandfem.utils import Axis

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


class Model:
    """
    Class represent the entire plane elasticity model.

    This class encapsulates the mesh, the material, the prescribed displacements and the input forces.
    Geometry and constraints do not change after construction, solutions live in the solver.
    """
    def __init__(
        self,
        mesh: Mesh,
        material: Material | None = None,
        displacements: DofValues | None = None,
        forces: DofValues | None = None,
    ) -> None:
        """
        Initialize the Model object.

        Args:
            mesh: Nodes and elements of the model.
            material: Material constants, defaults to the configured material.
            displacements: Prescribed displacements, unset DOFs are free.
            forces: Input forces, unset DOFs carry no external force.
        """
        self.mesh = mesh
        self.material = material if material is not None else Material()

        self.displacements = displacements if displacements is not None else DofValues(mesh.number_of_nodes)
        self.forces = forces if forces is not None else DofValues(mesh.number_of_nodes)
        for name, values in (("displacements", self.displacements), ("forces", self.forces)):
            if values.size != self.number_of_equations:
                raise ValueError(
                    f"Prescribed {name} have {values.size} entries, the model has {self.number_of_equations} DOFs."
                )

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(nodes={self.number_of_nodes}, elements={self.number_of_elements}, "
                f"fixed_dofs={len(self.fixed_dofs)})")

    @classmethod
    def from_text(
        cls,
        text: str,
        material: Material | None = None,
        zoom_x: float = config.ZOOM_X,
        zoom_y: float = config.ZOOM_Y,
    ) -> Model:
        """Parse a model description, see `bandfem.pre.model_text.parse_model`."""
        from bandfem.pre.model_text import parse_model

        return parse_model(text, material=material, zoom_x=zoom_x, zoom_y=zoom_y)

    @classmethod
    def from_file(
        cls,
        filename: str,
        material: Material | None = None,
        zoom_x: float = config.ZOOM_X,
        zoom_y: float = config.ZOOM_Y,
    ) -> Model:
        """Load a model description from a text file."""
        logger.info(f"Loading model from: {filename}")
        with open(filename, encoding="utf-8") as f:
            return cls.from_text(f.read(), material=material, zoom_x=zoom_x, zoom_y=zoom_y)

    @property
    def number_of_nodes(self) -> int:
        """Return the number of nodes in the model."""
        return self.mesh.number_of_nodes

    @property
    def number_of_elements(self) -> int:
        """Return the number of elements in the model."""
        return self.mesh.number_of_elements

    @property
    def number_of_equations(self) -> int:
        """Return the total number of equations in the model."""
        return self.mesh.number_of_dofs

    @property
    def band_width(self) -> int:
        return self.mesh.band_width

    @property
    def fixed_dofs(self) -> npt.NDArray[np.int64]:
        """Indices of all DOFs with a prescribed displacement."""
        return self.displacements.indices()

    def is_node_fixed(self, node_id: int, axis: Axis | str) -> bool:
        return self.displacements.is_set(node_id, axis)
