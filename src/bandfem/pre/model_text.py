"""
Model Text Parser
=================
Reads the whitespace separated model description into a `Model`.

One record per line, tags are case-insensitive:

    N <id> <x> <y>              node, coordinates scaled by the zoom factors
    E <id> <n1> <n2> <n3>       triangle element with its corner node IDs
    D <id> <x|y> <value>        prescribed displacement of a node
    F <id> <x|y> <value>        applied force at a node

A malformed record rejects the whole model.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from bandfem import config
from bandfem.analysis.dof_values import DofValues
from bandfem.analysis.finite_elements.tri3 import Tri3
from bandfem.analysis.model import Model
from bandfem.analysis.node import Node
from bandfem.pre.material import Material
from bandfem.pre.mesh import Mesh
from bandfem.utils import Axis

logger = logging.getLogger(__name__)

RECORD_LENGTHS = {
    "N": 4,
    "E": 5,
    "D": 4,
    "F": 4,
}


class ModelParseError(ValueError):
    """Raised when a model description cannot be parsed."""

    def __init__(self, message: str, line_number: int | None = None) -> None:
        self.line_number = line_number
        if line_number is not None:
            message = f"Line {line_number}: {message}"
        super().__init__(message)


@dataclass
class _ElementRecord:
    index: int
    node_ids: tuple[int, int, int]
    line_number: int


@dataclass
class _DofRecord:
    node_id: int
    axis: Axis
    value: float
    line_number: int


def _parse_int(token: str, what: str, line_number: int) -> int:
    try:
        value = int(token)
    except ValueError:
        raise ModelParseError(f"{what} must be an integer, got '{token}'.", line_number) from None
    if value < 1:
        raise ModelParseError(f"{what} must be a positive integer, got {value}.", line_number)
    return value


def _parse_float(token: str, what: str, line_number: int) -> float:
    try:
        value = float(token)
    except ValueError:
        raise ModelParseError(f"{what} must be a number, got '{token}'.", line_number) from None
    if not math.isfinite(value):
        raise ModelParseError(f"{what} must be finite, got '{token}'.", line_number)
    return value


def _parse_axis(token: str, line_number: int) -> Axis:
    try:
        return Axis(token.lower())
    except ValueError:
        raise ModelParseError(f"Axis must be 'x' or 'y', got '{token}'.", line_number) from None


def parse_model(
    text: str,
    material: Material | None = None,
    zoom_x: float = config.ZOOM_X,
    zoom_y: float = config.ZOOM_Y,
) -> Model:
    """
    Parse a model description.

    Args:
        text: Model description, one record per line.
        material: Material of all elements, defaults to the configured material.
        zoom_x: Scale factor of x-coordinates.
        zoom_y: Scale factor of y-coordinates.

    Raises:
        ModelParseError: On any malformed record or inconsistent reference.
        DegenerateElementError: If an element has zero area.

    Returns:
        The parsed model.
    """
    material = material if material is not None else Material()

    coordinates: dict[int, tuple[float, float]] = {}
    element_records: dict[int, _ElementRecord] = {}
    displacement_records: list[_DofRecord] = []
    force_records: list[_DofRecord] = []

    for line_number, line in enumerate(text.splitlines(), start=1):
        args = line.split()
        if not args:
            continue

        tag = args[0].upper()
        if tag not in RECORD_LENGTHS:
            raise ModelParseError(f"Unknown record '{args[0]}'.", line_number)
        if len(args) != RECORD_LENGTHS[tag]:
            raise ModelParseError(
                f"Record '{tag}' needs {RECORD_LENGTHS[tag]} fields, got {len(args)}.", line_number
            )

        number = _parse_int(args[1], "ID", line_number)

        if tag == "N":
            if number in coordinates:
                raise ModelParseError(f"Duplicate node ID {number}.", line_number)
            x = _parse_float(args[2], "x-coordinate", line_number) * zoom_x
            y = _parse_float(args[3], "y-coordinate", line_number) * zoom_y
            coordinates[number] = (x, y)

        elif tag == "E":
            if number in element_records:
                raise ModelParseError(f"Duplicate element ID {number}.", line_number)
            corners = tuple(_parse_int(token, "Node ID", line_number) for token in args[2:5])
            element_records[number] = _ElementRecord(number, corners, line_number)

        else:
            record = _DofRecord(
                node_id=number,
                axis=_parse_axis(args[2], line_number),
                value=_parse_float(args[3], "Value", line_number),
                line_number=line_number,
            )
            if tag == "D":
                displacement_records.append(record)
            else:
                force_records.append(record)

    if not coordinates:
        raise ModelParseError("The model defines no nodes.")
    if not element_records:
        raise ModelParseError("The model defines no elements.")

    nodes = {uid: Node(index=uid, coords=xy) for uid, xy in coordinates.items()}

    elements = []
    for record in element_records.values():
        missing = [uid for uid in record.node_ids if uid not in nodes]
        if missing:
            raise ModelParseError(
                f"Element {record.index} references undefined nodes {missing}.", record.line_number
            )
        elements.append(Tri3(
            index=record.index,
            nodes=[nodes[uid] for uid in record.node_ids],
            material=material
        ))

    mesh = Mesh(nodes=list(nodes.values()), elements=elements)

    displacements = DofValues(mesh.number_of_nodes)
    forces = DofValues(mesh.number_of_nodes)
    for records, target in ((displacement_records, displacements), (force_records, forces)):
        for record in records:
            if record.node_id not in nodes:
                raise ModelParseError(f"Undefined node {record.node_id}.", record.line_number)
            target.set(record.node_id, record.axis, record.value)

    model = Model(mesh=mesh, material=material, displacements=displacements, forces=forces)
    logger.info(
        f"Parsed model with {len(nodes)} nodes, {len(elements)} elements, "
        f"{len(model.fixed_dofs)} prescribed displacements and {len(force_records)} forces."
    )
    return model
