from __future__ import annotations

from enum import StrEnum
from typing import Iterable

DOFS_PER_NODE = 2


class Axis(StrEnum):
    X = "x"
    Y = "y"


def dof_index(node_id: int, axis: Axis | str) -> int:
    """
    Map a 1-based node ID and an axis to the 0-based index in force and displacement vectors.

    Node ``n`` owns the x-DOF ``2n - 2`` and the y-DOF ``2n - 1``.

    Args:
        node_id: 1-based node ID.
        axis: Displacement direction.

    Raises:
        ValueError: If `node_id` is not positive.

    Returns:
        Index of the DOF in a vector of length ``2 * number_of_nodes``.
    """
    if node_id < 1:
        raise ValueError(f"Node IDs are 1-based, got {node_id}.")
    if Axis(axis) is Axis.X:
        return DOFS_PER_NODE * node_id - 2
    return DOFS_PER_NODE * node_id - 1


def node_dofs(node_id: int) -> tuple[int, int]:
    """Return the ``(x, y)`` DOF indices of a node."""
    return dof_index(node_id, Axis.X), dof_index(node_id, Axis.Y)


def number_of_dofs(number_of_nodes: int) -> int:
    """Return the length of force and displacement vectors for a model."""
    return DOFS_PER_NODE * number_of_nodes


def element_band_width(node_ids: Iterable[int]) -> int:
    """
    Band width required by one element.

    The coupled DOFs of nodes ``min`` to ``max`` span ``2 * (max - min) + 1``
    positions, so a band of ``2 * (max - min + 1)`` keeps every coupling inside
    ``|row - col| < band_width``.

    Args:
        node_ids: Corner node IDs of the element.

    Returns:
        Required band width.
    """
    ids = list(node_ids)
    return (1 + max(ids) - min(ids)) * DOFS_PER_NODE
