import numpy as np
import pytest

from bandfem.analysis.dof_values import DofValues
from bandfem.analysis.node import Node
from bandfem.utils import Axis, dof_index, element_band_width, node_dofs


@pytest.mark.parametrize("node_id, axis, index", [
    (1, "x", 0),
    (1, "y", 1),
    (4, Axis.X, 6),
    (4, Axis.Y, 7),
])
def test_dof_index(node_id, axis, index):
    assert dof_index(node_id, axis) == index


def test_dof_index_rejects_invalid_input():
    with pytest.raises(ValueError):
        dof_index(0, "x")
    with pytest.raises(ValueError):
        dof_index(1, "z")


def test_node_dofs():
    assert node_dofs(3) == (4, 5)
    assert Node(3, (1.0, 2.0)).global_dofs == (4, 5)


def test_element_band_width():
    assert element_band_width([1, 2, 3]) == 6
    assert element_band_width([7, 3, 4]) == 10


def test_unset_by_default():
    values = DofValues(3)
    assert values.size == 6
    assert values.get(2, "x") is None
    assert not values.is_set(2, "x")
    assert values.indices().size == 0


def test_set_and_get():
    values = DofValues(3)
    values.set(2, "y", 0.0)
    assert values.is_set(2, "y")
    assert values.get(2, "y") == 0.0
    assert values.indices().tolist() == [3]
    np.testing.assert_array_equal(values.filled(np.nan)[[2, 3]], [np.nan, 0.0])


def test_node_outside_of_storage():
    with pytest.raises(IndexError):
        DofValues(2).set(3, "x", 1.0)


def test_from_array():
    values = DofValues.from_array([np.nan, 1.0, -2.0, np.nan])
    assert values.number_of_nodes == 2
    assert values.get(1, "x") is None
    assert values.get(1, "y") == 1.0
    assert values.get(2, "x") == -2.0
    np.testing.assert_array_equal(values.filled(0.0), [0.0, 1.0, -2.0, 0.0])


@pytest.mark.parametrize("array", [[1.0, 2.0, 3.0], [[1.0, 2.0]]])
def test_from_array_rejects_shape(array):
    with pytest.raises(ValueError):
        DofValues.from_array(array)

