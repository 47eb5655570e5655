import logging

import numpy as np
import pytest

from conftest import dense_stiffness, strip_text
from bandfem.analysis.model import Model
from bandfem.analysis.node import Node
from bandfem.analysis.finite_elements.tri3 import Tri3
from bandfem.pre.mesh import Mesh
from bandfem.solvers.band_matrix import BandMatrix, BandWidthError
from bandfem.solvers.solver import Solver, SolverState, assemble_element


def assembled(text, material):
    solver = Solver(Model.from_text(text, material=material, zoom_x=1.0, zoom_y=1.0))
    solver.assemble_global_stiffness_matrix()
    return solver


def test_band_width_of_square(square_text, material):
    model = Model.from_text(square_text, material=material, zoom_x=1.0, zoom_y=1.0)
    # Element 2 spans nodes 1 to 4
    assert model.band_width == 8


def test_band_width_of_strip(material):
    model = Model.from_text(strip_text(columns=5), material=material)
    assert model.band_width == 8
    assert model.number_of_equations == 24


def test_band_width_follows_node_numbering(material):
    text = "N 1 0 0\nN 2 1 0\nN 5 0 1\nE 1 1 2 5\n"
    model = Model.from_text(text, material=material)
    assert model.band_width == 10
    assert model.number_of_nodes == 5


@pytest.mark.parametrize("text_fixture", ["square_text", "cantilever_text"])
def test_band_assembly_matches_dense(text_fixture, material, request):
    solver = assembled(request.getfixturevalue(text_fixture), material)
    assert solver.state == SolverState.ASSEMBLED
    np.testing.assert_allclose(
        solver.stiffness.to_dense(), dense_stiffness(solver.model), rtol=1e-12, atol=1e-6
    )


def test_couplings_stay_inside_band(cantilever_text, material):
    stiffness = assembled(cantilever_text, material).stiffness
    assert stiffness.max_coupling_distance() < stiffness.band_width


def test_assembled_matrix_is_singular_without_supports(square_text, material):
    dense = assembled(square_text, material).stiffness.to_dense()
    np.testing.assert_allclose(dense @ np.tile([1.0, 0.0], 4), 0.0, atol=1e-6)


def test_too_narrow_band_is_rejected(material):
    nodes = [Node(1, (0.0, 0.0)), Node(3, (1.0, 1.0)), Node(4, (0.0, 1.0))]
    element = Tri3(index=1, nodes=nodes, material=material)
    with pytest.raises(BandWidthError):
        assemble_element(BandMatrix(8, 4), element, element.get_stiffness_matrix())


def test_mesh_rejects_inconsistent_input(material):
    nodes = [Node(1, (0.0, 0.0)), Node(2, (1.0, 0.0)), Node(3, (0.0, 1.0))]
    element = Tri3(index=1, nodes=nodes, material=material)
    with pytest.raises(ValueError):
        Mesh(nodes=nodes[:2], elements=[element])
    with pytest.raises(ValueError):
        Mesh(nodes=nodes + [Node(1, (2.0, 2.0))], elements=[element])


def test_assembly_is_logged(square_text, material, caplog):
    caplog.set_level(logging.INFO, logger="bandfem")
    assembled(square_text, material)
    assert "Assembled stiffness matrix with 8 DOFs" in caplog.text
