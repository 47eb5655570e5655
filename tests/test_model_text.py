import pytest

from bandfem.analysis.finite_elements.tri3 import DegenerateElementError
from bandfem.analysis.model import Model
from bandfem.pre.model_text import ModelParseError, parse_model


def test_parse_square(square_text, material):
    model = parse_model(square_text, material=material, zoom_x=1.0, zoom_y=1.0)
    assert model.number_of_nodes == 4
    assert model.number_of_elements == 2
    assert model.number_of_equations == 8
    assert model.mesh.get_element(2).node_ids == (1, 3, 4)
    assert len(model.fixed_dofs) == 0
    assert model.material is material


def test_default_zoom(square_text):
    model = parse_model(square_text)
    assert model.mesh.get_node(3).x == pytest.approx(2.3)
    assert model.mesh.get_node(3).y == pytest.approx(-2.3)


def test_tags_are_case_insensitive():
    text = "n 1 0 0\nN 2 1 0\nn 3 0 1\ne 1 1 2 3\nd 1 X 0\nD 1 y 0\nf 3 Y -5\n"
    model = parse_model(text, zoom_x=1.0, zoom_y=1.0)
    assert model.is_node_fixed(1, "x")
    assert model.is_node_fixed(1, "y")
    assert model.forces.get(3, "y") == -5.0
    assert model.forces.get(3, "x") is None


def test_blank_lines_are_skipped():
    text = "\nN 1 0 0\n   \nN 2 1 0\nN 3 0 1\n\nE 1 1 2 3\n"
    assert parse_model(text).number_of_elements == 1


def test_storage_is_sized_by_largest_node_id():
    text = "N 1 0 0\nN 2 1 0\nN 5 0 1\nE 1 1 2 5\nF 5 x 1\n"
    model = parse_model(text)
    assert model.number_of_nodes == 5
    assert model.forces.size == 10
    assert model.forces.get(5, "x") == 1.0


@pytest.mark.parametrize("text, line_number", [
    ("N 1 0 0\nQ 1 2 3\n", 2),
    ("N 1 0\n", 1),
    ("N 1 0 0\nE 1 1 2\n", 2),
    ("N 1 a 0\n", 1),
    ("N 1 nan 0\n", 1),
    ("N 1 0 inf\n", 1),
    ("N 0 0 0\n", 1),
    ("N 1.5 0 0\n", 1),
    ("N 1 0 0\nN 1 1 1\n", 2),
    ("N 1 0 0\nN 2 1 0\nN 3 0 1\nE 1 1 2 3\nE 1 1 2 3\n", 5),
    ("N 1 0 0\nN 2 1 0\nN 3 0 1\nE 1 1 2 4\n", 4),
    ("N 1 0 0\nN 2 1 0\nN 3 0 1\nE 1 1 2 3\nD 1 z 0\n", 5),
    ("N 1 0 0\nN 2 1 0\nN 3 0 1\nE 1 1 2 3\nF 7 x 1\n", 5),
    ("N 1 0 0\nN 2 1 0\nN 3 0 1\nE 1 1 2 3\nD 1 x zero\n", 5),
])
def test_malformed_records(text, line_number):
    with pytest.raises(ModelParseError) as excinfo:
        parse_model(text)
    assert excinfo.value.line_number == line_number
    assert str(excinfo.value).startswith(f"Line {line_number}:")


@pytest.mark.parametrize("text", ["", "N 1 0 0\nN 2 1 0\n", "E 1 1 2 3\n"])
def test_incomplete_model(text):
    with pytest.raises(ModelParseError) as excinfo:
        parse_model(text)
    assert excinfo.value.line_number is None


def test_parse_error_is_value_error():
    assert issubclass(ModelParseError, ValueError)


def test_degenerate_element():
    with pytest.raises(DegenerateElementError):
        parse_model("N 1 0 0\nN 2 1 1\nN 3 2 2\nE 1 1 2 3\n")


def test_model_from_file(tmp_path, square_text):
    path = tmp_path / "square.txt"
    path.write_text(square_text, encoding="utf-8")
    model = Model.from_file(str(path), zoom_x=1.0, zoom_y=1.0)
    assert model.mesh.get_node(3).coords.tolist() == [1.0, 1.0]


def test_equations_follow_mesh_dofs():
    model = parse_model("N 1 0 0\nN 2 1 0\nN 6 0 1\nE 1 1 2 6\n")
    assert model.number_of_equations == model.mesh.number_of_dofs == 12
    assert model.displacements.size == model.forces.size == 12
