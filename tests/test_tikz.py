import re

import pytest

from floorplan_core.scene import Node, Scene, Wall
from floorplan_core.tikz import _format_float, generate_tikz_code, generate_tikz_document


def _scene():
    return Scene(
        nodes={"n1": Node("n1", 0.0, 0.0), "n2": Node("n2", 1000.0, 0.0)},
        walls={"w1": Wall("w1", "n1", "n2", 100.0, 2700.0)},
    )


@pytest.mark.parametrize(
    "value, expected",
    [(0.0, "0"), (-0.0, "0"), (1.5, "1.5"), (-2.25, "-2.25"), (1.00004, "1"), (3.14159, "3.1416")],
)
def test_format_float(value, expected):
    assert _format_float(value) == expected


def test_format_float_rejects_non_finite():
    with pytest.raises(ValueError):
        _format_float(float("nan"))


def test_generate_tikz_code_draws_walls_in_centimetres():
    code = generate_tikz_code(_scene())

    assert code.splitlines() == [
        "\\begin{tikzpicture}",
        "  \\draw[wall] (0, 5) -- (0, -5) -- (100, -5) -- (100, 5) -- cycle; % w1",
        "  \\fill (0, 0) circle[radius=\\fpDotR] node[nodelabel] {n1};",
        "  \\fill (100, 0) circle[radius=\\fpDotR] node[nodelabel] {n2};",
        "\\end{tikzpicture}",
    ]


def test_generate_tikz_code_uses_given_polygons():
    code = generate_tikz_code(_scene(), {"w1": [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0)], "w2": []})

    assert "\\draw[wall] (0, 0) -- (1, 0) -- (1, 1) -- cycle; % w1" in code
    assert "% w2" not in code


def test_generate_tikz_code_normalizes_into_box():
    code = generate_tikz_code(_scene(), normalize=True)

    numbers = [float(value) for value in re.findall(r"-?\d+(?:\.\d+)?", code.split("\\begin{tikzpicture}")[1])]
    assert numbers
    assert max(abs(value) for value in numbers) <= 4.0


def test_generate_tikz_code_escapes_ids():
    scene = Scene(nodes={"n_1": Node("n_1", 0.0, 0.0)})
    assert "{n\\_1}" in generate_tikz_code(scene)


def test_generate_tikz_document_wraps_standalone():
    document = generate_tikz_document(_scene())

    assert document.startswith("\\documentclass[border=2pt]{standalone}")
    assert "wall/.style" in document
    assert document.count("\\draw[wall]") == 1
    assert document.rstrip().endswith("\\end{document}")
