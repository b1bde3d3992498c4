import pytest

pytest.importorskip("matplotlib")

from circuit_layout import BlackBox, GraphicalCircuit, OffsetConstraint, Point, Wire, WireSegmentInfo
from circuit_layout.pins import PinReference
from circuit_layout.preview import MatplotlibBuilder
from circuit_layout.vector import Vector2


def _circuit():
    circuit = GraphicalCircuit()
    circuit.metadata["title"] = "Preview"
    circuit.add(
        Point("A"),
        BlackBox("BB"),
        Wire("W", PinReference("A"), [WireSegmentInfo(Vector2(1.0, 0.0), 10.0)], PinReference("BB", "w1")),
        OffsetConstraint("ax", "0", "A.x"),
        OffsetConstraint("ay", "0", "A.y"),
    )
    return circuit


def test_matplotlib_builder_draws_every_presence(tmp_path):
    circuit = _circuit()
    builder = MatplotlibBuilder(show_labels=False)
    try:
        circuit.render(builder)
        path = tmp_path / "preview.png"
        builder.save(path)
    finally:
        builder.close()

    assert circuit.solved
    # A, the box, its pin and the wire
    assert builder.count >= 4
    assert path.exists()
    assert builder.axes.get_title() == "Preview"


def test_builder_y_axis_points_down():
    circuit = _circuit()
    builder = MatplotlibBuilder()
    try:
        circuit.render(builder)
        bottom, top = builder.axes.get_ylim()
    finally:
        builder.close()
    assert bottom > top
