import pytest

from circuit_layout import BlackBox, Component, MinimumConstraint, Point, Vector2, Wire
from circuit_layout.loader import load_circuit, parse_reference, parse_segment, parse_vector
from circuit_layout.pins import FixedOrientedPin, LoosePin, LooselyOrientedPin, MinimumOffsetPin


def _description():
    return {
        "metadata": {"title": "Divider"},
        "components": [
            {
                "name": "R1",
                "pins": [
                    {"name": "p", "kind": "fixed-oriented", "offset": [-6, 0], "orientation": "l"},
                    {"name": "n", "kind": "fixed-oriented", "offset": [6, 0], "orientation": "r"},
                ],
            },
            {
                "name": "X1",
                "orientation": "d",
                "pins": [
                    {"name": "a", "kind": "loosely-oriented", "offset": [2, 0]},
                    {"name": "b", "kind": "loose"},
                    {"name": "c", "kind": "minimum", "direction": [1, 1], "minimum": 5, "origin": "a"},
                ],
            },
        ],
        "points": ["P1", {"name": "P2"}],
        "blackboxes": [{"name": "BB1", "min_width": 40}],
        "wires": [{"name": "W1", "start": "R1[n]", "segments": ["r 10", {"direction": "d", "length": 5}], "end": "P1"}],
        "constraints": [
            {"kind": "offset", "name": "gx", "low": "0", "high": "R1.x"},
            {"kind": "offset", "name": "gy", "low": "0", "high": "R1.y"},
            {"kind": "minimum", "name": "m", "low": "P1.x", "high": "P2.x", "minimum": 20, "weight": 2},
        ],
    }


def test_load_circuit_builds_every_presence():
    circuit = load_circuit(_description())
    assert circuit.metadata == {"title": "Divider"}
    assert len(circuit) == 9
    assert isinstance(circuit["r1"], Component)
    assert isinstance(circuit["P2"], Point)
    assert isinstance(circuit["BB1"], BlackBox)
    assert circuit["BB1"].min_width == 40.0
    assert isinstance(circuit["W1"], Wire)
    assert isinstance(circuit["m"], MinimumConstraint)
    assert circuit["m"].weight == 2.0

    x1 = circuit["X1"]
    assert x1.orientation == Vector2(0.0, 1.0)
    assert isinstance(x1.pins["a"], LooselyOrientedPin)
    assert isinstance(x1.pins["b"], LoosePin)
    assert isinstance(x1.pins["c"], MinimumOffsetPin)
    assert x1.pins["c"].origin is x1.pins["a"]
    assert isinstance(circuit["R1"].pins["p"], FixedOrientedPin)


def test_loaded_circuit_solves():
    circuit = load_circuit(_description())
    assert circuit.solve()
    assert circuit["P1"].location.is_close(Vector2(16.0, 5.0))
    assert circuit["P2"].location.x >= circuit["P1"].location.x + 20.0 - 1e-6


@pytest.mark.parametrize(
    "text, direction, length, fixed",
    [
        ("r", Vector2(1.0, 0.0), 10.0, False),
        ("u 4", Vector2(0.0, -1.0), 4.0, False),
        ("l =7.5", Vector2(-1.0, 0.0), 7.5, True),
        ("? 3", None, 3.0, False),
    ],
)
def test_parse_segment(text, direction, length, fixed):
    segment = parse_segment(text)
    assert segment.direction == direction
    assert segment.length == length
    assert segment.fixed is fixed


def test_parse_reference():
    reference = parse_reference("R1[ n ]")
    assert (reference.component, reference.pin) == ("R1", "n")
    reference = parse_reference("P1")
    assert (reference.component, reference.pin) == ("P1", None)
    assert parse_reference(None) is None
    with pytest.raises(ValueError):
        parse_reference("R1[a][b]")


def test_invalid_input_raises_value_error():
    with pytest.raises(ValueError):
        parse_vector("north")
    with pytest.raises(ValueError):
        parse_vector([1, 2, 3])
    with pytest.raises(ValueError):
        load_circuit({"components": [{"name": "C", "pins": [{"name": "a", "kind": "weird"}]}]})
    with pytest.raises(ValueError):
        load_circuit({"constraints": [{"kind": "weird", "name": "c", "low": "a", "high": "b"}]})
