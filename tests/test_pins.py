import math

import pytest

from circuit_layout import (
    Component,
    DiagnosticHandler,
    FixedOrientedPin,
    FixedPin,
    GraphicalCircuit,
    LoosePin,
    LooselyOrientedPin,
    MinimumOffsetPin,
    OffsetConstraint,
    PinCollection,
    Vector2,
)


def _anchored(component: Component) -> GraphicalCircuit:
    circuit = GraphicalCircuit()
    circuit.add(
        component,
        OffsetConstraint(f"{component.name}.ax", "0", component.x, 0.0),
        OffsetConstraint(f"{component.name}.ay", "0", component.y, 0.0),
    )
    return circuit


def _close(vector: Vector2, x: float, y: float, tol: float = 1e-6) -> bool:
    return math.isclose(vector.x, x, abs_tol=tol) and math.isclose(vector.y, y, abs_tol=tol)


def test_pin_node_names_follow_owner_convention():
    component = Component("R1")
    pin = component.add_pin(FixedPin("p", component, Vector2(-5.0, 0.0)))
    assert pin.x == "R1[p].x"
    assert pin.y == "R1[p].y"
    assert str(pin) == "R1[p]"


def test_pin_requires_name():
    component = Component("R1")
    with pytest.raises(ValueError):
        FixedPin("", component)


def test_fixed_pins_follow_owner_offset():
    component = Component("R1")
    component.add_pin(FixedPin("p", component, Vector2(-5.0, 0.0)))
    component.add_pin(FixedPin("n", component, Vector2(5.0, 2.0)))
    circuit = _anchored(component)
    assert circuit.solve()

    assert _close(component.pins["p"].location, -5.0, 0.0)
    assert _close(component.pins["n"].location, 5.0, 2.0)


@pytest.mark.parametrize(
    "orientation, flipped, expected",
    [
        (Vector2(1.0, 0.0), False, (5.0, 2.0)),
        (Vector2(0.0, 1.0), False, (-2.0, 5.0)),
        (Vector2(-1.0, 0.0), False, (-5.0, -2.0)),
        (Vector2(1.0, 0.0), True, (5.0, -2.0)),
    ],
)
def test_fixed_pin_offset_is_transformed_by_owner(orientation, flipped, expected):
    component = Component("U1", orientation, flipped=flipped)
    pin = component.add_pin(FixedPin("a", component, Vector2(5.0, 2.0)))
    circuit = _anchored(component)
    circuit.solve()
    assert _close(pin.location, *expected)


def test_scaled_owner_scales_pin_offset():
    component = Component("U1", scale=2.0)
    pin = component.add_pin(FixedPin("a", component, Vector2(3.0, -1.0)))
    _anchored(component).solve()
    assert _close(pin.location, 6.0, -2.0)


def test_zero_offset_pins_are_grouped_with_owner():
    component = Component("P")
    component.add_pin(FixedPin("c", component))
    circuit = _anchored(component)
    circuit.solve()
    shorts = circuit.node_context.shorts
    assert shorts.are_grouped("P[c].x", "P.x")
    assert shorts.is_ground("P[c].y")


def test_fixed_oriented_pin_rotates_with_owner():
    component = Component("Q1", Vector2(0.0, -1.0))
    pin = FixedOrientedPin("b", component, Vector2(-4.0, 0.0), Vector2(-1.0, 0.0))
    assert pin.orientation.is_close(Vector2(0.0, 1.0))


def test_fixed_oriented_pin_resolves_free_owner_orientation():
    component = Component("Q1")
    pin = FixedOrientedPin("b", component, Vector2(-4.0, 0.0), Vector2(-1.0, 0.0))
    assert not component.has_fixed_orientation
    assert pin.resolve_orientation(Vector2(0.0, 1.0))
    assert component.orientation.is_close(Vector2(0.0, -1.0))
    assert pin.orientation.is_close(Vector2(0.0, 1.0))

    diagnostics = DiagnosticHandler()
    assert not pin.resolve_orientation(Vector2(1.0, 0.0), diagnostics)
    assert diagnostics.codes() == ["ORI001"]

    component.reset()
    assert not component.has_fixed_orientation


def test_flipped_owner_orientation_is_resolved_through_the_flip():
    component = Component("Q1", flipped=True)
    pin = FixedOrientedPin("g", component, Vector2(0.0, 4.0), Vector2(0.0, 1.0))
    assert pin.resolve_orientation(Vector2(1.0, 0.0))
    assert pin.orientation.is_close(Vector2(1.0, 0.0))


def test_loosely_oriented_pin_takes_first_orientation():
    component = Component("X1")
    pin = LooselyOrientedPin("io", component, Vector2(2.0, 0.0))
    assert pin.orientation is None
    assert pin.resolve_orientation(Vector2(0.0, 3.0))
    assert pin.orientation == Vector2(0.0, 1.0)
    assert pin.resolve_orientation(Vector2(0.0, 1.0))

    diagnostics = DiagnosticHandler()
    assert not pin.resolve_orientation(Vector2(-1.0, 0.0), diagnostics)
    assert diagnostics.codes() == ["ORI001"]

    pin.reset()
    assert pin.orientation is None


def test_loose_pin_keeps_initial_orientation_across_resets():
    component = Component("X1")
    pin = LoosePin("w1", component, Vector2(-2.0, 0.0))
    assert pin.orientation == Vector2(-1.0, 0.0)
    pin.reset()
    assert pin.orientation == Vector2(-1.0, 0.0)


def test_isolated_loose_pin_is_repaired_to_a_finite_location():
    component = Component("X1")
    component.add_pin(FixedPin("a", component, Vector2(3.0, 0.0)))
    pin = component.add_pin(LoosePin("free", component))
    circuit = _anchored(component)
    assert circuit.solve()
    assert math.isfinite(pin.location.x)
    assert math.isfinite(pin.location.y)
    assert {"X1[free].x", "X1[free].y"} <= set(circuit.last_report.floating_fixes)


@pytest.mark.parametrize(
    "direction, expected",
    [
        (Vector2(1.0, 0.0), (15.0, 0.0)),
        (Vector2(-1.0, 0.0), (-15.0, 0.0)),
        (Vector2(0.0, 1.0), (0.0, 15.0)),
    ],
)
def test_minimum_offset_pin_along_an_axis(direction, expected):
    component = Component("C1")
    pin = component.add_pin(MinimumOffsetPin("m", component, direction, 15.0))
    _anchored(component).solve()
    assert _close(pin.location, *expected)


def test_minimum_offset_pin_diagonal_keeps_slope():
    component = Component("C1")
    pin = component.add_pin(MinimumOffsetPin("m", component, Vector2(1.0, 1.0), 10.0))
    _anchored(component).solve()
    expected = 10.0 / math.sqrt(2.0)
    assert _close(pin.location, expected, expected)


def test_minimum_offset_pin_yields_to_larger_distance():
    component = Component("C1")
    pin = component.add_pin(MinimumOffsetPin("m", component, Vector2(1.0, 0.0), 15.0))
    circuit = _anchored(component)
    circuit.add(OffsetConstraint("far", "C1.x", "C1[m].x", 40.0))
    circuit.solve()
    assert pin.location.x >= 15.0
    assert math.isclose(pin.location.x, 40.0, abs_tol=1e-3)


def test_fixed_minimum_offset_pin_is_exact():
    component = Component("C1", Vector2(0.0, 1.0))
    pin = component.add_pin(MinimumOffsetPin("m", component, Vector2(1.0, 0.0), 12.0, fix=True))
    circuit = _anchored(component)
    circuit.solve()
    assert _close(pin.location, 0.0, 12.0)


def test_minimum_offset_pin_relative_to_another_pin():
    component = Component("C1")
    anchor = component.add_pin(FixedPin("a", component, Vector2(5.0, 0.0)))
    pin = component.add_pin(MinimumOffsetPin("m", component, Vector2(1.0, 0.0), 7.0, origin=anchor))
    _anchored(component).solve()
    assert _close(pin.location, 12.0, 0.0)


def test_pin_collection_is_ordered_and_case_insensitive():
    component = Component("U1")
    pins = PinCollection(component)
    a = pins.add(FixedPin("In", component))
    b = pins.add(FixedPin("out", component))
    assert pins["in"] is a
    assert "OUT" in pins
    assert pins.first is a
    assert pins.last is b
    assert pins.names == ["In", "out"]
    assert pins.get("missing") is None
    with pytest.raises(KeyError):
        pins["missing"]
    with pytest.raises(ValueError):
        pins.add(FixedPin("IN", component))


def test_unanchored_diagonal_minimum_offset_pin():
    component = Component("X")
    pin = component.add_pin(MinimumOffsetPin("c", component, Vector2(1.0, 1.0), 5.0))
    circuit = GraphicalCircuit()
    circuit.add(component)
    assert circuit.solve()

    expected = 5.0 / math.sqrt(2.0)
    assert _close(component.location, 0.0, 0.0)
    assert _close(pin.location, expected, expected)
    assert sorted(circuit.last_report.floating_fixes) == ["X.x", "X.y"]
