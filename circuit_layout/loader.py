"""Build a :class:`GraphicalCircuit` from a JSON-compatible description.

Example::

    {
        "components": [
            {"name": "R1", "pins": [
                {"name": "p", "kind": "fixed-oriented", "offset": [-6, 0], "orientation": "l"},
                {"name": "n", "kind": "fixed-oriented", "offset": [6, 0], "orientation": "r"}
            ]}
        ],
        "points": ["P1"],
        "blackboxes": [{"name": "BB1"}],
        "wires": [{"name": "W1", "start": "R1[n]", "segments": ["r 10"], "end": "P1"}],
        "constraints": [{"kind": "minimum", "name": "C1", "low": "R1.x", "high": "P1.x", "minimum": 20}]
    }
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .circuit import GraphicalCircuit
from .components import BlackBox, Component, Point
from .constraints import MinimumConstraint, OffsetConstraint
from .pins import (
    FixedOrientedPin,
    FixedPin,
    LoosePin,
    LooselyOrientedPin,
    MinimumOffsetPin,
    Pin,
    PinReference,
)
from .solver import SolverOptions
from .vector import Vector2
from .wires import Wire, WireSegmentInfo

logger = logging.getLogger(__name__)

DIRECTIONS: Dict[str, Vector2] = {
    "r": Vector2(1.0, 0.0),
    "l": Vector2(-1.0, 0.0),
    "u": Vector2(0.0, -1.0),
    "d": Vector2(0.0, 1.0),
    "ur": Vector2(1.0, -1.0),
    "ul": Vector2(-1.0, -1.0),
    "dr": Vector2(1.0, 1.0),
    "dl": Vector2(-1.0, 1.0),
}

_REFERENCE = re.compile(r"^\s*(?P<component>[^\[\]\s]+)\s*(?:\[\s*(?P<pin>[^\[\]]+?)\s*\])?\s*$")

DirectionSpec = Union[str, Iterable[float], None]


def parse_vector(value: DirectionSpec, what: str = "vector") -> Optional[Vector2]:
    if value is None:
        return None
    if isinstance(value, str):
        key = value.strip().lower()
        if key == "?":
            return None
        if key not in DIRECTIONS:
            raise ValueError(f"unknown direction '{value}' for {what}")
        return DIRECTIONS[key]
    coords = [float(item) for item in value]
    if len(coords) != 2:
        raise ValueError(f"{what} needs exactly two coordinates, got {len(coords)}")
    return Vector2(coords[0], coords[1])


def parse_reference(value: Union[str, Mapping[str, Any], None]) -> Optional[PinReference]:
    if value is None:
        return None
    if isinstance(value, Mapping):
        return PinReference(value["component"], value.get("pin"))
    match = _REFERENCE.match(value)
    if match is None:
        raise ValueError(f"invalid pin reference '{value}'")
    return PinReference(match.group("component"), match.group("pin"))


def parse_segment(value: Union[str, Mapping[str, Any]]) -> WireSegmentInfo:
    """Parse ``"r 10"``, ``"d"``, ``"? 5"``, ``"r =10"`` or a mapping."""

    if isinstance(value, Mapping):
        return WireSegmentInfo(
            direction=parse_vector(value.get("direction"), "wire segment"),
            length=float(value.get("length", 10.0)),
            fixed=bool(value.get("fixed", False)),
        )
    parts = value.split()
    if not parts or len(parts) > 2:
        raise ValueError(f"invalid wire segment '{value}'")
    direction = parse_vector(parts[0], "wire segment")
    if len(parts) == 1:
        return WireSegmentInfo(direction=direction)
    length = parts[1]
    fixed = length.startswith("=")
    return WireSegmentInfo(direction=direction, length=float(length.lstrip("=")), fixed=fixed)


def _build_pin(component: Component, data: Mapping[str, Any]) -> Pin:
    name = data["name"]
    kind = data.get("kind", "fixed")
    offset = parse_vector(data.get("offset"), f"pin {name}") or Vector2()
    if kind == "fixed":
        return FixedPin(name, component, offset)
    if kind == "fixed-oriented":
        orientation = parse_vector(data.get("orientation", "r"), f"pin {name}")
        return FixedOrientedPin(name, component, offset, orientation)
    if kind == "loosely-oriented":
        return LooselyOrientedPin(name, component, offset)
    if kind == "loose":
        return LoosePin(name, component, parse_vector(data.get("orientation"), f"pin {name}"))
    if kind == "minimum":
        direction = parse_vector(data.get("direction", "r"), f"pin {name}")
        origin = data.get("origin")
        return MinimumOffsetPin(
            name,
            component,
            direction,
            float(data.get("minimum", 0.0)),
            origin=component.pins[origin] if origin else None,
            fix=bool(data.get("fix", False)),
        )
    raise ValueError(f"unknown pin kind '{kind}' for pin {name} of {component.name}")


def _build_component(data: Mapping[str, Any]) -> Component:
    component = Component(
        data["name"],
        parse_vector(data.get("orientation"), f"component {data['name']}"),
        flipped=bool(data.get("flipped", False)),
        scale=float(data.get("scale", 1.0)),
    )
    for pin in data.get("pins", []):
        component.add_pin(_build_pin(component, pin))
    return component


def _build_constraint(data: Mapping[str, Any]):
    kind = data.get("kind", "offset")
    if kind == "offset":
        return OffsetConstraint(data["name"], data["low"], data["high"], float(data.get("offset", 0.0)))
    if kind == "minimum":
        return MinimumConstraint(
            data["name"],
            data["low"],
            data["high"],
            float(data.get("minimum", 0.0)),
            float(data.get("weight", 1.0)),
        )
    raise ValueError(f"unknown constraint kind '{kind}'")


def load_circuit(data: Mapping[str, Any], options: Optional[SolverOptions] = None) -> GraphicalCircuit:
    circuit = GraphicalCircuit(options)
    circuit.metadata.update({str(key): str(value) for key, value in data.get("metadata", {}).items()})

    presences: List[Any] = []
    for item in data.get("components", []):
        presences.append(_build_component(item))
    for item in data.get("points", []):
        presences.append(Point(item if isinstance(item, str) else item["name"]))
    for item in data.get("blackboxes", []):
        item = dict(item)
        presences.append(BlackBox(item.pop("name"), **{key: float(value) for key, value in item.items()}))
    for item in data.get("wires", []):
        presences.append(
            Wire(
                item["name"],
                parse_reference(item.get("start")),
                [parse_segment(segment) for segment in item.get("segments", [])],
                parse_reference(item.get("end")),
            )
        )
    for item in data.get("constraints", []):
        presences.append(_build_constraint(item))

    circuit.add(*presences)
    logger.info("Loaded circuit with %d presence(s)", len(circuit))
    return circuit


__all__ = ["DIRECTIONS", "load_circuit", "parse_reference", "parse_segment", "parse_vector"]
