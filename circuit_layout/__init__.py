"""Constraint-based layout of circuit diagrams.

Coordinates of pins and components are unknowns of a resistive network: exact
offsets become stiff branches, minimum distances become one-sided rectifying
branches, and a DC solve of the network yields the layout.
"""

from .circuit import Bounds, CircuitState, GraphicalCircuit, SolveReport
from .components import BlackBox, Component, Point
from .constraints import MinimumConstraint, OffsetConstraint
from .context import (
    CircuitSolverContext,
    UpdateContext,
    add_controlled_minimum,
    add_directional_minimum,
    add_minimum,
    add_offset,
)
from .diagnostics import (
    DiagnosticHandler,
    DiagnosticMessage,
    ErrorCode,
    ErrorCodes,
    LoggingDiagnosticHandler,
    SeverityLevel,
)
from .loader import load_circuit
from .nodes import (
    GROUND_ALIASES,
    NodeContext,
    NodeExtremeFinder,
    NodeGrouper,
    NodeRelationMode,
    XYNode,
)
from .pins import (
    FixedOrientedPin,
    FixedPin,
    LoosePin,
    LooselyOrientedPin,
    MinimumOffsetPin,
    Pin,
    PinCollection,
    PinReference,
)
from .presence import CircuitPresence, LocatedPresence
from .solver import (
    NetworkValidationError,
    ReadOnlyStateError,
    SolvedValues,
    SolverError,
    SolverOptions,
    get_solver_options,
    set_solver_options,
)
from .vector import Transform, Vector2
from .wires import Wire, WireSegment, WireSegmentInfo

__all__ = [
    "BlackBox",
    "Bounds",
    "CircuitPresence",
    "CircuitSolverContext",
    "CircuitState",
    "Component",
    "DiagnosticHandler",
    "DiagnosticMessage",
    "ErrorCode",
    "ErrorCodes",
    "FixedOrientedPin",
    "FixedPin",
    "GROUND_ALIASES",
    "GraphicalCircuit",
    "LocatedPresence",
    "LoggingDiagnosticHandler",
    "LoosePin",
    "LooselyOrientedPin",
    "MinimumConstraint",
    "MinimumOffsetPin",
    "NetworkValidationError",
    "NodeContext",
    "NodeExtremeFinder",
    "NodeGrouper",
    "NodeRelationMode",
    "OffsetConstraint",
    "Pin",
    "PinCollection",
    "PinReference",
    "Point",
    "ReadOnlyStateError",
    "SeverityLevel",
    "SolveReport",
    "SolvedValues",
    "SolverError",
    "SolverOptions",
    "Transform",
    "UpdateContext",
    "Vector2",
    "Wire",
    "WireSegment",
    "WireSegmentInfo",
    "XYNode",
    "add_controlled_minimum",
    "add_directional_minimum",
    "add_minimum",
    "add_offset",
    "get_solver_options",
    "load_circuit",
    "set_solver_options",
]
