"""Registration and distribution contexts for circuit presences."""

from __future__ import annotations

import logging
from typing import List, Optional, TYPE_CHECKING

from .diagnostics import DiagnosticHandler, ErrorCodes, post
from .nodes import NodeContext, NodeGrouper, node_key
from .solver import Network, OffsetBranch, RectifyingBranch, SolvedValues, SolverOptions, get_solver_options
from .vector import Vector2, is_zero, order_offset

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .wires import WireSegment

logger = logging.getLogger(__name__)


class CircuitSolverContext:
    """The network under construction during the registration phase.

    Every branch helper maps node names through ``nodes.shorts`` first, so
    presences may pass raw coordinate names.
    """

    def __init__(
        self,
        nodes: NodeContext,
        network: Optional[Network] = None,
        options: Optional[SolverOptions] = None,
        diagnostics: Optional[DiagnosticHandler] = None,
    ) -> None:
        self.nodes = nodes
        self.network = network if network is not None else Network()
        self.options = options if options is not None else get_solver_options()
        self.diagnostics = diagnostics if diagnostics is not None else nodes.diagnostics
        self.wire_segments: List["WireSegment"] = []

    @property
    def shorts(self) -> NodeGrouper:
        return self.nodes.shorts

    def map(self, name: str) -> str:
        return self.nodes.shorts[name]

    def same(self, a: str, b: str) -> bool:
        return node_key(self.map(a)) == node_key(self.map(b))

    def ensure_node(self, name: str) -> None:
        """Make sure the representative of ``name`` is an unknown of the network."""

        if not self.shorts.is_ground(name):
            self.network.add_node(self.map(name))


def add_offset(
    context: CircuitSolverContext, name: str, low: str, high: str, offset: float
) -> Optional[OffsetBranch]:
    """Tie ``high`` to ``low + offset`` through a small series resistance."""

    low, high = context.map(low), context.map(high)
    if node_key(low) == node_key(high):
        if not is_zero(offset):
            post(context.diagnostics, ErrorCodes.CONFLICTING_OFFSET, offset, name)
        return None
    branch = OffsetBranch(name, low, high, float(offset), context.options.offset_resistance)
    context.network.add(branch)
    return branch


def add_minimum(
    context: CircuitSolverContext,
    name: str,
    low: str,
    high: str,
    minimum: float,
    weight: float = 1.0,
) -> Optional[RectifyingBranch]:
    """Require ``high - low >= minimum``.

    A heavier ``weight`` makes the released branch pull less on its nodes.
    """

    low, high = context.map(low), context.map(high)
    if node_key(low) == node_key(high):
        if minimum > 0.0 and not is_zero(minimum):
            post(context.diagnostics, ErrorCodes.UNSATISFIABLE_MINIMUM, minimum, name)
        return None
    options = context.options
    branch = RectifyingBranch(
        name,
        {low: -1.0, high: 1.0},
        float(minimum),
        on_conductance=options.minimum_on_conductance,
        off_conductance=options.minimum_off_conductance / weight,
        off_target=float(minimum),
        threshold=options.minimum_threshold,
        release=options.minimum_release,
    )
    context.network.add(branch)
    return branch


def add_controlled_minimum(
    context: CircuitSolverContext,
    name: str,
    low_x: str,
    high_x: str,
    low_y: str,
    high_y: str,
    direction: Vector2,
) -> List[RectifyingBranch]:
    """Keep a diagonal offset at or beyond the slope of ``direction`` on both axes.

    ``direction`` must have strictly positive components; the nodes are expected
    to be ordered accordingly (see :func:`order_offset`). Each branch acts on
    one axis and only senses the other, so the axes stay separate islands for
    floating-node detection.
    """

    options = context.options
    low_x, high_x = context.map(low_x), context.map(high_x)
    low_y, high_y = context.map(low_y), context.map(high_y)
    slope_x = direction.x / direction.y
    slope_y = direction.y / direction.x
    branches = [
        RectifyingBranch(
            f"{name}.xc",
            {low_x: -1.0, high_x: 1.0, low_y: slope_x, high_y: -slope_x},
            0.0,
            on_conductance=options.minimum_on_conductance,
            off_conductance=options.minimum_off_conductance,
            threshold=options.minimum_threshold,
            release=options.minimum_release,
            control=(low_y, high_y),
        ),
        RectifyingBranch(
            f"{name}.yc",
            {low_y: -1.0, high_y: 1.0, low_x: slope_y, high_x: -slope_y},
            0.0,
            on_conductance=options.minimum_on_conductance,
            off_conductance=options.minimum_off_conductance,
            threshold=options.minimum_threshold,
            release=options.minimum_release,
            control=(low_x, high_x),
        ),
    ]
    for branch in branches:
        context.network.add(branch)
    return branches


def add_directional_minimum(
    context: CircuitSolverContext,
    name: str,
    origin_x: str,
    origin_y: str,
    x: str,
    y: str,
    direction: Vector2,
    minimum: float,
    *,
    fix: bool = False,
) -> None:
    """Place ``(x, y)`` at least ``minimum`` away from the origin along ``direction``.

    With ``fix`` the distance becomes an exact offset instead.
    """

    ox, hx = context.map(origin_x), context.map(x)
    oy, hy = context.map(origin_y), context.map(y)
    direction, ox, hx, oy, hy = order_offset(direction.normalized(), ox, hx, oy, hy)
    same_x = node_key(ox) == node_key(hx)
    same_y = node_key(oy) == node_key(hy)

    if fix:
        if not same_x or not is_zero(direction.x):
            add_offset(context, f"{name}.x", ox, hx, direction.x * minimum)
        if not same_y or not is_zero(direction.y):
            add_offset(context, f"{name}.y", oy, hy, direction.y * minimum)
        return

    if same_x or same_y:
        if same_x and not is_zero(direction.x):
            post(context.diagnostics, ErrorCodes.UNSATISFIABLE_MINIMUM, direction.x * minimum, f"{name}.x")
        if same_y and not is_zero(direction.y):
            post(context.diagnostics, ErrorCodes.UNSATISFIABLE_MINIMUM, direction.y * minimum, f"{name}.y")
        # the free axis carries the whole distance
        if not same_y:
            if is_zero(direction.y):
                add_offset(context, f"{name}.y", oy, hy, 0.0)
            else:
                add_minimum(context, f"{name}.y", oy, hy, minimum)
        elif not same_x:
            if is_zero(direction.x):
                add_offset(context, f"{name}.x", ox, hx, 0.0)
            else:
                add_minimum(context, f"{name}.x", ox, hx, minimum)
        return
    if is_zero(direction.x) or is_zero(direction.y):
        # axis aligned but not (yet) grouped on the other axis
        if is_zero(direction.x):
            add_offset(context, f"{name}.x", ox, hx, 0.0)
            add_minimum(context, f"{name}.y", oy, hy, minimum)
        else:
            add_offset(context, f"{name}.y", oy, hy, 0.0)
            add_minimum(context, f"{name}.x", ox, hx, minimum)
        return

    add_controlled_minimum(context, name, ox, hx, oy, hy, direction)
    add_minimum(context, f"{name}.min.x", ox, hx, direction.x * minimum)
    add_minimum(context, f"{name}.min.y", oy, hy, direction.y * minimum)


class UpdateContext:
    """Hands solved coordinates back to the presences."""

    def __init__(
        self,
        values: SolvedValues,
        shorts: NodeGrouper,
        diagnostics: Optional[DiagnosticHandler] = None,
        wire_segments: Optional[List["WireSegment"]] = None,
    ) -> None:
        self.values = values
        self.shorts = shorts
        self.diagnostics = diagnostics
        self.wire_segments: List["WireSegment"] = wire_segments if wire_segments is not None else []

    def get_value(self, node: str, owner: Optional[str] = None) -> float:
        representative = self.shorts[node]
        if self.shorts.is_ground(representative):
            return 0.0
        if representative in self.values:
            return self.values[representative]
        post(self.diagnostics, ErrorCodes.COULD_NOT_FIND_COORDINATE, node, owner or node)
        return 0.0

    def get_location(self, x: str, y: str, owner: Optional[str] = None) -> Vector2:
        return Vector2(self.get_value(x, owner), self.get_value(y, owner))


__all__ = [
    "CircuitSolverContext",
    "UpdateContext",
    "add_controlled_minimum",
    "add_directional_minimum",
    "add_minimum",
    "add_offset",
]
