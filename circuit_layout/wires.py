"""Wires: chains of straight segments between two pins."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, TYPE_CHECKING

from .context import CircuitSolverContext, UpdateContext, add_directional_minimum
from .diagnostics import ErrorCodes, post
from .nodes import NodeContext, NodeRelationMode
from .pins import Pin, PinReference
from .presence import CircuitPresence
from .vector import Vector2, is_zero

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .preview import GraphicsBuilder

logger = logging.getLogger(__name__)

JUMP_OVER_RADIUS = 1.5
_DEFAULT_DIRECTION = Vector2(1.0, 0.0)


@dataclass(frozen=True)
class WireSegmentInfo:
    """One segment as described by the user.

    Without a direction the segment follows the orientation of the pin it is
    attached to. ``length`` is a minimum unless ``fixed`` is set.
    """

    direction: Optional[Vector2] = None
    length: float = 10.0
    fixed: bool = False


@dataclass(frozen=True)
class WireSegment:
    """A solved straight piece of a wire."""

    wire: str
    index: int
    start: Vector2
    end: Vector2

    def crossing(self, other: "WireSegment", tol: float = 1e-9) -> Optional[Vector2]:
        """Return the point where the interiors of both segments cross."""

        d1 = self.end - self.start
        d2 = other.end - other.start
        denominator = d1.x * d2.y - d1.y * d2.x
        if is_zero(denominator, tol):
            return None
        delta = other.start - self.start
        t = (delta.x * d2.y - delta.y * d2.x) / denominator
        u = (delta.x * d1.y - delta.y * d1.x) / denominator
        if tol < t < 1.0 - tol and tol < u < 1.0 - tol:
            return self.start + d1 * t
        return None


class Wire(CircuitPresence):
    """A wire from ``start`` through its segments, optionally ending at ``end``.

    The corner points of the wire are coordinate nodes named
    ``"{wire}[{index}].x"`` and ``.y``.
    """

    def __init__(
        self,
        name: str,
        start: Optional[PinReference],
        segments: Sequence[WireSegmentInfo],
        end: Optional[PinReference] = None,
    ) -> None:
        super().__init__(name)
        self.start = start
        self.end = end
        self.segments = list(segments)
        self.points: List[Vector2] = []
        self.jumps: List[Vector2] = []
        self._start_pin: Optional[Pin] = None
        self._end_pin: Optional[Pin] = None
        self._directions: List[Vector2] = []

    def x(self, index: int) -> str:
        return f"{self.name}[{index}].x"

    def y(self, index: int) -> str:
        return f"{self.name}[{index}].y"

    @property
    def directions(self) -> List[Vector2]:
        return list(self._directions)

    def reset(self) -> None:
        self.points = []
        self.jumps = []
        self._start_pin = None
        self._end_pin = None
        self._directions = []

    def _resolve(self, context: NodeContext) -> None:
        if self.start is not None:
            self._start_pin = self.start.resolve(context, self.name, starting=True)
        if self.end is not None:
            self._end_pin = self.end.resolve(context, self.name, starting=False)

        last = len(self.segments) - 1
        directions: List[Vector2] = []
        for index, segment in enumerate(self.segments):
            direction = segment.direction
            if direction is None or direction.is_zero():
                direction = None
                if index == 0 and self._start_pin is not None:
                    direction = self._start_pin.orientation
                if direction is None and index == last and self._end_pin is not None:
                    orientation = self._end_pin.orientation
                    direction = -orientation if orientation is not None else None
            if direction is None or direction.is_zero():
                post(context.diagnostics, ErrorCodes.UNDEFINED_WIRE_SEGMENT, index, self.name)
                direction = _DEFAULT_DIRECTION
            directions.append(direction.normalized())
        self._directions = directions

        if directions and self._start_pin is not None:
            self._start_pin.resolve_orientation(directions[0], context.diagnostics)
        if directions and self._end_pin is not None:
            self._end_pin.resolve_orientation(-directions[-1], context.diagnostics)

    def discover_node_relationships(self, context: NodeContext) -> None:
        mode = context.mode
        if mode is NodeRelationMode.NONE:
            self._resolve(context)
        elif mode is NodeRelationMode.SHORTS:
            if self._start_pin is not None:
                context.shorts.group(self._start_pin.x, self.x(0))
                context.shorts.group(self._start_pin.y, self.y(0))
            for index, direction in enumerate(self._directions):
                if is_zero(direction.x):
                    context.shorts.group(self.x(index), self.x(index + 1))
                if is_zero(direction.y):
                    context.shorts.group(self.y(index), self.y(index + 1))
            if self._end_pin is not None:
                n = len(self._directions)
                context.shorts.group(self._end_pin.x, self.x(n))
                context.shorts.group(self._end_pin.y, self.y(n))
        elif mode is NodeRelationMode.LINKS:
            for index, direction in enumerate(self._directions):
                if direction.x > 0 and not is_zero(direction.x):
                    context.order(self.x(index), self.x(index + 1))
                elif direction.x < 0 and not is_zero(direction.x):
                    context.order(self.x(index + 1), self.x(index))
                if direction.y > 0 and not is_zero(direction.y):
                    context.order(self.y(index), self.y(index + 1))
                elif direction.y < 0 and not is_zero(direction.y):
                    context.order(self.y(index + 1), self.y(index))
        elif mode is NodeRelationMode.GROUPS:
            for index in range(len(self._directions) + 1):
                context.pair(self.x(index), self.y(index))

    def register(self, context: CircuitSolverContext) -> None:
        for index, (segment, direction) in enumerate(zip(self.segments, self._directions)):
            add_directional_minimum(
                context,
                f"{self.name}[{index}]",
                self.x(index),
                self.y(index),
                self.x(index + 1),
                self.y(index + 1),
                direction,
                segment.length,
                fix=segment.fixed,
            )

    def update(self, context: UpdateContext) -> None:
        self.points = [
            context.get_location(self.x(index), self.y(index), self.name)
            for index in range(len(self._directions) + 1)
        ]
        earlier = list(context.wire_segments)
        own: List[WireSegment] = []
        jumps: List[Vector2] = []
        for index in range(len(self.points) - 1):
            segment = WireSegment(self.name, index, self.points[index], self.points[index + 1])
            for other in earlier:
                point = segment.crossing(other)
                if point is not None:
                    jumps.append(point)
            own.append(segment)
        self.jumps = jumps
        context.wire_segments.extend(own)
        if jumps:
            logger.debug("Wire %s jumps over %d crossing(s)", self.name, len(jumps))

    def render(self, builder: "GraphicsBuilder") -> None:
        if len(self.points) >= 2:
            builder.polyline(self.points, self.name)
        for point in self.jumps:
            builder.jump(point, JUMP_OVER_RADIUS)


__all__ = ["JUMP_OVER_RADIUS", "Wire", "WireSegment", "WireSegmentInfo"]
