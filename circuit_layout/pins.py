"""Pins: the named connection points of a component.

A pin owns the coordinate nodes ``"{owner}[{pin}].x"`` and ``"{owner}[{pin}].y"``
and relates them to its owner's location. The variants differ in how much of
that relation is known up front:

* :class:`FixedPin` sits at a fixed offset from its owner.
* :class:`FixedOrientedPin` additionally points in a fixed (local) direction.
* :class:`LooselyOrientedPin` sits at a fixed offset; its orientation is
  imposed by whatever connects to it.
* :class:`LoosePin` is placed entirely by its owner.
* :class:`MinimumOffsetPin` keeps at least some distance from its origin along
  a direction.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional, TYPE_CHECKING

from .context import CircuitSolverContext, add_directional_minimum, add_offset
from .diagnostics import DiagnosticHandler, ErrorCodes, post
from .nodes import NodeContext, NodeRelationMode
from .presence import ORIENTATION_TOLERANCE, LocatedPresence
from .vector import Vector2, is_zero, order_offset

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .preview import GraphicsBuilder

logger = logging.getLogger(__name__)


class Pin(LocatedPresence):
    """Base class of all pins."""

    def __init__(self, name: str, owner: LocatedPresence) -> None:
        if owner is None:
            raise ValueError("a pin needs an owner")
        super().__init__(name, f"{owner.name}[{name}].x", f"{owner.name}[{name}].y")
        self.owner = owner

    @property
    def orientation(self) -> Optional[Vector2]:
        """The global direction the pin points to, if known."""

        return None

    def resolve_orientation(
        self, orientation: Vector2, diagnostics: Optional[DiagnosticHandler] = None
    ) -> bool:
        return True

    def render(self, builder: "GraphicsBuilder") -> None:
        builder.marker(self.location, str(self))

    def __str__(self) -> str:
        return f"{self.owner.name}[{self.name}]"


class FixedPin(Pin):
    """A pin at a fixed local offset from its owner."""

    def __init__(self, name: str, owner: LocatedPresence, offset: Vector2 = Vector2()) -> None:
        super().__init__(name, owner)
        self.offset = offset

    @property
    def global_offset(self) -> Vector2:
        return self.owner.transform_offset(self.offset)

    def discover_node_relationships(self, context: NodeContext) -> None:
        super().discover_node_relationships(context)
        offset = self.global_offset
        if context.mode is NodeRelationMode.SHORTS:
            if is_zero(offset.x):
                context.shorts.group(self.owner.x, self.x)
            if is_zero(offset.y):
                context.shorts.group(self.owner.y, self.y)
        elif context.mode is NodeRelationMode.LINKS:
            _, low_x, high_x, low_y, high_y = order_offset(offset, self.owner.x, self.x, self.owner.y, self.y)
            if not is_zero(offset.x):
                context.order(low_x, high_x)
            if not is_zero(offset.y):
                context.order(low_y, high_y)

    def register(self, context: CircuitSolverContext) -> None:
        offset = self.global_offset
        if not context.same(self.owner.x, self.x) or not is_zero(offset.x):
            add_offset(context, f"{self}.x", self.owner.x, self.x, offset.x)
        if not context.same(self.owner.y, self.y) or not is_zero(offset.y):
            add_offset(context, f"{self}.y", self.owner.y, self.y, offset.y)


class FixedOrientedPin(FixedPin):
    """A fixed pin that also points in a fixed local direction."""

    def __init__(
        self,
        name: str,
        owner: LocatedPresence,
        offset: Vector2 = Vector2(),
        orientation: Vector2 = Vector2(1.0, 0.0),
    ) -> None:
        super().__init__(name, owner, offset)
        if orientation.is_zero():
            raise ValueError(f"pin {name} needs a non-zero orientation")
        self.local_orientation = orientation.normalized()

    @property
    def orientation(self) -> Optional[Vector2]:
        return self.owner.transform_normal(self.local_orientation)

    def resolve_orientation(
        self, orientation: Vector2, diagnostics: Optional[DiagnosticHandler] = None
    ) -> bool:
        return self.owner.constrain_orientation(self.local_orientation, orientation, diagnostics, str(self))


class _FreelyOriented:
    """Orientation that is imposed once and checked afterwards."""

    _orientation: Optional[Vector2] = None
    _initial_orientation: Optional[Vector2] = None

    @property
    def orientation(self) -> Optional[Vector2]:
        return self._orientation

    @property
    def has_fixed_orientation(self) -> bool:
        return self._orientation is not None

    def _reset_orientation(self) -> None:
        self._orientation = self._initial_orientation

    def resolve_orientation(
        self, orientation: Vector2, diagnostics: Optional[DiagnosticHandler] = None
    ) -> bool:
        orientation = orientation.normalized()
        if self._orientation is None:
            self._orientation = orientation
            return True
        if orientation.dot(self._orientation) < ORIENTATION_TOLERANCE:
            post(diagnostics, ErrorCodes.COULD_NOT_CONSTRAIN_ORIENTATION, str(self))
            return False
        return True


class LooselyOrientedPin(_FreelyOriented, FixedPin):
    """A pin at a fixed offset whose orientation is resolved by its connections."""

    def reset(self) -> None:
        super().reset()
        self._reset_orientation()


class LoosePin(_FreelyOriented, Pin):
    """A pin whose coordinates are constrained by its owner only."""

    def __init__(self, name: str, owner: LocatedPresence, orientation: Optional[Vector2] = None) -> None:
        super().__init__(name, owner)
        if orientation is not None:
            self._initial_orientation = orientation.normalized()
            self._orientation = self._initial_orientation

    def reset(self) -> None:
        super().reset()
        self._reset_orientation()


class MinimumOffsetPin(Pin):
    """A pin at least ``minimum`` away from its origin along ``direction``."""

    def __init__(
        self,
        name: str,
        owner: LocatedPresence,
        direction: Vector2,
        minimum: float,
        origin: Optional[LocatedPresence] = None,
        fix: bool = False,
    ) -> None:
        super().__init__(name, owner)
        if direction.is_zero():
            raise ValueError(f"pin {name} needs a non-zero direction")
        self.direction = direction.normalized()
        self.minimum = minimum
        self.origin = origin or owner
        self.fix = fix

    @property
    def global_direction(self) -> Vector2:
        return self.origin.transform_normal(self.direction)

    @property
    def orientation(self) -> Optional[Vector2]:
        return self.global_direction

    def resolve_orientation(
        self, orientation: Vector2, diagnostics: Optional[DiagnosticHandler] = None
    ) -> bool:
        return self.origin.constrain_orientation(self.direction, orientation, diagnostics, str(self))

    def discover_node_relationships(self, context: NodeContext) -> None:
        super().discover_node_relationships(context)
        direction = self.global_direction
        if context.mode is NodeRelationMode.SHORTS:
            if is_zero(direction.x):
                context.shorts.group(self.origin.x, self.x)
            if is_zero(direction.y):
                context.shorts.group(self.origin.y, self.y)
        elif context.mode is NodeRelationMode.LINKS:
            _, low_x, high_x, low_y, high_y = order_offset(direction, self.origin.x, self.x, self.origin.y, self.y)
            if not is_zero(direction.x):
                context.order(low_x, high_x)
            if not is_zero(direction.y):
                context.order(low_y, high_y)

    def register(self, context: CircuitSolverContext) -> None:
        add_directional_minimum(
            context,
            str(self),
            self.origin.x,
            self.origin.y,
            self.x,
            self.y,
            self.global_direction,
            self.minimum,
            fix=self.fix,
        )


class PinCollection:
    """Insertion-ordered, case-insensitive collection of the pins of a component."""

    def __init__(self, owner: LocatedPresence) -> None:
        self.owner = owner
        self._pins: Dict[str, Pin] = {}

    def add(self, pin: Pin) -> Pin:
        key = pin.name.lower()
        if key in self._pins:
            raise ValueError(f"component {self.owner.name} already has a pin named '{pin.name}'")
        self._pins[key] = pin
        return pin

    def get(self, name: str) -> Optional[Pin]:
        return self._pins.get(name.lower())

    def __getitem__(self, name: str) -> Pin:
        pin = self.get(name)
        if pin is None:
            raise KeyError(name)
        return pin

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._pins

    def __iter__(self) -> Iterator[Pin]:
        return iter(list(self._pins.values()))

    def __len__(self) -> int:
        return len(self._pins)

    @property
    def names(self) -> List[str]:
        return [pin.name for pin in self._pins.values()]

    @property
    def first(self) -> Optional[Pin]:
        return next(iter(self._pins.values()), None)

    @property
    def last(self) -> Optional[Pin]:
        return next(reversed(list(self._pins.values())), None)


class PinReference:
    """A reference to ``component[pin]`` that is resolved at solve time.

    Without a pin name the reference means the component's last pin when a
    wire starts there and its first pin when a wire ends there.
    """

    def __init__(self, component: str, pin: Optional[str] = None) -> None:
        if not component:
            raise ValueError("pin reference needs a component name")
        self.component = component
        self.pin = pin

    def resolve(self, context: NodeContext, source: str, *, starting: bool) -> Optional[Pin]:
        presence = context.find(self.component)
        pins = getattr(presence, "pins", None)
        if presence is None or pins is None:
            post(context.diagnostics, ErrorCodes.COULD_NOT_FIND_COMPONENT, self.component, source)
            return None
        if self.pin is None:
            pin = pins.last if starting else pins.first
        else:
            pin = pins.get(self.pin)
        if pin is None:
            post(context.diagnostics, ErrorCodes.COULD_NOT_FIND_PIN, self.pin or "", self.component, source)
        return pin

    def __str__(self) -> str:
        return self.component if self.pin is None else f"{self.component}[{self.pin}]"

    def __repr__(self) -> str:
        return f"PinReference({self.component!r}, {self.pin!r})"


__all__ = [
    "FixedOrientedPin",
    "FixedPin",
    "LoosePin",
    "LooselyOrientedPin",
    "MinimumOffsetPin",
    "Pin",
    "PinCollection",
    "PinReference",
]
