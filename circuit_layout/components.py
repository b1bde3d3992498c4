"""Located components that own pins."""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional, TYPE_CHECKING

from .context import CircuitSolverContext, UpdateContext, add_minimum
from .diagnostics import DiagnosticHandler, ErrorCodes, post
from .nodes import NodeContext, NodeRelationMode
from .pins import FixedPin, LoosePin, Pin, PinCollection
from .presence import ORIENTATION_TOLERANCE, LocatedPresence
from .vector import Transform, Vector2

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .preview import GraphicsBuilder

logger = logging.getLogger(__name__)

_DEFAULT_ORIENTATION = Vector2(1.0, 0.0)


class Component(LocatedPresence):
    """A component that can be rotated, flipped and scaled.

    The orientation is either given up front or resolved during the solve by
    the first wire that constrains one of its oriented pins. The lifecycle of
    the pins is driven by the component.
    """

    def __init__(
        self,
        name: str,
        orientation: Optional[Vector2] = None,
        *,
        flipped: bool = False,
        scale: float = 1.0,
    ) -> None:
        super().__init__(name)
        if orientation is not None and orientation.is_zero():
            raise ValueError(f"component {name} needs a non-zero orientation")
        if scale <= 0.0:
            raise ValueError(f"component {name} needs a positive scale")
        self._fixed_orientation = orientation.normalized() if orientation is not None else None
        self._resolved_orientation: Optional[Vector2] = None
        self.flipped = flipped
        self.scale = scale
        self.pins = PinCollection(self)

    def add_pin(self, pin: Pin) -> Pin:
        return self.pins.add(pin)

    @property
    def orientation(self) -> Vector2:
        return self._fixed_orientation or self._resolved_orientation or _DEFAULT_ORIENTATION

    @property
    def has_fixed_orientation(self) -> bool:
        return self._fixed_orientation is not None or self._resolved_orientation is not None

    @property
    def transform(self) -> Transform:
        return Transform.from_orientation(self.orientation, flipped=self.flipped, scale=self.scale)

    def transform_offset(self, local: Vector2) -> Vector2:
        return self.transform.apply(local)

    def transform_normal(self, local: Vector2) -> Vector2:
        return self.transform.apply_normal(local)

    def constrain_orientation(
        self,
        local: Vector2,
        desired: Vector2,
        diagnostics: Optional[DiagnosticHandler] = None,
        source: Optional[str] = None,
    ) -> bool:
        """Rotate the component so that ``local`` points along ``desired``.

        Only the first call of a solve picks the rotation; later calls must
        agree with it.
        """

        desired = desired.normalized()
        if self.has_fixed_orientation:
            if self.transform_normal(local).dot(desired) >= ORIENTATION_TOLERANCE:
                return True
            post(diagnostics, ErrorCodes.COULD_NOT_CONSTRAIN_ORIENTATION, source or self.name)
            return False

        # a flip mirrors the local frame before rotating
        local_angle = math.atan2(-local.y if self.flipped else local.y, local.x)
        angle = math.atan2(desired.y, desired.x) - local_angle
        self._resolved_orientation = Vector2(math.cos(angle), math.sin(angle))
        logger.debug("Resolved orientation of %s to %s", self.name, self._resolved_orientation)
        return True

    def reset(self) -> None:
        super().reset()
        self._resolved_orientation = None
        for pin in self.pins:
            pin.reset()

    def discover_node_relationships(self, context: NodeContext) -> None:
        super().discover_node_relationships(context)
        for pin in self.pins:
            pin.discover_node_relationships(context)

    def register(self, context: CircuitSolverContext) -> None:
        for pin in self.pins:
            pin.register(context)

    def update(self, context: UpdateContext) -> None:
        super().update(context)
        for pin in self.pins:
            pin.update(context)

    def render(self, builder: "GraphicsBuilder") -> None:
        builder.marker(self.location, self.name)
        for pin in self.pins:
            pin.render(builder)


class Point(Component):
    """A single point with one pin, ``p``, on top of it."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.add_pin(FixedPin("p", self))

    def render(self, builder: "GraphicsBuilder") -> None:
        builder.marker(self.location, self.name)


_SIDES = {
    "n": Vector2(0.0, -1.0),
    "e": Vector2(1.0, 0.0),
    "s": Vector2(0.0, 1.0),
    "w": Vector2(-1.0, 0.0),
}


class _BlackBoxPins(PinCollection):
    """Pins of a black box, created on first use."""

    def get(self, name: str) -> Optional[Pin]:
        if not name:
            return None
        pin = super().get(name)
        if pin is None:
            pin = self.add(LoosePin(name, self.owner, _SIDES.get(name[0].lower())))
        return pin

    def __contains__(self, name: str) -> bool:
        return bool(name)


class BlackBox(Component):
    """A rectangular box whose pins are created on demand.

    The first letter of a pin name (``n``, ``e``, ``s`` or ``w``) selects the
    side of the box; other pins take the side their connection points them to
    and default to the west side. Pins on one side are spread out by chains of
    minimum offsets running from the top left corner to the opposite edge.
    """

    MINIMUM_WEIGHT = 100.0

    def __init__(
        self,
        name: str,
        *,
        min_space_x: float = 20.0,
        min_space_y: float = 10.0,
        min_edge_x: float = 10.0,
        min_edge_y: float = 10.0,
        min_width: float = 30.0,
        min_height: float = 10.0,
    ) -> None:
        super().__init__(name)
        self.pins = _BlackBoxPins(self)
        self.right = f"{name}.right"
        self.bottom = f"{name}.bottom"
        self.min_space_x = min_space_x
        self.min_space_y = min_space_y
        self.min_edge_x = min_edge_x
        self.min_edge_y = min_edge_y
        self.min_width = min_width
        self.min_height = min_height
        self.end_location = Vector2()

    def _sides(self) -> Dict[str, List[Pin]]:
        sides: Dict[str, List[Pin]] = {side: [] for side in _SIDES}
        for pin in self.pins:
            orientation = pin.orientation or _SIDES["w"]
            if abs(orientation.x) >= abs(orientation.y):
                sides["e" if orientation.x > 0 else "w"].append(pin)
            else:
                sides["s" if orientation.y > 0 else "n"].append(pin)
        return sides

    def reset(self) -> None:
        super().reset()
        self.end_location = Vector2()

    def discover_node_relationships(self, context: NodeContext) -> None:
        super().discover_node_relationships(context)
        sides = self._sides()
        if context.mode is NodeRelationMode.SHORTS:
            for pin in sides["n"]:
                context.shorts.group(self.y, pin.y)
            for pin in sides["s"]:
                context.shorts.group(self.bottom, pin.y)
            for pin in sides["w"]:
                context.shorts.group(self.x, pin.x)
            for pin in sides["e"]:
                context.shorts.group(self.right, pin.x)
        elif context.mode is NodeRelationMode.LINKS:
            context.order(self.x, self.right)
            context.order(self.y, self.bottom)
            for side in ("w", "e"):
                for pin in sides[side]:
                    context.order(self.y, pin.y)
                    context.order(pin.y, self.bottom)
            for side in ("n", "s"):
                for pin in sides[side]:
                    context.order(self.x, pin.x)
                    context.order(pin.x, self.right)
        elif context.mode is NodeRelationMode.GROUPS:
            context.pair(self.right, self.bottom)

    def _chain(self, context: CircuitSolverContext, tag: str, start: str, end: str, nodes: List[str], spacing: float, edge: float) -> None:
        previous = start
        for index, node in enumerate(nodes):
            minimum = edge if index == 0 else spacing
            add_minimum(context, f"{self.name}.{tag}.{index}", previous, node, minimum, self.MINIMUM_WEIGHT)
            previous = node
        if nodes:
            add_minimum(context, f"{self.name}.{tag}.m", previous, end, edge, self.MINIMUM_WEIGHT)

    def register(self, context: CircuitSolverContext) -> None:
        sides = self._sides()
        self._chain(context, "l", self.y, self.bottom, [pin.y for pin in sides["w"]], self.min_space_y, self.min_edge_y)
        self._chain(context, "r", self.y, self.bottom, [pin.y for pin in sides["e"]], self.min_space_y, self.min_edge_y)
        self._chain(context, "t", self.x, self.right, [pin.x for pin in sides["n"]], self.min_space_x, self.min_edge_x)
        self._chain(context, "b", self.x, self.right, [pin.x for pin in sides["s"]], self.min_space_x, self.min_edge_x)
        add_minimum(context, f"{self.name}.minw", self.x, self.right, self.min_width, self.MINIMUM_WEIGHT)
        add_minimum(context, f"{self.name}.minh", self.y, self.bottom, self.min_height, self.MINIMUM_WEIGHT)

    def update(self, context: UpdateContext) -> None:
        super().update(context)
        self.end_location = context.get_location(self.right, self.bottom, self.name)

    @property
    def size(self) -> Vector2:
        return self.end_location - self.location

    def render(self, builder: "GraphicsBuilder") -> None:
        builder.rectangle(self.location, self.end_location, self.name)
        for pin in self.pins:
            pin.render(builder)


__all__ = ["BlackBox", "Component", "Point"]
