"""Base classes for everything that takes part in a layout solve."""

from __future__ import annotations

from typing import Optional, TYPE_CHECKING

from .diagnostics import ErrorCodes, post
from .nodes import NodeContext, NodeRelationMode
from .vector import Vector2

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .context import CircuitSolverContext, UpdateContext
    from .diagnostics import DiagnosticHandler
    from .preview import GraphicsBuilder

ORIENTATION_TOLERANCE = 0.999


class CircuitPresence:
    """Something that owns coordinate nodes and contributes to the solve.

    A presence goes through the same lifecycle on every solve: ``reset``, then
    ``discover_node_relationships`` once per :class:`NodeRelationMode`, then
    ``register`` and finally ``update`` with the solved values.
    """

    def __init__(self, name: str) -> None:
        if not name or not name.strip():
            raise ValueError("presence name cannot be empty")
        self.name = name

    def reset(self) -> None:
        pass

    def discover_node_relationships(self, context: NodeContext) -> None:
        pass

    def register(self, context: "CircuitSolverContext") -> None:
        pass

    def update(self, context: "UpdateContext") -> None:
        pass

    def render(self, builder: "GraphicsBuilder") -> None:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class LocatedPresence(CircuitPresence):
    """A presence with one XY location."""

    def __init__(self, name: str, x: Optional[str] = None, y: Optional[str] = None) -> None:
        super().__init__(name)
        self.x = x or f"{name}.x"
        self.y = y or f"{name}.y"
        self.location = Vector2()

    def transform_offset(self, local: Vector2) -> Vector2:
        return local

    def transform_normal(self, local: Vector2) -> Vector2:
        return local if local.is_zero() else local.normalized()

    def constrain_orientation(
        self,
        local: Vector2,
        desired: Vector2,
        diagnostics: Optional["DiagnosticHandler"] = None,
        source: Optional[str] = None,
    ) -> bool:
        """Check that ``local`` maps onto ``desired``; report ORI001 otherwise."""

        if self.transform_normal(local).dot(desired.normalized()) >= ORIENTATION_TOLERANCE:
            return True
        post(diagnostics, ErrorCodes.COULD_NOT_CONSTRAIN_ORIENTATION, source or self.name)
        return False

    def reset(self) -> None:
        self.location = Vector2()

    def discover_node_relationships(self, context: NodeContext) -> None:
        if context.mode is NodeRelationMode.GROUPS:
            context.pair(self.x, self.y)

    def update(self, context: "UpdateContext") -> None:
        self.location = context.get_location(self.x, self.y, str(self))

    def __str__(self) -> str:
        return self.name


__all__ = ["CircuitPresence", "LocatedPresence"]
