"""Free-standing constraints between two coordinate nodes."""

from __future__ import annotations

from .context import CircuitSolverContext, add_minimum, add_offset
from .nodes import NodeContext, NodeRelationMode
from .presence import CircuitPresence
from .vector import is_zero


class OffsetConstraint(CircuitPresence):
    """``high = low + offset``; a zero offset makes the nodes coincide."""

    def __init__(self, name: str, low: str, high: str, offset: float = 0.0) -> None:
        super().__init__(name)
        self.low = low
        self.high = high
        self.offset = offset

    def discover_node_relationships(self, context: NodeContext) -> None:
        if context.mode is NodeRelationMode.SHORTS and is_zero(self.offset):
            context.shorts.group(self.low, self.high)
        elif context.mode is NodeRelationMode.LINKS and not is_zero(self.offset):
            if self.offset > 0:
                context.order(self.low, self.high)
            else:
                context.order(self.high, self.low)

    def register(self, context: CircuitSolverContext) -> None:
        add_offset(context, self.name, self.low, self.high, self.offset)


class MinimumConstraint(CircuitPresence):
    """``high - low >= minimum``."""

    def __init__(self, name: str, low: str, high: str, minimum: float = 0.0, weight: float = 1.0) -> None:
        super().__init__(name)
        self.low = low
        self.high = high
        self.minimum = minimum
        self.weight = weight

    def discover_node_relationships(self, context: NodeContext) -> None:
        if context.mode is NodeRelationMode.LINKS:
            context.order(self.low, self.high)

    def register(self, context: CircuitSolverContext) -> None:
        add_minimum(context, self.name, self.low, self.high, self.minimum, self.weight)


__all__ = ["MinimumConstraint", "OffsetConstraint"]
