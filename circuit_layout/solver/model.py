"""Core data structures for the layout network solver."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence, Tuple

import numpy as np

NodeName = str

GROUND = "0"


@dataclass
class SolverOptions:
    """Numeric constants of the network solver."""

    offset_resistance: float = 1e-3
    minimum_on_conductance: float = 1e4
    minimum_off_conductance: float = 1e-3
    minimum_threshold: float = 0.01
    minimum_release: float = 1e-6
    max_iterations: int = 200


class SolverError(RuntimeError):
    """Raised for solver failures that cannot be classified or repaired."""


@dataclass(frozen=True)
class FloatingNodeViolation:
    """A node (and the nodes connected to it) without any path to ground."""

    node: NodeName
    component: Tuple[NodeName, ...]

    def __str__(self) -> str:  # pragma: no cover - trivial string formatting
        return f"floating node '{self.node}' ({len(self.component)} node(s) unconnected to ground)"


class NetworkValidationError(RuntimeError):
    """Raised when the network is structurally unsound."""

    def __init__(self, violations: Sequence[object]):
        self.violations = list(violations)
        details = "; ".join(str(violation) for violation in self.violations)
        super().__init__(f"network validation failed: {details}")


class Branch(ABC):
    """A weighted linear relation between node potentials.

    A branch pulls ``sum(c_i * v_i)`` towards ``target`` with a conductance;
    for two nodes this is the classic resistor stamp with an offset source.
    """

    name: str

    @abstractmethod
    def coefficients(self) -> Mapping[NodeName, float]:
        """Return the weight of every node in the controlled quantity."""

    @abstractmethod
    def conductance(self) -> float:
        """Return the stiffness of the branch."""

    @abstractmethod
    def target(self) -> float:
        """Return the value the controlled quantity is pulled towards."""

    @property
    def nodes(self) -> Tuple[NodeName, ...]:
        return tuple(self.coefficients())

    @property
    def is_nonlinear(self) -> bool:
        return False

    @property
    def is_grounding(self) -> bool:
        return False

    def connections(self) -> List[Tuple[NodeName, NodeName]]:
        """Node pairs tied together by the branch; a lone node is tied to ground."""

        nodes = list(self.coefficients())
        if len(nodes) == 1:
            return [(nodes[0], GROUND)]
        return list(zip(nodes, nodes[1:]))


@dataclass
class OffsetBranch(Branch):
    """Soft equality ``high = low + offset`` through a small series resistance."""

    name: str
    low: NodeName
    high: NodeName
    offset: float
    resistance: float

    def coefficients(self) -> Mapping[NodeName, float]:
        return {self.low: -1.0, self.high: 1.0}

    def conductance(self) -> float:
        return 1.0 / self.resistance

    def target(self) -> float:
        return self.offset


@dataclass
class GroundingBranch(Branch):
    """Holds ``node`` at ground potential.

    The node is eliminated from the system instead of being stamped, so the
    anchor does not degrade the conditioning of the matrix.
    """

    name: str
    node: NodeName

    def coefficients(self) -> Mapping[NodeName, float]:
        return {self.node: 1.0}

    def conductance(self) -> float:
        return 1.0

    def target(self) -> float:
        return 0.0

    @property
    def is_grounding(self) -> bool:
        return True


@dataclass
class RectifyingBranch(Branch):
    """One-sided branch enforcing ``sum(c_i * v_i) >= minimum``.

    While engaged the branch pins the controlled quantity to ``minimum`` with
    ``on_conductance``. It is released as soon as the rest of the network
    pushes the quantity beyond ``minimum + release``, i.e. when the branch
    current would reverse. A released branch only applies ``off_conductance``
    towards ``off_target`` and engages again below ``minimum - threshold``.

    ``control`` names nodes that only sense the controlled quantity; they are
    not tied to the other nodes of the branch.
    """

    name: str
    terms: Dict[NodeName, float]
    minimum: float
    on_conductance: float
    off_conductance: float
    off_target: float = 0.0
    threshold: float = 0.01
    release: float = 1e-6
    control: Tuple[NodeName, ...] = ()
    engaged: bool = field(default=True)

    def coefficients(self) -> Mapping[NodeName, float]:
        return self.terms

    def conductance(self) -> float:
        return self.on_conductance if self.engaged else self.off_conductance

    def target(self) -> float:
        return self.minimum if self.engaged else self.off_target

    @property
    def is_nonlinear(self) -> bool:
        return True

    def connections(self) -> List[Tuple[NodeName, NodeName]]:
        controls = {node.lower() for node in self.control}
        nodes = [node for node in self.terms if node.lower() not in controls]
        if len(nodes) == 1:
            return [(nodes[0], GROUND)]
        return list(zip(nodes, nodes[1:]))

    def controlled_value(self, values: Mapping[NodeName, float]) -> float:
        return sum(coefficient * values[node] for node, coefficient in self.terms.items())

    def update(self, value: float) -> bool:
        """Switch state from the controlled ``value``; return ``True`` on change."""

        previous = self.engaged
        if self.engaged:
            if value > self.minimum + self.release:
                self.engaged = False
        elif value < self.minimum - self.threshold:
            self.engaged = True
        return previous != self.engaged


@dataclass
class DcResult:
    solution: np.ndarray
    iterations: int
    nonlinear: bool
    released: List[str] = field(default_factory=list)


__all__ = [
    "Branch",
    "DcResult",
    "FloatingNodeViolation",
    "GROUND",
    "GroundingBranch",
    "NetworkValidationError",
    "NodeName",
    "OffsetBranch",
    "RectifyingBranch",
    "SolverError",
    "SolverOptions",
]
