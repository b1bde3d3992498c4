"""The graphical circuit: owner of all presences and driver of the solve."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, TYPE_CHECKING

from .context import CircuitSolverContext, UpdateContext
from .diagnostics import DiagnosticHandler, ErrorCodes, LoggingDiagnosticHandler
from .nodes import NodeContext, NodeRelationMode, node_key
from .presence import CircuitPresence
from .solver import (
    DcResult,
    FloatingNodeViolation,
    GroundingBranch,
    NetworkValidationError,
    SolvedValues,
    SolverError,
    SolverOptions,
    get_solver_options,
    solve_network,
)

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .preview import GraphicsBuilder

logger = logging.getLogger(__name__)


class CircuitState(enum.Enum):
    UNSOLVED = "unsolved"
    RELATIONSHIPS_DISCOVERED = "relationships_discovered"
    REGISTERED = "registered"
    SYSTEM_SOLVED = "system_solved"
    VALUES_DISTRIBUTED = "values_distributed"
    SOLVED = "solved"


@dataclass(frozen=True)
class Bounds:
    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top


@dataclass
class SolveReport:
    """Statistics of the last solve."""

    presences: int = 0
    nodes: int = 0
    branches: int = 0
    iterations: int = 0
    floating_fixes: List[str] = field(default_factory=list)
    released: List[str] = field(default_factory=list)


class GraphicalCircuit:
    """An insertion-ordered collection of presences that can be laid out.

    Presence names are case-insensitive. Adding or removing a presence marks
    the circuit as unsolved; :meth:`solve` and :meth:`render` do no work while
    the circuit stays solved.
    """

    def __init__(self, options: Optional[SolverOptions] = None) -> None:
        self._presences: Dict[str, CircuitPresence] = {}
        self._state = CircuitState.UNSOLVED
        self.options = options
        self.metadata: Dict[str, str] = {}
        self.last_report: Optional[SolveReport] = None
        self.solve_count = 0
        self._values: Optional[SolvedValues] = None
        self._bounds: Optional[Bounds] = None
        self.node_context: Optional[NodeContext] = None

    # ------------------------------------------------------------------
    # Structure

    def add(self, *presences: CircuitPresence) -> None:
        for presence in presences:
            key = node_key(presence.name)
            if key in self._presences:
                raise ValueError(f"a presence named '{presence.name}' already exists")
            self._presences[key] = presence
            self._invalidate()

    def remove(self, name: str) -> bool:
        presence = self._presences.pop(node_key(name), None)
        if presence is None:
            return False
        self._invalidate()
        return True

    def clear(self) -> None:
        self._presences.clear()
        self._invalidate()

    def _invalidate(self) -> None:
        self._state = CircuitState.UNSOLVED
        self._values = None
        self._bounds = None

    def get(self, name: str) -> Optional[CircuitPresence]:
        return self._presences.get(node_key(name))

    def __getitem__(self, name: str) -> CircuitPresence:
        presence = self.get(name)
        if presence is None:
            raise KeyError(name)
        return presence

    def __contains__(self, name: str) -> bool:
        return node_key(name) in self._presences

    def __iter__(self) -> Iterator[CircuitPresence]:
        return iter(list(self._presences.values()))

    def __len__(self) -> int:
        return len(self._presences)

    # ------------------------------------------------------------------
    # State

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def solved(self) -> bool:
        return self._state is CircuitState.SOLVED

    @property
    def values(self) -> Optional[SolvedValues]:
        """Solved values of the network nodes, ``None`` for trivial or unsolved circuits."""

        return self._values

    @property
    def bounds(self) -> Optional[Bounds]:
        return self._bounds

    # ------------------------------------------------------------------
    # Solving

    def solve(self, diagnostics: Optional[DiagnosticHandler] = None, force: bool = False) -> bool:
        """Lay out the circuit.

        Modeling problems are reported to ``diagnostics`` and do not stop the
        solve. :class:`SolverError` and non-floating
        :class:`NetworkValidationError` failures propagate.
        """

        if self.solved and not force:
            logger.debug("Circuit already solved, skipping")
            return True
        if diagnostics is None:
            diagnostics = LoggingDiagnosticHandler(logger)

        self._invalidate()
        presences = list(self._presences.values())
        report = SolveReport(presences=len(presences))
        self.last_report = report
        self.solve_count += 1
        logger.info("Solving circuit with %d presence(s)", len(presences))

        for presence in presences:
            presence.reset()

        nodes = NodeContext(find=self.get, diagnostics=diagnostics)
        self.node_context = nodes
        for mode in NodeRelationMode:
            nodes.mode = mode
            for presence in presences:
                presence.discover_node_relationships(nodes)
        self._state = CircuitState.RELATIONSHIPS_DISCOVERED

        context = CircuitSolverContext(nodes, options=self.options or get_solver_options(), diagnostics=diagnostics)
        for presence in presences:
            presence.register(context)
        for name in nodes.iter_nodes():
            context.ensure_node(name)
        self._state = CircuitState.REGISTERED
        report.branches = len(context.network)
        report.nodes = context.network.size
        logger.info("Registered %d branch(es) over %d node(s)", report.branches, report.nodes)

        if len(context.network) == 0:
            diagnostics.post(ErrorCodes.NO_UNKNOWNS_TO_SOLVE)
            self._state = CircuitState.SOLVED
            return True

        result = self._solve_system(context, report)
        self._values = SolvedValues(context.network.nodes, result.solution)
        self._state = CircuitState.SYSTEM_SOLVED

        update = UpdateContext(self._values, nodes.shorts, diagnostics, context.wire_segments)
        for presence in presences:
            presence.update(update)
        self._bounds = self._compute_bounds(nodes, update)
        self._state = CircuitState.VALUES_DISTRIBUTED

        self._state = CircuitState.SOLVED
        return True

    def _solve_system(self, context: CircuitSolverContext, report: SolveReport) -> DcResult:
        """Solve the network, pulling floating nodes to ground one at a time."""

        network = context.network
        pulled: Dict[str, str] = {}
        fix_count = 0
        while True:
            try:
                result = solve_network(network, context.options)
                break
            except NetworkValidationError as exc:
                violation = next((v for v in exc.violations if isinstance(v, FloatingNodeViolation)), None)
                if violation is None:
                    raise
                node = self._floating_node_to_fix(violation, context.nodes)
                previous = fix_count
                if node_key(node) not in pulled:
                    pulled[node_key(node)] = node
                    network.add(GroundingBranch(f"ground({node})", node))
                    fix_count += 1
                    logger.debug("Pulled floating node %s to ground", node)
                if fix_count <= previous:
                    raise SolverError(f"could not fix floating node '{node}'") from exc

        if fix_count:
            logger.info("Fixed %d floating node(s)", fix_count)
        report.floating_fixes = list(pulled.values())
        report.iterations = result.iterations
        report.released = list(result.released)
        report.branches = len(network)
        return result

    @staticmethod
    def _floating_node_to_fix(violation: FloatingNodeViolation, nodes: NodeContext) -> str:
        """Pick the node of a floating island to hold at ground.

        Extremes of the island are preferred. Ties are broken by the smallest
        name in each node's group, which does not depend on presence order.
        """

        members = {node_key(name): name for name in violation.component}
        candidates = [members[node_key(e)] for e in nodes.extremes.extremes if node_key(e) in members]
        return min(candidates or violation.component, key=lambda name: min(nodes.shorts.members(name)))

    @staticmethod
    def _compute_bounds(nodes: NodeContext, update: UpdateContext) -> Optional[Bounds]:
        pairs = nodes.xy_pairs
        if not pairs:
            return None
        xs = [update.get_value(pair.node_x) for pair in pairs]
        ys = [update.get_value(pair.node_y) for pair in pairs]
        return Bounds(min(xs), min(ys), max(xs), max(ys))

    # ------------------------------------------------------------------
    # Rendering

    def render(self, builder: "GraphicsBuilder", diagnostics: Optional[DiagnosticHandler] = None) -> None:
        if not self.solved:
            self.solve(diagnostics)
        builder.begin(self.metadata, self._bounds)
        for presence in self._presences.values():
            presence.render(builder)
        builder.end()


__all__ = ["Bounds", "CircuitState", "GraphicalCircuit", "SolveReport"]
