"""Direct and piecewise-linear DC solve of a layout network."""

from __future__ import annotations

import logging
import warnings
from typing import Dict, List, Optional, Tuple

import numpy as np
from scipy import sparse
from scipy.sparse.csgraph import connected_components
from scipy.sparse.linalg import MatrixRankWarning, spsolve

from ..logging_utils import apply_debug_logging
from .model import DcResult, FloatingNodeViolation, NetworkValidationError, RectifyingBranch, SolverError, SolverOptions
from .network import Network

logger = logging.getLogger(__name__)


def _branch_indices(network: Network, branch) -> List[Tuple[int, float]]:
    terms: Dict[int, float] = {}
    for node, coefficient in branch.coefficients().items():
        index = network.index_of(node)
        if index is None:  # pragma: no cover - branches register their nodes
            index = network.add_node(node)
        terms[index] = terms.get(index, 0.0) + coefficient
    return list(terms.items())


def structure_matrix(network: Network) -> sparse.csr_matrix:
    """Return the connectivity of the full (ground included) system.

    Only the node pairs a branch ties together count; nodes that merely sense
    a branch (slope control terms) stay unconnected.
    """

    size = network.size + 1
    rows: List[int] = list(range(size))
    cols: List[int] = list(range(size))
    for branch in network:
        for a, b in branch.connections():
            i, j = network.index_of(a), network.index_of(b)
            rows += [i, j]
            cols += [j, i]
    data = np.ones(len(rows), dtype=float)
    return sparse.coo_matrix((data, (rows, cols)), shape=(size, size)).tocsr()


def find_floating_nodes(network: Network) -> List[FloatingNodeViolation]:
    """Find every group of nodes that has no structural path to ground."""

    if network.size == 0:
        return []
    _, labels = connected_components(structure_matrix(network), directed=False)
    ground_label = labels[0]
    components: Dict[int, List[str]] = {}
    for index in range(1, network.size + 1):
        label = int(labels[index])
        if label != ground_label:
            components.setdefault(label, []).append(network.name_of(index))
    return [FloatingNodeViolation(node=names[0], component=tuple(names)) for names in components.values()]


def validate_network(network: Network) -> None:
    violations = find_floating_nodes(network)
    if violations:
        raise NetworkValidationError(violations)


def assemble(network: Network) -> Tuple[sparse.csc_matrix, np.ndarray]:
    """Stamp every branch into the reduced (ground eliminated) system.

    Nodes held by a :class:`GroundingBranch` are eliminated like ground: their
    row becomes an identity row with a zero right-hand side.
    """

    size = network.size + 1
    grounded = {
        index for branch in network if branch.is_grounding for index, _ in _branch_indices(network, branch)
    }
    grounded.discard(0)
    rows: List[int] = sorted(grounded)
    cols: List[int] = sorted(grounded)
    data: List[float] = [1.0] * len(grounded)
    rhs = np.zeros(size, dtype=float)
    for branch in network:
        g = branch.conductance()
        if g == 0.0 or branch.is_grounding:
            continue
        target = branch.target()
        terms = [(index, c) for index, c in _branch_indices(network, branch) if index not in grounded]
        for i, ci in terms:
            rhs[i] += g * target * ci
            for j, cj in terms:
                rows.append(i)
                cols.append(j)
                data.append(g * ci * cj)
    matrix = sparse.coo_matrix((data, (rows, cols)), shape=(size, size)).tocsc()
    return matrix[1:, 1:], rhs[1:]


def _solve_linear(matrix: sparse.csc_matrix, rhs: np.ndarray) -> np.ndarray:
    with warnings.catch_warnings():
        warnings.simplefilter("error", MatrixRankWarning)
        try:
            result = spsolve(matrix, rhs)
        except (MatrixRankWarning, RuntimeError) as exc:
            raise SolverError(f"layout network is singular: {exc}") from exc
    result = np.atleast_1d(np.asarray(result, dtype=float))
    if not np.all(np.isfinite(result)):
        raise SolverError("layout network solve produced non-finite values")
    return result


def _full_vector(reduced: np.ndarray) -> np.ndarray:
    full = np.zeros(reduced.size + 1, dtype=float)
    full[1:] = reduced
    return full


def solve_network(network: Network, options: Optional[SolverOptions] = None) -> DcResult:
    """Solve ``network`` and return the ``N+1`` solution vector.

    Without rectifying branches this is a single direct solve. Otherwise every
    rectifying branch starts engaged and the system is re-solved until no
    branch switches state.
    """

    options = options or SolverOptions()
    validate_network(network)
    if network.size == 0:
        return DcResult(solution=np.zeros(1, dtype=float), iterations=0, nonlinear=False)

    rectifiers = [branch for branch in network if isinstance(branch, RectifyingBranch)]
    if not rectifiers:
        matrix, rhs = assemble(network)
        solution = _full_vector(_solve_linear(matrix, rhs))
        logger.info("Solved linear layout network with %d unknowns", network.size)
        return DcResult(solution=solution, iterations=1, nonlinear=False)

    for branch in rectifiers:
        branch.engaged = True
    terms = {id(branch): _branch_indices(network, branch) for branch in rectifiers}

    for iteration in range(1, max(1, int(options.max_iterations)) + 1):
        matrix, rhs = assemble(network)
        solution = _full_vector(_solve_linear(matrix, rhs))
        switched = 0
        for branch in rectifiers:
            value = sum(coefficient * solution[index] for index, coefficient in terms[id(branch)])
            if branch.update(value):
                switched += 1
        logger.debug("Iteration %d switched %d rectifying branch(es)", iteration, switched)
        if switched == 0:
            released = [branch.name for branch in rectifiers if not branch.engaged]
            logger.info(
                "Solved layout network with %d unknowns and %d rectifying branches in %d iteration(s)",
                network.size,
                len(rectifiers),
                iteration,
            )
            return DcResult(solution=solution, iterations=iteration, nonlinear=True, released=released)

    raise SolverError(f"layout network did not converge within {options.max_iterations} iterations")


apply_debug_logging(globals(), logger=logger)


__all__ = [
    "assemble",
    "find_floating_nodes",
    "solve_network",
    "structure_matrix",
    "validate_network",
]
