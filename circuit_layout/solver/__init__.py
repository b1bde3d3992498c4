"""Resistive-network solver used to place coordinate nodes."""

from __future__ import annotations

import logging

from .config import get_solver_options, set_solver_options
from .dc import assemble, find_floating_nodes, solve_network, structure_matrix, validate_network
from .model import (
    Branch,
    DcResult,
    FloatingNodeViolation,
    GroundingBranch,
    NetworkValidationError,
    OffsetBranch,
    RectifyingBranch,
    SolverError,
    SolverOptions,
)
from .network import Network
from .state import ReadOnlyStateError, SolvedValues

logger = logging.getLogger(__name__)

__all__ = [
    "Branch",
    "DcResult",
    "FloatingNodeViolation",
    "GroundingBranch",
    "Network",
    "NetworkValidationError",
    "OffsetBranch",
    "ReadOnlyStateError",
    "RectifyingBranch",
    "SolvedValues",
    "SolverError",
    "SolverOptions",
    "assemble",
    "find_floating_nodes",
    "get_solver_options",
    "set_solver_options",
    "solve_network",
    "structure_matrix",
    "validate_network",
]
