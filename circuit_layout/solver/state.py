"""Read-only view of a solved layout network."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Dict, Iterator, Sequence

import numpy as np

from ..nodes import GROUND_ALIASES, node_key
from .model import NodeName


class ReadOnlyStateError(TypeError):
    """Raised when a mutating operation is attempted on solved values."""


class SolvedValues(Mapping):
    """Name to value lookup over the raw ``N+1`` solution vector.

    Index 0 is ground and always reads as ``0.0``; indices ``1..N`` follow the
    registration order of ``names``.
    """

    def __init__(self, names: Sequence[NodeName], solution: np.ndarray) -> None:
        solution = np.asarray(solution, dtype=float)
        if solution.shape != (len(names) + 1,):
            raise ValueError(
                f"solution has shape {solution.shape}, expected ({len(names) + 1},)"
            )
        self._names = list(names)
        self._index: Dict[str, int] = {node_key(name): idx for idx, name in enumerate(self._names, start=1)}
        self._solution = solution.copy()
        self._solution[0] = 0.0
        self._solution.setflags(write=False)

    @classmethod
    def empty(cls) -> "SolvedValues":
        return cls([], np.zeros(1, dtype=float))

    def index_of(self, name: NodeName) -> int:
        key = node_key(name)
        if key in GROUND_ALIASES:
            return 0
        try:
            return self._index[key]
        except KeyError:
            raise KeyError(name) from None

    def __getitem__(self, name: NodeName) -> float:
        return float(self._solution[self.index_of(name)])

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        key = node_key(name)
        return key in GROUND_ALIASES or key in self._index

    def __iter__(self) -> Iterator[NodeName]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    @property
    def solution(self) -> np.ndarray:
        return self._solution

    def __setitem__(self, name: NodeName, value: float) -> None:
        raise ReadOnlyStateError("solved values are read-only")

    def __delitem__(self, name: NodeName) -> None:
        raise ReadOnlyStateError("solved values are read-only")

    def add_variable(self, name: NodeName, value: object = None) -> None:
        raise ReadOnlyStateError("cannot add variables to solved values")

    def create_private_variable(self, name: NodeName, unit: object = None) -> None:
        raise ReadOnlyStateError("cannot create private variables in solved values")

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"SolvedValues(size={len(self._names)})"


__all__ = ["ReadOnlyStateError", "SolvedValues"]
