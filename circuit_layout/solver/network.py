"""The resistive network that encodes a layout as a DC problem."""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional

from ..nodes import GROUND_ALIASES, node_key
from .model import Branch, NodeName

logger = logging.getLogger(__name__)


class Network:
    """Nodes and branches of the layout network.

    Index 0 is reserved for ground; the other nodes are numbered ``1..N`` in
    the order they were first referenced.
    """

    def __init__(self) -> None:
        self._index: Dict[str, int] = {alias: 0 for alias in GROUND_ALIASES}
        self._names: List[NodeName] = []
        self._branches: Dict[str, Branch] = {}

    def add_node(self, name: NodeName) -> int:
        key = node_key(name)
        index = self._index.get(key)
        if index is None:
            self._names.append(name)
            index = len(self._names)
            self._index[key] = index
        return index

    def index_of(self, name: NodeName) -> Optional[int]:
        return self._index.get(node_key(name))

    def name_of(self, index: int) -> NodeName:
        if index == 0:
            return GROUND_ALIASES[0]
        return self._names[index - 1]

    def add(self, branch: Branch) -> Branch:
        key = branch.name.lower()
        if key in self._branches:
            raise ValueError(f"a branch named '{branch.name}' already exists")
        for node in branch.nodes:
            self.add_node(node)
        self._branches[key] = branch
        logger.debug("Added branch %s over %s", branch.name, ", ".join(branch.nodes))
        return branch

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._branches

    def __len__(self) -> int:
        return len(self._branches)

    def __iter__(self) -> Iterator[Branch]:
        return iter(self._branches.values())

    @property
    def branches(self) -> List[Branch]:
        return list(self._branches.values())

    @property
    def nodes(self) -> List[NodeName]:
        return list(self._names)

    @property
    def size(self) -> int:
        """Number of unknowns, ground excluded."""

        return len(self._names)

    @property
    def has_nonlinear(self) -> bool:
        return any(branch.is_nonlinear for branch in self._branches.values())

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"Network(nodes={self.size}, branches={len(self)})"


__all__ = ["Network"]
