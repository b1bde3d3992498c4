"""Relationship discovery between coordinate nodes.

Every X or Y coordinate of a pin or located component is a named node. Before
any numeric system is built, presences declare which nodes coincide exactly
(:class:`NodeGrouper`), which nodes bound others from below
(:class:`NodeExtremeFinder`) and which nodes form an XY pair. Node names are
compared case-insensitively; a group keeps the spelling of the name that
created it as its representative.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Set, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .diagnostics import DiagnosticHandler
    from .presence import CircuitPresence


GROUND_ALIASES = ("0", "gnd", "gnd!")


def node_key(name: str) -> str:
    return name.lower()


def is_ground(name: str) -> bool:
    return node_key(name) in GROUND_ALIASES


class _NodeGroup:
    __slots__ = ("representative", "nodes")

    def __init__(self, representative: str) -> None:
        self.representative = representative
        self.nodes: Set[str] = {node_key(representative)}

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"_NodeGroup({self.representative!r}, size={len(self.nodes)})"


class NodeGrouper:
    """Disjoint sets of coordinate nodes that are exactly coincident.

    Groups keep an explicit membership set, so merging two groups costs the
    size of the smaller one. The ground group is seeded with the aliases
    ``"0"``, ``"gnd"`` and ``"gnd!"`` and always absorbs the other side of a
    merge, so its representative is always ``"0"``.
    """

    def __init__(self) -> None:
        self._groups: Dict[str, _NodeGroup] = {}
        self._ground = _NodeGroup(GROUND_ALIASES[0])
        for alias in GROUND_ALIASES:
            self._ground.nodes.add(alias)
            self._groups[alias] = self._ground

    def __getitem__(self, name: str) -> str:
        if name is None:
            raise TypeError("node name cannot be None")
        group = self._groups.get(node_key(name))
        if group is None:
            return name
        return group.representative

    def __contains__(self, name: str) -> bool:
        return node_key(name) in self._groups

    @property
    def ground(self) -> str:
        return self._ground.representative

    @property
    def representatives(self) -> List[str]:
        seen: Set[int] = set()
        result: List[str] = []
        for group in self._groups.values():
            if id(group) not in seen:
                seen.add(id(group))
                result.append(group.representative)
        return result

    def group(self, a: str, b: str) -> None:
        """Record that nodes ``a`` and ``b`` are coincident."""

        ka, kb = node_key(a), node_key(b)
        ga = self._groups.get(ka)
        gb = self._groups.get(kb)
        if ga is not None and gb is not None:
            if ga is gb:
                return
            if gb is self._ground or (ga is not self._ground and len(ga.nodes) < len(gb.nodes)):
                self._absorb(gb, ga)
            else:
                self._absorb(ga, gb)
        elif ga is not None:
            ga.nodes.add(kb)
            self._groups[kb] = ga
        elif gb is not None:
            gb.nodes.add(ka)
            self._groups[ka] = gb
        elif ka != kb:
            group = _NodeGroup(a)
            group.nodes.add(kb)
            self._groups[ka] = group
            self._groups[kb] = group

    def _absorb(self, target: _NodeGroup, source: _NodeGroup) -> None:
        for key in source.nodes:
            self._groups[key] = target
        target.nodes.update(source.nodes)

    def are_grouped(self, a: str, b: str) -> bool:
        return node_key(self[a]) == node_key(self[b])

    def is_ground(self, name: str) -> bool:
        return self._groups.get(node_key(name)) is self._ground

    def members(self, name: str) -> Set[str]:
        """Return the (lower-cased) names grouped with ``name``."""

        group = self._groups.get(node_key(name))
        if group is None:
            return {node_key(name)}
        return set(group.nodes)

    def classes(self) -> List[frozenset]:
        """Return every equivalence class as a frozen set of lower-cased names."""

        seen: Set[int] = set()
        result: List[frozenset] = []
        for group in self._groups.values():
            if id(group) not in seen:
                seen.add(id(group))
                result.append(frozenset(group.nodes))
        return result

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"NodeGrouper(groups={len(self.representatives)}, nodes={len(self._groups)})"


class NodeExtremeFinder:
    """Tracks which nodes are never dominated by another node."""

    def __init__(self) -> None:
        self._extremes: Dict[str, str] = {}
        self._non_extremes: Set[str] = set()

    @property
    def extremes(self) -> List[str]:
        return list(self._extremes.values())

    def order(self, extreme: str, non_extreme: str) -> None:
        """Record that ``extreme`` dominates ``non_extreme``."""

        key = node_key(non_extreme)
        self._extremes.pop(key, None)
        self._non_extremes.add(key)

        key = node_key(extreme)
        if key not in self._non_extremes and key not in self._extremes:
            self._extremes[key] = extreme

    def is_extreme(self, name: str) -> bool:
        return node_key(name) in self._extremes

    def clear(self) -> None:
        self._extremes.clear()
        self._non_extremes.clear()

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        total = len(self._extremes) + len(self._non_extremes)
        return f"NodeExtremeFinder({len(self._extremes)}/{total})"


@dataclass(frozen=True)
class XYNode:
    node_x: str
    node_y: str

    def __str__(self) -> str:  # pragma: no cover - trivial string formatting
        return f"({self.node_x}; {self.node_y})"


class NodeRelationMode(enum.Enum):
    NONE = "none"
    SHORTS = "shorts"
    LINKS = "links"
    GROUPS = "groups"


class NodeContext:
    """Shared state handed to every presence during relationship discovery.

    ``NONE`` is the preparatory pass in which presences resolve references and
    orientations. ``SHORTS`` collects exact coincidences, ``LINKS`` records
    orderings between representatives and ``GROUPS`` collects XY pairs.
    """

    def __init__(
        self,
        find: Optional[Callable[[str], Optional["CircuitPresence"]]] = None,
        diagnostics: Optional["DiagnosticHandler"] = None,
    ) -> None:
        self.shorts = NodeGrouper()
        self.extremes = NodeExtremeFinder()
        self.mode = NodeRelationMode.NONE
        self.diagnostics = diagnostics
        self._xy: Dict[XYNode, None] = {}
        self._find = find

    @property
    def xy_pairs(self) -> List[XYNode]:
        return list(self._xy)

    def pair(self, node_x: str, node_y: str) -> None:
        self._xy.setdefault(XYNode(node_x, node_y), None)

    def find(self, name: str) -> Optional["CircuitPresence"]:
        if self._find is None:
            return None
        return self._find(name)

    def order(self, lowest: str, highest: str) -> None:
        """Order the representatives of ``lowest`` and ``highest``."""

        low = self.shorts[lowest]
        high = self.shorts[highest]
        if node_key(low) != node_key(high):
            self.extremes.order(low, high)

    def iter_nodes(self) -> Iterator[str]:
        for xy in self._xy:
            yield xy.node_x
            yield xy.node_y


__all__ = [
    "GROUND_ALIASES",
    "NodeContext",
    "NodeExtremeFinder",
    "NodeGrouper",
    "NodeRelationMode",
    "XYNode",
    "is_ground",
    "node_key",
]
