"""Debug preview of a solved layout."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Protocol, Sequence, TYPE_CHECKING

from .vector import Vector2

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .circuit import Bounds

logger = logging.getLogger(__name__)


class GraphicsBuilder(Protocol):
    """What :meth:`GraphicalCircuit.render` draws with."""

    def begin(self, metadata: Mapping[str, str], bounds: Optional["Bounds"]) -> None: ...

    def marker(self, location: Vector2, label: str) -> None: ...

    def polyline(self, points: Sequence[Vector2], label: str) -> None: ...

    def rectangle(self, top_left: Vector2, bottom_right: Vector2, label: str) -> None: ...

    def jump(self, location: Vector2, radius: float) -> None: ...

    def end(self) -> None: ...


class MatplotlibBuilder:
    """Draws the layout on a matplotlib figure (y axis pointing down)."""

    def __init__(self, figsize=(6, 6), show_labels: bool = True) -> None:
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        self._plt = plt
        self.figure, self.axes = plt.subplots(figsize=figsize)
        self.show_labels = show_labels
        self.count = 0

    def begin(self, metadata: Mapping[str, str], bounds: Optional["Bounds"]) -> None:
        title = metadata.get("title") if metadata else None
        if title:
            self.axes.set_title(title)
        if bounds is not None:
            margin = max(bounds.width, bounds.height, 1.0) * 0.1
            self.axes.set_xlim(bounds.left - margin, bounds.right + margin)
            self.axes.set_ylim(bounds.bottom + margin, bounds.top - margin)

    def marker(self, location: Vector2, label: str) -> None:
        self.axes.plot([location.x], [location.y], "o", color="black", markersize=3)
        if self.show_labels:
            self.axes.annotate(label, (location.x, location.y), fontsize=6, xytext=(3, 3), textcoords="offset points")
        self.count += 1

    def polyline(self, points: Sequence[Vector2], label: str) -> None:
        self.axes.plot([p.x for p in points], [p.y for p in points], "-", color="tab:blue", linewidth=1)
        self.count += 1

    def rectangle(self, top_left: Vector2, bottom_right: Vector2, label: str) -> None:
        from matplotlib.patches import Rectangle

        size = bottom_right - top_left
        self.axes.add_patch(Rectangle((top_left.x, top_left.y), size.x, size.y, fill=False, edgecolor="black"))
        if self.show_labels:
            center = (top_left + bottom_right) * 0.5
            self.axes.text(center.x, center.y, label, ha="center", va="center", fontsize=7)
        self.count += 1

    def jump(self, location: Vector2, radius: float) -> None:
        from matplotlib.patches import Circle

        self.axes.add_patch(Circle((location.x, location.y), radius, fill=False, edgecolor="tab:red"))
        self.count += 1

    def end(self) -> None:
        self.axes.set_aspect("equal", adjustable="datalim")

    def save(self, path: Any) -> None:
        self.figure.savefig(path)
        logger.info("Saved layout preview to %s", path)

    def close(self) -> None:
        self._plt.close(self.figure)


__all__ = ["GraphicsBuilder", "MatplotlibBuilder"]
