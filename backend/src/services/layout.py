"""Force-directed layout for small neighbourhood graphs.

Explicit-Euler simulation run for a fixed number of iterations: pairwise
repulsion, spring attraction along links, pull toward the canvas centre,
damping, then clamping inside the padded canvas. Results depend on node
order, constants and iteration count, so all three are kept fixed.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..models.graph import GraphData, NodePosition

Point = Tuple[float, float]


class LayoutSettings(BaseModel):
    """Simulation constants."""

    model_config = ConfigDict(frozen=True)

    iterations: int = Field(default=100, ge=0)
    link_distance: float = Field(default=80.0, gt=0)
    repulsion_strength: float = Field(default=500.0, ge=0)
    spring_strength: float = Field(default=0.1, ge=0)
    center_strength: float = Field(default=0.05, ge=0)
    focal_center_multiplier: float = Field(default=3.0, ge=0)
    damping: float = Field(default=0.9, gt=0, lt=1)
    padding: float = Field(default=20.0, ge=0)


# Side panel graph and the compact floating widget.
LAYOUT_PRESETS: Dict[str, LayoutSettings] = {
    "panel": LayoutSettings(),
    "floating": LayoutSettings(link_distance=60.0, repulsion_strength=400.0, padding=15.0),
}
FLOATING_CANVAS = (220, 160)


def get_layout_settings(preset: str = "panel", iterations: Optional[int] = None) -> LayoutSettings:
    """Return preset constants, optionally with a different iteration count."""
    try:
        settings = LAYOUT_PRESETS[preset]
    except KeyError as exc:
        raise ValueError(f"Unknown layout preset: {preset}") from exc
    if iterations is not None:
        settings = settings.model_copy(update={"iterations": iterations})
    return settings


@dataclass(slots=True)
class _Body:
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0


class ForceLayout:
    """Compute 2-D coordinates for a node/edge set on a fixed canvas."""

    def __init__(self, settings: LayoutSettings | None = None) -> None:
        self.settings = settings or LayoutSettings()

    def run(
        self,
        node_ids: Sequence[str],
        edges: Sequence[Tuple[str, str]],
        width: float,
        height: float,
        focal_id: Optional[str] = None,
    ) -> Dict[str, Point]:
        """Return ``{node_id: (x, y)}``; an empty node list yields ``{}``."""
        s = self.settings
        ids = list(dict.fromkeys(node_ids))
        if not ids:
            return {}

        if width < 2 * s.padding or height < 2 * s.padding:
            raise ValueError(
                f"Canvas {width}x{height} is smaller than twice the padding ({s.padding})"
            )

        index = {node_id: i for i, node_id in enumerate(ids)}
        springs = [
            (index[source], index[target])
            for source, target in edges
            if source in index and target in index and source != target
        ]
        focal = index.get(focal_id) if focal_id is not None else None

        bodies = self._initial_bodies(len(ids), width, height, focal)
        for _ in range(s.iterations):
            self._step(bodies, springs, focal, width, height)

        return {node_id: (bodies[i].x, bodies[i].y) for i, node_id in enumerate(ids)}

    def _initial_bodies(
        self, count: int, width: float, height: float, focal: Optional[int]
    ) -> List[_Body]:
        center_x = width / 2
        center_y = height / 2
        radius = min(width, height) / 4
        bodies = []
        for i in range(count):
            angle = 2 * math.pi * i / count
            bodies.append(
                _Body(center_x + radius * math.cos(angle), center_y + radius * math.sin(angle))
            )
        if focal is not None:
            bodies[focal].x = center_x
            bodies[focal].y = center_y
        return bodies

    def _step(
        self,
        bodies: List[_Body],
        springs: Sequence[Tuple[int, int]],
        focal: Optional[int],
        width: float,
        height: float,
    ) -> None:
        s = self.settings
        count = len(bodies)

        for i in range(count):
            a = bodies[i]
            for j in range(i + 1, count):
                b = bodies[j]
                dx = b.x - a.x
                dy = b.y - a.y
                dist = math.hypot(dx, dy) or 1.0
                force = s.repulsion_strength / (dist * dist)
                fx = dx / dist * force
                fy = dy / dist * force
                a.vx -= fx
                a.vy -= fy
                b.vx += fx
                b.vy += fy

        for i, j in springs:
            a = bodies[i]
            b = bodies[j]
            dx = b.x - a.x
            dy = b.y - a.y
            dist = math.hypot(dx, dy) or 1.0
            force = (dist - s.link_distance) * s.spring_strength
            fx = dx / dist * force
            fy = dy / dist * force
            a.vx += fx
            a.vy += fy
            b.vx -= fx
            b.vy -= fy

        center_x = width / 2
        center_y = height / 2
        for i, body in enumerate(bodies):
            strength = s.center_strength
            if i == focal:
                strength *= s.focal_center_multiplier
            body.vx += (center_x - body.x) * strength
            body.vy += (center_y - body.y) * strength

            body.vx *= s.damping
            body.vy *= s.damping
            body.x += body.vx
            body.y += body.vy

            body.x = max(s.padding, min(width - s.padding, body.x))
            body.y = max(s.padding, min(height - s.padding, body.y))


def compute_layout(
    node_ids: Sequence[str],
    edges: Sequence[Tuple[str, str]],
    width: float,
    height: float,
    focal_id: Optional[str] = None,
    settings: LayoutSettings | None = None,
) -> Dict[str, Point]:
    """Functional wrapper around :class:`ForceLayout`."""
    return ForceLayout(settings).run(node_ids, edges, width, height, focal_id=focal_id)


def layout_graph(
    graph: GraphData, width: float, height: float, settings: LayoutSettings | None = None
) -> List[NodePosition]:
    """Lay out a :class:`GraphData` payload, centred on its focal node."""
    positions = compute_layout(
        [node.id for node in graph.nodes],
        [(link.source, link.target) for link in graph.links],
        width,
        height,
        focal_id=graph.focal_id,
        settings=settings,
    )
    return [NodePosition(id=node_id, x=x, y=y) for node_id, (x, y) in positions.items()]


__all__ = [
    "LayoutSettings",
    "LAYOUT_PRESETS",
    "FLOATING_CANVAS",
    "ForceLayout",
    "get_layout_settings",
    "compute_layout",
    "layout_graph",
]
