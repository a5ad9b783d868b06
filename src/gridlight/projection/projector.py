"""Frame projector: SimulationState to a drawable Frame snapshot.

A Frame holds everything a 2D immediate-mode renderer needs for one
animation frame: static grid lines, particle dots, partial or full trail
segments and explosion rings, plus the appearance options. Frames are plain
dataclasses of numbers and strings, detached from simulation state.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from gridlight.model.graph import Edge
    from gridlight.model.particle import Particle
    from gridlight.model.state import SimulationState
    from gridlight.model.trail import Explosion, Trail

PARTICLE_RADIUS = 3.0
TRAIL_WIDTH = 2.0
TRAIL_ALPHA_SCALE = 0.15  # trails draw at a fraction of their opacity
TRAIL_GLOW_BLUR = 4.0
EXPLOSION_WIDTH = 2.0


@dataclass
class LineVisual:
    """A static grid line."""

    x1: float
    y1: float
    x2: float
    y2: float


@dataclass
class ParticleVisual:
    """A particle dot at its interpolated position."""

    id: int
    x: float
    y: float
    radius: float = PARTICLE_RADIUS


@dataclass
class TrailVisual:
    """The drawn part of a trail: from its start to its current head."""

    x1: float
    y1: float
    x2: float
    y2: float
    progress: float
    opacity: float
    alpha: float  # stroke alpha, opacity scaled down for subtlety
    width: float = TRAIL_WIDTH
    glow_blur: float = TRAIL_GLOW_BLUR


@dataclass
class ExplosionVisual:
    """A ring stroked at ``radius`` with the given alpha."""

    x: float
    y: float
    radius: float
    opacity: float
    width: float = EXPLOSION_WIDTH


@dataclass
class Appearance:
    """Colors and widths a renderer applies."""

    line_color: str
    line_width: float
    light_color: str


@dataclass
class Frame:
    """A complete visual frame for rendering.

    ``lines`` is None when the caller asked for a frame without the static
    grid (it only changes when ``graph_version`` does).
    """

    tick: int
    graph_version: int
    width: float
    height: float
    appearance: Appearance

    lines: list[LineVisual] | None = None
    particles: list[ParticleVisual] = field(default_factory=list)
    trails: list[TrailVisual] = field(default_factory=list)
    explosions: list[ExplosionVisual] = field(default_factory=list)


def project(state: SimulationState, include_grid: bool = True) -> Frame:
    """Project simulation state into a Frame.

    Args:
        state: The simulation state.
        include_grid: Whether to include the static grid lines.

    Returns:
        Frame containing all visual elements for rendering.
    """
    config = state.config
    frame = Frame(
        tick=state.tick,
        graph_version=state.graph_version,
        width=state.width,
        height=state.height,
        appearance=Appearance(
            line_color=config.line_color,
            line_width=config.line_width,
            light_color=config.light_color,
        ),
    )

    if include_grid:
        frame.lines = [_project_edge(edge) for edge in state.graph.edges]

    if not config.animated:
        return frame

    frame.trails = [_project_trail(t) for t in state.trails if t.opacity > 0]
    frame.particles = [_project_particle(p) for p in state.particles if not p.dead]
    frame.explosions = [_project_explosion(e) for e in state.explosions if e.opacity > 0]
    return frame


def _project_edge(edge: Edge) -> LineVisual:
    return LineVisual(x1=edge.a.x, y1=edge.a.y, x2=edge.b.x, y2=edge.b.y)


def _project_particle(particle: Particle) -> ParticleVisual:
    x, y = particle.position()
    return ParticleVisual(id=particle.id, x=x, y=y)


def _project_trail(trail: Trail) -> TrailVisual:
    x2, y2 = trail.head()
    opacity = min(trail.opacity, 1.0)
    return TrailVisual(
        x1=trail.from_x,
        y1=trail.from_y,
        x2=x2,
        y2=y2,
        progress=min(trail.progress, 1.0),
        opacity=opacity,
        alpha=opacity * TRAIL_ALPHA_SCALE,
    )


def _project_explosion(explosion: Explosion) -> ExplosionVisual:
    return ExplosionVisual(
        x=explosion.x,
        y=explosion.y,
        radius=explosion.radius,
        opacity=min(explosion.opacity, 1.0),
    )


def frame_to_dict(frame: Frame) -> dict[str, Any]:
    """Convert a Frame to a JSON-serializable dict."""
    data = asdict(frame)
    if frame.lines is None:
        data.pop("lines")
    return data
