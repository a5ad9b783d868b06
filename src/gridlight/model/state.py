"""SimulationState: container holding everything one grid animation mutates."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from gridlight.model.graph import Graph

if TYPE_CHECKING:
    from gridlight.config import GridConfig
    from gridlight.engine.occupancy import OccupancyTracker
    from gridlight.model.particle import Particle
    from gridlight.model.trail import Explosion, Trail


@dataclass
class SimulationState:
    """All state of one animated grid.

    Passed explicitly to every engine function; nothing lives in module
    globals, so several grids can run side by side. Create instances with
    :func:`gridlight.engine.simulation.create_state`.
    """

    config: GridConfig
    occupancy: OccupancyTracker

    # Region the graph was built for
    width: float = 0.0
    height: float = 0.0

    graph: Graph = field(default_factory=Graph)
    graph_version: int = 0  # bumped on every rebuild

    # Live entities, in insertion order
    particles: list[Particle] = field(default_factory=list)
    trails: list[Trail] = field(default_factory=list)
    explosions: list[Explosion] = field(default_factory=list)

    next_particle_id: int = 0
    last_spawn_ms: float = 0.0

    # Set by request_rebuild(); serviced at the start of the next tick
    rebuild_pending: bool = False

    # Simulation clock
    tick: int = 0

    # Uniform random source; seed it for reproducible runs
    rng: random.Random = field(default_factory=random.Random)
