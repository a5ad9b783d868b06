"""Tick driver: rebuild, spawn, advance, fade; one call per animation frame."""

from __future__ import annotations

import logging
import random

from gridlight.config import GridConfig
from gridlight.engine.grid_builder import build_graph
from gridlight.engine.ledger import tick_ledger
from gridlight.engine.occupancy import OccupancyTracker
from gridlight.engine.particles import advance_particles, spawn_particle
from gridlight.model.state import SimulationState

logger = logging.getLogger(__name__)

SUMMARY_INTERVAL = 100  # ticks between debug summaries


def create_state(
    config: GridConfig | None = None,
    width: float = 0.0,
    height: float = 0.0,
    rng: random.Random | None = None,
) -> SimulationState:
    """Create a state and build its grid for the given region.

    Args:
        config: Grid options. Defaults to ``GridConfig()``.
        width: Region width in pixels.
        height: Region height in pixels.
        rng: Random source. Pass a seeded ``random.Random`` for repeatable runs.
    """
    state = SimulationState(
        config=config if config is not None else GridConfig(),
        occupancy=OccupancyTracker(),
        rng=rng if rng is not None else random.Random(),
    )
    rebuild(state, width, height)
    return state


def rebuild(state: SimulationState, width: float, height: float) -> None:
    """Replace the graph with one built for ``width`` x ``height``.

    Every particle, trail and explosion refers to the old graph, so all of
    them are dropped and every edge is released.
    """
    config = state.config
    state.width = width
    state.height = height
    state.graph = build_graph(config.shape, config.cell_size, width, height, config.max_cells)
    state.graph_version += 1
    state.particles = []
    state.trails = []
    state.explosions = []
    state.occupancy.clear()
    state.rebuild_pending = False


def request_rebuild(
    state: SimulationState,
    width: float | None = None,
    height: float | None = None,
) -> None:
    """Mark the grid for rebuilding at the start of the next tick.

    Args:
        state: Simulation state.
        width: New region width; keeps the current one if None.
        height: New region height; keeps the current one if None.
    """
    if width is not None:
        state.width = width
    if height is not None:
        state.height = height
    state.rebuild_pending = True


def apply_config(state: SimulationState, config: GridConfig) -> None:
    """Swap in a new configuration and schedule a rebuild."""
    state.config = config
    request_rebuild(state)
    logger.info("Configuration changed, rebuild scheduled: %s", config)


def maybe_spawn(state: SimulationState, now_ms: float) -> bool:
    """Attempt a spawn if more than ``spawn_rate`` ms passed since the last attempt.

    The spawn clock restarts on every attempt, successful or not.

    Returns:
        True if a particle was spawned.
    """
    if now_ms - state.last_spawn_ms <= state.config.spawn_rate:
        return False
    state.last_spawn_ms = now_ms
    return spawn_particle(state) is not None


def tick_world(state: SimulationState, now_ms: float) -> None:
    """Execute one animation frame.

    Tick sequence:
    1. Rebuild the grid if a rebuild was requested
    2. Spawn a particle if the spawn interval elapsed
    3. Advance all particles (progress += light_speed * progress_step)
    4. Fade trails, grow explosions, release faded edges
    5. Increment state.tick

    Steps 2-4 only run when ``config.animated`` is set.

    Args:
        state: The state to advance.
        now_ms: Host clock in milliseconds.
    """
    if state.rebuild_pending:
        rebuild(state, state.width, state.height)

    if state.config.animated:
        maybe_spawn(state, now_ms)
        stats = advance_particles(state)
        tick_ledger(state)
    else:
        stats = None

    state.tick += 1

    if stats is not None and state.tick % SUMMARY_INTERVAL == 0:
        counters = {
            "tick": state.tick,
            "particles": len(state.particles),
            "trails": len(state.trails),
            "explosions": len(state.explosions),
            "occupied": len(state.occupancy),
            "deaths": stats.deaths,
        }
        logger.debug(
            "Tick %(tick)d: particles=%(particles)d, trails=%(trails)d, "
            "explosions=%(explosions)d, occupied=%(occupied)d, deaths=%(deaths)d",
            counters,
            extra=counters,
        )
