"""Simulation engine: grid builder, occupancy, particles, ledger, tick driver."""

from gridlight.engine.grid_builder import (
    build_graph,
    build_hex_graph,
    build_square_graph,
    hex_vertices,
)
from gridlight.engine.ledger import (
    create_explosion,
    create_trail,
    tick_explosions,
    tick_ledger,
    tick_trails,
)
from gridlight.engine.occupancy import OccupancyTracker
from gridlight.engine.particles import (
    AdvanceStats,
    advance_particles,
    candidate_nodes,
    draw_travel_limit,
    spawn_particle,
)
from gridlight.engine.simulation import (
    apply_config,
    create_state,
    maybe_spawn,
    rebuild,
    request_rebuild,
    tick_world,
)

__all__ = [
    "AdvanceStats",
    "OccupancyTracker",
    "advance_particles",
    "apply_config",
    "build_graph",
    "build_hex_graph",
    "build_square_graph",
    "candidate_nodes",
    "create_explosion",
    "create_state",
    "create_trail",
    "draw_travel_limit",
    "hex_vertices",
    "maybe_spawn",
    "rebuild",
    "request_rebuild",
    "spawn_particle",
    "tick_explosions",
    "tick_ledger",
    "tick_trails",
    "tick_world",
]
