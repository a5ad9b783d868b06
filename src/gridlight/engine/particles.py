"""Particle engine: spawn walkers at the top of the grid and advance them.

Walks are undirected. At every node a particle picks a random free edge
(never the one it arrived on), may split into two once per lineage, and dies
with an explosion when it reaches its travel limit or finds no free edge.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from gridlight.engine.ledger import create_explosion, create_trail
from gridlight.model.graph import edge_key
from gridlight.model.particle import Particle

if TYPE_CHECKING:
    from gridlight.model.graph import Node
    from gridlight.model.state import SimulationState

logger = logging.getLogger(__name__)


@dataclass
class AdvanceStats:
    """What happened during one advance_particles() call."""

    arrived: int = 0
    splits: int = 0
    deaths: int = 0


def draw_travel_limit(state: SimulationState) -> int:
    """Uniform integer in [min_travel, max_travel]; min_travel if the range is inverted."""
    low, high = state.config.min_travel, state.config.max_travel
    if high < low:
        return low
    return state.rng.randint(low, high)


def free_neighbors(state: SimulationState, node: Node, nodes: list[Node]) -> list[Node]:
    """Filter ``nodes`` to those whose edge to ``node`` is not occupied."""
    return [n for n in nodes if not state.occupancy.is_occupied(edge_key(node, n))]


def candidate_nodes(state: SimulationState, node: Node, came_from: Node | None = None) -> list[Node]:
    """Nodes a particle standing on ``node`` may move to next.

    Excludes ``came_from`` (no immediate backtracking) and every neighbour
    behind an occupied edge.
    """
    return free_neighbors(state, node, state.graph.neighbors(node, exclude=came_from))


def spawn_particle(state: SimulationState) -> Particle | None:
    """Try to start one particle from a random entry node.

    Prefers edges leading downward from the entry node, falling back to any
    neighbour when there are none. If every preferred edge is occupied the
    attempt is skipped.

    Returns:
        The new particle, or None if nothing was spawned.
    """
    graph = state.graph
    if not graph.entry_nodes:
        return None

    start = state.rng.choice(graph.entry_nodes)
    connected = graph.neighbors(start)
    downward = [n for n in connected if n.y > start.y]
    available = free_neighbors(state, start, downward or connected)
    if not available:
        logger.debug("Spawn skipped: no free edge at entry node %s", start.key)
        return None

    target = state.rng.choice(available)
    particle = Particle(
        id=state.next_particle_id,
        current_node=start,
        target_node=target,
        travel_limit=draw_travel_limit(state),
    )
    state.next_particle_id += 1
    particle.trail = create_trail(state, start, target)
    state.particles.append(particle)

    logger.debug("Spawned particle %d (travel limit %d)", particle.id, particle.travel_limit)
    return particle


def _move_onto(state: SimulationState, particle: Particle, node: Node, target: Node) -> None:
    particle.current_node = node
    particle.target_node = target
    particle.progress = 0.0
    particle.trail = create_trail(state, node, target)


def _kill(state: SimulationState, particle: Particle, node: Node) -> None:
    create_explosion(state, node.x, node.y)
    particle.dead = True
    particle.trail = None


def _arrive(
    state: SimulationState,
    particle: Particle,
    children: list[Particle],
    stats: AdvanceStats,
) -> None:
    """Handle a particle that just finished crossing its edge."""
    stats.arrived += 1
    particle.traveled += 1
    node = particle.target_node

    if particle.traveled >= particle.travel_limit:
        _kill(state, particle, node)
        stats.deaths += 1
        return

    candidates = candidate_nodes(state, node, came_from=particle.current_node)
    if not candidates:
        _kill(state, particle, node)
        stats.deaths += 1
        return

    rng = state.rng
    if particle.can_split and len(candidates) >= 2 and rng.random() < state.config.split_chance:
        first, second = rng.sample(candidates, 2)
        particle.can_split = False
        _move_onto(state, particle, node, first)

        child = Particle(
            id=state.next_particle_id,
            current_node=node,
            target_node=second,
            travel_limit=particle.travel_limit,
            traveled=particle.traveled,
            can_split=False,
        )
        state.next_particle_id += 1
        child.trail = create_trail(state, node, second)
        children.append(child)
        stats.splits += 1
        logger.debug("Particle %d split, child %d", particle.id, child.id)
        return

    _move_onto(state, particle, node, rng.choice(candidates))


def advance_particles(state: SimulationState) -> AdvanceStats:
    """Move every live particle forward by one tick.

    Particles are processed in list order, so earlier particles claim edges
    first. Split children are appended after the pass and do not move until
    the next tick; dead particles are compacted out at the end.
    """
    step = state.config.step
    stats = AdvanceStats()
    children: list[Particle] = []

    for particle in state.particles:
        if particle.dead:
            continue

        particle.progress += step
        if particle.trail is not None:
            particle.trail.progress = min(particle.progress, 1.0)

        if particle.progress >= 1.0:
            _arrive(state, particle, children, stats)

    state.particles = [p for p in state.particles + children if not p.dead]
    return stats
