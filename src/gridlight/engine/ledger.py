"""Trail and explosion ledger: fade, grow and purge visual traces each tick."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gridlight.model.graph import edge_key, format_edge_key
from gridlight.model.trail import Explosion, Trail

if TYPE_CHECKING:
    from gridlight.model.graph import Node
    from gridlight.model.state import SimulationState

logger = logging.getLogger(__name__)

EXPLOSION_GROWTH = 0.5  # radius added per tick
EXPLOSION_FADE = 0.08  # opacity lost per tick


def create_trail(state: SimulationState, start: Node, end: Node) -> Trail:
    """Claim the edge ``start``-``end`` and record a new trail along it.

    The caller must have checked the edge is free.
    """
    key = edge_key(start, end)
    state.occupancy.occupy(key)
    trail = Trail(
        from_x=start.x,
        from_y=start.y,
        to_x=end.x,
        to_y=end.y,
        edge_key=key,
    )
    state.trails.append(trail)
    return trail


def create_explosion(state: SimulationState, x: float, y: float) -> Explosion:
    """Record a burst at (x, y)."""
    explosion = Explosion(x=x, y=y)
    state.explosions.append(explosion)
    return explosion


def tick_trails(state: SimulationState) -> int:
    """Fade static trails and purge the invisible ones.

    Trails still being drawn (progress < 1) keep full opacity. A purged
    trail releases its edge.

    Returns:
        Number of trails purged.
    """
    fade = state.config.trail_fade_speed
    kept: list[Trail] = []
    for trail in state.trails:
        if trail.static:
            trail.opacity -= fade
        if trail.opacity > 0:
            kept.append(trail)
        else:
            state.occupancy.release(trail.edge_key)
            logger.debug("Trail faded, released edge %s", format_edge_key(trail.edge_key))

    purged = len(state.trails) - len(kept)
    state.trails = kept
    return purged


def tick_explosions(state: SimulationState) -> int:
    """Grow and fade every explosion, purging the invisible ones.

    Returns:
        Number of explosions purged.
    """
    for explosion in state.explosions:
        explosion.radius += EXPLOSION_GROWTH
        explosion.opacity -= EXPLOSION_FADE

    before = len(state.explosions)
    state.explosions = [e for e in state.explosions if e.opacity > 0]
    return before - len(state.explosions)


def tick_ledger(state: SimulationState) -> None:
    """Advance trails then explosions by one tick."""
    trails_purged = tick_trails(state)
    explosions_purged = tick_explosions(state)
    if trails_purged or explosions_purged:
        logger.debug(
            "Ledger purged %d trails, %d explosions (occupied edges: %d)",
            trails_purged,
            explosions_purged,
            len(state.occupancy),
        )
