"""Tests for the trail and explosion ledger."""

from __future__ import annotations

import logging
import random

from gridlight.config import GridConfig
from gridlight.engine.ledger import (
    EXPLOSION_FADE,
    EXPLOSION_GROWTH,
    create_explosion,
    create_trail,
    tick_explosions,
    tick_ledger,
    tick_trails,
)
from gridlight.engine.occupancy import OccupancyTracker
from gridlight.model.graph import Graph, node_key
from gridlight.model.state import SimulationState


def make_state(**overrides) -> SimulationState:
    """State over the two-edge path (0,0)-(10,0)-(20,0)."""
    graph = Graph()
    graph.add_edge(0, 0, 10, 0)
    graph.add_edge(10, 0, 20, 0)
    state = SimulationState(
        config=GridConfig(**overrides),
        occupancy=OccupancyTracker(),
        rng=random.Random(0),
    )
    state.graph = graph
    return state


def first_trail(state: SimulationState):
    start = state.graph.nodes[node_key(0, 0)]
    end = state.graph.nodes[node_key(10, 0)]
    return create_trail(state, start, end)


class TestCreate:
    """Tests for ledger entry creation."""

    def test_create_trail_occupies_edge(self):
        """A new trail claims its edge."""
        state = make_state()

        trail = first_trail(state)

        assert state.trails == [trail]
        assert state.occupancy.is_occupied(trail.edge_key)
        assert trail.edge_key == state.graph.edges[0].key

    def test_trail_copies_coordinates(self):
        """Trails keep plain coordinates, not node references."""
        state = make_state()

        trail = first_trail(state)
        state.graph = Graph()

        assert (trail.from_x, trail.from_y, trail.to_x, trail.to_y) == (0, 0, 10, 0)

    def test_create_explosion(self):
        """Explosions are recorded at the given point."""
        state = make_state()

        explosion = create_explosion(state, 4.0, 5.0)

        assert state.explosions == [explosion]
        assert (explosion.x, explosion.y) == (4.0, 5.0)


class TestTickTrails:
    """Tests for trail fading and purging."""

    def test_mid_crossing_trail_does_not_fade(self):
        """Trails still being drawn keep full opacity."""
        state = make_state(trail_fade_speed=0.1)
        trail = first_trail(state)
        trail.progress = 0.6

        tick_trails(state)

        assert trail.opacity == 1.0

    def test_static_trail_fades(self):
        """Completed trails lose trail_fade_speed per tick."""
        state = make_state(trail_fade_speed=0.25)
        trail = first_trail(state)
        trail.progress = 1.0

        tick_trails(state)

        assert trail.opacity == 0.75

    def test_faded_trail_releases_edge(self):
        """A trail reaching zero opacity is purged and frees its edge."""
        state = make_state(trail_fade_speed=0.5)
        trail = first_trail(state)
        trail.progress = 1.0

        assert tick_trails(state) == 0
        assert state.occupancy.is_occupied(trail.edge_key)

        assert tick_trails(state) == 1
        assert state.trails == []
        assert not state.occupancy.is_occupied(trail.edge_key)

    def test_release_is_logged(self, caplog):
        """Releasing an edge logs its readable key."""
        state = make_state(trail_fade_speed=1.0)
        first_trail(state).progress = 1.0
        caplog.set_level(logging.DEBUG, logger="gridlight.engine.ledger")

        tick_trails(state)

        assert "released edge 0,0-1000,0" in caplog.text

    def test_edge_stays_occupied_while_fading(self):
        """Finishing the crossing does not free the edge; fading out does."""
        state = make_state(trail_fade_speed=0.01)
        trail = first_trail(state)
        trail.progress = 1.0

        for _ in range(50):
            tick_trails(state)

        assert state.occupancy.is_occupied(trail.edge_key)

    def test_zero_fade_never_purges(self):
        """A non-positive fade speed keeps trails forever."""
        state = make_state(trail_fade_speed=0.0)
        trail = first_trail(state)
        trail.progress = 1.0

        for _ in range(10):
            tick_trails(state)

        assert state.trails == [trail]


class TestTickExplosions:
    """Tests for explosion growth and decay."""

    def test_grows_and_fades(self):
        """Each tick grows the radius and lowers opacity."""
        state = make_state()
        explosion = create_explosion(state, 0, 0)

        tick_explosions(state)

        assert explosion.radius == 2.0 + EXPLOSION_GROWTH
        assert explosion.opacity == 1.0 - EXPLOSION_FADE

    def test_purged_after_thirteen_ticks(self):
        """At 0.08 per tick an explosion is gone on the 13th tick."""
        state = make_state()
        create_explosion(state, 0, 0)

        for _ in range(12):
            tick_explosions(state)
        assert len(state.explosions) == 1

        assert tick_explosions(state) == 1
        assert state.explosions == []


class TestTickLedger:
    """Tests for the combined ledger tick."""

    def test_ticks_both(self):
        """tick_ledger() fades trails and explosions together."""
        state = make_state(trail_fade_speed=0.1)
        trail = first_trail(state)
        trail.progress = 1.0
        explosion = create_explosion(state, 0, 0)

        tick_ledger(state)

        assert trail.opacity < 1.0
        assert explosion.opacity < 1.0
