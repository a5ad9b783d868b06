"""Tests for the frame projection module."""

import json
import random

from gridlight.config import GridConfig
from gridlight.engine.ledger import create_explosion, create_trail
from gridlight.engine.simulation import create_state
from gridlight.model import Particle, Trail
from gridlight.model.graph import node_key
from gridlight.model.state import SimulationState
from gridlight.projection import (
    Frame,
    LineVisual,
    ParticleVisual,
    frame_to_dict,
    project,
)
from gridlight.projection.projector import PARTICLE_RADIUS, TRAIL_ALPHA_SCALE, _project_trail


def make_state(**overrides) -> SimulationState:
    """A 40x40 region: a 3x3 node square grid with 40px cells."""
    return create_state(GridConfig(**overrides), 40, 40, rng=random.Random(0))


def add_particle(state: SimulationState, progress: float = 0.5) -> Particle:
    start = state.graph.nodes[node_key(0, 0)]
    end = state.graph.nodes[node_key(0, 40)]
    particle = Particle(id=7, current_node=start, target_node=end, travel_limit=3, progress=progress)
    particle.trail = create_trail(state, start, end)
    particle.trail.progress = progress
    state.particles.append(particle)
    return particle


class TestProject:
    """Tests for project()."""

    def test_static_grid_lines(self):
        """Every edge becomes one line."""
        state = make_state()

        frame = project(state)

        assert isinstance(frame, Frame)
        assert frame.lines is not None
        assert len(frame.lines) == len(state.graph.edges)
        assert LineVisual(0.0, 0.0, 40.0, 0.0) in frame.lines

    def test_without_grid(self):
        """include_grid=False leaves lines out entirely."""
        state = make_state()

        frame = project(state, include_grid=False)

        assert frame.lines is None

    def test_frame_metadata(self):
        """Frames carry tick, version, size and appearance."""
        state = make_state(line_color="#000000", light_color="#ff0000", line_width=2)

        frame = project(state)

        assert frame.tick == 0
        assert frame.graph_version == 1
        assert (frame.width, frame.height) == (40, 40)
        assert frame.appearance.line_color == "#000000"
        assert frame.appearance.light_color == "#ff0000"
        assert frame.appearance.line_width == 2

    def test_particle_position(self):
        """Particles are drawn at their interpolated position."""
        state = make_state()
        add_particle(state, progress=0.25)

        frame = project(state)

        assert frame.particles == [ParticleVisual(id=7, x=0.0, y=10.0, radius=PARTICLE_RADIUS)]

    def test_partial_trail(self):
        """A trail mid-crossing is drawn from its start to the particle."""
        state = make_state()
        add_particle(state, progress=0.5)

        (trail,) = project(state).trails

        assert (trail.x1, trail.y1, trail.x2, trail.y2) == (0.0, 0.0, 0.0, 20.0)
        assert trail.alpha == TRAIL_ALPHA_SCALE

    def test_explosions(self):
        """Explosions are drawn as rings at their current radius."""
        state = make_state()
        explosion = create_explosion(state, 40.0, 40.0)
        explosion.radius = 5.0
        explosion.opacity = 0.5

        (ring,) = project(state).explosions

        assert (ring.x, ring.y, ring.radius, ring.opacity) == (40.0, 40.0, 5.0, 0.5)

    def test_invisible_entries_skipped(self):
        """Dead particles and fully faded entries are not drawn."""
        state = make_state()
        particle = add_particle(state)
        particle.dead = True
        particle.trail.opacity = 0.0
        create_explosion(state, 0, 0).opacity = -0.04

        frame = project(state)

        assert frame.particles == []
        assert frame.trails == []
        assert frame.explosions == []

    def test_not_animated_draws_grid_only(self):
        """With animation off only the static grid is drawn."""
        state = make_state(animated=False)
        add_particle(state)
        create_explosion(state, 0, 0)

        frame = project(state)

        assert frame.lines
        assert frame.particles == []
        assert frame.trails == []
        assert frame.explosions == []

    def test_empty_graph(self):
        """An empty graph projects to an empty frame."""
        state = create_state(GridConfig(), 0, 0)

        frame = project(state)

        assert frame.lines == []
        assert frame.particles == []


class TestProjectTrail:
    """Tests for trail projection details."""

    def test_static_trail_full_length(self):
        """A static trail spans its whole edge at reduced alpha."""
        trail = Trail(0, 0, 40, 0, edge_key=((0, 0), (4000, 0)), progress=1.0, opacity=0.5)

        visual = _project_trail(trail)

        assert (visual.x2, visual.y2) == (40, 0)
        assert visual.opacity == 0.5
        assert visual.alpha == 0.5 * TRAIL_ALPHA_SCALE

    def test_progress_clamped(self):
        """Reported progress never exceeds 1."""
        trail = Trail(0, 0, 40, 0, edge_key=((0, 0), (4000, 0)), progress=1.04)

        assert _project_trail(trail).progress == 1.0


class TestFrameToDict:
    """Tests for frame serialization."""

    def test_json_serializable(self):
        """Frame dicts survive json.dumps."""
        state = make_state()
        add_particle(state)
        create_explosion(state, 0, 0)

        data = frame_to_dict(project(state))
        decoded = json.loads(json.dumps(data))

        assert decoded["tick"] == 0
        assert decoded["appearance"]["light_color"] == "#3b82f6"
        assert decoded["particles"][0]["id"] == 7
        assert len(decoded["lines"]) == len(state.graph.edges)

    def test_lines_omitted_when_not_projected(self):
        """A frame without grid lines has no 'lines' key."""
        data = frame_to_dict(project(make_state(), include_grid=False))

        assert "lines" not in data
        assert "particles" in data
