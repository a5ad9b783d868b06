"""Profile tick_world() on large grids to find hot spots."""

import cProfile
import pstats
import random
import time
from io import StringIO

from gridlight.config import GridConfig, GridShape
from gridlight.engine.simulation import create_state, tick_world
from gridlight.model.state import SimulationState

FRAME_MS = 1000.0 / 60.0


def create_test_state(shape: GridShape, busy: bool = False) -> SimulationState:
    """Create a full-HD state; ``busy`` spawns every tick and splits often."""
    config = GridConfig(
        shape=shape,
        cell_size=30,
        spawn_rate=0 if busy else 1000,
        split_chance=0.8 if busy else 0.3,
        min_travel=10 if busy else 2,
        max_travel=40 if busy else 6,
    )
    return create_state(config, 1920, 1080, rng=random.Random(7))


def run_ticks(state: SimulationState, num_ticks: int) -> int:
    """Run ticks on a simulated 60 FPS clock; return the peak particle count."""
    peak = 0
    for _ in range(num_ticks):
        tick_world(state, state.tick * FRAME_MS)
        peak = max(peak, len(state.particles))
    return peak


def measure_tick_rate(state: SimulationState, num_ticks: int) -> tuple[float, int]:
    """Measure ticks per second and peak particle count."""
    start_time = time.perf_counter()
    peak = run_ticks(state, num_ticks)
    elapsed = time.perf_counter() - start_time
    ticks_per_sec = num_ticks / elapsed if elapsed > 0 else 0
    return ticks_per_sec, peak


def measure_build_time(shape: GridShape, repeats: int = 20) -> float:
    """Average milliseconds for a full-HD rebuild."""
    state = create_test_state(shape)
    start_time = time.perf_counter()
    for _ in range(repeats):
        create_state(state.config, 1920, 1080)
    return (time.perf_counter() - start_time) * 1000 / repeats


def profile_tick_world(state: SimulationState, num_ticks: int) -> str:
    """Profile tick_world and return the top functions by cumulative time."""
    profiler = cProfile.Profile()

    profiler.enable()
    run_ticks(state, num_ticks)
    profiler.disable()

    stats_stream = StringIO()
    stats = pstats.Stats(profiler, stream=stats_stream)
    stats.sort_stats("cumulative")
    stats.print_stats(25)

    return stats_stream.getvalue()


def check_occupancy_consistency(state: SimulationState, num_ticks: int) -> int:
    """Count ticks where occupied edges differ from visible trail edges.

    A live particle on an edge the graph does not have also counts.
    """
    mismatches = 0
    for _ in range(num_ticks):
        tick_world(state, state.tick * FRAME_MS)
        trail_keys = {t.edge_key for t in state.trails if t.opacity > 0}
        off_grid = any(state.graph.get_edge(p.current_node, p.target_node) is None for p in state.particles)
        if off_grid or trail_keys != set(state.occupancy):
            mismatches += 1
    return mismatches


def main() -> None:
    print("=" * 60)
    print("Gridlight tick profiling")
    print("=" * 60)

    for shape in (GridShape.SQUARE, GridShape.HEXAGON):
        name = shape.name.lower()
        print(f"\n[{name}] rebuild: {measure_build_time(shape):.2f} ms")

        tps, peak = measure_tick_rate(create_test_state(shape), 3000)
        print(f"[{name}] normal: {tps:.0f} ticks/s, peak particles {peak}")

        tps, peak = measure_tick_rate(create_test_state(shape, busy=True), 3000)
        print(f"[{name}] busy:   {tps:.0f} ticks/s, peak particles {peak}")

        mismatches = check_occupancy_consistency(create_test_state(shape, busy=True), 2000)
        print(f"[{name}] occupancy mismatches: {mismatches}")

    print("\nProfile (hexagon, busy, 2000 ticks):")
    print(profile_tick_world(create_test_state(GridShape.HEXAGON, busy=True), 2000))


if __name__ == "__main__":
    main()
