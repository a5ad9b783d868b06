"""Occupancy tracker: edges claimed by an in-flight or still-fading trail."""

from __future__ import annotations

from collections.abc import Iterator

from gridlight.model.graph import EdgeKey


class OccupancyTracker:
    """Set of occupied edge keys.

    An edge is occupied from the moment a particle commits to it until the
    trail it leaves has faded out completely. Occupy and release are both
    idempotent.
    """

    def __init__(self) -> None:
        self._edges: set[EdgeKey] = set()

    def is_occupied(self, key: EdgeKey) -> bool:
        return key in self._edges

    def occupy(self, key: EdgeKey) -> None:
        self._edges.add(key)

    def release(self, key: EdgeKey) -> None:
        self._edges.discard(key)

    def clear(self) -> None:
        """Release every edge (used when the graph is rebuilt)."""
        self._edges.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._edges

    def __len__(self) -> int:
        return len(self._edges)

    def __iter__(self) -> Iterator[EdgeKey]:
        return iter(self._edges)
