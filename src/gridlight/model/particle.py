"""Particle dataclass: a light walker crossing one grid edge at a time."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gridlight.model.graph import Node
    from gridlight.model.trail import Trail


@dataclass(eq=False)
class Particle:
    """A light particle travelling from ``current_node`` to ``target_node``.

    When progress >= 1.0 the particle has arrived at ``target_node`` and, in
    the same tick, either moves on to a new edge, splits in two, or dies.
    """

    id: int
    current_node: Node
    target_node: Node

    # Lifespan
    travel_limit: int  # edges to cross before dying, drawn once at spawn
    traveled: int = 0  # edges fully crossed so far

    # Transit progress
    progress: float = 0.0  # 0.0 (at current_node) to 1.0 (at target_node)

    # Lineage may split once; split children start with this False
    can_split: bool = True

    # Lifecycle
    dead: bool = False

    # Trail being drawn along the current edge
    trail: Trail | None = None

    def position(self) -> tuple[float, float]:
        """Interpolated (x, y) along the current edge."""
        t = min(self.progress, 1.0)
        a, b = self.current_node, self.target_node
        return a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t
