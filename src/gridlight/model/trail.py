"""Trail and Explosion dataclasses: the fading visual ledger."""

from __future__ import annotations

from dataclasses import dataclass

from gridlight.model.graph import EdgeKey

EXPLOSION_START_RADIUS = 2.0


@dataclass
class Trail:
    """A fading line left by one particle crossing one edge.

    Endpoints are copied from the nodes so a trail never holds on to a graph
    that has since been rebuilt. While the particle is still crossing,
    ``progress`` mirrors the particle's; once it reaches 1.0 the trail is
    static and starts losing opacity.
    """

    from_x: float
    from_y: float
    to_x: float
    to_y: float
    edge_key: EdgeKey  # released from occupancy when the trail is purged

    progress: float = 0.0  # 0.0 (just started) to 1.0 (edge fully drawn)
    opacity: float = 1.0

    @property
    def static(self) -> bool:
        """True once the edge is fully drawn and the trail is fading."""
        return self.progress >= 1.0

    def head(self) -> tuple[float, float]:
        """End point of the drawn part of the segment."""
        if self.progress >= 1.0:
            return self.to_x, self.to_y
        return (
            self.from_x + (self.to_x - self.from_x) * self.progress,
            self.from_y + (self.to_y - self.from_y) * self.progress,
        )


@dataclass
class Explosion:
    """A ring that grows and fades where a particle died."""

    x: float
    y: float
    radius: float = EXPLOSION_START_RADIUS
    opacity: float = 1.0
