"""Frame projection: simulation state to visual frame snapshots."""

from gridlight.projection.projector import (
    Appearance,
    ExplosionVisual,
    Frame,
    LineVisual,
    ParticleVisual,
    TrailVisual,
    frame_to_dict,
    project,
)

__all__ = [
    "Appearance",
    "ExplosionVisual",
    "Frame",
    "LineVisual",
    "ParticleVisual",
    "TrailVisual",
    "frame_to_dict",
    "project",
]
