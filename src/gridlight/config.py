"""Configuration for the grid and its light particles.

Settings load from ``GRIDLIGHT_*`` environment variables and an optional
``.env`` file. Numeric options are deliberately unbounded: out-of-range
values produce degenerate visuals (an empty grid, particles that never move,
trails that never fade) rather than errors.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from functools import lru_cache
from collections.abc import Mapping
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class GridShape(IntEnum):
    """Tessellation selector, numbered by polygon side count."""

    SQUARE = 4
    HEXAGON = 6


_SHAPE_ALIASES: dict[str, GridShape] = {
    "square": GridShape.SQUARE,
    "squares": GridShape.SQUARE,
    "hex": GridShape.HEXAGON,
    "hexagon": GridShape.HEXAGON,
    "hexagons": GridShape.HEXAGON,
}


class GridConfig(BaseSettings):
    """Options for grid construction, particle behaviour and appearance.

    Environment Variables:
        GRIDLIGHT_SHAPE: 4/square or 6/hex (default: 4)
        GRIDLIGHT_CELL_SIZE: Cell size in pixels (default: 40)
        GRIDLIGHT_ANIMATED: Run particles at all (default: true)
        GRIDLIGHT_LIGHT_SPEED: Progress multiplier per tick (default: 2)
        GRIDLIGHT_PROGRESS_STEP: Base progress per tick (default: 0.02)
        GRIDLIGHT_MIN_TRAVEL / GRIDLIGHT_MAX_TRAVEL: Lifespan range in edges
        GRIDLIGHT_SPAWN_RATE: Milliseconds between spawn attempts
        GRIDLIGHT_SPLIT_CHANCE: Branch probability at a junction
        GRIDLIGHT_TRAIL_FADE_SPEED: Opacity lost per tick by a finished trail

    Example:
        >>> config = GridConfig()  # environment
        >>> config = GridConfig(shape=6, cell_size=30)
    """

    model_config = SettingsConfigDict(
        env_prefix="GRIDLIGHT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Tessellation
    shape: GridShape = Field(default=GridShape.SQUARE, description="4 = squares, 6 = hexagons")
    cell_size: float = Field(default=40.0, description="Size of each cell in pixels")

    # Particles
    animated: bool = Field(default=True, description="Run the particle simulation")
    light_speed: float = Field(default=2.0, description="Progress multiplier per tick")
    progress_step: float = Field(
        default=0.02,
        description="Edge fraction covered per tick at light_speed 1 (tuned for 60 FPS)",
    )
    min_travel: int = Field(default=2, description="Minimum edges crossed before dying")
    max_travel: int = Field(default=6, description="Maximum edges crossed before dying")
    spawn_rate: float = Field(default=1000.0, description="Milliseconds between spawn attempts")
    split_chance: float = Field(default=0.3, description="Probability of splitting (0-1)")
    trail_fade_speed: float = Field(default=0.01, description="Opacity lost per tick by a trail")

    # Appearance (only consumed by renderers)
    line_color: str = Field(default="#e5e7eb", description="Grid line color")
    line_width: float = Field(default=1.0, description="Grid line width")
    light_color: str = Field(default="#3b82f6", description="Particle, trail and explosion color")

    # Hosting
    viewport_width: float = Field(default=1280.0, description="Initial region width")
    viewport_height: float = Field(default=720.0, description="Initial region height")
    target_fps: float = Field(default=60.0, gt=0, description="Host tick rate")
    max_cells: int = Field(
        default=250_000,
        ge=1,
        description="Cell count above which the grid builder yields an empty graph",
    )

    @field_validator("shape", mode="before")
    @classmethod
    def normalize_shape(cls, v: Any) -> GridShape:
        """Map aliases to GridShape; any other value means hexagons."""
        if isinstance(v, GridShape):
            return v
        if isinstance(v, str):
            alias = _SHAPE_ALIASES.get(v.strip().lower())
            if alias is not None:
                return alias
            try:
                v = int(v)
            except ValueError:
                logger.warning("Unknown grid shape %r, using hexagons", v)
                return GridShape.HEXAGON
        if v == GridShape.SQUARE:
            return GridShape.SQUARE
        if v != GridShape.HEXAGON:
            logger.warning("Unknown grid shape %r, using hexagons", v)
        return GridShape.HEXAGON

    @property
    def step(self) -> float:
        """Progress added to every particle each tick."""
        return self.light_speed * self.progress_step

    def with_updates(self, changes: Mapping[str, Any]) -> GridConfig:
        """Return a validated copy with ``changes`` applied.

        Unknown keys are ignored, like unknown environment variables.

        Raises:
            pydantic.ValidationError: If a changed value fails validation.
        """
        data = self.model_dump()
        data.update(changes)
        return GridConfig.model_validate(data)

    def __repr__(self) -> str:
        return (
            f"GridConfig("
            f"shape={self.shape.name.lower()}, "
            f"cell_size={self.cell_size}, "
            f"animated={self.animated}, "
            f"speed={self.light_speed}x{self.progress_step}, "
            f"travel={self.min_travel}-{self.max_travel}, "
            f"spawn_rate={self.spawn_rate}ms, "
            f"split_chance={self.split_chance}, "
            f"fade={self.trail_fade_speed}"
            f")"
        )


@lru_cache
def get_grid_config() -> GridConfig:
    """Get the cached configuration singleton.

    Call ``get_grid_config.cache_clear()`` to reload from the environment.
    """
    config = GridConfig()
    logger.info("Loaded grid configuration: %s", config)
    return config
