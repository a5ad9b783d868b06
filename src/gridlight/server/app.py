"""FastAPI server hosting a grid animation and streaming frames to renderers.

Provides:
- WebSocket /ws/frames: Stream Frame objects at ~30 FPS
- WebSocket /ws/control: Receive play/pause/resize/reset/configure commands
- REST API for grid state and configuration
"""

from __future__ import annotations

import asyncio
import logging
import random
import threading
import time
from contextlib import asynccontextmanager
from enum import Enum
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect, status
from pydantic import BaseModel, Field, ValidationError

from gridlight import __version__
from gridlight.config import GridConfig, get_grid_config
from gridlight.engine.simulation import apply_config, create_state, rebuild, request_rebuild, tick_world
from gridlight.projection.projector import Frame, frame_to_dict, project

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Mapping

    from gridlight.model.state import SimulationState

logger = logging.getLogger(__name__)

FRAME_STREAM_FPS = 30.0


class SimulationHost:
    """Thread-safe owner of one SimulationState.

    Runs the tick loop on a background thread and hands out projected frames
    to WebSocket/REST endpoints. All state changes go through the lock.
    """

    def __init__(
        self,
        config: GridConfig | None = None,
        width: float | None = None,
        height: float | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Build the initial grid.

        Args:
            config: Grid options; defaults to the environment configuration.
            width: Region width; defaults to ``config.viewport_width``.
            height: Region height; defaults to ``config.viewport_height``.
            rng: Random source for the simulation.
        """
        config = config if config is not None else get_grid_config()
        self._state = create_state(
            config,
            width if width is not None else config.viewport_width,
            height if height is not None else config.viewport_height,
            rng=rng,
        )
        self._lock = threading.Lock()
        self._paused = False
        self._running = False
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._clock_origin = time.monotonic()
        self._latest_frame: Frame = project(self._state)

    @property
    def state(self) -> SimulationState:
        """Current simulation state (do not mutate outside the lock)."""
        with self._lock:
            return self._state

    @property
    def config(self) -> GridConfig:
        with self._lock:
            return self._state.config

    @property
    def paused(self) -> bool:
        with self._lock:
            return self._paused

    @paused.setter
    def paused(self, value: bool) -> None:
        with self._lock:
            self._paused = value

    @property
    def running(self) -> bool:
        return self._running

    @property
    def latest_frame(self) -> Frame:
        with self._lock:
            return self._latest_frame

    def now_ms(self) -> float:
        """Milliseconds since the host was created."""
        return (time.monotonic() - self._clock_origin) * 1000.0

    def tick(self, now_ms: float | None = None) -> None:
        """Execute one simulation tick and refresh the latest frame."""
        if now_ms is None:
            now_ms = self.now_ms()
        with self._lock:
            tick_world(self._state, now_ms)
            self._latest_frame = project(self._state)

    def refresh(self) -> None:
        """Service a pending rebuild without advancing particles."""
        with self._lock:
            if self._state.rebuild_pending:
                rebuild(self._state, self._state.width, self._state.height)
                self._latest_frame = project(self._state)

    def rebuild(self, width: float, height: float) -> None:
        """Schedule a rebuild for a new region size (serviced on the next tick)."""
        with self._lock:
            request_rebuild(self._state, width, height)
        logger.info("Resize requested: %gx%g", width, height)

    def update_config(self, changes: Mapping[str, Any]) -> GridConfig:
        """Apply configuration changes; the grid is rebuilt on the next tick.

        Raises:
            pydantic.ValidationError: If a value has the wrong type.
        """
        with self._lock:
            config = self._state.config.with_updates(changes)
            apply_config(self._state, config)
            return config

    def summary(self) -> dict[str, Any]:
        """Counts describing the current grid, read in one consistent snapshot."""
        with self._lock:
            state = self._state
            return {
                "tick": state.tick,
                "graph_version": state.graph_version,
                "width": state.width,
                "height": state.height,
                "shape": int(state.config.shape),
                "paused": self._paused,
                "node_count": len(state.graph.nodes),
                "edge_count": len(state.graph.edges),
                "entry_node_count": len(state.graph.entry_nodes),
                "particle_count": len(state.particles),
                "trail_count": len(state.trails),
                "explosion_count": len(state.explosions),
                "occupied_edge_count": len(state.occupancy),
            }

    def reset(self) -> None:
        """Drop all particles, trails and explosions and rebuild the grid."""
        with self._lock:
            rebuild(self._state, self._state.width, self._state.height)
            self._latest_frame = project(self._state)

    def start(self) -> None:
        """Start the background tick thread."""
        if self._running:
            return
        self._running = True
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._tick_loop, daemon=True)
        self._thread.start()
        logger.info("Tick thread started")

    def stop(self) -> None:
        """Stop the background tick thread."""
        if not self._running:
            return
        self._running = False
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=2.0)
            self._thread = None
        logger.info("Tick thread stopped")

    def _tick_loop(self) -> None:
        while self._running and not self._stop_event.is_set():
            if self.paused:
                self.refresh()
            else:
                self.tick()
            self._stop_event.wait(timeout=1.0 / self.config.target_fps)


# Global host
_host: SimulationHost | None = None


def get_host() -> SimulationHost:
    """Get or create the global simulation host."""
    global _host
    if _host is None:
        _host = SimulationHost()
    return _host


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager: start/stop the tick thread."""
    host = get_host()
    host.start()
    yield
    host.stop()


app = FastAPI(
    title="Gridlight",
    description="Animated light particles on a square or hexagonal grid",
    version=__version__,
    lifespan=lifespan,
)


# Pydantic models for REST requests/responses


class GridStateResponse(BaseModel):
    """Response model for grid state summary."""

    tick: int = Field(description="Current simulation tick")
    graph_version: int = Field(description="Incremented on every rebuild")
    width: float = Field(description="Region width")
    height: float = Field(description="Region height")
    shape: int = Field(description="4 = squares, 6 = hexagons")
    paused: bool = Field(description="Whether the simulation is paused")
    node_count: int = Field(description="Number of grid nodes")
    edge_count: int = Field(description="Number of grid edges")
    entry_node_count: int = Field(description="Number of spawn nodes")
    particle_count: int = Field(description="Number of live particles")
    trail_count: int = Field(description="Number of visible trails")
    explosion_count: int = Field(description="Number of visible explosions")
    occupied_edge_count: int = Field(description="Number of occupied edges")
    frame_clients: int = Field(description="Connected /ws/frames clients")
    control_clients: int = Field(description="Connected /ws/control clients")


class ConfigResponse(BaseModel):
    """Response model for the active configuration."""

    shape: int
    cell_size: float
    animated: bool
    light_speed: float
    progress_step: float
    min_travel: int
    max_travel: int
    spawn_rate: float
    split_chance: float
    trail_fade_speed: float
    line_color: str
    line_width: float
    light_color: str


class ConfigUpdateRequest(BaseModel):
    """Partial configuration update; omitted fields keep their value."""

    shape: int | str | None = None
    cell_size: float | None = None
    animated: bool | None = None
    light_speed: float | None = None
    progress_step: float | None = None
    min_travel: int | None = None
    max_travel: int | None = None
    spawn_rate: float | None = None
    split_chance: float | None = None
    trail_fade_speed: float | None = None
    line_color: str | None = None
    line_width: float | None = None
    light_color: str | None = None


class ResizeRequest(BaseModel):
    """Request model for a region size change."""

    width: float = Field(description="Region width in pixels")
    height: float = Field(description="Region height in pixels")


class ControlCommandResponse(BaseModel):
    """Response for control commands."""

    success: bool = Field(description="Whether command succeeded")
    message: str = Field(description="Status message")


def _config_response(config: GridConfig) -> ConfigResponse:
    return ConfigResponse(
        shape=int(config.shape),
        cell_size=config.cell_size,
        animated=config.animated,
        light_speed=config.light_speed,
        progress_step=config.progress_step,
        min_travel=config.min_travel,
        max_travel=config.max_travel,
        spawn_rate=config.spawn_rate,
        split_chance=config.split_chance,
        trail_fade_speed=config.trail_fade_speed,
        line_color=config.line_color,
        line_width=config.line_width,
        light_color=config.light_color,
    )


# REST endpoints


@app.get("/api/grid", response_model=GridStateResponse, tags=["grid"])
async def get_grid() -> GridStateResponse:
    """Get current grid state summary."""
    return GridStateResponse(
        **get_host().summary(),
        frame_clients=clients.count(FRAMES_CHANNEL),
        control_clients=clients.count(CONTROL_CHANNEL),
    )


@app.get("/api/config", response_model=ConfigResponse, tags=["config"])
async def get_config() -> ConfigResponse:
    """Get the active configuration."""
    return _config_response(get_host().config)


@app.patch("/api/config", response_model=ConfigResponse, tags=["config"])
async def update_config(request: ConfigUpdateRequest) -> ConfigResponse:
    """Update configuration options; the grid is rebuilt on the next tick."""
    changes = request.model_dump(exclude_none=True)
    try:
        config = get_host().update_config(changes)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    return _config_response(config)


@app.post("/api/grid/resize", response_model=ControlCommandResponse, tags=["grid"])
async def resize_grid(request: ResizeRequest) -> ControlCommandResponse:
    """Rebuild the grid for a new region size."""
    get_host().rebuild(request.width, request.height)
    return ControlCommandResponse(
        success=True,
        message=f"Grid resize to {request.width:g}x{request.height:g} scheduled",
    )


@app.post("/api/grid/reset", response_model=ControlCommandResponse, tags=["grid"])
async def reset_grid() -> ControlCommandResponse:
    """Clear all particles, trails and explosions."""
    get_host().reset()
    logger.info("Grid reset")
    return ControlCommandResponse(success=True, message="Grid reset")


@app.post("/api/grid/pause", response_model=ControlCommandResponse, tags=["grid"])
async def pause_simulation() -> ControlCommandResponse:
    """Pause the simulation."""
    get_host().paused = True
    return ControlCommandResponse(success=True, message="Simulation paused")


@app.post("/api/grid/play", response_model=ControlCommandResponse, tags=["grid"])
async def play_simulation() -> ControlCommandResponse:
    """Resume the simulation."""
    get_host().paused = False
    return ControlCommandResponse(success=True, message="Simulation playing")


# WebSocket connections management


FRAMES_CHANNEL = "frames"
CONTROL_CHANNEL = "control"


class ClientRegistry:
    """Open WebSocket clients per channel, reported by /api/grid."""

    def __init__(self) -> None:
        self._clients: dict[str, list[WebSocket]] = {FRAMES_CHANNEL: [], CONTROL_CHANNEL: []}

    async def connect(self, channel: str, websocket: WebSocket) -> None:
        await websocket.accept()
        self._clients[channel].append(websocket)
        logger.info("%s client connected, total: %d", channel.capitalize(), self.count(channel))

    def disconnect(self, channel: str, websocket: WebSocket) -> None:
        if websocket in self._clients[channel]:
            self._clients[channel].remove(websocket)
        logger.info("%s client disconnected, remaining: %d", channel.capitalize(), self.count(channel))

    def count(self, channel: str) -> int:
        return len(self._clients[channel])


clients = ClientRegistry()


def frame_payload(frame: Frame, last_graph_version: int | None) -> dict[str, Any]:
    """Serialize a frame, leaving out grid lines the client already has."""
    data = frame_to_dict(frame)
    if last_graph_version == frame.graph_version:
        data.pop("lines", None)
    return data


@app.websocket("/ws/frames")
async def websocket_frames(websocket: WebSocket) -> None:
    """WebSocket endpoint for streaming frames at ~30 FPS.

    Grid lines are sent with the first frame and again after every rebuild;
    other frames carry only particles, trails and explosions.
    """
    await clients.connect(FRAMES_CHANNEL, websocket)
    host = get_host()
    interval = 1.0 / FRAME_STREAM_FPS
    sent_version: int | None = None

    try:
        while True:
            start = asyncio.get_running_loop().time()

            frame = host.latest_frame
            await websocket.send_json(frame_payload(frame, sent_version))
            sent_version = frame.graph_version

            elapsed = asyncio.get_running_loop().time() - start
            await asyncio.sleep(max(0.0, interval - elapsed))

    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error("Frame streaming error: %s", str(e))
    finally:
        clients.disconnect(FRAMES_CHANNEL, websocket)


class ControlCommand(Enum):
    """Valid control commands."""

    PLAY = "play"
    PAUSE = "pause"
    RESIZE = "resize"
    RESET = "reset"
    CONFIGURE = "configure"


def handle_control(host: SimulationHost, data: dict[str, Any]) -> dict[str, Any]:
    """Apply one control command and build its reply."""
    cmd_type = str(data.get("type", "")).lower()

    if cmd_type == ControlCommand.PLAY.value:
        host.paused = False
        return {"success": True, "message": "Simulation playing"}
    if cmd_type == ControlCommand.PAUSE.value:
        host.paused = True
        return {"success": True, "message": "Simulation paused"}
    if cmd_type == ControlCommand.RESIZE.value:
        try:
            width = float(data["width"])
            height = float(data["height"])
        except (KeyError, TypeError, ValueError):
            return {"success": False, "message": "Resize needs numeric width and height"}
        host.rebuild(width, height)
        return {"success": True, "message": f"Resize to {width:g}x{height:g} scheduled"}
    if cmd_type == ControlCommand.RESET.value:
        host.reset()
        return {"success": True, "message": "Grid reset"}
    if cmd_type == ControlCommand.CONFIGURE.value:
        options = data.get("options")
        if not isinstance(options, dict):
            return {"success": False, "message": "Configure needs an options object"}
        try:
            host.update_config(options)
        except ValidationError as e:
            return {"success": False, "message": f"Invalid options: {e.error_count()} errors"}
        return {"success": True, "message": "Configuration updated"}
    return {"success": False, "message": f"Unknown command: {cmd_type}"}


@app.websocket("/ws/control")
async def websocket_control(websocket: WebSocket) -> None:
    """WebSocket endpoint for receiving control commands.

    Accepts commands:
    - {"type": "play"} - Resume simulation
    - {"type": "pause"} - Pause simulation
    - {"type": "resize", "width": 800, "height": 600} - Rebuild for a new size
    - {"type": "reset"} - Clear particles, trails and explosions
    - {"type": "configure", "options": {"shape": 6}} - Change options
    """
    await clients.connect(CONTROL_CHANNEL, websocket)
    host = get_host()

    try:
        while True:
            data = await websocket.receive_json()
            if not isinstance(data, dict):
                await websocket.send_json({"success": False, "message": "Expected an object"})
                continue
            await websocket.send_json(handle_control(host, data))

    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error("Control WebSocket error: %s", str(e))
    finally:
        clients.disconnect(CONTROL_CHANNEL, websocket)


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
