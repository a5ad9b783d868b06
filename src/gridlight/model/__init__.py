"""Domain model: Node, Edge, Graph, Particle, Trail, Explosion, SimulationState."""

from gridlight.model.graph import (
    KEY_PRECISION,
    Edge,
    EdgeKey,
    Graph,
    Node,
    NodeKey,
    edge_key,
    format_edge_key,
    node_key,
)
from gridlight.model.particle import Particle
from gridlight.model.state import SimulationState
from gridlight.model.trail import Explosion, Trail

__all__ = [
    "KEY_PRECISION",
    "Edge",
    "EdgeKey",
    "Explosion",
    "Graph",
    "Node",
    "NodeKey",
    "Particle",
    "SimulationState",
    "Trail",
    "edge_key",
    "format_edge_key",
    "node_key",
]
