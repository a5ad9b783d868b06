"""Planar grid graph: quantized nodes, undirected edges and an adjacency map.

Node identity is a pair of integers obtained by scaling pixel coordinates by
``10 ** KEY_PRECISION`` and rounding. Two decimal digits keep shared hexagon
vertices (computed from different hexagon centres, so they drift in the last
bits) on the same key while still separating nodes a hundredth of a pixel
apart.

Coordinates are snapped to ``SNAP_DIGITS`` decimals before scaling. Cell sizes
like 37.3 put shared vertices exactly on a half-hundredth (46.625), where drift
would otherwise round the two copies of one vertex in opposite directions.
"""

from __future__ import annotations

from dataclasses import dataclass, field

KEY_PRECISION = 2  # decimal digits kept when quantizing coordinates
SNAP_DIGITS = 6  # float drift is absorbed at this many decimals
_KEY_SCALE = 10**KEY_PRECISION

NodeKey = tuple[int, int]
EdgeKey = tuple[NodeKey, NodeKey]


def node_key(x: float, y: float) -> NodeKey:
    """Quantize a coordinate to its node key."""
    return (
        round(round(x, SNAP_DIGITS) * _KEY_SCALE),
        round(round(y, SNAP_DIGITS) * _KEY_SCALE),
    )


def edge_key(a: Node, b: Node) -> EdgeKey:
    """Direction-independent key for the edge between two nodes."""
    if a.key <= b.key:
        return (a.key, b.key)
    return (b.key, a.key)


def format_edge_key(key: EdgeKey) -> str:
    """Render an edge key as ``"x1,y1-x2,y2"`` (quantized units)."""
    (x1, y1), (x2, y2) = key
    return f"{x1},{y1}-{x2},{y2}"


@dataclass(eq=False)
class Node:
    """A grid vertex. Compared by identity; ``key`` is its quantized position."""

    x: float
    y: float
    key: NodeKey


@dataclass(eq=False)
class Edge:
    """Undirected connection between two nodes."""

    a: Node
    b: Node
    key: EdgeKey

    def other(self, node: Node) -> Node:
        """Return the endpoint that is not ``node``."""
        return self.b if node.key == self.a.key else self.a


@dataclass
class Graph:
    """Nodes, edges, adjacency and the entry (spawn) nodes of one tessellation.

    Edges are only ever added through :meth:`add_edge`, which updates the
    adjacency map in the same step so the two can never disagree.
    """

    nodes: dict[NodeKey, Node] = field(default_factory=dict)
    edges: list[Edge] = field(default_factory=list)
    adjacency: dict[NodeKey, list[Edge]] = field(default_factory=dict)
    entry_nodes: list[Node] = field(default_factory=list)

    # edge key → edge, for dedup during construction
    _edge_index: dict[EdgeKey, Edge] = field(default_factory=dict, repr=False)

    def get_or_create_node(self, x: float, y: float) -> Node:
        """Return the node at the quantized position of (x, y), creating it if new."""
        key = node_key(x, y)
        node = self.nodes.get(key)
        if node is None:
            node = Node(x=x, y=y, key=key)
            self.nodes[key] = node
        return node

    def add_edge(self, x1: float, y1: float, x2: float, y2: float) -> Edge | None:
        """Connect two coordinates.

        Returns the new edge, or None when the edge already exists or both
        points quantize to the same node.
        """
        a = self.get_or_create_node(x1, y1)
        b = self.get_or_create_node(x2, y2)
        if a is b:
            return None

        key = edge_key(a, b)
        if key in self._edge_index:
            return None

        edge = Edge(a=a, b=b, key=key)
        self._edge_index[key] = edge
        self.edges.append(edge)
        self.adjacency.setdefault(a.key, []).append(edge)
        self.adjacency.setdefault(b.key, []).append(edge)
        return edge

    def get_edge(self, a: Node, b: Node) -> Edge | None:
        """Return the edge joining ``a`` and ``b``, if any."""
        return self._edge_index.get(edge_key(a, b))

    def neighbors(self, node: Node, exclude: Node | None = None) -> list[Node]:
        """Nodes sharing an edge with ``node``, in edge insertion order.

        Args:
            node: Node whose neighbours are wanted.
            exclude: Optional node to leave out (the node just arrived from).
        """
        result = []
        for edge in self.adjacency.get(node.key, ()):
            other = edge.other(node)
            if exclude is not None and other.key == exclude.key:
                continue
            result.append(other)
        return result

    @property
    def is_empty(self) -> bool:
        return not self.edges
