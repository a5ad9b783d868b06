"""Grid builder: tessellate a rectangular region into a planar graph.

Both builders over-generate past the visible region so that edges touching
the border still have correctly shaped neighbours.
"""

from __future__ import annotations

import logging
import math

from gridlight.config import GridShape
from gridlight.model.graph import Graph, node_key

logger = logging.getLogger(__name__)

DEFAULT_MAX_CELLS = 250_000


def build_graph(
    shape: GridShape,
    cell_size: float,
    width: float,
    height: float,
    max_cells: int = DEFAULT_MAX_CELLS,
) -> Graph:
    """Build the tessellation of [0, width] x [0, height].

    Degenerate input (non-positive or non-finite sizes, or more than
    ``max_cells`` cells) yields an empty graph instead of an error.

    Args:
        shape: Square or hexagonal tessellation.
        cell_size: Square side length, or hexagon width across corners.
        width: Region width in pixels.
        height: Region height in pixels.
        max_cells: Upper bound on generated cells.

    Returns:
        The graph, with entry nodes along the top boundary.
    """
    if not all(math.isfinite(v) and v > 0 for v in (cell_size, width, height)):
        logger.warning(
            "Degenerate grid request (cell_size=%s, width=%s, height=%s), building empty graph",
            cell_size,
            width,
            height,
        )
        return Graph()

    if shape == GridShape.SQUARE:
        graph = build_square_graph(cell_size, width, height, max_cells)
    else:
        graph = build_hex_graph(cell_size, width, height, max_cells)

    logger.info(
        "Built %s grid %gx%g (cell=%g): nodes=%d, edges=%d, entry=%d",
        GridShape(shape).name.lower(),
        width,
        height,
        cell_size,
        len(graph.nodes),
        len(graph.edges),
        len(graph.entry_nodes),
    )
    return graph


def build_square_graph(
    cell_size: float,
    width: float,
    height: float,
    max_cells: int = DEFAULT_MAX_CELLS,
) -> Graph:
    """Square lattice of ``ceil(w/c)+1`` by ``ceil(h/c)+1`` cells.

    Entry nodes are every node on row 0, left to right.
    """
    graph = Graph()
    cols = math.ceil(width / cell_size) + 1
    rows = math.ceil(height / cell_size) + 1
    if cols * rows > max_cells:
        logger.warning("Square grid needs %d cells (max %d), building empty graph", cols * rows, max_cells)
        return graph

    for i in range(cols + 1):
        for j in range(rows + 1):
            x = i * cell_size
            y = j * cell_size
            if i < cols:
                graph.add_edge(x, y, x + cell_size, y)
            if j < rows:
                graph.add_edge(x, y, x, y + cell_size)

    for i in range(cols + 1):
        node = graph.nodes.get(node_key(i * cell_size, 0.0))
        if node is not None:
            graph.entry_nodes.append(node)
    return graph


def hex_vertices(cx: float, cy: float, size: float) -> list[tuple[float, float]]:
    """Pointy-top hexagon corners, clockwise from the top (angle -90 degrees)."""
    vertices = []
    for i in range(6):
        angle = math.pi / 3 * i - math.pi / 2
        vertices.append((cx + size * math.cos(angle), cy + size * math.sin(angle)))
    return vertices


def build_hex_graph(
    cell_size: float,
    width: float,
    height: float,
    max_cells: int = DEFAULT_MAX_CELLS,
) -> Graph:
    """Offset ("brick") tiling of pointy-top hexagons of circumradius cell_size/2.

    Odd rows shift right by half a hexagon width. Adjacent hexagons share
    vertices and edges; those collapse through node/edge keying. Entry nodes
    are the nodes with 0 <= y <= circumradius, sorted left to right.
    """
    graph = Graph()
    size = cell_size / 2
    hex_width = math.sqrt(3) * size
    vert_spacing = size * 1.5

    cols = math.ceil(width / hex_width) + 2
    rows = math.ceil(height / vert_spacing) + 2
    if (cols + 1) * (rows + 1) > max_cells:
        logger.warning(
            "Hex grid needs %d cells (max %d), building empty graph",
            (cols + 1) * (rows + 1),
            max_cells,
        )
        return graph

    for row in range(-1, rows):
        offset = 0.0 if row % 2 == 0 else hex_width / 2
        for col in range(-1, cols):
            vertices = hex_vertices(col * hex_width + offset, row * vert_spacing, size)
            for i in range(6):
                x1, y1 = vertices[i]
                x2, y2 = vertices[(i + 1) % 6]
                graph.add_edge(x1, y1, x2, y2)

    # Compare on quantized keys so vertices sitting exactly on y=0 or y=size
    # are not lost to float noise.
    top = node_key(0.0, size)[1]
    graph.entry_nodes = sorted(
        (n for n in graph.nodes.values() if 0 <= n.key[1] <= top),
        key=lambda n: n.x,
    )
    return graph
