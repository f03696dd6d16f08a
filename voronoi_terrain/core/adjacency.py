"""
Terrain edge and region adjacency construction.

Cells arrive wound the same way, so a boundary shared by two cells is walked
in opposite directions by each of them. Looking up the reverse of every
directed edge is enough to find shared edges and neighbouring regions
without comparing any coordinates.
"""

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import structlog

from ..errors import TopologyInconsistency

logger = structlog.get_logger()

Edge = Tuple[int, int]


@dataclass
class EdgeSet:
    """Edges derived from a cell list.

    Attributes:
        terrain_edges: Undirected vertex edges, each stored once in the
            direction it was first walked
        region_edges: Undirected region adjacencies
        edges_by_vertex: Terrain edge indices touching each vertex. Each
            edge is listed at both endpoints when it is created, so the
            order is edge creation order, not the order cells are walked.
        edges_by_region: Region edge indices touching each region
        dual_edges: Terrain edge crossed by each region edge
    """
    terrain_edges: List[Edge]
    region_edges: List[Edge]
    edges_by_vertex: List[List[int]]
    edges_by_region: List[List[int]]
    dual_edges: List[int]


def build_edges(cells: Sequence[Sequence[int]], n_vertices: int) -> EdgeSet:
    """
    Deduplicate cell edges and derive the region adjacency graph.

    Args:
        cells: Cells as vertex index lists, all wound the same way
        n_vertices: Number of vertices the cells index into

    Returns:
        EdgeSet with terrain and region edges

    Raises:
        TopologyInconsistency: If a directed edge is walked twice, an edge
            is shared by more than two cells or a cell borders itself
    """
    terrain_edges: List[Edge] = []
    region_edges: List[Edge] = []
    dual_edges: List[int] = []
    edges_by_vertex: List[List[int]] = [[] for _ in range(n_vertices)]
    edges_by_region: List[List[int]] = [[] for _ in range(len(cells))]

    # Directed edge -> (terrain edge index, region that walked it)
    walked: Dict[Edge, Tuple[int, int]] = {}

    for region_index, cell in enumerate(cells):
        for position, current in enumerate(cell):
            following = cell[(position + 1) % len(cell)]
            edge = (current, following)

            if edge in walked:
                other_region = walked[edge][1]
                raise TopologyInconsistency(
                    f"Edge {edge} is walked in the same direction by regions "
                    f"{other_region} and {region_index}; winding is inconsistent "
                    f"or the edge borders more than two regions"
                )

            reverse = (following, current)
            if reverse in walked:
                edge_index, other_region = walked[reverse]
                if other_region == region_index:
                    raise TopologyInconsistency(
                        f"Region {region_index} borders itself along {edge}"
                    )
                region_edge_index = len(region_edges)
                region_edges.append((region_index, other_region))
                dual_edges.append(edge_index)
                edges_by_region[region_index].append(region_edge_index)
                edges_by_region[other_region].append(region_edge_index)
            else:
                edge_index = len(terrain_edges)
                terrain_edges.append(edge)
                edges_by_vertex[current].append(edge_index)
                edges_by_vertex[following].append(edge_index)

            walked[edge] = (edge_index, region_index)

    logger.info("Edges built",
                terrain_edges=len(terrain_edges),
                region_edges=len(region_edges),
                boundary_edges=len(terrain_edges) - len(region_edges))

    return EdgeSet(
        terrain_edges=terrain_edges,
        region_edges=region_edges,
        edges_by_vertex=edges_by_vertex,
        edges_by_region=edges_by_region,
        dual_edges=dual_edges,
    )
