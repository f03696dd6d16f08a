"""Index based graph containers for the terrain and region graphs."""

from dataclasses import dataclass, field
from typing import Generic, List, Tuple, TypeVar

import numpy as np

from ..errors import TopologyInconsistency

T = TypeVar("T")

Edge = Tuple[int, int]


def _frozen(values, dtype=np.float64) -> np.ndarray:
    """Copy ``values`` into a read-only array."""
    array = np.array(values, dtype=dtype)
    array.flags.writeable = False
    return array


@dataclass(frozen=True, eq=False)
class TerrainVertex:
    """A decomposition vertex lifted into 3D.

    ``edges`` holds indices into the terrain graph's edge sequence.
    """
    position: np.ndarray
    normal: np.ndarray
    edges: Tuple[int, ...]

    def __post_init__(self):
        object.__setattr__(self, "position", _frozen(self.position))
        object.__setattr__(self, "normal", _frozen(self.normal))
        object.__setattr__(self, "edges", tuple(self.edges))

    @property
    def height(self) -> float:
        return float(self.position[2])


@dataclass(frozen=True, eq=False)
class Region:
    """One decomposition cell.

    ``edges`` holds indices into the region graph's edge sequence, i.e. the
    adjacencies this cell takes part in. The cell's own polygon edges are
    not stored here.
    """
    center: np.ndarray
    normal: np.ndarray
    edges: Tuple[int, ...]

    def __post_init__(self):
        object.__setattr__(self, "center", _frozen(self.center))
        object.__setattr__(self, "normal", _frozen(self.normal))
        object.__setattr__(self, "edges", tuple(self.edges))


@dataclass(frozen=True)
class Graph(Generic[T]):
    """Ordered vertices plus undirected edges given as index pairs."""
    vertices: Tuple[T, ...] = field(default_factory=tuple)
    edges: Tuple[Edge, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "vertices", tuple(self.vertices))
        object.__setattr__(self, "edges", tuple((int(a), int(b)) for a, b in self.edges))

    def __len__(self) -> int:
        return len(self.vertices)

    def neighbors(self, index: int) -> List[int]:
        """Vertex indices joined to ``index`` through one of its edges."""
        result = []
        for edge_index in self.vertices[index].edges:
            a, b = self.edges[edge_index]
            result.append(b if a == index else a)
        return result

    def degree(self, index: int) -> int:
        return len(self.vertices[index].edges)

    def validate(self) -> None:
        """
        Check that no edge or incidence list points outside the graph.

        Raises:
            TopologyInconsistency: On the first dangling index found
        """
        n_vertices = len(self.vertices)
        n_edges = len(self.edges)

        for edge_index, (a, b) in enumerate(self.edges):
            if not (0 <= a < n_vertices and 0 <= b < n_vertices):
                raise TopologyInconsistency(
                    f"Edge {edge_index} ({a}, {b}) references a missing vertex"
                )

        for vertex_index, vertex in enumerate(self.vertices):
            for edge_index in vertex.edges:
                if not 0 <= edge_index < n_edges:
                    raise TopologyInconsistency(
                        f"Vertex {vertex_index} references missing edge {edge_index}"
                    )
                if vertex_index not in self.edges[edge_index]:
                    raise TopologyInconsistency(
                        f"Vertex {vertex_index} lists edge {edge_index} "
                        f"{self.edges[edge_index]} which does not touch it"
                    )


@dataclass(frozen=True)
class VoronoiTerrain:
    """The finished terrain: vertex mesh, region adjacency and water level.

    ``dual_edges[i]`` is the terrain edge crossed by region edge ``i``, so
    the two graphs can be walked together.
    """
    terrain_graph: Graph[TerrainVertex]
    region_graph: Graph[Region]
    water_level: int
    dual_edges: Tuple[int, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "dual_edges", tuple(int(i) for i in self.dual_edges))

    @staticmethod
    def builder(**kwargs) -> "VoronoiTerrainBuilder":  # noqa: F821
        from .terrain import VoronoiTerrainBuilder

        return VoronoiTerrainBuilder(**kwargs)

    @property
    def heights(self) -> np.ndarray:
        """Read-only array of vertex heights in vertex order."""
        return _frozen([v.position[2] for v in self.terrain_graph.vertices])

    def boundary_edges(self) -> List[int]:
        """Indices of terrain edges with no neighbouring region on one side."""
        interior = set(self.dual_edges)
        return [i for i in range(len(self.terrain_graph.edges)) if i not in interior]
