"""
Procedural terrain over a Voronoi decomposition of 2D sites.
"""

from .core import (
    Graph,
    TerrainVertex,
    Region,
    VoronoiTerrain,
    VoronoiTerrainBuilder,
    TerrainConfig,
)
from .errors import TerrainError, InvalidInput, TopologyInconsistency, DependencyFailure

__version__ = "0.1.0"

__all__ = ['Graph', 'TerrainVertex', 'Region', 'VoronoiTerrain', 'VoronoiTerrainBuilder',
           'TerrainConfig', 'TerrainError', 'InvalidInput', 'TopologyInconsistency',
           'DependencyFailure']
