"""
Core terrain generation functionality.
"""

from .graph import Graph, TerrainVertex, Region, VoronoiTerrain
from .tessellation import Decomposition, Tessellator, ScipyVoronoiTessellator, validate_decomposition
from .adjacency import EdgeSet, build_edges
from .noise import NoiseSource, FbmNoise
from .heights import synthesize_positions, synthesize_normals
from .sites import get_jittered_grid, get_random_sites, validate_sites
from .terrain import TerrainConfig, VoronoiTerrainBuilder

__all__ = ['Graph', 'TerrainVertex', 'Region', 'VoronoiTerrain',
           'Decomposition', 'Tessellator', 'ScipyVoronoiTessellator', 'validate_decomposition',
           'EdgeSet', 'build_edges', 'NoiseSource', 'FbmNoise',
           'synthesize_positions', 'synthesize_normals',
           'get_jittered_grid', 'get_random_sites', 'validate_sites',
           'TerrainConfig', 'VoronoiTerrainBuilder']
