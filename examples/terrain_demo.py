#!/usr/bin/env python3
"""
Build a terrain from a jittered grid of sites and print a summary.

Usage:
    python examples/terrain_demo.py [seed]
"""

import sys

import numpy as np
import structlog

from voronoi_terrain import VoronoiTerrainBuilder
from voronoi_terrain.core.sites import get_jittered_grid
from voronoi_terrain.utils.logging import configure_logging

logger = structlog.get_logger()


def main():
    configure_logging(fmt="console")
    seed = int(sys.argv[1]) if len(sys.argv) > 1 else 42

    sites = get_jittered_grid(400, 300, 25, seed=seed)
    terrain = (VoronoiTerrainBuilder()
               .set_seed(seed)
               .set_sites(sites)
               .fit_bounds()
               .build())

    heights = terrain.heights
    degrees = [terrain.region_graph.degree(i) for i in range(len(terrain.region_graph))]

    print(f"Sites:            {len(sites)}")
    print(f"Terrain vertices: {len(terrain.terrain_graph.vertices)}")
    print(f"Terrain edges:    {len(terrain.terrain_graph.edges)}")
    print(f"Boundary edges:   {len(terrain.boundary_edges())}")
    print(f"Regions:          {len(terrain.region_graph.vertices)}")
    print(f"Region edges:     {len(terrain.region_graph.edges)}")
    print(f"Mean neighbours:  {np.mean(degrees):.2f}")
    print(f"Height range:     {heights.min():.3f} .. {heights.max():.3f}")


if __name__ == "__main__":
    main()
