"""Tests for the terrain builder and the assembled terrain."""

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from voronoi_terrain import (
    DependencyFailure,
    InvalidInput,
    TopologyInconsistency,
    VoronoiTerrain,
    VoronoiTerrainBuilder,
)
from voronoi_terrain.config import Settings
from voronoi_terrain.core.sites import get_jittered_grid
from voronoi_terrain.utils.random import new_seed_source
from fakes import GridTessellator, TEN_SITES, UNIT_SQUARE

DEFAULT_SEED = 42


def build(sites=TEN_SITES, seed=DEFAULT_SEED, **kwargs):
    return VoronoiTerrainBuilder(**kwargs).set_seed(seed).set_sites(sites).build()


def topology(terrain):
    return (
        terrain.terrain_graph.edges,
        terrain.region_graph.edges,
        [v.edges for v in terrain.terrain_graph.vertices],
        [r.edges for r in terrain.region_graph.vertices],
    )


class TestBuilderConfiguration:
    """Test the fluent configuration surface."""

    def test_defaults(self):
        builder = VoronoiTerrainBuilder()
        config = builder.config

        assert config.water_level == 50
        assert config.height_scale == 100
        assert config.sites == []
        assert config.bounds_center == (0.0, 0.0)
        assert config.bounds_radius == 9999.0
        assert 0 <= builder.seed < 2**64

    def test_setters_chain(self):
        builder = VoronoiTerrainBuilder()

        result = (builder.set_seed(7)
                  .set_sites(UNIT_SQUARE)
                  .set_water_level(10)
                  .set_height(20))

        assert result is builder
        config = builder.config
        assert config.seed == 7
        assert config.sites == UNIT_SQUARE
        assert config.water_level == 10
        assert config.height_scale == 20

    def test_config_is_a_copy(self):
        builder = VoronoiTerrainBuilder().set_sites(UNIT_SQUARE)

        builder.config.sites.append((5.0, 5.0))

        assert builder.config.sites == UNIT_SQUARE

    def test_default_seed_from_seed_source(self):
        first = VoronoiTerrainBuilder(seed_source=new_seed_source(123))
        second = VoronoiTerrainBuilder(seed_source=new_seed_source(123))

        assert first.seed == second.seed

    def test_settings_defaults(self):
        settings = Settings(default_water_level=3, default_height_scale=4, bounds_radius=10.0)

        config = VoronoiTerrainBuilder(settings=settings).config

        assert config.water_level == 3
        assert config.height_scale == 4
        assert config.bounds_radius == 10.0

    @pytest.mark.parametrize("setter,value", [
        ("set_seed", -1),
        ("set_seed", 2**64),
        ("set_water_level", -5),
        ("set_water_level", 2**32),
        ("set_height", -1),
        ("set_sites", [(0.0, 0.0, 0.0)]),
        ("set_sites", [1.0, 2.0]),
    ])
    def test_invalid_values(self, setter, value):
        builder = VoronoiTerrainBuilder()

        with pytest.raises(InvalidInput):
            getattr(builder, setter)(value)

    def test_invalid_value_leaves_config_untouched(self):
        builder = VoronoiTerrainBuilder().set_bounds((1.0, 1.0), 5.0)

        with pytest.raises(InvalidInput):
            builder.set_bounds((2.0, 2.0), -1.0)

        assert builder.config.bounds_center == (1.0, 1.0)
        assert builder.config.bounds_radius == 5.0

    def test_rejected_seed_keeps_previous_seed(self):
        builder = VoronoiTerrainBuilder().set_seed(7)

        with pytest.raises(InvalidInput):
            builder.set_seed(2**64)

        assert builder.seed == 7

    def test_fit_bounds(self):
        builder = VoronoiTerrainBuilder().set_sites(TEN_SITES).fit_bounds(margin=0.5)
        config = builder.config

        sites = np.array(TEN_SITES)
        center = np.array(config.bounds_center)
        assert np.abs(sites - center).max() < config.bounds_radius


class TestBuildErrors:
    """Test failures are reported before any partial output exists."""

    @pytest.mark.parametrize("sites", [
        [],
        [(0.5, 0.5)],
        [(0.0, 0.0), (1.0, 1.0)],
    ])
    def test_too_few_sites(self, sites):
        with pytest.raises(InvalidInput, match="At least 3"):
            build(sites)

    def test_duplicate_sites(self):
        with pytest.raises(InvalidInput, match="duplicate"):
            build([(0.0, 0.0), (1.0, 0.0), (0.0, 0.0), (1.0, 1.0)])

    def test_non_finite_site(self):
        with pytest.raises(InvalidInput, match="finite"):
            build([(0.0, 0.0), (1.0, 0.0), (float("inf"), 1.0)])

    def test_near_duplicate_sites(self):
        with pytest.raises(InvalidInput, match="indistinguishable"):
            build([(0.0, 0.0), (1e-13, 0.0), (1.0, 0.0), (0.0, 1.0)])

    def test_sites_too_small_for_frame(self):
        sites = [(0.0, 0.0), (1e-7, 0.0), (0.0, 1e-7), (1e-7, 1e-7), (5e-8, 3e-8)]

        with pytest.raises(InvalidInput, match="fit_bounds"):
            build(sites)

    def test_site_outside_frame(self):
        builder = VoronoiTerrainBuilder().set_sites(UNIT_SQUARE).set_bounds((0.0, 0.0), 0.5)

        with pytest.raises(InvalidInput, match="frame"):
            builder.build()

    def test_invalid_input_checked_before_tessellation(self):
        tessellator = GridTessellator()

        with pytest.raises(InvalidInput):
            build([(0.0, 0.0)], tessellator=tessellator)
        assert tessellator.calls == 0

    def test_tessellator_failure(self):
        class BrokenTessellator:
            def decompose(self, sites):
                raise RuntimeError("engine down")

        with pytest.raises(DependencyFailure, match="engine down"):
            build(UNIT_SQUARE, tessellator=BrokenTessellator())

    def test_malformed_tessellator_output(self):
        class MalformedTessellator:
            def decompose(self, sites):
                return None

        with pytest.raises(DependencyFailure):
            build(UNIT_SQUARE, tessellator=MalformedTessellator())

    def test_inconsistent_winding(self):
        cells = [list(c) for c in GridTessellator.CELLS]
        cells[2] = list(reversed(cells[2]))

        with pytest.raises(TopologyInconsistency):
            build(UNIT_SQUARE, tessellator=GridTessellator(cells))

    def test_noise_failure(self, grid_tessellator):
        class BrokenNoise:
            def height(self, seed, x, y):
                raise ArithmeticError("bad octave")

        with pytest.raises(DependencyFailure, match="bad octave"):
            build(UNIT_SQUARE, tessellator=grid_tessellator, noise=BrokenNoise())


class TestBuildWithFakes:
    """Test assembly against the four-square fake decomposition."""

    def test_counts(self, grid_tessellator, flat_noise):
        terrain = build(UNIT_SQUARE, tessellator=grid_tessellator, noise=flat_noise)

        assert len(terrain.terrain_graph.vertices) == 9
        assert len(terrain.terrain_graph.edges) == 12
        assert len(terrain.region_graph.vertices) == 4
        assert terrain.region_graph.edges == ((1, 0), (2, 0), (3, 1), (3, 2))
        assert terrain.dual_edges == (1, 2, 6, 7)
        assert terrain.boundary_edges() == [0, 3, 4, 5, 8, 9, 10, 11]

    def test_records(self, grid_tessellator, slope_noise):
        terrain = build(UNIT_SQUARE, seed=0, tessellator=grid_tessellator, noise=slope_noise)

        center = terrain.terrain_graph.vertices[4]
        np.testing.assert_allclose(center.position, [1.0, 1.0, 0.3])
        np.testing.assert_array_equal(center.normal, [0.0, 0.0, 0.0])
        assert center.edges == (1, 2, 6, 7)

        for region in terrain.region_graph.vertices:
            np.testing.assert_array_equal(region.center, [0.0, 0.0, 0.0])
            assert np.linalg.norm(region.normal) == pytest.approx(1.0)
            assert region.normal[2] > 0

    def test_water_level_passed_through(self, grid_tessellator, flat_noise):
        terrain = (VoronoiTerrainBuilder(tessellator=grid_tessellator, noise=flat_noise)
                   .set_sites(UNIT_SQUARE)
                   .set_water_level(75)
                   .build())

        assert terrain.water_level == 75


class TestBuildWithScipy:
    """Test terrain properties on real Voronoi decompositions."""

    def test_unit_square_golden(self):
        terrain = build(UNIT_SQUARE)

        assert len(terrain.terrain_graph.vertices) == 9
        assert len(terrain.terrain_graph.edges) == 12
        assert len(terrain.region_graph.vertices) == 4
        assert len(terrain.region_graph.edges) == 4
        assert len(terrain.boundary_edges()) == 8

    def test_no_dangling_indices(self):
        terrain = build(get_jittered_grid(200, 200, 20, seed=5), seed=1)

        terrain.terrain_graph.validate()
        terrain.region_graph.validate()
        n_terrain_edges = len(terrain.terrain_graph.edges)
        assert all(0 <= i < n_terrain_edges for i in terrain.dual_edges)

    def test_no_duplicate_terrain_edges(self):
        terrain = build(get_jittered_grid(200, 200, 20, seed=5), seed=1)

        undirected = {frozenset(edge) for edge in terrain.terrain_graph.edges}
        assert len(undirected) == len(terrain.terrain_graph.edges)

    def test_region_adjacency_simple(self):
        terrain = build(get_jittered_grid(200, 200, 20, seed=5), seed=1)

        pairs = [frozenset(edge) for edge in terrain.region_graph.edges]
        assert all(len(pair) == 2 for pair in pairs)
        assert len(set(pairs)) == len(pairs)

    def test_duality(self):
        terrain = build(get_jittered_grid(200, 200, 20, seed=5), seed=1)

        n_interior = len(terrain.terrain_graph.edges) - len(terrain.boundary_edges())
        assert n_interior == len(terrain.region_graph.edges)
        assert len(set(terrain.dual_edges)) == len(terrain.dual_edges)

    def test_euler_characteristic(self):
        terrain = build(get_jittered_grid(200, 200, 20, seed=5), seed=1)

        v = len(terrain.terrain_graph.vertices)
        e = len(terrain.terrain_graph.edges)
        f = len(terrain.region_graph.vertices)
        # The union of cells is a disc, so the outer face is the missing 1
        assert v - e + f == 1

    def test_deterministic(self):
        first = build(TEN_SITES, seed=42)
        second = build(TEN_SITES, seed=42)

        np.testing.assert_array_equal(first.heights, second.heights)
        assert topology(first) == topology(second)

    def test_seed_changes_heights_only(self):
        first = build(TEN_SITES, seed=1)
        second = build(TEN_SITES, seed=2)

        assert topology(first) == topology(second)
        assert not np.array_equal(first.heights, second.heights)

    def test_concurrent_builds(self):
        with ThreadPoolExecutor(max_workers=4) as pool:
            terrains = list(pool.map(lambda _: build(TEN_SITES, seed=42), range(4)))

        for terrain in terrains[1:]:
            np.testing.assert_array_equal(terrain.heights, terrains[0].heights)
            assert topology(terrain) == topology(terrains[0])

    def test_terrain_is_read_only(self):
        terrain = build(TEN_SITES)

        assert isinstance(terrain, VoronoiTerrain)
        with pytest.raises(AttributeError):
            terrain.water_level = 0
        with pytest.raises(ValueError):
            terrain.terrain_graph.vertices[0].position[2] = 0.0
