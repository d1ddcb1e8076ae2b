"""
End-to-end tests for the standard pipeline.
"""

import pytest
import numpy as np

from py_worldgen.config import Settings
from py_worldgen.core.biomes import SimpleBiomeSelector
from py_worldgen.core.climate import (
    AirflowRainSimulator,
    BiasedNoiseRainGenerator,
    NoiseRainGenerator,
    PointBasedRainfallSimulator,
)
from py_worldgen.core.data import AltitudeCategory, Biome
from py_worldgen.core.errors import UnknownConfigurationError
from py_worldgen.core.heightmap_generator import HeightmapBias, SimplexHeightmapGenerator
from py_worldgen.core.hydrology import RiverOutcome, SimpleRiverSimulator
from py_worldgen.core.noise import SimplexNoise
from py_worldgen.core.pipeline import (
    RainfallModel,
    build_pipeline,
    new_world,
    rainfall_generator,
    resolve_rainfall_model,
)
from py_worldgen.core.world import read_field


def altitude_template(altitude, temperature, moisture):
    return altitude


class BiomeTemplate:
    """Small template covering every category triple."""

    def get_biome_for(self, altitude, temperature, moisture):
        if altitude is AltitudeCategory.OCEAN:
            return Biome("ocean")
        if altitude is AltitudeCategory.HIGH:
            return Biome("mountain")
        if moisture.value >= 2:
            return Biome("forest")
        return Biome("grassland")


@pytest.fixture
def settings():
    return Settings(
        default_width=60,
        default_height=40,
        ocean_bias_block_size=10,
        point_ocean_size=10,
        spring_chance_modifier=0.05,
    )


class TestRainfallSelection:
    """Test rainfall model resolution."""

    @pytest.mark.parametrize(
        "selector,expected_type",
        [
            ("noise", NoiseRainGenerator),
            ("Biased_Noise", BiasedNoiseRainGenerator),
            (RainfallModel.POINT_OCEAN, PointBasedRainfallSimulator),
            ("airflow", AirflowRainSimulator),
        ],
    )
    def test_rainfall_generator(self, selector, expected_type, settings):
        assert isinstance(rainfall_generator(selector, settings), expected_type)

    def test_unknown_model(self):
        with pytest.raises(UnknownConfigurationError):
            resolve_rainfall_model("monsoon")

    def test_point_ocean_size_from_settings(self, settings):
        generator = rainfall_generator(RainfallModel.POINT_OCEAN, settings)
        assert generator.point_ocean_size == 10


class TestBuildPipeline:
    """Test standard pipeline assembly."""

    def test_pass_order(self, settings):
        pipeline = build_pipeline(BiomeTemplate(), settings=settings)
        names = [g.name for g in pipeline.generators]

        assert names == [
            "Simplex Heightmap Generator",
            "Ridged Fractal Mountain Generator",
            "Mountain Heightmap Adjuster",
            "Temperature Generator",
            "Airflow Rain Simulator",
            "Simple River Simulator",
            "Simple Biome Selector",
        ]

    def test_without_mountains(self, settings):
        pipeline = build_pipeline(BiomeTemplate(), mountains=False, settings=settings)

        assert len(pipeline.generators) == 5

    def test_settings_reach_river_simulator(self, settings):
        pipeline = build_pipeline(BiomeTemplate(), settings=settings)
        rivers = next(g for g in pipeline.generators if isinstance(g, SimpleRiverSimulator))

        assert rivers.options.spring_chance_modifier == 0.05

    def test_unknown_selectors(self, settings):
        with pytest.raises(UnknownConfigurationError):
            build_pipeline(BiomeTemplate(), bias="pangaea", settings=settings)
        with pytest.raises(UnknownConfigurationError):
            build_pipeline(BiomeTemplate(), rainfall="monsoon", settings=settings)

    def test_new_world_uses_settings(self, settings):
        world = new_world("seed", settings, width=12)

        assert world.width == 12
        assert world.height == 40
        assert world.sea_level == 50.0


class TestEndToEnd:
    """Run complete pipelines on small worlds."""

    @pytest.mark.parametrize("rainfall", list(RainfallModel))
    @pytest.mark.parametrize("bias", [HeightmapBias.CONTINENTS, HeightmapBias.LANDMASS])
    def test_full_generation(self, settings, bias, rainfall):
        world = new_world("end_to_end", settings)
        messages = []

        build_pipeline(BiomeTemplate(), bias=bias, rainfall=rainfall, settings=settings) \
            .run_generation(world, on_log=messages.append)

        heights = read_field(world, "height")
        rainfall_field = read_field(world, "rainfall")
        temperatures = read_field(world, "temperature")

        assert heights.min() >= 0.0
        assert heights.max() <= world.max_elevation + 1e-9
        assert rainfall_field.min() >= 0.0
        assert rainfall_field.max() <= 1.0
        assert temperatures.min() >= 0.0
        assert all(world.get_cell(x, y).biome is not None
                   for y in range(world.height) for x in range(world.width))
        assert len(messages) == 14

    def test_same_seed_same_world(self, settings):
        first = new_world(2024, settings)
        second = new_world(2024, settings)

        build_pipeline(BiomeTemplate(), settings=settings).run_generation(first)
        build_pipeline(BiomeTemplate(), settings=settings).run_generation(second)

        for attribute in ("height", "temperature", "rainfall"):
            np.testing.assert_array_equal(read_field(first, attribute), read_field(second, attribute))
        assert [r.source for r in first.rivers] == [r.source for r in second.rivers]

    def test_rivers_flow_to_ocean_or_merge(self, settings):
        world = new_world("rivers", settings)
        pipeline = build_pipeline(BiomeTemplate(), settings=settings)
        pipeline.run_generation(world)

        for river in world.rivers:
            mouth = river.segments[-1]
            if river.tributary_of is None:
                assert world.get_cell(*mouth.location).height < world.sea_level
            else:
                assert mouth.downstream is not None

        simulator = pipeline.generators[5]
        accepted = simulator.outcomes[RiverOutcome.MERGED] + \
            simulator.outcomes[RiverOutcome.TERMINATED_OCEAN]
        assert accepted == len(world.rivers)

    def test_low_world_with_ridge(self, world_from_heights):
        """
        A world below sea level except one tall column keeps the noise ranking
        under unbiased generation and classifies ocean cells as ocean.
        """
        heights = np.full((12, 16), 40.0)
        heights[:, 5] = 90.0
        world = world_from_heights(heights, seed="ridge", temperature=0.5, rainfall=0.5)

        SimpleBiomeSelector(altitude_template).run_generation(world)

        for y in range(world.height):
            row = [world.get_cell(x, y).biome for x in range(world.width)]
            assert row[5] is AltitudeCategory.HIGH
            assert all(b is AltitudeCategory.OCEAN for x, b in enumerate(row) if x != 5)

        SimplexHeightmapGenerator(HeightmapBias.NONE).run_generation(world)
        generated = read_field(world, "height")

        raw = SimplexNoise.labelled("ridge", "height").noise_grid(
            16, 12, octaves=6, multiplier=120, amplitude=0.5, lacunarity=2.0, persistence=0.4,
        )
        np.testing.assert_array_equal(
            np.argsort(generated, axis=None, kind="stable"),
            np.argsort(raw, axis=None, kind="stable"),
        )

    def test_all_ocean_row(self, world_from_heights):
        heights = np.full((6, 8), 70.0)
        heights[2, :] = 40.0
        world = world_from_heights(heights, temperature=0.2, rainfall=0.9)

        SimpleBiomeSelector(altitude_template).run_generation(world)

        assert all(world.get_cell(x, 2).biome is AltitudeCategory.OCEAN for x in range(8))
        assert world.get_cell(0, 1).biome is not AltitudeCategory.OCEAN
