"""
Assembly of the standard generation pipeline.

Passes are added in dependency order: elevation first, then temperature and
rainfall (which read elevation), then rivers (which read rainfall) and
finally biomes (which read everything).
"""

from enum import Enum
from typing import Optional, Union

import structlog

from ..config import Settings, settings as default_settings
from .biomes import BiomeLookup, PhysicalSettingTemplate, SimpleBiomeSelector
from .climate import (
    AirflowRainSimulator,
    BiasedNoiseRainGenerator,
    ClimateOptions,
    NoiseRainGenerator,
    PointBasedRainfallSimulator,
    TemperatureGenerator,
)
from .errors import UnknownConfigurationError
from .generator import Generator, WorldGenerator
from .heightmap_generator import (
    HeightmapBias,
    MountainHeightmapAdjuster,
    RidgedFractalMountainGenerator,
    SimplexHeightmapGenerator,
)
from .hydrology import HydrologyOptions, SimpleRiverSimulator
from .world import GridWorld

logger = structlog.get_logger()


class RainfallModel(Enum):
    """Available rainfall strategies; a pipeline uses exactly one."""

    NOISE = "noise"
    BIASED_NOISE = "biased_noise"
    POINT_OCEAN = "point_ocean"
    AIRFLOW = "airflow"


def resolve_rainfall_model(model: Union[RainfallModel, str]) -> RainfallModel:
    """
    Turn a rainfall selector into a ``RainfallModel``.

    Raises:
        UnknownConfigurationError: If the selector names no known model
    """
    if isinstance(model, RainfallModel):
        return model
    if isinstance(model, str):
        try:
            return RainfallModel[model.strip().upper()]
        except KeyError:
            pass
    raise UnknownConfigurationError(f"Unknown rainfall model: {model!r}")


def rainfall_generator(
    model: Union[RainfallModel, str], settings: Optional[Settings] = None
) -> Generator:
    """Create the rainfall pass for a model."""
    settings = settings or default_settings
    model = resolve_rainfall_model(model)
    options = ClimateOptions(ocean_bias_block_size=settings.ocean_bias_block_size)

    if model is RainfallModel.NOISE:
        return NoiseRainGenerator(options)
    if model is RainfallModel.BIASED_NOISE:
        return BiasedNoiseRainGenerator(options)
    if model is RainfallModel.POINT_OCEAN:
        return PointBasedRainfallSimulator(settings.point_ocean_size)
    return AirflowRainSimulator(options)


def build_pipeline(
    template: Union[PhysicalSettingTemplate, BiomeLookup],
    bias: Union[HeightmapBias, str] = HeightmapBias.CONTINENTS,
    rainfall: Union[RainfallModel, str] = RainfallModel.AIRFLOW,
    mountains: bool = True,
    settings: Optional[Settings] = None,
) -> WorldGenerator:
    """
    Build a pipeline producing every physical field of a world.

    Args:
        template: Biome template used by the final pass
        bias: Heightmap bias strategy
        rainfall: Rainfall strategy
        mountains: Whether to add the ridged mountain and adjuster passes
        settings: Settings supplying block sizes and river constants

    Returns:
        Configured WorldGenerator

    Raises:
        UnknownConfigurationError: For an unknown bias or rainfall selector
    """
    settings = settings or default_settings
    climate_options = ClimateOptions(ocean_bias_block_size=settings.ocean_bias_block_size)

    pipeline = WorldGenerator()
    pipeline.add_generator(SimplexHeightmapGenerator(bias))
    if mountains:
        pipeline.add_generator(RidgedFractalMountainGenerator())
        pipeline.add_generator(MountainHeightmapAdjuster())
    pipeline.add_generator(TemperatureGenerator(climate_options))
    pipeline.add_generator(rainfall_generator(rainfall, settings))
    pipeline.add_generator(
        SimpleRiverSimulator(
            HydrologyOptions(
                spring_chance_modifier=settings.spring_chance_modifier,
                river_min_length=settings.river_min_length,
            )
        )
    )
    pipeline.add_generator(SimpleBiomeSelector(template))

    logger.debug(
        "Pipeline built",
        passes=[generator.name for generator in pipeline.generators],
    )
    return pipeline


def new_world(seed, settings: Optional[Settings] = None, **overrides) -> GridWorld:
    """Empty ``GridWorld`` sized and levelled from settings."""
    settings = settings or default_settings
    params = dict(
        width=settings.default_width,
        height=settings.default_height,
        max_elevation=settings.max_elevation,
        sea_level=settings.sea_level,
    )
    params.update(overrides)
    return GridWorld(seed=seed, **params)
