"""
Core world generation functionality.
"""

from .data import AltitudeCategory, Biome, CellAddress, MoistureCategory, TemperatureCategory
from .errors import DegenerateInputError, MissingCapabilityError, UnknownConfigurationError, WorldGenError
from .noise import SimplexNoise
from .world import Cell, GridWorld
from .ocean_bias import OceanBiaser
from .generator import Generator, WorldGenerator
from .heightmap_generator import (HeightmapBias, HeightmapOptions, SimplexHeightmapGenerator,
                                  RidgedFractalMountainGenerator, MountainHeightmapAdjuster)
from .climate import (ClimateOptions, TemperatureGenerator, NoiseRainGenerator, BiasedNoiseRainGenerator,
                      PointBasedRainfallSimulator, AirflowRainSimulator)
from .hydrology import HydrologyOptions, River, RiverNetwork, RiverOutcome, RiverSegment, SimpleRiverSimulator
from .biomes import SimpleBiomeSelector
from .pipeline import RainfallModel, build_pipeline, new_world

__all__ = ['AltitudeCategory', 'Biome', 'CellAddress', 'MoistureCategory', 'TemperatureCategory',
           'DegenerateInputError', 'MissingCapabilityError', 'UnknownConfigurationError', 'WorldGenError',
           'SimplexNoise', 'Cell', 'GridWorld', 'OceanBiaser', 'Generator', 'WorldGenerator',
           'HeightmapBias', 'HeightmapOptions', 'SimplexHeightmapGenerator',
           'RidgedFractalMountainGenerator', 'MountainHeightmapAdjuster',
           'ClimateOptions', 'TemperatureGenerator', 'NoiseRainGenerator', 'BiasedNoiseRainGenerator',
           'PointBasedRainfallSimulator', 'AirflowRainSimulator',
           'HydrologyOptions', 'River', 'RiverNetwork', 'RiverOutcome', 'RiverSegment', 'SimpleRiverSimulator',
           'SimpleBiomeSelector', 'RainfallModel', 'build_pipeline', 'new_world']
