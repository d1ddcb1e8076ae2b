"""
Climate generation passes for temperature and rainfall.

This module implements:
- Latitude based temperature, cooled near oceans
- Plain noise rainfall
- Noise rainfall biased towards mid-latitudes and coastlines
- Point ocean rainfall driven by prevailing winds
- Iterative cloud advection rainfall

The rainfall passes are alternatives; a pipeline uses one of them. All of
them assume the world spans pole to pole with the equator in the middle row.
"""

import math
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import structlog

from .data import CellAddress
from .generator import Generator
from .grid import normalize
from .noise import SimplexNoise
from .ocean_bias import ocean_bias_field
from .world import HeightWorld, World, ocean_mask, read_field, write_field

logger = structlog.get_logger()


@dataclass
class ClimateOptions:
    """Climate calculation options shared by the temperature and rain passes."""

    ocean_bias_block_size: int = 25  # Edge length of ocean bias blocks, in cells

    # Temperature settings
    temperature_octaves: int = 3
    temperature_scale: float = 100
    temperature_noise_weight: float = 0.2  # Share of noise vs latitude
    ocean_cooling: float = 0.3  # Max fractional cooling next to the ocean

    # Rain noise settings
    rain_octaves: int = 3
    rain_scale: float = 75
    rain_persistence: float = 0.4

    # Share of the ocean bias in the final rainfall blend
    rain_ocean_weight: float = 0.2

    # Airflow simulation
    pickup_rate: float = 2.0  # Cloud mass gained per iteration over ocean
    drop_rate: float = 0.005  # Fraction of cloud dropped per unit elevation


def latitude_period(height: int) -> int:
    """Row period of the wind bands, six bands pole to pole."""
    return max(1, height // 6)


class TemperatureGenerator(Generator):
    """
    Produces temperature from latitude and noise, then cools cells near the
    ocean.
    """

    name = "Temperature Generator"
    cell_capabilities = ("height", "temperature")
    needs_height_world = True

    def __init__(self, options: Optional[ClimateOptions] = None):
        self.options = options or ClimateOptions()

    def run_generation(self, world: HeightWorld) -> None:
        logger.info("Calculating temperatures")

        bias = ocean_bias_field(world, self.options.ocean_bias_block_size)

        noise = SimplexNoise.labelled(world.seed, "temperature")
        noise_map = normalize(
            noise.noise_grid(
                world.width, world.height, octaves=self.options.temperature_octaves,
                multiplier=self.options.temperature_scale, amplitude=0.5,
                lacunarity=2.0, persistence=0.4,
            )
        )

        baseline = latitude_temperature(world.height)[:, np.newaxis]
        weight = self.options.temperature_noise_weight
        cooling = 1.0 - self.options.ocean_cooling * bias

        temperatures = ((1 - weight) * baseline + weight * noise_map) * cooling
        write_field(world, "temperature", temperatures)

        logger.info(
            "Temperatures calculated",
            min_temp=float(temperatures.min()),
            max_temp=float(temperatures.max()),
        )


def latitude_temperature(height: int) -> np.ndarray:
    """
    Triangular baseline temperature per row: 0 at the poles, 1 at the
    equator.
    """
    rows = np.arange(height, dtype=np.float64)
    north = rows / height * 2
    south = (height - rows) / height * 2
    return np.where(rows > height // 2, south, north)


class NoiseRainGenerator(Generator):
    """Produces rainfall from normalized simplex noise only."""

    name = "Simplex Rain Generator"
    cell_capabilities = ("rainfall",)

    def __init__(self, options: Optional[ClimateOptions] = None):
        self.options = options or ClimateOptions()

    def run_generation(self, world: World) -> None:
        logger.info("Generating rainfall from noise")
        write_field(world, "rainfall", _rain_noise(world, self.options))


def _rain_noise(world: World, options: ClimateOptions) -> np.ndarray:
    noise = SimplexNoise.labelled(world.seed, "rain")
    return normalize(
        noise.noise_grid(
            world.width, world.height, octaves=options.rain_octaves,
            multiplier=options.rain_scale, amplitude=0.5, lacunarity=2.0,
            persistence=options.rain_persistence,
        )
    )


class BiasedNoiseRainGenerator(Generator):
    """
    Produces rainfall from noise biased towards the mid-latitudes, as an
    approximation of rain patterns from the coriolis effect, and blended with
    ocean proximity. Only land cells are written.
    """

    name = "Biased Noise Rain Generator"
    cell_capabilities = ("height", "rainfall")
    needs_height_world = True

    def __init__(self, options: Optional[ClimateOptions] = None):
        self.options = options or ClimateOptions()

    def run_generation(self, world: HeightWorld) -> None:
        logger.info("Generating biased noise rainfall")

        bias = ocean_bias_field(world, self.options.ocean_bias_block_size)

        noise = SimplexNoise.labelled(world.seed, "rain")
        raw = noise.noise_grid(
            world.width, world.height, octaves=self.options.rain_octaves,
            multiplier=self.options.rain_scale, amplitude=0.5, lacunarity=2.0,
            persistence=self.options.rain_persistence,
        )

        rainfall = normalize(raw * latitude_rain_bias(world.height)[:, np.newaxis])

        weight = self.options.rain_ocean_weight
        blended = (1 - weight) * rainfall + weight * bias
        write_field(world, "rainfall", blended, mask=~ocean_mask(world))


def latitude_rain_bias(height: int) -> np.ndarray:
    """Per-row rain multiplier in [0.25, 1]."""
    rows = np.arange(height, dtype=np.float64)
    bias = -np.cos(rows / math.pi / (height / 6)) / 2 + 0.5
    return 0.75 * bias + 0.25


class PointBasedRainfallSimulator(Generator):
    """
    Simulates rainfall from prevailing winds blowing off "point oceans".

    Each ocean-majority block is reduced to a single point at its center. A
    land cell receives rain from every point ocean, more when the wind blows
    from that ocean towards the cell and less with distance.
    """

    name = "Point Based Rainfall Simulator"
    cell_capabilities = ("height", "rainfall")
    needs_height_world = True

    def __init__(self, point_ocean_size: int = 50):
        """
        Args:
            point_ocean_size: Edge length of the point ocean blocks, in cells
        """
        if point_ocean_size < 1:
            raise ValueError(f"point_ocean_size must be positive, got {point_ocean_size}")
        self.point_ocean_size = point_ocean_size

    def run_generation(self, world: HeightWorld) -> None:
        ocean = ocean_mask(world)
        oceans = self.identify_point_oceans(ocean)

        logger.info("Simulating point ocean rainfall", point_oceans=len(oceans))

        rainfall = np.where(ocean, 0.0, self.rainfall_field(world.width, world.height, oceans))
        write_field(world, "rainfall", normalize(rainfall))

    def identify_point_oceans(self, ocean: np.ndarray) -> List[CellAddress]:
        """Centers of the blocks where ocean cells outnumber land cells."""
        size = self.point_ocean_size
        height, width = ocean.shape
        oceans = []

        for i in range(width // size):
            for j in range(height // size):
                block = ocean[j * size:(j + 1) * size, i * size:(i + 1) * size]
                ocean_count = int(block.sum())
                if ocean_count > block.size - ocean_count:
                    oceans.append(CellAddress(int((i + 0.5) * size), int((j + 0.5) * size)))

        return oceans

    def rainfall_field(self, width: int, height: int, oceans: List[CellAddress]) -> np.ndarray:
        """Unnormalized rainfall every cell would receive if it were land."""
        ys, xs = np.mgrid[0:height, 0:width]

        horizontal_wind = -np.sin(ys * math.pi / latitude_period(height))
        vertical_wind = np.where(ys > height / 2, -0.1, 0.1)
        wind_dir = np.arctan2(vertical_wind, horizontal_wind)
        wind_x = np.cos(wind_dir)
        wind_y = np.sin(wind_dir)

        min_distance = self.point_ocean_size // 2
        total = np.zeros((height, width), dtype=np.float64)

        for ocean in oceans:
            dx = ocean.x - xs
            dy = ocean.y - ys
            ocean_dir = np.arctan2(dy, dx)

            factor = np.cos(ocean_dir) * wind_x + np.sin(ocean_dir) * wind_y
            factor = factor / 2 + 0.5
            total += factor / np.maximum(min_distance, np.hypot(dx, dy))

        return total


class AirflowRainSimulator(Generator):
    """
    Simulates rainfall by moving clouds with the prevailing east/west winds.

    Every iteration oceans add cloud mass, land drops part of the cloud as
    rain in proportion to its elevation, and clouds then drift one cell east
    or west (wrapping around) depending on the latitude.
    """

    name = "Airflow Rain Simulator"
    cell_capabilities = ("height", "rainfall")
    needs_height_world = True

    def __init__(self, options: Optional[ClimateOptions] = None, iterations: Optional[int] = None):
        """
        Args:
            options: Climate options
            iterations: Number of simulation steps, defaults to the world width
        """
        self.options = options or ClimateOptions()
        self.iterations = iterations

    def run_generation(self, world: HeightWorld) -> None:
        heights = read_field(world, "height")
        ocean = ocean_mask(world, heights)
        elevation = heights / world.max_elevation

        iterations = self.iterations if self.iterations is not None else world.width
        logger.info("Simulating airflow rainfall", iterations=iterations)

        east, west, persist = wind_fractions(world.height)

        rainfall = np.zeros((world.height, world.width), dtype=np.float64)
        clouds = np.zeros((world.height, world.width), dtype=np.float64)

        for _ in range(iterations):
            self.pick_and_drop_rain(rainfall, clouds, ocean, elevation)
            clouds = move_clouds(clouds, east, west, persist)

        bias = ocean_bias_field(world, self.options.ocean_bias_block_size)
        weight = self.options.rain_ocean_weight
        write_field(world, "rainfall", (1 - weight) * normalize(rainfall) + weight * bias)

    def pick_and_drop_rain(
        self,
        rainfall: np.ndarray,
        clouds: np.ndarray,
        ocean: np.ndarray,
        elevation: np.ndarray,
    ) -> None:
        """Add cloud over the ocean and rain it out over land, in place."""
        dropped = np.where(
            ocean, 0.0, np.maximum(0.0, clouds * self.options.drop_rate * elevation)
        )
        rainfall += dropped
        clouds -= dropped
        clouds += np.where(ocean, self.options.pickup_rate, 0.0)


def wind_fractions(height: int):
    """
    Per-row shares of cloud moving east, moving west and staying put.

    Returns:
        Three column arrays of shape ``(height, 1)``
    """
    rows = np.arange(height, dtype=np.float64)
    flow = -np.sin(rows * math.pi / latitude_period(height))

    east = np.maximum(0.0, flow)
    west = np.maximum(0.0, -flow)
    persist = np.maximum(0.0, 1 - (east + west))
    return east[:, np.newaxis], west[:, np.newaxis], persist[:, np.newaxis]


def move_clouds(
    clouds: np.ndarray, east: np.ndarray, west: np.ndarray, persist: np.ndarray
) -> np.ndarray:
    """Advect clouds one step into a new buffer, wrapping at the map edges."""
    return (
        np.roll(clouds * west, -1, axis=1)
        + np.roll(clouds * east, 1, axis=1)
        + clouds * persist
    )
