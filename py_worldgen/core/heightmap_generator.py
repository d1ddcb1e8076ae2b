"""
Heightmap generation passes.

This module implements:
- Simplex noise heightmaps steered by a coarse bias grid
- Random (continents, islands) and hand-authored (three landmasses, single
  landmass) bias grids
- A ridged fractal pass that sharpens mountains on an existing heightmap
- A cubic adjustment that flattens lowlands and sharpens peaks
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence, Tuple, Union

import numpy as np
import structlog

from .errors import UnknownConfigurationError
from .generator import Generator
from .grid import bilinear_interpolate, normalize
from .noise import SimplexNoise
from .world import HeightWorld, read_field, write_field

logger = structlog.get_logger()


class HeightmapBias(Enum):
    """Where landmasses are encouraged to form."""

    NONE = "none"  # Heightmap is left unbiased
    CONTINENTS = "continents"  # A few large landmasses
    ISLANDS = "islands"  # Many small landmasses
    THREE_LANDMASSES = "three_landmasses"  # West, north and east landmasses
    LANDMASS = "landmass"  # One landmass surrounded by water


# (x, y) cells of the authored layouts that are set to full bias
THREE_LANDMASSES_SIZE = 8
THREE_LANDMASSES_CELLS = (
    (1, 3), (1, 4), (1, 5), (2, 4), (2, 5), (2, 6),
    (3, 1), (4, 1), (4, 2),
    (6, 3), (6, 4), (6, 5), (5, 4), (5, 5), (5, 6),
)

LANDMASS_SIZE = 4
LANDMASS_CELLS = ((1, 1), (1, 2), (2, 1), (2, 2))


@dataclass
class HeightmapOptions:
    """Noise and bias grid parameters for heightmap generation."""

    octaves: int = 6
    scale: float = 120
    amplitude: float = 0.5
    lacunarity: float = 2.0
    persistence: float = 0.4

    continent_bias_size: int = 10  # Edge length of the random continent grid
    island_bias_size: int = 20  # Edge length of the random island grid
    bias_threshold: float = 0.6  # Random bias values above this become land


def resolve_heightmap_bias(bias: Union[HeightmapBias, str]) -> HeightmapBias:
    """
    Turn a bias selector into a ``HeightmapBias``.

    Raises:
        UnknownConfigurationError: If the selector names no known bias
    """
    if isinstance(bias, HeightmapBias):
        return bias
    if isinstance(bias, str):
        try:
            return HeightmapBias[bias.strip().upper()]
        except KeyError:
            pass
    raise UnknownConfigurationError(f"Unknown heightmap bias: {bias!r}")


def authored_bias_grid(size: int, cells: Sequence[Tuple[int, int]]) -> np.ndarray:
    """Square bias grid with the listed (x, y) cells set to 1."""
    grid = np.zeros((size, size), dtype=np.float64)
    for x, y in cells:
        grid[y, x] = 1.0
    return grid


def expand_bias_grid(bias_grid: np.ndarray, width: int, height: int) -> np.ndarray:
    """
    Stretch a square bias grid over the whole world by bilinear interpolation.

    Values outside the grid count as zero.

    Returns:
        Array of shape ``(height, width)``
    """
    size = bias_grid.shape[0]
    padded = np.pad(bias_grid, ((0, 1), (0, 1)))

    bias_to_world_x = (size - 1) / width
    bias_to_world_y = (size - 1) / height

    gx = np.arange(width) * bias_to_world_x
    gy = np.arange(height) * bias_to_world_y
    bx = gx.astype(np.int64)
    by = gy.astype(np.int64)

    ul = padded[np.ix_(by, bx)]
    ur = padded[np.ix_(by, bx + 1)]
    ll = padded[np.ix_(by + 1, bx)]
    lr = padded[np.ix_(by + 1, bx + 1)]

    tx = (gx - bx)[np.newaxis, :]
    ty = (gy - by)[:, np.newaxis]
    return bilinear_interpolate(ul, ur, ll, lr, tx, ty)


class SimplexHeightmapGenerator(Generator):
    """
    Produces a heightmap from simplex noise, biased by a ``HeightmapBias``.

    Final elevation is ``max_elevation * noise * bias`` with the noise field
    normalized to [0, 1].
    """

    name = "Simplex Heightmap Generator"
    cell_capabilities = ("height",)
    needs_height_world = True

    def __init__(
        self,
        bias: Union[HeightmapBias, str] = HeightmapBias.NONE,
        options: Optional[HeightmapOptions] = None,
    ):
        """
        Initialize the heightmap generator.

        Args:
            bias: Bias strategy, a ``HeightmapBias`` or its name
            options: Noise and bias grid parameters

        Raises:
            UnknownConfigurationError: If ``bias`` is not a known strategy
        """
        self.bias = resolve_heightmap_bias(bias)
        self.options = options or HeightmapOptions()

        strategies = {
            HeightmapBias.NONE: self._none_bias,
            HeightmapBias.CONTINENTS: self._continent_bias,
            HeightmapBias.ISLANDS: self._island_bias,
            HeightmapBias.THREE_LANDMASSES: self._three_landmasses_bias,
            HeightmapBias.LANDMASS: self._landmass_bias,
        }
        self._create_bias: Callable[[HeightWorld], np.ndarray] = strategies[self.bias]

    def run_generation(self, world: HeightWorld) -> None:
        logger.info(
            "Generating heightmap",
            bias=self.bias.value,
            width=world.width,
            height=world.height,
        )

        bias_map = self._create_bias(world)

        noise = SimplexNoise.labelled(world.seed, "height")
        noise_map = normalize(
            noise.noise_grid(
                world.width,
                world.height,
                octaves=self.options.octaves,
                multiplier=self.options.scale,
                amplitude=self.options.amplitude,
                lacunarity=self.options.lacunarity,
                persistence=self.options.persistence,
            )
        )

        heights = world.max_elevation * noise_map * bias_map
        write_field(world, "height", heights)

        logger.info(
            "Heightmap generated",
            land_cells=int(np.sum(heights >= world.sea_level)),
            max_height=float(heights.max()),
        )

    def random_bias_grid(self, seed, size: int) -> np.ndarray:
        """
        Noise derived bias grid with hard 0/1 values.

        Border cells are forced to 0 so that land never touches the map edge.
        """
        noise = SimplexNoise.labelled(seed, "height_bias")
        grid = normalize(
            noise.noise_grid(
                size, size, octaves=1, multiplier=3, amplitude=0.5,
                lacunarity=2.0, persistence=0.9,
            )
        )

        grid = np.where(grid > self.options.bias_threshold, 1.0, 0.0)
        grid[0, :] = 0
        grid[-1, :] = 0
        grid[:, 0] = 0
        grid[:, -1] = 0
        return grid

    def _none_bias(self, world: HeightWorld) -> np.ndarray:
        return np.ones((world.height, world.width), dtype=np.float64)

    def _continent_bias(self, world: HeightWorld) -> np.ndarray:
        grid = self.random_bias_grid(world.seed, self.options.continent_bias_size)
        return expand_bias_grid(grid, world.width, world.height)

    def _island_bias(self, world: HeightWorld) -> np.ndarray:
        grid = self.random_bias_grid(world.seed, self.options.island_bias_size)
        return expand_bias_grid(grid, world.width, world.height)

    def _three_landmasses_bias(self, world: HeightWorld) -> np.ndarray:
        grid = authored_bias_grid(THREE_LANDMASSES_SIZE, THREE_LANDMASSES_CELLS)
        return expand_bias_grid(grid, world.width, world.height)

    def _landmass_bias(self, world: HeightWorld) -> np.ndarray:
        grid = authored_bias_grid(LANDMASS_SIZE, LANDMASS_CELLS)
        return expand_bias_grid(grid, world.width, world.height)


class RidgedFractalMountainGenerator(Generator):
    """
    Reshapes an existing heightmap with a ridged fractal.

    Blends 70% of the current elevation with 30% of a ridge signal that is
    weighted by that elevation, so high ground gains sharp ridges while
    lowlands stay comparatively flat.
    """

    name = "Ridged Fractal Mountain Generator"
    cell_capabilities = ("height",)
    needs_height_world = True

    def __init__(self, multiplier: float = 250, persistence: float = 0.4):
        self.multiplier = multiplier
        self.persistence = persistence

    def run_generation(self, world: HeightWorld) -> None:
        logger.info("Generating mountain ridges")

        noise = SimplexNoise.labelled(world.seed, "mountain_ridge")
        ridges = normalize(
            np.abs(
                noise.noise_grid(
                    world.width, world.height, octaves=1, multiplier=self.multiplier,
                    amplitude=0.5, lacunarity=2.0, persistence=self.persistence,
                )
            )
        )

        ridge_signal = 1 - (ridges - 0.2) * 1.25
        perc_height = read_field(world, "height") / world.max_elevation

        reshaped = normalize(0.7 * perc_height + 0.3 * ridge_signal * (0.5 + perc_height / 2))
        write_field(world, "height", world.max_elevation * reshaped)


class MountainHeightmapAdjuster(Generator):
    """
    Flattens lowlands and sharpens mountains.

    Heights above sea level are remapped along a cubic curve; heights below
    sea level are left unchanged.
    """

    name = "Mountain Heightmap Adjuster"
    cell_capabilities = ("height",)
    needs_height_world = True

    def run_generation(self, world: HeightWorld) -> None:
        raw = read_field(world, "height") / world.max_elevation
        adjusted = adjust_mountains(raw, world.sea_level / world.max_elevation)
        write_field(world, "height", world.max_elevation * adjusted)


def adjust_mountains(raw_height: np.ndarray, sea_level_perc: float) -> np.ndarray:
    """Apply ``s + (h - s)^3 * 2`` to every height at or above sea level ``s``."""
    return np.where(
        raw_height < sea_level_perc,
        raw_height,
        sea_level_perc + (raw_height - sea_level_perc) ** 3 * 2,
    )
