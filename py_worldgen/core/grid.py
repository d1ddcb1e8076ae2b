"""
Utility functions for working with grid fields.

This module implements:
- Normalization and interpolation of 2D fields
- Index wrapping and bounds-safe lookup
- Mapping raw height, temperature and rainfall to biome categories
- Small neighbourhood and summary helpers over cell addresses
"""

from collections import Counter
from typing import Hashable, Iterable, List, TypeVar, Union

import numpy as np

from .data import AltitudeCategory, CellAddress, MoistureCategory, TemperatureCategory
from .errors import DegenerateInputError

H = TypeVar("H", bound=Hashable)

Number = Union[float, np.ndarray]

# Fraction of the maximum elevation at which terrain counts as mountainous
MOUNTAIN_LEVEL_PERC = 0.5


def normalize(grid: np.ndarray) -> np.ndarray:
    """
    Scale all values of a field linearly into [0, 1].

    Args:
        grid: Input field

    Returns:
        New array with the minimum mapped to 0 and the maximum to 1

    Raises:
        DegenerateInputError: If the field is constant
    """
    values = np.asarray(grid, dtype=np.float64)
    low = values.min()
    high = values.max()

    if low >= high:
        raise DegenerateInputError(
            f"Cannot normalize a field where maximum == minimum ({high})"
        )

    return (values - low) / (high - low)


def interpolate(a: Number, b: Number, t: Number) -> Number:
    """Linearly interpolate between ``a`` and ``b`` by ``t``."""
    return (1 - t) * a + t * b


def bilinear_interpolate(
    ul: Number, ur: Number, ll: Number, lr: Number, tx: Number, ty: Number
) -> Number:
    """
    Bilinearly interpolate between four corner values.

    Args:
        ul, ur: Upper left and upper right values
        ll, lr: Lower left and lower right values
        tx: Horizontal factor in [0, 1]
        ty: Vertical factor in [0, 1]
    """
    upper = interpolate(ul, ur, tx)
    lower = interpolate(ll, lr, tx)
    return interpolate(upper, lower, ty)


def value_or_default(grid: np.ndarray, x: int, y: int, default: float) -> float:
    """Return ``grid[y, x]``, or ``default`` when (x, y) is out of bounds."""
    height, width = grid.shape
    if x < 0 or x >= width or y < 0 or y >= height:
        return default
    return float(grid[y, x])


def wrap_index(index: int, size: int) -> int:
    """Wrap an index into [0, size)."""
    return index % size


def map_altitude_to_category(
    altitude: float, max_elevation: float, sea_level: float
) -> AltitudeCategory:
    """
    Map a cell altitude to an altitude category.

    Heights strictly below sea level are ocean. The land range is split at the
    midpoint between sea level and the mountain threshold, and at the
    threshold itself.
    """
    alt_perc = altitude / max_elevation
    sea_level_perc = sea_level / max_elevation

    if alt_perc < sea_level_perc:
        return AltitudeCategory.OCEAN

    alt_perc_mid = (MOUNTAIN_LEVEL_PERC - sea_level_perc) / 2 + sea_level_perc

    if alt_perc < alt_perc_mid:
        return AltitudeCategory.LOW
    if alt_perc < MOUNTAIN_LEVEL_PERC:
        return AltitudeCategory.MEDIUM
    return AltitudeCategory.HIGH


def map_temperature_to_category(temperature: float) -> TemperatureCategory:
    """Map a normalized temperature to its quartile category."""
    if temperature < 0.25:
        return TemperatureCategory.COLD
    if temperature < 0.5:
        return TemperatureCategory.COOL
    if temperature < 0.75:
        return TemperatureCategory.WARM
    return TemperatureCategory.HOT


def map_moisture_to_category(moisture: float) -> MoistureCategory:
    """Map a normalized rainfall value to its quartile category."""
    if moisture < 0.25:
        return MoistureCategory.ARID
    if moisture < 0.5:
        return MoistureCategory.DRY
    if moisture < 0.75:
        return MoistureCategory.MOIST
    return MoistureCategory.WET


def orthogonal_neighbors_of(address: CellAddress) -> List[CellAddress]:
    """East, west, south and north neighbours, unbounded."""
    x, y = address
    return [
        CellAddress(x + 1, y),
        CellAddress(x - 1, y),
        CellAddress(x, y + 1),
        CellAddress(x, y - 1),
    ]


def is_ocean_adjacent(address: CellAddress, world) -> bool:
    """True if an in-range orthogonal neighbour lies below sea level."""
    return any(
        world.get_cell(n.x, n.y).height < world.sea_level
        for n in orthogonal_neighbors_of(address)
        if world.in_range(n.x, n.y)
    )


def find_center(addresses: Iterable[CellAddress]) -> CellAddress:
    """Address closest to the mean position of a non-empty set of addresses."""
    points = list(addresses)
    if not points:
        raise ValueError("Cannot find the center of an empty set of addresses")

    return CellAddress(
        sum(p.x for p in points) // len(points),
        sum(p.y for p in points) // len(points),
    )


def _most_common(values: Iterable[H]) -> H:
    # Counter preserves first-seen order, so ties go to the earliest value
    counts = Counter(values)
    if not counts:
        raise ValueError("Cannot find the most common value of an empty set")
    return max(counts, key=counts.__getitem__)


def dominant_biome_in(biomes: Iterable[H]) -> H:
    """Most frequent biome among a set of cells' biomes."""
    return _most_common(biomes)


def dominant_temperature(temperatures: Iterable[float]) -> TemperatureCategory:
    """Most frequent temperature category among raw cell temperatures."""
    return _most_common(map_temperature_to_category(t) for t in temperatures)
