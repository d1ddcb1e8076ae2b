"""
Value types shared by the generation passes.

- Cell addresses
- Altitude, temperature and moisture categories used for biome lookup
- Named biomes
"""

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import NamedTuple


class CellAddress(NamedTuple):
    """Integer (x, y) position of a cell in the world."""

    x: int
    y: int

    def distance(self, other: "CellAddress") -> float:
        """Euclidean distance to another address."""
        return math.hypot(self.x - other.x, self.y - other.y)


class AltitudeCategory(IntEnum):
    """Altitude bands used for biome determination."""

    OCEAN = 0  # Below sea level
    LOW = 1  # Right near sea level
    MEDIUM = 2  # Foothills and highlands
    HIGH = 3  # Mountains


class TemperatureCategory(IntEnum):
    """Temperature bands used for biome determination."""

    COLD = 0
    COOL = 1
    WARM = 2
    HOT = 3


class MoistureCategory(IntEnum):
    """Moisture bands used for biome determination."""

    ARID = 0
    DRY = 1
    MOIST = 2
    WET = 3


@dataclass(frozen=True)
class Biome:
    """A named biome. Two biomes with the same name are the same biome."""

    name: str

    def __str__(self) -> str:
        return self.name
