"""
World and cell capabilities consumed by the generation passes.

Generators only depend on the small protocols below, so any storage that
exposes ``get_cell`` and the attributes a pass needs can be generated into.
``GridWorld`` is a plain in-memory implementation.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Protocol, runtime_checkable

import numpy as np

from .data import Biome, CellAddress


class World(Protocol):
    """A rectangular world of cells."""

    seed: Any
    width: int
    height: int

    def in_range(self, x: int, y: int) -> bool: ...

    def get_cell(self, x: int, y: int) -> Any: ...


class HeightWorld(World, Protocol):
    """A world with a maximum elevation and a sea level."""

    max_elevation: float
    sea_level: float


@runtime_checkable
class RiverWorld(Protocol):
    """A world that records accepted rivers."""

    def add_river(self, river) -> None: ...


@dataclass
class Cell:
    """Every physical attribute a pass can write into a cell."""

    height: float = 0.0
    rainfall: float = 0.0
    temperature: float = 0.0
    biome: Optional[Biome] = None
    river_segment: Optional[Any] = None


@dataclass
class GridWorld:
    """In-memory world storing one ``Cell`` per position."""

    seed: Any
    width: int
    height: int
    max_elevation: float = 100.0
    sea_level: float = 50.0
    cells: List[List[Cell]] = field(default_factory=list, repr=False)
    rivers: List[Any] = field(default_factory=list, repr=False)

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"World size must be positive, got {self.width}x{self.height}")
        if not self.cells:
            self.cells = [[Cell() for _ in range(self.width)] for _ in range(self.height)]

    def in_range(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_cell(self, x: int, y: int) -> Cell:
        if not self.in_range(x, y):
            raise IndexError(f"Cell ({x}, {y}) is outside the world")
        return self.cells[y][x]

    def add_river(self, river) -> None:
        """Record a river and mark every cell it passes through."""
        self.rivers.append(river)
        for segment in river.segments:
            self.get_cell(*segment.location).river_segment = segment


def read_field(world: World, attribute: str) -> np.ndarray:
    """
    Copy one cell attribute of every cell into an array.

    Returns:
        Float array of shape ``(height, width)`` indexed ``[y, x]``
    """
    values = np.empty((world.height, world.width), dtype=np.float64)
    for y in range(world.height):
        for x in range(world.width):
            values[y, x] = getattr(world.get_cell(x, y), attribute)
    return values


def write_field(
    world: World, attribute: str, values: np.ndarray, mask: Optional[np.ndarray] = None
) -> None:
    """
    Write an array into one cell attribute, optionally only where ``mask``
    is true.
    """
    for y in range(world.height):
        for x in range(world.width):
            if mask is None or mask[y, x]:
                setattr(world.get_cell(x, y), attribute, float(values[y, x]))


def ocean_mask(world: HeightWorld, heights: Optional[np.ndarray] = None) -> np.ndarray:
    """Boolean array, true where a cell lies strictly below sea level."""
    if heights is None:
        heights = read_field(world, "height")
    return heights < world.sea_level


def is_ocean(world: HeightWorld, address: CellAddress) -> bool:
    return world.get_cell(address.x, address.y).height < world.sea_level
