"""
Ocean proximity bias.

The world is partitioned into square blocks and the share of ocean cells in
each block is recorded at the block origin. Interpolating between those
samples gives a smooth, low resolution "nearness to ocean" field that the
climate passes use to soften rainfall and temperature along coastlines.
"""

from typing import Dict, NamedTuple

import numpy as np
import structlog

from .data import CellAddress
from .grid import bilinear_interpolate
from .world import HeightWorld, ocean_mask

logger = structlog.get_logger()

# Bias for addresses whose surrounding block has no recorded sample
DEFAULT_BIAS = 1.0


class BiasPoint(NamedTuple):
    """Share of ocean cells in the block starting at ``location``."""

    location: CellAddress
    percent_ocean: float


class OceanBiaser:
    """Builds and samples the ocean proximity bias for a world."""

    def __init__(self):
        self._bias_points: Dict[CellAddress, BiasPoint] = {}
        self._cells_per_point = 0

    @property
    def cells_per_point(self) -> int:
        return self._cells_per_point

    @property
    def bias_points(self) -> Dict[CellAddress, BiasPoint]:
        return dict(self._bias_points)

    def create_bias_points(self, world: HeightWorld, cells_per_point: int = 25) -> None:
        """
        Build the bias samples for a world.

        Only whole blocks are sampled; cells beyond the last whole block fall
        back to the default bias.

        Args:
            world: World with heights populated
            cells_per_point: Edge length of each block, in cells
        """
        if cells_per_point < 1:
            raise ValueError(f"cells_per_point must be positive, got {cells_per_point}")

        self._cells_per_point = cells_per_point
        self._bias_points.clear()

        ocean = ocean_mask(world)
        points_wide = world.width // cells_per_point
        points_high = world.height // cells_per_point

        for i in range(points_wide):
            for j in range(points_high):
                block = ocean[
                    j * cells_per_point:(j + 1) * cells_per_point,
                    i * cells_per_point:(i + 1) * cells_per_point,
                ]
                location = CellAddress(i * cells_per_point, j * cells_per_point)
                self._bias_points[location] = BiasPoint(location, float(block.mean()))

        logger.debug(
            "Ocean bias points created",
            points=len(self._bias_points),
            cells_per_point=cells_per_point,
        )

    def _percent_ocean(self, x: int, y: int) -> float:
        point = self._bias_points.get(CellAddress(x, y))
        if point is None:
            return DEFAULT_BIAS
        return point.percent_ocean

    def _bias_from_block(self, px: int, py: int, x: int, y: int) -> float:
        step = self._cells_per_point
        ul = self._percent_ocean(px, py)
        ur = self._percent_ocean(px + step, py)
        ll = self._percent_ocean(px, py + step)
        lr = self._percent_ocean(px + step, py + step)

        return float(bilinear_interpolate(ul, ur, ll, lr, (x - px) / step, (y - py) / step))

    def bias_at(self, address: CellAddress) -> float:
        """
        Ocean bias at a cell, interpolated from the four block origins around
        it. Returns a value in [0, 1].
        """
        if self._cells_per_point == 0:
            raise RuntimeError("create_bias_points() must be called before bias_at()")

        step = self._cells_per_point
        px = (address.x // step) * step
        py = (address.y // step) * step
        return self._bias_from_block(px, py, address.x, address.y)

    def bias_field(self, width: int, height: int) -> np.ndarray:
        """Ocean bias of every cell, shape ``(height, width)``."""
        field = np.empty((height, width), dtype=np.float64)
        for y in range(height):
            for x in range(width):
                field[y, x] = self.bias_at(CellAddress(x, y))
        return field


def ocean_bias_field(world: HeightWorld, cells_per_point: int = 25) -> np.ndarray:
    """Convenience wrapper building a biaser and sampling the whole world."""
    biaser = OceanBiaser()
    biaser.create_bias_points(world, cells_per_point)
    return biaser.bias_field(world.width, world.height)
