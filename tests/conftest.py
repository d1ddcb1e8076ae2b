"""Shared fixtures for world generation tests."""

import numpy as np
import pytest

from py_worldgen.core.world import GridWorld, write_field


@pytest.fixture
def world_from_heights():
    """Factory building a GridWorld from a ``(height, width)`` elevation array."""

    def _build(heights, seed="test_world", max_elevation=100.0, sea_level=50.0, **fields):
        heights = np.asarray(heights, dtype=np.float64)
        world = GridWorld(
            seed=seed,
            width=heights.shape[1],
            height=heights.shape[0],
            max_elevation=max_elevation,
            sea_level=sea_level,
        )
        write_field(world, "height", heights)
        for attribute, values in fields.items():
            write_field(world, attribute, np.broadcast_to(values, heights.shape))
        return world

    return _build
