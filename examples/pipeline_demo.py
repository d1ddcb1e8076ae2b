"""
Example generating a small world with the standard pipeline.
"""

from collections import Counter

import numpy as np

from py_worldgen.core import AltitudeCategory, Biome, MoistureCategory, TemperatureCategory
from py_worldgen.core.pipeline import build_pipeline, new_world
from py_worldgen.core.world import read_field
from py_worldgen.utils import configure_logging


class DemoTemplate:
    """A coarse biome table."""

    def get_biome_for(self, altitude, temperature, moisture):
        if altitude is AltitudeCategory.OCEAN:
            return Biome("ocean")
        if altitude is AltitudeCategory.HIGH:
            return Biome("glacier") if temperature is TemperatureCategory.COLD else Biome("mountain")
        if temperature is TemperatureCategory.COLD:
            return Biome("tundra")
        if moisture is MoistureCategory.ARID:
            return Biome("desert")
        if moisture is MoistureCategory.WET:
            return Biome("rainforest") if temperature is TemperatureCategory.HOT else Biome("swamp")
        return Biome("forest") if altitude is AltitudeCategory.MEDIUM else Biome("grassland")


def main():
    configure_logging(fmt="console")

    seed = "pipeline_demo"
    world = new_world(seed, width=120, height=60)

    pipeline = build_pipeline(DemoTemplate(), bias="continents", rainfall="airflow")
    pipeline.run_generation(world, on_log=print)

    heights = read_field(world, "height")
    print(f"\nLand cells: {int(np.sum(heights >= world.sea_level))} / {heights.size}")
    print(f"Rivers: {len(world.rivers)}")
    if world.rivers:
        longest = max(world.rivers, key=len)
        print(f"Longest river: {len(longest)} cells from {tuple(longest.source)}")

    biomes = Counter(
        str(world.get_cell(x, y).biome) for y in range(world.height) for x in range(world.width)
    )
    print("\nBiome distribution:")
    for name, count in biomes.most_common():
        print(f"  {name:<12} {count:>5}")


if __name__ == "__main__":
    main()
