"""
Biome selection from altitude, temperature and moisture categories.

The mapping from categories to biomes belongs to the caller: a template
either exposes ``get_biome_for(altitude, temperature, moisture)`` or is a
plain callable with the same signature.
"""

from typing import Any, Callable, Protocol, Union

import structlog

from .data import AltitudeCategory, MoistureCategory, TemperatureCategory
from .generator import Generator
from .grid import (
    map_altitude_to_category,
    map_moisture_to_category,
    map_temperature_to_category,
)
from .world import HeightWorld

logger = structlog.get_logger()

BiomeLookup = Callable[[AltitudeCategory, TemperatureCategory, MoistureCategory], Any]


class PhysicalSettingTemplate(Protocol):
    """Defines which biome a category triple maps to."""

    def get_biome_for(
        self,
        altitude: AltitudeCategory,
        temperature: TemperatureCategory,
        moisture: MoistureCategory,
    ) -> Any: ...


class SimpleBiomeSelector(Generator):
    """Assigns each cell the biome its template gives for its categories."""

    name = "Simple Biome Selector"
    cell_capabilities = ("height", "rainfall", "temperature", "biome")
    needs_height_world = True

    def __init__(self, template: Union[PhysicalSettingTemplate, BiomeLookup]):
        """
        Args:
            template: Object with ``get_biome_for`` or an equivalent callable
        """
        lookup = getattr(template, "get_biome_for", template)
        if not callable(lookup):
            raise TypeError(f"Biome template must be callable or define get_biome_for: {template!r}")
        self.template = template
        self._lookup: BiomeLookup = lookup

    def classify(self, height: float, temperature: float, rainfall: float, world: HeightWorld):
        """Biome for one set of raw cell values."""
        return self._lookup(
            map_altitude_to_category(height, world.max_elevation, world.sea_level),
            map_temperature_to_category(temperature),
            map_moisture_to_category(rainfall),
        )

    def run_generation(self, world: HeightWorld) -> None:
        logger.info("Selecting biomes")

        for y in range(world.height):
            for x in range(world.width):
                cell = world.get_cell(x, y)
                cell.biome = self.classify(cell.height, cell.temperature, cell.rainfall, world)
