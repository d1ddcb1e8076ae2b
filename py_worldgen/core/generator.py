"""
Generation passes and the pipeline that runs them.

A pass is any object with a ``name`` and a ``run_generation(world)`` method.
``WorldGenerator`` runs its passes in registration order against one shared,
mutable world. Later passes read fields written by earlier ones, so the order
in which passes are added matters.
"""

import time
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Callable, List, Optional, Tuple

import structlog

from .errors import MissingCapabilityError
from .world import RiverWorld

logger = structlog.get_logger()

LogFunction = Callable[[str], None]

HEIGHT_WORLD_ATTRIBUTES = ("max_elevation", "sea_level")


class Generator(ABC):
    """Base class for a single generation pass."""

    #: Name used for logging
    name: str = "Generator"

    #: Cell attributes this pass reads or writes
    cell_capabilities: Tuple[str, ...] = ()

    #: Whether the pass needs ``max_elevation`` and ``sea_level``
    needs_height_world: bool = False

    #: Whether the pass hands accepted rivers to ``world.add_river``
    needs_river_world: bool = False

    @abstractmethod
    def run_generation(self, world) -> None:
        """Run the pass against a world."""

    def check_world(self, world) -> None:
        """
        Verify that the world offers everything this pass needs.

        Raises:
            MissingCapabilityError: If an attribute or method is missing
        """
        if self.needs_height_world:
            missing = [a for a in HEIGHT_WORLD_ATTRIBUTES if not hasattr(world, a)]
            if missing:
                raise MissingCapabilityError(
                    f"{self.name} needs a world with {', '.join(missing)}"
                )

        if self.needs_river_world and not isinstance(world, RiverWorld):
            raise MissingCapabilityError(f"{self.name} needs a world with add_river()")

        if world.width > 0 and world.height > 0:
            sample = world.get_cell(0, 0)
            missing = [c for c in self.cell_capabilities if not hasattr(sample, c)]
            if missing:
                raise MissingCapabilityError(
                    f"{self.name} needs cells with {', '.join(missing)}"
                )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


class WorldGenerator:
    """Runs a sequence of generation passes to build a world."""

    def __init__(self):
        self._generators: List[Generator] = []

    @property
    def generators(self) -> List[Generator]:
        return list(self._generators)

    def add_generator(self, generator: Generator) -> "WorldGenerator":
        """Append a pass to the end of the pipeline."""
        self._generators.append(generator)
        return self

    def run_generation(self, world, on_log: Optional[LogFunction] = None) -> None:
        """
        Run every registered pass against ``world``.

        Capabilities of all passes are checked before the first one runs. A
        failing pass propagates its error and the remaining passes are
        skipped.

        Args:
            world: The world to generate into
            on_log: Optional callback receiving progress messages
        """
        for generator in self._generators:
            generator.check_world(world)

        logger.info("Starting world generation", passes=len(self._generators))

        for generator in self._generators:
            if on_log is not None:
                on_log(f"Running {generator.name}...")
            logger.info("Running generator", generator=generator.name)

            started = time.perf_counter()
            generator.run_generation(world)
            elapsed = time.perf_counter() - started

            if on_log is not None:
                on_log(f"Done ({timedelta(seconds=elapsed)} elapsed)")
            logger.info("Generator finished", generator=generator.name, seconds=round(elapsed, 4))
