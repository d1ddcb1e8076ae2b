"""
River generation.

This module implements:
- Spring placement weighted by rainfall
- Downhill river tracing over the 4-orthogonal neighbourhood
- Tributary merging with downstream flow accumulation
- An arena of river segments linked by id

Rivers are traced one spring at a time. Each trace ends in one of the
``RiverOutcome`` states; only rivers that reach the ocean or merge into an
existing river, and that are long enough, are kept.
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Set

import structlog

from .alea_prng import AleaPRNG, derive_prng
from .data import CellAddress
from .generator import Generator
from .grid import orthogonal_neighbors_of
from .world import HeightWorld, is_ocean

logger = structlog.get_logger()


@dataclass
class HydrologyOptions:
    """River generation options."""

    spring_chance_modifier: float = 0.004  # Spring chance per unit of rainfall
    river_min_length: int = 3  # Minimum segments for a river to be kept


class RiverOutcome(Enum):
    """How tracing a river from a spring ended."""

    MERGED = "merged"  # Joined an existing river as a tributary
    TERMINATED_OCEAN = "terminated_ocean"  # Reached a cell below sea level
    ABORTED_DEAD_END = "aborted_dead_end"  # No downhill neighbour left
    ABORTED_TOO_SHORT = "aborted_too_short"  # Ended before reaching min length


@dataclass
class RiverSegment:
    """
    One cell of a river.

    Links to other segments are ids into the owning ``RiverNetwork``.
    """

    id: int
    river_id: int
    location: CellAddress
    flow: int = 1
    upstream: List[int] = field(default_factory=list)
    downstream: Optional[int] = None


@dataclass
class River:
    """A river, composed of segments linking from one to the next."""

    id: int
    segments: List[RiverSegment] = field(default_factory=list)
    tributary_of: Optional[int] = None  # Id of the river this one empties into

    def __len__(self) -> int:
        return len(self.segments)

    @property
    def source(self) -> CellAddress:
        return self.segments[0].location

    @property
    def mouth(self) -> CellAddress:
        return self.segments[-1].location


class RiverNetwork:
    """Owns every river and river segment created for a world."""

    def __init__(self):
        self.rivers: List[River] = []
        self.segments: List[RiverSegment] = []

    def new_river(self, tributary_of: Optional[int] = None) -> River:
        river = River(id=len(self.rivers), tributary_of=tributary_of)
        self.rivers.append(river)
        return river

    def add_segment(
        self,
        river: River,
        location: CellAddress,
        previous: Optional[RiverSegment] = None,
    ) -> RiverSegment:
        """
        Append a segment to a river.

        Args:
            river: River receiving the segment
            location: Cell of the new segment
            previous: Segment that empties into the new one, if any

        Returns:
            The new segment
        """
        segment = RiverSegment(id=len(self.segments), river_id=river.id, location=location)
        self.segments.append(segment)
        river.segments.append(segment)

        if previous is not None:
            self.set_downstream(previous, segment)

        return segment

    def set_downstream(self, segment: RiverSegment, downstream: Optional[RiverSegment]) -> None:
        """
        Point ``segment`` at a new downstream segment, keeping the upstream
        lists of the old and new downstream segments consistent.
        """
        if segment.downstream is not None:
            self.segments[segment.downstream].upstream.remove(segment.id)

        if downstream is None:
            segment.downstream = None
            return

        segment.downstream = downstream.id
        downstream.upstream.append(segment.id)

    def downstream_of(self, segment: RiverSegment) -> Iterator[RiverSegment]:
        """Yield ``segment`` and every segment below it, to the terminus."""
        current: Optional[RiverSegment] = segment
        while current is not None:
            yield current
            current = None if current.downstream is None else self.segments[current.downstream]

    def add_flow(self, segment: RiverSegment, flow: int) -> None:
        """Add ``flow`` to a segment and everything downstream of it."""
        for downstream in self.downstream_of(segment):
            downstream.flow += flow

    def river_of(self, segment: RiverSegment) -> River:
        return self.rivers[segment.river_id]


@dataclass
class RiverTrace:
    """The path walked from one spring and how the walk ended."""

    outcome: RiverOutcome
    path: List[CellAddress]
    confluence: Optional[RiverSegment] = None


class SimpleRiverSimulator(Generator):
    """
    Places springs and runs rivers downhill to the ocean, aborting at local
    minima of the heightmap.

    Every spring walks with a freshly derived random stream, so all springs
    in a world make the same sequence of random choices.
    """

    name = "Simple River Simulator"
    cell_capabilities = ("height", "rainfall", "river_segment")
    needs_height_world = True
    needs_river_world = True

    def __init__(self, options: Optional[HydrologyOptions] = None):
        self.options = options or HydrologyOptions()
        self.network = RiverNetwork()
        self.outcomes: Dict[RiverOutcome, int] = {}

    def run_generation(self, world: HeightWorld) -> None:
        logger.info("Generating rivers")

        outcomes: Counter = Counter()

        springs = self.place_springs(world)
        for spring in springs:
            trace = self.trace_river(world, spring)
            outcomes[trace.outcome] += 1
            river = self.commit(trace)
            if river is not None:
                world.add_river(river)

        self.outcomes = {outcome: outcomes.get(outcome, 0) for outcome in RiverOutcome}
        logger.info(
            "Rivers generated",
            springs=len(springs),
            rivers=len(self.network.rivers),
            **{outcome.value: count for outcome, count in self.outcomes.items()},
        )

    def place_springs(self, world: HeightWorld) -> List[CellAddress]:
        """Pick spring cells on land, more likely where it rains more."""
        rnd = derive_prng(world.seed, "springs")
        springs = []

        for x in range(world.width):
            for y in range(world.height):
                address = CellAddress(x, y)
                if is_ocean(world, address):
                    continue
                chance = world.get_cell(x, y).rainfall * self.options.spring_chance_modifier
                if rnd.random() <= chance:
                    springs.append(address)

        return springs

    def trace_river(self, world: HeightWorld, spring: CellAddress) -> RiverTrace:
        """
        Walk downhill from a spring until the walk reaches the ocean, runs
        into an existing river, or gets stuck.
        """
        rnd = derive_prng(world.seed, "rivers")
        min_length = self.options.river_min_length

        path: List[CellAddress] = []
        visited: Set[CellAddress] = set()
        current = spring

        while not is_ocean(world, current):
            existing = world.get_cell(current.x, current.y).river_segment
            if existing is not None:
                if len(path) >= min_length:
                    return RiverTrace(RiverOutcome.MERGED, path, confluence=existing)
                return RiverTrace(RiverOutcome.ABORTED_TOO_SHORT, path)

            path.append(current)
            visited.add(current)

            current = self.pick_next_location(world, current, visited, rnd)
            if current is None:
                return RiverTrace(RiverOutcome.ABORTED_DEAD_END, path)

        path.append(current)

        if len(path) < min_length:
            return RiverTrace(RiverOutcome.ABORTED_TOO_SHORT, path)
        return RiverTrace(RiverOutcome.TERMINATED_OCEAN, path)

    def pick_next_location(
        self,
        world: HeightWorld,
        current: CellAddress,
        visited: Set[CellAddress],
        rnd: AleaPRNG,
    ) -> Optional[CellAddress]:
        """
        Choose the next cell of a river.

        Ocean neighbours win outright. Otherwise the river never flows uphill,
        prefers joining an existing river, and picks randomly among the
        remaining candidates.
        """
        eligible = [
            n for n in orthogonal_neighbors_of(current)
            if world.in_range(n.x, n.y) and n not in visited
        ]

        oceans = [n for n in eligible if is_ocean(world, n)]
        if oceans:
            return rnd.choice(oceans)

        current_height = world.get_cell(current.x, current.y).height
        downhill = [n for n in eligible if world.get_cell(n.x, n.y).height <= current_height]

        for n in downhill:
            if world.get_cell(n.x, n.y).river_segment is not None:
                return n

        if downhill:
            return rnd.choice(downhill)
        return None

    def commit(self, trace: RiverTrace) -> Optional[River]:
        """
        Materialise an accepted trace as a river in the network.

        Returns:
            The new river, or ``None`` for aborted traces
        """
        if trace.outcome not in (RiverOutcome.MERGED, RiverOutcome.TERMINATED_OCEAN):
            return None

        confluence = trace.confluence
        parent_id = None if confluence is None else confluence.river_id
        river = self.network.new_river(tributary_of=parent_id)

        previous = None
        for location in trace.path:
            previous = self.network.add_segment(river, location, previous)

        if confluence is not None:
            self.network.set_downstream(previous, confluence)
            self.network.add_flow(confluence, 1)

        return river
