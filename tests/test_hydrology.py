"""Tests for river generation."""

import pytest
import numpy as np

from py_worldgen.core.data import CellAddress
from py_worldgen.core.hydrology import (
    HydrologyOptions,
    RiverNetwork,
    RiverOutcome,
    SimpleRiverSimulator,
)
from py_worldgen.core.alea_prng import AleaPRNG
from py_worldgen.core.heightmap_generator import SimplexHeightmapGenerator
from py_worldgen.core.world import GridWorld


def valley_heights():
    """
    Main channel along the bottom row draining east into the ocean, with a
    side valley joining it from the north at x=3. Everything else is a wall.
    """
    heights = np.full((5, 7), 99.0)
    heights[4, :] = [90, 85, 80, 75, 70, 65, 10]
    heights[:4, 3] = [98, 95, 92, 88]
    return heights


class TestRiverNetwork:
    """Test segment linking in the river arena."""

    @pytest.fixture
    def network(self):
        return RiverNetwork()

    def test_segments_link_in_order(self, network):
        river = network.new_river()
        first = network.add_segment(river, CellAddress(0, 0))
        second = network.add_segment(river, CellAddress(1, 0), first)

        assert first.downstream == second.id
        assert second.upstream == [first.id]
        assert len(river) == 2
        assert river.source == CellAddress(0, 0)
        assert river.mouth == CellAddress(1, 0)

    def test_set_downstream_keeps_upstream_consistent(self, network):
        river = network.new_river()
        a = network.add_segment(river, CellAddress(0, 0))
        b = network.add_segment(river, CellAddress(1, 0))
        c = network.add_segment(river, CellAddress(2, 0))

        network.set_downstream(a, b)
        network.set_downstream(a, c)

        assert a.downstream == c.id
        assert b.upstream == []
        assert c.upstream == [a.id]

        network.set_downstream(a, None)
        assert a.downstream is None
        assert c.upstream == []

    def test_add_flow_runs_to_terminus(self, network):
        river = network.new_river()
        previous = None
        for x in range(4):
            previous = network.add_segment(river, CellAddress(x, 0), previous)

        network.add_flow(river.segments[1], 2)

        assert [s.flow for s in river.segments] == [1, 3, 3, 3]
        assert list(network.downstream_of(river.segments[2])) == river.segments[2:]


class TestRiverTracing:
    """Test downhill tracing and tributary merging on authored terrain."""

    @pytest.fixture
    def world(self, world_from_heights):
        return world_from_heights(valley_heights(), seed="valley", rainfall=1.0)

    @pytest.fixture
    def simulator(self):
        return SimpleRiverSimulator(HydrologyOptions(river_min_length=3))

    def test_river_runs_to_ocean(self, world, simulator):
        trace = simulator.trace_river(world, CellAddress(0, 4))

        assert trace.outcome is RiverOutcome.TERMINATED_OCEAN
        assert trace.path == [CellAddress(x, 4) for x in range(7)]

    def test_converging_springs_merge(self, world, simulator):
        """Test the second arrival becomes a tributary carrying its flow downstream."""
        main = simulator.commit(simulator.trace_river(world, CellAddress(0, 4)))
        world.add_river(main)

        trace = simulator.trace_river(world, CellAddress(3, 0))
        assert trace.outcome is RiverOutcome.MERGED
        assert trace.path == [CellAddress(3, y) for y in range(4)]

        tributary = simulator.commit(trace)
        world.add_river(tributary)

        assert tributary.tributary_of == main.id
        assert len(simulator.network.rivers) == 2
        assert len(world.rivers) == 2

        confluence = world.get_cell(3, 4).river_segment
        assert confluence.river_id == main.id
        assert tributary.segments[-1].downstream == confluence.id
        assert tributary.segments[-1].id in confluence.upstream

        assert [s.flow for s in main.segments] == [1, 1, 1, 2, 2, 2, 2]
        assert all(s.flow == 1 for s in tributary.segments)

    def test_short_arrival_is_aborted(self, world, simulator):
        main = simulator.commit(simulator.trace_river(world, CellAddress(0, 4)))
        world.add_river(main)

        trace = simulator.trace_river(world, CellAddress(3, 2))

        assert trace.outcome is RiverOutcome.ABORTED_TOO_SHORT
        assert simulator.commit(trace) is None
        assert [s.flow for s in main.segments] == [1] * 7

    def test_short_ocean_river_is_aborted(self, world, simulator):
        trace = simulator.trace_river(world, CellAddress(5, 4))

        assert trace.outcome is RiverOutcome.ABORTED_TOO_SHORT
        assert trace.path == [CellAddress(5, 4), CellAddress(6, 4)]

    def test_local_minimum_is_dead_end(self, world_from_heights, simulator):
        heights = np.full((3, 3), 80.0)
        heights[1, 1] = 60.0
        world = world_from_heights(heights)

        trace = simulator.trace_river(world, CellAddress(1, 1))

        assert trace.outcome is RiverOutcome.ABORTED_DEAD_END
        assert simulator.commit(trace) is None

    def test_ocean_neighbour_wins(self, world_from_heights, simulator):
        heights = np.array([[70.0, 60.0, 20.0]])
        world = world_from_heights(heights)

        choice = simulator.pick_next_location(
            world, CellAddress(1, 0), set(), AleaPRNG("pick")
        )

        assert choice == CellAddress(2, 0)

    def test_never_flows_uphill(self, world_from_heights, simulator):
        heights = np.array([[70.0, 60.0, 65.0]])
        world = world_from_heights(heights)

        choice = simulator.pick_next_location(
            world, CellAddress(1, 0), set(), AleaPRNG("pick")
        )

        assert choice is None

    def test_springs_reuse_the_same_stream(self, world, simulator):
        """Test every trace starts from an identical random stream."""
        first = simulator.trace_river(world, CellAddress(0, 4))
        second = simulator.trace_river(world, CellAddress(0, 4))

        assert first.path == second.path


class TestSimpleRiverSimulator:
    """Test full river generation on a noise world."""

    @pytest.fixture
    def world(self):
        world = GridWorld(seed="rivers_test", width=50, height=40)
        SimplexHeightmapGenerator("none").run_generation(world)
        for row in world.cells:
            for cell in row:
                cell.rainfall = 1.0
        return world

    @pytest.fixture
    def simulator(self):
        return SimpleRiverSimulator(HydrologyOptions(spring_chance_modifier=0.5))

    def test_accepted_rivers_meet_minimum_length(self, world, simulator):
        simulator.run_generation(world)

        assert world.rivers
        assert all(len(river) >= simulator.options.river_min_length for river in world.rivers)
        assert sum(simulator.outcomes.values()) > 0

    def test_flow_counts_tributaries(self, world, simulator):
        """Test each segment carries its own unit plus every river draining into it."""
        simulator.run_generation(world)
        segments = simulator.network.segments

        for segment in segments:
            same_river = [segments[i] for i in segment.upstream
                          if segments[i].river_id == segment.river_id]
            foreign = [segments[i] for i in segment.upstream
                       if segments[i].river_id != segment.river_id]

            expected = same_river[0].flow if same_river else 1
            expected += sum(s.flow for s in foreign)
            assert segment.flow == expected

    def test_springs_only_on_land(self, world, simulator):
        springs = simulator.place_springs(world)

        assert springs
        assert all(world.get_cell(*s).height >= world.sea_level for s in springs)

    def test_no_rain_no_springs(self, world, simulator):
        for row in world.cells:
            for cell in row:
                cell.rainfall = 0.0

        assert simulator.place_springs(world) == []
