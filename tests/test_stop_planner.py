from __future__ import annotations

from scheduler import Direction
from simulation import StopPlanner


def planner() -> StopPlanner:
    return StopPlanner(min_floor=1, max_floor=10)


class TestAddingStops:
    def test_onboard_destinations_partition_against_current_floor(self):
        stops = planner()
        stops.add_onboard(8, current_floor=5)
        stops.add_onboard(2, current_floor=5)
        stops.add_onboard(5, current_floor=5)

        assert stops.onboard_up == {5, 8}
        assert stops.onboard_down == {2}

    def test_partition_is_fixed_when_added(self):
        stops = planner()
        stops.add_onboard(6, current_floor=3)
        # car has since moved above 6; the entry stays where it was put
        stops.add_onboard(4, current_floor=8)

        assert stops.onboard_up == {6}
        assert stops.onboard_down == {4}

    def test_pickups_partition_by_requested_direction(self):
        stops = planner()
        stops.add_pickup(4, Direction.UP)
        stops.add_pickup(7, Direction.DOWN)
        stops.add_pickup(3, Direction.NONE)

        assert stops.pickup_up == {4}
        assert stops.pickup_down == {7}

    def test_out_of_range_floors_are_ignored(self):
        stops = planner()
        stops.add_onboard(11, current_floor=5)
        stops.add_onboard(0, current_floor=5)
        stops.add_pickup(42, Direction.DOWN)

        assert not stops.has_stops

    def test_duplicates_collapse(self):
        stops = planner()
        stops.add_pickup(4, Direction.UP)
        stops.add_pickup(4, Direction.UP)
        stops.add_onboard(9, current_floor=1)
        stops.add_onboard(9, current_floor=1)

        assert stops.outstanding_stops == 2


class TestClearAndQuery:
    def test_clear_at_removes_floor_from_every_set(self):
        stops = planner()
        stops.add_onboard(6, current_floor=2)
        stops.add_onboard(6, current_floor=9)
        stops.add_pickup(6, Direction.UP)
        stops.add_pickup(6, Direction.DOWN)
        stops.add_pickup(3, Direction.UP)

        stops.clear_at(6)

        assert stops.copy_sets() == {
            "onboard_up": (),
            "onboard_down": (),
            "pickup_up": (3,),
            "pickup_down": (),
        }

    def test_should_stop_for_onboard_regardless_of_motion(self):
        stops = planner()
        stops.add_onboard(4, current_floor=1)

        for moving in Direction:
            assert stops.should_stop_here(4, moving)

    def test_should_stop_for_pickup_only_in_matching_direction(self):
        stops = planner()
        stops.add_pickup(4, Direction.DOWN)

        assert not stops.should_stop_here(4, Direction.UP)
        assert stops.should_stop_here(4, Direction.DOWN)
        assert stops.should_stop_here(4, Direction.NONE)

    def test_copy_sets_are_sorted_tuples(self):
        stops = planner()
        for floor in (9, 3, 6):
            stops.add_pickup(floor, Direction.UP)

        assert stops.copy_sets()["pickup_up"] == (3, 6, 9)


class TestNextDirection:
    def test_committed_up_while_onboard_stops_remain(self):
        stops = planner()
        stops.add_onboard(9, current_floor=1)
        stops.add_pickup(3, Direction.DOWN)

        assert stops.next_direction(Direction.UP, 5) == Direction.UP

    def test_committed_up_for_pickup_ahead(self):
        stops = planner()
        stops.add_pickup(7, Direction.UP)

        assert stops.next_direction(Direction.UP, 5) == Direction.UP

    def test_up_pickup_behind_does_not_hold_commitment(self):
        stops = planner()
        stops.add_pickup(3, Direction.UP)

        assert stops.next_direction(Direction.UP, 5) == Direction.DOWN

    def test_committed_down_while_onboard_stops_remain(self):
        stops = planner()
        stops.add_onboard(2, current_floor=8)
        stops.add_pickup(7, Direction.UP)

        assert stops.next_direction(Direction.DOWN, 5) == Direction.DOWN

    def test_fallback_picks_nearer_side(self):
        stops = planner()
        stops.add_pickup(7, Direction.UP)
        stops.add_pickup(4, Direction.DOWN)

        assert stops.next_direction(Direction.NONE, 5) == Direction.DOWN

    def test_fallback_tie_prefers_up(self):
        stops = planner()
        stops.add_pickup(7, Direction.DOWN)
        stops.add_pickup(3, Direction.UP)

        assert stops.next_direction(Direction.NONE, 5) == Direction.UP

    def test_no_stops_means_none(self):
        assert planner().next_direction(Direction.UP, 5) == Direction.NONE

    def test_stop_at_current_floor_gives_no_direction(self):
        stops = planner()
        stops.add_pickup(5, Direction.DOWN)

        assert stops.next_direction(Direction.NONE, 5) == Direction.NONE

    def test_nearest_search_prefers_onboard_stops(self):
        stops = planner()
        stops.add_onboard(9, current_floor=1)
        stops.add_pickup(6, Direction.UP)
        stops.add_onboard(2, current_floor=9)
        stops.add_pickup(4, Direction.DOWN)

        assert stops.nearest_above(5) == 9
        assert stops.nearest_below(5) == 2

    def test_nearest_search_falls_back_to_pickups(self):
        stops = planner()
        stops.add_pickup(6, Direction.UP)
        stops.add_pickup(4, Direction.DOWN)

        assert stops.nearest_above(5) == 6
        assert stops.nearest_below(5) == 4
        assert stops.nearest_above(7) is None
