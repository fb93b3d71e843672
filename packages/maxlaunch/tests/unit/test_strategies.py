"""Unit tests — acquisition strategies against an in-memory window system."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from maxlaunch.config import PollConfig
from maxlaunch.exceptions import NoActiveWindowError, WindowQueryError
from maxlaunch.strategies import (
    ActiveChangeCounter,
    ByActiveChangeCountStrategy,
    ByNameStrategy,
    ByViewableSetStrategy,
    Outcome,
    TrackedWindowSet,
    poll_cycles,
)

W1 = "0x00000001"
W2 = "0x00000002"
W3 = "0x00000003"

FAST = PollConfig(max_cycles=5, cycle_delay=0.001)


# ---------------------------------------------------------------------------
# poll_cycles
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestPollCycles:
    async def test_yields_one_based_cycles(self) -> None:
        cycles = [c async for c in poll_cycles(PollConfig(max_cycles=3, cycle_delay=0))]
        assert cycles == [1, 2, 3]

    async def test_zero_cycles_still_runs_once(self) -> None:
        cycles = [c async for c in poll_cycles(PollConfig(max_cycles=0, cycle_delay=0))]
        assert cycles == [1]

    async def test_sleeps_between_cycles_only(self) -> None:
        with patch("maxlaunch.strategies.base.asyncio.sleep", new=AsyncMock()) as sleep:
            cycles = [c async for c in poll_cycles(PollConfig(max_cycles=3, cycle_delay=0.5))]
        assert cycles == [1, 2, 3]
        assert sleep.await_count == 2
        sleep.assert_awaited_with(0.5)


# ---------------------------------------------------------------------------
# ByName
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestByNameStrategy:
    async def test_window_found_on_third_query(self, fake_ws, make_action) -> None:
        def appear(method: str, count: int) -> None:
            if method == "find_by_name" and count == 3:
                fake_ws.add_window(W1, "Test Window")

        fake_ws.on_query = appear
        action, dispatcher = make_action()
        result = await ByNameStrategy(fake_ws, action, window_name="Test", poll=FAST).run()
        await dispatcher.drain(1.0)

        assert result.outcome is Outcome.FOUND
        assert result.found
        assert result.cycles == 3
        assert result.handles == [W1]
        assert fake_ws.query_counts["find_by_name"] == 3
        assert fake_ws.maximized_handles() == [W1]

    async def test_exhausts_after_max_cycles(self, fake_ws, make_action) -> None:
        fake_ws.add_window(W1, "Something else")
        action, dispatcher = make_action()
        poll = PollConfig(max_cycles=3, cycle_delay=0.001)
        result = await ByNameStrategy(fake_ws, action, window_name="Test", poll=poll).run()
        await dispatcher.drain(1.0)

        assert result.outcome is Outcome.EXHAUSTED
        assert result.cycles == 3
        assert fake_ws.query_counts["find_by_name"] == 3
        assert fake_ws.actions == []

    async def test_zero_cycles_queries_once(self, fake_ws, make_action) -> None:
        action, _ = make_action()
        poll = PollConfig(max_cycles=0, cycle_delay=0.001)
        result = await ByNameStrategy(fake_ws, action, window_name="Test", poll=poll).run()
        assert result.outcome is Outcome.EXHAUSTED
        assert fake_ws.query_counts["find_by_name"] == 1

    async def test_query_failures_are_not_fatal(self, fake_ws, make_action) -> None:
        fake_ws.fail_queries.add("find_by_name")
        action, _ = make_action()
        result = await ByNameStrategy(fake_ws, action, window_name="Test", poll=FAST).run()
        assert result.outcome is Outcome.EXHAUSTED
        assert fake_ws.query_counts["find_by_name"] == FAST.max_cycles

    async def test_recovers_after_failing_cycle(self, fake_ws, make_action) -> None:
        fake_ws.add_window(W2, "test window")
        fake_ws.fail_queries.add("find_by_name")

        def recover(method: str, count: int) -> None:
            if count == 2:
                fake_ws.fail_queries.discard(method)

        fake_ws.on_query = recover
        action, dispatcher = make_action()
        result = await ByNameStrategy(fake_ws, action, window_name="TEST", poll=FAST).run()
        await dispatcher.drain(1.0)
        assert result.cycles == 2
        assert fake_ws.maximized_handles() == [W2]

    async def test_maximizes_only_once(self, fake_ws, make_action) -> None:
        fake_ws.add_window(W1, "Test")
        action, dispatcher = make_action()
        await ByNameStrategy(fake_ws, action, window_name="Test", poll=FAST).run()
        await dispatcher.drain(1.0)
        assert fake_ws.query_counts["find_by_name"] == 1
        assert len(fake_ws.actions_for(W1)) == 1


# ---------------------------------------------------------------------------
# ByActiveChangeCount
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestActiveChangeCounter:
    def test_same_handle_is_not_a_change(self) -> None:
        counter = ActiveChangeCounter(previous_handle=W1)
        assert counter.observe(W1) is False
        assert counter.changes_seen == 0

    def test_new_handle_is_a_change(self) -> None:
        counter = ActiveChangeCounter(previous_handle=W1)
        assert counter.observe(W2) is True
        assert counter.changes_seen == 1
        assert counter.previous_handle == W2

    def test_first_window_after_none_counts(self) -> None:
        counter = ActiveChangeCounter()
        assert counter.observe(W1) is True
        assert counter.changes_seen == 1


@pytest.mark.unit
class TestByActiveChangeCountStrategy:
    async def test_zero_target_maximizes_current_window(self, fake_ws, make_action) -> None:
        fake_ws.active = W1
        action, dispatcher = make_action()
        result = await ByActiveChangeCountStrategy(
            fake_ws, action, target_changes=0, poll_interval=0.001
        ).run()
        await dispatcher.drain(1.0)

        assert result.outcome is Outcome.FOUND
        assert result.handles == [W1]
        assert result.cycles == 0
        assert fake_ws.query_counts["active_window"] == 1
        assert fake_ws.maximized_handles() == [W1]

    async def test_zero_target_without_active_window(self, fake_ws, make_action) -> None:
        action, dispatcher = make_action()
        result = await ByActiveChangeCountStrategy(
            fake_ws, action, target_changes=0, poll_interval=0.001
        ).run()
        await dispatcher.drain(1.0)

        assert result.outcome is Outcome.EXHAUSTED
        assert fake_ws.actions == []

    async def test_counts_distinct_changes(self, fake_ws, make_action) -> None:
        fake_ws.active_script = [W1, W1, W2, W2, W3]
        action, dispatcher = make_action()
        result = await ByActiveChangeCountStrategy(
            fake_ws, action, target_changes=2, poll_interval=0.001
        ).run()
        await dispatcher.drain(1.0)

        assert result.outcome is Outcome.FOUND
        assert result.handles == [W3]
        assert result.cycles == 4
        assert fake_ws.maximized_handles() == [W3]

    async def test_returning_to_previous_window_counts(self, fake_ws, make_action) -> None:
        fake_ws.active_script = [W1, W2, W1]
        action, _ = make_action()
        result = await ByActiveChangeCountStrategy(
            fake_ws, action, target_changes=2, poll_interval=0.001
        ).run()
        assert result.handles == [W1]

    async def test_query_failures_are_tolerated(self, fake_ws, make_action) -> None:
        fake_ws.active_script = [
            None,
            NoActiveWindowError(),
            WindowQueryError(["xdotool", "getactivewindow"], "exit status 1"),
            W2,
        ]
        action, _ = make_action()
        result = await ByActiveChangeCountStrategy(
            fake_ws, action, target_changes=1, poll_interval=0.001
        ).run()

        assert result.outcome is Outcome.FOUND
        assert result.handles == [W2]
        assert result.cycles == 3

    async def test_failure_does_not_reset_previous_window(self, fake_ws, make_action) -> None:
        fake_ws.active_script = [W1, NoActiveWindowError(), W1, W2]
        action, _ = make_action()
        result = await ByActiveChangeCountStrategy(
            fake_ws, action, target_changes=1, poll_interval=0.001
        ).run()
        assert result.handles == [W2]
        assert result.cycles == 3

    def test_negative_target_rejected(self, fake_ws, make_action) -> None:
        action, _ = make_action()
        with pytest.raises(ValueError):
            ByActiveChangeCountStrategy(fake_ws, action, target_changes=-1, poll_interval=0.1)


# ---------------------------------------------------------------------------
# ByViewableSet
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestTrackedWindowSet:
    def test_add_and_membership(self) -> None:
        tracked = TrackedWindowSet()
        assert tracked.add(W1) is True
        assert tracked.add(W1) is False
        assert W1 in tracked
        assert W2 not in tracked
        assert len(tracked) == 1

    def test_iterates_in_insertion_order(self) -> None:
        tracked = TrackedWindowSet()
        for handle in (W3, W1, W2):
            tracked.add(handle)
        assert list(tracked) == [W3, W1, W2]


@pytest.mark.unit
class TestByViewableSetStrategy:
    async def test_each_window_maximized_once(self, fake_ws, make_action) -> None:
        fake_ws.add_window(W1, "one")
        fake_ws.add_window(W2, "two", viewable=False)

        def map_second(method: str, count: int) -> None:
            if method == "list_windows" and count == 2:
                fake_ws.viewable.add(W2)

        fake_ws.on_query = map_second
        action, dispatcher = make_action()
        poll = PollConfig(max_cycles=3, cycle_delay=0.001)
        result = await ByViewableSetStrategy(fake_ws, action, poll=poll).run()
        await dispatcher.drain(1.0)

        assert result.outcome is Outcome.EXHAUSTED
        assert result.cycles == 3
        assert result.handles == [W1, W2]
        assert fake_ws.query_counts["list_windows"] == 3
        assert fake_ws.maximized_handles() == [W1, W2]
        assert len(fake_ws.actions_for(W1)) == 1
        assert len(fake_ws.actions_for(W2)) == 1

    async def test_tracked_windows_are_not_requeried(self, fake_ws, make_action) -> None:
        fake_ws.add_window(W1, "one")
        action, _ = make_action()
        poll = PollConfig(max_cycles=4, cycle_delay=0.001)
        await ByViewableSetStrategy(fake_ws, action, poll=poll).run()
        assert fake_ws.query_counts["window_state"] == 1

    async def test_state_failure_is_retried(self, fake_ws, make_action) -> None:
        fake_ws.add_window(W1, "one")
        fake_ws.failing_state[W1] = 1
        action, dispatcher = make_action()
        poll = PollConfig(max_cycles=3, cycle_delay=0.001)
        result = await ByViewableSetStrategy(fake_ws, action, poll=poll).run()
        await dispatcher.drain(1.0)

        assert result.handles == [W1]
        assert fake_ws.query_counts["window_state"] == 2
        assert len(fake_ws.actions_for(W1)) == 1

    async def test_list_failure_skips_cycle(self, fake_ws, make_action) -> None:
        fake_ws.add_window(W1, "one")
        fake_ws.fail_queries.add("list_windows")
        action, _ = make_action()
        result = await ByViewableSetStrategy(fake_ws, action, poll=FAST).run()
        assert result.handles == []
        assert fake_ws.query_counts["window_state"] == 0

    async def test_unmapped_windows_untouched(self, fake_ws, make_action) -> None:
        fake_ws.add_window(W1, "hidden", viewable=False)
        action, _ = make_action()
        result = await ByViewableSetStrategy(fake_ws, action, poll=FAST).run()
        assert result.handles == []
        assert fake_ws.actions == []
        assert fake_ws.query_counts["window_state"] == FAST.max_cycles
