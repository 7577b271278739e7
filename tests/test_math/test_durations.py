"""Tests for rounding helpers and the weekly minutes allocator."""

from __future__ import annotations

import pytest

from plan_builder.math.durations import allocate_minutes, round_half_up, round_to_step


class TestRounding:
    def test_round_half_up(self) -> None:
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(2.49) == 2

    def test_round_to_step(self) -> None:
        assert round_to_step(62) == 60
        assert round_to_step(63) == 65
        assert round_to_step(57.5) == 60

    def test_round_to_step_never_negative(self) -> None:
        assert round_to_step(-3) == 0


class TestAllocateMinutes:
    def test_equal_weights_split_evenly(self) -> None:
        assert allocate_minutes(300, [1, 1, 1], [240, 240, 240]) == [100, 100, 100]

    def test_long_session_anchor_gets_largest_share(self) -> None:
        durations = allocate_minutes(300, [1, 1, 1, 2.2], [240] * 4, anchor=3)
        assert durations == [55, 60, 60, 125]

    def test_total_preserved_when_feasible(self) -> None:
        for total in (120, 180, 240, 333, 420, 719):
            durations = allocate_minutes(total, [2.2, 1, 1, 0.7, 0.6], [240] * 5, anchor=0)
            assert sum(durations) == round_to_step(total)

    def test_every_duration_is_a_five_minute_step(self) -> None:
        durations = allocate_minutes(333, [2.2, 1, 1, 1], [240] * 4, anchor=0)
        assert all(d % 5 == 0 for d in durations)

    def test_caps_respected(self) -> None:
        durations = allocate_minutes(210, [2.2, 1, 1, 1, 1], [45] * 5, anchor=0)
        assert durations == [45, 45, 40, 40, 40]
        assert max(durations) <= 45

    def test_non_anchor_caps_limited_to_anchor_cap(self) -> None:
        durations = allocate_minutes(300, [2.2, 1, 1], [55, 240, 240], anchor=0)
        assert max(durations) <= 55

    def test_unreachable_budget_returns_closest_feasible(self) -> None:
        assert allocate_minutes(500, [1, 1], [60, 60]) == [60, 60]

    def test_floor_pins_small_shares(self) -> None:
        assert allocate_minutes(50, [1, 0.6], [240, 240]) == [30, 20]

    def test_anchor_swapped_to_longest(self) -> None:
        assert allocate_minutes(100, [1, 3], [240, 240], anchor=0) == [75, 25]

    def test_empty(self) -> None:
        assert allocate_minutes(300, [], []) == []

    def test_caps_length_mismatch_raises(self) -> None:
        with pytest.raises(ValueError):
            allocate_minutes(300, [1, 1], [240])
