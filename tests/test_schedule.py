"""Tests for sample schedule derivation."""

from __future__ import annotations

import pytest

from pooltwap.schedule import DEFAULT_BLOCKS_PER_SECOND, derive_schedule


def test_weekly_hourly_schedule_on_base() -> None:
    schedule = derive_schedule(7, 168, DEFAULT_BLOCKS_PER_SECOND, 1_000_000)

    assert len(schedule) == 168
    assert schedule[0] == 1_000_000 - 168 * 1_800
    assert schedule[-1] == 1_000_000 - 1_800
    assert {b - a for a, b in zip(schedule, schedule[1:])} == {1_800}


def test_newest_sample_is_one_interval_before_anchor() -> None:
    schedule = derive_schedule(1, 24, 1.0, 500_000)

    assert schedule[-1] == 500_000 - 3_600
    assert 500_000 not in schedule


def test_schedule_is_deterministic() -> None:
    first = derive_schedule(3, 50, 0.5, 12_345_678)
    second = derive_schedule(3, 50, 0.5, 12_345_678)

    assert first == second


def test_interval_truncates_uneven_division() -> None:
    schedule = derive_schedule(1, 7, 0.5, 100_000)

    # 86400 // 7 = 12342 seconds -> 6171 blocks at two seconds per block
    assert schedule[-1] == 100_000 - 6_171
    assert schedule[0] == 100_000 - 7 * 6_171


def test_offsets_past_anchor_clamp_to_block_one() -> None:
    schedule = derive_schedule(7, 7, 0.5, 100_000)

    assert schedule == [1, 1, 1, 1, 1, 13_600, 56_800]


def test_offset_equal_to_anchor_lands_on_block_zero() -> None:
    schedule = derive_schedule(1, 24, 1.0, 3_600)

    assert schedule == [1] * 23 + [0]


def test_schedule_is_non_decreasing_when_clamped_past_anchor() -> None:
    schedule = derive_schedule(2, 5, 0.5, 60_000)

    assert schedule == sorted(schedule)
    assert min(schedule) >= 1


def test_zero_block_interval_repeats_anchor() -> None:
    schedule = derive_schedule(1, 100_000, 0.5, 42)

    assert schedule == [42] * 100_000


@pytest.mark.parametrize(
    ("days", "samples", "blocks_per_second", "anchor_block"),
    [
        (7, 0, 0.5, 100),
        (-1, 10, 0.5, 100),
        (7, 10, 0.0, 100),
        (7, 10, 0.5, -1),
    ],
)
def test_invalid_inputs_raise(
    days: int, samples: int, blocks_per_second: float, anchor_block: int
) -> None:
    with pytest.raises(ValueError):
        derive_schedule(days, samples, blocks_per_second, anchor_block)
