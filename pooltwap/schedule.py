"""Evenly spaced historical sample blocks behind an anchor block."""

from __future__ import annotations

SECONDS_PER_DAY = 86_400

# Base produces a block roughly every 2 seconds.
DEFAULT_BLOCKS_PER_SECOND = 0.5


def derive_schedule(
    days: int,
    samples: int,
    blocks_per_second: float,
    anchor_block: int,
) -> list[int]:
    """Return ``samples`` block numbers walking forward from oldest to newest.

    Sample ``i`` sits ``(samples - i) * blocks_per_interval`` blocks behind the
    anchor, so the newest sample is one interval before ``anchor_block`` rather
    than the anchor itself. Offsets beyond ``anchor_block`` clamp to block 1,
    while an offset equal to it lands on block 0, so a clamped schedule can
    dip by one block at that point. Adjacent samples may repeat a block when
    the interval rounds down to zero blocks.
    """
    if samples < 1:
        raise ValueError("samples must be at least 1")
    if days < 0:
        raise ValueError("days must be non-negative")
    if blocks_per_second <= 0:
        raise ValueError("blocks_per_second must be positive")
    if anchor_block < 0:
        raise ValueError("anchor_block must be non-negative")

    interval_seconds = (days * SECONDS_PER_DAY) // samples
    blocks_per_interval = int(interval_seconds * blocks_per_second)

    schedule: list[int] = []
    for index in range(samples):
        blocks_back = (samples - index) * blocks_per_interval
        if blocks_back > anchor_block:
            schedule.append(1)
        else:
            schedule.append(anchor_block - blocks_back)
    return schedule
