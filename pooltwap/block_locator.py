"""Map a wall-clock timestamp to the latest block produced at or before it."""

from __future__ import annotations

import logging
from collections.abc import Callable

from pooltwap.sources.ethereum_rpc import (
    EthereumRPCClientProtocol,
    get_block_timestamp,
)

ProbeCallback = Callable[[int, int], None]


def locate_block_at_timestamp(
    client: EthereumRPCClientProtocol,
    target_timestamp: int,
    *,
    on_probe: ProbeCallback | None = None,
) -> int:
    """Return the highest block whose timestamp is <= ``target_timestamp``.

    Targets at or after the head block's timestamp resolve to the head without
    searching. Otherwise a binary search over ``[1, head]`` probes one block
    per step, so a chain of N blocks costs about ceil(log2(N)) lookups after
    the two head reads. Targets earlier than block 1 clamp to block 1.

    Any missing block or transport failure propagates immediately.
    """
    logger = logging.getLogger("pooltwap")
    latest_block_number = client.get_latest_block_number()
    latest_timestamp = get_block_timestamp(client, latest_block_number)

    if target_timestamp >= latest_timestamp:
        return latest_block_number

    logger.info("finding block at timestamp %s", target_timestamp)

    low = 1
    high = latest_block_number
    best_block = 1

    while low <= high:
        mid = (low + high) // 2
        mid_ts = get_block_timestamp(client, mid)
        if on_probe is not None:
            on_probe(mid, mid_ts)

        if mid_ts <= target_timestamp:
            best_block = mid
            low = mid + 1
        else:
            high = mid - 1

    logger.info("found block %s for timestamp %s", best_block, target_timestamp)
    return best_block
