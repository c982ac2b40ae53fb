"""End-to-end TWAP run: anchor -> schedule -> sampled reserves -> aggregate."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from pooltwap.aggregator import compute_twap, scaled_price
from pooltwap.block_locator import ProbeCallback, locate_block_at_timestamp
from pooltwap.models import Observation, TokenInfo, TwapResult
from pooltwap.schedule import derive_schedule
from pooltwap.sources.ethereum_rpc import (
    EthereumRPCClientProtocol,
    EthereumRPCError,
    get_block_timestamp,
)
from pooltwap.sources.pool import PoolStateReader

SampleCallback = Callable[[int, int, Observation | None], None]
TokensCallback = Callable[[TokenInfo, TokenInfo], None]


class TwapRunError(RuntimeError):
    """Raised when a stage of the run fails; the message names the stage."""


@dataclass(frozen=True)
class TwapRunResult:
    """Inputs resolved during a run and the aggregated statistics."""

    pool_address: str
    token0: TokenInfo
    token1: TokenInfo
    anchor_block: int
    end_timestamp: int | None
    schedule: list[int]
    result: TwapResult


def resolve_anchor_block(
    client: EthereumRPCClientProtocol,
    *,
    end_timestamp: int | None = None,
    on_probe: ProbeCallback | None = None,
) -> int:
    """Return the head block, or the block at ``end_timestamp`` when given."""
    if end_timestamp is None:
        try:
            return client.get_latest_block_number()
        except EthereumRPCError as exc:
            raise TwapRunError(f"failed to get current block: {exc}") from exc

    try:
        return locate_block_at_timestamp(client, end_timestamp, on_probe=on_probe)
    except EthereumRPCError as exc:
        raise TwapRunError(
            f"failed to find block at timestamp {end_timestamp}: {exc}"
        ) from exc


def collect_observations(
    client: EthereumRPCClientProtocol,
    reader: PoolStateReader,
    schedule: list[int],
    *,
    on_sample: SampleCallback | None = None,
) -> list[Observation | None]:
    """Fetch timestamp and reserves for each scheduled block, in order.

    Returns one entry per block; unpriceable samples are ``None``.
    """
    samples: list[Observation | None] = []
    total = len(schedule)
    for index, block_number in enumerate(schedule, start=1):
        try:
            timestamp = get_block_timestamp(client, block_number)
        except EthereumRPCError as exc:
            raise TwapRunError(f"failed to fetch block {block_number}: {exc}") from exc

        try:
            reserve0, reserve1, decimals0, decimals1 = (
                reader.get_reserves_and_decimals_at(block_number)
            )
        except EthereumRPCError as exc:
            raise TwapRunError(
                f"failed to fetch reserves at block {block_number}: {exc}"
            ) from exc

        price = scaled_price(reserve0, reserve1, decimals0, decimals1)
        observation = None
        if price is not None:
            observation = Observation(
                timestamp=timestamp, price=price, block_number=block_number
            )
        samples.append(observation)
        if on_sample is not None:
            on_sample(index, total, observation)

    return samples


def run_twap(
    client: EthereumRPCClientProtocol,
    *,
    pool_address: str,
    days: int,
    samples: int,
    blocks_per_second: float,
    end_timestamp: int | None = None,
    on_tokens: TokensCallback | None = None,
    on_sample: SampleCallback | None = None,
    on_probe: ProbeCallback | None = None,
) -> TwapRunResult:
    """Compute the pool TWAP over ``days`` ending at the anchor block."""
    logger = logging.getLogger("pooltwap")
    started = time.monotonic()

    reader = PoolStateReader(client=client, pool_address=pool_address)
    try:
        token0, token1 = reader.load_tokens()
    except EthereumRPCError as exc:
        raise TwapRunError(f"failed to load pool tokens: {exc}") from exc
    if on_tokens is not None:
        on_tokens(token0, token1)

    anchor_block = resolve_anchor_block(
        client, end_timestamp=end_timestamp, on_probe=on_probe
    )
    schedule = derive_schedule(days, samples, blocks_per_second, anchor_block)
    if logger.isEnabledFor(logging.INFO):
        logger.info(
            "sampling %s blocks %s..%s behind anchor %s",
            len(schedule),
            schedule[0],
            schedule[-1],
            anchor_block,
        )

    observations = collect_observations(
        client, reader, schedule, on_sample=on_sample
    )
    result = compute_twap(observations)

    if result.rejected_count:
        logger.warning(
            "skipped %s samples with empty token0 reserve", result.rejected_count
        )
    logger.info(
        "twap run finished with %s samples in %.1fs",
        result.sample_count,
        time.monotonic() - started,
    )
    logger.debug("twap result %s", result.to_record())

    return TwapRunResult(
        pool_address=reader.pool_address,
        token0=token0,
        token1=token1,
        anchor_block=anchor_block,
        end_timestamp=end_timestamp,
        schedule=schedule,
        result=result,
    )
