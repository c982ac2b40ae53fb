"""Time-weighted average price over sequential pool observations."""

from __future__ import annotations

import math
from collections.abc import Iterable

from pooltwap.models import Observation, TwapResult


class NoPriceDataError(RuntimeError):
    """Raised when no observation was accepted before asking for a result."""


def scaled_price(
    reserve0: int,
    reserve1: int,
    decimals0: int,
    decimals1: int,
) -> float | None:
    """Return token1-per-token0 price from raw reserves, or None if unpriceable."""
    if reserve0 <= 0:
        return None
    reserve0_units = reserve0 / 10**decimals0
    reserve1_units = reserve1 / 10**decimals1
    return reserve1_units / reserve0_units


class TwapAggregator:
    """Accumulates observations oldest to newest into a step-function TWAP.

    Each accepted price is weighted by the gap until the next accepted
    observation. The newest price therefore never carries weight of its own;
    it only shows up as the current price and in min/max.
    """

    def __init__(self) -> None:
        self.total_weighted_price = 0.0
        self.total_time_elapsed = 0
        self.accepted_count = 0
        self.rejected_count = 0
        self._previous: Observation | None = None
        self._min_price = math.inf
        self._max_price = -math.inf

    def add(self, observation: Observation) -> Observation:
        previous = self._previous
        if previous is not None:
            time_diff = observation.timestamp - previous.timestamp
            if time_diff < 0:
                raise ValueError(
                    "observations must be added in timestamp order: "
                    f"{observation.timestamp} after {previous.timestamp}"
                )
            self.total_weighted_price += previous.price * time_diff
            self.total_time_elapsed += time_diff

        self._min_price = min(self._min_price, observation.price)
        self._max_price = max(self._max_price, observation.price)
        self.accepted_count += 1
        self._previous = observation
        return observation

    def reject(self) -> None:
        """Count a sample that could not be priced."""
        self.rejected_count += 1

    def result(self) -> TwapResult:
        last = self._previous
        if last is None:
            raise NoPriceDataError("no price data collected")

        if self.total_time_elapsed > 0:
            twap = self.total_weighted_price / self.total_time_elapsed
        else:
            twap = last.price

        return TwapResult(
            twap=twap,
            current_price=last.price,
            min_price=self._min_price,
            max_price=self._max_price,
            total_time_elapsed=self.total_time_elapsed,
            sample_count=self.accepted_count,
            rejected_count=self.rejected_count,
        )


def compute_twap(samples: Iterable[Observation | None]) -> TwapResult:
    """Aggregate sampled observations, counting ``None`` entries as rejected.

    Accepted observations are fed oldest first. The sort is stable, so samples
    already in block order keep their order, including repeated blocks.
    """
    aggregator = TwapAggregator()
    accepted: list[Observation] = []
    for sample in samples:
        if sample is None:
            aggregator.reject()
        else:
            accepted.append(sample)
    for observation in sorted(accepted, key=lambda item: item.timestamp):
        aggregator.add(observation)
    return aggregator.result()
