"""Typed records used by the TWAP run."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class Observation:
    """One sampled pool price at a block timestamp."""

    timestamp: int
    price: float
    block_number: int | None = None

    def __post_init__(self) -> None:
        if self.timestamp < 0:
            raise ValueError("observation timestamp must be non-negative")
        if not math.isfinite(self.price) or self.price < 0:
            raise ValueError("observation price must be finite and non-negative")


@dataclass(frozen=True)
class PoolReserves:
    """Raw getReserves() output of a pair contract at one block."""

    block_number: int
    reserve0: int
    reserve1: int
    block_timestamp_last: int


@dataclass(frozen=True)
class TokenInfo:
    """ERC-20 metadata for one side of the pool."""

    address: str
    symbol: str
    decimals: int


@dataclass(frozen=True)
class TwapResult:
    """Time-weighted average and summary statistics for one run."""

    twap: float
    current_price: float
    min_price: float
    max_price: float
    total_time_elapsed: int
    sample_count: int
    rejected_count: int = 0

    @property
    def price_range_pct(self) -> float | None:
        if self.min_price <= 0:
            return None
        return (self.max_price - self.min_price) / self.min_price * 100.0

    @property
    def deviation_pct(self) -> float | None:
        if self.twap <= 0:
            return None
        return (self.current_price - self.twap) / self.twap * 100.0

    def to_record(self) -> dict[str, object]:
        """Convert result into a serializable record."""
        record = asdict(self)
        record["price_range_pct"] = self.price_range_pct
        record["deviation_pct"] = self.deviation_pct
        return record
