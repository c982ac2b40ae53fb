"""Console text for TWAP runs."""

from __future__ import annotations

from datetime import date

from pooltwap.models import TokenInfo
from pooltwap.pipeline import TwapRunResult
from pooltwap.utils_time import format_utc

RULE = "=" * 39
PROGRESS_EVERY_SAMPLES = 10


def _pct(value: float | None) -> str:
    if value is None:
        return "n/a"
    return f"{value:.2f}%"


def format_header(pool_address: str, days: int, samples: int) -> list[str]:
    return [
        "Aerodrome TWAP Calculator",
        f"Pool: {pool_address}",
        f"Period: {days} days",
        f"Samples: {samples}",
    ]


def format_tokens(token0: TokenInfo, token1: TokenInfo) -> list[str]:
    return [
        f"Token0: {token0.symbol} ({token0.address})",
        f"Token1: {token1.symbol} ({token1.address})",
    ]


def format_end_date(end_date: date, tz_name: str, timestamp: int) -> str:
    return (
        f"End date: {end_date.isoformat()} (midnight {tz_name} = timestamp "
        f"{timestamp}, {format_utc(timestamp)} UTC)"
    )


def should_report_progress(
    index: int, total: int, every: int = PROGRESS_EVERY_SAMPLES
) -> bool:
    """Report every ``every`` samples and always on the last one."""
    return index == total or (every > 0 and index % every == 0)


def format_progress(collected: int, total: int) -> str:
    return f"Collected {collected}/{total} samples"


def format_results(run: TwapRunResult, days: int) -> list[str]:
    """Render the results block for a finished run."""
    result = run.result
    pair = f"{run.token1.symbol} per {run.token0.symbol}"
    return [
        "RESULTS",
        RULE,
        f"{days}-Day TWAP: {result.twap:.8f} {pair}",
        f"Current Price: {result.current_price:.8f} {pair}",
        f"Min Price: {result.min_price:.8f}",
        f"Max Price: {result.max_price:.8f}",
        f"Price Range: {_pct(result.price_range_pct)}",
        f"Deviation from TWAP: {_pct(result.deviation_pct)}",
        RULE,
    ]
