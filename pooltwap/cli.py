"""Command-line entrypoint for pool TWAP computation."""

from __future__ import annotations

import argparse
import os
from collections.abc import Sequence

from dotenv import load_dotenv

from pooltwap.aggregator import NoPriceDataError
from pooltwap.config import (
    DEFAULT_RPC_URL,
    POOL_ADDRESS_ENV,
    RPC_URL_ENV,
    AppConfig,
    load_config,
)
from pooltwap.logging import get_logger
from pooltwap.models import Observation, TokenInfo
from pooltwap.pipeline import TwapRunError, run_twap
from pooltwap.reporting import (
    format_end_date,
    format_header,
    format_progress,
    format_results,
    format_tokens,
    should_report_progress,
)
from pooltwap.sources.ethereum_rpc import UrllibEthereumRPCClient
from pooltwap.utils_time import DEFAULT_TIMEZONE, local_midnight_timestamp


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser for the TWAP command."""
    parser = argparse.ArgumentParser(
        prog="pooltwap",
        description="Time-weighted average price of an Aerodrome pool on Base.",
    )
    parser.add_argument(
        "-p",
        "--pool",
        default=None,
        help=f"Pool address. Defaults to {POOL_ADDRESS_ENV}.",
    )
    parser.add_argument(
        "-r",
        "--rpc",
        default=None,
        help=f"Base RPC URL. Defaults to {RPC_URL_ENV} or {DEFAULT_RPC_URL}.",
    )
    parser.add_argument("-d", "--days", default=7, type=int)
    parser.add_argument(
        "-s",
        "--samples",
        default=168,
        type=int,
        help="Number of sample points (168 = hourly for a week).",
    )
    parser.add_argument(
        "-e",
        "--end-date",
        default=None,
        help="End date YYYY-MM-DD at local midnight. Defaults to now.",
    )
    parser.add_argument("--timezone", default=DEFAULT_TIMEZONE)
    parser.add_argument("--seconds-per-block", default=2.0, type=float)
    parser.add_argument("--rpc-timeout-seconds", default=30, type=int)
    parser.add_argument("--log-level", default="INFO")
    return parser


def _emit(lines: Sequence[str]) -> None:
    for line in lines:
        print(line, flush=True)


def run_twap_command(config: AppConfig) -> int:
    """Run one TWAP computation and print the report."""
    logger = get_logger(level=config.log_level)
    _emit(format_header(config.pool_address, config.days, config.samples))

    end_timestamp: int | None = None
    if config.end_date is not None:
        try:
            end_timestamp = local_midnight_timestamp(config.end_date, config.timezone)
        except ValueError as exc:
            logger.error("invalid end date: %s", exc)
            return 1

    def _on_tokens(token0: TokenInfo, token1: TokenInfo) -> None:
        _emit(format_tokens(token0, token1))
        if config.end_date is not None and end_timestamp is not None:
            _emit([format_end_date(config.end_date, config.timezone, end_timestamp)])

    def _on_sample(index: int, total: int, observation: Observation | None) -> None:
        if should_report_progress(index, total):
            logger.info(format_progress(index, total))

    client = UrllibEthereumRPCClient(
        rpc_url=config.rpc_url,
        timeout_seconds=config.rpc_timeout_seconds,
    )
    try:
        run = run_twap(
            client,
            pool_address=config.pool_address,
            days=config.days,
            samples=config.samples,
            blocks_per_second=config.blocks_per_second,
            end_timestamp=end_timestamp,
            on_tokens=_on_tokens,
            on_sample=_on_sample,
        )
    except (TwapRunError, NoPriceDataError, ValueError) as exc:
        logger.error("twap run failed: %s", exc)
        return 1

    _emit(format_results(run, config.days))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)
    load_dotenv()

    pool_address = args.pool or os.getenv(POOL_ADDRESS_ENV)
    if not pool_address:
        parser.error(f"--pool is required unless {POOL_ADDRESS_ENV} is set")

    try:
        config = load_config(
            pool_address=pool_address,
            rpc_url=args.rpc or os.getenv(RPC_URL_ENV) or DEFAULT_RPC_URL,
            days=args.days,
            samples=args.samples,
            end_date=args.end_date,
            timezone=args.timezone,
            seconds_per_block=args.seconds_per_block,
            rpc_timeout_seconds=args.rpc_timeout_seconds,
            log_level=args.log_level,
        )
    except ValueError as exc:
        get_logger().error("invalid configuration: %s", exc)
        return 1

    return run_twap_command(config)


if __name__ == "__main__":
    raise SystemExit(main())
