"""CLI tests for TWAP command wiring."""

from __future__ import annotations

import http.client
from typing import Any
from unittest.mock import patch

import pytest

from pooltwap import cli
from pooltwap.aggregator import NoPriceDataError
from pooltwap.models import TokenInfo, TwapResult
from pooltwap.pipeline import TwapRunError, TwapRunResult

POOL = "0xcdac0d6c6c59727a65f871236188350531885c43"
MIXED_CASE_POOL = "0xCdAC0d6c6C59727a65F871236188350531885C43"


def _fake_run(end_timestamp: int | None = None) -> TwapRunResult:
    return TwapRunResult(
        pool_address=POOL,
        token0=TokenInfo(address="0x" + "1" * 40, symbol="WETH", decimals=18),
        token1=TokenInfo(address="0x" + "2" * 40, symbol="USDC", decimals=6),
        anchor_block=1_000_000,
        end_timestamp=end_timestamp,
        schedule=[1, 2, 3],
        result=TwapResult(
            twap=2_500.0,
            current_price=2_600.0,
            min_price=2_400.0,
            max_price=2_700.0,
            total_time_elapsed=3_600,
            sample_count=3,
        ),
    )


def _announce(kwargs: dict[str, Any], run: TwapRunResult) -> TwapRunResult:
    kwargs["on_tokens"](run.token0, run.token1)
    return run


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "load_dotenv", lambda: False)
    monkeypatch.delenv("POOLTWAP_POOL_ADDRESS", raising=False)
    monkeypatch.delenv("BASE_RPC_URL", raising=False)


def test_cli_runs_and_prints_results(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: dict[str, object] = {}

    def _fake_run_twap(client, **kwargs):
        captured["rpc_url"] = client.rpc_url
        captured.update(kwargs)
        return _announce(kwargs, _fake_run())

    monkeypatch.setattr(cli, "run_twap", _fake_run_twap)

    exit_code = cli.main(["--pool", MIXED_CASE_POOL, "-d", "3", "-s", "72"])

    assert exit_code == 0
    assert captured["rpc_url"] == "https://mainnet.base.org"
    assert captured["pool_address"] == POOL
    assert captured["days"] == 3
    assert captured["samples"] == 72
    assert captured["blocks_per_second"] == 0.5
    assert captured["end_timestamp"] is None

    out = capsys.readouterr().out
    assert "3-Day TWAP: 2500.00000000 USDC per WETH" in out
    assert "Current Price: 2600.00000000 USDC per WETH" in out
    assert "Price Range: 12.50%" in out
    assert "Deviation from TWAP: 4.00%" in out


def test_cli_end_date_resolves_central_midnight(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: dict[str, object] = {}

    def _fake_run_twap(client, **kwargs):
        captured.update(kwargs)
        return _announce(kwargs, _fake_run(kwargs["end_timestamp"]))

    monkeypatch.setattr(cli, "run_twap", _fake_run_twap)

    exit_code = cli.main(["-p", POOL, "--end-date", "2025-01-01"])

    assert exit_code == 0
    assert captured["end_timestamp"] == 1_735_711_200
    assert "timestamp 1735711200" in capsys.readouterr().out


def test_cli_reads_pool_and_rpc_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def _fake_run_twap(client, **kwargs):
        captured["rpc_url"] = client.rpc_url
        captured.update(kwargs)
        return _announce(kwargs, _fake_run())

    monkeypatch.setattr(cli, "run_twap", _fake_run_twap)
    monkeypatch.setenv("POOLTWAP_POOL_ADDRESS", POOL)
    monkeypatch.setenv("BASE_RPC_URL", "https://base.example/rpc")

    assert cli.main([]) == 0
    assert captured["pool_address"] == POOL
    assert captured["rpc_url"] == "https://base.example/rpc"


def test_cli_without_pool_is_a_usage_error() -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main([])
    assert exc.value.code == 2


def test_cli_invalid_pool_address_exits_one() -> None:
    assert cli.main(["--pool", "0xnotapool"]) == 1


def test_cli_invalid_end_date_exits_one() -> None:
    assert cli.main(["--pool", POOL, "--end-date", "2025-02-30"]) == 1


def test_cli_ambiguous_end_date_exits_one(monkeypatch: pytest.MonkeyPatch) -> None:
    def _unexpected(client, **kwargs):
        raise AssertionError("run_twap must not be called")

    monkeypatch.setattr(cli, "run_twap", _unexpected)

    exit_code = cli.main(
        ["--pool", POOL, "--end-date", "2024-11-03", "--timezone", "America/Havana"]
    )

    assert exit_code == 1


@pytest.mark.parametrize(
    "error",
    [
        TwapRunError("failed to fetch reserves at block 10"),
        NoPriceDataError("no price data collected"),
    ],
)
def test_cli_fatal_run_errors_exit_one(
    monkeypatch: pytest.MonkeyPatch, error: Exception
) -> None:
    def _failing_run_twap(client, **kwargs):
        raise error

    monkeypatch.setattr(cli, "run_twap", _failing_run_twap)

    assert cli.main(["--pool", POOL]) == 1


def test_cli_prints_tokens_and_end_date_before_sampling(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    printed_before_sampling: list[str] = []

    def _fake_run_twap(client, **kwargs):
        run = _announce(kwargs, _fake_run(kwargs["end_timestamp"]))
        printed_before_sampling.append(capsys.readouterr().out)
        return run

    monkeypatch.setattr(cli, "run_twap", _fake_run_twap)

    assert cli.main(["-p", POOL, "--end-date", "2025-01-01"]) == 0

    (early,) = printed_before_sampling
    assert early.index("Token0: WETH") < early.index("timestamp 1735711200")
    assert "Day TWAP" not in early


def test_cli_dropped_rpc_connection_exits_one() -> None:
    with patch(
        "pooltwap.sources.ethereum_rpc.request.urlopen",
        side_effect=http.client.RemoteDisconnected("Remote end closed connection"),
    ):
        assert cli.main(["--pool", POOL]) == 1
