"""Contract reads for Uniswap-v2-style pairs (Aerodrome pools) and ERC-20 tokens."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from eth_abi import decode
from eth_abi.exceptions import DecodingError

from pooltwap.models import PoolReserves, TokenInfo
from pooltwap.sources.ethereum_rpc import EthereumRPCClientProtocol, EthereumRPCError

GET_RESERVES_SELECTOR = "0x0902f1ac"
TOKEN0_SELECTOR = "0x0dfe1681"
TOKEN1_SELECTOR = "0xd21220a7"
DECIMALS_SELECTOR = "0x313ce567"
SYMBOL_SELECTOR = "0x95d89b41"

UNKNOWN_SYMBOL = "UNKNOWN"

_ADDRESS_PATTERN = re.compile(r"0x[0-9a-fA-F]{40}")


def normalize_address(value: str) -> str:
    """Validate a 0x-prefixed 20-byte hex address and lower-case it."""
    candidate = value.strip().strip('"').strip("'")
    if not _ADDRESS_PATTERN.fullmatch(candidate):
        raise ValueError(f"invalid address: {value!r}")
    return candidate.lower()


def _return_bytes(raw: str) -> bytes:
    data = raw[2:] if raw.startswith("0x") else raw
    try:
        return bytes.fromhex(data)
    except ValueError as exc:
        raise EthereumRPCError("return data is not valid hex") from exc


def decode_return(types: Sequence[str], raw: str) -> tuple[Any, ...]:
    """ABI-decode eth_call return data, reporting failures as RPC errors."""
    data = _return_bytes(raw)
    try:
        return decode(list(types), data)
    except (DecodingError, UnicodeDecodeError) as exc:
        raise EthereumRPCError(
            f"cannot decode ({', '.join(types)}) from {len(data)} bytes: {exc}"
        ) from exc


def decode_address(raw: str) -> str:
    (address,) = decode_return(["address"], raw)
    return address.lower()


def decode_string(raw: str) -> str:
    """Decode a symbol()-style ``string`` return value.

    Some legacy tokens return ``bytes32`` instead; a single 32-byte word is
    read as a null-padded byte string.
    """
    if len(_return_bytes(raw)) == 32:
        (value,) = decode_return(["bytes32"], raw)
        return value.rstrip(b"\x00").decode("utf-8", errors="replace")
    (value,) = decode_return(["string"], raw)
    return value


def fetch_reserves(
    client: EthereumRPCClientProtocol,
    pool_address: str,
    block_number: int,
) -> PoolReserves:
    """Read getReserves() of a pair at a historical block."""
    raw = client.call(pool_address, GET_RESERVES_SELECTOR, block_number)
    reserve0, reserve1, block_timestamp_last = decode_return(
        ["uint256", "uint256", "uint256"], raw
    )
    return PoolReserves(
        block_number=block_number,
        reserve0=reserve0,
        reserve1=reserve1,
        block_timestamp_last=block_timestamp_last,
    )


def fetch_pool_token_addresses(
    client: EthereumRPCClientProtocol,
    pool_address: str,
) -> tuple[str, str]:
    """Return (token0, token1) addresses of a pair."""
    token0 = decode_address(client.call(pool_address, TOKEN0_SELECTOR))
    token1 = decode_address(client.call(pool_address, TOKEN1_SELECTOR))
    return token0, token1


def fetch_token_info(
    client: EthereumRPCClientProtocol,
    token_address: str,
) -> TokenInfo:
    """Read decimals (required) and symbol (best effort) of an ERC-20 token."""
    (decimals,) = decode_return(
        ["uint8"], client.call(token_address, DECIMALS_SELECTOR)
    )
    try:
        symbol = decode_string(client.call(token_address, SYMBOL_SELECTOR))
    except EthereumRPCError as exc:
        logging.getLogger("pooltwap").warning(
            "symbol() unavailable for %s: %s", token_address, exc
        )
        symbol = UNKNOWN_SYMBOL
    return TokenInfo(
        address=token_address,
        symbol=symbol or UNKNOWN_SYMBOL,
        decimals=decimals,
    )


@dataclass
class PoolStateReader:
    """Reads decimal-scaling metadata once and reserves per block for one pool."""

    client: EthereumRPCClientProtocol
    pool_address: str
    token0: TokenInfo | None = field(default=None, init=False)
    token1: TokenInfo | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        self.pool_address = normalize_address(self.pool_address)

    def load_tokens(self) -> tuple[TokenInfo, TokenInfo]:
        if self.token0 is None or self.token1 is None:
            token0_address, token1_address = fetch_pool_token_addresses(
                self.client, self.pool_address
            )
            self.token0 = fetch_token_info(self.client, token0_address)
            self.token1 = fetch_token_info(self.client, token1_address)
        return self.token0, self.token1

    def get_reserves_and_decimals_at(
        self, block_number: int
    ) -> tuple[int, int, int, int]:
        """Return (reserve0, reserve1, decimals0, decimals1) at a block."""
        token0, token1 = self.load_tokens()
        reserves = fetch_reserves(self.client, self.pool_address, block_number)
        return reserves.reserve0, reserves.reserve1, token0.decimals, token1.decimals
