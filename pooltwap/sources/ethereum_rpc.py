"""Ethereum JSON-RPC transport for block and contract-state reads."""

from __future__ import annotations

import http.client
import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib import error, request


class EthereumRPCError(RuntimeError):
    """Raised when an RPC request fails or returns an invalid payload."""


class BlockNotFoundError(EthereumRPCError):
    """Raised when a queried block does not exist on the node."""


class EthereumRPCClientProtocol:
    """Protocol-like base for Ethereum RPC clients."""

    def get_latest_block_number(self) -> int:
        """Return latest block number."""
        raise NotImplementedError

    def get_block_by_number(self, block_number: int) -> Mapping[str, Any] | None:
        """Return block JSON object for a block number or None if missing."""
        raise NotImplementedError

    def call(self, to: str, data: str, block_number: int | None = None) -> str:
        """Run eth_call against ``to`` at a block (latest when None)."""
        raise NotImplementedError


@dataclass
class UrllibEthereumRPCClient(EthereumRPCClientProtocol):
    """Ethereum JSON-RPC client issuing one request per call, without retries."""

    rpc_url: str
    timeout_seconds: int = 30

    def _rpc_call(self, method: str, params: list[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": method,
            "params": params,
        }
        req = request.Request(
            self.rpc_url,
            data=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json"},
            method="POST",
        )

        try:
            with request.urlopen(req, timeout=self.timeout_seconds) as response:
                body = response.read().decode("utf-8")
        except error.HTTPError as exc:
            raise EthereumRPCError(f"HTTP {exc.code} for {method}") from exc
        except (http.client.HTTPException, OSError) as exc:
            raise EthereumRPCError(f"transport failure for {method}: {exc}") from exc

        try:
            parsed = json.loads(body)
        except json.JSONDecodeError as exc:
            raise EthereumRPCError(f"invalid JSON response for {method}") from exc
        if not isinstance(parsed, Mapping):
            raise EthereumRPCError(f"unexpected response payload for {method}")
        if parsed.get("error"):
            raise EthereumRPCError(f"RPC error for {method}: {parsed['error']}")
        if "result" not in parsed:
            raise EthereumRPCError(f"RPC response missing result for {method}")
        return parsed["result"]

    def get_latest_block_number(self) -> int:
        result = self._rpc_call("eth_blockNumber", [])
        return _hex_to_int(result)

    def get_block_by_number(self, block_number: int) -> Mapping[str, Any] | None:
        result = self._rpc_call("eth_getBlockByNumber", [_to_hex(block_number), False])
        if result is None:
            return None
        if not isinstance(result, Mapping):
            raise EthereumRPCError("unexpected block payload")
        return result

    def call(self, to: str, data: str, block_number: int | None = None) -> str:
        block_tag = "latest" if block_number is None else _to_hex(block_number)
        result = self._rpc_call("eth_call", [{"to": to, "data": data}, block_tag])
        if not isinstance(result, str):
            raise EthereumRPCError("unexpected eth_call payload")
        return result


def _to_hex(value: int) -> str:
    return hex(value)


def _hex_to_int(value: str | None) -> int:
    if value is None:
        return 0
    try:
        return int(value, 16)
    except (TypeError, ValueError) as exc:
        raise EthereumRPCError(f"invalid hex quantity: {value!r}") from exc


def parse_block_timestamp(block: Mapping[str, Any]) -> int:
    """Return the unix timestamp of a block payload."""
    try:
        return _hex_to_int(str(block["timestamp"]))
    except KeyError as exc:
        raise EthereumRPCError("block missing required timestamp") from exc


def get_block_timestamp(client: EthereumRPCClientProtocol, block_number: int) -> int:
    """Fetch one block and return its timestamp; missing blocks are fatal."""
    block = client.get_block_by_number(block_number)
    if block is None:
        raise BlockNotFoundError(f"block {block_number} not found")
    return parse_block_timestamp(block)
