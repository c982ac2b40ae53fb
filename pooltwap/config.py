"""Configuration contract for TWAP runs."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from pydantic import BaseModel, Field, field_validator

from pooltwap.schedule import DEFAULT_BLOCKS_PER_SECOND
from pooltwap.sources.pool import normalize_address
from pooltwap.utils_time import DEFAULT_TIMEZONE, parse_end_date, resolve_timezone

DEFAULT_RPC_URL = "https://mainnet.base.org"
RPC_URL_ENV = "BASE_RPC_URL"
POOL_ADDRESS_ENV = "POOLTWAP_POOL_ADDRESS"


class AppConfig(BaseModel):
    """Typed runtime settings for one TWAP computation."""

    pool_address: str
    rpc_url: str = Field(default=DEFAULT_RPC_URL)
    days: int = Field(default=7, ge=1)
    samples: int = Field(default=168, ge=1)
    end_date: date | None = None
    timezone: str = Field(default=DEFAULT_TIMEZONE)
    seconds_per_block: float = Field(default=1 / DEFAULT_BLOCKS_PER_SECOND, gt=0)
    rpc_timeout_seconds: int = Field(default=30, ge=1)
    log_level: str = Field(default="INFO")

    @field_validator("pool_address", mode="before")
    @classmethod
    def _normalize_pool_address(cls, value: object) -> str:
        if not isinstance(value, str):
            raise ValueError("pool_address must be a string")
        return normalize_address(value)

    @field_validator("end_date", mode="before")
    @classmethod
    def _parse_end_date(cls, value: date | str | None) -> date | None:
        if isinstance(value, str):
            return parse_end_date(value)
        return value

    @field_validator("timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        resolve_timezone(value)
        return value

    @field_validator("rpc_url")
    @classmethod
    def _validate_rpc_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("rpc_url must be an http(s) URL")
        return value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {value!r}")
        return level

    @property
    def blocks_per_second(self) -> float:
        return 1.0 / self.seconds_per_block


def load_config(**kwargs: Any) -> AppConfig:
    """Build and validate application configuration."""
    return AppConfig(**kwargs)
