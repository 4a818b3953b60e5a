"""Configuration container for the portal deposit flow."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from web3 import Web3
from web3.types import ChecksumAddress

from .constants import (
    DEFAULT_BALANCE_METHOD,
    DEFAULT_NODE_URL,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_PORTAL_ADDRESS,
    DEFAULT_REQUEST_TIMEOUT,
    DEPOSIT_GAS_LIMIT,
    DEPOSIT_MINT_VALUE,
    DEPOSIT_VALUE,
    FUNDING_BALANCE,
    L2_GAS_LIMIT,
    TRANSFER_VALUE,
)
from .exceptions import ValidationError


@dataclass(frozen=True)
class DepositFlowConfig:
    """Aggregated configuration used to run one deposit flow."""

    node_url: str = DEFAULT_NODE_URL
    portal_address: ChecksumAddress = Web3.to_checksum_address(DEFAULT_PORTAL_ADDRESS)
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    receipt_timeout: float | None = None
    deployment_timeout: float | None = None
    balance_method: str = DEFAULT_BALANCE_METHOD
    funding_balance: int = FUNDING_BALANCE
    transfer_value: int = TRANSFER_VALUE
    deposit_value: int = DEPOSIT_VALUE
    deposit_mint_value: int = DEPOSIT_MINT_VALUE
    deposit_gas_limit: int = DEPOSIT_GAS_LIMIT
    l2_gas_limit: int = L2_GAS_LIMIT

    @property
    def deposit_l2_gas(self) -> int:
        """Gas requested on L2 for the deposit: half of the rollup gas limit."""

        return self.l2_gas_limit // 2

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> DepositFlowConfig:
        """Build a config from environment variables, falling back to defaults."""

        env = os.environ if environ is None else environ

        portal_raw = env.get("PORTAL_ADDRESS", DEFAULT_PORTAL_ADDRESS)
        try:
            portal_address = Web3.to_checksum_address(portal_raw)
        except (TypeError, ValueError) as exc:
            raise ValidationError(
                "Invalid portal address",
                field="PORTAL_ADDRESS",
                value=portal_raw,
                details={"error": str(exc)},
            ) from exc

        return cls(
            node_url=env.get("NODE_URL", DEFAULT_NODE_URL).rstrip("/"),
            portal_address=portal_address,
            request_timeout=_parse_seconds(env, "REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
            poll_interval=_parse_seconds(env, "POLL_INTERVAL", DEFAULT_POLL_INTERVAL),
            receipt_timeout=_parse_seconds(env, "RECEIPT_TIMEOUT", None),
            deployment_timeout=_parse_seconds(env, "DEPLOYMENT_TIMEOUT", None),
            balance_method=env.get("BALANCE_METHOD", DEFAULT_BALANCE_METHOD),
        )


def _parse_seconds(env: Mapping[str, str], name: str, default: float | None) -> float | None:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default

    try:
        seconds = float(raw)
    except ValueError as exc:
        raise ValidationError(
            f"{name} must be a number of seconds", field=name, value=raw
        ) from exc

    if seconds <= 0:
        raise ValidationError(f"{name} must be positive", field=name, value=seconds)

    return seconds
