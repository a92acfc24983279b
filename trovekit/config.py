"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .constants import (
    DEFAULT_BORROWING_RATE_SLIPPAGE,
    DEFAULT_REDEMPTION_RATE_SLIPPAGE,
    REDEEM_MAX_ITERATIONS,
)
from .numeric import Decimal

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChainConfig:
    rpc_url: str = ""
    rpc_timeout: int = 30
    from_address: str = ""


@dataclass(frozen=True)
class ContractsConfig:
    borrower_operations: str = ""
    trove_manager: str = ""
    sorted_troves: str = ""
    hint_helpers: str = ""
    multi_trove_getter: str = ""
    price_feed: str = ""


@dataclass(frozen=True)
class TransactionsConfig:
    receipt_poll_interval: float = 4.0
    borrowing_rate_slippage: Decimal = DEFAULT_BORROWING_RATE_SLIPPAGE
    redemption_rate_slippage: Decimal = DEFAULT_REDEMPTION_RATE_SLIPPAGE
    redeem_max_iterations: int = REDEEM_MAX_ITERATIONS


@dataclass(frozen=True)
class AppConfig:
    chain: ChainConfig = field(default_factory=ChainConfig)
    contracts: ContractsConfig = field(default_factory=ContractsConfig)
    transactions: TransactionsConfig = field(default_factory=TransactionsConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_chain(raw: dict[str, Any]) -> ChainConfig:
    return ChainConfig(
        rpc_url=raw.get("rpc_url", ""),
        rpc_timeout=int(raw.get("rpc_timeout", 30)),
        from_address=raw.get("from_address", ""),
    )


def _build_contracts(raw: dict[str, Any]) -> ContractsConfig:
    known = {f.name for f in fields(ContractsConfig)}
    unknown = set(raw) - known
    if unknown:
        logger.warning("Ignoring unknown contracts: %s", ", ".join(sorted(unknown)))
    return ContractsConfig(**{k: str(v) for k, v in raw.items() if k in known})


def _build_transactions(raw: dict[str, Any]) -> TransactionsConfig:
    return TransactionsConfig(
        receipt_poll_interval=float(raw.get("receipt_poll_interval", 4.0)),
        borrowing_rate_slippage=Decimal(
            str(raw.get("borrowing_rate_slippage", DEFAULT_BORROWING_RATE_SLIPPAGE))
        ),
        redemption_rate_slippage=Decimal(
            str(raw.get("redemption_rate_slippage", DEFAULT_REDEMPTION_RATE_SLIPPAGE))
        ),
        redeem_max_iterations=int(raw.get("redeem_max_iterations", REDEEM_MAX_ITERATIONS)),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from the package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        chain=_build_chain(raw.get("chain", {})),
        contracts=_build_contracts(raw.get("contracts", {})),
        transactions=_build_transactions(raw.get("transactions", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.chain.rpc_url:
        raise ValueError("chain.rpc_url must be configured")

    for f in fields(ContractsConfig):
        if not getattr(cfg.contracts, f.name):
            raise ValueError(f"Contract address '{f.name}' is not configured")

    if cfg.transactions.redeem_max_iterations < 1:
        raise ValueError("transactions.redeem_max_iterations must be at least 1")
    if cfg.transactions.receipt_poll_interval <= 0:
        raise ValueError("transactions.receipt_poll_interval must be positive")
