"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from tests.fakes import ALICE, BOB, CAROL, USER, FakeEnvironment, FakeSortedList
from trovekit.config import AppConfig, ChainConfig, ContractsConfig, TransactionsConfig
from trovekit.models import Fees, UserTrove
from trovekit.numeric import Decimal

LAST_FEE_OPERATION = datetime(2021, 4, 5, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def minimum_fees() -> Fees:
    """Fees with a zero base rate: every rate is at its minimum."""
    return Fees(
        base_rate_without_decay=Decimal.ZERO,
        minute_decay_factor=Decimal("0.999037758833783"),
        beta=Decimal(2),
        last_fee_operation=LAST_FEE_OPERATION,
        time_of_latest_block=LAST_FEE_OPERATION + timedelta(hours=1),
    )


@pytest.fixture()
def equal_troves() -> list[UserTrove]:
    """Three troves of 20 collateral / 2210 debt (net debt 2010 each)."""
    return [
        UserTrove(Decimal(20), Decimal(2210), owner_address=owner)
        for owner in (ALICE, BOB, CAROL)
    ]


@pytest.fixture()
def fake_sorted_list() -> FakeSortedList:
    return FakeSortedList()


@pytest.fixture()
def fake_environment() -> FakeEnvironment:
    return FakeEnvironment()


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_contracts_config() -> ContractsConfig:
    return ContractsConfig(
        borrower_operations="0x" + "01" * 20,
        trove_manager="0x" + "02" * 20,
        sorted_troves="0x" + "03" * 20,
        hint_helpers="0x" + "04" * 20,
        multi_trove_getter="0x" + "05" * 20,
        price_feed="0x" + "06" * 20,
    )


@pytest.fixture()
def sample_app_config(sample_contracts_config: ContractsConfig) -> AppConfig:
    return AppConfig(
        chain=ChainConfig(rpc_url="http://localhost:8545", rpc_timeout=5, from_address=USER),
        contracts=sample_contracts_config,
        transactions=TransactionsConfig(receipt_poll_interval=0.0),
    )


SAMPLE_YAML = textwrap.dedent("""\
    chain:
      rpc_url: "http://localhost:8545"
      rpc_timeout: 10
      from_address: "0x9999999999999999999999999999999999999999"
    contracts:
      borrower_operations: "0x0101010101010101010101010101010101010101"
      trove_manager: "0x0202020202020202020202020202020202020202"
      sorted_troves: "0x0303030303030303030303030303030303030303"
      hint_helpers: "0x0404040404040404040404040404040404040404"
      multi_trove_getter: "0x0505050505050505050505050505050505050505"
      price_feed: "0x0606060606060606060606060606060606060606"
    transactions:
      receipt_poll_interval: 2
      redemption_rate_slippage: "0.002"
      redeem_max_iterations: 50
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
