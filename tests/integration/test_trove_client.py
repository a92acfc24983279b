"""Integration tests for the high-level client."""
from __future__ import annotations

import logging

import pytest

from tests.fakes import LOWER, UPPER, FakeEnvironment, FakeFeeState, FakeLedger, FakeSortedList
from trovekit.chains.ethereum import EthereumClient, EthereumFeeState, EthereumLedger, EthereumSortedList
from trovekit.config import AppConfig
from trovekit.models import Fees, Hint, ReceiptStatus, UserTrove
from trovekit.services import TransactionPopulator, TroveClient


@pytest.fixture()
def trove_client(
    sample_app_config: AppConfig,
    equal_troves: list[UserTrove],
    minimum_fees: Fees,
    fake_environment: FakeEnvironment,
) -> TroveClient:
    client = TroveClient(sample_app_config)
    client.populator = TransactionPopulator(
        FakeLedger(equal_troves),
        FakeSortedList(),
        FakeFeeState(minimum_fees),
        fake_environment,
        sample_app_config.contracts,
        sample_app_config.transactions,
        random_seed=lambda: 42,
    )
    return client


class TestWiring:
    def test_builds_ethereum_adapters(self, sample_app_config: AppConfig) -> None:
        client = TroveClient(sample_app_config)
        assert isinstance(client.ledger, EthereumLedger)
        assert isinstance(client.sorted_list, EthereumSortedList)
        assert isinstance(client.fee_state, EthereumFeeState)
        assert isinstance(client.populator, TransactionPopulator)

    def test_client_uses_chain_config(self, sample_app_config: AppConfig) -> None:
        rpc = EthereumClient(sample_app_config.chain)
        assert rpc.rpc_url == "http://localhost:8545"
        assert rpc.timeout == 5
        assert rpc.from_address == sample_app_config.chain.from_address


class TestTroveClient:
    @pytest.mark.asyncio
    async def test_find_hint(self, trove_client: TroveClient) -> None:
        assert await trove_client.find_hint("20", "2210") == Hint(UPPER, LOWER, 43)

    @pytest.mark.asyncio
    async def test_plan_redemption(self, trove_client: TroveClient) -> None:
        plan = await trove_client.plan_redemption("3000")
        assert plan.redeemable_amount == 2220
        assert plan.is_truncated

    @pytest.mark.asyncio
    async def test_redeem_truncated_without_waiting(
        self,
        trove_client: TroveClient,
        fake_environment: FakeEnvironment,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="trovekit.services.trove_client"):
            redemption, receipt = await trove_client.redeem("3000")

        assert receipt is None
        assert redemption.redeemable_amount == 2220
        assert len(fake_environment.submitted) == 1
        assert "truncated" in caplog.text

    @pytest.mark.asyncio
    async def test_redeem_increase_and_wait(
        self, trove_client: TroveClient, fake_environment: FakeEnvironment
    ) -> None:
        fake_environment.receipts = [{"status": "0x1"}]

        redemption, receipt = await trove_client.redeem(
            "3000", increase_if_truncated=True, wait=True
        )

        assert redemption.redeemable_amount == 4020
        assert not redemption.is_truncated
        assert receipt is not None
        assert receipt.status == ReceiptStatus.SUCCEEDED
        assert fake_environment.submitted[0][1] == 110000
