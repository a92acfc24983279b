"""High-level client wiring the Ethereum adapters into the populator."""
from __future__ import annotations

import logging
from typing import Optional

from ..chains.ethereum import EthereumClient, EthereumFeeState, EthereumLedger, EthereumSortedList
from ..config import AppConfig
from ..models import Hint, Receipt, RedemptionPlan, Trove
from ..numeric import Decimalish
from .populator import TransactionPopulator
from .transaction import PopulatedRedemption

logger = logging.getLogger(__name__)


class TroveClient:
    """Entry point for the CLI: one object per configured deployment."""

    def __init__(self, config: AppConfig) -> None:
        self._config = config
        self._client = EthereumClient(config.chain)
        self.ledger = EthereumLedger(self._client, config.contracts)
        self.sorted_list = EthereumSortedList(self._client, config.contracts)
        self.fee_state = EthereumFeeState(self._client, config.contracts)
        self.populator = TransactionPopulator(
            self.ledger,
            self.sorted_list,
            self.fee_state,
            self._client,
            config.contracts,
            config.transactions,
            user_address=config.chain.from_address,
        )

    async def find_hint(self, collateral: Decimalish, debt: Decimalish) -> Hint:
        """Hint for inserting a trove with the given collateral and total debt."""
        return await self.populator.find_hint_for_trove(Trove(collateral, debt))

    async def plan_redemption(self, amount: Decimalish) -> RedemptionPlan:
        planner = await self.populator.create_redemption_planner()
        return planner.plan(amount)

    async def redeem(
        self,
        amount: Decimalish,
        *,
        increase_if_truncated: bool = False,
        wait: bool = False,
        max_redemption_rate: Optional[Decimalish] = None,
    ) -> tuple[PopulatedRedemption, Optional[Receipt]]:
        """Populate and send a redemption, optionally waiting for its receipt."""
        redemption = await self.populator.redeem(amount, max_redemption_rate)
        if redemption.is_truncated:
            logger.warning(
                "Redemption of %s truncated to %s",
                redemption.attempted_amount,
                redemption.redeemable_amount,
            )
            if increase_if_truncated:
                redemption = await redemption.increase_amount_by_minimum_net_debt()
                logger.info("Increased redemption to %s", redemption.redeemable_amount)

        sent = await redemption.send()
        if not wait:
            return redemption, None
        return redemption, await sent.wait_for_receipt()
