"""Builds call data, hints and padded gas limits for trove transactions."""
from __future__ import annotations

import asyncio
import logging
import secrets
from collections.abc import Callable
from typing import Any, Optional

from ..chains.ethereum import abi
from ..config import ContractsConfig, TransactionsConfig
from ..constants import (
    GAS_FOR_FEE_OPERATION_TIME_UPDATE,
    GAS_FOR_LIST_TRAVERSAL,
    MAXIMUM_BORROWING_RATE,
    MINIMUM_NET_DEBT,
)
from ..errors import PreconditionError
from ..interfaces.execution import ExecutionEnvironment
from ..interfaces.fee_state import FeeState
from ..interfaces.ledger import PositionLedger
from ..interfaces.sorted_list import SortedListOracle
from ..models import (
    Hint,
    RedemptionPlan,
    Trove,
    TroveAdjustmentParams,
    TroveCreationParams,
    UserTrove,
)
from ..numeric import Decimal, Decimalish
from .hint_finder import find_hint
from .redemption_planner import RedemptionPlanner
from .transaction import PopulatedRedemption, PopulatedTransaction

logger = logging.getLogger(__name__)


def _random_seed() -> int:
    return secrets.randbits(53)


def pad_gas_limit(estimate: int, *, list_traversal: bool, fee_update: bool) -> int:
    """Overshoot the node's estimate for the drift we expect before inclusion.

    A stale hint can cost one extra list traversal step, and enough elapsed
    time makes the contract refresh the decaying base rate.
    """
    gas_limit = estimate
    if list_traversal:
        gas_limit += GAS_FOR_LIST_TRAVERSAL
    if fee_update:
        gas_limit += GAS_FOR_FEE_OPERATION_TIME_UPDATE
    return gas_limit


class TransactionPopulator:
    """Builds populated transactions for trove operations and redemptions."""

    def __init__(
        self,
        ledger: PositionLedger,
        oracle: SortedListOracle,
        fee_state: FeeState,
        environment: ExecutionEnvironment,
        contracts: ContractsConfig,
        transactions: TransactionsConfig = TransactionsConfig(),
        user_address: str = "",
        random_seed: Callable[[], int] = _random_seed,
    ) -> None:
        self._ledger = ledger
        self._oracle = oracle
        self._fee_state = fee_state
        self._environment = environment
        self._contracts = contracts
        self._transactions = transactions
        self._user_address = user_address
        self._random_seed = random_seed

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def find_hint_for_nominal_ratio(self, nominal_ratio: Decimal) -> Hint:
        list_size = await self._ledger.get_number_of_troves()
        return await find_hint(nominal_ratio, list_size, self._oracle, self._random_seed())

    async def find_hint_for_trove(self, trove: Trove) -> Hint:
        nominal_ratio = trove.nominal_collateral_ratio
        if nominal_ratio is None:
            raise ValueError("Cannot find a hint for an empty trove")
        return await self.find_hint_for_nominal_ratio(nominal_ratio)

    async def _populate(
        self,
        to: str,
        data: str,
        value: Decimal = Decimal.ZERO,
        *,
        list_traversal: bool,
        fee_update: bool,
    ) -> tuple[dict[str, Any], int]:
        raw: dict[str, Any] = {"to": to, "data": data}
        if not value.is_zero:
            raw["value"] = value.hex
        estimate = await self._environment.estimate_gas(raw)
        gas_limit = pad_gas_limit(estimate, list_traversal=list_traversal, fee_update=fee_update)
        logger.debug("Gas estimate %d padded to %d", estimate, gas_limit)
        return raw, gas_limit

    def _owner(self, owner_address: Optional[str]) -> str:
        owner = owner_address or self._user_address
        if not owner:
            raise PreconditionError("No user address configured for this operation")
        return owner

    def _max_borrowing_rate(
        self, borrowing_rate: Decimal, max_borrowing_rate: Optional[Decimalish]
    ) -> Decimal:
        if max_borrowing_rate is not None:
            return Decimal(max_borrowing_rate)
        return min(borrowing_rate + self._transactions.borrowing_rate_slippage, MAXIMUM_BORROWING_RATE)

    # ------------------------------------------------------------------
    # Trove operations
    # ------------------------------------------------------------------

    async def open_trove(
        self,
        params: TroveCreationParams,
        max_borrowing_rate: Optional[Decimalish] = None,
    ) -> PopulatedTransaction:
        fees = await self._fee_state.get_fees()
        borrowing_rate = fees.borrowing_rate()
        new_trove = Trove.create(params, borrowing_rate)
        hint = await self.find_hint_for_trove(new_trove)

        data = abi.OPEN_TROVE.encode_call(
            self._max_borrowing_rate(borrowing_rate, max_borrowing_rate).raw,
            params.borrow.raw,
            hint.upper_hint,
            hint.lower_hint,
        )
        raw, gas_limit = await self._populate(
            self._contracts.borrower_operations,
            data,
            params.deposit_collateral,
            list_traversal=True,
            fee_update=True,
        )
        logger.info("Populated openTrove: collateral=%s debt=%s", new_trove.collateral, new_trove.debt)
        return PopulatedTransaction(
            self._environment, raw, gas_limit, hint, self._transactions.receipt_poll_interval
        )

    async def adjust_trove(
        self,
        params: TroveAdjustmentParams,
        max_borrowing_rate: Optional[Decimalish] = None,
        owner_address: Optional[str] = None,
    ) -> PopulatedTransaction:
        owner = self._owner(owner_address)
        trove, fees = await asyncio.gather(
            self._ledger.get_trove(owner), self._fee_state.get_fees()
        )
        if trove.is_empty:
            raise PreconditionError(f"No open trove for {owner}")

        borrowing_rate = fees.borrowing_rate()
        final_trove = trove.apply(params, borrowing_rate)
        if final_trove.net_debt < MINIMUM_NET_DEBT:
            raise ValueError(
                f"Adjusted net debt {final_trove.net_debt} is below the minimum of {MINIMUM_NET_DEBT}"
            )
        hint = await self.find_hint_for_trove(final_trove)

        data = abi.ADJUST_TROVE.encode_call(
            self._max_borrowing_rate(borrowing_rate, max_borrowing_rate).raw,
            (params.withdraw_collateral or Decimal.ZERO).raw,
            params.debt_change.raw,
            params.is_debt_increase,
            hint.upper_hint,
            hint.lower_hint,
        )
        raw, gas_limit = await self._populate(
            self._contracts.borrower_operations,
            data,
            params.deposit_collateral or Decimal.ZERO,
            list_traversal=True,
            fee_update=params.is_debt_increase,
        )
        logger.info(
            "Populated adjustTrove for %s: collateral=%s debt=%s",
            owner,
            final_trove.collateral,
            final_trove.debt,
        )
        return PopulatedTransaction(
            self._environment, raw, gas_limit, hint, self._transactions.receipt_poll_interval
        )

    async def close_trove(self) -> PopulatedTransaction:
        raw, gas_limit = await self._populate(
            self._contracts.borrower_operations,
            abi.CLOSE_TROVE.encode_call(),
            list_traversal=False,
            fee_update=False,
        )
        return PopulatedTransaction(
            self._environment, raw, gas_limit, poll_interval=self._transactions.receipt_poll_interval
        )

    async def claim_collateral_surplus(self) -> PopulatedTransaction:
        raw, gas_limit = await self._populate(
            self._contracts.borrower_operations,
            abi.CLAIM_COLLATERAL.encode_call(),
            list_traversal=False,
            fee_update=False,
        )
        return PopulatedTransaction(
            self._environment, raw, gas_limit, poll_interval=self._transactions.receipt_poll_interval
        )

    # ------------------------------------------------------------------
    # Redemption
    # ------------------------------------------------------------------

    async def _get_redemption_candidates(self, price: Decimal) -> list[UserTrove]:
        """Lowest-ratio troves, enough to cover the skipped undercollateralized ones."""
        max_iterations = self._transactions.redeem_max_iterations
        troves = await self._ledger.get_troves(max_iterations)

        skipped = 0
        while skipped < len(troves) and troves[skipped].collateral_ratio_is_below_minimum(price):
            skipped += 1
        if skipped and len(troves) == max_iterations:
            troves += await self._ledger.get_troves(skipped, start_index=len(troves))
        return troves

    async def create_redemption_planner(self) -> RedemptionPlanner:
        """Snapshot the state a redemption plan depends on."""
        price, fees, total = await asyncio.gather(
            self._ledger.get_price(), self._fee_state.get_fees(), self._ledger.get_total()
        )
        if total.collateral_ratio_is_below_minimum(price):
            raise PreconditionError(
                "Cannot redeem while the total collateral ratio is below the minimum"
            )
        troves =await self._get_redemption_candidates(price)
        return RedemptionPlanner(
            troves,
            MINIMUM_NET_DEBT,
            self._transactions.redeem_max_iterations,
            price=price,
            fees=fees,
            total_debt=total.debt,
        )

    async def redeem(
        self,
        amount: Decimalish,
        max_redemption_rate: Optional[Decimalish] = None,
    ) -> PopulatedRedemption:
        planner = await self.create_redemption_planner()
        return await self._populate_redemption(planner, planner.plan(amount), max_redemption_rate)

    async def _populate_redemption(
        self,
        planner: RedemptionPlanner,
        plan: RedemptionPlan,
        max_redemption_rate: Optional[Decimalish],
    ) -> PopulatedRedemption:
        if plan.redeemable_amount.is_zero:
            raise ValueError(
                f"Amount too low to redeem (try at least {planner.minimum_net_debt})"
            )

        partial = not plan.partial_redemption_hint_ncr.is_zero
        hint = Hint()
        if partial:
            hint = await self.find_hint_for_nominal_ratio(plan.partial_redemption_hint_ncr)

        if max_redemption_rate is not None:
            max_rate = Decimal(max_redemption_rate)
        else:
            max_rate = min(plan.fee_rate + self._transactions.redemption_rate_slippage, Decimal.ONE)

        data = abi.REDEEM_COLLATERAL.encode_call(
            plan.redeemable_amount.raw,
            plan.first_redemption_hint,
            hint.upper_hint,
            hint.lower_hint,
            plan.partial_redemption_hint_ncr.raw,
            plan.max_iterations,
            max_rate.raw,
        )
        raw, gas_limit = await self._populate(
            self._contracts.trove_manager,
            data,
            list_traversal=partial,
            fee_update=True,
        )

        async def increase(truncated: RedemptionPlan) -> PopulatedRedemption:
            return await self._populate_redemption(
                planner,
                planner.increase_amount_by_minimum_net_debt(truncated),
                max_redemption_rate,
            )

        logger.info(
            "Populated redemption: attempted=%s redeemable=%s truncated=%s",
            plan.attempted_amount,
            plan.redeemable_amount,
            plan.is_truncated,
        )
        return PopulatedRedemption(
            self._environment,
            raw,
            gas_limit,
            plan,
            increase,
            hint if partial else None,
            self._transactions.receipt_poll_interval,
        )
