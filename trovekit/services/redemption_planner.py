"""Redemption planning — how much of a request the lowest troves can absorb."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Optional

from ..constants import MINIMUM_NET_DEBT, REDEEM_MAX_ITERATIONS, ZERO_ADDRESS
from ..errors import PreconditionError
from ..models import Fees, RedemptionPlan, Trove, UserTrove
from ..numeric import Decimal, Decimalish

logger = logging.getLogger(__name__)


def _first_redeemable_index(troves: Sequence[Trove], price: Optional[Decimal]) -> int:
    """Troves under the minimum collateral ratio are skipped by redemptions."""
    if price is None:
        return 0
    index = 0
    while index < len(troves) and troves[index].collateral_ratio_is_below_minimum(price):
        index += 1
    return index


def plan_redemption(
    attempted_amount: Decimalish,
    troves: Sequence[Trove],
    minimum_net_debt: Decimalish = MINIMUM_NET_DEBT,
    max_iterations: int = REDEEM_MAX_ITERATIONS,
    *,
    price: Optional[Decimalish] = None,
    fees: Optional[Fees] = None,
    total_debt: Optional[Decimalish] = None,
) -> RedemptionPlan:
    """Walk ``troves`` (ascending ratio) and compute the redeemable amount.

    Each trove is taken whole while its net debt fits in what remains of
    the request. The first trove that does not fit is redeemed partially,
    but never below ``minimum_net_debt``, and the walk stops there.

    Raises:
        ValueError: on negative amounts, ``max_iterations < 1``, or a
            non-zero request with no troves to redeem against.
    """
    attempted = Decimal(attempted_amount)
    floor = Decimal(minimum_net_debt)
    price_value = Decimal(price) if price is not None else None

    if max_iterations < 1:
        raise ValueError(f"max_iterations must be at least 1, got {max_iterations}")
    if not attempted.is_zero and not troves:
        raise ValueError("Cannot plan a redemption without any troves")

    start = _first_redeemable_index(troves, price_value)
    candidates = troves[start:]
    first_hint = ZERO_ADDRESS
    if candidates and isinstance(candidates[0], UserTrove):
        first_hint = candidates[0].owner_address

    remaining = attempted
    partial_ncr = Decimal.ZERO
    redeemed = 0

    for iteration, trove in enumerate(candidates):
        if remaining.is_zero or iteration >= max_iterations:
            break

        net_debt = trove.net_debt
        if net_debt <= remaining:
            remaining = remaining - net_debt
            redeemed += 1
            continue

        if net_debt > floor:
            lot = min(remaining, net_debt - floor)
            remaining = remaining - lot
            if price_value is not None:
                partially_redeemed = Trove(
                    trove.collateral - lot / price_value, trove.debt - lot
                )
                partial_ncr = partially_redeemed.nominal_collateral_ratio or Decimal.ZERO
        break

    redeemable = attempted - remaining

    fee_rate = Decimal.ZERO
    fee = Decimal.ZERO
    if fees is not None and total_debt is not None:
        fee_rate = fees.redemption_rate(redeemable / total_debt)
        fee = redeemable * fee_rate

    plan = RedemptionPlan(
        attempted_amount=attempted,
        redeemable_amount=redeemable,
        max_iterations=max_iterations,
        fee=fee,
        fee_rate=fee_rate,
        first_redemption_hint=first_hint,
        partial_redemption_hint_ncr=partial_ncr,
        troves_redeemed=redeemed,
    )
    logger.debug(
        "Redemption plan: attempted=%s redeemable=%s truncated=%s skipped=%d",
        attempted,
        redeemable,
        plan.is_truncated,
        start,
    )
    return plan


class RedemptionPlanner:
    """Plans redemptions against a fixed snapshot of troves and fee state."""

    def __init__(
        self,
        troves: Sequence[Trove],
        minimum_net_debt: Decimalish = MINIMUM_NET_DEBT,
        max_iterations: int = REDEEM_MAX_ITERATIONS,
        *,
        price: Optional[Decimalish] = None,
        fees: Optional[Fees] = None,
        total_debt: Optional[Decimalish] = None,
    ) -> None:
        self._troves = tuple(troves)
        self._minimum_net_debt = Decimal(minimum_net_debt)
        self._max_iterations = max_iterations
        self._price = price
        self._fees = fees
        self._total_debt = total_debt

    @property
    def minimum_net_debt(self) -> Decimal:
        return self._minimum_net_debt

    def plan(self, attempted_amount: Decimalish) -> RedemptionPlan:
        return plan_redemption(
            attempted_amount,
            self._troves,
            self._minimum_net_debt,
            self._max_iterations,
            price=self._price,
            fees=self._fees,
            total_debt=self._total_debt,
        )

    def increase_amount_by_minimum_net_debt(self, plan: RedemptionPlan) -> RedemptionPlan:
        """Re-plan for the next amount above a truncated plan.

        The truncated plan stopped at a trove it could only take down to the
        floor; adding ``minimum_net_debt`` to the redeemable amount lets the
        walk take that trove whole.
        """
        if not plan.is_truncated:
            raise PreconditionError(
                "increase_amount_by_minimum_net_debt() can only be called when amount is truncated"
            )
        return self.plan(plan.redeemable_amount + self._minimum_net_debt)
