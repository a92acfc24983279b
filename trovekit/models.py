"""Data models — all frozen (immutable)."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Union

from .constants import (
    LIQUIDATION_RESERVE,
    MAXIMUM_BORROWING_RATE,
    MINIMUM_BORROWING_RATE,
    MINIMUM_COLLATERAL_RATIO,
    MINIMUM_DEBT,
    MINIMUM_REDEMPTION_RATE,
    NOMINAL_RATIO_PRECISION,
    ZERO_ADDRESS,
)
from .numeric import Decimal, Decimalish


def _optional_decimal(value: Optional[Decimalish]) -> Optional[Decimal]:
    if value is None:
        return None
    amount = Decimal(value)
    return None if amount.is_zero else amount


# ---------------------------------------------------------------------------
# Trove change descriptions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TroveCreationParams:
    """Collateral to deposit and debt-tokens to borrow when opening a trove."""

    deposit_collateral: Decimal
    borrow: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "deposit_collateral", Decimal(self.deposit_collateral))
        object.__setattr__(self, "borrow", Decimal(self.borrow))
        if self.deposit_collateral.is_zero:
            raise ValueError("deposit_collateral must be non-zero when opening a trove")


@dataclass(frozen=True)
class TroveAdjustmentParams:
    """A change to an existing trove; zero amounts are treated as absent."""

    deposit_collateral: Optional[Decimal] = None
    withdraw_collateral: Optional[Decimal] = None
    borrow: Optional[Decimal] = None
    repay: Optional[Decimal] = None

    def __post_init__(self) -> None:
        for name in ("deposit_collateral", "withdraw_collateral", "borrow", "repay"):
            object.__setattr__(self, name, _optional_decimal(getattr(self, name)))

        if self.deposit_collateral is not None and self.withdraw_collateral is not None:
            raise ValueError("Cannot deposit and withdraw collateral in the same adjustment")
        if self.borrow is not None and self.repay is not None:
            raise ValueError("Cannot borrow and repay in the same adjustment")
        if not any((self.deposit_collateral, self.withdraw_collateral, self.borrow, self.repay)):
            raise ValueError("Adjustment must change collateral or debt")

    @property
    def collateral_change(self) -> Decimal:
        return self.deposit_collateral or self.withdraw_collateral or Decimal.ZERO

    @property
    def debt_change(self) -> Decimal:
        return self.borrow or self.repay or Decimal.ZERO

    @property
    def is_debt_increase(self) -> bool:
        return self.borrow is not None


TroveChange = Union[TroveCreationParams, TroveAdjustmentParams]


# ---------------------------------------------------------------------------
# Troves
# ---------------------------------------------------------------------------


class TroveStatus(str, Enum):
    NONEXISTENT = "nonExistent"
    OPEN = "open"
    CLOSED_BY_OWNER = "closedByOwner"
    CLOSED_BY_LIQUIDATION = "closedByLiquidation"
    CLOSED_BY_REDEMPTION = "closedByRedemption"


@dataclass(frozen=True)
class Trove:
    """Collateral and debt of a position, with the ratios derived from them.

    ``debt`` includes the liquidation reserve; ``net_debt`` excludes it.
    """

    collateral: Decimal = Decimal.ZERO
    debt: Decimal = Decimal.ZERO

    def __post_init__(self) -> None:
        object.__setattr__(self, "collateral", Decimal(self.collateral))
        object.__setattr__(self, "debt", Decimal(self.debt))

    @property
    def is_empty(self) -> bool:
        return self.collateral.is_zero and self.debt.is_zero

    @property
    def net_debt(self) -> Decimal:
        if self.debt.is_zero:
            return Decimal.ZERO
        if self.debt < LIQUIDATION_RESERVE:
            raise ValueError(f"Trove debt {self.debt} is below the liquidation reserve")
        return self.debt - LIQUIDATION_RESERVE

    def collateral_ratio(self, price: Decimalish) -> Optional[Decimal]:
        """``collateral * price / debt``; infinite without debt, None when empty."""
        if self.is_empty:
            return None
        return self.collateral.mul_div(price, self.debt)

    @property
    def nominal_collateral_ratio(self) -> Optional[Decimal]:
        """Price-independent ratio the sorted list is ordered by."""
        if self.is_empty:
            return None
        return self.collateral.mul_div(NOMINAL_RATIO_PRECISION, self.debt)

    def collateral_ratio_is_below_minimum(self, price: Decimalish) -> bool:
        ratio = self.collateral_ratio(price)
        return ratio is not None and ratio < MINIMUM_COLLATERAL_RATIO

    def __add__(self, other: Trove) -> Trove:
        return Trove(self.collateral + other.collateral, self.debt + other.debt)

    def subtract(self, other: Trove) -> Trove:
        return Trove(
            self.collateral - other.collateral if other.collateral < self.collateral else Decimal.ZERO,
            self.debt - other.debt if other.debt < self.debt else Decimal.ZERO,
        )

    def add_collateral(self, collateral: Decimalish) -> Trove:
        return Trove(self.collateral + collateral, self.debt)

    def add_debt(self, debt: Decimalish) -> Trove:
        return Trove(self.collateral, self.debt + debt)

    def apply(
        self, change: TroveChange, borrowing_rate: Decimalish = MINIMUM_BORROWING_RATE
    ) -> Trove:
        """Return the trove that results from ``change``.

        Borrowed amounts add ``borrow * (1 + borrowing_rate)`` to the debt.
        Opening a trove also adds the liquidation reserve.
        """
        if isinstance(change, TroveCreationParams):
            if not self.is_empty:
                raise ValueError("Can only open a trove on an empty one")
            return Trove(
                change.deposit_collateral,
                change.borrow * (Decimal.ONE + borrowing_rate) + LIQUIDATION_RESERVE,
            )

        collateral = self.collateral
        debt = self.debt
        if change.deposit_collateral is not None:
            collateral = collateral + change.deposit_collateral
        elif change.withdraw_collateral is not None:
            collateral = collateral - change.withdraw_collateral
        if change.borrow is not None:
            debt = debt + change.borrow * (Decimal.ONE + borrowing_rate)
        elif change.repay is not None:
            debt = debt - change.repay
        return Trove(collateral, debt)

    @classmethod
    def create(
        cls,
        params: TroveCreationParams,
        borrowing_rate: Decimalish = MINIMUM_BORROWING_RATE,
    ) -> Trove:
        """Trove resulting from opening with ``params``; enforces the debt floor."""
        trove = cls().apply(params, borrowing_rate)
        if trove.debt < MINIMUM_DEBT:
            raise ValueError(f"Debt {trove.debt} is below the minimum of {MINIMUM_DEBT}")
        return trove

    @staticmethod
    def recreate(
        trove: Trove, borrowing_rate: Decimalish = MINIMUM_BORROWING_RATE
    ) -> TroveCreationParams:
        """Parameters that open a trove equal to ``trove``."""
        return TroveCreationParams(
            deposit_collateral=trove.collateral,
            borrow=trove.net_debt / (Decimal.ONE + borrowing_rate),
        )

    def adjust_to(
        self, target: Trove, borrowing_rate: Decimalish = MINIMUM_BORROWING_RATE
    ) -> TroveAdjustmentParams:
        """Parameters that turn this trove into ``target``.

        Raises ValueError when ``target`` equals this trove.
        """
        deposit = withdraw = borrow = repay = None
        if target.collateral > self.collateral:
            deposit = target.collateral - self.collateral
        elif target.collateral < self.collateral:
            withdraw = self.collateral - target.collateral
        if target.debt > self.debt:
            borrow = (target.debt - self.debt) / (Decimal.ONE + borrowing_rate)
        elif target.debt < self.debt:
            repay = self.debt - target.debt
        return TroveAdjustmentParams(
            deposit_collateral=deposit,
            withdraw_collateral=withdraw,
            borrow=borrow,
            repay=repay,
        )


@dataclass(frozen=True)
class UserTrove(Trove):
    """A trove together with the address that owns it."""

    owner_address: str = ZERO_ADDRESS
    status: TroveStatus = TroveStatus.OPEN


# ---------------------------------------------------------------------------
# Fees
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Fees:
    """Snapshot of the decaying base rate and the fee formulas built on it."""

    base_rate_without_decay: Decimal
    minute_decay_factor: Decimal
    beta: Decimal
    last_fee_operation: datetime
    time_of_latest_block: datetime
    recovery_mode: bool = False

    def _minutes_since_last_fee_operation(self, when: Optional[datetime]) -> int:
        when = when or self.time_of_latest_block
        elapsed = (when - self.last_fee_operation).total_seconds()
        return max(math.floor(elapsed / 60), 0)

    def base_rate(self, when: Optional[datetime] = None) -> Decimal:
        minutes = self._minutes_since_last_fee_operation(when)
        return self.minute_decay_factor.pow(minutes) * self.base_rate_without_decay

    def borrowing_rate(self, when: Optional[datetime] = None) -> Decimal:
        if self.recovery_mode:
            return Decimal.ZERO
        return min(MINIMUM_BORROWING_RATE + self.base_rate(when), MAXIMUM_BORROWING_RATE)

    def redemption_rate(
        self,
        redeemed_fraction_of_supply: Decimalish = Decimal.ZERO,
        when: Optional[datetime] = None,
    ) -> Decimal:
        """Rate charged on a redemption of the given fraction of total debt."""
        fraction = Decimal(redeemed_fraction_of_supply)
        base_rate = self.base_rate(when)
        if not fraction.is_zero:
            base_rate = fraction / self.beta + base_rate
        return min(MINIMUM_REDEMPTION_RATE + base_rate, Decimal.ONE)


def timestamp_to_datetime(timestamp: int) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


# ---------------------------------------------------------------------------
# Hints and plans
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ApproxHint:
    """One sampling round's best candidate."""

    hint_address: str
    diff: int
    latest_random_seed: int


@dataclass(frozen=True)
class Hint:
    """Advisory insertion point into the sorted list.

    ``upper_hint`` precedes the insertion point (higher ratio) and
    ``lower_hint`` follows it. Either may be the zero address.
    """

    upper_hint: str = ZERO_ADDRESS
    lower_hint: str = ZERO_ADDRESS
    latest_random_seed: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return self.upper_hint == ZERO_ADDRESS and self.lower_hint == ZERO_ADDRESS


@dataclass(frozen=True)
class RedemptionPlan:
    """Result of walking the lowest-ratio troves for a redemption amount."""

    attempted_amount: Decimal
    redeemable_amount: Decimal
    max_iterations: int
    fee: Decimal = Decimal.ZERO
    fee_rate: Decimal = Decimal.ZERO
    first_redemption_hint: str = ZERO_ADDRESS
    partial_redemption_hint_ncr: Decimal = Decimal.ZERO
    troves_redeemed: int = 0

    @property
    def is_truncated(self) -> bool:
        return self.redeemable_amount < self.attempted_amount


# ---------------------------------------------------------------------------
# Receipts
# ---------------------------------------------------------------------------


class ReceiptStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class Receipt:
    status: ReceiptStatus
    transaction_hash: str
    raw_receipt: dict[str, Any] = field(default_factory=dict)

    @property
    def gas_used(self) -> Optional[int]:
        value = self.raw_receipt.get("gasUsed")
        return int(value, 16) if isinstance(value, str) else value

    @property
    def block_number(self) -> Optional[int]:
        value = self.raw_receipt.get("blockNumber")
        return int(value, 16) if isinstance(value, str) else value
