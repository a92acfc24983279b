"""Populated and sent transactions and their send/receipt lifecycle."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Optional

from ..errors import PreconditionError
from ..interfaces.execution import ExecutionEnvironment
from ..models import Hint, Receipt, ReceiptStatus, RedemptionPlan
from ..numeric import Decimal

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 4.0


class TransactionState(str, Enum):
    POPULATED = "populated"
    SENT = "sent"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def receipt_from_raw(transaction_hash: str, raw: Optional[dict[str, Any]]) -> Receipt:
    """Map an ``eth_getTransactionReceipt`` result to a Receipt.

    An included transaction whose execution reverted has status ``0x0`` and
    maps to FAILED.
    """
    if raw is None:
        return Receipt(ReceiptStatus.PENDING, transaction_hash)
    status = raw.get("status")
    if isinstance(status, str):
        status = int(status, 16)
    return Receipt(
        ReceiptStatus.SUCCEEDED if status == 1 else ReceiptStatus.FAILED,
        transaction_hash,
        raw,
    )


class SentTransaction:
    """A submitted transaction whose inclusion can be polled or awaited."""

    def __init__(
        self,
        environment: ExecutionEnvironment,
        transaction_hash: str,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self._environment = environment
        self.transaction_hash = transaction_hash
        self._poll_interval = poll_interval
        self._receipt: Optional[Receipt] = None

    @property
    def state(self) -> TransactionState:
        if self._receipt is None:
            return TransactionState.SENT
        if self._receipt.status == ReceiptStatus.SUCCEEDED:
            return TransactionState.SUCCEEDED
        return TransactionState.FAILED

    async def get_receipt(self) -> Receipt:
        """Return the receipt if included, otherwise a PENDING receipt."""
        if self._receipt is not None:
            return self._receipt
        raw = await self._environment.poll_inclusion(self.transaction_hash)
        receipt = receipt_from_raw(self.transaction_hash, raw)
        if receipt.status != ReceiptStatus.PENDING:
            self._receipt = receipt
            logger.info("Transaction %s %s", self.transaction_hash, receipt.status.value)
        return receipt

    async def wait_for_receipt(self) -> Receipt:
        """Poll until the transaction is included.

        There is no timeout; wrap the call in ``asyncio.wait_for`` to impose
        one. Cancelling stops polling but does not retract the transaction.
        """
        while True:
            receipt = await self.get_receipt()
            if receipt.status != ReceiptStatus.PENDING:
                return receipt
            await asyncio.sleep(self._poll_interval)


class PopulatedTransaction:
    """Call data plus gas limit, ready to be inspected and sent exactly once."""

    def __init__(
        self,
        environment: ExecutionEnvironment,
        raw_transaction: dict[str, Any],
        gas_limit: int,
        hint: Optional[Hint] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self._environment = environment
        self.raw_transaction = dict(raw_transaction)
        self.gas_limit = gas_limit
        self.hint = hint
        self._poll_interval = poll_interval
        self._state = TransactionState.POPULATED

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def raw_populated_transaction(self) -> dict[str, Any]:
        return {**self.raw_transaction, "gas": hex(self.gas_limit)}

    async def send(self) -> SentTransaction:
        """Submit the transaction.

        Raises:
            PreconditionError: if this transaction was already sent. A failed
                submission also consumes it; populate again to retry.
        """
        if self._state != TransactionState.POPULATED:
            raise PreconditionError("Transaction has already been sent")
        self._state = TransactionState.SENT

        transaction_hash = await self._environment.submit(self.raw_transaction, self.gas_limit)
        logger.info(
            "Sent transaction %s to %s (gas limit %d)",
            transaction_hash,
            self.raw_transaction.get("to"),
            self.gas_limit,
        )
        return SentTransaction(self._environment, transaction_hash, self._poll_interval)


class PopulatedRedemption(PopulatedTransaction):
    """A populated redemption that exposes its plan before sending."""

    def __init__(
        self,
        environment: ExecutionEnvironment,
        raw_transaction: dict[str, Any],
        gas_limit: int,
        plan: RedemptionPlan,
        increase: Callable[[RedemptionPlan], Awaitable[PopulatedRedemption]],
        hint: Optional[Hint] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        super().__init__(environment, raw_transaction, gas_limit, hint, poll_interval)
        self.plan = plan
        self._increase = increase

    @property
    def attempted_amount(self) -> Decimal:
        return self.plan.attempted_amount

    @property
    def redeemable_amount(self) -> Decimal:
        return self.plan.redeemable_amount

    @property
    def is_truncated(self) -> bool:
        return self.plan.is_truncated

    @property
    def fee(self) -> Decimal:
        return self.plan.fee

    async def increase_amount_by_minimum_net_debt(self) -> PopulatedRedemption:
        """Populate a new redemption for the next redeemable amount up."""
        if not self.is_truncated:
            raise PreconditionError(
                "increase_amount_by_minimum_net_debt() can only be called when amount is truncated"
            )
        return await self._increase(self.plan)
