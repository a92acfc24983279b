"""Contract-backed implementations of the collaborator interfaces."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from eth_utils import to_checksum_address

from ...config import ContractsConfig
from ...models import ApproxHint, Fees, Trove, TroveStatus, UserTrove, timestamp_to_datetime
from ...numeric import Decimal
from . import abi
from .client import EthereumClient

logger = logging.getLogger(__name__)

_TROVE_STATUSES = (
    TroveStatus.NONEXISTENT,
    TroveStatus.OPEN,
    TroveStatus.CLOSED_BY_OWNER,
    TroveStatus.CLOSED_BY_LIQUIDATION,
    TroveStatus.CLOSED_BY_REDEMPTION,
)


class _ContractReader:
    def __init__(self, client: EthereumClient, contracts: ContractsConfig) -> None:
        self._client = client
        self._contracts = contracts

    async def _read(self, address: str, function: abi.ContractFunction, *args: Any) -> tuple[Any, ...]:
        data = await self._client.call(address, function.encode_call(*args))
        return function.decode_result(data)

    async def _read_one(self, address: str, function: abi.ContractFunction, *args: Any) -> Any:
        (value,) = await self._read(address, function, *args)
        return value


class EthereumSortedList(_ContractReader):
    """SortedTroves + HintHelpers."""

    async def get_approx_hint(
        self, nominal_ratio: Decimal, num_trials: int, random_seed: int
    ) -> ApproxHint:
        hint_address, diff, latest_random_seed = await self._read(
            self._contracts.hint_helpers,
            abi.GET_APPROX_HINT,
            nominal_ratio.raw,
            num_trials,
            random_seed,
        )
        return ApproxHint(to_checksum_address(hint_address), diff, latest_random_seed)

    async def find_insert_position(
        self, nominal_ratio: Decimal, prev_id: str, next_id: str
    ) -> tuple[str, str]:
        upper, lower = await self._read(
            self._contracts.sorted_troves,
            abi.FIND_INSERT_POSITION,
            nominal_ratio.raw,
            to_checksum_address(prev_id),
            to_checksum_address(next_id),
        )
        return to_checksum_address(upper), to_checksum_address(lower)

    async def get_first(self) -> str:
        first = await self._read_one(self._contracts.sorted_troves, abi.GET_FIRST)
        return to_checksum_address(first)


class EthereumLedger(_ContractReader):
    """TroveManager + MultiTroveGetter + PriceFeed."""

    async def get_trove(self, owner_address: str) -> UserTrove:
        owner = to_checksum_address(owner_address)
        (debt, coll, _, _), status = await asyncio.gather(
            self._read(self._contracts.trove_manager, abi.GET_ENTIRE_DEBT_AND_COLL, owner),
            self._read_one(self._contracts.trove_manager, abi.GET_TROVE_STATUS, owner),
        )
        return UserTrove(
            Decimal.from_raw(coll),
            Decimal.from_raw(debt),
            owner_address=owner,
            status=_TROVE_STATUSES[status],
        )

    async def get_total(self) -> Trove:
        coll, debt = await asyncio.gather(
            self._read_one(self._contracts.trove_manager, abi.GET_ENTIRE_SYSTEM_COLL),
            self._read_one(self._contracts.trove_manager, abi.GET_ENTIRE_SYSTEM_DEBT),
        )
        return Trove(Decimal.from_raw(coll), Decimal.from_raw(debt))

    async def get_number_of_troves(self) -> int:
        return await self._read_one(self._contracts.trove_manager, abi.GET_TROVE_OWNERS_COUNT)

    async def get_troves(self, first: int, start_index: int = 0) -> list[UserTrove]:
        """Troves in ascending collateral ratio order, counted from the list's tail."""
        rows = await self._read_one(
            self._contracts.multi_trove_getter,
            abi.GET_MULTIPLE_SORTED_TROVES,
            -(start_index + 1),
            first,
        )
        # Each row: (owner, debt, coll, stake, snapshotETH, snapshotLUSDDebt).
        return [
            UserTrove(
                Decimal.from_raw(coll),
                Decimal.from_raw(debt),
                owner_address=to_checksum_address(owner),
            )
            for owner, debt, coll, *_ in rows
        ]

    async def get_price(self) -> Decimal:
        price = await self._read_one(self._contracts.price_feed, abi.LAST_GOOD_PRICE)
        return Decimal.from_raw(price)


class EthereumFeeState(_ContractReader):
    """Base rate and decay parameters from TroveManager."""

    async def get_fees(self) -> Fees:
        trove_manager = self._contracts.trove_manager
        price = await self._read_one(self._contracts.price_feed, abi.LAST_GOOD_PRICE)
        (
            base_rate,
            last_fee_operation_time,
            minute_decay_factor,
            beta,
            recovery_mode,
            latest_block_timestamp,
        ) = await asyncio.gather(
            self._read_one(trove_manager, abi.BASE_RATE),
            self._read_one(trove_manager, abi.LAST_FEE_OPERATION_TIME),
            self._read_one(trove_manager, abi.MINUTE_DECAY_FACTOR),
            self._read_one(trove_manager, abi.BETA),
            self._read_one(trove_manager, abi.CHECK_RECOVERY_MODE, price),
            self._client.get_block_timestamp(),
        )
        return Fees(
            base_rate_without_decay=Decimal.from_raw(base_rate),
            minute_decay_factor=Decimal.from_raw(minute_decay_factor),
            # BETA is a plain integer constant, not a fixed-point value.
            beta=Decimal(beta),
            last_fee_operation=timestamp_to_datetime(last_fee_operation_time),
            time_of_latest_block=timestamp_to_datetime(latest_block_timestamp),
            recovery_mode=bool(recovery_mode),
        )
