"""Integration tests for the contract adapters against ABI-encoded eth_call results."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Union

import pytest
from eth_abi import decode, encode
from eth_utils import decode_hex, encode_hex

from tests.fakes import ALICE, BOB, CAROL
from trovekit.chains.ethereum import EthereumFeeState, EthereumLedger, EthereumSortedList, abi
from trovekit.config import ContractsConfig
from trovekit.models import TroveStatus
from trovekit.numeric import Decimal

E18 = 10**18

Result = Union[tuple, Callable[[tuple], tuple]]


class FakeRpc:
    """Answers eth_call by selector with ABI-encoded canned results."""

    def __init__(self, results: dict[abi.ContractFunction, Result], timestamp: int = 0) -> None:
        self._functions = {fn.selector: fn for fn in results}
        self._results = results
        self.timestamp = timestamp
        self.calls: list[tuple[str, str, tuple]] = []

    async def call(self, to: str, data: str, block: str = "latest") -> str:
        raw = decode_hex(data)
        fn = self._functions[raw[:4]]
        args = tuple(decode(list(fn.inputs), raw[4:]))
        self.calls.append((to, fn.name, args))
        result = self._results[fn]
        values = result(args) if callable(result) else result
        return encode_hex(encode(list(fn.outputs), list(values)))

    async def get_block_timestamp(self, block: str = "latest") -> int:
        return self.timestamp

    def args_for(self, name: str) -> tuple:
        return next(args for _, fn_name, args in self.calls if fn_name == name)


class TestEthereumSortedList:
    @pytest.mark.asyncio
    async def test_get_approx_hint(self, sample_contracts_config: ContractsConfig) -> None:
        rpc = FakeRpc({abi.GET_APPROX_HINT: (CAROL, 1234, 99)})
        sorted_list = EthereumSortedList(rpc, sample_contracts_config)

        hint = await sorted_list.get_approx_hint(Decimal("1.5"), 100, 42)

        assert hint.hint_address.lower() == CAROL
        assert hint.diff == 1234
        assert hint.latest_random_seed == 99
        to, _, args = rpc.calls[0]
        assert to == sample_contracts_config.hint_helpers
        assert args == (15 * 10**17, 100, 42)

    @pytest.mark.asyncio
    async def test_find_insert_position(self, sample_contracts_config: ContractsConfig) -> None:
        rpc = FakeRpc({abi.FIND_INSERT_POSITION: (ALICE, BOB)})
        sorted_list = EthereumSortedList(rpc, sample_contracts_config)

        upper, lower = await sorted_list.find_insert_position(Decimal(1), CAROL, CAROL)

        assert (upper.lower(), lower.lower()) == (ALICE, BOB)
        to, _, (ncr, prev_id, next_id) = rpc.calls[0]
        assert to == sample_contracts_config.sorted_troves
        assert ncr == E18
        assert prev_id.lower() == next_id.lower() == CAROL

    @pytest.mark.asyncio
    async def test_get_first(self, sample_contracts_config: ContractsConfig) -> None:
        rpc = FakeRpc({abi.GET_FIRST: (ALICE,)})
        sorted_list = EthereumSortedList(rpc, sample_contracts_config)
        assert (await sorted_list.get_first()).lower() == ALICE
        assert rpc.calls[0][0] == sample_contracts_config.sorted_troves


class TestEthereumLedger:
    @pytest.mark.asyncio
    async def test_get_trove(self, sample_contracts_config: ContractsConfig) -> None:
        rpc = FakeRpc(
            {
                abi.GET_ENTIRE_DEBT_AND_COLL: (2210 * E18, 20 * E18, 0, 0),
                abi.GET_TROVE_STATUS: (1,),
            }
        )
        ledger = EthereumLedger(rpc, sample_contracts_config)

        trove = await ledger.get_trove(ALICE)

        assert trove.collateral == 20
        assert trove.debt == 2210
        assert trove.status == TroveStatus.OPEN
        assert trove.owner_address.lower() == ALICE

    @pytest.mark.asyncio
    async def test_closed_trove_status(self, sample_contracts_config: ContractsConfig) -> None:
        rpc = FakeRpc({abi.GET_ENTIRE_DEBT_AND_COLL: (0, 0, 0, 0), abi.GET_TROVE_STATUS: (4,)})
        trove = await EthereumLedger(rpc, sample_contracts_config).get_trove(ALICE)
        assert trove.is_empty
        assert trove.status == TroveStatus.CLOSED_BY_REDEMPTION

    @pytest.mark.asyncio
    async def test_totals_and_count(self, sample_contracts_config: ContractsConfig) -> None:
        rpc = FakeRpc(
            {
                abi.GET_ENTIRE_SYSTEM_COLL: (60 * E18,),
                abi.GET_ENTIRE_SYSTEM_DEBT: (6630 * E18,),
                abi.GET_TROVE_OWNERS_COUNT: (3,),
                abi.LAST_GOOD_PRICE: (200 * E18,),
            }
        )
        ledger = EthereumLedger(rpc, sample_contracts_config)
        total = await ledger.get_total()
        assert (total.collateral, total.debt) == (60, 6630)
        assert await ledger.get_number_of_troves() == 3
        assert await ledger.get_price() == 200

    @pytest.mark.asyncio
    async def test_get_troves_from_the_tail(self, sample_contracts_config: ContractsConfig) -> None:
        def rows(args: tuple) -> tuple:
            start_idx, count = args
            troves = [
                (ALICE, 2210 * E18, 20 * E18, 0, 0, 0),
                (BOB, 2310 * E18, 21 * E18, 0, 0, 0),
                (CAROL, 2410 * E18, 22 * E18, 0, 0, 0),
            ]
            start = -start_idx - 1
            return (troves[start : start + count],)

        rpc = FakeRpc({abi.GET_MULTIPLE_SORTED_TROVES: rows})
        ledger = EthereumLedger(rpc, sample_contracts_config)

        troves = await ledger.get_troves(2)
        more = await ledger.get_troves(1, start_index=2)

        assert [t.owner_address.lower() for t in troves] == [ALICE, BOB]
        assert troves[1].collateral == 21
        assert troves[1].debt == 2310
        assert [t.owner_address.lower() for t in more] == [CAROL]
        assert [args for _, _, args in rpc.calls] == [(-1, 2), (-3, 1)]
        assert rpc.calls[0][0] == sample_contracts_config.multi_trove_getter


class TestEthereumFeeState:
    @pytest.mark.asyncio
    async def test_get_fees(self, sample_contracts_config: ContractsConfig) -> None:
        last_operation = 1617624000
        rpc = FakeRpc(
            {
                abi.LAST_GOOD_PRICE: (200 * E18,),
                abi.BASE_RATE: (E18 // 100,),
                abi.LAST_FEE_OPERATION_TIME: (last_operation,),
                abi.MINUTE_DECAY_FACTOR: (999037758833783000,),
                abi.BETA: (2,),
                abi.CHECK_RECOVERY_MODE: (False,),
            },
            timestamp=last_operation + 30,
        )

        fees = await EthereumFeeState(rpc, sample_contracts_config).get_fees()

        assert fees.base_rate_without_decay == Decimal("0.01")
        assert fees.minute_decay_factor == Decimal("0.999037758833783")
        assert fees.beta == 2
        assert not fees.recovery_mode
        assert fees.last_fee_operation == datetime(2021, 4, 5, 12, 0, tzinfo=timezone.utc)
        # Under a minute since the last operation: no decay yet.
        assert fees.borrowing_rate() == Decimal("0.015")
        assert rpc.args_for("checkRecoveryMode") == (200 * E18,)

    @pytest.mark.asyncio
    async def test_recovery_mode(self, sample_contracts_config: ContractsConfig) -> None:
        rpc = FakeRpc(
            {
                abi.LAST_GOOD_PRICE: (200 * E18,),
                abi.BASE_RATE: (0,),
                abi.LAST_FEE_OPERATION_TIME: (0,),
                abi.MINUTE_DECAY_FACTOR: (E18,),
                abi.BETA: (2,),
                abi.CHECK_RECOVERY_MODE: (True,),
            }
        )
        fees = await EthereumFeeState(rpc, sample_contracts_config).get_fees()
        assert fees.recovery_mode
        assert fees.borrowing_rate() == Decimal.ZERO


def test_selectors_are_distinct() -> None:
    functions: list[Any] = [
        value for value in vars(abi).values() if isinstance(value, abi.ContractFunction)
    ]
    assert len({fn.selector for fn in functions}) == len(functions)
