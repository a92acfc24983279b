"""Call-data encoding for the protocol contracts."""
from __future__ import annotations

from typing import Any

from eth_abi import decode, encode
from eth_utils import decode_hex, encode_hex, function_signature_to_4byte_selector


class ContractFunction:
    """One contract function: selector plus input/output ABI types."""

    def __init__(self, name: str, inputs: tuple[str, ...] = (), outputs: tuple[str, ...] = ()) -> None:
        self.name = name
        self.inputs = inputs
        self.outputs = outputs
        self.signature = f"{name}({','.join(inputs)})"
        self.selector = function_signature_to_4byte_selector(self.signature)

    def encode_call(self, *args: Any) -> str:
        if len(args) != len(self.inputs):
            raise TypeError(f"{self.signature} takes {len(self.inputs)} arguments, got {len(args)}")
        return encode_hex(self.selector + encode(list(self.inputs), list(args)))

    def decode_result(self, data: str) -> tuple[Any, ...]:
        return tuple(decode(list(self.outputs), decode_hex(data)))

    def __repr__(self) -> str:
        return f"ContractFunction({self.signature})"


TROVE_TUPLE = "(address,uint256,uint256,uint256,uint256,uint256)"

# HintHelpers
GET_APPROX_HINT = ContractFunction(
    "getApproxHint", ("uint256", "uint256", "uint256"), ("address", "uint256", "uint256")
)

# SortedTroves
FIND_INSERT_POSITION = ContractFunction(
    "findInsertPosition", ("uint256", "address", "address"), ("address", "address")
)
GET_FIRST = ContractFunction("getFirst", (), ("address",))

# TroveManager reads
GET_ENTIRE_DEBT_AND_COLL = ContractFunction(
    "getEntireDebtAndColl", ("address",), ("uint256", "uint256", "uint256", "uint256")
)
GET_TROVE_STATUS = ContractFunction("getTroveStatus", ("address",), ("uint256",))
GET_TROVE_OWNERS_COUNT = ContractFunction("getTroveOwnersCount", (), ("uint256",))
GET_ENTIRE_SYSTEM_COLL = ContractFunction("getEntireSystemColl", (), ("uint256",))
GET_ENTIRE_SYSTEM_DEBT = ContractFunction("getEntireSystemDebt", (), ("uint256",))
BASE_RATE = ContractFunction("baseRate", (), ("uint256",))
LAST_FEE_OPERATION_TIME = ContractFunction("lastFeeOperationTime", (), ("uint256",))
MINUTE_DECAY_FACTOR = ContractFunction("MINUTE_DECAY_FACTOR", (), ("uint256",))
BETA = ContractFunction("BETA", (), ("uint256",))
CHECK_RECOVERY_MODE = ContractFunction("checkRecoveryMode", ("uint256",), ("bool",))

# MultiTroveGetter
GET_MULTIPLE_SORTED_TROVES = ContractFunction(
    "getMultipleSortedTroves", ("int256", "uint256"), (f"{TROVE_TUPLE}[]",)
)

# PriceFeed
LAST_GOOD_PRICE = ContractFunction("lastGoodPrice", (), ("uint256",))

# BorrowerOperations writes
OPEN_TROVE = ContractFunction("openTrove", ("uint256", "uint256", "address", "address"))
ADJUST_TROVE = ContractFunction(
    "adjustTrove", ("uint256", "uint256", "uint256", "bool", "address", "address")
)
CLOSE_TROVE = ContractFunction("closeTrove")
CLAIM_COLLATERAL = ContractFunction("claimCollateral")

# TroveManager writes
REDEEM_COLLATERAL = ContractFunction(
    "redeemCollateral",
    ("uint256", "address", "address", "address", "uint256", "uint256", "uint256"),
)
