"""Capability interfaces for the collaborators the client talks to."""
from .execution import ExecutionEnvironment
from .fee_state import FeeState
from .ledger import PositionLedger
from .sorted_list import SortedListOracle

__all__ = ["ExecutionEnvironment", "FeeState", "PositionLedger", "SortedListOracle"]
