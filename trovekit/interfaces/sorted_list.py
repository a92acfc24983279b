"""Sorted-list oracle protocol — sampling and locating positions in the on-chain list."""
from typing import Protocol

from ..models import ApproxHint
from ..numeric import Decimal


class SortedListOracle(Protocol):
    """Read access to the list of troves ordered by nominal collateral ratio."""

    async def get_approx_hint(
        self, nominal_ratio: Decimal, num_trials: int, random_seed: int
    ) -> ApproxHint: ...

    async def find_insert_position(
        self, nominal_ratio: Decimal, prev_id: str, next_id: str
    ) -> tuple[str, str]: ...

    async def get_first(self) -> str: ...
