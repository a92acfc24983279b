"""Position ledger protocol — trove and system totals."""
from typing import Protocol

from ..models import Trove, UserTrove
from ..numeric import Decimal


class PositionLedger(Protocol):
    """Read access to individual troves and the system-wide totals."""

    async def get_trove(self, owner_address: str) -> UserTrove: ...

    async def get_total(self) -> Trove: ...

    async def get_number_of_troves(self) -> int: ...

    async def get_troves(self, first: int, start_index: int = 0) -> list[UserTrove]:
        """Return up to ``first`` troves in ascending collateral ratio order."""
        ...

    async def get_price(self) -> Decimal: ...
