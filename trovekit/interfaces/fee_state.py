"""Fee state protocol — decaying base rate."""
from typing import Protocol

from ..models import Fees


class FeeState(Protocol):
    """Read access to the base rate and the time of the last fee operation."""

    async def get_fees(self) -> Fees: ...
