"""Execution environment protocol — gas estimation, submission, inclusion."""
from typing import Any, Optional, Protocol


class ExecutionEnvironment(Protocol):
    """Where populated transactions are estimated, submitted and tracked."""

    async def estimate_gas(self, transaction: dict[str, Any]) -> int: ...

    async def submit(self, transaction: dict[str, Any], gas_limit: int) -> str:
        """Submit and return the transaction hash."""
        ...

    async def poll_inclusion(self, transaction_hash: str) -> Optional[dict[str, Any]]:
        """Return the raw receipt once included, None while pending."""
        ...
