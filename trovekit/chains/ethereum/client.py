"""Ethereum JSON-RPC client.

Talks to a single endpoint and never retries: a transport failure or a
node error object is raised as RpcError and left to the caller.
"""
import itertools
import logging
import ssl
from typing import Any, Optional

import aiohttp
import certifi

from ...config import ChainConfig
from ...errors import RpcError

logger = logging.getLogger(__name__)

_request_ids = itertools.count(1)


class EthereumClient:
    """JSON-RPC client; also serves as the execution environment for transactions."""

    def __init__(self, config: ChainConfig) -> None:
        self.rpc_url = config.rpc_url
        self.timeout = config.rpc_timeout
        self.from_address = config.from_address

    async def rpc_call(self, method: str, params: list[Any]) -> Any:
        """Make a single JSON-RPC call and return its ``result``."""
        payload = {"jsonrpc": "2.0", "id": next(_request_ids), "method": method, "params": params}

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.post(
                    self.rpc_url,
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status != 200:
                        raise RpcError(f"{method}: HTTP {response.status}")
                    result = await response.json()
        except RpcError:
            raise
        except Exception as e:
            logger.error("RPC call %s to %s failed: %s", method, self.rpc_url, e)
            raise RpcError(f"{method}: {e}") from e

        if "error" in result:
            raise RpcError(f"{method}: {result['error']}")

        return result.get("result")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def call(self, to: str, data: str, block: str = "latest") -> str:
        """``eth_call`` returning the raw hex return data."""
        return await self.rpc_call("eth_call", [{"to": to, "data": data}, block])

    async def get_block_timestamp(self, block: str = "latest") -> int:
        block_data = await self.rpc_call("eth_getBlockByNumber", [block, False])
        return int(block_data["timestamp"], 16)

    # ------------------------------------------------------------------
    # Execution environment
    # ------------------------------------------------------------------

    def _with_sender(self, transaction: dict[str, Any]) -> dict[str, Any]:
        if self.from_address and "from" not in transaction:
            return {"from": self.from_address, **transaction}
        return dict(transaction)

    async def estimate_gas(self, transaction: dict[str, Any]) -> int:
        result = await self.rpc_call("eth_estimateGas", [self._with_sender(transaction)])
        return int(result, 16)

    async def submit(self, transaction: dict[str, Any], gas_limit: int) -> str:
        """Submit through the node's unlocked account; returns the transaction hash."""
        tx = {**self._with_sender(transaction), "gas": hex(gas_limit)}
        return await self.rpc_call("eth_sendTransaction", [tx])

    async def poll_inclusion(self, transaction_hash: str) -> Optional[dict[str, Any]]:
        return await self.rpc_call("eth_getTransactionReceipt", [transaction_hash])
