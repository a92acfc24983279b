"""Ethereum JSON-RPC client and protocol contract adapters."""
from .client import EthereumClient
from .contracts import EthereumFeeState, EthereumLedger, EthereumSortedList

__all__ = ["EthereumClient", "EthereumFeeState", "EthereumLedger", "EthereumSortedList"]
