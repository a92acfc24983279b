"""Service modules"""
from .hint_finder import find_hint
from .populator import TransactionPopulator
from .redemption_planner import RedemptionPlanner, plan_redemption
from .transaction import PopulatedRedemption, PopulatedTransaction, SentTransaction
from .trove_client import TroveClient

__all__ = [
    "find_hint",
    "plan_redemption",
    "PopulatedRedemption",
    "PopulatedTransaction",
    "RedemptionPlanner",
    "SentTransaction",
    "TransactionPopulator",
    "TroveClient",
]
