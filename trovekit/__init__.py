"""Client library for hint finding, redemption planning and trove transactions."""
from .models import Fees, Hint, RedemptionPlan, Trove, TroveAdjustmentParams, TroveCreationParams, UserTrove
from .numeric import Decimal

__version__ = "0.1.0"

__all__ = [
    "Decimal",
    "Fees",
    "Hint",
    "RedemptionPlan",
    "Trove",
    "TroveAdjustmentParams",
    "TroveCreationParams",
    "UserTrove",
]
