"""Protocol parameters of the live deployment and client tuning values."""
from .numeric import Decimal

# Debt reserved for gas compensation; not part of net debt.
LIQUIDATION_RESERVE = Decimal(200)

MINIMUM_NET_DEBT = Decimal(1800)
MINIMUM_DEBT = LIQUIDATION_RESERVE + MINIMUM_NET_DEBT

MINIMUM_COLLATERAL_RATIO = Decimal("1.1")

MINIMUM_BORROWING_RATE = Decimal("0.005")
MAXIMUM_BORROWING_RATE = Decimal("0.05")
MINIMUM_REDEMPTION_RATE = Decimal("0.005")

# Nominal collateral ratio is collateral * 100 / debt.
NOMINAL_RATIO_PRECISION = Decimal(100)

# A redemption traversing 70 troves costs close to the block gas limit.
REDEEM_MAX_ITERATIONS = 70

# Hint search: ceil(HINT_TRIALS_FACTOR * sqrt(list size)) trials in total,
# split into getApproxHint() calls of at most MAX_TRIALS_PER_ROUND trials so
# that public providers accept each eth_call.
HINT_TRIALS_FACTOR = 10
MAX_TRIALS_PER_ROUND = 2500

# Gas padding on top of eth_estimateGas.
GAS_FOR_LIST_TRAVERSAL = 25000
GAS_FOR_FEE_OPERATION_TIME_UPDATE = 10000

DEFAULT_BORROWING_RATE_SLIPPAGE = Decimal("0.005")
DEFAULT_REDEMPTION_RATE_SLIPPAGE = Decimal("0.001")

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
