"""Randomized hint search over the on-chain sorted list.

The list can be arbitrarily long, so instead of reading it we ask the hint
helper contract to sample random troves and report the one closest to the
target ratio. Accuracy grows with the number of samples; the total is
``ceil(HINT_TRIALS_FACTOR * sqrt(list_size))``, issued in rounds of at most
``MAX_TRIALS_PER_ROUND``. The best sample is then resolved into a concrete
(upper, lower) pair by the list itself, which corrects for any drift.
"""
from __future__ import annotations

import logging
import math
from collections.abc import Iterator

from ..constants import HINT_TRIALS_FACTOR, MAX_TRIALS_PER_ROUND, ZERO_ADDRESS
from ..interfaces.sorted_list import SortedListOracle
from ..models import ApproxHint, Hint
from ..numeric import Decimal

logger = logging.getLogger(__name__)


def total_number_of_trials(list_size: int) -> int:
    if list_size < 0:
        raise ValueError(f"list_size must not be negative, got {list_size}")
    return math.ceil(HINT_TRIALS_FACTOR * math.sqrt(list_size))


def generate_trials(total_trials: int) -> Iterator[int]:
    """Split ``total_trials`` into rounds of at most ``MAX_TRIALS_PER_ROUND``."""
    if total_trials <= 0:
        raise ValueError(f"total_trials must be positive, got {total_trials}")
    while total_trials:
        trials = min(total_trials, MAX_TRIALS_PER_ROUND)
        yield trials
        total_trials -= trials


def _closest(best: ApproxHint, candidate: ApproxHint) -> ApproxHint:
    # Strict comparison: on a tie the earlier candidate wins.
    return candidate if candidate.diff < best.diff else best


async def _sample(
    oracle: SortedListOracle,
    nominal_ratio: Decimal,
    trials: int,
    seed: int,
    round_number: int,
) -> ApproxHint:
    candidate = await oracle.get_approx_hint(nominal_ratio, trials, seed)
    logger.debug(
        "Sampling round %d: %d trials, candidate %s diff %d",
        round_number,
        trials,
        candidate.hint_address,
        candidate.diff,
    )
    return candidate


async def find_hint(
    nominal_ratio: Decimal,
    list_size: int,
    oracle: SortedListOracle,
    random_seed: int,
) -> Hint:
    """Find an insertion hint for ``nominal_ratio``.

    Args:
        nominal_ratio: Target nominal collateral ratio; may be infinite.
        list_size: Number of troves currently in the list.
        oracle: Sorted-list capability used for every read.
        random_seed: Entropy for the first sampling round.

    Returns:
        The hint plus the latest random seed, which callers may feed into
        their next search.
    """
    if list_size == 0:
        return Hint(latest_random_seed=random_seed)

    if nominal_ratio.infinite:
        # Troves without debt sort before everything else.
        first = await oracle.get_first()
        return Hint(ZERO_ADDRESS, first, latest_random_seed=random_seed)

    trials_per_round = generate_trials(total_number_of_trials(list_size))
    best = await _sample(oracle, nominal_ratio, next(trials_per_round), random_seed, 1)
    seed = best.latest_random_seed
    rounds = 1

    for trials in trials_per_round:
        rounds += 1
        candidate = await _sample(oracle, nominal_ratio, trials, seed, rounds)
        best = _closest(best, candidate)
        seed = candidate.latest_random_seed

    upper, lower = await oracle.find_insert_position(
        nominal_ratio, best.hint_address, best.hint_address
    )
    logger.info(
        "Hint for NCR %s after %d rounds: upper=%s lower=%s",
        nominal_ratio,
        rounds,
        upper,
        lower,
    )
    return Hint(upper, lower, latest_random_seed=seed)
