import logging
import math
import threading
import time
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Union

import requests

from autoexit.config import PRIORITY_FEE_COOLDOWN
from autoexit.schemas.priority_fee import FeeSchedule, PriorityFeeEstimate, PriorityLevel
from autoexit.services.exceptions import RpcError
from autoexit.utils.constants import (
    DEFAULT_COMPUTE_UNITS,
    DEFAULT_FEE_SCHEDULE,
    LAMPORTS_PER_SOL,
    MICRO_LAMPORTS_PER_LAMPORT,
)

logger = logging.getLogger(__name__)


def utcnow():
    return datetime.now(timezone.utc)


def percentile(sorted_fees: List[float], fraction: float) -> float:
    """
    Index based percentile of an ascending list, no interpolation
    """
    return sorted_fees[int(math.floor(len(sorted_fees) * fraction))]


def determine_recommended(median: float, p90: float) -> PriorityLevel:
    congestion_ratio = p90 / median

    if congestion_ratio > 10:
        return PriorityLevel.very_high
    if congestion_ratio > 5:
        return PriorityLevel.high
    if congestion_ratio > 2:
        return PriorityLevel.medium
    return PriorityLevel.low


def _positive_fees(samples: Iterable) -> List[float]:
    fees = []
    for sample in samples or []:
        try:
            fee = float(sample)
        except (TypeError, ValueError):
            continue
        if math.isfinite(fee) and fee > 0:
            fees.append(fee)
    return sorted(fees)


def compute_estimate(samples: Iterable, schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE,
                     now: Callable[[], datetime] = utcnow) -> Optional[PriorityFeeEstimate]:
    """
    Tiered fee recommendation from recent prioritization fee samples, None
    when there is no positive sample to work from
    """
    fees = _positive_fees(samples)
    if not fees:
        return None

    median = percentile(fees, 0.5)
    p75 = percentile(fees, 0.75)
    p90 = percentile(fees, 0.9)

    return PriorityFeeEstimate(
        low=max(median * schedule.low.multiplier, schedule.low.floor),
        medium=max(median * schedule.medium.multiplier, schedule.medium.floor),
        high=max(p75 * schedule.high.multiplier, schedule.high.floor),
        very_high=max(p90 * schedule.very_high.multiplier, schedule.very_high.floor),
        recommended=determine_recommended(median, p90),
        last_updated=now(),
    )


def default_estimate(schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE,
                     now: Callable[[], datetime] = utcnow) -> PriorityFeeEstimate:
    return PriorityFeeEstimate(
        low=schedule.low.floor,
        medium=schedule.medium.floor,
        high=schedule.high.floor,
        very_high=schedule.very_high.floor,
        recommended=PriorityLevel.medium,
        last_updated=now(),
    )


class PriorityFeeEstimator:
    """
    Holds the current fee estimate and refreshes it at most once per
    cooldown window. The staleness check and the window claim happen under
    one lock so concurrent callers never refresh twice.
    """

    def __init__(self, schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE, cooldown: float = PRIORITY_FEE_COOLDOWN,
                 clock: Callable[[], float] = time.monotonic, now: Callable[[], datetime] = utcnow):
        self.schedule = schedule
        self.cooldown = cooldown
        self._clock = clock
        self._now = now
        self._lock = threading.Lock()
        self._last_refresh: Optional[float] = None
        self._estimate = default_estimate(schedule, now)

    @property
    def estimate(self) -> PriorityFeeEstimate:
        return self._estimate

    def refresh(self, samples: Union[Iterable, Callable[[], Iterable]]) -> PriorityFeeEstimate:
        """
        samples is either the recent fee samples or a callable fetching them;
        the callable is only invoked when the cooldown has elapsed.

        The caller that claims the window fetches and computes outside the
        lock, everyone else gets the cached estimate right away.
        """
        with self._lock:
            now = self._clock()
            if self._last_refresh is not None and now - self._last_refresh < self.cooldown:
                return self._estimate
            self._last_refresh = now
            previous = self._estimate

        try:
            fees = samples() if callable(samples) else samples
        except (RpcError, requests.RequestException) as e:
            logger.error(f"Failed to fetch priority fees, keeping previous estimate: {e}")
            return previous

        estimate = compute_estimate(fees, self.schedule, self._now)
        if estimate is None:
            logger.info("No recent priority fees, keeping previous estimate")
            return previous

        logger.info(f"Updated priority fees - low: {estimate.low}, medium: {estimate.medium}, "
                    f"high: {estimate.high}, veryHigh: {estimate.very_high}, "
                    f"recommended: {estimate.recommended.value}")
        with self._lock:
            self._estimate = estimate
        return estimate

    def get_fee_for_level(self, level: PriorityLevel) -> int:
        return int(math.floor(self._estimate.fee_for(level)))

    def get_fee_in_sol(self, level: PriorityLevel) -> str:
        return format_fee_in_sol(self._estimate.fee_for(level))

    def get_estimated_tx_fee(self, level: PriorityLevel, compute_units: int = DEFAULT_COMPUTE_UNITS) -> int:
        return estimated_tx_fee(self._estimate.fee_for(level), compute_units)


def format_fee_in_sol(fee_micro_lamports: float) -> str:
    fee_sol = fee_micro_lamports / MICRO_LAMPORTS_PER_LAMPORT / LAMPORTS_PER_SOL
    if fee_sol < 0.000001:
        return "<0.000001"
    return f"{fee_sol:.6f}"


def estimated_tx_fee(fee_micro_lamports: float, compute_units: int = DEFAULT_COMPUTE_UNITS) -> int:
    """
    Priority fee in lamports for a transaction using compute_units
    """
    return int(math.floor((compute_units * fee_micro_lamports) / MICRO_LAMPORTS_PER_LAMPORT))


def calculate_priority_fee(level: PriorityLevel, recent_median: float = None,
                           schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE) -> float:
    tier = schedule.tier(level)
    if not recent_median or recent_median <= 0:
        return tier.floor
    return max(math.floor(recent_median * tier.multiplier), tier.floor)


priority_fee_estimator = PriorityFeeEstimator()
