"""
Reservation pricing and cancellation fees.
Pure functions of resource type and time range; no database access.
"""

import math
from datetime import datetime, timedelta, timezone

from utils.datetime_helpers import get_now
from .policy import SchedulingPolicy, get_policy
from .scheduler_types import GUEST_SUITE, SKY_LOUNGE


def _elapsed(start: datetime, end: datetime) -> timedelta:
    """Real elapsed time between two aware datetimes, DST changes included."""
    return end.astimezone(timezone.utc) - start.astimezone(timezone.utc)


def count_nights(start: datetime, end: datetime) -> int:
    """
    Number of nights covered by a stay: ceil((end - start) / 24h), measured
    between instants.

    Returns:
        int: Night count (0 or negative for empty/inverted ranges)
    """
    return math.ceil(_elapsed(start, end) / timedelta(days=1))


def format_price(amount: float) -> str:
    """Format an amount for display, e.g. 175 -> '$175.00'."""
    return f'${amount:.2f}'


def compute_cost(
    resource_type: str,
    start: datetime,
    end: datetime,
    policy: SchedulingPolicy = None
) -> dict:
    """
    Calculate reservation cost.

    Guest Suite nights are priced by the weekday of each local night starting
    from the local start date; Friday and Saturday nights use the weekend rate.
    Sky Lounge is a flat rate. Gear Shed is free.

    Args:
        resource_type: Canonical resource type
        start: Aware start datetime
        end: Aware end datetime
        policy: Scheduling policy (defaults to the current app's)

    Returns:
        dict: {'total': float, 'nights': int (Guest Suite only), 'breakdown': str}
    """
    policy = policy or get_policy()

    if resource_type == GUEST_SUITE:
        return _guest_suite_cost(start, end, policy)

    if resource_type == SKY_LOUNGE:
        return {
            'total': policy.sky_lounge_flat_rate,
            'breakdown': f'Flat rate: {format_price(policy.sky_lounge_flat_rate)}',
        }

    if policy.gear_shed_rate:
        return {
            'total': policy.gear_shed_rate,
            'breakdown': f'Flat rate: {format_price(policy.gear_shed_rate)}',
        }
    return {'total': 0.0, 'breakdown': 'Free rental'}


def _guest_suite_cost(start: datetime, end: datetime, policy: SchedulingPolicy) -> dict:
    nights = max(count_nights(start, end), 0)
    first_night = start.astimezone(policy.tz).date()

    total = 0.0
    night_breakdown = []

    for offset in range(nights):
        night = first_night + timedelta(days=offset)
        if night.weekday() in policy.weekend_nights:
            rate = policy.guest_suite_weekend_rate
        else:
            rate = policy.guest_suite_weekday_rate
        total += rate
        night_breakdown.append(f'{night.strftime("%a")}: {format_price(rate)}')

    return {
        'total': total,
        'nights': nights,
        'breakdown': ', '.join(night_breakdown),
    }


def hours_until(start: datetime, now: datetime) -> float:
    """Hours from now until start (negative once start has passed)."""
    return _elapsed(now, start) / timedelta(hours=1)


def compute_cancellation_fee(
    resource_type: str,
    start: datetime,
    now: datetime = None,
    policy: SchedulingPolicy = None
) -> float:
    """
    Fee owed when cancelling now.

    The flat per-type fee applies when fewer than the policy's window hours
    (72 by default) remain before start, including reservations that have
    already started. Exactly 72 hours out is free.

    Args:
        resource_type: Canonical resource type
        start: Aware reservation start
        now: Aware current time (defaults to now in the configured timezone)
        policy: Scheduling policy (defaults to the current app's)

    Returns:
        float: Fee amount (0.0 when outside the window)
    """
    policy = policy or get_policy()
    now = now or get_now()

    if hours_until(start, now) < policy.cancellation_window_hours:
        return policy.cancellation_fee_for(resource_type)
    return 0.0
