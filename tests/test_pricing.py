"""
Tests for pricing and cancellation fees.
Pure functions: no app or database needed.
"""

import pytest
from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta

from models.policy import SchedulingPolicy
from models.pricing import (
    count_nights, compute_cost, compute_cancellation_fee, format_price, hours_until
)
from models.scheduler_types import GUEST_SUITE, SKY_LOUNGE, GEAR_SHED


class TestCountNights:

    def test_partial_day_rounds_up(self, tz):
        start = datetime(2024, 1, 5, 15, tzinfo=tz)
        assert count_nights(start, datetime(2024, 1, 7, 11, tzinfo=tz)) == 2

    def test_exact_days(self, tz):
        start = datetime(2024, 1, 5, 15, tzinfo=tz)
        assert count_nights(start, start + timedelta(days=1)) == 1
        assert count_nights(start, start + timedelta(days=2)) == 2

    def test_short_stay_is_one_night(self, tz):
        start = datetime(2024, 1, 5, 15, tzinfo=tz)
        assert count_nights(start, start + timedelta(hours=20)) == 1


class TestGuestSuitePricing:

    def test_friday_saturday_weekend_rate(self, policy, tz):
        """Fri 15:00 -> Sun 11:00 is two weekend nights."""
        price = compute_cost(
            GUEST_SUITE,
            datetime(2024, 1, 5, 15, tzinfo=tz),
            datetime(2024, 1, 7, 11, tzinfo=tz),
            policy
        )
        assert price['total'] == 350.0
        assert price['nights'] == 2
        assert price['breakdown'] == 'Fri: $175.00, Sat: $175.00'

    def test_weekday_rate(self, policy, tz):
        price = compute_cost(
            GUEST_SUITE,
            datetime(2024, 1, 8, 15, tzinfo=tz),
            datetime(2024, 1, 10, 11, tzinfo=tz),
            policy
        )
        assert price['total'] == 250.0
        assert price['breakdown'] == 'Mon: $125.00, Tue: $125.00'

    def test_mixed_week(self, policy, tz):
        price = compute_cost(
            GUEST_SUITE,
            datetime(2024, 1, 4, 15, tzinfo=tz),
            datetime(2024, 1, 7, 11, tzinfo=tz),
            policy
        )
        assert price['nights'] == 3
        assert price['total'] == 125.0 + 175.0 + 175.0

    def test_nights_follow_local_date(self, policy, tz):
        """Fri 23:00 local is Sat in UTC; still billed from Friday."""
        start = datetime(2024, 1, 5, 23, tzinfo=tz)
        price = compute_cost(GUEST_SUITE, start, start + timedelta(days=2), policy)
        assert price['breakdown'] == 'Fri: $175.00, Sat: $175.00'

    def test_deterministic(self, policy, tz):
        start = datetime(2024, 1, 5, 15, tzinfo=tz)
        end = datetime(2024, 1, 9, 11, tzinfo=tz)
        assert compute_cost(GUEST_SUITE, start, end, policy) == compute_cost(GUEST_SUITE, start, end, policy)


class TestFlatPricing:

    def test_sky_lounge_flat_rate(self, policy, tz):
        start = datetime(2024, 1, 5, 12, tzinfo=tz)
        price = compute_cost(SKY_LOUNGE, start, start + timedelta(hours=4), policy)
        assert price == {'total': 300.0, 'breakdown': 'Flat rate: $300.00'}

    def test_gear_shed_is_free(self, policy, tz):
        start = datetime(2024, 1, 5, 9, tzinfo=tz)
        price = compute_cost(GEAR_SHED, start, start + timedelta(hours=8), policy)
        assert price == {'total': 0.0, 'breakdown': 'Free rental'}

    def test_format_price(self):
        assert format_price(175) == '$175.00'
        assert format_price(0) == '$0.00'
        assert format_price(12.5) == '$12.50'


class TestCancellationFee:

    def test_exactly_window_is_free(self, policy, tz):
        now = datetime(2024, 1, 1, 12, tzinfo=tz)
        start = now + timedelta(hours=72)
        assert hours_until(start, now) == 72
        assert compute_cancellation_fee(GUEST_SUITE, start, now, policy) == 0.0

    def test_inside_window_charges_fee(self, policy, tz):
        now = datetime(2024, 1, 1, 12, tzinfo=tz)
        start = now + timedelta(hours=72) - timedelta(seconds=1)
        assert compute_cancellation_fee(GUEST_SUITE, start, now, policy) == 75.0
        assert compute_cancellation_fee(SKY_LOUNGE, start, now, policy) == 150.0
        assert compute_cancellation_fee(GEAR_SHED, start, now, policy) == 0.0

    def test_started_reservation_charges_fee(self, policy, tz):
        now = datetime(2024, 1, 10, 12, tzinfo=tz)
        start = now - timedelta(days=2)
        assert compute_cancellation_fee(SKY_LOUNGE, start, now, policy) == 150.0

    def test_far_future_is_free(self, policy, tz):
        now = datetime(2024, 1, 1, 12, tzinfo=tz)
        assert compute_cancellation_fee(SKY_LOUNGE, now + timedelta(days=30), now, policy) == 0.0


class TestSchedulingPolicy:

    def test_defaults(self, policy):
        assert policy.guest_suite_min_nights == 2
        assert policy.sky_lounge_block_hours == 4
        assert policy.cancellation_fee_for(GUEST_SUITE) == 75.0

    def test_immutable(self, policy):
        with pytest.raises(FrozenInstanceError):
            policy.sky_lounge_flat_rate = 1
        with pytest.raises(TypeError):
            policy.cancellation_fees[GUEST_SUITE] = 0

    def test_from_config_overrides(self):
        policy = SchedulingPolicy.from_config({
            'TIMEZONE': 'America/New_York',
            'SKY_LOUNGE_FLAT_RATE': '250',
            'CANCELLATION_FEE_GUEST_SUITE': 50,
        })
        assert policy.timezone == 'America/New_York'
        assert policy.sky_lounge_flat_rate == 250.0
        assert policy.cancellation_fee_for(GUEST_SUITE) == 50.0
        # Untouched keys keep defaults
        assert policy.cancellation_fee_for(SKY_LOUNGE) == 150.0
        assert policy.guest_suite_weekend_rate == 175.0


class TestDaylightSavingChanges:
    """Durations are measured between instants, however the times are written."""

    def test_spring_forward_short_night(self, tz):
        from datetime import timezone

        # 2024-03-10 02:00 local jumps to 03:00: 23.5 real hours
        start = datetime(2024, 3, 9, 14, tzinfo=tz)
        end = datetime(2024, 3, 10, 14, 30, tzinfo=tz)

        assert count_nights(start, end) == 1
        assert count_nights(start.astimezone(timezone.utc), end.astimezone(timezone.utc)) == 1

    def test_fall_back_long_stay(self, policy, tz):
        from datetime import timezone

        # 2024-11-03 02:00 local falls back to 01:00: 49 real hours
        start = datetime(2024, 11, 2, 14, tzinfo=tz)
        end = datetime(2024, 11, 4, 14, tzinfo=tz)

        local = compute_cost(GUEST_SUITE, start, end, policy)
        utc = compute_cost(GUEST_SUITE, start.astimezone(timezone.utc), end.astimezone(timezone.utc), policy)

        assert local == utc
        assert local['nights'] == 3
        assert local['total'] == 175.0 + 125.0 + 125.0

    def test_hours_until_across_change(self, tz):
        now = datetime(2024, 3, 9, 12, tzinfo=tz)
        start = datetime(2024, 3, 12, 12, tzinfo=tz)
        assert hours_until(start, now) == 71

    def test_fee_window_across_change(self, policy, tz):
        """Three calendar days out is only 71 real hours over spring forward."""
        now = datetime(2024, 3, 9, 12, tzinfo=tz)
        start = datetime(2024, 3, 12, 12, tzinfo=tz)
        assert compute_cancellation_fee(GUEST_SUITE, start, now, policy) == 75.0
