"""
Scheduling policy.

Rates, fees, stay minimums and lounge hours as one immutable value, built
once from the Flask config and handed to pricing and availability checks.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping
from zoneinfo import ZoneInfo

from flask import current_app

from .scheduler_types import GUEST_SUITE, SKY_LOUNGE, GEAR_SHED


EXTENSION_KEY = 'scheduling_policy'


@dataclass(frozen=True)
class SchedulingPolicy:
    timezone: str = 'America/Los_Angeles'

    guest_suite_weekday_rate: float = 125.0
    guest_suite_weekend_rate: float = 175.0
    guest_suite_min_nights: int = 2
    # date.weekday() values billed at the weekend rate (Friday, Saturday)
    weekend_nights: frozenset = field(default_factory=lambda: frozenset({4, 5}))

    sky_lounge_flat_rate: float = 300.0
    sky_lounge_open_hour: int = 10
    sky_lounge_close_hour: int = 18
    sky_lounge_block_hours: int = 4
    sky_lounge_item: str = 'Sky Lounge'

    gear_shed_rate: float = 0.0

    cancellation_fees: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({
        GUEST_SUITE: 75.0,
        SKY_LOUNGE: 150.0,
        GEAR_SHED: 0.0,
    }))
    cancellation_window_hours: int = 72

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def cancellation_fee_for(self, resource_type: str) -> float:
        return float(self.cancellation_fees.get(resource_type, 0.0))

    @classmethod
    def from_config(cls, config: Mapping) -> 'SchedulingPolicy':
        """
        Build a policy from a Flask config mapping.

        Keys missing from the mapping keep the dataclass defaults.
        """
        defaults = cls()
        fees = dict(defaults.cancellation_fees)
        for resource_type in fees:
            key = f'CANCELLATION_FEE_{resource_type}'
            if key in config:
                fees[resource_type] = float(config[key])

        return cls(
            timezone=config.get('TIMEZONE', defaults.timezone),
            guest_suite_weekday_rate=float(config.get('GUEST_SUITE_WEEKDAY_RATE', defaults.guest_suite_weekday_rate)),
            guest_suite_weekend_rate=float(config.get('GUEST_SUITE_WEEKEND_RATE', defaults.guest_suite_weekend_rate)),
            guest_suite_min_nights=int(config.get('GUEST_SUITE_MIN_NIGHTS', defaults.guest_suite_min_nights)),
            sky_lounge_flat_rate=float(config.get('SKY_LOUNGE_FLAT_RATE', defaults.sky_lounge_flat_rate)),
            sky_lounge_open_hour=int(config.get('SKY_LOUNGE_OPEN_HOUR', defaults.sky_lounge_open_hour)),
            sky_lounge_close_hour=int(config.get('SKY_LOUNGE_CLOSE_HOUR', defaults.sky_lounge_close_hour)),
            sky_lounge_block_hours=int(config.get('SKY_LOUNGE_BLOCK_HOURS', defaults.sky_lounge_block_hours)),
            gear_shed_rate=float(config.get('GEAR_SHED_RATE', defaults.gear_shed_rate)),
            cancellation_fees=MappingProxyType(fees),
            cancellation_window_hours=int(config.get('CANCELLATION_WINDOW_HOURS', defaults.cancellation_window_hours)),
        )


def init_policy(app) -> SchedulingPolicy:
    """Build the app's policy from its config and register it on the app."""
    policy = SchedulingPolicy.from_config(app.config)
    app.extensions[EXTENSION_KEY] = policy
    return policy


def get_policy() -> SchedulingPolicy:
    """Get the policy registered on the current app."""
    policy = current_app.extensions.get(EXTENSION_KEY)
    if policy is None:
        policy = init_policy(current_app)
    return policy
