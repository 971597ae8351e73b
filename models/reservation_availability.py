"""
Availability checking for proposed reservations.
Parses raw reservation input and accumulates business-rule and conflict
errors per resource type. Read-only: never writes to the database.
"""

from datetime import datetime, timedelta, timezone

from utils.datetime_helpers import parse_datetime, from_storage
from .policy import SchedulingPolicy, get_policy
from .pricing import count_nights
from .reservation_queries import get_active_reservations
from .scheduler_item import get_items_by_name
from .scheduler_types import (
    GUEST_SUITE, SKY_LOUNGE, GEAR_SHED, IN_SERVICE,
    normalize_resource_type, resource_label
)


# =============================================================================
# INTERVALS
# =============================================================================

def intervals_overlap(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """
    Half-open interval intersection: [start_a, end_a) and [start_b, end_b).

    Back-to-back ranges (one ending exactly when the other starts) do not overlap.
    """
    return start_a < end_b and end_a > start_b


def _reservation_interval(reservation: dict) -> tuple:
    return from_storage(reservation['start_time']), from_storage(reservation['end_time'])


def _format_hour(hour: int) -> str:
    suffix = 'AM' if hour < 12 else 'PM'
    return f'{(hour % 12) or 12}:00 {suffix}'


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes', 'on')
    return bool(value)


# =============================================================================
# PROPOSAL PARSING
# =============================================================================

def parse_proposal(data: dict, policy: SchedulingPolicy = None) -> tuple:
    """
    Normalize raw reservation input into a proposal.

    - resource_type is canonicalized case-insensitively
    - start_time/end_time become aware UTC datetimes (naive input is local time)
    - Sky Lounge end_time is always start + block hours; item defaults to the lounge
    - Gear Shed items are de-duplicated (order kept) and joined for display

    Args:
        data: Raw input dict (rented_to, resource_type, item, items,
              start_time, end_time, rental_notes, override_lock)
        policy: Scheduling policy (defaults to the current app's)

    Returns:
        tuple: (proposal dict, list of input error messages)
    """
    policy = policy or get_policy()
    errors = []

    rented_to = str(data.get('rented_to') or '').strip()
    if not rented_to:
        errors.append('Unit number is required')

    raw_type = data.get('resource_type')
    resource_type = normalize_resource_type(raw_type)
    if not raw_type:
        errors.append('Resource type is required')
    elif not resource_type:
        errors.append(f'Unknown resource type: {raw_type}')

    start = _parse_time(data.get('start_time'), 'Start', policy, errors)
    if resource_type == SKY_LOUNGE:
        end = start + timedelta(hours=policy.sky_lounge_block_hours) if start else None
    else:
        end = _parse_time(data.get('end_time'), 'End', policy, errors)

    items = []
    item = str(data.get('item') or '').strip()
    if resource_type == GEAR_SHED:
        raw_items = data.get('items') or []
        if isinstance(raw_items, str):
            raw_items = [raw_items]
        for name in raw_items:
            name = str(name or '').strip()
            if name and name not in items:
                items.append(name)
        item = ', '.join(items)
    elif resource_type == SKY_LOUNGE and not item:
        item = policy.sky_lounge_item

    proposal = {
        'rented_to': rented_to,
        'resource_type': resource_type,
        'item': item,
        'items': items,
        'start_time': start,
        'end_time': end,
        'rental_notes': str(data.get('rental_notes') or ''),
        'override_lock': resource_type == SKY_LOUNGE and _as_bool(data.get('override_lock')),
    }
    return proposal, errors


def _parse_time(value, label: str, policy: SchedulingPolicy, errors: list):
    if value is None or value == '':
        errors.append(f'{label} date/time is required')
        return None
    try:
        parsed = parse_datetime(value, policy.tz)
    except (ValueError, TypeError):
        errors.append(f'{label} date/time is not a valid date')
        return None
    # Normalized to UTC so durations and comparisons are between instants
    return parsed.astimezone(timezone.utc)


# =============================================================================
# AVAILABILITY CHECK
# =============================================================================

def check_availability(
    proposal: dict,
    exclude_tx_id: str = None,
    policy: SchedulingPolicy = None
) -> list:
    """
    Check a parsed proposal against the type rules, the catalog and the
    active reservations.

    Args:
        proposal: Output of parse_proposal()
        exclude_tx_id: Reservation being edited (left out of comparisons)
        policy: Scheduling policy (defaults to the current app's)

    Returns:
        list: Error messages; empty when the booking may proceed
    """
    policy = policy or get_policy()
    errors = []

    start = proposal.get('start_time')
    end = proposal.get('end_time')
    resource_type = proposal.get('resource_type')

    if not start or not end or not resource_type:
        return errors

    if start >= end:
        errors.append('Start time must be before end time')

    if resource_type == GUEST_SUITE:
        _check_guest_suite(proposal, start, end, exclude_tx_id, policy, errors)
    elif resource_type == SKY_LOUNGE:
        _check_sky_lounge(proposal, start, exclude_tx_id, policy, errors)
    elif resource_type == GEAR_SHED:
        _check_gear_shed(proposal, start, end, exclude_tx_id, errors)

    return errors


def validate_reservation(
    data: dict,
    exclude_tx_id: str = None,
    policy: SchedulingPolicy = None
) -> list:
    """
    Parse raw input and check availability in one call.

    Returns:
        list: All input, rule and conflict error messages
    """
    proposal, errors = parse_proposal(data, policy)
    errors.extend(check_availability(proposal, exclude_tx_id, policy))
    return errors


def _check_catalog(names: list, resource_type: str) -> list:
    """Every name must be a known, in-service item of the resource type."""
    catalog = get_items_by_name(resource_type)
    errors = []
    for name in names:
        entry = catalog.get(name)
        if entry is None:
            errors.append(f'Unknown {resource_label(resource_type)} item: {name}')
        elif entry['service_status'] != IN_SERVICE:
            errors.append(f'{name} is not in service')
    return errors


def _check_guest_suite(proposal, start, end, exclude_tx_id, policy, errors):
    if count_nights(start, end) < policy.guest_suite_min_nights:
        errors.append(f'Guest Suite requires a minimum {policy.guest_suite_min_nights}-night stay')

    item = proposal.get('item')
    if not item:
        errors.append('Please select a Guest Suite')
        return

    errors.extend(_check_catalog([item], GUEST_SUITE))

    for other in get_active_reservations(GUEST_SUITE, exclude_tx_id):
        if other['item'] != item:
            continue
        if intervals_overlap(start, end, *_reservation_interval(other)):
            errors.append(f'{item} is already booked for these dates')
            break


def _check_sky_lounge(proposal, start, exclude_tx_id, policy, errors):
    local_start = start.astimezone(policy.tz)
    if not policy.sky_lounge_open_hour <= local_start.hour < policy.sky_lounge_close_hour:
        errors.append(
            f'Sky Lounge is only available {_format_hour(policy.sky_lounge_open_hour)}'
            f' - {_format_hour(policy.sky_lounge_close_hour)}'
        )

    errors.extend(_check_catalog([proposal['item']], SKY_LOUNGE))

    end = proposal['end_time']
    for other in get_active_reservations(SKY_LOUNGE, exclude_tx_id):
        other_start, other_end = _reservation_interval(other)
        if proposal.get('override_lock'):
            # Override lifts the all-day lock, never a real double booking
            if intervals_overlap(start, end, other_start, other_end):
                errors.append('Sky Lounge is already booked for this time')
                break
        elif other_start.astimezone(policy.tz).date() == local_start.date():
            errors.append(
                'Sky Lounge is already booked for this date. '
                'Use override if confirmed with housekeeping.'
            )
            break


def _check_gear_shed(proposal, start, end, exclude_tx_id, errors):
    items = proposal.get('items') or []
    if not items:
        errors.append('Please select at least one item')
        return

    errors.extend(_check_catalog(items, GEAR_SHED))

    active = get_active_reservations(GEAR_SHED, exclude_tx_id)
    for name in items:
        for other in active:
            if name not in other['items']:
                continue
            if intervals_overlap(start, end, *_reservation_interval(other)):
                errors.append(f'{name} is already booked for these dates')
                break
