"""
Reservation CRUD operations.
Handles create, update, delete for reservations. Every write validates and
saves inside one BEGIN IMMEDIATE transaction, so two staff members racing for
the same slot cannot both succeed.
"""

import logging
import uuid

from utils.datetime_helpers import get_now, from_storage, to_storage
from .errors import NotFound, ValidationFailed
from .policy import get_policy
from .pricing import compute_cost
from .reservation_availability import parse_proposal, check_availability
from .reservation_queries import get_reservation_by_id
from .reservation_state import write_transaction, record_history
from .scheduler_types import STATUS_SCHEDULED
from .staff import require_actor

logger = logging.getLogger(__name__)


EDITABLE_FIELDS = (
    'rented_to', 'resource_type', 'item', 'items', 'start_time', 'end_time',
    'rental_notes', 'override_lock'
)


def generate_tx_id() -> str:
    """Opaque unique transaction ID."""
    return uuid.uuid4().hex


def _save_items(cursor, tx_id: str, items: list):
    """Replace the structured gear item list of a reservation."""
    cursor.execute('DELETE FROM reservation_items WHERE tx_id = ?', (tx_id,))
    for position, name in enumerate(items):
        cursor.execute('''
            INSERT INTO reservation_items (tx_id, item_name, position)
            VALUES (?, ?, ?)
        ''', (tx_id, name, position))


# =============================================================================
# CREATE
# =============================================================================

def create_reservation(data: dict, scheduled_by: str, now=None) -> str:
    """
    Validate and create a new Scheduled reservation.

    Args:
        data: Raw reservation input:
            rented_to: Unit number the reservation is for
            resource_type: GUEST_SUITE, SKY_LOUNGE or GEAR_SHED (any case)
            item: Guest Suite name (Sky Lounge defaults to the lounge)
            items: Gear Shed item names
            start_time: ISO datetime (naive values are local time)
            end_time: ISO datetime (ignored for Sky Lounge)
            rental_notes: Optional notes
            override_lock: Sky Lounge only, lifts the one-booking-per-day lock
        scheduled_by: Acting staff member
        now: Creation time (defaults to now in the configured timezone)

    Returns:
        str: New transaction ID

    Raises:
        ValidationFailed: With every input, rule and conflict message
        StoreUnavailable: If the database write fails
    """
    scheduled_by = require_actor(scheduled_by)
    policy = get_policy()
    now = now or get_now()
    tx_id = generate_tx_id()

    with write_transaction('save the reservation') as cursor:
        proposal, errors = parse_proposal(data, policy)
        errors.extend(check_availability(proposal, policy=policy))
        if errors:
            raise ValidationFailed(errors)

        cost = compute_cost(
            proposal['resource_type'], proposal['start_time'], proposal['end_time'], policy
        )

        cursor.execute('''
            INSERT INTO reservations (
                tx_id, rented_to, item, resource_type, status,
                start_time, end_time, total_cost,
                scheduled_by, last_update, rental_notes, override_lock, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ''', (
            tx_id, proposal['rented_to'], proposal['item'], proposal['resource_type'],
            STATUS_SCHEDULED,
            to_storage(proposal['start_time']), to_storage(proposal['end_time']),
            cost['total'],
            scheduled_by, to_storage(now), proposal['rental_notes'],
            int(proposal['override_lock']), to_storage(now)
        ))

        _save_items(cursor, tx_id, proposal['items'])
        record_history(cursor, tx_id, STATUS_SCHEDULED, 'created', scheduled_by,
                       'Reservation created', now)

    logger.info('Reservation %s created by %s: %s %s (%s - %s)',
                tx_id, scheduled_by, proposal['resource_type'], proposal['item'],
                to_storage(proposal['start_time']), to_storage(proposal['end_time']))
    return tx_id


# =============================================================================
# UPDATE
# =============================================================================

def update_reservation(tx_id: str, changes: dict, edited_by: str, now=None) -> dict:
    """
    Edit a reservation's fields and validate the result.

    The merged reservation is checked against every other active reservation
    (never against itself). Cost is recomputed only when the start, end or
    resource type changed. Status is not editable here.

    Args:
        tx_id: Transaction ID
        changes: Fields to change (see EDITABLE_FIELDS, plus return_notes)
        edited_by: Acting staff member
        now: Edit time

    Returns:
        dict: The updated reservation

    Raises:
        NotFound, ValidationFailed, StoreUnavailable
    """
    edited_by = require_actor(edited_by)
    policy = get_policy()
    now = now or get_now()

    with write_transaction('update the reservation') as cursor:
        existing = get_reservation_by_id(tx_id)
        if not existing:
            raise NotFound(f'Reservation {tx_id} not found')

        merged = {field: existing[field] for field in EDITABLE_FIELDS}
        merged.update({k: v for k, v in changes.items() if k in EDITABLE_FIELDS})

        proposal, errors = parse_proposal(merged, policy)
        errors.extend(check_availability(proposal, exclude_tx_id=tx_id, policy=policy))
        if errors:
            raise ValidationFailed(errors)

        reprice = (
            proposal['resource_type'] != existing['resource_type']
            or proposal['start_time'] != from_storage(existing['start_time'])
            or proposal['end_time'] != from_storage(existing['end_time'])
        )
        if reprice:
            total_cost = compute_cost(
                proposal['resource_type'], proposal['start_time'], proposal['end_time'], policy
            )['total']
        else:
            total_cost = existing['total_cost']

        return_notes = changes.get('return_notes', existing['return_notes'])

        cursor.execute('''
            UPDATE reservations
            SET rented_to = ?, item = ?, resource_type = ?,
                start_time = ?, end_time = ?, total_cost = ?,
                rental_notes = ?, return_notes = ?, override_lock = ?,
                edit_by = ?, last_update = ?
            WHERE tx_id = ?
        ''', (
            proposal['rented_to'], proposal['item'], proposal['resource_type'],
            to_storage(proposal['start_time']), to_storage(proposal['end_time']), total_cost,
            proposal['rental_notes'], return_notes, int(proposal['override_lock']),
            edited_by, to_storage(now), tx_id
        ))

        _save_items(cursor, tx_id, proposal['items'])
        record_history(cursor, tx_id, existing['status'], 'updated', edited_by,
                       ', '.join(sorted(k for k in changes if k in EDITABLE_FIELDS)), now)

    logger.info('Reservation %s updated by %s%s', tx_id, edited_by,
                ' (repriced)' if reprice else '')
    return get_reservation_by_id(tx_id)


# =============================================================================
# DELETE
# =============================================================================

def delete_reservation(tx_id: str) -> None:
    """
    Permanently delete a reservation in any status.

    Gear items and status history go with it (ON DELETE CASCADE).

    Raises:
        NotFound, StoreUnavailable
    """
    with write_transaction('delete the reservation') as cursor:
        cursor.execute('DELETE FROM reservations WHERE tx_id = ?', (tx_id,))
        if cursor.rowcount == 0:
            raise NotFound(f'Reservation {tx_id} not found')

    logger.info('Reservation %s deleted', tx_id)
