"""
Reservation state management functions.
Handles status transitions (cancel, restore, complete), the write-transaction
helper shared with CRUD, and status history.
"""

import logging
import sqlite3
from contextlib import contextmanager

from database import get_db, begin_immediate
from utils.datetime_helpers import get_now, from_storage, to_storage
from .errors import InvalidStateTransition, NotFound, StoreUnavailable, ValidationFailed
from .policy import get_policy
from .pricing import compute_cancellation_fee, hours_until
from .reservation_availability import parse_proposal, check_availability
from .reservation_queries import get_reservation_by_id
from .scheduler_types import STATUS_SCHEDULED, STATUS_COMPLETE, STATUS_CANCELLED
from .staff import require_actor

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

VALID_TRANSITIONS = {
    STATUS_SCHEDULED: {STATUS_CANCELLED, STATUS_COMPLETE},
    STATUS_CANCELLED: {STATUS_SCHEDULED},
    STATUS_COMPLETE: set(),
}


# =============================================================================
# TRANSACTIONS & HISTORY
# =============================================================================

@contextmanager
def write_transaction(action: str):
    """
    Run a block inside one BEGIN IMMEDIATE transaction.

    Commits on success, rolls back on any exception. Database failures are
    re-raised as StoreUnavailable.

    Args:
        action: Short description used in logs and the error message

    Yields:
        sqlite3.Cursor
    """
    db = get_db()
    try:
        begin_immediate(db)
        yield db.cursor()
        db.commit()
    except sqlite3.Error as e:
        db.rollback()
        logger.error('Store failure while trying to %s: %s', action, e, exc_info=True)
        raise StoreUnavailable(f'Could not {action}. Please try again.') from e
    except Exception:
        db.rollback()
        raise


def record_history(cursor, tx_id: str, status: str, action: str, changed_by: str,
                   notes: str = '', now=None):
    """Insert a status history row for a reservation."""
    cursor.execute('''
        INSERT INTO reservation_status_history
        (tx_id, status, action, changed_by, notes, created_at)
        VALUES (?, ?, ?, ?, ?, ?)
    ''', (tx_id, status, action, changed_by, notes, to_storage(now or get_now())))


def get_status_history(tx_id: str) -> list:
    """
    Get status change history for a reservation.

    Args:
        tx_id: Transaction ID

    Returns:
        list: History entries, newest first
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT * FROM reservation_status_history
        WHERE tx_id = ?
        ORDER BY created_at DESC, id DESC
    ''', (tx_id,))
    return [dict(r) for r in cursor.fetchall()]


# =============================================================================
# STATE TRANSITIONS
# =============================================================================

def validate_state_transition(current_status: str, new_status: str) -> None:
    """
    Raise InvalidStateTransition unless current -> new is allowed.

    Scheduled -> Cancelled | Complete, Cancelled -> Scheduled. Complete is terminal.
    """
    if new_status not in VALID_TRANSITIONS.get(current_status, set()):
        raise InvalidStateTransition(
            f'Cannot change a {current_status} reservation to {new_status}'
        )


def _get_for_update(tx_id: str) -> dict:
    reservation = get_reservation_by_id(tx_id)
    if not reservation:
        raise NotFound(f'Reservation {tx_id} not found')
    return reservation


def cancel_reservation(tx_id: str, cancelled_by: str, fee: float = None, now=None) -> dict:
    """
    Cancel a Scheduled reservation.

    Args:
        tx_id: Transaction ID
        cancelled_by: Acting staff member
        fee: Fee to record; computed from the time until start when None
        now: Current time (defaults to now in the configured timezone)

    Returns:
        dict: The updated reservation

    Raises:
        NotFound, InvalidStateTransition, ValidationFailed (negative fee)
    """
    cancelled_by = require_actor(cancelled_by)
    now = now or get_now()

    with write_transaction('cancel the reservation') as cursor:
        reservation = _get_for_update(tx_id)
        validate_state_transition(reservation['status'], STATUS_CANCELLED)

        if fee is None:
            fee = compute_cancellation_fee(
                reservation['resource_type'],
                from_storage(reservation['start_time']),
                now
            )
        try:
            fee = float(fee)
        except (TypeError, ValueError):
            raise ValidationFailed(['Cancellation fee must be a number'])
        if fee < 0:
            raise ValidationFailed(['Cancellation fee cannot be negative'])

        cursor.execute('''
            UPDATE reservations
            SET status = ?, cancellation_fee = ?, edit_by = ?, last_update = ?
            WHERE tx_id = ?
        ''', (STATUS_CANCELLED, fee if fee > 0 else None, cancelled_by, to_storage(now), tx_id))

        notes = f'Cancellation fee {fee:.2f}' if fee > 0 else ''
        record_history(cursor, tx_id, STATUS_CANCELLED, 'cancelled', cancelled_by, notes, now)

    logger.info('Reservation %s cancelled by %s (fee %.2f)', tx_id, cancelled_by, fee)
    return get_reservation_by_id(tx_id)


def restore_reservation(tx_id: str, restored_by: str, now=None) -> dict:
    """
    Restore a Cancelled reservation to Scheduled.

    Availability is checked again first: a slot taken while the reservation
    was cancelled blocks the restore. Any recorded cancellation fee is cleared.

    Args:
        tx_id: Transaction ID
        restored_by: Acting staff member
        now: Current time

    Returns:
        dict: The updated reservation

    Raises:
        NotFound, InvalidStateTransition, ValidationFailed
    """
    restored_by = require_actor(restored_by)
    now = now or get_now()
    policy = get_policy()

    with write_transaction('restore the reservation') as cursor:
        reservation = _get_for_update(tx_id)
        validate_state_transition(reservation['status'], STATUS_SCHEDULED)

        proposal, errors = parse_proposal(reservation, policy)
        errors.extend(check_availability(proposal, exclude_tx_id=tx_id, policy=policy))
        if errors:
            raise ValidationFailed(errors)

        cursor.execute('''
            UPDATE reservations
            SET status = ?, cancellation_fee = NULL, edit_by = ?, last_update = ?
            WHERE tx_id = ?
        ''', (STATUS_SCHEDULED, restored_by, to_storage(now), tx_id))

        record_history(cursor, tx_id, STATUS_SCHEDULED, 'restored', restored_by, '', now)

    logger.info('Reservation %s restored by %s', tx_id, restored_by)
    return get_reservation_by_id(tx_id)


def complete_reservation(tx_id: str, return_notes: str, completed_by: str, now=None) -> dict:
    """
    Mark a Scheduled reservation Complete once its end time has passed.

    Args:
        tx_id: Transaction ID
        return_notes: Notes on the returned item/space
        completed_by: Acting staff member
        now: Current time

    Returns:
        dict: The updated reservation

    Raises:
        NotFound, InvalidStateTransition (wrong status or end not reached)
    """
    completed_by = require_actor(completed_by)
    now = now or get_now()

    with write_transaction('complete the reservation') as cursor:
        reservation = _get_for_update(tx_id)
        validate_state_transition(reservation['status'], STATUS_COMPLETE)

        if not now > from_storage(reservation['end_time']):
            raise InvalidStateTransition(
                'A reservation can only be completed after its end time'
            )

        cursor.execute('''
            UPDATE reservations
            SET status = ?, return_notes = ?, completed_by = ?, last_update = ?
            WHERE tx_id = ?
        ''', (STATUS_COMPLETE, return_notes or '', completed_by, to_storage(now), tx_id))

        record_history(cursor, tx_id, STATUS_COMPLETE, 'completed', completed_by, return_notes or '', now)

    logger.info('Reservation %s completed by %s', tx_id, completed_by)
    return get_reservation_by_id(tx_id)


def get_cancellation_fee_preview(tx_id: str, now=None) -> dict:
    """
    Fee that cancelling now would record, for confirmation before cancelling.

    Returns:
        dict: {'tx_id', 'resource_type', 'fee', 'hours_until_start', 'can_cancel'}

    Raises:
        NotFound
    """
    reservation = _get_for_update(tx_id)
    now = now or get_now()
    start = from_storage(reservation['start_time'])

    return {
        'tx_id': tx_id,
        'resource_type': reservation['resource_type'],
        'fee': compute_cancellation_fee(reservation['resource_type'], start, now),
        'hours_until_start': round(hours_until(start, now), 2),
        'can_cancel': STATUS_CANCELLED in VALID_TRANSITIONS[reservation['status']],
    }
