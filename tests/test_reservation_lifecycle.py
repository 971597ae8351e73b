"""
Tests for the reservation lifecycle.
Create, update, delete and the cancel/restore/complete transitions.
"""

import pytest
from datetime import datetime

from helpers import STAFF, suite_data, lounge_data, gear_data


@pytest.fixture
def suite_tx(app):
    """A Scheduled Guest Suite reservation, Fri 2024-01-05 15:00 -> Sun 11:00."""
    from models.reservation import create_reservation
    return create_reservation(suite_data(), STAFF)


class TestCreateReservation:

    def test_create_guest_suite(self, app, suite_tx):
        from models.reservation import get_reservation_by_id

        reservation = get_reservation_by_id(suite_tx)
        assert reservation['status'] == 'Scheduled'
        assert reservation['total_cost'] == 350.0
        assert reservation['scheduled_by'] == STAFF
        assert reservation['start_time'] == '2024-01-05T23:00:00+00:00'
        assert reservation['end_time'] == '2024-01-07T19:00:00+00:00'
        assert reservation['items'] == []

    def test_create_gear_stores_items(self, app):
        from models.reservation import create_reservation, get_reservation_by_id

        tx_id = create_reservation(gear_data(['Kayak 1', 'Mountain Bike 2']), STAFF)

        reservation = get_reservation_by_id(tx_id)
        assert reservation['items'] == ['Kayak 1', 'Mountain Bike 2']
        assert reservation['item'] == 'Kayak 1, Mountain Bike 2'
        assert reservation['total_cost'] == 0.0

    def test_create_sky_lounge(self, app):
        from models.reservation import create_reservation, get_reservation_by_id

        tx_id = create_reservation(lounge_data(override_lock='true'), STAFF)

        reservation = get_reservation_by_id(tx_id)
        assert reservation['item'] == 'Sky Lounge'
        assert reservation['total_cost'] == 300.0
        assert reservation['override_lock'] is True
        assert reservation['end_time'] == '2024-01-06T00:00:00+00:00'

    def test_ids_unique(self, app):
        from models.reservation import create_reservation

        first = create_reservation(gear_data(['Kayak 1']), STAFF)
        second = create_reservation(gear_data(['Kayak 2']), STAFF)
        assert first != second

    def test_staff_required(self, app):
        from models.errors import ValidationFailed
        from models.reservation import create_reservation

        with pytest.raises(ValidationFailed) as exc:
            create_reservation(suite_data(), '  ')
        assert exc.value.messages == ['Please select a staff member first']

    def test_conflict_raises_and_saves_nothing(self, app, suite_tx):
        from models.errors import ValidationFailed
        from models.reservation import create_reservation, get_reservations_filtered

        with pytest.raises(ValidationFailed) as exc:
            create_reservation(suite_data(start='2024-01-06T15:00:00', end='2024-01-08T11:00:00'), STAFF)
        assert exc.value.messages == ['Guest Suite is already booked for these dates']
        assert get_reservations_filtered()['total'] == 1

    def test_history_records_creation(self, app, suite_tx):
        from models.reservation import get_status_history

        history = get_status_history(suite_tx)
        assert len(history) == 1
        assert history[0]['action'] == 'created'
        assert history[0]['changed_by'] == STAFF


class TestUpdateReservation:

    def test_extend_stay_reprices(self, app, suite_tx):
        from models.reservation import update_reservation

        reservation = update_reservation(suite_tx, {'end_time': '2024-01-08T11:00:00'}, 'Staff Member 2')

        assert reservation['total_cost'] == 175.0 + 175.0 + 125.0
        assert reservation['edit_by'] == 'Staff Member 2'
        assert reservation['last_update'] is not None

    def test_notes_only_keeps_cost(self, app, suite_tx):
        from database import get_db
        from models.reservation import update_reservation

        db = get_db()
        db.execute('UPDATE reservations SET total_cost = 999 WHERE tx_id = ?', (suite_tx,))
        db.commit()

        reservation = update_reservation(suite_tx, {'rental_notes': 'Late arrival'}, STAFF)
        assert reservation['rental_notes'] == 'Late arrival'
        assert reservation['total_cost'] == 999

    def test_update_validates_against_others(self, app, suite_tx):
        from models.errors import ValidationFailed
        from models.reservation import create_reservation, update_reservation

        other = create_reservation(suite_data(start='2024-01-10T15:00:00', end='2024-01-12T11:00:00'), STAFF)

        with pytest.raises(ValidationFailed):
            update_reservation(other, {'start_time': '2024-01-06T15:00:00'}, STAFF)

    def test_status_not_editable(self, app, suite_tx):
        from models.reservation import update_reservation

        reservation = update_reservation(suite_tx, {'status': 'Complete'}, STAFF)
        assert reservation['status'] == 'Scheduled'

    def test_switch_gear_items(self, app):
        from models.reservation import create_reservation, update_reservation

        tx_id = create_reservation(gear_data(['Kayak 1']), STAFF)
        reservation = update_reservation(tx_id, {'items': ['Kayak 2', 'Mountain Bike 1']}, STAFF)

        assert reservation['items'] == ['Kayak 2', 'Mountain Bike 1']
        assert reservation['item'] == 'Kayak 2, Mountain Bike 1'

    def test_not_found(self, app):
        from models.errors import NotFound
        from models.reservation import update_reservation

        with pytest.raises(NotFound):
            update_reservation('missing', {'rental_notes': 'x'}, STAFF)


class TestCancelRestore:

    def test_cancel_outside_window_free(self, app, suite_tx, tz):
        from models.reservation import cancel_reservation

        reservation = cancel_reservation(suite_tx, STAFF, now=datetime(2024, 1, 1, 12, tzinfo=tz))

        assert reservation['status'] == 'Cancelled'
        assert reservation['cancellation_fee'] is None
        assert reservation['edit_by'] == STAFF

    def test_cancel_inside_window_charges(self, app, suite_tx, tz):
        from models.reservation import cancel_reservation

        reservation = cancel_reservation(suite_tx, STAFF, now=datetime(2024, 1, 4, 12, tzinfo=tz))
        assert reservation['cancellation_fee'] == 75.0

    def test_cancel_with_confirmed_fee(self, app, suite_tx):
        from models.reservation import cancel_reservation

        assert cancel_reservation(suite_tx, STAFF, fee=40)['cancellation_fee'] == 40.0

    def test_cancel_twice_rejected(self, app, suite_tx):
        from models.errors import InvalidStateTransition
        from models.reservation import cancel_reservation

        cancel_reservation(suite_tx, STAFF)
        with pytest.raises(InvalidStateTransition):
            cancel_reservation(suite_tx, STAFF)

    def test_round_trip(self, app, suite_tx, tz):
        from models.reservation import cancel_reservation, restore_reservation, get_reservation_by_id

        before = get_reservation_by_id(suite_tx)
        cancel_reservation(suite_tx, STAFF, now=datetime(2024, 1, 4, 12, tzinfo=tz))
        restored = restore_reservation(suite_tx, 'Staff Member 2')

        assert restored['status'] == 'Scheduled'
        assert restored['cancellation_fee'] is None
        for field in ('start_time', 'end_time', 'item', 'total_cost', 'rented_to'):
            assert restored[field] == before[field]

    def test_restore_blocked_when_slot_taken(self, app, suite_tx):
        from models.errors import ValidationFailed
        from models.reservation import cancel_reservation, create_reservation, restore_reservation

        cancel_reservation(suite_tx, STAFF)
        create_reservation(suite_data(rented_to='1510'), STAFF)

        with pytest.raises(ValidationFailed) as exc:
            restore_reservation(suite_tx, STAFF)
        assert 'Guest Suite is already booked for these dates' in exc.value.messages

    def test_restore_requires_cancelled(self, app, suite_tx):
        from models.errors import InvalidStateTransition
        from models.reservation import restore_reservation

        with pytest.raises(InvalidStateTransition):
            restore_reservation(suite_tx, STAFF)

    def test_fee_preview(self, app, suite_tx, tz):
        from models.reservation import get_cancellation_fee_preview

        preview = get_cancellation_fee_preview(suite_tx, now=datetime(2024, 1, 4, 12, tzinfo=tz))
        assert preview['fee'] == 75.0
        assert preview['can_cancel'] is True
        assert preview['hours_until_start'] == 27.0


class TestComplete:

    def test_complete_before_end_rejected(self, app, suite_tx, tz):
        from models.errors import InvalidStateTransition
        from models.reservation import complete_reservation

        with pytest.raises(InvalidStateTransition):
            complete_reservation(suite_tx, '', STAFF, now=datetime(2024, 1, 7, 10, tzinfo=tz))

    def test_complete_after_end(self, app, suite_tx, tz):
        from models.reservation import complete_reservation

        reservation = complete_reservation(
            suite_tx, 'Keys returned', 'Staff Member 2', now=datetime(2024, 1, 7, 12, tzinfo=tz)
        )
        assert reservation['status'] == 'Complete'
        assert reservation['return_notes'] == 'Keys returned'
        assert reservation['completed_by'] == 'Staff Member 2'

    def test_complete_cancelled_rejected(self, app, suite_tx):
        from models.errors import InvalidStateTransition
        from models.reservation import cancel_reservation, complete_reservation

        cancel_reservation(suite_tx, STAFF)
        with pytest.raises(InvalidStateTransition):
            complete_reservation(suite_tx, '', STAFF)

    def test_complete_is_terminal(self, app, suite_tx):
        from models.errors import InvalidStateTransition
        from models.reservation import complete_reservation, cancel_reservation

        complete_reservation(suite_tx, '', STAFF)
        with pytest.raises(InvalidStateTransition):
            cancel_reservation(suite_tx, STAFF)

    def test_completed_reservation_frees_slot(self, app, suite_tx):
        from models.reservation import complete_reservation, validate_reservation

        complete_reservation(suite_tx, '', STAFF)
        assert validate_reservation(suite_data()) == []


class TestDeleteAndHistory:

    def test_delete(self, app, suite_tx):
        from models.reservation import delete_reservation, get_reservation_by_id, get_status_history

        delete_reservation(suite_tx)

        assert get_reservation_by_id(suite_tx) is None
        assert get_status_history(suite_tx) == []

    def test_delete_missing(self, app):
        from models.errors import NotFound
        from models.reservation import delete_reservation

        with pytest.raises(NotFound):
            delete_reservation('missing')

    def test_history_newest_first(self, app, suite_tx):
        from models.reservation import cancel_reservation, restore_reservation, get_status_history

        cancel_reservation(suite_tx, STAFF)
        restore_reservation(suite_tx, STAFF)

        actions = [entry['action'] for entry in get_status_history(suite_tx)]
        assert actions == ['restored', 'cancelled', 'created']


class TestValidTransitions:

    @pytest.mark.parametrize('current, new', [
        ('Scheduled', 'Cancelled'),
        ('Scheduled', 'Complete'),
        ('Cancelled', 'Scheduled'),
    ])
    def test_allowed(self, current, new):
        from models.reservation import validate_state_transition
        validate_state_transition(current, new)

    @pytest.mark.parametrize('current, new', [
        ('Complete', 'Scheduled'),
        ('Complete', 'Cancelled'),
        ('Cancelled', 'Complete'),
        ('Scheduled', 'Scheduled'),
    ])
    def test_rejected(self, current, new):
        from models.errors import InvalidStateTransition
        from models.reservation import validate_state_transition

        with pytest.raises(InvalidStateTransition):
            validate_state_transition(current, new)


class TestDaylightSavingLifecycle:

    def test_restore_accepts_what_create_accepted(self, app):
        from models.reservation import create_reservation, cancel_reservation, restore_reservation

        tx_id = create_reservation(suite_data(start='2024-03-09T14:00:00', end='2024-03-11T14:00:00'), STAFF)
        cancel_reservation(tx_id, STAFF)

        assert restore_reservation(tx_id, STAFF)['status'] == 'Scheduled'

    def test_local_input_priced_and_stored_as_instants(self, app):
        from models.reservation import create_reservation, get_reservation_by_id, validate_reservation

        tx_id = create_reservation(suite_data(start='2024-11-02T14:00:00', end='2024-11-04T14:00:00'), STAFF)

        reservation = get_reservation_by_id(tx_id)
        assert reservation['total_cost'] == 425.0
        assert reservation['start_time'] == '2024-11-02T21:00:00+00:00'
        assert reservation['end_time'] == '2024-11-04T22:00:00+00:00'
        assert validate_reservation(
            suite_data(start='2024-11-02T21:00:00Z', end='2024-11-04T22:00:00Z')
        ) == ['Guest Suite is already booked for these dates']
