"""
Reservation API endpoints.
Listing, availability preview, create/update/delete and state transitions.
"""

from flask import request

from models.errors import NotFound
from models.policy import get_policy
from models.pricing import compute_cost, format_price
from models.reservation import (
    create_reservation,
    update_reservation,
    delete_reservation,
    cancel_reservation,
    restore_reservation,
    complete_reservation,
    get_cancellation_fee_preview,
    get_status_history,
    get_reservation_by_id,
    get_active_reservations,
    get_reservations_filtered,
    parse_proposal,
    check_availability,
)
from models.scheduler_types import RESERVATION_STATUSES, RESOURCE_TYPES
from utils.api_response import api_success, api_error
from utils.messages import get_message

MAX_PER_PAGE = 500


def _get_json() -> dict:
    return request.get_json(silent=True) or {}


def _require_reservation(tx_id: str) -> dict:
    reservation = get_reservation_by_id(tx_id)
    if not reservation:
        raise NotFound(f'Reservation {tx_id} not found')
    return reservation


def register_routes(bp):
    """Register reservation routes on the blueprint."""

    # =========================================================================
    # LISTING
    # =========================================================================

    @bp.route('/reservations', methods=['GET'])
    def list_reservations():
        """
        List reservations for the list and calendar views.

        Query params:
            month: YYYY-MM, reservations overlapping that month (optional)
            status: Scheduled | Complete | Cancelled (optional)
            resource_type: Resource type (optional)
            search: Free text over unit, item, staff and notes (optional)
            sort: Sort field (default start_time)
            direction: asc | desc (default desc)
            page, per_page: Pagination
        """
        status = request.args.get('status') or None
        if status and status not in RESERVATION_STATUSES:
            return api_error(get_message('invalid_status', status=status), 400)

        page = max(request.args.get('page', 1, type=int), 1)
        per_page = min(max(request.args.get('per_page', 100, type=int), 1), MAX_PER_PAGE)

        try:
            result = get_reservations_filtered(
                month=request.args.get('month') or None,
                status=status,
                resource_type=request.args.get('resource_type') or None,
                search=request.args.get('search') or None,
                sort=request.args.get('sort', 'start_time'),
                direction=request.args.get('direction', 'desc'),
                page=page,
                per_page=per_page
            )
        except ValueError:
            return api_error(get_message('invalid_month'), 400)

        return api_success(data=result)

    @bp.route('/reservations/active', methods=['GET'])
    def list_active_reservations():
        """
        Scheduled reservations per resource type.

        Query params:
            resource_type: Resource type (optional, all types when omitted)
        """
        resource_type = request.args.get('resource_type')
        types = [resource_type] if resource_type else list(RESOURCE_TYPES)

        reservations = []
        for rtype in types:
            reservations.extend(get_active_reservations(rtype))
        reservations.sort(key=lambda r: r['start_time'])
        return api_success(data=reservations, count=len(reservations))

    # =========================================================================
    # AVAILABILITY PREVIEW
    # =========================================================================

    @bp.route('/reservations/validate', methods=['POST'])
    def validate():
        """
        Check a proposed reservation without saving it.

        Request JSON: same fields as create, plus optional "tx_id" of the
        reservation being edited.

        Response data: {"valid": bool, "errors": [...], "price": {...} | null}
        """
        data = _get_json()
        policy = get_policy()

        proposal, errors = parse_proposal(data, policy)
        errors.extend(check_availability(proposal, exclude_tx_id=data.get('tx_id'), policy=policy))

        price = None
        if not errors:
            price = compute_cost(
                proposal['resource_type'], proposal['start_time'], proposal['end_time'], policy
            )

        return api_success(data={'valid': not errors, 'errors': errors, 'price': price})

    # =========================================================================
    # CRUD
    # =========================================================================

    @bp.route('/reservations', methods=['POST'])
    def create():
        """
        Create a reservation.

        Request JSON:
        {
            "staff": "Staff Member 1",
            "rented_to": "1204",
            "resource_type": "GUEST_SUITE",
            "item": "Guest Suite",
            "items": ["Kayak 1"],          (Gear Shed)
            "start_time": "2024-01-05T15:00:00",
            "end_time": "2024-01-07T11:00:00",
            "rental_notes": "",
            "override_lock": false           (Sky Lounge)
        }
        """
        data = _get_json()
        tx_id = create_reservation(data, data.get('staff'))
        reservation = get_reservation_by_id(tx_id)
        return api_success(
            data=reservation,
            message=get_message('reservation_created', rented_to=reservation['rented_to']),
            status=201
        )

    @bp.route('/reservations/<tx_id>', methods=['GET'])
    def detail(tx_id):
        """Get a single reservation."""
        return api_success(data=_require_reservation(tx_id))

    @bp.route('/reservations/<tx_id>', methods=['PATCH'])
    def edit(tx_id):
        """Update reservation fields. Request JSON: changed fields plus "staff"."""
        data = _get_json()
        changes = {k: v for k, v in data.items() if k != 'staff'}
        reservation = update_reservation(tx_id, changes, data.get('staff'))
        return api_success(data=reservation, message=get_message('reservation_updated'))

    @bp.route('/reservations/<tx_id>', methods=['DELETE'])
    def delete(tx_id):
        """Permanently delete a reservation."""
        delete_reservation(tx_id)
        return api_success(data={'tx_id': tx_id}, message=get_message('reservation_deleted'))

    # =========================================================================
    # STATE TRANSITIONS
    # =========================================================================

    @bp.route('/reservations/<tx_id>/cancellation-fee', methods=['GET'])
    def cancellation_fee(tx_id):
        """Fee that cancelling right now would record."""
        preview = get_cancellation_fee_preview(tx_id)
        preview['fee_display'] = format_price(preview['fee'])
        return api_success(data=preview)

    @bp.route('/reservations/<tx_id>/cancel', methods=['POST'])
    def cancel(tx_id):
        """
        Cancel a reservation.

        Request JSON: {"staff": "...", "fee": 75.0}  (fee optional, computed when omitted)
        """
        data = _get_json()
        reservation = cancel_reservation(tx_id, data.get('staff'), fee=data.get('fee'))

        fee = reservation.get('cancellation_fee')
        if fee:
            message = get_message('reservation_cancelled_fee', fee=format_price(fee))
        else:
            message = get_message('reservation_cancelled')
        return api_success(data=reservation, message=message)

    @bp.route('/reservations/<tx_id>/restore', methods=['POST'])
    def restore(tx_id):
        """Restore a cancelled reservation. Request JSON: {"staff": "..."}"""
        data = _get_json()
        reservation = restore_reservation(tx_id, data.get('staff'))
        return api_success(data=reservation, message=get_message('reservation_restored'))

    @bp.route('/reservations/<tx_id>/complete', methods=['POST'])
    def complete(tx_id):
        """Mark a reservation complete. Request JSON: {"staff": "...", "return_notes": "..."}"""
        data = _get_json()
        reservation = complete_reservation(tx_id, data.get('return_notes', ''), data.get('staff'))
        return api_success(data=reservation, message=get_message('reservation_completed'))

    @bp.route('/reservations/<tx_id>/history', methods=['GET'])
    def history(tx_id):
        """Status change history, newest first."""
        _require_reservation(tx_id)
        entries = get_status_history(tx_id)
        return api_success(data=entries, count=len(entries))
