"""
Reservation query functions.
Handles lookups, active-set listing and filtered list/calendar views.
"""

from datetime import datetime, timedelta

from database import get_db
from utils.datetime_helpers import to_storage
from .policy import get_policy
from .scheduler_types import STATUS_SCHEDULED, normalize_resource_type


SORTABLE_FIELDS = (
    'start_time', 'end_time', 'rented_to', 'item', 'status',
    'resource_type', 'total_cost', 'scheduled_by', 'created_at'
)


# =============================================================================
# ROW MAPPING
# =============================================================================

def _load_items(cursor, tx_ids: list) -> dict:
    """Get ordered item names for each reservation: {tx_id: [name, ...]}."""
    items = {tx_id: [] for tx_id in tx_ids}
    if not tx_ids:
        return items

    placeholders = ','.join('?' * len(tx_ids))
    cursor.execute(f'''
        SELECT tx_id, item_name FROM reservation_items
        WHERE tx_id IN ({placeholders})
        ORDER BY tx_id, position
    ''', list(tx_ids))
    for row in cursor.fetchall():
        items[row['tx_id']].append(row['item_name'])
    return items


def _rows_to_reservations(cursor, rows) -> list:
    reservations = [dict(row) for row in rows]
    items = _load_items(cursor, [r['tx_id'] for r in reservations])
    for reservation in reservations:
        reservation['items'] = items[reservation['tx_id']]
        reservation['override_lock'] = bool(reservation['override_lock'])
    return reservations


# =============================================================================
# LOOKUPS
# =============================================================================

def get_reservation_by_id(tx_id: str) -> dict:
    """
    Get reservation by transaction ID.

    Args:
        tx_id: Transaction ID

    Returns:
        dict: Reservation with 'items' list, or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM reservations WHERE tx_id = ?', (tx_id,))
    row = cursor.fetchone()
    if not row:
        return None
    return _rows_to_reservations(cursor, [row])[0]


def get_active_reservations(resource_type: str, exclude_tx_id: str = None) -> list:
    """
    Get Scheduled reservations of one resource type (the active set).

    Args:
        resource_type: Resource type (case-insensitive)
        exclude_tx_id: Reservation to leave out (the one being edited)

    Returns:
        list: Reservations ordered by start time
    """
    db = get_db()
    cursor = db.cursor()

    query = '''
        SELECT * FROM reservations
        WHERE status = ? AND resource_type = ?
    '''
    params = [STATUS_SCHEDULED, normalize_resource_type(resource_type)]

    if exclude_tx_id:
        query += ' AND tx_id != ?'
        params.append(exclude_tx_id)

    query += ' ORDER BY start_time'

    cursor.execute(query, params)
    return _rows_to_reservations(cursor, cursor.fetchall())


# =============================================================================
# LIST VIEW
# =============================================================================

def month_bounds(month: str, tz) -> tuple:
    """
    First and last instant of a calendar month in the given timezone.

    Args:
        month: 'YYYY-MM'
        tz: ZoneInfo

    Returns:
        tuple: (start, end) aware datetimes; end is 23:59:59 on the last day

    Raises:
        ValueError: If month is not 'YYYY-MM'
    """
    first = datetime.strptime(month, '%Y-%m')
    if first.month == 12:
        next_month = first.replace(year=first.year + 1, month=1)
    else:
        next_month = first.replace(month=first.month + 1)
    return first.replace(tzinfo=tz), next_month.replace(tzinfo=tz) - timedelta(seconds=1)


def get_reservations_filtered(
    month: str = None,
    status: str = None,
    resource_type: str = None,
    search: str = None,
    sort: str = 'start_time',
    direction: str = 'desc',
    page: int = 1,
    per_page: int = 100
) -> dict:
    """
    Get filtered reservations with pagination (for list and calendar views).

    Args:
        month: 'YYYY-MM'; keeps reservations overlapping that local month
        status: Status filter ('Scheduled', 'Complete', 'Cancelled')
        resource_type: Resource type filter
        search: Search term (unit, item, staff, rental/return notes)
        sort: Sort field (see SORTABLE_FIELDS)
        direction: 'asc' or 'desc'
        page: Page number
        per_page: Items per page

    Returns:
        dict: {items: list, total: int, page: int, per_page: int, pages: int}

    Raises:
        ValueError: If month is malformed
    """
    db = get_db()
    cursor = db.cursor()

    where = ' WHERE 1=1'
    params = []

    if month:
        start, end = month_bounds(month, get_policy().tz)
        where += ' AND start_time <= ? AND end_time > ?'
        params.extend([to_storage(end), to_storage(start)])

    if status:
        where += ' AND status = ?'
        params.append(status)

    if resource_type:
        where += ' AND resource_type = ?'
        params.append(normalize_resource_type(resource_type))

    if search:
        where += ''' AND (
            rented_to LIKE ? OR item LIKE ? OR scheduled_by LIKE ? OR
            rental_notes LIKE ? OR return_notes LIKE ?
        )'''
        search_param = f'%{search}%'
        params.extend([search_param] * 5)

    cursor.execute('SELECT COUNT(*) as total FROM reservations' + where, params)
    total = cursor.fetchone()['total']

    if sort not in SORTABLE_FIELDS:
        sort = 'start_time'
    order = 'ASC' if (direction or '').lower() == 'asc' else 'DESC'

    query = 'SELECT * FROM reservations' + where
    query += f' ORDER BY {sort} {order}, created_at DESC'
    query += ' LIMIT ? OFFSET ?'

    cursor.execute(query, params + [per_page, (page - 1) * per_page])
    items = _rows_to_reservations(cursor, cursor.fetchall())

    return {
        'items': items,
        'total': total,
        'page': page,
        'per_page': per_page,
        'pages': (total + per_page - 1) // per_page
    }
