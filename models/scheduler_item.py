"""
Scheduler item (catalog) data access functions.
Handles bookable item creation, update and listing. Items are never deleted;
they are taken out of service instead.
"""

import logging
import sqlite3
from datetime import datetime, timezone

from database import get_db, begin_immediate
from .errors import NotFound, StoreUnavailable, ValidationFailed
from .scheduler_types import (
    GEAR_SHED, IN_SERVICE, normalize_resource_type, normalize_service_status
)

logger = logging.getLogger(__name__)


def get_items(resource_type: str = None, only_in_service: bool = False) -> list:
    """
    Get catalog items.

    Args:
        resource_type: Filter by resource type (optional, case-insensitive)
        only_in_service: If True, only return items currently in service

    Returns:
        List of item dicts ordered by resource type and name
    """
    db = get_db()
    cursor = db.cursor()

    query = 'SELECT * FROM scheduler_items WHERE 1=1'
    params = []

    if resource_type:
        query += ' AND resource_type = ?'
        params.append(normalize_resource_type(resource_type))

    if only_in_service:
        query += ' AND service_status = ?'
        params.append(IN_SERVICE)

    query += ' ORDER BY resource_type, item'

    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]


def get_item_by_id(item_id: str) -> dict:
    """
    Get item by its readable ID.

    Args:
        item_id: Item ID (e.g. 'kayak-1')

    Returns:
        Item dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM scheduler_items WHERE item_id = ?', (item_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_items_by_name(resource_type: str) -> dict:
    """Map display name -> item dict for one resource type."""
    return {item['item']: item for item in get_items(resource_type)}


def create_item(
    item_id: str,
    item: str,
    resource_type: str,
    description: str = None,
    service_status: str = IN_SERVICE,
    service_notes: str = None
) -> dict:
    """
    Create a new catalog item.

    Args:
        item_id: Readable unique ID (e.g. 'kayak-3')
        item: Display name, unique within the resource type
        resource_type: Resource type (case-insensitive)
        description: Optional description
        service_status: 'In Service' or 'Not In Service'
        service_notes: Optional notes about service status

    Returns:
        dict: The created item

    Raises:
        ValidationFailed: If fields are missing/invalid or the item already exists
    """
    errors = []
    item_id = str(item_id or '').strip()
    item = str(item or '').strip()
    canonical_type = normalize_resource_type(resource_type)
    canonical_status = normalize_service_status(service_status)

    if not item_id:
        errors.append('Item ID is required')
    if not item:
        errors.append('Item name is required')
    if not canonical_type:
        errors.append(f'Unknown resource type: {resource_type}')
    if not canonical_status:
        errors.append(f'Unknown service status: {service_status}')
    if errors:
        raise ValidationFailed(errors)

    db = get_db()
    try:
        db.execute('''
            INSERT INTO scheduler_items
            (item_id, item, resource_type, description, service_status, service_notes, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        ''', (item_id, item, canonical_type, description, canonical_status, service_notes,
              datetime.now(timezone.utc).isoformat(timespec='seconds')))
        db.commit()
    except sqlite3.IntegrityError:
        db.rollback()
        raise ValidationFailed([f'Item {item_id} ({item}) already exists'])

    logger.info('Catalog item created: %s (%s, %s)', item_id, item, canonical_type)
    return get_item_by_id(item_id)


def update_item(item_id: str, **kwargs) -> dict:
    """
    Update item fields.

    A rename is carried over to every reservation holding the item, in the
    same transaction, so existing bookings keep blocking the renamed item.

    Args:
        item_id: Item ID to update
        **kwargs: Fields to update (item, description, service_status, service_notes)

    Returns:
        dict: The updated item

    Raises:
        NotFound: If the item does not exist
        ValidationFailed: If a field value is invalid
        StoreUnavailable: If the database write fails
    """
    existing = get_item_by_id(item_id)
    if not existing:
        raise NotFound(f'Item {item_id} not found')

    allowed_fields = ['item', 'description', 'service_status', 'service_notes']

    updates = []
    values = []

    for field in allowed_fields:
        if field not in kwargs:
            continue
        value = kwargs[field]
        if field == 'service_status':
            value = normalize_service_status(value)
            if not value:
                raise ValidationFailed([f"Unknown service status: {kwargs[field]}"])
        if field == 'item':
            value = str(value or '').strip()
            if not value:
                raise ValidationFailed(['Item name is required'])
        updates.append(f'{field} = ?')
        values.append(value)

    if not updates:
        return existing

    values.append(item_id)
    old_name = existing['item']
    new_name = values[updates.index('item = ?')] if 'item = ?' in updates else old_name

    db = get_db()
    try:
        begin_immediate(db)
        db.execute(f'UPDATE scheduler_items SET {", ".join(updates)} WHERE item_id = ?', values)
        if new_name != old_name:
            renamed = _rename_in_reservations(db, existing['resource_type'], old_name, new_name)
            logger.info('Item %s renamed %s -> %s on %d reservation(s)',
                        item_id, old_name, new_name, renamed)
        db.commit()
    except sqlite3.IntegrityError:
        db.rollback()
        raise ValidationFailed([f"An item named {kwargs.get('item')} already exists"])
    except sqlite3.Error as e:
        db.rollback()
        logger.error('Store failure updating item %s: %s', item_id, e, exc_info=True)
        raise StoreUnavailable('Could not update the item. Please try again.') from e

    logger.info('Catalog item updated: %s (%s)', item_id, ', '.join(kwargs))
    return get_item_by_id(item_id)


def _rename_in_reservations(db, resource_type: str, old_name: str, new_name: str) -> int:
    """
    Replace an item name on the reservations that hold it.

    Gear Shed reservations keep names in reservation_items; their display
    item is rebuilt from the ordered list.

    Returns:
        int: Number of reservations changed
    """
    if resource_type != GEAR_SHED:
        cursor = db.execute(
            'UPDATE reservations SET item = ? WHERE resource_type = ? AND item = ?',
            (new_name, resource_type, old_name)
        )
        return cursor.rowcount

    tx_ids = [row['tx_id'] for row in db.execute('''
        SELECT ri.tx_id FROM reservation_items ri
        JOIN reservations r ON r.tx_id = ri.tx_id
        WHERE r.resource_type = ? AND ri.item_name = ?
    ''', (GEAR_SHED, old_name)).fetchall()]

    for tx_id in tx_ids:
        db.execute(
            'UPDATE reservation_items SET item_name = ? WHERE tx_id = ? AND item_name = ?',
            (new_name, tx_id, old_name)
        )
        names = [row['item_name'] for row in db.execute(
            'SELECT item_name FROM reservation_items WHERE tx_id = ? ORDER BY position',
            (tx_id,)
        ).fetchall()]
        db.execute('UPDATE reservations SET item = ? WHERE tx_id = ?', (', '.join(names), tx_id))

    return len(tx_ids)
