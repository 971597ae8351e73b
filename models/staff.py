"""
Staff data access functions.
Staff members are the actors recorded on reservations (scheduled_by, edit_by,
completed_by). Callers are already identified; this is a name directory only.
"""

import sqlite3

from database import get_db
from .errors import ValidationFailed


def get_all_staff(active_only: bool = True) -> list:
    """
    Get staff members ordered by name.

    Args:
        active_only: If True, only return active staff

    Returns:
        List of staff dicts
    """
    db = get_db()
    cursor = db.cursor()
    query = 'SELECT * FROM staff'
    if active_only:
        query += ' WHERE active = 1'
    query += ' ORDER BY name'
    cursor.execute(query)
    return [dict(row) for row in cursor.fetchall()]


def create_staff(name: str) -> int:
    """
    Add a staff member.

    Returns:
        New staff ID

    Raises:
        ValidationFailed: If the name is empty or already exists
    """
    name = str(name or '').strip()
    if not name:
        raise ValidationFailed(['Staff name is required'])

    db = get_db()
    try:
        cursor = db.execute('INSERT INTO staff (name) VALUES (?)', (name,))
        db.commit()
    except sqlite3.IntegrityError:
        db.rollback()
        raise ValidationFailed([f'Staff member {name} already exists'])
    return cursor.lastrowid


def require_actor(name: str) -> str:
    """
    Validate the acting staff member's name.

    Returns:
        The stripped name

    Raises:
        ValidationFailed: If no staff member was given
    """
    name = str(name or '').strip()
    if not name:
        raise ValidationFailed(['Please select a staff member first'])
    return name
