"""
Centralized API messages.
All user-facing success and error text for the JSON API in one place.
"""

MESSAGES = {
    # Success messages
    'reservation_created': 'Reservation created for unit {rented_to}',
    'reservation_updated': 'Reservation updated',
    'reservation_deleted': 'Reservation deleted',
    'reservation_cancelled': 'Reservation cancelled',
    'reservation_cancelled_fee': 'Reservation cancelled with a {fee} cancellation fee',
    'reservation_restored': 'Reservation restored',
    'reservation_completed': 'Reservation marked complete',
    'item_created': 'Item {item} added',
    'item_updated': 'Item {item} updated',
    'staff_created': 'Staff member {name} added',
    'reservation_available': 'Reservation is available',

    # Error messages
    'json_required': 'A JSON request body is required',
    'invalid_month': 'Month must be in YYYY-MM format',
    'invalid_status': 'Unknown reservation status: {status}',
    'not_found': 'Resource not found',
    'method_not_allowed': 'Method not allowed',
    'internal_error': 'Internal server error',
    'store_unavailable': 'The reservation store is unavailable. Please try again.',
}


def get_message(key: str, **kwargs) -> str:
    """
    Get message with optional formatting.

    Args:
        key: Message key
        **kwargs: Format parameters

    Returns:
        Formatted message or key if not found
    """
    message = MESSAGES.get(key, key)
    if kwargs:
        return message.format(**kwargs)
    return message
