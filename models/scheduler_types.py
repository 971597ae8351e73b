"""
Scheduler constants and value normalization.
Resource types, reservation statuses and service statuses.
"""

# =============================================================================
# CONSTANTS
# =============================================================================

GUEST_SUITE = 'GUEST_SUITE'
SKY_LOUNGE = 'SKY_LOUNGE'
GEAR_SHED = 'GEAR_SHED'

RESOURCE_TYPES = (GUEST_SUITE, SKY_LOUNGE, GEAR_SHED)

RESOURCE_TYPE_LABELS = {
    GUEST_SUITE: 'Guest Suite',
    SKY_LOUNGE: 'Sky Lounge',
    GEAR_SHED: 'Gear Shed',
}

STATUS_SCHEDULED = 'Scheduled'
STATUS_COMPLETE = 'Complete'
STATUS_CANCELLED = 'Cancelled'

RESERVATION_STATUSES = (STATUS_SCHEDULED, STATUS_COMPLETE, STATUS_CANCELLED)

IN_SERVICE = 'In Service'
NOT_IN_SERVICE = 'Not In Service'

SERVICE_STATUSES = (IN_SERVICE, NOT_IN_SERVICE)


# =============================================================================
# NORMALIZATION
# =============================================================================

def normalize_resource_type(value) -> str | None:
    """
    Normalize a resource type, case-insensitively.

    Accepts 'guest_suite', 'Guest Suite', 'GUEST-SUITE' and the canonical form.

    Returns:
        Canonical resource type, or None if unknown
    """
    if not value:
        return None
    key = str(value).strip().upper().replace(' ', '_').replace('-', '_')
    return key if key in RESOURCE_TYPES else None


def normalize_service_status(value) -> str | None:
    """
    Normalize a service status ('in_service', 'IN SERVICE', 'Not In Service'...).

    Returns:
        Canonical service status, or None if unknown
    """
    if not value:
        return None
    key = str(value).strip().lower().replace('_', ' ').replace('-', ' ')
    for status in SERVICE_STATUSES:
        if status.lower() == key:
            return status
    return None


def resource_label(resource_type: str) -> str:
    """Human-readable label for a resource type."""
    return RESOURCE_TYPE_LABELS.get(resource_type, resource_type or '')
