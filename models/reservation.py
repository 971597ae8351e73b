"""
Reservation data access functions.
Handles reservation CRUD operations, state management, pricing and
availability checking.

This module re-exports all functions from the split modules:
- reservation_state.py: State transitions, write transactions and history
- reservation_crud.py: Create, update, delete operations
- reservation_queries.py: Lookups, active set and filtered listing
- reservation_availability.py: Proposal parsing and conflict detection
"""

# =============================================================================
# RE-EXPORTS
# =============================================================================

# State management
from .reservation_state import (
    VALID_TRANSITIONS,
    validate_state_transition,
    cancel_reservation,
    restore_reservation,
    complete_reservation,
    get_cancellation_fee_preview,
    get_status_history,
)

# CRUD operations
from .reservation_crud import (
    EDITABLE_FIELDS,
    create_reservation,
    update_reservation,
    delete_reservation,
)

# Queries
from .reservation_queries import (
    SORTABLE_FIELDS,
    get_reservation_by_id,
    get_active_reservations,
    get_reservations_filtered,
)

# Availability
from .reservation_availability import (
    intervals_overlap,
    parse_proposal,
    check_availability,
    validate_reservation,
)

# Pricing
from .pricing import (
    compute_cost,
    compute_cancellation_fee,
    format_price,
)
