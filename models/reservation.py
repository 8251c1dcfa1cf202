"""
Reservation data access functions.
Handles reservation creation, availability checking, review, and packages.

This module re-exports the functions of the split modules:
- reservation_queries.py: Reads, listing, overlap counts, statistics
- reservation_availability.py: Availability of one resource or the catalogue
- reservation_crud.py: Create and delete
- reservation_state.py: Review (pending -> approved/rejected) and history
- package_reservation.py: All-or-nothing package bookings
"""

# =============================================================================
# RE-EXPORTS
# =============================================================================

# Queries
from .reservation_queries import (
    ACTIVE_STATUSES,
    get_reservation_by_id,
    get_reservations_by_booking_ref,
    get_reservations,
    count_overlapping,
    count_user_concurrent_bookings,
    get_reservation_stats,
)

# Availability
from .reservation_availability import (
    check_availability,
    get_availability_map,
)

# CRUD operations
from .reservation_crud import (
    VALID_PRIORITIES,
    normalize_window,
    check_booking_policy,
    insert_reservation,
    book_reservation,
    create_reservation,
    delete_reservation,
)

# State management
from .reservation_state import (
    RESERVATION_STATUSES,
    STATUS_TRANSITIONS,
    update_reservation_status,
    get_status_history,
)

# Packages
from .package_reservation import create_package_reservation
