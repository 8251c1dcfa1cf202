"""
Reservation state management functions.
Handles the pending -> approved/rejected review and its history.
"""

import logging

from database import get_db, immediate_transaction
from utils.audit import log_audit
from .exceptions import InvalidTransitionError, ReservationNotFoundError
from .reservation_queries import get_reservation_by_id

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

RESERVATION_STATUSES = ('pending', 'approved', 'rejected')

# Allowed transitions: current status -> reachable statuses
STATUS_TRANSITIONS = {
    'pending': ('approved', 'rejected'),
    'approved': (),
    'rejected': (),
}


# =============================================================================
# STATE TRANSITIONS
# =============================================================================

def update_reservation_status(reservation_id: int, new_status: str,
                              changed_by: int = None, comments: str = '') -> dict:
    """
    Approve or reject a pending reservation.

    The UPDATE only matches while the row is still pending, so two reviewers
    acting at the same time cannot both decide the same reservation.

    Args:
        reservation_id: Reservation ID
        new_status: 'approved' or 'rejected'
        changed_by: Reviewing user ID
        comments: Reviewer comments stored in the history

    Returns:
        dict: The updated reservation

    Raises:
        InvalidTransitionError: Target is not approved/rejected, or the
            reservation is no longer pending
        ReservationNotFoundError: Unknown reservation
    """
    if new_status not in STATUS_TRANSITIONS['pending']:
        raise InvalidTransitionError(None, new_status)

    with immediate_transaction() as cursor:
        cursor.execute('SELECT status FROM reservations WHERE id = ?', (reservation_id,))
        row = cursor.fetchone()
        if not row:
            raise ReservationNotFoundError(reservation_id)

        old_status = row['status']
        if new_status not in STATUS_TRANSITIONS.get(old_status, ()):
            raise InvalidTransitionError(old_status, new_status)

        cursor.execute('''
            UPDATE reservations
            SET status = ?, updated_at = strftime('%Y-%m-%dT%H:%M:%S', 'now')
            WHERE id = ? AND status = 'pending'
        ''', (new_status, reservation_id))

        if cursor.rowcount == 0:
            raise InvalidTransitionError(old_status, new_status)

        cursor.execute('''
            INSERT INTO reservation_status_history
            (reservation_id, old_status, new_status, changed_by, comments)
            VALUES (?, ?, ?, ?, ?)
        ''', (reservation_id, old_status, new_status, changed_by, comments or ''))

    logger.info(f"Reservation {reservation_id}: {old_status} -> {new_status} by user {changed_by}")

    log_audit(
        action='UPDATE',
        entity_type='reservation',
        entity_id=reservation_id,
        before={'status': old_status},
        after={'status': new_status, 'comments': comments or ''},
        user_id=changed_by
    )

    return get_reservation_by_id(reservation_id)


# =============================================================================
# HISTORY
# =============================================================================

def get_status_history(reservation_id: int) -> list:
    """
    Get status change history for a reservation.

    Args:
        reservation_id: Reservation ID

    Returns:
        list: History entries, oldest first, with the actor's name
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT h.*, u.name as changed_by_name
        FROM reservation_status_history h
        LEFT JOIN users u ON h.changed_by = u.id
        WHERE h.reservation_id = ?
        ORDER BY h.id
    ''', (reservation_id,))
    return [dict(r) for r in cursor.fetchall()]
