"""
Reservation CRUD operations.
Handles single-resource creation with conflict checking, raw inserts,
and deletion.
"""

import logging
from datetime import timedelta

from database import get_db, immediate_transaction
from .config import get_config_int
from .exceptions import (
    BookingError, BookingPolicyError, ConflictError, InvalidWindowError
)
from .reservation_availability import check_availability
from .reservation_queries import count_user_concurrent_bookings, get_reservation_by_id
from utils.audit import log_audit
from utils.datetime_helpers import parse_timestamp, utc_now, STORAGE_FORMAT
from utils.messages import MESSAGES

logger = logging.getLogger(__name__)

VALID_PRIORITIES = ('low', 'normal', 'high', 'urgent')


# =============================================================================
# VALIDATION
# =============================================================================

def normalize_window(start_date, end_date) -> tuple:
    """
    Parse a window into stored text form.

    Args:
        start_date: Window start (ISO string or datetime)
        end_date: Window end (ISO string or datetime)

    Returns:
        tuple: (start, end) as 'YYYY-MM-DDTHH:MM:SS' UTC strings

    Raises:
        InvalidWindowError: Unparseable value or start >= end
    """
    try:
        start = parse_timestamp(start_date)
        end = parse_timestamp(end_date)
    except (ValueError, TypeError):
        bad = end_date
        try:
            parse_timestamp(start_date)
        except (ValueError, TypeError):
            bad = start_date
        raise InvalidWindowError(
            start_date, end_date, MESSAGES['invalid_timestamp'].format(value=bad)
        )

    if start >= end:
        raise InvalidWindowError(start_date, end_date)

    return start.strftime(STORAGE_FORMAT), end.strftime(STORAGE_FORMAT)


def check_booking_policy(user_id: int, start_date, end_date,
                         exclude_booking_ref: str = None) -> None:
    """
    Enforce the booking settings for one new booking.

    - max_reservation_days: the window may not start more than N days ahead
    - max_concurrent_reservations: the user may not hold more than N active
      bookings overlapping the window (a package booking counts once)

    A setting of 0 disables its rule.

    Args:
        user_id: Requesting user
        start_date: Window start
        end_date: Window end
        exclude_booking_ref: Package booking being created (its rows do not count)

    Raises:
        BookingPolicyError: If a rule is violated
    """
    max_days = get_config_int('max_reservation_days', 30)
    if max_days > 0:
        start = parse_timestamp(start_date)
        days_ahead = (start - utc_now()).days
        if start > utc_now() + timedelta(days=max_days):
            raise BookingPolicyError(
                'max_reservation_days', max_days, days_ahead,
                MESSAGES['max_advance_exceeded'].format(limit=max_days)
            )

    max_concurrent = get_config_int('max_concurrent_reservations', 5)
    if max_concurrent > 0:
        current = count_user_concurrent_bookings(
            user_id, start_date, end_date, exclude_booking_ref=exclude_booking_ref
        )
        if current >= max_concurrent:
            raise BookingPolicyError(
                'max_concurrent_reservations', max_concurrent, current,
                MESSAGES['max_concurrent_exceeded'].format(limit=max_concurrent)
            )


# =============================================================================
# CREATE
# =============================================================================

def insert_reservation(row: dict, cursor=None) -> int:
    """
    Insert a reservation row as given, without any checks.

    Args:
        row: Column values (user_id, resource_id, start_date, end_date and
             purpose are required)
        cursor: Active transaction cursor (commits itself when omitted)

    Returns:
        int: New reservation ID
    """
    db = get_db()
    cur = cursor or db.cursor()

    cur.execute('''
        INSERT INTO reservations (
            user_id, resource_id, start_date, end_date, purpose, description,
            status, priority, attendees, requirements, package_id, booking_ref
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
    ''', (
        row['user_id'], row['resource_id'], row['start_date'], row['end_date'],
        row['purpose'], row.get('description'),
        row.get('status', 'pending'), row.get('priority', 'normal'),
        row.get('attendees'), row.get('requirements'),
        row.get('package_id'), row.get('booking_ref')
    ))

    if cursor is None:
        db.commit()
    return cur.lastrowid


def book_reservation(
    cursor,
    user_id: int,
    resource_id: int,
    start_date,
    end_date,
    purpose: str,
    priority: str = 'normal',
    attendees: int = None,
    requirements: str = None,
    description: str = None,
    package_id: int = None,
    booking_ref: str = None,
    check_policy: bool = True
) -> int:
    """
    Check and insert one pending reservation inside an open write transaction.

    The caller owns the transaction: nothing is committed here, and an
    exception leaves the rollback to the caller.

    Args:
        cursor: Cursor of an open BEGIN IMMEDIATE transaction
        check_policy: Enforce the booking settings (package bookings check
            them once for the whole package)
        (remaining args as create_reservation)

    Returns:
        int: New reservation ID

    Raises:
        InvalidWindowError, BookingPolicyError, ResourceNotFoundError,
        ConflictError: As create_reservation
    """
    start, end = normalize_window(start_date, end_date)

    if priority not in VALID_PRIORITIES:
        raise BookingError(MESSAGES['invalid_value'], {'field': 'priority', 'value': priority})

    if not (purpose or '').strip():
        raise BookingError(MESSAGES['field_required'], {'field': 'purpose'})

    # Raises ResourceNotFoundError before any policy decision
    availability = check_availability(resource_id, start, end)

    if check_policy:
        check_booking_policy(user_id, start, end, exclude_booking_ref=booking_ref)

    if availability['has_conflict']:
        logger.info(
            f"Conflict on resource {resource_id} for {start}..{end}: "
            f"{availability['reserved_slots']}/{availability['total_quantity']} taken"
        )
        raise ConflictError(
            availability['available_slots'],
            availability['total_quantity'],
            availability['reserved_slots'],
            maintenance=availability.get('status') == 'maintenance'
        )

    reservation_id = insert_reservation({
        'user_id': user_id,
        'resource_id': resource_id,
        'start_date': start,
        'end_date': end,
        'purpose': purpose.strip(),
        'description': description,
        'status': 'pending',
        'priority': priority,
        'attendees': attendees,
        'requirements': requirements,
        'package_id': package_id,
        'booking_ref': booking_ref,
    }, cursor=cursor)

    cursor.execute('''
        INSERT INTO reservation_status_history
        (reservation_id, old_status, new_status, changed_by, comments)
        VALUES (?, NULL, 'pending', ?, 'Reserva criada')
    ''', (reservation_id, user_id))

    return reservation_id


def audit_created_reservation(reservation: dict) -> None:
    """Write the CREATE audit entry of a committed reservation."""
    log_audit(
        action='CREATE',
        entity_type='reservation',
        entity_id=reservation['id'],
        after={
            'resource_id': reservation['resource_id'],
            'start_date': reservation['start_date'],
            'end_date': reservation['end_date'],
            'status': reservation['status'],
            'package_id': reservation['package_id'],
        },
        user_id=reservation['user_id']
    )


def create_reservation(
    user_id: int,
    resource_id: int,
    start_date,
    end_date,
    purpose: str,
    priority: str = 'normal',
    attendees: int = None,
    requirements: str = None,
    description: str = None,
    package_id: int = None,
    booking_ref: str = None
) -> dict:
    """
    Create a pending reservation for one unit of a resource.

    The availability check and the insert run in one BEGIN IMMEDIATE
    transaction, so no other writer can take the last unit in between.

    Args:
        user_id: Requesting user
        resource_id: Resource to reserve
        start_date: Window start
        end_date: Window end
        purpose: Why the resource is needed
        priority: low, normal, high or urgent
        attendees: Expected number of people
        requirements: Extra requirements text
        description: Free text
        package_id: Package this row belongs to
        booking_ref: Shared token of a package booking

    Returns:
        dict: The stored reservation

    Raises:
        InvalidWindowError: Bad window
        BookingPolicyError: A booking setting forbids the request
        ResourceNotFoundError: Unknown resource
        ConflictError: No free unit in the window; nothing was written
    """
    with immediate_transaction() as cursor:
        reservation_id = book_reservation(
            cursor,
            user_id=user_id,
            resource_id=resource_id,
            start_date=start_date,
            end_date=end_date,
            purpose=purpose,
            priority=priority,
            attendees=attendees,
            requirements=requirements,
            description=description,
            package_id=package_id,
            booking_ref=booking_ref
        )

    reservation = get_reservation_by_id(reservation_id)
    logger.info(
        f"Reservation {reservation_id} created: resource {resource_id}, "
        f"user {user_id}, {reservation['start_date']}..{reservation['end_date']}"
    )
    audit_created_reservation(reservation)

    return reservation


# =============================================================================
# DELETE
# =============================================================================

def delete_reservation(reservation_id: int) -> bool:
    """
    Delete a reservation (status history cascades).

    Args:
        reservation_id: Reservation ID

    Returns:
        bool: True if a row was deleted
    """
    db = get_db()
    cursor = db.cursor()

    try:
        cursor.execute('DELETE FROM reservations WHERE id = ?', (reservation_id,))
        db.commit()
        return cursor.rowcount > 0

    except Exception:
        db.rollback()
        raise
