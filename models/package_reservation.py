"""
Package reservation coordinator.
Books every member resource of a package for one window, or none of them.

All member rows are written in a single BEGIN IMMEDIATE transaction: a
failing member rolls the whole booking back. Only when the rollback itself
fails can rows be left behind; their ids are then reported for an operator.
"""

import logging
import uuid

from database import begin_immediate, get_db
from .exceptions import (
    PackageBookingFailedError, PackageConflictError, PackageNotFoundError,
    PartialPackageOrphanError
)
from .package import get_package_by_id, get_package_members
from .reservation_availability import check_availability
from .reservation_crud import (
    audit_created_reservation, book_reservation, check_booking_policy, normalize_window
)
from .reservation_queries import get_reservation_by_id
from utils.audit import log_audit

logger = logging.getLogger(__name__)

PACKAGE_PURPOSE_SUFFIX = ' (Pacote)'


def create_package_reservation(
    package_id: int,
    user_id: int,
    start_date,
    end_date,
    purpose: str,
    description: str = None,
    priority: str = 'normal'
) -> list:
    """
    Reserve one unit of every member resource of a package.

    Steps:
        1. Load the members (the package must exist and have members)
        2. Open a write transaction and pre-check every member; any
           conflict aborts before writing
        3. Book members in order; any failure rolls the transaction back

    Args:
        package_id: Package ID
        user_id: Requesting user
        start_date: Window start
        end_date: Window end
        purpose: Purpose; stored with a " (Pacote)" suffix
        description: Shared description
        priority: Shared priority

    Returns:
        list: The created reservations, in member order

    Raises:
        PackageNotFoundError: Unknown package or package without members
        InvalidWindowError: Bad window
        BookingPolicyError: A booking setting forbids the request
        PackageConflictError: Pre-check found unavailable members
        PackageBookingFailedError: A member booking failed; nothing was kept
        PartialPackageOrphanError: A member failed and the rollback failed too
    """
    package = get_package_by_id(package_id)
    if not package:
        raise PackageNotFoundError(package_id)

    members = get_package_members(package_id)
    if not members:
        raise PackageNotFoundError(package_id, empty=True)

    start, end = normalize_window(start_date, end_date)

    booking_ref = uuid.uuid4().hex
    package_purpose = f"{purpose}{PACKAGE_PURPOSE_SUFFIX}"
    created_ids = []
    failed_name = None

    db = get_db()
    cursor = begin_immediate(db)
    try:
        # The package is one booking for the concurrency limit
        check_booking_policy(user_id, start, end)

        # ===== PRE-CHECK =====
        conflicts = []
        for member in members:
            availability = check_availability(member['resource_id'], start, end)
            if availability['has_conflict']:
                conflicts.append(availability)

        if conflicts:
            names = [c['resource_name'] for c in conflicts]
            logger.info(f"Package {package_id} unavailable for {start}..{end}: {', '.join(names)}")
            raise PackageConflictError(names, conflicts)

        # ===== BOOK MEMBERS =====
        for member in members:
            failed_name = member['resource_name']
            try:
                reservation_id = book_reservation(
                    cursor,
                    user_id=user_id,
                    resource_id=member['resource_id'],
                    start_date=start,
                    end_date=end,
                    purpose=package_purpose,
                    priority=priority,
                    description=description,
                    package_id=package_id,
                    booking_ref=booking_ref,
                    check_policy=False
                )
            except Exception as e:
                raise PackageBookingFailedError(member['resource_name'], e) from e
            created_ids.append(reservation_id)

        db.commit()

    except Exception as e:
        _rollback_package(db, package_id, user_id, created_ids, failed_name, e)
        raise

    reservations = [get_reservation_by_id(reservation_id) for reservation_id in created_ids]
    for reservation in reservations:
        audit_created_reservation(reservation)

    logger.info(
        f"Package {package_id} booked for user {user_id}: "
        f"{len(reservations)} reservations, ref {booking_ref}"
    )
    return reservations


def _rollback_package(db, package_id: int, user_id: int, created_ids: list,
                      resource_name: str, cause: Exception) -> None:
    """
    Roll back a failed package booking.

    Raises:
        PartialPackageOrphanError: If the rollback itself fails
    """
    try:
        db.rollback()
    except Exception as rollback_error:
        if not created_ids:
            logger.error(f"Package {package_id}: rollback failed ({rollback_error})", exc_info=True)
            return

        orphaned = sorted(created_ids)
        logger.critical(
            f"Package {package_id}: rollback failed ({rollback_error}); reservations "
            f"{orphaned} may be left behind after failed booking of '{resource_name}'",
            exc_info=True
        )
        raise PartialPackageOrphanError(orphaned, resource_name, cause) from rollback_error

    if not isinstance(cause, PackageBookingFailedError):
        return

    logger.warning(
        f"Package {package_id}: booking '{resource_name}' failed ({cause}); "
        f"rolled back {len(created_ids)} reservations"
    )
    log_audit(
        action='ROLLBACK',
        entity_type='package',
        entity_id=package_id,
        before={'reservation_ids': created_ids},
        after={'failed_resource': resource_name},
        user_id=user_id
    )
