"""
Booking exceptions.

Every error the reservation core raises on purpose derives from BookingError,
which carries the Portuguese message shown to the user, the HTTP status the
API answers with, and the structured details for the JSON body.
"""

from typing import Any, Dict, List, Optional

from utils.messages import MESSAGES


class BookingError(ValueError):
    """Base exception for all reservation-core errors."""

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        """Fields added to the API error envelope."""
        return dict(self.details)


# =============================================================================
# NOT FOUND (404)
# =============================================================================

class ResourceNotFoundError(BookingError):
    """Raised when a resource id does not exist."""

    status_code = 404

    def __init__(self, resource_id: int):
        super().__init__(MESSAGES['resource_not_found'], {'resource_id': resource_id})
        self.resource_id = resource_id


class ReservationNotFoundError(BookingError):
    """Raised when a reservation id does not exist."""

    status_code = 404

    def __init__(self, reservation_id: int):
        super().__init__(MESSAGES['reservation_not_found'], {'reservation_id': reservation_id})
        self.reservation_id = reservation_id


class PackageNotFoundError(BookingError):
    """Raised when a package does not exist or has no member resources."""

    status_code = 404

    def __init__(self, package_id: int, empty: bool = False):
        message = MESSAGES['package_empty'] if empty else MESSAGES['package_not_found']
        super().__init__(message, {'package_id': package_id})
        self.package_id = package_id
        self.empty = empty


# =============================================================================
# CONFLICTS (409)
# =============================================================================

class ConflictError(BookingError):
    """Raised when a resource has no free unit for the requested window."""

    status_code = 409

    def __init__(self, available_slots: int, total_quantity: int, reserved_slots: int,
                 maintenance: bool = False):
        if maintenance:
            message = MESSAGES['resource_maintenance']
        else:
            message = MESSAGES['resource_conflict'].format(
                available=available_slots, total=total_quantity
            )
        super().__init__(message, {
            'available_slots': available_slots,
            'total_quantity': total_quantity,
            'reserved_slots': reserved_slots,
        })
        self.available_slots = available_slots
        self.total_quantity = total_quantity
        self.reserved_slots = reserved_slots


class QuantityBelowReservedError(BookingError):
    """Raised when a new quantity is below the active reservations already held."""

    status_code = 409

    def __init__(self, quantity: int, peak_reserved: int):
        super().__init__(
            MESSAGES['quantity_below_reserved'].format(quantity=quantity, reserved=peak_reserved),
            {'quantity': quantity, 'peak_reserved': peak_reserved}
        )
        self.quantity = quantity
        self.peak_reserved = peak_reserved


class PackageConflictError(BookingError):
    """Raised by the package pre-check; nothing was written."""

    status_code = 409

    def __init__(self, conflicting_resource_names: List[str], conflicts: List[dict] = None):
        super().__init__(
            MESSAGES['package_conflict'].format(names=', '.join(conflicting_resource_names)),
            {
                'conflicting_resource_names': list(conflicting_resource_names),
                'conflicts': list(conflicts or []),
            }
        )
        self.conflicting_resource_names = list(conflicting_resource_names)
        self.conflicts = list(conflicts or [])


class PackageBookingFailedError(BookingError):
    """A member booking failed and the package transaction was rolled back."""

    status_code = 409

    def __init__(self, resource_name: str, cause: Exception):
        details = {'resource_name': resource_name}
        if isinstance(cause, BookingError):
            details.update(cause.to_dict())
        super().__init__(MESSAGES['package_booking_failed'].format(name=resource_name), details)
        self.resource_name = resource_name
        self.cause = cause


class InvalidTransitionError(BookingError):
    """Raised when a status change is not pending -> approved/rejected."""

    status_code = 409

    def __init__(self, current_status: Optional[str], new_status: str):
        super().__init__(
            MESSAGES['invalid_transition'].format(current=current_status, new=new_status),
            {'current_status': current_status, 'new_status': new_status}
        )
        self.current_status = current_status
        self.new_status = new_status


# =============================================================================
# VALIDATION (400)
# =============================================================================

class InvalidWindowError(BookingError):
    """Raised when a window does not parse or does not satisfy start < end."""

    def __init__(self, start_date=None, end_date=None, message: str = None):
        super().__init__(message or MESSAGES['invalid_window'], {
            'start_date': str(start_date) if start_date is not None else None,
            'end_date': str(end_date) if end_date is not None else None,
        })


class BookingPolicyError(BookingError):
    """Raised when a booking setting forbids the request."""

    def __init__(self, setting: str, limit: int, value: int, message: str):
        super().__init__(message, {'setting': setting, 'limit': limit, 'value': value})
        self.setting = setting
        self.limit = limit
        self.value = value


# =============================================================================
# OPERATOR ALARM (500)
# =============================================================================

class PartialPackageOrphanError(BookingError):
    """Rollback of a failed package booking failed; rows may be left behind."""

    status_code = 500

    def __init__(self, orphaned_reservation_ids: List[int], resource_name: str, cause: Exception):
        super().__init__(
            MESSAGES['package_orphaned'].format(
                name=resource_name,
                ids=', '.join(str(i) for i in orphaned_reservation_ids)
            ),
            {
                'orphaned_reservation_ids': list(orphaned_reservation_ids),
                'resource_name': resource_name,
            }
        )
        self.orphaned_reservation_ids = list(orphaned_reservation_ids)
        self.resource_name = resource_name
        self.cause = cause
