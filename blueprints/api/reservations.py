"""
Reservation API routes: availability check, creation, listing, review.
"""

import logging

from flask import request
from flask_login import login_required, current_user

from blueprints.api.forms import AvailabilityForm, ReservationForm, StatusForm
from models.exceptions import BookingError
from models.reservation import (
    check_availability, create_reservation, get_reservation_by_id,
    get_reservations, get_status_history, update_reservation_status,
    RESERVATION_STATUSES
)
from utils.api_response import api_success, api_error, booking_error, form_errors
from utils.decorators import role_required, is_reviewer
from utils.messages import MESSAGES

logger = logging.getLogger(__name__)


def _can_view(reservation: dict) -> bool:
    return is_reviewer(current_user) or reservation['user_id'] == current_user.id


def register_routes(bp):
    """Register reservation API routes on the blueprint."""

    # ============================================================================
    # AVAILABILITY
    # ============================================================================

    @bp.route('/reservations/check-availability', methods=['POST'])
    @login_required
    def check_reservation_availability():
        """
        Check free units of one resource for a window.

        Request body:
            resource_id: int
            start_date, end_date: ISO-8601
            exclude_reservation_id: int (optional)

        Returns:
            JSON with has_conflict, total_quantity, reserved_slots, available_slots
        """
        form = AvailabilityForm()
        if not form.validate_on_submit():
            return api_error(MESSAGES['data_required'], status=400, errors=form_errors(form))

        try:
            result = check_availability(
                form.resource_id.data,
                form.start_date.data,
                form.end_date.data,
                exclude_reservation_id=form.exclude_reservation_id.data
            )
        except BookingError as e:
            return booking_error(e)
        except ValueError:
            return api_error(MESSAGES['invalid_window'], status=400)

        return api_success(data=result)

    # ============================================================================
    # CREATE / READ
    # ============================================================================

    @bp.route('/reservations', methods=['POST'])
    @login_required
    def create_reservation_route():
        """Request one unit of a resource. Body: ReservationForm fields."""
        form = ReservationForm()
        if not form.validate_on_submit():
            return api_error(MESSAGES['data_required'], status=400, errors=form_errors(form))

        try:
            reservation = create_reservation(
                user_id=current_user.id,
                resource_id=form.resource_id.data,
                start_date=form.start_date.data,
                end_date=form.end_date.data,
                purpose=form.purpose.data,
                priority=form.priority.data,
                attendees=form.attendees.data,
                requirements=form.requirements.data,
                description=form.description.data
            )
        except BookingError as e:
            return booking_error(e)

        return api_success(data=reservation, message=MESSAGES['reservation_created'], status=201)

    @bp.route('/reservations')
    @login_required
    def list_reservations():
        """
        List reservations.

        Students see their own; admin and faculty see all and may filter by
        user_id. Query params: status, resource_id, user_id, date_from, date_to.
        """
        status = request.args.get('status')
        if status and status not in RESERVATION_STATUSES:
            return api_error(MESSAGES['invalid_status'].format(status=status), status=400)

        user_id = request.args.get('user_id', type=int) if is_reviewer(current_user) else current_user.id

        try:
            reservations = get_reservations(
                user_id=user_id,
                status=status,
                resource_id=request.args.get('resource_id', type=int),
                date_from=request.args.get('date_from'),
                date_to=request.args.get('date_to')
            )
        except ValueError:
            return api_error(MESSAGES['invalid_value'], status=400)

        return api_success(data=reservations)

    @bp.route('/reservations/<int:reservation_id>')
    @login_required
    def reservation_detail(reservation_id):
        """Get one reservation (own, or any for reviewers)."""
        reservation = get_reservation_by_id(reservation_id)
        if not reservation:
            return api_error(MESSAGES['reservation_not_found'], status=404)
        if not _can_view(reservation):
            return api_error(MESSAGES['permission_denied'], status=403)

        return api_success(data=reservation)

    # ============================================================================
    # REVIEW
    # ============================================================================

    @bp.route('/reservations/<int:reservation_id>/status', methods=['POST'])
    @login_required
    @role_required('admin', 'faculty')
    def change_reservation_status(reservation_id):
        """
        Approve or reject a pending reservation.

        Request body:
            status: 'approved' or 'rejected'
            comments: str (optional)
        """
        form = StatusForm()
        if not form.validate_on_submit():
            return api_error(MESSAGES['data_required'], status=400, errors=form_errors(form))

        try:
            reservation = update_reservation_status(
                reservation_id,
                form.status.data,
                changed_by=current_user.id,
                comments=form.comments.data or ''
            )
        except BookingError as e:
            return booking_error(e)

        message_key = 'reservation_approved' if reservation['status'] == 'approved' else 'reservation_rejected'
        return api_success(data=reservation, message=MESSAGES[message_key])

    @bp.route('/reservations/<int:reservation_id>/history')
    @login_required
    def reservation_history(reservation_id):
        """Get reservation status change history."""
        reservation = get_reservation_by_id(reservation_id)
        if not reservation:
            return api_error(MESSAGES['reservation_not_found'], status=404)
        if not _can_view(reservation):
            return api_error(MESSAGES['permission_denied'], status=403)

        return api_success(data=get_status_history(reservation_id))
