"""
Package API routes: package management and package bookings.
"""

import logging

from flask import request
from flask_login import login_required, current_user

from blueprints.api.forms import PackageForm, PackageReservationForm
from models.exceptions import BookingError
from models.package import (
    get_all_packages, get_package_by_id, get_package_members,
    create_package, delete_package
)
from models.reservation import create_package_reservation
from utils.api_response import api_success, api_error, booking_error, form_errors
from utils.audit import audit_action
from utils.decorators import role_required
from utils.messages import MESSAGES
from utils.validators import sanitize_input

logger = logging.getLogger(__name__)


def register_routes(bp):
    """Register package API routes on the blueprint."""

    # ============================================================================
    # PACKAGE MANAGEMENT
    # ============================================================================

    @bp.route('/packages')
    @login_required
    def list_packages():
        """List packages. Query params: subject, created_by."""
        packages = get_all_packages(
            subject=request.args.get('subject'),
            created_by=request.args.get('created_by', type=int)
        )
        return api_success(data=packages)

    @bp.route('/packages/<int:package_id>')
    @login_required
    def package_detail(package_id):
        """Get a package with its member resources."""
        package = get_package_by_id(package_id)
        if not package:
            return api_error(MESSAGES['package_not_found'], status=404)

        package['resources'] = get_package_members(package_id)
        return api_success(data=package)

    @bp.route('/packages', methods=['POST'])
    @login_required
    @role_required('admin')
    @audit_action('CREATE', 'package')
    def create_package_route():
        """
        Create a package.

        Request body:
            name: str
            description, subject: str (optional)
            resource_ids: list of resource IDs, in booking order
        """
        form = PackageForm()
        if not form.validate_on_submit():
            return api_error(MESSAGES['data_required'], status=400, errors=form_errors(form))

        payload = request.get_json(silent=True) or {}
        resource_ids = payload.get('resource_ids') or []
        if not isinstance(resource_ids, list) or not all(
            isinstance(rid, int) and not isinstance(rid, bool) for rid in resource_ids
        ):
            return api_error(MESSAGES['invalid_value'], status=400, field='resource_ids')

        try:
            package_id = create_package(
                name=form.name.data,
                description=sanitize_input(form.description.data, 2000),
                subject=sanitize_input(form.subject.data, 200),
                created_by=current_user.id,
                resource_ids=list(dict.fromkeys(resource_ids))
            )
        except ValueError as e:
            return api_error(str(e), status=400)

        package = get_package_by_id(package_id)
        package['resources'] = get_package_members(package_id)
        return api_success(data=package, message=MESSAGES['package_created'], status=201)

    @bp.route('/packages/<int:package_id>', methods=['DELETE'])
    @login_required
    @role_required('admin')
    @audit_action('DELETE', 'package', entity_id_param='package_id')
    def delete_package_route(package_id):
        """Delete a package (booked reservations are kept)."""
        if not delete_package(package_id):
            return api_error(MESSAGES['package_not_found'], status=404)
        return api_success(message=MESSAGES['package_deleted'])

    # ============================================================================
    # PACKAGE BOOKING
    # ============================================================================

    @bp.route('/packages/<int:package_id>/reservations', methods=['POST'])
    @login_required
    def reserve_package(package_id):
        """
        Reserve every resource of a package for one window, or none.

        Request body:
            start_date, end_date: ISO-8601
            purpose: str
            description: str (optional)
            priority: low, normal, high or urgent (optional)
        """
        form = PackageReservationForm()
        if not form.validate_on_submit():
            return api_error(MESSAGES['data_required'], status=400, errors=form_errors(form))

        try:
            reservations = create_package_reservation(
                package_id=package_id,
                user_id=current_user.id,
                start_date=form.start_date.data,
                end_date=form.end_date.data,
                purpose=form.purpose.data,
                description=form.description.data,
                priority=form.priority.data
            )
        except BookingError as e:
            return booking_error(e)

        return api_success(
            data=reservations,
            message=MESSAGES['package_reservation_created'].format(count=len(reservations)),
            status=201
        )
