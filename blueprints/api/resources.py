"""
Resource API routes: catalogue, admin maintenance, and availability map.
"""

import logging

from flask import request
from flask_login import login_required

from blueprints.api.forms import ResourceForm
from models.exceptions import BookingError
from models.resource import (
    get_all_resources, get_resource_by_id, list_available_resources,
    create_resource, update_resource, VALID_CATEGORIES
)
from models.reservation import get_availability_map, normalize_window
from utils.api_response import api_success, api_error, booking_error, form_errors
from utils.audit import audit_action
from utils.decorators import role_required
from utils.messages import MESSAGES

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ('name', 'category', 'description', 'status', 'location',
                    'image', 'quantity', 'specifications')


def register_routes(bp):
    """Register resource API routes on the blueprint."""

    # ============================================================================
    # CATALOGUE
    # ============================================================================

    @bp.route('/resources')
    @login_required
    def list_resources():
        """List resources. Query params: category, status."""
        resources = get_all_resources(
            category=request.args.get('category'),
            status=request.args.get('status')
        )
        return api_success(data=resources)

    @bp.route('/resources/available')
    @login_required
    def available_resources():
        """Resources currently in 'available' status. Query param: category."""
        return api_success(data=list_available_resources(request.args.get('category')))

    @bp.route('/resources/<int:resource_id>')
    @login_required
    def resource_detail(resource_id):
        """Get one resource."""
        resource = get_resource_by_id(resource_id)
        if not resource:
            return api_error(MESSAGES['resource_not_found'], status=404)
        return api_success(data=resource)

    @bp.route('/resources/availability')
    @login_required
    def availability_map():
        """
        Availability of every resource for one window.

        Query params:
            start_date, end_date: ISO-8601 (required)
            category: rooms, equipment or av (optional)
        """
        category = request.args.get('category')
        if category and category not in VALID_CATEGORIES:
            return api_error(MESSAGES['invalid_value'], status=400, field='category')

        try:
            start, end = normalize_window(
                request.args.get('start_date'), request.args.get('end_date')
            )
        except BookingError as e:
            return booking_error(e)

        return api_success(
            data=get_availability_map(start, end, category=category),
            start_date=start,
            end_date=end
        )

    # ============================================================================
    # ADMIN MAINTENANCE
    # ============================================================================

    @bp.route('/resources', methods=['POST'])
    @login_required
    @role_required('admin')
    @audit_action('CREATE', 'resource')
    def create_resource_route():
        """Create a resource. Body: ResourceForm fields plus specifications."""
        form = ResourceForm()
        if not form.validate_on_submit():
            return api_error(MESSAGES['data_required'], status=400, errors=form_errors(form))

        payload = request.get_json(silent=True) or {}

        try:
            resource_id = create_resource(
                name=form.name.data,
                category=form.category.data,
                quantity=form.quantity.data,
                status=form.status.data,
                description=form.description.data or '',
                location=form.location.data or '',
                image=form.image.data or '',
                specifications=payload.get('specifications')
            )
        except ValueError as e:
            return api_error(str(e), status=400)

        return api_success(
            data=get_resource_by_id(resource_id),
            message=MESSAGES['resource_created'],
            status=201
        )

    @bp.route('/resources/<int:resource_id>', methods=['PUT'])
    @login_required
    @role_required('admin')
    @audit_action('UPDATE', 'resource', entity_id_param='resource_id')
    def update_resource_route(resource_id):
        """Update resource fields given in the JSON body."""
        if not get_resource_by_id(resource_id):
            return api_error(MESSAGES['resource_not_found'], status=404)

        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return api_error(MESSAGES['data_required'], status=400)

        fields = {key: payload[key] for key in UPDATABLE_FIELDS if key in payload}
        if not fields:
            return api_error(MESSAGES['data_required'], status=400)

        try:
            update_resource(resource_id, **fields)
        except BookingError as e:
            return booking_error(e)
        except ValueError as e:
            return api_error(str(e), status=400)

        logger.info(f"Resource {resource_id} updated: {sorted(fields)}")
        return api_success(
            data=get_resource_by_id(resource_id),
            message=MESSAGES['resource_updated']
        )
