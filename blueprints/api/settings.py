"""
Booking settings API routes.
"""

from flask_login import login_required

from blueprints.api.forms import BookingSettingsForm
from models.config import get_booking_settings, update_booking_settings
from utils.api_response import api_success, api_error, form_errors
from utils.audit import audit_action
from utils.decorators import role_required
from utils.messages import MESSAGES


def register_routes(bp):
    """Register settings API routes on the blueprint."""

    @bp.route('/settings/booking')
    @login_required
    def booking_settings():
        """Current booking policy settings."""
        return api_success(data=get_booking_settings())

    @bp.route('/settings/booking', methods=['PUT'])
    @login_required
    @role_required('admin')
    @audit_action('UPDATE', 'settings')
    def update_booking_settings_route():
        """
        Update booking policy settings.

        Request body (any subset):
            max_reservation_days: int >= 0
            max_concurrent_reservations: int >= 0
        """
        form = BookingSettingsForm()
        if not form.validate_on_submit():
            return api_error(MESSAGES['invalid_value'], status=400, errors=form_errors(form))

        values = {
            name: form[name].data
            for name in ('max_reservation_days', 'max_concurrent_reservations')
            if form[name].data is not None
        }
        if not values:
            return api_error(MESSAGES['data_required'], status=400)

        try:
            settings = update_booking_settings(**values)
        except ValueError as e:
            return api_error(str(e), status=400)

        return api_success(data=settings, message=MESSAGES['settings_updated'])
