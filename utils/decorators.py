"""
Route decorators for authentication and authorization.
Provides role-based access control for API routes.
"""

from functools import wraps
from flask_login import login_required, current_user

from utils.api_response import api_error
from utils.messages import MESSAGES


def role_required(*roles: str):
    """
    Decorator to require one of the given user roles for a route.

    Usage:
        @bp.route('/reservations/<int:reservation_id>/status', methods=['POST'])
        @login_required
        @role_required('admin', 'faculty')
        def change_status(reservation_id):
            ...

    Args:
        roles: Accepted role names ('student', 'faculty', 'admin')

    Returns:
        Decorator function
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated:
                return api_error(MESSAGES['login_required'], status=401)

            if current_user.role not in roles:
                return api_error(MESSAGES['permission_denied'], status=403)

            return func(*args, **kwargs)
        return wrapper
    return decorator


def is_reviewer(user) -> bool:
    """Admins and faculty review requests and see every reservation."""
    return getattr(user, 'role', None) in ('admin', 'faculty')


# Re-export login_required for convenience
__all__ = ['login_required', 'role_required', 'is_reviewer']
