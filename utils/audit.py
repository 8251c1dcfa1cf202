"""
Audit logging utility functions and decorators.
Provides automatic and manual audit logging for tracking user actions.
"""

import logging
from functools import wraps
from flask import request, has_request_context
from flask_login import current_user

# Configure logger for audit operations
logger = logging.getLogger(__name__)


def log_audit(
    action: str,
    entity_type: str,
    entity_id: int = None,
    before: dict = None,
    after: dict = None,
    user_id: int = None
) -> int:
    """
    Log an audit entry manually.

    This function is the primary entry point for manual audit logging.
    It captures the current user, IP address, and user agent automatically
    from the Flask request context.

    Args:
        action: Action type (CREATE, UPDATE, DELETE, ROLLBACK)
        entity_type: Entity type (reservation, resource, package, settings)
        entity_id: ID of the affected entity
        before: Dictionary with entity state before the change
        after: Dictionary with entity state after the change
        user_id: Override user ID (defaults to current_user.id)

    Returns:
        New audit log ID, or None if logging failed

    Example:
        log_audit(
            action='UPDATE',
            entity_type='reservation',
            entity_id=123,
            before={'status': 'pending'},
            after={'status': 'approved'}
        )
    """
    try:
        from models.audit_log import create_audit_log

        ip_address = None
        user_agent = None

        if has_request_context():
            if user_id is None and current_user.is_authenticated:
                user_id = current_user.id

            # Get client IP, considering proxies
            ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
            if ip_address and ',' in ip_address:
                ip_address = ip_address.split(',')[0].strip()
            user_agent = request.headers.get('User-Agent', '')[:255]

        changes = None
        if before is not None or after is not None:
            changes = {
                'before': before,
                'after': after
            }

        return create_audit_log(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            changes=changes,
            ip_address=ip_address,
            user_agent=user_agent
        )

    except Exception as e:
        # Audit logging should never fail the main operation
        logger.error(f"Failed to log audit entry: {e}", exc_info=True)
        return None


def audit_action(action_type: str, entity_type: str, entity_id_param: str = None):
    """
    Decorator to automatically log actions for route functions.

    Captures before/after state for UPDATE and DELETE operations and logs
    the action after the decorated view completes successfully.

    Usage:
        @bp.route('/resources/<int:resource_id>', methods=['PUT'])
        @login_required
        @role_required('admin')
        @audit_action('UPDATE', 'resource', entity_id_param='resource_id')
        def update_resource_route(resource_id):
            ...

    Args:
        action_type: Action type (CREATE, UPDATE, DELETE)
        entity_type: Entity type (resource, package, settings)
        entity_id_param: Name of the route parameter containing entity ID

    Returns:
        Decorator function
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            entity_id = kwargs.get(entity_id_param) if entity_id_param else None
            before_state = None

            if action_type in ('UPDATE', 'DELETE'):
                before_state = _get_entity_state(entity_type, entity_id)

            result = func(*args, **kwargs)

            if _is_error_response(result):
                return result

            after_state = None
            result_entity_id = entity_id

            if action_type == 'CREATE':
                result_entity_id = _extract_entity_id_from_result(result)
                if result_entity_id:
                    after_state = _get_entity_state(entity_type, result_entity_id)
            elif action_type == 'UPDATE':
                after_state = _get_entity_state(entity_type, entity_id)

            log_audit(
                action=action_type,
                entity_type=entity_type,
                entity_id=result_entity_id,
                before=before_state,
                after=after_state
            )

            return result

        return wrapper
    return decorator


def _get_entity_state(entity_type: str, entity_id: int) -> dict:
    """
    Fetch current state of an entity for before/after comparison.

    Args:
        entity_type: Type of entity (resource, package, settings)
        entity_id: Entity ID (ignored for settings)

    Returns:
        Dictionary with entity state, or None if not found
    """
    try:
        if entity_type == 'resource' and entity_id:
            from models.resource import get_resource_by_id
            resource = get_resource_by_id(entity_id)
            if resource:
                return {
                    'id': resource['id'],
                    'name': resource['name'],
                    'category': resource['category'],
                    'status': resource['status'],
                    'quantity': resource['quantity'],
                }

        elif entity_type == 'package' and entity_id:
            from models.package import get_package_by_id, get_package_members
            package = get_package_by_id(entity_id)
            if package:
                return {
                    'id': package['id'],
                    'name': package['name'],
                    'subject': package['subject'],
                    'resource_ids': [m['resource_id'] for m in get_package_members(entity_id)],
                }

        elif entity_type == 'settings':
            from models.config import get_booking_settings
            return get_booking_settings()

    except Exception as e:
        logger.warning(f"Failed to get entity state for {entity_type}/{entity_id}: {e}")

    return None


def _is_error_response(result) -> bool:
    """
    Check if the result indicates an error response.

    Args:
        result: Flask response or tuple

    Returns:
        True if result is an error response
    """
    if isinstance(result, tuple) and len(result) >= 2:
        status_code = result[1]
        if isinstance(status_code, int) and status_code >= 400:
            return True

    if hasattr(result, 'status_code') and result.status_code >= 400:
        return True

    return False


def _extract_entity_id_from_result(result) -> int:
    """
    Try to extract entity ID from a CREATE operation result.

    Looks for ``data.id`` in the api_success envelope.

    Args:
        result: Flask response or tuple

    Returns:
        Entity ID if found, None otherwise
    """
    response = result[0] if isinstance(result, tuple) else result
    if not hasattr(response, 'get_json'):
        return None

    json_data = response.get_json(silent=True)
    if isinstance(json_data, dict):
        data = json_data.get('data')
        if isinstance(data, dict) and 'id' in data:
            return data['id']

    return None


# Export public API
__all__ = [
    'audit_action',
    'log_audit',
]
