"""
Audit Log model and data access functions.
Handles audit log creation and retrieval.
"""

import json
from database import get_db


# =============================================================================
# READ OPERATIONS
# =============================================================================

def get_audit_log_by_id(audit_log_id: int) -> dict:
    """
    Get audit log entry by ID.

    Args:
        audit_log_id: Audit log ID

    Returns:
        Audit log dict or None if not found
    """
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute('''
            SELECT al.*, u.email as user_email, u.name as user_name
            FROM audit_log al
            LEFT JOIN users u ON al.user_id = u.id
            WHERE al.id = ?
        ''', (audit_log_id,))
        row = cursor.fetchone()
        return _row_to_dict(row) if row else None


def get_audit_logs(
    user_id: int = None,
    action: str = None,
    entity_type: str = None,
    entity_id: int = None,
    limit: int = 100,
    offset: int = 0
) -> list:
    """
    Get audit logs with optional filtering, newest first.

    Args:
        user_id: Filter by user ID
        action: Filter by action type (CREATE, UPDATE, DELETE, ROLLBACK, ...)
        entity_type: Filter by entity type (reservation, resource, package, ...)
        entity_id: Filter by specific entity ID
        limit: Maximum number of records to return (default 100)
        offset: Number of records to skip for pagination

    Returns:
        List of audit log dicts
    """
    with get_db() as conn:
        cursor = conn.cursor()

        query = '''
            SELECT al.*, u.email as user_email, u.name as user_name
            FROM audit_log al
            LEFT JOIN users u ON al.user_id = u.id
            WHERE 1=1
        '''

        params = []

        if user_id is not None:
            query += ' AND al.user_id = ?'
            params.append(user_id)

        if action:
            query += ' AND al.action = ?'
            params.append(action)

        if entity_type:
            query += ' AND al.entity_type = ?'
            params.append(entity_type)

        if entity_id is not None:
            query += ' AND al.entity_id = ?'
            params.append(entity_id)

        query += ' ORDER BY al.id DESC LIMIT ? OFFSET ?'
        params.extend([limit, offset])

        cursor.execute(query, params)
        return [_row_to_dict(row) for row in cursor.fetchall()]


# =============================================================================
# WRITE OPERATIONS
# =============================================================================

def create_audit_log(
    action: str,
    entity_type: str,
    entity_id: int = None,
    user_id: int = None,
    changes: dict = None,
    ip_address: str = None,
    user_agent: str = None
) -> int:
    """
    Create a new audit log entry.

    Must not be called inside an open write transaction: it commits.

    Args:
        action: Action type (CREATE, UPDATE, DELETE, ROLLBACK, ...)
        entity_type: Entity type (reservation, resource, package, settings)
        entity_id: ID of the affected entity
        user_id: ID of the user who performed the action (None for system actions)
        changes: Dictionary with before/after state for tracking changes
        ip_address: Client IP address
        user_agent: Client user agent string

    Returns:
        New audit log ID
    """
    changes_json = None
    if changes is not None:
        changes_json = json.dumps(changes, default=str, ensure_ascii=False)

    with get_db() as conn:
        cursor = conn.cursor()

        cursor.execute('''
            INSERT INTO audit_log
            (user_id, action, entity_type, entity_id, changes, ip_address, user_agent)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        ''', (user_id, action, entity_type, entity_id, changes_json, ip_address, user_agent))

        return cursor.lastrowid


def _row_to_dict(row) -> dict:
    """Convert a row and decode the JSON changes column."""
    entry = dict(row)
    if entry.get('changes'):
        try:
            entry['changes'] = json.loads(entry['changes'])
        except (TypeError, ValueError):
            pass
    return entry
