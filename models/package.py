"""
Package data access functions.
Handles CRUD operations for resource_packages and their member resources.
"""

import logging
from typing import Optional, List, Dict, Tuple

from database import get_db

logger = logging.getLogger(__name__)


# =============================================================================
# QUERY OPERATIONS
# =============================================================================

def get_all_packages(
    subject: Optional[str] = None,
    created_by: Optional[int] = None
) -> List[Dict]:
    """
    Get all packages with optional filtering.

    Args:
        subject: Filter by academic subject
        created_by: Filter by creating user ID

    Returns:
        List of package dicts with member count and creator name
    """
    db = get_db()
    cursor = db.cursor()

    query = '''
        SELECT p.*,
               u.name as created_by_name,
               (SELECT COUNT(*) FROM package_resources pr
                WHERE pr.package_id = p.id) as resource_count
        FROM resource_packages p
        LEFT JOIN users u ON p.created_by = u.id
        WHERE 1=1
    '''

    params = []

    if subject:
        query += ' AND p.subject = ?'
        params.append(subject)

    if created_by is not None:
        query += ' AND p.created_by = ?'
        params.append(created_by)

    query += ' ORDER BY p.name ASC'

    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]


def get_package_by_id(package_id: int) -> Optional[Dict]:
    """
    Get a single package by ID.

    Args:
        package_id: Package ID

    Returns:
        Package dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()

    cursor.execute('''
        SELECT p.*, u.name as created_by_name
        FROM resource_packages p
        LEFT JOIN users u ON p.created_by = u.id
        WHERE p.id = ?
    ''', (package_id,))

    row = cursor.fetchone()
    return dict(row) if row else None


def get_package_members(package_id: int) -> List[Dict]:
    """
    Get the member resources of a package, in the order they were added.

    Args:
        package_id: Package ID

    Returns:
        List of {resource_id, resource_name, quantity_needed, category,
        status, quantity}
    """
    db = get_db()
    cursor = db.cursor()

    cursor.execute('''
        SELECT pr.resource_id, pr.quantity_needed,
               r.name as resource_name, r.category, r.status, r.quantity
        FROM package_resources pr
        JOIN resources r ON pr.resource_id = r.id
        WHERE pr.package_id = ?
        ORDER BY pr.id
    ''', (package_id,))

    return [dict(row) for row in cursor.fetchall()]


def validate_package_data(data: Dict) -> Tuple[bool, str]:
    """
    Validate package data before create/update.

    Args:
        data: Package data dict

    Returns:
        (is_valid, error_message)
    """
    if 'name' in data and not (data.get('name') or '').strip():
        return False, "Nome do pacote é obrigatório"

    for field in ('description', 'subject'):
        if data.get(field) is not None and not isinstance(data[field], str):
            return False, f"Campo '{field}' deve ser texto"

    return True, ""


# =============================================================================
# CREATE
# =============================================================================

def create_package(name: str, description: str = '', subject: str = '',
                   created_by: int = None, resource_ids: List[int] = None) -> int:
    """
    Create a new package, optionally with its member resources.

    Args:
        name: Package name (required)
        description: Free text
        subject: Academic subject
        created_by: Creating user ID
        resource_ids: Member resources, in booking order

    Returns:
        New package ID

    Raises:
        ValueError: Invalid data or unknown resource
    """
    is_valid, error_msg = validate_package_data({
        'name': name, 'description': description, 'subject': subject
    })
    if not is_valid:
        raise ValueError(error_msg)

    db = get_db()
    cursor = db.cursor()

    try:
        cursor.execute('''
            INSERT INTO resource_packages (name, description, subject, created_by)
            VALUES (?, ?, ?, ?)
        ''', (name.strip(), description or '', subject or '', created_by))

        package_id = cursor.lastrowid

        for resource_id in resource_ids or []:
            _insert_member(cursor, package_id, resource_id)

        db.commit()

    except Exception:
        db.rollback()
        raise

    logger.info(f"Package {package_id} created: {name} ({len(resource_ids or [])} resources)")
    return package_id


def _insert_member(cursor, package_id: int, resource_id: int, quantity_needed: int = 1) -> None:
    cursor.execute('SELECT id FROM resources WHERE id = ?', (resource_id,))
    if not cursor.fetchone():
        raise ValueError(f"Recurso {resource_id} não encontrado")

    if isinstance(quantity_needed, bool) or not isinstance(quantity_needed, int) or quantity_needed < 1:
        raise ValueError("quantity_needed deve ser um inteiro positivo")

    cursor.execute('''
        INSERT INTO package_resources (package_id, resource_id, quantity_needed)
        VALUES (?, ?, ?)
    ''', (package_id, resource_id, quantity_needed))


def add_resource_to_package(package_id: int, resource_id: int, quantity_needed: int = 1) -> bool:
    """
    Add a member resource to a package.

    Args:
        package_id: Package ID
        resource_id: Resource ID
        quantity_needed: Units needed (stored; each booking takes one unit)

    Returns:
        True if added, False if the resource was already a member

    Raises:
        ValueError: Unknown package or resource, or invalid quantity
    """
    if not get_package_by_id(package_id):
        raise ValueError("Pacote não encontrado")

    db = get_db()
    cursor = db.cursor()

    cursor.execute('''
        SELECT id FROM package_resources WHERE package_id = ? AND resource_id = ?
    ''', (package_id, resource_id))
    if cursor.fetchone():
        return False

    try:
        _insert_member(cursor, package_id, resource_id, quantity_needed)
        db.commit()
        return True

    except Exception:
        db.rollback()
        raise


# =============================================================================
# UPDATE
# =============================================================================

def update_package(package_id: int, **kwargs) -> bool:
    """
    Update package fields.

    Args:
        package_id: Package ID to update
        **kwargs: Fields to update (name, description, subject)

    Returns:
        True if updated successfully

    Raises:
        ValueError: Invalid data
    """
    is_valid, error_msg = validate_package_data(kwargs)
    if not is_valid:
        raise ValueError(error_msg)

    allowed_fields = ['name', 'description', 'subject']
    updates = []
    values = []

    for field in allowed_fields:
        if field in kwargs:
            updates.append(f'{field} = ?')
            values.append(kwargs[field].strip() if field == 'name' else kwargs[field])

    if not updates:
        return False

    updates.append("updated_at = strftime('%Y-%m-%dT%H:%M:%S', 'now')")
    values.append(package_id)

    db = get_db()
    cursor = db.cursor()
    cursor.execute(f'UPDATE resource_packages SET {", ".join(updates)} WHERE id = ?', values)
    db.commit()

    return cursor.rowcount > 0


# =============================================================================
# DELETE
# =============================================================================

def remove_resource_from_package(package_id: int, resource_id: int) -> bool:
    """
    Remove a member resource from a package.

    Returns:
        True if a member was removed
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        DELETE FROM package_resources WHERE package_id = ? AND resource_id = ?
    ''', (package_id, resource_id))
    db.commit()
    return cursor.rowcount > 0


def delete_package(package_id: int) -> bool:
    """
    Delete a package and its membership rows.

    Reservations booked through the package keep their rows; their
    package_id is cleared by the foreign key.

    Args:
        package_id: Package ID

    Returns:
        True if deleted
    """
    db = get_db()
    cursor = db.cursor()

    try:
        cursor.execute('DELETE FROM resource_packages WHERE id = ?', (package_id,))
        db.commit()

    except Exception:
        db.rollback()
        raise

    if cursor.rowcount > 0:
        logger.info(f"Package {package_id} deleted")
        return True
    return False
