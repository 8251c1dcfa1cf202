"""
Resource ledger data access functions.
Handles resource CRUD and the typed category specifications.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from database import get_db, immediate_transaction
from .exceptions import QuantityBelowReservedError
from .reservation_queries import peak_overlapping
from utils.validators import validate_non_negative_int

logger = logging.getLogger(__name__)

VALID_CATEGORIES = ('rooms', 'equipment', 'av')
VALID_STATUSES = ('available', 'reserved', 'maintenance')


# =============================================================================
# SPECIFICATIONS
# =============================================================================

@dataclass
class RoomSpec:
    """Specifications of a room (stored keys: capacity, hasWifi, hasProjector)."""
    capacity: Optional[int] = None
    has_wifi: bool = False
    has_projector: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        data = dict(self.extra)
        if self.capacity is not None:
            data['capacity'] = self.capacity
        data['hasWifi'] = self.has_wifi
        data['hasProjector'] = self.has_projector
        return data


@dataclass
class EquipmentSpec:
    """Specifications of lab equipment; no fixed keys."""
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return dict(self.extra)


@dataclass
class AVSpec:
    """Specifications of audio-visual gear (stored key: hasWifi)."""
    has_wifi: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        data = dict(self.extra)
        data['hasWifi'] = self.has_wifi
        return data


ResourceSpec = Union[RoomSpec, EquipmentSpec, AVSpec]


def parse_specifications(category: str, raw) -> ResourceSpec:
    """
    Build the typed specification record for a category.

    Args:
        category: Resource category (rooms, equipment, av)
        raw: JSON text, dict, or None

    Returns:
        RoomSpec, EquipmentSpec or AVSpec; unknown keys are kept in ``extra``

    Raises:
        ValueError: Unknown category or malformed JSON
    """
    if category not in VALID_CATEGORIES:
        raise ValueError(f"Invalid category: {category}")

    if raw is None or raw == '':
        data = {}
    elif isinstance(raw, dict):
        data = dict(raw)
    else:
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("Specifications must be a JSON object")

    if category == 'rooms':
        capacity = data.pop('capacity', None)
        return RoomSpec(
            capacity=int(capacity) if capacity is not None else None,
            has_wifi=bool(data.pop('hasWifi', False)),
            has_projector=bool(data.pop('hasProjector', False)),
            extra=data,
        )
    if category == 'av':
        return AVSpec(has_wifi=bool(data.pop('hasWifi', False)), extra=data)
    return EquipmentSpec(extra=data)


def serialize_specifications(spec: ResourceSpec) -> str:
    """Serialize a specification record to its stored JSON text."""
    return json.dumps(spec.to_dict(), ensure_ascii=False)


def _row_to_resource(row) -> dict:
    """Convert a resource row, decoding specifications to a plain dict."""
    resource = dict(row)
    try:
        spec = parse_specifications(resource['category'], resource.get('specifications'))
        resource['specifications'] = spec.to_dict()
    except (ValueError, TypeError) as e:
        logger.warning(f"Unreadable specifications on resource {resource['id']}: {e}")
        resource['specifications'] = {}
    return resource


# =============================================================================
# READ OPERATIONS
# =============================================================================

def get_resource_by_id(resource_id: int) -> dict:
    """
    Get resource by ID.

    Args:
        resource_id: Resource ID

    Returns:
        Resource dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM resources WHERE id = ?', (resource_id,))
    row = cursor.fetchone()
    return _row_to_resource(row) if row else None


def get_all_resources(category: str = None, status: str = None) -> list:
    """
    Get all resources.

    Args:
        category: Filter by category (optional)
        status: Filter by status (optional)

    Returns:
        List of resource dicts ordered by name
    """
    db = get_db()
    cursor = db.cursor()

    query = 'SELECT * FROM resources WHERE 1=1'
    params = []

    if category:
        query += ' AND category = ?'
        params.append(category)

    if status:
        query += ' AND status = ?'
        params.append(status)

    query += ' ORDER BY name'

    cursor.execute(query, params)
    return [_row_to_resource(row) for row in cursor.fetchall()]


def list_available_resources(category: str = None) -> list:
    """Resources whose status is 'available', optionally by category."""
    return get_all_resources(category=category, status='available')


# =============================================================================
# WRITE OPERATIONS
# =============================================================================

def _validate_resource_fields(fields: dict) -> None:
    if 'category' in fields and fields['category'] not in VALID_CATEGORIES:
        raise ValueError(f"Invalid category: {fields['category']}")
    if 'status' in fields and fields['status'] not in VALID_STATUSES:
        raise ValueError(f"Invalid status: {fields['status']}")
    if 'quantity' in fields:
        if not validate_non_negative_int(fields['quantity']):
            raise ValueError("Quantity must be a non-negative integer")
    if 'name' in fields and not (fields['name'] or '').strip():
        raise ValueError("Name is required")


def create_resource(name: str, category: str, quantity: int = 1, status: str = 'available',
                    description: str = '', location: str = '', image: str = '',
                    specifications=None) -> int:
    """
    Create new resource.

    Args:
        name: Display name
        category: rooms, equipment or av
        quantity: Number of interchangeable units (>= 0)
        status: available, reserved or maintenance
        description: Free text
        location: Building/room description
        image: Image URL
        specifications: Spec record, dict or JSON text

    Returns:
        New resource ID

    Raises:
        ValueError: Invalid category, status, quantity or specifications
    """
    _validate_resource_fields({
        'name': name, 'category': category, 'status': status, 'quantity': quantity
    })

    if not isinstance(specifications, (RoomSpec, EquipmentSpec, AVSpec)):
        specifications = parse_specifications(category, specifications)

    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        INSERT INTO resources
        (name, category, description, status, location, image, quantity, specifications)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
    ''', (name.strip(), category, description or '', status, location or '', image or '',
          quantity, serialize_specifications(specifications)))

    db.commit()
    logger.info(f"Resource {cursor.lastrowid} created: {name} ({category}, qty {quantity})")
    return cursor.lastrowid


def update_resource(resource_id: int, **kwargs) -> bool:
    """
    Update resource fields.

    Args:
        resource_id: Resource ID to update
        **kwargs: Fields to update (name, category, description, status,
                  location, image, quantity, specifications)

    Returns:
        True if updated successfully

    Raises:
        ValueError: Invalid field values
        QuantityBelowReservedError: quantity lower than the peak of
            overlapping pending/approved reservations
    """
    _validate_resource_fields(kwargs)

    if 'specifications' in kwargs:
        category = kwargs.get('category')
        if category is None:
            current = get_resource_by_id(resource_id)
            if not current:
                return False
            category = current['category']
        spec = kwargs['specifications']
        if not isinstance(spec, (RoomSpec, EquipmentSpec, AVSpec)):
            spec = parse_specifications(category, spec)
        kwargs['specifications'] = serialize_specifications(spec)

    allowed_fields = ['name', 'category', 'description', 'status', 'location',
                      'image', 'quantity', 'specifications']
    updates = []
    values = []

    for field_name in allowed_fields:
        if field_name in kwargs:
            updates.append(f'{field_name} = ?')
            values.append(kwargs[field_name])

    if not updates:
        return False

    updates.append("updated_at = strftime('%Y-%m-%dT%H:%M:%S', 'now')")
    values.append(resource_id)
    query = f'UPDATE resources SET {", ".join(updates)} WHERE id = ?'

    # Holding the write lock keeps bookings from landing between the check and the update
    with immediate_transaction() as cursor:
        if 'quantity' in kwargs:
            peak = peak_overlapping(resource_id)
            if kwargs['quantity'] < peak:
                logger.info(
                    f"Resource {resource_id} quantity {kwargs['quantity']} refused: "
                    f"{peak} active reservations overlap"
                )
                raise QuantityBelowReservedError(kwargs['quantity'], peak)
        cursor.execute(query, values)

    return cursor.rowcount > 0
