"""
Availability checking for quantity-bearing resources.
Answers "how many units of a resource are free during a window".
"""

import logging

from database import get_db
from .exceptions import ResourceNotFoundError
from .resource import get_resource_by_id
from .reservation_queries import count_overlapping
from utils.datetime_helpers import to_storage

logger = logging.getLogger(__name__)


def _availability(resource: dict, reserved_slots: int) -> dict:
    """Build the availability breakdown of one resource."""
    in_maintenance = resource['status'] == 'maintenance'
    total_quantity = 0 if in_maintenance else resource['quantity']
    available_slots = max(0, total_quantity - reserved_slots)

    result = {
        'resource_id': resource['id'],
        'resource_name': resource['name'],
        'has_conflict': available_slots <= 0,
        'total_quantity': total_quantity,
        'reserved_slots': reserved_slots,
        'available_slots': available_slots,
    }
    if in_maintenance:
        result['status'] = 'maintenance'
    return result


# =============================================================================
# SINGLE RESOURCE
# =============================================================================

def check_availability(
    resource_id: int,
    start_date,
    end_date,
    exclude_reservation_id: int = None
) -> dict:
    """
    Check how many units of a resource are free during a window.

    Pending and approved reservations hold a unit; rejected ones do not.
    A resource under maintenance offers no units. Window ordering is not
    validated here.

    Args:
        resource_id: Resource ID
        start_date: Window start (ISO string or datetime)
        end_date: Window end (ISO string or datetime)
        exclude_reservation_id: Reservation to ignore in the count

    Returns:
        dict: {
            'resource_id': int,
            'resource_name': str,
            'has_conflict': bool,
            'total_quantity': int,
            'reserved_slots': int,
            'available_slots': int,
            'status': 'maintenance'  # only when under maintenance
        }

    Raises:
        ResourceNotFoundError: If the resource does not exist
    """
    resource = get_resource_by_id(resource_id)
    if not resource:
        raise ResourceNotFoundError(resource_id)

    reserved_slots = count_overlapping(
        resource_id, start_date, end_date, exclude_id=exclude_reservation_id
    )
    return _availability(resource, reserved_slots)


# =============================================================================
# WHOLE CATALOGUE
# =============================================================================

def get_availability_map(start_date, end_date, category: str = None) -> list:
    """
    Get the availability of every resource for one window.
    More efficient than calling check_availability() in a loop.

    Args:
        start_date: Window start
        end_date: Window end
        category: Only this category (optional)

    Returns:
        list: One availability dict per resource (see check_availability),
              plus category and location, ordered by name
    """
    db = get_db()
    cursor = db.cursor()

    query = '''
        SELECT res.id, res.name, res.category, res.location, res.status, res.quantity,
               COUNT(r.id) as reserved_slots
        FROM resources res
        LEFT JOIN reservations r
            ON r.resource_id = res.id
           AND r.status IN ('pending', 'approved')
           AND r.start_date < ?
           AND r.end_date > ?
        WHERE 1=1
    '''
    params = [to_storage(end_date), to_storage(start_date)]

    if category:
        query += ' AND res.category = ?'
        params.append(category)

    query += ' GROUP BY res.id ORDER BY res.name'

    cursor.execute(query, params)

    availability = []
    for row in cursor.fetchall():
        resource = dict(row)
        entry = _availability(resource, resource['reserved_slots'])
        entry['category'] = resource['category']
        entry['location'] = resource['location']
        availability.append(entry)

    return availability
