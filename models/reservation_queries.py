"""
Reservation query functions.
Handles reads, listing, overlap counting, and statistics.

Functions that may run inside an open write transaction (overlap and
concurrency counts, single reads) use the request connection directly and
never commit.
"""

from database import get_db
from utils.datetime_helpers import to_storage, utc_now

# Statuses that hold capacity
ACTIVE_STATUSES = ('pending', 'approved')

_RESERVATION_SELECT = '''
    SELECT r.*,
           res.name as resource_name,
           res.category as resource_category,
           u.name as user_name,
           u.email as user_email,
           p.name as package_name
    FROM reservations r
    JOIN resources res ON r.resource_id = res.id
    JOIN users u ON r.user_id = u.id
    LEFT JOIN resource_packages p ON r.package_id = p.id
'''


# =============================================================================
# SINGLE READS
# =============================================================================

def get_reservation_by_id(reservation_id: int) -> dict:
    """
    Get reservation by ID with resource and user names.

    Args:
        reservation_id: Reservation ID

    Returns:
        Reservation dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute(_RESERVATION_SELECT + ' WHERE r.id = ?', (reservation_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_reservations_by_booking_ref(booking_ref: str) -> list:
    """All rows of one package booking, in creation order."""
    db = get_db()
    cursor = db.cursor()
    cursor.execute(_RESERVATION_SELECT + ' WHERE r.booking_ref = ? ORDER BY r.id', (booking_ref,))
    return [dict(row) for row in cursor.fetchall()]


# =============================================================================
# LIST QUERIES
# =============================================================================

def get_reservations(
    user_id: int = None,
    status: str = None,
    resource_id: int = None,
    date_from=None,
    date_to=None
) -> list:
    """
    List reservations with filters, newest window first.

    Args:
        user_id: Only this user's reservations
        status: pending, approved or rejected
        resource_id: Only this resource
        date_from: Reservations ending after this instant
        date_to: Reservations starting before this instant

    Returns:
        list: Reservation dicts with resource/user names
    """
    db = get_db()
    cursor = db.cursor()

    query = _RESERVATION_SELECT + ' WHERE 1=1'
    params = []

    if user_id is not None:
        query += ' AND r.user_id = ?'
        params.append(user_id)

    if status:
        query += ' AND r.status = ?'
        params.append(status)

    if resource_id is not None:
        query += ' AND r.resource_id = ?'
        params.append(resource_id)

    if date_from:
        query += ' AND r.end_date > ?'
        params.append(to_storage(date_from))

    if date_to:
        query += ' AND r.start_date < ?'
        params.append(to_storage(date_to))

    query += ' ORDER BY r.start_date DESC, r.id DESC'

    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]


# =============================================================================
# OVERLAP COUNTS
# =============================================================================

def count_overlapping(resource_id: int, start_date, end_date,
                      exclude_id: int = None) -> int:
    """
    Count active reservations of a resource that overlap a window.

    Two windows overlap when existing.start < requested.end and
    existing.end > requested.start, so back-to-back windows do not collide.

    Args:
        resource_id: Resource ID
        start_date: Window start
        end_date: Window end
        exclude_id: Reservation to leave out (when re-checking an existing row)

    Returns:
        int: Number of pending/approved overlapping reservations
    """
    db = get_db()
    cursor = db.cursor()

    query = '''
        SELECT COUNT(*) as count
        FROM reservations
        WHERE resource_id = ?
          AND status IN ('pending', 'approved')
          AND start_date < ?
          AND end_date > ?
    '''
    params = [resource_id, to_storage(end_date), to_storage(start_date)]

    if exclude_id is not None:
        query += ' AND id != ?'
        params.append(exclude_id)

    cursor.execute(query, params)
    return cursor.fetchone()['count']


def peak_overlapping(resource_id: int) -> int:
    """
    Largest number of active reservations of a resource held at one instant.

    Concurrent use can only rise at a reservation's start, so the peak is
    the maximum, over active reservations, of those covering its start.
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT MAX((
            SELECT COUNT(*) FROM reservations b
            WHERE b.resource_id = a.resource_id
              AND b.status IN ('pending', 'approved')
              AND b.start_date <= a.start_date
              AND b.end_date > a.start_date
        )) as peak
        FROM reservations a
        WHERE a.resource_id = ?
          AND a.status IN ('pending', 'approved')
    ''', (resource_id,))
    row = cursor.fetchone()
    return row['peak'] or 0


def count_user_concurrent_bookings(user_id: int, start_date, end_date,
                                   exclude_booking_ref: str = None) -> int:
    """
    Count a user's active bookings whose windows overlap a window.

    Rows sharing a booking_ref (one package booking) count once.

    Args:
        user_id: User ID
        start_date: Window start
        end_date: Window end
        exclude_booking_ref: Booking whose rows are left out

    Returns:
        int: Number of distinct bookings
    """
    db = get_db()
    cursor = db.cursor()

    query = '''
        SELECT COUNT(DISTINCT COALESCE(booking_ref, 'reservation-' || id)) as count
        FROM reservations
        WHERE user_id = ?
          AND status IN ('pending', 'approved')
          AND start_date < ?
          AND end_date > ?
    '''
    params = [user_id, to_storage(end_date), to_storage(start_date)]

    if exclude_booking_ref:
        query += ' AND (booking_ref IS NULL OR booking_ref != ?)'
        params.append(exclude_booking_ref)

    cursor.execute(query, params)
    return cursor.fetchone()['count']


# =============================================================================
# STATISTICS
# =============================================================================

def get_reservation_stats(date_from=None, date_to=None, months: int = 6,
                          top: int = 5) -> dict:
    """
    Get reservation usage statistics.

    Args:
        date_from: Only reservations created at/after this instant
        date_to: Only reservations created before this instant
        months: Number of months in the monthly trend (ending this month)
        top: Number of most used resources to return

    Returns:
        dict: total, by_status, approval_rate, resource_utilization_rate,
              monthly, top_resources
    """
    db = get_db()
    cursor = db.cursor()

    where = ' WHERE 1=1'
    params = []
    if date_from:
        where += ' AND r.created_at >= ?'
        params.append(to_storage(date_from))
    if date_to:
        where += ' AND r.created_at < ?'
        params.append(to_storage(date_to))

    # By status
    cursor.execute(f'''
        SELECT r.status, COUNT(*) as count
        FROM reservations r
        {where}
        GROUP BY r.status
    ''', params)
    by_status = {row['status']: row['count'] for row in cursor.fetchall()}
    total = sum(by_status.values())
    approved = by_status.get('approved', 0)

    # Resource utilization: share of resources with at least one approved reservation
    cursor.execute(f'''
        SELECT COUNT(DISTINCT r.resource_id) as used
        FROM reservations r
        {where} AND r.status = 'approved'
    ''', params)
    used_resources = cursor.fetchone()['used']
    cursor.execute('SELECT COUNT(*) as total FROM resources')
    total_resources = cursor.fetchone()['total']

    # Monthly trend by creation month
    cursor.execute(f'''
        SELECT substr(r.created_at, 1, 7) as month, COUNT(*) as count
        FROM reservations r
        {where}
        GROUP BY month
    ''', params)
    counts_by_month = {row['month']: row['count'] for row in cursor.fetchall()}

    now = utc_now()
    year, month = now.year, now.month
    monthly = []
    for _ in range(months):
        key = f'{year:04d}-{month:02d}'
        monthly.append({'month': key, 'count': counts_by_month.get(key, 0)})
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    monthly.reverse()

    # Most used resources (approved reservations)
    cursor.execute(f'''
        SELECT res.id, res.name, res.category, res.location,
               COUNT(r.id) as usage_count
        FROM resources res
        LEFT JOIN reservations r
            ON r.resource_id = res.id AND r.status = 'approved'
            {where.replace(' WHERE 1=1', '')}
        GROUP BY res.id
        ORDER BY usage_count DESC, res.name
        LIMIT ?
    ''', params + [top])
    top_resources = [dict(row) for row in cursor.fetchall()]

    return {
        'total': total,
        'by_status': by_status,
        'approved': approved,
        'pending': by_status.get('pending', 0),
        'rejected': by_status.get('rejected', 0),
        'approval_rate': round(approved * 100.0 / total, 2) if total else 0.0,
        'resource_utilization_rate': (
            round(used_resources * 100.0 / total_resources, 2) if total_resources else 0.0
        ),
        'monthly': monthly,
        'top_resources': top_resources,
    }
