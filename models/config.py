"""
Application config data access functions.
Handles reading and writing app_config key-value pairs and the booking
settings built on top of them.
"""

import logging
from typing import Optional, Dict, Any
from database import get_db, immediate_transaction
from utils.validators import validate_non_negative_int

logger = logging.getLogger(__name__)

# Booking settings: key -> (default, description)
BOOKING_SETTINGS = {
    'max_reservation_days': (
        30, 'Antecedência máxima, em dias, para o início de uma reserva (0 = sem limite)'
    ),
    'max_concurrent_reservations': (
        5, 'Reservas ativas simultâneas por usuário (0 = sem limite)'
    ),
}


def get_config(key: str, default: str = None) -> Optional[str]:
    """
    Get a single config value by key.

    Args:
        key: Config key name
        default: Default value if key not found

    Returns:
        Config value string or default
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT value FROM app_config WHERE key = ?', (key,))
    row = cursor.fetchone()
    return row['value'] if row else default


def get_config_int(key: str, default: int = 0) -> int:
    """
    Get a config value as integer.

    Args:
        key: Config key name
        default: Default value if key not found or invalid

    Returns:
        Config value as integer
    """
    value = get_config(key)
    if value is None:
        return default
    try:
        return int(value)
    except (ValueError, TypeError):
        return default


def _write_config(cursor, key: str, value: str, description: str = None) -> None:
    """Insert or update one key through the given cursor, without committing."""
    cursor.execute('''
        INSERT INTO app_config (key, value, description)
        VALUES (?, ?, ?)
        ON CONFLICT(key) DO UPDATE SET
            value = excluded.value,
            updated_at = strftime('%Y-%m-%dT%H:%M:%S', 'now')
    ''', (key, value, description))


# =============================================================================
# BOOKING SETTINGS
# =============================================================================

def get_booking_settings() -> Dict[str, Any]:
    """
    Get the booking policy settings as typed values.

    Returns:
        Dict with max_reservation_days and max_concurrent_reservations
    """
    return {
        key: get_config_int(key, default)
        for key, (default, _description) in BOOKING_SETTINGS.items()
    }


def update_booking_settings(**values) -> Dict[str, Any]:
    """
    Update one or more booking settings.

    Args:
        **values: Setting name -> non-negative integer (0 disables the rule)

    Returns:
        The full settings dict after the update

    Raises:
        ValueError: Unknown setting or invalid value (nothing is written)
    """
    for key, value in values.items():
        if key not in BOOKING_SETTINGS:
            raise ValueError(f"Unknown booking setting: {key}")
        if not validate_non_negative_int(value):
            raise ValueError(f"{key} must be a non-negative integer")

    with immediate_transaction() as cursor:
        for key, value in values.items():
            _write_config(cursor, key, str(value), BOOKING_SETTINGS[key][1])

    for key, value in values.items():
        logger.info("Booking setting %s set to %s", key, value)

    return get_booking_settings()
