"""
User model and data access functions.
Handles user authentication, creation, and Flask-Login integration.
"""

from werkzeug.security import generate_password_hash, check_password_hash
from database import get_db

VALID_ROLES = ('student', 'faculty', 'admin')


class User:
    """
    User class for Flask-Login integration.
    Wraps database row dictionary with required Flask-Login properties.
    """

    def __init__(self, user_dict):
        """
        Initialize User from database row.

        Args:
            user_dict: Dictionary with user data from database
        """
        self.id = user_dict['id']
        self.email = user_dict['email']
        self.name = user_dict['name']
        self.role = user_dict['role']
        self.department = user_dict.get('department', '')
        self.active = user_dict['active']
        self.created_at = user_dict['created_at']
        self.last_login = user_dict.get('last_login')

    @property
    def is_authenticated(self):
        """Required by Flask-Login."""
        return True

    @property
    def is_active(self):
        """Required by Flask-Login."""
        return self.active == 1

    @property
    def is_anonymous(self):
        """Required by Flask-Login."""
        return False

    def get_id(self):
        """Required by Flask-Login. Returns user ID as unicode string."""
        return str(self.id)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'role': self.role,
            'department': self.department,
            'last_login': self.last_login,
        }


def get_user_by_id(user_id: int) -> dict:
    """
    Get user by ID.

    Args:
        user_id: User ID

    Returns:
        User dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM users WHERE id = ?', (user_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_user_by_email(email: str) -> dict:
    """
    Get user by email (case-insensitive).

    Args:
        email: Email to search for

    Returns:
        User dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM users WHERE email = ? COLLATE NOCASE', (email,))
    row = cursor.fetchone()
    return dict(row) if row else None


def create_user(email: str, password: str, name: str, role: str = 'student',
                department: str = '') -> int:
    """
    Create new user with hashed password.

    Args:
        email: Unique email
        password: Plain text password (will be hashed)
        name: Display name
        role: One of student, faculty, admin
        department: Academic department

    Returns:
        New user ID

    Raises:
        ValueError: If role is unknown
        sqlite3.IntegrityError if email already exists
    """
    if role not in VALID_ROLES:
        raise ValueError(f"Invalid role: {role}")

    db = get_db()
    password_hash = generate_password_hash(password)

    cursor = db.cursor()
    cursor.execute('''
        INSERT INTO users (email, name, password_hash, role, department)
        VALUES (?, ?, ?, ?, ?)
    ''', (email.strip().lower(), name, password_hash, role, department or ''))

    db.commit()
    return cursor.lastrowid


def update_last_login(user_id: int) -> None:
    """
    Update last login timestamp.

    Args:
        user_id: User ID
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        UPDATE users SET last_login = strftime('%Y-%m-%dT%H:%M:%S', 'now')
        WHERE id = ?
    ''', (user_id,))
    db.commit()


def check_password(user_dict: dict, password: str) -> bool:
    """
    Verify password against stored hash.

    Args:
        user_dict: User dictionary with password_hash
        password: Plain text password to check

    Returns:
        True if password matches
    """
    return check_password_hash(user_dict['password_hash'], password)
