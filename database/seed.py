"""
Database seed data.
Initial data population for fresh database installations.
"""

from werkzeug.security import generate_password_hash


DEFAULT_ADMIN_EMAIL = 'admin@universidade.edu'
DEFAULT_ADMIN_PASSWORD = 'admin123'


def seed_database(db):
    """Insert initial seed data."""

    # 1. Booking settings (see models/config.py)
    config_data = [
        ('max_reservation_days', '30',
         'Antecedência máxima, em dias, para o início de uma reserva (0 = sem limite)'),
        ('max_concurrent_reservations', '5',
         'Reservas ativas simultâneas por usuário (0 = sem limite)'),
    ]

    for key, value, description in config_data:
        db.execute('''
            INSERT INTO app_config (key, value, description)
            VALUES (?, ?, ?)
        ''', (key, value, description))

    # 2. Default administrator
    db.execute('''
        INSERT INTO users (email, name, password_hash, role, department, active)
        VALUES (?, ?, ?, 'admin', ?, 1)
    ''', (
        DEFAULT_ADMIN_EMAIL,
        'Administrador',
        generate_password_hash(DEFAULT_ADMIN_PASSWORD),
        'TI'
    ))


def seed_demo_data(db):
    """
    Insert a small demo catalogue: resources, one package, one faculty user.
    Used by the ``flask seed-demo`` command.
    """
    resources = [
        ('Lab 101', 'rooms', 'Laboratório de informática', 'Bloco A', 1,
         '{"capacity": 30, "hasWifi": true, "hasProjector": true}'),
        ('Sala A', 'rooms', 'Sala de aula', 'Bloco B', 1,
         '{"capacity": 45, "hasWifi": true, "hasProjector": false}'),
        ('Carrinho de Projetores', 'av', 'Projetores portáteis', 'Almoxarifado', 3,
         '{"hasWifi": false}'),
        ('Microscópio', 'equipment', 'Microscópio óptico', 'Laboratório de Física', 2,
         '{"magnification": "1000x"}'),
        ('Microfone sem fio', 'av', 'Kit de microfone', 'Almoxarifado', 4, None),
    ]

    resource_ids = {}
    for name, category, description, location, quantity, specs in resources:
        cursor = db.execute('''
            INSERT INTO resources (name, category, description, location, quantity, specifications)
            VALUES (?, ?, ?, ?, ?, ?)
        ''', (name, category, description, location, quantity, specs))
        resource_ids[name] = cursor.lastrowid

    cursor = db.execute('''
        INSERT INTO users (email, name, password_hash, role, department, active)
        VALUES (?, ?, ?, 'faculty', ?, 1)
    ''', ('professor@universidade.edu', 'Professor Demo',
          generate_password_hash('professor123'), 'Física'))
    faculty_id = cursor.lastrowid

    cursor = db.execute('''
        INSERT INTO resource_packages (name, description, subject, created_by)
        VALUES (?, ?, ?, ?)
    ''', ('Kit Laboratório de Física', 'Sala e microscópio para aulas práticas',
          'Física', faculty_id))
    package_id = cursor.lastrowid

    for name in ('Sala A', 'Microscópio'):
        db.execute('''
            INSERT INTO package_resources (package_id, resource_id, quantity_needed)
            VALUES (?, ?, 1)
        ''', (package_id, resource_ids[name]))
