"""
Tests for the JSON API: authentication, roles, status codes and the
response envelope.
"""

import io

import pytest
from openpyxl import load_workbook

from conftest import STUDENT_EMAIL, STUDENT_PASSWORD, login


@pytest.fixture
def other_student_client(app):
    """A second student, to check ownership rules."""
    from models.user import create_user

    with app.app_context():
        create_user('outro@universidade.edu', 'outro123', 'Outro Aluno', role='student')
    return login(app.test_client(), 'outro@universidade.edu', 'outro123')


def _reserve(client, resource_id, start, end, purpose='Aula', **extra):
    body = {'resource_id': resource_id, 'start_date': start, 'end_date': end, 'purpose': purpose}
    body.update(extra)
    return client.post('/api/reservations', json=body)


class TestAuth:
    """Session login for the JSON API."""

    def test_login_returns_profile(self, client):
        response = client.post('/auth/login', json={
            'email': STUDENT_EMAIL.upper(), 'password': STUDENT_PASSWORD
        })
        body = response.get_json()

        assert response.status_code == 200
        assert body['success'] is True
        assert body['data']['email'] == STUDENT_EMAIL
        assert body['data']['role'] == 'student'
        assert 'password_hash' not in body['data']

    def test_wrong_password(self, client):
        response = client.post('/auth/login', json={
            'email': STUDENT_EMAIL, 'password': 'errada'
        })
        assert response.status_code == 401
        assert response.get_json()['success'] is False

    def test_missing_fields(self, client):
        response = client.post('/auth/login', json={'email': STUDENT_EMAIL})
        body = response.get_json()

        assert response.status_code == 400
        assert 'password' in body['errors']

    def test_me_requires_login(self, client):
        assert client.get('/auth/me').status_code == 401

    def test_me_and_logout(self, student_client):
        assert student_client.get('/auth/me').get_json()['data']['email'] == STUDENT_EMAIL
        assert student_client.post('/auth/logout').status_code == 200
        assert student_client.get('/auth/me').status_code == 401

    def test_inactive_account(self, app, client):
        from database import get_db

        with app.app_context():
            db = get_db()
            db.execute('UPDATE users SET active = 0 WHERE email = ?', (STUDENT_EMAIL,))
            db.commit()

        response = client.post('/auth/login', json={
            'email': STUDENT_EMAIL, 'password': STUDENT_PASSWORD
        })
        assert response.status_code == 403


class TestResourceRoutes:
    """Catalogue and admin maintenance."""

    def test_catalogue_requires_login(self, client):
        assert client.get('/api/resources').status_code == 401

    def test_list_and_detail(self, student_client, make_resource):
        lab = make_resource('Lab 101')
        make_resource('Projector Cart', quantity=3, category='equipment')

        listing = student_client.get('/api/resources?category=equipment').get_json()
        detail = student_client.get(f'/api/resources/{lab}').get_json()

        assert [r['name'] for r in listing['data']] == ['Projector Cart']
        assert detail['data']['name'] == 'Lab 101'
        assert student_client.get('/api/resources/9999').status_code == 404

    def test_admin_creates_resource(self, admin_client):
        response = admin_client.post('/api/resources', json={
            'name': 'Sala 12',
            'category': 'rooms',
            'quantity': 1,
            'location': 'Bloco B',
            'specifications': {'capacity': 40, 'hasWifi': True}
        })
        body = response.get_json()

        assert response.status_code == 201
        assert body['data']['specifications'] == {
            'capacity': 40, 'hasWifi': True, 'hasProjector': False
        }

    def test_zero_quantity_is_accepted(self, admin_client):
        response = admin_client.post('/api/resources', json={
            'name': 'Prateleira', 'category': 'equipment', 'quantity': 0
        })
        assert response.status_code == 201
        assert response.get_json()['data']['quantity'] == 0

    def test_negative_quantity_is_rejected(self, admin_client):
        response = admin_client.post('/api/resources', json={
            'name': 'Sala 12', 'category': 'rooms', 'quantity': -1
        })
        assert response.status_code == 400
        assert 'quantity' in response.get_json()['errors']

    def test_students_cannot_manage_resources(self, student_client, make_resource):
        lab = make_resource('Lab 101')

        assert student_client.post('/api/resources', json={
            'name': 'Sala 12', 'category': 'rooms'
        }).status_code == 403
        assert student_client.put(f'/api/resources/{lab}', json={
            'status': 'maintenance'
        }).status_code == 403

    def test_admin_updates_resource(self, admin_client, make_resource):
        lab = make_resource('Lab 101')

        response = admin_client.put(f'/api/resources/{lab}', json={
            'status': 'maintenance', 'ignored': 'x'
        })

        assert response.status_code == 200
        assert response.get_json()['data']['status'] == 'maintenance'
        assert admin_client.put(f'/api/resources/{lab}', json={
            'quantity': -2
        }).status_code == 400
        assert admin_client.put('/api/resources/9999', json={'name': 'X'}).status_code == 404

    def test_quantity_below_active_bookings_is_refused(self, admin_client, student_client,
                                                       make_resource, window):
        cart = make_resource('Projector Cart', quantity=2, category='equipment')
        start, end = window()
        _reserve(student_client, cart, start, end)
        _reserve(student_client, cart, start, end)

        response = admin_client.put(f'/api/resources/{cart}', json={'quantity': 1})
        body = response.get_json()

        assert response.status_code == 409
        assert body['success'] is False
        assert body['peak_reserved'] == 2
        assert admin_client.get(f'/api/resources/{cart}').get_json()['data']['quantity'] == 2

    def test_availability_map(self, student_client, make_resource, window):
        lab = make_resource('Lab 101')
        start, end = window()
        _reserve(student_client, lab, start, end)

        response = student_client.get(
            f'/api/resources/availability?start_date={start}&end_date={end}'
        )
        body = response.get_json()

        assert response.status_code == 200
        assert body['start_date'] == start
        assert body['data'][0]['has_conflict'] is True

    def test_availability_map_needs_a_window(self, student_client):
        response = student_client.get('/api/resources/availability')
        assert response.status_code == 400
        assert response.get_json()['success'] is False


class TestReservationRoutes:
    """Reservation creation, listing and review."""

    def test_create(self, student_client, make_resource, window):
        lab = make_resource('Lab 101')
        response = _reserve(student_client, lab, *window(), attendees=12)
        body = response.get_json()

        assert response.status_code == 201
        assert body['success'] is True
        assert body['data']['status'] == 'pending'
        assert body['data']['attendees'] == 12

    def test_conflict_reports_numbers(self, student_client, faculty_client, make_resource,
                                      window):
        lab = make_resource('Lab 101')
        _reserve(student_client, lab, *window(start_hour=10, hours=1))

        response = _reserve(faculty_client, lab, *window(start_hour=10.5, hours=1))
        body = response.get_json()

        assert response.status_code == 409
        assert body['success'] is False
        assert body['available_slots'] == 0
        assert body['total_quantity'] == 1
        assert body['reserved_slots'] == 1

    def test_invalid_window(self, student_client, make_resource, window):
        lab = make_resource('Lab 101')
        start, end = window()

        response = _reserve(student_client, lab, end, start)
        assert response.status_code == 400
        assert response.get_json()['end_date'] == start

    def test_missing_fields(self, student_client):
        response = student_client.post('/api/reservations', json={'purpose': 'Aula'})
        errors = response.get_json()['errors']

        assert response.status_code == 400
        assert {'resource_id', 'start_date', 'end_date'} <= set(errors)

    def test_unknown_resource(self, student_client, window):
        assert _reserve(student_client, 9999, *window()).status_code == 404

    def test_check_availability(self, student_client, make_resource, window):
        cart = make_resource('Projector Cart', quantity=3, category='equipment')
        start, end = window()
        _reserve(student_client, cart, start, end)

        response = student_client.post('/api/reservations/check-availability', json={
            'resource_id': cart, 'start_date': start, 'end_date': end
        })
        data = response.get_json()['data']

        assert response.status_code == 200
        assert data['has_conflict'] is False
        assert data['reserved_slots'] == 1
        assert data['available_slots'] == 2

    def test_students_see_only_their_own(self, student_client, other_student_client,
                                         faculty_client, make_resource, window):
        lab = make_resource('Lab 101')
        mine = _reserve(student_client, lab, *window(day=2)).get_json()['data']
        theirs = _reserve(other_student_client, lab, *window(day=3)).get_json()['data']

        listed = student_client.get('/api/reservations').get_json()['data']
        everything = faculty_client.get('/api/reservations').get_json()['data']

        assert [r['id'] for r in listed] == [mine['id']]
        assert {r['id'] for r in everything} == {mine['id'], theirs['id']}
        assert student_client.get(f"/api/reservations/{theirs['id']}").status_code == 403
        assert student_client.get(f"/api/reservations/{mine['id']}").status_code == 200
        assert faculty_client.get(f"/api/reservations/{theirs['id']}").status_code == 200

    def test_list_rejects_unknown_status(self, student_client):
        assert student_client.get('/api/reservations?status=cancelled').status_code == 400

    def test_review_flow(self, student_client, faculty_client, make_resource, window):
        lab = make_resource('Lab 101')
        reservation = _reserve(student_client, lab, *window()).get_json()['data']
        url = f"/api/reservations/{reservation['id']}/status"

        assert student_client.post(url, json={'status': 'approved'}).status_code == 403

        rejected = faculty_client.post(url, json={'status': 'rejected', 'comments': 'Prova'})
        assert rejected.status_code == 200
        assert rejected.get_json()['data']['status'] == 'rejected'

        again = faculty_client.post(url, json={'status': 'approved'})
        assert again.status_code == 409
        assert again.get_json()['current_status'] == 'rejected'

        history = student_client.get(f"/api/reservations/{reservation['id']}/history")
        assert [h['new_status'] for h in history.get_json()['data']] == ['pending', 'rejected']

    def test_review_unknown_reservation(self, faculty_client):
        response = faculty_client.post('/api/reservations/9999/status', json={'status': 'approved'})
        assert response.status_code == 404


class TestPackageRoutes:
    """Package management and booking."""

    def test_admin_creates_package(self, admin_client, make_resource):
        room = make_resource('Room A')
        scope = make_resource('Microscope', quantity=2, category='equipment')

        response = admin_client.post('/api/packages', json={
            'name': 'Physics Lab Kit', 'subject': 'Física', 'resource_ids': [room, scope, room]
        })
        body = response.get_json()

        assert response.status_code == 201
        assert [m['resource_id'] for m in body['data']['resources']] == [room, scope]

    def test_package_validation(self, admin_client, student_client):
        assert admin_client.post('/api/packages', json={
            'name': 'Kit', 'resource_ids': 'abc'
        }).status_code == 400
        assert admin_client.post('/api/packages', json={
            'name': 'Kit', 'resource_ids': [9999]
        }).status_code == 400
        assert student_client.post('/api/packages', json={'name': 'Kit'}).status_code == 403

    def test_book_package(self, admin_client, faculty_client, make_resource, window):
        room = make_resource('Room A')
        scope = make_resource('Microscope', quantity=2, category='equipment')
        package = admin_client.post('/api/packages', json={
            'name': 'Physics Lab Kit', 'resource_ids': [room, scope]
        }).get_json()['data']
        start, end = window()

        response = faculty_client.post(f"/api/packages/{package['id']}/reservations", json={
            'start_date': start, 'end_date': end, 'purpose': 'Aula prática'
        })
        body = response.get_json()

        assert response.status_code == 201
        assert len(body['data']) == 2
        assert all(r['purpose'] == 'Aula prática (Pacote)' for r in body['data'])

    def test_package_conflict(self, admin_client, student_client, faculty_client,
                              make_resource, window):
        room = make_resource('Room A')
        scope = make_resource('Microscope', quantity=2, category='equipment')
        package = admin_client.post('/api/packages', json={
            'name': 'Physics Lab Kit', 'resource_ids': [room, scope]
        }).get_json()['data']
        start, end = window()
        _reserve(student_client, room, start, end)

        response = faculty_client.post(f"/api/packages/{package['id']}/reservations", json={
            'start_date': start, 'end_date': end, 'purpose': 'Aula prática'
        })
        body = response.get_json()

        assert response.status_code == 409
        assert body['conflicting_resource_names'] == ['Room A']
        assert body['conflicts'][0]['reserved_slots'] == 1
        assert len(faculty_client.get('/api/reservations').get_json()['data']) == 1

    def test_unknown_package(self, faculty_client, window):
        start, end = window()
        response = faculty_client.post('/api/packages/9999/reservations', json={
            'start_date': start, 'end_date': end, 'purpose': 'Aula'
        })
        assert response.status_code == 404

    def test_delete_package(self, admin_client, make_resource):
        package = admin_client.post('/api/packages', json={
            'name': 'Kit', 'resource_ids': [make_resource('Room A')]
        }).get_json()['data']

        assert admin_client.delete(f"/api/packages/{package['id']}").status_code == 200
        assert admin_client.get(f"/api/packages/{package['id']}").status_code == 404
        assert admin_client.delete(f"/api/packages/{package['id']}").status_code == 404


class TestSettingsRoutes:
    """Booking settings."""

    def test_read_settings(self, student_client):
        data = student_client.get('/api/settings/booking').get_json()['data']
        assert data == {'max_reservation_days': 30, 'max_concurrent_reservations': 5}

    def test_admin_updates_settings(self, admin_client):
        response = admin_client.put('/api/settings/booking', json={'max_concurrent_reservations': 0})

        assert response.status_code == 200
        assert response.get_json()['data']['max_concurrent_reservations'] == 0
        assert response.get_json()['data']['max_reservation_days'] == 30

    def test_invalid_settings(self, admin_client, faculty_client):
        assert admin_client.put('/api/settings/booking', json={
            'max_reservation_days': -3
        }).status_code == 400
        assert admin_client.put('/api/settings/booking', json={}).status_code == 400
        assert faculty_client.put('/api/settings/booking', json={
            'max_reservation_days': 10
        }).status_code == 403

    def test_settings_change_is_audited(self, app, admin_client, users):
        from models.audit_log import get_audit_logs

        admin_client.put('/api/settings/booking', json={'max_reservation_days': 60})

        with app.app_context():
            logs = get_audit_logs(entity_type='settings')

        assert logs[0]['action'] == 'UPDATE'
        assert logs[0]['user_id'] == users['admin']
        assert logs[0]['changes']['before']['max_reservation_days'] == 30
        assert logs[0]['changes']['after']['max_reservation_days'] == 60


class TestReportRoutes:
    """Usage report and Excel export."""

    def test_usage_report(self, student_client, faculty_client, make_resource, window):
        lab = make_resource('Lab 101')
        reservation = _reserve(student_client, lab, *window()).get_json()['data']
        faculty_client.post(f"/api/reservations/{reservation['id']}/status",
                            json={'status': 'approved'})

        response = faculty_client.get('/api/reports/usage?months=3')
        data = response.get_json()['data']

        assert response.status_code == 200
        assert data['total'] == 1
        assert data['approved'] == 1
        assert data['approval_rate'] == 100.0
        assert data['resource_utilization_rate'] == 100.0
        assert len(data['monthly']) == 3
        assert data['monthly'][-1]['count'] == 1
        assert data['top_resources'][0]['name'] == 'Lab 101'

    def test_usage_report_permissions(self, student_client, faculty_client):
        assert student_client.get('/api/reports/usage').status_code == 403
        assert faculty_client.get('/api/reports/usage?months=0').status_code == 400

    def test_excel_export(self, admin_client, student_client, make_resource, window):
        lab = make_resource('Lab 101')
        _reserve(student_client, lab, *window(), purpose='Aula de química')

        response = admin_client.get('/api/reports/reservations.xlsx')

        assert response.status_code == 200
        assert response.mimetype == (
            'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
        )
        sheet = load_workbook(io.BytesIO(response.data)).active
        assert sheet.title == 'Reservas'
        assert sheet.cell(row=4, column=2).value == 'Recurso'
        assert sheet.cell(row=5, column=2).value == 'Lab 101'
        assert sheet.cell(row=5, column=6).value == 'Aula de química'
        assert sheet.cell(row=5, column=7).value == 'Pendente'

    def test_excel_export_is_admin_only(self, faculty_client):
        assert faculty_client.get('/api/reports/reservations.xlsx').status_code == 403
