"""
Tests for resource availability: overlap rules, rejected exclusion,
quantity accounting, maintenance and the catalogue map.
"""

import pytest

from models.exceptions import ResourceNotFoundError


def _book(app, user_id, resource_id, start, end, purpose='Aula'):
    from models.reservation import create_reservation

    with app.app_context():
        return create_reservation(user_id, resource_id, start, end, purpose)


class TestOverlap:
    """Half-open window overlap: [s1,e1) and [s2,e2) conflict iff s1 < e2 and s2 < e1."""

    def test_overlapping_window_counts(self, app, users, make_resource, window):
        from models.reservation import check_availability

        lab = make_resource('Lab 101', quantity=1)
        _book(app, users['student'], lab, *window(start_hour=10, hours=1))

        with app.app_context():
            result = check_availability(lab, *window(start_hour=10.5, hours=1))

        assert result['has_conflict'] is True
        assert result['reserved_slots'] == 1
        assert result['available_slots'] == 0
        assert result['total_quantity'] == 1

    def test_back_to_back_windows_do_not_conflict(self, app, users, make_resource, window):
        from models.reservation import check_availability

        lab = make_resource('Lab 101', quantity=1)
        _book(app, users['student'], lab, *window(start_hour=10, hours=1))

        with app.app_context():
            after = check_availability(lab, *window(start_hour=11, hours=1))
            before = check_availability(lab, *window(start_hour=9, hours=1))

        assert after['has_conflict'] is False
        assert after['reserved_slots'] == 0
        assert before['has_conflict'] is False

    def test_enclosing_and_enclosed_windows_conflict(self, app, users, make_resource, window):
        from models.reservation import check_availability

        lab = make_resource('Lab 101', quantity=1)
        _book(app, users['student'], lab, *window(start_hour=10, hours=2))

        with app.app_context():
            inner = check_availability(lab, *window(start_hour=10.5, hours=0.5))
            outer = check_availability(lab, *window(start_hour=8, hours=6))

        assert inner['has_conflict'] is True
        assert outer['has_conflict'] is True

    def test_other_day_does_not_count(self, app, users, make_resource, window):
        from models.reservation import check_availability

        lab = make_resource('Lab 101', quantity=1)
        _book(app, users['student'], lab, *window(day=2))

        with app.app_context():
            result = check_availability(lab, *window(day=3))

        assert result['has_conflict'] is False

    def test_exclude_reservation_id(self, app, users, make_resource, window):
        from models.reservation import check_availability

        lab = make_resource('Lab 101', quantity=1)
        reservation = _book(app, users['student'], lab, *window())

        with app.app_context():
            result = check_availability(lab, *window(), exclude_reservation_id=reservation['id'])

        assert result['has_conflict'] is False
        assert result['reserved_slots'] == 0


class TestRejectedExclusion:
    """Rejected reservations never hold a unit."""

    def test_rejected_reservation_frees_the_unit(self, app, users, make_resource, window):
        from models.reservation import check_availability, update_reservation_status

        lab = make_resource('Lab 101', quantity=1)
        reservation = _book(app, users['student'], lab, *window())

        with app.app_context():
            update_reservation_status(reservation['id'], 'rejected', changed_by=users['faculty'])
            result = check_availability(lab, *window())

        assert result['has_conflict'] is False
        assert result['reserved_slots'] == 0

    def test_approved_reservation_still_holds(self, app, users, make_resource, window):
        from models.reservation import check_availability, update_reservation_status

        lab = make_resource('Lab 101', quantity=1)
        reservation = _book(app, users['student'], lab, *window())

        with app.app_context():
            update_reservation_status(reservation['id'], 'approved', changed_by=users['faculty'])
            result = check_availability(lab, *window())

        assert result['reserved_slots'] == 1
        assert result['has_conflict'] is True


class TestQuantity:
    """Quantity-bearing resources."""

    def test_units_are_counted_down(self, app, users, make_resource, window):
        from models.reservation import check_availability

        cart = make_resource('Projector Cart', quantity=3, category='equipment')
        _book(app, users['student'], cart, *window())
        _book(app, users['faculty'], cart, *window())

        with app.app_context():
            result = check_availability(cart, *window())

        assert result['has_conflict'] is False
        assert result['reserved_slots'] == 2
        assert result['available_slots'] == 1
        assert result['total_quantity'] == 3

    def test_zero_quantity_always_conflicts(self, app, make_resource, window):
        from models.reservation import check_availability

        empty = make_resource('Empty Shelf', quantity=0, category='equipment')

        with app.app_context():
            result = check_availability(empty, *window())

        assert result == {
            'resource_id': empty,
            'resource_name': 'Empty Shelf',
            'has_conflict': True,
            'total_quantity': 0,
            'reserved_slots': 0,
            'available_slots': 0,
        }

    def test_maintenance_offers_no_units(self, app, make_resource, window):
        from models.reservation import check_availability

        lab = make_resource('Lab 202', quantity=4, status='maintenance')

        with app.app_context():
            result = check_availability(lab, *window())

        assert result['has_conflict'] is True
        assert result['total_quantity'] == 0
        assert result['available_slots'] == 0
        assert result['status'] == 'maintenance'

    def test_unknown_resource(self, app, window):
        from models.reservation import check_availability

        with app.app_context():
            with pytest.raises(ResourceNotFoundError) as exc_info:
                check_availability(9999, *window())

        assert exc_info.value.status_code == 404
        assert exc_info.value.details == {'resource_id': 9999}


class TestAvailabilityMap:
    """Availability of the whole catalogue for one window."""

    def test_map_lists_every_resource(self, app, users, make_resource, window):
        from models.reservation import get_availability_map

        lab = make_resource('Lab 101', quantity=1, location='Bloco A')
        cart = make_resource('Projector Cart', quantity=3, category='equipment')
        make_resource('Lab 202', quantity=1, status='maintenance')
        _book(app, users['student'], lab, *window())
        _book(app, users['student'], cart, *window())

        with app.app_context():
            entries = {e['resource_name']: e for e in get_availability_map(*window())}

        assert set(entries) == {'Lab 101', 'Projector Cart', 'Lab 202'}
        assert entries['Lab 101']['has_conflict'] is True
        assert entries['Lab 101']['location'] == 'Bloco A'
        assert entries['Projector Cart']['available_slots'] == 2
        assert entries['Projector Cart']['category'] == 'equipment'
        assert entries['Lab 202']['status'] == 'maintenance'

    def test_map_agrees_with_single_check(self, app, users, make_resource, window):
        from models.reservation import check_availability, get_availability_map

        cart = make_resource('Projector Cart', quantity=3, category='equipment')
        _book(app, users['student'], cart, *window(start_hour=10, hours=2))
        _book(app, users['faculty'], cart, *window(start_hour=11, hours=2))

        with app.app_context():
            single = check_availability(cart, *window(start_hour=11, hours=1))
            mapped = get_availability_map(*window(start_hour=11, hours=1))[0]

        for key in ('has_conflict', 'total_quantity', 'reserved_slots', 'available_slots'):
            assert mapped[key] == single[key]

    def test_map_category_filter(self, app, make_resource, window):
        from models.reservation import get_availability_map

        make_resource('Lab 101')
        make_resource('Projector Cart', quantity=3, category='equipment')

        with app.app_context():
            entries = get_availability_map(*window(), category='equipment')

        assert [e['resource_name'] for e in entries] == ['Projector Cart']
