"""
Tests for the reservation review lifecycle: pending -> approved | rejected.
"""

import pytest

from models.exceptions import InvalidTransitionError, ReservationNotFoundError


@pytest.fixture
def pending(app, users, make_resource, window):
    """A pending reservation owned by the student."""
    from models.reservation import create_reservation

    lab = make_resource('Lab 101')
    with app.app_context():
        return create_reservation(users['student'], lab, *window(), 'Aula')


class TestStatusTransitionMatrix:
    """The transition table itself."""

    def test_only_pending_has_exits(self):
        from models.reservation import STATUS_TRANSITIONS

        assert set(STATUS_TRANSITIONS['pending']) == {'approved', 'rejected'}
        assert STATUS_TRANSITIONS['approved'] == ()
        assert STATUS_TRANSITIONS['rejected'] == ()


class TestUpdateReservationStatus:
    """Reviewing reservations."""

    @pytest.mark.parametrize('new_status', ['approved', 'rejected'])
    def test_pending_can_be_decided(self, app, users, pending, new_status):
        from models.reservation import update_reservation_status

        with app.app_context():
            updated = update_reservation_status(
                pending['id'], new_status, changed_by=users['faculty'], comments='Ok'
            )

        assert updated['status'] == new_status
        assert updated['updated_at']

    def test_approved_is_final(self, app, users, pending):
        from models.reservation import update_reservation_status

        with app.app_context():
            update_reservation_status(pending['id'], 'approved', changed_by=users['faculty'])

            with pytest.raises(InvalidTransitionError) as exc_info:
                update_reservation_status(pending['id'], 'rejected', changed_by=users['faculty'])

        assert exc_info.value.current_status == 'approved'
        assert exc_info.value.new_status == 'rejected'
        assert exc_info.value.status_code == 409

    def test_rejected_cannot_be_approved(self, app, users, pending):
        from models.reservation import get_reservation_by_id, update_reservation_status

        with app.app_context():
            update_reservation_status(pending['id'], 'rejected', changed_by=users['faculty'])

            with pytest.raises(InvalidTransitionError):
                update_reservation_status(pending['id'], 'approved', changed_by=users['faculty'])

            assert get_reservation_by_id(pending['id'])['status'] == 'rejected'

    def test_same_decision_twice_fails(self, app, users, pending):
        from models.reservation import update_reservation_status

        with app.app_context():
            update_reservation_status(pending['id'], 'approved', changed_by=users['faculty'])

            with pytest.raises(InvalidTransitionError):
                update_reservation_status(pending['id'], 'approved', changed_by=users['faculty'])

    def test_pending_is_not_a_target(self, app, users, pending):
        from models.reservation import update_reservation_status

        with app.app_context():
            with pytest.raises(InvalidTransitionError) as exc_info:
                update_reservation_status(pending['id'], 'pending', changed_by=users['faculty'])

        assert exc_info.value.current_status is None

    def test_unknown_target_status(self, app, users, pending):
        from models.reservation import update_reservation_status

        with app.app_context():
            with pytest.raises(InvalidTransitionError):
                update_reservation_status(pending['id'], 'cancelled', changed_by=users['faculty'])

    def test_unknown_reservation(self, app, users):
        from models.reservation import update_reservation_status

        with app.app_context():
            with pytest.raises(ReservationNotFoundError) as exc_info:
                update_reservation_status(9999, 'approved', changed_by=users['faculty'])

        assert exc_info.value.status_code == 404


class TestStatusHistory:
    """History rows and audit entries written by reviews."""

    def test_history_records_each_change(self, app, users, pending):
        from models.reservation import get_status_history, update_reservation_status

        with app.app_context():
            update_reservation_status(pending['id'], 'rejected', changed_by=users['faculty'],
                                      comments='Sala reservada para prova')
            history = get_status_history(pending['id'])

        assert [(h['old_status'], h['new_status']) for h in history] == [
            (None, 'pending'), ('pending', 'rejected')
        ]
        assert history[1]['changed_by_name'] == 'Professor Teste'
        assert history[1]['comments'] == 'Sala reservada para prova'

    def test_failed_transition_writes_no_history(self, app, users, pending):
        from models.reservation import get_status_history, update_reservation_status

        with app.app_context():
            update_reservation_status(pending['id'], 'approved', changed_by=users['faculty'])
            with pytest.raises(InvalidTransitionError):
                update_reservation_status(pending['id'], 'rejected', changed_by=users['faculty'])
            history = get_status_history(pending['id'])

        assert len(history) == 2

    def test_review_is_audited(self, app, users, pending):
        from models.audit_log import get_audit_logs
        from models.reservation import update_reservation_status

        with app.app_context():
            update_reservation_status(pending['id'], 'approved', changed_by=users['faculty'])
            logs = get_audit_logs(action='UPDATE', entity_type='reservation',
                                  entity_id=pending['id'])

        assert len(logs) == 1
        assert logs[0]['user_id'] == users['faculty']
        assert logs[0]['changes']['before'] == {'status': 'pending'}
        assert logs[0]['changes']['after']['status'] == 'approved'
