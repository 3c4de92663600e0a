import datetime as dt

import pytest

from app.core.errors import EventNotFound, ProtectedDeletion, ValidationError
from app.models.attendance import Attendance
from app.models.event import Event, EventState
from app.models.registration import Registration
from app.services.events import event_service

from tests.conftest import T0


def test_create_event_starts_upcoming_with_empty_counters(make_event):
    e = make_event(starts_in=30, lasts=90, capacity=10)
    assert e.id is not None
    assert e.state == EventState.upcoming.value
    assert (e.registration_count, e.participation_count, e.attendance_count) == (0, 0, 0)
    assert e.start_time == T0 + dt.timedelta(minutes=30)


def test_create_event_rejects_bad_window(db):
    with pytest.raises(ValidationError) as exc:
        event_service.create_event(db, {"title": "x", "start_time": T0, "end_time": T0})
    assert exc.value.field == "end_time"


def test_create_event_rejects_zero_capacity(db):
    with pytest.raises(ValidationError):
        event_service.create_event(
            db, {"title": "x", "start_time": T0, "end_time": T0 + dt.timedelta(hours=1), "capacity": 0}
        )


@pytest.mark.parametrize("field", ["state", "registration_count", "attendance_count"])
def test_create_event_rejects_derived_fields(db, field):
    data = {"title": "x", "start_time": T0, "end_time": T0 + dt.timedelta(hours=1), field: 1}
    with pytest.raises(ValidationError):
        event_service.create_event(db, data)
    assert db.query(Event).count() == 0


def test_update_event_rejects_state(db, make_event):
    e = make_event()
    with pytest.raises(ValidationError):
        event_service.update_event(db, e.id, {"state": "past"})
    db.refresh(e)
    assert e.state == "upcoming"


def test_update_event_rejects_counters(db, make_event):
    e = make_event()
    with pytest.raises(ValidationError):
        event_service.update_event(db, e.id, {"participation_count": 3})


def test_update_event_changes_editable_fields(db, make_event):
    e = make_event(capacity=5)
    updated = event_service.update_event(db, e.id, {"title": "Renamed", "capacity": None})
    assert updated.title == "Renamed"
    assert updated.capacity is None


def test_update_event_checks_window_against_stored_values(db, make_event):
    e = make_event(starts_in=60, lasts=60)
    with pytest.raises(ValidationError):
        event_service.update_event(db, e.id, {"end_time": e.start_time - dt.timedelta(minutes=1)})


def test_update_event_cannot_shrink_capacity_below_registrations(db, make_event, register):
    e = make_event(capacity=3)
    register(e, 1, 2)
    with pytest.raises(ValidationError) as exc:
        event_service.update_event(db, e.id, {"capacity": 1})
    assert exc.value.field == "capacity"
    assert event_service.update_event(db, e.id, {"capacity": 2}).capacity == 2


def test_update_missing_event(db):
    with pytest.raises(EventNotFound):
        event_service.update_event(db, 999, {"title": "x"})


def test_delete_upcoming_event_removes_registrations(db, make_event, register):
    e = make_event()
    register(e, 1, 2)
    event_service.delete_event(db, e.id)
    assert db.get(Event, e.id) is None
    assert db.query(Registration).count() == 0


def test_delete_past_event_with_attendance_is_protected(db, make_event, register, lifecycle, clock):
    e = make_event(starts_in=-60, lasts=30)
    event_id = e.id
    register(e, 1, 2, 3)
    lifecycle.run_transitions(clock())
    db.expire_all()

    e = db.get(Event, event_id)
    assert e.state == "past"
    assert e.attendance_count == 3
    with pytest.raises(ProtectedDeletion):
        event_service.delete_event(db, event_id)
    assert db.get(Event, event_id) is not None
    assert db.query(Attendance).filter_by(event_id=event_id).count() == 3


def test_delete_past_event_without_attendance(db, make_event, lifecycle, clock):
    event_id = make_event(starts_in=-60, lasts=30).id
    lifecycle.run_transitions(clock())
    db.expire_all()
    event_service.delete_event(db, event_id)
    assert db.get(Event, event_id) is None


def test_list_events_filters_by_state(db, make_event, lifecycle, clock):
    make_event(starts_in=-10, lasts=60, title="running")
    make_event(starts_in=10, title="later")
    lifecycle.run_transitions(clock())
    db.expire_all()
    assert [e.title for e in event_service.list_events(db, state=EventState.upcoming)] == ["later"]
    assert [e.title for e in event_service.list_events(db, state=EventState.ongoing)] == ["running"]
    assert len(event_service.list_events(db)) == 2


def test_get_missing_event(db):
    with pytest.raises(EventNotFound):
        event_service.get_event(db, 42)
