import datetime as dt

from app.models.event import Event, EventState

from tests.conftest import T0


def _event(state="upcoming", capacity=None, **counters):
    return Event(
        title="Lab",
        start_time=T0,
        end_time=T0 + dt.timedelta(hours=1),
        state=state,
        capacity=capacity,
        registration_count=counters.get("registrations", 0),
        participation_count=counters.get("participations", 0),
        attendance_count=counters.get("attendances", 0),
    )


def test_phase_predicates():
    assert _event("upcoming").is_upcoming()
    assert _event("ongoing").is_ongoing()
    assert _event("past").is_past()
    assert not _event("past").is_upcoming()


def test_should_transition_to_ongoing_is_inclusive_at_start():
    e = _event("upcoming")
    assert not e.should_transition_to_ongoing(T0 - dt.timedelta(seconds=1))
    assert e.should_transition_to_ongoing(T0)
    assert not _event("ongoing").should_transition_to_ongoing(T0)


def test_should_transition_to_past_is_inclusive_at_end():
    e = _event("ongoing")
    end = T0 + dt.timedelta(hours=1)
    assert not e.should_transition_to_past(end - dt.timedelta(seconds=1))
    assert e.should_transition_to_past(end)
    assert not _event("upcoming").should_transition_to_past(end)


def test_capacity_follows_the_current_phase():
    assert _event("upcoming", capacity=2, registrations=1).has_capacity()
    assert not _event("upcoming", capacity=2, registrations=2).has_capacity()
    # registrations are irrelevant once the event is ongoing
    assert _event("ongoing", capacity=2, registrations=5, participations=1).has_capacity()
    assert not _event("ongoing", capacity=2, participations=2).has_capacity()


def test_unlimited_capacity():
    assert _event("upcoming", capacity=None, registrations=10_000).has_capacity()


def test_state_enum_compares_with_stored_string():
    assert EventState.ongoing == "ongoing"
    assert _event("ongoing").active_count == 0
