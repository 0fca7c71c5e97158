import pytest

from classgrid.services.state import Placement, room_label


def _slot(snapshot, day, period):
    return snapshot.slot_at(day, period)


def test_place_updates_grid_counters_and_bookings(make_work, build_snapshot, open_availability, build_state):
    work = make_work(credits=3)
    snapshot = build_snapshot([work])
    state = build_state(snapshot, open_availability(["f-1"]))

    slot = _slot(snapshot, "monday", 2)
    state.place(Placement(work=work, day="monday", slots=(slot,)))

    assert state.cell("c-1", "monday", 2) == "co-1"
    assert not state.cell_is_empty("c-1", "monday", 2)
    assert state.day_count("c-1", "monday", "co-1") == 1
    assert state.days_used("c-1", "co-1") == 1
    assert state.assigned("c-1", "co-1") == 1
    assert state.slots_assigned == 1
    assert state.availability.is_booked("f-1", slot.id)
    assert not state.is_satisfied(work)


def test_rollback_restores_state_to_mark(make_work, build_snapshot, open_availability, build_state):
    work = make_work(credits=3)
    snapshot = build_snapshot([work])
    state = build_state(snapshot, open_availability(["f-1"]))

    state.place(Placement(work=work, day="monday", slots=(_slot(snapshot, "monday", 1),)))
    mark = state.checkpoint()
    state.place(Placement(work=work, day="tuesday", slots=(_slot(snapshot, "tuesday", 1),)))
    state.place(Placement(work=work, day="tuesday", slots=(_slot(snapshot, "tuesday", 2),)))
    assert state.slots_assigned == 3
    assert state.is_satisfied(work)

    state.rollback(mark)

    assert state.slots_assigned == 1
    assert state.assigned("c-1", "co-1") == 1
    assert state.days_used("c-1", "co-1") == 1
    assert state.day_count("c-1", "tuesday", "co-1") == 0
    assert state.cell_is_empty("c-1", "tuesday", 1)
    assert not state.availability.is_booked("f-1", _slot(snapshot, "tuesday", 1).id)
    assert state.availability.is_booked("f-1", _slot(snapshot, "monday", 1).id)
    assert len(state.placements) == 1


def test_rollback_keeps_day_while_other_session_remains(make_work, build_snapshot, open_availability, build_state):
    work = make_work(credits=2)
    snapshot = build_snapshot([work])
    state = build_state(snapshot, open_availability(["f-1"]))

    state.place(Placement(work=work, day="monday", slots=(_slot(snapshot, "monday", 1),)))
    mark = state.checkpoint()
    state.place(Placement(work=work, day="monday", slots=(_slot(snapshot, "monday", 3),)))
    state.rollback(mark)

    assert state.day_count("c-1", "monday", "co-1") == 1
    assert state.days_used("c-1", "co-1") == 1


def test_lab_placement_is_one_journal_unit(make_work, build_snapshot, open_availability, build_state):
    lab = make_work(course_id="lab-1", credits=3, is_lab=True)
    snapshot = build_snapshot([lab])
    state = build_state(snapshot, open_availability(["f-1"]))

    window = tuple(_slot(snapshot, "wednesday", period) for period in (2, 3, 4))
    state.place(Placement(work=lab, day="wednesday", slots=window))

    assert state.checkpoint() == 1
    assert state.is_satisfied(lab)
    assert [entry.period for entry in state.entries()] == [2, 3, 4]

    state.rollback(0)
    assert state.slots_assigned == 0
    assert all(state.cell_is_empty("c-1", "wednesday", period) for period in (2, 3, 4))


def test_place_rejects_occupied_cell(make_work, build_snapshot, open_availability, build_state):
    first = make_work(course_id="co-1", credits=1)
    second = make_work(course_id="co-2", faculty_id="f-2", credits=1)
    snapshot = build_snapshot([first, second])
    state = build_state(snapshot, open_availability(["f-1", "f-2"]))

    slot = _slot(snapshot, "friday", 6)
    state.place(Placement(work=first, day="friday", slots=(slot,)))
    with pytest.raises(ValueError):
        state.place(Placement(work=second, day="friday", slots=(slot,)))


def test_entries_carry_synthesized_room_label(make_work, build_snapshot, open_availability, build_state):
    work = make_work(credits=1)
    snapshot = build_snapshot([work])
    state = build_state(snapshot, open_availability(["f-1"]))
    slot = _slot(snapshot, "saturday", 5)

    state.place(Placement(work=work, day="saturday", slots=(slot,)))

    (entry,) = state.entries()
    assert entry.room == room_label("c-1", slot.id) == f"Room-c-1-{slot.id}"
    assert (entry.day, entry.period, entry.timeslot_id) == ("saturday", 5, slot.id)
