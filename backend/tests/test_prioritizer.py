from classgrid.services.prioritizer import possible_slot_count, prioritize_assignments


def test_possible_slot_count_counts_open_available_cells(make_work, build_snapshot, open_availability, build_state):
    work = make_work()
    snapshot = build_snapshot([work])
    monday = [snapshot.slot_at("monday", period) for period in range(1, 7)]
    availability = open_availability(["f-1"], slots=monday, booked={"f-1": [monday[0].id]})
    state = build_state(snapshot, availability)

    assert possible_slot_count(work, snapshot, state) == 5


def test_labs_first_then_most_constrained(make_work, build_snapshot, slot_grid, build_state):
    from classgrid.services.availability import AvailabilityManager

    wide = make_work(course_id="co-wide", faculty_id="f-wide")
    narrow = make_work(course_id="co-narrow", faculty_id="f-narrow")
    lab = make_work(course_id="lab-1", faculty_id="f-lab", is_lab=True)
    snapshot = build_snapshot([wide, narrow, lab])
    availability = AvailabilityManager(
        available={
            "f-wide": [slot.id for slot in slot_grid],
            "f-narrow": [slot.id for slot in slot_grid[:4]],
            "f-lab": [slot.id for slot in slot_grid],
        }
    )
    state = build_state(snapshot, availability)

    ordered = prioritize_assignments(snapshot, state)

    assert [work.course.id for work in ordered] == ["lab-1", "co-narrow", "co-wide"]


def test_ties_keep_discovery_order(make_work, build_snapshot, open_availability, build_state):
    works = [make_work(course_id=f"co-{index}", faculty_id=f"f-{index}") for index in range(4)]
    snapshot = build_snapshot(works)
    state = build_state(snapshot, open_availability([work.faculty.id for work in works]))

    ordered = prioritize_assignments(snapshot, state)

    assert [work.assignment_id for work in ordered] == [work.assignment_id for work in works]
