from sqlalchemy import select

from classgrid.models import FacultyAvailability, TimetableEntry
from classgrid.services.persistence import commit_schedule, consumed_slots_by_faculty
from classgrid.services.state import EntryDraft, room_label


def _draft(class_id, faculty_id, slot_id, *, course_id="co-1", day="monday", period=1):
    return EntryDraft(
        class_id=class_id,
        course_id=course_id,
        faculty_id=faculty_id,
        timeslot_id=slot_id,
        day=day,
        period=period,
        room=room_label(class_id, slot_id),
    )


def test_consumed_slots_grouped_by_faculty():
    entries = [_draft("c-1", "f-1", "s-1"), _draft("c-2", "f-1", "s-2"), _draft("c-1", "f-2", "s-3")]
    assert consumed_slots_by_faculty(entries) == {"f-1": ["s-1", "s-2"], "f-2": ["s-3"]}


def test_commit_schedule_replaces_batch_and_flips_consumed_flags(db_session, seed):
    slots = seed.timeslots(days=("monday",), periods=(1, 2, 3))
    term = seed.term()
    section = seed.class_section(term, "A")
    untouched = seed.class_section(term, "B")
    faculty = seed.faculty("Dr Rao")
    course = seed.course("CS101")
    seed.availability(faculty)
    seed.entry(section, course, faculty, ("monday", 3))
    seed.entry(untouched, course, faculty, ("monday", 2))
    seed.commit()

    inserted = commit_schedule(
        db_session,
        run_id="run-p",
        class_ids=[section.id],
        entries=[_draft(section.id, faculty.id, slots[("monday", 1)], course_id=course.id)],
    )
    db_session.commit()

    assert inserted == 1
    rows = {
        (entry.class_id, entry.timeslot_id): entry.run_id
        for entry in db_session.execute(select(TimetableEntry)).scalars()
    }
    assert rows == {
        (section.id, slots[("monday", 1)]): "run-p",
        (untouched.id, slots[("monday", 2)]): None,
    }
    flags = dict(
        db_session.execute(select(FacultyAvailability.timeslot_id, FacultyAvailability.is_available)).all()
    )
    assert flags == {slots[("monday", 1)]: False, slots[("monday", 2)]: True, slots[("monday", 3)]: True}
