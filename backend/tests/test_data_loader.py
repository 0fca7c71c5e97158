import pytest

from classgrid.core.exceptions import NotFoundFailure
from classgrid.models import ClassStatus
from classgrid.schemas.timetable import GenerateTimetableRequest
from classgrid.services.data_loader import load_snapshot


def test_snapshot_for_all_classes(db_session, seed):
    seed.timeslots()
    term = seed.term(sections=("A", "B"))
    section_a = seed.class_section(term, "A")
    section_b = seed.class_section(term, "B")
    seed.class_section(term, "C", status=ClassStatus.inactive)
    faculty = seed.faculty("Dr Iyer")
    maths = seed.course("MA101", credits=3)
    lab = seed.course("CSL101", credits=2, is_lab=True)
    seed.assign(maths, faculty, section_a)
    seed.assign(lab, faculty, section_b)
    seed.commit()

    snapshot = load_snapshot(db_session, GenerateTimetableRequest())

    assert len(snapshot.timeslots) == 36
    assert (snapshot.timeslots[0].day, snapshot.timeslots[0].period) == ("monday", 1)
    assert (snapshot.timeslots[-1].day, snapshot.timeslots[-1].period) == ("saturday", 6)
    assert snapshot.class_ids == [section_a.id, section_b.id]
    assert snapshot.faculty_ids == [faculty.id]
    assert snapshot.total_required_slots == 5
    assert [work.course.code for work in snapshot.assignments] == ["MA101", "CSL101"]
    assert snapshot.assignments[1].is_lab


def test_term_scope_filters_classes_and_courses(db_session, seed):
    seed.timeslots(days=("monday",))
    first = seed.term(semester=1)
    second = seed.term(semester=2)
    class_first = seed.class_section(first, "A")
    class_second = seed.class_section(second, "A")
    faculty = seed.faculty("Dr Menon")
    shared = seed.course("GEN100", credits=1)
    scoped = seed.course("CS201", credits=2, term_id=first.id)
    foreign = seed.course("CS301", credits=2, term_id=second.id)
    seed.assign(shared, faculty, class_first)
    seed.assign(scoped, faculty, class_first)
    seed.assign(foreign, faculty, class_second)
    seed.commit()

    snapshot = load_snapshot(db_session, GenerateTimetableRequest(scope="term", term_id=first.id))

    assert snapshot.term_id == first.id
    assert snapshot.class_ids == [class_first.id]
    assert set(snapshot.courses) == {shared.id, scoped.id}
    assert [work.course.code for work in snapshot.assignments] == ["GEN100", "CS201"]


def test_unknown_term_is_not_found(db_session):
    with pytest.raises(NotFoundFailure, match="Term with id missing not found"):
        load_snapshot(db_session, GenerateTimetableRequest(scope="term", term_id="missing"))


def test_missing_timeslots_are_not_found(db_session, seed):
    term = seed.term()
    section = seed.class_section(term, "A")
    seed.assign(seed.course("CS101"), seed.faculty("Dr Rao"), section)
    seed.commit()

    with pytest.raises(NotFoundFailure, match="No timeslots"):
        load_snapshot(db_session, GenerateTimetableRequest())


def test_missing_assignments_are_not_found(db_session, seed):
    seed.timeslots(days=("monday",))
    seed.class_section(seed.term(), "A")
    seed.course("CS101")
    seed.commit()

    with pytest.raises(NotFoundFailure, match="No valid teaching assignments"):
        load_snapshot(db_session, GenerateTimetableRequest())


def test_empty_store_reports_missing_classes(db_session):
    with pytest.raises(NotFoundFailure, match="No classes"):
        load_snapshot(db_session, GenerateTimetableRequest())
