from classgrid.models.class_section import ClassSection, ClassStatus  # noqa: F401
from classgrid.models.course import Course  # noqa: F401
from classgrid.models.faculty import Faculty  # noqa: F401
from classgrid.models.faculty_availability import FacultyAvailability  # noqa: F401
from classgrid.models.teaching_assignment import TeachingAssignment  # noqa: F401
from classgrid.models.term import Term  # noqa: F401
from classgrid.models.time_slot import TimeSlot  # noqa: F401
from classgrid.models.timetable_entry import TimetableEntry  # noqa: F401
