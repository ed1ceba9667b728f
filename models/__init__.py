from models.course import Course
from models.specialization import Specialization
from models.teacher import Teacher
from models.room import Classroom
from models.semester import Semester
from models.student import Student, CourseHistoryEntry
from models.section import Section, SectionStatus
from models.timeslot import TimeSlot, SectionTimeslot
from models.enrollment import Enrollment, EnrollmentStatus
from models.campus_data import CampusData, FeasibilityReport

__all__ = [
    "Course",
    "Specialization",
    "Teacher",
    "Classroom",
    "Semester",
    "Student",
    "CourseHistoryEntry",
    "Section",
    "SectionStatus",
    "TimeSlot",
    "SectionTimeslot",
    "Enrollment",
    "EnrollmentStatus",
    "CampusData",
    "FeasibilityReport",
]
