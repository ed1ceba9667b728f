"""Planungs-Modul: Wochenraster, Regeln, Bedarf, Sektionen und Semesterplanung."""

from .time_grid import CombinationCache, TimeSlotGenerator
from .constraints import ConstraintChecker
from .demand import DemandAnalyzer
from .sections import SectionFactory, course_priority
from .semester_scheduler import ScheduleResult, SemesterScheduler

__all__ = [
    "CombinationCache",
    "TimeSlotGenerator",
    "ConstraintChecker",
    "DemandAnalyzer",
    "SectionFactory",
    "course_priority",
    "ScheduleResult",
    "SemesterScheduler",
]
