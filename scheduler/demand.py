"""Bedarfsanalyse: Wie viele parallele Sektionen braucht jeder Kurs?"""

import logging
import math

from data.store import CampusStore
from enrollment.prerequisites import PrerequisiteValidator
from exceptions import NotFoundError
from models.course import Course

logger = logging.getLogger(__name__)


class DemandAnalyzer:
    """Ermittelt pro Kurs die Zahl benötigter Sektionen für ein Semester.

    Berechtigt sind aktive Studierende im Jahrgangsbereich des Kurses, deren
    Studienzeit das Semesterjahr einschließt und die (falls vorhanden) die
    Voraussetzungskette erfüllen. Sektionen = ceil(berechtigt / Kapazität).
    """

    def __init__(
        self,
        store: CampusStore,
        validator: PrerequisiteValidator,
        section_capacity: int = 10,
    ) -> None:
        self.store = store
        self.validator = validator
        self.section_capacity = section_capacity

    def sections_needed(self, eligible_count: int) -> int:
        return math.ceil(eligible_count / self.section_capacity)

    def count_eligible(self, course: Course, year: int) -> int:
        students = self.store.find_students(
            course.grade_level_min, course.grade_level_max, year, status="active"
        )
        if course.has_prerequisite:
            students = [
                s for s in students
                if self.validator.has_met_prerequisites(s.id, course.id)
            ]
        return len(students)

    def analyze_demand(self, semester_id: int) -> dict[Course, int]:
        """Kurs → benötigte Sektionen; Kurse ohne Bedarf fehlen im Ergebnis."""
        semester = self.store.get_semester(semester_id)
        if semester is None:
            raise NotFoundError("Semester", semester_id)

        demand: dict[Course, int] = {}
        for course in self.store.get_courses_by_semester_order(semester.order_in_year):
            eligible = self.count_eligible(course, semester.year)
            needed = self.sections_needed(eligible)
            if needed > 0:
                demand[course] = needed
            logger.debug(f"{course.code}: {eligible} berechtigt → {needed} Sektion(en)")

        logger.info(
            f"Bedarfsanalyse {semester.name}: {len(demand)} Kurse, "
            f"{sum(demand.values())} Sektionen"
        )
        return demand
