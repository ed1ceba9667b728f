"""Sektionen anlegen (idempotent) und nach Priorität ordnen."""

import logging

from data.store import CampusStore
from models.course import Course
from models.section import Section

logger = logging.getLogger(__name__)


def course_priority(course: Course) -> tuple[int, int]:
    """Mehr Wochenstunden zuerst (schwerer zu platzieren), dann kleinere Kurs-ID."""
    return (-course.hours_per_week, course.id)


class SectionFactory:
    """Erzeugt die Sektionen eines Semesters aus dem analysierten Bedarf."""

    def __init__(self, store: CampusStore, capacity: int = 10) -> None:
        self.store = store
        self.capacity = capacity

    def create_sections(
        self, demand: dict[Course, int], semester_id: int
    ) -> dict[Course, list[Section]]:
        """Kurs → Sektionen, Gruppen in Prioritätsreihenfolge.

        Existieren für Kurs und Semester bereits Sektionen, werden sie
        unverändert übernommen.
        """
        groups: dict[Course, list[Section]] = {}
        for course in sorted(demand, key=course_priority):
            existing = self.store.get_sections_by_course_and_semester(course.id, semester_id)
            if existing:
                logger.debug(f"{course.code}: {len(existing)} bestehende Sektion(en) übernommen")
                groups[course] = existing
                continue
            groups[course] = [
                self.store.save_section(Section(
                    course_id=course.id,
                    semester_id=semester_id,
                    section_number=number,
                    capacity=self.capacity,
                    hours_per_week=course.hours_per_week,
                ))
                for number in range(1, demand[course] + 1)
            ]
            logger.info(f"{course.code}: {demand[course]} Sektion(en) angelegt")
        return groups
