"""Voraussetzungsketten: Kurs → Voraussetzung → deren Voraussetzung → ...

Die Kette wird iterativ mit einer Menge besuchter Kurse abgelaufen. Ein
Zyklus in den Stammdaten gilt als nicht erfüllt und wird als
Konfigurationsfehler geloggt.
"""

import logging
from typing import Optional

from data.store import CampusStore
from models.course import find_prerequisite_cycle, walk_prerequisites

logger = logging.getLogger(__name__)


class PrerequisiteValidator:
    """Prüft, ob Studierende die Voraussetzungen eines Kurses erfüllen."""

    def __init__(self, store: CampusStore) -> None:
        self.store = store

    def has_met_prerequisites(self, student_id: int, course_id: int) -> bool:
        """True wenn jede Voraussetzung der Kette bestanden ist.

        Unbekannter Kurs in der Kette oder Zyklus → False.
        """
        course = self.store.get_course(course_id)
        if course is None:
            logger.warning(f"Kurs nicht gefunden: {course_id}")
            return False

        visited = {course.id}
        while course.prerequisite_id is not None:
            prereq_id = course.prerequisite_id
            if prereq_id in visited:
                logger.error(
                    f"Voraussetzungs-Zyklus bei Kurs {course_id} "
                    f"(Kurs {prereq_id} mehrfach in der Kette)"
                )
                return False
            if not self.store.has_passed(student_id, prereq_id):
                logger.debug(
                    f"Student {student_id}: Voraussetzung {prereq_id} für Kurs "
                    f"{course_id} nicht bestanden"
                )
                return False
            visited.add(prereq_id)
            course = self.store.get_course(prereq_id)
            if course is None:
                logger.warning(f"Kurs nicht gefunden: {prereq_id}")
                return False
        return True

    def get_prerequisite_chain(self, course_id: int) -> list[int]:
        """[Kurs, Voraussetzung, Voraussetzung der Voraussetzung, ...].

        Endet bei fehlender Voraussetzung, bei einem unbekannten Kurs (dessen
        ID noch enthalten ist) oder vor einer Wiederholung.
        """
        chain, _ = walk_prerequisites(course_id, self.store.get_course)
        return chain

    def get_missing_prerequisites(self, student_id: int, course_id: int) -> list[int]:
        """Alle Voraussetzungen der Kette (ohne den Kurs selbst), die nicht bestanden sind."""
        return [
            prereq_id for prereq_id in self.get_prerequisite_chain(course_id)[1:]
            if not self.store.has_passed(student_id, prereq_id)
        ]

    def find_cycle(self, course_id: int) -> Optional[list[int]]:
        """Kurs-IDs des Zyklus, in den die Kette läuft, oder None."""
        return find_prerequisite_cycle(course_id, self.store.get_course)
