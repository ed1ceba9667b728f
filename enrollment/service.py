"""Einschreibung: Prüfkette, Probelauf, Abmeldung.

Prüfreihenfolge (bricht beim ersten Verstoß ab):
  0. Student existiert
  1. Sektion existiert und ist geplant oder aktiv
  2. Keine aktive Einschreibung in dieser Sektion
  3. Keine aktive Einschreibung im selben Kurs (anderes Semester zählt nicht)
  4. Voraussetzungen erfüllt
  5. Keine Überschneidung mit eingeschriebenen Sektionen
  6. Aktive Einschreibungen im Semester unter der Obergrenze
  7. Sektion voll → Warteliste statt Ablehnung
"""

import logging
from typing import Optional

from pydantic import BaseModel

from config.schema import EnrollmentConfig
from data.store import CampusStore
from enrollment.prerequisites import PrerequisiteValidator
from exceptions import EnrollmentValidationError, NotFoundError
from models.enrollment import Enrollment, EnrollmentStatus
from models.section import ENROLLABLE_STATUSES, Section
from models.student import Student

logger = logging.getLogger(__name__)


class EnrollmentValidationResult(BaseModel):
    """Ergebnis eines Probelaufs ohne Einschreibung."""

    valid: bool = True
    errors: list[str] = []
    warnings: list[str] = []
    reasons: list[str] = []             # maschinenlesbare Gründe der Fehler

    def add_error(self, reason: str, message: str) -> None:
        self.valid = False
        self.reasons.append(reason)
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)


class EnrollmentService:
    """Schreibt Studierende in Sektionen ein oder meldet sie ab."""

    def __init__(
        self,
        store: CampusStore,
        config: Optional[EnrollmentConfig] = None,
        validator: Optional[PrerequisiteValidator] = None,
    ) -> None:
        self.store = store
        self.config = config or EnrollmentConfig()
        self.validator = validator or PrerequisiteValidator(store)

    # ─── Einzelprüfungen ───

    def _require_student(self, student_id: int) -> Student:
        student = self.store.get_student(student_id)
        if student is None:
            raise NotFoundError("Student", student_id)
        return student

    def _require_section(self, section_id: int) -> Section:
        section = self.store.get_section(section_id)
        if section is None:
            raise NotFoundError("Sektion", section_id)
        return section

    def _course_code(self, course_id: int) -> str:
        course = self.store.get_course(course_id)
        return course.code if course else str(course_id)

    def has_time_conflict(self, student_id: int, section: Section) -> bool:
        """True wenn ein Termin der Sektion eine ENROLLED-Sektion des Studierenden schneidet."""
        timeslots = self.store.get_timeslots(section.id)
        if not timeslots:
            logger.warning(f"Sektion {section.id} hat keine Termine")
            return False
        for ts in timeslots:
            if self.store.has_student_time_conflict(
                student_id, ts.day, ts.start_time, ts.end_time, section.semester_id
            ):
                logger.debug(
                    f"Student {student_id}: Überschneidung am {ts.to_slot()}"
                )
                return True
        return False

    def is_full(self, section: Section) -> bool:
        return self.store.count_enrolled(section.id) >= section.capacity

    def _prerequisite_error(self, student_id: int, course_id: int) -> EnrollmentValidationError:
        code = self._course_code(course_id)
        cycle = self.validator.find_cycle(course_id)
        if cycle:
            codes = " → ".join(self._course_code(c) for c in cycle)
            return EnrollmentValidationError(
                "prerequisite_cycle",
                f"Voraussetzungen für {code} fehlerhaft konfiguriert (Zyklus: {codes})",
            )
        missing = self.validator.get_missing_prerequisites(student_id, course_id)
        return EnrollmentValidationError(
            "prerequisites_missing",
            f"Voraussetzungen für {code} nicht erfüllt. Fehlend: "
            f"{', '.join(self._course_code(c) for c in missing) or '–'}",
            missing_prerequisites=missing,
        )

    # ─── Einschreibung ───

    def enroll(self, student_id: int, section_id: int) -> Enrollment:
        """Schreibt ein oder setzt auf die Warteliste; Verstöße → EnrollmentValidationError."""
        logger.info(f"Einschreibung Student {student_id} in Sektion {section_id}")
        with self.store.transaction():
            self._require_student(student_id)
            section = self._require_section(section_id)

            if section.status not in ENROLLABLE_STATUSES:
                raise EnrollmentValidationError(
                    "section_unavailable",
                    f"Sektion {section_id} ist nicht für Einschreibungen geöffnet "
                    f"(Status: {section.status.value})",
                )
            if self.store.get_enrollment(student_id, section_id) is not None:
                raise EnrollmentValidationError(
                    "already_enrolled_section",
                    f"Student {student_id} ist bereits in Sektion {section_id} eingeschrieben",
                )
            if self.store.is_enrolled_in_course(student_id, section.course_id, section.semester_id):
                raise EnrollmentValidationError(
                    "already_enrolled_course",
                    f"Student {student_id} ist bereits im Kurs "
                    f"{self._course_code(section.course_id)} eingeschrieben",
                )
            if not self.validator.has_met_prerequisites(student_id, section.course_id):
                raise self._prerequisite_error(student_id, section.course_id)
            if self.has_time_conflict(student_id, section):
                raise EnrollmentValidationError(
                    "time_conflict",
                    "Zeitliche Überschneidung mit einer bestehenden Einschreibung",
                )
            limit = self.config.max_courses_per_semester
            if self.store.count_active_enrollments(student_id, section.semester_id) >= limit:
                raise EnrollmentValidationError(
                    "course_load",
                    f"Maximale Kursbelastung erreicht ({limit} Kurse pro Semester)",
                )

            if self.is_full(section):
                logger.info(f"Sektion {section_id} ist voll – Student {student_id} auf Warteliste")
                status = EnrollmentStatus.WAITLISTED
            else:
                status = EnrollmentStatus.ENROLLED
            enrollment = self.store.save_enrollment(Enrollment(
                student_id=student_id,
                section_id=section_id,
                status=status,
            ))

        logger.info(f"Student {student_id} in Sektion {section_id}: {status.value}")
        return enrollment

    def validate_enrollment(self, student_id: int, section_id: int) -> EnrollmentValidationResult:
        """Führt alle Prüfungen aus, ohne einzuschreiben, und sammelt alle Verstöße."""
        result = EnrollmentValidationResult()

        if self.store.get_student(student_id) is None:
            result.add_error("not_found", f"Student nicht gefunden: {student_id}")
            return result
        section = self.store.get_section(section_id)
        if section is None:
            result.add_error("not_found", f"Sektion nicht gefunden: {section_id}")
            return result

        if section.status not in ENROLLABLE_STATUSES:
            result.add_error(
                "section_unavailable",
                f"Sektion nicht für Einschreibungen geöffnet (Status: {section.status.value})",
            )
        if self.store.get_enrollment(student_id, section_id) is not None:
            result.add_error("already_enrolled_section", "Bereits in dieser Sektion eingeschrieben")
        if self.store.is_enrolled_in_course(student_id, section.course_id, section.semester_id):
            result.add_error("already_enrolled_course", "Bereits in diesem Kurs eingeschrieben")
        if not self.validator.has_met_prerequisites(student_id, section.course_id):
            err = self._prerequisite_error(student_id, section.course_id)
            result.add_error(err.reason, err.message)
        if self.has_time_conflict(student_id, section):
            result.add_error("time_conflict", "Zeitliche Überschneidung mit bestehender Einschreibung")
        limit = self.config.max_courses_per_semester
        if self.store.count_active_enrollments(student_id, section.semester_id) >= limit:
            result.add_error("course_load", f"Maximale Kursbelastung erreicht ({limit} Kurse)")

        if self.is_full(section):
            result.add_warning("Sektion ist voll – Einschreibung landet auf der Warteliste")
        return result

    # ─── Abmeldung / Übersicht ───

    def drop(self, student_id: int, section_id: int) -> None:
        """Setzt die aktive Einschreibung auf DROPPED; keine Nachrückung von der Warteliste."""
        with self.store.transaction():
            enrollment = self.store.get_enrollment(student_id, section_id)
            if enrollment is None:
                raise NotFoundError("Einschreibung", f"Student {student_id}, Sektion {section_id}")
            enrollment.drop()
            self.store.save_enrollment(enrollment)
        logger.info(f"Student {student_id} von Sektion {section_id} abgemeldet")

    def get_student_enrollments(self, student_id: int, semester_id: int) -> list[Enrollment]:
        """Aktive Einschreibungen (eingeschrieben + Warteliste) im Semester."""
        return self.store.get_active_enrollments(student_id, semester_id)
