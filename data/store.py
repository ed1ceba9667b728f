"""Datenzugriff: Abfragen und Schreiboperationen auf einem CampusData-Datensatz.

Der Store hält den kompletten Datensatz im Speicher. Schreibende Abläufe
(Planungslauf, Einschreibung) laufen in transaction(): wirft der Block eine
Exception, wird der Zustand vor Beginn wiederhergestellt.
"""

import logging
from contextlib import contextmanager
from datetime import datetime, time
from pathlib import Path
from typing import Iterable, Iterator, Optional

from models.campus_data import CampusData
from models.course import Course
from models.enrollment import ACTIVE_STATUSES, Enrollment, EnrollmentStatus
from models.room import Classroom
from models.section import Section, SectionStatus
from models.semester import Semester
from models.specialization import Specialization
from models.student import CourseHistoryEntry, Student
from models.teacher import Teacher
from models.timeslot import SectionTimeslot, intervals_overlap

logger = logging.getLogger(__name__)


def _next_id(records: Iterable) -> int:
    return max((r.id for r in records if r.id is not None), default=0) + 1


class CampusStore:
    """Repository über einem CampusData-Datensatz."""

    def __init__(self, data: CampusData, path: Optional[Path] = None) -> None:
        self.data = data
        self.path = Path(path) if path else None
        self._tx_depth = 0

    # ─── Laden / Speichern ───

    @classmethod
    def open(cls, path: Path) -> "CampusStore":
        """Lädt einen gespeicherten Datensatz."""
        return cls(CampusData.load_json(path), path=path)

    def save(self, path: Optional[Path] = None) -> Path:
        target = Path(path) if path else self.path
        if target is None:
            raise ValueError("Kein Speicherpfad für den Datensatz angegeben")
        self.data.save_json(target)
        self.path = target
        logger.info(f"Datensatz gespeichert: {target}")
        return target

    # ─── Transaktion ───

    @contextmanager
    def transaction(self) -> Iterator["CampusStore"]:
        """Alles-oder-nichts-Block.

        Verschachtelte Aufrufe schließen sich der äußeren Transaktion an;
        nur die äußerste sichert und stellt wieder her.
        """
        if self._tx_depth > 0:
            self._tx_depth += 1
            try:
                yield self
            finally:
                self._tx_depth -= 1
            return

        snapshot = self.data.model_copy(deep=True)
        records = {
            name: (value, list(value))
            for name, value in self.data
            if isinstance(value, list)
        }
        self._tx_depth = 1
        try:
            yield self
        except BaseException:
            self._restore(snapshot, records)
            logger.warning("Transaktion zurückgerollt")
            raise
        finally:
            self._tx_depth = 0

    def _restore(
        self,
        snapshot: CampusData,
        records: dict[str, tuple[list, list]],
    ) -> None:
        """Setzt den Datensatz auf den Stand vor der Transaktion zurück.

        Der CampusData-Container, seine Listen und die Datensätze bleiben
        dieselben Objekte; nur ihre Inhalte werden zurückgeschrieben. Bereits
        herausgegebene Referenzen zeigen danach wieder auf den Bestand.
        """
        for name in type(self.data).model_fields:
            if name not in records:
                setattr(self.data, name, getattr(snapshot, name))
                continue
            container, originals = records[name]
            for record, saved in zip(originals, getattr(snapshot, name)):
                if type(record).model_config.get("frozen", False):
                    continue
                for field in type(record).model_fields:
                    setattr(record, field, getattr(saved, field))
            container[:] = originals
            setattr(self.data, name, container)

    # ─── Semester / Stammdaten ───

    def get_semester(self, semester_id: int) -> Optional[Semester]:
        return next((s for s in self.data.semesters if s.id == semester_id), None)

    def get_specialization(self, specialization_id: int) -> Optional[Specialization]:
        return next(
            (s for s in self.data.specializations if s.id == specialization_id), None
        )

    def get_teacher(self, teacher_id: int) -> Optional[Teacher]:
        return next((t for t in self.data.teachers if t.id == teacher_id), None)

    def get_teachers_by_specialization(self, specialization_id: int) -> list[Teacher]:
        return [t for t in self.data.teachers if t.specialization_id == specialization_id]

    def get_classroom(self, classroom_id: int) -> Optional[Classroom]:
        return next((r for r in self.data.classrooms if r.id == classroom_id), None)

    def get_classrooms_by_room_type(self, room_type_id: int) -> list[Classroom]:
        return [r for r in self.data.classrooms if r.room_type_id == room_type_id]

    # ─── Kurse ───

    def get_course(self, course_id: int) -> Optional[Course]:
        return next((c for c in self.data.courses if c.id == course_id), None)

    def get_course_by_code(self, code: str) -> Optional[Course]:
        return next((c for c in self.data.courses if c.code == code), None)

    def get_courses_by_semester_order(self, semester_order: int) -> list[Course]:
        return [c for c in self.data.courses if c.semester_order == semester_order]

    def sum_credits(self, course_ids: Iterable[int]) -> int:
        """Summe der Credits über eine Menge von Kurs-IDs (unbekannte IDs zählen 0)."""
        wanted = set(course_ids)
        return sum(c.credits for c in self.data.courses if c.id in wanted)

    # ─── Studierende / Historie ───

    def get_student(self, student_id: int) -> Optional[Student]:
        return next((s for s in self.data.students if s.id == student_id), None)

    def find_students(
        self,
        grade_min: int,
        grade_max: int,
        year: int,
        status: str = "active",
    ) -> list[Student]:
        """Studierende im Jahrgangsbereich, deren Studienzeit das Jahr einschließt."""
        return [
            s for s in self.data.students
            if grade_min <= s.grade_level <= grade_max
            and s.is_enrolled_in_year(year)
            and s.status == status
        ]

    def get_course_history(self, student_id: int) -> list[CourseHistoryEntry]:
        return [h for h in self.data.course_history if h.student_id == student_id]

    def has_passed(self, student_id: int, course_id: int) -> bool:
        return any(
            h.is_passed for h in self.data.course_history
            if h.student_id == student_id and h.course_id == course_id
        )

    # ─── Sektionen ───

    def get_section(self, section_id: int) -> Optional[Section]:
        return next((s for s in self.data.sections if s.id == section_id), None)

    def get_sections_by_semester(self, semester_id: int) -> list[Section]:
        return [s for s in self.data.sections if s.semester_id == semester_id]

    def get_sections_by_course_and_semester(
        self, course_id: int, semester_id: int
    ) -> list[Section]:
        return sorted(
            (s for s in self.data.sections
             if s.course_id == course_id and s.semester_id == semester_id),
            key=lambda s: s.section_number,
        )

    def get_sections_by_semester_and_status(
        self, semester_id: int, status: SectionStatus
    ) -> list[Section]:
        return [
            s for s in self.data.sections
            if s.semester_id == semester_id and s.status == status
        ]

    def save_section(self, section: Section) -> Section:
        """Legt eine Sektion an (id=None) oder aktualisiert sie."""
        if section.id is None:
            section.id = _next_id(self.data.sections)
            self.data.sections.append(section)
            logger.debug(f"Sektion {section.id} angelegt (Kurs {section.course_id})")
            return section
        for i, existing in enumerate(self.data.sections):
            if existing.id == section.id:
                section.updated_at = datetime.now()
                self.data.sections[i] = section
                return section
        self.data.sections.append(section)
        return section

    def delete_sections_by_semester(self, semester_id: int) -> int:
        """Löscht alle Sektionen eines Semesters samt Terminen und Einschreibungen."""
        doomed = {s.id for s in self.data.sections if s.semester_id == semester_id}
        self.data.sections = [s for s in self.data.sections if s.id not in doomed]
        self.data.timeslots = [t for t in self.data.timeslots if t.section_id not in doomed]
        self.data.enrollments = [
            e for e in self.data.enrollments if e.section_id not in doomed
        ]
        return len(doomed)

    # ─── Termine ───

    def get_timeslots(self, section_id: int) -> list[SectionTimeslot]:
        return sorted(
            (t for t in self.data.timeslots if t.section_id == section_id),
            key=lambda t: (t.day, t.start_time),
        )

    def add_timeslot(self, timeslot: SectionTimeslot) -> SectionTimeslot:
        if timeslot.id is None:
            timeslot.id = _next_id(self.data.timeslots)
        self.data.timeslots.append(timeslot)
        return timeslot

    def _slots_of(self, sections: Iterable[Section]) -> Iterator[tuple[Section, SectionTimeslot]]:
        by_id = {s.id: s for s in sections}
        for ts in self.data.timeslots:
            section = by_id.get(ts.section_id)
            if section is not None:
                yield section, ts

    def has_teacher_or_room_conflict(
        self,
        teacher_id: int,
        classroom_id: int,
        day: int,
        start: time,
        end: time,
        semester_id: Optional[int] = None,
    ) -> bool:
        """True wenn Lehrkraft ODER Raum im Fenster [start, end) schon belegt sind.

        Stornierte Sektionen zählen nicht. Mit semester_id werden nur
        Sektionen dieses Semesters betrachtet.
        """
        candidates = (
            s for s in self.data.sections
            if s.status != SectionStatus.CANCELLED
            and (s.teacher_id == teacher_id or s.classroom_id == classroom_id)
            and (semester_id is None or s.semester_id == semester_id)
        )
        return any(
            ts.day == day and intervals_overlap(ts.start_time, ts.end_time, start, end)
            for _, ts in self._slots_of(candidates)
        )

    def teacher_daily_hours(
        self, teacher_id: int, day: int, semester_id: Optional[int] = None
    ) -> Optional[float]:
        """Summe der Unterrichtsstunden einer Lehrkraft an einem Tag; None ohne Termine."""
        candidates = (
            s for s in self.data.sections
            if s.status != SectionStatus.CANCELLED
            and s.teacher_id == teacher_id
            and (semester_id is None or s.semester_id == semester_id)
        )
        hours = [ts.duration_hours for _, ts in self._slots_of(candidates) if ts.day == day]
        return sum(hours) if hours else None

    # ─── Einschreibungen ───

    def _enrollments_with_section(self, student_id: int) -> Iterator[tuple[Enrollment, Section]]:
        sections = {s.id: s for s in self.data.sections}
        for e in self.data.enrollments:
            if e.student_id == student_id and e.section_id in sections:
                yield e, sections[e.section_id]

    def get_enrollment(self, student_id: int, section_id: int) -> Optional[Enrollment]:
        """Aktive Einschreibung (eingeschrieben/Warteliste) in genau dieser Sektion."""
        return next(
            (e for e in self.data.enrollments
             if e.student_id == student_id and e.section_id == section_id and e.is_active),
            None,
        )

    def get_student_enrollments(self, student_id: int) -> list[Enrollment]:
        """Alle Einschreibungen (auch abgemeldete) eines Studierenden."""
        return [e for e in self.data.enrollments if e.student_id == student_id]

    def is_enrolled_in_course(self, student_id: int, course_id: int, semester_id: int) -> bool:
        return any(
            e.is_active and s.course_id == course_id and s.semester_id == semester_id
            for e, s in self._enrollments_with_section(student_id)
        )

    def get_active_enrollments(self, student_id: int, semester_id: int) -> list[Enrollment]:
        return [
            e for e, s in self._enrollments_with_section(student_id)
            if e.is_active and s.semester_id == semester_id
        ]

    def count_active_enrollments(self, student_id: int, semester_id: int) -> int:
        return len(self.get_active_enrollments(student_id, semester_id))

    def count_enrolled(self, section_id: int) -> int:
        """Anzahl Einschreibungen mit Status ENROLLED (Warteliste zählt nicht)."""
        return sum(
            1 for e in self.data.enrollments
            if e.section_id == section_id and e.status == EnrollmentStatus.ENROLLED
        )

    def get_section_enrollments(self, section_id: int) -> list[Enrollment]:
        return [
            e for e in self.data.enrollments
            if e.section_id == section_id and e.status in ACTIVE_STATUSES
        ]

    def has_student_time_conflict(
        self,
        student_id: int,
        day: int,
        start: time,
        end: time,
        semester_id: Optional[int] = None,
    ) -> bool:
        """True wenn eine ENROLLED-Sektion des Studierenden das Fenster schneidet."""
        sections = [
            s for e, s in self._enrollments_with_section(student_id)
            if e.status == EnrollmentStatus.ENROLLED
            and (semester_id is None or s.semester_id == semester_id)
        ]
        return any(
            ts.day == day and intervals_overlap(ts.start_time, ts.end_time, start, end)
            for _, ts in self._slots_of(sections)
        )

    def save_enrollment(self, enrollment: Enrollment) -> Enrollment:
        if enrollment.id is None:
            enrollment.id = _next_id(self.data.enrollments)
            self.data.enrollments.append(enrollment)
            return enrollment
        for i, existing in enumerate(self.data.enrollments):
            if existing.id == enrollment.id:
                self.data.enrollments[i] = enrollment
                return enrollment
        self.data.enrollments.append(enrollment)
        return enrollment
