"""Semesterplanung: Bedarf → Sektionen → Lehrkraft/Raum/Termine.

Ablauf pro Lauf (eine Transaktion):
  1. Bedarfsanalyse und Anlegen der Sektionen
  2. Pro Kurs: Fachrichtung auflösen, qualifizierte Lehrkräfte und Räume laden
  3. Pro Sektion: Lehrkräfte außen, Räume innen; erste passende Kombination gewinnt
  4. Nicht platzierbare Sektionen werden gezählt, nicht als Fehler geworfen
"""

import logging
import time
from typing import Optional

from pydantic import BaseModel

from config.schema import CampusConfig, PlacementStrategy
from data.store import CampusStore
from enrollment.prerequisites import PrerequisiteValidator
from exceptions import ConfigurationGapError, NotFoundError, SchedulingError
from models.course import Course
from models.room import Classroom
from models.section import Section, SectionStatus
from models.specialization import Specialization
from models.teacher import Teacher
from models.timeslot import SectionTimeslot, TimeSlot
from scheduler.constraints import ConstraintChecker
from scheduler.demand import DemandAnalyzer
from scheduler.sections import SectionFactory
from scheduler.time_grid import CombinationCache, TimeSlotGenerator

logger = logging.getLogger(__name__)

# Sektionen in diesen Zuständen gelten als bereits geplant
_ALREADY_PLACED = {SectionStatus.SCHEDULED, SectionStatus.ACTIVE, SectionStatus.COMPLETED}


# ─── Ergebnis-Modell ──────────────────────────────────────────────────────────

class ScheduleResult(BaseModel):
    """Ergebnis eines Planungslaufs."""

    semester_id: int
    strategy: PlacementStrategy
    sections: list[Section] = []
    scheduled: int = 0
    failed: int = 0
    skipped: int = 0                        # stornierte Sektionen
    failed_section_ids: list[int] = []
    solve_time_seconds: float = 0.0

    @property
    def total(self) -> int:
        return self.scheduled + self.failed + self.skipped

    @property
    def success_rate(self) -> float:
        planned = self.scheduled + self.failed
        return self.scheduled / planned if planned else 1.0


# ─── Planer ───────────────────────────────────────────────────────────────────

class SemesterScheduler:
    """Plant alle Sektionen eines Semesters."""

    def __init__(
        self,
        store: CampusStore,
        config: CampusConfig,
        validator: Optional[PrerequisiteValidator] = None,
    ) -> None:
        self.store = store
        self.config = config
        sc = config.scheduling
        self.generator = TimeSlotGenerator(config.time_grid, sc.max_combinations)
        self.checker = ConstraintChecker(store, sc.max_teacher_hours_per_day)
        self.demand_analyzer = DemandAnalyzer(
            store, validator or PrerequisiteValidator(store), sc.section_capacity
        )
        self.section_factory = SectionFactory(store, sc.section_capacity)

    # ─── Planungslauf ───

    def generate_schedule(
        self,
        semester_id: int,
        strategy: Optional[PlacementStrategy] = None,
    ) -> ScheduleResult:
        """Plant das Semester; bei unerwarteten Fehlern wird alles zurückgerollt."""
        strategy = PlacementStrategy(strategy or self.config.scheduling.strategy)
        cache = CombinationCache(self.config.scheduling.combination_cache_size)
        result = ScheduleResult(semester_id=semester_id, strategy=strategy)
        t0 = time.time()

        logger.info(f"Planungslauf für Semester {semester_id} gestartet ({strategy.value})")
        try:
            with self.store.transaction():
                demand = self.demand_analyzer.analyze_demand(semester_id)
                groups = self.section_factory.create_sections(demand, semester_id)
                for course, sections in groups.items():
                    self._schedule_group(course, sections, strategy, cache, result)
        except NotFoundError:
            raise
        except Exception as e:
            logger.error(f"Planungslauf für Semester {semester_id} abgebrochen: {e}")
            raise SchedulingError(semester_id, str(e)) from e

        result.solve_time_seconds = time.time() - t0
        logger.info(
            f"Planungslauf beendet: {result.scheduled} geplant, {result.failed} gescheitert, "
            f"{result.skipped} übersprungen ({result.solve_time_seconds:.2f}s)"
        )
        return result

    def _schedule_group(
        self,
        course: Course,
        sections: list[Section],
        strategy: PlacementStrategy,
        cache: CombinationCache,
        result: ScheduleResult,
    ) -> None:
        result.sections.extend(sections)

        try:
            specialization = self._resolve_specialization(course)
        except ConfigurationGapError as e:
            logger.error(f"{e} – {len(sections)} Sektion(en) nicht planbar")
            result.failed += len(sections)
            result.failed_section_ids.extend(s.id for s in sections)
            return

        teachers = self.store.get_teachers_by_specialization(specialization.id)
        rooms = self.store.get_classrooms_by_room_type(specialization.room_type_id)

        for section in sections:
            if section.status in _ALREADY_PLACED:
                result.scheduled += 1
                continue
            if section.status == SectionStatus.CANCELLED:
                result.skipped += 1
                continue
            if self._place_section(section, teachers, rooms, strategy, cache):
                result.scheduled += 1
            else:
                logger.warning(
                    f"{section.label(course.code)}: keine passende Kombination aus "
                    f"Lehrkraft, Raum und Terminen gefunden"
                )
                result.failed += 1
                result.failed_section_ids.append(section.id)

    def _resolve_specialization(self, course: Course) -> Specialization:
        specialization = self.store.get_specialization(course.specialization_id)
        if specialization is None:
            raise ConfigurationGapError(
                f"{course.code}: Fachrichtung {course.specialization_id} nicht gefunden"
            )
        return specialization

    # ─── Platzierung ───

    def _place_section(
        self,
        section: Section,
        teachers: list[Teacher],
        rooms: list[Classroom],
        strategy: PlacementStrategy,
        cache: CombinationCache,
    ) -> bool:
        """Erste (Lehrkraft, Raum)-Kombination mit vollständigen Terminen gewinnt."""
        for teacher in teachers:
            for room in rooms:
                if strategy == PlacementStrategy.COMBINATIONS:
                    slots = self._combination_slots(section, teacher, room, cache)
                else:
                    slots = self._greedy_slots(section, teacher, room)
                if slots:
                    self._commit(section, teacher, room, slots)
                    return True
        return False

    def _greedy_slots(
        self, section: Section, teacher: Teacher, room: Classroom
    ) -> Optional[list[TimeSlot]]:
        """Füllt Slot für Slot aus dem Gesamtkatalog auf, bis die Wochenstunden erreicht sind."""
        picked: list[TimeSlot] = []
        remaining = section.hours_per_week
        for slot in self.generator.generate_all_possible_slots():
            if slot.duration_hours > remaining:
                continue
            if not self.checker.can_assign(section, teacher.id, room.id, slot, picked):
                continue
            picked.append(slot)
            remaining -= slot.duration_hours
            if remaining == 0:
                return picked
        return None

    def _combination_slots(
        self,
        section: Section,
        teacher: Teacher,
        room: Classroom,
        cache: CombinationCache,
    ) -> Optional[list[TimeSlot]]:
        """Probiert die vorberechneten Kombinationen in Rangfolge."""
        for combination in self.generator.ranked_combinations(section.hours_per_week, cache):
            picked: list[TimeSlot] = []
            for slot in combination:
                if not self.checker.can_assign(section, teacher.id, room.id, slot, picked):
                    break
                picked.append(slot)
            else:
                return picked
        return None

    def _commit(
        self,
        section: Section,
        teacher: Teacher,
        room: Classroom,
        slots: list[TimeSlot],
    ) -> None:
        for slot in slots:
            self.store.add_timeslot(SectionTimeslot.from_slot(section.id, slot))
        section.teacher_id = teacher.id
        section.classroom_id = room.id
        section.transition_to(SectionStatus.SCHEDULED)
        self.store.save_section(section)
        logger.debug(
            f"Sektion {section.id}: {teacher.full_name}, {room.name}, "
            f"{', '.join(str(s) for s in slots)}"
        )

    # ─── Verwaltung ───

    def revert_schedule(self, semester_id: int) -> int:
        """Löscht alle Sektionen eines Semesters samt Terminen und Einschreibungen."""
        semester = self.store.get_semester(semester_id)
        if semester is None:
            raise NotFoundError("Semester", semester_id)
        with self.store.transaction():
            removed = self.store.delete_sections_by_semester(semester_id)
        logger.info(f"{semester.name}: {removed} Sektion(en) entfernt")
        return removed

    def get_sections(
        self,
        semester_id: int,
        course_id: Optional[int] = None,
        status: Optional[SectionStatus] = None,
    ) -> list[Section]:
        """Sektionen eines Semesters, optional nach Kurs und Status gefiltert."""
        if self.store.get_semester(semester_id) is None:
            raise NotFoundError("Semester", semester_id)
        if status is not None:
            sections = self.store.get_sections_by_semester_and_status(semester_id, status)
        else:
            sections = self.store.get_sections_by_semester(semester_id)
        if course_id is not None:
            sections = [s for s in sections if s.course_id == course_id]
        return sorted(sections, key=lambda s: (s.course_id, s.section_number))
