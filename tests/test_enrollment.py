"""Tests für Voraussetzungen, Einschreibung, Abmeldung und Studienfortschritt."""

import pytest

from config.schema import EnrollmentConfig, ProgressConfig
from data.store import CampusStore
from enrollment import (
    EnrollmentService,
    PrerequisiteValidator,
    StudentProgressService,
)
from exceptions import EnrollmentValidationError, NotFoundError
from models.enrollment import EnrollmentStatus
from models.section import SectionStatus

from conftest import failed, make_course, make_student, passed


# ─── Voraussetzungen ──────────────────────────────────────────────────────────

class TestPrerequisiteValidator:
    def test_chain(self, store):
        """MAT301 → MAT201 → MAT101."""
        assert PrerequisiteValidator(store).get_prerequisite_chain(3) == [3, 2, 1]

    def test_chain_without_prerequisite(self, store):
        assert PrerequisiteValidator(store).get_prerequisite_chain(1) == [1]

    def test_missing_in_chain(self, campus):
        """Nur MAT101 bestanden → für MAT301 fehlt MAT201."""
        campus.course_history = [passed(1, 1)]
        validator = PrerequisiteValidator(CampusStore(campus))
        assert validator.get_missing_prerequisites(1, 3) == [2]
        assert not validator.has_met_prerequisites(1, 3)

    def test_whole_chain_checked(self, campus):
        """Direkte Voraussetzung bestanden reicht nicht, wenn weiter unten etwas fehlt."""
        campus.course_history = [passed(1, 2)]
        validator = PrerequisiteValidator(CampusStore(campus))
        assert not validator.has_met_prerequisites(1, 3)
        assert validator.get_missing_prerequisites(1, 3) == [1]

    def test_chain_met(self, campus):
        campus.course_history = [passed(1, 1), passed(1, 2)]
        assert PrerequisiteValidator(CampusStore(campus)).has_met_prerequisites(1, 3)

    def test_failed_attempt_does_not_count(self, campus):
        campus.course_history = [failed(1, 1)]
        assert not PrerequisiteValidator(CampusStore(campus)).has_met_prerequisites(1, 2)

    def test_no_prerequisite_always_met(self, store):
        assert PrerequisiteValidator(store).has_met_prerequisites(1, 1)

    def test_unknown_course(self, store):
        assert not PrerequisiteValidator(store).has_met_prerequisites(1, 999)

    def test_cycle_fails_closed(self, campus):
        """Zyklus MAT101 → MAT301 → MAT201 → MAT101: nie erfüllt, keine Endlosschleife."""
        campus.courses[0] = make_course(1, "MAT101", hours=3, prerequisite_id=3)
        campus.course_history = [passed(1, c) for c in (1, 2, 3)]
        validator = PrerequisiteValidator(CampusStore(campus))
        assert not validator.has_met_prerequisites(1, 3)
        assert validator.find_cycle(3) == [3, 2, 1]
        assert validator.get_prerequisite_chain(3) == [3, 2, 1]

    def test_no_cycle(self, store):
        assert PrerequisiteValidator(store).find_cycle(3) is None


# ─── Einschreibung ────────────────────────────────────────────────────────────

class TestEnroll:
    def test_enroll(self, store, add_section):
        section = add_section(1, [(0, 9, 10), (1, 9, 10), (2, 9, 10)])
        enrollment = EnrollmentService(store).enroll(1, section.id)
        assert enrollment.id == 1
        assert enrollment.status == EnrollmentStatus.ENROLLED
        assert store.count_enrolled(section.id) == 1

    def test_unknown_student(self, store, add_section):
        section = add_section(1, [(0, 9, 10)])
        with pytest.raises(NotFoundError):
            EnrollmentService(store).enroll(999, section.id)

    def test_unknown_section(self, store):
        with pytest.raises(NotFoundError):
            EnrollmentService(store).enroll(1, 999)

    def test_unscheduled_section_rejected(self, store, add_section):
        section = add_section(1, [], teacher_id=None, classroom_id=None,
                              status=SectionStatus.UNSCHEDULED)
        with pytest.raises(EnrollmentValidationError) as exc:
            EnrollmentService(store).enroll(1, section.id)
        assert exc.value.reason == "section_unavailable"

    def test_duplicate_section_rejected(self, store, add_section):
        section = add_section(1, [(0, 9, 10)])
        service = EnrollmentService(store)
        service.enroll(1, section.id)
        with pytest.raises(EnrollmentValidationError) as exc:
            service.enroll(1, section.id)
        assert exc.value.reason == "already_enrolled_section"
        assert len(store.data.enrollments) == 1

    def test_duplicate_course_rejected(self, store, add_section):
        """Zweite Sektion desselben Kurses im selben Semester → abgelehnt."""
        first = add_section(1, [(0, 9, 10)])
        second = add_section(1, [(1, 13, 14)], teacher_id=2, classroom_id=2)
        service = EnrollmentService(store)
        service.enroll(1, first.id)
        with pytest.raises(EnrollmentValidationError) as exc:
            service.enroll(1, second.id)
        assert exc.value.reason == "already_enrolled_course"

    def test_same_course_other_semester_allowed(self, store, add_section):
        earlier = add_section(1, [(0, 9, 10)], semester_id=1)
        current = add_section(1, [(0, 9, 10)], semester_id=3)
        service = EnrollmentService(store)
        service.enroll(1, earlier.id)
        assert service.enroll(1, current.id).status == EnrollmentStatus.ENROLLED

    def test_missing_prerequisite(self, campus, store, add_section):
        """MAT301 mit nur MAT101 bestanden → Fehlend: MAT201."""
        campus.course_history = [passed(1, 1)]
        section = add_section(3, [(0, 9, 11)])
        with pytest.raises(EnrollmentValidationError) as exc:
            EnrollmentService(store).enroll(1, section.id)
        assert exc.value.reason == "prerequisites_missing"
        assert exc.value.missing_prerequisites == [2]
        assert "MAT201" in exc.value.message

    def test_prerequisite_cycle(self, campus, store, add_section):
        campus.courses[0] = make_course(1, "MAT101", hours=3, prerequisite_id=3)
        section = add_section(3, [(0, 9, 11)])
        with pytest.raises(EnrollmentValidationError) as exc:
            EnrollmentService(store).enroll(1, section.id)
        assert exc.value.reason == "prerequisite_cycle"

    def test_time_conflict(self, store, add_section):
        maths = add_section(1, [(0, 9, 11)])
        physics = add_section(4, [(0, 10, 12), (2, 9, 11)], teacher_id=3, classroom_id=3)
        service = EnrollmentService(store)
        service.enroll(1, maths.id)
        with pytest.raises(EnrollmentValidationError) as exc:
            service.enroll(1, physics.id)
        assert exc.value.reason == "time_conflict"

    def test_adjacent_slots_no_conflict(self, store, add_section):
        maths = add_section(1, [(0, 9, 10)])
        physics = add_section(4, [(0, 10, 12)], teacher_id=3, classroom_id=3)
        service = EnrollmentService(store)
        service.enroll(1, maths.id)
        assert service.enroll(1, physics.id).status == EnrollmentStatus.ENROLLED

    def test_course_load_cap(self, campus, store, add_section):
        """Höchstens 5 aktive Kurse pro Semester."""
        campus.courses.extend(make_course(10 + i, f"WAHL{i}") for i in range(6))
        sections = [add_section(10 + i, [(i % 5, 13 + i // 5, 14 + i // 5)]) for i in range(6)]
        service = EnrollmentService(store)
        for section in sections[:5]:
            service.enroll(1, section.id)
        with pytest.raises(EnrollmentValidationError) as exc:
            service.enroll(1, sections[5].id)
        assert exc.value.reason == "course_load"
        assert store.count_active_enrollments(1, 3) == 5

    def test_configurable_course_load(self, campus, store, add_section):
        campus.courses.extend(make_course(10 + i, f"WAHL{i}") for i in range(2))
        first = add_section(10, [(0, 13, 14)])
        second = add_section(11, [(1, 13, 14)])
        service = EnrollmentService(store, EnrollmentConfig(max_courses_per_semester=1))
        service.enroll(1, first.id)
        with pytest.raises(EnrollmentValidationError):
            service.enroll(1, second.id)

    def test_full_section_waitlists(self, store, add_section):
        section = add_section(1, [(0, 9, 10)], capacity=1)
        service = EnrollmentService(store)
        assert service.enroll(1, section.id).status == EnrollmentStatus.ENROLLED
        assert service.enroll(2, section.id).status == EnrollmentStatus.WAITLISTED
        assert store.count_enrolled(section.id) == 1
        assert len(store.get_section_enrollments(section.id)) == 2

    def test_waitlisted_counts_towards_load(self, store, add_section):
        section = add_section(1, [(0, 9, 10)], capacity=1)
        service = EnrollmentService(store, EnrollmentConfig(max_courses_per_semester=1))
        service.enroll(1, section.id)
        service.enroll(2, section.id)
        assert store.count_active_enrollments(2, 3) == 1

    def test_rejection_writes_nothing(self, store, add_section):
        section = add_section(3, [(0, 9, 11)])
        with pytest.raises(EnrollmentValidationError):
            EnrollmentService(store).enroll(1, section.id)
        assert store.data.enrollments == []


class TestValidateEnrollment:
    def test_valid(self, store, add_section):
        section = add_section(1, [(0, 9, 10)])
        result = EnrollmentService(store).validate_enrollment(1, section.id)
        assert result.valid
        assert result.errors == []
        assert store.data.enrollments == []

    def test_collects_all_errors(self, campus, store, add_section):
        """Probelauf bricht nicht beim ersten Fehler ab."""
        maths = add_section(1, [(0, 9, 11)])
        advanced = add_section(3, [(0, 10, 12)], teacher_id=2, classroom_id=2)
        service = EnrollmentService(store)
        service.enroll(1, maths.id)
        result = service.validate_enrollment(1, advanced.id)
        assert not result.valid
        assert result.reasons == ["prerequisites_missing", "time_conflict"]
        assert len(store.data.enrollments) == 1

    def test_full_section_is_warning(self, store, add_section):
        section = add_section(1, [(0, 9, 10)], capacity=1)
        service = EnrollmentService(store)
        service.enroll(2, section.id)
        result = service.validate_enrollment(1, section.id)
        assert result.valid
        assert len(result.warnings) == 1

    def test_not_found(self, store):
        result = EnrollmentService(store).validate_enrollment(999, 1)
        assert not result.valid
        assert result.reasons == ["not_found"]


class TestDrop:
    def test_drop(self, store, add_section):
        section = add_section(1, [(0, 9, 10)])
        service = EnrollmentService(store)
        service.enroll(1, section.id)
        service.drop(1, section.id)
        enrollment = store.data.enrollments[0]
        assert enrollment.status == EnrollmentStatus.DROPPED
        assert enrollment.dropped_at is not None
        assert store.count_enrolled(section.id) == 0

    def test_second_drop_not_found(self, store, add_section):
        section = add_section(1, [(0, 9, 10)])
        service = EnrollmentService(store)
        service.enroll(1, section.id)
        service.drop(1, section.id)
        with pytest.raises(NotFoundError):
            service.drop(1, section.id)

    def test_drop_without_enrollment(self, store, add_section):
        section = add_section(1, [(0, 9, 10)])
        with pytest.raises(NotFoundError):
            EnrollmentService(store).drop(1, section.id)

    def test_reenroll_after_drop(self, store, add_section):
        section = add_section(1, [(0, 9, 10)])
        service = EnrollmentService(store)
        service.enroll(1, section.id)
        service.drop(1, section.id)
        assert service.enroll(1, section.id).status == EnrollmentStatus.ENROLLED
        assert len(store.data.enrollments) == 2

    def test_no_waitlist_promotion(self, store, add_section):
        """Abmeldung rückt niemanden von der Warteliste nach."""
        section = add_section(1, [(0, 9, 10)], capacity=1)
        service = EnrollmentService(store)
        service.enroll(1, section.id)
        service.enroll(2, section.id)
        service.drop(1, section.id)
        assert store.get_enrollment(2, section.id).status == EnrollmentStatus.WAITLISTED

    def test_active_enrollments_listing(self, store, add_section):
        first = add_section(1, [(0, 9, 10)])
        second = add_section(4, [(1, 9, 11)], teacher_id=3, classroom_id=3)
        service = EnrollmentService(store)
        service.enroll(1, first.id)
        service.enroll(1, second.id)
        service.drop(1, first.id)
        active = service.get_student_enrollments(1, 3)
        assert [e.section_id for e in active] == [second.id]


# ─── Studienfortschritt ───────────────────────────────────────────────────────

class TestStudentProgress:
    def test_progress(self, campus):
        campus.course_history = [passed(1, 1), passed(1, 2), failed(1, 3)]
        progress = StudentProgressService(CampusStore(campus)).get_progress(1)
        assert progress.credits_earned == 6
        assert progress.credits_remaining == 24
        assert progress.courses_taken == 3
        assert progress.courses_passed == 2
        assert progress.courses_failed == 1

    def test_on_track(self, campus):
        """Jahrgang 9: Soll 7,5 Credits; Jahrgang 10: Soll 15 Credits."""
        campus.students = [make_student(1, grade=9), make_student(2, grade=10)]
        campus.course_history = [passed(sid, c) for sid in (1, 2) for c in (1, 2, 4)]
        service = StudentProgressService(CampusStore(campus))
        assert service.get_progress(1).on_track
        assert not service.get_progress(2).on_track

    def test_custom_requirements(self, campus):
        campus.course_history = [passed(1, 1)]
        service = StudentProgressService(
            CampusStore(campus), ProgressConfig(credits_required=3, credits_per_grade=1)
        )
        progress = service.get_progress(1)
        assert progress.credits_remaining == 0
        assert progress.on_track

    def test_unknown_student(self, store):
        with pytest.raises(NotFoundError):
            StudentProgressService(store).get_progress(999)

    def test_student_schedule(self, store, add_section):
        section = add_section(1, [(0, 9, 10), (2, 9, 10), (4, 9, 10)])
        EnrollmentService(store).enroll(1, section.id)
        items = StudentProgressService(store).get_student_schedule(1, 3)
        assert len(items) == 1
        item = items[0]
        assert item.course.code == "MAT101"
        assert item.teacher_name == "Anna Müller"
        assert item.classroom_name == "R 101"
        assert [ts.day for ts in item.timeslots] == [0, 2, 4]

    def test_student_schedule_unknown_semester(self, store):
        with pytest.raises(NotFoundError):
            StudentProgressService(store).get_student_schedule(1, 99)

    def test_student_schedule_skips_missing_course(self, store, add_section):
        """Sektion ohne Kursdatensatz fehlt im Stundenplan statt abzubrechen."""
        kept = add_section(1, [(0, 9, 10), (2, 9, 10), (4, 9, 10)])
        orphan = add_section(4, [(1, 13, 15), (3, 13, 15)], teacher_id=3, classroom_id=3)
        service = EnrollmentService(store)
        service.enroll(1, kept.id)
        service.enroll(1, orphan.id)
        store.data.courses = [c for c in store.data.courses if c.id != 4]

        items = StudentProgressService(store).get_student_schedule(1, 3)
        assert [item.section.id for item in items] == [kept.id]
