"""Einschreibungs-Modul: Voraussetzungen, Einschreibung, Studienfortschritt."""

from .prerequisites import PrerequisiteValidator
from .service import EnrollmentService, EnrollmentValidationResult
from .progress import ScheduleItem, StudentProgress, StudentProgressService

__all__ = [
    "PrerequisiteValidator",
    "EnrollmentService",
    "EnrollmentValidationResult",
    "ScheduleItem",
    "StudentProgress",
    "StudentProgressService",
]
