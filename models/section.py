"""Datenmodell für eine Kurssektion (Pydantic v2)."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class SectionStatus(str, Enum):
    UNSCHEDULED = "unscheduled"
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Erlaubte Lebenszyklus-Übergänge. Der Planer führt nur UNSCHEDULED → SCHEDULED aus.
ALLOWED_TRANSITIONS: dict[SectionStatus, set[SectionStatus]] = {
    SectionStatus.UNSCHEDULED: {SectionStatus.SCHEDULED, SectionStatus.CANCELLED},
    SectionStatus.SCHEDULED: {SectionStatus.ACTIVE, SectionStatus.CANCELLED},
    SectionStatus.ACTIVE: {SectionStatus.COMPLETED, SectionStatus.CANCELLED},
    SectionStatus.COMPLETED: set(),
    SectionStatus.CANCELLED: set(),
}

# Sektionen in diesen Zuständen nehmen Einschreibungen an
ENROLLABLE_STATUSES = frozenset({SectionStatus.SCHEDULED, SectionStatus.ACTIVE})


def _now() -> datetime:
    return datetime.now()


class Section(BaseModel):
    """Konkretes Angebot eines Kurses in einem Semester.

    Beispiel: MAT101 im Herbst 2025 mit 3 Sektionen
      - Sektion 1: Lehrkraft Müller, Raum 204, Mo/Di/Mi 9-10
      - Sektion 2: Lehrkraft Weber, Raum 205, Di/Do 10-12
      - Sektion 3: Lehrkraft Müller, Raum 204, Mo/Mi/Fr 14-15

    Zeitslots und Einschreibungen werden als eigene Datensätze mit
    section_id gespeichert.
    """

    id: Optional[int] = None
    course_id: int
    semester_id: int
    section_number: int = Field(ge=1)        # 1, 2, 3 … je Kurs/Semester
    capacity: int = Field(10, ge=1)
    teacher_id: Optional[int] = None         # Wird vom Planer gesetzt
    classroom_id: Optional[int] = None       # Wird vom Planer gesetzt
    hours_per_week: int = Field(ge=1)        # Aus dem Kurs übernommen
    status: SectionStatus = SectionStatus.UNSCHEDULED
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    @property
    def is_placed(self) -> bool:
        """True wenn Lehrkraft und Raum zugewiesen sind."""
        return self.teacher_id is not None and self.classroom_id is not None

    def can_transition_to(self, target: SectionStatus) -> bool:
        return target in ALLOWED_TRANSITIONS[self.status]

    def transition_to(self, target: SectionStatus) -> None:
        """Wechselt den Lebenszyklus-Status; unerlaubte Übergänge → ValueError."""
        if not self.can_transition_to(target):
            raise ValueError(
                f"Sektion {self.id}: Übergang {self.status.value} → {target.value} nicht erlaubt"
            )
        self.status = target
        self.updated_at = _now()

    def label(self, course_code: str) -> str:
        """Anzeigename, z.B. "MAT101-2"."""
        return f"{course_code}-{self.section_number}"
