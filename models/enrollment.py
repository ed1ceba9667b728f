"""Datenmodell für eine Einschreibung (Pydantic v2)."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class EnrollmentStatus(str, Enum):
    ENROLLED = "enrolled"
    WAITLISTED = "waitlisted"
    DROPPED = "dropped"
    COMPLETED = "completed"


ACTIVE_STATUSES = frozenset({EnrollmentStatus.ENROLLED, EnrollmentStatus.WAITLISTED})


class Enrollment(BaseModel):
    """Verknüpft einen Studierenden mit einer Sektion."""

    id: Optional[int] = None
    student_id: int
    section_id: int
    status: EnrollmentStatus = EnrollmentStatus.ENROLLED
    enrolled_at: datetime = Field(default_factory=datetime.now)
    dropped_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        """Eingeschrieben oder auf der Warteliste."""
        return self.status in ACTIVE_STATUSES

    def drop(self) -> None:
        self.status = EnrollmentStatus.DROPPED
        self.dropped_at = datetime.now()

    def complete(self) -> None:
        self.status = EnrollmentStatus.COMPLETED
