"""Datenmodell für einen Kurs (Pydantic v2)."""

from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Course(BaseModel):
    """Repräsentiert einen Kurs des Katalogs (unveränderliche Stammdaten).

    frozen=True, damit Kurse als Dict-Key (Bedarf pro Kurs) nutzbar sind.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    code: str                             # "MAT101"
    name: str                             # "Algebra I"
    credits: int = Field(ge=0)
    hours_per_week: int = Field(ge=1)     # Wochenstunden jeder Sektion
    specialization_id: int
    prerequisite_id: Optional[int] = None # Kette: Kurs → Voraussetzung → ...
    semester_order: int                   # 1 = Herbst, 2 = Frühjahr
    grade_level_min: int
    grade_level_max: int

    @model_validator(mode="after")
    def _check_grade_range(self):
        if self.grade_level_min > self.grade_level_max:
            raise ValueError(
                f"Kurs {self.code}: grade_level_min ({self.grade_level_min}) "
                f"> grade_level_max ({self.grade_level_max})"
            )
        return self

    @property
    def has_prerequisite(self) -> bool:
        return self.prerequisite_id is not None

    def __str__(self) -> str:
        return f"{self.code} ({self.name})"


# ─── Voraussetzungskette ───

def walk_prerequisites(
    course_id: int, lookup: Callable[[int], Optional[Course]]
) -> tuple[list[int], Optional[int]]:
    """Läuft die Kette ab course_id ab.

    Liefert die IDs in Reihenfolge und die erste wiederholte ID (oder None).
    Ein unbekannter Kurs beendet die Kette, seine ID ist noch enthalten.
    """
    chain: list[int] = []
    current: Optional[int] = course_id
    while current is not None:
        if current in chain:
            return chain, current
        chain.append(current)
        course = lookup(current)
        if course is None:
            break
        current = course.prerequisite_id
    return chain, None


def find_prerequisite_cycle(
    course_id: int, lookup: Callable[[int], Optional[Course]]
) -> Optional[list[int]]:
    """Kurs-IDs des Zyklus, in den die Kette läuft, oder None."""
    chain, repeated = walk_prerequisites(course_id, lookup)
    if repeated is None:
        return None
    return chain[chain.index(repeated):]
