"""Datenmodelle für Zeitslots im Wochenraster."""

from dataclasses import dataclass
from datetime import time
from typing import Optional

from pydantic import BaseModel, Field, model_validator

DAY_NAMES = ["Mo", "Di", "Mi", "Do", "Fr"]


def _minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def intervals_overlap(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    """Halboffene Intervalle [start, end) schneiden sich."""
    return start_a < end_b and end_a > start_b


@dataclass(frozen=True)
class TimeSlot:
    """Atomarer Slot im Wochenraster: ein Wochentag, ein zusammenhängender Block.

    Immutable (frozen=True) damit es als Dict-Key / Set-Element nutzbar ist.
    """

    # Wochentag (0=Montag, ..., 4=Freitag)
    day: int
    start: time
    end: time

    @property
    def duration_hours(self) -> int:
        return (_minutes(self.end) - _minutes(self.start)) // 60

    @property
    def day_name(self) -> str:
        return DAY_NAMES[self.day] if self.day < len(DAY_NAMES) else str(self.day)

    def overlaps(self, other: "TimeSlot") -> bool:
        """Gleicher Tag und überlappende Uhrzeit."""
        return self.day == other.day and intervals_overlap(
            self.start, self.end, other.start, other.end
        )

    def __repr__(self) -> str:
        return f"TimeSlot({self.day_name}, {self.start:%H:%M}-{self.end:%H:%M})"

    def __str__(self) -> str:
        return f"{self.day_name} {self.start:%H:%M}-{self.end:%H:%M}"


class SectionTimeslot(BaseModel):
    """Gespeicherter Termin einer Sektion."""

    id: Optional[int] = None
    section_id: int
    day: int = Field(ge=0, le=4)    # nur Mo–Fr
    start_time: time
    end_time: time

    @model_validator(mode="after")
    def _check_order(self):
        if not self.end_time > self.start_time:
            raise ValueError(
                f"Termin {self.start_time}-{self.end_time}: Ende muss nach Beginn liegen"
            )
        return self

    @classmethod
    def from_slot(cls, section_id: int, slot: TimeSlot) -> "SectionTimeslot":
        return cls(section_id=section_id, day=slot.day,
                   start_time=slot.start, end_time=slot.end)

    def to_slot(self) -> TimeSlot:
        return TimeSlot(day=self.day, start=self.start_time, end=self.end_time)

    @property
    def duration_hours(self) -> float:
        return (_minutes(self.end_time) - _minutes(self.start_time)) / 60
