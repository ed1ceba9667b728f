"""Gemeinsame Hilfsfunktionen für den Excel-Export."""

from datetime import date
from typing import Optional

from pydantic import BaseModel

from config.schema import TimeGridConfig
from data.store import CampusStore
from models.section import SectionStatus

# ─── Farbpalette (RRGGBB, ohne #) ─────────────────────────────────────────────

COLORS: dict[str, str] = {
    "Mathematik":   "B3D4FF",
    "Englisch":     "FFF2B3",
    "Geschichte":   "D4B3FF",
    "Physik":       "B3FFB3",
    "Chemie":       "C6EFCE",
    "Informatik":   "FFD4B3",
    "Kunst":        "FFB3E6",
    "sonstig":      "E0E0E0",
    "free":         "F5F5F5",
    "pause":        "DDDDDD",
    "failed":       "FFCCCC",
    "header":       "4472C4",
}


def today_str() -> str:
    """Gibt das heutige Datum als DD.MM.YYYY zurück."""
    return date.today().strftime("%d.%m.%Y")


def get_specialization_color(name: Optional[str]) -> str:
    return COLORS.get(name or "", COLORS["sonstig"])


# ─── Einträge ─────────────────────────────────────────────────────────────────

class ScheduleEntry(BaseModel):
    """Ein Termin einer geplanten Sektion, aufgelöst für die Darstellung."""

    section_id: int
    label: str                    # "MAT101-2"
    course_name: str
    specialization: Optional[str] = None
    teacher_id: Optional[int] = None
    teacher_name: Optional[str] = None
    classroom_id: Optional[int] = None
    classroom_name: Optional[str] = None
    day: int
    start_hour: int
    end_hour: int

    @property
    def duration(self) -> int:
        return self.end_hour - self.start_hour


def build_entries(store: CampusStore, semester_id: int) -> list[ScheduleEntry]:
    """Alle Termine nicht stornierter Sektionen eines Semesters."""
    entries: list[ScheduleEntry] = []
    for section in store.get_sections_by_semester(semester_id):
        if section.status == SectionStatus.CANCELLED:
            continue
        course = store.get_course(section.course_id)
        spec = store.get_specialization(course.specialization_id) if course else None
        teacher = store.get_teacher(section.teacher_id) if section.teacher_id else None
        room = store.get_classroom(section.classroom_id) if section.classroom_id else None
        for ts in store.get_timeslots(section.id):
            entries.append(ScheduleEntry(
                section_id=section.id,
                label=section.label(course.code if course else str(section.course_id)),
                course_name=course.name if course else "",
                specialization=spec.name if spec else None,
                teacher_id=section.teacher_id,
                teacher_name=teacher.full_name if teacher else None,
                classroom_id=section.classroom_id,
                classroom_name=room.name if room else None,
                day=ts.day,
                start_hour=ts.start_time.hour,
                end_hour=ts.end_time.hour,
            ))
    return entries


def hour_rows(tg: TimeGridConfig) -> list[tuple[int, bool]]:
    """Stundenzeilen des Rasters als (Startstunde, ist_Mittagspause)."""
    lunch_s, lunch_e = tg.lunch_window
    return [
        (hour, lunch_s.hour <= hour < lunch_e.hour)
        for hour in range(tg.opening.hour, tg.closing.hour)
    ]


def count_teacher_hours(entries: list[ScheduleEntry], teacher_id: int) -> int:
    """Wochenstunden einer Lehrkraft."""
    return sum(e.duration for e in entries if e.teacher_id == teacher_id)


# ─── Zelleninhalt-Formatierung ────────────────────────────────────────────────

def format_entry(entry: ScheduleEntry, mode: str = "teacher") -> str:
    """Formatiert einen Termin als Zelleninhalt.

    mode='teacher': "Sektion\nRaum"
    mode='room':    "Sektion\nLehrkraft"
    """
    if mode == "teacher":
        return f"{entry.label}\n{entry.classroom_name or '–'}"
    elif mode == "room":
        return f"{entry.label}\n{entry.teacher_name or '–'}"
    return entry.label


def format_entries(entries: list[ScheduleEntry], mode: str = "teacher") -> str:
    """Mehrere Termine in einer Zelle (nur bei fehlerhaften Daten) getrennt durch ──."""
    if not entries:
        return ""
    return "\n──\n".join(format_entry(e, mode) for e in entries)
