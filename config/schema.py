from datetime import time
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


def parse_hhmm(value: str) -> time:
    """Wandelt "HH:MM" in ein time-Objekt um."""
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


class PlacementStrategy(str, Enum):
    # Slot für Slot aus dem Gesamtkatalog auffüllen (Standard)
    GREEDY = "greedy"
    # Vorberechnete, nach Tagesstreuung sortierte Kombinationen durchprobieren
    COMBINATIONS = "combinations"


# ─── ZEITRASTER ───

class TimeGridConfig(BaseModel):
    """Wochenraster der Einrichtung.

    Definiert:
    - Unterrichtstage (Mo–Fr)
    - Öffnungszeiten (Standard 09:00–17:00)
    - Mittagspause (Standard 12:00–13:00, kein Unterricht)
    - Erlaubte Sitzungslängen in Stunden (Standard 1h und 2h)

    Das Raster arbeitet ausschließlich mit vollen Stunden.
    """
    # Anzahl Unterrichtstage pro Woche (Mo..Fr)
    days_per_week: int = Field(5, ge=1, le=5,
        description="Unterrichtstage pro Woche")
    # Namen der Wochentage
    day_names: list[str] = Field(
        default=["Mo", "Di", "Mi", "Do", "Fr"],
        description="Namen der Wochentage")
    # Beginn des Unterrichtstages "HH:MM"
    day_start: str = Field("09:00", description="Unterrichtsbeginn")
    # Ende des Unterrichtstages "HH:MM"
    day_end: str = Field("17:00", description="Unterrichtsende")
    # Mittagspause (kein Slot darf sie schneiden)
    lunch_start: str = Field("12:00", description="Beginn Mittagspause")
    lunch_end: str = Field("13:00", description="Ende Mittagspause")
    # Erlaubte Sitzungslängen in Stunden
    session_lengths: list[int] = Field(
        default=[1, 2],
        description="Erlaubte Sitzungslängen (Stunden)")

    @field_validator("day_start", "day_end", "lunch_start", "lunch_end")
    @classmethod
    def _check_full_hour(cls, v: str) -> str:
        try:
            t = parse_hhmm(v)
        except ValueError as e:
            raise ValueError(f"Ungültige Uhrzeit '{v}' (Format HH:MM)") from e
        if t.minute != 0:
            raise ValueError(f"Uhrzeit '{v}' muss auf eine volle Stunde fallen")
        return v

    @field_validator("session_lengths")
    @classmethod
    def _check_session_lengths(cls, v: list[int]) -> list[int]:
        if not v:
            raise ValueError("Mindestens eine Sitzungslänge erforderlich")
        if any(length < 1 or length > 4 for length in v):
            raise ValueError("Sitzungslängen müssen zwischen 1 und 4 Stunden liegen")
        return sorted(set(v))

    @model_validator(mode="after")
    def _check_order(self):
        """Öffnungszeit < Mittagspause < Schließzeit."""
        start, end = parse_hhmm(self.day_start), parse_hhmm(self.day_end)
        lunch_s, lunch_e = parse_hhmm(self.lunch_start), parse_hhmm(self.lunch_end)
        if not start < end:
            raise ValueError(f"Unterrichtsende {self.day_end} liegt nicht nach Beginn {self.day_start}")
        if not (start <= lunch_s < lunch_e <= end):
            raise ValueError(
                f"Mittagspause {self.lunch_start}-{self.lunch_end} liegt nicht "
                f"innerhalb {self.day_start}-{self.day_end}")
        if len(self.day_names) < self.days_per_week:
            raise ValueError("Zu wenige Tagesnamen für days_per_week")
        return self

    @property
    def opening(self) -> time:
        return parse_hhmm(self.day_start)

    @property
    def closing(self) -> time:
        return parse_hhmm(self.day_end)

    @property
    def lunch_window(self) -> tuple[time, time]:
        return parse_hhmm(self.lunch_start), parse_hhmm(self.lunch_end)

    @property
    def teaching_hours_per_day(self) -> int:
        """Unterrichtsstunden pro Tag ohne Mittagspause."""
        lunch_s, lunch_e = self.lunch_window
        return (self.closing.hour - self.opening.hour) - (lunch_e.hour - lunch_s.hour)


# ─── PLANUNG ───

class SchedulingConfig(BaseModel):
    """Parameter des Planungslaufs."""
    # Plätze pro Sektion (auch Divisor der Bedarfsanalyse)
    section_capacity: int = Field(10, ge=1,
        description="Plätze pro Sektion")
    # Harte Obergrenze Unterrichtsstunden pro Lehrkraft und Tag
    max_teacher_hours_per_day: int = Field(4, ge=1, le=10,
        description="Max. Stunden pro Lehrkraft und Tag")
    # Abbruchgrenze der Kombinationssuche
    max_combinations: int = Field(100, ge=1, le=10000,
        description="Max. gesammelte Slot-Kombinationen je Stundenzahl")
    # Kapazität des Kombinations-Caches (0 = unbegrenzt innerhalb eines Laufs)
    combination_cache_size: int = Field(0, ge=0,
        description="Max. Einträge im Kombinations-Cache (0 = unbegrenzt)")
    # Platzierungsverfahren
    strategy: PlacementStrategy = Field(PlacementStrategy.GREEDY,
        description="Platzierungsverfahren (greedy/combinations)")


# ─── EINSCHREIBUNG ───

class EnrollmentConfig(BaseModel):
    """Regeln für Einschreibungen."""
    # Max. aktive Einschreibungen (eingeschrieben + Warteliste) pro Semester
    max_courses_per_semester: int = Field(5, ge=1,
        description="Max. aktive Kurse pro Student und Semester")


# ─── STUDIENFORTSCHRITT ───

class ProgressConfig(BaseModel):
    """Kennzahlen für den Studienfortschritt."""
    # Credits für den Abschluss
    credits_required: int = Field(30, ge=1,
        description="Benötigte Credits für den Abschluss")
    # Soll-Credits pro absolviertem Jahrgang
    credits_per_grade: float = Field(7.5, ge=0,
        description="Soll-Credits pro Jahrgang")
    # Jahrgang, ab dem gezählt wird (Jahrgang 9 → 1 × credits_per_grade)
    grade_offset: int = Field(8, ge=0,
        description="Jahrgangs-Offset für die Soll-Berechnung")


# ─── GESAMT-CONFIG ───

class CampusConfig(BaseModel):
    """Gesamtkonfiguration der Einrichtung."""
    # Name der Einrichtung
    institution_name: str = Field("Muster-Kolleg",
        description="Name der Einrichtung")
    # Pfad des gespeicherten Datensatzes
    data_path: Optional[str] = Field("output/campus_data.json",
        description="Pfad des Datensatzes (JSON)")
    # Wochenraster
    time_grid: TimeGridConfig = Field(default_factory=TimeGridConfig)
    # Planungsparameter
    scheduling: SchedulingConfig = Field(default_factory=SchedulingConfig)
    # Einschreiberegeln
    enrollment: EnrollmentConfig = Field(default_factory=EnrollmentConfig)
    # Studienfortschritt
    progress: ProgressConfig = Field(default_factory=ProgressConfig)

    @model_validator(mode="after")
    def _check_daily_cap(self):
        """Tagesobergrenze muss mindestens eine Sitzung zulassen."""
        shortest = min(self.time_grid.session_lengths)
        if self.scheduling.max_teacher_hours_per_day < shortest:
            raise ValueError(
                f"max_teacher_hours_per_day ({self.scheduling.max_teacher_hours_per_day}) "
                f"< kürzeste Sitzung ({shortest}h)")
        return self
