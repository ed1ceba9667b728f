from config.schema import (
    CampusConfig,
    EnrollmentConfig,
    ProgressConfig,
    SchedulingConfig,
    TimeGridConfig,
)


def default_time_grid() -> TimeGridConfig:
    """Standard-Wochenraster.

    Raster (Mo–Fr):
      09:00 - 12:00   Vormittag (3 Stunden)
      12:00 - 13:00   ── Mittagspause ──
      13:00 - 17:00   Nachmittag (4 Stunden)

    Sitzungen dauern 1 oder 2 Stunden und dürfen die Mittagspause
    nicht schneiden (also kein 11-13 und kein 12-14).
    """
    return TimeGridConfig(
        days_per_week=5,
        day_names=["Mo", "Di", "Mi", "Do", "Fr"],
        day_start="09:00",
        day_end="17:00",
        lunch_start="12:00",
        lunch_end="13:00",
        session_lengths=[1, 2],
    )


def default_campus_config() -> CampusConfig:
    """Vollständige Standard-Konfiguration."""
    return CampusConfig(
        institution_name="Muster-Kolleg",
        time_grid=default_time_grid(),
        scheduling=SchedulingConfig(),
        enrollment=EnrollmentConfig(),
        progress=ProgressConfig(),
    )


# ─── Stammdaten-Vorlagen für den Testdaten-Generator ──────────────────────────

# room_type_id → Anzeigename
ROOM_TYPES: dict[int, str] = {
    1: "Seminarraum",
    2: "Labor",
    3: "Computerraum",
    4: "Atelier",
}

# Fachrichtung → benötigter Raumtyp
SPECIALIZATION_METADATA: dict[str, dict] = {
    "Mathematik":  {"id": 1, "room_type": 1},
    "Englisch":    {"id": 2, "room_type": 1},
    "Geschichte":  {"id": 3, "room_type": 1},
    "Physik":      {"id": 4, "room_type": 2},
    "Chemie":      {"id": 5, "room_type": 2},
    "Informatik":  {"id": 6, "room_type": 3},
    "Kunst":       {"id": 7, "room_type": 4},
}

# Kurskatalog: code → (Name, Fachrichtung, Credits, Wochenstunden,
#                     Voraussetzung (code), Semester-Ordnung, Jahrgang min, max)
COURSE_CATALOG: dict[str, tuple] = {
    "MAT101": ("Algebra I",              "Mathematik", 3, 4, None,     1, 9, 10),
    "MAT201": ("Algebra II",             "Mathematik", 3, 4, "MAT101", 2, 9, 11),
    "MAT301": ("Analysis",               "Mathematik", 4, 4, "MAT201", 1, 11, 12),
    "ENG101": ("Englisch Grundkurs",     "Englisch",   3, 3, None,     1, 9, 12),
    "ENG201": ("Englisch Aufbaukurs",    "Englisch",   3, 3, "ENG101", 2, 10, 12),
    "HIS101": ("Weltgeschichte",         "Geschichte", 2, 2, None,     1, 9, 12),
    "HIS201": ("Zeitgeschichte",         "Geschichte", 2, 2, "HIS101", 2, 10, 12),
    "PHY101": ("Physik I",               "Physik",     3, 3, None,     1, 10, 12),
    "PHY201": ("Physik II",              "Physik",     3, 3, "PHY101", 2, 11, 12),
    "CHE101": ("Allgemeine Chemie",      "Chemie",     3, 3, None,     2, 10, 12),
    "INF101": ("Programmieren I",        "Informatik", 3, 4, None,     1, 9, 12),
    "INF201": ("Programmieren II",       "Informatik", 3, 4, "INF101", 2, 10, 12),
    "ART101": ("Gestalten",              "Kunst",      2, 2, None,     2, 9, 12),
}
