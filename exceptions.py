"""Fehlerklassen des Kursplaners.

Taxonomie:
  - NotFoundError            Semester/Kurs/Sektion/Student/Einschreibung fehlt → Abbruch
  - ValidationFailure        Fachliche Ablehnung mit strukturiertem Grund
  - ConfigurationGapError    Stammdaten unvollständig oder widersprüchlich
  - SchedulingError          Unerwarteter Fehler während eines Planungslaufs
"""

from typing import Optional


class KursplanerError(Exception):
    """Basisklasse aller fachlichen Fehler."""


class NotFoundError(KursplanerError):
    """Ein referenzierter Datensatz existiert nicht."""

    def __init__(self, entity: str, entity_id) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} nicht gefunden: {entity_id}")


class ValidationFailure(KursplanerError):
    """Fachliche Regelverletzung (für den Nutzer bestimmt)."""

    def __init__(self, reason: str, message: str) -> None:
        self.reason = reason      # maschinenlesbar, z.B. "course_load"
        self.message = message    # Klartext für die Ausgabe
        super().__init__(message)


class EnrollmentValidationError(ValidationFailure):
    """Einschreibung abgelehnt."""

    def __init__(
        self,
        reason: str,
        message: str,
        missing_prerequisites: Optional[list[int]] = None,
    ) -> None:
        super().__init__(reason, message)
        self.missing_prerequisites = list(missing_prerequisites or [])


class ConfigurationGapError(KursplanerError):
    """Stammdaten lassen keine gültige Entscheidung zu (z.B. Voraussetzungs-Zyklus)."""


class SchedulingError(KursplanerError):
    """Planungslauf abgebrochen; alle Schreibzugriffe wurden zurückgerollt."""

    def __init__(self, semester_id: int, message: str) -> None:
        self.semester_id = semester_id
        super().__init__(f"Planung für Semester {semester_id} fehlgeschlagen: {message}")
