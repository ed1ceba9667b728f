"""Harte Planungsregeln: keine Doppelbelegung, Tagesobergrenze pro Lehrkraft."""

import logging
from typing import Optional, Sequence

from data.store import CampusStore
from models.section import Section
from models.timeslot import TimeSlot

logger = logging.getLogger(__name__)


class ConstraintChecker:
    """Prüft, ob ein (Lehrkraft, Raum, Slot)-Vorschlag zulässig ist.

    Geprüft wird gegen die gespeicherten Termine aller nicht stornierten
    Sektionen sowie gegen die im laufenden Versuch bereits gewählten Slots.
    """

    def __init__(self, store: CampusStore, max_daily_hours: int = 4) -> None:
        self.store = store
        self.max_daily_hours = max_daily_hours

    def has_conflict(
        self,
        teacher_id: int,
        classroom_id: int,
        slot: TimeSlot,
        semester_id: Optional[int] = None,
    ) -> bool:
        """True wenn Lehrkraft oder Raum im Slot bereits belegt sind."""
        return self.store.has_teacher_or_room_conflict(
            teacher_id, classroom_id, slot.day, slot.start, slot.end, semester_id
        )

    def exceeds_daily_limit(
        self,
        teacher_id: int,
        slot: TimeSlot,
        pending_hours: float = 0,
        semester_id: Optional[int] = None,
    ) -> bool:
        """True wenn gespeicherte + vorgemerkte Stunden + Slot die Tagesobergrenze überschreiten."""
        assigned = self.store.teacher_daily_hours(teacher_id, slot.day, semester_id)
        total = (assigned or 0) + pending_hours + slot.duration_hours
        return total > self.max_daily_hours

    def can_assign(
        self,
        section: Section,
        teacher_id: int,
        classroom_id: int,
        slot: TimeSlot,
        working_set: Sequence[TimeSlot] = (),
    ) -> bool:
        """Gesamtprüfung für einen Slot.

        Zuerst gegen working_set (Überschneidung, Stunden am selben Tag),
        danach gegen den gespeicherten Zustand.
        """
        if any(slot.overlaps(picked) for picked in working_set):
            return False
        pending = sum(p.duration_hours for p in working_set if p.day == slot.day)
        if pending + slot.duration_hours > self.max_daily_hours:
            return False

        if self.has_conflict(teacher_id, classroom_id, slot, section.semester_id):
            return False
        if self.exceeds_daily_limit(teacher_id, slot, pending, section.semester_id):
            logger.debug(f"Lehrkraft {teacher_id}: Tagesobergrenze am {slot.day_name} erreicht")
            return False
        return True
