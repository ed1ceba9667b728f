"""Wochenraster: atomare Zeitslots und Slot-Kombinationen pro Stundenzahl.

Atomare Slots sind zusammenhängende Blöcke (Standard 1h oder 2h) an einem
Wochentag innerhalb der Unterrichtszeit, die die Mittagspause nicht schneiden.
Für eine Wochenstundenzahl H liefert die Backtracking-Suche Kombinationen
überschneidungsfreier Slots mit Gesamtdauer H, sortiert nach Tagesstreuung.
"""

import logging
from collections import OrderedDict
from datetime import time
from typing import Optional

from config.schema import TimeGridConfig
from models.timeslot import TimeSlot, intervals_overlap

logger = logging.getLogger(__name__)

Combination = list[TimeSlot]


class CombinationCache:
    """Kombinationen pro Stundenzahl für die Dauer eines Planungslaufs.

    capacity=0 bedeutet unbegrenzt; sonst wird der am längsten nicht
    genutzte Eintrag verdrängt.
    """

    def __init__(self, capacity: int = 0) -> None:
        self.capacity = capacity
        self._entries: OrderedDict[int, list[Combination]] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, hours: int) -> Optional[list[Combination]]:
        if hours not in self._entries:
            self.misses += 1
            return None
        self.hits += 1
        self._entries.move_to_end(hours)
        return self._entries[hours]

    def put(self, hours: int, combinations: list[Combination]) -> None:
        self._entries[hours] = combinations
        self._entries.move_to_end(hours)
        if self.capacity and len(self._entries) > self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Kombinations-Cache: {evicted}h verdrängt")

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, hours: int) -> bool:
        return hours in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class TimeSlotGenerator:
    """Erzeugt atomare Slots und Slot-Kombinationen aus dem Wochenraster."""

    def __init__(self, time_grid: TimeGridConfig, max_combinations: int = 100) -> None:
        self.time_grid = time_grid
        self.max_combinations = max_combinations
        self._atomic: Optional[list[TimeSlot]] = None

    @property
    def total_weekly_hours(self) -> int:
        """Unterrichtsstunden pro Woche über alle Tage."""
        return self.time_grid.teaching_hours_per_day * self.time_grid.days_per_week

    def is_within_grid(self, day: int, start: time, end: time) -> bool:
        """Termin liegt an einem Unterrichtstag, innerhalb der Unterrichtszeit und nicht in der Pause."""
        tg = self.time_grid
        lunch_s, lunch_e = tg.lunch_window
        return (
            0 <= day < tg.days_per_week
            and tg.opening <= start < end <= tg.closing
            and not intervals_overlap(start, end, lunch_s, lunch_e)
        )

    # ─── Atomare Slots ───

    def generate_all_possible_slots(self) -> list[TimeSlot]:
        """Alle atomaren Slots der Woche.

        Reihenfolge: Sitzungslänge, dann Startstunde, dann Wochentag. Wer die
        Liste von vorne auffüllt, verteilt dadurch automatisch über die Tage.
        """
        if self._atomic is not None:
            return self._atomic

        tg = self.time_grid
        slots: list[TimeSlot] = []
        for length in tg.session_lengths:
            for hour in range(tg.opening.hour, tg.closing.hour - length + 1):
                start, end = time(hour), time(hour + length)
                if not self.is_within_grid(0, start, end):
                    continue
                for day in range(tg.days_per_week):
                    slots.append(TimeSlot(day=day, start=start, end=end))

        logger.debug(f"{len(slots)} atomare Slots erzeugt")
        self._atomic = slots
        return slots

    # ─── Kombinationen ───

    def generate_combinations(self, target_hours: int) -> list[Combination]:
        """Überschneidungsfreie Slot-Kombinationen mit Gesamtdauer target_hours.

        Backtracking über die atomaren Slots; ein Zweig wird verworfen, sobald
        die Stundensumme das Ziel überschreitet. Die Suche endet, sobald
        max_combinations Kombinationen gesammelt sind.
        """
        if target_hours <= 0 or target_hours > self.total_weekly_hours:
            return []

        slots = self.generate_all_possible_slots()
        results: list[Combination] = []
        current: Combination = []

        def backtrack(index: int, hours: int) -> None:
            if hours == target_hours:
                results.append(list(current))
                return
            for i in range(index, len(slots)):
                if len(results) >= self.max_combinations:
                    return
                slot = slots[i]
                if hours + slot.duration_hours > target_hours:
                    continue
                if any(slot.overlaps(chosen) for chosen in current):
                    continue
                current.append(slot)
                backtrack(i + 1, hours + slot.duration_hours)
                current.pop()

        backtrack(0, 0)
        logger.debug(f"{len(results)} Kombinationen für {target_hours}h gefunden")
        return results

    @staticmethod
    def spread_score(combination: Combination) -> int:
        """Anzahl verschiedener Wochentage einer Kombination."""
        return len({slot.day for slot in combination})

    @classmethod
    def rank_by_spread(cls, combinations: list[Combination]) -> list[Combination]:
        """Absteigend nach Tagesstreuung; bei Gleichstand bleibt die Reihenfolge."""
        return sorted(combinations, key=cls.spread_score, reverse=True)

    def ranked_combinations(
        self, target_hours: int, cache: Optional[CombinationCache] = None
    ) -> list[Combination]:
        """Sortierte Kombinationen, bei übergebenem Cache nur einmal pro Stundenzahl berechnet."""
        if cache is not None:
            cached = cache.get(target_hours)
            if cached is not None:
                return cached
        ranked = self.rank_by_spread(self.generate_combinations(target_hours))
        if cache is not None:
            cache.put(target_hours, ranked)
        return ranked

    def precompute(self, max_hours: int, cache: CombinationCache) -> None:
        """Füllt den Cache für 1..max_hours."""
        for hours in range(1, max_hours + 1):
            self.ranked_combinations(hours, cache)
