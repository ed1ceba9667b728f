"""Excel-Export eines Semesterplans (openpyxl)."""

from pathlib import Path

from config.schema import CampusConfig
from data.store import CampusStore
from exceptions import NotFoundError
from models.room import Classroom
from models.teacher import Teacher

from export.helpers import (
    COLORS, ScheduleEntry, build_entries, count_teacher_hours,
    format_entries, get_specialization_color, hour_rows, today_str,
)


class ExcelExporter:
    """Exportiert ein Semester: Übersicht, je ein Wochenraster pro Lehrkraft und Raum."""

    # Spaltenbreiten (Excel-Einheiten)
    COL_ZEIT_W = 13
    COL_DAY_W  = 22

    # Zeilenhöhen (Punkte)
    ROW_HEADER_H  = 22
    ROW_HOUR_H    = 36
    ROW_PAUSE_H   = 12

    def __init__(self, store: CampusStore, config: CampusConfig, semester_id: int):
        self.store      = store
        self.config     = config
        self.tg         = config.time_grid
        self.days       = list(range(self.tg.days_per_week))
        self.day_names  = self.tg.day_names
        self.semester   = store.get_semester(semester_id)
        if self.semester is None:
            raise NotFoundError("Semester", semester_id)
        self.entries    = build_entries(store, semester_id)

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(self, output_path: Path) -> Path:
        """Erstellt die Excel-Datei mit allen Sheets."""
        from openpyxl import Workbook
        wb = Workbook()
        wb.remove(wb.active)   # Leeres Standard-Sheet entfernen

        self._sheet_uebersicht(wb)

        used_teachers = {e.teacher_id for e in self.entries}
        for teacher in sorted(self.store.data.teachers, key=lambda t: t.id):
            if teacher.id in used_teachers:
                self._sheet_lehrer(wb, teacher)

        used_rooms = {e.classroom_id for e in self.entries}
        for room in sorted(self.store.data.classrooms, key=lambda r: r.id):
            if room.id in used_rooms:
                self._sheet_raum(wb, room)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)
        return output_path

    # ─── Style-Helpers ────────────────────────────────────────────────────────

    def _fill(self, hex_color: str):
        from openpyxl.styles import PatternFill
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _center_align(self, wrap: bool = True):
        from openpyxl.styles import Alignment
        return Alignment(wrap_text=wrap, horizontal="center", vertical="center")

    def _thin_border(self):
        from openpyxl.styles import Border, Side
        s = Side(border_style="thin", color="BBBBBB")
        return Border(left=s, right=s, top=s, bottom=s)

    def _write_table_header(self, ws, row: int, headers: list[str]) -> None:
        from openpyxl.styles import Font
        fill_h = self._fill(COLORS["header"])
        border = self._thin_border()
        for col, h in enumerate(headers, 1):
            c = ws.cell(row=row, column=col, value=h)
            c.fill = fill_h
            c.font = Font(bold=True, color="FFFFFF")
            c.border = border

    # ─── Wochenraster ─────────────────────────────────────────────────────────

    def _write_week_grid(self, ws, entries: list[ScheduleEntry], mode: str) -> int:
        """Schreibt das Stundenraster; gibt die erste freie Excel-Zeile zurück.

        Zeile 1 = Kopf (Zeit | Mo | Di | …), danach eine Zeile pro Stunde.
        Mehrstündige Termine werden über ihre Zeilen zusammengeführt.
        """
        from openpyxl.styles import Font
        from openpyxl.utils import get_column_letter

        ws.column_dimensions["A"].width = self.COL_ZEIT_W
        for col in range(2, 2 + len(self.days)):
            ws.column_dimensions[get_column_letter(col)].width = self.COL_DAY_W

        border = self._thin_border()
        headers = ["Zeit"] + self.day_names[: len(self.days)]
        for col, text in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col, value=text)
            cell.fill = self._fill(COLORS["header"])
            cell.font = Font(bold=True, color="FFFFFF", size=10)
            cell.alignment = self._center_align(wrap=False)
            cell.border = border
        ws.row_dimensions[1].height = self.ROW_HEADER_H

        row_of_hour: dict[int, int] = {}
        excel_row = 2
        for hour, is_lunch in hour_rows(self.tg):
            row_of_hour[hour] = excel_row
            if is_lunch:
                ws.merge_cells(
                    start_row=excel_row, start_column=1,
                    end_row=excel_row, end_column=1 + len(self.days),
                )
                c = ws.cell(row=excel_row, column=1, value="── Mittagspause ──")
                c.fill = self._fill(COLORS["pause"])
                c.alignment = self._center_align(wrap=False)
                c.font = Font(italic=True, size=8, color="666666")
                ws.row_dimensions[excel_row].height = self.ROW_PAUSE_H
            else:
                c = ws.cell(row=excel_row, column=1, value=f"{hour:02d}:00–{hour + 1:02d}:00")
                c.alignment = self._center_align(wrap=False)
                c.border = border
                c.font = Font(size=8)
                for day in self.days:
                    c = ws.cell(row=excel_row, column=day + 2)
                    c.fill = self._fill(COLORS["free"])
                    c.border = border
                ws.row_dimensions[excel_row].height = self.ROW_HOUR_H
            excel_row += 1

        by_start: dict[tuple[int, int], list[ScheduleEntry]] = {}
        for e in entries:
            by_start.setdefault((e.day, e.start_hour), []).append(e)

        for (day, start), here in sorted(by_start.items()):
            row1 = row_of_hour.get(start)
            if row1 is None:
                continue
            col = day + 2
            c = ws.cell(row=row1, column=col, value=format_entries(here, mode))
            c.fill = self._fill(get_specialization_color(here[0].specialization))
            c.alignment = self._center_align()
            c.font = Font(size=8)
            row2 = row_of_hour.get(here[0].end_hour - 1)
            if row2 is not None and row2 > row1:
                ws.merge_cells(start_row=row1, start_column=col, end_row=row2, end_column=col)

        return excel_row

    # ─── Sheet: Übersicht ─────────────────────────────────────────────────────

    def _sheet_uebersicht(self, wb) -> None:
        from openpyxl.styles import Font
        ws = wb.create_sheet(title="Übersicht", index=0)
        border = self._thin_border()

        row = 1
        ws.cell(row=row, column=1, value=self.config.institution_name).font = Font(bold=True, size=14)
        row += 1
        ws.cell(row=row, column=1, value=f"Semester: {self.semester.name}")
        ws.cell(row=row, column=4, value=f"Erstellt: {today_str()}")
        row += 2

        headers = ["Sektion", "Kurs", "Lehrkraft", "Raum", "Std./Woche",
                   "Status", "Termine", "Belegung"]
        self._write_table_header(ws, row, headers)
        row += 1

        sections = sorted(
            self.store.get_sections_by_semester(self.semester.id),
            key=lambda s: (s.course_id, s.section_number),
        )
        for section in sections:
            course = self.store.get_course(section.course_id)
            teacher = self.store.get_teacher(section.teacher_id) if section.teacher_id else None
            room = self.store.get_classroom(section.classroom_id) if section.classroom_id else None
            slots = ", ".join(str(ts.to_slot()) for ts in self.store.get_timeslots(section.id))
            enrolled = self.store.count_enrolled(section.id)
            values = [
                section.label(course.code if course else str(section.course_id)),
                course.name if course else "",
                teacher.full_name if teacher else "–",
                room.name if room else "–",
                section.hours_per_week,
                section.status.value,
                slots or "–",
                f"{enrolled}/{section.capacity}",
            ]
            for col, value in enumerate(values, 1):
                ws.cell(row=row, column=col, value=value).border = border
            if not section.is_placed:
                ws.cell(row=row, column=6).fill = self._fill(COLORS["failed"])
            row += 1

        row += 1

        # Lehrkräfte-Auslastung
        ws.cell(row=row, column=1, value="Lehrkräfte-Auslastung").font = Font(bold=True)
        row += 1
        self._write_table_header(ws, row, ["ID", "Name", "Stunden/Woche"])
        row += 1
        for teacher in sorted(self.store.data.teachers, key=lambda t: t.id):
            ws.cell(row=row, column=1, value=teacher.id).border = border
            ws.cell(row=row, column=2, value=teacher.full_name).border = border
            ws.cell(row=row, column=3,
                    value=count_teacher_hours(self.entries, teacher.id)).border = border
            row += 1

        # Spaltenbreiten
        for letter, width in zip("ABCDEFGH", (12, 26, 24, 18, 12, 12, 40, 10)):
            ws.column_dimensions[letter].width = width

    # ─── Sheet: Lehrkraft ─────────────────────────────────────────────────────

    def _sheet_lehrer(self, wb, teacher: Teacher) -> None:
        from openpyxl.styles import Font
        title = f"Lehrkraft {teacher.id}"[:31]
        ws = wb.create_sheet(title=title)
        entries = [e for e in self.entries if e.teacher_id == teacher.id]
        last_row = self._write_week_grid(ws, entries, mode="teacher")

        last_row += 1
        ws.cell(row=last_row, column=1, value=teacher.full_name).font = Font(bold=True)
        ws.cell(row=last_row, column=2,
                value=f"{count_teacher_hours(self.entries, teacher.id)}h/Woche")

    # ─── Sheet: Raum ──────────────────────────────────────────────────────────

    def _sheet_raum(self, wb, room: Classroom) -> None:
        title = f"Raum {room.id}"[:31]
        ws = wb.create_sheet(title=title)
        entries = [e for e in self.entries if e.classroom_id == room.id]
        self._write_week_grid(ws, entries, mode="room")
