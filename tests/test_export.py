"""Tests für den Excel-Export und die CLI."""

from pathlib import Path

import pytest
from click.testing import CliRunner
from openpyxl import load_workbook

from exceptions import NotFoundError
from export import ExcelExporter
from export.helpers import (
    build_entries, count_teacher_hours, format_entry, get_specialization_color, hour_rows,
    COLORS,
)
from main import cli
from scheduler import SemesterScheduler


@pytest.fixture
def scheduled(store, config):
    SemesterScheduler(store, config).generate_schedule(3)
    return store


@pytest.fixture
def data_file(scheduled, tmp_path: Path) -> Path:
    """Geplanter Test-Datensatz als JSON für die CLI."""
    return scheduled.save(tmp_path / "campus.json")


# ─── Hilfsfunktionen ──────────────────────────────────────────────────────────

class TestHelpers:
    def test_hour_rows(self, config):
        rows = hour_rows(config.time_grid)
        assert [h for h, _ in rows] == list(range(9, 17))
        assert [h for h, lunch in rows if lunch] == [12]

    def test_build_entries(self, scheduled):
        entries = build_entries(scheduled, 3)
        assert len(entries) == len(scheduled.data.timeslots)
        assert {e.label for e in entries} == {"MAT101-1", "MAT101-2", "PHY101-1", "PHY101-2"}
        assert count_teacher_hours(entries, 3) == 8
        assert count_teacher_hours(entries, 1) == 6

    def test_format_entry(self, scheduled):
        entry = next(e for e in build_entries(scheduled, 3) if e.teacher_id == 3)
        assert format_entry(entry, "teacher") == f"{entry.label}\nLabor 1"
        assert format_entry(entry, "room") == f"{entry.label}\nEva Koch"

    def test_colors(self):
        assert get_specialization_color("Physik") == COLORS["Physik"]
        assert get_specialization_color(None) == COLORS["sonstig"]


# ─── Excel ────────────────────────────────────────────────────────────────────

class TestExcelExporter:
    def test_sheets(self, scheduled, config, tmp_path: Path):
        path = ExcelExporter(scheduled, config, 3).export(tmp_path / "plan.xlsx")
        assert path.exists()
        wb = load_workbook(path)
        assert wb.sheetnames == [
            "Übersicht", "Lehrkraft 1", "Lehrkraft 3", "Raum 1", "Raum 3",
        ]

    def test_overview(self, scheduled, config, tmp_path: Path):
        path = ExcelExporter(scheduled, config, 3).export(tmp_path / "plan.xlsx")
        ws = load_workbook(path)["Übersicht"]
        assert ws["A1"].value == config.institution_name
        assert ws["A2"].value == "Semester: Herbst 2025"
        assert ws["A4"].value == "Sektion"
        labels = [ws.cell(row=r, column=1).value for r in range(5, 9)]
        assert labels == ["MAT101-1", "MAT101-2", "PHY101-1", "PHY101-2"]

    def test_teacher_grid(self, scheduled, config, tmp_path: Path):
        """Zeile 2 = 09:00, Spalte B = Montag, Zeile 5 = Mittagspause (verbunden)."""
        path = ExcelExporter(scheduled, config, 3).export(tmp_path / "plan.xlsx")
        ws = load_workbook(path)["Lehrkraft 3"]
        assert ws["B1"].value == "Mo"
        assert ws["A2"].value == "09:00–10:00"
        assert ws["B2"].value == "PHY101-1\nLabor 1"
        assert "A5:F5" in [str(r) for r in ws.merged_cells.ranges]

    def test_unknown_semester(self, scheduled, config):
        with pytest.raises(NotFoundError):
            ExcelExporter(scheduled, config, 99)

    def test_empty_semester(self, store, config, tmp_path: Path):
        path = ExcelExporter(store, config, 2).export(tmp_path / "leer.xlsx")
        assert load_workbook(path).sheetnames == ["Übersicht"]


# ─── CLI ──────────────────────────────────────────────────────────────────────

class TestCLI:
    @pytest.mark.parametrize("command", [
        "setup", "config", "generate", "validate", "schedule", "check-schedule",
        "revert", "sections", "enroll", "check-enrollment", "drop", "student",
        "export", "run",
    ])
    def test_command_registered(self, command):
        result = CliRunner().invoke(cli, [command, "--help"])
        assert result.exit_code == 0, result.output

    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Usage" in result.output

    def test_config_show_defaults(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["config", "show"])
        assert result.exit_code == 0
        assert "Standardwerte" in result.output

    def test_missing_data_file(self, tmp_path: Path):
        result = CliRunner().invoke(cli, ["sections", "-s", "3", "--data",
                                          str(tmp_path / "fehlt.json")])
        assert result.exit_code == 1
        assert "Keine Datendatei" in result.output

    def test_sections(self, data_file):
        result = CliRunner().invoke(cli, ["sections", "-s", "3", "--data", str(data_file)])
        assert result.exit_code == 0
        assert "PHY101-2" in result.output

    def test_sections_unknown_course(self, data_file):
        result = CliRunner().invoke(cli, ["sections", "-s", "3", "--course", "XYZ",
                                          "--data", str(data_file)])
        assert result.exit_code == 1

    def test_check_schedule(self, data_file):
        result = CliRunner().invoke(cli, ["check-schedule", "-s", "3", "--data", str(data_file)])
        assert result.exit_code == 0

    def test_enroll_and_drop(self, data_file):
        """Sektion 1 ist PHY101-1 (4h-Kurse werden zuerst angelegt)."""
        from data.store import CampusStore
        runner = CliRunner()
        result = runner.invoke(cli, ["enroll", "1", "1", "--data", str(data_file)])
        assert result.exit_code == 0, result.output
        assert CampusStore.open(data_file).count_enrolled(1) == 1

        result = runner.invoke(cli, ["student", "schedule", "1", "-s", "3",
                                     "--data", str(data_file)])
        assert result.exit_code == 0
        assert "PHY101-1" in result.output

        result = runner.invoke(cli, ["drop", "1", "1", "--data", str(data_file)])
        assert result.exit_code == 0
        result = runner.invoke(cli, ["drop", "1", "1", "--data", str(data_file)])
        assert result.exit_code == 1

    def test_enroll_rejected(self, data_file):
        result = CliRunner().invoke(cli, ["enroll", "999", "1", "--data", str(data_file)])
        assert result.exit_code == 1
        assert "nicht gefunden" in result.output

    def test_check_enrollment(self, data_file):
        result = CliRunner().invoke(cli, ["check-enrollment", "1", "1", "--data", str(data_file)])
        assert result.exit_code == 0
        assert "ZULÄSSIG" in result.output

    def test_student_progress(self, data_file):
        result = CliRunner().invoke(cli, ["student", "progress", "1", "--data", str(data_file)])
        assert result.exit_code == 0
        assert "Credits" in result.output

    def test_revert(self, data_file):
        from data.store import CampusStore
        result = CliRunner().invoke(cli, ["revert", "-s", "3", "--yes", "--data", str(data_file)])
        assert result.exit_code == 0
        assert CampusStore.open(data_file).get_sections_by_semester(3) == []

    def test_generate_schedule_export(self):
        """generate → schedule → check-schedule → export auf generierten Daten."""
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["generate", "--seed", "1", "--no-validate",
                                         "--data", "campus.json"])
            assert result.exit_code == 0, result.output
            assert Path("campus.json").exists()

            result = runner.invoke(cli, ["schedule", "-s", "3", "--data", "campus.json"])
            assert result.exit_code == 0, result.output

            result = runner.invoke(cli, ["check-schedule", "-s", "3", "--data", "campus.json"])
            assert result.exit_code == 0, result.output

            result = runner.invoke(cli, ["export", "-s", "3", "-o", "plan.xlsx",
                                         "--data", "campus.json"])
            assert result.exit_code == 0, result.output
            assert "Übersicht" in load_workbook("plan.xlsx").sheetnames

    def test_schedule_unknown_semester(self, data_file):
        result = CliRunner().invoke(cli, ["schedule", "-s", "99", "--data", str(data_file)])
        assert result.exit_code == 1
