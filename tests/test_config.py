"""Tests für Konfiguration: Schema-Validierung, Standardwerte und YAML-Roundtrip."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from config.defaults import (
    COURSE_CATALOG,
    SPECIALIZATION_METADATA,
    default_campus_config,
    default_time_grid,
)
from config.manager import ConfigManager
from config.schema import (
    CampusConfig,
    PlacementStrategy,
    SchedulingConfig,
    TimeGridConfig,
    parse_hhmm,
)


def _manager(tmp_path: Path) -> ConfigManager:
    mgr = ConfigManager()
    mgr.CONFIG_DIR = tmp_path
    mgr.DEFAULT_CONFIG = tmp_path / "campus_config.yaml"
    return mgr


# ─── ZEITRASTER ───────────────────────────────────────────────────────────────

class TestTimeGridConfig:
    def test_default_grid(self):
        """Standardraster: Mo–Fr, 09–17 Uhr, Pause 12–13, Sitzungen 1h/2h."""
        tg = default_time_grid()
        assert tg.days_per_week == 5
        assert tg.opening.hour == 9
        assert tg.closing.hour == 17
        assert tg.lunch_window[0].hour == 12
        assert tg.session_lengths == [1, 2]

    def test_teaching_hours_per_day(self):
        """8 Stunden Öffnungszeit minus 1 Stunde Pause = 7 Unterrichtsstunden."""
        assert default_time_grid().teaching_hours_per_day == 7

    def test_parse_hhmm(self):
        t = parse_hhmm("09:30")
        assert (t.hour, t.minute) == (9, 30)

    def test_half_hour_rejected(self):
        """Nur volle Stunden sind erlaubt."""
        with pytest.raises(ValidationError):
            TimeGridConfig(day_start="09:30")

    def test_invalid_time_rejected(self):
        with pytest.raises(ValidationError):
            TimeGridConfig(day_end="siebzehn")

    def test_lunch_outside_day_rejected(self):
        """Mittagspause muss innerhalb der Unterrichtszeit liegen."""
        with pytest.raises(ValidationError):
            TimeGridConfig(lunch_start="18:00", lunch_end="19:00")

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError):
            TimeGridConfig(day_start="17:00", day_end="09:00")

    def test_empty_session_lengths_rejected(self):
        with pytest.raises(ValidationError):
            TimeGridConfig(session_lengths=[])

    def test_session_lengths_sorted_and_deduplicated(self):
        tg = TimeGridConfig(session_lengths=[2, 1, 2])
        assert tg.session_lengths == [1, 2]

    def test_too_few_day_names_rejected(self):
        with pytest.raises(ValidationError):
            TimeGridConfig(days_per_week=5, day_names=["Mo", "Di"])


# ─── GESAMT-CONFIG ────────────────────────────────────────────────────────────

class TestCampusConfig:
    def test_defaults(self):
        """Standardwerte: 10 Plätze, 4h Tagesobergrenze, 100 Kombinationen, 5 Kurse."""
        config = default_campus_config()
        assert config.scheduling.section_capacity == 10
        assert config.scheduling.max_teacher_hours_per_day == 4
        assert config.scheduling.max_combinations == 100
        assert config.scheduling.strategy == PlacementStrategy.GREEDY
        assert config.enrollment.max_courses_per_semester == 5

    def test_plain_constructor_matches_defaults(self):
        assert CampusConfig().model_dump() == default_campus_config().model_dump()

    def test_daily_cap_below_shortest_session_rejected(self):
        """Tagesobergrenze kleiner als die kürzeste Sitzung → ungültig."""
        with pytest.raises(ValidationError):
            CampusConfig(
                time_grid=TimeGridConfig(session_lengths=[2]),
                scheduling=SchedulingConfig(max_teacher_hours_per_day=1),
            )

    def test_section_capacity_must_be_positive(self):
        with pytest.raises(ValidationError):
            SchedulingConfig(section_capacity=0)

    def test_strategy_from_string(self):
        sc = SchedulingConfig(strategy="combinations")
        assert sc.strategy == PlacementStrategy.COMBINATIONS


# ─── KATALOG-VORLAGEN ─────────────────────────────────────────────────────────

class TestCatalog:
    def test_prerequisites_reference_catalog(self):
        """Jede Voraussetzung im Katalog ist selbst ein Katalogkurs."""
        for code, entry in COURSE_CATALOG.items():
            prereq = entry[4]
            assert prereq is None or prereq in COURSE_CATALOG, code

    def test_specializations_known(self):
        for code, entry in COURSE_CATALOG.items():
            assert entry[1] in SPECIALIZATION_METADATA, code


# ─── YAML SPEICHERN / LADEN ───────────────────────────────────────────────────

class TestConfigManager:
    def test_save_and_load_roundtrip(self, tmp_path: Path):
        """Config speichern, laden und validieren."""
        config = default_campus_config().model_copy(update={"institution_name": "Test-Kolleg"})
        mgr = _manager(tmp_path)

        mgr.save(config)
        assert mgr.DEFAULT_CONFIG.exists()

        loaded = mgr.load()
        assert loaded.institution_name == "Test-Kolleg"
        assert loaded.time_grid == config.time_grid
        assert loaded.scheduling == config.scheduling

    def test_saved_yaml_has_comments(self, tmp_path: Path):
        mgr = _manager(tmp_path)
        mgr.save(default_campus_config())
        text = mgr.DEFAULT_CONFIG.read_text(encoding="utf-8")
        assert text.startswith("# ====")
        assert "Wochenraster" in text
        assert "greedy | combinations" in text

    def test_first_run_check_no_file(self, tmp_path: Path):
        """first_run_check gibt True zurück wenn keine Config existiert."""
        mgr = _manager(tmp_path)
        assert mgr.first_run_check() is True

    def test_first_run_check_with_file(self, tmp_path: Path):
        mgr = _manager(tmp_path)
        mgr.save(default_campus_config())
        assert mgr.first_run_check() is False

    def test_load_nonexistent_raises(self, tmp_path: Path):
        """Laden einer nicht-existenten Datei → FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            ConfigManager().load(tmp_path / "not_there.yaml")

    def test_load_or_default_without_file(self, tmp_path: Path):
        mgr = _manager(tmp_path)
        config = mgr.load_or_default()
        assert config.institution_name == default_campus_config().institution_name

    def test_invalid_values_raise_value_error(self, tmp_path: Path):
        """Ungültige Werte in der YAML → ValueError mit Dateiname."""
        path = tmp_path / "broken.yaml"
        path.write_text("scheduling:\n  section_capacity: 0\n", encoding="utf-8")
        with pytest.raises(ValueError, match="broken.yaml"):
            ConfigManager().load(path)

    def test_partial_file_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "partial.yaml"
        path.write_text("institution_name: Abendschule\n", encoding="utf-8")
        config = ConfigManager().load(path)
        assert config.institution_name == "Abendschule"
        assert config.scheduling.section_capacity == 10


# ─── SETUP-WIZARD ─────────────────────────────────────────────────────────────

class TestSetupWizard:
    def test_setup_saves_config(self):
        """setup mit Standardraster und -planung → YAML im config-Verzeichnis."""
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["setup"], input="y\nAbendschule\ny\ny\n4\ny\n")
            assert result.exit_code == 0, result.output
            config = ConfigManager().load(Path("config/campus_config.yaml"))
        assert config.institution_name == "Abendschule"
        assert config.enrollment.max_courses_per_semester == 4
        assert config.time_grid == default_time_grid()

    def test_setup_cancelled(self):
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["setup"], input="n\n")
            assert result.exit_code == 0
            assert not Path("config/campus_config.yaml").exists()
