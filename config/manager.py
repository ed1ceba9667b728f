"""Konfigurationsmanager: Laden, Speichern und Validieren der Einrichtungs-Konfiguration.

Nutzt ruamel.yaml für YAML-Serialisierung mit Kommentaren.
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.defaults import default_campus_config
from config.schema import CampusConfig

logger = logging.getLogger(__name__)

yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML-KOMMENTAR-AUFBAU ───

_YAML_HEADER = f"""\
# ============================================
# Kursplaner — Konfiguration der Einrichtung
# Version: 1.0
# Erstellt: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "time_grid": (
        "Wochenraster",
        "Unterrichtszeiten, Mittagspause und erlaubte Sitzungslängen (volle Stunden).",
    ),
    "scheduling": (
        "Planung",
        "Sektionsgröße, Tagesobergrenze pro Lehrkraft und Platzierungsverfahren.",
    ),
    "enrollment": (
        "Einschreibung",
        None,
    ),
    "progress": (
        "Studienfortschritt",
        None,
    ),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "campus_config.yaml"

    def first_run_check(self) -> bool:
        """Gibt True zurück wenn noch keine Config existiert (Erstaufruf)."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None) -> CampusConfig:
        """Lade Config aus YAML. Validiert automatisch via Pydantic."""
        target = Path(path) if path else self.DEFAULT_CONFIG
        if not target.exists():
            raise FileNotFoundError(
                f"Konfigurationsdatei nicht gefunden: {target}\n"
                f"Führen Sie 'python main.py setup' aus, um die Einrichtung zu konfigurieren."
            )
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        try:
            return CampusConfig.model_validate(dict(raw or {}))
        except ValidationError as e:
            raise ValueError(
                f"Konfigurationsdatei ungültig: {target}\n"
                f"Pydantic-Fehler: {e}"
            ) from e

    def load_or_default(self, path: Optional[Path] = None) -> CampusConfig:
        """Wie load(), fällt aber ohne Datei auf die Standard-Konfiguration zurück."""
        target = Path(path) if path else self.DEFAULT_CONFIG
        if not target.exists():
            logger.info(f"Keine Konfiguration unter {target} – verwende Standardwerte")
            return default_campus_config()
        return self.load(target)

    # ─── Speichern ───

    def save(self, config: CampusConfig, path: Optional[Path] = None) -> Path:
        """Speichere Config als YAML mit deutschen Kommentaren."""
        target = Path(path) if path else self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)

        logger.info(f"Konfiguration gespeichert: {target}")
        return target

    def _build_commented_yaml(self, config: CampusConfig) -> CommentedMap:
        """Baut die YAML-Struktur mit Kommentaren auf."""
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            if field not in cm:
                continue
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )

        scheduling = CommentedMap(cm["scheduling"])
        scheduling.yaml_add_eol_comment("greedy | combinations", "strategy")
        cm["scheduling"] = scheduling
        return cm
