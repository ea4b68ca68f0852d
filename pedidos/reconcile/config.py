"""
Configuration for catalog reconciliation.

Holds the label lookup order, the fallback label and the export naming
rules. Config is declarative JSON - edit the file, not the code.
"""

import json
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

DEFAULT_CONFIG_PATH = Path(__file__).parent / "reconcile_config.json"

DEFAULT_LABEL_FIELDS = (
    "nombre",
    "Nombre",
    "NOMBRE",
    "descripcion",
    "Descripcion",
    "DESCRIPCION",
)
DEFAULT_FALLBACK_LABEL = "Sin nombre"


@dataclass
class ReportSettings:
    """Naming and header row of the missing-values report."""
    filename: str = "valores_faltantes.csv"
    headers: tuple[str, ...] = ("Key", "Label", "Display")


@dataclass
class ExportSettings:
    """Settings for the cleaned catalog workbook."""
    sheet_title: str = "Catalogo"
    suffix: str = "_limpio"
    default_extension: str = ".xlsx"
    recognized_extensions: tuple[str, ...] = (".xls", ".xlsx")


@dataclass
class Config:
    """Full configuration for reconciliation and export."""
    label_fields: tuple[str, ...] = DEFAULT_LABEL_FIELDS
    fallback_label: str = DEFAULT_FALLBACK_LABEL
    report: ReportSettings = field(default_factory=ReportSettings)
    export: ExportSettings = field(default_factory=ExportSettings)

    def __post_init__(self):
        """Normalize extensions so lookups are case-insensitive."""
        self.export.default_extension = _normalize_extension(self.export.default_extension)
        self.export.recognized_extensions = tuple(
            _normalize_extension(ext) for ext in self.export.recognized_extensions
        )


def _normalize_extension(ext: str) -> str:
    ext = ext.strip().lower()
    if ext and not ext.startswith("."):
        ext = "." + ext
    return ext


def load_config(config_path: str | Path) -> Config:
    """
    Load configuration from JSON file.

    Args:
        config_path: Path to a reconcile_config.json

    Returns:
        Config object; missing keys fall back to defaults
    """
    path = Path(config_path)
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    report_data = data.get("report", {})
    report = ReportSettings(
        filename=report_data.get("filename", ReportSettings.filename),
        headers=tuple(report_data.get("headers", ReportSettings.headers)),
    )
    if len(report.headers) != 3:
        raise ValueError(f"report.headers must have 3 entries, got {len(report.headers)}")

    export_data = data.get("export", {})
    export = ExportSettings(
        sheet_title=export_data.get("sheet_title", ExportSettings.sheet_title),
        suffix=export_data.get("suffix", ExportSettings.suffix),
        default_extension=export_data.get("default_extension", ExportSettings.default_extension),
        recognized_extensions=tuple(
            export_data.get("recognized_extensions", ExportSettings.recognized_extensions)
        ),
    )

    return Config(
        label_fields=tuple(data.get("label_fields", DEFAULT_LABEL_FIELDS)),
        fallback_label=data.get("fallback_label", DEFAULT_FALLBACK_LABEL),
        report=report,
        export=export,
    )


@lru_cache
def default_config() -> Config:
    """Config shipped with the package (cached)."""
    return load_config(DEFAULT_CONFIG_PATH)
