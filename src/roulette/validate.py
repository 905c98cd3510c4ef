"""Validation layer for config and the GeoJSON country catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .config import AppConfig
from .countries import Catalog, load_catalog
from .models import UNKNOWN_COUNTRY_ID


@dataclass(slots=True)
class ValidationReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)


class Validator:
    """Checks that the catalog can be loaded and is usable for spinning."""

    def __init__(self, cfg: AppConfig) -> None:
        self.cfg = cfg

    def run(self, *, strict: bool = False) -> ValidationReport:
        report = ValidationReport()
        catalog = self._validate_catalog_file(report)
        if catalog is not None:
            self._validate_catalog(report, catalog, strict=strict)
        return report

    def _validate_catalog_file(self, report: ValidationReport) -> Catalog | None:
        path = self.cfg.paths.geojson
        if not path.exists():
            report.add_error(f"Missing GeoJSON file: {path}")
            return None
        try:
            catalog = load_catalog(path)
        except Exception as exc:
            report.add_error(f"Failed parsing GeoJSON file '{path}': {exc}")
            return None
        if len(catalog) == 0:
            report.add_error(f"GeoJSON file has no features: {path}")
            return None
        report.add_info(f"Loaded {len(catalog)} countries from {path}")
        return catalog

    def _validate_catalog(self, report: ValidationReport, catalog: Catalog, *, strict: bool) -> None:
        duplicates = catalog.duplicate_ids()
        if duplicates:
            self._add_quality_issue(
                report,
                f"Duplicate country ids: {_format_code_list(duplicates)}",
                strict=strict,
            )
        if UNKNOWN_COUNTRY_ID in catalog:
            self._add_quality_issue(
                report,
                f"Features without any identifier map to '{UNKNOWN_COUNTRY_ID}'",
                strict=strict,
            )

        no_centroid = [country.id for country in catalog if catalog.centroid_for(country.id) is None]
        if no_centroid:
            report.add_warning(
                "No geometry for map re-centering: " + _format_code_list(sorted(set(no_centroid)))
            )
        no_flag = [country.id for country in catalog if country.iso_a2 is None]
        if no_flag:
            report.add_info(
                "No ISO alpha-2 code (no flag shown): " + _format_code_list(sorted(set(no_flag)))
            )

    @staticmethod
    def _add_quality_issue(report: ValidationReport, msg: str, *, strict: bool) -> None:
        if strict:
            report.add_error(msg)
        else:
            report.add_warning(msg)


def _format_code_list(values: Sequence[str], limit: int = 12) -> str:
    if len(values) <= limit:
        return ", ".join(values)
    shown = ", ".join(values[:limit])
    return f"{shown}, ... (+{len(values) - limit} more)"


def format_report_lines(report: ValidationReport) -> Iterable[str]:
    for info in report.infos:
        yield f"[INFO] {info}"
    for warning in report.warnings:
        yield f"[WARN] {warning}"
    for error in report.errors:
        yield f"[ERROR] {error}"
    if report.ok:
        yield "[OK] Validation completed with no errors."
