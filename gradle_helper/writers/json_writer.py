"""
JSON writers for configuration records and validation reports.
"""

import json
from pathlib import Path
from typing import Any, Dict

from loguru import logger

from ..core.errors import handle_error
from ..core.models import BuildConfiguration
from ..core.report import ValidationReport


class JsonWriter:
    """Writer for JSON output of a configuration record."""

    def __init__(self, indent: int = 2) -> None:
        self.indent = indent

    def render(self, record: BuildConfiguration) -> str:
        return self._dump(record.to_dict())

    def write(self, record: BuildConfiguration, output_path: Path) -> None:
        try:
            output_path.write_text(self.render(record) + "\n", encoding="utf-8")
        except OSError as e:
            raise handle_error("write", e) from e
        logger.info(f"Configuration written to {output_path}")

    def _dump(self, data: Dict[str, Any]) -> str:
        return json.dumps(data, indent=self.indent)


class JsonReportWriter(JsonWriter):
    """Writer for JSON output of a validation report."""

    def render_report(self, report: ValidationReport) -> str:
        return self._dump(report.to_dict())

    def write_report(self, report: ValidationReport, output_path: Path) -> None:
        try:
            output_path.write_text(self.render_report(report) + "\n", encoding="utf-8")
        except OSError as e:
            raise handle_error("write_report", e) from e
        logger.info(f"Validation report written to {output_path}")
