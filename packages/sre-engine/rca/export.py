"""Report export — self-describing documents and an on-disk archive.

The document envelope:
    {
        "report_type": "system_rca",
        "schema_version": 1,
        "exported_at": "2026-01-01T00:00:00+00:00",
        "exported_by": "pulsecheck",
        "report": {...SystemRCAReport.to_dict()...}
    }
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from .schemas import SystemRCAReport

logger = logging.getLogger(__name__)

REPORT_TYPE = "system_rca"
SCHEMA_VERSION = 1
DEFAULT_EXPORTER = "pulsecheck"


class ExportFormatError(ValueError):
    """Document is not a recognised report export."""


def to_document(report: SystemRCAReport, exported_by: str = DEFAULT_EXPORTER) -> dict:
    return {
        "report_type": REPORT_TYPE,
        "schema_version": SCHEMA_VERSION,
        "exported_at": datetime.now(timezone.utc).isoformat(),
        "exported_by": exported_by,
        "report": report.to_dict(),
    }


def from_document(document: dict) -> SystemRCAReport:
    if document.get("report_type") != REPORT_TYPE:
        raise ExportFormatError(f"Unexpected report_type: {document.get('report_type')!r}")
    if document.get("schema_version") != SCHEMA_VERSION:
        raise ExportFormatError(
            f"Unsupported schema_version: {document.get('schema_version')!r}"
        )
    try:
        return SystemRCAReport.from_dict(document["report"])
    except (KeyError, TypeError, ValueError) as e:
        raise ExportFormatError(f"Malformed report body: {e}") from e


def dumps(report: SystemRCAReport, exported_by: str = DEFAULT_EXPORTER) -> str:
    return json.dumps(to_document(report, exported_by), indent=2, ensure_ascii=False)


def loads(text: str) -> SystemRCAReport:
    return from_document(json.loads(text))


class ReportArchive:
    """Persist export documents as rca_<report_id>_<timestamp>.json files."""

    def __init__(self, directory: str | Path, exported_by: str = DEFAULT_EXPORTER) -> None:
        self.directory = Path(directory)
        self.exported_by = exported_by
        self.directory.mkdir(parents=True, exist_ok=True)

    def save(self, report: SystemRCAReport) -> Path:
        """Write the report's export document and return the file path."""
        ts = report.timestamp.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        path = self.directory / f"rca_{report.report_id}_{ts}.json"
        path.write_text(dumps(report, self.exported_by), encoding="utf-8")
        logger.info("Report archived: %s", path)
        return path

    def _files(self) -> list[Path]:
        # Newest first, by the timestamp suffix
        return sorted(
            self.directory.glob("rca_*_*.json"),
            key=lambda f: f.stem.rsplit("_", 1)[-1],
            reverse=True,
        )

    def list_documents(self, limit: int = 20) -> list[dict]:
        """List recent export documents, newest first. Unreadable files are skipped."""
        documents = []
        for f in self._files():
            if len(documents) >= limit:
                break
            try:
                documents.append(json.loads(f.read_text(encoding="utf-8")))
            except (OSError, json.JSONDecodeError):
                logger.exception("Failed to read archived report: %s", f)
        return documents

    def get_document(self, report_id: str) -> dict | None:
        """Export document for one report id, or None."""
        for f in self._files():
            if f.stem.split("_")[1] != report_id:
                continue
            try:
                return json.loads(f.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError):
                logger.exception("Failed to read archived report: %s", f)
        return None
