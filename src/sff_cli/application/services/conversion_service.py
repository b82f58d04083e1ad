from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from sff_cli.domain.models import ConversionResult, ConversionSettings, Document, OutputKind
from sff_cli.domain.ports import DocumentRepositoryPort, StatsReportWriterPort
from sff_cli.infrastructure.logging.logger_factory import create_logger


logger = create_logger(__name__)


@dataclass(frozen=True)
class ConversionService:
    repository: DocumentRepositoryPort
    report_writer: StatsReportWriterPort

    def convert(
        self,
        input_path: Path,
        output_base: Path,
        settings: ConversionSettings,
        report_path: Optional[Path] = None,
    ) -> ConversionResult:
        logger.info("Loading document | path=%s", input_path)
        document = self.repository.load(input_path)

        _apply_metadata(document, settings)

        stats = document_stats(input_path, document)
        logger.info(
            "Loaded document | balloons=%s lines=%s",
            stats["balloon_count"],
            stats["line_count"],
        )

        if settings.output_kind is OutputKind.PLAIN_TEXT:
            logger.info("Plain text output drops metadata, comments and images | out=%s", output_base)

        output_path = self.repository.save(document, output_base, settings.output_kind)
        stats["output_path"] = str(output_path)

        if report_path is not None:
            self.report_writer.write(stats, report_path)

        logger.info("Document written | path=%s kind=%s", output_path, settings.output_kind.name)
        return ConversionResult(output_path=str(output_path), stats=stats, exit_code=0)

    def stats(self, input_path: Path) -> dict[str, Any]:
        document = self.repository.load(input_path)
        return document_stats(input_path, document)


def document_stats(input_path: Path, document: Document) -> dict[str, Any]:
    return {
        "input_path": str(input_path),
        "script_version": document.script_version,
        "app_version": document.app_version,
        "info": document.info,
        **document.stats(),
    }


def _apply_metadata(document: Document, settings: ConversionSettings) -> None:
    if settings.app_version is not None:
        document.app_version = settings.app_version
    if settings.info is not None:
        document.info = settings.info
