from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sff_cli.domain.errors import DocumentWriteError
from sff_cli.domain.ports import StatsReportWriterPort
from sff_cli.infrastructure.logging.logger_factory import create_logger


logger = create_logger(__name__)


@dataclass(frozen=True)
class JsonReportWriter(StatsReportWriterPort):
    def write(self, stats: dict[str, Any], report_path: Path) -> None:
        try:
            report_path.parent.mkdir(parents=True, exist_ok=True)
            report_path.write_text(json.dumps(stats, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as exc:
            raise DocumentWriteError(str(exc)) from exc
        logger.debug("Report written | path=%s", report_path)
