from __future__ import annotations

import time
from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console

from sff_cli.application.services.conversion_service import ConversionService
from sff_cli.domain.errors import SffError
from sff_cli.domain.models import ConversionSettings, OutputKind
from sff_cli.infrastructure.logging.logger_factory import configure_logging, create_logger
from sff_cli.infrastructure.reporting.json_report_writer import JsonReportWriter
from sff_cli.infrastructure.storage.file_repository import FileDocumentRepository

console = Console()
logger = create_logger(__name__)

app = typer.Typer(add_completion=False, help="Read, write and convert scanlation script files.")

_ERROR_EXIT_CODE = 2


class OutputFormat(str, Enum):
    sffx = "sffx"
    sffz = "sffz"
    txt = "txt"


def _build_service() -> ConversionService:
    return ConversionService(
        repository=FileDocumentRepository(),
        report_writer=JsonReportWriter(),
    )


@app.command()
def convert(
    in_path: Annotated[Path, typer.Option("--in", file_okay=True, dir_okay=False)],
    out_base: Annotated[Path, typer.Option("--out", help="Output path without extension")],
    output_format: Annotated[OutputFormat, typer.Option("--format", case_sensitive=False)] = OutputFormat.sffx,
    app_version: Annotated[Optional[str], typer.Option("--app-version", help="Override the App metadata")] = None,
    info: Annotated[Optional[str], typer.Option("--info", help="Override the Info metadata")] = None,
    report_out: Annotated[Optional[Path], typer.Option("--report-out")] = None,
    log_level: Annotated[str, typer.Option("--log-level", help="Logging level: DEBUG or INFO")] = "INFO",
) -> None:
    """Convert a .sffx, .sffz or .txt file into another format."""

    configure_logging(log_level)

    settings = ConversionSettings(
        output_kind=OutputKind(output_format.value),
        app_version=app_version,
        info=info,
    )

    logger.info("Starting conversion | in=%s out=%s format=%s", in_path, out_base, output_format.value)

    start = time.perf_counter()
    try:
        result = _build_service().convert(
            input_path=in_path,
            output_base=out_base,
            settings=settings,
            report_path=report_out,
        )
    except SffError as exc:
        logger.error("Conversion failed | in=%s error=%s", in_path, exc)
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=_ERROR_EXIT_CODE)
    elapsed = time.perf_counter() - start

    logger.info("Conversion finished | out=%s in %0.3fs", result.output_path, elapsed)

    console.print(f"Written: {result.output_path}")
    console.print_json(data=result.stats)

    raise typer.Exit(code=result.exit_code)


@app.command()
def stats(
    in_path: Annotated[Path, typer.Option("--in", file_okay=True, dir_okay=False)],
    log_level: Annotated[str, typer.Option("--log-level", help="Logging level: DEBUG or INFO")] = "INFO",
) -> None:
    """Print balloon, line and character counts of a document."""

    configure_logging(log_level)

    try:
        summary = _build_service().stats(in_path)
    except SffError as exc:
        logger.error("Stats failed | in=%s error=%s", in_path, exc)
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=_ERROR_EXIT_CODE)

    console.print_json(data=summary)
