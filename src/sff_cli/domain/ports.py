from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol

from sff_cli.domain.models import Document, OutputKind


class CompressorPort(Protocol):
    def compress(self, data: bytes) -> bytes:
        raise NotImplementedError

    def decompress(self, data: bytes) -> bytes:
        raise NotImplementedError


class DocumentRepositoryPort(Protocol):
    def load(self, input_path: Path) -> Document:
        raise NotImplementedError

    def save(self, document: Document, base_path: Path, kind: OutputKind) -> Path:
        raise NotImplementedError


class StatsReportWriterPort(Protocol):
    def write(self, stats: dict[str, Any], report_path: Path) -> None:
        raise NotImplementedError


class DocumentCodecPort(Protocol):
    def encode(self, document: Document) -> bytes:
        raise NotImplementedError

    def decode(self, data: bytes) -> Document:
        raise NotImplementedError
