from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from sff_cli.domain.errors import DocumentNotFoundError, DocumentReadError, DocumentWriteError, UnsupportedExtensionError
from sff_cli.domain.models import Document, OutputKind
from sff_cli.domain.ports import CompressorPort, DocumentCodecPort, DocumentRepositoryPort
from sff_cli.infrastructure.codecs.plain_text_codec import PlainTextCodec
from sff_cli.infrastructure.codecs.xml_codec import XmlCodec
from sff_cli.infrastructure.logging.logger_factory import create_logger
from sff_cli.infrastructure.storage.zlib_compressor import ZlibCompressor


logger = create_logger(__name__)


@dataclass(frozen=True)
class CompressedXmlCodec(DocumentCodecPort):
    """`.sffz` codec: the raw XML bytes passed through a compressor."""

    compressor: CompressorPort = field(default_factory=ZlibCompressor)
    xml_codec: XmlCodec = field(default_factory=XmlCodec)

    def encode(self, document: Document) -> bytes:
        return self.compressor.compress(self.xml_codec.encode(document))

    def decode(self, data: bytes) -> Document:
        return self.xml_codec.decode(self.compressor.decompress(data))


@dataclass(frozen=True)
class FileDocumentRepository(DocumentRepositoryPort):
    """Load and save documents as `.sffx`, `.sffz` or `.txt` files.

    The format is chosen purely from the file suffix on load and from the
    requested `OutputKind` on save.
    """

    compressor: CompressorPort = field(default_factory=ZlibCompressor)

    def codec_for(self, kind: OutputKind) -> DocumentCodecPort:
        if kind is OutputKind.RAW_XML:
            return XmlCodec()
        if kind is OutputKind.COMPRESSED_XML:
            return CompressedXmlCodec(compressor=self.compressor)
        return PlainTextCodec()

    def load(self, input_path: Path) -> Document:
        if not input_path.exists():
            raise DocumentNotFoundError(str(input_path))

        kind = OutputKind.from_extension(input_path.suffix)
        if kind is None:
            raise UnsupportedExtensionError(input_path.suffix)

        try:
            data = input_path.read_bytes()
        except OSError as exc:
            raise DocumentReadError(str(exc)) from exc

        try:
            document = self.codec_for(kind).decode(data)
        except UnicodeDecodeError as exc:
            raise DocumentReadError(f"{input_path} is not valid UTF-8: {exc}") from exc

        logger.debug(
            "Document loaded | path=%s kind=%s balloons=%s",
            input_path,
            kind.name,
            document.balloon_count(),
        )
        return document

    def save(self, document: Document, base_path: Path, kind: OutputKind) -> Path:
        output_path = base_path.with_name(base_path.name + kind.extension)
        payload = self.codec_for(kind).encode(document)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(payload)
        except OSError as exc:
            raise DocumentWriteError(str(exc)) from exc

        logger.debug("Document saved | path=%s kind=%s bytes=%s", output_path, kind.name, len(payload))
        return output_path
