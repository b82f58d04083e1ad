from __future__ import annotations

import zlib
from dataclasses import dataclass

from sff_cli.domain.errors import DocumentReadError
from sff_cli.domain.ports import CompressorPort


@dataclass(frozen=True)
class ZlibCompressor(CompressorPort):
    level: int = zlib.Z_DEFAULT_COMPRESSION

    def compress(self, data: bytes) -> bytes:
        return zlib.compress(data, self.level)

    def decompress(self, data: bytes) -> bytes:
        try:
            return zlib.decompress(data)
        except zlib.error as exc:
            raise DocumentReadError(f"Compressed payload is corrupt: {exc}") from exc
