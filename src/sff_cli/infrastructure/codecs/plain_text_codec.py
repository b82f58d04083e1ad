from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from sff_cli.domain.models import Balloon, BalloonType, Document
from sff_cli.domain.ports import DocumentCodecPort
from sff_cli.infrastructure.logging.logger_factory import create_logger


logger = create_logger(__name__)

CONTINUATION_MARKER = "//"

# Two-character type prefix plus the ": " spacer.
_HEADER_LEN = 4


def encode_plain_text(document: Document) -> str:
    """Lossy: metadata, comments and images are not written."""
    return document.render_plain_text()


def decode_plain_text(text: str) -> Document:
    """Best-effort reconstruction of a document from its plain-text form.

    Balloon boundaries are inferred: a content line followed by a line
    containing the continuation marker belongs to the same balloon as the
    next content line. Every reconstructed line lands in `translation_lines`
    because the text form does not record proofread provenance.
    """
    lines = [line for line in text.split("\n") if line]
    assembler = _BalloonAssembler()

    for i, current in enumerate(lines):
        if CONTINUATION_MARKER in current:
            continue

        following = lines[i + 1] if i + 1 < len(lines) else ""
        kind = BalloonType.from_text_prefix(current[:2])
        content = current[_HEADER_LEN:].strip()

        if CONTINUATION_MARKER in following:
            assembler.accumulate(content, kind)
        else:
            assembler.finish(content, kind)

    assembler.flush()

    logger.debug("Plain text decoded | lines=%s balloons=%s", len(lines), len(assembler.balloons))
    return Document(balloons=assembler.balloons)


class _State(Enum):
    IDLE = "idle"
    ACCUMULATING = "accumulating"


@dataclass
class _BalloonAssembler:
    balloons: list[Balloon] = field(default_factory=list)
    state: _State = _State.IDLE
    pending: list[str] = field(default_factory=list)
    pending_kind: BalloonType = BalloonType.DIALOGUE

    def accumulate(self, content: str, kind: BalloonType) -> None:
        self.pending.append(content)
        self.pending_kind = kind
        self.state = _State.ACCUMULATING

    def finish(self, content: str, kind: BalloonType) -> None:
        if self.state is _State.ACCUMULATING:
            self.pending.append(content)
            self._emit(list(self.pending), kind)
            self._reset()
        else:
            self._emit([content], kind)

    def flush(self) -> None:
        # A trailing continuation with no closing line still becomes a balloon.
        if self.state is _State.ACCUMULATING and self.pending:
            logger.debug("Flushing dangling continuation | lines=%s", len(self.pending))
            self._emit(list(self.pending), self.pending_kind)
            self._reset()

    def _emit(self, lines: list[str], kind: BalloonType) -> None:
        self.balloons.append(Balloon(translation_lines=lines, kind=kind))

    def _reset(self) -> None:
        self.state = _State.IDLE
        self.pending.clear()
        self.pending_kind = BalloonType.DIALOGUE


@dataclass(frozen=True)
class PlainTextCodec(DocumentCodecPort):
    """Lossy `.txt` codec."""

    def encode(self, document: Document) -> bytes:
        return encode_plain_text(document).encode("utf-8")

    def decode(self, data: bytes) -> Document:
        return decode_plain_text(data.decode("utf-8"))
