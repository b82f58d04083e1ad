from __future__ import annotations

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional
from xml.sax.saxutils import escape

DEFAULT_SCRIPT_VERSION = "Scanlation Script File v0.2.0"
DEFAULT_INFO = "Num"

LINE_SEPARATOR = "\n//\n"
BALLOON_SEPARATOR = "\n\n"

# Character references survive end-of-line and attribute-value normalization.
_TEXT_ENTITIES = {"\r": "&#13;"}
_ATTR_ENTITIES = {'"': "&quot;", "\r": "&#13;", "\n": "&#10;", "\t": "&#9;"}


class BalloonType(Enum):
    """Kind of a balloon. ST is sub-text, OT is over-text."""

    DIALOGUE = "dialogue"
    SQUARE = "square"
    THINKING = "thinking"
    SUB_TEXT = "sub_text"
    OVER_TEXT = "over_text"

    @property
    def xml_attr(self) -> str:
        return _XML_ATTRS[self]

    @property
    def text_prefix(self) -> str:
        return _TEXT_PREFIXES[self]

    @property
    def text_header(self) -> str:
        return f"{self.text_prefix}: "

    @classmethod
    def from_xml_attr(cls, value: Optional[str]) -> BalloonType:
        return _XML_ATTRS_REVERSE.get(value or "", cls.DIALOGUE)

    @classmethod
    def from_text_prefix(cls, value: str) -> BalloonType:
        return _TEXT_PREFIXES_REVERSE.get(value, cls.DIALOGUE)


_XML_ATTRS: dict[BalloonType, str] = {
    BalloonType.DIALOGUE: "Dialogue",
    BalloonType.SQUARE: "Square",
    BalloonType.THINKING: "Thinking",
    BalloonType.SUB_TEXT: "ST",
    BalloonType.OVER_TEXT: "OT",
}

_TEXT_PREFIXES: dict[BalloonType, str] = {
    BalloonType.DIALOGUE: "()",
    BalloonType.SQUARE: "[]",
    BalloonType.THINKING: "{}",
    BalloonType.SUB_TEXT: "ST",
    BalloonType.OVER_TEXT: "OT",
}

_XML_ATTRS_REVERSE = {v: k for k, v in _XML_ATTRS.items()}
_TEXT_PREFIXES_REVERSE = {v: k for k, v in _TEXT_PREFIXES.items()}


class OutputKind(Enum):
    """Output file types: raw XML, zlib-compressed XML and lossy plain text."""

    RAW_XML = "sffx"
    COMPRESSED_XML = "sffz"
    PLAIN_TEXT = "txt"

    @property
    def extension(self) -> str:
        return f".{self.value}"

    @classmethod
    def from_extension(cls, suffix: str) -> Optional[OutputKind]:
        wanted = suffix.lower().lstrip(".")
        for kind in cls:
            if kind.value == wanted:
                return kind
        return None


@dataclass
class BalloonImage:
    image_kind: str
    image_bytes: bytes


@dataclass
class Balloon:
    """A single dialogue/caption unit.

    Holds translation and proofread lines, reviewer comments and an optional
    image. Proofread lines supersede translation lines once they exist.
    """

    translation_lines: list[str] = field(default_factory=list)
    proofread_lines: list[str] = field(default_factory=list)
    comment_lines: list[str] = field(default_factory=list)
    kind: BalloonType = BalloonType.DIALOGUE
    image: Optional[BalloonImage] = None

    def add_image(self, image_kind: str, image_bytes: bytes) -> None:
        self.image = BalloonImage(image_kind=image_kind, image_bytes=bytes(image_bytes))

    def remove_image(self) -> None:
        self.image = None

    def translation_char_count(self) -> int:
        return _char_count(self.translation_lines)

    def proofread_char_count(self) -> int:
        return _char_count(self.proofread_lines)

    def comment_char_count(self) -> int:
        return _char_count(self.comment_lines)

    def line_count(self) -> int:
        if self.proofread_lines:
            return len(self.proofread_lines)
        return len(self.translation_lines)

    def final_lines(self) -> list[str]:
        return self.proofread_lines if self.proofread_lines else self.translation_lines

    def render_plain_text(self) -> str:
        """Lossy rendering: comments and image are dropped."""
        header = self.kind.text_header
        return LINE_SEPARATOR.join(f"{header}{line}" for line in self.final_lines())

    def render_xml(self) -> str:
        parts = [f'<Balloon type="{self.kind.xml_attr}">']
        parts.extend(f"<TL>{escape(line, _TEXT_ENTITIES)}</TL>" for line in self.translation_lines)
        parts.extend(f"<PR>{escape(line, _TEXT_ENTITIES)}</PR>" for line in self.proofread_lines)
        parts.extend(f"<Comment>{escape(line, _TEXT_ENTITIES)}</Comment>" for line in self.comment_lines)

        if self.image is not None:
            parts.append(
                f'<img type="{escape(self.image.image_kind, _ATTR_ENTITIES)}">'
                f"{encode_image_bytes(self.image.image_bytes)}</img>"
            )

        parts.append("</Balloon>")
        return "".join(parts)


@dataclass
class Document:
    """An ordered collection of balloons plus script/app/info metadata.

    Metrics are derived from `balloons` every time they are asked for.
    """

    script_version: str = DEFAULT_SCRIPT_VERSION
    app_version: str = ""
    info: str = DEFAULT_INFO
    balloons: list[Balloon] = field(default_factory=list)

    def translation_char_count(self) -> int:
        return sum(b.translation_char_count() for b in self.balloons)

    def proofread_char_count(self) -> int:
        return sum(b.proofread_char_count() for b in self.balloons)

    def comment_char_count(self) -> int:
        return sum(b.comment_char_count() for b in self.balloons)

    def line_count(self) -> int:
        return sum(b.line_count() for b in self.balloons)

    def balloon_count(self) -> int:
        return len(self.balloons)

    def stats(self) -> dict[str, Any]:
        return {
            "tl_length": self.translation_char_count(),
            "pr_length": self.proofread_char_count(),
            "cm_length": self.comment_char_count(),
            "balloon_count": self.balloon_count(),
            "line_count": self.line_count(),
        }

    def render_plain_text(self) -> str:
        return BALLOON_SEPARATOR.join(b.render_plain_text() for b in self.balloons)

    def render_xml(self) -> str:
        parts = [
            "<Document><Metadata>",
            f"<Script>{escape(self.script_version, _TEXT_ENTITIES)}</Script>",
            f"<App>{escape(self.app_version, _TEXT_ENTITIES)}</App>",
            f"<Info>{escape(self.info, _TEXT_ENTITIES)}</Info>",
            f"<TLLength>{self.translation_char_count()}</TLLength>",
            f"<PRLength>{self.proofread_char_count()}</PRLength>",
            f"<CMLength>{self.comment_char_count()}</CMLength>",
            f"<BalloonCount>{self.balloon_count()}</BalloonCount>",
            f"<LineCount>{self.line_count()}</LineCount>",
            "</Metadata><Balloons>",
        ]
        parts.extend(b.render_xml() for b in self.balloons)
        parts.append("</Balloons></Document>")
        return "".join(parts)


@dataclass(frozen=True)
class ConversionSettings:
    output_kind: OutputKind
    app_version: Optional[str] = None
    info: Optional[str] = None


@dataclass(frozen=True)
class ConversionResult:
    output_path: str
    stats: dict[str, Any]
    exit_code: int


def encode_image_bytes(data: bytes) -> str:
    """URL-safe base64 without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _char_count(lines: list[str]) -> int:
    # Lengths are UTF-8 byte lengths, not code points.
    return sum(len(line.encode("utf-8")) for line in lines)
