from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from typing import Iterator, Optional

from lxml import etree

from sff_cli.domain.errors import (
    DocumentWriteError,
    InvalidImageEncodingError,
    MalformedXmlError,
    MissingSectionError,
)
from sff_cli.domain.models import Balloon, BalloonImage, BalloonType, Document, encode_image_bytes
from sff_cli.domain.ports import DocumentCodecPort
from sff_cli.infrastructure.logging.logger_factory import create_logger


logger = create_logger(__name__)

# URL-safe alphabet, padding not allowed.
_B64_RE = re.compile(r"[A-Za-z0-9_-]*")

# Code points outside the XML 1.0 Char production.
_INVALID_XML_CHAR_RE = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


def encode_xml(document: Document) -> str:
    xml = document.render_xml()
    invalid = _INVALID_XML_CHAR_RE.search(xml)
    if invalid is not None:
        raise DocumentWriteError(
            f"Character U+{ord(invalid.group()):04X} cannot be stored in XML | offset={invalid.start()}"
        )
    return xml


def decode_xml(xml: str) -> Document:
    return decode_xml_bytes(xml.encode("utf-8"))


def decode_xml_bytes(data: bytes) -> Document:
    """Rebuild a document from its XML form.

    Metric nodes (TLLength, LineCount, ...) are ignored: the model recomputes
    them, so a stale value in the file never fails the decode.
    """
    # Embedded page images easily exceed libxml2's default 10 MB text node limit.
    parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)
    try:
        root = etree.fromstring(data, parser=parser)
    except etree.XMLSyntaxError as exc:
        raise MalformedXmlError(str(exc)) from exc

    metadata = _first_descendant(root, "Metadata")
    if metadata is None:
        raise MissingSectionError("Metadata")

    document = Document(
        script_version=_child_text(metadata, "Script"),
        app_version=_child_text(metadata, "App"),
        info=_child_text(metadata, "Info"),
    )

    balloons = _first_descendant(root, "Balloons")
    if balloons is None:
        raise MissingSectionError("Balloons")

    for node in balloons:
        if not isinstance(node.tag, str):
            # Comments and processing instructions.
            continue
        document.balloons.append(_decode_balloon(node))

    logger.debug(
        "XML decoded | balloons=%s script=%s app=%s",
        document.balloon_count(),
        document.script_version,
        document.app_version,
    )
    return document


def decode_image_text(text: str) -> bytes:
    cleaned = text.strip()
    if not _B64_RE.fullmatch(cleaned) or len(cleaned) % 4 == 1:
        raise InvalidImageEncodingError("Image payload is not URL-safe unpadded base64")

    try:
        data = base64.urlsafe_b64decode(cleaned + "=" * (-len(cleaned) % 4))
    except (binascii.Error, ValueError) as exc:
        raise InvalidImageEncodingError(str(exc)) from exc

    # Non-zero trailing bits in the last symbol decode silently; reject them.
    if encode_image_bytes(data) != cleaned:
        raise InvalidImageEncodingError("Image payload has non-canonical trailing bits")
    return data


@dataclass(frozen=True)
class XmlCodec(DocumentCodecPort):
    """Lossless `.sffx` codec."""

    def encode(self, document: Document) -> bytes:
        return encode_xml(document).encode("utf-8")

    def decode(self, data: bytes) -> Document:
        return decode_xml_bytes(data)


def _decode_balloon(node: etree._Element) -> Balloon:
    balloon = Balloon(kind=BalloonType.from_xml_attr(node.get("type")))

    for child in _element_children(node):
        name = _local_name(child)
        if name == "TL":
            balloon.translation_lines.append(child.text or "")
        elif name == "PR":
            balloon.proofread_lines.append(child.text or "")
        elif name == "Comment":
            balloon.comment_lines.append(child.text or "")

    img = _first_child(node, "img")
    if img is not None:
        balloon.image = BalloonImage(
            image_kind=img.get("type", ""),
            image_bytes=decode_image_text(img.text or ""),
        )

    return balloon


def _local_name(elem: etree._Element) -> str:
    return etree.QName(elem.tag).localname if isinstance(elem.tag, str) else ""


def _element_children(elem: etree._Element) -> Iterator[etree._Element]:
    return (child for child in elem if isinstance(child.tag, str))


def _first_child(elem: etree._Element, name: str) -> Optional[etree._Element]:
    return next((c for c in _element_children(elem) if _local_name(c) == name), None)


def _first_descendant(root: etree._Element, name: str) -> Optional[etree._Element]:
    return next((e for e in root.iter() if _local_name(e) == name), None)


def _child_text(elem: etree._Element, name: str) -> str:
    # Missing node and missing text both resolve to "".
    child = _first_child(elem, name)
    if child is None:
        return ""
    return child.text or ""
