from __future__ import annotations

import pytest

from sff_cli.domain.errors import DocumentWriteError, InvalidImageEncodingError, MalformedXmlError, MissingSectionError
from sff_cli.domain.models import Balloon, BalloonType, Document
from sff_cli.infrastructure.codecs.xml_codec import XmlCodec, decode_image_text, decode_xml, encode_xml

_NUMNAM_XML = (
    "<Document><Metadata><Script>Scanlation Script File v0.2.0</Script><App></App><Info>Num</Info>"
    "<TLLength>9</TLLength><PRLength>6</PRLength><CMLength>0</CMLength>"
    "<BalloonCount>2</BalloonCount><LineCount>2</LineCount></Metadata><Balloons>"
    '<Balloon type="OT"><TL>num</TL><TL>nam</TL><PR>numnam</PR></Balloon>'
    '<Balloon type="Dialogue"><TL>num</TL></Balloon>'
    "</Balloons></Document>"
)


def _wrap(balloons_xml: str) -> str:
    return f"<Document><Metadata><Script>s</Script><App>a</App><Info>i</Info></Metadata><Balloons>{balloons_xml}</Balloons></Document>"


def test_decode_reproduces_document() -> None:
    d = decode_xml(_NUMNAM_XML)

    assert d.script_version == "Scanlation Script File v0.2.0"
    assert d.app_version == ""
    assert d.info == "Num"
    assert len(d.balloons) == 2
    assert d.balloons[0].kind is BalloonType.OVER_TEXT
    assert d.balloons[0].translation_lines == ["num", "nam"]
    assert d.balloons[0].proofread_lines == ["numnam"]
    assert d.balloons[1].kind is BalloonType.DIALOGUE
    assert d.balloons[1].translation_lines == ["num"]


def test_round_trip_is_byte_identical() -> None:
    assert encode_xml(decode_xml(_NUMNAM_XML)) == _NUMNAM_XML


def test_round_trip_with_image_comments_and_reserved_characters() -> None:
    d = Document(app_version="sff 1.0", info="Chapter <3> & more")
    b = Balloon(
        translation_lines=["Fish & chips", ""],
        proofread_lines=["<loud>"],
        comment_lines=["check \"quotes\""],
        kind=BalloonType.SUB_TEXT,
    )
    b.add_image("png", bytes(range(256)))
    d.balloons.append(b)
    d.balloons.append(Balloon(kind=BalloonType.THINKING))

    xml = d.render_xml()
    decoded = decode_xml(xml)

    assert decoded == d
    assert encode_xml(decoded) == xml


def test_codec_bytes_round_trip() -> None:
    codec = XmlCodec()
    data = codec.encode(decode_xml(_NUMNAM_XML))

    assert data == _NUMNAM_XML.encode("utf-8")
    assert codec.decode(data).render_xml() == _NUMNAM_XML


def test_stale_metrics_are_ignored() -> None:
    stale = _NUMNAM_XML.replace("<TLLength>9</TLLength>", "<TLLength>999</TLLength>")
    assert encode_xml(decode_xml(stale)) == _NUMNAM_XML


def test_unknown_type_decodes_to_dialogue() -> None:
    d = decode_xml(_wrap('<Balloon type="Bogus"><TL>x</TL></Balloon><Balloon><TL>y</TL></Balloon>'))
    assert [b.kind for b in d.balloons] == [BalloonType.DIALOGUE, BalloonType.DIALOGUE]


def test_empty_text_nodes_decode_to_empty_strings() -> None:
    d = decode_xml(_wrap('<Balloon type="Square"><TL/><PR></PR><Comment/></Balloon>'))
    b = d.balloons[0]
    assert b.translation_lines == [""]
    assert b.proofread_lines == [""]
    assert b.comment_lines == [""]


def test_missing_metadata_nodes_decode_to_empty_strings() -> None:
    d = decode_xml("<Document><Metadata><Info/></Metadata><Balloons/></Document>")
    assert d.script_version == ""
    assert d.app_version == ""
    assert d.info == ""
    assert d.balloons == []


def test_image_is_decoded() -> None:
    d = decode_xml(_wrap('<Balloon type="Dialogue"><img type="jpg">_9j_4A</img></Balloon>'))
    image = d.balloons[0].image
    assert image is not None
    assert image.image_kind == "jpg"
    assert image.image_bytes == b"\xff\xd8\xff\xe0"


def test_malformed_xml() -> None:
    with pytest.raises(MalformedXmlError):
        decode_xml("<Document><Metadata></Document>")


def test_empty_input_is_malformed() -> None:
    with pytest.raises(MalformedXmlError):
        decode_xml("")


def test_missing_metadata_section() -> None:
    with pytest.raises(MissingSectionError) as exc_info:
        decode_xml("<Document><Balloons/></Document>")
    assert exc_info.value.section == "Metadata"


def test_missing_balloons_section() -> None:
    with pytest.raises(MissingSectionError) as exc_info:
        decode_xml("<Document><Metadata/></Document>")
    assert exc_info.value.section == "Balloons"


@pytest.mark.parametrize("payload", ["@@@@", "_9j_4A==", "abcde", "/9j/4A", "_9j_4B"])
def test_invalid_image_encoding(payload: str) -> None:
    with pytest.raises(InvalidImageEncodingError):
        decode_xml(_wrap(f'<Balloon type="Dialogue"><img type="jpg">{payload}</img></Balloon>'))


def test_decode_image_text_accepts_empty_payload() -> None:
    assert decode_image_text("") == b""


def test_image_without_type_attribute_decodes_to_empty_kind() -> None:
    d = decode_xml(_wrap('<Balloon type="Dialogue"><img>_9j_4A</img></Balloon>'))
    image = d.balloons[0].image
    assert image is not None
    assert image.image_kind == ""
    assert image.image_bytes == b"\xff\xd8\xff\xe0"


def test_large_image_round_trip() -> None:
    # 8 MiB of image data, well past libxml2's default text node limit once encoded.
    d = Document()
    d.balloons.append(Balloon(translation_lines=["page"]))
    d.balloons[0].add_image("png", bytes(range(256)) * 32768)

    xml = encode_xml(d)
    decoded = decode_xml(xml)

    assert decoded == d
    assert encode_xml(decoded) == xml


def test_carriage_returns_survive_round_trip() -> None:
    d = Document(info="line\r\nbreak")
    b = Balloon(translation_lines=["a\r\nb"], comment_lines=["\r"])
    b.add_image("j\rp\ng\t", b"\x00")
    d.balloons.append(b)

    xml = encode_xml(d)
    decoded = decode_xml(xml)

    assert decoded == d
    assert decoded.translation_char_count() == 4
    assert encode_xml(decoded) == xml


def test_characters_forbidden_by_xml_are_refused_on_encode() -> None:
    d = Document(balloons=[Balloon(translation_lines=["a\x0cb"])])

    with pytest.raises(DocumentWriteError):
        encode_xml(d)

    with pytest.raises(DocumentWriteError):
        XmlCodec().encode(d)
